from __future__ import annotations

import pytest

from config import AppSettings

_SETTINGS_ENV_VARS = (
    "ENV",
    "API_TOKEN",
    "MARGIN",
    "INTERVAL",
    "TO_MAIL",
    "FROM_MAIL",
    "MAIL_PASS",
    "SMTP_HOST",
    "SMTP_PORT",
    "EXPIRY_THRESHOLD_HOURS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="function")
def settings() -> AppSettings:
    return AppSettings(
        env="sandbox",
        api_token="token",
        margin="0.01",
        to_mail="to@example.com",
        from_mail="from@example.com",
        mail_pass="secret",
        _env_file=None,  # type: ignore[call-arg]
    )
