from __future__ import annotations

import math
from datetime import timedelta
from decimal import Decimal
from functools import cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION = "production"
SANDBOX = "sandbox"

HOSTS = {
    PRODUCTION: "api.transferwise.com",
    SANDBOX: "api.sandbox.transferwise.tech",
}

ERR_ENV_VAR_MISSING_OR_INVALID = "error: make sure env variables ENV, API_TOKEN are both provided and are valid"


class AppSettings(BaseSettings):
    env: str = ""
    api_token: str = ""
    margin: Decimal = Field(default=Decimal("0"), ge=0)
    # hours between runs in --watch mode; only parsed when watching
    interval: str = "1"

    to_mail: str = ""
    from_mail: str = ""
    mail_pass: str = ""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    expiry_threshold_hours: float = Field(default=36, gt=0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    @property
    def host(self) -> str | None:
        return HOSTS.get(self.env.strip().lower())

    @property
    def base_url(self) -> str | None:
        host = self.host
        if host is None:
            return None
        return f"https://{host}"

    @property
    def is_operational(self) -> bool:
        return self.host is not None and bool(self.api_token)

    @property
    def mail_enabled(self) -> bool:
        return bool(self.to_mail and self.from_mail and self.mail_pass)

    @property
    def expiry_threshold(self) -> timedelta:
        return timedelta(hours=self.expiry_threshold_hours)

    def watch_interval_hours(self) -> float:
        try:
            hours = float(self.interval)
        except ValueError as exc:
            raise ValueError(f"INTERVAL must be a number of hours, got {self.interval!r}") from exc
        if not math.isfinite(hours) or hours <= 0:
            raise ValueError(f"INTERVAL must be a positive number of hours, got {self.interval!r}")
        return hours


@cache
def config() -> AppSettings:
    return AppSettings()
