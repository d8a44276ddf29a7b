from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from clients.mailer import Mailer, MailerError
from clients.wise import WiseAPIError, WiseClient
from domain.transfers import Transfer

from .rate_comparator import NoBookedTransferError, RateComparator

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_THRESHOLD = timedelta(hours=36)

REMINDER_MAIL_SUBJECT = "Reminder: Your transfer is about to expire"
REMINDER_MAIL_BODY = (
    "<h4>&#128184; The following transfer is going to expire on <b>{expires_at}</b></h4>"
    "<ul> <li>Transfer ID: {transfer_id} </li> <li> {{{source}}} --> {{{target}}} </li>"
    " <li> Booked Rate: {rate} </li> <li> Amount: {currency} {amount} </li> </ul>"
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_expiry(value: str) -> datetime:
    """Parse an RFC 3339 quote expiry such as ``2024-05-01T12:00:00Z``."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"Invalid quote expiry {value!r}") from exc
    if parsed.tzinfo is None:
        raise ValueError(f"Quote expiry {value!r} has no timezone")
    return parsed


def render_reminder(transfer: Transfer, expires_at: datetime) -> str:
    return REMINDER_MAIL_BODY.format(
        expires_at=expires_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
        transfer_id=transfer.id,
        source=transfer.source_currency,
        target=transfer.target_currency,
        rate=transfer.rate,
        currency=transfer.source_currency,
        amount=transfer.source_amount,
    )


class ExpiryNotifier:
    def __init__(
        self,
        client: WiseClient,
        comparator: RateComparator,
        mailer: Mailer | None,
        *,
        threshold: timedelta = DEFAULT_EXPIRY_THRESHOLD,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.client = client
        self.comparator = comparator
        self.mailer = mailer
        self.threshold = threshold
        self._clock = clock

    def is_expiring(self, expires_at: datetime) -> bool:
        return expires_at - self._clock() < self.threshold

    def check_and_notify(self) -> bool:
        """Mail a reminder when the booked transfer's quote expires within the threshold.

        Returns whether a reminder was sent. Failures are logged, never raised.
        """
        try:
            transfer = self.comparator.get_booked_transfer()
            quote = self.client.get_quote(transfer.quote_uuid)
            expires_at = parse_expiry(quote.rate_expiration_time)
        except (WiseAPIError, NoBookedTransferError, ValueError) as exc:
            logger.error("Expiry check skipped: %s", exc)
            return False

        if not self.is_expiring(expires_at):
            logger.info("Quote %s of transfer %s expires at %s", quote.id, transfer.id, expires_at)
            return False

        if self.mailer is None:
            logger.warning(
                "Quote %s of transfer %s expires at %s but mail is disabled: set TO_MAIL, FROM_MAIL, MAIL_PASS",
                quote.id,
                transfer.id,
                expires_at,
            )
            return False

        try:
            self.mailer.send(REMINDER_MAIL_SUBJECT, render_reminder(transfer, expires_at))
        except MailerError as exc:
            logger.error("Sending expiry reminder failed: %s", exc)
            return False
        return True


__all__ = ["DEFAULT_EXPIRY_THRESHOLD", "ExpiryNotifier", "REMINDER_MAIL_SUBJECT", "parse_expiry", "render_reminder"]
