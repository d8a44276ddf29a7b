from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable
from uuid import uuid4

from clients.wise import WiseAPIError, WiseClient
from domain.transfers import CreateTransferRequest, ProfileId, QuoteId, RebookingResult, Transfer, TransferId

logger = logging.getLogger(__name__)


def _new_transaction_id() -> str:
    return str(uuid4())


class TransferRebooker:
    """Replaces a booked transfer with one created from a fresh quote.

    The replacement is created first and the old transfer cancelled second.
    A failed cancel leaves both transfers open; it is reported on the result
    rather than raised, so the new booking is never thrown away.
    """

    def __init__(self, client: WiseClient, *, transaction_id_factory: Callable[[], str] = _new_transaction_id) -> None:
        self.client = client
        self._transaction_id_factory = transaction_id_factory

    def generate_quote(self, source: str, target: str, amount: Decimal, profile: ProfileId) -> QuoteId:
        quote = self.client.create_quote(source=source, target=target, source_amount=amount, profile=profile)
        logger.info("Created quote %s for %s %s -> %s at rate %s", quote.id, amount, source, target, quote.rate)
        return quote.id

    def create_transfer(self, old_transfer: Transfer) -> RebookingResult:
        quote_id = self.generate_quote(
            old_transfer.source_currency,
            old_transfer.target_currency,
            old_transfer.source_amount,
            old_transfer.profile,
        )
        request = CreateTransferRequest(
            target_account=old_transfer.target_account,
            quote_uuid=quote_id,
            customer_transaction_id=self._transaction_id_factory(),
            details=old_transfer.details,
        )
        created = self.client.create_transfer(request)
        # bookkeeping keeps the amount the customer originally committed to
        new_transfer = created.model_copy(update={"source_amount": old_transfer.source_amount})

        cancel_error: WiseAPIError | None = None
        try:
            self.cancel_transfer(old_transfer.id)
        except WiseAPIError as exc:
            cancel_error = exc
            logger.error(
                "Error cancelling old transfer %s after booking %s: %s", old_transfer.id, new_transfer.id, exc
            )

        return RebookingResult(
            new_transfer=new_transfer,
            cancelled_transfer_id=old_transfer.id,
            cancel_error=cancel_error,
        )

    def cancel_transfer(self, transfer_id: TransferId) -> None:
        self.client.cancel_transfer(transfer_id)
        logger.info("Cancelled transfer %s", transfer_id)


__all__ = ["TransferRebooker"]
