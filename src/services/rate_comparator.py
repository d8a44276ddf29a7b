from __future__ import annotations

import logging
from decimal import Decimal

from clients.wise import WiseClient
from domain.transfers import WAITING_FOR_PAYMENT, RateDecision, Transfer, find_best_transfer

logger = logging.getLogger(__name__)

ERR_NO_CURRENT_TRANSFER_FOUND = "error: no current transfer found, please create a transfer before proceeding"
BOOKED_TRANSFER_LOOKUP_LIMIT = 3


class NoBookedTransferError(RuntimeError):
    def __init__(self, message: str = ERR_NO_CURRENT_TRANSFER_FOUND) -> None:
        super().__init__(message)


class InvalidLiveRateError(RuntimeError):
    pass


class RateComparator:
    def __init__(self, client: WiseClient, *, margin: Decimal = Decimal("0")) -> None:
        if margin < 0:
            msg = "margin must be >= 0"
            raise ValueError(msg)
        self.client = client
        self.margin = margin

    def get_booked_transfer(self) -> Transfer:
        transfers = self.client.list_transfers(
            status=WAITING_FOR_PAYMENT, limit=BOOKED_TRANSFER_LOOKUP_LIMIT, offset=0
        )
        if not transfers:
            raise NoBookedTransferError()

        best = find_best_transfer(transfers)
        quote = self.client.get_quote(best.quote_uuid)
        update: dict[str, object] = {}
        if quote.source_amount is not None:
            update["source_amount"] = quote.source_amount
        if quote.profile is not None:
            update["profile"] = quote.profile
        return best.model_copy(update=update)

    def get_live_rate(self, source: str, target: str) -> Decimal:
        live_rate = self.client.get_live_rate(source=source, target=target)
        if live_rate.rate <= 0:
            raise InvalidLiveRateError(f"Live rate for {source}/{target} is {live_rate.rate}")
        return live_rate.rate

    def compare_rates(self) -> RateDecision:
        transfer = self.get_booked_transfer()
        live_rate = self.get_live_rate(transfer.source_currency, transfer.target_currency)
        if should_rebook(booked_rate=transfer.rate, live_rate=live_rate, margin=self.margin):
            logger.info(
                "Live rate %s beats booked rate %s of transfer %s by at least %s",
                live_rate,
                transfer.rate,
                transfer.id,
                self.margin,
            )
            return RateDecision(rebook=True, transfer=transfer)
        return RateDecision(rebook=False, transfer=transfer, live_rate=live_rate)


def should_rebook(*, booked_rate: Decimal, live_rate: Decimal, margin: Decimal) -> bool:
    return live_rate > booked_rate and live_rate - booked_rate >= margin


__all__ = [
    "ERR_NO_CURRENT_TRANSFER_FOUND",
    "InvalidLiveRateError",
    "NoBookedTransferError",
    "RateComparator",
    "should_rebook",
]
