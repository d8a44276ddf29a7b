from __future__ import annotations

from decimal import Decimal

from clients.wise import WiseAPIError
from domain.transfers import (
    CreateTransferRequest,
    LiveRate,
    ProfileId,
    Quote,
    QuoteId,
    Transfer,
    TransferId,
)
from tests.helpers.wise_payloads import quote_payload, transfer_payload


class StubWiseClient:
    """In-memory stand-in for WiseClient that records every call."""

    def __init__(
        self,
        *,
        transfers: list[Transfer] | None = None,
        live_rate: str = "1.10",
        quote: Quote | None = None,
        created_transfer: Transfer | None = None,
        cancel_error: WiseAPIError | None = None,
        quote_error: WiseAPIError | None = None,
    ) -> None:
        self.transfers = transfers or []
        self.live_rate = Decimal(live_rate)
        self.quote = quote or Quote.model_validate(quote_payload())
        self.created_transfer = created_transfer or Transfer.model_validate(
            transfer_payload(id=9000, rate=1.2, sourceAmount=998.75)
        )
        self.cancel_error = cancel_error
        self.quote_error = quote_error
        self.calls: list[str] = []
        self.created_requests: list[CreateTransferRequest] = []
        self.quote_requests: list[tuple[str, str, Decimal, ProfileId]] = []
        self.cancelled: list[TransferId] = []

    def list_transfers(self, *, status: str, limit: int = 3, offset: int = 0) -> list[Transfer]:
        self.calls.append(f"list_transfers:{status}:{limit}:{offset}")
        return list(self.transfers)

    def get_live_rate(self, *, source: str, target: str) -> LiveRate:
        self.calls.append(f"get_live_rate:{source}:{target}")
        return LiveRate(rate=self.live_rate, source=source, target=target)

    def get_quote(self, quote_id: QuoteId) -> Quote:
        self.calls.append(f"get_quote:{quote_id}")
        if self.quote_error is not None:
            raise self.quote_error
        return self.quote.with_bank_transfer_amount()

    def create_quote(self, *, source: str, target: str, source_amount: Decimal, profile: ProfileId) -> Quote:
        self.calls.append("create_quote")
        if self.quote_error is not None:
            raise self.quote_error
        self.quote_requests.append((source, target, source_amount, profile))
        return self.quote.model_copy(update={"id": QuoteId("fresh-quote")})

    def create_transfer(self, request: CreateTransferRequest) -> Transfer:
        self.calls.append("create_transfer")
        self.created_requests.append(request)
        return self.created_transfer

    def cancel_transfer(self, transfer_id: TransferId) -> None:
        self.calls.append(f"cancel_transfer:{transfer_id}")
        self.cancelled.append(transfer_id)
        if self.cancel_error is not None:
            raise self.cancel_error
