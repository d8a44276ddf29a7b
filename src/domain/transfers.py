from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated, NewType, Sequence

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

TransferId = NewType("TransferId", int)
QuoteId = NewType("QuoteId", str)
ProfileId = NewType("ProfileId", int)

WAITING_FOR_PAYMENT = "incoming_payment_waiting"
BANK_TRANSFER = "BANK_TRANSFER"

# Provider expects amounts as JSON numbers, not strings.
JsonAmount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class _WiseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TransferDetails(_WiseModel):
    reference: str | None = None
    transfer_purpose: str | None = None
    source_of_funds: str | None = None


class Transfer(_WiseModel):
    """Provider-side booking, normally waiting for incoming payment.

    The listing endpoint reports neither the profile nor the amount to be paid
    in; both are filled in from the transfer's quote.
    """

    id: TransferId
    profile: ProfileId = ProfileId(0)
    target_account: int
    source_amount: Decimal = Decimal("0")
    rate: Decimal
    quote_uuid: QuoteId
    source_currency: str
    target_currency: str
    details: TransferDetails = TransferDetails()


class PaymentOption(_WiseModel):
    disabled: bool = False
    pay_out: str
    source_amount: Decimal | None = None


class Quote(_WiseModel):
    id: QuoteId
    rate: Decimal
    source_amount: Decimal | None = None
    source_currency: str
    target_currency: str
    profile: ProfileId | None = None
    # RFC 3339 text; parsed only by the expiry reminder
    rate_expiration_time: str
    payment_options: list[PaymentOption] = []

    def with_bank_transfer_amount(self) -> Quote:
        """Adopt the source amount of the preferred payment option, if any."""
        option = select_best_payment_option(self)
        if option is None or option.source_amount is None:
            return self
        return self.model_copy(update={"source_amount": option.source_amount})


class LiveRate(_WiseModel):
    rate: Decimal
    source: str | None = None
    target: str | None = None
    time: str | None = None


class CreateQuoteRequest(_WiseModel):
    source_currency: str
    target_currency: str
    source_amount: JsonAmount
    profile: ProfileId


class CreateTransferRequest(_WiseModel):
    target_account: int
    quote_uuid: QuoteId
    customer_transaction_id: str
    details: TransferDetails


@dataclass(frozen=True)
class RateDecision:
    rebook: bool
    transfer: Transfer
    # only populated when no rebooking is needed
    live_rate: Decimal | None = None


@dataclass(frozen=True)
class RebookingResult:
    new_transfer: Transfer
    cancelled_transfer_id: TransferId
    cancel_error: Exception | None = None

    @property
    def partial(self) -> bool:
        """New transfer booked while the replaced one is still open."""
        return self.cancel_error is not None


def select_best_payment_option(quote: Quote) -> PaymentOption | None:
    for option in quote.payment_options:
        if not option.disabled and option.pay_out == BANK_TRANSFER:
            return option
    return None


def find_best_transfer(transfers: Sequence[Transfer]) -> Transfer:
    """Return the transfer with the highest locked rate; the earliest one wins ties."""
    if not transfers:
        raise ValueError("transfers must be non-empty")
    best = transfers[0]
    for transfer in transfers[1:]:
        if best.rate < transfer.rate:
            best = transfer
    return best


__all__ = [
    "BANK_TRANSFER",
    "CreateQuoteRequest",
    "CreateTransferRequest",
    "LiveRate",
    "PaymentOption",
    "ProfileId",
    "Quote",
    "QuoteId",
    "RateDecision",
    "RebookingResult",
    "Transfer",
    "TransferDetails",
    "TransferId",
    "WAITING_FOR_PAYMENT",
    "find_best_transfer",
    "select_best_payment_option",
]
