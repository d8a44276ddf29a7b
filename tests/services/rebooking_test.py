from __future__ import annotations

from decimal import Decimal
from typing import cast

import pytest

from clients.wise import WiseAPIError, WiseClient
from services.rebooking import TransferRebooker
from tests.helpers.stub_wise_client import StubWiseClient
from tests.helpers.wise_payloads import make_transfer


def _rebooker(stub: StubWiseClient) -> TransferRebooker:
    return TransferRebooker(cast(WiseClient, stub), transaction_id_factory=lambda: "tx-fixed")


def test_create_transfer_books_replacement_and_cancels_old() -> None:
    old = make_transfer(rate="1.10", transfer_id=1, source_amount="1000", profile=99)
    stub = StubWiseClient()

    result = _rebooker(stub).create_transfer(old)

    assert stub.calls == ["create_quote", "create_transfer", "cancel_transfer:1"]
    assert stub.quote_requests == [("EUR", "USD", Decimal("1000"), 99)]
    request = stub.created_requests[0]
    assert request.quote_uuid == "fresh-quote"
    assert request.target_account == old.target_account
    assert request.details == old.details
    assert request.customer_transaction_id == "tx-fixed"
    assert result.new_transfer.id == 9000
    assert result.cancelled_transfer_id == 1
    assert result.partial is False


def test_new_transfer_keeps_old_source_amount() -> None:
    old = make_transfer(source_amount="1000")
    stub = StubWiseClient()

    result = _rebooker(stub).create_transfer(old)

    assert stub.created_transfer.source_amount == Decimal("998.75")
    assert result.new_transfer.source_amount == Decimal("1000")


def test_cancel_failure_is_reported_as_partial_success() -> None:
    old = make_transfer(transfer_id=1)
    stub = StubWiseClient(cancel_error=WiseAPIError("cancel failed", status_code=409))

    result = _rebooker(stub).create_transfer(old)

    assert stub.cancelled == [1]
    assert result.partial is True
    assert isinstance(result.cancel_error, WiseAPIError)
    assert result.new_transfer.id == 9000


def test_quote_failure_aborts_before_creating_transfer() -> None:
    stub = StubWiseClient(quote_error=WiseAPIError("quote failed", status_code=500))

    with pytest.raises(WiseAPIError):
        _rebooker(stub).create_transfer(make_transfer())

    assert stub.calls == ["create_quote"]


def test_default_transaction_ids_are_unique() -> None:
    stub = StubWiseClient()
    rebooker = TransferRebooker(cast(WiseClient, stub))

    rebooker.create_transfer(make_transfer())
    rebooker.create_transfer(make_transfer())

    first, second = (request.customer_transaction_id for request in stub.created_requests)
    assert first != second
