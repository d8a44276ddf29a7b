from __future__ import annotations

import logging
from decimal import Decimal
from http import HTTPStatus
from typing import Any, TypeVar

import requests
from pydantic import TypeAdapter, ValidationError

from domain.transfers import (
    WAITING_FOR_PAYMENT,
    CreateQuoteRequest,
    CreateTransferRequest,
    LiveRate,
    ProfileId,
    Quote,
    QuoteId,
    Transfer,
    TransferId,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSFERS_PATH = "/v1/transfers"
CANCEL_TRANSFER_PATH = "/v1/transfers/{transfer_id}/cancel"
QUOTES_PATH = "/v2/quotes"
LIVE_RATE_PATH = "/v1/rates"

_TRANSFER_LIST = TypeAdapter(list[Transfer])
_LIVE_RATE_LIST = TypeAdapter(list[LiveRate])
_QUOTE = TypeAdapter(Quote)
_TRANSFER = TypeAdapter(Transfer)


# API docs: https://docs.wise.com/api-docs/api-reference
class WiseAPIError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    def __str__(self) -> str:
        message = super().__str__()
        if self.status_code is None:
            return message
        return f"{message} (status {self.status_code})"


class WiseClient:
    """Minimal Wise API client covering the transfer and quote endpoints the rebooker needs."""

    def __init__(
        self,
        *,
        api_token: str,
        base_url: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_token:
            msg = "api_token must be provided"
            raise ValueError(msg)

        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def list_transfers(
        self, *, status: str = WAITING_FOR_PAYMENT, limit: int = 3, offset: int = 0
    ) -> list[Transfer]:
        params = {"limit": limit, "offset": offset, "status": status}
        response = self._request("GET", TRANSFERS_PATH, params=params)
        return self._decode(_TRANSFER_LIST, response, what="transfer list")

    def get_live_rate(self, *, source: str, target: str) -> LiveRate:
        response = self._request("GET", LIVE_RATE_PATH, params={"source": source, "target": target})
        rates = self._decode(_LIVE_RATE_LIST, response, what="live rate")
        if not rates:
            raise WiseAPIError(f"Wise returned no live rate for {source}/{target}", payload=response.text)
        return rates[0]

    def create_quote(self, *, source: str, target: str, source_amount: Decimal, profile: ProfileId) -> Quote:
        body = CreateQuoteRequest(
            source_currency=source,
            target_currency=target,
            source_amount=source_amount,
            profile=profile,
        )
        response = self._request("POST", QUOTES_PATH, json=body.model_dump(mode="json", by_alias=True))
        return self._decode(_QUOTE, response, what="quote")

    def get_quote(self, quote_id: QuoteId) -> Quote:
        response = self._request("GET", f"{QUOTES_PATH}/{quote_id}")
        quote = self._decode(_QUOTE, response, what="quote detail")
        return quote.with_bank_transfer_amount()

    def create_transfer(self, request: CreateTransferRequest) -> Transfer:
        body = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        response = self._request("POST", TRANSFERS_PATH, json=body)
        return self._decode(_TRANSFER, response, what="transfer")

    def cancel_transfer(self, transfer_id: TransferId) -> None:
        self._request("PUT", CANCEL_TRANSFER_PATH.format(transfer_id=transfer_id))

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.api_token}",
                    "Content-Type": "application/json",
                },
            )
        except requests.RequestException as exc:
            raise WiseAPIError(f"Wise request {method} {path} failed: {exc}") from exc

        if response.status_code != HTTPStatus.OK:
            raise WiseAPIError(
                f"Wise request {method} {path} failed",
                status_code=response.status_code,
                payload=self._error_payload(response),
            )

        logger.debug("Wise %s %s -> %s", method, path, response.status_code)
        return response

    @staticmethod
    def _decode(adapter: TypeAdapter[T], response: requests.Response, *, what: str) -> T:
        try:
            return adapter.validate_json(response.content)
        except ValidationError as exc:
            raise WiseAPIError(f"Wise returned unexpected {what} payload: {exc}", payload=response.text) from exc

    @staticmethod
    def _error_payload(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text


__all__ = ["WiseAPIError", "WiseClient"]
