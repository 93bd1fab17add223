"""
Order types and pydantic models for exchange API responses.

OrderRequest/OrderResult are the exchange-neutral types the executor
works with; the pydantic models parse Kraken and Coinbase responses.
"""

from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import BaseModel, Field

from goldtrackr.core.types import OrderSide


# =============================================================================
# Exchange-Neutral Order Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class OrderRequest:
    """Market order for `base_size` units of the product's base asset."""

    product_id: str
    side: OrderSide
    base_size: float
    dry_run: bool = True

    @property
    def base_size_str(self) -> str:
        """Size as exchanges expect it: plain decimal, no trailing zeros."""
        return f"{self.base_size:.8f}".rstrip("0").rstrip(".")


@dataclass(slots=True, frozen=True)
class OrderResult:
    """Outcome of a submission. Failures carry `error`, never raise."""

    success: bool
    exchange: str
    product_id: str
    order_id: str | None = None
    error: str | None = None
    message: str | None = None
    exchange_pair: str | None = None
    dry_run: bool = False

    @classmethod
    def failure(
        cls,
        exchange: str,
        product_id: str,
        error: str,
        dry_run: bool = False,
    ) -> "OrderResult":
        return cls(
            success=False,
            exchange=exchange,
            product_id=product_id,
            error=error,
            dry_run=dry_run,
        )


class OrderSubmitter(Protocol):
    """Protocol for order submission back-ends."""

    @property
    def name(self) -> str:
        """Exchange name used in results and logs."""
        ...

    async def submit(self, request: OrderRequest) -> OrderResult:
        """Submit an order."""
        ...

    async def test_connection(self) -> bool:
        """Check that credentials are accepted."""
        ...


# =============================================================================
# Kraken
# =============================================================================


class KrakenOrderDescription(BaseModel):
    """Human readable order summary."""

    order: str | None = None
    close: str | None = None


class KrakenAddOrderResult(BaseModel):
    """AddOrder result body."""

    descr: KrakenOrderDescription | None = None
    txid: list[str] = Field(default_factory=list)


class KrakenResponse(BaseModel):
    """Kraken REST envelope: an error list plus an optional result."""

    error: list[str] = Field(default_factory=list)
    result: dict[str, Any] | None = None

    @property
    def is_error(self) -> bool:
        return bool(self.error)

    def add_order_result(self) -> KrakenAddOrderResult:
        return KrakenAddOrderResult.model_validate(self.result or {})


# =============================================================================
# Coinbase Advanced Trade
# =============================================================================


class CoinbaseSuccessResponse(BaseModel):
    """Nested success payload of a create-order response."""

    order_id: str | None = None
    product_id: str | None = None
    side: str | None = None
    client_order_id: str | None = None


class CoinbaseErrorResponse(BaseModel):
    """Nested error payload of a create-order response."""

    error: str | None = None
    message: str | None = None
    error_details: str | None = None
    preview_failure_reason: str | None = None

    @property
    def reason(self) -> str:
        return (
            self.message
            or self.error_details
            or self.preview_failure_reason
            or self.error
            or "Order failed"
        )


class CoinbaseOrderResponse(BaseModel):
    """POST /api/v3/brokerage/orders response."""

    success: bool = False
    order_id: str | None = None
    success_response: CoinbaseSuccessResponse | None = None
    error_response: CoinbaseErrorResponse | None = None
    failure_reason: str | None = None

    @property
    def resolved_order_id(self) -> str | None:
        if self.order_id:
            return self.order_id
        return self.success_response.order_id if self.success_response else None

    @property
    def error_message(self) -> str:
        if self.error_response:
            return self.error_response.reason
        return self.failure_reason or "Order failed"


class CoinbaseApiError(BaseModel):
    """Top-level error body for non-2xx responses."""

    error: str | None = None
    message: str | None = None

    @property
    def reason(self) -> str:
        return self.message or self.error or "Unknown error"
