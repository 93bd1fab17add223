"""
Mock order submitter for testing.

Records every request and answers with a configurable result. An optional
gate keeps submissions pending so concurrency guards can be exercised.
"""

import asyncio

from goldtrackr.exchange.models import OrderRequest, OrderResult


class MockSubmitter:
    """
    Mock exchange submitter.

    Simulates exchange responses with configurable behavior.
    """

    def __init__(
        self,
        name: str = "coinbase",
        succeed: bool = True,
        raise_error: Exception | None = None,
    ) -> None:
        """
        Initialize mock submitter.

        Args:
            name: Exchange name reported in results.
            succeed: Whether orders are accepted.
            raise_error: Exception raised from submit instead of a result.
        """
        self._name = name
        self._succeed = succeed
        self._raise_error = raise_error
        self._order_id = 0
        self.requests: list[OrderRequest] = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    async def submit(self, request: OrderRequest) -> OrderResult:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self._raise_error is not None:
            raise self._raise_error
        if not self._succeed:
            return OrderResult.failure(self._name, request.product_id, "Insufficient funds")

        self._order_id += 1
        return OrderResult(
            success=True,
            exchange=self._name,
            product_id=request.product_id,
            order_id=f"mock-{self._order_id}",
            exchange_pair=request.product_id,
        )

    async def test_connection(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True
