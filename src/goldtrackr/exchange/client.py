"""
Async order submitters.

- DryRunSubmitter: records what would have been sent, never touches the
  network.
- KrakenClient: private REST AddOrder with HMAC-SHA512 signing.
- CoinbaseClient: Advanced Trade create-order with an ES256 JWT.

All submitters turn missing credentials, network errors and exchange
rejections into a failed OrderResult instead of raising.
"""

import logging
import uuid
from collections import deque
from collections.abc import Callable
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from goldtrackr.config.constants import (
    COINBASE_ENDPOINT_ACCOUNTS,
    COINBASE_ENDPOINT_ORDERS,
    COINBASE_PRODUCTS,
    COINBASE_REST_URL,
    DEFAULT_REQUEST_TIMEOUT,
    KRAKEN_ENDPOINT_ADD_ORDER,
    KRAKEN_ENDPOINT_BALANCE,
    KRAKEN_PAIRS,
    KRAKEN_REST_URL,
)
from goldtrackr.core.types import GoldTrackrError
from goldtrackr.exchange.models import (
    CoinbaseApiError,
    CoinbaseOrderResponse,
    KrakenResponse,
    OrderRequest,
    OrderResult,
)
from goldtrackr.execution.signer import CoinbaseJWTSigner, KrakenSigner, SigningError
from goldtrackr.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)

DRY_RUN_HISTORY_SIZE = 50

EXCHANGE_KRAKEN = "kraken"
EXCHANGE_COINBASE = "coinbase"


class ExchangeClientError(GoldTrackrError):
    """Transport-level failure talking to an exchange."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def exchange_pair(exchange: str, product_id: str) -> str:
    """Map a product id to the exchange's own pair name."""
    if exchange == EXCHANGE_KRAKEN:
        return KRAKEN_PAIRS.get(product_id, product_id)
    return product_id


# =============================================================================
# Dry Run
# =============================================================================


class DryRunSubmitter:
    """
    Simulated submission for the selected exchange.

    Returns `dry-run-{ms}` order ids and keeps the most recent requests.
    """

    def __init__(
        self,
        exchange: str = EXCHANGE_COINBASE,
        clock: Callable[[], int] = get_timestamp_ms,
        history_size: int = DRY_RUN_HISTORY_SIZE,
    ) -> None:
        self._exchange = exchange
        self._clock = clock
        self._submitted: deque[OrderRequest] = deque(maxlen=history_size)

    @property
    def name(self) -> str:
        return self._exchange

    async def submit(self, request: OrderRequest) -> OrderResult:
        """Record the order and report success."""
        self._submitted.append(request)
        pair = exchange_pair(self._exchange, request.product_id)
        logger.info(
            f"DRY RUN {self._exchange}: {request.side.value} {request.base_size_str} {pair}"
        )
        return OrderResult(
            success=True,
            exchange=self._exchange,
            product_id=request.product_id,
            order_id=f"dry-run-{self._clock()}",
            message=f"DRY RUN on {self._exchange.upper()} - no real order was placed",
            exchange_pair=pair,
            dry_run=True,
        )

    async def test_connection(self) -> bool:
        return True

    async def close(self) -> None:
        """Nothing to release."""

    @property
    def submitted(self) -> list[OrderRequest]:
        """Most recent simulated orders, oldest first."""
        return list(self._submitted)


# =============================================================================
# Shared HTTP Handling
# =============================================================================


class _ExchangeHttp:
    """Single keep-alive session per exchange."""

    def __init__(self, base_url: str, timeout: float) -> None:
        self._base_url = base_url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=10,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self._timeout,
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )
        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _send(
        self,
        method: str,
        endpoint: str,
        headers: dict[str, str],
        data: str | bytes | None = None,
    ) -> tuple[int, Any]:
        """
        Send a request and decode the JSON body.

        Returns:
            Tuple of (HTTP status, decoded body).

        Raises:
            ExchangeClientError: On network error or a non-JSON body.
        """
        session = await self._get_session()
        url = f"{self._base_url}{endpoint}"

        try:
            async with session.request(method, url, headers=headers, data=data) as response:
                status = response.status
                body = await response.read()
        except (aiohttp.ClientError, TimeoutError) as e:
            raise ExchangeClientError(f"Network error: {e!r}") from e

        try:
            return status, orjson.loads(body) if body else {}
        except orjson.JSONDecodeError as e:
            raise ExchangeClientError(f"HTTP {status}: invalid JSON response", status) from e


# =============================================================================
# Kraken
# =============================================================================


class KrakenClient(_ExchangeHttp):
    """
    Kraken spot REST client.

    Supports the direct PAXG/XAUT pair (`PAXGXAUT`), which needs one trade
    instead of two for the gold-token swap.
    """

    def __init__(
        self,
        api_key: str | None,
        api_secret: str | None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        base_url: str = KRAKEN_REST_URL,
        nonce_source: Callable[[], int] = get_timestamp_ms,
    ) -> None:
        """
        Initialize the Kraken client.

        Args:
            api_key: Kraken API key, or None if not configured.
            api_secret: Base64 API secret, or None if not configured.
            timeout: Request timeout in seconds.
            base_url: REST base URL.
            nonce_source: Nonce generator passed to the signer.
        """
        super().__init__(base_url, timeout)
        self._api_key = api_key
        self._api_secret = api_secret
        self._nonce_source = nonce_source
        self._signer: KrakenSigner | None = None

    @property
    def name(self) -> str:
        return EXCHANGE_KRAKEN

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key and self._api_secret)

    def _get_signer(self) -> KrakenSigner:
        if self._signer is None:
            self._signer = KrakenSigner(self._api_secret or "", self._nonce_source)
        return self._signer

    async def _private(self, endpoint: str, params: dict[str, str]) -> KrakenResponse:
        """Signed POST to a private endpoint."""
        body, signature = self._get_signer().create_signed_body(endpoint, params)
        headers = {
            "API-Key": self._api_key or "",
            "API-Sign": signature,
            "Content-Type": "application/x-www-form-urlencoded; charset=utf-8",
        }
        status, data = await self._send("POST", endpoint, headers, body)

        try:
            parsed = KrakenResponse.model_validate(data)
        except ValidationError as e:
            raise ExchangeClientError(f"HTTP {status}: unexpected response shape", status) from e

        if status >= 400 and not parsed.is_error:
            raise ExchangeClientError(f"HTTP {status}", status)
        return parsed

    async def submit(self, request: OrderRequest) -> OrderResult:
        """Place a market order."""
        pair = exchange_pair(EXCHANGE_KRAKEN, request.product_id)
        if not self.has_credentials:
            return OrderResult.failure(
                EXCHANGE_KRAKEN, request.product_id, "No kraken API keys configured"
            )

        params = {
            "ordertype": "market",
            "type": request.side.value.lower(),
            "volume": request.base_size_str,
            "pair": pair,
        }

        try:
            response = await self._private(KRAKEN_ENDPOINT_ADD_ORDER, params)
        except (ExchangeClientError, SigningError) as e:
            logger.warning(f"Kraken order failed: {e}")
            return OrderResult.failure(EXCHANGE_KRAKEN, request.product_id, str(e))

        if response.is_error:
            error = ", ".join(response.error)
            logger.warning(f"Kraken rejected order: {error}")
            return OrderResult.failure(EXCHANGE_KRAKEN, request.product_id, error)

        result = response.add_order_result()
        order_id = result.txid[0] if result.txid else None
        logger.info(f"Kraken order placed: {order_id} {pair}")
        return OrderResult(
            success=True,
            exchange=EXCHANGE_KRAKEN,
            product_id=request.product_id,
            order_id=order_id,
            message=f"Order placed on Kraken ({pair})",
            exchange_pair=pair,
        )

    async def test_connection(self) -> bool:
        """Check credentials against the Balance endpoint."""
        if not self.has_credentials:
            return False
        try:
            response = await self._private(KRAKEN_ENDPOINT_BALANCE, {})
        except (ExchangeClientError, SigningError) as e:
            logger.warning(f"Kraken connection test failed: {e}")
            return False
        return not response.is_error


# =============================================================================
# Coinbase
# =============================================================================


class CoinbaseClient(_ExchangeHttp):
    """Coinbase Advanced Trade REST client."""

    def __init__(
        self,
        key_name: str | None,
        private_key: str | None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        base_url: str = COINBASE_REST_URL,
    ) -> None:
        """
        Initialize the Coinbase client.

        Args:
            key_name: CDP key name, or None if not configured.
            private_key: CDP EC private key PEM, or None if not configured.
            timeout: Request timeout in seconds.
            base_url: REST base URL.
        """
        super().__init__(base_url, timeout)
        self._signer = (
            CoinbaseJWTSigner(key_name, private_key) if key_name and private_key else None
        )

    @property
    def name(self) -> str:
        return EXCHANGE_COINBASE

    @property
    def has_credentials(self) -> bool:
        return self._signer is not None

    def _auth_headers(self, method: str, path: str) -> dict[str, str]:
        assert self._signer is not None
        return {
            "Authorization": f"Bearer {self._signer.build_jwt(method, path)}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def build_order_body(request: OrderRequest, client_order_id: str | None = None) -> dict[str, Any]:
        """Create-order JSON body for a market IOC order."""
        return {
            "client_order_id": client_order_id or str(uuid.uuid4()),
            "product_id": request.product_id,
            "side": request.side.value,
            "order_configuration": {
                "market_market_ioc": {"base_size": request.base_size_str},
            },
        }

    async def submit(self, request: OrderRequest) -> OrderResult:
        """Place a market order."""
        if not self.has_credentials:
            return OrderResult.failure(
                EXCHANGE_COINBASE, request.product_id, "No coinbase API keys configured"
            )
        if request.product_id not in COINBASE_PRODUCTS:
            return OrderResult.failure(
                EXCHANGE_COINBASE,
                request.product_id,
                f"Product {request.product_id} is not supported on coinbase",
            )

        body = orjson.dumps(self.build_order_body(request))
        try:
            headers = self._auth_headers("POST", COINBASE_ENDPOINT_ORDERS)
            status, data = await self._send("POST", COINBASE_ENDPOINT_ORDERS, headers, body)
        except (ExchangeClientError, SigningError) as e:
            logger.warning(f"Coinbase order failed: {e}")
            return OrderResult.failure(EXCHANGE_COINBASE, request.product_id, str(e))

        if status >= 400:
            error = CoinbaseApiError.model_validate(data if isinstance(data, dict) else {}).reason
            logger.warning(f"Coinbase rejected order: HTTP {status} {error}")
            return OrderResult.failure(EXCHANGE_COINBASE, request.product_id, error)

        try:
            parsed = CoinbaseOrderResponse.model_validate(data)
        except ValidationError:
            return OrderResult.failure(
                EXCHANGE_COINBASE, request.product_id, "Unexpected order response"
            )

        if not parsed.success and parsed.resolved_order_id is None:
            logger.warning(f"Coinbase order not accepted: {parsed.error_message}")
            return OrderResult.failure(EXCHANGE_COINBASE, request.product_id, parsed.error_message)

        logger.info(f"Coinbase order placed: {parsed.resolved_order_id} {request.product_id}")
        return OrderResult(
            success=True,
            exchange=EXCHANGE_COINBASE,
            product_id=request.product_id,
            order_id=parsed.resolved_order_id,
            message="Order placed on Coinbase",
            exchange_pair=request.product_id,
        )

    async def test_connection(self) -> bool:
        """Check credentials against the accounts endpoint."""
        if not self.has_credentials:
            return False
        try:
            headers = self._auth_headers("GET", COINBASE_ENDPOINT_ACCOUNTS)
            status, _ = await self._send("GET", COINBASE_ENDPOINT_ACCOUNTS, headers)
        except (ExchangeClientError, SigningError) as e:
            logger.warning(f"Coinbase connection test failed: {e}")
            return False
        return status < 400
