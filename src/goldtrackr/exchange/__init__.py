"""Exchange integration module for Kraken and Coinbase order submission."""

from goldtrackr.exchange.client import (
    CoinbaseClient,
    DryRunSubmitter,
    ExchangeClientError,
    KrakenClient,
)
from goldtrackr.exchange.models import OrderRequest, OrderResult, OrderSubmitter


__all__ = [
    "CoinbaseClient",
    "DryRunSubmitter",
    "ExchangeClientError",
    "KrakenClient",
    "OrderRequest",
    "OrderResult",
    "OrderSubmitter",
]
