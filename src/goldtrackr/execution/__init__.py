"""Execution module for request signing and suggestion execution."""

from goldtrackr.execution.signer import CoinbaseJWTSigner, KrakenSigner, SigningError


__all__ = [
    "CoinbaseJWTSigner",
    "KrakenSigner",
    "SigningError",
]
