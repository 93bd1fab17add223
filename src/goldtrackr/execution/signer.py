"""
Request signing for exchange APIs.

- Kraken: HMAC-SHA512 over the URI path and SHA-256(nonce + POST data),
  keyed with the base64-decoded API secret.
- Coinbase Advanced Trade: short-lived ES256 JWT per request, signed with
  the CDP EC private key.
"""

import base64
import binascii
import hashlib
import hmac
import secrets
import time
from collections.abc import Callable, Mapping
from urllib.parse import urlencode

import jwt

from goldtrackr.config.constants import COINBASE_API_HOST, COINBASE_JWT_TTL
from goldtrackr.core.types import GoldTrackrError
from goldtrackr.utils.time import get_timestamp_ms


class SigningError(GoldTrackrError):
    """Credentials are malformed and a request cannot be signed."""


class KrakenSigner:
    """
    Signs Kraken private REST requests.

    API-Sign = base64(HMAC-SHA512(b64decode(secret),
                                  path + SHA256(nonce + postdata)))
    """

    __slots__ = ("_secret_bytes", "_nonce_source")

    def __init__(
        self,
        api_secret: str,
        nonce_source: Callable[[], int] = get_timestamp_ms,
    ) -> None:
        """
        Initialize signer with API secret.

        Args:
            api_secret: Base64 encoded Kraken private key.
            nonce_source: Monotonic nonce generator (epoch ms by default).

        Raises:
            SigningError: If the secret is not valid base64.
        """
        try:
            self._secret_bytes = base64.b64decode(api_secret, validate=True)
        except (binascii.Error, ValueError) as e:
            raise SigningError("Kraken API secret is not valid base64") from e
        self._nonce_source = nonce_source

    def sign(self, path: str, nonce: str, post_data: str) -> str:
        """
        Generate the API-Sign header value.

        Args:
            path: URI path, e.g. "/0/private/AddOrder".
            nonce: Nonce included in the POST data.
            post_data: URL-encoded request body.

        Returns:
            Base64 signature.
        """
        sha256 = hashlib.sha256((nonce + post_data).encode("utf-8")).digest()
        mac = hmac.new(self._secret_bytes, path.encode("utf-8") + sha256, hashlib.sha512)
        return base64.b64encode(mac.digest()).decode("ascii")

    def create_signed_body(
        self,
        path: str,
        params: Mapping[str, str],
    ) -> tuple[str, str]:
        """
        Add a nonce to the params and sign them.

        Args:
            path: URI path.
            params: Request parameters without nonce.

        Returns:
            Tuple of (url-encoded body, API-Sign value).
        """
        nonce = str(self._nonce_source())
        body = urlencode({"nonce": nonce, **params})
        return body, self.sign(path, nonce, body)


class CoinbaseJWTSigner:
    """
    Builds Coinbase CDP bearer tokens.

    Each token is bound to one method and path and expires after two
    minutes, so a fresh one is built per request.
    """

    __slots__ = ("_key_name", "_private_key", "_clock")

    def __init__(
        self,
        key_name: str,
        private_key_pem: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize signer.

        Args:
            key_name: CDP key name, used as subject and key id.
            private_key_pem: EC private key in PEM format. Escaped "\\n"
                sequences from env files are unescaped.
            clock: Epoch-seconds time source.
        """
        self._key_name = key_name
        self._private_key = private_key_pem.replace("\\n", "\n").strip().strip('"')
        self._clock = clock

    def build_jwt(self, method: str, path: str) -> str:
        """
        Build a signed JWT for one request.

        Args:
            method: HTTP method.
            path: Request path without query string.

        Returns:
            Encoded JWT.

        Raises:
            SigningError: If the private key cannot sign ES256.
        """
        now = int(self._clock())
        payload = {
            "sub": self._key_name,
            "iss": "cdp",
            "nbf": now,
            "exp": now + COINBASE_JWT_TTL,
            "uri": f"{method.upper()} {COINBASE_API_HOST}{path}",
        }
        headers = {
            "kid": self._key_name,
            "nonce": secrets.token_hex(16),
        }
        try:
            return jwt.encode(payload, self._private_key, algorithm="ES256", headers=headers)
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise SigningError(f"Cannot sign Coinbase JWT: {e}") from e

    @property
    def key_name(self) -> str:
        return self._key_name
