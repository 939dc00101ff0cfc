"""
Signed HTTP transport for LTI 1.1 outcome requests.

Outcome documents are POSTed as ``application/xml`` and signed with OAuth 1.0
HMAC-SHA1 using the body hash extension: the SHA-1 digest of the body is sent
as ``oauth_body_hash`` and covered by the signature.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import time
import urllib.parse
from typing import TYPE_CHECKING, Callable, Dict, Final, List, Optional, Tuple

import httpx

from gradelink.integration.errors import OutcomeTransportError

if TYPE_CHECKING:
    from gradelink.config import OutcomeServiceSettings


logger = logging.getLogger(__name__)

OAUTH_SIGNATURE_METHOD: Final[str] = "HMAC-SHA1"
OAUTH_VERSION: Final[str] = "1.0"
XML_CONTENT_TYPE: Final[str] = "application/xml"

_DEFAULT_PORTS: Final[Dict[str, int]] = {"http": 80, "https": 443}


def _escape(value: str) -> str:
    return urllib.parse.quote(str(value), safe="~")


class OAuthSigner:
    """
    OAuth 1.0 request signer for consumer-key/secret (two-legged) requests.

    Nonce and clock are injectable so signatures can be reproduced.
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        nonce_factory: Callable[[], str] = lambda: secrets.token_hex(16),
        clock: Callable[[], float] = time.time,
    ):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self._nonce_factory = nonce_factory
        self._clock = clock

    @staticmethod
    def body_hash(body: bytes) -> str:
        return base64.b64encode(hashlib.sha1(body).digest()).decode("ascii")

    def oauth_params(self, body: bytes) -> Dict[str, str]:
        return {
            "oauth_body_hash": self.body_hash(body),
            "oauth_consumer_key": self.consumer_key,
            "oauth_nonce": self._nonce_factory(),
            "oauth_signature_method": OAUTH_SIGNATURE_METHOD,
            "oauth_timestamp": str(int(self._clock())),
            "oauth_version": OAUTH_VERSION,
        }

    @staticmethod
    def base_string(method: str, url: str, params: Dict[str, str]) -> str:
        """
        Build the OAuth signature base string.

        Query string parameters of ``url`` are folded into the normalized
        parameter list alongside the oauth parameters.
        """
        parts = urllib.parse.urlsplit(url)
        scheme = parts.scheme.lower()
        host = (parts.hostname or "").lower()
        if parts.port and parts.port != _DEFAULT_PORTS.get(scheme):
            host = f"{host}:{parts.port}"
        normalized_url = f"{scheme}://{host}{parts.path or '/'}"

        pairs: List[Tuple[str, str]] = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        pairs.extend(params.items())
        normalized_params = "&".join(
            f"{k}={v}" for k, v in sorted((_escape(k), _escape(v)) for k, v in pairs)
        )
        return "&".join([method.upper(), _escape(normalized_url), _escape(normalized_params)])

    def sign(self, method: str, url: str, params: Dict[str, str]) -> str:
        key = f"{_escape(self.consumer_secret)}&"
        message = self.base_string(method, url, params)
        digest = hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha1).digest()
        return base64.b64encode(digest).decode("ascii")

    def authorization_header(self, method: str, url: str, body: bytes) -> str:
        """
        Compute the ``Authorization`` header for a body-signed request.

        Args:
            method: HTTP method
            url: Full request URL, including any query string
            body: Exact request body that will be sent

        Returns:
            ``OAuth ...`` header value
        """
        params = self.oauth_params(body)
        params["oauth_signature"] = self.sign(method, url, params)
        return "OAuth " + ", ".join(
            f'{_escape(k)}="{_escape(v)}"' for k, v in sorted(params.items())
        )


class OutcomeTransport:
    """Posts signed outcome documents over a synchronous httpx client."""

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
        signer: Optional[OAuthSigner] = None,
    ):
        self._signer = signer or OAuthSigner(consumer_key, consumer_secret)
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None

    @classmethod
    def from_settings(
        cls,
        settings: OutcomeServiceSettings,
        client: Optional[httpx.Client] = None,
    ) -> OutcomeTransport:
        """Create a transport configured from service settings."""
        owns_client = client is None
        if client is None:
            client = httpx.Client(
                timeout=settings.timeout_seconds,
                verify=settings.verify_tls,
                headers={"User-Agent": settings.user_agent},
            )
        transport = cls(
            settings.consumer_key,
            settings.consumer_secret.get_secret_value(),
            client=client,
        )
        transport._owns_client = owns_client
        return transport

    def post(self, url: str, body: bytes) -> httpx.Response:
        """
        POST a signed outcome document.

        Raises:
            OutcomeTransportError: If the outcome service cannot be reached
        """
        headers = {
            "Content-Type": XML_CONTENT_TYPE,
            "Authorization": self._signer.authorization_header("POST", url, body),
        }
        logger.debug("Posting %d byte outcome document to %s", len(body), url)
        try:
            response = self._client.post(url, content=body, headers=headers)
        except httpx.TransportError as e:
            raise OutcomeTransportError(
                f"Failed to reach outcome service: {e}",
                {"url": url}
            ) from e
        logger.debug("Outcome service %s answered HTTP %s", url, response.status_code)
        return response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> OutcomeTransport:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["OAuthSigner", "OutcomeTransport", "XML_CONTENT_TYPE"]
