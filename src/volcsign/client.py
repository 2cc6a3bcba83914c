"""HTTP client that signs and dispatches requests to the visual API."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import aiohttp
from yarl import URL

from volcsign.common.errors import TransportError, UpstreamError
from volcsign.common.logging import get_logger
from volcsign.common.settings import Settings, get_settings
from volcsign.signing.query import DEFAULT_QUERY_ENCODER, QueryEncoder
from volcsign.signing.signer import Credential, SignedRequest, Signer

logger = get_logger(__name__)

# The upstream API escapes ampersands inside JSON string fields
ESCAPED_AMPERSAND = "\\u0026"


def fix_response_body(text: str) -> str:
    """Replace the literal ``\\u0026`` sequence with ``&``."""
    return text.replace(ESCAPED_AMPERSAND, "&")


@dataclass(frozen=True)
class SignedResponse:
    """Status and (fixed-up) body of a dispatched request."""

    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def raise_for_status(self) -> None:
        """
        Raise if the remote API answered with a non-2xx status.

        Raises:
            UpstreamError: On non-2xx status
        """
        if not self.ok:
            raise UpstreamError(self.status, self.body)

    def json(self) -> Any:
        return json.loads(self.body)


def create_signer(settings: Settings, query_encoder: QueryEncoder = DEFAULT_QUERY_ENCODER) -> Signer:
    """Create a signer for the configured endpoint."""
    return Signer(
        settings.host,
        settings.endpoint,
        content_type=settings.content_type,
        query_encoder=query_encoder,
        debug=settings.debug_signing,
    )


class VisualClient:
    """
    Signs and posts requests to the visual API.

    Each call signs afresh and performs exactly one POST; there are no
    retries. Non-2xx responses are returned, not raised.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        signer: Signer | None = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Settings (defaults to environment-loaded settings)
            signer: Optional signer (defaults to one built from settings)
        """
        self._settings = settings or get_settings()
        self._signer = signer or create_signer(self._settings)
        self._timeout = self._settings.http_timeout
        self._session: aiohttp.ClientSession | None = None

    @property
    def signer(self) -> Signer:
        return self._signer

    async def __aenter__(self) -> "VisualClient":
        """Enter async context."""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session exists."""
        if not self._session:
            self._session = aiohttp.ClientSession()
        return self._session

    def default_credential(self) -> Credential:
        """Credential from settings (may be incomplete)."""
        return Credential(self._settings.access_key, self._settings.secret_key_value)

    async def sign_v4_request(
        self,
        region: str,
        access_key: str | None,
        secret_key: str | None,
        service: str,
        query_params: Mapping[str, str],
        body: bytes | str | Mapping[str, Any],
        *,
        timeout: float | None = None,
        timestamp: datetime | None = None,
    ) -> SignedResponse:
        """
        Sign a request and post it.

        Args:
            region: Region for the credential scope
            access_key: Access key id
            secret_key: Secret key
            service: Service for the credential scope
            query_params: Query parameters (e.g. Action, Version)
            body: JSON body
            timeout: Request timeout in seconds (defaults to settings)
            timestamp: Signing instant (defaults to now)

        Returns:
            SignedResponse with status and fixed-up body

        Raises:
            MissingCredentialsError: If a key is missing (no request is sent)
            TransportError: On network failure or timeout
        """
        signed = self._signer.sign(
            Credential(access_key, secret_key),
            region,
            service,
            query_params,
            body,
            timestamp=timestamp,
        )
        return await self.send(signed, timeout=timeout)

    async def request(
        self,
        query_params: Mapping[str, str],
        body: bytes | str | Mapping[str, Any],
        *,
        credential: Credential | None = None,
        timeout: float | None = None,
    ) -> SignedResponse:
        """Sign and post using the configured region, service and credentials."""
        credential = credential or self.default_credential()
        return await self.sign_v4_request(
            self._settings.region,
            credential.access_key,
            credential.secret_key,
            self._settings.service,
            query_params,
            body,
            timeout=timeout,
        )

    async def send(self, signed: SignedRequest, *, timeout: float | None = None) -> SignedResponse:
        """
        Post an already signed request.

        Args:
            signed: Request from ``Signer.sign``
            timeout: Request timeout in seconds (defaults to settings)

        Returns:
            SignedResponse

        Raises:
            TransportError: On network failure or timeout
        """
        session = self._ensure_session()
        total = timeout if timeout is not None else self._timeout

        logger.info("Dispatching signed request", url=signed.url, timeout=total)

        try:
            # encoded=True keeps the query byte-identical to the signed one
            response = await session.request(
                "POST",
                URL(signed.url, encoded=True),
                headers=signed.headers,
                data=signed.body,
                timeout=aiohttp.ClientTimeout(total=total),
            )
            async with response:
                text = await response.text(errors="replace")
                status = response.status
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request timed out after {total}s", url=signed.url) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request failed: {e}", url=signed.url) from e

        body = fix_response_body(text)
        logger.info("Received response", url=signed.url, status=status)
        if self._settings.debug_signing:
            logger.debug("Response body", body=body)

        return SignedResponse(status=status, body=body)
