"""HMAC-SHA256 request signing with a derived, request-scoped key."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from volcsign.common.errors import MissingCredentialsError
from volcsign.common.hmac import hmac_sha256, hmac_sha256_hex, sha256_hex
from volcsign.common.logging import get_logger
from volcsign.signing.canonical import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_SIGNED_HEADERS,
    CanonicalRequest,
    SignedHeaders,
    build_canonical_request,
)
from volcsign.signing.query import DEFAULT_QUERY_ENCODER, QueryEncoder

logger = get_logger(__name__)

ALGORITHM = "HMAC-SHA256"
SCOPE_TERMINATOR = "request"

AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"


@dataclass(frozen=True)
class Credential:
    """Access key / secret key pair. Opaque; the secret is kept out of repr."""

    access_key: str | None
    secret_key: str | None = field(repr=False)

    def require(self) -> tuple[str, str]:
        """
        Ensure both keys are present.

        Returns:
            Tuple of (access_key, secret_key)

        Raises:
            MissingCredentialsError: If either key is empty or None
        """
        missing = tuple(
            name
            for name, value in (("access_key", self.access_key), ("secret_key", self.secret_key))
            if not value
        )
        if missing or self.access_key is None or self.secret_key is None:
            raise MissingCredentialsError(missing)
        return self.access_key, self.secret_key


@dataclass(frozen=True)
class SigningContext:
    """Region, service and timestamps for one signing operation."""

    region: str
    service: str
    timestamp: datetime
    date_stamp: str
    amz_date: str

    @classmethod
    def create(
        cls,
        region: str,
        service: str,
        timestamp: datetime | None = None,
    ) -> "SigningContext":
        """
        Build a context from a single instant.

        Naive datetimes are taken as UTC; aware ones are converted to UTC.
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)
        elif timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        else:
            timestamp = timestamp.astimezone(timezone.utc)

        return cls(
            region=region,
            service=service,
            timestamp=timestamp,
            date_stamp=timestamp.strftime(DATE_STAMP_FORMAT),
            amz_date=timestamp.strftime(AMZ_DATE_FORMAT),
        )

    @property
    def credential_scope(self) -> str:
        return credential_scope(self.date_stamp, self.region, self.service)


@dataclass(frozen=True)
class SigningKeyMaterial:
    """Intermediate outputs of the signing key chain."""

    k_date: bytes = field(repr=False)
    k_region: bytes = field(repr=False)
    k_service: bytes = field(repr=False)
    k_signing: bytes = field(repr=False)


def derive_key_material(
    secret_key: str,
    date_stamp: str,
    region: str,
    service: str,
) -> SigningKeyMaterial:
    """
    Run the four-step HMAC-SHA256 key chain.

    Args:
        secret_key: Secret key (used as UTF-8 bytes for the first step)
        date_stamp: Date (YYYYMMDD, UTC)
        region: Region name
        service: Service name

    Returns:
        All intermediate keys; ``k_signing`` is the signing key
    """
    k_date = hmac_sha256(secret_key.encode("utf-8"), date_stamp)
    k_region = hmac_sha256(k_date, region)
    k_service = hmac_sha256(k_region, service)
    k_signing = hmac_sha256(k_service, SCOPE_TERMINATOR)
    return SigningKeyMaterial(
        k_date=k_date,
        k_region=k_region,
        k_service=k_service,
        k_signing=k_signing,
    )


def derive_signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """Derive the 32-byte request signing key. Never cached."""
    return derive_key_material(secret_key, date_stamp, region, service).k_signing


def credential_scope(date_stamp: str, region: str, service: str) -> str:
    """Build ``<date>/<region>/<service>/request``."""
    return f"{date_stamp}/{region}/{service}/{SCOPE_TERMINATOR}"


def build_string_to_sign(amz_date: str, scope: str, canonical_request_hash: str) -> str:
    """Build the four-line string to sign."""
    return "\n".join([ALGORITHM, amz_date, scope, canonical_request_hash])


def compute_signature(signing_key: bytes, string_to_sign: str) -> str:
    """Hex HMAC-SHA256 of the string to sign."""
    return hmac_sha256_hex(signing_key, string_to_sign)


def build_authorization_header(
    access_key: str,
    scope: str,
    signed_header_names: str,
    signature: str,
) -> str:
    return (
        f"{ALGORITHM} Credential={access_key}/{scope}, "
        f"SignedHeaders={signed_header_names}, Signature={signature}"
    )


def encode_body(body: bytes | str | Mapping[str, Any]) -> bytes:
    """
    Get the raw body bytes that are hashed and sent.

    Mappings are serialized as compact JSON with non-ASCII characters kept.
    """
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


@dataclass(frozen=True)
class SignedRequest:
    """A signed, ready-to-send request. Sign again to resend later."""

    url: str
    headers: dict[str, str]
    body: bytes
    signature: str
    canonical_request: CanonicalRequest = field(repr=False)
    string_to_sign: str = field(repr=False)

    @property
    def authorization(self) -> str:
        return self.headers["Authorization"]


class Signer:
    """
    Signs POST requests for a single endpoint.

    Holds only endpoint configuration; credentials and key material are
    supplied and derived per call.
    """

    def __init__(
        self,
        host: str,
        endpoint: str,
        *,
        content_type: str = DEFAULT_CONTENT_TYPE,
        query_encoder: QueryEncoder = DEFAULT_QUERY_ENCODER,
        signed_headers: SignedHeaders = DEFAULT_SIGNED_HEADERS,
        debug: bool = False,
    ):
        """
        Initialize the signer.

        Args:
            host: Host header value covered by the signature
            endpoint: Base URL requests are posted to
            content_type: Content-Type of request bodies
            query_encoder: Canonical query string encoder
            signed_headers: Header names covered by the signature
            debug: Log canonical request, string to sign and signature
        """
        self._host = host
        self._endpoint = endpoint.rstrip("/")
        self._content_type = content_type
        self._query_encoder = query_encoder
        self._signed_headers = signed_headers
        self._debug = debug

    @property
    def host(self) -> str:
        return self._host

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def sign(
        self,
        credential: Credential,
        region: str,
        service: str,
        query_params: Mapping[str, str],
        body: bytes | str | Mapping[str, Any],
        *,
        timestamp: datetime | None = None,
        extra_headers: Mapping[str, str] | None = None,
    ) -> SignedRequest:
        """
        Sign a request.

        Args:
            credential: Access key / secret key pair
            region: Region for the credential scope
            service: Service for the credential scope
            query_params: Query parameters
            body: JSON body (bytes, str or mapping)
            timestamp: Signing instant (defaults to now, UTC)
            extra_headers: Values for signed headers beyond the default set;
                they are also sent with the request

        Returns:
            SignedRequest

        Raises:
            MissingCredentialsError: If the access key or secret key is empty
            SigningError: If a signed header has no value
        """
        access_key, secret_key = credential.require()

        context = SigningContext.create(region, service, timestamp)
        body_bytes = encode_body(body)
        query_string = self._query_encoder.encode(query_params)
        payload_hash = sha256_hex(body_bytes)

        canonical = build_canonical_request(
            query_string,
            self._host,
            payload_hash,
            context.amz_date,
            content_type=self._content_type,
            signed_headers=self._signed_headers,
            extra_headers=extra_headers,
        )
        scope = context.credential_scope
        string_to_sign = build_string_to_sign(context.amz_date, scope, canonical.hash())
        signing_key = derive_signing_key(
            secret_key,
            context.date_stamp,
            context.region,
            context.service,
        )
        signature = compute_signature(signing_key, string_to_sign)

        if self._debug:
            logger.debug(
                "Signed request material",
                canonical_request=canonical.render(),
                string_to_sign=string_to_sign,
                signature=signature,
            )

        headers = {
            "X-Date": context.amz_date,
            "Authorization": build_authorization_header(
                access_key,
                scope,
                canonical.signed_header_names,
                signature,
            ),
            "X-Content-Sha256": payload_hash,
            "Content-Type": self._content_type,
        }
        if extra_headers:
            headers.update(extra_headers)

        url = f"{self._endpoint}?{query_string}" if query_string else self._endpoint

        return SignedRequest(
            url=url,
            headers=headers,
            body=body_bytes,
            signature=signature,
            canonical_request=canonical,
            string_to_sign=string_to_sign,
        )
