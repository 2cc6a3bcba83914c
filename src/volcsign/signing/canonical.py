"""Canonical request construction."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from volcsign.common.errors import SigningError
from volcsign.common.hmac import sha256_hex

DEFAULT_METHOD = "POST"
DEFAULT_URI = "/"
DEFAULT_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class SignedHeaders:
    """Ordered list of lowercase header names covered by the signature."""

    names: tuple[str, ...]

    @classmethod
    def of(cls, names: Iterable[str]) -> "SignedHeaders":
        normalized = tuple(name.strip().lower() for name in names)
        if not normalized or any(not name for name in normalized):
            raise SigningError("Signed header names must be non-empty")
        if len(set(normalized)) != len(normalized):
            raise SigningError(f"Duplicate signed header names: {';'.join(normalized)}")
        return cls(normalized)

    @classmethod
    def parse(cls, value: str) -> "SignedHeaders":
        """Parse a ``;``-separated header list such as ``host;x-date``."""
        return cls.of(value.split(";"))

    def __str__(self) -> str:
        return ";".join(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)


DEFAULT_SIGNED_HEADERS = SignedHeaders(("content-type", "host", "x-content-sha256", "x-date"))


@dataclass(frozen=True)
class CanonicalRequest:
    """Immutable canonical form of a request, hashed into the string to sign."""

    method: str
    uri: str
    query_string: str
    header_block: str
    signed_header_names: str
    payload_hash: str

    def render(self) -> str:
        """Render the newline-joined canonical request string."""
        return "\n".join(
            [
                self.method,
                self.uri,
                self.query_string,
                self.header_block,
                self.signed_header_names,
                self.payload_hash,
            ]
        )

    def hash(self) -> str:
        """Hex SHA-256 of the rendered canonical request."""
        return sha256_hex(self.render())

    def __str__(self) -> str:
        return self.render()


def build_header_block(signed_headers: SignedHeaders, values: Mapping[str, str]) -> str:
    """
    Build ``name:value\\n`` lines in signed-header order.

    Raises:
        SigningError: If a signed header has no value
    """
    lines: list[str] = []
    for name in signed_headers:
        if name not in values:
            raise SigningError(f"No value supplied for signed header: {name}")
        lines.append(f"{name}:{values[name]}\n")
    return "".join(lines)


def build_canonical_request(
    query_string: str,
    host: str,
    payload_hash: str,
    amz_date: str,
    *,
    content_type: str = DEFAULT_CONTENT_TYPE,
    signed_headers: SignedHeaders = DEFAULT_SIGNED_HEADERS,
    extra_headers: Mapping[str, str] | None = None,
    method: str = DEFAULT_METHOD,
    uri: str = DEFAULT_URI,
) -> CanonicalRequest:
    """
    Assemble the canonical request.

    Args:
        query_string: Canonical query string (see ``volcsign.signing.query``)
        host: Host header value
        payload_hash: Hex SHA-256 of the raw body bytes
        amz_date: Request timestamp (``YYYYMMDD'T'HHMMSS'Z'``)
        content_type: Content-Type header value
        signed_headers: Header names covered by the signature, in order
        extra_headers: Values for signed headers beyond the default set
        method: HTTP method
        uri: Canonical URI

    Returns:
        CanonicalRequest
    """
    values = {
        "content-type": content_type,
        "host": host,
        "x-content-sha256": payload_hash,
        "x-date": amz_date,
    }
    if extra_headers:
        values.update({name.lower(): value for name, value in extra_headers.items()})

    return CanonicalRequest(
        method=method,
        uri=uri,
        query_string=query_string,
        header_block=build_header_block(signed_headers, values),
        signed_header_names=str(signed_headers),
        payload_hash=payload_hash,
    )
