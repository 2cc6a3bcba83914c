"""Canonical request construction and HMAC-SHA256 signing."""

from volcsign.signing.canonical import (
    DEFAULT_SIGNED_HEADERS,
    CanonicalRequest,
    SignedHeaders,
    build_canonical_request,
)
from volcsign.signing.query import (
    PercentQueryEncoder,
    QueryEncoder,
    VerbatimQueryEncoder,
    format_query,
)
from volcsign.signing.signer import (
    Credential,
    SignedRequest,
    Signer,
    SigningContext,
    build_string_to_sign,
    compute_signature,
    credential_scope,
    derive_signing_key,
)

__all__ = [
    "CanonicalRequest",
    "Credential",
    "DEFAULT_SIGNED_HEADERS",
    "PercentQueryEncoder",
    "QueryEncoder",
    "SignedHeaders",
    "SignedRequest",
    "Signer",
    "SigningContext",
    "VerbatimQueryEncoder",
    "build_canonical_request",
    "build_string_to_sign",
    "compute_signature",
    "credential_scope",
    "derive_signing_key",
    "format_query",
]
