"""Canonical query string encoders."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol
from urllib.parse import quote

# RFC 3986 unreserved characters besides alphanumerics
_UNRESERVED_MARKS = "-_.~"


class QueryEncoder(Protocol):
    """Serializes query parameters into the canonical query string."""

    def encode(self, params: Mapping[str, str]) -> str: ...


class VerbatimQueryEncoder:
    """
    Sort parameters by key and join them without percent-encoding.

    This is what the upstream deployment signs against. Values containing
    ``&`` or ``=`` are not escaped and will produce an ambiguous query.
    """

    def encode(self, params: Mapping[str, str]) -> str:
        return "&".join(f"{key}={params[key]}" for key in sorted(params))


class PercentQueryEncoder:
    """Percent-encode keys and values (RFC 3986), then sort by encoded key."""

    def encode(self, params: Mapping[str, str]) -> str:
        encoded = sorted(
            (quote(key, safe=_UNRESERVED_MARKS), quote(value, safe=_UNRESERVED_MARKS))
            for key, value in params.items()
        )
        return "&".join(f"{key}={value}" for key, value in encoded)


DEFAULT_QUERY_ENCODER: QueryEncoder = VerbatimQueryEncoder()


def format_query(params: Mapping[str, str]) -> str:
    """Build the canonical query string with the default (verbatim) encoder."""
    return DEFAULT_QUERY_ENCODER.encode(params)
