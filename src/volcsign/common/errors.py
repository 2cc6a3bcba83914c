"""Shared error types and codes."""

from __future__ import annotations


class ErrorCode:
    MISSING_CREDENTIALS = "missing_credentials"
    SIGNING_FAILED = "signing_failed"
    TRANSPORT_FAILED = "transport_failed"
    UPSTREAM_STATUS = "upstream_status"


class VolcSignError(Exception):
    """Base class for request signing and dispatch errors."""

    code = ErrorCode.SIGNING_FAILED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingCredentialsError(VolcSignError):
    """Access key or secret key was not supplied."""

    code = ErrorCode.MISSING_CREDENTIALS

    def __init__(self, missing: tuple[str, ...]) -> None:
        super().__init__(f"Missing credentials: {', '.join(missing)}")
        self.missing = missing


class SigningError(VolcSignError):
    """Signing inputs could not be assembled into a canonical request."""

    code = ErrorCode.SIGNING_FAILED


class TransportError(VolcSignError):
    """Network-level failure while sending a signed request."""

    code = ErrorCode.TRANSPORT_FAILED

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class UpstreamError(VolcSignError):
    """Remote API answered with a non-2xx status."""

    code = ErrorCode.UPSTREAM_STATUS

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Upstream returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body
