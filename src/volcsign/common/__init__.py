"""Common utilities for volcsign."""

from volcsign.common.errors import (
    MissingCredentialsError,
    SigningError,
    TransportError,
    UpstreamError,
    VolcSignError,
)
from volcsign.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "VolcSignError",
    "MissingCredentialsError",
    "SigningError",
    "TransportError",
    "UpstreamError",
]
