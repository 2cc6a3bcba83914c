"""
volcsign: HMAC-SHA256 request signing for the Volcengine visual API.

Builds canonical requests, derives request-scoped signing keys and
dispatches signed POST requests.
"""

__version__ = "1.0.0"
