"""
Authentication helpers for the edge gateway.
"""

from .access import (
    AccessVerifier,
    VerifiedClaims,
    access_issuer,
    certs_url,
    normalize_team_domain,
    verify_access_token,
)
from .jwks import KeySetSource, RemoteKeySetSource, StaticKeySetSource
from .middleware import AccessMiddleware, extract_access_token

__all__ = [
    "AccessMiddleware",
    "AccessVerifier",
    "KeySetSource",
    "RemoteKeySetSource",
    "StaticKeySetSource",
    "VerifiedClaims",
    "access_issuer",
    "certs_url",
    "extract_access_token",
    "normalize_team_domain",
    "verify_access_token",
]
