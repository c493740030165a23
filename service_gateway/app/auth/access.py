"""
Cloudflare Access token verification.

Access signs a JWT for every request it lets through and forwards it in the
``CF-Access-JWT-Assertion`` header. The signing keys are published per team at
``https://<team>.cloudflareaccess.com/cdn-cgi/access/certs``; the token is
trusted only when its signature matches one of those keys, its issuer is the
team domain and its audience contains the application's AUD tag.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Union

from jose import jwt
from jose.exceptions import JOSEError
from pydantic import BaseModel, ConfigDict, ValidationError

from shared.errors import AccessVerificationError, KeySetFetchError
from shared.logging import get_logger
from .jwks import KeySet, KeySetSource


ACCESS_DOMAIN_SUFFIX = "cloudflareaccess.com"
CERTS_PATH = "/cdn-cgi/access/certs"
ALGORITHMS = ["RS256"]

_SCHEME_RE = re.compile(r"^https?://")
_TRAILING_SLASHES_RE = re.compile(r"/+$")

logger = get_logger("gateway.auth.access")


class VerifiedClaims(BaseModel):
    """Decoded payload of a verified access token."""

    model_config = ConfigDict(extra="allow")

    iss: str
    aud: Union[str, List[str]]
    exp: int
    sub: Optional[str] = None
    iat: Optional[int] = None
    nbf: Optional[int] = None
    email: Optional[str] = None
    type: Optional[str] = None
    identity_nonce: Optional[str] = None
    country: Optional[str] = None


def normalize_team_domain(team_domain: str) -> str:
    """Normalize a team domain given as ``myteam``, ``myteam.cloudflareaccess.com`` or a URL."""
    domain = _SCHEME_RE.sub("", team_domain)
    domain = _TRAILING_SLASHES_RE.sub("", domain)

    # A bare team name gets the hosted Access domain
    if "." not in domain:
        domain = f"{domain}.{ACCESS_DOMAIN_SUFFIX}"

    return domain


def access_issuer(team_domain: str) -> str:
    """Expected ``iss`` claim for tokens issued to ``team_domain``."""
    return f"https://{normalize_team_domain(team_domain)}"


def certs_url(issuer: str) -> str:
    """Location of the key set Access publishes for ``issuer``."""
    return f"{issuer}{CERTS_PATH}"


def _signing_keys(key_set: KeySet, kid: Optional[str]) -> Optional[KeySet]:
    """Keys a token with ``kid`` may be checked against, ``None`` when none match."""
    keys = [key for key in key_set.get("keys") or [] if isinstance(key, dict)]
    if kid is None:
        return {"keys": keys}

    matching = [key for key in keys if key.get("kid") == kid]
    return {"keys": matching} if matching else None


async def verify_access_token(
    token: str,
    team_domain: str,
    expected_audience: str,
    *,
    key_source: KeySetSource,
) -> VerifiedClaims:
    """Verify an access token and return its claims.

    Every failure, including an unreachable key set, raises
    :class:`AccessVerificationError`. Failures are not retried; an unknown
    ``kid`` only forces one refresh of the key set.
    """
    if not token:
        raise AccessVerificationError("Access token is empty")
    if not team_domain or not team_domain.strip():
        raise AccessVerificationError("Team domain is not configured")

    issuer = access_issuer(team_domain)
    url = certs_url(issuer)

    try:
        kid = jwt.get_unverified_header(token).get("kid")
        signing_keys = _signing_keys(await key_source.get_key_set(url), kid)
        if signing_keys is None:
            # Keys may have rotated since the set was cached
            signing_keys = _signing_keys(await key_source.get_key_set(url, force=True), kid)
        if signing_keys is None:
            raise AccessVerificationError("No signing key matches token", details={"kid": kid})

        claims: Dict[str, Any] = jwt.decode(
            token,
            signing_keys,
            algorithms=ALGORITHMS,
            audience=expected_audience,
            issuer=issuer,
            options={"require_aud": True, "require_iss": True, "require_exp": True},
        )
        verified = VerifiedClaims.model_validate(claims)
    except AccessVerificationError:
        raise
    except KeySetFetchError as exc:
        logger.warning("Access key set unavailable", url=url, error=exc.message)
        raise AccessVerificationError("Access key set unavailable", details={"url": url}) from exc
    except (JOSEError, ValidationError) as exc:
        logger.warning("Access token rejected", issuer=issuer, error=str(exc))
        raise AccessVerificationError("Access token verification failed", details={"error": str(exc)}) from exc

    logger.debug("Access token verified", sub=verified.sub, issuer=issuer)
    return verified


class AccessVerifier:
    """Verifier bound to one team domain, application audience and key source."""

    def __init__(self, team_domain: str, audience: str, key_source: KeySetSource) -> None:
        self.team_domain = team_domain
        self.audience = audience
        self.key_source = key_source

    @property
    def issuer(self) -> str:
        return access_issuer(self.team_domain)

    async def verify(self, token: str) -> VerifiedClaims:
        return await verify_access_token(
            token,
            self.team_domain,
            self.audience,
            key_source=self.key_source,
        )
