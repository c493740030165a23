"""
Access authentication for gateway routes.
"""

from typing import Any, Dict, List, Optional

from fastapi import Request

from shared.config import GatewayConfig
from shared.errors import AuthenticationError, ConfigurationError
from shared.logging import get_logger, set_subject
from .access import verify_access_token
from .jwks import KeySetSource


ACCESS_HEADER = "CF-Access-JWT-Assertion"
ACCESS_COOKIE = "CF_Authorization"

DEV_USER = {"email": "dev@localhost", "sub": "dev"}


def extract_access_token(request: Request) -> Optional[str]:
    """Read the access token from the assertion header, falling back to the cookie."""
    token = request.headers.get(ACCESS_HEADER)
    if token and token.strip():
        return token.strip()

    cookie = request.cookies.get(ACCESS_COOKIE)
    if cookie and cookie.strip():
        return cookie.strip()

    return None


class AccessMiddleware:
    """Authenticates requests forwarded by Cloudflare Access."""

    def __init__(self, config: GatewayConfig, key_source: KeySetSource):
        self.config = config
        self.key_source = key_source
        self.logger = get_logger("gateway.auth.middleware")

    def _missing_settings(self) -> List[str]:
        missing = []
        if not self.config.cf_access_team_domain:
            missing.append("CF_ACCESS_TEAM_DOMAIN")
        if not self.config.cf_access_aud:
            missing.append("CF_ACCESS_AUD")
        return missing

    async def authenticate_request(self, request: Request) -> Dict[str, Any]:
        """Verify the request's access token and record the user on ``request.state``."""
        if self.config.dev_mode:
            request.state.access_user = dict(DEV_USER)
            return request.state.access_user

        missing = self._missing_settings()
        if missing:
            raise ConfigurationError(
                "Cloudflare Access is not configured",
                details={"missing": missing}
            )

        token = extract_access_token(request)
        if token is None:
            raise AuthenticationError(
                "Missing access token",
                details={"hint": f"Expected {ACCESS_HEADER} header or {ACCESS_COOKIE} cookie"}
            )

        claims = await verify_access_token(
            token,
            self.config.cf_access_team_domain,
            self.config.cf_access_aud,
            key_source=self.key_source,
        )

        set_subject(claims.sub)
        user = {"email": claims.email, "sub": claims.sub}
        request.state.access_user = user

        self.logger.info("Request authenticated with Cloudflare Access", email=claims.email)
        return user
