"""
Edge gateway service: Cloudflare Access in front, container environment behind.
"""

import os
from typing import Any, Dict, Mapping, Optional

from fastapi import Depends, Request

from shared.base_service import BaseService
from shared.config import GatewayConfig
from .auth import AccessMiddleware, KeySetSource, RemoteKeySetSource
from .environment import gateway_slot, resolve_environment


class GatewayService(BaseService):
    """Edge gateway service implementation."""

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        key_source: Optional[KeySetSource] = None,
        environment: Optional[Mapping[str, str]] = None,
    ):
        self.key_source = key_source
        self.environment = environment
        super().__init__("gateway", config)

        if self.key_source is None:
            self.key_source = RemoteKeySetSource(
                cache_ttl=self.config.jwks_cache_ttl,
                http_timeout=self.config.jwks_http_timeout,
            )
        self.access_middleware = AccessMiddleware(self.config, self.key_source)

        self._setup_gateway_routes()

        self.app.state.gateway_service = self

    def environment_inputs(self) -> Mapping[str, str]:
        """Snapshot of the inputs for one resolution."""
        if self.environment is not None:
            return dict(self.environment)
        return dict(os.environ)

    def _check_dependencies(self) -> Dict[str, str]:
        return {
            "cloudflare_access": "configured" if self.config.access_configured else "missing",
        }

    def _setup_gateway_routes(self):
        """Set up gateway routes."""

        async def require_access(request: Request) -> Dict[str, Any]:
            return await self.access_middleware.authenticate_request(request)

        @self.app.on_event("shutdown")
        async def shutdown_event():
            close = getattr(self.key_source, "close", None)
            if close is not None:
                await close()

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "gateway",
                "message": "Edge Gateway",
                "version": "1.0.0"
            }

        @self.app.get("/api/status")
        async def api_status(user: Dict[str, Any] = Depends(require_access)):
            """Who the request was authenticated as."""
            return {
                "status": "ok",
                "user": user,
                "dev_mode": self.config.dev_mode
            }

        @self.app.get("/api/container/env")
        async def container_env(user: Dict[str, Any] = Depends(require_access)):
            """Names of the variables the container would start with. Values are never returned."""
            inputs = self.environment_inputs()
            resolved = resolve_environment(inputs)
            slot = gateway_slot(inputs)

            return {
                "variables": sorted(resolved),
                "gateway_provider": slot.value if slot else None,
            }


def create_app(
    config: Optional[GatewayConfig] = None,
    key_source: Optional[KeySetSource] = None,
    environment: Optional[Mapping[str, str]] = None,
):
    """Create FastAPI app instance."""
    service = GatewayService(config=config, key_source=key_source, environment=environment)
    return service.app


if __name__ == "__main__":
    GatewayService().run()
