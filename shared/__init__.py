"""
Shared utilities for the edge gateway.

- config: Gateway configuration via pydantic-settings
- logging: Structured logging with request correlation
- errors: Canonical error types and responses
- base_service: FastAPI service scaffolding

Do not import from service_* packages into shared/.
"""
