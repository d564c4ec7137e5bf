"""
Shared utilities for the token validation service.

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- circuit_breaker: Protection for calls to remote key sources
- base_service: FastAPI application scaffolding

Do not import from service_* packages into shared/.
"""
