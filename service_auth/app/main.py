"""
Auth service exposing token validation over HTTP.
"""

from typing import Dict, Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import AccessLayerException
from shared.metrics import MetricsCollector
from .jwks.client import JWKSKeyStore
from .keystore import InMemoryKeyStore, KeyStore
from .validation.backend import initialize_crypto_backend
from .validation.token_validator import TokenValidator, TokenVerificationRequest, ValidationResult

BEARER_PREFIX = "Bearer "


def build_key_store(config: ServiceConfig, metrics: Optional[MetricsCollector] = None) -> KeyStore:
    """Build the key store selected by ``key_store_backend``."""
    backend = config.key_store_backend.lower()

    if backend == "jwks":
        return JWKSKeyStore(
            config.jwks_url,
            cache_ttl=config.jwks_cache_ttl,
            timeout=config.jwks_timeout,
            metrics=metrics
        )

    if backend == "memory":
        if config.keys_file:
            return InMemoryKeyStore.from_file(config.keys_file)
        return InMemoryKeyStore()

    raise AccessLayerException(
        "CONFIGURATION_ERROR",
        f"Unknown key store backend: {config.key_store_backend}",
        details={"key_store_backend": config.key_store_backend}
    )


class AuthService(BaseService):
    """Auth service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None, key_store: Optional[KeyStore] = None):
        super().__init__("auth", 8010, config=config)

        initialize_crypto_backend()

        self.key_store = key_store or build_key_store(self.config, self.metrics)
        self.token_validator = TokenValidator(self.key_store, metrics=self.metrics)

        self._setup_auth_routes()

    def _setup_auth_routes(self):
        """Set up auth-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "auth",
                "message": "Token Validation - Auth Service",
                "version": "1.0.0"
            }

        @self.app.post("/auth/verify", response_model=ValidationResult)
        async def verify_token(request: TokenVerificationRequest):
            """Token verification endpoint."""
            token = request.token
            if token.startswith(BEARER_PREFIX):
                token = token[len(BEARER_PREFIX):]

            secret = request.secret if request.secret is not None else self.config.hmac_secret

            result = await self.token_validator.validate(token, secret)

            if result.verified:
                self.logger.info(
                    "Token verified",
                    alg=result.decoded.header.get("alg"),
                    kid=result.decoded.header.get("kid"),
                    expired=result.expired
                )
            else:
                self.logger.warning(
                    "Token not verified",
                    alg=result.decoded.header.get("alg"),
                    error=result.error
                )

            return result

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check auth dependencies."""
        dependencies = {}

        if isinstance(self.key_store, JWKSKeyStore):
            try:
                await self.key_store.get_jwks()
                dependencies["jwks"] = "ok"
            except Exception:
                dependencies["jwks"] = "error"
        else:
            dependencies["key_store"] = "ok"

        return dependencies


def create_app(config: Optional[ServiceConfig] = None, key_store: Optional[KeyStore] = None):
    """Create FastAPI application."""
    service = AuthService(config=config, key_store=key_store)
    return service.app


if __name__ == "__main__":
    service = AuthService()
    service.run()
