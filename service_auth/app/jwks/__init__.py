"""
JWKS key store package.

Resolves verification keys from a JSON Web Key Set endpoint. Implements the
``KeyStore`` contract from ``service_auth.app.keystore``.

Key points:
- Fetches go through a circuit breaker with a timeout.
- The JWKS document is cached for a TTL; individual keys are cached by kid.
- A stale document is served when a refresh fails.
"""

from .client import JWKSKeyStore

__all__ = ["JWKSKeyStore"]
