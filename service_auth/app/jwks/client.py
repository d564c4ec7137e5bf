"""
JWKS-backed key store.
"""

import json
import time
import httpx
from typing import Dict, Any, Optional

from shared.circuit_breaker import CircuitBreaker
from shared.errors import ExternalServiceError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..keystore.base import KeyRecord


class JWKSKeyStore:
    """Key store that fetches and caches a JWKS document over HTTP."""

    def __init__(self,
                 jwks_url: str,
                 cache_ttl: int = 3600,
                 timeout: float = 10.0,
                 metrics: Optional[MetricsCollector] = None):
        self.jwks_url = jwks_url
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("auth.jwks")

        # Cache for JWKS
        self._jwks_cache: Optional[Dict[str, Any]] = None
        self._cache_timestamp: float = 0

        # Cache for individual keys
        self._key_cache: Dict[str, Dict[str, Any]] = {}

        self.circuit_breaker = CircuitBreaker(
            name="jwks",
            failure_threshold=5,
            recovery_timeout=30,
            expected_exceptions=(httpx.HTTPError, ValueError)
        )

    async def _fetch_jwks(self) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.jwks_url)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict) or not isinstance(data.get("keys"), list):
            raise ValueError("JWKS document must contain a 'keys' list")
        return data

    async def get_jwks(self) -> Dict[str, Any]:
        """Get JWKS from cache or fetch it from the endpoint."""
        current_time = time.time()

        if (self._jwks_cache is not None and
                current_time - self._cache_timestamp < self.cache_ttl):
            return self._jwks_cache

        try:
            jwks_data = await self.circuit_breaker.call(self._fetch_jwks)
        except Exception as e:
            self.logger.error("Failed to fetch JWKS", url=self.jwks_url, error=str(e))
            if self.metrics:
                self.metrics.record_jwks_refresh("error")
            # Serve the stale document if there is one
            if self._jwks_cache is not None:
                self.logger.warning("Using stale JWKS cache due to fetch failure")
                return self._jwks_cache
            raise ExternalServiceError("jwks", str(e), details={"url": self.jwks_url}) from e

        self._jwks_cache = jwks_data
        self._cache_timestamp = current_time
        # Keys may have rotated
        self._key_cache.clear()

        if self.metrics:
            self.metrics.record_jwks_refresh("ok", time.time() - current_time)
        self.logger.info(
            "JWKS refreshed successfully",
            keys_count=len(jwks_data["keys"])
        )

        return jwks_data

    async def get_key(self, kid: str) -> Optional[Dict[str, Any]]:
        """Get a specific JWK by key ID."""
        if kid in self._key_cache:
            return self._key_cache[kid]

        jwks = await self.get_jwks()

        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                self._key_cache[kid] = key
                return key

        self.logger.warning("Key not found", kid=kid)
        return None

    async def get_key_by_id(self, kid: str) -> Optional[KeyRecord]:
        key = await self.get_key(kid)
        if key is None:
            return None
        return KeyRecord(kid=kid, key=json.dumps(key))

    def clear_cache(self):
        """Clear all caches."""
        self._jwks_cache = None
        self._cache_timestamp = 0
        self._key_cache.clear()
        self.logger.info("JWKS cache cleared")
