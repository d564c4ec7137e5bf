"""
Unit tests for JWKSKeyStore.
"""

import json
import time

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from service_auth.app.jwks.client import JWKSKeyStore
from service_auth.app.keystore import KeyRecord
from service_auth.app.validation.token_validator import TokenValidator
from shared.errors import ExternalServiceError
from shared.metrics import MetricsCollector


class TestJWKSKeyStore:
    """Test cases for JWKSKeyStore."""

    @pytest.fixture
    def jwks_store(self):
        """Create JWKSKeyStore instance."""
        return JWKSKeyStore("http://mock-idp/jwks", cache_ttl=3600)

    @pytest.fixture
    def mock_jwks_data(self, ed25519_jwk, rsa_jwk):
        """JWKS document with the session keys."""
        return {"keys": [ed25519_jwk, rsa_jwk]}

    @pytest.mark.asyncio
    async def test_get_jwks_success(self, jwks_store, mock_jwks_data):
        jwks_store.circuit_breaker.call = AsyncMock(return_value=mock_jwks_data)

        result = await jwks_store.get_jwks()

        assert result == mock_jwks_data
        assert jwks_store._jwks_cache == mock_jwks_data
        assert jwks_store._cache_timestamp > 0

    @pytest.mark.asyncio
    async def test_get_jwks_cached(self, jwks_store, mock_jwks_data):
        jwks_store._jwks_cache = mock_jwks_data
        jwks_store._cache_timestamp = time.time()
        jwks_store.circuit_breaker.call = AsyncMock(return_value=mock_jwks_data)

        result = await jwks_store.get_jwks()

        assert result == mock_jwks_data
        jwks_store.circuit_breaker.call.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_jwks_failure_with_stale_cache(self, jwks_store, mock_jwks_data):
        jwks_store._jwks_cache = mock_jwks_data
        jwks_store._cache_timestamp = time.time() - 4000
        jwks_store.circuit_breaker.call = AsyncMock(side_effect=httpx.HTTPError("Network error"))

        result = await jwks_store.get_jwks()

        assert result == mock_jwks_data

    @pytest.mark.asyncio
    async def test_get_jwks_failure_no_cache(self, jwks_store):
        jwks_store.circuit_breaker.call = AsyncMock(side_effect=httpx.HTTPError("Network error"))

        with pytest.raises(ExternalServiceError) as exc_info:
            await jwks_store.get_jwks()
        assert exc_info.value.details["url"] == "http://mock-idp/jwks"

    @pytest.mark.asyncio
    async def test_refresh_records_metrics(self, mock_jwks_data):
        metrics = MetricsCollector("auth")
        store = JWKSKeyStore("http://mock-idp/jwks", metrics=metrics)
        store.circuit_breaker.call = AsyncMock(return_value=mock_jwks_data)

        await store.get_jwks()

        assert metrics.registry.get_sample_value("jwks_refresh_total", {"status": "ok"}) == 1.0

    @pytest.mark.asyncio
    async def test_fetch_jwks_over_http(self, jwks_store, mock_jwks_data):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=mock_jwks_data))
        real_client = httpx.AsyncClient

        with patch("service_auth.app.jwks.client.httpx.AsyncClient",
                   lambda **kwargs: real_client(transport=transport, **kwargs)):
            result = await jwks_store.get_jwks()

        assert result == mock_jwks_data

    @pytest.mark.asyncio
    async def test_fetch_rejects_document_without_keys(self, jwks_store):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"not": "jwks"}))
        real_client = httpx.AsyncClient

        with patch("service_auth.app.jwks.client.httpx.AsyncClient",
                   lambda **kwargs: real_client(transport=transport, **kwargs)):
            with pytest.raises(ExternalServiceError):
                await jwks_store.get_jwks()

    @pytest.mark.asyncio
    async def test_get_key_success(self, jwks_store, mock_jwks_data, rsa_jwk):
        jwks_store.get_jwks = AsyncMock(return_value=mock_jwks_data)

        result = await jwks_store.get_key(rsa_jwk["kid"])

        assert result == rsa_jwk
        assert rsa_jwk["kid"] in jwks_store._key_cache

    @pytest.mark.asyncio
    async def test_get_key_cached(self, jwks_store, mock_jwks_data, rsa_jwk):
        jwks_store._key_cache[rsa_jwk["kid"]] = rsa_jwk
        jwks_store.get_jwks = AsyncMock(return_value=mock_jwks_data)

        result = await jwks_store.get_key(rsa_jwk["kid"])

        assert result == rsa_jwk
        jwks_store.get_jwks.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_key_not_found(self, jwks_store, mock_jwks_data):
        jwks_store.get_jwks = AsyncMock(return_value=mock_jwks_data)

        assert await jwks_store.get_key("nonexistent-key") is None
        assert await jwks_store.get_key_by_id("nonexistent-key") is None

    @pytest.mark.asyncio
    async def test_get_key_by_id_returns_record(self, jwks_store, mock_jwks_data, ed25519_jwk):
        jwks_store.get_jwks = AsyncMock(return_value=mock_jwks_data)

        record = await jwks_store.get_key_by_id(ed25519_jwk["kid"])

        assert isinstance(record, KeyRecord)
        assert json.loads(record.key) == ed25519_jwk

    @pytest.mark.asyncio
    async def test_validator_with_jwks_store(self, jwks_store, mock_jwks_data, eddsa_token, rs256_token):
        jwks_store.circuit_breaker.call = AsyncMock(return_value=mock_jwks_data)
        validator = TokenValidator(jwks_store)

        assert (await validator.validate(eddsa_token)).verified is True
        assert (await validator.validate(rs256_token)).verified is True
        jwks_store.circuit_breaker.call.assert_awaited_once()

    def test_clear_cache(self, jwks_store, mock_jwks_data):
        jwks_store._jwks_cache = mock_jwks_data
        jwks_store._cache_timestamp = time.time()
        jwks_store._key_cache["mock-key-1"] = {}

        jwks_store.clear_cache()

        assert jwks_store._jwks_cache is None
        assert jwks_store._cache_timestamp == 0
        assert jwks_store._key_cache == {}
