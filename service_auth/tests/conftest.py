"""
Shared fixtures for auth service tests.

Reference tokens are minted with PyJWT so that verification is always checked
against an independent implementation.
"""

import time
from typing import Any, Dict, Optional

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from service_auth.app.keystore import InMemoryKeyStore
from shared.test_helpers import ED25519_KID, HMAC_SECRET, RSA_KID, b64url, int_to_b64url


@pytest.fixture
def claims() -> Dict[str, Any]:
    now = int(time.time())
    return {
        "sub": "user1",
        "tenant_id": "tenant-1",
        "iat": now,
        "exp": now + 3600,
    }


@pytest.fixture
def expired_claims() -> Dict[str, Any]:
    now = int(time.time())
    return {
        "sub": "user1",
        "iat": now - 7200,
        "exp": now - 3600,
    }


@pytest.fixture(scope="session")
def ed25519_private_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture(scope="session")
def ed25519_jwk(ed25519_private_key) -> Dict[str, Any]:
    raw = ed25519_private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return {
        "kty": "OKP",
        "crv": "Ed25519",
        "x": b64url(raw),
        "alg": "EdDSA",
        "use": "sig",
        "kid": ED25519_KID,
    }


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_jwk(rsa_private_key) -> Dict[str, Any]:
    numbers = rsa_private_key.public_key().public_numbers()
    return {
        "kty": "RSA",
        "n": int_to_b64url(numbers.n),
        "e": int_to_b64url(numbers.e),
        "alg": "RS256",
        "use": "sig",
        "kid": RSA_KID,
    }


@pytest.fixture
def key_store(ed25519_jwk, rsa_jwk) -> InMemoryKeyStore:
    return InMemoryKeyStore({
        ED25519_KID: ed25519_jwk,
        RSA_KID: rsa_jwk,
    })


@pytest.fixture
def hs256_token(claims) -> str:
    return jwt.encode(claims, HMAC_SECRET, algorithm="HS256")


@pytest.fixture
def eddsa_token(ed25519_private_key, claims) -> str:
    return jwt.encode(claims, ed25519_private_key, algorithm="EdDSA", headers={"kid": ED25519_KID})


@pytest.fixture
def rs256_token(rsa_private_key, claims) -> str:
    return jwt.encode(claims, rsa_private_key, algorithm="RS256", headers={"kid": RSA_KID})


@pytest.fixture
def make_token(ed25519_private_key, rsa_private_key):
    """Factory for tokens signed with the session keys."""

    def _make(payload: Dict[str, Any], alg: str = "HS256", kid: Optional[str] = None,
              secret: str = HMAC_SECRET) -> str:
        headers = {"kid": kid} if kid else None
        if alg.startswith("HS"):
            key = secret
        elif alg == "EdDSA":
            key = ed25519_private_key
        else:
            key = rsa_private_key
        return jwt.encode(payload, key, algorithm=alg, headers=headers)

    return _make
