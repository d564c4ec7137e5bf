"""
Token validation package.

Decodes a compact token without verifying it, works out whether it has
expired, then verifies its signature along one of the algorithm families:

- symmetric (HS*): caller-supplied shared secret.
- generic public key (RS*, PS*, ES*): JWK from the key store, python-jose.
- EdDSA: JWK from the key store, raw Ed25519 check through libsodium.

Validation never raises; failures are reported in ``ValidationResult.error``.
"""

from .algorithms import AlgorithmFamily, classify_algorithm
from .backend import initialize_crypto_backend
from .token_validator import DecodedToken, TokenValidator, ValidationResult, validate_token

__all__ = [
    "AlgorithmFamily",
    "classify_algorithm",
    "initialize_crypto_backend",
    "DecodedToken",
    "TokenValidator",
    "ValidationResult",
    "validate_token",
]
