"""
Signature algorithm families used for verification dispatch.
"""

from enum import Enum
from typing import Any, Dict, Optional

from shared.errors import AlgorithmMismatchError


class AlgorithmFamily(str, Enum):
    """Closed set of verification paths a token can take."""
    SYMMETRIC = "symmetric"
    ASYMMETRIC_GENERIC = "asymmetric_generic"
    ASYMMETRIC_EDDSA = "asymmetric_eddsa"
    UNSUPPORTED = "unsupported"


HMAC_PREFIX = "HS"
EDDSA = "EDDSA"

# Public-key algorithms python-jose can verify.
GENERIC_ALGORITHMS = frozenset({
    "RS256", "RS384", "RS512",
    "PS256", "PS384", "PS512",
    "ES256", "ES384", "ES512",
})


def classify_algorithm(alg: str) -> AlgorithmFamily:
    """Map a header ``alg`` value onto its family, ignoring case."""
    name = alg.upper()
    if name.startswith(HMAC_PREFIX):
        return AlgorithmFamily.SYMMETRIC
    if name == EDDSA:
        return AlgorithmFamily.ASYMMETRIC_EDDSA
    if name in GENERIC_ALGORITHMS:
        return AlgorithmFamily.ASYMMETRIC_GENERIC
    return AlgorithmFamily.UNSUPPORTED


def check_key_algorithm(header_alg: str, jwk_data: Dict[str, Any]) -> None:
    """Reject a stored key whose declared ``alg`` disagrees with the token header."""
    key_alg: Optional[str] = jwk_data.get("alg")
    if key_alg and key_alg.upper() != header_alg.upper():
        raise AlgorithmMismatchError(header_alg, key_alg)
