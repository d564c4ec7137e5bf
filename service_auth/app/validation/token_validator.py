"""
Token validation service for Auth service.
"""

import json
import time
from numbers import Number
from collections.abc import Mapping
from typing import Dict, Any, Optional, Tuple

from jose import jwk, jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from jose.utils import base64url_decode
from pydantic import BaseModel, Field

from shared.errors import SignatureVerificationError, TokenDecodeError, UnsupportedAlgorithmError
from shared.logging import get_logger, reset_key_context, set_key_context
from shared.metrics import MetricsCollector
from ..keystore import InMemoryKeyStore, KeyStore
from .algorithms import AlgorithmFamily, check_key_algorithm, classify_algorithm
from .backend import initialize_crypto_backend
from .eddsa import verify_eddsa_token

# Claim checks the validator does not own; only signature and exp matter here.
JWT_OPTIONS = {
    "verify_aud": False,
    "verify_sub": False,
    "verify_jti": False,
}


class TokenVerificationRequest(BaseModel):
    """Request model for token verification."""
    token: str
    secret: Optional[str] = None


class DecodedToken(BaseModel):
    """Unverified header and payload of a token."""
    header: Dict[str, Any] = Field(default_factory=dict)
    payload: Dict[str, Any] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    """Outcome of validating one token."""
    verified: bool
    decoded: DecodedToken = Field(default_factory=DecodedToken)
    expired: bool = False
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "ValidationResult":
        """Result for a token that could not be processed at all."""
        return cls(verified=False, decoded=DecodedToken(), expired=False, error=error)


def _decode_segment(segment: str, name: str) -> Dict[str, Any]:
    try:
        decoded = json.loads(base64url_decode(segment.encode("ascii")).decode("utf-8"))
    except (ValueError, TypeError) as e:
        raise TokenDecodeError(f"Invalid token {name}: {e}") from e

    if not isinstance(decoded, Mapping):
        raise TokenDecodeError(f"Invalid token {name}: must be a JSON object")
    return dict(decoded)


def decode_unverified(token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Decode header and payload without checking the signature.

    The signature segment is left alone; a bad signature encoding is a
    verification failure, not a decode failure.
    """
    segments = token.split(".")
    if len(segments) != 3:
        raise TokenDecodeError("Token must have exactly three segments")

    header = _decode_segment(segments[0], "header")
    payload = _decode_segment(segments[1], "payload")

    alg = header.get("alg")
    if not isinstance(alg, str) or not alg:
        raise TokenDecodeError("Token header is missing the 'alg' parameter")

    exp = payload.get("exp")
    if exp is not None and (isinstance(exp, bool) or not isinstance(exp, Number)):
        raise TokenDecodeError("\"exp\" claim must be a number")

    return header, payload


def is_expired(payload: Dict[str, Any], now: Optional[float] = None) -> bool:
    """True when the payload carries an ``exp`` that lies in the past."""
    exp = payload.get("exp")
    if not exp:
        return False
    current = time.time() if now is None else now
    return current > exp


class TokenValidator:
    """Token validation service."""

    def __init__(self, key_store: KeyStore, metrics: Optional[MetricsCollector] = None):
        self.key_store = key_store
        self.metrics = metrics
        self.logger = get_logger("auth.validator")
        initialize_crypto_backend()

    async def validate(self, token: str, secret: Optional[str] = None) -> ValidationResult:
        """
        Validate a compact token.

        Never raises: every failure ends up in the ``error`` field of the
        returned result.
        """
        family = AlgorithmFamily.UNSUPPORTED
        try:
            header, payload = decode_unverified(token)
            decoded = DecodedToken(header=header, payload=payload)
            expired = is_expired(payload)

            family = classify_algorithm(header["alg"])

            if family is AlgorithmFamily.SYMMETRIC:
                result = self._validate_symmetric(token, header, secret, decoded, expired)
            elif family in (AlgorithmFamily.ASYMMETRIC_GENERIC, AlgorithmFamily.ASYMMETRIC_EDDSA):
                result = await self._validate_asymmetric(token, header, decoded, expired)
            elif family is AlgorithmFamily.UNSUPPORTED:
                result = ValidationResult(
                    verified=False,
                    decoded=decoded,
                    expired=expired,
                    error=UnsupportedAlgorithmError(header["alg"]).message
                )
            else:
                raise UnsupportedAlgorithmError(header["alg"])

        except Exception as e:
            self.logger.warning("Token validation failed", error=str(e))
            result = ValidationResult.failed(str(e))

        self._record(family, result)
        return result

    def _validate_symmetric(self,
                            token: str,
                            header: Dict[str, Any],
                            secret: Optional[str],
                            decoded: DecodedToken,
                            expired: bool) -> ValidationResult:
        """HMAC path. An expired but correctly signed token still counts as verified."""
        key = (secret or "").encode("utf-8")
        try:
            jwt.decode(token, key, algorithms=[header["alg"]], options=JWT_OPTIONS)
        except ExpiredSignatureError:
            return ValidationResult(verified=True, decoded=decoded, expired=expired)
        except JWTError as e:
            return ValidationResult(verified=False, decoded=decoded, expired=expired, error=str(e))

        return ValidationResult(verified=True, decoded=decoded, expired=expired)

    async def _validate_asymmetric(self,
                                   token: str,
                                   header: Dict[str, Any],
                                   decoded: DecodedToken,
                                   expired: bool) -> ValidationResult:
        kid = header.get("kid")
        context_token = set_key_context(kid)
        try:
            record = None
            if kid:
                record = await self.key_store.get_key_by_id(kid)

            if record is None:
                self.logger.info("No key found", kid=kid, alg=header["alg"])
                return ValidationResult(verified=False, decoded=decoded, expired=expired)

            # Unparseable key material is a store fault, not a signature failure.
            jwk_data = json.loads(record.key)

            try:
                await self._import_key_and_verify(token, header["alg"], jwk_data)
            except Exception as e:
                self.logger.info("Signature verification failed", kid=kid, error=str(e))
                return ValidationResult(verified=False, decoded=decoded, expired=expired, error=str(e))

            return ValidationResult(verified=True, decoded=decoded, expired=expired)
        finally:
            reset_key_context(context_token)

    async def _import_key_and_verify(self, token: str, alg: str, jwk_data: Dict[str, Any]) -> None:
        check_key_algorithm(alg, jwk_data)

        if classify_algorithm(alg) is AlgorithmFamily.ASYMMETRIC_EDDSA:
            verify_eddsa_token(token, jwk_data)
            return

        self._verify_generic(token, alg, jwk_data)

    def _verify_generic(self, token: str, alg: str, jwk_data: Dict[str, Any]) -> None:
        """Public-key path through python-jose. Expiry is a hard failure here."""
        public_key = jwk.construct(jwk_data, algorithm=alg)
        try:
            jwt.decode(token, public_key, algorithms=[alg], options=JWT_OPTIONS)
        except ExpiredSignatureError:
            raise
        except JWTError as e:
            raise SignatureVerificationError(str(e)) from e

    def _record(self, family: AlgorithmFamily, result: ValidationResult) -> None:
        if self.metrics is None:
            return
        if result.verified:
            outcome = "verified"
        elif result.error:
            outcome = "error"
        else:
            outcome = "no_key"
        self.metrics.record_token_validation(family.value, outcome)


async def validate_token(token: str,
                         secret: Optional[str] = None,
                         key_store: Optional[KeyStore] = None) -> ValidationResult:
    """Validate ``token`` with a throwaway validator over ``key_store``."""
    if key_store is None:
        key_store = InMemoryKeyStore()
    return await TokenValidator(key_store).validate(token, secret)
