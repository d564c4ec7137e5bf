"""
Shared error handling for the token validation service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AccessLayerException(Exception):
    """Base exception for the token validation service."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class TokenDecodeError(AccessLayerException):
    """Token header or payload could not be decoded."""

    def __init__(self, message: str = "Token could not be decoded", details: Optional[Dict[str, Any]] = None):
        super().__init__("TOKEN_DECODE_ERROR", message, details)


class SignatureVerificationError(AccessLayerException):
    """Signature did not verify against the resolved key."""

    def __init__(self, message: str = "Signature verification failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("SIGNATURE_VERIFICATION_ERROR", message, details)


class UnsupportedAlgorithmError(AccessLayerException):
    """Header declares an algorithm this service cannot verify."""

    def __init__(self, algorithm: str, details: Optional[Dict[str, Any]] = None):
        self.algorithm = algorithm
        super().__init__("UNSUPPORTED_ALGORITHM", f"Unsupported algorithm: {algorithm}", details)


class AlgorithmMismatchError(AccessLayerException):
    """Header algorithm and stored key algorithm disagree."""

    def __init__(self, header_alg: str, key_alg: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            "ALGORITHM_MISMATCH",
            f"Token algorithm {header_alg} does not match key algorithm {key_alg}",
            details
        )


class KeyResolutionError(AccessLayerException):
    """Stored key material is unusable."""

    def __init__(self, message: str = "Key could not be resolved", details: Optional[Dict[str, Any]] = None):
        super().__init__("KEY_RESOLUTION_ERROR", message, details)


class ExternalServiceError(AccessLayerException):
    """External service errors."""

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)
