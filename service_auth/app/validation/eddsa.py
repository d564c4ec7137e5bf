"""
Raw EdDSA (Ed25519) signature verification for compact tokens.

python-jose has no OKP key support, so EdDSA tokens bypass ``jwt.decode``
and are checked directly with libsodium. Every input is handed to the
verifier in hexadecimal form:

- message: the ASCII signing input ``<header>.<payload>`` as hex
- signature: the base64url signature segment decoded, as hex
- public key: the raw 32 bytes from the JWK ``x`` member, as hex
"""

from typing import Any, Dict, Tuple

from jose.utils import base64url_decode
from nacl.encoding import HexEncoder
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from shared.errors import KeyResolutionError, SignatureVerificationError, TokenDecodeError

ED25519_KEY_LENGTH = 32
VERIFICATION_FAILED = "eddsa token verification failed"


def split_token(token: str) -> Tuple[str, str, str]:
    """Split a compact token into its header, payload and signature segments."""
    parts = token.split(".")
    if len(parts) != 3:
        raise TokenDecodeError("Token must have exactly three segments")
    return parts[0], parts[1], parts[2]


def signing_input_hex(header_segment: str, payload_segment: str) -> str:
    return f"{header_segment}.{payload_segment}".encode("utf-8").hex()


def signature_hex(signature_segment: str) -> str:
    return base64url_decode(signature_segment.encode("ascii")).hex()


def public_key_hex(jwk_data: Dict[str, Any]) -> str:
    """Extract the raw Ed25519 public key from an OKP JWK."""
    if jwk_data.get("kty") != "OKP":
        raise KeyResolutionError(
            "EdDSA verification requires an OKP key",
            details={"kty": jwk_data.get("kty")}
        )
    if jwk_data.get("crv", "Ed25519") != "Ed25519":
        raise KeyResolutionError(
            f"Unsupported EdDSA curve: {jwk_data.get('crv')}",
            details={"crv": jwk_data.get("crv")}
        )

    x = jwk_data.get("x")
    if not isinstance(x, str):
        raise KeyResolutionError("OKP key is missing the 'x' member")

    raw = base64url_decode(x.encode("ascii"))
    if len(raw) != ED25519_KEY_LENGTH:
        raise KeyResolutionError(
            "Ed25519 public key must be 32 bytes",
            details={"length": len(raw)}
        )
    return raw.hex()


def verify_hex(signature: str, message: str, public_key: str) -> bool:
    """Check an Ed25519 signature where all three arguments are hex strings."""
    verify_key = VerifyKey(public_key.encode("ascii"), encoder=HexEncoder)
    try:
        verify_key.verify(bytes.fromhex(message), bytes.fromhex(signature))
    except (BadSignatureError, ValueError):
        return False
    return True


def verify_eddsa_token(token: str, jwk_data: Dict[str, Any]) -> None:
    """Raise ``SignatureVerificationError`` unless ``token`` verifies against ``jwk_data``."""
    header_segment, payload_segment, signature_segment = split_token(token)

    message = signing_input_hex(header_segment, payload_segment)
    try:
        signature = signature_hex(signature_segment)
    except ValueError as e:
        raise SignatureVerificationError(VERIFICATION_FAILED) from e
    public_key = public_key_hex(jwk_data)

    if not verify_hex(signature, message, public_key):
        raise SignatureVerificationError(VERIFICATION_FAILED)
