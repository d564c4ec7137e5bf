"""
Process-wide cryptographic backend initialisation.

libsodium (through PyNaCl) backs the raw EdDSA check and python-jose's
backend handles HMAC and the generic public-key algorithms. Importing
``nacl.bindings`` already runs ``sodium_init``; calling it again here is a
no-op for libsodium. This module records that the process has been
initialised and logs which backends are active, once, from the service
startup path.
"""

import threading

from jose.backends import RSAKey, ECKey
from nacl.bindings import sodium_init

from shared.logging import get_logger

logger = get_logger("auth.crypto")

_lock = threading.Lock()
_initialized = False


def initialize_crypto_backend() -> None:
    """Initialise crypto backends. Safe to call any number of times."""
    global _initialized

    if _initialized:
        return

    with _lock:
        if _initialized:
            return

        sodium_init()
        _initialized = True

        logger.info(
            "Crypto backend initialized",
            rsa_backend=RSAKey.__name__,
            ec_backend=ECKey.__name__
        )


def is_initialized() -> bool:
    return _initialized
