"""
Key store package.

Verification keys for asymmetric tokens are looked up by ``kid`` through a
single async method, ``get_key_by_id``. The validator only depends on that
contract so the backing store (in-memory, file, JWKS endpoint) can be swapped
through configuration.

- base: the ``KeyStore`` protocol and the ``KeyRecord`` model.
- memory: dict-backed store, optionally seeded from a JSON file.
- service_auth.app.jwks.client: JWKS endpoint backed store.
"""

from .base import KeyRecord, KeyStore
from .memory import InMemoryKeyStore

__all__ = ["KeyRecord", "KeyStore", "InMemoryKeyStore"]
