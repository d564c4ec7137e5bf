"""
In-memory key store.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from shared.errors import KeyResolutionError
from shared.logging import get_logger
from .base import KeyRecord


class InMemoryKeyStore:
    """Dict-backed key store, mostly for local runs and tests."""

    def __init__(self, keys: Optional[Dict[str, Union[str, Dict[str, Any]]]] = None):
        self.logger = get_logger("auth.keystore")
        self._records: Dict[str, KeyRecord] = {}
        for kid, jwk in (keys or {}).items():
            self.add_key(kid, jwk)

    def add_key(self, kid: str, jwk: Union[str, Dict[str, Any]]) -> KeyRecord:
        """Store ``jwk`` (a dict or an already serialised JSON string) under ``kid``."""
        key = jwk if isinstance(jwk, str) else json.dumps(jwk)
        record = KeyRecord(kid=kid, key=key)
        self._records[kid] = record
        return record

    def remove_key(self, kid: str) -> None:
        self._records.pop(kid, None)

    async def get_key_by_id(self, kid: str) -> Optional[KeyRecord]:
        return self._records.get(kid)

    def __len__(self) -> int:
        return len(self._records)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "InMemoryKeyStore":
        """
        Load keys from a JSON file.

        Accepts either a JWKS document (``{"keys": [{"kid": ..., ...}]}``) or a
        plain ``{kid: jwk}`` mapping.
        """
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)

        if not isinstance(data, dict):
            raise KeyResolutionError(
                "Key file must contain a JSON object",
                details={"path": str(path)}
            )

        store = cls()
        if isinstance(data.get("keys"), list):
            for jwk in data["keys"]:
                kid = jwk.get("kid")
                if not kid:
                    store.logger.warning("Skipping key without kid", path=str(path))
                    continue
                store.add_key(kid, jwk)
        else:
            for kid, jwk in data.items():
                store.add_key(kid, jwk)

        store.logger.info("Loaded keys from file", path=str(path), keys_count=len(store))
        return store
