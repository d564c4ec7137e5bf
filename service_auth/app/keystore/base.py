"""
Key store contract consumed by the token validator.
"""

from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel


class KeyRecord(BaseModel):
    """A stored verification key. ``key`` holds a JSON-encoded JWK."""
    key: str
    kid: Optional[str] = None


@runtime_checkable
class KeyStore(Protocol):
    """Read-only lookup of verification keys by key identifier."""

    async def get_key_by_id(self, kid: str) -> Optional[KeyRecord]:
        """Return the key stored under ``kid`` or ``None`` when there is none."""
        ...
