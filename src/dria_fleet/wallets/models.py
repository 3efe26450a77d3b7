"""
Wallet model.

A wallet is immutable once created; its address identifies one node group.
"""

import re
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Addresses become directory names, so they must be one plain path component
SAFE_ADDRESS = re.compile(r"^[A-Za-z0-9_.-]+$")


class Wallet(BaseModel):
    """An Ethereum address and its private signing key."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    address: str = Field(..., min_length=1, description="Public wallet address")
    private_key: str = Field(..., min_length=1, description="Hex encoded private key")

    @field_validator("address", "private_key", mode="before")
    @classmethod
    def require_string(cls, v):
        """Reject numbers and other scalars that pydantic would otherwise coerce."""
        if not isinstance(v, str):
            raise ValueError("must be a string")
        return v.strip()

    @field_validator("address")
    @classmethod
    def safe_path_component(cls, v):
        if not SAFE_ADDRESS.fullmatch(v) or v in (".", ".."):
            raise ValueError("address may only contain letters, digits, '.', '_' and '-'")
        return v

    def to_record(self) -> Dict[str, Any]:
        """Convert to the on-disk wallet file record."""
        return {"address": self.address, "private_key": self.private_key}

    def __repr__(self) -> str:
        # Never print the key
        return f"Wallet(address={self.address!r})"

    __str__ = __repr__
