"""
Fleet models with Pydantic schema validation.

A node group is everything that belongs to one wallet: one directory, one
compose file, ``node_count`` compute node services. Compose files are built
from these models and serialized through YAML, never through string
templates.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..wallets.models import Wallet


def service_name(wallet_index: int, node_index: int) -> str:
    """Name of one compute node service, unique within its group file."""
    return f"compute_node_{wallet_index}_{node_index}"


class NodeGroup(BaseModel):
    """One wallet's share of the fleet."""

    wallet: Wallet
    index: int = Field(..., ge=1, description="1-based position of the wallet in the collection")
    node_count: int = Field(..., ge=1, description="Number of compute node services")
    directory_name: str = Field(..., min_length=1)

    @classmethod
    def for_wallet(cls, wallet: Wallet, index: int, node_count: int, prefix: str) -> "NodeGroup":
        return cls(
            wallet=wallet,
            index=index,
            node_count=node_count,
            directory_name=f"{prefix}{wallet.address}",
        )

    @property
    def service_names(self) -> List[str]:
        return [service_name(self.index, n) for n in range(1, self.node_count + 1)]


class ServiceDefinition(BaseModel):
    """One compute node container as it appears under ``services:``."""

    image: str
    environment: Dict[str, str]
    networks: Dict[str, Optional[Dict[str, Any]]]
    restart: str = "on-failure"

    @field_validator("environment", mode="before")
    @classmethod
    def stringify_environment(cls, v):
        """Compose wants strings; render booleans the way compose users write them."""
        if not isinstance(v, dict):
            return v
        rendered = {}
        for key, value in v.items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            rendered[key] = str(value)
        return rendered


class ComposeFile(BaseModel):
    """A complete docker compose document for one node group."""

    services: Dict[str, ServiceDefinition]
    networks: Dict[str, Dict[str, Any]]

    def to_document(self) -> Dict[str, Any]:
        """Plain dict ready for ``yaml.safe_dump``."""
        return {
            "services": {
                name: svc.model_dump() for name, svc in self.services.items()
            },
            "networks": self.networks,
        }


class ManifestEntry(BaseModel):
    """Advisory record of one group written by the generator."""

    directory: str
    address: str
    node_count: int = Field(..., ge=1)
