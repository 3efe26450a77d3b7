"""
Fleet template generator.

Writes one docker compose file per wallet, each with ``nodes_per_wallet``
compute node services bound to that wallet's private key.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import yaml

from ..core.exceptions import ConfigurationError
from ..core.files import write_private
from ..core.settings import FleetSettings, settings as default_settings
from ..wallets.models import Wallet
from ..wallets.provider import parse_count
from .manifest import write_manifest
from .models import ComposeFile, ManifestEntry, NodeGroup, ServiceDefinition

logger = logging.getLogger(__name__)


class FleetTemplateGenerator:
    """Materializes node groups as compose files under the nodes directory."""

    def __init__(self, settings: Optional[FleetSettings] = None):
        self.settings = settings or default_settings
        self.logger = logging.getLogger(__name__)

    def node_environment(self, wallet: Wallet) -> dict:
        """Environment every compute node of ``wallet`` runs with."""
        s = self.settings
        return {
            "RUST_LOG": s.rust_log,
            "DKN_WALLET_SECRET_KEY": wallet.private_key,
            "DKN_MODELS": s.node_models,
            "DKN_P2P_LISTEN_ADDR": s.p2p_listen_addr,
            "OLLAMA_HOST": s.ollama_host,
            "OLLAMA_PORT": s.ollama_port,
            "OLLAMA_AUTO_PULL": s.ollama_auto_pull,
        }

    def build_compose(self, group: NodeGroup) -> ComposeFile:
        """Build the compose model for one group."""
        network = self.settings.network_name
        services = {
            name: ServiceDefinition(
                image=self.settings.node_image,
                environment=self.node_environment(group.wallet),
                networks={network: None},
                restart=self.settings.restart_policy,
            )
            for name in group.service_names
        }
        return ComposeFile(services=services, networks={network: {"external": True}})

    def render(self, group: NodeGroup) -> str:
        """Serialize a group's compose file to YAML text."""
        document = self.build_compose(group).to_document()
        return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)

    def generate(
        self,
        wallets: Sequence[Wallet],
        nodes_per_wallet: Union[int, str],
        nodes_dir: Optional[Path] = None,
    ) -> List[NodeGroup]:
        """Write a compose file for every wallet.

        Inputs are validated before anything touches the filesystem. Existing
        group directories are overwritten in place; directories of wallets
        not in ``wallets`` are left alone.

        Args:
            wallets: Wallet collection, in group numbering order
            nodes_per_wallet: Compute nodes per wallet, at least 1
            nodes_dir: Parent directory of the groups, defaults to
                ``settings.nodes_dir``

        Returns:
            The node groups that were written

        Raises:
            ConfigurationError: on an invalid node count or empty wallet list
        """
        node_count = parse_count(nodes_per_wallet, "number of nodes per wallet")
        if not wallets:
            raise ConfigurationError("No wallets to generate node groups for")

        nodes_dir = Path(nodes_dir or self.settings.nodes_dir).expanduser()
        groups = [
            NodeGroup.for_wallet(wallet, index, node_count, self.settings.group_prefix)
            for index, wallet in enumerate(wallets, start=1)
        ]

        for group in groups:
            compose_path = self.write_group(group, nodes_dir)
            self.logger.info(
                "Wallet %s -> %d node(s) configured at %s",
                group.wallet.address, group.node_count, compose_path.parent,
            )

        write_manifest(
            nodes_dir / self.settings.manifest_filename,
            [
                ManifestEntry(
                    directory=g.directory_name,
                    address=g.wallet.address,
                    node_count=g.node_count,
                )
                for g in groups
            ],
        )
        return groups

    def write_group(self, group: NodeGroup, nodes_dir: Path) -> Path:
        """Write one group's compose file, replacing any previous version."""
        group_dir = Path(nodes_dir) / group.directory_name
        group_dir.mkdir(parents=True, exist_ok=True)

        compose_path = group_dir / self.settings.compose_filename
        tmp_path = compose_path.with_suffix(compose_path.suffix + ".tmp")
        write_private(tmp_path, self.render(group))
        tmp_path.replace(compose_path)
        return compose_path
