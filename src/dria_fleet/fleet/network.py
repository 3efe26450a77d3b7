"""
Shared external docker network used by every node group.
"""

import logging
from typing import Optional

from ..core.exceptions import ExternalServiceError
from ..core.runner import CommandRunner
from ..core.settings import FleetSettings, settings as default_settings

logger = logging.getLogger(__name__)


def ensure_network(
    runner: CommandRunner,
    settings: Optional[FleetSettings] = None,
) -> bool:
    """Create the fleet network unless a network with that exact name exists.

    Returns:
        True if the network was created, False if it already existed

    Raises:
        ExternalServiceError: if docker cannot list or create networks
    """
    settings = settings or default_settings
    name = settings.network_name

    logger.info("Ensuring docker network '%s' exists...", name)
    listing = runner.run(["docker", "network", "ls", "--format", "{{.Name}}"])
    if not listing.ok:
        raise ExternalServiceError("Failed to list docker networks", listing.output)

    existing = {line.strip() for line in listing.stdout.splitlines() if line.strip()}
    if name in existing:
        logger.info("Docker network '%s' already exists.", name)
        return False

    created = runner.run(
        ["docker", "network", "create", f"--subnet={settings.network_subnet}", name]
    )
    if not created.ok:
        raise ExternalServiceError(f"Failed to create docker network '{name}'", created.output)

    logger.info("Docker network '%s' created (subnet %s).", name, settings.network_subnet)
    return True
