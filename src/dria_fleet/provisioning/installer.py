"""
System dependency installer.

Installs whatever tools the host is missing through apt. Tools already on
PATH are left alone, so running it twice is a no-op the second time.
"""

import getpass
import logging
import os
from typing import List, Optional, Sequence, Tuple

from ..core.exceptions import ExternalServiceError
from ..core.runner import CommandRunner

logger = logging.getLogger(__name__)

# (apt package, command that proves it is installed)
BASIC_TOOLS: List[Tuple[str, str]] = [
    ("curl", "curl"),
    ("git", "git"),
    ("nano", "nano"),
    ("jq", "jq"),
    ("vim", "vim"),
]

DOCKER_PACKAGES = ["docker", "docker-compose"]


class DependencyInstaller:
    """Installs missing basic tools and the docker runtime."""

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        tools: Sequence[Tuple[str, str]] = BASIC_TOOLS,
        docker_packages: Sequence[str] = DOCKER_PACKAGES,
    ):
        self.runner = runner or CommandRunner()
        self.tools = list(tools)
        self.docker_packages = list(docker_packages)
        self.logger = logging.getLogger(__name__)

    def missing_tools(self) -> List[str]:
        """Packages whose command is not on PATH."""
        missing = []
        for package, command in self.tools:
            if self.runner.which(command):
                self.logger.info("%s already installed.", package)
            else:
                missing.append(package)
        return missing

    def install(self) -> List[str]:
        """Install every missing dependency.

        Returns:
            Names of the packages that were installed, empty if none

        Raises:
            ExternalServiceError: if apt fails
        """
        self.logger.info(
            "Checking dependencies (%s, docker)...",
            ", ".join(package for package, _ in self.tools),
        )
        installed: List[str] = []

        missing = self.missing_tools()
        if missing:
            self.logger.info("Running apt update once...")
            self._sudo(["apt", "update", "-y"], "apt update failed")
            for package in missing:
                self.logger.info("Installing %s...", package)
                self._sudo(["apt", "install", "-y", package], f"Failed to install {package}")
                installed.append(package)

        if self.runner.which("docker"):
            self.logger.info("Docker already installed.")
        else:
            installed.extend(self.install_docker())

        self.logger.info("All dependencies are ready!")
        return installed

    def install_docker(self) -> List[str]:
        self.logger.info("Installing Docker...")
        self._sudo(
            ["apt-get", "install", "-y"] + self.docker_packages,
            "Failed to install docker",
        )

        user = os.environ.get("USER") or getpass.getuser()
        result = self.runner.run(["sudo", "usermod", "-aG", "docker", user])
        if not result.ok:
            self.logger.warning("Could not add %s to the docker group: %s", user, result.output)
        self.logger.info("If this is your first Docker install, log out/in to apply group changes.")
        return list(self.docker_packages)

    def _sudo(self, command: List[str], message: str) -> None:
        result = self.runner.run(["sudo"] + command)
        if not result.ok:
            raise ExternalServiceError(message, result.output)
