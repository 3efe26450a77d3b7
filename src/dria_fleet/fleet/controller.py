"""
Fleet controller: start, restart or stream logs of every node group.

Groups are handled one after another and independently. A failure in one
group is recorded and logged, then the loop moves on; nothing is rolled back
across groups.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..core.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    FleetError,
    NotFoundError,
)
from ..core.runner import CommandRunner
from ..core.settings import FleetSettings, settings as default_settings
from .manifest import discover_groups, read_manifest, report_drift

logger = logging.getLogger(__name__)

VERBS = ("start", "restart", "logs")


def detect_compose_command(runner: CommandRunner) -> List[str]:
    """Return the compose invocation available on this host.

    Prefers the standalone ``docker-compose`` binary and falls back to the
    ``docker compose`` plugin.

    Raises:
        NotFoundError: if neither is available
    """
    if runner.which("docker-compose"):
        return ["docker-compose"]
    if runner.which("docker"):
        version = runner.run(["docker", "compose", "version"])
        if version.ok:
            return ["docker", "compose"]
    raise NotFoundError("Neither docker-compose nor docker compose found!")


@dataclass
class GroupResult:
    """Outcome of one verb on one group."""

    directory: str
    ok: bool
    error: Optional[str] = None


@dataclass
class FleetReport:
    """Outcome of one verb across the fleet."""

    verb: str
    results: List[GroupResult] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.results

    @property
    def succeeded(self) -> List[GroupResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[GroupResult]:
        return [r for r in self.results if not r.ok]


class FleetController:
    """Dispatches lifecycle verbs to every discovered node group."""

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        settings: Optional[FleetSettings] = None,
        nodes_dir: Optional[Path] = None,
    ):
        self.runner = runner or CommandRunner()
        self.settings = settings or default_settings
        self.nodes_dir = Path(nodes_dir or self.settings.nodes_dir).expanduser()
        self.logger = logging.getLogger(__name__)
        self._compose_cmd: Optional[List[str]] = None

        self._handlers: Dict[str, Callable[[Path], None]] = {
            "start": self._start_group,
            "restart": self._restart_group,
            "logs": self._logs_group,
        }

    @property
    def compose_cmd(self) -> List[str]:
        if self._compose_cmd is None:
            self._compose_cmd = detect_compose_command(self.runner)
        return self._compose_cmd

    def discover(self) -> List[Path]:
        """Group directories on disk, by naming convention only."""
        groups = discover_groups(self.nodes_dir, self.settings.group_prefix)
        report_drift(groups, read_manifest(self.nodes_dir / self.settings.manifest_filename))
        return groups

    def dispatch(self, verb: Optional[str]) -> FleetReport:
        """Run ``verb`` on every group.

        Raises:
            ConfigurationError: on an unknown or missing verb
            NotFoundError: if no compose command is installed
        """
        if verb not in self._handlers:
            raise ConfigurationError(
                f"Unknown command {verb!r}, expected one of: {', '.join(VERBS)}"
            )

        report = FleetReport(verb=verb)
        groups = self.discover()
        if not groups:
            self.logger.warning(
                "No node groups (%s*) found in %s, nothing to do",
                self.settings.group_prefix, self.nodes_dir,
            )
            return report

        # Resolve before the loop so a missing runtime fails once, not per group
        compose = self.compose_cmd
        self.logger.debug("Using compose command: %s", " ".join(compose))

        handler = self._handlers[verb]
        for group_dir in groups:
            try:
                handler(group_dir)
            except FleetError as e:
                self.logger.error("%s failed for %s: %s", verb, group_dir.name, e)
                report.results.append(GroupResult(group_dir.name, ok=False, error=str(e)))
            else:
                report.results.append(GroupResult(group_dir.name, ok=True))

        self.logger.info(
            "%s: %d/%d group(s) succeeded", verb, len(report.succeeded), len(report.results)
        )
        return report

    def start(self) -> FleetReport:
        self.logger.info("Starting all Dria nodes...")
        return self.dispatch("start")

    def restart(self) -> FleetReport:
        self.logger.info("Restarting all Dria nodes...")
        return self.dispatch("restart")

    def logs(self) -> FleetReport:
        self.logger.info("Streaming logs for all Dria nodes... (Press Ctrl+C to stop)")
        return self.dispatch("logs")

    def _require_compose_file(self, group_dir: Path) -> Path:
        compose_file = group_dir / self.settings.compose_filename
        if not compose_file.is_file():
            raise NotFoundError(f"Missing {self.settings.compose_filename} in {group_dir}")
        return compose_file

    def _compose(self, group_dir: Path, *args: str) -> None:
        result = self.runner.run(self.compose_cmd + list(args), cwd=group_dir)
        if not result.ok:
            raise ExternalServiceError(
                f"'{' '.join(args)}' exited with code {result.returncode}", result.output
            )

    def _start_group(self, group_dir: Path) -> None:
        self._require_compose_file(group_dir)
        self._compose(group_dir, "up", "-d", "--build")
        self.logger.info("Started %s", group_dir.name)

    def _restart_group(self, group_dir: Path) -> None:
        self._require_compose_file(group_dir)
        self._compose(group_dir, "down")
        self._compose(group_dir, "up", "-d", "--build")
        self.logger.info("Restarted %s", group_dir.name)

    def _logs_group(self, group_dir: Path) -> None:
        self._require_compose_file(group_dir)
        print(f"--- Logs for {group_dir.name} ---", flush=True)
        result = self.runner.run(self.compose_cmd + ["logs", "-f"], cwd=group_dir, capture=False)
        if not result.ok:
            raise ExternalServiceError(f"'logs -f' exited with code {result.returncode}")
