"""
Subprocess execution for external tools (apt, git, docker, compose).

Every call takes an explicit working directory instead of relying on the
process-wide cwd. Components receive a ``CommandRunner`` instance so tests
can substitute a fake.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional, Union

from .exceptions import NotFoundError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined output, stderr first since that is where tools complain."""
        return "\n".join(part for part in (self.stderr, self.stdout) if part)


class CommandRunner:
    """Runs external commands synchronously."""

    def which(self, executable: str) -> Optional[str]:
        """Return the full path of ``executable`` if it is on PATH."""
        return shutil.which(executable)

    def run(
        self,
        command: List[str],
        cwd: Optional[PathLike] = None,
        capture: bool = True,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        """Run a command and wait for it.

        Args:
            command: Argument vector, never a shell string
            cwd: Working directory for the child process only
            capture: Capture stdout/stderr; when False the child writes
                straight to the terminal (used for streaming logs)
            timeout: Seconds before the child is killed, None waits forever

        Returns:
            CommandResult with the exit code and captured output

        Raises:
            NotFoundError: if the executable or working directory is missing
        """
        logger.debug("Running %s (cwd=%s)", " ".join(command), cwd or ".")
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd) if cwd else None,
                capture_output=capture,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise NotFoundError(f"Cannot run {command[0]}: {e}") from e

        return CommandResult(
            command=list(command),
            returncode=completed.returncode,
            stdout=(completed.stdout or "") if capture else "",
            stderr=(completed.stderr or "") if capture else "",
        )

    def spawn(self, command: List[str], cwd: PathLike, log_file: IO) -> subprocess.Popen:
        """Start a long-running command detached from this process.

        The child gets its own session so it survives the CLI exiting, and
        both of its output streams go to ``log_file``.
        """
        logger.debug("Spawning %s (cwd=%s)", " ".join(command), cwd)
        try:
            return subprocess.Popen(
                command,
                cwd=str(cwd),
                stdout=log_file,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise NotFoundError(f"Cannot start {command[0]}: {e}") from e
