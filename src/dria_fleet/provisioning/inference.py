"""
Local inference service launcher.

Fetches the Vikey inference release, writes its ``.env``, starts the binary
in the background and smoke-tests the remote completion API with the same
key. The smoke test only reports; a failure never stops setup.
"""

import logging
import stat
import time
from pathlib import Path
from typing import Any, Optional

import requests

from ..core.exceptions import ConfigurationError, ExternalServiceError, NotFoundError
from ..core.files import write_private
from ..core.runner import CommandRunner
from ..core.settings import FleetSettings, settings as default_settings

logger = logging.getLogger(__name__)


def require_api_key(api_key: Optional[str]) -> str:
    """Return the stripped key or fail if it is empty."""
    key = (api_key or "").strip()
    if not key:
        raise ConfigurationError("VIKEY_API_KEY cannot be empty. Aborting.")
    return key


class InferenceServiceLauncher:
    """Provisions and starts the local inference service."""

    def __init__(
        self,
        api_key: str,
        runner: Optional[CommandRunner] = None,
        settings: Optional[FleetSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = require_api_key(api_key)
        self.runner = runner or CommandRunner()
        self.settings = settings or default_settings
        self.session = session or requests.Session()
        self.install_dir = Path(self.settings.inference_dir).expanduser()
        self.logger = logging.getLogger(__name__)

    @property
    def binary_path(self) -> Path:
        return self.install_dir / self.settings.inference_binary

    @property
    def log_path(self) -> Path:
        return self.install_dir / self.settings.inference_log

    def ensure_checkout(self) -> bool:
        """Clone the inference repository unless it is already there.

        Returns:
            True if a clone was made
        """
        if self.install_dir.is_dir():
            self.logger.info("Inference service already present at %s", self.install_dir)
            return False

        self.install_dir.parent.mkdir(parents=True, exist_ok=True)
        result = self.runner.run(
            ["git", "clone", self.settings.inference_repo_url, str(self.install_dir)],
            cwd=self.install_dir.parent,
        )
        if not result.ok:
            raise ExternalServiceError(
                f"Failed to clone {self.settings.inference_repo_url}", result.output
            )
        return True

    def write_env(self) -> Path:
        """Write the service's ``.env`` configuration file."""
        s = self.settings
        env_path = self.install_dir / ".env"
        lines = [
            "# Vikey Inference Configuration",
            f"NODE_PORT={s.inference_port}",
            f"DEFAULT_MODEL={s.inference_default_model}",
            f"VIKEY_API_KEY={self.api_key}",
        ]
        return write_private(env_path, "\n".join(lines) + "\n")

    def make_executable(self) -> None:
        binary = self.binary_path
        if not binary.is_file():
            raise NotFoundError(f"Inference binary not found: {binary}")
        mode = binary.stat().st_mode
        binary.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    def start(self) -> Optional[int]:
        """Start the binary detached, appending its output to the log file.

        A binary that exits during the startup wait is reported, not raised:
        the usual cause is an instance from an earlier run still holding the
        port, and nothing later in setup depends on this process.

        Returns:
            PID of the started process, or None if it already exited
        """
        self.make_executable()
        with open(self.log_path, "ab") as log_file:
            process = self.runner.spawn(
                [str(self.binary_path)], cwd=self.install_dir, log_file=log_file
            )

        time.sleep(self.settings.inference_startup_wait)
        if process.poll() is not None:
            self.logger.error(
                "Inference service exited with code %s, see %s",
                process.returncode, self.log_path,
            )
            return None

        self.logger.info("Vikey started! PID %s (logs: %s)", process.pid, self.log_path)
        return process.pid

    def smoke_test(self) -> bool:
        """Send a tiny chat completion to the remote API.

        Returns:
            True if the API answered with a chat completion
        """
        s = self.settings
        payload = {
            "model": s.smoke_test_model,
            "max_tokens": 10,
            "n": 1,
            "stream": False,
            "messages": [{"role": "user", "content": "hi"}],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        self.logger.info("Testing Vikey with API...")
        try:
            response = self.session.post(
                s.vikey_api_url, json=payload, headers=headers, timeout=s.smoke_test_timeout
            )
        except requests.RequestException as e:
            self.logger.error("Vikey API test failed! Request error: %s", e)
            return False

        body = _json_or_text(response)
        if isinstance(body, dict) and body.get("object") == "chat.completion":
            self.logger.info("Vikey API test successful!")
            return True

        self.logger.error("Vikey API test failed! (HTTP %s)", response.status_code)
        self.logger.error("Response was: %s", response.text)
        return False

    def launch(self) -> bool:
        """Clone, configure, start and smoke-test.

        Returns:
            Result of the smoke test
        """
        self.logger.info("Setting up Vikey...")
        self.ensure_checkout()
        self.write_env()
        self.start()
        return self.smoke_test()


def _json_or_text(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
