"""
Pytest configuration and shared fixtures for dria-fleet tests.

This file is automatically loaded by pytest and provides shared fixtures
that can be used across all test files.
"""

import pytest
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional
from unittest.mock import MagicMock

# Add src to path so tests can import the package without installing it
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dria_fleet.core.runner import CommandResult
from dria_fleet.core.settings import FleetSettings
from dria_fleet.wallets.models import Wallet


class FakeRunner:
    """Stand-in for CommandRunner that never starts a process.

    ``installed`` is the set of executables ``which`` reports as present.
    ``responder`` decides the result of each ``run`` call; by default every
    command succeeds with empty output.
    """

    def __init__(self, installed=(), responder: Optional[Callable] = None):
        self.installed = set(installed)
        self.responder = responder
        self.calls: List[Dict] = []
        self.spawned: List[Dict] = []
        self.spawn_exit_code: Optional[int] = None

    def which(self, executable):
        return f"/usr/bin/{executable}" if executable in self.installed else None

    def run(self, command, cwd=None, capture=True, timeout=None):
        self.calls.append({"command": list(command), "cwd": cwd, "capture": capture})
        if self.responder is not None:
            result = self.responder(list(command), cwd)
            if result is not None:
                return result
        return CommandResult(command=list(command), returncode=0)

    def spawn(self, command, cwd, log_file):
        self.spawned.append({"command": list(command), "cwd": cwd})
        process = MagicMock()
        process.pid = 4242
        process.returncode = self.spawn_exit_code
        process.poll.return_value = self.spawn_exit_code
        return process

    def commands(self) -> List[List[str]]:
        return [c["command"] for c in self.calls]


def result(command, returncode=0, stdout="", stderr=""):
    return CommandResult(command=command, returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_runner():
    return FakeRunner(installed={"docker-compose", "docker"})


@pytest.fixture
def settings(tmp_path):
    """Settings pointing every path into a temporary directory."""
    return FleetSettings(
        nodes_dir=tmp_path / "dria-nodes",
        wallet_file=tmp_path / "crypto-generator" / "wallets.json",
        inference_dir=tmp_path / "vikey-inference",
        inference_startup_wait=0,
        vikey_api_key=None,
    )


@pytest.fixture
def wallets():
    return [
        Wallet(address="0x1111111111111111111111111111111111111111", private_key="0x" + "a1" * 32),
        Wallet(address="0x2222222222222222222222222222222222222222", private_key="0x" + "b2" * 32),
    ]


@pytest.fixture
def make_runner():
    """Factory for FakeRunner instances with custom tools and responses."""
    return FakeRunner


@pytest.fixture
def make_result():
    return result
