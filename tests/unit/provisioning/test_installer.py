"""
DependencyInstaller Unit Tests
"""

import pytest

from dria_fleet.core.exceptions import ExternalServiceError
from dria_fleet.provisioning.installer import BASIC_TOOLS, DependencyInstaller

ALL_TOOLS = {command for _, command in BASIC_TOOLS} | {"docker"}


class TestDependencyInstaller:

    def test_noop_when_everything_present(self, make_runner):
        runner = make_runner(installed=ALL_TOOLS)

        assert DependencyInstaller(runner=runner).install() == []
        assert runner.calls == []

    def test_updates_once_then_installs_missing(self, make_runner):
        runner = make_runner(installed=ALL_TOOLS - {"jq", "vim"})

        installed = DependencyInstaller(runner=runner).install()

        assert installed == ["jq", "vim"]
        assert runner.commands() == [
            ["sudo", "apt", "update", "-y"],
            ["sudo", "apt", "install", "-y", "jq"],
            ["sudo", "apt", "install", "-y", "vim"],
        ]

    def test_installs_docker_and_joins_group(self, make_runner, monkeypatch):
        monkeypatch.setenv("USER", "operator")
        runner = make_runner(installed=ALL_TOOLS - {"docker"})

        installed = DependencyInstaller(runner=runner).install()

        assert installed == ["docker", "docker-compose"]
        assert runner.commands() == [
            ["sudo", "apt-get", "install", "-y", "docker", "docker-compose"],
            ["sudo", "usermod", "-aG", "docker", "operator"],
        ]

    def test_usermod_failure_is_not_fatal(self, make_runner, make_result, monkeypatch):
        monkeypatch.setenv("USER", "operator")
        runner = make_runner(
            installed=ALL_TOOLS - {"docker"},
            responder=lambda cmd, cwd: make_result(cmd, returncode=1) if "usermod" in cmd else None,
        )

        assert DependencyInstaller(runner=runner).install() == ["docker", "docker-compose"]

    def test_apt_failure_is_fatal(self, make_runner, make_result):
        runner = make_runner(
            installed=ALL_TOOLS - {"git"},
            responder=lambda cmd, cwd: make_result(cmd, returncode=100, stderr="E: Unable to locate package git")
            if "install" in cmd else None,
        )

        with pytest.raises(ExternalServiceError, match="Unable to locate package"):
            DependencyInstaller(runner=runner).install()
