"""
FleetTemplateGenerator Unit Tests

These tests parse the written compose files back with PyYAML and check the
group/service structure, credentials and idempotent regeneration.
"""

import json
import stat
import pytest
import yaml

from dria_fleet.core.exceptions import ConfigurationError
from dria_fleet.fleet.generator import FleetTemplateGenerator
from dria_fleet.wallets.models import Wallet


def load_compose(path):
    with open(path) as f:
        return yaml.safe_load(f)


class TestFleetTemplateGenerator:

    @pytest.fixture
    def generator(self, settings):
        return FleetTemplateGenerator(settings)

    def test_two_wallets_three_nodes(self, generator, settings, wallets):
        groups = generator.generate(wallets, 3)

        assert len(groups) == 2
        dirs = sorted(p.name for p in settings.nodes_dir.iterdir() if p.is_dir())
        assert dirs == [f"dria-node-{w.address}" for w in wallets]

        first = load_compose(settings.nodes_dir / f"dria-node-{wallets[0].address}" / "docker-compose.yml")
        second = load_compose(settings.nodes_dir / f"dria-node-{wallets[1].address}" / "docker-compose.yml")
        assert list(first["services"]) == ["compute_node_1_1", "compute_node_1_2", "compute_node_1_3"]
        assert list(second["services"]) == ["compute_node_2_1", "compute_node_2_2", "compute_node_2_3"]

    @pytest.mark.parametrize("count", [1, 4])
    def test_every_service_carries_its_own_wallet_key(self, generator, settings, wallets, count):
        generator.generate(wallets, count)

        for w in wallets:
            doc = load_compose(settings.nodes_dir / f"dria-node-{w.address}" / "docker-compose.yml")
            assert len(doc["services"]) == count
            keys = {svc["environment"]["DKN_WALLET_SECRET_KEY"] for svc in doc["services"].values()}
            assert keys == {w.private_key}

    def test_service_definition_contents(self, generator, settings, wallets):
        generator.generate(wallets[:1], 1)
        doc = load_compose(settings.nodes_dir / f"dria-node-{wallets[0].address}" / "docker-compose.yml")

        svc = doc["services"]["compute_node_1_1"]
        assert svc["image"] == "firstbatch/dkn-compute-node:latest"
        assert svc["restart"] == "on-failure"
        assert svc["networks"] == {"dria-nodes": None}
        assert svc["environment"] == {
            "RUST_LOG": "${RUST_LOG:-none,dkn_compute=info}",
            "DKN_WALLET_SECRET_KEY": wallets[0].private_key,
            "DKN_MODELS": "llama3.3:70b-instruct-q4_K_M,llama3.1:8b-instruct-q4_K_M,llama3.2:1b-instruct-q4_K_M",
            "DKN_P2P_LISTEN_ADDR": "/ip4/0.0.0.0/tcp/4001",
            "OLLAMA_HOST": "http://10.172.1.1",
            "OLLAMA_PORT": "14441",
            "OLLAMA_AUTO_PULL": "true",
        }
        assert doc["networks"] == {"dria-nodes": {"external": True}}

    def test_hostile_key_cannot_inject_yaml(self, generator, settings):
        nasty = Wallet(address="0xabc", private_key="x\n    privileged: true\nfoo: [")
        generator.generate([nasty], 1)

        doc = load_compose(settings.nodes_dir / "dria-node-0xabc" / "docker-compose.yml")
        svc = doc["services"]["compute_node_1_1"]
        assert "privileged" not in svc
        assert svc["environment"]["DKN_WALLET_SECRET_KEY"] == nasty.private_key

    @pytest.mark.parametrize("bad", [0, -2, "zero", "", "1.5"])
    def test_invalid_node_count_writes_nothing(self, generator, settings, wallets, bad):
        with pytest.raises(ConfigurationError):
            generator.generate(wallets, bad)
        assert not settings.nodes_dir.exists()

    def test_empty_wallet_list_rejected(self, generator, settings):
        with pytest.raises(ConfigurationError):
            generator.generate([], 2)
        assert not settings.nodes_dir.exists()

    def test_regeneration_overwrites_only_its_group(self, generator, settings, wallets):
        generator.generate(wallets, 2)
        other = settings.nodes_dir / f"dria-node-{wallets[1].address}" / "docker-compose.yml"
        other.write_text("# hand edited\n")

        generator.generate(wallets[:1], 4)

        first = load_compose(settings.nodes_dir / f"dria-node-{wallets[0].address}" / "docker-compose.yml")
        assert len(first["services"]) == 4
        assert other.read_text() == "# hand edited\n"

    def test_regeneration_is_deterministic(self, generator, settings, wallets):
        path = settings.nodes_dir / f"dria-node-{wallets[0].address}" / "docker-compose.yml"
        generator.generate(wallets, 2)
        before = path.read_text()
        generator.generate(wallets, 2)
        assert path.read_text() == before
        assert not list(path.parent.glob("*.tmp"))

    def test_manifest_records_groups_across_runs(self, generator, settings, wallets):
        generator.generate(wallets[:1], 2)
        generator.generate(wallets[1:], 3)

        manifest = json.loads((settings.nodes_dir / "fleet-manifest.json").read_text())
        assert manifest["groups"] == [
            {"directory": f"dria-node-{wallets[0].address}", "address": wallets[0].address, "node_count": 2},
            {"directory": f"dria-node-{wallets[1].address}", "address": wallets[1].address, "node_count": 3},
        ]
        # private keys never end up in the manifest
        assert wallets[0].private_key not in json.dumps(manifest)

    def test_compose_files_are_owner_only(self, generator, settings, wallets):
        generator.generate(wallets, 1)

        for path in settings.nodes_dir.glob("dria-node-*/docker-compose.yml"):
            assert stat.S_IMODE(path.stat().st_mode) == 0o600
