"""
Configuration settings for dria-fleet.

Every value can be overridden with a ``DRIA_``-prefixed environment variable
or a line in a local ``.env`` file, e.g. ``DRIA_NODES_DIR=/srv/dria``.
"""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class FleetSettings(BaseSettings):
    """Host provisioning and fleet configuration loaded from environment variables."""

    # Credentials
    vikey_api_key: Optional[str] = None

    # Fleet layout on disk
    nodes_dir: Path = Path.home() / "dria-nodes"
    group_prefix: str = "dria-node-"
    compose_filename: str = "docker-compose.yml"
    manifest_filename: str = "fleet-manifest.json"

    # Wallet artifact written in generate mode
    wallet_file: Path = Path.home() / "crypto-generator" / "wallets.json"

    # Shared docker network
    network_name: str = "dria-nodes"
    network_subnet: str = "10.172.0.0/16"

    # Compute node container
    node_image: str = "firstbatch/dkn-compute-node:latest"
    node_models: str = (
        "llama3.3:70b-instruct-q4_K_M,"
        "llama3.1:8b-instruct-q4_K_M,"
        "llama3.2:1b-instruct-q4_K_M"
    )
    rust_log: str = "${RUST_LOG:-none,dkn_compute=info}"
    p2p_listen_addr: str = "/ip4/0.0.0.0/tcp/4001"
    ollama_host: str = "http://10.172.1.1"
    ollama_port: int = 14441
    ollama_auto_pull: bool = True
    restart_policy: str = "on-failure"

    # Local inference service
    inference_repo_url: str = "https://github.com/direkturcrypto/vikey-inference"
    inference_dir: Path = Path.home() / "vikey-inference"
    inference_binary: str = "vikey-inference-linux"
    inference_log: str = "vikey.log"
    inference_port: int = 14441
    inference_default_model: str = "llama-3.3-70b-instruct"
    inference_startup_wait: float = 3.0

    # Remote API smoke test
    vikey_api_url: str = "https://api.vikey.ai/v1/chat/completions"
    smoke_test_model: str = "gemma-3-27b-instruct"
    smoke_test_timeout: int = 30

    class Config:
        env_file = ".env"
        env_prefix = "DRIA_"
        case_sensitive = False


# Global settings instance
settings = FleetSettings()
