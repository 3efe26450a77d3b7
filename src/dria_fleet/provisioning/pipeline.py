"""
End-to-end host setup.

Installer -> inference service -> wallets -> network -> compose files.
Any ``FleetError`` raised by a step propagates and ends the run; only the
inference smoke test is allowed to fail softly.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..core.exceptions import ConfigurationError
from ..core.runner import CommandRunner
from ..core.settings import FleetSettings, settings as default_settings
from ..fleet.generator import FleetTemplateGenerator
from ..fleet.models import NodeGroup
from ..fleet.network import ensure_network
from ..wallets.models import Wallet
from ..wallets.provider import WalletProvider, parse_count
from .inference import InferenceServiceLauncher, require_api_key
from .installer import DependencyInstaller

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


@dataclass
class SetupOptions:
    """Operator inputs; anything left as None is asked for interactively."""

    api_key: Optional[str] = None
    generate_count: Optional[Union[int, str]] = None
    wallet_file: Optional[Path] = None
    nodes_per_wallet: Optional[Union[int, str]] = None
    nodes_dir: Optional[Path] = None
    skip_install: bool = False
    skip_inference: bool = False


@dataclass
class SetupResult:
    wallets: List[Wallet] = field(default_factory=list)
    groups: List[NodeGroup] = field(default_factory=list)
    installed: List[str] = field(default_factory=list)
    smoke_test_ok: Optional[bool] = None
    network_created: bool = False


class SetupPipeline:
    """Provisions a host for a wallet-bound compute node fleet."""

    def __init__(
        self,
        options: SetupOptions,
        runner: Optional[CommandRunner] = None,
        settings: Optional[FleetSettings] = None,
        prompt: Prompt = input,
    ):
        self.options = options
        self.runner = runner or CommandRunner()
        self.settings = settings or default_settings
        self.prompt = prompt
        self.logger = logging.getLogger(__name__)

    def run(self) -> SetupResult:
        result = SetupResult()
        self.logger.info("Starting setup...")

        # Validate everything known up front before anything slow happens
        opts = self.options
        if opts.generate_count is not None:
            opts.generate_count = parse_count(opts.generate_count, "wallet count")
        if opts.nodes_per_wallet is not None:
            opts.nodes_per_wallet = parse_count(
                opts.nodes_per_wallet, "number of nodes per wallet"
            )
        if opts.generate_count is not None and opts.wallet_file is not None:
            raise ConfigurationError("Choose either wallet generation or a wallet file, not both")

        api_key = None
        if not self.options.skip_inference:
            api_key = require_api_key(
                self.options.api_key
                or self.settings.vikey_api_key
                or self.prompt("Enter your VIKEY_API_KEY: ")
            )

        if not self.options.skip_install:
            installer = DependencyInstaller(runner=self.runner)
            result.installed = installer.install()

        if api_key is not None:
            launcher = InferenceServiceLauncher(
                api_key, runner=self.runner, settings=self.settings
            )
            result.smoke_test_ok = launcher.launch()

        result.wallets = self.resolve_wallets()

        node_count = parse_count(
            self.options.nodes_per_wallet
            if self.options.nodes_per_wallet is not None
            else self.prompt("How many nodes should run per wallet? "),
            "number of nodes per wallet",
        )

        result.network_created = ensure_network(self.runner, self.settings)

        generator = FleetTemplateGenerator(self.settings)
        result.groups = generator.generate(
            result.wallets, node_count, nodes_dir=self.options.nodes_dir
        )

        self.logger.info("Dria nodes setup completed!")
        self.logger.info("Use 'dria-fleet manage start' to run all nodes")
        self.logger.info("Use 'dria-fleet manage restart' to restart all nodes")
        return result

    def resolve_wallets(self) -> List[Wallet]:
        """Generate or import wallets according to the options, prompting if unset."""
        provider = WalletProvider(self.settings)
        opts = self.options

        if opts.generate_count is not None and opts.wallet_file is not None:
            raise ConfigurationError("Choose either wallet generation or a wallet file, not both")
        if opts.generate_count is not None:
            return provider.generate(opts.generate_count)
        if opts.wallet_file is not None:
            return provider.load(opts.wallet_file)

        choice = self.prompt(
            "Wallet setup options:\n"
            "1) Generate new wallet(s)\n"
            "2) Use existing wallet.json\n"
            "Choose option [1/2]: "
        ).strip()
        if choice == "1":
            count = self.prompt("How many wallets do you want to generate? ")
            return provider.generate(count)
        if choice == "2":
            path = self.prompt("Enter path to your wallet.json: ").strip()
            return provider.load(Path(path))
        raise ConfigurationError(f"Invalid option: {choice!r}")
