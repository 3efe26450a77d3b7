"""
Wallet provider: generate fresh key pairs or import a wallet collection file.

Both modes return a non-empty, ordered list of ``Wallet`` records. Generation
order is kept because it decides group numbering in the compose files.
"""

import json
import logging
import secrets
from pathlib import Path
from typing import Any, List, Optional, Union

from eth_account import Account
from pydantic import ValidationError

from ..core.exceptions import ConfigurationError, FormatError, NotFoundError
from ..core.files import write_private
from ..core.settings import FleetSettings, settings as default_settings
from .models import Wallet

logger = logging.getLogger(__name__)


def parse_count(value: Any, what: str = "count") -> int:
    """Coerce ``value`` to a positive integer.

    Accepts ints and digit-only strings, which is what an operator types at a
    prompt.

    Raises:
        ConfigurationError: if the value is not a positive integer
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid {what}: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ConfigurationError(f"Invalid {what}: {value!r} is not a whole number")
        value = int(text)
    if not isinstance(value, int):
        raise ConfigurationError(f"Invalid {what}: {value!r} is not a whole number")
    if value < 1:
        raise ConfigurationError(f"Invalid {what}: must be at least 1, got {value}")
    return value


class WalletProvider:
    """Produces the wallet collection a fleet is built from."""

    def __init__(self, settings: Optional[FleetSettings] = None):
        self.settings = settings or default_settings
        self.logger = logging.getLogger(__name__)

    def generate(self, count: Union[int, str], output_path: Optional[Path] = None) -> List[Wallet]:
        """Create ``count`` new wallets and persist them.

        Args:
            count: Number of wallets, a positive integer
            output_path: Where to write the wallet file, defaults to
                ``settings.wallet_file``

        Returns:
            Wallets in generation order
        """
        count = parse_count(count, "wallet count")
        output_path = Path(output_path or self.settings.wallet_file).expanduser()

        wallets = [self._create_wallet() for _ in range(count)]
        self.save(wallets, output_path)

        self.logger.info("Generated %d wallet(s) saved in %s", count, output_path)
        return wallets

    def load(self, path: Union[str, Path]) -> List[Wallet]:
        """Load and validate an existing wallet collection file.

        Only the shape is checked: a JSON array of objects carrying string
        ``address`` and ``private_key`` fields. Keys are not verified.

        Raises:
            NotFoundError: if ``path`` is not a file
            FormatError: if the content is not a well-formed wallet collection
        """
        wallet_path = Path(path).expanduser()
        if not wallet_path.is_file():
            raise NotFoundError(f"File not found: {wallet_path}")

        try:
            with open(wallet_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid JSON file format: {wallet_path} ({e})") from e
        except UnicodeDecodeError as e:
            raise FormatError(f"Wallet file is not text: {wallet_path}") from e

        wallets = self._parse_records(data, wallet_path)
        self.logger.info("Loaded %d wallet(s) from %s", len(wallets), wallet_path)
        return wallets

    def save(self, wallets: List[Wallet], path: Path) -> Path:
        """Write wallets as an indented JSON array."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        write_private(path, json.dumps([w.to_record() for w in wallets], indent=2))
        return path

    def _create_wallet(self) -> Wallet:
        acct = Account.create(secrets.token_hex(32))
        key = acct.key.hex()
        if not key.startswith("0x"):
            key = "0x" + key
        return Wallet(address=acct.address, private_key=key)

    def _parse_records(self, data: Any, source: Path) -> List[Wallet]:
        if not isinstance(data, list):
            raise FormatError(f"{source}: expected a JSON array of wallet records")
        if not data:
            raise FormatError(f"{source}: wallet collection is empty")

        wallets: List[Wallet] = []
        seen = set()
        for position, record in enumerate(data, start=1):
            if not isinstance(record, dict):
                raise FormatError(f"{source}: record {position} is not an object")
            try:
                wallet = Wallet(**record) if _has_required_keys(record) else None
            except ValidationError as e:
                raise FormatError(f"{source}: record {position} is invalid: {e}") from e
            if wallet is None:
                raise FormatError(
                    f"{source}: record {position} needs 'address' and 'private_key' fields"
                )
            if wallet.address in seen:
                raise FormatError(f"{source}: duplicate address {wallet.address}")
            seen.add(wallet.address)
            wallets.append(wallet)
        return wallets


def _has_required_keys(record: dict) -> bool:
    return "address" in record and "private_key" in record
