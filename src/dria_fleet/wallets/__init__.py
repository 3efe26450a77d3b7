"""
Wallet generation and import.
"""

from .models import Wallet
from .provider import WalletProvider

__all__ = ["Wallet", "WalletProvider"]
