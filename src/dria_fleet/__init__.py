"""
dria-fleet: provision and manage wallet-bound Dria compute nodes on one host.
"""

__version__ = "0.1.0"
