"""
Proxy Module - upgradeable entry point

A proxy keeps a stable address while the code behind it is replaced.
"""

from fundme.proxy.registry import IMPLEMENTATION_SLOT, INITIALIZED_SLOT, ImplementationRegistry
from fundme.proxy.runtime import UpgradeableProxy
from fundme.proxy.upgradeable import UUPSUpgradeable

__all__ = [
    "IMPLEMENTATION_SLOT",
    "INITIALIZED_SLOT",
    "ImplementationRegistry",
    "UpgradeableProxy",
    "UUPSUpgradeable",
]
