"""
Implementation registry - the proxy's only persistent state

The implementation pointer and its initialization flag live in the
account's reserved ``slots`` table rather than in general-purpose
storage. Implementation code executing against the proxy's storage can
therefore never overwrite them by declaring a field with the same name.

The slot identifier is the EIP-1967 implementation slot
(keccak256("eip1967.proxy.implementation") - 1), which keeps the stored
layout recognizable to tooling that reads proxies by slot.
"""

from collections.abc import MutableMapping
from typing import Any

from fundme.kernel.errors import AlreadyInitialized, ProxyNotInitialized, ZeroAddress
from fundme.kernel.ids import ZERO_ADDRESS, is_zero_address, normalize_address

IMPLEMENTATION_SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"

# Reserved identifier for the initialization flag, next to the pointer
INITIALIZED_SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbd"


class ImplementationRegistry:
    """
    Get/set access to the implementation pointer of one proxy

    Args:
        slots: Reserved slot table of the proxy account
        proxy: Proxy address (for error messages)
    """

    def __init__(self, slots: MutableMapping[str, Any], proxy: str) -> None:
        self._slots = slots
        self.proxy = proxy

    def get(self) -> str:
        """Current implementation address, or the zero address if unset"""
        return self._slots.get(IMPLEMENTATION_SLOT, ZERO_ADDRESS)

    def is_initialized(self) -> bool:
        return bool(self._slots.get(INITIALIZED_SLOT, False))

    def initialize(self, implementation: str) -> None:
        """
        One-time initializing write of the implementation pointer

        Raises:
            AlreadyInitialized: If the pointer was written before, whatever
                address is supplied now
            ZeroAddress: If implementation is the zero address
        """
        if self.is_initialized():
            raise AlreadyInitialized(self.proxy, self.get())
        if is_zero_address(implementation):
            raise ZeroAddress("implementation")

        self._slots[IMPLEMENTATION_SLOT] = normalize_address(implementation)
        self._slots[INITIALIZED_SLOT] = True

    def upgrade(self, implementation: str) -> str:
        """
        Replace the implementation pointer

        Only code explicitly permitted to upgrade calls this; the
        registry itself does not decide who may.

        Returns:
            The previous implementation address

        Raises:
            ProxyNotInitialized: If the proxy was never initialized
            ZeroAddress: If implementation is the zero address
        """
        if not self.is_initialized():
            raise ProxyNotInitialized(self.proxy)
        if is_zero_address(implementation):
            raise ZeroAddress("implementation")

        previous = self.get()
        self._slots[IMPLEMENTATION_SLOT] = normalize_address(implementation)
        return previous
