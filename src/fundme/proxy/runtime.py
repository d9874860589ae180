"""
Upgradeable proxy runtime

The proxy owns exactly one piece of state (the implementation pointer in
its reserved slots) and one piece of logic (the one-time initializer).
Every other call is forwarded, unchanged, to whatever implementation is
registered at that moment:
- the implementation's code runs against the proxy's storage
- the original sender and attached value are preserved
- return values come back verbatim
- exceptions raised by the implementation propagate as the same object
"""

from typing import Any

from fundme.kernel.context import ExecutionContext
from fundme.kernel.contract import Call, Contract, external
from fundme.kernel.errors import ProxyNotInitialized
from fundme.kernel.logging import get_logger
from fundme.kernel.metrics import proxy_dispatch_total
from fundme.proxy.events import ProxyInitialized
from fundme.proxy.registry import ImplementationRegistry

logger = get_logger(__name__)


class UpgradeableProxy(Contract):
    """Pure forwarding layer in front of a replaceable implementation"""

    INITIALIZER = "initialize_proxy"

    def handle(self, ctx: ExecutionContext, call: Call) -> Any:
        if call.function == self.INITIALIZER:
            return super().handle(ctx, call)
        return self.dispatch(ctx, call)

    @external
    def initialize_proxy(self, ctx: ExecutionContext, implementation: str) -> bool:
        """
        Register the first implementation

        Raises:
            AlreadyInitialized: If an implementation was registered before
            ZeroAddress: If implementation is the zero address
        """
        registry = ImplementationRegistry(ctx.slots, ctx.address)
        registry.initialize(implementation)

        ctx.emit(
            "ProxyInitialized",
            ProxyInitialized(implementation=registry.get(), initialized_by=ctx.sender),
        )
        logger.info("Proxy initialized", proxy=ctx.address, implementation=registry.get())
        return True

    def dispatch(self, ctx: ExecutionContext, call: Call) -> Any:
        """
        Forward call data to the registered implementation

        The target is looked up on every call, so an upgrade takes effect
        for the very next call.

        Raises:
            ProxyNotInitialized: If no implementation is registered
            NoCodeAtAddress: If the registered address has no code
        """
        registry = ImplementationRegistry(ctx.slots, ctx.address)
        if not registry.is_initialized():
            raise ProxyNotInitialized(ctx.address)

        result = ctx.delegate_call(registry.get(), call)
        ctx.on_commit(proxy_dispatch_total.labels(function=call.function).inc)
        return result
