"""
UUPS upgrade support for implementations

In the UUPS pattern the upgrade logic lives in the implementation, not in
the proxy. An implementation inheriting UUPSUpgradeable exposes
``upgrade_to``; when it runs behind a proxy it rewrites the proxy's
implementation pointer. Who may upgrade is decided by
``authorize_upgrade``, which denies everyone unless a subclass says
otherwise.
"""

from fundme.kernel.context import ExecutionContext
from fundme.kernel.contract import Contract, external
from fundme.kernel.errors import (
    NoCodeAtAddress,
    NotDelegated,
    NotProxiable,
    UnauthorizedUpgrade,
    UnknownFunction,
    ZeroAddress,
)
from fundme.kernel.ids import is_zero_address
from fundme.kernel.logging import get_logger
from fundme.proxy.events import ProxyUpgraded
from fundme.proxy.registry import IMPLEMENTATION_SLOT, ImplementationRegistry

logger = get_logger(__name__)


class UUPSUpgradeable(Contract):
    """Mixin for implementations that can replace themselves behind a proxy"""

    @external
    def proxiable_uuid(self, ctx: ExecutionContext) -> str:
        """Slot this implementation expects its proxy to use"""
        return IMPLEMENTATION_SLOT

    @external
    def upgrade_to(self, ctx: ExecutionContext, new_implementation: str) -> str:
        """
        Point the calling proxy at a new implementation

        Returns:
            The previous implementation address

        Raises:
            NotDelegated: If called on the implementation directly
            UnauthorizedUpgrade: If authorize_upgrade rejects the caller
            ZeroAddress: If new_implementation is the zero address
            NotProxiable: If the target does not report the same slot
        """
        if not ctx.is_delegated:
            raise NotDelegated("upgrade_to")
        self.authorize_upgrade(ctx, new_implementation)
        if is_zero_address(new_implementation):
            raise ZeroAddress("new_implementation")
        self._check_proxiable(ctx, new_implementation)

        registry = ImplementationRegistry(ctx.slots, ctx.address)
        previous = registry.upgrade(new_implementation)

        ctx.emit(
            "ProxyUpgraded",
            ProxyUpgraded(
                previous_implementation=previous,
                implementation=registry.get(),
                upgraded_by=ctx.sender,
            ),
        )
        logger.info(
            "Proxy upgraded",
            proxy=ctx.address,
            previous_implementation=previous,
            implementation=registry.get(),
        )
        return previous

    def authorize_upgrade(self, ctx: ExecutionContext, new_implementation: str) -> None:
        """Raise UnauthorizedUpgrade unless ctx.sender may upgrade; denies by default"""
        raise UnauthorizedUpgrade(ctx.sender)

    def _check_proxiable(self, ctx: ExecutionContext, new_implementation: str) -> None:
        try:
            slot = ctx.call(new_implementation, "proxiable_uuid")
        except (UnknownFunction, NoCodeAtAddress) as e:
            raise NotProxiable(new_implementation) from e
        if slot != IMPLEMENTATION_SLOT:
            raise NotProxiable(new_implementation)
