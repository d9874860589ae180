"""
Test Helper Contracts

Small contracts used to exercise the chain and the proxy: a counter,
UUPS implementations guarded by a stored owner, and the pieces needed
to attempt reentrancy against the faucet.
"""

from typing import Any

from fundme.kernel.context import ExecutionContext
from fundme.kernel.contract import Contract, external
from fundme.kernel.errors import ContractRevert, UnauthorizedUpgrade, UnknownFunction
from fundme.kernel.units import to_wei
from fundme.proxy.registry import IMPLEMENTATION_SLOT
from fundme.proxy.upgradeable import UUPSUpgradeable
from fundme.token.contract import FundMeToken

INITIAL_SUPPLY = to_wei("1000")
FAUCET_RESERVE = to_wei("1")


class CounterFailed(ContractRevert):
    selector = "COUNTER_FAILED"


# Raised as-is by Counter.fail so tests can check identity
COUNTER_FAILURE = CounterFailed("counter refused")


class Counter(Contract):
    """Counter stored under a plain storage key; remembers committed counts"""

    def __init__(self) -> None:
        self.committed: list[int] = []

    @external
    def increment(self, ctx: ExecutionContext) -> int:
        count = ctx.storage.get("count", 0) + 1
        ctx.storage["count"] = count
        ctx.emit("Incremented", {"count": count})
        ctx.on_commit(lambda: self.committed.append(count))
        return count

    @external
    def get_count(self, ctx: ExecutionContext) -> int:
        return ctx.storage.get("count", 0)

    @external(payable=True)
    def whoami(self, ctx: ExecutionContext) -> dict[str, Any]:
        return {
            "sender": ctx.sender,
            "value": ctx.value,
            "address": ctx.address,
            "code_address": ctx.code_address,
        }

    @external
    def fail(self, ctx: ExecutionContext) -> None:
        raise COUNTER_FAILURE

    @external
    def increment_then_fail(self, ctx: ExecutionContext) -> None:
        self.increment(ctx)
        raise CounterFailed("failed after incrementing")

    @external
    def clobber(self, ctx: ExecutionContext, value: str) -> None:
        """Write a storage field named like the proxy's implementation slot"""
        ctx.storage[IMPLEMENTATION_SLOT] = value

    def _hidden(self, ctx: ExecutionContext) -> str:
        return "hidden"


class Caller(Contract):
    """Calls a counter and optionally swallows its failure"""

    @external
    def bump_and_call(self, ctx: ExecutionContext, target: str, function: str) -> str:
        ctx.storage["bumped"] = ctx.storage.get("bumped", 0) + 1
        try:
            ctx.call(target, function)
        except CounterFailed:
            return "caught"
        return "ok"

    @external
    def forward(self, ctx: ExecutionContext, target: str, function: str) -> Any:
        return ctx.call(target, function)

    @external
    def get_bumped(self, ctx: ExecutionContext) -> int:
        return ctx.storage.get("bumped", 0)


class Recursor(Contract):
    """Calls itself until the chain stops it"""

    @external
    def recurse(self, ctx: ExecutionContext, remaining: int) -> int:
        if remaining == 0:
            return ctx.depth
        return ctx.call(ctx.address, "recurse", remaining - 1)


class OwnedUUPS(UUPSUpgradeable):
    """UUPS implementation that lets the stored owner upgrade"""

    @external
    def initialize(self, ctx: ExecutionContext, owner: str) -> None:
        if "owner" in ctx.storage:
            raise ContractRevert("owner already set")
        ctx.storage["owner"] = owner

    @external
    def set_value(self, ctx: ExecutionContext, value: int) -> None:
        ctx.storage["value"] = value

    @external
    def get_value(self, ctx: ExecutionContext) -> int:
        return ctx.storage.get("value", 0)

    @external
    def version(self, ctx: ExecutionContext) -> int:
        return 1

    def authorize_upgrade(self, ctx: ExecutionContext, new_implementation: str) -> None:
        if ctx.sender != ctx.storage.get("owner"):
            raise UnauthorizedUpgrade(ctx.sender)


class OwnedUUPSV2(OwnedUUPS):
    @external
    def version(self, ctx: ExecutionContext) -> int:
        return 2


class WrongSlotUUPS(OwnedUUPS):
    """Reports a different implementation slot"""

    @external
    def proxiable_uuid(self, ctx: ExecutionContext) -> str:
        return "0x" + "ab" * 32


class NotifyingToken(FundMeToken):
    """Token that notifies contract recipients that implement on_token_received"""

    def _after_transfer(self, ctx: ExecutionContext, recipient: str, amount: int) -> None:
        if not ctx.has_code(recipient):
            return
        try:
            ctx.call(recipient, "on_token_received", amount)
        except UnknownFunction:
            pass


class FalseReturningToken(FundMeToken):
    """Token whose transfer reports failure instead of raising"""

    @external
    def transfer(self, ctx: ExecutionContext, recipient: str, amount: int) -> bool:
        return False


class FaucetAttacker(Contract):
    """Requests tokens and tries to request again from the token callback"""

    def constructor(self, ctx: ExecutionContext, faucet: str) -> None:
        ctx.storage["faucet"] = faucet

    @external(payable=True)
    def deposit(self, ctx: ExecutionContext) -> int:
        return ctx.call(ctx.storage["faucet"], "deposit_funds", value=ctx.value)

    @external
    def attack(self, ctx: ExecutionContext) -> int:
        return ctx.call(ctx.storage["faucet"], "request_tokens")

    @external
    def on_token_received(self, ctx: ExecutionContext, amount: int) -> None:
        if ctx.storage.get("reentered"):
            return
        ctx.storage["reentered"] = True
        try:
            ctx.call(ctx.storage["faucet"], "request_tokens")
        except ContractRevert as e:
            ctx.storage["reentry_error"] = e.selector
        else:
            ctx.storage["reentry_error"] = None

    @external
    def reentry_error(self, ctx: ExecutionContext) -> str | None:
        return ctx.storage.get("reentry_error")
