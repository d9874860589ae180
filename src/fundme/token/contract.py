"""
FundMe Token - minimal fungible token paid out by the faucet

Balances live in the token's storage under one key per holder. Only the
balance lookup and transfer surface is provided; there are no allowances.
"""

from fundme.kernel.context import ExecutionContext
from fundme.kernel.contract import Contract, external
from fundme.kernel.errors import InsufficientTokenBalance, InvalidReceiver, ZeroAddress
from fundme.kernel.ids import ZERO_ADDRESS, is_zero_address, normalize_address
from fundme.token.events import Transfer

TOKEN_NAME = "FundMe Token"
TOKEN_SYMBOL = "FMT"
TOKEN_DECIMALS = 18

_TOTAL_SUPPLY_KEY = "token.total_supply"


def _balance_key(holder: str) -> str:
    return f"token.balance.{normalize_address(holder)}"


class FundMeToken(Contract):
    """Fungible token with a fixed supply minted at deployment"""

    def constructor(self, ctx: ExecutionContext, recipient: str, initial_supply: int) -> None:
        """
        Mint the whole supply to ``recipient``

        Args:
            recipient: Holder of the initial supply
            initial_supply: Supply in base units
        """
        if is_zero_address(recipient):
            raise ZeroAddress("recipient")
        if initial_supply < 0:
            raise ValueError(f"Initial supply cannot be negative: {initial_supply}")

        ctx.storage[_TOTAL_SUPPLY_KEY] = initial_supply
        ctx.storage[_balance_key(recipient)] = initial_supply
        ctx.emit(
            "Transfer",
            Transfer(sender=ZERO_ADDRESS, recipient=normalize_address(recipient), amount=initial_supply),
        )

    @external
    def name(self, ctx: ExecutionContext) -> str:
        return TOKEN_NAME

    @external
    def symbol(self, ctx: ExecutionContext) -> str:
        return TOKEN_SYMBOL

    @external
    def decimals(self, ctx: ExecutionContext) -> int:
        return TOKEN_DECIMALS

    @external
    def total_supply(self, ctx: ExecutionContext) -> int:
        return ctx.storage.get(_TOTAL_SUPPLY_KEY, 0)

    @external
    def balance_of(self, ctx: ExecutionContext, holder: str) -> int:
        return ctx.storage.get(_balance_key(holder), 0)

    @external
    def transfer(self, ctx: ExecutionContext, recipient: str, amount: int) -> bool:
        """
        Move ``amount`` base units from the caller to ``recipient``

        Raises:
            InvalidReceiver: If recipient is the zero address
            InsufficientTokenBalance: If the caller holds less than amount
        """
        if is_zero_address(recipient):
            raise InvalidReceiver(recipient)
        if amount < 0:
            raise ValueError(f"Transfer amount cannot be negative: {amount}")

        sender_key = _balance_key(ctx.sender)
        sender_balance = ctx.storage.get(sender_key, 0)
        if sender_balance < amount:
            raise InsufficientTokenBalance(ctx.sender, sender_balance, amount)

        ctx.storage[sender_key] = sender_balance - amount
        recipient_key = _balance_key(recipient)
        ctx.storage[recipient_key] = ctx.storage.get(recipient_key, 0) + amount

        ctx.emit(
            "Transfer",
            Transfer(sender=ctx.sender, recipient=normalize_address(recipient), amount=amount),
        )
        self._after_transfer(ctx, recipient, amount)
        return True

    def _after_transfer(self, ctx: ExecutionContext, recipient: str, amount: int) -> None:
        """Hook run after balances moved; does nothing by default"""
