"""
Faucet Module Events - notifications for external indexing

Both events carry the account and the amount; withdrawals also carry the
time the account's cooldown expires.
"""

from pydantic import BaseModel, Field


class FundsDeposited(BaseModel):
    """
    An account deposited value into the faucet

    exchanged_value is the account's cumulative total after this deposit.
    """

    account: str
    amount: int = Field(..., gt=0)
    exchanged_value: int = Field(..., ge=0)


class TokensDispensed(BaseModel):
    """
    The faucet paid a withdrawal to an account

    The account cannot withdraw again before next_withdrawal_at.
    """

    account: str
    amount: int = Field(..., gt=0)
    withdrawn_at: int
    next_withdrawal_at: int


FAUCET_EVENT_TYPES = {
    "FundsDeposited": FundsDeposited,
    "TokensDispensed": TokensDispensed,
}
