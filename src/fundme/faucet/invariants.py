"""
Faucet Module Invariants - request gates

Pure functions, one per failure kind. request_tokens runs the gates in a
fixed order and each raises its own error:

1. Exchange threshold (has the account deposited enough?)
2. Cooldown (has enough time passed since the last withdrawal?)
3. Reserve (does the faucet hold enough tokens?)
"""

from fundme.faucet.models import FaucetAccount, FaucetConfig
from fundme.kernel.errors import (
    InsufficientExchangedFunds,
    InsufficientFaucetTokenBalance,
    InsufficientTimeElapsedSinceLastWithdrawal,
    ZeroValueExchange,
)


def validate_nonzero_exchange(account: str, value: int) -> None:
    """
    Deposits must carry value

    Raises:
        ZeroValueExchange: If value is 0
    """
    if value == 0:
        raise ZeroValueExchange(account)


def validate_exchange_threshold(account: FaucetAccount, config: FaucetConfig) -> None:
    """
    Gate 1: account must have deposited at least the minimum

    Raises:
        InsufficientExchangedFunds: If exchanged value is below the minimum
    """
    if not account.meets_threshold(config):
        raise InsufficientExchangedFunds(
            account=account.address,
            exchanged_value=account.exchanged_value,
            minimum=config.minimum_exchange_for_withdrawal,
        )


def validate_cooldown_elapsed(account: FaucetAccount, config: FaucetConfig, now: int) -> None:
    """
    Gate 2: a previous withdrawal must be at least one cooldown old

    An account that never withdrew passes immediately.

    Raises:
        InsufficientTimeElapsedSinceLastWithdrawal: If the cooldown is active
    """
    if account.is_cooling_down(config, now):
        raise InsufficientTimeElapsedSinceLastWithdrawal(
            account=account.address,
            last_withdrawal_time=account.last_withdrawal_time,
            available_at=account.next_withdrawal_time(config),
        )


def validate_faucet_reserve(faucet: str, reserve: int, config: FaucetConfig) -> None:
    """
    Gate 3: the faucet must hold at least one payout

    Raises:
        InsufficientFaucetTokenBalance: If reserve < withdrawal amount
    """
    if reserve < config.withdrawal_amount:
        raise InsufficientFaucetTokenBalance(
            faucet=faucet, reserve=reserve, required=config.withdrawal_amount
        )


def validate_exchange_monotonic(previous: FaucetAccount, updated: FaucetAccount) -> None:
    """
    Exchanged value never decreases

    Raises:
        ValueError: If an update would lower exchanged value
    """
    if updated.exchanged_value < previous.exchanged_value:
        raise ValueError(
            f"Exchanged value of {previous.address} cannot decrease "
            f"({previous.exchanged_value} -> {updated.exchanged_value})"
        )
