"""
Faucet Domain Models - configuration and per-account records

Key concepts:
- Exchanged value: everything an account ever deposited. It is a lifetime
  eligibility measure, not a spendable balance, so withdrawals never
  reduce it.
- Cooldown: minimum time between two withdrawals of the same account.
- Flat payout: every successful request pays the same token amount.
"""

from enum import Enum

from pydantic import BaseModel, Field
from sqlmodel import SQLModel

from fundme.kernel.units import to_wei


class WithdrawalEligibility(str, Enum):
    """
    Withdrawal eligibility of an account

    INELIGIBLE → ELIGIBLE_READY ⇄ ELIGIBLE_COOLING

    INELIGIBLE is left for good once the deposit threshold is met, since
    exchanged value never decreases.
    """

    INELIGIBLE = "INELIGIBLE"  # Deposits below threshold
    ELIGIBLE_READY = "ELIGIBLE_READY"  # Threshold met, no active cooldown
    ELIGIBLE_COOLING = "ELIGIBLE_COOLING"  # Threshold met, cooldown active


class FaucetConfig(BaseModel):
    """
    Faucet parameters, fixed at construction

    Attributes:
        withdrawal_amount: Token base units paid per successful request
        minimum_exchange_for_withdrawal: Deposited value required to be eligible
        cooldown_duration: Seconds between two withdrawals of one account
    """

    withdrawal_amount: int = Field(
        default=to_wei("0.01"),
        ge=1,
        description="Token base units paid per successful request",
    )

    minimum_exchange_for_withdrawal: int = Field(
        default=to_wei("0.1"),
        ge=0,
        description="Cumulative deposited value required to request tokens",
    )

    cooldown_duration: int = Field(
        default=60,
        ge=0,
        description="Minimum seconds between two withdrawals of the same account",
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "withdrawal_amount": 10_000_000_000_000_000,
                    "minimum_exchange_for_withdrawal": 100_000_000_000_000_000,
                    "cooldown_duration": 60,
                }
            ]
        },
    }


class FaucetAccount(BaseModel):
    """
    Ledger record of one account

    Created zero-initialized on first access and never deleted.

    Attributes:
        address: Account the record belongs to
        exchanged_value: Cumulative value deposited (never decreases)
        last_withdrawal_time: Block timestamp of the last withdrawal, 0 if none
    """

    address: str
    exchanged_value: int = Field(default=0, ge=0)
    last_withdrawal_time: int = Field(default=0, ge=0)

    def has_withdrawn(self) -> bool:
        return self.last_withdrawal_time != 0

    def meets_threshold(self, config: FaucetConfig) -> bool:
        return self.exchanged_value >= config.minimum_exchange_for_withdrawal

    def next_withdrawal_time(self, config: FaucetConfig) -> int:
        """Earliest timestamp the next withdrawal may happen (0 means any time)"""
        if not self.has_withdrawn():
            return 0
        return self.last_withdrawal_time + config.cooldown_duration

    def is_cooling_down(self, config: FaucetConfig, now: int) -> bool:
        return self.has_withdrawn() and now - self.last_withdrawal_time < config.cooldown_duration

    def eligibility(self, config: FaucetConfig, now: int) -> WithdrawalEligibility:
        if not self.meets_threshold(config):
            return WithdrawalEligibility.INELIGIBLE
        if self.is_cooling_down(config, now):
            return WithdrawalEligibility.ELIGIBLE_COOLING
        return WithdrawalEligibility.ELIGIBLE_READY


# Projection models (for read-side queries)


class AccountActivity(SQLModel):
    """
    Read model for per-account faucet activity

    Denormalized view rebuilt from FundsDeposited and TokensDispensed
    events; never written by the faucet itself.
    """

    account: str
    deposit_count: int = 0
    exchanged_value: int = 0
    withdrawal_count: int = 0
    tokens_received: int = 0
    last_withdrawal_time: int = 0
    next_withdrawal_at: int = 0
