"""
Tests for Faucet Domain Models
"""

import pytest
from pydantic import ValidationError

from fundme.faucet.models import (
    AccountActivity,
    FaucetAccount,
    FaucetConfig,
    WithdrawalEligibility,
)

ACCOUNT = "0x" + "a1" * 20
T0 = 1_700_000_000


def test_config_defaults() -> None:
    config = FaucetConfig()
    assert config.withdrawal_amount == 10**16
    assert config.minimum_exchange_for_withdrawal == 10**17
    assert config.cooldown_duration == 60


def test_config_validation() -> None:
    with pytest.raises(ValidationError):
        FaucetConfig(withdrawal_amount=0)
    with pytest.raises(ValidationError):
        FaucetConfig(cooldown_duration=-1)
    with pytest.raises(ValidationError):
        FaucetConfig(minimum_exchange_for_withdrawal=-5)


def test_config_is_frozen() -> None:
    config = FaucetConfig()
    with pytest.raises(ValidationError):
        config.cooldown_duration = 1


def test_new_account_is_zero_initialized() -> None:
    account = FaucetAccount(address=ACCOUNT)
    assert account.exchanged_value == 0
    assert account.last_withdrawal_time == 0
    assert not account.has_withdrawn()
    assert account.next_withdrawal_time(FaucetConfig()) == 0


def test_eligibility_transitions() -> None:
    """INELIGIBLE -> ELIGIBLE_READY -> ELIGIBLE_COOLING -> ELIGIBLE_READY"""
    config = FaucetConfig()

    account = FaucetAccount(address=ACCOUNT, exchanged_value=10**17 - 1)
    assert account.eligibility(config, T0) == WithdrawalEligibility.INELIGIBLE

    account = account.model_copy(update={"exchanged_value": 10**17})
    assert account.eligibility(config, T0) == WithdrawalEligibility.ELIGIBLE_READY

    account = account.model_copy(update={"last_withdrawal_time": T0})
    assert account.eligibility(config, T0) == WithdrawalEligibility.ELIGIBLE_COOLING
    assert account.eligibility(config, T0 + 59) == WithdrawalEligibility.ELIGIBLE_COOLING
    assert account.eligibility(config, T0 + 60) == WithdrawalEligibility.ELIGIBLE_READY
    assert account.next_withdrawal_time(config) == T0 + 60


def test_zero_cooldown_never_cools() -> None:
    config = FaucetConfig(cooldown_duration=0)
    account = FaucetAccount(address=ACCOUNT, exchanged_value=10**17, last_withdrawal_time=T0)
    assert not account.is_cooling_down(config, T0)


def test_account_activity_starts_empty() -> None:
    activity = AccountActivity(account=ACCOUNT)
    assert activity.deposit_count == 0
    assert activity.tokens_received == 0
    assert activity.model_dump()["account"] == ACCOUNT
