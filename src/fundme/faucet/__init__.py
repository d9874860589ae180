"""
Faucet Module - tokens for depositors, one payout per cooldown

Accounts deposit native value; once their cumulative deposits reach the
threshold they may request a fixed token amount, at most once per
cooldown period, as long as the faucet's token reserve can cover it.
"""

from fundme.faucet.ledger import FaucetLedger
from fundme.faucet.models import (
    AccountActivity,
    FaucetAccount,
    FaucetConfig,
    WithdrawalEligibility,
)
from fundme.faucet.projections import FaucetActivityLog
from fundme.faucet.service import FaucetService

__all__ = [
    "AccountActivity",
    "FaucetAccount",
    "FaucetActivityLog",
    "FaucetConfig",
    "FaucetLedger",
    "FaucetService",
    "WithdrawalEligibility",
]
