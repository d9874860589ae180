"""
FundMe - token faucet and upgradeable proxy on a deterministic chain

Depositors earn the right to request FundMe tokens from a faucet, once per
cooldown period. Platform logic sits behind an upgradeable proxy whose
address never changes when the implementation is replaced.
"""

from fundme.faucet import FaucetConfig, FaucetService
from fundme.kernel import Chain, TestClock, from_wei, to_wei
from fundme.proxy import UpgradeableProxy
from fundme.token import FundMeToken

__version__ = "0.1.0"
__all__ = [
    "Chain",
    "FaucetConfig",
    "FaucetService",
    "FundMeToken",
    "TestClock",
    "UpgradeableProxy",
    "from_wei",
    "to_wei",
    "__version__",
]
