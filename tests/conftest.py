"""
Pytest configuration and shared fixtures

Every test gets its own chain, clock and event store, so no state leaks
between tests. Contract fixtures build on each other: the faucet fixture
deploys a token, deploys the faucet, and funds its reserve.
"""

import tempfile
from pathlib import Path
from typing import Iterator

import pytest

from fundme.faucet.models import FaucetConfig
from fundme.faucet.service import FaucetService
from fundme.kernel.bus import EventBus
from fundme.kernel.chain import Chain
from fundme.kernel.event_store import SQLiteEventStore
from fundme.kernel.time import TestClock
from fundme.kernel.units import to_wei
from fundme.token.contract import FundMeToken
from tests.helpers import FAUCET_RESERVE, INITIAL_SUPPLY


@pytest.fixture
def temp_db() -> Iterator[Path]:
    """Provide a temporary database file that's cleaned up after test"""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    for path in (db_path, Path(f"{db_path}-wal"), Path(f"{db_path}-shm")):
        if path.exists():
            path.unlink()


@pytest.fixture
def event_store(temp_db: Path) -> SQLiteEventStore:
    """Provide a fresh event store for each test"""
    return SQLiteEventStore(temp_db)


@pytest.fixture
def clock() -> TestClock:
    """
    Provide a controllable block clock

    Default time: 1_700_000_000 (2023-11-14 22:13:20 UTC)
    """
    return TestClock()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def chain(clock: TestClock, event_store: SQLiteEventStore, bus: EventBus) -> Chain:
    """Provide an empty chain wired to the test clock, store and bus"""
    return Chain(clock=clock, event_store=event_store, bus=bus)


# =============================================================================
# Account Fixtures
# =============================================================================


@pytest.fixture
def owner(chain: Chain) -> str:
    """Deployer of the token and faucet"""
    return chain.create_account(balance=to_wei("100"))


@pytest.fixture
def alice(chain: Chain) -> str:
    return chain.create_account(balance=to_wei("10"))


@pytest.fixture
def bob(chain: Chain) -> str:
    return chain.create_account(balance=to_wei("10"))


# =============================================================================
# Contract Fixtures
# =============================================================================


@pytest.fixture
def faucet_config() -> FaucetConfig:
    """Defaults: 0.01 token payout, 0.1 ether threshold, 60 second cooldown"""
    return FaucetConfig()


@pytest.fixture
def token(chain: Chain, owner: str) -> str:
    """FundMe token with the whole supply minted to the owner"""
    return chain.deploy(owner, FundMeToken(), owner, INITIAL_SUPPLY)


@pytest.fixture
def empty_faucet(chain: Chain, owner: str, token: str, faucet_config: FaucetConfig) -> str:
    """Faucet without any tokens in its reserve"""
    return chain.deploy(owner, FaucetService(), token, faucet_config)


@pytest.fixture
def faucet(chain: Chain, owner: str, token: str, empty_faucet: str) -> str:
    """Faucet holding FAUCET_RESERVE tokens (100 default payouts)"""
    chain.transact(owner, token, "transfer", empty_faucet, FAUCET_RESERVE)
    return empty_faucet
