"""
Kernel - the execution environment contracts run in

The kernel provides the chain (world state plus serial, all-or-nothing
transactions), the contract base class, the per-call execution context,
and the event log that committed transactions feed.
"""

from fundme.kernel.bus import EventBus
from fundme.kernel.chain import AccountState, BlockInfo, Chain, TransactionReceipt
from fundme.kernel.context import ExecutionContext, Storage
from fundme.kernel.contract import Call, Contract, external
from fundme.kernel.errors import (
    ContractRevert,
    EventStoreError,
    ExecutionError,
    FundMeError,
    GuardViolation,
    InputValidationError,
    PreconditionFailed,
)
from fundme.kernel.event_store import SQLiteEventStore
from fundme.kernel.events import Event
from fundme.kernel.ids import ZERO_ADDRESS
from fundme.kernel.time import BlockClock, SystemClock, TestClock
from fundme.kernel.units import from_wei, to_wei

__all__ = [
    # Chain
    "Chain",
    "AccountState",
    "BlockInfo",
    "TransactionReceipt",
    "ZERO_ADDRESS",
    # Contracts
    "Contract",
    "Call",
    "ExecutionContext",
    "Storage",
    "external",
    # Events
    "Event",
    "EventBus",
    "SQLiteEventStore",
    # Time & units
    "BlockClock",
    "SystemClock",
    "TestClock",
    "to_wei",
    "from_wei",
    # Errors
    "FundMeError",
    "ExecutionError",
    "ContractRevert",
    "InputValidationError",
    "PreconditionFailed",
    "GuardViolation",
    "EventStoreError",
]
