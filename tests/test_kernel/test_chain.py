"""
Tests for the Chain execution environment

Covers deployment, value transfer, serial all-or-nothing transactions,
nested call rollback, call depth, and event commit.
"""

import pytest

from fundme.kernel.chain import Chain
from fundme.kernel.errors import (
    CallDepthExceeded,
    EventStoreError,
    InsufficientBalance,
    NoCodeAtAddress,
    NonPayableFunction,
    TransactionInProgress,
    UnknownFunction,
)
from fundme.kernel.contract import Contract, external
from fundme.kernel.event_store import SQLiteEventStore
from fundme.kernel.ids import derive_contract_address
from fundme.kernel.time import TestClock
from tests.helpers import COUNTER_FAILURE, Caller, Counter, CounterFailed, Recursor

DEPLOYER = "0x" + "12" * 20


def test_create_account_sets_balance(chain: Chain) -> None:
    account = chain.create_account(balance=500)
    assert chain.balance_of(account) == 500
    assert chain.code_at(account) is None


def test_unknown_address_has_zero_balance(chain: Chain) -> None:
    assert chain.balance_of("0x" + "99" * 20) == 0
    assert chain.get_storage("0x" + "99" * 20) == {}


def test_deploy_address_derived_from_deployer_nonce() -> None:
    """Independent chains deploy to the same addresses"""
    addresses = []
    for _ in range(2):
        chain = Chain(clock=TestClock())
        chain.fund(DEPLOYER, 1000)
        addresses.append(
            (chain.deploy(DEPLOYER, Counter()), chain.deploy(DEPLOYER, Counter()))
        )

    assert addresses[0] == addresses[1]
    assert addresses[0][0] == derive_contract_address(DEPLOYER, 0)
    assert addresses[0][1] == derive_contract_address(DEPLOYER, 1)


def test_transact_returns_receipt(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())

    receipt = chain.transact(alice, counter, "increment")

    assert receipt.return_value == 1
    assert receipt.sender == alice
    assert receipt.to == counter
    assert receipt.block_number == chain.block_number
    assert [e.event_type for e in receipt.events] == ["Incremented"]
    assert receipt.events_of_type("Incremented")[0].payload == {"count": 1}
    assert chain.receipts[-1] is receipt


def test_addresses_are_case_insensitive(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())
    chain.transact(alice.upper().replace("0X", "0x"), counter.upper().replace("0X", "0x"), "increment")
    assert chain.call(counter, "get_count") == 1


def test_value_moves_with_payable_call(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())
    before = chain.balance_of(alice)

    result = chain.transact(alice, counter, "whoami", value=250).return_value

    assert result["sender"] == alice
    assert result["value"] == 250
    assert chain.balance_of(counter) == 250
    assert chain.balance_of(alice) == before - 250


def test_value_to_non_payable_function_fails(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())
    before = chain.balance_of(alice)

    with pytest.raises(NonPayableFunction):
        chain.transact(alice, counter, "increment", value=1)

    assert chain.balance_of(alice) == before
    assert chain.balance_of(counter) == 0


def test_insufficient_balance_fails(chain: Chain) -> None:
    poor = chain.create_account(balance=10)
    counter = chain.deploy(poor, Counter())

    with pytest.raises(InsufficientBalance) as exc_info:
        chain.transact(poor, counter, "whoami", value=11)

    assert exc_info.value.balance == 10
    assert exc_info.value.required == 11
    assert chain.balance_of(poor) == 10


def test_unknown_and_private_functions_are_rejected(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())

    with pytest.raises(UnknownFunction):
        chain.transact(alice, counter, "reset")
    with pytest.raises(UnknownFunction):
        chain.transact(alice, counter, "_hidden")
    with pytest.raises(UnknownFunction):
        chain.transact(alice, counter, "constructor")


def test_call_to_address_without_code_fails(chain: Chain, alice: str, bob: str) -> None:
    with pytest.raises(NoCodeAtAddress):
        chain.transact(alice, bob, "increment")


def test_external_functions_lists_entry_points() -> None:
    assert "increment" in Counter.external_functions()
    assert "_hidden" not in Counter.external_functions()
    assert "constructor" not in Counter.external_functions()


def test_default_constructor_rejects_arguments(chain: Chain, alice: str) -> None:
    with pytest.raises(TypeError):
        chain.deploy(alice, Counter(), 42)


# =============================================================================
# All-or-nothing
# =============================================================================


def test_failed_transaction_leaves_no_trace(chain: Chain, alice: str, event_store) -> None:
    """Test that a revert discards storage, value, events and the block"""
    counter = chain.deploy(alice, Counter())
    block_before = chain.block_number
    receipts_before = len(chain.receipts)
    events_before = event_store.count_events()

    with pytest.raises(CounterFailed):
        chain.transact(alice, counter, "increment_then_fail")

    assert chain.call(counter, "get_count") == 0
    assert chain.block_number == block_before
    assert len(chain.receipts) == receipts_before
    assert event_store.count_events() == events_before


def test_revert_propagates_same_exception_object(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())

    with pytest.raises(CounterFailed) as exc_info:
        chain.transact(alice, counter, "fail")

    assert exc_info.value is COUNTER_FAILURE


def test_caught_nested_failure_keeps_caller_effects(chain: Chain, alice: str) -> None:
    """A caller that catches a callee's revert keeps its own writes only"""
    counter = chain.deploy(alice, Counter())
    caller = chain.deploy(alice, Caller())

    receipt = chain.transact(alice, caller, "bump_and_call", counter, "increment_then_fail")

    assert receipt.return_value == "caught"
    assert chain.call(caller, "get_bumped") == 1
    assert chain.call(counter, "get_count") == 0
    assert receipt.events_of_type("Incremented") == []


def test_uncaught_nested_failure_reverts_everything(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())
    caller = chain.deploy(alice, Caller())

    with pytest.raises(CounterFailed):
        chain.transact(alice, caller, "forward", counter, "increment_then_fail")

    assert chain.call(caller, "get_bumped") == 0


def test_nested_call_sender_is_calling_contract(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())
    caller = chain.deploy(alice, Caller())

    result = chain.transact(alice, caller, "forward", counter, "whoami").return_value

    assert result["sender"] == caller
    assert result["address"] == counter


def test_call_discards_effects(chain: Chain, alice: str) -> None:
    counter = chain.deploy(alice, Counter())
    block_before = chain.block_number

    assert chain.call(counter, "increment") == 1
    assert chain.call(counter, "increment") == 1
    assert chain.call(counter, "get_count") == 0
    assert chain.block_number == block_before


def test_call_depth_is_bounded(clock: TestClock, alice: str) -> None:
    chain = Chain(clock=clock, max_call_depth=5)
    chain.fund(alice, 1)
    recursor = chain.deploy(alice, Recursor())

    assert chain.transact(alice, recursor, "recurse", 5).return_value == 5
    with pytest.raises(CallDepthExceeded):
        chain.transact(alice, recursor, "recurse", 6)


class Reentrant(Contract):
    """Tries to start a new transaction from inside one"""

    def __init__(self, chain: Chain) -> None:
        self.chain = chain

    @external
    def start_another(self, ctx) -> None:
        self.chain.transact(ctx.sender, ctx.address, "start_another")


def test_transactions_are_serial(chain: Chain, alice: str) -> None:
    contract = chain.deploy(alice, Reentrant(chain))

    with pytest.raises(TransactionInProgress):
        chain.transact(alice, contract, "start_another")

    # The chain is usable again afterwards
    counter = chain.deploy(alice, Counter())
    assert chain.transact(alice, counter, "increment").return_value == 1


# =============================================================================
# Blocks and events
# =============================================================================


def test_each_transaction_gets_a_block(chain: Chain, clock: TestClock, alice: str) -> None:
    counter = chain.deploy(alice, Counter())
    first = chain.transact(alice, counter, "increment")
    clock.advance_seconds(12)
    second = chain.transact(alice, counter, "increment")

    assert second.block_number == first.block_number + 1
    assert second.timestamp == first.timestamp + 12


def test_block_time_never_moves_backwards(chain: Chain, clock: TestClock, alice: str) -> None:
    counter = chain.deploy(alice, Counter())
    first = chain.transact(alice, counter, "increment")

    clock.advance_seconds(-100)
    second = chain.transact(alice, counter, "increment")

    assert second.timestamp == first.timestamp


def test_committed_events_are_persisted(
    chain: Chain, alice: str, event_store: SQLiteEventStore
) -> None:
    counter = chain.deploy(alice, Counter())
    receipt = chain.transact(alice, counter, "increment")

    stored = event_store.load_transaction(receipt.tx_id)
    assert [e.event_id for e in stored] == [e.event_id for e in receipt.events]
    assert stored[0].address == counter
    assert stored[0].block_number == receipt.block_number


def test_committed_events_reach_subscribers(chain: Chain, bus, alice: str) -> None:
    seen = []
    bus.subscribe("Incremented", seen.append)
    counter = chain.deploy(alice, Counter())

    chain.transact(alice, counter, "increment")
    with pytest.raises(CounterFailed):
        chain.transact(alice, counter, "increment_then_fail")

    assert [e.payload["count"] for e in seen] == [1]


def test_chain_without_event_store(clock: TestClock, alice: str) -> None:
    chain = Chain(clock=clock)
    chain.fund(alice, 1)
    counter = chain.deploy(alice, Counter())

    assert chain.transact(alice, counter, "increment").events[0].event_type == "Incremented"


def test_fund_rejects_negative_balance(chain: Chain, alice: str) -> None:
    with pytest.raises(ValueError):
        chain.fund(alice, -1)


def test_commit_hooks_run_only_for_committed_frames(chain: Chain, alice: str) -> None:
    code = Counter()
    counter = chain.deploy(alice, code)
    caller = chain.deploy(alice, Caller())

    chain.transact(alice, counter, "increment")
    assert code.committed == [1]

    # Read-only call, failed transaction, caught nested failure
    chain.call(counter, "increment")
    with pytest.raises(CounterFailed):
        chain.transact(alice, counter, "increment_then_fail")
    chain.transact(alice, caller, "bump_and_call", counter, "increment_then_fail")
    assert code.committed == [1]

    chain.transact(alice, counter, "increment")
    assert code.committed == [1, 2]


class FailingEventStore(SQLiteEventStore):
    """Store that accepts empty appends and fails on any event"""

    def append(self, tx_id, events):
        if events:
            raise EventStoreError("disk full")
        return super().append(tx_id, events)


def test_commit_hooks_skipped_when_events_cannot_be_stored(
    clock: TestClock, temp_db, alice: str
) -> None:
    chain = Chain(clock=clock, event_store=FailingEventStore(temp_db))
    chain.fund(alice, 1)
    code = Counter()
    counter = chain.deploy(alice, code)

    with pytest.raises(EventStoreError):
        chain.transact(alice, counter, "increment")
    assert code.committed == []
    assert chain.call(counter, "get_count") == 0
