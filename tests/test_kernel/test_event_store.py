"""
Tests for SQLite Event Store

Verifies the event log properties indexers rely on:
- Append-only semantics
- Idempotency via tx_id
- Query capabilities
"""

import pytest

from fundme.kernel.errors import EventStoreError
from fundme.kernel.event_store import SQLiteEventStore
from fundme.kernel.events import Event, create_event
from fundme.kernel.ids import generate_id, generate_tx_id

FAUCET = "0x" + "aa" * 20
TOKEN = "0x" + "bb" * 20


def make_events(tx_id: str, block_number: int, specs: list[tuple[str, str, dict]]) -> list[Event]:
    return [
        create_event(
            event_id=generate_id(),
            tx_id=tx_id,
            block_number=block_number,
            log_index=i,
            address=address,
            event_type=event_type,
            timestamp=1_700_000_000 + block_number,
            payload=payload,
        )
        for i, (address, event_type, payload) in enumerate(specs)
    ]


def test_append_and_load_transaction(event_store: SQLiteEventStore) -> None:
    """Test appending and loading the events of one transaction"""
    tx_id = generate_tx_id()
    events = make_events(
        tx_id,
        1,
        [
            (TOKEN, "Transfer", {"sender": FAUCET, "recipient": "0x01", "amount": 5}),
            (FAUCET, "TokensDispensed", {"account": "0x01", "amount": 5}),
        ],
    )

    appended = event_store.append(tx_id, events)
    assert len(appended) == 2

    loaded = event_store.load_transaction(tx_id)
    assert [e.event_id for e in loaded] == [e.event_id for e in events]
    assert loaded[1].payload == {"account": "0x01", "amount": 5}
    assert loaded[0].log_index == 0


def test_append_empty_is_noop(event_store: SQLiteEventStore) -> None:
    assert event_store.append(generate_tx_id(), []) == []
    assert event_store.count_events() == 0


def test_append_is_idempotent_per_transaction(event_store: SQLiteEventStore) -> None:
    """Test that appending the same transaction twice stores it once"""
    tx_id = generate_tx_id()
    events = make_events(tx_id, 1, [(FAUCET, "FundsDeposited", {"amount": 1})])

    event_store.append(tx_id, events)
    again = event_store.append(tx_id, events)

    assert [e.event_id for e in again] == [e.event_id for e in events]
    assert event_store.count_events() == 1
    assert event_store.count_transactions() == 1


def test_append_rejects_events_of_other_transaction(event_store: SQLiteEventStore) -> None:
    events = make_events(generate_tx_id(), 1, [(FAUCET, "FundsDeposited", {})])

    with pytest.raises(EventStoreError):
        event_store.append(generate_tx_id(), events)

    assert event_store.count_events() == 0


def test_query_by_address_type_and_block(event_store: SQLiteEventStore) -> None:
    """Test filtering stored events"""
    for block in (1, 2, 3):
        tx_id = generate_tx_id()
        event_store.append(
            tx_id,
            make_events(
                tx_id,
                block,
                [
                    (TOKEN, "Transfer", {"amount": block}),
                    (FAUCET, "TokensDispensed", {"amount": block}),
                ],
            ),
        )

    assert len(event_store.load_by_address(FAUCET)) == 3
    assert len(event_store.load_by_address(FAUCET.upper().replace("0X", "0x"))) == 3
    assert len(event_store.query_events(event_type="Transfer")) == 3

    in_range = event_store.query_events(address=TOKEN, from_block=2, to_block=3)
    assert [e.payload["amount"] for e in in_range] == [2, 3]

    limited = event_store.query_events(limit=2)
    assert len(limited) == 2
    assert limited[0].block_number == 1

    assert event_store.count_events() == 6
    assert event_store.count_transactions() == 3


def test_load_all_events_in_chain_order(event_store: SQLiteEventStore) -> None:
    """Events come back ordered by block, then log index"""
    later = generate_tx_id()
    earlier = generate_tx_id()
    event_store.append(later, make_events(later, 5, [(FAUCET, "B", {}), (FAUCET, "C", {})]))
    event_store.append(earlier, make_events(earlier, 2, [(FAUCET, "A", {})]))

    assert [e.event_type for e in event_store.load_all_events()] == ["A", "B", "C"]


def test_store_survives_reopen(temp_db) -> None:
    """Test that events persist across store instances"""
    tx_id = generate_tx_id()
    SQLiteEventStore(temp_db).append(tx_id, make_events(tx_id, 1, [(FAUCET, "A", {"x": 1})]))

    reopened = SQLiteEventStore(temp_db)
    assert reopened.load_transaction(tx_id)[0].payload == {"x": 1}
