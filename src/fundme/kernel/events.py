"""
Base Event model for contract notifications

Events are immutable facts emitted by contract code during a transaction.
They only become visible once the transaction commits; a reverted frame
discards every event it emitted.
"""

from pydantic import BaseModel, Field


class Event(BaseModel):
    """
    Notification emitted by a contract

    The emitting address is the storage context of the code that ran,
    so events emitted by an implementation behind a proxy carry the
    proxy's address. (tx_id, log_index) identifies an event uniquely.
    """

    event_id: str = Field(
        ...,
        description="Unique event identifier (UUIDv7 for time-ordering)",
    )

    tx_id: str = Field(
        ...,
        description="Transaction that emitted this event",
    )

    block_number: int = Field(
        ...,
        description="Block the transaction was included in",
        ge=0,
    )

    log_index: int = Field(
        ...,
        description="Position of the event within its transaction",
        ge=0,
    )

    address: str = Field(
        ...,
        description="Address of the emitting storage context",
    )

    event_type: str = Field(
        ...,
        description="Specific event type: 'FundsDeposited', 'ProxyInitialized', etc.",
    )

    timestamp: int = Field(
        ...,
        description="Block timestamp in Unix seconds",
        ge=0,
    )

    payload: dict = Field(
        default_factory=dict,
        description="Event-specific data (must be JSON-serializable)",
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "event_id": "01908e9a-3b87-7000-8000-123456789abc",
                    "tx_id": "0x5e1d...",
                    "block_number": 3,
                    "log_index": 0,
                    "address": "0x8f0c...",
                    "event_type": "FundsDeposited",
                    "timestamp": 1700000000,
                    "payload": {"account": "0x1a2b...", "amount": 100000000000000000},
                }
            ]
        },
    }


def create_event(
    *,
    event_id: str,
    tx_id: str,
    block_number: int,
    log_index: int,
    address: str,
    event_type: str,
    timestamp: int,
    payload: dict | None = None,
) -> Event:
    """Factory function for creating events with all required fields"""
    return Event(
        event_id=event_id,
        tx_id=tx_id,
        block_number=block_number,
        log_index=log_index,
        address=address,
        event_type=event_type,
        timestamp=timestamp,
        payload=payload or {},
    )
