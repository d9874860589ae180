"""
Execution context handed to contract code

Every message call gets its own ExecutionContext. It tells the code who
called (``sender``), with how much value, which address's storage it runs
against (``address``) and whose code is running (``code_address``). The two
addresses differ only inside a delegated call.
"""

import copy
from collections.abc import Iterator, MutableMapping
from typing import TYPE_CHECKING, Any, Callable

from pydantic import BaseModel

from fundme.kernel.contract import Call
from fundme.kernel.events import Event

if TYPE_CHECKING:
    from fundme.kernel.chain import BlockInfo, Chain


class Storage(MutableMapping):
    """
    Key-value view over one table of an account

    Reads and writes copy values, so contract code never holds a live
    reference into chain state. Rolling back a frame therefore cannot
    leave stale aliases behind.
    """

    def __init__(self, chain: "Chain", address: str, table: str = "storage") -> None:
        self._chain = chain
        self._address = address
        self._table = table

    def _data(self) -> dict[str, Any]:
        return getattr(self._chain._account(self._address), self._table)

    def __getitem__(self, key: str) -> Any:
        return copy.deepcopy(self._data()[key])

    def __setitem__(self, key: str, value: Any) -> None:
        self._data()[key] = copy.deepcopy(value)

    def __delitem__(self, key: str) -> None:
        del self._data()[key]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data()))

    def __len__(self) -> int:
        return len(self._data())


class ExecutionContext:
    """Per-frame view of the chain for contract code"""

    def __init__(
        self,
        chain: "Chain",
        *,
        sender: str,
        value: int,
        address: str,
        code_address: str,
        origin: str,
        block: "BlockInfo",
        depth: int,
    ) -> None:
        self._chain = chain
        self.sender = sender
        self.value = value
        self.address = address
        self.code_address = code_address
        self.origin = origin
        self.block = block
        self.depth = depth

    @property
    def now(self) -> int:
        """Block timestamp in seconds"""
        return self.block.timestamp

    @property
    def block_number(self) -> int:
        return self.block.number

    @property
    def is_delegated(self) -> bool:
        """True when code runs against another address's storage"""
        return self.address != self.code_address

    @property
    def storage(self) -> Storage:
        """General-purpose storage of the executing address"""
        return Storage(self._chain, self.address)

    @property
    def slots(self) -> Storage:
        """Reserved side table of the executing address"""
        return Storage(self._chain, self.address, table="slots")

    @property
    def self_balance(self) -> int:
        """Native balance of the executing address"""
        return self._chain.balance_of(self.address)

    def balance_of(self, address: str) -> int:
        return self._chain.balance_of(address)

    def has_code(self, address: str) -> bool:
        return self._chain.code_at(address) is not None

    def emit(self, event_type: str, payload: BaseModel | dict | None = None) -> Event:
        """Record an event for the current transaction"""
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json")
        return self._chain._emit(self, event_type, payload or {})

    def on_commit(self, hook: Callable[[], None]) -> None:
        """
        Run ``hook`` once the current transaction commits

        Hooks registered by a frame that is rolled back, or during a
        read-only ``Chain.call``, never run.
        """
        self._chain._on_commit(hook)

    def call(
        self, to: str, function: str, *args: Any, value: int = 0, **kwargs: Any
    ) -> Any:
        """
        Call another contract with this address as the sender

        A failing callee rolls back its own effects and re-raises; the
        caller may catch the error and continue.
        """
        return self._chain._message_call(
            sender=self.address,
            to=to,
            call=Call(function=function, args=args, kwargs=kwargs),
            value=value,
            origin=self.origin,
            depth=self.depth + 1,
        )

    def delegate_call(self, target: str, call: Call) -> Any:
        """Run the code at ``target`` against this frame's storage, sender and value"""
        return self._chain._delegate_call(self, target, call)
