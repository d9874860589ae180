"""
Chain - the execution environment contracts run in

A Chain is an explicit, constructed context: it owns the world state
(accounts, balances, storage, code), the block clock, the event store and
the event bus. Independent Chain instances never share state.

Execution model:
- Transactions run one at a time, to completion
- Each transaction either commits all of its effects or none of them
- Every nested or delegated call snapshots state; a failing frame
  restores its snapshot and re-raises the original exception
- Events reach the event store and subscribers only after commit
- Commit hooks (metrics, logs of effects) run only after commit; a
  rolled-back frame drops the hooks it registered
"""

import copy
from typing import Any, Callable

from pydantic import BaseModel, Field

from fundme.kernel.bus import EventBus
from fundme.kernel.context import ExecutionContext
from fundme.kernel.contract import Call, Contract
from fundme.kernel.errors import (
    CallDepthExceeded,
    InsufficientBalance,
    NoCodeAtAddress,
    TransactionInProgress,
)
from fundme.kernel.event_store import SQLiteEventStore
from fundme.kernel.events import Event, create_event
from fundme.kernel.ids import (
    ZERO_ADDRESS,
    derive_contract_address,
    generate_address,
    generate_id,
    generate_tx_id,
    normalize_address,
)
from fundme.kernel.logging import LogOperation, get_logger
from fundme.kernel.metrics import transaction_duration_seconds, transactions_total
from fundme.kernel.time import BlockClock, SystemClock

logger = get_logger(__name__)


class AccountState(BaseModel):
    """
    Persistent state of one address

    ``storage`` holds a contract's own fields; ``slots`` is a reserved
    side table that contract fields can never address.
    """

    address: str
    balance: int = Field(default=0, ge=0)
    nonce: int = Field(default=0, ge=0)
    storage: dict[str, Any] = Field(default_factory=dict)
    slots: dict[str, Any] = Field(default_factory=dict)


class BlockInfo(BaseModel):
    """Block a transaction executes in"""

    number: int = Field(..., ge=0)
    timestamp: int = Field(..., ge=0)

    model_config = {"frozen": True}


class TransactionReceipt(BaseModel):
    """Outcome of a committed transaction"""

    tx_id: str
    block_number: int
    timestamp: int
    sender: str
    to: str | None
    function: str
    value: int
    return_value: Any = None
    events: list[Event] = Field(default_factory=list)

    def events_of_type(self, event_type: str) -> list[Event]:
        return [e for e in self.events if e.event_type == event_type]


class _PendingTransaction:
    def __init__(self, tx_id: str, block: BlockInfo) -> None:
        self.tx_id = tx_id
        self.block = block
        self.events: list[Event] = []
        self.commit_hooks: list[Callable[[], None]] = []


_Snapshot = tuple[dict[str, AccountState], dict[str, Contract], int, int]


class Chain:
    """
    Serial, all-or-nothing execution environment

    Example:
        >>> chain = Chain(clock=TestClock())
        >>> alice = chain.create_account(balance=to_wei("1"))
        >>> token = chain.deploy(alice, FundMeToken(), alice, 10_000)
        >>> chain.call(token, "balance_of", alice)
        10000
    """

    def __init__(
        self,
        *,
        clock: BlockClock | None = None,
        event_store: SQLiteEventStore | None = None,
        bus: EventBus | None = None,
        max_call_depth: int = 64,
    ) -> None:
        """
        Initialize an empty chain at block 0

        Args:
            clock: Block clock (uses system time if None)
            event_store: Where committed events are persisted (optional)
            bus: Event bus for committed events (a private bus if None)
            max_call_depth: Maximum nesting of message calls
        """
        self.clock = clock or SystemClock()
        self.event_store = event_store
        self.bus = bus or EventBus()
        self.max_call_depth = max_call_depth

        self._accounts: dict[str, AccountState] = {}
        self._code: dict[str, Contract] = {}
        self._tx: _PendingTransaction | None = None

        self.block_number = 0
        self.timestamp = self.clock.now()
        self.receipts: list[TransactionReceipt] = []

    # ========== Accounts ==========

    def create_account(self, balance: int = 0) -> str:
        """Create an externally owned account with a native balance"""
        address = generate_address()
        self.fund(address, balance)
        return address

    def fund(self, address: str, amount: int) -> None:
        """Set the native balance of an address (test and simulation helper)"""
        self._ensure_idle()
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        self._account(address).balance = amount

    def balance_of(self, address: str) -> int:
        account = self._accounts.get(normalize_address(address))
        return account.balance if account else 0

    def code_at(self, address: str) -> Contract | None:
        return self._code.get(normalize_address(address))

    def get_storage(self, address: str) -> dict[str, Any]:
        """Copy of an address's general-purpose storage"""
        account = self._accounts.get(normalize_address(address))
        return copy.deepcopy(account.storage) if account else {}

    def get_slot(self, address: str, slot: str) -> Any:
        """Read a reserved slot of an address (None if never written)"""
        account = self._accounts.get(normalize_address(address))
        return copy.deepcopy(account.slots.get(slot)) if account else None

    # ========== Transactions ==========

    def deploy(self, sender: str, contract: Contract, *args: Any, value: int = 0, **kwargs: Any) -> str:
        """
        Deploy contract code and run its constructor as one transaction

        Returns:
            Address of the new contract
        """
        sender = normalize_address(sender)

        def body() -> str:
            deployer = self._account(sender)
            address = derive_contract_address(sender, deployer.nonce)
            deployer.nonce += 1
            self._code[address] = contract
            self._account(address)
            self._move_value(sender, address, value)
            ctx = self._context(
                sender=sender, value=value, address=address, code_address=address, depth=0
            )
            contract.constructor(ctx, *args, **kwargs)
            return address

        receipt = self._run_transaction(
            sender=sender, to=None, function="constructor", value=value, body=body
        )
        logger.info(
            "Contract deployed",
            address=receipt.return_value,
            contract=type(contract).__name__,
            deployer=sender,
        )
        return receipt.return_value

    def transact(
        self, sender: str, to: str, function: str, *args: Any, value: int = 0, **kwargs: Any
    ) -> TransactionReceipt:
        """
        Execute a state-mutating call as one transaction

        Returns:
            Receipt of the committed transaction

        Raises:
            Whatever the called code raised, after full rollback
        """
        sender = normalize_address(sender)
        to = normalize_address(to)
        call = Call(function=function, args=args, kwargs=kwargs)

        return self._run_transaction(
            sender=sender,
            to=to,
            function=function,
            value=value,
            body=lambda: self._message_call(
                sender=sender, to=to, call=call, value=value, origin=sender, depth=0
            ),
        )

    def call(
        self,
        to: str,
        function: str,
        *args: Any,
        sender: str = ZERO_ADDRESS,
        value: int = 0,
        **kwargs: Any,
    ) -> Any:
        """Execute a call against current state and discard every effect"""
        self._ensure_idle()
        sender = normalize_address(sender)
        block = BlockInfo(number=self.block_number, timestamp=self._next_timestamp())
        self._tx = _PendingTransaction(tx_id=generate_tx_id(), block=block)
        snapshot = self._snapshot()
        try:
            return self._message_call(
                sender=sender,
                to=normalize_address(to),
                call=Call(function=function, args=args, kwargs=kwargs),
                value=value,
                origin=sender,
                depth=0,
            )
        finally:
            self._restore(snapshot)
            self._tx = None

    def _run_transaction(
        self,
        *,
        sender: str,
        to: str | None,
        function: str,
        value: int,
        body: Callable[[], Any],
    ) -> TransactionReceipt:
        self._ensure_idle()
        tx = _PendingTransaction(
            tx_id=generate_tx_id(),
            block=BlockInfo(number=self.block_number + 1, timestamp=self._next_timestamp()),
        )
        self._tx = tx
        snapshot = self._snapshot()
        status = "failure"
        operation = LogOperation(
            logger,
            "transaction",
            tx_id=tx.tx_id,
            function=function,
            sender=sender,
            to=to,
            value=value,
        )
        try:
            with operation:
                return_value = body()
                if self.event_store is not None:
                    self.event_store.append(tx.tx_id, tx.events)
            status = "success"
        except Exception:
            self._restore(snapshot)
            raise
        finally:
            self._tx = None
            transactions_total.labels(function=function, status=status).inc()
            transaction_duration_seconds.labels(function=function).observe(
                operation.duration_seconds
            )

        self.block_number = tx.block.number
        self.timestamp = tx.block.timestamp
        receipt = TransactionReceipt(
            tx_id=tx.tx_id,
            block_number=tx.block.number,
            timestamp=tx.block.timestamp,
            sender=sender,
            to=to,
            function=function,
            value=value,
            return_value=return_value,
            events=tx.events,
        )
        self.receipts.append(receipt)
        self.bus.publish_events(tx.events)
        for hook in tx.commit_hooks:
            hook()
        return receipt

    # ========== Message calls (used by ExecutionContext) ==========

    def _message_call(
        self, *, sender: str, to: str, call: Call, value: int, origin: str, depth: int
    ) -> Any:
        if depth > self.max_call_depth:
            raise CallDepthExceeded(self.max_call_depth)
        to = normalize_address(to)
        code = self._code.get(to)
        if code is None:
            raise NoCodeAtAddress(to)

        snapshot = self._snapshot()
        try:
            self._move_value(sender, to, value)
            ctx = self._context(
                sender=sender,
                value=value,
                address=to,
                code_address=to,
                depth=depth,
                origin=origin,
            )
            return code.handle(ctx, call)
        except Exception:
            self._restore(snapshot)
            raise

    def _delegate_call(self, ctx: ExecutionContext, target: str, call: Call) -> Any:
        if ctx.depth + 1 > self.max_call_depth:
            raise CallDepthExceeded(self.max_call_depth)
        target = normalize_address(target)
        code = self._code.get(target)
        if code is None:
            raise NoCodeAtAddress(target)

        snapshot = self._snapshot()
        try:
            delegated = self._context(
                sender=ctx.sender,
                value=ctx.value,
                address=ctx.address,
                code_address=target,
                depth=ctx.depth + 1,
                origin=ctx.origin,
            )
            return code.handle(delegated, call)
        except Exception:
            self._restore(snapshot)
            raise

    def _emit(self, ctx: ExecutionContext, event_type: str, payload: dict) -> Event:
        if self._tx is None:
            raise RuntimeError("Events can only be emitted while a transaction executes")
        event = create_event(
            event_id=generate_id(),
            tx_id=self._tx.tx_id,
            block_number=self._tx.block.number,
            log_index=len(self._tx.events),
            address=ctx.address,
            event_type=event_type,
            timestamp=self._tx.block.timestamp,
            payload=payload,
        )
        self._tx.events.append(event)
        return event

    def _on_commit(self, hook: Callable[[], None]) -> None:
        if self._tx is None:
            raise RuntimeError("Commit hooks can only be registered while a transaction executes")
        self._tx.commit_hooks.append(hook)

    # ========== Internals ==========

    def _context(
        self,
        *,
        sender: str,
        value: int,
        address: str,
        code_address: str,
        depth: int,
        origin: str | None = None,
    ) -> ExecutionContext:
        assert self._tx is not None
        return ExecutionContext(
            self,
            sender=sender,
            value=value,
            address=address,
            code_address=code_address,
            origin=origin or sender,
            block=self._tx.block,
            depth=depth,
        )

    def _account(self, address: str) -> AccountState:
        address = normalize_address(address)
        account = self._accounts.get(address)
        if account is None:
            account = AccountState(address=address)
            self._accounts[address] = account
        return account

    def _move_value(self, sender: str, to: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"Value cannot be negative: {value}")
        if value == 0:
            return
        source = self._account(sender)
        if source.balance < value:
            raise InsufficientBalance(source.address, source.balance, value)
        source.balance -= value
        self._account(to).balance += value

    def _next_timestamp(self) -> int:
        # Block time never moves backwards, even if the clock does
        return max(self.clock.now(), self.timestamp)

    def _ensure_idle(self) -> None:
        if self._tx is not None:
            raise TransactionInProgress()

    def _snapshot(self) -> _Snapshot:
        return (
            {a: s.model_copy(deep=True) for a, s in self._accounts.items()},
            dict(self._code),
            len(self._tx.events) if self._tx else 0,
            len(self._tx.commit_hooks) if self._tx else 0,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        accounts, code, event_count, hook_count = snapshot
        self._accounts = accounts
        self._code = code
        if self._tx is not None:
            del self._tx.events[event_count:]
            del self._tx.commit_hooks[hook_count:]
