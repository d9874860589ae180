"""
Faucet ledger - per-account records kept in the faucet's storage

The ledger only stores and returns records; deciding whether an
operation is allowed belongs to the service and the invariants.
"""

from collections.abc import Iterator, MutableMapping
from typing import Any

from fundme.faucet.invariants import validate_exchange_monotonic
from fundme.faucet.models import FaucetAccount
from fundme.kernel.ids import normalize_address

_ACCOUNT_PREFIX = "faucet.account."


class FaucetLedger:
    """Typed access to FaucetAccount records in a storage mapping"""

    def __init__(self, storage: MutableMapping[str, Any]) -> None:
        self._storage = storage

    def get(self, address: str) -> FaucetAccount:
        """Record of an account, zero-initialized if it never deposited"""
        address = normalize_address(address)
        data = self._storage.get(_ACCOUNT_PREFIX + address)
        if data is None:
            return FaucetAccount(address=address)
        return FaucetAccount(**data)

    def record_deposit(self, address: str, value: int) -> FaucetAccount:
        """Add ``value`` to the account's exchanged value"""
        previous = self.get(address)
        updated = previous.model_copy(
            update={"exchanged_value": previous.exchanged_value + value}
        )
        validate_exchange_monotonic(previous, updated)
        self._put(updated)
        return updated

    def record_withdrawal(self, address: str, timestamp: int) -> FaucetAccount:
        """Advance the account's last withdrawal time"""
        updated = self.get(address).model_copy(update={"last_withdrawal_time": timestamp})
        self._put(updated)
        return updated

    def accounts(self) -> Iterator[FaucetAccount]:
        """Every account with a record, in storage order"""
        for key in self._storage:
            if key.startswith(_ACCOUNT_PREFIX):
                yield FaucetAccount(**self._storage[key])

    def _put(self, account: FaucetAccount) -> None:
        self._storage[_ACCOUNT_PREFIX + account.address] = account.model_dump()
