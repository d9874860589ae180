"""
Faucet Module Projections - read model for indexers

FaucetActivityLog is built from committed FundsDeposited and
TokensDispensed events. It can be fed live from the event bus or
rebuilt from the event store at any time.
"""

from fundme.faucet.models import AccountActivity
from fundme.kernel.events import Event


class FaucetActivityLog:
    """
    Per-account faucet activity

    Built from events: FundsDeposited, TokensDispensed

    Query methods: get, list_accounts, totals
    """

    def __init__(self, faucet: str | None = None) -> None:
        """
        Args:
            faucet: Only track events emitted by this address (all faucets if None)
        """
        self.faucet = faucet.lower() if faucet else None
        self.accounts: dict[str, AccountActivity] = {}

    def apply_event(self, event: Event) -> None:
        """Apply an event to update the projection"""
        if self.faucet and event.address != self.faucet:
            return
        if event.event_type == "FundsDeposited":
            self._apply_funds_deposited(event)
        elif event.event_type == "TokensDispensed":
            self._apply_tokens_dispensed(event)

    def apply_events(self, events: list[Event]) -> None:
        for event in events:
            self.apply_event(event)

    def _entry(self, account: str) -> AccountActivity:
        if account not in self.accounts:
            self.accounts[account] = AccountActivity(account=account)
        return self.accounts[account]

    def _apply_funds_deposited(self, event: Event) -> None:
        payload = event.payload
        entry = self._entry(payload["account"])
        entry.deposit_count += 1
        entry.exchanged_value = payload["exchanged_value"]

    def _apply_tokens_dispensed(self, event: Event) -> None:
        payload = event.payload
        entry = self._entry(payload["account"])
        entry.withdrawal_count += 1
        entry.tokens_received += payload["amount"]
        entry.last_withdrawal_time = payload["withdrawn_at"]
        entry.next_withdrawal_at = payload["next_withdrawal_at"]

    # ========== Query Methods ==========

    def get(self, account: str) -> AccountActivity | None:
        return self.accounts.get(account.lower())

    def list_accounts(self) -> list[AccountActivity]:
        """Accounts ordered by tokens received, largest first"""
        return sorted(self.accounts.values(), key=lambda e: e.tokens_received, reverse=True)

    def totals(self) -> dict[str, int]:
        entries = self.accounts.values()
        return {
            "accounts": len(self.accounts),
            "deposits": sum(e.deposit_count for e in entries),
            "exchanged_value": sum(e.exchanged_value for e in entries),
            "withdrawals": sum(e.withdrawal_count for e in entries),
            "tokens_dispensed": sum(e.tokens_received for e in entries),
        }
