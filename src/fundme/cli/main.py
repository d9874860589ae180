"""
FundMe CLI

Command-line interface for running faucet simulations and inspecting the
event log they leave behind.

Usage:
    fundme simulate --db faucet.db --deposit 0.1 --requests 3 --interval 30
    fundme simulate --db faucet.db --json-logs --metrics-port 9090
    fundme events --db faucet.db --type TokensDispensed
    fundme stats --db faucet.db
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from fundme.faucet.models import FaucetConfig
from fundme.faucet.projections import FaucetActivityLog
from fundme.faucet.service import FaucetService
from fundme.kernel.chain import Chain
from fundme.kernel.errors import ContractRevert
from fundme.kernel.event_store import SQLiteEventStore
from fundme.kernel.logging import configure_logging
from fundme.kernel.metrics import start_metrics_server
from fundme.kernel.time import TestClock
from fundme.kernel.units import from_wei, to_wei
from fundme.token.contract import FundMeToken

# Configure logging to stderr (avoids polluting stdout for JSON output)
configure_logging(json_output=False, log_level="WARNING")

app = typer.Typer(
    name="fundme",
    help="FundMe - token faucet on a deterministic chain",
    add_completion=False,
)

DEFAULT_DB = Path(".fundme.db")


def format_units(value: int) -> str:
    """Render base units as a plain decimal amount (e.g. 0.01)"""
    return f"{from_wei(value).normalize():f}"


def get_event_store(db_path: Path) -> SQLiteEventStore:
    """Open an existing event store"""
    if not db_path.exists():
        typer.echo(f"Error: Database not found: {db_path}", err=True)
        typer.echo(f"Run 'fundme simulate --db {db_path}' to create one", err=True)
        raise typer.Exit(1)
    return SQLiteEventStore(db_path)


@app.command()
def simulate(
    db: Annotated[Path, typer.Option("--db", help="Database path")] = DEFAULT_DB,
    deposit: Annotated[
        Decimal,
        typer.Option("--deposit", help="Ether deposited before requesting", parser=Decimal),
    ] = Decimal("0.1"),
    requests: Annotated[
        int, typer.Option("--requests", min=1, help="Number of token requests")
    ] = 3,
    interval: Annotated[
        int, typer.Option("--interval", min=0, help="Seconds between requests")
    ] = 60,
    reserve: Annotated[
        Decimal,
        typer.Option("--reserve", help="Tokens placed in the faucet reserve", parser=Decimal),
    ] = Decimal("1"),
    json_logs: Annotated[
        bool, typer.Option("--json-logs", help="Emit JSON logs on stderr")
    ] = False,
    metrics_port: Annotated[
        Optional[int],
        typer.Option("--metrics-port", help="Expose Prometheus metrics on this port"),
    ] = None,
) -> None:
    """Deploy a token and faucet, deposit, then request tokens repeatedly"""
    if json_logs:
        configure_logging(json_output=True, log_level="INFO")
    if metrics_port is not None:
        start_metrics_server(metrics_port)
        typer.echo(f"✓ Metrics at http://0.0.0.0:{metrics_port}/metrics")

    if deposit < 0 or reserve < 0:
        typer.echo("Error: --deposit and --reserve cannot be negative", err=True)
        raise typer.Exit(1)

    clock = TestClock()
    chain = Chain(clock=clock, event_store=SQLiteEventStore(db))
    config = FaucetConfig()

    owner = chain.create_account(balance=to_wei("10"))
    user = chain.create_account(balance=to_wei(deposit) + to_wei("1"))

    reserve_units = to_wei(reserve)
    token = chain.deploy(owner, FundMeToken(), owner, reserve_units)
    faucet = chain.deploy(owner, FaucetService(), token, config)
    chain.transact(owner, token, "transfer", faucet, reserve_units)

    typer.echo(f"✓ Token deployed: {token}")
    typer.echo(f"✓ Faucet deployed: {faucet}")
    typer.echo(f"  Reserve: {format_units(reserve_units)} FMT")

    if deposit > 0:
        receipt = chain.transact(user, faucet, "deposit_funds", value=to_wei(deposit))
        typer.echo(f"✓ Deposited {deposit} ETH (exchanged: {format_units(receipt.return_value)})")

    for n in range(1, requests + 1):
        try:
            receipt = chain.transact(user, faucet, "request_tokens")
        except ContractRevert as e:
            typer.echo(f"✗ Request {n} at {clock.now()}: {e.selector}")
        else:
            typer.echo(
                f"✓ Request {n} at {receipt.timestamp}: "
                f"received {format_units(config.withdrawal_amount)} FMT, "
                f"next at {receipt.return_value}"
            )
        clock.advance_seconds(interval)

    balance = chain.call(token, "balance_of", user)
    typer.echo(f"\nUser {user} holds {format_units(balance)} FMT")
    typer.echo(f"Faucet reserve: {format_units(chain.call(faucet, 'token_reserve'))} FMT")


@app.command()
def events(
    db: Annotated[Path, typer.Option("--db", help="Database path")] = DEFAULT_DB,
    address: Annotated[
        Optional[str], typer.Option("--address", help="Emitting address")
    ] = None,
    event_type: Annotated[
        Optional[str], typer.Option("--type", help="Event type, e.g. TokensDispensed")
    ] = None,
    limit: Annotated[
        Optional[int], typer.Option("--limit", min=1, help="Maximum number of events")
    ] = None,
) -> None:
    """Print stored events as JSON"""
    store = get_event_store(db)
    found = store.query_events(address=address, event_type=event_type, limit=limit)
    typer.echo(json.dumps([e.model_dump() for e in found], indent=2, default=str))


@app.command()
def stats(
    db: Annotated[Path, typer.Option("--db", help="Database path")] = DEFAULT_DB,
) -> None:
    """Rebuild faucet activity from the event log and print it"""
    store = get_event_store(db)

    activity = FaucetActivityLog()
    activity.apply_events(store.load_all_events())
    totals = activity.totals()

    typer.echo(f"Events: {store.count_events()} in {store.count_transactions()} transactions")
    typer.echo(f"Accounts: {totals['accounts']}")
    typer.echo(f"Deposits: {totals['deposits']} ({format_units(totals['exchanged_value'])} ETH)")
    typer.echo(
        f"Withdrawals: {totals['withdrawals']} "
        f"({format_units(totals['tokens_dispensed'])} FMT)"
    )

    for entry in activity.list_accounts():
        typer.echo(
            f"  {entry.account}: {entry.withdrawal_count} withdrawals, "
            f"{format_units(entry.tokens_received)} FMT, "
            f"exchanged {format_units(entry.exchanged_value)} ETH"
        )


if __name__ == "__main__":
    app()
