import asyncio
import json
import logging

import click
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.indexer_httpx import HttpxIndexer
from ..adapters.parquet_sink import LifecycleParquetWriter
from ..application.contracts import ContractRegistry
from ..application.queries import get_staked_events
from ..application.query_builder import build_event_query
from ..application.use_cases import load_operator_activity
from ..application.utils import _now_ts_str, quiet_loggers
from ..config import settings
from ..domain.addresses import normalize_address
from ..domain.errors import LogweaveError
from ..domain.models import QueryOptions
from ..domain.signatures import STAKING_EVENTS, canonicalize, signature_hash
from ..domain.timestamps import format_full_date, format_short_date, format_time_ago

app = typer.Typer(help="logweave: contract event lifecycles from a hosted log indexer.")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _indexer() -> HttpxIndexer:
    return HttpxIndexer(settings.indexer_api_url, api_key=settings.api_key, timeout_s=settings.timeout_s)


def _run(coro):
    try:
        with quiet_loggers():
            return asyncio.run(coro)
    except LogweaveError as e:
        raise click.ClickException(str(e))


@app.command()
def activity(
    operator: str,
    limit: int = typer.Option(10, help="Lifecycles to show (1..1000)"),
    parquet_out: str = typer.Option("", help="Directory for a Parquet export of the lifecycles"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """HTX lifecycles (assigned -> responded) for one operator."""
    _setup_logging(verbose)
    contracts = ContractRegistry.from_settings(settings)

    async def main():
        async with _indexer() as indexer:
            return await load_operator_activity(indexer=indexer, contracts=contracts, operator=operator, limit=limit)

    res = _run(main())

    if as_json:
        typer.echo(json.dumps({
            "operator": res.operator,
            "registration": res.registration.to_dict() if res.registration else None,
            "deactivation": res.deactivation.to_dict() if res.deactivation else None,
            "starting_block": res.starting_block,
            "lifecycles": [lc.to_dict() for lc in res.lifecycles],
            "errors": {k: str(v) for k, v in res.errors.items()},
        }, indent=2))
    else:
        if res.registration:
            console.print(f"[bold]registered[/] at block {res.registration.block_number:,} on "
                          f"{format_full_date(res.registration.block_timestamp)}")
        else:
            console.print("[yellow]no registration found[/]")
        if res.deactivation:
            console.print(f"[red]deactivated[/] at block {res.deactivation.block_number:,} "
                          f"({format_short_date(res.deactivation.block_timestamp)})")

        table = Table(title=f"HTX activity for {normalize_address(res.operator)}")
        for col in ("htxId", "status", "assigned", "responded", "result"):
            table.add_column(col)
        for lc in res.lifecycles:
            con = lc.concluding
            table.add_row(
                lc.correlation_key[:18] + "…",
                "[green]concluded[/]" if con else "[yellow]pending[/]",
                f"{lc.initiating.block_number:,} ({format_time_ago(lc.initiating.block_timestamp)})",
                f"{con.block_number:,}" if con else "-",
                str(getattr(con, "result", "-")) if con else "-",
            )
        console.print(table)
        for name, err in res.errors.items():
            console.print(f"[red]{name} failed[/]: {err}")

    if parquet_out:
        path = LifecycleParquetWriter(parquet_out).write(res.lifecycles, f"lifecycles_{res.operator}_{_now_ts_str()}")
        console.print(f"wrote {path}")


@app.command()
def staked(
    staker: str,
    limit: int = typer.Option(10, help="Events to show (1..1000)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """StakedTo events sent by a wallet."""
    _setup_logging(verbose)
    contracts = ContractRegistry.from_settings(settings)

    async def main():
        async with _indexer() as indexer:
            return await get_staked_events(indexer, contracts, staker, limit=limit)

    events = _run(main())
    table = Table(title=f"StakedTo events for {staker}")
    for col in ("block", "when", "operator", "amount", "tx"):
        table.add_column(col)
    for ev in events:
        table.add_row(f"{ev.block_number:,}", format_time_ago(ev.block_timestamp), ev.operator,
                      "-" if ev.amount is None else str(ev.amount), ev.tx_hash)
    console.print(table)


@app.command()
def signature(sig: str):
    """Canonical form and topic hash of an event signature."""
    try:
        console.print(f"canonical: {canonicalize(sig)}")
        console.print(f"topic0:    {signature_hash(sig)}")
    except LogweaveError as e:
        raise click.ClickException(str(e))


@app.command()
def ping(verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Check that the indexer answers a query for the staking contract."""
    _setup_logging(verbose)
    contracts = ContractRegistry.from_settings(settings)

    async def main():
        q = build_event_query(contracts.staking_operators, STAKING_EVENTS["OperatorRegistered"],
                              options=QueryOptions(select_columns=("block_num",), limit=1))
        async with _indexer() as indexer:
            return await indexer.ping(q)

    ok = _run(main())
    console.print("[green]indexer reachable[/]" if ok else "[red]indexer unreachable or empty[/]")
    if not ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
