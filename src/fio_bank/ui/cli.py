from __future__ import annotations

from datetime import date, timedelta
import json
from typing import Any

from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
import typer

from fio_bank.core.config import load_fio_config_from_env, resolve_token
from fio_bank.errors import ConfigurationError, FioClientError
from fio_bank.infra.clients.fio import FioClient, StatementFailed
from fio_bank.ui.formatting import format_error, format_statement, format_summary

# Load environment variables from .env
load_dotenv()

DEFAULT_LOOKBACK_DAYS = 30

app = typer.Typer(help="FIO Bank statement CLI.", no_args_is_help=True)


@app.callback()
def main_callback() -> None:
    """FIO Bank statement CLI."""


def _parse_date(value: str | None, default: date) -> date:
    if value is None:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(f"{value!r} is not a YYYY-MM-DD date") from e


def _raw_transactions(raw: dict[str, Any]) -> list[Any]:
    statement = raw.get("accountStatement")
    if not isinstance(statement, dict):
        return []
    transaction_list = statement.get("transactionList")
    if not isinstance(transaction_list, dict):
        return []
    transactions = transaction_list.get("transaction")
    return transactions if isinstance(transactions, list) else []


def _echo_markdown(text: str, *, plain: bool) -> None:
    console = Console()
    if plain or not console.is_terminal:
        typer.echo(text)
        return
    console.print(Markdown(text))


@app.command("transactions")
def transactions_cmd(
    date_from: str | None = typer.Argument(
        None, help="Start date (YYYY-MM-DD). Defaults to 30 days ago."
    ),
    date_to: str | None = typer.Argument(
        None, help="End date (YYYY-MM-DD). Defaults to today."
    ),
    token: str | None = typer.Option(
        None, help="FIO API token. Defaults to FIO_API_TOKEN."
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Print the first raw transaction and exit."
    ),
    plain: bool = typer.Option(False, "--plain", help="Disable rich rendering."),
) -> None:
    """Fetch and print the account statement for a date range."""
    today = date.today()
    start = _parse_date(date_from, today - timedelta(days=DEFAULT_LOOKBACK_DAYS))
    end = _parse_date(date_to, today)

    try:
        config = load_fio_config_from_env()
        api_token = resolve_token(token, config)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    client = FioClient.from_config(config)
    typer.echo(f"Fetching transactions from {start} to {end}...\n")

    if debug:
        try:
            raw = client.fetch_raw(api_token, start, end)
        except FioClientError as e:
            typer.echo(format_error(e), err=True)
            raise typer.Exit(1) from None
        raw_transactions = _raw_transactions(raw)
        if raw_transactions:
            typer.echo("=== Raw Transaction Sample ===")
            typer.echo(json.dumps(raw_transactions[0], indent=2, default=str))
        else:
            typer.echo("No transactions in raw response.")
        return

    result = client.fetch_statement(api_token, start, end)
    if isinstance(result, StatementFailed):
        typer.echo(format_error(result.error), err=True)
        raise typer.Exit(1)

    text = format_statement(result.statement)
    text += "\n## Summary\n\n" + format_summary(result.statement)
    _echo_markdown(text, plain=plain)


if __name__ == "__main__":
    app()
