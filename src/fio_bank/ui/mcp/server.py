"""MCP server exposing FIO Bank statements via Anthropic MCP SDK."""

from __future__ import annotations

import asyncio
from datetime import date
import sys
from typing import Annotated

from dotenv import load_dotenv
from loguru import logger
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from fio_bank.core.config import FioConfig, load_fio_config_from_env, resolve_token
from fio_bank.infra.clients.fio import FioClient, StatementFailed
from fio_bank.ui.formatting import format_error, format_statement

# Load environment variables
load_dotenv(override=False)

mcp = FastMCP(name="fio-bank-mcp")

# One client per process so the cooldown spans tool calls
_client: FioClient | None = None


def get_client(config: FioConfig) -> FioClient:
    global _client
    if _client is None:
        _client = FioClient.from_config(config)
    return _client


def _parse_date(value: str, name: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ToolError(f"{name} must be a date in YYYY-MM-DD format") from e


@mcp.tool()
async def fio_get_transactions(
    date_from: Annotated[str, Field(description="Start date (YYYY-MM-DD)")],
    date_to: Annotated[str, Field(description="End date (YYYY-MM-DD)")],
    token: Annotated[
        str | None,
        Field(
            description=(
                "FIO API token (64 chars). Optional if FIO_API_TOKEN env var is set."
            )
        ),
    ] = None,
) -> str:
    """
    Get account transactions for a date range from FIO Bank.

    Returns account info (IBAN, BIC, balance) and transactions with:
    - Transaction ID, date, amount, currency
    - Counter account (number, name, bank)
    - Payment symbols (variable, constant, specific)
    - Message, comments, transaction type

    Rate limit: 1 request per 30 seconds.
    Data older than 90 days requires unlock in internet banking.
    """
    config = load_fio_config_from_env()
    api_token = resolve_token(token, config)
    start = _parse_date(date_from, "date_from")
    end = _parse_date(date_to, "date_to")

    client = get_client(config)
    # The cooldown wait blocks; keep it off the event loop
    result = await asyncio.to_thread(client.fetch_statement, api_token, start, end)

    if isinstance(result, StatementFailed):
        raise ToolError(format_error(result.error))
    return format_statement(result.statement)


def main() -> None:
    # stdout carries the protocol
    logger.remove()
    logger.add(sys.stderr, level="INFO")
    logger.info("FIO Bank MCP Server running")
    mcp.run()


if __name__ == "__main__":
    main()
