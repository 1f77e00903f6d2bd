"""Text rendering of statements for agents and the terminal."""

from __future__ import annotations

from decimal import Decimal

from fio_bank.errors import FioClientError
from fio_bank.models.statement import AccountStatement, Transaction


def _signed(amount: Decimal) -> str:
    sign = "+" if amount >= 0 else ""
    return f"{sign}{amount:.2f}"


def _format_transaction(tx: Transaction) -> str:
    lines = [f"**{tx.date or ''}** | {_signed(tx.amount)} {tx.currency}"]

    id_line = f"ID: {tx.transaction_id}"
    if tx.transaction_type:
        id_line += f" | {tx.transaction_type}"
    lines.append(id_line)

    if tx.counter_account:
        counter = f"Counter: {tx.counter_account}"
        if tx.bank_code:
            counter += f"/{tx.bank_code}"
        if tx.counter_account_name:
            counter += f" ({tx.counter_account_name})"
        lines.append(counter)

    symbols = [
        f"{label}:{value}"
        for label, value in (
            ("VS", tx.variable_symbol),
            ("KS", tx.constant_symbol),
            ("SS", tx.specific_symbol),
        )
        if value
    ]
    if symbols:
        lines.append(f"Symbols: {' '.join(symbols)}")

    if tx.message_for_recipient:
        lines.append(f"Message: {tx.message_for_recipient}")
    if tx.comment:
        lines.append(f"Comment: {tx.comment}")

    return "\n".join(lines) + "\n"


def format_statement(statement: AccountStatement) -> str:
    """Render a statement as Markdown-like text.

    Args:
        statement: Normalized statement.

    Returns:
        Account header, balance line, optional period, then one block per
        transaction.
    """
    info = statement.info
    result = f"## Account: {info.account_id}/{info.bank_id}\n"
    result += f"IBAN: {info.iban} | BIC: {info.bic}\n"
    result += (
        f"Balance: {info.opening_balance:.2f} → {info.closing_balance:.2f} "
        f"{info.currency}\n"
    )

    if info.date_start and info.date_end:
        result += f"Period: {info.date_start} to {info.date_end}\n"

    if not statement.transactions:
        result += "\nNo transactions found.\n"
        return result

    result += f"\n## Transactions ({len(statement.transactions)})\n\n"
    for tx in statement.transactions:
        result += _format_transaction(tx) + "\n"

    return result


def format_summary(statement: AccountStatement) -> str:
    """Transaction count plus income and expense totals."""
    currency = statement.info.currency
    return (
        f"Total transactions: {len(statement.transactions)}\n"
        f"Total income: +{statement.total_income:.2f} {currency}\n"
        f"Total expenses: {statement.total_expenses:.2f} {currency}\n"
    )


def format_error(error: FioClientError) -> str:
    return f"FIO API Error ({error.status_code}): {error.message}"
