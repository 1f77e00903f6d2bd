"""Normalized account statement types."""

from __future__ import annotations

from dataclasses import dataclass
import datetime
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class AccountInfo:
    """Account header of a statement.

    The closing balance is reported as-is; it is not reconciled against the
    transactions.
    """

    account_id: str
    bank_id: str
    currency: str
    iban: str
    bic: str
    opening_balance: Decimal
    closing_balance: Decimal
    date_start: datetime.date | None = None
    date_end: datetime.date | None = None
    id_from: int | None = None
    id_to: int | None = None


@dataclass(frozen=True, slots=True)
class Transaction:
    """One ledger entry. Amount sign decides credit vs. debit."""

    transaction_id: str
    date: datetime.date | None
    amount: Decimal
    currency: str
    counter_account: str | None = None
    counter_account_name: str | None = None
    bank_code: str | None = None
    bank_name: str | None = None
    constant_symbol: str | None = None
    variable_symbol: str | None = None
    specific_symbol: str | None = None
    user_identification: str | None = None
    message_for_recipient: str | None = None
    transaction_type: str | None = None
    performer: str | None = None
    specification: str | None = None
    comment: str | None = None
    bic: str | None = None
    order_id: int | None = None
    payer_reference: str | None = None

    @property
    def is_credit(self) -> bool:
        return self.amount >= 0


@dataclass(frozen=True, slots=True)
class AccountStatement:
    """Account info plus transactions in provider order."""

    info: AccountInfo
    transactions: tuple[Transaction, ...] = ()

    @property
    def total_income(self) -> Decimal:
        return sum(
            (tx.amount for tx in self.transactions if tx.amount > 0), Decimal(0)
        )

    @property
    def total_expenses(self) -> Decimal:
        return sum(
            (tx.amount for tx in self.transactions if tx.amount < 0), Decimal(0)
        )
