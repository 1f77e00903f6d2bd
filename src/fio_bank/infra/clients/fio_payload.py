"""FIO API response models and normalization into the statement types.

The provider encodes each transaction as positional ``columnN`` keys, each
holding a nullable ``{"value": ...}`` wrapper. ``COLUMN_MAP`` is the single
place that gives those columns a meaning.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
import re
from typing import Annotated, Any, Self

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from fio_bank.errors import MalformedResponse
from fio_bank.models.statement import AccountInfo, AccountStatement, Transaction

_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _float_to_decimal(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    return value


Amount = Annotated[Decimal, BeforeValidator(_float_to_decimal)]


# ---------------------------------------------------------------------------
# Raw provider models
# ---------------------------------------------------------------------------


class FioBaseModel(BaseModel):
    """Shared base for FIO response models with a short parse alias."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @classmethod
    def parse(cls, data: Any) -> Self:
        return cls.model_validate(data)


class RawColumn(FioBaseModel):
    """Nullable ``{value}`` wrapper around one column of a transaction."""

    value: Any = None


class RawTransaction(FioBaseModel):
    column0: RawColumn | None = None
    column1: RawColumn | None = None
    column2: RawColumn | None = None
    column3: RawColumn | None = None
    column4: RawColumn | None = None
    column5: RawColumn | None = None
    column6: RawColumn | None = None
    column7: RawColumn | None = None
    column8: RawColumn | None = None
    column9: RawColumn | None = None
    column10: RawColumn | None = None
    column12: RawColumn | None = None
    column14: RawColumn | None = None
    column16: RawColumn | None = None
    column17: RawColumn | None = None
    column18: RawColumn | None = None
    column22: RawColumn | None = None
    column25: RawColumn | None = None
    column26: RawColumn | None = None
    column27: RawColumn | None = None

    def value_of(self, column: str) -> Any:
        wrapper: RawColumn | None = getattr(self, column)
        return None if wrapper is None else wrapper.value


class RawAccountInfo(FioBaseModel):
    account_id: str = Field(alias="accountId")
    bank_id: str = Field(alias="bankId")
    currency: str
    iban: str
    bic: str
    opening_balance: Amount = Field(alias="openingBalance")
    closing_balance: Amount = Field(alias="closingBalance")
    date_start: str | None = Field(default=None, alias="dateStart")
    date_end: str | None = Field(default=None, alias="dateEnd")
    id_from: int | None = Field(default=None, alias="idFrom")
    id_to: int | None = Field(default=None, alias="idTo")


class RawTransactionList(FioBaseModel):
    transaction: list[RawTransaction] | None = None


class RawAccountStatement(FioBaseModel):
    info: RawAccountInfo
    transaction_list: RawTransactionList | None = Field(
        default=None, alias="transactionList"
    )


class FioPayload(FioBaseModel):
    account_statement: RawAccountStatement = Field(alias="accountStatement")


# ---------------------------------------------------------------------------
# Column table
# ---------------------------------------------------------------------------


def strip_date_offset(value: str) -> str:
    """Drop the UTC offset the provider appends to plain dates.

    ``"2024-01-15+01:00"`` and ``"2024-01-15"`` both become ``"2024-01-15"``.
    The offset is discarded, not applied.
    """
    match = _DATE_PREFIX.match(value)
    if match:
        return match.group(0)
    return value.split("+", 1)[0]


def _as_date(value: Any) -> date:
    return date.fromisoformat(strip_date_offset(str(value)))


def _as_date_or_none(value: Any) -> date | None:
    if not str(value).strip():
        return None
    return _as_date(value)


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _as_text(value: Any) -> str:
    return str(value)


def _as_text_or_none(value: Any) -> str | None:
    # Empty name means "no name" upstream
    return str(value) or None


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError, ArithmeticError):
        return None


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Maps one provider column onto one Transaction field."""

    column: str
    field: str
    transform: Callable[[Any], Any]
    default: Any = None


COLUMN_MAP: tuple[ColumnMapping, ...] = (
    ColumnMapping("column0", "date", _as_date_or_none),
    ColumnMapping("column1", "amount", _as_decimal, default=Decimal(0)),
    ColumnMapping("column2", "counter_account", _as_text),
    ColumnMapping("column3", "bank_code", _as_text),
    ColumnMapping("column4", "constant_symbol", _as_text),
    ColumnMapping("column5", "variable_symbol", _as_text),
    ColumnMapping("column6", "specific_symbol", _as_text),
    ColumnMapping("column7", "user_identification", _as_text),
    ColumnMapping("column8", "transaction_type", _as_text),
    ColumnMapping("column9", "performer", _as_text),
    ColumnMapping("column10", "counter_account_name", _as_text_or_none),
    ColumnMapping("column12", "bank_name", _as_text),
    ColumnMapping("column14", "currency", _as_text, default=""),
    ColumnMapping("column16", "message_for_recipient", _as_text),
    ColumnMapping("column17", "order_id", _as_int),
    ColumnMapping("column18", "specification", _as_text),
    ColumnMapping("column22", "transaction_id", _as_text, default=""),
    ColumnMapping("column25", "comment", _as_text),
    ColumnMapping("column26", "bic", _as_text),
    ColumnMapping("column27", "payer_reference", _as_text),
)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_transaction(raw: RawTransaction) -> Transaction:
    """Apply COLUMN_MAP to one raw transaction.

    Raises:
        MalformedResponse: If the date or amount column cannot be parsed.
    """
    fields: dict[str, Any] = {}
    for mapping in COLUMN_MAP:
        value = raw.value_of(mapping.column)
        try:
            converted = None if value is None else mapping.transform(value)
        except (ValueError, ArithmeticError) as e:
            raise MalformedResponse(
                f"Invalid {mapping.column} ({mapping.field}) value {value!r}"
            ) from e
        fields[mapping.field] = mapping.default if converted is None else converted
    return Transaction(**fields)


def _info_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return _as_date_or_none(value)
    except ValueError as e:
        raise MalformedResponse(f"Invalid statement date {value!r}") from e


def normalize_info(raw: RawAccountInfo) -> AccountInfo:
    return AccountInfo(
        account_id=raw.account_id,
        bank_id=raw.bank_id,
        currency=raw.currency,
        iban=raw.iban,
        bic=raw.bic,
        opening_balance=raw.opening_balance,
        closing_balance=raw.closing_balance,
        date_start=_info_date(raw.date_start),
        date_end=_info_date(raw.date_end),
        id_from=raw.id_from,
        id_to=raw.id_to,
    )


def normalize(payload: Mapping[str, Any] | FioPayload) -> AccountStatement:
    """Turn a decoded FIO response body into an AccountStatement.

    Missing optional columns become None; a missing transaction list yields
    no transactions.

    Raises:
        MalformedResponse: If the payload does not have the provider's shape.
    """
    if not isinstance(payload, FioPayload):
        try:
            payload = FioPayload.parse(payload)
        except ValidationError as e:
            raise MalformedResponse(
                f"Unexpected FIO response structure: {e.error_count()} error(s): "
                f"{e.errors()[0]['msg']}"
            ) from e

    statement = payload.account_statement
    transaction_list = statement.transaction_list
    raw_transactions = (
        transaction_list.transaction
        if transaction_list and transaction_list.transaction
        else []
    )

    return AccountStatement(
        info=normalize_info(statement.info),
        transactions=tuple(normalize_transaction(tx) for tx in raw_transactions),
    )
