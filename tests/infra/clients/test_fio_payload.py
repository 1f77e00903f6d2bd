"""Tests for FIO payload normalization."""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from typing import Any

import pytest

from fio_bank.errors import MalformedResponse
from fio_bank.infra.clients.fio_payload import (
    COLUMN_MAP,
    RawTransaction,
    normalize,
    normalize_transaction,
    strip_date_offset,
)
from fio_bank.models.statement import Transaction
from tests.fixtures.fio_payloads import empty_statement_payload, statement_payload


def _payload_with(transactions: list[dict[str, Any]]) -> dict[str, Any]:
    payload = empty_statement_payload()
    payload["accountStatement"]["transactionList"] = {"transaction": transactions}
    return payload


class TestStripDateOffset:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-01-15+01:00", "2024-01-15"),
            ("2024-01-15+02:00", "2024-01-15"),
            ("2024-01-15", "2024-01-15"),
        ],
    )
    def test_strips_offset(self, value: str, expected: str) -> None:
        assert strip_date_offset(value) == expected

    def test_is_idempotent(self) -> None:
        once = strip_date_offset("2024-01-15+01:00")

        assert strip_date_offset(once) == once


class TestNormalizeStatement:
    def test_fixture_statement(self) -> None:
        """Two transactions, balances and dates come through normalized."""
        statement = normalize(statement_payload())

        info = statement.info
        assert info.account_id == "2400222222"
        assert info.bank_id == "2010"
        assert info.currency == "CZK"
        assert info.iban == "CZ7920100000002400222222"
        assert info.bic == "FIOBCZPPXXX"
        assert info.opening_balance == Decimal("500.00")
        assert info.closing_balance == Decimal("1454.70")
        assert info.date_start == date(2024, 1, 1)
        assert info.date_end == date(2024, 1, 31)
        assert info.id_from == 26962199069
        assert info.id_to == 26962448731

        income, expense = statement.transactions
        assert income.amount == Decimal("1000.00")
        assert income.is_credit is True
        assert expense.amount == Decimal("-45.30")
        assert expense.is_credit is False
        assert [tx.currency for tx in statement.transactions] == ["CZK", "CZK"]

    def test_preserves_provider_order(self) -> None:
        statement = normalize(statement_payload())

        assert [tx.transaction_id for tx in statement.transactions] == [
            "26962199069",
            "26962448731",
        ]

    def test_maps_named_fields(self) -> None:
        income = normalize(statement_payload()).transactions[0]

        assert income.date == date(2024, 1, 10)
        assert income.counter_account == "2900233333"
        assert income.counter_account_name == "Jan Novák"
        assert income.bank_code == "2010"
        assert income.bank_name == "Fio banka, a.s."
        assert income.constant_symbol == "0308"
        assert income.variable_symbol == "1234567890"
        assert income.specific_symbol is None
        assert income.user_identification == "Rent January"
        assert income.message_for_recipient == "Rent January"
        assert income.transaction_type == "Bezhotovostní příjem"
        assert income.performer is None
        assert income.specification is None
        assert income.comment == "Rent"
        assert income.bic == "FIOBCZPPXXX"
        assert income.order_id == 30154872011
        assert income.payer_reference is None

    def test_missing_transaction_list_gives_no_transactions(self) -> None:
        statement = normalize(empty_statement_payload())

        assert statement.transactions == ()
        assert statement.info.account_id == "2400222222"
        assert statement.info.id_from is None

    def test_null_transaction_sequence_gives_no_transactions(self) -> None:
        payload = empty_statement_payload()
        payload["accountStatement"]["transactionList"] = {"transaction": None}

        assert normalize(payload).transactions == ()

    def test_info_without_dates(self) -> None:
        payload = empty_statement_payload()
        del payload["accountStatement"]["info"]["dateStart"]
        payload["accountStatement"]["info"]["dateEnd"] = None

        info = normalize(payload).info

        assert info.date_start is None
        assert info.date_end is None

    def test_empty_info_dates_are_absent(self) -> None:
        payload = empty_statement_payload()
        payload["accountStatement"]["info"]["dateStart"] = ""
        payload["accountStatement"]["info"]["dateEnd"] = " "

        info = normalize(payload).info

        assert info.date_start is None
        assert info.date_end is None

    def test_numeric_account_id_is_stringified(self) -> None:
        payload = empty_statement_payload()
        payload["accountStatement"]["info"]["accountId"] = 2400222222

        assert normalize(payload).info.account_id == "2400222222"


class TestNormalizeTransaction:
    def test_only_amount_and_currency(self) -> None:
        """Every other field is absent; id defaults to empty string."""
        statement = normalize(
            _payload_with(
                [
                    {
                        "column1": {"value": Decimal("-250.50")},
                        "column14": {"value": "CZK"},
                    }
                ]
            )
        )

        (tx,) = statement.transactions
        assert tx.amount == Decimal("-250.50")
        assert tx.currency == "CZK"
        assert tx.transaction_id == ""
        assert tx.date is None
        required = {"transaction_id", "date", "amount", "currency"}
        for field in dataclasses.fields(Transaction):
            if field.name not in required:
                assert getattr(tx, field.name) is None, field.name

    def test_missing_amount_defaults_to_zero(self) -> None:
        tx = normalize_transaction(RawTransaction.parse({"column14": {"value": "EUR"}}))

        assert tx.amount == Decimal(0)
        assert tx.is_credit is True

    def test_missing_currency_defaults_to_empty(self) -> None:
        tx = normalize_transaction(RawTransaction.parse({}))

        assert tx.currency == ""
        assert tx.transaction_id == ""

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_date_is_absent(self, value: str) -> None:
        statement = normalize(
            _payload_with(
                [{"column0": {"value": value}, "column1": {"value": Decimal(5)}}]
            )
        )

        (tx,) = statement.transactions
        assert tx.date is None
        assert tx.amount == Decimal(5)

    def test_float_amount_is_exact(self) -> None:
        tx = normalize_transaction(RawTransaction.parse({"column1": {"value": -45.3}}))

        assert tx.amount == Decimal("-45.3")

    def test_transaction_id_is_stringified(self) -> None:
        tx = normalize_transaction(
            RawTransaction.parse({"column22": {"value": 26962199069}})
        )

        assert tx.transaction_id == "26962199069"

    def test_empty_counter_account_name_is_absent(self) -> None:
        tx = normalize(statement_payload()).transactions[1]

        assert tx.counter_account_name is None

    def test_null_wrapper_and_null_value_are_absent(self) -> None:
        tx = normalize_transaction(
            RawTransaction.parse(
                {"column2": None, "column3": {"value": None}, "column1": {"value": 1}}
            )
        )

        assert tx.counter_account is None
        assert tx.bank_code is None

    def test_numeric_text_column_is_stringified(self) -> None:
        tx = normalize_transaction(RawTransaction.parse({"column5": {"value": 1234}}))

        assert tx.variable_symbol == "1234"

    def test_unparseable_order_id_is_absent(self) -> None:
        tx = normalize_transaction(
            RawTransaction.parse({"column17": {"value": "not-a-number"}})
        )

        assert tx.order_id is None

    def test_unknown_columns_are_ignored(self) -> None:
        tx = normalize_transaction(
            RawTransaction.parse({"column99": {"value": "x"}, "column1": {"value": 5}})
        )

        assert tx.amount == Decimal(5)


class TestColumnMap:
    def test_each_field_has_exactly_one_column(self) -> None:
        fields = [mapping.field for mapping in COLUMN_MAP]
        columns = [mapping.column for mapping in COLUMN_MAP]

        assert len(set(fields)) == len(fields)
        assert len(set(columns)) == len(columns)
        assert set(fields) == {f.name for f in dataclasses.fields(Transaction)}

    def test_every_column_exists_on_raw_model(self) -> None:
        for mapping in COLUMN_MAP:
            assert mapping.column in RawTransaction.model_fields


class TestMalformedPayload:
    def test_missing_account_statement(self) -> None:
        with pytest.raises(MalformedResponse):
            normalize({"unexpected": {}})

    def test_missing_required_info_field(self) -> None:
        payload = empty_statement_payload()
        del payload["accountStatement"]["info"]["iban"]

        with pytest.raises(MalformedResponse):
            normalize(payload)

    def test_transaction_sequence_not_a_list(self) -> None:
        payload = empty_statement_payload()
        payload["accountStatement"]["transactionList"] = {"transaction": "oops"}

        with pytest.raises(MalformedResponse):
            normalize(payload)

    def test_unparseable_transaction_date(self) -> None:
        with pytest.raises(MalformedResponse, match="column0"):
            normalize(_payload_with([{"column0": {"value": "yesterday"}}]))

    def test_unparseable_amount(self) -> None:
        with pytest.raises(MalformedResponse, match="column1"):
            normalize(_payload_with([{"column1": {"value": "lots"}}]))

    def test_unparseable_statement_date(self) -> None:
        payload = empty_statement_payload()
        payload["accountStatement"]["info"]["dateStart"] = "soon"

        with pytest.raises(MalformedResponse):
            normalize(payload)
