"""Tests for the statement CSV adapter and transaction validation."""

from datetime import date
from decimal import Decimal
import io

import pytest

from statement_engine._warnings import DataQualityWarning
from statement_engine.exceptions import StatementFormatError, TransactionValidationError
from statement_engine.ingest import (
    parse_statement_amount,
    parse_statement_csv,
    parse_statement_date,
    validate_transactions,
)
from statement_engine.models import ActivityType, EntryKind


class TestParseHelpers:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2023-10-05", date(2023, 10, 5)),
            ("05.10.2023", date(2023, 10, 5)),
            (" 2023.10.05 ", date(2023, 10, 5)),
            ('"05-10-2023"', date(2023, 10, 5)),
            ("", None),
            ("not a date", None),
        ],
    )
    def test_parse_statement_date(self, value, expected):
        assert parse_statement_date(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1500", Decimal("1500")),
            ("-1 250,50", Decimal("-1250.50")),
            ('"2500.00"', Decimal("2500.00")),
            ("₸ 300", Decimal("300")),
            ("", None),
            ("abc", None),
            ("NaN", None),
        ],
    )
    def test_parse_statement_amount(self, value, expected):
        assert parse_statement_amount(value) == expected


class TestParseStatementCsv:
    def test_english_headers(self):
        source = io.StringIO(
            "Date,Description,Amount\n"
            "2023-10-02,Invoice 17,5000\n"
            "2023-10-05,Office rent,-1500\n"
        )
        transactions = parse_statement_csv(source)
        assert [t.id for t in transactions] == ["tx_1", "tx_2"]
        assert transactions[0].type is EntryKind.INCOME
        assert transactions[1].type is EntryKind.EXPENSE
        assert transactions[1].amount == Decimal("1500")
        assert transactions[1].description == "Office rent"
        assert transactions[1].counterparty is None

    def test_russian_headers_and_counterparty(self):
        source = io.StringIO(
            "Дата операции,Описание платежа,Сумма,Контрагент\n"
            "02.10.2023,Оплата по счету,5000,ТОО Ромашка\n"
        )
        (transaction,) = parse_statement_csv(source)
        assert transaction.date == date(2023, 10, 2)
        assert transaction.counterparty == "ТОО Ромашка"

    def test_invalid_rows_are_skipped_with_warning(self):
        source = io.StringIO(
            "date,description,amount\n"
            "2023-10-02,ok,100\n"
            "garbage,bad date,100\n"
            "2023-10-03,zero,0\n"
            "2023-10-04,bad amount,n/a\n"
        )
        with pytest.warns(DataQualityWarning, match="Skipped 3"):
            transactions = parse_statement_csv(source)
        assert [t.id for t in transactions] == ["tx_1"]

    def test_missing_column(self):
        source = io.StringIO("date,description\n2023-10-02,x\n")
        with pytest.raises(StatementFormatError) as exc_info:
            parse_statement_csv(source)
        assert exc_info.value.columns == ["amount"]

    def test_reads_from_path(self, tmp_path):
        path = tmp_path / "statement.csv"
        path.write_text("date,description,amount\n2023-10-02,Invoice,42.5\n", encoding="utf-8")
        (transaction,) = parse_statement_csv(path)
        assert transaction.amount == Decimal("42.5")


class TestValidateTransactions:
    def test_accepts_camel_case_payload(self):
        records = [
            {
                "id": "t1",
                "date": "2023-10-20",
                "description": "Lathe",
                "amount": 3000,
                "type": "expense",
                "category": "equipment",
                "transactionType": "investing",
                "isCapitalized": True,
            }
        ]
        (transaction,) = validate_transactions(records)
        assert transaction.transaction_type is ActivityType.INVESTING
        assert transaction.is_capitalized
        assert transaction.amount == Decimal("3000")

    def test_accepts_snake_case_payload(self):
        records = [
            {
                "id": "t1",
                "date": "2023-10-02",
                "amount": "5000.00",
                "type": "income",
                "category": "core-revenue",
                "transaction_type": "operating",
            }
        ]
        (transaction,) = validate_transactions(records)
        assert transaction.date == date(2023, 10, 2)
        assert transaction.description == ""

    def test_collects_every_issue(self):
        records = [
            {"id": "a", "date": "2023-10-02", "amount": "NaN", "type": "income", "category": "x"},
            {"id": "b", "date": "yesterday", "amount": 5, "type": "income", "category": "x"},
            {"id": "c", "date": "2023-10-02", "amount": -5, "type": "refund", "category": "x"},
        ]
        with pytest.raises(TransactionValidationError) as exc_info:
            validate_transactions(records)
        issues = exc_info.value.issues
        assert any(issue.startswith("record 0 (a): amount") for issue in issues)
        assert any(issue.startswith("record 1 (b): date") for issue in issues)
        assert any(issue.startswith("record 2 (c): amount") for issue in issues)
        assert any(issue.startswith("record 2 (c): type") for issue in issues)

    def test_duplicate_ids_rejected(self):
        record = {
            "id": "a",
            "date": "2023-10-02",
            "amount": 5,
            "type": "income",
            "category": "x",
            "transactionType": "operating",
        }
        with pytest.raises(TransactionValidationError, match="duplicate transaction id"):
            validate_transactions([record, dict(record)])

    def test_income_capitalization_dropped(self):
        record = {
            "id": "a",
            "date": "2023-10-02",
            "amount": 5,
            "type": "income",
            "category": "core-revenue",
            "transactionType": "operating",
            "isCapitalized": True,
        }
        assert not validate_transactions([record])[0].is_capitalized

    def test_missing_activity_type_rejected(self):
        """Loan proceeds without an activity must not default into revenue."""
        record = {
            "id": "loan",
            "date": "2023-10-02",
            "amount": 20000,
            "type": "income",
            "category": "loan-proceeds",
        }
        with pytest.raises(TransactionValidationError) as exc_info:
            validate_transactions([record])
        assert any("transactionType" in issue for issue in exc_info.value.issues)
