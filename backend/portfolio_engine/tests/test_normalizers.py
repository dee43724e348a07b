"""Flat-file parser and field normalizer contracts.

Covers: identifier normalization, amount parsing, DD/MM/YYYY dates and
sentinels, month/day intervals, header handling, quoted fields and ragged rows.
"""

from __future__ import annotations

from datetime import date

import pytest

from portfolio_engine.io import (
    clean_text,
    days_until,
    months_between,
    normalize_identifier,
    parse_amount,
    parse_ddmmyyyy,
    parse_flat_file,
    read_headers,
)


# ── normalize_identifier ─────────────────────────────────────────────────────

class TestNormalizeIdentifier:
    def test_strips_leading_zeros(self) -> None:
        assert normalize_identifier("000123") == "123"

    def test_all_zeros_collapse_to_single_zero(self) -> None:
        assert normalize_identifier("0000") == "0"

    def test_blank_and_none(self) -> None:
        assert normalize_identifier("") == ""
        assert normalize_identifier("   ") == ""
        assert normalize_identifier(None) == ""

    def test_inner_zeros_kept(self) -> None:
        assert normalize_identifier("0010200") == "10200"

    @pytest.mark.parametrize("raw", ["000123", "0000", "123", " 0045 ", "", "A0001"])
    def test_idempotent(self, raw: str) -> None:
        once = normalize_identifier(raw)
        assert normalize_identifier(once) == once


# ── parse_amount ─────────────────────────────────────────────────────────────

class TestParseAmount:
    def test_thousands_separators(self) -> None:
        assert parse_amount("2,600,000") == 2_600_000.0

    def test_negative_and_decimal(self) -> None:
        assert parse_amount("-1,234.50") == -1234.5

    def test_unparseable_is_zero(self) -> None:
        assert parse_amount("abc") == 0.0
        assert parse_amount("") == 0.0
        assert parse_amount(None) == 0.0

    def test_non_finite_is_zero(self) -> None:
        assert parse_amount("inf") == 0.0
        assert parse_amount(float("nan")) == 0.0

    def test_numbers_pass_through(self) -> None:
        assert parse_amount(42) == 42.0


# ── parse_ddmmyyyy ───────────────────────────────────────────────────────────

class TestParseDate:
    def test_valid_date(self) -> None:
        assert parse_ddmmyyyy("31/03/2024") == "2024-03-31"

    def test_single_digit_parts(self) -> None:
        assert parse_ddmmyyyy("1/4/2024") == "2024-04-01"

    @pytest.mark.parametrize("sentinel", ["00/00/0000", "00000000", "99/99/9999"])
    def test_sentinels(self, sentinel: str) -> None:
        assert parse_ddmmyyyy(sentinel) is None

    def test_wrong_separator(self) -> None:
        assert parse_ddmmyyyy("31-03-2024") is None

    def test_impossible_calendar_date(self) -> None:
        assert parse_ddmmyyyy("31/02/2024") is None

    def test_two_digit_year_rejected(self) -> None:
        assert parse_ddmmyyyy("31/03/24") is None

    def test_blank(self) -> None:
        assert parse_ddmmyyyy("") is None
        assert parse_ddmmyyyy(None) is None


# ── Intervals ────────────────────────────────────────────────────────────────

class TestIntervals:
    def test_months_ignore_day_of_month(self) -> None:
        assert months_between("2030-01-15", date(2024, 3, 31)) == 70
        assert months_between("2024-04-01", "2024-03-31") == 1

    def test_months_unknown(self) -> None:
        assert months_between(None, date(2024, 3, 31)) is None

    def test_days_until(self) -> None:
        assert days_until("2024-04-15", date(2024, 3, 31)) == 15
        assert days_until("2024-03-01", date(2024, 3, 31)) == -30
        assert days_until(None, date(2024, 3, 31)) is None


# ── Flat-file parser ─────────────────────────────────────────────────────────

class TestFlatFile:
    def test_basic_rows(self) -> None:
        rows = parse_flat_file("A, B ,C\n1, 2 ,3\n4,5,6\n")
        assert rows == [{"A": "1", "B": "2", "C": "3"}, {"A": "4", "B": "5", "C": "6"}]

    def test_header_only_is_empty(self) -> None:
        assert parse_flat_file("A,B,C\n") == []
        assert parse_flat_file("") == []

    def test_blank_lines_skipped(self) -> None:
        rows = parse_flat_file("A,B\n\n1,2\n   \n3,4\n")
        assert [r["A"] for r in rows] == ["1", "3"]

    def test_short_rows_padded(self) -> None:
        rows = parse_flat_file("A,B,C\n1\n")
        assert rows == [{"A": "1", "B": "", "C": ""}]

    def test_extra_fields_ignored(self) -> None:
        rows = parse_flat_file("A,B\n1,2,3,4\n")
        assert rows == [{"A": "1", "B": "2"}]

    def test_quoted_field_with_comma(self) -> None:
        rows = parse_flat_file('Name,Bal\n"RAO, ASHA","2,600,000"\n')
        assert rows[0]["Name"] == "RAO, ASHA"
        assert parse_amount(rows[0]["Bal"]) == 2_600_000.0

    def test_crlf_and_bom(self) -> None:
        text = "\ufeffAcNo,CIFNo\r\n0001,0002\r\n"
        assert read_headers(text) == ["AcNo", "CIFNo"]
        assert parse_flat_file(text) == [{"AcNo": "0001", "CIFNo": "0002"}]

    def test_only_lf_and_crlf_break_records(self) -> None:
        text = "AcNo,Name1\n1,A\u2028B\n2,C\x0cD\x1cE\n3,F\x0bG\r\n"
        rows = parse_flat_file(text)
        assert [r["AcNo"] for r in rows] == ["1", "2", "3"]
        assert rows[0]["Name1"] == "A\u2028B"
        assert rows[1]["Name1"] == "C\x0cD\x1cE"

    def test_values_kept_as_text(self) -> None:
        rows = parse_flat_file("AcNo,Bal,Flag\n0007,1.50,NA\n")
        assert rows == [{"AcNo": "0007", "Bal": "1.50", "Flag": "NA"}]

    def test_clean_text(self) -> None:
        assert clean_text("  x ") == "x"
        assert clean_text(float("nan")) == ""
