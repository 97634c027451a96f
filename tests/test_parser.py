"""
Tests for the row parser.

Parsing must never raise: every bad cell degrades to a default.
"""

import pytest

from expenseman.ledger.parser import (
    cell,
    is_blank_row,
    parse_amount,
    parse_date,
    parse_labour_tab,
    parse_main_tab,
    parse_parties_tab,
    parse_sites_tab,
)


MAIN_HEADER = ["Date", "Type", "Amount", "Category", "Description",
               "Labour", "Site", "Party", "User"]


class TestCellHelpers:
    """Tests for cell access and blank detection."""

    def test_cell_out_of_range_is_empty(self):
        assert cell(["a"], 5) == ""

    def test_cell_strips_whitespace(self):
        assert cell(["  SiteA  "], 0) == "SiteA"

    def test_blank_row(self):
        assert is_blank_row([]) is True
        assert is_blank_row(["", "  ", ""]) is True
        assert is_blank_row(["", "x"]) is False


class TestParseAmount:
    """Tests for lenient number parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("5000", 5000.0),
        ("1200.50", 1200.5),
        ("₹1,200", 1200.0),
        ("$ 3,000.75", 3000.75),
        ("-250", -250.0),
        ("12 bags", 12.0),
    ])
    def test_parses_numbers(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", None, "N/A"])
    def test_unparsable_is_zero(self, raw):
        """Test that anything without a leading number is 0."""
        assert parse_amount(raw) == 0.0


class TestParseDate:
    """Tests for date normalization."""

    def test_iso_date(self):
        assert parse_date("2024-01-05") == "2024-01-05"

    def test_iso_datetime_with_z(self):
        assert parse_date("2024-01-05T10:30:00Z") == "2024-01-05"

    def test_month_first_preferred(self):
        """Test that ambiguous slash dates read month-first."""
        assert parse_date("01/05/2024") == "2024-01-05"

    def test_day_first_when_month_first_impossible(self):
        assert parse_date("25/12/2024") == "2024-12-25"

    def test_month_name(self):
        assert parse_date("5 Jan 2024") == "2024-01-05"

    @pytest.mark.parametrize("raw", ["not a date", "", None, "32/13/2024"])
    def test_bad_date_is_empty(self, raw):
        assert parse_date(raw) == ""


class TestMainTab:
    """Tests for Main tab parsing."""

    def test_header_is_skipped(self):
        assert parse_main_tab([MAIN_HEADER]) == []

    def test_empty_tab(self):
        assert parse_main_tab([]) == []

    def test_full_row(self):
        rows = [
            MAIN_HEADER,
            ["2024-01-05", "Payment", "5000", "", "Initial deposit",
             "", "SiteA", "ClientX", "Rohit"],
        ]
        [tx] = parse_main_tab(rows)

        assert tx.id == "1"
        assert tx.date == "2024-01-05"
        assert tx.type == "Payment"
        assert tx.amount == 5000.0
        assert tx.site_name == "SiteA"
        assert tx.party_name == "ClientX"
        assert tx.user == "Rohit"

    def test_short_row_uses_defaults(self):
        """Test that rows from older sheets without trailing columns still parse."""
        [tx] = parse_main_tab([MAIN_HEADER, ["2024-01-05", "Expense", "100"]])
        assert tx.category == ""
        assert tx.labour_name == ""
        assert tx.user == ""

    def test_bad_cells_degrade(self):
        [tx] = parse_main_tab([MAIN_HEADER, ["yesterday", "Expense", "abc", "Cement"]])
        assert tx.date == ""
        assert tx.amount == 0.0
        assert tx.category == "Cement"

    def test_blank_rows_dropped_but_ids_follow_sheet_position(self):
        rows = [
            MAIN_HEADER,
            ["2024-01-05", "Expense", "100", "Cement"],
            ["", "", ""],
            ["2024-01-06", "Expense", "200", "Sand"],
        ]
        txs = parse_main_tab(rows)
        assert [tx.id for tx in txs] == ["1", "3"]


class TestReferenceTabs:
    """Tests for Labour, Parties and Sites tabs."""

    def test_labour_row(self):
        [row] = parse_labour_tab([
            ["Name", "Role", "Salary", "Paid", "Balance"],
            ["John", "Mason", "4000", "0", "4000"],
        ])
        assert row.name == "John"
        assert row.role == "Mason"
        assert row.salary == 4000.0
        assert row.declared_paid == 0.0
        assert row.declared_balance == 4000.0

    def test_labour_row_without_name_is_skipped(self):
        rows = [["Name"], ["", "Helper", "1000"]]
        assert parse_labour_tab(rows) == []

    def test_party_row(self):
        [row] = parse_parties_tab([
            ["Name", "Contact", "Site", "Total Paid", "Balance"],
            ["ClientX", "98765", "SiteA", "1000", "7000"],
        ])
        assert row.name == "ClientX"
        assert row.site_name == "SiteA"
        assert row.declared_total_paid == 1000.0
        assert row.balance == 7000.0

    def test_site_row_defaults_payment_status(self):
        [site] = parse_sites_tab([
            ["Site", "Progress", "Status", "Start", "End", "Value"],
            ["SiteA", "40", "", "2024-01-01", "", "250000"],
        ])
        assert site.site_name == "SiteA"
        assert site.progress == 40.0
        assert site.payment_status == "Pending"
        assert site.start_date == "2024-01-01"
        assert site.end_date == ""
        assert site.project_value == 250000.0
