"""Shared test data: a small but complete spreadsheet."""

import pytest


MAIN_HEADER = ["Date", "Type", "Amount", "Category", "Description",
               "Labour", "Site", "Party", "User"]


@pytest.fixture
def sheet_tabs() -> dict[str, list[list[str]]]:
    return {
        "Main": [
            MAIN_HEADER,
            ["2024-01-05", "Payment", "5000", "", "Initial deposit",
             "", "SiteA", "ClientX", "Rohit"],
            ["2024-02-01", "Expense", "1200", "Labour Payment", "Weekly wage",
             "John", "SiteB", "", ""],
            ["2024-02-03", "Expense", "₹2,500", "Cement", "Cement by gulshan",
             "", "SiteA", "", ""],
        ],
        "Labour": [
            ["Name", "Role", "Salary", "Paid", "Balance"],
            ["John", "Mason", "4000", "0", "4000"],
        ],
        "Parties": [
            ["Name", "Contact", "Site", "Total Paid", "Balance"],
            ["ClientX", "98765", "SiteA", "0", "20000"],
        ],
        "Sites": [
            ["Site", "Progress", "Status", "Start", "End", "Value"],
            ["SiteA", "40", "Partial", "2024-01-01", "", "250000"],
            ["SiteB", "10", "", "2024-02-01", "", "90000"],
        ],
    }
