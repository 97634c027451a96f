"""
Row Parser

Turns raw spreadsheet rows (lists of cell strings) into typed records.
This is the only place that knows which column holds what; nothing
past this module ever indexes into a raw row.

IMPORTANT: Parsing NEVER fails. A cell that cannot be read degrades to
its default ("" for text, 0 for numbers) so one bad cell cannot take the
whole dashboard down. Silent data loss is preferred over a failed sync.
"""

import re
from datetime import datetime
from typing import Callable, Optional, Sequence, TypeVar

from pydantic import BaseModel

from expenseman.models.entities import Site, Transaction


RawRow = Sequence[str]
RecordT = TypeVar("RecordT")


# Column positions per tab
class MainColumns:
    DATE = 0
    TYPE = 1
    AMOUNT = 2
    CATEGORY = 3
    DESCRIPTION = 4
    LABOUR_NAME = 5
    SITE_NAME = 6
    PARTY_NAME = 7
    USER = 8  # absent in older sheets


class LabourColumns:
    NAME = 0
    ROLE = 1
    SALARY = 2
    PAID = 3
    BALANCE = 4


class PartyColumns:
    NAME = 0
    CONTACT = 1
    SITE_NAME = 2
    TOTAL_PAID = 3
    BALANCE = 4


class SiteColumns:
    SITE_NAME = 0
    PROGRESS = 1
    PAYMENT_STATUS = 2
    START_DATE = 3
    END_DATE = 4
    PROJECT_VALUE = 5


class LabourRow(BaseModel):
    """A Labour-tab row. declared_* values are what the sheet claims."""
    id: str
    name: str
    role: str = ""
    salary: float = 0.0
    declared_paid: float = 0.0
    declared_balance: float = 0.0


class PartyRow(BaseModel):
    """A Parties-tab row."""
    id: str
    name: str
    contact: str = ""
    site_name: str = ""
    declared_total_paid: float = 0.0
    balance: float = 0.0


# =============================================================================
# CELL HELPERS
# =============================================================================

_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_CURRENCY_SYMBOLS = re.compile(r"[₹$€£¥,\s]")

# Tried in order. Month-first before day-first, the way browsers read
# "01/05/2024"; day-first only wins when month-first is impossible.
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%m-%d-%Y",
    "%d-%m-%Y",
    "%m/%d/%y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%B %d, %Y",
)


def cell(row: RawRow, index: int) -> str:
    """Cell text at a position, "" when the row is too short or blank."""
    if index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value).strip()


def parse_amount(value: Optional[str]) -> float:
    """
    Read a number the way a lenient spreadsheet user expects.

    Thousands separators and currency symbols are ignored, then the
    leading numeric part is used ("12 bags" -> 12). Anything without a
    leading number is 0.

    Unlike the old dashboard, which used JavaScript parseFloat and read
    "1,200" as 1, commas are dropped first, so "1,200" is 1200.
    """
    if not value:
        return 0.0
    cleaned = _CURRENCY_SYMBOLS.sub("", str(value))
    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def parse_date(value: Optional[str]) -> str:
    """
    Normalize a date cell to YYYY-MM-DD.

    Returns "" when the cell is blank or not a recognizable date.
    """
    if not value:
        return ""
    text = str(value).strip()
    if not text:
        return ""

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return ""


def is_blank_row(row: Optional[RawRow]) -> bool:
    return not row or all(not cell(row, i) for i in range(len(row)))


# =============================================================================
# PER-TAB PARSERS
# =============================================================================

def parse_main_row(row: RawRow, row_id: str) -> Optional[Transaction]:
    """Main tab: [date, type, amount, category, description, labour, site, party, user]."""
    if is_blank_row(row):
        return None
    return Transaction(
        id=row_id,
        date=parse_date(cell(row, MainColumns.DATE)),
        type=cell(row, MainColumns.TYPE),
        amount=parse_amount(cell(row, MainColumns.AMOUNT)),
        category=cell(row, MainColumns.CATEGORY),
        description=cell(row, MainColumns.DESCRIPTION),
        labour_name=cell(row, MainColumns.LABOUR_NAME),
        site_name=cell(row, MainColumns.SITE_NAME),
        party_name=cell(row, MainColumns.PARTY_NAME),
        user=cell(row, MainColumns.USER),
    )


def parse_labour_row(row: RawRow, row_id: str) -> Optional[LabourRow]:
    """Labour tab: [name, role, salary, paid, balance]."""
    if is_blank_row(row):
        return None
    name = cell(row, LabourColumns.NAME)
    if not name:
        return None
    return LabourRow(
        id=row_id,
        name=name,
        role=cell(row, LabourColumns.ROLE),
        salary=parse_amount(cell(row, LabourColumns.SALARY)),
        declared_paid=parse_amount(cell(row, LabourColumns.PAID)),
        declared_balance=parse_amount(cell(row, LabourColumns.BALANCE)),
    )


def parse_party_row(row: RawRow, row_id: str) -> Optional[PartyRow]:
    """Parties tab: [name, contact, siteName, totalPaid, balance]."""
    if is_blank_row(row):
        return None
    name = cell(row, PartyColumns.NAME)
    if not name:
        return None
    return PartyRow(
        id=row_id,
        name=name,
        contact=cell(row, PartyColumns.CONTACT),
        site_name=cell(row, PartyColumns.SITE_NAME),
        declared_total_paid=parse_amount(cell(row, PartyColumns.TOTAL_PAID)),
        balance=parse_amount(cell(row, PartyColumns.BALANCE)),
    )


def parse_site_row(row: RawRow, row_id: str) -> Optional[Site]:
    """Sites tab: [siteName, progress, paymentStatus, startDate, endDate, projectValue]."""
    if is_blank_row(row):
        return None
    site_name = cell(row, SiteColumns.SITE_NAME)
    if not site_name:
        return None
    return Site(
        id=row_id,
        site_name=site_name,
        progress=parse_amount(cell(row, SiteColumns.PROGRESS)),
        payment_status=cell(row, SiteColumns.PAYMENT_STATUS) or "Pending",
        start_date=parse_date(cell(row, SiteColumns.START_DATE)),
        end_date=parse_date(cell(row, SiteColumns.END_DATE)),
        project_value=parse_amount(cell(row, SiteColumns.PROJECT_VALUE)),
    )


def parse_rows(
    rows: Sequence[RawRow],
    parse_row: Callable[[RawRow, str], Optional[RecordT]],
) -> list[RecordT]:
    """
    Parse every data row of a tab.

    The first row is the header and is always skipped. Ids are the
    1-based position of the row below the header, so they stay aligned
    with the sheet even when blank rows are dropped.
    """
    records = []
    for index, row in enumerate(rows[1:], start=1):
        record = parse_row(row, str(index))
        if record is not None:
            records.append(record)
    return records


def parse_main_tab(rows: Sequence[RawRow]) -> list[Transaction]:
    return parse_rows(rows, parse_main_row)


def parse_labour_tab(rows: Sequence[RawRow]) -> list[LabourRow]:
    return parse_rows(rows, parse_labour_row)


def parse_parties_tab(rows: Sequence[RawRow]) -> list[PartyRow]:
    return parse_rows(rows, parse_party_row)


def parse_sites_tab(rows: Sequence[RawRow]) -> list[Site]:
    return parse_rows(rows, parse_site_row)
