"""Unit tests for CSV export"""

import csv
import io
from datetime import datetime
from fairshare_gateway.domain.export import CSV_HEADER, export_to_csv


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_export_header_and_date_order(make_expense):
    expenses = [
        make_expense("12.00", datetime(2024, 3, 9), description="Later"),
        make_expense("30.00", datetime(2024, 3, 1), description="Earlier", group_id="g1", group_name="Flat"),
    ]
    rows = _rows(export_to_csv(expenses))

    assert rows[0] == CSV_HEADER
    assert [row[1] for row in rows[1:]] == ["Earlier", "Later"]
    assert rows[1][5] == "Flat"
    assert rows[2][5] == "Direct"


def test_export_round_trip_preserves_awkward_descriptions(make_expense):
    """Commas, quotes and newlines survive the trip through a CSV parser"""
    expenses = [
        make_expense("10.50", datetime(2024, 3, 1), description='Pizza, "large", extra cheese'),
        make_expense("3.00", datetime(2024, 3, 2), description="Coffee\nand cake", category="cafe"),
        make_expense("99.99", datetime(2024, 3, 3), description="Plain", category=None),
    ]
    rows = _rows(export_to_csv(expenses))

    recovered = {(row[0], row[1], row[2], row[3]) for row in rows[1:]}
    assert recovered == {
        ("2024-03-01", 'Pizza, "large", extra cheese', "food", "10.50"),
        ("2024-03-02", "Coffee\nand cake", "cafe", "3.00"),
        ("2024-03-03", "Plain", "other", "99.99"),
    }


def test_export_payer_falls_back_to_email_local_part(make_expense):
    expense = make_expense("5.00", datetime(2024, 3, 1), payer_id="bob")
    rows = _rows(export_to_csv([expense]))

    assert rows[1][4] == "bob"


def test_export_empty_has_only_header():
    assert _rows(export_to_csv([])) == [CSV_HEADER]
