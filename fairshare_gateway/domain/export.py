"""CSV export of report expenses"""

import csv
import io
from typing import List

from fairshare_gateway.domain.models import Expense, ReportDefaults

CSV_HEADER = ["Date", "Description", "Category", "Amount", "Payer", "Group"]
DIRECT_LABEL = "Direct"


def payer_label(expense: Expense) -> str:
    """Payer display name, falling back to the local part of the email"""
    return expense.payer_name or expense.payer_email.split("@")[0]


def export_to_csv(expenses: List[Expense], defaults: ReportDefaults | None = None) -> str:
    """
    Serialize expenses as CSV, ascending by date (ties by id).

    Quoting is left to the csv module: fields holding a comma, quote
    or newline are quoted, everything else is written as-is.
    """
    defaults = defaults or ReportDefaults()
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)

    for expense in sorted(expenses, key=lambda e: (e.date, e.expense_id)):
        writer.writerow(
            [
                expense.date.date().isoformat(),
                expense.description,
                expense.category or defaults.default_category,
                f"{expense.amount:.2f}",
                payer_label(expense),
                DIRECT_LABEL if expense.is_direct else (expense.group_name or expense.group_id),
            ]
        )

    return buffer.getvalue()
