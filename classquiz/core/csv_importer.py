"""Utilities for importing class rosters from CSV text.

Expected format: a header row followed by one student per row.

    first_name,middle_name,last_name,email
    Ada,,Lovelace,ada@example.com
    Alan,M,Turing,alan@example.com

Header names are matched case-insensitively and spaces/dashes are treated as
underscores, so ``First Name`` and ``first-name`` both work. ``middle_name``
is optional. Rows are not validated here; missing values are reported per row
by the roster import so that one bad row never blocks the rest.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path

from classquiz.core.errors import ClassQuizError
from classquiz.core.schemas import CsvStudentRow


class RosterImportError(ClassQuizError):
    """Raised when roster text cannot be parsed at all."""


_REQUIRED_COLUMNS = ("first_name", "last_name", "email")
_ALIASES = {
    "firstname": "first_name",
    "lastname": "last_name",
    "middlename": "middle_name",
    "e_mail": "email",
}


def _normalize_header(name: str) -> str:
    cleaned = name.strip().lower().replace(" ", "_").replace("-", "_")
    return _ALIASES.get(cleaned, cleaned)


def parse_student_csv(text: str) -> list[CsvStudentRow]:
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        header = next(reader)
    except StopIteration as exc:
        raise RosterImportError("Roster file is empty.") from exc

    columns = [_normalize_header(name) for name in header]
    missing = [column for column in _REQUIRED_COLUMNS if column not in columns]
    if missing:
        raise RosterImportError(f"Missing required columns: {', '.join(missing)}")

    rows: list[CsvStudentRow] = []
    for raw_row in reader:
        if not any(cell.strip() for cell in raw_row):
            continue
        values = dict(zip(columns, raw_row))
        rows.append(
            CsvStudentRow(
                first_name=values.get("first_name", ""),
                middle_name=values.get("middle_name", ""),
                last_name=values.get("last_name", ""),
                email=values.get("email", ""),
            )
        )
    return rows


def load_student_csv(file_path: Path) -> list[CsvStudentRow]:
    return parse_student_csv(file_path.read_text(encoding="utf-8"))
