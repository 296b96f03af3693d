"""
Read a candidate roster CSV into RosterRecord rows.

Columns (header names are case-sensitive):
  candidate_number   required, must contain at least one digit
  candidate_name     required
  candidate_account  optional
  candidate_id       optional
  result_id          optional, defaults to candidate_number; unique per roster
"""

from __future__ import annotations
import csv
import io
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, TextIO, Union

from qti_results.common import RosterError, STDIN_MARKER

REQUIRED_COLUMNS = ("candidate_number", "candidate_name")

RE_DIGIT = re.compile(r"\d")
RE_PATH_SEPARATOR = re.compile(r"[/\\\x00]")


@dataclass(frozen=True)
class RosterRecord:
    candidate_number: str
    candidate_name: str
    result_id: str
    candidate_account: Optional[str] = None
    candidate_id: Optional[str] = None


def read_roster_text(source: Union[str, Path], stdin: Optional[TextIO] = None) -> str:
    if str(source) == STDIN_MARKER:
        stream = stdin if stdin is not None else sys.stdin
        # decode the raw bytes ourselves; the console encoding may not be UTF-8
        raw = getattr(stream, "buffer", None)
        return raw.read().decode("utf-8") if raw is not None else stream.read()
    with Path(source).open("r", encoding="utf-8", newline="") as f:
        return f.read()

def read_roster(source: Union[str, Path], stdin: Optional[TextIO] = None) -> List[RosterRecord]:
    """Read and validate a roster from a file path or '-' (stdin)."""
    return parse_roster(read_roster_text(source, stdin))

def parse_roster(text: str) -> List[RosterRecord]:
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.reader(io.StringIO(text, newline=""))
    header = next(reader, None)
    if not header or not any(h.strip() for h in header):
        raise RosterError("Roster CSV is empty.")
    columns = [h.strip() for h in header]

    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise RosterError(f"Roster CSV is missing required column(s): {', '.join(missing)}.")

    records: List[RosterRecord] = []
    seen: Set[str] = set()
    try:
        # row 1 is the header
        for row_no, cells in enumerate(reader, 2):
            row = {name: cells[i].strip() if i < len(cells) else "" for i, name in enumerate(columns)}
            rec = _build_record(row, row_no)
            if rec.result_id in seen:
                raise RosterError(f"Duplicate result_id: {rec.result_id}")
            seen.add(rec.result_id)
            records.append(rec)
    except csv.Error as e:
        raise RosterError(f"Roster CSV parse error at line {reader.line_num}: {e}") from e

    if not records:
        raise RosterError("Roster CSV is empty.")
    return records

def _build_record(row: Dict[str, str], row_no: int) -> RosterRecord:
    number = row.get("candidate_number", "")
    if not number:
        raise RosterError(f"Missing candidate_number at row {row_no}.")
    if not RE_DIGIT.search(number):
        raise RosterError("candidate_number must include at least one digit")
    name = row.get("candidate_name", "")
    if not name:
        raise RosterError(f"Missing candidate_name at row {row_no}.")

    result_id = row.get("result_id") or number
    if result_id in (".", "..") or RE_PATH_SEPARATOR.search(result_id):
        raise RosterError(f"Invalid result_id at row {row_no}: {result_id!r} (must be usable as a file name).")

    return RosterRecord(
        candidate_number=number,
        candidate_name=name,
        result_id=result_id,
        candidate_account=row.get("candidate_account") or None,
        candidate_id=row.get("candidate_id") or None,
    )
