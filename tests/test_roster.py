# tests/test_roster.py
from __future__ import annotations

import io
from pathlib import Path

import pytest

from qti_results.common import RosterError
from qti_results.roster import RosterRecord, parse_roster, read_roster

HEADER = "candidate_number,candidate_name,candidate_account,candidate_id,result_id\n"


def test_reads_sample_roster(roster_csv: Path):
    rows = read_roster(roster_csv)
    assert rows == [
        RosterRecord("1001", "山田太郎", "2001", candidate_account="yamada@example.com", candidate_id="S-1001"),
        RosterRecord("1002", "佐藤花子", "2002"),
    ]

def test_result_id_defaults_to_candidate_number():
    rows = parse_roster("candidate_number,candidate_name\nA-17,Ann\n")
    assert rows[0].result_id == "A-17"
    assert rows[0].candidate_account is None and rows[0].candidate_id is None

def test_bom_crlf_and_trimming():
    text = "\ufeffcandidate_number,candidate_name,result_id\r\n 0042 , Bob ,  r-1 \r\n"
    rows = parse_roster(text)
    assert rows == [RosterRecord("0042", "Bob", "r-1")]

def test_blank_result_id_falls_back():
    rows = parse_roster(HEADER + "1001,Ann,,,   \n")
    assert rows[0].result_id == "1001"

def test_reads_stdin_marker():
    rows = read_roster("-", stdin=io.StringIO("candidate_number,candidate_name\n7,Zed\n"))
    assert [r.candidate_number for r in rows] == ["7"]

def test_row_order_preserved():
    body = "".join(f"{n},Name {n}\n" for n in (30, 10, 20))
    rows = parse_roster("candidate_number,candidate_name\n" + body)
    assert [r.result_id for r in rows] == ["30", "10", "20"]

@pytest.mark.parametrize("text", ["", "\ufeff", "candidate_number,candidate_name\n", "\n"])
def test_empty_roster_rejected(text: str):
    with pytest.raises(RosterError, match="Roster CSV is empty."):
        parse_roster(text)

def test_missing_required_column():
    with pytest.raises(RosterError, match="missing required column\\(s\\): candidate_name"):
        parse_roster("candidate_number,name\n1,Ann\n")

def test_header_is_case_sensitive():
    with pytest.raises(RosterError, match="candidate_number"):
        parse_roster("Candidate_Number,candidate_name\n1,Ann\n")

def test_missing_candidate_number_reports_row():
    with pytest.raises(RosterError, match="Missing candidate_number at row 3."):
        parse_roster("candidate_number,candidate_name\n1,Ann\n,Bob\n")

def test_candidate_number_needs_a_digit():
    with pytest.raises(RosterError) as exc:
        parse_roster("candidate_number,candidate_name\nABC,Ann\n")
    assert str(exc.value) == "candidate_number must include at least one digit"

def test_missing_candidate_name_reports_row():
    with pytest.raises(RosterError, match="Missing candidate_name at row 2."):
        parse_roster("candidate_number,candidate_name\n1,\n")

def test_duplicate_result_id():
    with pytest.raises(RosterError, match="Duplicate result_id: 1001"):
        parse_roster(HEADER + "1,Ann,,,1001\n1001,Bob,,,\n")

def test_blank_row_is_rejected():
    with pytest.raises(RosterError, match="Missing candidate_number at row 3."):
        parse_roster("candidate_number,candidate_name\n1,Ann\n\n2,Bob\n")

def test_checks_run_in_order():
    # digit check fires before the missing name check
    with pytest.raises(RosterError, match="at least one digit"):
        parse_roster("candidate_number,candidate_name\nX,\n")

def test_stdin_bytes_are_decoded_as_utf8():
    # console encoding differs from the roster's UTF-8
    raw = "\ufeffcandidate_number,candidate_name\r\n1001,山田太郎\r\n".encode("utf-8")
    stream = io.TextIOWrapper(io.BytesIO(raw), encoding="latin-1")
    rows = read_roster("-", stdin=stream)
    assert rows == [RosterRecord("1001", "山田太郎", "1001")]

@pytest.mark.parametrize("result_id", ["sub/x", "a\\b", "..", "."])
def test_result_id_must_be_a_file_name(result_id: str):
    with pytest.raises(RosterError, match="Invalid result_id at row 3"):
        parse_roster(HEADER + f"1,Ann,,,ok\n2,Bob,,,{result_id}\n")
