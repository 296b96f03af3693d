"""
Render one seed QTI 3.0 assessmentResult document per roster record.

The document carries context (who) and the list of items (what) but no
response or outcome variables; scoring data is added later by other tools.

Text is assembled line by line with a fixed layout. Attribute values get
all five XML special characters escaped, ' included.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from qti_results.common import RESULTS_NAMESPACE, SCHEMA_LOCATION, XSI_NAMESPACE, xml_escape
from qti_results.roster import RosterRecord

INDENT = "  "
ITEM_SESSION_STATUS = "final"


def attrs(pairs: Sequence[Tuple[str, Optional[str]]]) -> str:
    """Serialize (name, value) pairs; pairs whose value is None are dropped."""
    return " ".join(f'{name}="{xml_escape(value)}"' for name, value in pairs if value is not None)

def empty_element(tag: str, pairs: Sequence[Tuple[str, Optional[str]]], depth: int) -> str:
    return f"{INDENT * depth}<{tag} {attrs(pairs)} />"

def session_identifiers(record: RosterRecord, material_title: Optional[str]) -> List[Tuple[str, str]]:
    entries = [("candidateName", record.candidate_name)]
    if record.candidate_id:
        entries.append(("candidateId", record.candidate_id))
    if record.candidate_account:
        entries.append(("candidateAccount", record.candidate_account))
    if material_title:
        entries.append(("materialTitle", material_title))
    return entries

def render_assessment_result(
    record: RosterRecord,
    test_result_identifier: str,
    item_ids: Sequence[str],
    test_result_datestamp: Optional[str] = None,
    material_title: Optional[str] = None,
) -> str:
    datestamp = test_result_datestamp or None
    lines: List[str] = ['<?xml version="1.0" encoding="UTF-8"?>']
    lines.append(
        "<assessmentResult "
        + attrs([("xmlns", RESULTS_NAMESPACE), ("xmlns:xsi", XSI_NAMESPACE), ("xsi:schemaLocation", SCHEMA_LOCATION)])
        + ">"
    )

    lines.append(f"{INDENT}<context {attrs([('sourcedId', record.candidate_number)])}>")
    for source_id, identifier in session_identifiers(record, material_title):
        lines.append(empty_element("sessionIdentifier", [("sourceID", source_id), ("identifier", identifier)], 2))
    lines.append(f"{INDENT}</context>")

    lines.append(empty_element("testResult", [("identifier", test_result_identifier), ("datestamp", datestamp)], 1))
    for index, item_id in enumerate(item_ids, 1):
        lines.append(empty_element(
            "itemResult",
            [
                ("identifier", item_id),
                ("sequenceIndex", str(index)),
                ("datestamp", datestamp),
                ("sessionStatus", ITEM_SESSION_STATUS),
            ],
            1,
        ))

    lines.append("</assessmentResult>")
    return "\n".join(lines) + "\n"
