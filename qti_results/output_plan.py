from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Union

from qti_results.common import DEFAULT_OUTPUT_DIRNAME, STDIN_MARKER, OutputConflictError
from qti_results.roster import RosterRecord

OUTPUT_PREFIX = "assessmentResult-"
OUTPUT_EXTENSION = "xml"


@dataclass(frozen=True)
class OutputPlanEntry:
    result_id: str
    path: Path

    def to_json(self) -> Dict[str, str]:
        return {"resultId": self.result_id, "path": str(self.path)}


def output_filename(result_id: str) -> str:
    return f"{OUTPUT_PREFIX}{result_id}.{OUTPUT_EXTENSION}"

def default_output_dir(roster: Union[str, Path]) -> Path:
    """<roster dir>/qti-results, or ./qti-results when the roster comes from stdin."""
    if str(roster) == STDIN_MARKER:
        return Path(DEFAULT_OUTPUT_DIRNAME).resolve()
    return Path(roster).resolve().parent / DEFAULT_OUTPUT_DIRNAME

def build_output_plan(output_dir: Path, records: Sequence[RosterRecord]) -> List[OutputPlanEntry]:
    return [OutputPlanEntry(result_id=r.result_id, path=output_dir / output_filename(r.result_id)) for r in records]

def find_conflicts(plan: Sequence[OutputPlanEntry]) -> List[Path]:
    return [e.path for e in plan if e.path.exists()]

def ensure_writable(output_dir: Path, plan: Sequence[OutputPlanEntry], force: bool) -> List[Path]:
    """
    Create output_dir if missing. Otherwise refuse to go on when any planned
    file already exists, unless force is set.

    Returns the planned paths that will be overwritten (empty unless force).
    """
    if not output_dir.exists():
        output_dir.mkdir(parents=True, exist_ok=True)
        return []
    if not output_dir.is_dir():
        raise OutputConflictError(f"Output path is not a directory: {output_dir}")

    conflicts = find_conflicts(plan)
    if conflicts and not force:
        raise OutputConflictError(f"Output file already exists: {conflicts[0]} (use --force to overwrite)")
    return conflicts

def write_document(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(text)
