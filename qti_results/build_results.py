#!/usr/bin/env python3
"""
Build seed QTI 3.0 result documents (one assessmentResult XML per candidate)
from a roster CSV and a QTI assessment test.

The documents hold the candidate context and one itemResult per item of the
test, in test order. Scores and response variables are not generated.

Usage:
  roster-to-qti-results --roster roster.csv --assessment-test assessment-test.qti.xml
  python -m qti_results.build_results --roster - --assessment-test test.xml --output out < roster.csv

Output files are named assessmentResult-<result_id>.xml and go to
<roster dir>/qti-results unless --output is given. Existing files are never
overwritten without --force/--yes.
"""

from __future__ import annotations

import argparse
import datetime as dt
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from qti_results.assessment_test import read_item_ids
from qti_results.common import (
    DEFAULT_TEST_RESULT_IDENTIFIER,
    PROG_NAME,
    AssessmentTestError,
    ConfigError,
    OptionsError,
    OutputConflictError,
    Reporter,
    RosterError,
    __version__,
)
from qti_results.config import RunConfig, load_config
from qti_results.output_plan import (
    OutputPlanEntry,
    build_output_plan,
    default_output_dir,
    ensure_writable,
    write_document,
)
from qti_results.render import render_assessment_result
from qti_results.roster import read_roster

USER_ERRORS = (RosterError, AssessmentTestError, ConfigError, OptionsError, OutputConflictError)


@dataclass(frozen=True)
class RunOptions:
    roster: str
    assessment_test: Path
    output_dir: Path
    test_result_identifier: str = DEFAULT_TEST_RESULT_IDENTIFIER
    test_result_datestamp: Optional[str] = None
    material_title: Optional[str] = None
    dry_run: bool = False
    json: bool = False
    force: bool = False
    quiet: bool = False
    verbose: bool = False


# -------------------- Options --------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Generate one seed QTI results XML per roster row.",
        argument_default=None,
    )
    ap.add_argument("--roster", required=True, help="Roster CSV path (use '-' to read from stdin)")
    ap.add_argument("--assessment-test", required=True, help="QTI assessment test XML")
    ap.add_argument("--output", help="Output directory (default: <roster-dir>/qti-results)")
    ap.add_argument("--test-result-identifier", "--test-id", dest="test_result_identifier",
                    help=f"testResult identifier (default: {DEFAULT_TEST_RESULT_IDENTIFIER})")
    ap.add_argument("--test-result-datestamp", "--end-at", dest="test_result_datestamp",
                    help="ISO 8601 datetime or 'now'")
    ap.add_argument("--material-title", help="Add a materialTitle session identifier")
    ap.add_argument("--config", help="YAML run-config file with defaults for the options above")
    ap.add_argument("--dry-run", action="store_true", help="Validate and print output plan without writing files")
    ap.add_argument("--json", action="store_true", help="Emit machine-readable summary to stdout")
    ap.add_argument("--force", "--yes", dest="force", action="store_true", help="Overwrite existing output files")
    ap.add_argument("--quiet", action="store_true", help="Suppress non-error logs")
    ap.add_argument("--verbose", action="store_true", help="Verbose logs")
    ap.add_argument("--version", "-V", action="version", version=__version__)
    return ap

def utc_now_iso() -> str:
    now = dt.datetime.now(dt.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def resolve_datestamp(raw: str) -> str:
    """'now' -> current UTC time; anything else must parse as ISO 8601 and is kept verbatim."""
    if raw == "now":
        return utc_now_iso()
    try:
        dt.datetime.fromisoformat(raw)
    except ValueError as e:
        raise OptionsError("--test-result-datestamp must be an ISO 8601 datetime or 'now'.") from e
    return raw

def resolve_options(args: argparse.Namespace) -> RunOptions:
    if args.output is not None and not args.output.strip():
        raise OptionsError("--output must be a non-empty path.")

    cfg = load_config(args.config) if args.config else RunConfig()

    if args.output:
        output_dir = Path(args.output).resolve()
    elif cfg.output:
        output_dir = cfg.output
    else:
        output_dir = default_output_dir(args.roster)

    raw_datestamp = args.test_result_datestamp or cfg.test_result_datestamp
    return RunOptions(
        roster=args.roster,
        assessment_test=Path(args.assessment_test),
        output_dir=output_dir,
        test_result_identifier=(
            args.test_result_identifier or cfg.test_result_identifier or DEFAULT_TEST_RESULT_IDENTIFIER
        ),
        test_result_datestamp=resolve_datestamp(raw_datestamp) if raw_datestamp else None,
        material_title=args.material_title or cfg.material_title,
        dry_run=args.dry_run,
        json=args.json,
        force=args.force,
        quiet=args.quiet,
        verbose=args.verbose,
    )


# -------------------- Orchestration --------------------

def summary_payload(mode: str, output_dir: Path, plan: Sequence[OutputPlanEntry]) -> dict:
    return {
        "mode": mode,
        "outputDir": str(output_dir),
        "outputs": [e.to_json() for e in plan],
    }

def emit_summary(
    mode: str,
    opts: RunOptions,
    plan: Sequence[OutputPlanEntry],
    reporter: Reporter,
    stdout: TextIO,
) -> None:
    if opts.json:
        stdout.write(json.dumps(summary_payload(mode, opts.output_dir, plan), indent=2, ensure_ascii=False) + "\n")
        return
    if mode == "dry-run":
        reporter.info(f"Dry run: {len(plan)} file(s) would be written to {opts.output_dir}")
        for e in plan:
            reporter.detail(f"{e.result_id} -> {e.path}")
    else:
        reporter.info(f"Wrote {len(plan)} file(s) to {opts.output_dir}")

def run(
    opts: RunOptions,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    reporter: Optional[Reporter] = None,
) -> int:
    reporter = reporter or Reporter(quiet=opts.quiet, verbose=opts.verbose)
    stdout = stdout if stdout is not None else sys.stdout

    records = read_roster(opts.roster, stdin)
    reporter.detail(f"Read {len(records)} roster record(s) from {'stdin' if opts.roster == '-' else opts.roster}")
    item_ids = read_item_ids(opts.assessment_test)
    reporter.detail(f"Found {len(item_ids)} item ref(s) in {opts.assessment_test}")
    plan = build_output_plan(opts.output_dir, records)

    if opts.dry_run:
        emit_summary("dry-run", opts, plan, reporter, stdout)
        return 0

    overwritten = ensure_writable(opts.output_dir, plan, opts.force)
    if overwritten:
        reporter.warn(f"Overwriting {len(overwritten)} existing file(s) in {opts.output_dir}")

    for entry, record in zip(plan, records):
        xml = render_assessment_result(
            record,
            test_result_identifier=opts.test_result_identifier,
            item_ids=item_ids,
            test_result_datestamp=opts.test_result_datestamp,
            material_title=opts.material_title,
        )
        write_document(entry.path, xml)
        reporter.detail(f"Wrote {entry.path}")

    emit_summary("write", opts, plan, reporter, stdout)
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    reporter = Reporter(quiet=args.quiet, verbose=args.verbose)
    try:
        opts = resolve_options(args)
        return run(opts, reporter=reporter)
    except USER_ERRORS as e:
        reporter.error(str(e))
    except UnicodeDecodeError as e:
        reporter.error(f"Input is not valid UTF-8: {e}")
    except OSError as e:
        reporter.error(f"{e.strerror or e}: {e.filename}" if e.filename else str(e))
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
