"""
Common helpers for the roster -> QTI results tools.

Shared constants, error types, XML escaping and stderr reporting used by
roster.py, assessment_test.py, render.py and build_results.py.
"""

from __future__ import annotations
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Optional, TextIO

PROG_NAME = "roster-to-qti-results"

try:
    __version__ = version(PROG_NAME)
except PackageNotFoundError:
    # source checkout that was never installed
    __version__ = "0.0.0"

RESULTS_NAMESPACE = "http://www.imsglobal.org/xsd/imsqti_result_v3p0"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
SCHEMA_LOCATION = f"{RESULTS_NAMESPACE} {RESULTS_NAMESPACE}.xsd"

DEFAULT_TEST_RESULT_IDENTIFIER = "assessment-test"
DEFAULT_OUTPUT_DIRNAME = "qti-results"
STDIN_MARKER = "-"


class RosterError(ValueError):
    pass

class AssessmentTestError(ValueError):
    pass

class ConfigError(ValueError):
    pass

class OptionsError(ValueError):
    """Bad option value that argparse itself cannot catch (empty --output, bad datestamp)."""

class OutputConflictError(RuntimeError):
    pass


_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)

def xml_escape(s: str) -> str:
    # '&' must go first so the other entities are not double-escaped
    for raw, entity in _XML_ESCAPES:
        s = s.replace(raw, entity)
    return s

def xml_unescape(s: str) -> str:
    for raw, entity in reversed(_XML_ESCAPES):
        s = s.replace(entity, raw)
    return s


class Reporter:
    """
    Human-readable progress on stderr.

    quiet   -> only errors
    verbose -> per-file detail as well
    """

    def __init__(self, quiet: bool = False, verbose: bool = False, stream: Optional[TextIO] = None):
        self.quiet = quiet
        self.verbose = verbose
        self.stream = stream if stream is not None else sys.stderr

    def info(self, msg: str) -> None:
        if not self.quiet:
            self.stream.write(f"{msg}\n")

    def detail(self, msg: str) -> None:
        if self.verbose and not self.quiet:
            self.stream.write(f"[info] {msg}\n")

    def warn(self, msg: str) -> None:
        if not self.quiet:
            self.stream.write(f"[warn] {msg}\n")

    def error(self, msg: str) -> None:
        self.stream.write(f"{msg}\n")
