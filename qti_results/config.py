"""
Optional YAML run-config file for build_results.py.

Example (run.yaml):

  output: build/qti-results
  test_result_identifier: WEB-EXAM-2026
  test_result_datestamp: "2026-01-27T10:00:00+09:00"
  material_title: Web Exam

Every key is optional; command-line flags win over the file.
"""

from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from jsonschema import Draft202012Validator

from qti_results.common import ConfigError

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "run-config.schema.json"


@dataclass(frozen=True)
class RunConfig:
    output: Optional[Path] = None
    test_result_identifier: Optional[str] = None
    test_result_datestamp: Optional[str] = None
    material_title: Optional[str] = None


def load_schema(path: Path = SCHEMA_PATH) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))

class StringTimestampLoader(yaml.SafeLoader):
    """SafeLoader that keeps ISO datetimes as the strings they were written as."""

StringTimestampLoader.yaml_implicit_resolvers = {
    first: [(tag, rx) for tag, rx in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

def load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return yaml.load(f, Loader=StringTimestampLoader)

def load_config(path: Union[str, Path]) -> RunConfig:
    path = Path(path)
    try:
        data = load_yaml(path)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: YAML parse error: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top-level YAML must be a mapping")

    validator = Draft202012Validator(load_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: (list(e.path), e.message))
    if errors:
        err = errors[0]
        loc = ".".join(str(p) for p in err.path) or "(root)"
        raise ConfigError(f"{path}: {loc}: {err.message}")

    output = data.get("output")
    return RunConfig(
        output=(path.parent / output).resolve() if output else None,
        test_result_identifier=data.get("test_result_identifier"),
        test_result_datestamp=data.get("test_result_datestamp"),
        material_title=data.get("material_title"),
    )
