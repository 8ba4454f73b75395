"""
Loading and dumping JSON/YAML documents for the command line.

YAML is a superset of JSON, so every document is read with `yaml.safe_load`.
"""
from dataclasses import asdict, is_dataclass
import json
from pathlib import Path
import sys
from typing import Any, IO

import numpy as np
from pydantic import BaseModel
import yaml

from pathwalk.core.settings import OUTPUT_FORMATS


def load_document(source: str | Path | IO[str]) -> Any:
    """Load a JSON or YAML document from a file path, '-' (stdin) or a stream."""
    if isinstance(source, (str, Path)):
        if str(source) == "-":
            return yaml.safe_load(sys.stdin)
        with open(source, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    return yaml.safe_load(source)


def parse_value(text: str) -> Any:
    """Interpret a command-line value as YAML: `42` is an int, `[1, 2]` a list."""
    return yaml.safe_load(text)


def to_plain(value: Any) -> Any:
    """Convert a value into plain dicts, lists and scalars for output."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if is_dataclass(value) and not isinstance(value, type):
        return to_plain(asdict(value))
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, dict):
        return {_plain_key(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(v) for v in value]
    return value


def _plain_key(key: Any) -> Any:
    # JSON and YAML safe_dump both cope with str, int, float, bool and None keys
    if key is None or isinstance(key, (str, int, float, bool)):
        return key
    return str(key)


def dump_document(data: Any, fmt: str = "json") -> str:
    """Serialize a document as indented JSON or block-style YAML."""
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format '{fmt}'. Expected one of {sorted(OUTPUT_FORMATS)}")
    data = to_plain(data)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, default=str)
