from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Iterator

from .models import PackageRecord


class DecodeError(ValueError):
    def __init__(self, detail: str, *, path: Path, line_no: int) -> None:
        super().__init__(detail)
        self.detail = detail
        self.path = path
        self.line_no = line_no

    def __str__(self) -> str:
        return f"{self.detail} (line {self.line_no})"


def _decode_dependencies(value: object) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"'deps' must be a list, got {type(value).__name__}")
    out: list[str] = []
    for i, dep in enumerate(value):
        if not isinstance(dep, dict):
            raise ValueError(f"'deps[{i}]' must be an object, got {type(dep).__name__}")
        if "name" not in dep:
            raise ValueError(f"missing field 'name' in 'deps[{i}]'")
        dep_name = dep["name"]
        if not isinstance(dep_name, str):
            raise ValueError(f"'deps[{i}].name' must be a string, got {type(dep_name).__name__}")
        out.append(dep_name)
    return out


def _decode_features(value: object) -> dict[str, list[str]]:
    if not isinstance(value, dict):
        raise ValueError(f"'features' must be an object, got {type(value).__name__}")
    out: dict[str, list[str]] = {}
    for feature, enabled in value.items():
        if not isinstance(enabled, list) or not all(isinstance(x, str) for x in enabled):
            raise ValueError(f"'features.{feature}' must be a list of strings")
        out[feature] = list(enabled)
    return out


def decode_record(line: str, *, path: Path, line_no: int) -> PackageRecord:
    """
    Decode one JSON line into a PackageRecord.

    Only `name`, `deps[].name` and `features` are read; anything else on the line is
    ignored. Raises DecodeError for bad syntax, a missing field or a wrong type.
    """
    try:
        obj = json.loads(line)
    except (json.JSONDecodeError, RecursionError) as e:
        raise DecodeError(f"invalid JSON: {e}", path=path, line_no=line_no) from e
    if not isinstance(obj, dict):
        raise DecodeError(f"expected a JSON object, got {type(obj).__name__}", path=path, line_no=line_no)

    for field in ("name", "deps", "features"):
        if field not in obj:
            raise DecodeError(f"missing field '{field}'", path=path, line_no=line_no)

    name = obj["name"]
    if not isinstance(name, str) or not name:
        raise DecodeError("'name' must be a non-empty string", path=path, line_no=line_no)

    try:
        dependencies = _decode_dependencies(obj["deps"])
        features = _decode_features(obj["features"])
    except ValueError as e:
        raise DecodeError(str(e), path=path, line_no=line_no) from e

    return PackageRecord(name=name, dependencies=dependencies, features=features)


def iter_records(path: Path, *, on_error: Callable[[DecodeError], None]) -> Iterator[PackageRecord]:
    # Lines are decoded one by one so invalid UTF-8 only costs the line it is on.
    with path.open("rb") as f:
        for line_no, raw in enumerate(f, start=1):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                on_error(DecodeError(f"invalid UTF-8: {e}", path=path, line_no=line_no))
                continue
            if not line.strip():
                continue
            try:
                record = decode_record(line, path=path, line_no=line_no)
            except DecodeError as e:
                on_error(e)
                continue
            yield record
