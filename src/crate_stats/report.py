from __future__ import annotations

import dataclasses
import json
from pathlib import Path

from .models import RunResult


def format_report(result: RunResult) -> str:
    groups = [rec.report_lines() for rec in result.finalized().values()]
    return "\n\n".join("\n".join(lines) for lines in groups) + "\n"


def write_report(path: Path, result: RunResult) -> None:
    path.write_text(format_report(result), encoding="utf-8")


def summary_json(result: RunResult) -> dict[str, object]:
    return {
        "mode": result.mode,
        "files_scanned": result.files_scanned,
        "decode_errors": result.decode_errors,
        "failures": list(result.failures),
        "metrics": {name: dataclasses.asdict(rec) for name, rec in result.finalized().items()},
    }


def write_json(path: Path, data: object) -> None:
    path.write_text(json.dumps(data, indent=2, sort_keys=False) + "\n", encoding="utf-8")
