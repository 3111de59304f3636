from __future__ import annotations

import argparse
import dataclasses
import json
import os
from pathlib import Path

from .aggregate import MODES
from .walk import DEFAULT_EXCLUDE_DIRNAMES

DEFAULT_ROOT = Path("crates-demo")
DEFAULT_OUTPUT = Path("output.txt")
DEFAULT_CONFIG = Path("config.json")


def default_jobs() -> int:
    return max(1, min(8, (os.cpu_count() or 4)))


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SystemExit(f"Could not read config {config_path}: {e}")
    if not isinstance(data, dict):
        raise SystemExit(f"Config {config_path} must contain a JSON object.")
    return data


@dataclasses.dataclass(frozen=True)
class ScanSettings:
    root: Path
    output: Path
    json_output: Path | None
    mode: str
    jobs: int
    exclude_dirnames: frozenset[str]

    @classmethod
    def from_args(cls, args: argparse.Namespace, config: dict) -> ScanSettings:
        """Explicit flags win over config.json, which wins over the defaults."""
        mode = args.mode or str(config.get("mode", "") or "").strip() or "single-pass"
        if mode not in MODES:
            raise SystemExit(f"Unknown mode: {mode!r} (expected one of {', '.join(MODES)})")

        jobs_raw = args.jobs if args.jobs is not None else config.get("jobs", default_jobs())
        try:
            jobs = int(jobs_raw)
        except (TypeError, ValueError):
            raise SystemExit(f"jobs must be an integer, got: {jobs_raw!r}")
        if jobs < 1:
            raise SystemExit(f"jobs must be >= 1, got: {jobs}")

        exclude_cfg = config.get("exclude_dirnames")
        if exclude_cfg is None:
            exclude_dirnames = frozenset(DEFAULT_EXCLUDE_DIRNAMES)
        elif isinstance(exclude_cfg, list):
            exclude_dirnames = frozenset(str(d).strip() for d in exclude_cfg if str(d).strip())
        else:
            raise SystemExit("exclude_dirnames must be a list of directory names.")

        return cls(
            root=args.root,
            output=args.output,
            json_output=args.json,
            mode=mode,
            jobs=jobs,
            exclude_dirnames=exclude_dirnames,
        )
