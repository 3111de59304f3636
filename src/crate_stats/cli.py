from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .aggregate import MODES
from .config import DEFAULT_CONFIG, DEFAULT_OUTPUT, DEFAULT_ROOT, ScanSettings, load_config
from .run import run_scan


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aggregate dependency, dependent, feature and version stats across a package index.")
    parser.add_argument("--root", type=Path, default=DEFAULT_ROOT, help="Root directory of newline-delimited JSON package records.")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Path of the text report.")
    parser.add_argument("--json", type=Path, default=None, help="Also write a JSON summary to this path.")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="Path to config.json.")
    parser.add_argument(
        "--mode",
        choices=list(MODES),
        default=None,
        help="single-pass: walk once and feed every metric; per-metric: one full walk per metric (default: single-pass).",
    )
    parser.add_argument("--jobs", type=int, default=None, help="Worker threads for single-pass mode.")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    parser.prog = "crate-stats"
    args = parser.parse_args(argv)
    config = load_config(args.config)
    settings = ScanSettings.from_args(args, config)
    return run_scan(settings=settings, config_path=args.config, config_missing=not args.config.exists())


if __name__ == "__main__":
    raise SystemExit(main())
