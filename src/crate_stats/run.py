from __future__ import annotations

import sys
from pathlib import Path

from .aggregate import run_aggregation
from .config import ScanSettings
from .report import summary_json, write_json, write_report
from .walk import DEFAULT_EXCLUDE_DIRNAMES


def format_startup_header(*, settings: ScanSettings, config_path: Path, config_missing: bool) -> str:
    cfg_note = "not found, using defaults" if config_missing else "loaded"
    if settings.mode == "single-pass":
        scan_line = f"2) Scan corpus: one walk, files decoded by {settings.jobs} worker threads, partial results merged in walk order."
    else:
        scan_line = "2) Scan corpus: one worker per metric, each walking the whole tree on its own."
    lines = [
        "crate-stats",
        "",
        "Run plan:",
        f"1) Config: {config_path} ({cfg_note})",
        scan_line,
        f"   Root: {settings.root}",
        f"   Skipped directories: {', '.join(sorted(settings.exclude_dirnames)) or '(none)'}",
        f"3) Write report: {settings.output}" + (f" (+ JSON summary {settings.json_output})" if settings.json_output else ""),
        "",
        "The corpus is only read; malformed lines are reported on stderr and skipped.",
        "",
    ]
    return "\n".join(lines)


def run_scan(*, settings: ScanSettings, config_path: Path, config_missing: bool) -> int:
    print(format_startup_header(settings=settings, config_path=config_path, config_missing=config_missing))

    root = settings.root
    if not root.is_dir():
        print(f"Corpus root is not a directory: {root}", file=sys.stderr)
        return 2

    if settings.exclude_dirnames != DEFAULT_EXCLUDE_DIRNAMES:
        skipped = ", ".join(sorted(settings.exclude_dirnames)) or "(none)"
        default = ", ".join(sorted(DEFAULT_EXCLUDE_DIRNAMES))
        print(f"Note: skipped directories overridden by {config_path}: {skipped} (default: {default})", file=sys.stderr)

    result = run_aggregation(root, settings.exclude_dirnames, mode=settings.mode, jobs=settings.jobs)

    print(f"Scanned {result.files_scanned} files ({result.decode_errors} malformed lines skipped).")
    if result.failures:
        print(f"Warning: {len(result.failures)} worker(s) stopped early; the report uses their partial results.")

    try:
        write_report(settings.output, result)
        if settings.json_output is not None:
            write_json(settings.json_output, summary_json(result))
    except OSError as e:
        print(f"Failed to write report: {e}", file=sys.stderr)
        return 1

    print(f"Done. Report in: {settings.output}")
    return 0
