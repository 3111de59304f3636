from __future__ import annotations

import dataclasses
import sys
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from .metrics import DEFAULT_METRICS, Accumulator, merge_accumulators, new_accumulators
from .models import RunResult
from .records import DecodeError, iter_records
from .walk import iter_corpus_files

MODES = ("single-pass", "per-metric")


@dataclasses.dataclass
class ScanOutcome:
    """What one worker hands back to the coordinator."""

    worker: str
    accumulators: dict[str, Accumulator]
    files_scanned: int = 0
    decode_errors: int = 0
    error: str | None = None


def _report_decode_error(err: DecodeError) -> None:
    print(f"Failed to decode line: {err}, path: {err.path}", file=sys.stderr)


def scan_file(path: Path, accumulators: dict[str, Accumulator], *, worker: str) -> int:
    """
    Feed every record of `path` into each accumulator. Returns the number of
    malformed lines skipped. OSError from opening or reading the file propagates.
    """
    errors = 0

    def on_error(err: DecodeError) -> None:
        nonlocal errors
        errors += 1
        _report_decode_error(err)

    targets = list(accumulators.values())
    for record in iter_records(path, on_error=on_error):
        for acc in targets:
            acc.observe(record)
    print(f"[{worker}] processed {path}")
    return errors


def _scan_one_file(path: Path, metrics: tuple[type[Accumulator], ...]) -> ScanOutcome:
    worker = threading.current_thread().name
    out = ScanOutcome(worker=worker, accumulators=new_accumulators(metrics))
    try:
        out.decode_errors = scan_file(path, out.accumulators, worker=worker)
        out.files_scanned = 1
    except OSError as e:
        out.error = f"[{worker}] failed reading {path}: {e}"
    return out


def run_single_pass(
    root: Path,
    exclude_dirnames: set[str] | frozenset[str],
    *,
    jobs: int,
    metrics: tuple[type[Accumulator], ...] = DEFAULT_METRICS,
) -> RunResult:
    """
    Walk the tree once; each file becomes a pool task that fills its own
    accumulators. Partial results are merged in walk order.
    """
    result = RunResult(mode="single-pass", accumulators=new_accumulators(metrics))
    jobs = max(1, jobs)
    max_pending = jobs * 4
    pending: deque[Future[ScanOutcome]] = deque()
    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="scan") as ex:
        try:
            for path in iter_corpus_files(root, exclude_dirnames):
                pending.append(ex.submit(_scan_one_file, path, metrics))
                # Merge finished heads as we go, in walk order.
                while pending and (pending[0].done() or len(pending) > max_pending):
                    _collect(result, pending.popleft().result())
        except OSError as e:
            msg = f"[walker] traversal of {root} stopped: {e}"
            print(msg, file=sys.stderr)
            result.failures.append(msg)

        while pending:
            _collect(result, pending.popleft().result())
    return result


def _walk_for_metric(
    metric: type[Accumulator],
    root: Path,
    exclude_dirnames: set[str] | frozenset[str],
) -> ScanOutcome:
    worker = metric.name
    out = ScanOutcome(worker=worker, accumulators=new_accumulators((metric,)))
    try:
        for path in iter_corpus_files(root, exclude_dirnames):
            out.decode_errors += scan_file(path, out.accumulators, worker=worker)
            out.files_scanned += 1
    except OSError as e:
        out.error = f"[{worker}] traversal failed: {e}"
    return out


def run_per_metric(
    root: Path,
    exclude_dirnames: set[str] | frozenset[str],
    *,
    metrics: tuple[type[Accumulator], ...] = DEFAULT_METRICS,
) -> RunResult:
    """One worker per metric, each walking the whole corpus on its own."""
    result = RunResult(mode="per-metric", accumulators=new_accumulators(metrics))
    with ThreadPoolExecutor(max_workers=len(metrics), thread_name_prefix="metric") as ex:
        futs = [ex.submit(_walk_for_metric, m, root, exclude_dirnames) for m in metrics]
        outcomes = [fut.result() for fut in futs]

    for out in outcomes:
        _collect(result, out)
    # Every worker walked the same files; count them once.
    result.files_scanned = max((o.files_scanned for o in outcomes), default=0)
    result.decode_errors = max((o.decode_errors for o in outcomes), default=0)
    return result


def _collect(result: RunResult, out: ScanOutcome) -> None:
    merge_accumulators(result.accumulators, out.accumulators)
    result.files_scanned += out.files_scanned
    result.decode_errors += out.decode_errors
    if out.error:
        print(out.error, file=sys.stderr)
        result.failures.append(out.error)


def run_aggregation(
    root: Path,
    exclude_dirnames: set[str] | frozenset[str],
    *,
    mode: str = "single-pass",
    jobs: int = 4,
    metrics: tuple[type[Accumulator], ...] = DEFAULT_METRICS,
) -> RunResult:
    if mode == "single-pass":
        return run_single_pass(root, exclude_dirnames, jobs=jobs, metrics=metrics)
    if mode == "per-metric":
        return run_per_metric(root, exclude_dirnames, metrics=metrics)
    raise ValueError(f"unknown mode: {mode!r} (expected one of {', '.join(MODES)})")
