from __future__ import annotations

import os
from pathlib import Path

import pytest

from crate_stats.walk import DEFAULT_EXCLUDE_DIRNAMES, iter_corpus_files


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")


def test_iter_corpus_files_skips_excluded_dirs_at_any_depth(tmp_path: Path) -> None:
    root = tmp_path / "index"
    _touch(root / "config.json")
    _touch(root / "se" / "rd" / "serde")
    _touch(root / "ra" / "nd" / "rand")
    _touch(root / ".git" / "HEAD")
    _touch(root / ".github" / "workflows" / "ci.yml")
    _touch(root / "se" / "tmp" / "scratch")
    _touch(root / "ra" / "nd" / ".git" / "objects" / "x")

    files = [p.relative_to(root).as_posix() for p in iter_corpus_files(root, DEFAULT_EXCLUDE_DIRNAMES)]
    assert files == ["config.json", "ra/nd/rand", "se/rd/serde"]


def test_iter_corpus_files_is_deterministic(tmp_path: Path) -> None:
    root = tmp_path / "index"
    for name in ["b/2", "a/1", "c", "a/0", "b/1/x"]:
        _touch(root / name)
    first = list(iter_corpus_files(root))
    second = list(iter_corpus_files(root))
    assert first == second
    assert len(first) == len(set(first)) == 5


def test_iter_corpus_files_excluded_root_yields_nothing(tmp_path: Path) -> None:
    root = tmp_path / "tmp"
    _touch(root / "file")
    assert list(iter_corpus_files(root)) == []


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs mkfifo")
def test_iter_corpus_files_ignores_non_regular_entries(tmp_path: Path) -> None:
    root = tmp_path / "index"
    _touch(root / "real")
    os.mkfifo(root / "pipe")
    (root / "dangling").symlink_to(root / "missing")
    assert [p.name for p in iter_corpus_files(root)] == ["real"]


def test_iter_corpus_files_raises_on_unlistable_dir(tmp_path: Path, monkeypatch) -> None:
    root = tmp_path / "index"
    _touch(root / "a" / "file")
    _touch(root / "b" / "file")
    bad = root / "b"

    real_scandir = os.scandir

    def fake_scandir(path=".", *args, **kwargs):
        if Path(path) == bad:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path, *args, **kwargs)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    seen: list[Path] = []
    with pytest.raises(PermissionError):
        for p in iter_corpus_files(root):
            seen.append(p)
    assert seen == [root / "a" / "file"]


def test_iter_corpus_files_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        list(iter_corpus_files(tmp_path / "missing"))
