from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

DEFAULT_EXCLUDE_DIRNAMES = frozenset({".git", "tmp", ".github"})


def iter_corpus_files(root: Path, exclude_dirnames: set[str] | frozenset[str] = DEFAULT_EXCLUDE_DIRNAMES) -> Iterator[Path]:
    """
    Yield every regular file under `root` once, in sorted order per directory.

    Directories named in `exclude_dirnames` are pruned at any depth, including the
    root itself. A directory that cannot be listed raises OSError from the iterator.
    """
    if root.name in exclude_dirnames:
        return

    def onerror(err: OSError) -> None:
        raise err

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        dirnames[:] = sorted(d for d in dirnames if d not in exclude_dirnames)
        for name in sorted(filenames):
            path = Path(dirpath) / name
            # FIFOs, sockets and dangling symlinks also land in `filenames`.
            if path.is_file():
                yield path
