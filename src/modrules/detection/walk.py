"""Deterministic working-tree walk shared by the file and import checks."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path


def iter_tree(root: Path | str, excluded_dirs: Iterable[str] = ()) -> Iterator[tuple[str, bool]]:
    """Yield (relative posix path, is_dir) top-down in sorted order.

    Directories whose name is in excluded_dirs are neither yielded nor entered.
    Symlinked directories are yielded but not followed.
    """
    root = Path(root)
    excluded = set(excluded_dirs)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"
        for name in dirnames:
            yield f"{prefix}{name}", True
        for name in sorted(filenames):
            yield f"{prefix}{name}", False
