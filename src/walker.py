"""
Streaming filesystem walker for recursive hashing.

- Plain files are yielded as-is; directories are walked without loading
  everything in memory.
- Respects: ignore_hidden, follow_symlinks.
- Yields paths in a stable (sorted) order so digest listings are reproducible.
- Best-effort cycle guard when following symlinks (tracks (st_dev, st_ino)).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator, Iterable, Set, Tuple

from errors import InvalidPathError


def _is_hidden_name(name: str) -> bool:
    return name.startswith(".")


def iter_files(
    roots: Iterable[Path],
    *,
    recursive: bool = False,
    ignore_hidden: bool = True,
    follow_symlinks: bool = False,
) -> Generator[Path, None, None]:
    """
    Yield the files named by `roots`, descending into directories if `recursive`.

    Raises:
        InvalidPathError: if a root is missing, or is a directory while
            `recursive` is off.
    """
    visited_dirs: Set[Tuple[int, int]] = set()  # (st_dev, st_ino) for cycles

    for root in roots:
        if not root.exists():
            raise InvalidPathError(f"Path not found: {root}")
        if root.is_file():
            yield root
            continue
        if not root.is_dir():
            raise InvalidPathError(f"Not a regular file or directory: {root}")
        if not recursive:
            raise InvalidPathError(f"Is a directory (use --recursive): {root}")

        for dirpath, dirnames, filenames in os.walk(root, followlinks=follow_symlinks):
            pdir = Path(dirpath)

            if follow_symlinks:
                try:
                    st = os.stat(pdir, follow_symlinks=True)
                except OSError:
                    dirnames[:] = []
                    continue
                key = (st.st_dev, st.st_ino)
                if key in visited_dirs:
                    dirnames[:] = []
                    continue
                visited_dirs.add(key)

            if ignore_hidden:
                dirnames[:] = [d for d in dirnames if not _is_hidden_name(d)]
            dirnames.sort()

            for name in sorted(filenames):
                if ignore_hidden and _is_hidden_name(name):
                    continue
                p = pdir / name
                if p.is_file():
                    yield p
