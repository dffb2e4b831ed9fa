"""
Path Utilities
==============

Directory traversal and atomic writes for the file tools.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterator


def iter_files(root: Path | str) -> Iterator[tuple[Path, str]]:
    """
    Walk ``root`` recursively in a stable order.

    Yields:
        (absolute file path, '/' separated path relative to root)
    """
    root = Path(root)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        base = Path(dirpath)
        for filename in sorted(filenames):
            path = base / filename
            yield path, path.relative_to(root).as_posix()


def write_atomic(path: Path, data: bytes) -> None:
    """
    Write ``data`` to ``path`` through a temporary file and rename.

    The temporary file gets a unique name in the target directory, so
    existing siblings are never touched. The parent directory is created
    if it does not exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    f = tempfile.NamedTemporaryFile(
        "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
    )
    tmp = Path(f.name)
    try:
        with f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
