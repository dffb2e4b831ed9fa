"""
Directory Tree Processing
=========================

Shared driver for encrypting or decrypting every file under a directory.

Flow per file:
    1. Map the relative name (encrypt or decrypt it)
    2. Validate the target stays inside the output directory
    3. Read the file and hand the bytes to the worker pool
    4. Write the result atomically once the task completes

At most 2 * max_workers files are held in memory at once. A failure on
one file is recorded in the report and does not stop the others.
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_COMPLETED, Future, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from cryptremote.core.crypto.cipher import Cipher
from cryptremote.core.crypto.errors import CryptError
from cryptremote.core.workers import CryptoWorkerPool, Operation, TaskResult
from cryptremote.utils.paths import iter_files, write_atomic
from cryptremote.utils.validators import (
    ValidationError,
    validate_path_safe,
    validate_relative_name,
)

_log = logging.getLogger("cryptremote.file_ops")


@dataclass
class TreeReport:
    """Outcome of a tree run."""

    processed: list[tuple[Path, Path]] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def __repr__(self) -> str:
        return f"TreeReport(processed={len(self.processed)}, failed={len(self.failed)})"


def target_path(dest_dir: Path, name: str) -> Path:
    """
    Resolve a mapped relative name under ``dest_dir``.

    Raises:
        ValidationError: If the name would escape dest_dir
    """
    validate_relative_name(name)
    return validate_path_safe(dest_dir / name, base_directory=dest_dir)


def process_tree(
    cipher: Cipher,
    source_dir: Path | str,
    dest_dir: Path | str,
    operation: Operation,
    map_name: Callable[[str], str],
    max_workers: int = 4,
) -> TreeReport:
    """
    Apply a data operation to every file under ``source_dir``.

    Args:
        cipher: Keyed transform context
        source_dir: Directory to read
        dest_dir: Directory to write (must not be inside source_dir)
        operation: ENCRYPT_DATA or DECRYPT_DATA
        map_name: Maps a relative source name to a relative target name
        max_workers: Worker pool size

    Returns:
        TreeReport listing processed and failed files

    Raises:
        NotADirectoryError: If source_dir is not a directory
        ValueError: If dest_dir is inside source_dir or the operation is
            not a data operation
    """
    if operation not in (Operation.ENCRYPT_DATA, Operation.DECRYPT_DATA):
        raise ValueError(f"not a data operation: {operation!r}")

    source_dir = Path(source_dir).resolve()
    dest_dir = Path(dest_dir).resolve()
    if not source_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {source_dir}")
    if dest_dir.is_relative_to(source_dir):
        raise ValueError("Output directory must not be inside the source directory")

    report = TreeReport()
    pending: dict[Future[TaskResult], tuple[Path, Path]] = {}
    window = max_workers * 2

    def collect(done: Iterable[Future[TaskResult]]) -> None:
        for future in done:
            source, target = pending.pop(future)
            result = future.result()
            if not result.ok:
                report.failed.append((source, str(result.error)))
                continue
            try:
                write_atomic(target, result.result)
            except OSError as e:
                _log.warning("Cannot write %s: %s", target, e)
                report.failed.append((source, str(e)))
                continue
            report.processed.append((source, target))
            _log.debug("Wrote %s", target)

    with CryptoWorkerPool(cipher, max_workers=max_workers) as pool:
        for source, relative in iter_files(source_dir):
            try:
                target = target_path(dest_dir, map_name(relative))
            except (CryptError, ValidationError) as e:
                _log.warning("Skipping %s: %s", source, e)
                report.failed.append((source, str(e)))
                continue

            try:
                data = source.read_bytes()
            except OSError as e:
                _log.warning("Cannot read %s: %s", source, e)
                report.failed.append((source, str(e)))
                continue

            future = pool.submit_operation(operation, data)
            pending[future] = (source, target)
            if len(pending) >= window:
                done, _ = wait(list(pending), return_when=FIRST_COMPLETED)
                collect(done)

        collect(list(pending))

    _log.info(
        "%s finished: %d processed, %d failed",
        operation.value, len(report.processed), len(report.failed),
    )
    return report
