"""
File Encryption
===============

Encrypts files on disk into the crypt remote layout: contents become
the RCLONE block format and names are encrypted per path segment.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from cryptremote.core.crypto.cipher import Cipher
from cryptremote.core.file_ops.tree import TreeReport, process_tree, target_path
from cryptremote.core.workers import Operation
from cryptremote.utils.paths import write_atomic

_log = logging.getLogger("cryptremote.file_ops")


def encrypt_file(
    cipher: Cipher,
    source_path: Path | str,
    dest_dir: Path | str,
    relative_name: Optional[str] = None,
) -> Path:
    """
    Encrypt one file into ``dest_dir``.

    Args:
        cipher: Keyed transform context
        source_path: Plaintext file
        dest_dir: Output root directory
        relative_name: '/' separated name to encrypt (default: file name)

    Returns:
        Path of the encrypted file

    Raises:
        FileNotFoundError: If the source file does not exist
        CryptError: If the name cannot be encrypted
    """
    source_path = Path(source_path)
    dest_dir = Path(dest_dir)
    if not source_path.is_file():
        raise FileNotFoundError(f"File not found: {source_path}")

    name = relative_name if relative_name is not None else source_path.name
    target = target_path(dest_dir.resolve(), cipher.encrypt_file_name(name))
    write_atomic(target, cipher.encrypt_data(source_path.read_bytes()))
    _log.debug("Encrypted %s", source_path)
    return target


def encrypt_tree(
    cipher: Cipher,
    source_dir: Path | str,
    dest_dir: Path | str,
    max_workers: int = 4,
) -> TreeReport:
    """Encrypt every file under ``source_dir`` into ``dest_dir``."""
    return process_tree(
        cipher,
        source_dir,
        dest_dir,
        Operation.ENCRYPT_DATA,
        cipher.encrypt_file_name,
        max_workers=max_workers,
    )
