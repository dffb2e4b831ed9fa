"""
Encrypted File Layout and Size Oracle
=====================================

File Format:
    [ 8 bytes magic ][ 24 bytes nonce ][ block ]*

    magic = b"RCLONE\\x00\\x00"
    block = [ 16-byte Poly1305 tag ][ up to 65536 bytes ciphertext ]

Every block except the last carries exactly 65536 bytes of plaintext.
The last block carries the remainder; a plaintext that is an exact
multiple of the block size does not get an empty trailing block.

These constants are part of the wire format and must not change.
"""

from __future__ import annotations

from typing import Final

from cryptremote.core.crypto.errors import FileTooShortError, TruncatedBlockHeaderError
from cryptremote.core.crypto.nonce import NONCE_SIZE

FILE_MAGIC: Final[bytes] = b"RCLONE\x00\x00"
FILE_MAGIC_SIZE: Final[int] = len(FILE_MAGIC)
FILE_NONCE_SIZE: Final[int] = NONCE_SIZE
FILE_HEADER_SIZE: Final[int] = FILE_MAGIC_SIZE + FILE_NONCE_SIZE  # 32

BLOCK_HEADER_SIZE: Final[int] = 16  # Poly1305 tag
BLOCK_DATA_SIZE: Final[int] = 64 * 1024
BLOCK_SIZE: Final[int] = BLOCK_HEADER_SIZE + BLOCK_DATA_SIZE  # 65552


def encrypted_size(size: int) -> int:
    """
    Ciphertext length for a plaintext of ``size`` bytes.

    Raises:
        ValueError: If size is negative
    """
    if size < 0:
        raise ValueError("size must not be negative")

    blocks, residue = divmod(size, BLOCK_DATA_SIZE)
    result = FILE_HEADER_SIZE + blocks * BLOCK_SIZE
    if residue:
        result += BLOCK_HEADER_SIZE + residue
    return result


def decrypted_size(size: int) -> int:
    """
    Plaintext length for a ciphertext of ``size`` bytes.

    Raises:
        FileTooShortError: If size is smaller than the file header
        TruncatedBlockHeaderError: If the last block cannot hold a tag
            plus at least one byte
    """
    size -= FILE_HEADER_SIZE
    if size < 0:
        raise FileTooShortError()

    blocks, residue = divmod(size, BLOCK_SIZE)
    result = blocks * BLOCK_DATA_SIZE
    if residue:
        residue -= BLOCK_HEADER_SIZE
        if residue <= 0:
            raise TruncatedBlockHeaderError()
        result += residue
    return result
