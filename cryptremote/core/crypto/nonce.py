"""
Nonce Arithmetic
================

Little-endian counter arithmetic over fixed-width byte buffers.

The file nonce is a 24-byte counter: it starts at a random value and is
incremented once per data block. Arithmetic is byte-wise with carry so it
works for any buffer width, and it wraps silently on overflow, matching
the external format.
"""

from __future__ import annotations

import secrets
from typing import Final

NONCE_SIZE: Final[int] = 24  # XSalsa20 nonce length

_UINT64_MASK: Final[int] = (1 << 64) - 1


def carry(i: int, buf: bytearray) -> None:
    """
    Add one to ``buf`` starting at byte ``i``, propagating the carry.

    Stops as soon as a byte does not wrap around.
    """
    for index in range(i, len(buf)):
        digit = buf[index]
        new_digit = (digit + 1) & 0xFF
        buf[index] = new_digit
        if new_digit >= digit:
            break


def increment(buf: bytearray) -> None:
    """Add one to the little-endian counter held in ``buf``."""
    carry(0, buf)


def add(x: int, buf: bytearray) -> None:
    """
    Add the unsigned 64-bit value ``x`` to ``buf``.

    ``x`` is added to the first 8 bytes; a carry out of byte 7 continues
    into byte 8 onward via carry().
    """
    if len(buf) < 8:
        raise ValueError("counter buffer must be at least 8 bytes")

    y = x & _UINT64_MASK
    acc = 0
    for index in range(8):
        acc += buf[index] + (y & 0xFF)
        y >>= 8
        buf[index] = acc & 0xFF
        acc >>= 8

    if acc:
        carry(8, buf)


class Nonce:
    """
    Fixed-width file nonce.

    Wraps a private bytearray so callers cannot accidentally share and
    mutate a counter between two files.

    Usage:
        nonce = Nonce.random()
        sealed = box.seal(bytes(nonce), chunk)
        nonce.increment()
    """

    __slots__ = ("_buf",)

    def __init__(self, value: bytes | bytearray) -> None:
        if len(value) != NONCE_SIZE:
            raise ValueError(f"Nonce must be exactly {NONCE_SIZE} bytes")
        self._buf = bytearray(value)

    @classmethod
    def random(cls) -> Nonce:
        """Generate a nonce from the OS CSPRNG."""
        return cls(secrets.token_bytes(NONCE_SIZE))

    def increment(self) -> None:
        increment(self._buf)

    def add(self, x: int) -> None:
        add(x, self._buf)

    def copy(self) -> Nonce:
        return Nonce(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Nonce):
            return self._buf == other._buf
        return NotImplemented

    def __repr__(self) -> str:
        return f"Nonce({self._buf.hex()})"
