"""
EME Wide-Block Cipher
=====================

ECB-Mix-ECB (Halevi & Rogaway) tweakable wide-block mode over AES-256.

Used for filename encryption. It turns AES into a single keyed
permutation over a whole multiple-of-16-byte message, parameterized by a
16-byte tweak. There is no per-message nonce: equal plaintexts under the
same key and tweak give equal ciphertexts.

Limits:
    - Tweak: exactly 16 bytes
    - Message: 1 to 128 blocks (16 to 2048 bytes)

Block arithmetic treats each 16-byte block as a little-endian element of
GF(2^128) with the reduction polynomial x^128 + x^7 + x^2 + x + 1.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cryptremote.core.crypto.errors import NameTooLongError

EME_BLOCK_SIZE: Final[int] = 16  # AES block size
EME_MAX_BLOCKS: Final[int] = 16 * 8

_BLOCK_MASK: Final[int] = (1 << 128) - 1
_REDUCTION: Final[int] = 0x87


class Direction(Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


def _to_int(block: bytes) -> int:
    return int.from_bytes(block, "little")


def _to_block(value: int) -> bytes:
    return value.to_bytes(EME_BLOCK_SIZE, "little")


def mult_by_two(value: int) -> int:
    """Double a block in GF(2^128)."""
    value <<= 1
    if value >> 128:
        value = (value & _BLOCK_MASK) ^ _REDUCTION
    return value


class EmeCipher:
    """
    EME over AES-256.

    Usage:
        eme = EmeCipher(name_key)
        ciphertext = eme.encrypt(name_tweak, padded_plaintext)
        padded_plaintext = eme.decrypt(name_tweak, ciphertext)
    """

    __slots__ = ("_aes",)

    def __init__(self, key: bytes) -> None:
        if len(key) != 32:
            raise ValueError("Key must be exactly 32 bytes")
        # ECB is only used as the raw single-block primitive
        self._aes = Cipher(algorithms.AES(key), modes.ECB())

    def _ecb(self, data: bytes, direction: Direction) -> bytes:
        if direction is Direction.ENCRYPT:
            ctx = self._aes.encryptor()
        else:
            ctx = self._aes.decryptor()
        return ctx.update(data) + ctx.finalize()

    def _l_table(self, m: int) -> list[int]:
        # L = AES-Enc(K, 0^128), then 2L, 4L, ... regardless of direction
        li = _to_int(self._ecb(bytes(EME_BLOCK_SIZE), Direction.ENCRYPT))
        table = []
        for _ in range(m):
            li = mult_by_two(li)
            table.append(li)
        return table

    def transform(self, tweak: bytes, data: bytes, direction: Direction) -> bytes:
        """
        Apply the EME permutation (or its inverse) to ``data``.

        Raises:
            ValueError: If the tweak or data length is not block aligned
            NameTooLongError: If data exceeds EME_MAX_BLOCKS blocks
        """
        if len(tweak) != EME_BLOCK_SIZE:
            raise ValueError(f"Tweak must be exactly {EME_BLOCK_SIZE} bytes")
        if len(data) % EME_BLOCK_SIZE != 0:
            raise ValueError("Data length must be a multiple of the block size")

        m = len(data) // EME_BLOCK_SIZE
        if m == 0:
            raise ValueError("Data must contain at least one block")
        if m > EME_MAX_BLOCKS:
            raise NameTooLongError()

        t = _to_int(tweak)
        l_table = self._l_table(m)

        # PPj = 2^(j-1) L xor Pj, then PPPj = E(PPj)
        pp = b"".join(
            _to_block(_to_int(data[j * EME_BLOCK_SIZE:(j + 1) * EME_BLOCK_SIZE]) ^ l_table[j])
            for j in range(m)
        )
        ppp_raw = self._ecb(pp, direction)
        ppp = [
            _to_int(ppp_raw[j * EME_BLOCK_SIZE:(j + 1) * EME_BLOCK_SIZE])
            for j in range(m)
        ]

        # MP = (xor of PPPj) xor T, MC = E(MP), M = MP xor MC
        mp = t
        for block in ppp:
            mp ^= block
        mc = _to_int(self._ecb(_to_block(mp), direction))
        mask = mp ^ mc

        # CCCj = 2^(j-1) M xor PPPj for j >= 2
        ccc = [0] * m
        for j in range(1, m):
            mask = mult_by_two(mask)
            ccc[j] = ppp[j] ^ mask

        # CCC1 = (xor of CCCj for j >= 2) xor T xor MC
        ccc1 = mc ^ t
        for j in range(1, m):
            ccc1 ^= ccc[j]
        ccc[0] = ccc1

        # Cj = E(CCCj) xor 2^(j-1) L
        cc_raw = self._ecb(b"".join(_to_block(block) for block in ccc), direction)
        return b"".join(
            _to_block(_to_int(cc_raw[j * EME_BLOCK_SIZE:(j + 1) * EME_BLOCK_SIZE]) ^ l_table[j])
            for j in range(m)
        )

    def encrypt(self, tweak: bytes, plaintext: bytes) -> bytes:
        return self.transform(tweak, plaintext, Direction.ENCRYPT)

    def decrypt(self, tweak: bytes, ciphertext: bytes) -> bytes:
        return self.transform(tweak, ciphertext, Direction.DECRYPT)

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return "EmeCipher(key=<hidden>)"
