"""
XSalsa20-Poly1305 Secret Box
============================

Authenticated encryption primitive used for every data block.

Security Properties:
    - 256-bit key
    - 192-bit nonce (safe to pick at random)
    - 128-bit Poly1305 authentication tag
    - Output layout: tag || ciphertext (NaCl secretbox, libsodium)

WARNING:
    - Never reuse (key, nonce) pairs
    - Plaintext is only returned after the tag verifies
"""

from __future__ import annotations

from typing import Final

from nacl.exceptions import CryptoError
from nacl.secret import SecretBox

from cryptremote.core.crypto.errors import BadBlockError

SECRETBOX_KEY_SIZE: Final[int] = SecretBox.KEY_SIZE  # 32
SECRETBOX_NONCE_SIZE: Final[int] = SecretBox.NONCE_SIZE  # 24
SECRETBOX_TAG_SIZE: Final[int] = SecretBox.MACBYTES  # 16


class SecretBoxCipher:
    """
    Secret box bound to a single key.

    Holds one SecretBox instance so a whole file reuses the key schedule
    instead of rebuilding it per block.
    """

    __slots__ = ("_box",)

    def __init__(self, key: bytes) -> None:
        if len(key) != SECRETBOX_KEY_SIZE:
            raise ValueError(f"Key must be exactly {SECRETBOX_KEY_SIZE} bytes")
        self._box = SecretBox(key)

    def seal(self, nonce: bytes, message: bytes) -> bytes:
        return self._box.encrypt(message, nonce).ciphertext

    def open(self, nonce: bytes, box: bytes) -> bytes:
        try:
            return self._box.decrypt(box, nonce)
        except CryptoError as e:
            raise BadBlockError() from e

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return "SecretBoxCipher(key=<hidden>)"
