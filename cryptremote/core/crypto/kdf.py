"""
Key Derivation
==============

Password-based derivation of the three secrets used by the crypt format.

Implements:
    - scrypt (N=2^14, r=8, p=1) producing 80 bytes of key material
    - Positional split into data key, name key and name tweak
    - All-zero keys for an empty password (obfuscation only, no secrecy)

The default salt is a fixed public constant from the external format.
It is not a secret and must never be generated at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

DATA_KEY_SIZE: Final[int] = 32  # secretbox key
NAME_KEY_SIZE: Final[int] = 32  # AES-256 key for EME
NAME_TWEAK_SIZE: Final[int] = 16  # one AES block
KEY_MATERIAL_SIZE: Final[int] = DATA_KEY_SIZE + NAME_KEY_SIZE + NAME_TWEAK_SIZE

# scrypt cost parameters fixed by the format
SCRYPT_N: Final[int] = 2 ** 14
SCRYPT_R: Final[int] = 8
SCRYPT_P: Final[int] = 1

DEFAULT_SALT: Final[bytes] = bytes([
    0xA8, 0x0D, 0xF4, 0x3A, 0x8F, 0xBD, 0x03, 0x08,
    0xA7, 0xCA, 0xB8, 0x3E, 0x58, 0x1F, 0x86, 0xB1,
])


@dataclass(frozen=True, slots=True)
class CipherKeys:
    """
    Immutable key set produced by a single derivation.

    Attributes:
        data_key: 32-byte secretbox key for file contents
        name_key: 32-byte AES key for filename encryption
        name_tweak: 16-byte EME tweak for filename encryption
    """

    data_key: bytes
    name_key: bytes
    name_tweak: bytes

    def __post_init__(self) -> None:
        if len(self.data_key) != DATA_KEY_SIZE:
            raise ValueError(f"data_key must be exactly {DATA_KEY_SIZE} bytes")
        if len(self.name_key) != NAME_KEY_SIZE:
            raise ValueError(f"name_key must be exactly {NAME_KEY_SIZE} bytes")
        if len(self.name_tweak) != NAME_TWEAK_SIZE:
            raise ValueError(f"name_tweak must be exactly {NAME_TWEAK_SIZE} bytes")

    @classmethod
    def zero(cls) -> CipherKeys:
        """All-zero keys, as used for an empty password."""
        return cls.from_material(bytes(KEY_MATERIAL_SIZE))

    @classmethod
    def from_material(cls, material: bytes) -> CipherKeys:
        """Split 80 bytes of key material into the three secrets."""
        if len(material) != KEY_MATERIAL_SIZE:
            raise ValueError(f"Key material must be exactly {KEY_MATERIAL_SIZE} bytes")
        return cls(
            data_key=bytes(material[:DATA_KEY_SIZE]),
            name_key=bytes(material[DATA_KEY_SIZE:DATA_KEY_SIZE + NAME_KEY_SIZE]),
            name_tweak=bytes(material[DATA_KEY_SIZE + NAME_KEY_SIZE:]),
        )

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return "CipherKeys(data_key=<hidden>, name_key=<hidden>, name_tweak=<hidden>)"


def derive_key_material(password: str, salt: str = "") -> bytes:
    """
    Derive raw key material from a password using scrypt.

    Args:
        password: User password (empty means all-zero material)
        salt: Optional salt text; DEFAULT_SALT is used when empty

    Returns:
        KEY_MATERIAL_SIZE bytes
    """
    if password == "":
        return bytes(KEY_MATERIAL_SIZE)

    salt_bytes = salt.encode("utf-8") if salt else DEFAULT_SALT
    kdf = Scrypt(
        salt=salt_bytes,
        length=KEY_MATERIAL_SIZE,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
    )
    return kdf.derive(password.encode("utf-8"))


def derive_keys(password: str, salt: str = "") -> CipherKeys:
    """
    Derive the complete key set from a password.

    This is CPU and memory bound (about 16 MiB for scrypt); run it once
    per session and share the result.

    Args:
        password: User password
        salt: Optional salt text

    Returns:
        CipherKeys from a single derivation
    """
    return CipherKeys.from_material(derive_key_material(password, salt))
