"""
cryptremote Cryptographic Core
==============================

Password-based file and filename encryption compatible with the crypt
remote format.

Architecture:
    1. scrypt: password -> data key, name key, name tweak
    2. XSalsa20-Poly1305: 64 KiB authenticated data blocks
    3. EME over AES-256: deterministic filename encryption

Security Properties:
    - All file data is authenticated (fail closed, no partial output)
    - Per-file random 192-bit nonces from a CSPRNG
    - Key material never appears in repr or logs

WARNING: This module handles sensitive cryptographic material.
         Incorrect usage can compromise security.
"""

from cryptremote.core.crypto.cipher import Cipher, FileNameEncoding
from cryptremote.core.crypto.errors import (
    AuthenticationError,
    BadBlockError,
    BadDecryptControlCharError,
    BadDecryptionError,
    BadDecryptUTF8Error,
    BadEncodingError,
    BadMagicError,
    BadPaddingError,
    BadSeekError,
    ConfigurationError,
    CryptError,
    FileTooShortError,
    MalformedInputError,
    NameDecryptionError,
    NameTooLongError,
    TruncatedBlockHeaderError,
    UnknownEncodingError,
)
from cryptremote.core.crypto.kdf import DEFAULT_SALT, CipherKeys, derive_keys
from cryptremote.core.crypto.nonce import Nonce
from cryptremote.core.crypto.sizes import decrypted_size, encrypted_size

__all__ = [
    "Cipher",
    "FileNameEncoding",
    "CipherKeys",
    "DEFAULT_SALT",
    "derive_keys",
    "Nonce",
    "encrypted_size",
    "decrypted_size",
    "CryptError",
    "MalformedInputError",
    "FileTooShortError",
    "BadMagicError",
    "TruncatedBlockHeaderError",
    "AuthenticationError",
    "BadBlockError",
    "NameDecryptionError",
    "BadEncodingError",
    "BadDecryptionError",
    "BadPaddingError",
    "BadDecryptUTF8Error",
    "BadDecryptControlCharError",
    "NameTooLongError",
    "BadSeekError",
    "ConfigurationError",
    "UnknownEncodingError",
]
