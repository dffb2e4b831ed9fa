"""
cryptremote - Crypt Remote Compatible Encryption
================================================

Password-based file and filename encryption that reads and writes the
crypt remote format (RCLONE magic, XSalsa20-Poly1305 blocks, EME names).

Security Notice:
- No secrets are logged
- Fail-closed decryption, no partial plaintext
- Passwords are never read from the environment
"""

from cryptremote.core.config import CryptConfig
from cryptremote.core.crypto import Cipher, CipherKeys, FileNameEncoding, derive_keys
from cryptremote.core.logging import get_secure_logger

__version__ = "0.1.0"

__all__ = [
    "Cipher",
    "CipherKeys",
    "FileNameEncoding",
    "derive_keys",
    "CryptConfig",
    "get_secure_logger",
    "__version__",
]
