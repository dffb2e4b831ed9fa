"""
Crypt Error Hierarchy
=====================

Every failure detected by the transform engine is raised as a subclass of
CryptError. Nothing is retried internally and nothing is swallowed.

Hierarchy:
    CryptError
    ├── MalformedInputError        (header / length problems)
    ├── AuthenticationError        (data block failed to verify)
    ├── NameDecryptionError        (filename could not be recovered)
    ├── NameTooLongError           (segment exceeds cipher limits)
    ├── BadSeekError               (range starts past end of data)
    └── ConfigurationError         (programming error, bad selector)

Authentication failures deliberately do not distinguish a wrong password
from tampered data.
"""

from __future__ import annotations


class CryptError(Exception):
    """Base class for all crypt engine errors."""
    pass


# --- Malformed input --------------------------------------------------------

class MalformedInputError(CryptError):
    """Ciphertext structure is invalid before any decryption happens."""
    pass


class FileTooShortError(MalformedInputError):
    def __init__(self, message: str = "file is too short to be encrypted") -> None:
        super().__init__(message)


class BadMagicError(MalformedInputError):
    def __init__(self, message: str = "not an encrypted file - bad magic string") -> None:
        super().__init__(message)


class TruncatedBlockHeaderError(MalformedInputError):
    def __init__(self, message: str = "file has truncated block header") -> None:
        super().__init__(message)


# --- Authentication ---------------------------------------------------------

class AuthenticationError(CryptError):
    """A data block did not authenticate (wrong password or corruption)."""
    pass


class BadBlockError(AuthenticationError):
    def __init__(
        self,
        message: str = "failed to authenticate decrypted block - bad password?",
    ) -> None:
        super().__init__(message)


# --- Filenames --------------------------------------------------------------

class NameDecryptionError(CryptError):
    """
    An encrypted filename could not be turned back into text.

    Filenames carry no authentication tag, so these checks are the only
    signal that the password does not match.
    """
    pass


class BadEncodingError(NameDecryptionError):
    def __init__(self, message: str = "bad filename encoding") -> None:
        super().__init__(message)


class BadDecryptionError(NameDecryptionError):
    def __init__(self, message: str = "bad decryption") -> None:
        super().__init__(message)


class BadPaddingError(NameDecryptionError):
    def __init__(self, message: str = "bad decryption - invalid padding") -> None:
        super().__init__(message)


class BadDecryptUTF8Error(NameDecryptionError):
    def __init__(self, message: str = "bad decryption - utf-8 invalid") -> None:
        super().__init__(message)


class BadDecryptControlCharError(NameDecryptionError):
    def __init__(self, message: str = "bad decryption - contains control chars") -> None:
        super().__init__(message)


class BadSeekError(CryptError):
    def __init__(self, message: str = "Seek beyond end of file") -> None:
        super().__init__(message)


class NameTooLongError(CryptError):
    def __init__(self, message: str = "filename too long to encrypt") -> None:
        super().__init__(message)


# --- Configuration ----------------------------------------------------------

class ConfigurationError(CryptError):
    """Invalid engine configuration. Not expected with valid settings."""
    pass


class UnknownEncodingError(ConfigurationError):
    def __init__(self, encoding: object) -> None:
        super().__init__(f"unknown file name encoding: {encoding!r}")
        self.encoding = encoding
