"""
Crypt Transform Context
=======================

Encrypts and decrypts file contents and path names in the crypt remote
format.

Architecture:
    1. Data: 64 KiB blocks sealed with XSalsa20-Poly1305 under a counter
       nonce that starts random and increments once per block
    2. Names: PKCS#7 padding, EME over AES-256 with a fixed tweak, then
       base32hex (lowercase) or URL-safe base64, both unpadded

Security Properties:
    - Data blocks are authenticated; decryption fails closed
    - No partial plaintext is ever returned on failure
    - Names are deterministic (same name, same key => same ciphertext)
    - Names are not authenticated; padding, UTF-8 and control character
      checks are the only wrong-password signal

The context holds no per-call state. After keying it can be shared
read-only between threads.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Final, Optional

from cryptography.hazmat.primitives import padding

from cryptremote.core.crypto.eme import EME_BLOCK_SIZE, EmeCipher
from cryptremote.core.crypto.errors import (
    BadDecryptControlCharError,
    BadDecryptionError,
    BadDecryptUTF8Error,
    BadEncodingError,
    BadMagicError,
    BadPaddingError,
    BadSeekError,
    FileTooShortError,
    UnknownEncodingError,
)
from cryptremote.core.crypto.kdf import CipherKeys, derive_keys
from cryptremote.core.crypto.nonce import Nonce
from cryptremote.core.crypto.secretbox import SecretBoxCipher
from cryptremote.core.crypto.sizes import (
    BLOCK_DATA_SIZE,
    BLOCK_SIZE,
    FILE_HEADER_SIZE,
    FILE_MAGIC,
    FILE_MAGIC_SIZE,
    decrypted_size,
)

NAME_CIPHER_BLOCK_SIZE: Final[int] = EME_BLOCK_SIZE

_BASE32HEX_RE: Final[re.Pattern[str]] = re.compile(r"^[0-9A-Va-v]*$")
_BASE64URL_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]*$")


class FileNameEncoding(str, Enum):
    """Text alphabet for encrypted filenames."""

    BASE32 = "base32"
    BASE64 = "base64"

    @classmethod
    def parse(cls, value: FileNameEncoding | str) -> FileNameEncoding:
        """
        Resolve an encoding selector.

        Raises:
            UnknownEncodingError: If the selector is not a known encoding
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnknownEncodingError(value) from None


def encode_name(ciphertext: bytes, encoding: FileNameEncoding) -> str:
    """Encode raw name ciphertext into filesystem-safe ASCII."""
    if encoding is FileNameEncoding.BASE32:
        return base64.b32hexencode(ciphertext).decode("ascii").rstrip("=").lower()
    if encoding is FileNameEncoding.BASE64:
        return base64.urlsafe_b64encode(ciphertext).decode("ascii").rstrip("=")
    raise UnknownEncodingError(encoding)


def decode_name(text: str, encoding: FileNameEncoding) -> bytes:
    """
    Decode an encrypted name segment back to raw ciphertext.

    Raises:
        BadEncodingError: If the text has padding or is not in the alphabet
    """
    if encoding is FileNameEncoding.BASE32:
        if text.endswith("=") or not _BASE32HEX_RE.match(text):
            raise BadEncodingError("bad base32 filename encoding")
        padded = text.upper() + "=" * (-len(text) % 8)
        try:
            return base64.b32hexdecode(padded)
        except binascii.Error as e:
            raise BadEncodingError("bad base32 filename encoding") from e
    if encoding is FileNameEncoding.BASE64:
        if text.endswith("=") or not _BASE64URL_RE.match(text):
            raise BadEncodingError("bad base64 filename encoding")
        padded = text + "=" * (-len(text) % 4)
        try:
            return base64.urlsafe_b64decode(padded)
        except binascii.Error as e:
            raise BadEncodingError("bad base64 filename encoding") from e
    raise UnknownEncodingError(encoding)


def check_valid_name(raw: bytes) -> str:
    """
    Decode recovered name bytes, rejecting anything that is not clean text.

    Raises:
        BadDecryptUTF8Error: If bytes are not valid UTF-8
        BadDecryptControlCharError: If text has C0 controls or DEL
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BadDecryptUTF8Error() from e
    if any(ch < " " or ch == "\x7f" for ch in text):
        raise BadDecryptControlCharError()
    return text


@dataclass(frozen=True, slots=True)
class _KeyedPrimitives:
    """Keys plus the primitives built from them, swapped as one unit."""

    keys: CipherKeys
    box: SecretBoxCipher
    eme: EmeCipher

    @classmethod
    def build(cls, keys: CipherKeys) -> _KeyedPrimitives:
        return cls(keys=keys, box=SecretBoxCipher(keys.data_key), eme=EmeCipher(keys.name_key))


class Cipher:
    """
    Keyed transform context for the crypt remote format.

    Usage:
        cipher = Cipher.from_password("password", salt="", file_name_encoding="base64")

        blob = cipher.encrypt_data(b"hello")
        data = cipher.decrypt_data(blob)

        name = cipher.encrypt_file_name("dir/file.txt")
        path = cipher.decrypt_file_name(name)

    Security Notes:
        - Construct once per session; key derivation is expensive
        - Re-keying replaces all three secrets together
        - A fresh random nonce is used per file unless one is given
    """

    __slots__ = ("_keyed", "_file_name_encoding", "_directory_name_encryption")

    def __init__(
        self,
        keys: Optional[CipherKeys] = None,
        file_name_encoding: FileNameEncoding | str = FileNameEncoding.BASE32,
        directory_name_encryption: bool = True,
    ) -> None:
        """
        Initialize the transform context.

        Args:
            keys: Derived key set (all-zero keys if None)
            file_name_encoding: "base32" or "base64"
            directory_name_encryption: Encrypt every path segment, not
                just the last one

        Raises:
            UnknownEncodingError: If the encoding is not supported
        """
        self._file_name_encoding = FileNameEncoding.parse(file_name_encoding)
        self._directory_name_encryption = bool(directory_name_encryption)
        self._keyed = _KeyedPrimitives.build(keys or CipherKeys.zero())

    @classmethod
    def from_password(
        cls,
        password: str,
        salt: str = "",
        file_name_encoding: FileNameEncoding | str = FileNameEncoding.BASE32,
        directory_name_encryption: bool = True,
    ) -> Cipher:
        """Create a context keyed from a password (and optional salt)."""
        return cls(
            keys=derive_keys(password, salt),
            file_name_encoding=file_name_encoding,
            directory_name_encryption=directory_name_encryption,
        )

    def key(self, password: str, salt: str = "") -> Cipher:
        """
        Re-key from a password, replacing all secrets at once.

        Returns:
            self, for chaining
        """
        self.set_keys(derive_keys(password, salt))
        return self

    def set_keys(self, keys: CipherKeys) -> None:
        """Install an already derived key set."""
        self._keyed = _KeyedPrimitives.build(keys)

    @property
    def keys(self) -> CipherKeys:
        return self._keyed.keys

    @property
    def file_name_encoding(self) -> FileNameEncoding:
        return self._file_name_encoding

    @property
    def directory_name_encryption(self) -> bool:
        return self._directory_name_encryption

    # ------------------------------------------------------------------
    # File contents
    # ------------------------------------------------------------------

    def encrypt_data(self, plaintext: bytes, nonce: Optional[bytes | Nonce] = None) -> bytes:
        """
        Encrypt a whole file.

        Args:
            plaintext: File contents
            nonce: Optional explicit 24-byte starting nonce. Only pass one
                for reproducible output; reusing a nonce across two files
                under the same key breaks confidentiality.

        Returns:
            encrypted_size(len(plaintext)) bytes
        """
        box = self._keyed.box
        counter = Nonce.random() if nonce is None else Nonce(bytes(nonce))

        out = [FILE_MAGIC, bytes(counter)]
        view = memoryview(plaintext)
        for offset in range(0, len(view), BLOCK_DATA_SIZE):
            chunk = bytes(view[offset:offset + BLOCK_DATA_SIZE])
            out.append(box.seal(bytes(counter), chunk))
            counter.increment()

        return b"".join(out)

    def _read_header(self, ciphertext: bytes) -> tuple[Nonce, int]:
        if len(ciphertext) < FILE_HEADER_SIZE:
            raise FileTooShortError()
        if bytes(ciphertext[:FILE_MAGIC_SIZE]) != FILE_MAGIC:
            raise BadMagicError()
        # Validates the trailing block length before any block is opened
        size = decrypted_size(len(ciphertext))
        return Nonce(bytes(ciphertext[FILE_MAGIC_SIZE:FILE_HEADER_SIZE])), size

    def decrypt_data(self, ciphertext: bytes) -> bytes:
        """
        Decrypt a whole file.

        Raises:
            FileTooShortError: If shorter than the 32-byte header
            BadMagicError: If the magic string does not match
            TruncatedBlockHeaderError: If the last block is too short
            BadBlockError: If any block fails authentication
        """
        counter, _ = self._read_header(ciphertext)
        box = self._keyed.box

        out = []
        for offset in range(FILE_HEADER_SIZE, len(ciphertext), BLOCK_SIZE):
            sealed = bytes(ciphertext[offset:offset + BLOCK_SIZE])
            out.append(box.open(bytes(counter), sealed))
            counter.increment()

        return b"".join(out)

    def decrypt_range(self, ciphertext: bytes, offset: int, length: Optional[int] = None) -> bytes:
        """
        Decrypt ``length`` bytes of plaintext starting at ``offset``.

        Only the blocks covering the range are authenticated and opened.
        The nonce is advanced straight to the first block.

        Args:
            ciphertext: Complete encrypted file
            offset: Plaintext offset
            length: Number of bytes (None = to end of file)

        Raises:
            BadSeekError: If offset is past the end of the plaintext
            ValueError: If offset or length is negative
        """
        if offset < 0 or (length is not None and length < 0):
            raise ValueError("offset and length must not be negative")

        counter, size = self._read_header(ciphertext)
        if offset > size:
            raise BadSeekError()

        end = size if length is None else min(size, offset + length)
        if end == offset:
            return b""

        first_block = offset // BLOCK_DATA_SIZE
        last_block = (end - 1) // BLOCK_DATA_SIZE
        counter.add(first_block)
        box = self._keyed.box

        out = []
        for block in range(first_block, last_block + 1):
            start = FILE_HEADER_SIZE + block * BLOCK_SIZE
            out.append(box.open(bytes(counter), bytes(ciphertext[start:start + BLOCK_SIZE])))
            counter.increment()

        skip = offset - first_block * BLOCK_DATA_SIZE
        return b"".join(out)[skip:skip + (end - offset)]

    # ------------------------------------------------------------------
    # File names
    # ------------------------------------------------------------------

    def encrypt_segment(self, plaintext: str) -> str:
        """
        Encrypt a single path segment.

        Raises:
            NameTooLongError: If the padded name exceeds 128 AES blocks
        """
        if plaintext == "":
            return ""
        padder = padding.PKCS7(NAME_CIPHER_BLOCK_SIZE * 8).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        keyed = self._keyed
        ciphertext = keyed.eme.encrypt(keyed.keys.name_tweak, padded)
        return encode_name(ciphertext, self._file_name_encoding)

    def decrypt_segment(self, ciphertext: str) -> str:
        """
        Decrypt a single path segment.

        Raises:
            BadEncodingError: If the text is not valid for the encoding
            BadDecryptionError: If the decoded length is not block aligned
            BadPaddingError: If the PKCS#7 padding is inconsistent
            BadDecryptUTF8Error: If the result is not UTF-8
            BadDecryptControlCharError: If the result has control chars
        """
        if ciphertext == "":
            return ""
        raw = decode_name(ciphertext, self._file_name_encoding)
        if len(raw) == 0 or len(raw) % NAME_CIPHER_BLOCK_SIZE != 0:
            raise BadDecryptionError("bad decryption - not a multiple of the block size")

        keyed = self._keyed
        padded = keyed.eme.decrypt(keyed.keys.name_tweak, raw)

        unpadder = padding.PKCS7(NAME_CIPHER_BLOCK_SIZE * 8).unpadder()
        try:
            plain = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise BadPaddingError() from e
        return check_valid_name(plain)

    def _map_path(self, path: str, transform: Callable[[str], str]) -> str:
        segments = path.split("/")
        last = len(segments) - 1
        return "/".join(
            transform(segment) if self._directory_name_encryption or i == last else segment
            for i, segment in enumerate(segments)
        )

    def encrypt_file_name(self, path: str) -> str:
        """Encrypt a '/' separated path, segment by segment."""
        return self._map_path(path, self.encrypt_segment)

    def decrypt_file_name(self, path: str) -> str:
        """Decrypt a '/' separated path, segment by segment."""
        return self._map_path(path, self.decrypt_segment)

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return (
            f"Cipher(file_name_encoding={self._file_name_encoding.value}, "
            f"directory_name_encryption={self._directory_name_encryption})"
        )
