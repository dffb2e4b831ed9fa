import unittest

from cryptremote.core.crypto.cipher import Cipher, FileNameEncoding, decode_name, encode_name
from cryptremote.core.crypto.eme import EmeCipher, mult_by_two
from cryptremote.core.crypto.errors import (
    BadDecryptControlCharError,
    BadDecryptionError,
    BadDecryptUTF8Error,
    BadEncodingError,
    BadPaddingError,
    NameDecryptionError,
    NameTooLongError,
    UnknownEncodingError,
)
from cryptremote.core.crypto.kdf import CipherKeys, derive_keys


class EmeTests(unittest.TestCase):
    def test_mult_by_two(self) -> None:
        self.assertEqual(mult_by_two(1), 2)
        self.assertEqual(mult_by_two(1 << 127), 0x87)
        self.assertEqual(mult_by_two((1 << 127) | 1), 0x87 ^ 2)

    def test_round_trip_multi_block(self) -> None:
        eme = EmeCipher(bytes(range(32)))
        tweak = bytes(range(16))
        for blocks in (1, 2, 3, 17, 128):
            data = bytes((i * 7) & 0xFF for i in range(blocks * 16))
            ciphertext = eme.encrypt(tweak, data)
            self.assertEqual(len(ciphertext), len(data))
            self.assertNotEqual(ciphertext, data)
            self.assertEqual(eme.decrypt(tweak, ciphertext), data)

    def test_wide_block_diffusion(self) -> None:
        eme = EmeCipher(bytes(32))
        tweak = bytes(16)
        a = eme.encrypt(tweak, bytes(64))
        b = eme.encrypt(tweak, bytes(63) + b"\x01")
        # changing the last block changes every block
        for j in range(4):
            self.assertNotEqual(a[j * 16:(j + 1) * 16], b[j * 16:(j + 1) * 16])

    def test_tweak_changes_output(self) -> None:
        eme = EmeCipher(bytes(32))
        self.assertNotEqual(eme.encrypt(bytes(16), bytes(32)), eme.encrypt(b"\x01" + bytes(15), bytes(32)))

    def test_limits(self) -> None:
        eme = EmeCipher(bytes(32))
        with self.assertRaises(ValueError):
            eme.encrypt(bytes(15), bytes(16))
        with self.assertRaises(ValueError):
            eme.encrypt(bytes(16), bytes(15))
        with self.assertRaises(ValueError):
            eme.encrypt(bytes(16), b"")
        with self.assertRaises(NameTooLongError):
            eme.encrypt(bytes(16), bytes(16 * 129))


class ReferenceVectorTests(unittest.TestCase):
    """Zero-key vectors from the crypt remote reference implementation."""

    def test_base32_segment(self) -> None:
        cipher = Cipher(file_name_encoding="base32")
        self.assertEqual(cipher.encrypt_segment("1"), "p0e52nreeaj0a5ea7s64m4j72s")
        self.assertEqual(cipher.decrypt_segment("p0e52nreeaj0a5ea7s64m4j72s"), "1")

    def test_base64_segment(self) -> None:
        cipher = Cipher(file_name_encoding="base64")
        self.assertEqual(cipher.encrypt_segment("1"), "yBxRX25ypgUVyj8MSxJnFw")
        self.assertEqual(cipher.decrypt_segment("yBxRX25ypgUVyj8MSxJnFw"), "1")

    def test_uppercase_base32_accepted(self) -> None:
        cipher = Cipher(file_name_encoding="base32")
        self.assertEqual(cipher.decrypt_segment("P0E52NREEAJ0A5EA7S64M4J72S"), "1")


class EncodingTests(unittest.TestCase):
    def test_encode_is_unpadded_ascii(self) -> None:
        for encoding in FileNameEncoding:
            for size in (16, 32, 48):
                text = encode_name(bytes(range(size)), encoding)
                self.assertNotIn("=", text)
                self.assertTrue(text.isascii())
                self.assertNotIn("/", text)
                self.assertEqual(decode_name(text, encoding), bytes(range(size)))

    def test_base32_is_lowercase(self) -> None:
        text = encode_name(b"\xff" * 16, FileNameEncoding.BASE32)
        self.assertEqual(text, text.lower())

    def test_padding_rejected(self) -> None:
        with self.assertRaises(BadEncodingError):
            decode_name("p0e52nreeaj0a5ea7s64m4j72s======", FileNameEncoding.BASE32)
        with self.assertRaises(BadEncodingError):
            decode_name("yBxRX25ypgUVyj8MSxJnFw==", FileNameEncoding.BASE64)

    def test_bad_alphabet_rejected(self) -> None:
        with self.assertRaises(BadEncodingError):
            decode_name("wxyz", FileNameEncoding.BASE32)
        with self.assertRaises(BadEncodingError):
            decode_name("ab+/", FileNameEncoding.BASE64)
        with self.assertRaises(BadEncodingError):
            decode_name("a", FileNameEncoding.BASE64)

    def test_unknown_encoding(self) -> None:
        with self.assertRaises(UnknownEncodingError):
            FileNameEncoding.parse("base32768")
        with self.assertRaises(UnknownEncodingError):
            Cipher(file_name_encoding="rot13")

    def test_parse_is_case_insensitive(self) -> None:
        self.assertIs(FileNameEncoding.parse("BASE64"), FileNameEncoding.BASE64)
        self.assertIs(FileNameEncoding.parse(FileNameEncoding.BASE32), FileNameEncoding.BASE32)


class FileNameTests(unittest.TestCase):
    keys: CipherKeys

    @classmethod
    def setUpClass(cls) -> None:
        cls.keys = derive_keys("custom-password", "custom-salt")

    def _cipher(self, encoding: str, dir_encrypt: bool = True) -> Cipher:
        return Cipher(keys=self.keys, file_name_encoding=encoding, directory_name_encryption=dir_encrypt)

    def test_example_path_base64(self) -> None:
        cipher = self._cipher("base64")
        encrypted = cipher.encrypt_file_name("custom-dir/custom-filename")
        segments = encrypted.split("/")
        self.assertEqual(len(segments), 2)
        self.assertTrue(encrypted.isascii())
        self.assertNotIn("custom", encrypted)
        self.assertEqual(cipher.encrypt_file_name("custom-dir/custom-filename"), encrypted)
        self.assertEqual(cipher.decrypt_file_name(encrypted), "custom-dir/custom-filename")

    def test_round_trip_all_modes(self) -> None:
        paths = [
            "file.txt",
            "a/b/c/d.bin",
            "dir/",
            "/absolute/path",
            "",
            "spaces in name/ünïcödé ✓ 日本語.txt",
            "x" * 200,
            "a//b",
            "exactly-16-bytes",
        ]
        for encoding in ("base32", "base64"):
            for dir_encrypt in (True, False):
                cipher = self._cipher(encoding, dir_encrypt)
                for path in paths:
                    encrypted = cipher.encrypt_file_name(path)
                    self.assertEqual(encrypted.count("/"), path.count("/"))
                    self.assertEqual(cipher.decrypt_file_name(encrypted), path, (encoding, dir_encrypt, path))

    def test_empty_segments_are_identity(self) -> None:
        cipher = self._cipher("base32")
        self.assertEqual(cipher.encrypt_segment(""), "")
        self.assertEqual(cipher.decrypt_segment(""), "")
        self.assertEqual(cipher.encrypt_file_name("/"), "/")

    def test_directory_names_pass_through_when_disabled(self) -> None:
        cipher = self._cipher("base32", dir_encrypt=False)
        encrypted = cipher.encrypt_file_name("photos/2024/cat.jpg")
        self.assertTrue(encrypted.startswith("photos/2024/"))
        self.assertNotEqual(encrypted, "photos/2024/cat.jpg")
        self.assertEqual(encrypted.split("/")[-1], cipher.encrypt_segment("cat.jpg"))

    def test_directory_names_encrypted_when_enabled(self) -> None:
        cipher = self._cipher("base32")
        encrypted = cipher.encrypt_file_name("photos/cat.jpg")
        self.assertEqual(encrypted, cipher.encrypt_segment("photos") + "/" + cipher.encrypt_segment("cat.jpg"))

    def test_deterministic_per_key(self) -> None:
        cipher = self._cipher("base32")
        self.assertEqual(cipher.encrypt_segment("same"), cipher.encrypt_segment("same"))
        self.assertNotEqual(cipher.encrypt_segment("same"), Cipher(file_name_encoding="base32").encrypt_segment("same"))

    def test_padding_grows_by_block(self) -> None:
        cipher = self._cipher("base64")
        # 15 bytes pads to 16, 16 bytes pads to 32
        self.assertEqual(len(cipher.encrypt_segment("a" * 15)), 22)
        self.assertEqual(len(cipher.encrypt_segment("a" * 16)), 43)

    def test_name_too_long(self) -> None:
        cipher = self._cipher("base32")
        with self.assertRaises(NameTooLongError):
            cipher.encrypt_segment("n" * 2048)
        cipher.encrypt_segment("n" * 2047)

    def test_wrong_password_detected(self) -> None:
        cipher = self._cipher("base32")
        other = Cipher(keys=derive_keys("other-password", "custom-salt"), file_name_encoding="base32")
        names = [cipher.encrypt_segment(f"file-{i}.txt") for i in range(20)]
        failures = 0
        for name in names:
            try:
                other.decrypt_segment(name)
            except NameDecryptionError:
                failures += 1
        # padding check alone rejects roughly 255/256 of wrong keys
        self.assertGreaterEqual(failures, 18)

    def test_not_block_multiple(self) -> None:
        cipher = self._cipher("base64")
        with self.assertRaises(BadDecryptionError):
            cipher.decrypt_segment(encode_name(bytes(15), FileNameEncoding.BASE64))

    def test_bad_padding(self) -> None:
        cipher = self._cipher("base64")
        raw = cipher._keyed.eme.encrypt(self.keys.name_tweak, b"abc" + b"\x00" * 13)
        with self.assertRaises(BadPaddingError):
            cipher.decrypt_segment(encode_name(raw, FileNameEncoding.BASE64))

    def test_invalid_utf8(self) -> None:
        cipher = self._cipher("base64")
        raw = cipher._keyed.eme.encrypt(self.keys.name_tweak, b"\xff\xfe" + b"\x0e" * 14)
        with self.assertRaises(BadDecryptUTF8Error):
            cipher.decrypt_segment(encode_name(raw, FileNameEncoding.BASE64))

    def test_control_characters(self) -> None:
        cipher = self._cipher("base64")
        for bad in (b"a\x01b", b"tab\t", b"del\x7f"):
            padded = bad + bytes([16 - len(bad)]) * (16 - len(bad))
            raw = cipher._keyed.eme.encrypt(self.keys.name_tweak, padded)
            with self.assertRaises(BadDecryptControlCharError):
                cipher.decrypt_segment(encode_name(raw, FileNameEncoding.BASE64))



class PublicErrorsTests(unittest.TestCase):
    def test_name_and_seek_errors_exported(self) -> None:
        from cryptremote.core import crypto

        for name in (
            "BadEncodingError",
            "BadDecryptionError",
            "BadPaddingError",
            "BadDecryptUTF8Error",
            "BadDecryptControlCharError",
            "NameTooLongError",
            "BadSeekError",
            "UnknownEncodingError",
        ):
            self.assertIn(name, crypto.__all__)
            self.assertTrue(issubclass(getattr(crypto, name), crypto.CryptError))

        with self.assertRaises(crypto.NameDecryptionError):
            Cipher(keys=CipherKeys.zero()).decrypt_segment("!!")


if __name__ == "__main__":
    unittest.main()
