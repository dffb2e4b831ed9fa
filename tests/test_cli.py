import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from cryptremote.cli import EXIT_CRYPT_FAILURE, EXIT_OK, EXIT_USAGE, build_parser, main
from cryptremote.core.crypto.cipher import Cipher


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self.password_file = self.root / "password.txt"
        self.password_file.write_text("cli-password\n", encoding="utf-8")
        self.env = mock.patch.dict(
            os.environ, {"CRYPTREMOTE_LOGGING__ENABLE_CONSOLE": "false"}, clear=True
        )
        self.env.start()

    def tearDown(self) -> None:
        self.env.stop()
        self.tmpdir.cleanup()

    def _run(self, *args: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(["--password-file", str(self.password_file), *args])
        return code, out.getvalue(), err.getvalue()

    def test_name_round_trip(self) -> None:
        code, out, _ = self._run("--encoding", "base64", "encrypt-name", "dir/file.txt", "other")
        self.assertEqual(code, EXIT_OK)
        encrypted = out.splitlines()
        self.assertEqual(len(encrypted), 2)
        self.assertEqual(encrypted[0].count("/"), 1)

        code, out, _ = self._run("--encoding", "base64", "decrypt-name", *encrypted)
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(out.splitlines(), ["dir/file.txt", "other"])

    def test_names_match_library(self) -> None:
        code, out, _ = self._run("--salt", "s", "--no-directory-name-encryption", "encrypt-name", "a/b")
        self.assertEqual(code, EXIT_OK)
        cipher = Cipher.from_password("cli-password", "s", directory_name_encryption=False)
        self.assertEqual(out.strip(), cipher.encrypt_file_name("a/b"))

    def test_undecodable_name(self) -> None:
        code, _, err = self._run("decrypt-name", "zzz-not-encrypted")
        self.assertEqual(code, EXIT_CRYPT_FAILURE)
        self.assertIn("Error", err)

    def test_file_round_trip(self) -> None:
        source = self.root / "note.txt"
        source.write_bytes(b"remember the milk")
        code, out, _ = self._run("encrypt", str(source), str(self.root / "enc"))
        self.assertEqual(code, EXIT_OK)
        encrypted = Path(out.strip())
        self.assertTrue(encrypted.is_file())

        code, out, _ = self._run("decrypt", str(encrypted), str(self.root / "dec"))
        self.assertEqual(code, EXIT_OK)
        self.assertEqual((self.root / "dec" / "note.txt").read_bytes(), b"remember the milk")

    def test_tree_round_trip(self) -> None:
        (self.root / "plain" / "sub").mkdir(parents=True)
        (self.root / "plain" / "a.txt").write_bytes(b"a")
        (self.root / "plain" / "sub" / "b.txt").write_bytes(b"b")
        code, out, _ = self._run("--workers", "2", "encrypt", str(self.root / "plain"), str(self.root / "enc"))
        self.assertEqual(code, EXIT_OK)
        self.assertIn("2 processed, 0 failed", out)

        code, _, _ = self._run("decrypt", str(self.root / "enc"), str(self.root / "dec"))
        self.assertEqual(code, EXIT_OK)
        self.assertEqual((self.root / "dec" / "sub" / "b.txt").read_bytes(), b"b")

    def test_tree_failures_exit_code(self) -> None:
        (self.root / "enc").mkdir()
        (self.root / "enc" / "garbage").write_bytes(b"garbage")
        code, _, err = self._run("decrypt", str(self.root / "enc"), str(self.root / "dec"))
        self.assertEqual(code, EXIT_CRYPT_FAILURE)
        self.assertIn("FAILED", err)

    def test_missing_source(self) -> None:
        code, _, _ = self._run("encrypt", str(self.root / "missing"), str(self.root / "enc"))
        self.assertEqual(code, EXIT_USAGE)

    def test_bad_encoding_choice(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                build_parser().parse_args(["--encoding", "base32768", "encrypt-name", "x"])
        self.assertEqual(ctx.exception.code, 2)

    def test_invalid_environment_config(self) -> None:
        with mock.patch.dict(os.environ, {"CRYPTREMOTE_CIPHER__FILE_NAME_ENCODING": "base32768"}):
            code, _, err = self._run("encrypt-name", "x")
        self.assertEqual(code, EXIT_USAGE)
        self.assertIn("invalid configuration", err)

    def test_prompts_without_password_file(self) -> None:
        with mock.patch("cryptremote.cli.getpass", return_value="cli-password") as prompt:
            with redirect_stdout(io.StringIO()) as out:
                code = main(["encrypt-name", "x"])
        self.assertEqual(code, EXIT_OK)
        prompt.assert_called_once()
        self.assertEqual(out.getvalue().strip(), Cipher.from_password("cli-password").encrypt_file_name("x"))


if __name__ == "__main__":
    unittest.main()
