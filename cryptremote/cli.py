"""
Command Line Interface
======================

    cryptremote encrypt SOURCE DEST        file or directory
    cryptremote decrypt SOURCE DEST        file or directory
    cryptremote encrypt-name NAME...
    cryptremote decrypt-name NAME...

The password is read from --password-file or prompted for. It is never
taken from the command line or the environment.

Exit codes:
    0  success
    1  encryption/decryption failure (wrong password, corrupt data)
    2  usage or I/O error
"""

from __future__ import annotations

import argparse
import logging
import sys
from getpass import getpass
from pathlib import Path
from typing import Optional, Sequence

from cryptremote import __version__
from cryptremote.core.config import CipherSettings, CryptConfig
from cryptremote.core.crypto.cipher import FileNameEncoding
from cryptremote.core.crypto.errors import ConfigurationError, CryptError
from cryptremote.core.file_ops import decrypt_file, decrypt_tree, encrypt_file, encrypt_tree
from cryptremote.core.file_ops.tree import TreeReport
from cryptremote.core.logging import configure_logging

EXIT_OK = 0
EXIT_CRYPT_FAILURE = 1
EXIT_USAGE = 2

_log = logging.getLogger("cryptremote.cli")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cryptremote",
        description="Encrypt/decrypt files and names in the crypt remote format.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--salt", default="", help="Optional salt (password2). Default: the format's built-in salt.")
    p.add_argument(
        "--encoding",
        choices=[e.value for e in FileNameEncoding],
        default=None,
        help="Filename encoding (default from config: base32).",
    )
    p.add_argument(
        "--no-directory-name-encryption",
        action="store_true",
        help="Only encrypt the last path segment; directory names pass through.",
    )
    p.add_argument("--password-file", default=None, help="Read the password from the first line of this file.")
    p.add_argument("--workers", type=int, default=None, help="Worker threads for directory runs.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")

    sub = p.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("encrypt", "Encrypt a file or a directory tree."),
        ("decrypt", "Decrypt a file or a directory tree."),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("source", help="Input file or directory.")
        sp.add_argument("dest", help="Output directory.")

    for name, help_text in (
        ("encrypt-name", "Encrypt one or more '/' separated names."),
        ("decrypt-name", "Decrypt one or more '/' separated names."),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("names", nargs="+")

    return p


def read_password(password_file: Optional[str]) -> str:
    """Read the password from a file (first line) or prompt for it."""
    if password_file is not None:
        with open(password_file, "r", encoding="utf-8") as f:
            return f.readline().rstrip("\r\n")
    return getpass("Password: ")


def _settings(args: argparse.Namespace, config: CryptConfig) -> CipherSettings:
    return CipherSettings(
        file_name_encoding=args.encoding or config.cipher.file_name_encoding,
        directory_name_encryption=(
            False if args.no_directory_name_encryption else config.cipher.directory_name_encryption
        ),
    )


def _report(report: TreeReport) -> int:
    for source, reason in report.failed:
        print(f"FAILED {source}: {reason}", file=sys.stderr)
    print(f"{len(report.processed)} processed, {len(report.failed)} failed")
    return EXIT_OK if report.ok else EXIT_CRYPT_FAILURE


def run(args: argparse.Namespace, config: CryptConfig) -> int:
    settings = _settings(args, config)
    password = read_password(args.password_file)
    if password == "":
        _log.warning("Empty password: names and data are only obfuscated, not encrypted")

    cipher = config.build_cipher(password, args.salt, settings=settings)

    if args.command in ("encrypt-name", "decrypt-name"):
        transform = cipher.encrypt_file_name if args.command == "encrypt-name" else cipher.decrypt_file_name
        for name in args.names:
            print(transform(name))
        return EXIT_OK

    source = Path(args.source)
    workers = args.workers or config.workers.max_workers
    if args.command == "encrypt":
        if source.is_dir():
            return _report(encrypt_tree(cipher, source, args.dest, max_workers=workers))
        print(encrypt_file(cipher, source, args.dest))
        return EXIT_OK

    if source.is_dir():
        return _report(decrypt_tree(cipher, source, args.dest, max_workers=workers))
    print(decrypt_file(cipher, source, args.dest))
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = CryptConfig.load()
    except (ValueError, ConfigurationError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(
        level="DEBUG" if args.verbose else config.logging.level,
        enable_console=config.logging.enable_console,
        enable_json=config.logging.enable_json,
        fmt=config.logging.format,
        datefmt=config.logging.date_format,
    )

    try:
        return run(args, config)
    except CryptError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CRYPT_FAILURE
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
