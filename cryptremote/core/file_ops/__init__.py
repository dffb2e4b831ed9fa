"""
cryptremote File Operations Module
==================================

Reads files, runs them through the crypt engine, writes the results.

Security Features:
- Fresh random nonce per file
- Atomic writes (temp file + rename)
- Decrypted names cannot escape the output directory
- Nothing is written for a file that fails to decrypt

Components:
- encrypt.py: single file and tree encryption
- decrypt.py: single file and tree decryption
- tree.py: shared tree driver on top of the worker pool
"""

from cryptremote.core.file_ops.decrypt import decrypt_file, decrypt_tree
from cryptremote.core.file_ops.encrypt import encrypt_file, encrypt_tree
from cryptremote.core.file_ops.tree import TreeReport

__all__ = [
    "encrypt_file",
    "encrypt_tree",
    "decrypt_file",
    "decrypt_tree",
    "TreeReport",
]
