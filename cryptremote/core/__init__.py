"""
Core module - Contains configuration, logging, the crypt engine and the
file tools built on it.
"""

from cryptremote.core.config import CryptConfig
from cryptremote.core.logging import SecureLogFilter, get_secure_logger

__all__ = ["CryptConfig", "get_secure_logger", "SecureLogFilter"]
