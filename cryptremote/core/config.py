"""
Crypt Configuration Module
==========================

Immutable, environment-aware configuration for the crypt engine and the
tools built around it.

Security Features:
- Immutable configuration after initialization
- Environment variable override support (CRYPTREMOTE_ prefix)
- Passwords and salts are never read from the environment
- Type-safe configuration access
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import Any, Final, Optional

from cryptremote.core.crypto.cipher import Cipher, FileNameEncoding
from cryptremote.core.crypto.kdf import derive_keys


# Security Constants
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "passwd", "secret", "key", "token",
    "salt", "credential", "auth",
})

_VALID_LOG_LEVELS: Final[frozenset[str]] = frozenset({
    "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL",
})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


@dataclass(frozen=True, slots=True)
class CipherSettings:
    """Immutable filename cipher settings."""

    file_name_encoding: FileNameEncoding = FileNameEncoding.BASE32
    directory_name_encryption: bool = True

    def __post_init__(self) -> None:
        """Normalize and validate the encoding selector."""
        object.__setattr__(
            self, "file_name_encoding", FileNameEncoding.parse(self.file_name_encoding)
        )


@dataclass(frozen=True, slots=True)
class WorkerSettings:
    """Immutable worker pool settings."""

    max_workers: int = min(32, (os.cpu_count() or 1) + 4)

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "INFO"
    enable_console: bool = True
    enable_json: bool = False
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%H:%M:%S"

    def __post_init__(self) -> None:
        """Validate logging settings."""
        if self.level.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.level}")


class CryptConfig:
    """
    Centralized, immutable configuration with environment override support.

    Usage:
        config = CryptConfig.load()
        cipher = config.build_cipher(password)
        workers = config.workers.max_workers

    Environment variables (prefix CRYPTREMOTE_, "__" for nesting):
        CRYPTREMOTE_CIPHER__FILE_NAME_ENCODING=base64
        CRYPTREMOTE_CIPHER__DIRECTORY_NAME_ENCRYPTION=false
        CRYPTREMOTE_WORKERS__MAX_WORKERS=8
        CRYPTREMOTE_LOGGING__LEVEL=DEBUG
    """

    __slots__ = ("_cipher", "_workers", "_logging", "_frozen", "_config_hash")

    _instance: Optional[CryptConfig] = None

    def __init__(
        self,
        cipher: Optional[CipherSettings] = None,
        workers: Optional[WorkerSettings] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize configuration. Use CryptConfig.load() for standard initialization."""
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_cipher", cipher or CipherSettings())
        object.__setattr__(self, "_workers", workers or WorkerSettings())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        """Compute a short fingerprint of the configuration."""
        config_str = f"{self._cipher}|{self._workers}|{self._logging}"
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def cipher(self) -> CipherSettings:
        return self._cipher

    @property
    def workers(self) -> WorkerSettings:
        return self._workers

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def config_hash(self) -> str:
        return self._config_hash

    def build_cipher(
        self,
        password: str,
        salt: str = "",
        settings: Optional[CipherSettings] = None,
    ) -> Cipher:
        """
        Derive keys and build a Cipher with the configured name settings.

        The password and salt are passed in by the caller, never stored.

        Args:
            password: User password
            salt: Optional salt (empty selects the built-in default)
            settings: Overrides the configured cipher settings
        """
        if settings is None:
            settings = self._cipher
        return Cipher(
            keys=derive_keys(password, salt),
            file_name_encoding=settings.file_name_encoding,
            directory_name_encryption=settings.directory_name_encryption,
        )

    @classmethod
    def load(cls, env_prefix: str = "CRYPTREMOTE") -> CryptConfig:
        """
        Load configuration with environment variable overrides.

        Args:
            env_prefix: Prefix for environment variables

        Returns:
            Configured CryptConfig instance

        Raises:
            ValueError: If an override has an invalid value
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        cipher_kwargs: dict[str, Any] = {}
        if "cipher.file_name_encoding" in env_overrides:
            cipher_kwargs["file_name_encoding"] = env_overrides["cipher.file_name_encoding"]
        if "cipher.directory_name_encryption" in env_overrides:
            cipher_kwargs["directory_name_encryption"] = _parse_bool(
                env_overrides["cipher.directory_name_encryption"]
            )

        workers_kwargs: dict[str, Any] = {}
        if "workers.max_workers" in env_overrides:
            workers_kwargs["max_workers"] = int(env_overrides["workers.max_workers"])

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"]
        if "logging.enable_console" in env_overrides:
            logging_kwargs["enable_console"] = _parse_bool(env_overrides["logging.enable_console"])
        if "logging.enable_json" in env_overrides:
            logging_kwargs["enable_json"] = _parse_bool(env_overrides["logging.enable_json"])

        return cls(
            cipher=CipherSettings(**cipher_kwargs) if cipher_kwargs else None,
            workers=WorkerSettings(**workers_kwargs) if workers_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # CRYPTREMOTE_SECTION__KEY -> section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                # SECURITY: secrets never come from the environment
                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    @classmethod
    def get_instance(cls) -> CryptConfig:
        """Get or create the process-wide configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance. Use only for testing."""
        cls._instance = None

    def __repr__(self) -> str:
        return f"CryptConfig(hash={self._config_hash}, encoding={self._cipher.file_name_encoding.value})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if hasattr(self, "_frozen") and self._frozen:
            raise AttributeError("CryptConfig is immutable after initialization")
        super().__setattr__(name, value)
