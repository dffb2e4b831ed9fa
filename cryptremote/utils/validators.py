"""
Validation Utilities
====================

Input validation functions with security focus.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath


class ValidationError(ValueError):
    """Raised when validation fails."""
    pass


def validate_relative_name(name: str) -> str:
    """
    Validate a '/' separated relative name before it becomes a path.

    Decrypted names come from untrusted ciphertext, so they must not be
    able to climb out of the output directory.

    Raises:
        ValidationError: If the name is absolute or has '.'/'..' parts
    """
    if not name:
        raise ValidationError("name cannot be empty")
    if "\x00" in name:
        raise ValidationError("name contains invalid characters")

    pure = PurePosixPath(name)
    if pure.is_absolute():
        raise ValidationError(f"name must be relative: {name!r}")
    if any(part in {".", ".."} for part in name.split("/")):
        raise ValidationError("Path traversal detected")
    return name


def validate_path_safe(
    path: str | Path,
    base_directory: Path,
) -> Path:
    """
    Validate that a path resolves inside a base directory.

    Args:
        path: The path to validate
        base_directory: Directory the path must stay within

    Returns:
        Validated, resolved Path object

    Raises:
        ValidationError: If validation fails
    """
    try:
        validated_path = Path(path).resolve()
        resolved_base = Path(base_directory).resolve()
    except (ValueError, RuntimeError) as e:
        raise ValidationError(f"Invalid path: {e}") from e

    if not validated_path.is_relative_to(resolved_base):
        raise ValidationError(f"Path must be within {resolved_base}")

    return validated_path
