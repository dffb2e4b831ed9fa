"""
Utils module - Utility functions and helpers.
"""

from cryptremote.utils.paths import iter_files, write_atomic
from cryptremote.utils.validators import (
    ValidationError,
    validate_path_safe,
    validate_relative_name,
)

__all__ = [
    "iter_files",
    "write_atomic",
    "ValidationError",
    "validate_path_safe",
    "validate_relative_name",
]
