"""File discovery for env-doctor.

This module provides pathspec-based directory walking with
directory exclusion and glob inclusion.
"""

from env_doctor.filters.pathspec_filter import (
    PathspecFilter,
    find_files,
    DEFAULT_EXCLUDE_DIRECTORIES,
    DEFAULT_ENV_FILE_PATTERNS,
    DEFAULT_SOURCE_PATTERNS,
)

__all__ = [
    "PathspecFilter",
    "find_files",
    "DEFAULT_EXCLUDE_DIRECTORIES",
    "DEFAULT_ENV_FILE_PATTERNS",
    "DEFAULT_SOURCE_PATTERNS",
]
