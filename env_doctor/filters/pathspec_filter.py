"""Pathspec-based file discovery.

This module walks a project tree with the pathspec library doing the
matching: excluded directory names are turned into gitwildmatch
directory patterns, and file selection uses gitwildmatch globs such as
``*.env`` or ``*.php``.
"""

import os
from pathlib import Path

import pathspec


# Directories skipped when walking a project
DEFAULT_EXCLUDE_DIRECTORIES: list[str] = [
    "vendor",
    "node_modules",
    ".git",
    "storage",
    "bootstrap/cache",
]

# Environment files picked up by ``compare --all``
DEFAULT_ENV_FILE_PATTERNS: list[str] = [
    "*.env",
    "*.env.*",
]

# Source files scanned by ``audit``
DEFAULT_SOURCE_PATTERNS: list[str] = [
    "*.php",
]


def _directory_pattern(name: str) -> str:
    """Turn a directory name into a gitwildmatch directory pattern.

    ``vendor`` matches a ``vendor/`` directory at any depth, while a
    multi-segment name such as ``bootstrap/cache`` is anchored at the root.
    """
    name = name.strip().strip("/")
    if "/" in name:
        return f"/{name}/"
    return f"{name}/"


class PathspecFilter:
    """File filter combining an exclusion spec and an inclusion spec."""

    def __init__(
        self,
        root: Path,
        include_patterns: list[str],
        exclude_directories: list[str] | None = None,
    ):
        """
        Initialize the filter.

        Args:
            root: Project root path
            include_patterns: Globs a file must match to be selected
            exclude_directories: Directory names to skip entirely
        """
        self.root = root.resolve()
        if exclude_directories is None:
            exclude_directories = DEFAULT_EXCLUDE_DIRECTORIES
        self._exclude_spec = pathspec.PathSpec.from_lines(
            "gitwildmatch",
            [_directory_pattern(name) for name in exclude_directories if name.strip()],
        )
        self._include_spec = pathspec.PathSpec.from_lines("gitwildmatch", include_patterns)

    def _relative(self, path: Path) -> str:
        if path.is_absolute():
            path = path.relative_to(self.root)
        return path.as_posix()

    def is_excluded_dir(self, path: Path) -> bool:
        """Check if a directory should be pruned from the walk."""
        return self._exclude_spec.match_file(self._relative(path) + "/")

    def should_include(self, path: Path) -> bool:
        """Check if a file is selected (included and not excluded)."""
        relative = self._relative(path)
        if self._exclude_spec.match_file(relative):
            return False
        return self._include_spec.match_file(relative)

    def walk(self) -> list[Path]:
        """Walk the root and return matching files sorted by relative path."""
        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                name for name in dirnames if not self.is_excluded_dir(current / name)
            )
            for filename in filenames:
                path = current / filename
                if self.should_include(path):
                    found.append(path)
        return sorted(found, key=lambda p: self._relative(p))


def find_files(
    root: Path,
    include_patterns: list[str],
    exclude_directories: list[str] | None = None,
) -> list[Path]:
    """Find files under ``root`` matching ``include_patterns``."""
    return PathspecFilter(root, include_patterns, exclude_directories).walk()
