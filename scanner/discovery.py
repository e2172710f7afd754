"""Item discovery utilities for scanning an asset tree."""

import fnmatch
from pathlib import Path
from typing import Iterable, Iterator, Optional, Set


META_SUFFIX = ".meta"

DEFAULT_EXCLUDE_DIRS = {
    ".git", ".hg", ".svn",
    "node_modules", "__pycache__", ".tox", ".nox",
    "venv", ".venv",
    ".idea", ".vscode",
    "Library", "Temp", "Logs", "obj",
    "*.egg-info",
}


def iter_files(
    root: Path,
    include_ext: Optional[Set[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
) -> Iterator[Path]:
    """
    Iterate over item files in a directory tree.

    Sidecar ``.meta`` files are never yielded; they describe items rather
    than being items themselves.

    Args:
        root: Root directory to scan.
        include_ext: Set of file extensions to include (e.g., {'.prefab'}).
                    If None, every file is included.
        exclude_dirs: Set of directory names to skip.
                     If None, uses DEFAULT_EXCLUDE_DIRS.

    Yields:
        Path objects for matching files, in sorted order.
    """
    if exclude_dirs is None:
        exclude_dirs = DEFAULT_EXCLUDE_DIRS

    root = root.resolve()

    def _walk(current: Path) -> Iterator[Path]:
        try:
            entries = sorted(current.iterdir())
        except PermissionError:
            return

        for entry in entries:
            if entry.is_dir():
                if _is_excluded_dir(entry.name, exclude_dirs):
                    continue
                yield from _walk(entry)
            elif entry.is_file():
                suffix = entry.suffix.lower()
                if suffix == META_SUFFIX:
                    continue
                if include_ext is None or suffix in include_ext:
                    yield entry

    yield from _walk(root)


def _is_excluded_dir(name: str, exclude_dirs: Set[str]) -> bool:
    if name in exclude_dirs:
        return True
    # Glob patterns such as "*.egg-info"
    return any(
        name.endswith(pat.lstrip("*")) for pat in exclude_dirs if pat.startswith("*")
    )


def is_path_excluded(relative_path: str, exclude_filters: Iterable[str]) -> bool:
    """
    Check whether an item path matches any exclusion filter.

    A filter matches when it globs the root-relative POSIX path or, for
    filters without wildcards, when it occurs anywhere in that path.

    Args:
        relative_path: Item path relative to the corpus root.
        exclude_filters: Configured filter strings.

    Returns:
        True if the item should be left out of the build.
    """
    for pattern in exclude_filters:
        pattern = pattern.strip()
        if not pattern:
            continue
        if any(ch in pattern for ch in "*?["):
            if fnmatch.fnmatch(relative_path, pattern):
                return True
        elif pattern in relative_path:
            return True
    return False


def get_relative_path(file_path: Path, root: Path) -> Path:
    """Get the path relative to root, handling edge cases."""
    try:
        return file_path.resolve().relative_to(root.resolve())
    except ValueError:
        return file_path
