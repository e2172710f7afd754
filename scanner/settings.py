"""Scan settings and their TOML loader."""

import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from .discovery import DEFAULT_EXCLUDE_DIRS


logger = logging.getLogger(__name__)

DEFAULT_TEXT_DOCUMENT_EXTENSIONS = {".unity", ".scene"}

# Built-in resources live in this GUID range and are never part of the corpus
DEFAULT_RESERVED_PREFIXES = ("0000000000000000",)

DEFAULT_PROPERTIES_PER_STEP = 100

SETTINGS_TABLE = "depcache"


@dataclass
class ScanSettings:
    """
    Options that drive a cache build.

    Attributes:
        exclude_filters: Globs or substrings of root-relative paths to skip.
        exclude_dirs: Directory names never descended into.
        text_document_extensions: Extensions scanned as raw text.
        include_extensions: Extensions to list, or None for every file.
        properties_per_step: Properties visited between two checkpoints.
        reserved_prefixes: Content ID prefixes of the reserved namespace.
        ignored_properties: Property names never treated as dependencies.
    """

    exclude_filters: List[str] = field(default_factory=list)
    exclude_dirs: Set[str] = field(default_factory=lambda: set(DEFAULT_EXCLUDE_DIRS))
    text_document_extensions: Set[str] = field(
        default_factory=lambda: set(DEFAULT_TEXT_DOCUMENT_EXTENSIONS)
    )
    include_extensions: Optional[Set[str]] = None
    properties_per_step: int = DEFAULT_PROPERTIES_PER_STEP
    reserved_prefixes: Tuple[str, ...] = DEFAULT_RESERVED_PREFIXES
    ignored_properties: Set[str] = field(default_factory=set)

    def __post_init__(self):
        if self.properties_per_step < 1:
            raise ValueError(
                f"properties_per_step must be positive, got {self.properties_per_step}"
            )


def load_settings(path: Path) -> ScanSettings:
    """
    Load scan settings from a TOML file.

    Values are read from a [depcache] table when present, otherwise from the
    top level. exclude_filters may be a list or a comma-separated string.

    Args:
        path: TOML file to read.

    Returns:
        ScanSettings with file values applied over the defaults.

    Raises:
        OSError: If the file cannot be opened.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        data = tomllib.load(f)

    table = data.get(SETTINGS_TABLE, data)
    return settings_from_dict(table)


def settings_from_dict(values: Dict[str, Any]) -> ScanSettings:
    """Build ScanSettings from a plain mapping, ignoring unknown keys."""
    known = {f.name for f in fields(ScanSettings)}
    kwargs: Dict[str, Any] = {}

    for key, value in values.items():
        if key not in known:
            logger.warning("Ignoring unknown setting %r", key)
            continue
        kwargs[key] = _coerce(key, value)

    return ScanSettings(**kwargs)


def _coerce(key: str, value: Any) -> Any:
    if key == "exclude_filters":
        return _split_list(value)
    if key in {"exclude_dirs", "ignored_properties"}:
        return set(_split_list(value))
    if key in {"text_document_extensions", "include_extensions"}:
        return {_normalize_extension(ext) for ext in _split_list(value)}
    if key == "reserved_prefixes":
        return tuple(_split_list(value))
    if key == "properties_per_step":
        return int(value)
    return value


def _split_list(value: Any) -> List[str]:
    """Accept either a list or a comma-separated string."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return list(value)


def _normalize_extension(ext: str) -> str:
    ext = ext.lower()
    if not ext.startswith("."):
        ext = "." + ext
    return ext
