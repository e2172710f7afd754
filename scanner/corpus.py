"""Corpus access: listing items, loading them and classifying their shape."""

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional, Protocol, Union

import yaml

from .discovery import get_relative_path, is_path_excluded, iter_files
from .parser import parse_content
from .resolver import meta_path_for, path_content_id, read_meta_guid
from .settings import ScanSettings


# Keys that mark an item as owning a tree of sub-components
HIERARCHY_KEYS = ("components", "children")


class ReadError(Exception):
    """An item's content could not be read or parsed."""

    def __init__(self, path: Path, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Cannot read '{path}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ItemShape(enum.Enum):
    DEFAULT = "default"
    HIERARCHICAL = "hierarchical"
    TEXT_DOCUMENT = "text_document"


@dataclass
class Item:
    """
    A loaded corpus item.

    Text documents are never deserialized, so their data is None.
    """

    path: Path
    content_id: str
    shape: ItemShape
    data: Any = None


class Corpus(Protocol):
    """Source of the items a cache build scans."""

    def list_all_item_paths(self) -> Iterator[Path]:
        """Yields every item path, in a stable order."""
        ...

    def is_excluded(self, path: Path) -> bool:
        """Returns True for items that must not be scanned."""
        ...

    def load_item(self, path: Path) -> Item:
        """Loads one item. Raises ReadError if it cannot be read."""
        ...

    def item_shape(self, item: Item) -> ItemShape:
        """Returns the scanning strategy for an item."""
        ...

    def content_id_of(self, item_or_path: Union[Item, Path]) -> str:
        """Returns the stable content ID of an item."""
        ...

    def raw_text_of(self, path: Path) -> str:
        """Returns the raw text of an item. Raises ReadError if unavailable."""
        ...


class FileCorpus:
    """
    A corpus of asset files under a root directory.

    Each item's content ID comes from the ``guid:`` line of its ``.meta``
    sidecar, falling back to a hash of its root-relative path.

    Args:
        root: Root directory of the asset tree.
        settings: Scan settings (extensions, excluded directories, filters).
    """

    def __init__(self, root: Path, settings: Optional[ScanSettings] = None):
        self.root = root.resolve()
        self.settings = settings or ScanSettings()

    def list_all_item_paths(self) -> Iterator[Path]:
        return iter_files(
            root=self.root,
            include_ext=self.settings.include_extensions,
            exclude_dirs=self.settings.exclude_dirs,
        )

    def relative_path(self, path: Path) -> str:
        """Get the root-relative POSIX path of an item."""
        return get_relative_path(path, self.root).as_posix()

    def is_excluded(self, path: Path) -> bool:
        return is_path_excluded(self.relative_path(path), self.settings.exclude_filters)

    def content_id_of(self, item_or_path: Union[Item, Path]) -> str:
        if isinstance(item_or_path, Item):
            return item_or_path.content_id

        guid = read_meta_guid(meta_path_for(item_or_path))
        if guid is not None:
            return guid
        return path_content_id(self.relative_path(item_or_path))

    def load_item(self, path: Path) -> Item:
        content_id = self.content_id_of(path)

        if path.suffix.lower() in self.settings.text_document_extensions:
            return Item(path=path, content_id=content_id, shape=ItemShape.TEXT_DOCUMENT)

        content = self.raw_text_of(path)
        try:
            data = parse_content(content, path.suffix.lower())
        except (ValueError, yaml.YAMLError) as e:
            raise ReadError(path, str(e)) from e
        except RecursionError as e:
            raise ReadError(path, "content is nested too deeply") from e

        return Item(path=path, content_id=content_id, shape=classify(data), data=data)

    def item_shape(self, item: Item) -> ItemShape:
        return item.shape

    def raw_text_of(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(path, str(e)) from e


def classify(data: Any) -> ItemShape:
    """Pick the scanning shape for parsed item data."""
    if isinstance(data, dict) and any(key in data for key in HIERARCHY_KEYS):
        return ItemShape.HIERARCHICAL
    return ItemShape.DEFAULT
