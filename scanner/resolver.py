"""Identity resolution: mapping items and references to content IDs."""

import hashlib
import re
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Tuple

from .discovery import META_SUFFIX
from .parser import Property
from .settings import ScanSettings


CONTENT_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

# "guid: <id>" as written in a .meta sidecar
META_GUID_PATTERN = re.compile(r"^guid:\s*([0-9a-f]{32})\s*$", re.MULTILINE)

# Inline reference inside a text document, e.g. "{fileID: 11400000, guid: <id>, type: 2}"
TEXT_REFERENCE_PATTERN = re.compile(r"guid: (?P<guid>[0-9a-f]{32})[,}]")

GUID_KEY = "guid"
LOCAL_ID_KEY = "fileID"

ResolvedReference = Tuple[str, Optional[int]]


def is_content_id(value: Any) -> bool:
    """Check if a value has the shape of a content ID."""
    return isinstance(value, str) and CONTENT_ID_PATTERN.match(value) is not None


def meta_path_for(item_path: Path) -> Path:
    """Return the sidecar path describing an item."""
    return item_path.with_name(item_path.name + META_SUFFIX)


def read_meta_guid(meta_path: Path) -> Optional[str]:
    """
    Read the content ID recorded in a sidecar file.

    Args:
        meta_path: Path to the ``.meta`` file.

    Returns:
        The content ID, or None if the file is missing or holds none.
    """
    try:
        content = meta_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    match = META_GUID_PATTERN.search(content)
    if match is None:
        return None
    return match.group(1)


def path_content_id(relative_path: str) -> str:
    """Derive a content ID from a root-relative path."""
    return hashlib.md5(relative_path.encode("utf-8")).hexdigest()


def find_content_ids(text: str) -> Iterator[str]:
    """
    Find every content ID embedded in raw document text.

    Only well-formed tokens count: "guid: " followed by exactly 32 lowercase
    hex characters and then a comma or closing brace.

    Yields:
        Content IDs in order of appearance, duplicates included.
    """
    for match in TEXT_REFERENCE_PATTERN.finditer(text):
        yield match.group("guid")


class IdentityResolver:
    """
    Resolves reference properties to content IDs.

    Args:
        reserved_prefixes: Content ID prefixes of built-in resources that
                           are not part of the scanned corpus.
    """

    def __init__(self, reserved_prefixes: Iterable[str] = ()):
        self.reserved_prefixes = tuple(reserved_prefixes)

    def resolve_reference(self, prop: Property) -> Optional[ResolvedReference]:
        """
        Resolve a reference property to its target.

        A reference is a mapping with a ``guid`` content ID and an optional
        integer ``fileID`` naming a sub-object of the target.

        Returns:
            (content_id, local_sub_id), or None if the property does not
            resolve to a content ID.
        """
        value = prop.value
        if not isinstance(value, dict):
            return None

        content_id = value.get(GUID_KEY)
        if not is_content_id(content_id):
            return None

        local_id = value.get(LOCAL_ID_KEY)
        if isinstance(local_id, bool) or not isinstance(local_id, int):
            local_id = None

        return content_id, local_id

    def is_reserved_namespace(self, content_id: str) -> bool:
        """Check if a content ID belongs to the built-in resources."""
        return any(content_id.startswith(prefix) for prefix in self.reserved_prefixes)


def is_dependency_property(settings: ScanSettings, prop: Property) -> bool:
    """
    Decide whether a property is a link to another item.

    Args:
        settings: ScanSettings; its ignored_properties names are never links.
        prop: The property being visited.

    Returns:
        True for mappings carrying a ``guid`` key.
    """
    if not isinstance(prop.value, dict) or GUID_KEY not in prop.value:
        return False
    return prop.name not in settings.ignored_properties
