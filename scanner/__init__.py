"""Scanner module for item discovery, loading and identity resolution."""

from .discovery import iter_files, is_path_excluded
from .parser import Property, parse_content, iter_properties
from .resolver import IdentityResolver, find_content_ids, is_dependency_property
from .settings import ScanSettings, load_settings
from .corpus import Corpus, FileCorpus, Item, ItemShape, ReadError

__all__ = [
    "iter_files",
    "is_path_excluded",
    "Property",
    "parse_content",
    "iter_properties",
    "IdentityResolver",
    "find_content_ids",
    "is_dependency_property",
    "ScanSettings",
    "load_settings",
    "Corpus",
    "FileCorpus",
    "Item",
    "ItemShape",
    "ReadError",
]
