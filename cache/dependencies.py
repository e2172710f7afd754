"""Per-shape dependency discovery for a single corpus item."""

import logging
from typing import Any, Callable, Iterator, List

from scanner.corpus import Corpus, Item, ItemShape
from scanner.parser import Property, iter_properties
from scanner.resolver import IdentityResolver, find_content_ids, is_dependency_property
from scanner.settings import ScanSettings

from .model import DependencyNode, GraphStore


logger = logging.getLogger(__name__)

DependencyPredicate = Callable[[ScanSettings, Property], bool]


class DependencyScanner:
    """
    Discovers what one item points to and records the edges in a store.

    Every scan method is a generator yielding once per structural property
    visited, which lets the caller pause between properties.

    Args:
        store: GraphStore receiving nodes and edges.
        corpus: Corpus the items come from.
        resolver: Resolves reference properties to content IDs.
        settings: Scan settings handed to the predicate.
        is_dependency: Predicate deciding if a property is a link.
    """

    def __init__(
        self,
        store: GraphStore,
        corpus: Corpus,
        resolver: IdentityResolver,
        settings: ScanSettings,
        is_dependency: DependencyPredicate = is_dependency_property,
    ):
        self.store = store
        self.corpus = corpus
        self.resolver = resolver
        self.settings = settings
        self.is_dependency = is_dependency

    def scan(self, item: Item, subject: DependencyNode) -> Iterator[Any]:
        """
        Dispatch an item to the strategy matching its shape.

        Text documents are read before this returns, so an unreadable
        document raises ReadError here rather than mid-iteration.
        """
        shape = self.corpus.item_shape(item)
        logger.debug("Scanning %s as %s", item.path, shape.value)

        if shape is ItemShape.HIERARCHICAL:
            return self.scan_hierarchy(subject, item.data)
        if shape is ItemShape.TEXT_DOCUMENT:
            return self.scan_text_document(subject, self.corpus.raw_text_of(item.path))
        return self.scan_object(subject, item.data)

    def scan_object(self, subject: DependencyNode, data: Any) -> Iterator[Property]:
        """Walk every property of data and connect subject to each link target."""
        for prop in iter_properties(data):
            if self.is_dependency(self.settings, prop):
                self._record_reference(subject, prop)
            yield prop

    def scan_hierarchy(self, subject: DependencyNode, data: Any) -> Iterator[Property]:
        """Scan the item's own components, then those of all its descendants."""
        for component in collect_components(data):
            yield from self.scan_object(subject, component)

    def scan_text_document(self, subject: DependencyNode, text: str) -> Iterator[str]:
        """Connect subject to every content ID embedded in raw text."""
        for content_id in find_content_ids(text):
            if self.resolver.is_reserved_namespace(content_id):
                logger.debug("Skipping reserved target %s in %s", content_id, subject.id)
            else:
                self.store.connect(subject, self.store.create_or_get(content_id))
            yield content_id

    def _record_reference(self, subject: DependencyNode, prop: Property) -> None:
        resolved = self.resolver.resolve_reference(prop)
        if resolved is None:
            logger.debug("Unresolved reference at %s in %s", prop.path, subject.id)
            return

        content_id, local_sub_id = resolved
        if self.resolver.is_reserved_namespace(content_id):
            logger.debug("Skipping reserved target %s at %s", content_id, prop.path)
            return

        target = self.store.create_or_get(content_id)
        target.assign_local_sub_id(local_sub_id)
        self.store.connect(subject, target)


def collect_components(data: Any) -> List[Any]:
    """
    Gather the components of a hierarchical item.

    The item's own components come first, followed by every descendant's
    components in depth-first order. Inactive children are included. A child
    reached a second time through a YAML alias is not collected again.
    """
    components: List[Any] = []
    if not isinstance(data, dict):
        return components

    visited = set()
    stack = [data]
    while stack:
        node = stack.pop()
        if id(node) in visited:
            continue
        visited.add(id(node))

        components.extend(_own_components(node))
        children = [child for child in node.get("children") or [] if isinstance(child, dict)]
        stack.extend(reversed(children))

    return components


def _own_components(node: dict) -> List[Any]:
    own = node.get("components") or []
    if not isinstance(own, list):
        return [own]
    return list(own)
