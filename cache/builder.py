"""Cache builder that drives scanning and answers dependency queries."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from scanner.corpus import Corpus, FileCorpus, ItemShape, ReadError
from scanner.resolver import IdentityResolver, is_dependency_property
from scanner.settings import ScanSettings

from .dependencies import DependencyPredicate, DependencyScanner
from .model import DependencyNode, GraphStore
from .reachability import UNLIMITED_DEPTH, ReachabilityEngine


logger = logging.getLogger(__name__)


@dataclass
class CacheBuildOperation:
    """
    Progress of a running build, yielded at every checkpoint.

    The same instance is yielded each time and updated in place.

    Attributes:
        total_items: Number of in-scope items to scan.
        item_being_processed: Path of the item currently scanned.
        processed_properties: Properties visited since the last checkpoint.
        processed_items: Items fully handled so far, failures included.
        failures: (path, message) for each item that could not be read.
        finished: True once the whole corpus has been scanned.
    """

    total_items: int = 0
    item_being_processed: Optional[Path] = None
    processed_properties: int = 0
    processed_items: int = 0
    failures: List[Tuple[Path, str]] = field(default_factory=list)
    finished: bool = False

    @property
    def progress(self) -> float:
        """Fraction of items handled, between 0 and 1."""
        if self.total_items == 0:
            return 1.0 if self.finished else 0.0
        return self.processed_items / self.total_items


class DependencyCache:
    """
    Dependency graph of a corpus, rebuilt from scratch on every build.

    Args:
        corpus: Source of items to scan.
        settings: Scan settings. Defaults to ScanSettings().
        resolver: Identity resolver. Defaults to one using the settings'
                  reserved prefixes.
        is_dependency: Predicate deciding if a property is a link.
    """

    def __init__(
        self,
        corpus: Corpus,
        settings: Optional[ScanSettings] = None,
        resolver: Optional[IdentityResolver] = None,
        is_dependency: DependencyPredicate = is_dependency_property,
    ):
        self.corpus = corpus
        self.settings = settings or ScanSettings()
        self.resolver = resolver or IdentityResolver(self.settings.reserved_prefixes)
        self.store = GraphStore()
        self.reachability = ReachabilityEngine(self.store)
        self.scanner = DependencyScanner(
            store=self.store,
            corpus=self.corpus,
            resolver=self.resolver,
            settings=self.settings,
            is_dependency=is_dependency,
        )

    @classmethod
    def from_directory(
        cls,
        root: Path,
        settings: Optional[ScanSettings] = None,
    ) -> "DependencyCache":
        """Create a cache over the asset files below root."""
        settings = settings or ScanSettings()
        return cls(FileCorpus(root, settings), settings)

    def clear(self) -> None:
        """Discard the whole graph."""
        self.store.clear()

    def build(self) -> CacheBuildOperation:
        """
        Build the whole graph synchronously.

        Returns:
            The final progress token.
        """
        operation = None
        for operation in self.build_async():
            pass
        return operation

    def build_async(self) -> Iterator[CacheBuildOperation]:
        """
        Build the graph lazily, pausing at checkpoints.

        Each next() resumes scanning where the previous one stopped and runs
        until properties_per_step properties have been visited, a text
        document has been scanned, or the corpus is done. Stopping early
        leaves a partial graph whose edges are all complete.

        Yields:
            The shared CacheBuildOperation progress token.
        """
        self.store.clear()

        paths = [
            path for path in self.corpus.list_all_item_paths()
            if not self.corpus.is_excluded(path)
        ]
        operation = CacheBuildOperation(total_items=len(paths))
        logger.info("Building dependency cache for %d items", len(paths))

        for path in paths:
            operation.item_being_processed = path

            try:
                item = self.corpus.load_item(path)
            except ReadError as e:
                self.store.create_or_get(self.corpus.content_id_of(path))
                self._record_failure(operation, path, e)
                continue

            subject = self.store.create_or_get(item.content_id)
            try:
                for _ in self.scanner.scan(item, subject):
                    operation.processed_properties += 1
                    if operation.processed_properties > self.settings.properties_per_step:
                        operation.processed_properties = 0
                        yield operation
            except ReadError as e:
                self._record_failure(operation, path, e)
                continue

            operation.processed_items += 1
            if self.corpus.item_shape(item) is ItemShape.TEXT_DOCUMENT:
                yield operation

        operation.item_being_processed = None
        operation.finished = True
        logger.info(
            "Dependency cache built: %d nodes, %d edges, %d failures",
            len(self.store),
            self.store.edge_count(),
            len(operation.failures),
        )
        yield operation

    @staticmethod
    def _record_failure(operation: CacheBuildOperation, path: Path, error: ReadError) -> None:
        logger.warning("Skipping %s: %s", path, error)
        operation.failures.append((path, str(error)))
        operation.processed_items += 1

    def try_get_node(self, content_id: str) -> Optional[DependencyNode]:
        """Look up the node of a content ID."""
        return self.store.try_get(content_id)

    def all_nodes(self) -> Iterator[DependencyNode]:
        """Iterate over every node. Order is unspecified."""
        return self.store.all_nodes()

    def has_direct_dependency(self, from_id: str, to_id: str) -> bool:
        """Check if from_id points straight at to_id."""
        return self.reachability.has_direct_dependency(from_id, to_id)

    def has_dependency(
        self,
        from_id: str,
        to_id: str,
        max_depth: int = UNLIMITED_DEPTH,
    ) -> bool:
        """Check if from_id reaches to_id within max_depth hops."""
        return self.reachability.has_dependency(from_id, to_id, max_depth)

    def __repr__(self) -> str:
        return f"DependencyCache({self.store!r})"
