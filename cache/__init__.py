"""Dependency cache: graph storage, reachability queries and the cache builder."""

from .model import DependencyNode, ForeignNodeError, GraphStore
from .reachability import UNLIMITED_DEPTH, ReachabilityEngine
from .dependencies import DependencyScanner, collect_components
from .builder import CacheBuildOperation, DependencyCache

__all__ = [
    "DependencyNode",
    "ForeignNodeError",
    "GraphStore",
    "UNLIMITED_DEPTH",
    "ReachabilityEngine",
    "DependencyScanner",
    "collect_components",
    "CacheBuildOperation",
    "DependencyCache",
]
