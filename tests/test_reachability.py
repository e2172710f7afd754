"""Tests for dependency reachability queries."""

import pytest

from cache.model import GraphStore
from cache.reachability import ReachabilityEngine


def make_engine(edges):
    store = GraphStore()
    for source, target in edges:
        store.connect(store.create_or_get(source), store.create_or_get(target))
    return ReachabilityEngine(store)


class TestDirectDependency:
    """Tests for has_direct_dependency."""

    def test_direct_edge(self):
        engine = make_engine([("a", "b"), ("b", "c")])

        assert engine.has_direct_dependency("a", "b")
        assert not engine.has_direct_dependency("a", "c")
        assert not engine.has_direct_dependency("b", "a")

    def test_unknown_source(self):
        engine = make_engine([("a", "b")])

        assert not engine.has_direct_dependency("zzz", "b")


class TestTransitiveDependency:
    """Tests for has_dependency."""

    def test_depth_boundary(self):
        """Test a chain without shortcut against depth limits."""
        engine = make_engine([("a", "b"), ("b", "c")])

        assert not engine.has_dependency("a", "c", max_depth=1)
        assert engine.has_dependency("a", "c", max_depth=2)
        assert engine.has_dependency("a", "c")
        assert not engine.has_direct_dependency("a", "c")

    def test_depth_zero_reaches_nothing(self):
        engine = make_engine([("a", "b")])

        assert not engine.has_dependency("a", "b", max_depth=0)

    @pytest.mark.parametrize("depth", [-1, -5])
    def test_negative_depth_is_unlimited(self, depth):
        chain = [(str(i), str(i + 1)) for i in range(50)]
        engine = make_engine(chain)

        assert engine.has_dependency("0", "50", max_depth=depth)

    def test_cycle_terminates(self):
        """Test a cycle A -> B -> C -> A."""
        engine = make_engine([("a", "b"), ("b", "c"), ("c", "a")])

        assert engine.has_dependency("a", "c")
        assert not engine.has_dependency("a", "missing")

    def test_self_reachability_needs_a_cycle(self):
        """Test that a node only reaches itself through a real cycle."""
        engine = make_engine([("a", "b"), ("b", "c"), ("c", "a"), ("x", "y")])

        assert engine.has_dependency("a", "a")
        assert not engine.has_dependency("a", "a", max_depth=2)
        assert engine.has_dependency("a", "a", max_depth=3)
        assert not engine.has_dependency("x", "x")

    def test_self_loop(self):
        engine = make_engine([("a", "a")])

        assert engine.has_dependency("a", "a", max_depth=1)

    def test_does_not_follow_references(self):
        """Test that traversal only follows outgoing edges."""
        engine = make_engine([("a", "b"), ("c", "b")])

        assert not engine.has_dependency("a", "c")
        assert not engine.has_dependency("b", "a")

    def test_unknown_source(self):
        engine = make_engine([("a", "b")])

        assert not engine.has_dependency("zzz", "b")

    def test_shortest_path_is_used(self):
        """Test that a long path does not hide a short one."""
        engine = make_engine([("a", "b"), ("b", "c"), ("c", "d"), ("a", "d"), ("d", "e")])

        assert engine.has_dependency("a", "e", max_depth=2)
        assert not engine.has_dependency("a", "e", max_depth=1)
