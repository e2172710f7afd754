"""Tests for per-shape dependency discovery."""

from pathlib import Path

import pytest

from cache.dependencies import DependencyScanner, collect_components
from cache.model import GraphStore
from scanner.corpus import ItemShape, ReadError
from scanner.parser import parse_content
from scanner.resolver import IdentityResolver
from scanner.settings import ScanSettings

from conftest import P, Q, R, RESERVED, S, T


@pytest.fixture
def store():
    return GraphStore()


def make_scanner(store, corpus, settings=None):
    settings = settings or ScanSettings()
    return DependencyScanner(
        store=store,
        corpus=corpus,
        resolver=IdentityResolver(settings.reserved_prefixes),
        settings=settings,
    )


class TestGenericObject:
    """Tests for the generic property walk."""

    def test_records_reference(self, store, corpus):
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(P)
        data = {"name": "P", "material": {"fileID": 2100000, "guid": Q, "type": 2}}

        visited = list(scanner.scan_object(subject, data))

        assert len(visited) == 5
        assert subject.dependencies == {Q}
        assert store.try_get(Q).references == {P}
        assert store.try_get(Q).local_sub_id == 2100000

    def test_nested_references(self, store, corpus):
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(P)
        data = {"renderer": {"materials": [{"guid": Q}, {"guid": R, "fileID": 7}]}}

        list(scanner.scan_object(subject, data))

        assert subject.dependencies == {Q, R}
        assert store.try_get(Q).local_sub_id is None
        assert store.try_get(R).local_sub_id == 7

    def test_reserved_target_is_skipped(self, store, corpus):
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(P)
        data = {"shader": {"fileID": 4800000, "guid": RESERVED, "type": 0}}

        list(scanner.scan_object(subject, data))

        assert subject.dependencies == set()
        assert RESERVED not in store
        assert len(store) == 1

    def test_unresolved_reference_is_skipped(self, store, corpus):
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(P)
        data = {"broken": {"guid": "not-a-content-id"}}

        list(scanner.scan_object(subject, data))

        assert subject.dependencies == set()
        assert len(store) == 1

    def test_no_dependencies(self, store, corpus):
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(P)

        list(scanner.scan_object(subject, {"name": "plain"}))

        assert subject.dependencies == set()

    def test_self_reference(self, store, corpus):
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(P)

        list(scanner.scan_object(subject, {"me": {"guid": P}}))

        assert subject.dependencies == {P}
        assert subject.references == {P}

    def test_custom_predicate(self, store, corpus):
        """Test that the supplied predicate decides what is a link."""
        scanner = DependencyScanner(
            store=store,
            corpus=corpus,
            resolver=IdentityResolver(),
            settings=ScanSettings(),
            is_dependency=lambda settings, prop: prop.name == "keep",
        )
        subject = store.create_or_get(P)

        list(scanner.scan_object(subject, {"keep": {"guid": Q}, "drop": {"guid": R}}))

        assert subject.dependencies == {Q}

    def test_scan_is_lazy(self, store, corpus):
        """Test that nothing is recorded before iteration."""
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(P)

        steps = scanner.scan_object(subject, {"a": {"guid": Q}, "b": {"guid": R}})
        assert subject.dependencies == set()

        next(steps)
        assert subject.dependencies == {Q}


class TestHierarchy:
    """Tests for hierarchical component scanning."""

    def test_collect_components(self):
        data = {
            "components": [{"id": 1}],
            "children": [
                {"components": [{"id": 2}], "children": [{"components": [{"id": 3}]}]},
                {"active": False, "components": [{"id": 4}]},
            ],
        }

        ids = [component["id"] for component in collect_components(data)]

        assert ids == [1, 2, 3, 4]

    def test_collect_components_with_aliased_child(self):
        """Test that a child aliasing its ancestor is collected once."""
        data = parse_content(
            "&root {components: [{id: 1}], children: [*root, {components: [{id: 2}]}]}\n",
            ".yaml",
        )

        ids = [component["id"] for component in collect_components(data)]

        assert ids == [1, 2]


    def test_collect_components_without_hierarchy(self):
        assert collect_components({"name": "x"}) == []
        assert collect_components(None) == []

    def test_inactive_children_are_scanned(self, store, corpus):
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(S)
        data = {
            "components": [{"mesh": {"guid": Q}}],
            "children": [{"active": False, "components": [{"clip": {"guid": R}}]}],
        }

        list(scanner.scan_hierarchy(subject, data))

        assert subject.dependencies == {Q, R}


class TestTextDocument:
    """Tests for raw-text scanning."""

    def test_embedded_ids(self, store, corpus):
        scanner = make_scanner(store, corpus)
        subject = store.create_or_get(T)
        text = (
            f"a: {{fileID: 1, guid: {Q}, type: 3}}\n"
            f"b: {{fileID: 2, guid: {RESERVED}, type: 0}}\n"
            "c: {fileID: 3, guid: 0123}\n"
        )

        found = list(scanner.scan_text_document(subject, text))

        assert found == [Q, RESERVED]
        assert subject.dependencies == {Q}
        assert RESERVED not in store
        assert store.try_get(Q).local_sub_id is None


class TestDispatch:
    """Tests for shape dispatch."""

    def test_dispatch_by_shape(self, store, scenario_corpus):
        scanner = make_scanner(store, scenario_corpus)
        for path in scenario_corpus.list_all_item_paths():
            item = scenario_corpus.load_item(path)
            subject = store.create_or_get(item.content_id)
            list(scanner.scan(item, subject))

        assert store.try_get(P).dependencies == {Q}
        assert store.try_get(S).dependencies == {Q, R}
        assert store.try_get(T).dependencies == {Q}

    def test_unreadable_document_raises_before_iteration(self, store, corpus):
        corpus.add_text("Assets/Gone.unity", T, None)
        scanner = make_scanner(store, corpus)
        item = corpus.load_item(Path("Assets/Gone.unity"))

        with pytest.raises(ReadError):
            scanner.scan(item, store.create_or_get(T))

    def test_default_shape(self, store, corpus):
        item = corpus.add("Assets/x.asset", P, ItemShape.DEFAULT, {"m": {"guid": Q}})
        scanner = make_scanner(store, corpus)

        list(scanner.scan(item, store.create_or_get(P)))

        assert store.try_get(P).dependencies == {Q}
