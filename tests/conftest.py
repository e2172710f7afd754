"""Shared fixtures for dependency cache tests."""

from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from scanner.corpus import Item, ItemShape, ReadError


P = "a" * 32
Q = "b" * 32
R = "c" * 32
S = "d" * 32
T = "e" * 32
RESERVED = "0000000000000000f000000000000000"


class MemoryCorpus:
    """In-memory corpus used in place of a real asset tree."""

    def __init__(self):
        self.items: Dict[str, Item] = {}
        self.texts: Dict[str, str] = {}
        self.excluded = set()
        self.unreadable = set()
        self.broken = set()

    def add(self, path: str, content_id: str, shape: ItemShape, data=None) -> Item:
        item = Item(path=Path(path), content_id=content_id, shape=shape, data=data)
        self.items[path] = item
        return item

    def add_text(self, path: str, content_id: str, text: Optional[str]) -> Item:
        if text is None:
            self.unreadable.add(path)
        else:
            self.texts[path] = text
        return self.add(path, content_id, ItemShape.TEXT_DOCUMENT)

    def list_all_item_paths(self) -> Iterable[Path]:
        return [Path(path) for path in self.items]

    def is_excluded(self, path: Path) -> bool:
        return path.as_posix() in self.excluded

    def load_item(self, path: Path) -> Item:
        key = path.as_posix()
        if key in self.broken:
            raise ReadError(path, "cannot parse item")
        return self.items[key]

    def item_shape(self, item: Item) -> ItemShape:
        return item.shape

    def content_id_of(self, item_or_path) -> str:
        if isinstance(item_or_path, Item):
            return item_or_path.content_id
        return self.items[item_or_path.as_posix()].content_id

    def raw_text_of(self, path: Path) -> str:
        key = path.as_posix()
        if key in self.unreadable:
            raise ReadError(path, "file is missing")
        return self.texts[key]


@pytest.fixture
def corpus():
    """An empty in-memory corpus."""
    return MemoryCorpus()


@pytest.fixture
def scenario_corpus():
    """
    P references Q, S has a child component referencing Q and R, and T is a
    text document embedding Q next to a malformed token.
    """
    corpus = MemoryCorpus()
    corpus.add(
        "Assets/P.asset", P, ItemShape.DEFAULT,
        {"name": "P", "material": {"fileID": 2100000, "guid": Q, "type": 2}},
    )
    corpus.add(
        "Assets/S.prefab", S, ItemShape.HIERARCHICAL,
        {
            "components": [{"type": "Transform"}],
            "children": [
                {
                    "active": False,
                    "components": [
                        {"mesh": {"fileID": 4300000, "guid": Q, "type": 3}},
                        {"clip": {"fileID": 8300000, "guid": R, "type": 3}},
                    ],
                },
            ],
        },
    )
    corpus.add_text(
        "Assets/T.unity", T,
        "--- !u!1001 &1\n"
        "PrefabInstance:\n"
        f"  m_SourcePrefab: {{fileID: 100100000, guid: {Q}, type: 3}}\n"
        f"  m_Other: {{fileID: 1, guid: {Q}}}\n"
        "  m_Broken: {fileID: 0, guid: 12ab-not-an-id}\n",
    )
    return corpus
