"""Parsers for loading items and walking their structural properties."""

import json
import re
import tomllib
from dataclasses import dataclass
from typing import Any, Iterator, Union

import yaml


YAML_EXTENSIONS = {".yaml", ".yml", ".asset", ".prefab", ".mat", ".controller", ".anim"}


@dataclass(frozen=True)
class Property:
    """
    One structural property of a parsed item.

    Attributes:
        path: Dotted path from the item root, e.g. "components[0].mesh".
        name: Key of the property in its parent mapping, or its list index.
        value: The property value (mapping, list or scalar).
        depth: Nesting level, 0 for top-level properties.
    """

    path: str
    name: Union[str, int]
    value: Any
    depth: int


def parse_content(content: str, suffix: str) -> Any:
    """
    Parse the text of a structured item.

    YAML streams with several documents are returned as a list of documents.

    Args:
        content: Raw text of the item.
        suffix: Lower-cased file extension, used to choose the format.

    Returns:
        Parsed data structure.

    Raises:
        ValueError: If the content is not valid for the chosen format.
        yaml.YAMLError: If YAML content cannot be parsed.
    """
    if suffix == ".json":
        return json.loads(content)

    if suffix == ".toml":
        return tomllib.loads(content)

    if suffix in YAML_EXTENSIONS:
        return _load_yaml(content)

    # Try to parse as JSON first, then YAML
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        return _load_yaml(content)


# Tag prefix of the class-ID tags ("!u!114") in Unity's serialized YAML
UNITY_TAG_PREFIX = "tag:unity3d.com,2011:"

# "--- !u!114 &1" and "--- !u!1001 &2 stripped" document headers. The %TAG
# directive only covers the first document of a stream, so the headers are
# rewritten to verbatim tags before loading.
UNITY_DOCUMENT_HEADER = re.compile(
    r"^--- !u!(?P<class_id>\d+)(?P<anchor> &-?\d+)?(?: stripped)?[ \t]*\r?$", re.MULTILINE
)


class UnityLoader(yaml.SafeLoader):
    """Safe YAML loader that reads Unity class-ID tagged documents as plain data."""


def _construct_unity_object(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node, deep=True)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_scalar(node)


UnityLoader.add_multi_constructor(UNITY_TAG_PREFIX, _construct_unity_object)


def _load_yaml(content: str) -> Any:
    content = UNITY_DOCUMENT_HEADER.sub(
        lambda m: f"--- !<{UNITY_TAG_PREFIX}{m['class_id']}>{m['anchor'] or ''}", content
    )
    documents = [doc for doc in yaml.load_all(content, Loader=UnityLoader) if doc is not None]
    if not documents:
        return None
    if len(documents) == 1:
        return documents[0]
    return documents


def iter_properties(data: Any, prefix: str = "", depth: int = 0) -> Iterator[Property]:
    """
    Walk every structural property of parsed data, depth first.

    Mappings are visited in insertion order and lists in index order, so
    the same data always yields the same sequence. A container is yielded
    before its children. Each container is descended into once, so YAML
    aliases that point back at an enclosing node do not loop.

    Args:
        data: Parsed data structure (dict, list, or scalar).
        prefix: Path of data itself, empty for the item root.
        depth: Nesting level of the properties of data.

    Yields:
        Property for each key of every mapping and each entry of every list.
    """
    if not isinstance(data, (dict, list)):
        return

    visited = {id(data)}
    stack = [_child_properties(data, prefix, depth)]
    while stack:
        prop = next(stack[-1], None)
        if prop is None:
            stack.pop()
            continue

        yield prop

        value = prop.value
        if isinstance(value, (dict, list)) and id(value) not in visited:
            visited.add(id(value))
            stack.append(_child_properties(value, prop.path, prop.depth + 1))


def _child_properties(data: Union[dict, list], prefix: str, depth: int) -> Iterator[Property]:
    if isinstance(data, dict):
        for key, value in data.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            yield Property(path=path, name=key, value=value, depth=depth)
    else:
        for index, value in enumerate(data):
            yield Property(path=f"{prefix}[{index}]", name=index, value=value, depth=depth)
