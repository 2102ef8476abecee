"""File tree model.

A project's files are held as a mapping of name to node, where a node is
either a file leaf carrying its contents or a directory carrying another
such mapping. On the wire (and in the sandbox) the same tree is spelled::

    {
        "package.json": {"file": {"contents": "..."}},
        "src": {"directory": {"App.js": {"file": {"contents": "..."}}}},
    }

The edit API only addresses two levels (root entries and files directly
inside a root directory), but parsing and serialization accept any depth.
"""

from collections.abc import Iterator, Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from models.errors import FileTreeFormatError


class FileLeaf(BaseModel):
    """A file and its text contents."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    contents: str = ""


class Directory(BaseModel):
    """A directory and its named children."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["directory"] = "directory"
    children: dict[str, "FileNode"] = Field(default_factory=dict)


FileNode = Annotated[Union[FileLeaf, Directory], Field(discriminator="kind")]
Directory.model_rebuild()

# Root of a project: same shape as Directory.children
FileTree = dict[str, FileNode]


def _check_name(name: Any, location: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise FileTreeFormatError("entry names must be non-empty strings", location or None)
    if "/" in name or name in (".", ".."):
        raise FileTreeFormatError(f"invalid entry name {name!r}", location or None)
    return name


def _parse_node(node: Any, location: str) -> FileLeaf | Directory:
    if isinstance(node, (FileLeaf, Directory)):
        return node
    if not isinstance(node, Mapping):
        raise FileTreeFormatError("node must be a mapping", location)

    if "file" in node:
        file_data = node["file"]
        if not isinstance(file_data, Mapping):
            raise FileTreeFormatError("'file' must be a mapping", location)
        contents = file_data.get("contents", "")
        if not isinstance(contents, str):
            raise FileTreeFormatError("file contents must be a string", location)
        return FileLeaf(contents=contents)

    if "directory" in node:
        return Directory(children=parse_file_tree(node["directory"], location))

    raise FileTreeFormatError("node must contain 'file' or 'directory'", location)


def parse_file_tree(raw: Any, _location: str = "") -> FileTree:
    """Build a FileTree from its wire shape.

    Args:
        raw: Mapping of name to ``{"file": {...}}`` / ``{"directory": {...}}``.
            Already-built FileLeaf/Directory nodes are accepted as-is.

    Returns:
        The parsed tree.

    Raises:
        FileTreeFormatError: If any part of raw does not have the tree shape.
    """
    if not isinstance(raw, Mapping):
        raise FileTreeFormatError("file tree must be a mapping", _location or None)

    tree: FileTree = {}
    for name, node in raw.items():
        name = _check_name(name, _location)
        location = f"{_location}/{name}" if _location else name
        tree[name] = _parse_node(node, location)
    return tree


def serialize_file_tree(tree: Mapping[str, FileLeaf | Directory]) -> dict[str, Any]:
    """Convert a FileTree back to its wire shape."""
    result: dict[str, Any] = {}
    for name, node in tree.items():
        if isinstance(node, FileLeaf):
            result[name] = {"file": {"contents": node.contents}}
        else:
            result[name] = {"directory": serialize_file_tree(node.children)}
    return result


def copy_file_tree(tree: Mapping[str, FileLeaf | Directory]) -> FileTree:
    """Return a deep copy of tree that shares no mutable state with it."""
    return {name: node.model_copy(deep=True) for name, node in tree.items()}


def iter_files(
    tree: Mapping[str, FileLeaf | Directory], prefix: str = ""
) -> Iterator[tuple[str, str]]:
    """Yield ``(path, contents)`` for every file in tree, depth first."""
    for name, node in tree.items():
        path = f"{prefix}/{name}" if prefix else name
        if isinstance(node, FileLeaf):
            yield path, node.contents
        else:
            yield from iter_files(node.children, path)


def split_file_path(path: str) -> tuple[str | None, str]:
    """Split an editable path into ``(directory, name)``.

    Editable paths are either a root-level name (``"index.js"``) or a
    ``directory/name`` pair (``"src/App.js"``).

    Returns:
        ``(None, name)`` for root-level paths, ``(directory, name)`` otherwise.

    Raises:
        ValueError: If path is empty, absolute, or deeper than two segments.
    """
    if not isinstance(path, str) or not path.strip():
        raise ValueError("path must be a non-empty string")
    segments = path.split("/")
    if len(segments) > 2:
        raise ValueError("only root-level and directory/name paths can be edited")
    for segment in segments:
        if not segment or segment in (".", ".."):
            raise ValueError(f"invalid path segment {segment!r}")
    if len(segments) == 1:
        return None, segments[0]
    return segments[0], segments[1]
