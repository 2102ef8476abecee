"""Execution sandbox boundary.

The synchronizer only ever calls ``mount(tree)`` with the wire shape of the
file tree. Booting the sandbox and running processes inside it happen
elsewhere.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from models.file_tree import Directory, iter_files, parse_file_tree

logger = logging.getLogger(__name__)


@runtime_checkable
class Sandbox(Protocol):
    """Anything that can mirror a file tree."""

    async def mount(self, tree: dict[str, Any]) -> None:
        """Mirror tree (wire shape) into the sandbox."""
        ...


class DirectorySandbox:
    """Sandbox that materializes the tree into a directory on disk.

    Each mount makes the directory match the tree exactly: files that are not
    in the tree are removed. File I/O runs in a worker thread so the event
    loop is never blocked by a large mount.

    Args:
        root: Directory the tree is written into. Created on first mount.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.mount_count = 0

    async def mount(self, tree: dict[str, Any]) -> None:
        parsed = parse_file_tree(tree)
        files = dict(iter_files(parsed))
        directories = _directory_paths(parsed)
        await asyncio.to_thread(self._write, files, directories)
        self.mount_count += 1
        logger.debug(f"Mounted {len(files)} files into {self.root}")

    def _write(self, files: dict[str, str], directories: set[str]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        root = self.root.resolve()

        # Deepest entries first so stale children go before their parents
        existing = sorted(root.rglob("*"), key=lambda p: len(p.parts), reverse=True)
        for entry in existing:
            relative = entry.relative_to(root).as_posix()
            if entry.is_symlink() or entry.is_file():
                if relative not in files:
                    entry.unlink()
            elif entry.is_dir() and relative not in directories:
                shutil.rmtree(entry)

        for relative in sorted(directories):
            (root / relative).mkdir(parents=True, exist_ok=True)
        for relative, contents in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(contents, encoding="utf-8")


def _directory_paths(tree, prefix: str = "") -> set[str]:
    paths: set[str] = set()
    for name, node in tree.items():
        if isinstance(node, Directory):
            path = f"{prefix}/{name}" if prefix else name
            paths.add(path)
            paths |= _directory_paths(node.children, path)
    return paths
