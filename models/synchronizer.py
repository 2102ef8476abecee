"""File tree synchronizer.

Owns the canonical file tree of a workspace and mirrors it into the
execution sandbox.

Every mutation commits to the canonical tree immediately (before the first
suspension point) and then mirrors asynchronously. Each commit bumps a
generation counter, and a lock keeps at most one mount in flight. A mirror
that acquires the lock after a newer commit has been made is superseded: it
returns without touching the sandbox, and the newer mirror mounts the newer
tree. So ``replace_tree(T1)`` followed by ``replace_tree(T2)`` always ends
with T2 both locally and in the sandbox, regardless of completion order.

Mount failures raise MountError but never roll back the canonical tree.
"""

import asyncio
import logging
from enum import Enum
from typing import Any

from models.errors import MountError, PathError
from models.file_tree import (
    Directory,
    FileLeaf,
    FileTree,
    copy_file_tree,
    parse_file_tree,
    serialize_file_tree,
    split_file_path,
)
from models.sandbox import Sandbox

logger = logging.getLogger(__name__)


class MountStatus(str, Enum):
    """Outcome of a mirror request that did not fail."""

    MOUNTED = "mounted"
    SUPERSEDED = "superseded"
    UNCHANGED = "unchanged"


class FileTreeSynchronizer:
    """Canonical file tree plus its sandbox mirror.

    Args:
        sandbox: Sandbox to mirror into. May be attached later with
            attach_sandbox() if it boots after the workspace opens.
        tree: Initial tree (wire shape or parsed). Not mirrored until the
            first mutation or attach_sandbox().
    """

    def __init__(self, sandbox: Sandbox | None = None, tree: Any = None) -> None:
        self._sandbox = sandbox
        self._tree: FileTree = parse_file_tree(tree) if tree else {}
        self._generation = 0
        self._mounted_generation: int | None = None
        self._mounted_tree: FileTree | None = None
        self._mount_lock = asyncio.Lock()

    # ===== Queries =====

    def current_tree(self) -> FileTree:
        """Return a read-only snapshot of the canonical tree."""
        return copy_file_tree(self._tree)

    def mounted_tree(self) -> FileTree | None:
        """Return the last successfully mirrored tree, or None."""
        if self._mounted_tree is None:
            return None
        return copy_file_tree(self._mounted_tree)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_sandbox(self) -> bool:
        return self._sandbox is not None

    @property
    def is_converged(self) -> bool:
        """True when the sandbox holds the current canonical tree."""
        return self._mounted_generation == self._generation

    # ===== Mutations =====

    async def replace_tree(self, tree: Any) -> MountStatus:
        """Replace the whole canonical tree and mirror it.

        Replacing with a tree equal to the canonical one is a no-op.

        Args:
            tree: New tree, wire shape or parsed.

        Returns:
            MOUNTED, SUPERSEDED (a newer mutation took over the mirror), or
            UNCHANGED.

        Raises:
            FileTreeFormatError: If tree is not a valid file tree. Nothing is
                committed in that case.
            MountError: If mirroring failed. The commit stands.
        """
        generation = self.commit_tree(tree)
        if generation is None:
            return MountStatus.UNCHANGED
        return await self.mirror(generation)

    async def edit_file(self, path: str, new_contents: str) -> MountStatus:
        """Set the contents of one file and mirror the result.

        Only the addressed leaf changes; every other node is carried over
        unchanged. The file itself may be new, but its directory must exist.

        Args:
            path: ``"name"`` or ``"directory/name"``.
            new_contents: Full new contents of the file.

        Returns:
            MOUNTED, SUPERSEDED or UNCHANGED (contents were already equal).

        Raises:
            PathError: If path is malformed, its directory does not exist, or
                it names a directory. The tree is unchanged.
            MountError: If mirroring failed. The edit stands.
        """
        generation = self.commit_edit(path, new_contents)
        if generation is None:
            return MountStatus.UNCHANGED
        return await self.mirror(generation)

    def commit_tree(self, tree: Any) -> int | None:
        """Commit a full replacement without mirroring.

        Returns:
            The new generation, or None if tree equals the canonical tree.

        Raises:
            FileTreeFormatError: If tree is not a valid file tree.
        """
        new_tree = parse_file_tree(tree)
        if new_tree == self._tree:
            logger.debug("Replacement tree identical to canonical tree; nothing to do")
            return None

        generation = self._commit(copy_file_tree(new_tree))
        logger.info(f"File tree replaced ({len(new_tree)} root entries, generation {generation})")
        return generation

    def commit_edit(self, path: str, new_contents: str) -> int | None:
        """Commit a single-file edit without mirroring.

        Returns:
            The new generation, or None if the file already had new_contents.

        Raises:
            PathError: See edit_file().
        """
        if not isinstance(new_contents, str):
            raise TypeError("new_contents must be a string")
        try:
            directory_name, file_name = split_file_path(path)
        except ValueError as e:
            raise PathError(str(e), path) from e

        new_leaf = FileLeaf(contents=new_contents)
        new_tree = dict(self._tree)

        if directory_name is None:
            existing = new_tree.get(file_name)
            if isinstance(existing, Directory):
                raise PathError("path names a directory, not a file", path)
            if existing == new_leaf:
                return None
            new_tree[file_name] = new_leaf
        else:
            directory = new_tree.get(directory_name)
            if not isinstance(directory, Directory):
                raise PathError(f"directory {directory_name!r} does not exist", path)
            existing = directory.children.get(file_name)
            if isinstance(existing, Directory):
                raise PathError("path names a directory, not a file", path)
            if existing == new_leaf:
                return None
            new_tree[directory_name] = Directory(
                children={**directory.children, file_name: new_leaf}
            )

        generation = self._commit(new_tree)
        logger.debug(f"Edited {path} (generation {generation})")
        return generation

    async def attach_sandbox(self, sandbox: Sandbox) -> MountStatus:
        """Install a sandbox that became available late and mirror into it."""
        self._sandbox = sandbox
        self._mounted_generation = None
        self._mounted_tree = None
        return await self.mirror(self._generation)

    async def remount(self) -> MountStatus:
        """Mirror the current tree again, e.g. after a failed mount."""
        return await self.mirror(self._generation)

    # ===== Mirroring =====

    def _commit(self, tree: FileTree) -> int:
        self._tree = tree
        self._generation += 1
        return self._generation

    async def mirror(self, generation: int) -> MountStatus:
        """Mirror the canonical tree if generation is still the latest commit.

        Returns:
            MOUNTED, SUPERSEDED if a newer commit exists, or UNCHANGED if
            this generation is already mounted.

        Raises:
            MountError: If no sandbox is attached or its mount failed.
        """
        async with self._mount_lock:
            if generation != self._generation:
                logger.debug(
                    f"Mirror of generation {generation} superseded by {self._generation}"
                )
                return MountStatus.SUPERSEDED
            if self._mounted_generation == generation:
                return MountStatus.UNCHANGED
            if self._sandbox is None:
                raise MountError("sandbox not initialized", generation=generation)

            snapshot = copy_file_tree(self._tree)
            try:
                await self._sandbox.mount(serialize_file_tree(snapshot))
            except Exception as e:
                logger.warning(f"Mount of generation {generation} failed: {e}")
                raise MountError(f"mount failed: {e}", generation=generation, cause=e) from e

            self._mounted_generation = generation
            self._mounted_tree = snapshot
            logger.debug(f"Mounted generation {generation}")
            return MountStatus.MOUNTED
