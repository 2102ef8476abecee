"""Domain errors raised by the workspace core.

Decode failures never appear here: the decoder always recovers locally and
returns displayable content. Channel failures are reported as booleans and
state changes by the channel manager (see client/_channel.py).

Error Hierarchy:
    WorkspaceError (base)
    ├── FileTreeFormatError - A payload does not have the file tree shape
    ├── PathError - An edit addresses a path the tree cannot hold
    └── MountError - Mirroring the tree into the sandbox failed
"""


class WorkspaceError(Exception):
    """Base exception for all workspace core errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class FileTreeFormatError(WorkspaceError, ValueError):
    """Raised when raw data cannot be interpreted as a file tree.

    Attributes:
        message: Human-readable error description.
        location: Slash-separated path to the offending node, if known.
    """

    def __init__(self, message: str, location: str | None = None) -> None:
        self.location = location
        super().__init__(message)

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} (at: {self.location})"
        return self.message


class PathError(WorkspaceError):
    """Raised when editFile targets a path that does not exist or is not a file.

    The tree is left unchanged when this is raised. Callers may fall back to
    a full tree replace, which is allowed to create directories.

    Attributes:
        message: Human-readable error description.
        path: The path that was requested.
    """

    def __init__(self, message: str, path: str) -> None:
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (path: {self.path!r})"


class MountError(WorkspaceError):
    """Raised when the tree could not be mirrored into the execution sandbox.

    The canonical tree is never rolled back when this is raised: the local
    commit already happened, only the mirror is behind.

    Attributes:
        message: Human-readable error description.
        generation: Tree generation whose mirror failed.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        generation: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.generation = generation
        self.cause = cause
        super().__init__(message)
