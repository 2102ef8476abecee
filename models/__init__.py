"""coderoom workspace core.

This package contains the data models and core logic of a collaborative
coding workspace: the resilient payload decoder, directive recognition and
project templates, the file tree and its sandbox synchronizer, and the chat
timeline.

The Workspace orchestrator depends on the client package and is imported
from ``models.workspace`` directly.
"""

from models.channel_state import ChannelPhase, ChannelState
from models.decoded_content import (
    DecodedContent,
    Text,
    TextWithTree,
    TreePresenceFlag,
    Unparseable,
)
from models.decoder import decode
from models.directives import Directive, recognize
from models.errors import FileTreeFormatError, MountError, PathError, WorkspaceError
from models.file_tree import Directory, FileLeaf, FileNode, FileTree, parse_file_tree
from models.message import Message, MessageOrigin, WireEvent
from models.participant import AI_PARTICIPANT, SYSTEM_PARTICIPANT, Participant
from models.sandbox import DirectorySandbox, Sandbox
from models.synchronizer import FileTreeSynchronizer, MountStatus
from models.templates import ProjectTemplate, get_template, match_template
from models.timeline import Timeline

__all__ = [
    "ChannelPhase",
    "ChannelState",
    "DecodedContent",
    "Text",
    "TextWithTree",
    "TreePresenceFlag",
    "Unparseable",
    "decode",
    "Directive",
    "recognize",
    "WorkspaceError",
    "FileTreeFormatError",
    "MountError",
    "PathError",
    "FileLeaf",
    "Directory",
    "FileNode",
    "FileTree",
    "parse_file_tree",
    "Message",
    "MessageOrigin",
    "WireEvent",
    "Participant",
    "AI_PARTICIPANT",
    "SYSTEM_PARTICIPANT",
    "Sandbox",
    "DirectorySandbox",
    "FileTreeSynchronizer",
    "MountStatus",
    "ProjectTemplate",
    "get_template",
    "match_template",
    "Timeline",
]
