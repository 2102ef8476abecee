"""Decoded payload variants.

Every chat payload ends up as exactly one of these. Consumers match on the
``kind`` discriminator (or isinstance) instead of probing payload shape.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from models.file_tree import FileTree

UNPARSED_MARKER = "[unparsed payload] "


class Text(BaseModel):
    """Plain message body."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    body: str

    @property
    def display_text(self) -> str:
        return self.body


class TextWithTree(BaseModel):
    """Message body accompanied by a fully parsed file tree."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text_with_tree"] = "text_with_tree"
    body: str
    tree: FileTree

    @property
    def display_text(self) -> str:
        return self.body


class TreePresenceFlag(BaseModel):
    """Message body for a payload that carries a tree which was not parsed.

    Either the payload said ``"tree": true`` or the tree belongs to a known
    project template, which the receiver materializes itself.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["tree_presence"] = "tree_presence"
    body: str

    @property
    def display_text(self) -> str:
        return self.body


class Unparseable(BaseModel):
    """Nothing usable could be extracted.

    Args:
        raw_excerpt: Bounded prefix of the raw payload.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["unparseable"] = "unparseable"
    raw_excerpt: str

    @property
    def display_text(self) -> str:
        return f"{UNPARSED_MARKER}{self.raw_excerpt}"


DecodedContent = Annotated[
    Union[Text, TextWithTree, TreePresenceFlag, Unparseable],
    Field(discriminator="kind"),
]
