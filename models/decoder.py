"""Resilient decoder for automated chat payloads.

Payloads from the automated participant are supposed to be JSON documents
shaped like ``{"body": str, "tree": FileTree | true}`` but nothing enforces
that: they may be truncated, carry bare keys or trailing commas, or be plain
prose. ``decode`` never raises; it walks an ordered chain of strategies and
returns the first usable result:

1. Template short-circuit: a tree marker plus a known template keyword
   yields ``TreePresenceFlag`` without parsing the (large) tree.
2. Strict parse with ``json.loads``. A repair pass (trailing commas, bare
   keys, unclosed braces) is tried when the strict parse fails.
3. Field extraction: pull the body string straight out of the raw text,
   tolerating a payload cut off mid-string.
4. Fallback: ``Unparseable`` with a bounded excerpt of the raw text.

The legacy key names ``text`` and ``fileTree`` are accepted alongside
``body`` and ``tree``.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from models.decoded_content import (
    DecodedContent,
    Text,
    TextWithTree,
    TreePresenceFlag,
    Unparseable,
)
from models.errors import FileTreeFormatError
from models.file_tree import parse_file_tree
from models.templates import match_template

logger = logging.getLogger(__name__)

DEFAULT_EXCERPT_LENGTH = 300

BODY_KEYS = ("body", "text")
TREE_KEYS = ("tree", "fileTree")

_TREE_MARKER = re.compile(r'"(?:tree|fileTree)"\s*:')
# Unterminated strings are matched up to the end of input
_BODY_FIELD = re.compile(r'"(?:body|text)"\s*:\s*"((?:[^"\\]|\\.)*)')
_ESCAPE = re.compile(r'\\(u[0-9a-fA-F]{4}|["\\/bfnrt])')
_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][A-Za-z0-9_$]*)(\s*:)")


def _unescape(text: str) -> str:
    def replace(match: re.Match) -> str:
        token = match.group(1)
        if token.startswith("u"):
            return chr(int(token[1:], 16))
        return _SIMPLE_ESCAPES[token]

    return _ESCAPE.sub(replace, text)


def _extract_body(raw: str) -> str | None:
    match = _BODY_FIELD.search(raw)
    if match is None:
        return None
    return _unescape(match.group(1))


def _body_of(parsed: Mapping) -> tuple[bool, str]:
    for key in BODY_KEYS:
        if key in parsed:
            value = parsed[key]
            if value is None:
                return True, ""
            if isinstance(value, str):
                return True, value
            return True, json.dumps(value, default=str)
    return False, ""


def _interpret(parsed: Any) -> DecodedContent | None:
    """Turn an already-parsed document into DecodedContent.

    Returns None when the document has neither a body nor a tree.
    """
    if isinstance(parsed, str):
        return Text(body=parsed)
    if not isinstance(parsed, Mapping):
        return None

    has_body, body = _body_of(parsed)
    tree_value = None
    for key in TREE_KEYS:
        if parsed.get(key) not in (None, False):
            tree_value = parsed[key]
            break

    if tree_value is None:
        return Text(body=body) if has_body else None
    if tree_value is True:
        return TreePresenceFlag(body=body)
    if isinstance(tree_value, Mapping):
        try:
            return TextWithTree(body=body, tree=parse_file_tree(tree_value))
        except FileTreeFormatError as e:
            logger.debug(f"Tree field present but not a valid file tree: {e}")
            return TreePresenceFlag(body=body)
    return Text(body=body)


def _split_literals(raw: str) -> tuple[list[tuple[bool, str]], bool]:
    """Split raw into (is_string_literal, text) segments.

    Returns the segments and whether raw ends inside a string literal.
    """
    segments: list[tuple[bool, str]] = []
    buffer: list[str] = []
    in_string = False
    escaped = False

    for char in raw:
        if in_string:
            buffer.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                segments.append((True, "".join(buffer)))
                buffer = []
                in_string = False
        elif char == '"':
            if buffer:
                segments.append((False, "".join(buffer)))
            buffer = [char]
            in_string = True
        else:
            buffer.append(char)

    if buffer:
        segments.append((in_string, "".join(buffer)))
    return segments, in_string


def _repair(raw: str) -> str | None:
    """Patch common structural damage outside string literals.

    Returns the repaired text, or None if raw ends inside a string (left to
    field extraction) or nothing needed patching.
    """
    segments, unterminated = _split_literals(raw)
    if unterminated:
        return None

    parts: list[str] = []
    closers: list[str] = []
    for is_string, text in segments:
        if not is_string:
            text = _BARE_KEY.sub(r'\1"\2"\3', text)
            text = _TRAILING_COMMA.sub(r"\1", text)
            for char in text:
                if char == "{":
                    closers.append("}")
                elif char == "[":
                    closers.append("]")
                elif char in "}]" and closers and closers[-1] == char:
                    closers.pop()
        parts.append(text)

    repaired = "".join(parts).rstrip().rstrip(",")
    repaired += "".join(reversed(closers))
    if repaired == raw:
        return None
    return repaired


def _coerce_raw(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    try:
        return json.dumps(raw, default=str)
    except (TypeError, ValueError):
        return str(raw)


def _decode(raw: Any, excerpt_length: int) -> DecodedContent:
    if isinstance(raw, Mapping):
        result = _interpret(raw)
        if result is not None:
            return result
    text = _coerce_raw(raw)

    # Tier 1: known template shapes are materialized locally, not parsed
    if _TREE_MARKER.search(text):
        template = match_template(text)
        if template is not None:
            logger.debug(f"Payload carries a {template.name} tree; skipping structural parse")
            return TreePresenceFlag(body=_extract_body(text) or "")

    # Tier 2: strict parse, then repaired re-parse. Deep nesting exhausts the
    # parser recursion limit and falls through like any other parse error
    try:
        result = _interpret(json.loads(text))
        if result is not None:
            return result
    except (ValueError, RecursionError):
        repaired = _repair(text)
        if repaired is not None:
            try:
                result = _interpret(json.loads(repaired))
                if result is not None:
                    logger.debug("Payload decoded after structural repair")
                    return result
            except (ValueError, RecursionError):
                pass

    # Tier 3: pull the body field out of the raw text
    body = _extract_body(text)
    if body is not None:
        logger.debug("Payload decoded by body field extraction")
        return Text(body=body)

    # Tier 4
    logger.debug(f"Payload unparseable ({len(text)} chars)")
    return Unparseable(raw_excerpt=text[:excerpt_length])


def decode(raw: Any, excerpt_length: int = DEFAULT_EXCERPT_LENGTH) -> DecodedContent:
    """Decode a chat payload into DecodedContent.

    Total: every input, including non-strings, produces a result.

    Args:
        raw: The payload as received (normally a string).
        excerpt_length: Maximum length of the excerpt kept for unparseable input.

    Returns:
        Text, TextWithTree, TreePresenceFlag or Unparseable.
    """
    try:
        return _decode(raw, excerpt_length)
    except Exception:
        logger.exception("Decoder failed unexpectedly; keeping raw excerpt")
        return Unparseable(raw_excerpt=_coerce_raw(raw)[:excerpt_length])
