"""Directive recognition for chat messages.

A directive is a command phrase embedded anywhere in a human message
(``"@ai please create react app now"``) asking for a project template to be
materialized. Recognition is a pure function; the caller announces progress
and runs the template.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Directive(str, Enum):
    """Commands that materialize a project template."""

    CREATE_REACT_APP = "create-react-app"
    CREATE_EXPRESS_SERVER = "create-express-server"


# Checked in order; first match wins
TRIGGER_PHRASES: tuple[tuple[str, Directive], ...] = (
    ("create react app", Directive.CREATE_REACT_APP),
    ("create a react app", Directive.CREATE_REACT_APP),
    ("create express server", Directive.CREATE_EXPRESS_SERVER),
    ("create an express server", Directive.CREATE_EXPRESS_SERVER),
)


def recognize(sender_is_automated: bool, raw_text: str) -> Directive | None:
    """Find the directive embedded in a message, if any.

    Matching is a case-insensitive substring search, so surrounding text
    (mentions, punctuation) does not matter.

    Args:
        sender_is_automated: True if the message came from the automated
            participant. Its messages never carry directives.
        raw_text: The message text as typed.

    Returns:
        The first matching Directive, or None.
    """
    if sender_is_automated or not isinstance(raw_text, str):
        return None

    lowered = " ".join(raw_text.lower().split())
    for phrase, directive in TRIGGER_PHRASES:
        if phrase in lowered:
            logger.debug(f"Recognized directive {directive.value} from phrase {phrase!r}")
            return directive
    return None
