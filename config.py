"""Runtime configuration.

Settings are read from environment variables prefixed ``CODEROOM_``. A
``.env`` file in the working directory is loaded first, so local overrides
do not need to be exported::

    CODEROOM_API_URL=http://localhost:8000
    CODEROOM_CHANNEL_URL=ws://localhost:8000/ws/projects
    CODEROOM_MAX_RECONNECT_ATTEMPTS=5
    CODEROOM_RECONNECT_DELAY=20
"""

import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "CODEROOM_"


class Settings(BaseModel):
    """Configuration for a workspace process.

    Args:
        api_url: Base URL of the project/user HTTP service.
        channel_url: Base URL of the realtime channel; the channel key is
            appended as the last path segment.
        max_reconnect_attempts: Automatic reconnect cap before a manual reset
            is required.
        reconnect_delay: Seconds between automatic reconnect attempts.
        connect_timeout: Seconds allowed for one connection handshake.
        stable_after: Seconds a channel connection must stay up before a
            drop no longer counts toward the reconnect cap.
        http_timeout: Request timeout for the HTTP service.
        http_retry_enabled: Retry transient HTTP failures.
        http_max_retries: Retry cap when http_retry_enabled is set.
        excerpt_length: Maximum excerpt kept for unparseable payloads.
        sandbox_dir: Directory mirrored by the directory sandbox, if used.
    """

    api_url: str = Field(default="http://localhost:8000")
    channel_url: str = Field(default="ws://localhost:8000/ws/projects")
    max_reconnect_attempts: int = Field(default=5, ge=0)
    reconnect_delay: float = Field(default=20.0, ge=0)
    connect_timeout: float = Field(default=30.0, gt=0)
    stable_after: float = Field(default=5.0, ge=0)
    http_timeout: float = Field(default=30.0, gt=0)
    http_retry_enabled: bool = False
    http_max_retries: int = Field(default=3, ge=0)
    excerpt_length: int = Field(default=300, gt=0)
    sandbox_dir: str | None = None


def load_settings(environ: Mapping[str, str] | None = None, dotenv: bool = True) -> Settings:
    """Build Settings from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ).
        dotenv: Load a ``.env`` file into os.environ first.

    Returns:
        Validated Settings. Unset variables keep their defaults.

    Raises:
        pydantic.ValidationError: If a variable has an invalid value.
    """
    if dotenv:
        load_dotenv()
    source = os.environ if environ is None else environ

    values = {}
    for name in Settings.model_fields:
        key = f"{ENV_PREFIX}{name.upper()}"
        if key in source and source[key] != "":
            values[name] = source[key]
    return Settings(**values)
