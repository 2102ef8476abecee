"""Pytest configuration and shared fixtures."""

import pytest

# Load CODEROOM_* overrides from a .env file before fixtures are created
from dotenv import load_dotenv
load_dotenv()

# Import all fixtures from fixture modules
pytest_plugins = [
    "tests.fixtures.trees",
    "tests.fixtures.sandbox",
    "tests.fixtures.channel",
    "tests.fixtures.api",
]
