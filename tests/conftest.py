"""Shared pytest configuration: registers the fixtures under tests/fixtures."""

from tests.fixtures import *  # noqa: F401,F403
