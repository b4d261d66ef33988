"""Pytest configuration and fixtures."""

import re

import pytest

from ktest import config
from ktest import registry

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    return ANSI_ESCAPE.sub("", text)


@pytest.fixture
def plain():
    """Strip terminal color codes from captured output."""
    return _strip_ansi


@pytest.fixture
def reg():
    """A fresh, empty registry."""
    return registry.KTestRegistry()


@pytest.fixture(autouse=True)
def fresh_default_registry(monkeypatch):
    """Give every test its own default registry."""
    monkeypatch.setattr(registry, "g_registry", registry.KTestRegistry())


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run without any harness settings from the outer environment."""
    for key in (config.FORK_ENV, config.EXIT_ENV, config.LOG_ENV):
        monkeypatch.delenv(key, raising=False)
