"""Shared test configuration and fixtures."""

import pytest

from tlsgen.generator import parse, reflect


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def reflect_one():
    """Parse declaration text and return the schema of one record in it."""

    def _reflect(text, name):
        return reflect(parse(text), name)

    return _reflect
