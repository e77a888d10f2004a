"""Pytest configuration for network integration tests.

Everything here opens real local sockets, so it is marked ``integration`` and
can be deselected with ``-m "not integration"``.
"""

from pathlib import Path

import pytest

INTEGRATION_DIR = Path(__file__).parent


def pytest_collection_modifyitems(items):
    """Mark every test collected from this directory as an integration test."""
    for item in items:
        if INTEGRATION_DIR in Path(str(item.fspath)).parents:
            item.add_marker(pytest.mark.integration)
