import os
from pathlib import Path

import pytest

# Test layer, by the directory a test module lives in
_LAYER_MARKERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "integration": pytest.mark.integration,
    "bdd": pytest.mark.bdd,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="PROTEAN_ENV to load the ordering domain config with",
    )


def pytest_sessionstart(session):
    """Select the config environment before the ordering domain is imported.

    The domain itself is set up by the session-scoped DomainFixture in
    tests/ordering/conftest.py.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Mark each test with its layer; integration tests are also slow unless marked fast."""
    for item in items:
        parts = Path(item.fspath).parts
        for directory, marker in _LAYER_MARKERS.items():
            if directory in parts:
                item.add_marker(marker)
                break

        if "integration" in parts and item.get_closest_marker("fast") is None:
            item.add_marker(pytest.mark.slow)
