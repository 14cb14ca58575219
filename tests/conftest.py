import pytest

from pipegraph.config import configure


@pytest.fixture
def restore_settings():
    """Reset process-wide settings after a test that calls configure()"""
    yield
    configure()


@pytest.fixture
def call_log():
    return []
