"""Pytest configuration and shared fixtures."""

import datetime as dt

import pytest

from roster.domain.db import get_session_factory
from roster.domain.repositories import RecordStore

TODAY = dt.date(2025, 3, 10)


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def session_factory():
    """In-memory database shared by every session of one test."""
    return get_session_factory("sqlite:///:memory:")


@pytest.fixture
def store(session_factory):
    """Empty record store whose 'today' is fixed to TODAY."""
    return RecordStore(session_factory, today=lambda: TODAY)
