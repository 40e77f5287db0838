"""
Shared fixtures: every test gets a private event log and empty in-memory client storage.
"""

import pytest

from mealfinder.storage import clear_memory_storage


@pytest.fixture(autouse=True)
def isolated_client_state(tmp_path, monkeypatch):
    """Route events to a temp file and reset in-memory sessions around each test."""
    monkeypatch.setattr("mealfinder.events.EVENT_LOG_FILE", tmp_path / "events.log")
    clear_memory_storage()
    yield
    clear_memory_storage()
