"""Pytest configuration and fixtures."""

import pytest

from tests.fakes import FakeStoreClient, FakeTranslator, RecordingRenderer


@pytest.fixture
def store_client():
    """Fake relay client that accepts every write."""
    return FakeStoreClient()


@pytest.fixture
def translator():
    """Deterministic translation backend."""
    return FakeTranslator()


@pytest.fixture
def renderer():
    """Renderer that records what the viewer asked it to draw."""
    return RecordingRenderer()
