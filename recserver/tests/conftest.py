"""Shared fixtures for the server tests."""

import pytest
import requests

from .fakes import FakeEmbedder, RecordingSleep


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def timeout_error():
    return requests.Timeout("read timed out")
