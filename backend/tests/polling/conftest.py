"""Fixtures for polling tests."""

import pytest

from pricefeed.polling.memory import InMemoryConfigStore, InMemorySampleSink

from .fakes import FakeQuoteSource


@pytest.fixture
def source() -> FakeQuoteSource:
    return FakeQuoteSource()


@pytest.fixture
def sink() -> InMemorySampleSink:
    return InMemorySampleSink()


@pytest.fixture
def config_store() -> InMemoryConfigStore:
    return InMemoryConfigStore()
