"""
Global pytest fixtures for the Shortlink Platform test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide an isolated in-memory Storage and ClickRecorder for direct testing
    - Provide Allocator/Resolver fixtures wired to the Storage fixture
    - Provide a scripted code generator to force collisions deterministically

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state,
    eliminating cross-test flakiness.
"""

from typing import Iterable, List

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink.analytics.clicks import ClickRecorder
from shortlink.manager.allocator import Allocator
from shortlink.manager.generator import BaseCodeGenerator
from shortlink.manager.resolver import Resolver
from shortlink.storage.storage import Storage

SHORT_URL_BASE = "https://sho.rt"


class ScriptedGenerator(BaseCodeGenerator):
    """Returns the given codes in order, repeating the last one when exhausted."""

    def __init__(self, codes: Iterable[str]):
        self.codes: List[str] = list(codes)
        self.calls = 0

    def generate(self) -> str:
        code = self.codes[min(self.calls, len(self.codes) - 1)]
        self.calls += 1
        return code


@pytest.fixture
def scripted_generator():
    """Factory fixture: scripted_generator("aaaaaa", "bbbbbb") -> ScriptedGenerator."""
    return lambda *codes: ScriptedGenerator(codes)


@pytest.fixture
def storage() -> Storage:
    """Provide a fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def clicks(storage: Storage):
    """ClickRecorder over the storage fixture; drained after the test."""
    recorder = ClickRecorder(storage, max_workers=2)
    yield recorder
    recorder.shutdown(wait=True)


@pytest.fixture
def allocator(storage: Storage) -> Allocator:
    return Allocator(storage, short_url_base=SHORT_URL_BASE)


@pytest.fixture
def resolver(storage: Storage, clicks: ClickRecorder) -> Resolver:
    return Resolver(storage, clicks)


@pytest.fixture
def client(storage: Storage, clicks: ClickRecorder) -> TestClient:
    """
    Provide a fresh TestClient with a new app instance.

    The storage and click recorder fixtures are injected so tests can
    inspect state directly and wait for background increments.
    """
    app = create_app(storage=storage, click_recorder=clicks)
    return TestClient(app)
