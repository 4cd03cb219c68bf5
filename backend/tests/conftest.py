"""
Evernote REST — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── note_store_client: Annotated stand-in for a concrete store client
    ├── store_operations: Handle wrapping it (get_store_client() unwrap)
    ├── dispatcher: Dispatcher with an empty registry
    ├── app: Fresh FastAPI app with the store dependency overridden
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import os

# Settings are read at import time; keep tests independent of the host env.
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["EVERNOTE_ENVIRONMENT"] = "sandbox"
os.environ["EVERNOTE_ACCESS_TOKEN"] = ""
os.environ["EVERNOTE_ALWAYS_USE_TOKEN_FROM_CONFIG"] = "false"
os.environ["EVERNOTE_FALLBACK_TO_TOKEN_FROM_CONFIG"] = "false"

from typing import Any, Dict, List, Optional, Set  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from pydantic import BaseModel  # noqa: E402

from evernote_rest.dispatch import Dispatcher, OperationRegistry  # noqa: E402


class NoteFilter(BaseModel):
    words: Optional[str] = None
    notebookGuid: Optional[str] = None
    ascending: bool = False


class NoteStoreClient:
    """Concrete client with annotated signatures, recording every call."""

    def __init__(self):
        self.calls: List[tuple] = []

    def getNote(self, guid: str, withContent: bool) -> Dict[str, Any]:
        self.calls.append(("getNote", guid, withContent))
        return {"guid": guid, "withContent": withContent}

    def search(self, tags: List[str]) -> List[str]:
        self.calls.append(("search", tags))
        return tags

    def untag(self, tagGuids: Set[str]) -> List[str]:
        self.calls.append(("untag", tagGuids))
        return sorted(tagGuids)

    def echo(self, value: Any) -> Any:
        return value

    def findNotes(self, filter: NoteFilter, offset: int, maxNotes: int) -> Dict[str, Any]:
        self.calls.append(("findNotes", filter, offset, maxNotes))
        return {"words": filter.words if filter else None, "offset": offset, "maxNotes": maxNotes}

    def setAttributes(self, attributes: Dict[str, int]) -> Dict[str, Any]:
        self.calls.append(("setAttributes", attributes))
        return attributes

    def getResourceData(self, guid: str) -> bytes:
        return b"\x00\x01binary"

    def expungeNote(self, guid: str) -> int:
        raise RuntimeError(f"EDAMNotFoundException: Note.guid {guid}")


class StoreOperationsHandle:
    """Interface-style handle: no operations of its own, only the unwrap."""

    def __init__(self, store_client: Any):
        self._store_client = store_client

    def get_store_client(self) -> Any:
        return self._store_client


@pytest.fixture
def note_store_client():
    return NoteStoreClient()


@pytest.fixture
def store_operations(note_store_client):
    return StoreOperationsHandle(note_store_client)


@pytest.fixture
def dispatcher():
    return Dispatcher(OperationRegistry())


@pytest.fixture
def app(store_operations):
    """
    Fresh application whose store dependency returns the fake handle for
    both noteStore and userStore.
    """
    from evernote_rest.main import create_app
    from evernote_rest.routes.store import get_store_operations

    application = create_app()
    application.dependency_overrides[get_store_operations] = lambda: store_operations
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
