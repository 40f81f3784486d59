"""
Test Configuration and Fixtures

Shared fixtures for all tests in the project.
"""

import io
import json
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional
from unittest.mock import patch

import aiosqlite
import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from openai import AsyncOpenAI
from PIL import Image

from exceptions import StorageError
from storage import StorageBucket

# Project paths
ROOT_DIR = Path(__file__).parent.parent
SCHEMA_PATH = ROOT_DIR / "database" / "schema.sql"

STYLE_LISTING = ["sunset.png", "bad.txt", "neon-glow.jpg"]
FACE_URL = "https://cdn.test/faces/me.jpg"
DESCRIPTION = "A shocked face next to a giant glowing $10,000 sign on a red background."


# =============================================================================
# TEST DOUBLES
# =============================================================================

class MemoryBucket(StorageBucket):
    """In-memory bucket that keeps insertion order as listing order."""

    def __init__(self, name: str, names: Optional[list[str]] = None, fail: bool = False):
        self.name = name
        self.objects = {object_name: b"" for object_name in (names or [])}
        self.fail = fail
        self.list_calls = 0

    async def list_objects(self) -> list[dict]:
        self.list_calls += 1
        if self.fail:
            raise StorageError(f"bucket '{self.name}' unavailable")
        return [{"name": name, "size": len(data)} for name, data in self.objects.items()]

    def public_url(self, object_name: str) -> str:
        return f"https://storage.test/{self.name}/{object_name}"

    async def upload(self, object_name: str, data: bytes, content_type: str) -> str:
        if self.fail:
            raise StorageError(f"bucket '{self.name}' unavailable")
        self.objects[object_name] = data
        return self.public_url(object_name)


def chat_completion_body(content: Optional[str]) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


class OpenAIStub:
    """
    Scripted OpenAI backend behind httpx.MockTransport.

    Set status_code/error_body to simulate failures; every request is
    recorded in ``requests``.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.error_body: Optional[dict] = None
        self.description: Optional[str] = DESCRIPTION
        self.image_b64: Optional[str] = None
        self.raise_connect_error = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.raise_connect_error:
            raise httpx.ConnectError("connection refused", request=request)

        if self.status_code != 200:
            body = self.error_body or {"error": {"message": "upstream failure", "type": "server_error"}}
            return httpx.Response(self.status_code, json=body)

        if request.url.path.endswith("/images/edits"):
            return httpx.Response(200, json={"created": 0, "data": [{"b64_json": self.image_b64}]})

        return httpx.Response(200, json=chat_completion_body(self.description))

    def make_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key="test-key",
            base_url="https://openai.test/v1",
            max_retries=0,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
        )

    def chat_payloads(self) -> list[dict]:
        return [
            json.loads(request.content)
            for request in self.requests
            if request.url.path.endswith("/chat/completions")
        ]


def make_image_bytes(fmt: str = "PNG", size: tuple = (64, 48), color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
async def test_db() -> AsyncGenerator[aiosqlite.Connection, None]:
    """
    Create an in-memory SQLite database with the full schema.

    Yields:
        aiosqlite.Connection: Database connection ready for use
    """
    db = await aiosqlite.connect(":memory:")

    # Enable foreign keys
    await db.execute("PRAGMA foreign_keys = ON")

    with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
        await db.executescript(f.read())

    yield db

    await db.close()


@pytest.fixture
async def sample_user(test_db: aiosqlite.Connection) -> dict:
    """A registered user with an active token."""
    from services.auth_service import AuthService

    service = AuthService(test_db)
    await service.sign_up("creator@example.com", "secret123")
    session = await service.sign_in("creator@example.com", "secret123")

    return {**session["user"], "token": session["token"]}


# =============================================================================
# STORAGE AND OPENAI FIXTURES
# =============================================================================

@pytest.fixture
def styles_bucket() -> MemoryBucket:
    return MemoryBucket("styles", list(STYLE_LISTING))


@pytest.fixture
def faces_bucket() -> MemoryBucket:
    return MemoryBucket("faces")


@pytest.fixture
def thumbnails_bucket() -> MemoryBucket:
    return MemoryBucket("thumbnails")


@pytest.fixture
def openai_stub() -> OpenAIStub:
    return OpenAIStub()


@pytest.fixture
def proxy(openai_stub: OpenAIStub, thumbnails_bucket: MemoryBucket):
    from generation_proxy import GenerationProxy

    return GenerationProxy(
        client=openai_stub.make_client(),
        image_generation_enabled=False,
        output_bucket=thumbnails_bucket,
    )


@pytest.fixture
def wizard_service(test_db, styles_bucket, faces_bucket, proxy):
    """WizardService wired to the in-memory collaborators."""
    from services.wizard_service import WizardService
    from style_resolver import StyleResolver

    return WizardService(
        test_db,
        resolver=StyleResolver(styles_bucket),
        proxy=proxy,
        faces_bucket=faces_bucket,
    )


# =============================================================================
# APP AND CLIENT FIXTURES
# =============================================================================

@pytest.fixture
async def app(test_db, styles_bucket, faces_bucket, thumbnails_bucket, openai_stub):
    """
    Create FastAPI app with test database, in-memory buckets and the
    scripted OpenAI backend.
    """
    @asynccontextmanager
    async def mock_get_db():
        yield test_db

    buckets = {
        "styles": styles_bucket,
        "faces": faces_bucket,
        "thumbnails": thumbnails_bucket,
    }

    with patch('api.dependencies.get_db', mock_get_db), \
            patch('api.routes.wizard.get_db', mock_get_db), \
            patch('api.routes.thumbnails.get_db', mock_get_db), \
            patch('api.routes.auth.get_db', mock_get_db), \
            patch.dict('storage._buckets', buckets, clear=True), \
            patch('generation_proxy.create_openai_client', side_effect=openai_stub.make_client):
        # Import the app after patching
        from api.main import app as fastapi_app
        yield fastapi_app


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing API endpoints.

    Yields:
        AsyncClient: httpx client configured for the test app
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

async def insert_record(db: aiosqlite.Connection, owner_id: int, title: str, result_url: str = FACE_URL) -> int:
    """
    Helper to insert a thumbnail record directly.

    Returns:
        int: Record ID
    """
    cursor = await db.execute(
        """
        INSERT INTO thumbnail_records (owner_id, title, source_face_image_url, result_thumbnail_url)
        VALUES (?, ?, ?, ?)
        """,
        (owner_id, title, FACE_URL, result_url)
    )
    await db.commit()
    return cursor.lastrowid


def auth_headers(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}
