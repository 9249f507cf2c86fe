import pytest
import pytest_asyncio
import httpx
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs

from mediahost.core.config import Settings
from mediahost.core.database import create_engine_from_settings, create_session_maker, create_db_and_tables
from mediahost.engines.cloudinary.client import CloudinaryClient
from mediahost.engines.cloudinary.services import MediaService
from mediahost.modules.records.models import AdCampaign, Article
from mediahost.modules.records.repositories import SQLModelRecordStore


SECURE_URL = "https://res.cloudinary.com/demo/image/upload/v1712345678/blog-images/abc123.webp"


class FakeMediaHost:
    """httpx MockTransport handler standing in for the Cloudinary API."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.upload_response: Dict[str, Any] = {
            "public_id": "blog-images/abc123",
            "secure_url": SECURE_URL,
            "format": "webp",
            "resource_type": "image",
            "version": 1712345678,
            "width": 1200,
            "height": 630,
            "bytes": 48213,
        }
        self.destroy_response: Dict[str, Any] = {"result": "ok"}
        self.status_code = 200
        self.error_message: Optional[str] = None
        self.raise_error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if self.error_message is not None:
            return httpx.Response(self.status_code, json={"error": {"message": self.error_message}})
        if request.url.path.endswith("/destroy"):
            return httpx.Response(self.status_code, json=self.destroy_response)
        return httpx.Response(self.status_code, json=self.upload_response)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def uploads(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/upload")]

    @property
    def destroys(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/destroy")]

    @staticmethod
    def form(request: httpx.Request) -> Dict[str, str]:
        """Decode a url-encoded form body."""
        return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="123456789",
        CLOUDINARY_API_SECRET="shhh",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'records.db'}",
    )


@pytest.fixture
def media_host() -> FakeMediaHost:
    return FakeMediaHost()


@pytest.fixture
def client(settings, media_host) -> CloudinaryClient:
    return CloudinaryClient(settings, transport=media_host.transport)


@pytest_asyncio.fixture
async def session_maker(settings):
    engine = create_engine_from_settings(settings)
    await create_db_and_tables(engine)
    yield create_session_maker(engine)
    await engine.dispose()


@pytest.fixture
def record_store(session_maker) -> SQLModelRecordStore:
    return SQLModelRecordStore(session_maker)


@pytest.fixture
def service(settings, client, record_store) -> MediaService:
    return MediaService(settings, client=client, record_store=record_store)


@pytest_asyncio.fixture
async def campaign(session_maker) -> AdCampaign:
    async with session_maker() as session:
        campaign = AdCampaign(title="Spring Sale", advertiser="Acme Corp", budget=500.0)
        session.add(campaign)
        await session.commit()
        await session.refresh(campaign)
        return campaign


@pytest_asyncio.fixture
async def article(session_maker) -> Article:
    async with session_maker() as session:
        article = Article(title="Hello World", slug="hello-world")
        session.add(article)
        await session.commit()
        await session.refresh(article)
        return article


@pytest.fixture
def image_bytes() -> bytes:
    # Only the byte count matters to the uploader; the host does the decoding
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
