"""Pytest configuration and fixtures."""

from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from vidinfo.cache import MemoryVideoStore
from vidinfo.config import get_settings
from vidinfo.exceptions import InvalidVideoURLError
from vidinfo.models import Service, Video
from vidinfo.providers.base import BaseProvider, host_matches, parse_url
from vidinfo.providers.registry import ProviderRegistry
from vidinfo.resolver import MetadataResolver, QueryResolver

SETTINGS_ENV_VARS = [
    "YOUTUBE_API_KEY",
    "GOOGLE_DRIVE_API_KEY",
    "CACHE_DIR",
    "CACHE_TTL_HOURS",
    "SUPPORTED_MIME_TYPES",
    "DEFAULT_SEARCH_SERVICE",
    "SEARCH_RESULTS_LIMIT",
    "COLLECTION_MAX_ITEMS",
    "REQUEST_TIMEOUT_SECONDS",
]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test from an empty directory with no vidinfo settings in the environment."""
    for var in SETTINGS_ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeProvider(BaseProvider):
    """In-memory provider recording every call.

    ``videos`` maps ids to the full record the "service" knows about;
    fetch_video_info returns only the requested fields, like a real
    cost-conscious provider would.
    """

    def __init__(
        self,
        service: Service = Service.YOUTUBE,
        hosts: Sequence[str] = ("example.com",),
        videos: dict[str, Video] | None = None,
        collection: list[Video] | None = None,
        search_results: list[Video] | None = None,
        priority: int = 10,
    ):
        self._service = service
        self.hosts = tuple(hosts)
        self.videos = videos or {}
        self.collection = collection or []
        self.search_results = search_results or []
        self.priority = priority
        self.fetch_error: Exception | None = None
        self.fetch_calls: list[tuple[str, list[str]]] = []
        self.resolve_calls: list[str] = []
        self.search_calls: list[str] = []

    @property
    def service_id(self) -> Service:
        return self._service

    def can_handle_link(self, url: str) -> bool:
        host, _ = parse_url(url)
        return host_matches(host, self.hosts)

    def is_collection_url(self, url: str) -> bool:
        return "list" in parse_qs(urlparse(url).query)

    def get_video_id(self, url: str) -> str:
        video_id = parse_qs(urlparse(url).query).get("v", [None])[0]
        if not video_id:
            raise InvalidVideoURLError(url)
        return video_id

    def fetch_video_info(self, video_id: str, fields: Sequence[str]) -> Video:
        self.fetch_calls.append((video_id, list(fields)))
        if self.fetch_error is not None:
            raise self.fetch_error
        full = self.videos[video_id].model_dump()
        partial = {name: full[name] for name in fields}
        return Video(service=self._service, id=video_id, **partial)

    def resolve_url(self, url: str) -> list[Video]:
        self.resolve_calls.append(url)
        return list(self.collection)

    def search_videos(self, query: str) -> list[Video]:
        self.search_calls.append(query)
        return list(self.search_results)


@pytest.fixture
def full_video() -> Video:
    """A YouTube video with every schema field populated."""
    return Video(
        service=Service.YOUTUBE,
        id="abc",
        title="Test Video",
        description="A test video",
        thumbnail="https://i.ytimg.com/vi/abc/mqdefault.jpg",
        length=212,
    )


@pytest.fixture
def fake_provider(full_video: Video) -> FakeProvider:
    return FakeProvider(videos={"abc": full_video})


@pytest.fixture
def store() -> MemoryVideoStore:
    return MemoryVideoStore()


@pytest.fixture
def registry(fake_provider: FakeProvider) -> ProviderRegistry:
    return ProviderRegistry([fake_provider])


@pytest.fixture
def metadata_resolver(registry: ProviderRegistry, store: MemoryVideoStore) -> MetadataResolver:
    return MetadataResolver(registry, store)


@pytest.fixture
def query_resolver(
    registry: ProviderRegistry, metadata_resolver: MetadataResolver, store: MemoryVideoStore
) -> QueryResolver:
    return QueryResolver(registry, metadata_resolver, store)


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def mock_client() -> Callable[[Handler], httpx.Client]:
    """Build an httpx.Client whose requests are answered by a handler function.

    Usage:
        client = mock_client(lambda request: httpx.Response(200, json={...}))
    """

    def factory(handler: Handler) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    return factory


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)
