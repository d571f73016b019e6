from collections.abc import Callable

import httpx
import pytest

from adapters.http_client import build_async_client
from core.config import AppSettings


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        hacienda_base_url="https://hacienda.test",
        gometa_base_url="https://gometa.test",
        http_timeout_seconds=5.0,
    )


@pytest.fixture
def mock_client(settings) -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return build_async_client(settings, transport=httpx.MockTransport(handler))

    return _factory
