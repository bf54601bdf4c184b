import pytest


@pytest.fixture
def mock_settings(monkeypatch):
    """Point settings at test FatSecret credentials."""
    from pydantic import SecretStr
    from app.config import settings

    monkeypatch.setenv("CONSUMER_KEY", "test_consumer_key")
    monkeypatch.setenv("CONSUMER_SECRET", "test_consumer_secret")
    monkeypatch.setattr(settings, "consumer_key", "test_consumer_key")
    monkeypatch.setattr(settings, "consumer_secret", SecretStr("test_consumer_secret"))
    monkeypatch.setattr(settings, "search_max_results", None)
    return settings


@pytest.fixture
def credentials():
    from app.services.fatsecret_auth import ConsumerCredentials

    return ConsumerCredentials(consumer_key="ck", consumer_secret="cs")


@pytest.fixture
def mock_httpx_client():
    """Factory patching httpx.AsyncClient in a module with a client whose get returns `response`."""
    from unittest.mock import AsyncMock, patch

    def _make(target: str, response):
        patcher = patch(target)
        mock_cls = patcher.start()
        mock_client = AsyncMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client.get = AsyncMock(return_value=response)
        mock_cls.return_value = mock_client
        _patchers.append(patcher)
        return mock_client

    _patchers = []
    yield _make
    for p in _patchers:
        p.stop()
