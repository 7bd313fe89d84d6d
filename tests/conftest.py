"""Shared fixtures for the massive-account test suite."""

import json
import logging

import pytest

from src.config.settings import get_settings
from src.logging.structured import LOGGER_NAME
from src.transport.base import HTTPResponse, Transport

DASHBOARD = "https://massive.com"
API = "https://api.polygon.io"


class FakeTransport(Transport):
    """Serves canned responses by URL and records every request made."""

    def __init__(self, routes: dict | None = None):
        self.routes: dict[str, HTTPResponse | None] = dict(routes or {})
        self.requests: list[tuple[str, str, dict]] = []
        self.posted_fields: list[list[tuple[str, str]]] = []
        self.closed = False

    def get(self, url, headers=None):
        self.requests.append(("GET", url, headers or {}))
        return self.routes.get(url)

    def post(self, url, fields, headers=None):
        self.requests.append(("POST", url, headers or {}))
        self.posted_fields.append(list(fields))
        return self.routes.get(url)

    def close(self):
        self.closed = True

    def urls(self) -> list[str]:
        return [url for _, url, _ in self.requests]


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(API_BASE_URL="https://api.test", LOG_LEVEL="DEBUG")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        get_settings.cache_clear()

    yield _override

    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def default_hosts(monkeypatch):
    """Pin upstream hosts so a developer's env does not leak into tests."""
    monkeypatch.setenv("DASHBOARD_BASE_URL", DASHBOARD)
    monkeypatch.setenv("API_BASE_URL", API)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_push_html(*contents) -> str:
    """Build a page with one streaming-chunk script per content value."""
    scripts = [
        f"<script>self.__next_f.push([{i},{json.dumps(content)}])</script>"
        for i, content in enumerate(contents, start=1)
    ]
    return "<html><body>" + "\n".join(scripts) + "</body></html>"


def ok(text: str = "", status_code: int = 200, set_cookies: list[str] | None = None) -> HTTPResponse:
    return HTTPResponse(status_code=status_code, text=text, set_cookies=set_cookies or [])


KEYS_TABLE_PAYLOAD = json.dumps({
    "rows": [
        {"name": "Production", "key": "prod_key_1", "id": "key-1", "created_at": "2024-01-02"},
        {"name": "Default", "key": "default_key_2", "id": "key-2", "created_at": "2024-01-01"},
    ]
}, separators=(",", ":"))


def key_detail_payload(
    name: str,
    key_id: str,
    access_key: str,
    s3_access_key_id: str = "AKIAEXAMPLE",
    s3_secret: str = "s3-secret-value",
    endpoint: str = "https://files.massive.com",
    bucket: str = "flatfiles",
) -> list[str]:
    """Chunks shaped like a key page: header props then the flat-files tab."""
    return [
        json.dumps({"name": name, "keyId": key_id, "accessKey": access_key}, separators=(",", ":")),
        '["$","dt",null,{"children":"Access Key ID"}],'
        f'["$","dd",null,{{"className":"mono","children":"{s3_access_key_id}"}}]',
        '["$","dt",null,{"children":"Secret Access Key"}],'
        f'["$","dd",null,{{"children":"{s3_secret}"}}]',
        '["$","dt",null,{"children":"S3 Endpoint"}],'
        f'["$","dd",null,{{"children":"{endpoint}"}}]',
        '["$","dt",null,{"children":"Bucket"}],'
        f'["$","dd",null,{{"children":"{bucket}"}}]',
    ]


@pytest.fixture(autouse=True)
def reset_client_logger():
    """Undo handlers installed by setup_logging() during a test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
