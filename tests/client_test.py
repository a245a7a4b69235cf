"""Upstream client: status mapping, timeouts and pagination, with requests mocked.
Run: pytest -q
"""
import json

import pytest
import requests

from lingocard.client import UpstreamClient
from lingocard.config import Settings
from lingocard.errors import NotFound, RateLimited, UpstreamError, UpstreamTimeout


class FakeResp:
    def __init__(self, payload=None, status_code=200, content=b"", headers=None):
        self.payload = payload
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.text = json.dumps(payload) if payload is not None else ""

    def json(self):
        if self.payload is None:
            raise ValueError("no json")
        return self.payload


class FakeSession:
    def __init__(self, responder):
        self.responder = responder
        self.headers = {}
        self.calls = []

    def get(self, url, timeout=None, **kwargs):
        self.calls.append((url, timeout, kwargs))
        return self.responder(url, **kwargs)


def make_client(responder, **settings):
    session = FakeSession(responder)
    return UpstreamClient(Settings(**settings), session=session), session


def test_fetch_profile_returns_payload_verbatim():
    payload = {"users": [{"username": "a b"}]}
    client, session = make_client(lambda url, **kw: FakeResp(payload), timeout=3.0)
    assert client.fetch_profile("a b") == payload
    url, timeout, _ = session.calls[0]
    assert url.endswith("username=a%20b")
    assert timeout == 3.0
    assert session.headers["User-Agent"].startswith("lingocard")


@pytest.mark.parametrize("status,exc", [(404, NotFound), (429, RateLimited)])
def test_status_mapping(status, exc):
    client, _ = make_client(lambda url, **kw: FakeResp({"message": "x"}, status_code=status))
    with pytest.raises(exc):
        client.fetch_profile("x")


def test_not_found_message_names_user():
    client, _ = make_client(lambda url, **kw: FakeResp(None, status_code=404))
    with pytest.raises(NotFound) as info:
        client.fetch_profile("x")
    assert info.value.message == 'User "x" not found'
    assert info.value.status == 404


def test_upstream_error_carries_status_and_message():
    client, _ = make_client(lambda url, **kw: FakeResp({"message": "maintenance"}, status_code=503))
    with pytest.raises(UpstreamError) as info:
        client.fetch_profile("x")
    assert info.value.upstream_status == 503
    assert info.value.message == "maintenance"
    assert info.value.status == 500


def test_upstream_error_without_json_body():
    client, _ = make_client(lambda url, **kw: FakeResp(None, status_code=500))
    with pytest.raises(UpstreamError) as info:
        client.fetch_profile("x")
    assert info.value.message == "Upstream API error (500)"


def test_timeout_and_connection_errors():
    def timeout(url, **kw):
        raise requests.Timeout("slow")

    def refused(url, **kw):
        raise requests.ConnectionError("refused")

    client, _ = make_client(timeout)
    with pytest.raises(UpstreamTimeout):
        client.fetch_profile("x")
    client, _ = make_client(refused)
    with pytest.raises(UpstreamError):
        client.fetch_profile("x")


def test_fetch_items_pages_until_empty():
    pages = {1: [{"likes_count": 1}] * 100, 2: [{"likes_count": 2}] * 3, 3: []}

    def responder(url, **kw):
        page = int(url.rsplit("=", 1)[1])
        assert kw["params"] == {"per_page": 100}
        return FakeResp(pages[page])

    client, session = make_client(responder, items_url="https://api.example.com/users/{identifier}/items?page={page}")
    items = client.fetch_items("coder")
    assert len(items) == 103
    assert len(session.calls) == 3


def test_fetch_items_bounded_and_disabled():
    client, session = make_client(lambda url, **kw: FakeResp([{}]),
                                  items_url="https://x/{identifier}?page={page}", items_max_pages=2)
    assert len(client.fetch_items("coder")) == 2
    assert len(session.calls) == 2

    client, session = make_client(lambda url, **kw: FakeResp([{}]))
    assert client.fetch_items("coder") == []
    assert session.calls == []


def test_fetch_asset():
    client, _ = make_client(lambda url, **kw: FakeResp(content=b"PNG", headers={"content-type": "image/png"}))
    assert client.fetch_asset("https://x/a.png") == (b"PNG", "image/png")
