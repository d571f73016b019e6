import json
import re

import httpx
import pytest

from adapters.http_client import body_preview, fetch_json, fetch_json_safe, probe
from core.errors import ContentTypeError, HttpError, NetworkError, ParseError

pytestmark = pytest.mark.unit

URL = "https://hacienda.test/indicadores/tc"


def _json_response(payload, status=200, content_type="application/json; charset=utf-8"):
    return httpx.Response(status, content=json.dumps(payload).encode(), headers={"content-type": content_type})


def test_body_preview_truncates_then_collapses_whitespace():
    body = "<html>\n   <head>\t\t<title>Error</title></head>\n" + "x" * 200
    preview = body_preview(body)

    assert preview == re.sub(r"\s+", " ", body[:120])
    assert "\n" not in preview and "  " not in preview


@pytest.mark.asyncio
async def test_fetch_json_safe_returns_parsed_value(mock_client):
    async with mock_client(lambda request: _json_response({"compra": 500})) as client:
        assert await fetch_json_safe(client, URL) == {"compra": 500}


@pytest.mark.asyncio
async def test_fetch_json_safe_sends_no_store_headers(mock_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["cache-control"] = request.headers.get("cache-control")
        seen["params"] = dict(request.url.params)
        return _json_response([])

    async with mock_client(handler) as client:
        await fetch_json_safe(client, URL, params={"q": "arroz"})

    assert seen == {"cache-control": "no-store", "params": {"q": "arroz"}}


@pytest.mark.asyncio
async def test_html_with_200_is_a_content_type_error(mock_client):
    body = "<html>\n  <body>\n    <h1>502   Bad Gateway</h1>\n" + "<p>proxy</p>\n" * 30 + "</body></html>"

    def handler(request):
        return httpx.Response(200, text=body, headers={"content-type": "text/html; charset=UTF-8"})

    async with mock_client(handler) as client:
        with pytest.raises(ContentTypeError) as exc_info:
            await fetch_json_safe(client, URL)

    err = exc_info.value
    assert err.preview == re.sub(r"\s+", " ", body[:120])
    assert err.content_type == "text/html; charset=utf-8"
    assert err.code == "CONTENT_TYPE_ERROR"
    assert str(err).startswith("Respuesta no es JSON (text/html")


@pytest.mark.asyncio
async def test_missing_content_type(mock_client):
    async with mock_client(lambda request: httpx.Response(200, content=b'{"a": 1}')) as client:
        with pytest.raises(ContentTypeError) as exc_info:
            await fetch_json_safe(client, URL)

    assert "sin content-type" in str(exc_info.value)


@pytest.mark.asyncio
async def test_status_checked_before_content_type(mock_client):
    def handler(request):
        return httpx.Response(503, text="<html>down</html>", headers={"content-type": "text/html"})

    async with mock_client(handler) as client:
        with pytest.raises(HttpError) as exc_info:
            await fetch_json_safe(client, URL)

    assert exc_info.value.status == 503
    assert str(exc_info.value) == "HTTP 503"


@pytest.mark.asyncio
async def test_malformed_json_is_a_parse_error(mock_client):
    def handler(request):
        return httpx.Response(200, text='{"compra": 5', headers={"content-type": "application/json"})

    async with mock_client(handler) as client:
        with pytest.raises(ParseError) as exc_info:
            await fetch_json_safe(client, URL)

    assert exc_info.value.preview == '{"compra": 5'


@pytest.mark.asyncio
async def test_transport_failure_is_a_network_error(mock_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(NetworkError) as exc_info:
            await fetch_json_safe(client, URL)

    assert "connection refused" in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_json_does_not_require_content_type(mock_client):
    def handler(request):
        return httpx.Response(200, text='{"cabys": []}', headers={"content-type": "text/plain"})

    async with mock_client(handler) as client:
        assert await fetch_json(client, URL) == {"cabys": []}


@pytest.mark.asyncio
async def test_fetch_json_errors(mock_client):
    async with mock_client(lambda request: httpx.Response(404, text="nope")) as client:
        with pytest.raises(HttpError):
            await fetch_json(client, URL)

    async with mock_client(lambda request: httpx.Response(200, text="<html/>")) as client:
        with pytest.raises(ParseError):
            await fetch_json(client, URL)


@pytest.mark.asyncio
async def test_probe_only_checks_status(mock_client):
    async with mock_client(lambda request: httpx.Response(200, text="<html/>")) as client:
        await probe(client, URL)

    async with mock_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(HttpError):
            await probe(client, URL)


def _redirect_loop(request):
    return httpx.Response(302, headers={"location": str(request.url)})


def _broken_gzip(request):
    return httpx.Response(
        200,
        headers={"content-type": "application/json", "content-encoding": "gzip"},
        stream=httpx.ByteStream(b"not gzip"),
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("handler", [_redirect_loop, _broken_gzip], ids=["redirect-loop", "bad-gzip"])
@pytest.mark.parametrize("fetch", [fetch_json_safe, fetch_json, probe])
async def test_request_errors_become_network_errors(mock_client, handler, fetch):
    async with mock_client(handler) as client:
        with pytest.raises(NetworkError):
            await fetch(client, URL)
