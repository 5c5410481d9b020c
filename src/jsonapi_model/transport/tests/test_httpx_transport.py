import json

import httpx
import pytest

from ..httpx_transport import HttpxTransport
from ..interfaces import JSONAPI_MEDIA_TYPE


@pytest.fixture
def requests():
    return []


@pytest.fixture
def target(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/books/404":
            return httpx.Response(404, json={"errors": [{"status": "404"}]})
        if request.url.path == "/books/500":
            return httpx.Response(500)
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(
            200,
            json={"data": {"type": "books", "id": "1"}},
            headers={"Content-Type": JSONAPI_MEDIA_TYPE},
        )

    return HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_get(target, requests):
    response = await target.get("https://example.com/books/1?include=author")
    assert response.status == 200
    assert response.body == {"data": {"type": "books", "id": "1"}}
    assert response.headers["content-type"] == JSONAPI_MEDIA_TYPE
    (request,) = requests
    assert request.method == "GET"
    assert str(request.url) == "https://example.com/books/1?include=author"
    assert request.headers["accept"] == JSONAPI_MEDIA_TYPE
    assert request.headers["content-type"] == JSONAPI_MEDIA_TYPE


@pytest.mark.asyncio
async def test_post(target, requests):
    body = {"data": {"type": "books", "attributes": {"title": "Dune"}}}
    await target.post("https://example.com/books", body, headers={"X-Trace": "abc"})
    (request,) = requests
    assert request.method == "POST"
    assert json.loads(request.content) == body
    assert request.headers["x-trace"] == "abc"
    assert request.headers["accept"] == JSONAPI_MEDIA_TYPE


@pytest.mark.asyncio
async def test_patch_and_put(target, requests):
    await target.patch("https://example.com/books/1", {"data": {"type": "books", "id": "1"}})
    await target.put("https://example.com/books/1", {"data": {"type": "books", "id": "1"}})
    await target.head("https://example.com/books/1")
    assert [r.method for r in requests] == ["PATCH", "PUT", "HEAD"]


@pytest.mark.asyncio
async def test_empty_body(target):
    response = await target.delete("https://example.com/books/1")
    assert response.status == 204
    assert response.body is None


@pytest.mark.asyncio
async def test_errors(target):
    with pytest.raises(httpx.HTTPStatusError) as e:
        await target.get("https://example.com/books/404")
    assert target.is_not_found(e.value)

    with pytest.raises(httpx.HTTPStatusError) as e:
        await target.get("https://example.com/books/500")
    assert not target.is_not_found(e.value)
    assert not target.is_not_found(ValueError())


@pytest.mark.asyncio
async def test_owned_client():
    target = HttpxTransport(timeout=5.0)
    async with target:
        client = target.client
        assert target.client is client
        assert client.timeout == httpx.Timeout(5.0)
    assert client.is_closed


@pytest.mark.asyncio
async def test_injected_client_is_not_closed(target):
    client = target.client
    await target.aclose()
    assert not client.is_closed
    await client.aclose()
