"""
Tests for the content API client and editor uploads, against a mocked transport.
"""

import httpx
import pytest
import respx

from bulletin.api import ApiClient, IdentityContext
from bulletin.editor import ResourceUploader
from bulletin.exceptions import TransportError, UploadError

BASE = "http://cms.test"


@pytest.fixture
def admin_client():
    return ApiClient(base_url=BASE, token="admin-token", context=IdentityContext.ADMIN)


@pytest.mark.asyncio
@respx.mock
async def test_get_json_sends_bearer_token(admin_client):
    route = respx.get(f"{BASE}/api/boards").respond(json=[{"boardId": 1}])

    async with admin_client:
        payload = await admin_client.get_json("/api/boards")

    assert payload == [{"boardId": 1}]
    assert route.calls.last.request.headers["Authorization"] == "Bearer admin-token"


@pytest.mark.asyncio
@respx.mock
async def test_query_parameters():
    route = respx.get(f"{BASE}/api/boards/4/posts").respond(json={"content": []})

    async with ApiClient(base_url=BASE) as client:
        await client.get_json("/api/boards/4/posts", params={"page": 1, "size": 5})

    request = route.calls.last.request
    assert request.url.params["page"] == "1"
    assert request.url.params["size"] == "5"
    assert "Authorization" not in request.headers


@pytest.mark.asyncio
@respx.mock
async def test_error_status_becomes_transport_error():
    respx.delete(f"{BASE}/api/boards/1/posts/2/comments/3").respond(status_code=403)

    async with ApiClient(base_url=BASE) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.delete("/api/boards/1/posts/2/comments/3")

    assert exc_info.value.status_code == 403
    assert isinstance(exc_info.value.original, httpx.HTTPStatusError)


@pytest.mark.asyncio
@respx.mock
async def test_connection_failure_becomes_transport_error():
    respx.get(f"{BASE}/api/boards").mock(side_effect=httpx.ConnectError("refused"))

    async with ApiClient(base_url=BASE) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.get_json("/api/boards")

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
@respx.mock
async def test_empty_body_is_none():
    respx.delete(f"{BASE}/api/cms/contents/9").respond(status_code=204)

    async with ApiClient(base_url=BASE) as client:
        assert await client.delete("/api/cms/contents/9") is None


@pytest.mark.asyncio
@respx.mock
async def test_upload_returns_link(admin_client):
    route = respx.post(f"{BASE}/api/files/upload/editor").respond(
        json={"data": {"link": "http://cms.test/files/a.png"}}
    )

    async with admin_client:
        result = await ResourceUploader(admin_client).upload(b"\x89PNG", "a.png", "image/png")

    assert result.url == "http://cms.test/files/a.png"
    body = route.calls.last.request.content
    assert b'name="image"' in body
    assert b'filename="a.png"' in body


@pytest.mark.asyncio
@respx.mock
async def test_upload_without_link_fails(admin_client):
    respx.post(f"{BASE}/api/files/upload/editor").respond(json={"data": {}})

    async with admin_client:
        with pytest.raises(UploadError):
            await ResourceUploader(admin_client).upload(b"GIF89a", "a.gif", "image/gif")


@pytest.mark.asyncio
@respx.mock
async def test_upload_server_error(admin_client):
    respx.post(f"{BASE}/api/files/upload/editor").respond(status_code=500)

    async with admin_client:
        with pytest.raises(UploadError) as exc_info:
            await ResourceUploader(admin_client).upload(b"GIF89a", "a.gif", "image/gif")

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_upload_rejects_unaccepted_type(admin_client):
    async with admin_client:
        with pytest.raises(UploadError):
            await ResourceUploader(admin_client).upload(b"%PDF", "a.pdf", "application/pdf")
