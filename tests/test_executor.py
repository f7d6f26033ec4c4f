"""Tests for the request executor."""
import httpx
import pytest

from dropzone.auth import Access, AnonymousAuth, ApiKeyAuth, DropzoneScopeAuth
from dropzone.errors import ConfigurationError, HttpError, TransportError
from dropzone.services.executor import RequestExecutor, path_param

from stub_server import BASE_URL, SIGNED_URL


def _executor(server, auth=None):
    return RequestExecutor(BASE_URL, auth=auth or ApiKeyAuth("key-1"), transport=server.transport)


class TestPathParam:
    def test_quotes_segment(self):
        assert path_param("a/b c", "file id") == "a%2Fb%20c"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_rejects_empty(self, value):
        with pytest.raises(ConfigurationError, match="file id is required"):
            path_param(value, "file id")


class TestRequestExecutor:
    @pytest.mark.asyncio
    async def test_unwraps_data_envelope(self, server):
        server.add("GET", "/dropzones/dz1", json_body={"data": {"id": "dz1"}, "message": "ok"})

        async with _executor(server) as api:
            payload = await api.request("GET", "/dropzones/dz1")

        assert payload == {"id": "dz1"}
        assert len(server.calls) == 1

    @pytest.mark.asyncio
    async def test_returns_raw_body_without_envelope(self, server):
        server.add("DELETE", "/files/f1", json_body={"deleted": True})

        async with _executor(server) as api:
            payload = await api.request("DELETE", "/files/f1")

        assert payload == {"deleted": True}

    @pytest.mark.asyncio
    async def test_unwrap_false_keeps_envelope(self, server):
        server.add("DELETE", "/files/f1", json_body={"data": None, "message": "deleted"})

        async with _executor(server) as api:
            payload = await api.request("DELETE", "/files/f1", unwrap=False)

        assert payload == {"data": None, "message": "deleted"}

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, server):
        server.add("POST", "/files/f1/confirm", status=204)

        async with _executor(server) as api:
            assert await api.request("POST", "/files/f1/confirm") is None

    @pytest.mark.asyncio
    async def test_binary_returns_bytes(self, server):
        server.add("GET", "/files/f1/download", content=b"\x00\x01binary")

        async with _executor(server) as api:
            payload = await api.request("GET", "/files/f1/download", binary=True)

        assert payload == b"\x00\x01binary"

    @pytest.mark.asyncio
    async def test_http_error_carries_envelope(self, server):
        server.add(
            "GET",
            "/dropzones/missing",
            status=404,
            json_body={"message": "Dropzone not found", "data": {"id": "missing"}},
        )

        async with _executor(server) as api:
            with pytest.raises(HttpError) as exc_info:
                await api.request("GET", "/dropzones/missing")

        error = exc_info.value
        assert error.status_code == 404
        assert error.status_text == "Not Found"
        assert error.message == "Dropzone not found"
        assert error.data == {"id": "missing"}
        assert error.method == "GET"
        assert str(error) == "404 Not Found: Dropzone not found"
        assert error.is_client_error is True

    @pytest.mark.asyncio
    async def test_http_error_without_json_body(self, server):
        server.add("GET", "/dropzones/dz1", status=502, content=b"<html>bad gateway</html>")

        async with _executor(server) as api:
            with pytest.raises(HttpError) as exc_info:
                await api.request("GET", "/dropzones/dz1")

        error = exc_info.value
        assert error.status_code == 502
        assert error.status_text == "Bad Gateway"
        assert error.message is None
        assert error.data is None
        assert error.is_server_error is True

    @pytest.mark.asyncio
    async def test_transport_failure_is_wrapped(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = RequestExecutor(BASE_URL, transport=httpx.MockTransport(refuse))
        async with api:
            with pytest.raises(TransportError) as exc_info:
                await api.request("GET", "/dropzones/dz1")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_api_key_header(self, server):
        server.add("GET", "/apikeys/me", json_body={"data": {}})

        async with _executor(server, ApiKeyAuth("key-1")) as api:
            await api.request("GET", "/apikeys/me", access=Access.API_KEY)

        headers = server.calls[0].headers
        assert headers["x-api-key"] == "key-1"
        assert "x-dropzone-id" not in headers

    @pytest.mark.asyncio
    async def test_dropzone_scope_headers(self, server):
        server.add("POST", "/upload/request", json_body={"data": {}})

        async with _executor(server, DropzoneScopeAuth("dz1", api_key="key-1")) as api:
            await api.request("POST", "/upload/request", access=Access.SCOPED, json={})

        headers = server.calls[0].headers
        assert headers["x-dropzone-id"] == "dz1"
        assert headers["x-api-key"] == "key-1"

    @pytest.mark.asyncio
    async def test_anonymous_sends_no_credentials(self, server):
        server.add("GET", "/dropzones/dz1", json_body={"data": {"id": "dz1"}})

        async with _executor(server, AnonymousAuth()) as api:
            await api.request("GET", "/dropzones/dz1")

        headers = server.calls[0].headers
        assert "x-api-key" not in headers
        assert "x-dropzone-id" not in headers

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "auth,access",
        [
            (AnonymousAuth(), Access.API_KEY),
            (AnonymousAuth(), Access.SCOPED),
            (DropzoneScopeAuth("dz1"), Access.API_KEY),
        ],
    )
    async def test_missing_credentials_fail_before_network(self, server, auth, access):
        async with _executor(server, auth) as api:
            with pytest.raises(ConfigurationError):
                await api.request("POST", "/dropzones", access=access, json={})

        assert server.calls == []

    @pytest.mark.asyncio
    async def test_json_and_content_are_exclusive(self, server):
        async with _executor(server) as api:
            with pytest.raises(ValueError):
                await api.request("POST", "/x", json={}, content=b"raw")

        assert server.calls == []

    @pytest.mark.asyncio
    async def test_requires_context_manager(self, server):
        api = _executor(server)
        with pytest.raises(RuntimeError, match="async with"):
            await api.request("GET", "/dropzones/dz1")

    @pytest.mark.asyncio
    async def test_put_signed_bypasses_auth(self, server):
        server.add("PUT", SIGNED_URL, status=200)

        async with _executor(server, DropzoneScopeAuth("dz1", api_key="key-1")) as api:
            await api.put_signed(SIGNED_URL, b"hello", "text/plain")

        request = server.calls[0]
        assert str(request.url) == SIGNED_URL
        assert request.headers["content-type"] == "text/plain"
        assert request.content == b"hello"
        assert "x-api-key" not in request.headers
        assert "x-dropzone-id" not in request.headers

    @pytest.mark.asyncio
    async def test_put_signed_error(self, server):
        server.add("PUT", SIGNED_URL, status=403, content=b"<Error>SignatureDoesNotMatch</Error>")

        async with _executor(server) as api:
            with pytest.raises(HttpError) as exc_info:
                await api.put_signed(SIGNED_URL, b"hello", "text/plain")

        assert exc_info.value.status_code == 403
        assert exc_info.value.method == "PUT"
