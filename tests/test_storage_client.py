import asyncio

import httpx
import pytest

from catalog.services.storage_client import StorageClient, StorageError, object_path

SESSION_URL = "https://firebasestorage.googleapis.com/upload/session-1"


class ResumableServer:
    """Simula il protocollo resumable: start, chunk, finalize."""

    def __init__(self, session_url=SESSION_URL):
        self.session_url = session_url
        self.start_headers = None
        self.chunks = []
        self.received = b""

    def __call__(self, request):
        if request.headers.get("X-Goog-Upload-Command") == "start":
            self.start_headers = request.headers
            headers = {"X-Goog-Upload-URL": self.session_url} if self.session_url else {}
            return httpx.Response(200, headers=headers)
        command = request.headers["X-Goog-Upload-Command"]
        offset = int(request.headers["X-Goog-Upload-Offset"])
        assert offset == len(self.received)
        self.received += request.content
        self.chunks.append((command, offset, len(request.content)))
        if command == "upload, finalize":
            return httpx.Response(200, json={"name": "clubs/1-logo.png", "downloadTokens": "tok-1"})
        return httpx.Response(200, headers={"X-Goog-Upload-Status": "active"})


def make_client(handler, chunk_size=4):
    return StorageClient(
        bucket="demo.appspot.com",
        emulator_host="",
        chunk_size=chunk_size,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


def test_object_path():
    assert object_path("clubs", "logo.png", now_ms=1700000000000) == "clubs/1700000000000-logo.png"


def test_upload_sends_chunks_and_reports_progress():
    server = ResumableServer()
    progress = []
    data = b"0123456789"

    metadata = asyncio.run(
        make_client(server).upload("clubs/1-logo.png", data, "image/png", lambda done, total: progress.append((done, total)))
    )

    assert metadata["downloadTokens"] == "tok-1"
    assert server.received == data
    assert server.chunks == [("upload", 0, 4), ("upload", 4, 4), ("upload, finalize", 8, 2)]
    assert progress == [(4, 10), (8, 10), (10, 10)]
    assert server.start_headers["X-Goog-Upload-Protocol"] == "resumable"
    assert server.start_headers["X-Goog-Upload-Header-Content-Length"] == "10"
    assert server.start_headers["X-Goog-Upload-Header-Content-Type"] == "image/png"


def test_upload_empty_file_finalizes_once():
    server = ResumableServer()
    progress = []
    asyncio.run(make_client(server).upload("clubs/1-empty.png", b"", on_progress=lambda d, t: progress.append((d, t))))
    assert server.chunks == [("upload, finalize", 0, 0)]
    assert progress == [(0, 0)]


def test_upload_without_session_url_fails():
    with pytest.raises(StorageError):
        asyncio.run(make_client(ResumableServer(session_url=None)).upload("clubs/x.png", b"abc"))


def test_upload_chunk_error_propagates_without_retry():
    calls = []

    def handler(request):
        calls.append(request.headers.get("X-Goog-Upload-Command"))
        if request.headers.get("X-Goog-Upload-Command") == "start":
            return httpx.Response(200, headers={"X-Goog-Upload-URL": SESSION_URL})
        return httpx.Response(503)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(make_client(handler).upload("clubs/x.png", b"0123456789"))
    assert calls == ["start", "upload"]


def test_get_download_url_uses_first_token():
    def handler(request):
        assert request.url.raw_path.decode().endswith("/o/clubs%2F1-logo%20big.png")
        return httpx.Response(200, json={"downloadTokens": "tok-a,tok-b"})

    url = asyncio.run(make_client(handler).get_download_url("clubs/1-logo big.png"))
    assert url == (
        "https://firebasestorage.googleapis.com/v0/b/demo.appspot.com/o/"
        "clubs%2F1-logo%20big.png?alt=media&token=tok-a"
    )


def test_get_download_url_without_token():
    with pytest.raises(StorageError):
        asyncio.run(make_client(lambda request: httpx.Response(200, json={})).get_download_url("clubs/x.png"))
