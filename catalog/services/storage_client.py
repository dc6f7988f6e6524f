"""
Client per Firebase Storage (REST v0).
Upload resumable a chunk con callback di avanzamento e risoluzione del download URL pubblico.
Nessun retry: un errore di trasporto o HTTP interrompe l'upload e viene propagato.
"""

import logging
import time
from typing import Any, Callable
from urllib.parse import quote

import httpx

from catalog.core.config import (
    get_http_timeout,
    get_storage_bucket,
    get_storage_emulator_host,
    get_upload_chunk_size,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://firebasestorage.googleapis.com/v0"

ProgressCallback = Callable[[int, int], None]


class StorageError(Exception):
    """Risposta inattesa dal servizio di storage (es. sessione o token mancanti)."""


def object_path(prefix: str, filename: str, now_ms: int | None = None) -> str:
    """
    Path dell'oggetto: '<prefix>/<epoch millis>-<nome originale>'.
    Nessuna gestione collisioni oltre all'unicità del timestamp.
    """
    millis = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{prefix}/{millis}-{filename}"


class StorageClient:
    """Client async per il bucket immagini."""

    def __init__(
        self,
        bucket: str | None = None,
        emulator_host: str | None = None,
        chunk_size: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._bucket = bucket or get_storage_bucket()
        host = emulator_host if emulator_host is not None else get_storage_emulator_host()
        base = f"http://{host}/v0" if host else BASE_URL
        self._objects_url = f"{base}/b/{self._bucket}/o"
        self._chunk_size = max(1, chunk_size or get_upload_chunk_size())
        self._timeout = timeout if timeout is not None else get_http_timeout()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """
        Upload resumable: 'start' apre la sessione, poi i byte a chunk
        (l'ultimo con 'upload, finalize'). Dopo ogni chunk chiama
        on_progress(byte_trasferiti, byte_totali). Ritorna i metadata dell'oggetto.
        """
        total = len(data)
        async with self._client() as client:
            r = await client.post(
                self._objects_url,
                params={"name": path},
                headers={
                    "X-Goog-Upload-Protocol": "resumable",
                    "X-Goog-Upload-Command": "start",
                    "X-Goog-Upload-Header-Content-Length": str(total),
                    "X-Goog-Upload-Header-Content-Type": content_type,
                },
                json={"name": path, "contentType": content_type},
            )
            r.raise_for_status()
            session_url = r.headers.get("X-Goog-Upload-URL")
            if not session_url:
                raise StorageError(f"Sessione di upload non aperta per {path}")

            offset = 0
            while True:
                chunk = data[offset:offset + self._chunk_size]
                last = offset + len(chunk) >= total
                r = await client.post(
                    session_url,
                    headers={
                        "X-Goog-Upload-Command": "upload, finalize" if last else "upload",
                        "X-Goog-Upload-Offset": str(offset),
                    },
                    content=chunk,
                )
                r.raise_for_status()
                offset += len(chunk)
                if on_progress is not None:
                    on_progress(offset, total)
                if last:
                    break
            metadata = r.json()
        logger.info("upload path=%s -> %s byte in bucket %s", path, total, self._bucket)
        return metadata

    async def get_download_url(self, path: str) -> str:
        """URL pubblico con il primo download token dei metadata dell'oggetto."""
        encoded = quote(path, safe="")
        async with self._client() as client:
            r = await client.get(f"{self._objects_url}/{encoded}")
            r.raise_for_status()
            metadata = r.json()
        tokens = [t for t in str(metadata.get("downloadTokens") or "").split(",") if t]
        if not tokens:
            raise StorageError(f"Nessun download token per {path}")
        return f"{self._objects_url}/{encoded}?alt=media&token={tokens[0]}"
