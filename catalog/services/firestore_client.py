"""
Client per Firestore (REST v1).
Solo le operazioni usate dal catalogo: list-all, insert con id automatico,
update parziale per id, delete per id. Nessun filtro, ordinamento o query.
"""

import logging
from typing import Any

import httpx

from catalog.core.config import (
    get_firebase_api_key,
    get_firebase_project_id,
    get_firestore_emulator_host,
    get_http_timeout,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://firestore.googleapis.com/v1"
PAGE_SIZE = 300


# --- Codec valori Firestore ---


def encode_value(value: Any) -> dict[str, Any]:
    """Converte un valore Python nel valore tipizzato di Firestore."""
    if value is None:
        return {"nullValue": None}
    # bool prima di int: bool è sottoclasse di int
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Tipo non supportato per Firestore: {type(value).__name__}")


def encode_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {str(key): encode_value(value) for key, value in data.items()}


def decode_value(value: dict[str, Any]) -> Any:
    """Inverso di encode_value. Timestamp e reference restano stringhe."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return value["timestampValue"]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    raise ValueError(f"Valore Firestore non riconosciuto: {sorted(value)}")


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def document_id(name: str) -> str:
    """'projects/p/databases/(default)/documents/players/abc' -> 'abc'."""
    return name.rstrip("/").rsplit("/", 1)[-1]


class FirestoreClient:
    """Client async per le collezioni del catalogo su Firestore."""

    def __init__(
        self,
        project_id: str | None = None,
        api_key: str | None = None,
        emulator_host: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._project_id = project_id or get_firebase_project_id()
        self._api_key = api_key if api_key is not None else get_firebase_api_key()
        host = emulator_host if emulator_host is not None else get_firestore_emulator_host()
        base = f"http://{host}/v1" if host else BASE_URL
        self._documents_url = f"{base}/projects/{self._project_id}/databases/(default)/documents"
        self._timeout = timeout if timeout is not None else get_http_timeout()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def _params(self, extra: list[tuple[str, str]] | None = None) -> list[tuple[str, str]]:
        params = list(extra or [])
        if self._api_key:
            params.append(("key", self._api_key))
        return params

    async def list_documents(self, collection: str) -> list[tuple[str, dict[str, Any]]]:
        """
        Ritorna tutti i documenti della collezione come (id, dati).
        Segue nextPageToken fino all'ultima pagina; collezione vuota -> [].
        """
        documents: list[tuple[str, dict[str, Any]]] = []
        page_token: str | None = None
        async with self._client() as client:
            while True:
                extra = [("pageSize", str(PAGE_SIZE))]
                if page_token:
                    extra.append(("pageToken", page_token))
                r = await client.get(
                    f"{self._documents_url}/{collection}",
                    params=self._params(extra),
                )
                r.raise_for_status()
                data = r.json()
                for raw in data.get("documents", []):
                    documents.append((document_id(raw["name"]), decode_fields(raw.get("fields", {}))))
                page_token = data.get("nextPageToken")
                if not page_token:
                    break
        logger.info("list_documents collection=%s -> %s documenti", collection, len(documents))
        return documents

    async def add_document(self, collection: str, data: dict[str, Any]) -> str:
        """Inserisce un documento con id assegnato dal backend e ritorna l'id."""
        async with self._client() as client:
            r = await client.post(
                f"{self._documents_url}/{collection}",
                params=self._params(),
                json={"fields": encode_fields(data)},
            )
            r.raise_for_status()
            created = r.json()
        new_id = document_id(created["name"])
        logger.info("add_document collection=%s -> id=%s", collection, new_id)
        return new_id

    async def update_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """
        Update parziale: solo i campi in `data` (updateMask), gli altri restano.
        Il documento deve esistere (currentDocument.exists=true), altrimenti 404.
        """
        extra = [("updateMask.fieldPaths", key) for key in data]
        extra.append(("currentDocument.exists", "true"))
        async with self._client() as client:
            r = await client.patch(
                f"{self._documents_url}/{collection}/{doc_id}",
                params=self._params(extra),
                json={"fields": encode_fields(data)},
            )
            r.raise_for_status()
        logger.info("update_document collection=%s id=%s campi=%s", collection, doc_id, sorted(data))

    async def delete_document(self, collection: str, doc_id: str) -> None:
        async with self._client() as client:
            r = await client.delete(
                f"{self._documents_url}/{collection}/{doc_id}",
                params=self._params(),
            )
            r.raise_for_status()
        logger.info("delete_document collection=%s id=%s", collection, doc_id)
