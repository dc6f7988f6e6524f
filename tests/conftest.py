import asyncio
import itertools
import os

import pytest

os.environ.setdefault("FIREBASE_PROJECT_ID", "test-project")
os.environ.setdefault("FIREBASE_STORAGE_BUCKET", "test-bucket.appspot.com")
os.environ.setdefault("CATALOG_LOAD_ON_STARTUP", "false")

from catalog.services.catalog_service import CatalogController, ImageUpload  # noqa: E402


class FakeStore:
    """Firestore in memoria; registra ogni chiamata."""

    def __init__(self, collections=None):
        self.collections = {name: dict(docs) for name, docs in (collections or {}).items()}
        self.calls = []
        self.fail = set()  # nomi di metodo o (metodo, collezione) che devono fallire
        self._ids = itertools.count(1)
        self.observe = None  # callable chiamato a ogni scrittura
        self.observed = []

    def _check(self, method, collection):
        self.calls.append((method, collection))
        if self.observe is not None and method != "list_documents":
            self.observed.append(self.observe())
        if method in self.fail or (method, collection) in self.fail:
            raise RuntimeError(f"{method} {collection} failed")

    async def list_documents(self, collection):
        self._check("list_documents", collection)
        return [(doc_id, dict(data)) for doc_id, data in self.collections.get(collection, {}).items()]

    async def add_document(self, collection, data):
        self._check("add_document", collection)
        new_id = f"{collection}-{next(self._ids)}"
        self.collections.setdefault(collection, {})[new_id] = dict(data)
        return new_id

    async def update_document(self, collection, doc_id, data):
        self._check("update_document", collection)
        docs = self.collections.setdefault(collection, {})
        if doc_id not in docs:
            raise KeyError(doc_id)
        docs[doc_id].update(data)

    async def delete_document(self, collection, doc_id):
        self._check("delete_document", collection)
        self.collections.get(collection, {}).pop(doc_id, None)


class FakeStorage:
    """Storage in memoria: upload in due passi di avanzamento."""

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail_upload = False
        self.observe = None  # callable chiamato dopo ogni passo di avanzamento
        self.observed = []

    async def upload(self, path, data, content_type="application/octet-stream", on_progress=None):
        self.calls.append(("upload", path))
        if self.fail_upload:
            raise RuntimeError("network down")
        half = len(data) // 2
        for done in (half, len(data)):
            if on_progress is not None:
                on_progress(done, len(data))
            if self.observe is not None:
                self.observed.append(self.observe())
        self.objects[path] = data
        return {"name": path, "downloadTokens": "tok"}

    async def get_download_url(self, path):
        self.calls.append(("get_download_url", path))
        return f"https://files.example/{path}?token=tok"


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def controller(store, storage):
    return CatalogController(store=store, storage=storage)


@pytest.fixture
def image():
    return ImageUpload(filename="logo.png", data=b"\x89PNG" + b"0" * 96, content_type="image/png")


@pytest.fixture
def seeded_store():
    return FakeStore(
        {
            "players": {
                "p1": {
                    "fullName": "Marco Rossi",
                    "age": 24,
                    "nationality": "Italy",
                    "club": "Riverside FC",
                    "goals": 10,
                    "assists": 4,
                    "pfp": "https://files.example/players/old.png",
                },
                "p2": {
                    "fullName": "Luca Bianchi",
                    "age": 29,
                    "nationality": "Italy",
                    "club": "Harbor United",
                    "goals": 2,
                    "assists": 9,
                    "pfp": "https://files.example/players/p2.png",
                },
            },
            "clubs": {
                "c1": {
                    "name": "Riverside FC",
                    "logo": "https://files.example/clubs/c1.png",
                    "president": "A. Smith",
                    "coach": "J. Doe",
                },
            },
            "trophies": {
                "t1": {
                    "name": "League Cup",
                    "image": "https://files.example/trophies/t1.png",
                    "winnerId": "c1",
                    "awards": ["Golden Boot", "MVP"],
                    "awardWinners": {"Golden Boot": "p1"},
                },
            },
        }
    )


@pytest.fixture
def seeded_controller(seeded_store, storage):
    controller = CatalogController(store=seeded_store, storage=storage)
    asyncio.run(controller.load())
    seeded_store.calls.clear()
    return controller
