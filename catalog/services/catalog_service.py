"""
Controller del catalogo: stato in memoria delle tre collezioni, create/edit/delete
con upload immagine, notifiche (toast) e avanzamento upload per tipo.
Nessuno stato durevole: tutto passa da Firestore e Storage.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from catalog.schemas.catalog import EntityRow, OperationState, Toast
from catalog.schemas.entities import AWARD_OPTIONS, Trophy, normalize_awards
from catalog.services.display import build_rows
from catalog.services.entity_specs import ENTITY_SPECS, EntitySpec, get_spec
from catalog.services.firestore_client import FirestoreClient
from catalog.services.storage_client import StorageClient, object_path

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Errore di un'operazione, con il messaggio da mostrare all'utente."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(CatalogError):
    """Campo obbligatorio o immagine mancante: nessuna I/O eseguita."""


class EntityNotFound(CatalogError):
    """Id non presente nella lista in memoria."""


class BackendFailure(CatalogError):
    """Upload o scrittura/cancellazione del documento fallita."""


@dataclass
class ImageUpload:
    filename: str
    data: bytes
    content_type: str = "application/octet-stream"


@dataclass
class OperationResult:
    ok: bool
    entity: BaseModel | None = None
    toast: Toast | None = None
    error: CatalogError | None = None


def progress_percentage(transferred: int, total: int) -> int:
    """Byte trasferiti -> percentuale intera 0-100 (file vuoto = 100)."""
    if total <= 0:
        return 100
    return max(0, min(100, round(transferred / total * 100)))


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _normalize_trophy(trophy: Trophy) -> Trophy:
    awards, winners = normalize_awards(trophy.awards, trophy.award_winners)
    winner_id = trophy.winner_id.strip() if trophy.winner_id else None
    return trophy.model_copy(update={"awards": awards, "award_winners": winners, "winner_id": winner_id or None})


class CatalogController:
    """Gestisce le liste di players, clubs e trophies e le loro mutazioni."""

    def __init__(self, store: FirestoreClient, storage: StorageClient):
        self._store = store
        self._storage = storage
        self._items: dict[str, list[BaseModel]] = {kind: [] for kind in ENTITY_SPECS}
        self._progress: dict[str, int] = {kind: 0 for kind in ENTITY_SPECS}
        self._states: dict[str, OperationState] = {kind: OperationState.IDLE for kind in ENTITY_SPECS}
        self._toasts: list[Toast] = []
        self.loading = False
        self.loaded = False

    # --- Lettura stato ---

    def items(self, kind: str) -> list[BaseModel]:
        """Copia della lista: lo stato si modifica solo tramite le operazioni."""
        return list(self._items[kind])

    def find(self, kind: str, entity_id: str) -> BaseModel | None:
        return next((e for e in self._items[kind] if e.id == entity_id), None)

    def progress(self, kind: str) -> int:
        return self._progress[kind]

    def state(self, kind: str) -> OperationState:
        return self._states[kind]

    def rows(self) -> dict[str, list[EntityRow]]:
        return build_rows(self._items["players"], self._items["clubs"], self._items["trophies"])

    def snapshot(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            kind: [e.model_dump(by_alias=True) for e in entities]
            for kind, entities in self._items.items()
        }
        data["loading"] = self.loading
        data["rows"] = self.rows()
        data["progress"] = {
            kind: {"percentage": self._progress[kind], "state": self._states[kind]}
            for kind in ENTITY_SPECS
        }
        data["award_options"] = list(AWARD_OPTIONS)
        return data

    # --- Notifiche ---

    def _notify(self, level: str, message: str) -> Toast:
        toast = Toast(level=level, message=message)
        self._toasts.append(toast)
        return toast

    def drain_notifications(self) -> list[Toast]:
        toasts, self._toasts = self._toasts, []
        return toasts

    # --- Caricamento ---

    async def load(self) -> None:
        """Carica le tre collezioni in parallelo; ogni lista si aggiorna indipendentemente."""
        self.loading = True
        try:
            await asyncio.gather(*(self._load_collection(spec) for spec in ENTITY_SPECS.values()))
        finally:
            self.loading = False
            self.loaded = True

    async def _load_collection(self, spec: EntitySpec) -> None:
        try:
            documents = await self._store.list_documents(spec.collection)
        except Exception as e:
            # Lista lasciata all'ultimo valore valido (vuota al primo caricamento)
            logger.exception("Caricamento %s fallito: %s", spec.collection, e)
            self._notify("error", f"Failed to fetch {spec.collection}")
            return
        entities = []
        for doc_id, data in documents:
            try:
                entities.append(spec.model.model_validate({**data, "id": doc_id}))
            except ValidationError as e:
                logger.warning("Documento %s/%s ignorato, dati non validi: %s", spec.collection, doc_id, e)
        self._items[spec.kind] = entities
        logger.info("Caricati %s %s", len(entities), spec.collection)

    # --- Upload ---

    async def upload_image(self, spec: EntitySpec, image: ImageUpload) -> str:
        """
        Upload con avanzamento 0-100 per tipo; ritorna l'URL pubblico.
        Un errore azzera l'avanzamento e diventa BackendFailure (nessun retry).
        """
        path = object_path(spec.collection, image.filename)
        self._progress[spec.kind] = 0

        def on_progress(transferred: int, total: int) -> None:
            self._progress[spec.kind] = progress_percentage(transferred, total)

        try:
            await self._storage.upload(path, image.data, image.content_type, on_progress)
            url = await self._storage.get_download_url(path)
        except Exception as e:
            self._progress[spec.kind] = 0
            logger.exception("Upload %s fallito: %s", path, e)
            self._notify("error", f"Upload error: {e}")
            raise BackendFailure(f"Upload error: {e}") from e
        self._progress[spec.kind] = 100
        return url

    def _fail(self, spec: EntitySpec, error: CatalogError) -> OperationResult:
        self._states[spec.kind] = OperationState.FAILED
        return OperationResult(ok=False, toast=self._notify("error", error.message), error=error)

    # --- Mutazioni ---

    async def create(self, kind: str, form: BaseModel, image: ImageUpload | None) -> OperationResult:
        """Valida, carica l'immagine, inserisce il documento e aggiunge l'entità alla lista."""
        spec = get_spec(kind)
        values = form.model_dump()
        missing = [field for field in spec.required if _is_blank(values.get(field))]
        if image is None or missing:
            logger.warning("Create %s rifiutato: immagine=%s campi mancanti=%s", kind, image is not None, missing)
            return self._fail(spec, ValidationFailed(spec.missing_fields_message))

        try:
            self._states[kind] = OperationState.UPLOADING
            url = await self.upload_image(spec, image)
            entity = spec.model.model_validate({**values, "id": "", spec.image_field: url})
            if isinstance(entity, Trophy):
                entity = _normalize_trophy(entity)
            self._states[kind] = OperationState.WRITING
            new_id = await self._store.add_document(spec.collection, spec.to_document(entity))
        except Exception as e:
            logger.exception("Create %s fallito: %s", kind, e)
            return self._fail(spec, BackendFailure(f"Failed to add {spec.label}"))
        finally:
            self._progress[kind] = 0

        entity = entity.model_copy(update={"id": new_id})
        self._items[kind].append(entity)
        self._states[kind] = OperationState.DONE
        return OperationResult(ok=True, entity=entity, toast=self._notify("success", f"{spec.title} added!"))

    async def edit(
        self,
        kind: str,
        entity_id: str,
        changes: BaseModel,
        image: ImageUpload | None = None,
    ) -> OperationResult:
        """
        Sovrascrive i campi modificabili (update parziale) e, se c'è un nuovo file,
        l'URL immagine; altrimenti l'URL resta quello esistente.
        I campi fuori dal form restano invariati in memoria e nel documento.
        """
        spec = get_spec(kind)
        current = self.find(kind, entity_id)
        if current is None:
            logger.warning("Edit %s id=%s: entità non trovata", kind, entity_id)
            return self._fail(spec, EntityNotFound(f"{spec.title} not found"))

        merged = current.model_copy(update=changes.model_dump(exclude_unset=True))
        if isinstance(merged, Trophy):
            merged = _normalize_trophy(merged)
        missing = [field for field in spec.required if _is_blank(getattr(merged, field))]
        if missing:
            logger.warning("Edit %s id=%s rifiutato: campi mancanti=%s", kind, entity_id, missing)
            return self._fail(spec, ValidationFailed("Please fill all required fields."))

        try:
            url = getattr(current, spec.image_field)
            if image is not None:
                self._states[kind] = OperationState.UPLOADING
                url = await self.upload_image(spec, image)
            merged = merged.model_copy(update={spec.image_field: url})
            self._states[kind] = OperationState.WRITING
            await self._store.update_document(spec.collection, entity_id, spec.to_update(merged))
        except Exception as e:
            logger.exception("Edit %s id=%s fallito: %s", kind, entity_id, e)
            return self._fail(spec, BackendFailure(f"Failed to update {spec.label}"))
        finally:
            self._progress[kind] = 0

        self._items[kind] = [merged if e.id == entity_id else e for e in self._items[kind]]
        self._states[kind] = OperationState.DONE
        return OperationResult(ok=True, entity=merged, toast=self._notify("success", f"{spec.title} updated!"))

    async def delete(self, kind: str, entity_id: str, confirmed: bool) -> OperationResult:
        """Senza conferma non fa nulla (nessuna I/O, nessun toast)."""
        spec = get_spec(kind)
        if not confirmed:
            return OperationResult(ok=False)
        if self.find(kind, entity_id) is None:
            logger.warning("Delete %s id=%s: entità non trovata", kind, entity_id)
            return self._fail(spec, EntityNotFound(f"{spec.title} not found"))
        try:
            await self._store.delete_document(spec.collection, entity_id)
        except Exception as e:
            logger.exception("Delete %s id=%s fallito: %s", kind, entity_id, e)
            return self._fail(spec, BackendFailure(f"Failed to delete {spec.label}"))

        self._items[kind] = [e for e in self._items[kind] if e.id != entity_id]
        self._states[kind] = OperationState.DONE
        return OperationResult(ok=True, toast=self._notify("success", f"{spec.title} deleted!"))
