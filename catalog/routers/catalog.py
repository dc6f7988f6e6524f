"""
API del catalogo: snapshot, reload, notifiche e create/edit/delete per tipo.
Le operazioni passano dal controller; qui solo parsing del form e mapping degli errori su HTTP.
"""

import logging
import types
from typing import Any, Union, get_args, get_origin

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.datastructures import FormData, UploadFile

from catalog.core.backend import get_controller
from catalog.schemas.catalog import CatalogSnapshot, OperationResponse, UploadProgress
from catalog.services.catalog_service import (
    CatalogController,
    EntityNotFound,
    ImageUpload,
    OperationResult,
    ValidationFailed,
)
from catalog.services.entity_specs import ENTITY_SPECS, EntitySpec

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["catalog"])


def catalog_controller() -> CatalogController:
    """Dependency: controller condiviso; 503 se Firebase non è configurato."""
    try:
        return get_controller()
    except RuntimeError as e:
        logger.warning("catalog_controller config: %s", e)
        raise HTTPException(
            status_code=503,
            detail="Backend non configurato (FIREBASE_PROJECT_ID / FIREBASE_STORAGE_BUCKET?)",
        )


def _spec_or_404(kind: str) -> EntitySpec:
    spec = ENTITY_SPECS.get(kind)
    if spec is None:
        raise HTTPException(status_code=404, detail=f"Tipo sconosciuto: {kind}")
    return spec


def _base_type(annotation: Any) -> Any:
    """list[str] | None -> list, int | None -> int."""
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        annotation = args[0]
        origin = get_origin(annotation)
    return origin or annotation


def _form_payload(model: type[BaseModel], form: FormData) -> dict[str, Any]:
    """
    Estrae dal form multipart solo i campi del modello (per alias).
    Liste: valori ripetuti; dict: chiavi '<alias>.<chiave>'. Il campo compare nel
    payload solo se inviato, così un edit lascia invariati i campi assenti.
    Numeri vuoti sono ignorati.
    """
    payload: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        alias = field.alias or name
        base = _base_type(field.annotation)
        if base is list:
            if alias in form:
                payload[alias] = [v for v in form.getlist(alias) if isinstance(v, str) and v.strip()]
        elif base is dict:
            prefix = f"{alias}."
            entries = {
                key[len(prefix):]: value
                for key, value in form.multi_items()
                if key.startswith(prefix) and isinstance(value, str)
            }
            if entries or alias in form:
                payload[alias] = entries
        elif alias in form:
            value = form[alias]
            if not isinstance(value, str):
                continue
            if base is int and not value.strip():
                continue
            payload[alias] = value.strip() if base is int else value
    return payload


def _parse_form(model: type[BaseModel], form: FormData) -> BaseModel:
    try:
        return model.model_validate(_form_payload(model, form))
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        logger.warning("Form %s non valido: %s", model.__name__, fields)
        raise HTTPException(status_code=400, detail=f"Invalid value for {', '.join(fields)}")


async def _read_image(form: FormData) -> ImageUpload | None:
    image = form.get("image")
    if not isinstance(image, UploadFile) or not image.filename:
        return None
    data = await image.read()
    return ImageUpload(
        filename=image.filename,
        data=data,
        content_type=image.content_type or "application/octet-stream",
    )


def _respond(result: OperationResult, controller: CatalogController) -> OperationResponse | JSONResponse:
    """
    Errore -> 400/404/502 con i toast in attesa (svuotati qui: li mostra il client,
    la pagina successiva non li ripete). Successo -> il toast resta per il render.
    """
    if result.error is not None:
        if isinstance(result.error, ValidationFailed):
            status = 400
        elif isinstance(result.error, EntityNotFound):
            status = 404
        else:
            status = 502
        toasts = [t.model_dump() for t in controller.drain_notifications()]
        return JSONResponse(status_code=status, content={"detail": result.error.message, "toasts": toasts})
    return OperationResponse(
        ok=result.ok,
        entity=result.entity.model_dump(by_alias=True) if result.entity is not None else None,
        toast=result.toast,
    )


@router.get("/catalog", response_model=CatalogSnapshot)
def catalog_snapshot(controller: CatalogController = Depends(catalog_controller)):
    """Liste, righe già risolte per il rendering, stato di caricamento e avanzamento upload."""
    return controller.snapshot()


@router.post("/catalog/reload", response_model=CatalogSnapshot)
async def reload_catalog(controller: CatalogController = Depends(catalog_controller)):
    """Ricarica le tre collezioni; un fetch fallito lascia la lista com'era."""
    await controller.load()
    return controller.snapshot()


@router.get("/notifications")
def notifications(controller: CatalogController = Depends(catalog_controller)):
    """Toast in attesa (letti e svuotati)."""
    return {"toasts": controller.drain_notifications()}


@router.get("/{kind}")
def list_entities(kind: str, controller: CatalogController = Depends(catalog_controller)):
    _spec_or_404(kind)
    return [e.model_dump(by_alias=True) for e in controller.items(kind)]


@router.get("/{kind}/progress", response_model=UploadProgress)
def upload_progress(kind: str, controller: CatalogController = Depends(catalog_controller)):
    _spec_or_404(kind)
    return UploadProgress(percentage=controller.progress(kind), state=controller.state(kind))


@router.post("/{kind}", response_model=OperationResponse)
async def create_entity(
    kind: str,
    request: Request,
    controller: CatalogController = Depends(catalog_controller),
):
    """
    Crea un'entità da form multipart con file 'image' obbligatorio.
    400 se mancano campi o immagine, 502 se upload o scrittura falliscono.
    """
    spec = _spec_or_404(kind)
    form = await request.form()
    model = _parse_form(spec.create_form, form)
    image = await _read_image(form)
    return _respond(await controller.create(kind, model, image), controller)


@router.put("/{kind}/{entity_id}", response_model=OperationResponse)
async def edit_entity(
    kind: str,
    entity_id: str,
    request: Request,
    controller: CatalogController = Depends(catalog_controller),
):
    """Modifica i campi inviati; 'image' opzionale (senza, l'URL resta invariato)."""
    spec = _spec_or_404(kind)
    form = await request.form()
    changes = _parse_form(spec.edit_form, form)
    image = await _read_image(form)
    return _respond(await controller.edit(kind, entity_id, changes, image), controller)


@router.delete("/{kind}/{entity_id}", response_model=OperationResponse)
async def delete_entity(
    kind: str,
    entity_id: str,
    confirmed: bool = False,
    controller: CatalogController = Depends(catalog_controller),
):
    """Elimina solo con confirmed=true; senza conferma risponde ok=false e non tocca nulla."""
    _spec_or_404(kind)
    return _respond(await controller.delete(kind, entity_id, confirmed), controller)
