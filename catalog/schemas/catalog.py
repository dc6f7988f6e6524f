"""Pydantic schemas per le risposte dell'API del catalogo."""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class OperationState(str, Enum):
    """Stato dell'ultima operazione per tipo: idle -> uploading -> writing -> done | failed."""
    IDLE = "idle"
    UPLOADING = "uploading"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


class Toast(BaseModel):
    level: str  # "success" | "error"
    message: str


class EntityRow(BaseModel):
    """Riga di lista già pronta per il rendering (join risolti)."""
    id: str
    title: str
    image: str
    lines: list[str]


class UploadProgress(BaseModel):
    percentage: int
    state: OperationState


class OperationResponse(BaseModel):
    ok: bool
    entity: dict[str, Any] | None = None
    toast: Toast | None = None


class CatalogSnapshot(BaseModel):
    loading: bool
    players: list[dict[str, Any]]
    clubs: list[dict[str, Any]]
    trophies: list[dict[str, Any]]
    rows: dict[str, list[EntityRow]]
    progress: dict[str, UploadProgress]
    award_options: list[str]
