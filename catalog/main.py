"""Catalog Manager — players, clubs e trophies su Firestore e Firebase Storage."""

import asyncio
import logging
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from catalog.core.backend import get_controller
from catalog.core.config import load_on_startup
from catalog.routers import catalog_router, health_router
from catalog.routers.catalog import catalog_controller
from catalog.schemas.entities import AWARD_OPTIONS
from catalog.services.catalog_service import CatalogController

logger = logging.getLogger(__name__)

TABS = ("players", "clubs", "trophies")

app = FastAPI(
    title="Catalog Manager",
    description="Track players, clubs and trophies. Storage and documents on a managed Firebase backend.",
    version="0.1.0",
)

app.include_router(health_router)
app.include_router(catalog_router)

templates_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))

# Task del caricamento iniziale (riferimento tenuto per non perderlo col GC)
_load_task: asyncio.Task | None = None


@app.get("/", include_in_schema=False)
async def index(
    request: Request,
    tab: str = "players",
    controller: CatalogController = Depends(catalog_controller),
):
    """
    Pagina unica a tab. I toast in attesa vengono mostrati (e svuotati) al render.
    Se nessun caricamento è mai partito (startup disattivato) le collezioni si caricano qui.
    """
    if tab not in TABS:
        tab = "players"
    if not controller.loaded and not controller.loading:
        await controller.load()
    return templates.TemplateResponse(
        request,
        "catalog.html",
        {
            "tabs": TABS,
            "active_tab": tab,
            "loading": controller.loading,
            "rows": controller.rows(),
            "players": controller.items("players"),
            "clubs": controller.items("clubs"),
            "trophies": controller.items("trophies"),
            "award_options": AWARD_OPTIONS,
            "toasts": controller.drain_notifications(),
        },
    )


static_dir = Path(__file__).parent / "static"
if static_dir.exists():
    app.mount("/static", StaticFiles(directory=str(static_dir), html=True), name="static")


@app.on_event("startup")
async def on_startup():
    """Avvia il caricamento delle collezioni senza bloccare l'avvio del server."""
    global _load_task
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    if not load_on_startup():
        logger.info("Caricamento iniziale disattivato (CATALOG_LOAD_ON_STARTUP)")
        return
    try:
        controller = get_controller()
    except RuntimeError as e:
        logger.warning("Caricamento iniziale saltato, configurazione mancante: %s", e)
        return
    _load_task = asyncio.create_task(controller.load())
