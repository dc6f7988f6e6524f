"""Client del backend gestito e controller condiviso, creati alla prima richiesta."""

import logging

from catalog.services.catalog_service import CatalogController
from catalog.services.firestore_client import FirestoreClient
from catalog.services.storage_client import StorageClient

logger = logging.getLogger(__name__)

_controller: CatalogController | None = None


def get_controller() -> CatalogController:
    """
    Dependency che ritorna il controller del processo (stato in memoria condiviso).
    Raises RuntimeError se la configurazione Firebase manca.
    """
    global _controller
    if _controller is None:
        _controller = CatalogController(store=FirestoreClient(), storage=StorageClient())
        logger.info("CatalogController inizializzato")
    return _controller


def reset_controller() -> None:
    """Scarta il controller corrente; il prossimo get_controller() ne crea uno nuovo."""
    global _controller
    _controller = None
