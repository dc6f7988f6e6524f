from catalog.routers.catalog import router as catalog_router
from catalog.routers.health import router as health_router

__all__ = ["health_router", "catalog_router"]
