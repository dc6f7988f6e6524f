"""Health check router."""

from fastapi import APIRouter

from catalog.core.config import get_firebase_project_id, get_storage_bucket

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Health check; segnala anche se la configurazione Firebase è presente."""
    try:
        get_firebase_project_id()
        get_storage_bucket()
        configured = True
    except RuntimeError:
        configured = False
    return {"status": "healthy", "firebase_configured": configured}
