from catalog.core.config import get_firebase_project_id, get_storage_bucket

__all__ = [
    "get_firebase_project_id",
    "get_storage_bucket",
]
