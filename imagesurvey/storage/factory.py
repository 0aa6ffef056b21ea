"""
Backend Factory.

Creates the configured storage backend: FileBackend (default) or SupabaseBackend.
"""

import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from imagesurvey.config import DEFAULT_BACKEND, get_settings
from imagesurvey.storage.file_backend import FileBackend

if TYPE_CHECKING:
    from imagesurvey.storage.protocol import SurveyBackend

logger = logging.getLogger(__name__)


def create_backend(
    settings: Optional[Dict[str, Any]] = None,
    supabase_client=None,
    force_backend: Optional[str] = None,
) -> "SurveyBackend":
    """
    Create a storage backend instance.

    Args:
        settings: Resolved settings (see config.get_settings); loaded if omitted
        supabase_client: Optional Supabase client for cloud storage
        force_backend: Override the configured backend type

    Returns:
        SurveyBackend instance (FileBackend or SupabaseBackend)
    """
    settings = settings or get_settings()
    backend_type = force_backend or settings.get("storage_backend", DEFAULT_BACKEND)

    if backend_type == "supabase":
        from imagesurvey.storage.supabase_backend import SupabaseBackend
        logger.info("Using Supabase storage backend")
        return SupabaseBackend(
            client=supabase_client,
            supabase_url=settings.get("supabase_url"),
            supabase_key=settings.get("supabase_key"),
        )

    if backend_type != DEFAULT_BACKEND:
        logger.warning(f"Unknown storage backend '{backend_type}', falling back to {DEFAULT_BACKEND}")
    logger.info(f"Using file storage backend at {settings['data_dir']}")
    return FileBackend(settings["data_dir"])
