"""
Storage backend abstraction.

Supports multiple storage backends:
- FileBackend: Local JSON files (default)
- SupabaseBackend: Cloud PostgreSQL
"""

from imagesurvey.storage.protocol import SurveyBackend
from imagesurvey.storage.file_backend import FileBackend
from imagesurvey.storage.factory import create_backend

__all__ = [
    'SurveyBackend',
    'FileBackend',
    'create_backend',
]
