"""
SurveyBackend Protocol Definition.

This module defines the interface every storage backend implements.
Both FileBackend (local JSON files) and SupabaseBackend (cloud) conform to it.
Backends exchange raw survey/submission dicts in the stored camelCase shape;
conversion to model objects and migration happen in SurveyManager.
"""

from typing import Protocol, Dict, Any, List, Optional, runtime_checkable


@runtime_checkable
class SurveyBackend(Protocol):
    """Abstract protocol for survey storage backends."""

    @property
    def backend_type(self) -> str:
        """Return the backend type identifier ('file' or 'supabase')."""
        ...

    # --- Survey Operations ---

    def list_surveys(self) -> List[Dict[str, Any]]:
        """
        Load all stored surveys.

        Returns:
            List of raw survey dicts (unreadable documents are skipped)
        """
        ...

    def load_survey(self, survey_id: str) -> Optional[Dict[str, Any]]:
        """
        Load one survey by id.

        Returns:
            Raw survey dict, or None if it does not exist
        """
        ...

    def find_survey_by_code(self, code: str) -> Optional[Dict[str, Any]]:
        """Load the survey with the given share code, or None."""
        ...

    def code_exists(self, code: str) -> bool:
        """Return True if any stored survey already uses this share code."""
        ...

    def save_survey(self, survey_id: str, survey_data: Dict[str, Any]) -> None:
        """
        Create or overwrite a survey document.

        Args:
            survey_id: The survey's id
            survey_data: Full survey dict
        """
        ...

    def delete_survey(self, survey_id: str) -> bool:
        """
        Delete a survey and its submissions.

        Returns:
            True if the survey existed
        """
        ...

    # --- Submission Operations ---

    def save_submission(self, survey_id: str, submission_data: Dict[str, Any]) -> None:
        """Store one respondent submission (dict must carry its id)."""
        ...

    def load_submissions(self, survey_id: str) -> List[Dict[str, Any]]:
        """Return all submissions for a survey, oldest first."""
        ...
