"""
Supabase Storage Backend.

Implements the SurveyBackend protocol using Supabase PostgreSQL.

Tables:
- surveys(id text primary key, code text unique, title text,
          document jsonb, submission_count int)
- submissions(id text primary key, survey_id text references surveys,
              answers jsonb, created_at timestamptz default now())

Requires: pip install supabase
"""

import logging
import os
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

# Try to import supabase
try:
    from supabase import create_client, Client
    SUPABASE_AVAILABLE = True
except ImportError:
    SUPABASE_AVAILABLE = False
    Client = None


class SupabaseBackend:
    """Cloud storage backend using Supabase."""

    def __init__(
        self,
        client: Optional["Client"] = None,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
    ):
        """
        Initialize SupabaseBackend.

        Args:
            client: Optional pre-configured Supabase client
            supabase_url: Supabase project URL (or use SUPABASE_URL env)
            supabase_key: Supabase key (or use SUPABASE_KEY env)
        """
        if client:
            self._client = client
            return

        if not SUPABASE_AVAILABLE:
            raise ImportError(
                "supabase-py is required for SupabaseBackend. "
                "Install with: pip install supabase"
            )

        url = supabase_url or os.environ.get("SUPABASE_URL")
        key = supabase_key or os.environ.get("SUPABASE_KEY")
        if not url or not key:
            raise ValueError(
                "Supabase URL and key required. "
                "Set SUPABASE_URL and SUPABASE_KEY environment variables."
            )
        self._client = create_client(url, key)

    @property
    def backend_type(self) -> str:
        return "supabase"

    @staticmethod
    def _row_to_survey(row: Dict[str, Any]) -> Dict[str, Any]:
        document = dict(row.get("document") or {})
        document["id"] = row["id"]
        document["title"] = row.get("title", document.get("title", ""))
        if row.get("code"):
            document["code"] = row["code"]
        document["submissionCount"] = row.get("submission_count") or 0
        return document

    # --- Survey Operations ---

    def list_surveys(self) -> List[Dict[str, Any]]:
        try:
            response = self._client.table("surveys").select("*").execute()
        except Exception as e:
            logger.error(f"Failed to list surveys: {e}")
            return []
        return [self._row_to_survey(row) for row in response.data or []]

    def load_survey(self, survey_id: str) -> Optional[Dict[str, Any]]:
        response = self._client.table("surveys")\
            .select("*")\
            .eq("id", survey_id)\
            .execute()
        if not response.data:
            return None
        return self._row_to_survey(response.data[0])

    def find_survey_by_code(self, code: str) -> Optional[Dict[str, Any]]:
        response = self._client.table("surveys")\
            .select("*")\
            .eq("code", code)\
            .execute()
        if not response.data:
            return None
        return self._row_to_survey(response.data[0])

    def code_exists(self, code: str) -> bool:
        response = self._client.table("surveys")\
            .select("id")\
            .eq("code", code)\
            .execute()
        return bool(response.data)

    def save_survey(self, survey_id: str, survey_data: Dict[str, Any]) -> None:
        document = {k: v for k, v in survey_data.items() if k not in ("id", "code", "submissionCount")}
        row = {
            "id": survey_id,
            "title": survey_data.get("title", ""),
            "code": survey_data.get("code"),
            "document": document,
            "submission_count": survey_data.get("submissionCount", 0),
        }
        self._client.table("surveys").upsert(row).execute()

    def delete_survey(self, survey_id: str) -> bool:
        self._client.table("submissions").delete().eq("survey_id", survey_id).execute()
        response = self._client.table("surveys").delete().eq("id", survey_id).execute()
        return bool(response.data)

    # --- Submission Operations ---

    def save_submission(self, survey_id: str, submission_data: Dict[str, Any]) -> None:
        submission_id = submission_data.get("id")
        if not submission_id:
            raise ValueError("Submission data missing id")
        self._client.table("submissions").insert({
            "id": submission_id,
            "survey_id": survey_id,
            "answers": submission_data.get("answers", []),
        }).execute()

    def load_submissions(self, survey_id: str) -> List[Dict[str, Any]]:
        response = self._client.table("submissions")\
            .select("*")\
            .eq("survey_id", survey_id)\
            .order("created_at")\
            .execute()
        return [
            {"id": row["id"], "surveyId": row["survey_id"], "answers": row.get("answers") or []}
            for row in response.data or []
        ]
