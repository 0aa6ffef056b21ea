"""
File-based Storage Backend.

Implements the SurveyBackend protocol with one JSON file per document
under a local data directory. This is the default backend.
"""

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)


class FileBackend:
    """
    Local file storage.

    Structure:
    - {root}/surveys/{survey_id}.json: Survey documents
    - {root}/submissions/{survey_id}/{submission_id}.json: Submissions
    """

    def __init__(self, root: str):
        self.root = Path(root)
        self.surveys_dir = self.root / "surveys"
        self.submissions_dir = self.root / "submissions"

        self.surveys_dir.mkdir(parents=True, exist_ok=True)
        self.submissions_dir.mkdir(parents=True, exist_ok=True)

    @property
    def backend_type(self) -> str:
        return "file"

    # --- Helpers ---

    def _survey_path(self, survey_id: str) -> Path:
        return self.surveys_dir / f"{survey_id}.json"

    @staticmethod
    def _read_json(path: Path) -> Optional[Dict[str, Any]]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            return None

    @staticmethod
    def _write_json(path: Path, data: Dict[str, Any]) -> None:
        # Write to a sibling file first so readers never see a partial document
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)

    # --- Survey Operations ---

    def list_surveys(self) -> List[Dict[str, Any]]:
        surveys = []
        for survey_file in sorted(self.surveys_dir.glob("*.json")):
            data = self._read_json(survey_file)
            if data is None:
                continue
            data.setdefault("id", survey_file.stem)
            surveys.append(data)
        return surveys

    def load_survey(self, survey_id: str) -> Optional[Dict[str, Any]]:
        path = self._survey_path(survey_id)
        if not path.exists():
            return None
        data = self._read_json(path)
        if data is not None:
            data["id"] = survey_id
        return data

    def find_survey_by_code(self, code: str) -> Optional[Dict[str, Any]]:
        for survey in self.list_surveys():
            if survey.get("code") == code:
                return survey
        return None

    def code_exists(self, code: str) -> bool:
        return self.find_survey_by_code(code) is not None

    def save_survey(self, survey_id: str, survey_data: Dict[str, Any]) -> None:
        data = dict(survey_data, id=survey_id)
        self._write_json(self._survey_path(survey_id), data)

    def delete_survey(self, survey_id: str) -> bool:
        path = self._survey_path(survey_id)
        submissions_path = self.submissions_dir / survey_id
        if submissions_path.exists():
            shutil.rmtree(submissions_path)
        if not path.exists():
            return False
        path.unlink()
        return True

    # --- Submission Operations ---

    def save_submission(self, survey_id: str, submission_data: Dict[str, Any]) -> None:
        submission_id = submission_data.get("id")
        if not submission_id:
            raise ValueError("Submission data missing id")

        survey_dir = self.submissions_dir / survey_id
        survey_dir.mkdir(parents=True, exist_ok=True)
        data = dict(submission_data, surveyId=survey_id)
        data.setdefault("submittedAt", datetime.now(timezone.utc).isoformat())
        self._write_json(survey_dir / f"{submission_id}.json", data)

    def load_submissions(self, survey_id: str) -> List[Dict[str, Any]]:
        survey_dir = self.submissions_dir / survey_id
        if not survey_dir.exists():
            return []

        submissions = []
        for path in survey_dir.glob("*.json"):
            data = self._read_json(path)
            if data is not None:
                submissions.append(data)
        return sorted(submissions, key=lambda s: (s.get("submittedAt", ""), s.get("id", "")))
