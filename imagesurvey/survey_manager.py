"""
Survey persistence service.

Sits between the editor/respondent UI and a SurveyBackend:
- converts raw stored dicts to model objects, migrating legacy shapes on load
- validates documents before saving
- assigns ids and unique share codes on creation
- stores submissions and keeps the survey's submission count
"""

import logging
import random
import uuid
from dataclasses import replace
from typing import List, Optional

from imagesurvey.codes import DEFAULT_CODE_ATTEMPTS, generate_unique_code, is_survey_code
from imagesurvey.errors import MissingReferenceError, ValidationError
from imagesurvey.migration import migrate_survey_dict
from imagesurvey.models import Submission, Survey
from imagesurvey.storage.protocol import SurveyBackend

logger = logging.getLogger(__name__)


def validate_survey(survey: Survey) -> None:
    """Raise ValidationError if the survey cannot be saved."""
    if not survey.title or not survey.title.strip():
        raise ValidationError("Please provide a title and at least one page.")
    if not survey.pages:
        raise ValidationError("Please provide a title and at least one page.")


class SurveyManager:
    """Loads, saves and deletes surveys and their submissions."""

    def __init__(self, backend: SurveyBackend, code_attempts: int = DEFAULT_CODE_ATTEMPTS,
                 rng: Optional[random.Random] = None):
        self.backend = backend
        self.code_attempts = code_attempts
        self._rng = rng

    def _to_survey(self, data: dict) -> Survey:
        migrated, result = migrate_survey_dict(data)
        if result.changed and migrated.get('id'):
            # Persist the healed document so migration runs once per survey
            self.backend.save_survey(migrated['id'], migrated)
        return Survey.from_dict(migrated)

    # --- Surveys ---

    def list_surveys(self) -> List[Survey]:
        return [self._to_survey(data) for data in self.backend.list_surveys()]

    def load(self, identifier: str) -> Optional[Survey]:
        """Load by share code when the value looks like one, otherwise by id."""
        identifier = identifier.strip()
        if not identifier:
            return None
        if is_survey_code(identifier):
            data = self.backend.find_survey_by_code(identifier)
        else:
            data = self.backend.load_survey(identifier)
        if data is None:
            return None
        return self._to_survey(data)

    def create(self, survey: Survey) -> Survey:
        """
        Store a new survey, assigning its id and share code.

        Raises:
            ValidationError: missing title or pages
            CodeGenerationExhausted: no free code found (nothing is written)
        """
        validate_survey(survey)
        code = generate_unique_code(self.backend.code_exists, self.code_attempts, self._rng)
        created = replace(survey, id=f"s_{uuid.uuid4().hex}", code=code, submission_count=0)
        self.backend.save_survey(created.id, created.to_dict())
        logger.info(f"Created survey {created.id} ({created.title!r}) with code {code}")
        return created

    def update(self, survey: Survey) -> Survey:
        """Overwrite a stored survey. Code and submission count stay as stored."""
        validate_survey(survey)
        if survey.id is None:
            raise ValidationError("Survey has not been created yet.")
        stored = self.backend.load_survey(survey.id)
        if stored is None:
            raise MissingReferenceError(f"Survey {survey.id} does not exist")

        updated = replace(
            survey,
            code=stored.get('code', survey.code),
            submission_count=int(stored.get('submissionCount') or 0),
        )
        self.backend.save_survey(updated.id, updated.to_dict())
        logger.info(f"Updated survey {updated.id}")
        return updated

    def save(self, survey: Survey) -> Survey:
        if survey.id is None:
            return self.create(survey)
        return self.update(survey)

    def delete(self, survey_id: str) -> bool:
        deleted = self.backend.delete_survey(survey_id)
        if deleted:
            logger.info(f"Deleted survey {survey_id}")
        return deleted

    # --- Submissions ---

    def add_submission(self, submission: Submission) -> Submission:
        """
        Store a submission and bump the survey's submission count.

        Answers to questions that are not in the survey are dropped.
        """
        stored = self.backend.load_survey(submission.survey_id)
        if stored is None:
            raise MissingReferenceError(f"Survey {submission.survey_id} does not exist")
        survey = self._to_survey(stored)

        question_ids = {q.id for q in survey.all_questions()}
        answers = tuple(a for a in submission.answers if a.question_id in question_ids)
        if len(answers) != len(submission.answers):
            logger.warning(
                f"Dropped {len(submission.answers) - len(answers)} answer(s) to unknown questions "
                f"in survey {survey.id}"
            )

        saved = replace(submission, id=submission.id or f"sub_{uuid.uuid4().hex}", answers=answers)
        self.backend.save_submission(survey.id, saved.to_dict())

        counted = replace(survey, submission_count=survey.submission_count + 1)
        self.backend.save_survey(counted.id, counted.to_dict())
        return saved

    def submissions_for(self, survey_id: str) -> List[Submission]:
        return [Submission.from_dict(data) for data in self.backend.load_submissions(survey_id)]
