"""
Respondent session: recording answers while paging through a survey.

Single choice and short answer questions hold one value; multiple choice
questions hold the set of selected option ids, toggled per click and kept
in click order.
"""

from typing import Dict, List, Optional, Tuple

from imagesurvey.errors import MissingReferenceError, ValidationError
from imagesurvey.models import (
    Answer,
    AnswerValue,
    ChoiceQuestion,
    Page,
    Question,
    QuestionType,
    Submission,
    Survey,
)


class ResponseSession:
    """Answers and page position of one respondent."""

    def __init__(self, survey: Survey):
        if survey.id is None:
            raise ValidationError("Survey has not been saved.")
        self.survey = survey
        self.page_index = 0
        self._answers: Dict[str, AnswerValue] = {}
        self._questions: Dict[str, Question] = {q.id: q for q in survey.all_questions()}

    # --- Navigation ---

    @property
    def current_page(self) -> Optional[Page]:
        if 0 <= self.page_index < len(self.survey.pages):
            return self.survey.pages[self.page_index]
        return None

    @property
    def is_first_page(self) -> bool:
        return self.page_index == 0

    @property
    def is_last_page(self) -> bool:
        return self.page_index >= len(self.survey.pages) - 1

    def next_page(self) -> bool:
        if self.is_last_page:
            return False
        self.page_index += 1
        return True

    def previous_page(self) -> bool:
        if self.is_first_page:
            return False
        self.page_index -= 1
        return True

    # --- Answers ---

    def answer(self, question_id: str) -> Optional[AnswerValue]:
        return self._answers.get(question_id)

    def is_selected(self, question_id: str, option_id: str) -> bool:
        value = self._answers.get(question_id)
        if isinstance(value, tuple):
            return option_id in value
        return value == option_id

    def set_text(self, question_id: str, text: str) -> None:
        question = self._require(question_id)
        if question.type is not QuestionType.SHORT_ANSWER:
            raise ValidationError("Only short answer questions take text.")
        self._answers[question_id] = text

    def choose(self, question_id: str, option_id: str) -> None:
        """Select an option: replaces for single choice, toggles for multiple choice."""
        question = self._require(question_id)
        if not isinstance(question, ChoiceQuestion):
            raise ValidationError("Only choice questions take options.")
        if question.option_index(option_id) < 0:
            raise MissingReferenceError(f"Option {option_id} is not part of question {question_id}")

        if question.type is QuestionType.MULTIPLE_CHOICE:
            existing = self._answers.get(question_id) or ()
            if option_id in existing:
                self._answers[question_id] = tuple(v for v in existing if v != option_id)
            else:
                self._answers[question_id] = tuple(existing) + (option_id,)
        else:
            self._answers[question_id] = option_id

    def _require(self, question_id: str) -> Question:
        question = self._questions.get(question_id)
        if question is None:
            raise MissingReferenceError(f"Question {question_id} is not part of this survey")
        return question

    # --- Submission ---

    def missing_required(self) -> List[Tuple[int, Question]]:
        """Required questions without an answer, as (1-based number, question)."""
        missing = []
        for number, question in enumerate(self.survey.all_questions(), start=1):
            if not question.required:
                continue
            value = self._answers.get(question.id)
            if isinstance(value, str):
                value = value.strip()
            if not value:
                missing.append((number, question))
        return missing

    def build_submission(self) -> Submission:
        """
        Build the submission from everything answered so far.

        Raises:
            ValidationError: a required question is unanswered
        """
        missing = self.missing_required()
        if missing:
            numbers = ", ".join(f"Q{number}" for number, _ in missing)
            raise ValidationError(f"Please answer the required questions: {numbers}")
        answers = tuple(Answer(question_id=qid, value=value) for qid, value in self._answers.items())
        return Submission(survey_id=self.survey.id, answers=answers)
