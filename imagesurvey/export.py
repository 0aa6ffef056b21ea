"""
Result export.

Tabulates submissions with one column per question, numbered across all
pages in page order. Choice answers are written as the 1-based position of
the chosen option within its question (the number shown on the marker),
never as the stored option id.
"""

import logging
import re
from pathlib import Path
from typing import IO, List, Sequence, Tuple, Union

import pandas as pd

from imagesurvey.models import AnswerValue, ChoiceQuestion, Question, Submission, Survey

logger = logging.getLogger(__name__)

UNKNOWN_OPTION = "(unknown)"
SUBMISSION_COLUMN = "Submission ID"


def option_ordinal(question: ChoiceQuestion, option_id: str) -> str:
    index = question.option_index(option_id)
    return str(index + 1) if index >= 0 else UNKNOWN_OPTION


def format_answer(question: Question, value: AnswerValue) -> str:
    """Render one answer cell."""
    values = list(value) if isinstance(value, (tuple, list)) else [value]
    if not isinstance(question, ChoiceQuestion):
        return ", ".join(values)
    return ", ".join(option_ordinal(question, option_id) for option_id in values)


def build_result_table(survey: Survey,
                       submissions: Sequence[Submission]) -> Tuple[List[str], List[List[str]]]:
    """Return (headers, rows). Unanswered questions are empty cells."""
    questions = survey.all_questions()
    headers = [SUBMISSION_COLUMN] + [
        f"Q{number} ({q.type.value})" for number, q in enumerate(questions, start=1)
    ]

    rows = []
    for submission in submissions:
        row = [submission.id or ""]
        for question in questions:
            answer = submission.answer_for(question.id)
            row.append(format_answer(question, answer.value) if answer else "")
        rows.append(row)
    return headers, rows


def build_result_frame(survey: Survey, submissions: Sequence[Submission]) -> pd.DataFrame:
    headers, rows = build_result_table(survey, submissions)
    return pd.DataFrame(rows, columns=headers)


def export_filename(title: str, extension: str = "xlsx") -> str:
    """Spaces become underscores, e.g. 'Unit 3 Quiz' -> 'Unit_3_Quiz_Results.xlsx'."""
    safe_title = re.sub(r' ', '_', title.strip()) or "Survey"
    return f"{safe_title}_Results.{extension}"


def write_excel(survey: Survey, submissions: Sequence[Submission],
                target: Union[str, Path, IO[bytes]]) -> None:
    frame = build_result_frame(survey, submissions)
    frame.to_excel(target, index=False, sheet_name="Submissions", engine="openpyxl")
    logger.info(f"Exported {len(frame)} submission(s) of survey {survey.id} to Excel")


def write_csv(survey: Survey, submissions: Sequence[Submission],
              target: Union[str, Path, IO[str]]) -> None:
    frame = build_result_frame(survey, submissions)
    frame.to_csv(target, index=False)
    logger.info(f"Exported {len(frame)} submission(s) of survey {survey.id} to CSV")
