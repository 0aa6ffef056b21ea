"""
Error kinds raised by the survey core.

Pointer actions never raise under normal geometry: coordinates are clamped
and unknown ids are ignored. These errors cover the cases that must block
an operation and surface a message to the author or respondent.
"""


class SurveyError(Exception):
    """Base class; str(error) is safe to show to the user."""


class ValidationError(SurveyError):
    """A document or submission is incomplete, e.g. a survey without a title."""


class MissingReferenceError(SurveyError):
    """An element references an entity that does not exist (audio file, question)."""


class CodeGenerationExhausted(SurveyError):
    """No unused survey code was found within the retry budget."""

    def __init__(self, attempts: int):
        super().__init__(f"Could not generate a unique survey code after {attempts} attempts")
        self.attempts = attempts
