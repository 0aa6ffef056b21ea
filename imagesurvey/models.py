"""
Survey document model.

Frozen dataclasses describing a survey as it is edited and stored:
- Survey -> Page -> Question (ShortAnswer | Choice) / AudioButton
- Survey.audio_files: the survey-wide audio pool referenced by AudioButtons
- Submission / Answer: respondent data

Every geometric field is a percentage (0-100) of the rendered container.
Collections are tuples, so an edit builds a new snapshot and untouched pages
are shared between snapshots.

The dict form (to_dict / from_dict) uses the camelCase field names of the
stored documents, including the legacy `audioUrl` fields kept for migration.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class QuestionType(str, Enum):
    SHORT_ANSWER = 'SHORT_ANSWER'
    SINGLE_CHOICE = 'SINGLE_CHOICE'
    MULTIPLE_CHOICE = 'MULTIPLE_CHOICE'

    @property
    def is_choice(self) -> bool:
        return self is not QuestionType.SHORT_ANSWER


@dataclass(frozen=True)
class ChoiceOption:
    id: str
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChoiceOption':
        return cls(id=data['id'], x=float(data.get('x', 0)), y=float(data.get('y', 0)))


@dataclass(frozen=True)
class ShortAnswerQuestion:
    """Rectangular free-text zone anchored at its top-left corner."""
    id: str
    x: float
    y: float
    width: float
    height: float
    required: bool = False

    @property
    def type(self) -> QuestionType:
        return QuestionType.SHORT_ANSWER

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.type.value,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
        }
        if self.required:
            data['required'] = True
        return data


@dataclass(frozen=True)
class ChoiceQuestion:
    """Ordered set of point markers. Option numbering is 1-based array order."""
    id: str
    type: QuestionType
    options: Tuple[ChoiceOption, ...] = ()
    required: bool = False

    def option_index(self, option_id: str) -> int:
        """Return the 0-based position of an option, or -1 if absent."""
        for index, option in enumerate(self.options):
            if option.id == option_id:
                return index
        return -1

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.type.value,
            'options': [opt.to_dict() for opt in self.options],
        }
        if self.required:
            data['required'] = True
        return data


Question = Union[ShortAnswerQuestion, ChoiceQuestion]


def question_from_dict(data: Dict[str, Any]) -> Question:
    qtype = QuestionType(data['type'])
    required = bool(data.get('required', False))
    if qtype is QuestionType.SHORT_ANSWER:
        return ShortAnswerQuestion(
            id=data['id'],
            x=float(data.get('x', 0)),
            y=float(data.get('y', 0)),
            width=float(data.get('width', 0)),
            height=float(data.get('height', 0)),
            required=required,
        )
    return ChoiceQuestion(
        id=data['id'],
        type=qtype,
        options=tuple(ChoiceOption.from_dict(o) for o in data.get('options', [])),
        required=required,
    )


@dataclass(frozen=True)
class AudioFile:
    id: str
    name: str
    audio_url: str
    duration: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'id': self.id, 'name': self.name, 'audioUrl': self.audio_url}
        if self.duration is not None:
            data['duration'] = self.duration
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AudioFile':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            audio_url=data.get('audioUrl', ''),
            duration=data.get('duration'),
        )


@dataclass(frozen=True)
class AudioButton:
    """
    Page-positioned audio marker.

    audio_file_id is a weak reference into Survey.audio_files. audio_url is the
    legacy inline fallback; it is only kept so stored documents round-trip.
    """
    id: str
    x: float
    y: float
    audio_file_id: Optional[str] = None
    label: Optional[str] = None
    audio_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'id': self.id, 'x': self.x, 'y': self.y}
        if self.audio_file_id is not None:
            data['audioFileId'] = self.audio_file_id
        if self.label is not None:
            data['label'] = self.label
        if self.audio_url is not None:
            data['audioUrl'] = self.audio_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AudioButton':
        return cls(
            id=data['id'],
            x=float(data.get('x', 0)),
            y=float(data.get('y', 0)),
            audio_file_id=data.get('audioFileId'),
            label=data.get('label'),
            audio_url=data.get('audioUrl'),
        )


@dataclass(frozen=True)
class Page:
    id: str
    background_image: str
    questions: Tuple[Question, ...] = ()
    audio_buttons: Tuple[AudioButton, ...] = ()
    audio_url: Optional[str] = None  # legacy single-audio field

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'backgroundImage': self.background_image,
            'questions': [q.to_dict() for q in self.questions],
            'audioButtons': [b.to_dict() for b in self.audio_buttons],
        }
        if self.audio_url is not None:
            data['audioUrl'] = self.audio_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Page':
        return cls(
            id=data['id'],
            background_image=data.get('backgroundImage', ''),
            questions=tuple(question_from_dict(q) for q in data.get('questions', [])),
            audio_buttons=tuple(AudioButton.from_dict(b) for b in data.get('audioButtons') or []),
            audio_url=data.get('audioUrl'),
        )


@dataclass(frozen=True)
class Survey:
    id: Optional[str] = None
    title: str = ''
    pages: Tuple[Page, ...] = ()
    audio_files: Tuple[AudioFile, ...] = ()
    code: Optional[str] = None
    submission_count: int = 0

    def find_audio_file(self, audio_file_id: Optional[str]) -> Optional[AudioFile]:
        if audio_file_id is None:
            return None
        for audio_file in self.audio_files:
            if audio_file.id == audio_file_id:
                return audio_file
        return None

    def all_questions(self) -> List[Question]:
        """All questions across pages, in page order then creation order."""
        return [q for page in self.pages for q in page.questions]

    def with_page(self, index: int, page: Page) -> 'Survey':
        """Return a copy with the page at index replaced."""
        pages = list(self.pages)
        pages[index] = page
        return replace(self, pages=tuple(pages))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'title': self.title,
            'pages': [p.to_dict() for p in self.pages],
            'audioFiles': [a.to_dict() for a in self.audio_files],
            'submissionCount': self.submission_count,
        }
        if self.id is not None:
            data['id'] = self.id
        if self.code is not None:
            data['code'] = self.code
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Survey':
        return cls(
            id=data.get('id'),
            title=data.get('title', ''),
            pages=tuple(Page.from_dict(p) for p in data.get('pages', [])),
            audio_files=tuple(AudioFile.from_dict(a) for a in data.get('audioFiles') or []),
            code=data.get('code'),
            submission_count=int(data.get('submissionCount') or 0),
        )


AnswerValue = Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class Answer:
    """Single value for ShortAnswer/Single, a tuple of option ids for Multiple."""
    question_id: str
    value: AnswerValue

    def to_dict(self) -> Dict[str, Any]:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {'questionId': self.question_id, 'value': value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Answer':
        value = data.get('value', '')
        if isinstance(value, list):
            value = tuple(value)
        return cls(question_id=data['questionId'], value=value)


@dataclass(frozen=True)
class Submission:
    survey_id: str
    answers: Tuple[Answer, ...] = field(default_factory=tuple)
    id: Optional[str] = None

    def answer_for(self, question_id: str) -> Optional[Answer]:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'surveyId': self.survey_id,
            'answers': [a.to_dict() for a in self.answers],
        }
        if self.id is not None:
            data['id'] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Submission':
        return cls(
            id=data.get('id'),
            survey_id=data['surveyId'],
            answers=tuple(Answer.from_dict(a) for a in data.get('answers', [])),
        )
