"""
Element Registry - the authoritative in-memory survey tree.

Holds the current Survey snapshot plus the selected page index and exposes
the editor's mutation operations. Every operation builds the next snapshot
and swaps it in with a single assignment, so a reader never observes a
half-updated page. Untouched pages are shared between snapshots.

Operations are total over valid input: positions are clamped, unknown ids
are no-ops. Only place_audio_button rejects input (unknown audio file).
"""

import logging
import uuid
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from imagesurvey.edit.constants import (
    DEFAULT_SHORT_ANSWER_HEIGHT,
    DEFAULT_SHORT_ANSWER_WIDTH,
)
from imagesurvey.edit.coordinates import clamp_box_origin, clamp_point
from imagesurvey.errors import MissingReferenceError
from imagesurvey.models import (
    AudioButton,
    AudioFile,
    ChoiceOption,
    ChoiceQuestion,
    Page,
    Question,
    QuestionType,
    ShortAnswerQuestion,
    Survey,
)

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    """Generate an opaque element id. Ids are random, so never reused after deletion."""
    return f"{prefix}{uuid.uuid4().hex[:12]}"


class ElementRegistry:
    """Owns the survey snapshot being edited."""

    def __init__(self, survey: Optional[Survey] = None):
        self._survey = survey or Survey()
        self.current_page_index = 0
        self._on_change: Optional[Callable[[Survey], None]] = None

    @property
    def survey(self) -> Survey:
        return self._survey

    @property
    def current_page(self) -> Optional[Page]:
        if 0 <= self.current_page_index < len(self._survey.pages):
            return self._survey.pages[self.current_page_index]
        return None

    def set_on_change(self, callback: Callable[[Survey], None]):
        self._on_change = callback

    def load(self, survey: Survey):
        """Replace the whole document, e.g. after loading from storage."""
        self.current_page_index = 0
        self._commit(survey)

    def _commit(self, survey: Survey):
        self._survey = survey
        if self._on_change:
            self._on_change(survey)

    # --- Lookup ---

    def locate_question(self, question_id: str) -> Optional[Tuple[int, Question]]:
        """Return (page_index, question) for a question id, searching every page."""
        for page_index, page in enumerate(self._survey.pages):
            question = page.find_question(question_id)
            if question is not None:
                return page_index, question
        return None

    def locate_audio_button(self, button_id: str) -> Optional[Tuple[int, AudioButton]]:
        for page_index, page in enumerate(self._survey.pages):
            for button in page.audio_buttons:
                if button.id == button_id:
                    return page_index, button
        return None

    def resolve_audio_buttons(self, page: Page) -> List[Tuple[AudioButton, AudioFile]]:
        """Pair each button with its audio file. Dangling buttons are treated as absent."""
        resolved = []
        for button in page.audio_buttons:
            audio_file = self._survey.find_audio_file(button.audio_file_id)
            if audio_file is None:
                logger.warning(f"Audio button {button.id} references missing audio file {button.audio_file_id}")
                continue
            resolved.append((button, audio_file))
        return resolved

    # --- Survey / page operations ---

    def set_title(self, title: str):
        self._commit(replace(self._survey, title=title))

    def select_page(self, index: int) -> bool:
        if 0 <= index < len(self._survey.pages):
            self.current_page_index = index
            return True
        return False

    def add_page(self, background_image: str) -> Page:
        """Append a page with no questions or audio buttons."""
        page = Page(id=new_id('p'), background_image=background_image)
        was_empty = not self._survey.pages
        if was_empty:
            self.current_page_index = 0
        self._commit(replace(self._survey, pages=self._survey.pages + (page,)))
        return page

    def delete_page(self, index: int) -> bool:
        pages = self._survey.pages
        if not 0 <= index < len(pages):
            return False
        remaining = pages[:index] + pages[index + 1:]
        if self.current_page_index >= len(remaining):
            self.current_page_index = max(0, len(remaining) - 1)
        self._commit(replace(self._survey, pages=remaining))
        return True

    def _update_page(self, page_index: int, page: Page):
        self._commit(self._survey.with_page(page_index, page))

    def _replace_question(self, page_index: int, question: Question):
        page = self._survey.pages[page_index]
        questions = tuple(question if q.id == question.id else q for q in page.questions)
        self._update_page(page_index, replace(page, questions=questions))

    # --- Question operations ---

    def place_question(self, page_index: int, question_type: QuestionType,
                       x: float, y: float) -> Optional[Question]:
        """
        Create a question at (x, y) on the given page.

        Short answers are created complete with the default size. Choice
        questions are created with exactly one option; further options are
        added with append_option while the editor keeps the question open.
        """
        if not 0 <= page_index < len(self._survey.pages):
            return None
        question_type = QuestionType(question_type)

        if question_type is QuestionType.SHORT_ANSWER:
            width, height = DEFAULT_SHORT_ANSWER_WIDTH, DEFAULT_SHORT_ANSWER_HEIGHT
            bx, by = clamp_box_origin(x, y, width, height)
            question: Question = ShortAnswerQuestion(
                id=new_id('q'), x=bx, y=by, width=width, height=height
            )
        else:
            ox, oy = clamp_point(x, y)
            question = ChoiceQuestion(
                id=new_id('q'),
                type=question_type,
                options=(ChoiceOption(id=new_id('o'), x=ox, y=oy),),
            )

        page = self._survey.pages[page_index]
        self._update_page(page_index, replace(page, questions=page.questions + (question,)))
        return question

    def append_option(self, question_id: str, x: float, y: float) -> Optional[ChoiceOption]:
        """Append an option to a choice question. Returns None for unknown/non-choice ids."""
        located = self.locate_question(question_id)
        if located is None:
            return None
        page_index, question = located
        if not isinstance(question, ChoiceQuestion):
            return None

        ox, oy = clamp_point(x, y)
        option = ChoiceOption(id=new_id('o'), x=ox, y=oy)
        self._replace_question(page_index, replace(question, options=question.options + (option,)))
        return option

    def delete_question(self, question_id: str) -> bool:
        located = self.locate_question(question_id)
        if located is None:
            return False
        page_index, _ = located
        page = self._survey.pages[page_index]
        questions = tuple(q for q in page.questions if q.id != question_id)
        self._update_page(page_index, replace(page, questions=questions))
        return True

    def delete_option(self, question_id: str, option_id: str) -> bool:
        """Delete an option; the question goes with its last option."""
        located = self.locate_question(question_id)
        if located is None:
            return False
        page_index, question = located
        if not isinstance(question, ChoiceQuestion) or question.option_index(option_id) < 0:
            return False

        options = tuple(o for o in question.options if o.id != option_id)
        if not options:
            return self.delete_question(question_id)
        self._replace_question(page_index, replace(question, options=options))
        return True

    def set_required(self, question_id: str, required: bool) -> bool:
        located = self.locate_question(question_id)
        if located is None:
            return False
        page_index, question = located
        self._replace_question(page_index, replace(question, required=required))
        return True

    def move_option(self, question_id: str, option_id: str, x: float, y: float) -> bool:
        located = self.locate_question(question_id)
        if located is None or not isinstance(located[1], ChoiceQuestion):
            return False
        page_index, question = located
        if question.option_index(option_id) < 0:
            return False

        ox, oy = clamp_point(x, y)
        options = tuple(
            replace(o, x=ox, y=oy) if o.id == option_id else o
            for o in question.options
        )
        self._replace_question(page_index, replace(question, options=options))
        return True

    def move_short_answer(self, question_id: str, x: float, y: float) -> bool:
        located = self.locate_question(question_id)
        if located is None or not isinstance(located[1], ShortAnswerQuestion):
            return False
        page_index, question = located
        bx, by = clamp_box_origin(x, y, question.width, question.height)
        self._replace_question(page_index, replace(question, x=bx, y=by))
        return True

    # --- Audio operations ---

    def add_audio_file(self, name: str, audio_url: str,
                       duration: Optional[float] = None) -> AudioFile:
        audio_file = AudioFile(id=new_id('a'), name=name, audio_url=audio_url, duration=duration)
        self._commit(replace(self._survey, audio_files=self._survey.audio_files + (audio_file,)))
        return audio_file

    def rename_audio_file(self, audio_file_id: str, name: str) -> bool:
        if self._survey.find_audio_file(audio_file_id) is None:
            return False
        audio_files = tuple(
            replace(a, name=name) if a.id == audio_file_id else a
            for a in self._survey.audio_files
        )
        self._commit(replace(self._survey, audio_files=audio_files))
        return True

    def delete_audio_file(self, audio_file_id: str) -> int:
        """
        Remove an audio file and every button referencing it, on every page.

        Returns the number of buttons removed. This is the only place the
        audio reference policy (cascade) is applied.
        """
        if self._survey.find_audio_file(audio_file_id) is None:
            return 0

        removed = 0
        pages = []
        for page in self._survey.pages:
            kept = tuple(b for b in page.audio_buttons if b.audio_file_id != audio_file_id)
            removed += len(page.audio_buttons) - len(kept)
            pages.append(page if len(kept) == len(page.audio_buttons) else replace(page, audio_buttons=kept))

        audio_files = tuple(a for a in self._survey.audio_files if a.id != audio_file_id)
        self._commit(replace(self._survey, pages=tuple(pages), audio_files=audio_files))
        if removed:
            logger.info(f"Deleted audio file {audio_file_id} and {removed} button(s) referencing it")
        return removed

    def place_audio_button(self, page_index: int, audio_file_id: str, x: float, y: float,
                           label: Optional[str] = None) -> Optional[AudioButton]:
        if self._survey.find_audio_file(audio_file_id) is None:
            raise MissingReferenceError(f"Audio file {audio_file_id} is not in this survey")
        if not 0 <= page_index < len(self._survey.pages):
            return None

        bx, by = clamp_point(x, y)
        button = AudioButton(id=new_id('b'), x=bx, y=by, audio_file_id=audio_file_id, label=label)
        page = self._survey.pages[page_index]
        self._update_page(page_index, replace(page, audio_buttons=page.audio_buttons + (button,)))
        return button

    def _replace_audio_button(self, page_index: int, button: AudioButton):
        page = self._survey.pages[page_index]
        buttons = tuple(button if b.id == button.id else b for b in page.audio_buttons)
        self._update_page(page_index, replace(page, audio_buttons=buttons))

    def move_audio_button(self, button_id: str, x: float, y: float) -> bool:
        located = self.locate_audio_button(button_id)
        if located is None:
            return False
        page_index, button = located
        bx, by = clamp_point(x, y)
        self._replace_audio_button(page_index, replace(button, x=bx, y=by))
        return True

    def relabel_audio_button(self, button_id: str, label: Optional[str]) -> bool:
        located = self.locate_audio_button(button_id)
        if located is None:
            return False
        page_index, button = located
        self._replace_audio_button(page_index, replace(button, label=label or None))
        return True

    def delete_audio_button(self, button_id: str) -> bool:
        located = self.locate_audio_button(button_id)
        if located is None:
            return False
        page_index, _ = located
        page = self._survey.pages[page_index]
        buttons = tuple(b for b in page.audio_buttons if b.id != button_id)
        self._update_page(page_index, replace(page, audio_buttons=buttons))
        return True
