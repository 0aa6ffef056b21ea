"""
Edit Controller - tool/mode state machine for the survey editor.

The controller decides what a pointer gesture means:
- pointer-down with the Move tool starts a drag session on the element under the pointer
- pointer-move while dragging repositions that element
- pointer-up ends a drag, or, when no drag happened, is a click:
  place a question, add an option to the open choice question,
  place an audio button, or delete the element under the pointer

Pointer positions arrive in pixels together with the container rectangle
measured for that event; they are converted to percent here.

Choice questions are authored over several clicks. The open question id is
kept in EditState; selecting any tool or another page finishes it.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Tuple

from imagesurvey.edit.actions import (
    AppendOption,
    Command,
    DeleteAudioButton,
    DeleteOption,
    DeleteQuestion,
    EditActions,
    PlaceAudioButton,
    PlaceQuestion,
)
from imagesurvey.edit.coordinates import Rect, to_percent
from imagesurvey.edit.drag import DragSessionManager
from imagesurvey.edit.hit_test import (
    ELEMENT_AUDIO_BUTTON,
    ELEMENT_OPTION,
    ELEMENT_SHORT_ANSWER,
    hit_test,
)
from imagesurvey.edit.registry import ElementRegistry
from imagesurvey.errors import MissingReferenceError
from imagesurvey.models import ChoiceQuestion, QuestionType

logger = logging.getLogger(__name__)


class Tool(str, Enum):
    NONE = 'NONE'
    SHORT_ANSWER = 'SHORT_ANSWER'
    SINGLE_CHOICE = 'SINGLE_CHOICE'
    MULTIPLE_CHOICE = 'MULTIPLE_CHOICE'
    AUDIO_BUTTON = 'AUDIO_BUTTON'
    MOVE = 'MOVE'
    DELETE = 'DELETE'

    @property
    def question_type(self) -> Optional[QuestionType]:
        if self.value in QuestionType.__members__:
            return QuestionType(self.value)
        return None


class Mode(str, Enum):
    IDLE = 'Idle'
    PLACING_SHORT_ANSWER = 'PlacingShortAnswer'
    PLACING_CHOICE = 'PlacingChoice'
    PLACING_AUDIO_BUTTON = 'PlacingAudioButton'
    MOVING = 'Moving'
    DELETING = 'Deleting'


_MODE_BY_TOOL = {
    Tool.NONE: Mode.IDLE,
    Tool.SHORT_ANSWER: Mode.PLACING_SHORT_ANSWER,
    Tool.SINGLE_CHOICE: Mode.PLACING_CHOICE,
    Tool.MULTIPLE_CHOICE: Mode.PLACING_CHOICE,
    Tool.AUDIO_BUTTON: Mode.PLACING_AUDIO_BUTTON,
    Tool.MOVE: Mode.MOVING,
    Tool.DELETE: Mode.DELETING,
}


@dataclass(frozen=True)
class EditState:
    """Immutable snapshot of current edit state."""
    tool: Tool = Tool.NONE
    open_question_id: Optional[str] = None
    pending_audio_file_id: Optional[str] = None
    dragging: bool = False

    @property
    def mode(self) -> Mode:
        return _MODE_BY_TOOL[self.tool]

    @property
    def is_editing_open_choice(self) -> bool:
        return self.open_question_id is not None


class EditController:
    """Routes pointer gestures to drag sessions or document commands."""

    def __init__(self, registry: ElementRegistry, actions: Optional[EditActions] = None):
        self.registry = registry
        self.actions = actions or EditActions(registry)
        self.drag = DragSessionManager(registry)
        self._state = EditState()
        self._on_state_change: Optional[Callable[[EditState], None]] = None

    @property
    def state(self) -> EditState:
        return self._state

    def set_on_state_change(self, callback: Callable[[EditState], None]):
        self._on_state_change = callback

    def _set_state(self, state: EditState):
        if state != self._state:
            self._state = state
            if self._on_state_change:
                self._on_state_change(state)

    # --- Tool selection ---

    def select_tool(self, tool: Tool) -> EditState:
        """Switch tools. An open choice question is finished first."""
        tool = Tool(tool)
        pending = self._state.pending_audio_file_id if tool is Tool.AUDIO_BUTTON else None
        self._set_state(EditState(tool=tool, pending_audio_file_id=pending))
        return self._state

    def select_audio_file(self, audio_file_id: Optional[str]) -> EditState:
        """Pick the audio file the next audio-button click will place."""
        self._set_state(EditState(tool=Tool.AUDIO_BUTTON, pending_audio_file_id=audio_file_id))
        return self._state

    def finish_question(self) -> EditState:
        self._set_state(EditState())
        return self._state

    def select_page(self, index: int) -> bool:
        if not self.registry.select_page(index):
            return False
        if self._state.is_editing_open_choice:
            self.finish_question()
        return True

    # --- Pointer events ---

    def pointer_down(self, pixel: Tuple[float, float], rect: Rect) -> bool:
        """Start a drag when the Move tool lands on an element."""
        if self._state.tool is not Tool.MOVE or self.drag.is_dragging or rect.is_empty:
            return False
        started = self.drag.begin(self.registry.current_page, to_percent(pixel, rect))
        if started:
            self._set_state(replace(self._state, dragging=True))
        return started

    def pointer_move(self, pixel: Tuple[float, float], rect: Rect) -> bool:
        if not self.drag.is_dragging or rect.is_empty:
            return False
        moved = self.drag.move(to_percent(pixel, rect))
        if not self.drag.is_dragging:
            self._set_state(replace(self._state, dragging=False))
        return moved

    def pointer_up(self, pixel: Tuple[float, float], rect: Rect) -> Optional[Command]:
        """
        End a drag, or handle the gesture as a click.

        Returns the command applied for a click, None for a drag or a no-op click.
        Nothing is placed until the container has been measured.
        """
        if self.drag.end():
            self._set_state(replace(self._state, dragging=False))
            return None
        if rect.is_empty:
            return None
        return self.click(to_percent(pixel, rect))

    def pointer_leave(self) -> bool:
        aborted = self.drag.abort()
        if aborted:
            self._set_state(replace(self._state, dragging=False))
        return aborted

    # --- Click handling (percent coordinates) ---

    def click(self, point: Tuple[float, float]) -> Optional[Command]:
        page = self.registry.current_page
        if page is None:
            return None
        x, y = point
        tool = self._state.tool

        if tool is Tool.SHORT_ANSWER:
            command = PlaceQuestion(self.registry.current_page_index, QuestionType.SHORT_ANSWER, x, y)
            self.actions.apply(command)
            self._set_state(EditState())
            return command

        if tool in (Tool.SINGLE_CHOICE, Tool.MULTIPLE_CHOICE):
            return self._place_choice(tool, x, y)

        if tool is Tool.AUDIO_BUTTON:
            return self._place_audio_button(x, y)

        if tool is Tool.DELETE:
            return self._delete_at(point)

        return None

    def _place_choice(self, tool: Tool, x: float, y: float) -> Command:
        open_id = self._state.open_question_id
        if open_id is not None:
            located = self.registry.locate_question(open_id)
            if (located is not None and located[0] == self.registry.current_page_index
                    and isinstance(located[1], ChoiceQuestion)):
                command: Command = AppendOption(open_id, x, y)
                self.actions.apply(command)
                return command
            # The open question was deleted or its page is no longer shown; start a new one

        command = PlaceQuestion(self.registry.current_page_index, tool.question_type, x, y)
        question = self.actions.apply(command)
        self._set_state(EditState(tool=tool, open_question_id=question.id))
        return command

    def _place_audio_button(self, x: float, y: float) -> Optional[Command]:
        audio_file_id = self._state.pending_audio_file_id
        if audio_file_id is None:
            return None
        command = PlaceAudioButton(self.registry.current_page_index, audio_file_id, x, y)
        try:
            self.actions.apply(command)
        except MissingReferenceError as e:
            logger.warning(f"Audio button not placed: {e}")
            self._set_state(EditState())
            return None
        self._set_state(EditState())
        return command

    def _delete_at(self, point: Tuple[float, float]) -> Optional[Command]:
        target = hit_test(self.registry.current_page, point)
        if target is None:
            return None

        if target.kind == ELEMENT_OPTION:
            command: Command = DeleteOption(target.element_id, target.option_id)
        elif target.kind == ELEMENT_SHORT_ANSWER:
            command = DeleteQuestion(target.element_id)
        elif target.kind == ELEMENT_AUDIO_BUTTON:
            command = DeleteAudioButton(target.element_id)
        else:
            return None

        self.actions.apply(command)
        return command
