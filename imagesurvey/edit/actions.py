"""
Edit Actions - command objects for survey mutations.

Every user action on the document is described by a small command object
and executed through EditActions.apply, which translates it into an
ElementRegistry operation. Commands carry everything they need (page index,
ids, percent coordinates), so they can be built by the controller, by UI
callbacks, or by tests without touching the registry directly.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from imagesurvey.edit.registry import ElementRegistry
from imagesurvey.models import QuestionType


@dataclass(frozen=True)
class SetTitle:
    title: str


@dataclass(frozen=True)
class AddPage:
    background_image: str


@dataclass(frozen=True)
class DeletePage:
    index: int


@dataclass(frozen=True)
class PlaceQuestion:
    page_index: int
    question_type: QuestionType
    x: float
    y: float


@dataclass(frozen=True)
class AppendOption:
    question_id: str
    x: float
    y: float


@dataclass(frozen=True)
class DeleteQuestion:
    question_id: str


@dataclass(frozen=True)
class DeleteOption:
    question_id: str
    option_id: str


@dataclass(frozen=True)
class SetRequired:
    question_id: str
    required: bool


@dataclass(frozen=True)
class AddAudioFile:
    name: str
    audio_url: str
    duration: Optional[float] = None


@dataclass(frozen=True)
class RenameAudioFile:
    audio_file_id: str
    name: str


@dataclass(frozen=True)
class DeleteAudioFile:
    audio_file_id: str


@dataclass(frozen=True)
class PlaceAudioButton:
    page_index: int
    audio_file_id: str
    x: float
    y: float
    label: Optional[str] = None


@dataclass(frozen=True)
class RelabelAudioButton:
    button_id: str
    label: Optional[str]


@dataclass(frozen=True)
class DeleteAudioButton:
    button_id: str


Command = Union[
    SetTitle, AddPage, DeletePage, PlaceQuestion, AppendOption, DeleteQuestion,
    DeleteOption, SetRequired, AddAudioFile, RenameAudioFile, DeleteAudioFile,
    PlaceAudioButton, RelabelAudioButton, DeleteAudioButton,
]


class EditActions:
    """
    Executes commands against an ElementRegistry.

    apply() returns whatever the underlying operation returns: the created
    element for placements, a bool or count for deletions.
    """

    def __init__(self, registry: ElementRegistry):
        self.registry = registry

    def apply(self, command: Command) -> Any:
        registry = self.registry

        if isinstance(command, SetTitle):
            return registry.set_title(command.title)

        elif isinstance(command, AddPage):
            return registry.add_page(command.background_image)

        elif isinstance(command, DeletePage):
            return registry.delete_page(command.index)

        elif isinstance(command, PlaceQuestion):
            return registry.place_question(command.page_index, command.question_type,
                                           command.x, command.y)

        elif isinstance(command, AppendOption):
            return registry.append_option(command.question_id, command.x, command.y)

        elif isinstance(command, DeleteQuestion):
            return registry.delete_question(command.question_id)

        elif isinstance(command, DeleteOption):
            return registry.delete_option(command.question_id, command.option_id)

        elif isinstance(command, SetRequired):
            return registry.set_required(command.question_id, command.required)

        elif isinstance(command, AddAudioFile):
            return registry.add_audio_file(command.name, command.audio_url, command.duration)

        elif isinstance(command, RenameAudioFile):
            return registry.rename_audio_file(command.audio_file_id, command.name)

        elif isinstance(command, DeleteAudioFile):
            return registry.delete_audio_file(command.audio_file_id)

        elif isinstance(command, PlaceAudioButton):
            return registry.place_audio_button(command.page_index, command.audio_file_id,
                                               command.x, command.y, command.label)

        elif isinstance(command, RelabelAudioButton):
            return registry.relabel_audio_button(command.button_id, command.label)

        elif isinstance(command, DeleteAudioButton):
            return registry.delete_audio_button(command.button_id)

        raise TypeError(f"Unknown command: {type(command).__name__}")
