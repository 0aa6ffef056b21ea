"""
Tests for EditController: tool/mode state machine and pointer gestures.

Pointer positions are given in pixels against a 1000x500 container at the
origin, so percent = (px / 10, py / 5).
"""

import pytest

from imagesurvey.edit.actions import (
    AppendOption,
    DeleteAudioButton,
    DeletePage,
    DeleteOption,
    DeleteQuestion,
    PlaceAudioButton,
    PlaceQuestion,
)
from imagesurvey.edit.controller import EditController, EditState, Mode, Tool
from imagesurvey.edit.coordinates import Rect
from imagesurvey.edit.registry import ElementRegistry
from imagesurvey.models import ChoiceQuestion, QuestionType, ShortAnswerQuestion, Survey

RECT = Rect(0, 0, 1000, 500)


def px(x, y):
    """Percent -> pixel for RECT."""
    return x * 10, y * 5


@pytest.fixture
def registry():
    reg = ElementRegistry(Survey(title='Quiz'))
    reg.add_page('page1.png')
    return reg


@pytest.fixture
def controller(registry):
    return EditController(registry)


def click(controller, x, y):
    controller.pointer_down(px(x, y), RECT)
    return controller.pointer_up(px(x, y), RECT)


class TestToolSelection:

    def test_initial_state(self, controller):
        assert controller.state == EditState()
        assert controller.state.mode is Mode.IDLE

    @pytest.mark.parametrize("tool,mode", [
        (Tool.SHORT_ANSWER, Mode.PLACING_SHORT_ANSWER),
        (Tool.SINGLE_CHOICE, Mode.PLACING_CHOICE),
        (Tool.MULTIPLE_CHOICE, Mode.PLACING_CHOICE),
        (Tool.AUDIO_BUTTON, Mode.PLACING_AUDIO_BUTTON),
        (Tool.MOVE, Mode.MOVING),
        (Tool.DELETE, Mode.DELETING),
        (Tool.NONE, Mode.IDLE),
    ])
    def test_tool_modes(self, controller, tool, mode):
        assert controller.select_tool(tool).mode is mode

    def test_state_change_callback(self, controller):
        seen = []
        controller.set_on_state_change(seen.append)
        controller.select_tool(Tool.DELETE)
        controller.select_tool(Tool.DELETE)
        assert [s.tool for s in seen] == [Tool.DELETE]


class TestPlacement:

    def test_short_answer_returns_to_idle(self, controller, registry):
        controller.select_tool(Tool.SHORT_ANSWER)
        command = click(controller, 20, 40)
        assert isinstance(command, PlaceQuestion)
        question = registry.current_page.questions[0]
        assert isinstance(question, ShortAnswerQuestion)
        assert (question.x, question.y) == pytest.approx((20, 40))
        assert controller.state.mode is Mode.IDLE

    def test_choice_question_over_several_clicks(self, controller, registry):
        controller.select_tool(Tool.SINGLE_CHOICE)
        first = click(controller, 10, 10)
        assert isinstance(first, PlaceQuestion)
        question_id = controller.state.open_question_id
        assert question_id is not None

        assert isinstance(click(controller, 20, 10), AppendOption)
        assert isinstance(click(controller, 30, 10), AppendOption)
        question = registry.current_page.find_question(question_id)
        assert isinstance(question, ChoiceQuestion)
        assert [o.x for o in question.options] == pytest.approx([10, 20, 30])
        assert len(registry.current_page.questions) == 1

    def test_finish_then_new_question(self, controller, registry):
        controller.select_tool(Tool.MULTIPLE_CHOICE)
        click(controller, 10, 10)
        controller.finish_question()
        assert controller.state.mode is Mode.IDLE
        assert controller.state.open_question_id is None

        controller.select_tool(Tool.MULTIPLE_CHOICE)
        click(controller, 50, 50)
        assert len(registry.current_page.questions) == 2

    def test_switching_tool_finishes_open_question(self, controller):
        controller.select_tool(Tool.SINGLE_CHOICE)
        click(controller, 10, 10)
        controller.select_tool(Tool.SHORT_ANSWER)
        assert controller.state.open_question_id is None

    def test_switching_page_finishes_open_question(self, controller, registry):
        registry.add_page('page2.png')
        controller.select_tool(Tool.SINGLE_CHOICE)
        click(controller, 10, 10)
        assert controller.select_page(1)
        assert controller.state.open_question_id is None
        assert registry.current_page_index == 1

    def test_open_question_deleted_starts_new(self, controller, registry):
        controller.select_tool(Tool.SINGLE_CHOICE)
        click(controller, 10, 10)
        registry.delete_question(controller.state.open_question_id)
        command = click(controller, 40, 40)
        assert isinstance(command, PlaceQuestion)
        assert len(registry.current_page.questions) == 1

    def test_open_question_on_hidden_page_starts_new(self, controller, registry):
        registry.add_page('page2.png')
        registry.add_page('page3.png')
        controller.select_page(1)
        controller.select_tool(Tool.SINGLE_CHOICE)
        click(controller, 10, 10)
        open_id = controller.state.open_question_id

        controller.actions.apply(DeletePage(0))
        assert registry.current_page.background_image == 'page3.png'

        command = click(controller, 20, 20)
        assert isinstance(command, PlaceQuestion)
        assert command.page_index == 1
        assert len(registry.current_page.questions) == 1
        assert controller.state.open_question_id != open_id
        assert len(registry.survey.pages[0].find_question(open_id).options) == 1

    def test_idle_click_does_nothing(self, controller, registry):
        assert click(controller, 50, 50) is None
        assert registry.current_page.questions == ()

    def test_no_page(self):
        controller = EditController(ElementRegistry())
        controller.select_tool(Tool.SHORT_ANSWER)
        assert click(controller, 50, 50) is None


class TestAudioPlacement:

    def test_requires_pending_file(self, controller, registry):
        controller.select_tool(Tool.AUDIO_BUTTON)
        assert click(controller, 50, 50) is None
        assert registry.current_page.audio_buttons == ()

    def test_places_button(self, controller, registry):
        audio = registry.add_audio_file('Intro', 'intro.mp3')
        controller.select_audio_file(audio.id)
        assert controller.state.mode is Mode.PLACING_AUDIO_BUTTON
        command = click(controller, 60, 20)
        assert isinstance(command, PlaceAudioButton)
        assert registry.current_page.audio_buttons[0].audio_file_id == audio.id
        assert controller.state.mode is Mode.IDLE

    def test_unknown_file_is_reported_not_raised(self, controller, registry):
        controller.select_audio_file('missing')
        assert click(controller, 60, 20) is None
        assert registry.current_page.audio_buttons == ()
        assert controller.state.mode is Mode.IDLE


class TestDelete:

    def test_delete_short_answer(self, controller, registry):
        question = registry.place_question(0, QuestionType.SHORT_ANSWER, 10, 10)
        controller.select_tool(Tool.DELETE)
        command = click(controller, 15, 12)
        assert command == DeleteQuestion(question.id)
        assert registry.current_page.questions == ()

    def test_delete_option(self, controller, registry):
        question = registry.place_question(0, QuestionType.SINGLE_CHOICE, 10, 10)
        registry.append_option(question.id, 50, 50)
        controller.select_tool(Tool.DELETE)
        command = click(controller, 10, 10)
        assert command == DeleteOption(question.id, question.options[0].id)
        assert len(registry.current_page.find_question(question.id).options) == 1

    def test_delete_audio_button(self, controller, registry):
        audio = registry.add_audio_file('Intro', 'intro.mp3')
        button = registry.place_audio_button(0, audio.id, 80, 80)
        controller.select_tool(Tool.DELETE)
        assert click(controller, 80, 80) == DeleteAudioButton(button.id)
        assert registry.current_page.audio_buttons == ()

    def test_delete_miss(self, controller):
        controller.select_tool(Tool.DELETE)
        assert click(controller, 50, 50) is None


class TestMove:

    def test_drag_option_end_to_end(self, controller, registry):
        question = registry.place_question(0, QuestionType.SINGLE_CHOICE, 50, 50)
        controller.select_tool(Tool.MOVE)

        assert controller.pointer_down(px(50, 50), RECT)
        assert controller.state.dragging
        controller.pointer_move(px(55, 52), RECT)
        controller.pointer_move(px(60, 55), RECT)
        assert controller.pointer_up(px(60, 55), RECT) is None
        assert not controller.state.dragging

        option = registry.current_page.find_question(question.id).options[0]
        assert (option.x, option.y) == pytest.approx((60, 55))

    def test_drag_is_not_a_click(self, controller, registry):
        registry.place_question(0, QuestionType.SHORT_ANSWER, 10, 10)
        controller.select_tool(Tool.MOVE)
        controller.pointer_down(px(15, 12), RECT)
        assert controller.pointer_up(px(15, 12), RECT) is None
        assert len(registry.current_page.questions) == 1

    def test_pointer_leave_aborts(self, controller, registry):
        question = registry.place_question(0, QuestionType.SINGLE_CHOICE, 50, 50)
        controller.select_tool(Tool.MOVE)
        controller.pointer_down(px(50, 50), RECT)
        controller.pointer_move(px(70, 70), RECT)
        assert controller.pointer_leave()
        assert not controller.pointer_move(px(10, 10), RECT)
        option = registry.current_page.find_question(question.id).options[0]
        assert (option.x, option.y) == pytest.approx((70, 70))

    def test_pointer_down_ignored_for_other_tools(self, controller, registry):
        registry.place_question(0, QuestionType.SINGLE_CHOICE, 50, 50)
        controller.select_tool(Tool.DELETE)
        assert not controller.pointer_down(px(50, 50), RECT)


class TestUnmeasuredContainer:
    """Pointer events before the image reports its size are ignored."""

    EMPTY = Rect(0, 0, 0, 0)

    def test_click_places_nothing(self, controller, registry):
        controller.select_tool(Tool.SHORT_ANSWER)
        assert controller.pointer_up((400, 300), self.EMPTY) is None
        assert registry.current_page.questions == ()
        assert controller.state.mode is Mode.PLACING_SHORT_ANSWER

    def test_drag_not_started(self, controller, registry):
        registry.place_question(0, QuestionType.SINGLE_CHOICE, 0, 0)
        controller.select_tool(Tool.MOVE)
        assert not controller.pointer_down((0, 0), self.EMPTY)
        assert not controller.state.dragging

    def test_move_ignored_mid_drag(self, controller, registry):
        question = registry.place_question(0, QuestionType.SINGLE_CHOICE, 50, 50)
        controller.select_tool(Tool.MOVE)
        controller.pointer_down(px(50, 50), RECT)
        assert not controller.pointer_move((0, 0), self.EMPTY)
        option = registry.current_page.find_question(question.id).options[0]
        assert (option.x, option.y) == pytest.approx((50, 50))
        assert controller.pointer_up((0, 0), self.EMPTY) is None
        assert not controller.state.dragging
