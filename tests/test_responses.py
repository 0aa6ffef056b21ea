"""
Tests for the respondent session.
"""

import pytest

from imagesurvey.errors import MissingReferenceError, ValidationError
from imagesurvey.models import (
    ChoiceOption,
    ChoiceQuestion,
    Page,
    QuestionType,
    ShortAnswerQuestion,
    Survey,
)
from imagesurvey.responses import ResponseSession


@pytest.fixture
def survey():
    return Survey(
        id='s1',
        title='Quiz',
        pages=(
            Page('p1', 'a.png', questions=(
                ChoiceQuestion('single', QuestionType.SINGLE_CHOICE,
                               (ChoiceOption('a', 10, 10), ChoiceOption('b', 20, 10)), required=True),
            )),
            Page('p2', 'b.png', questions=(
                ShortAnswerQuestion('text', 10, 10, 30, 8),
                ChoiceQuestion('multi', QuestionType.MULTIPLE_CHOICE,
                               (ChoiceOption('x', 10, 50), ChoiceOption('y', 20, 50), ChoiceOption('z', 30, 50)),
                               required=True),
            )),
        ),
    )


@pytest.fixture
def session(survey):
    return ResponseSession(survey)


class TestNavigation:

    def test_pages(self, session):
        assert session.is_first_page
        assert not session.previous_page()
        assert session.next_page()
        assert session.is_last_page
        assert session.current_page.id == 'p2'
        assert not session.next_page()

    def test_unsaved_survey(self):
        with pytest.raises(ValidationError):
            ResponseSession(Survey(title='draft'))


class TestAnswers:

    def test_single_choice_replaces(self, session):
        session.choose('single', 'a')
        session.choose('single', 'b')
        assert session.answer('single') == 'b'
        assert session.is_selected('single', 'b')
        assert not session.is_selected('single', 'a')

    def test_multiple_choice_toggles(self, session):
        session.choose('multi', 'z')
        session.choose('multi', 'x')
        assert session.answer('multi') == ('z', 'x')
        session.choose('multi', 'z')
        assert session.answer('multi') == ('x',)

    def test_text(self, session):
        session.set_text('text', 'hello')
        assert session.answer('text') == 'hello'

    def test_text_on_choice_question(self, session):
        with pytest.raises(ValidationError):
            session.set_text('single', 'nope')

    def test_unknown_option(self, session):
        with pytest.raises(MissingReferenceError):
            session.choose('single', 'x')

    def test_unknown_question(self, session):
        with pytest.raises(MissingReferenceError):
            session.choose('gone', 'a')


class TestSubmission:

    def test_missing_required(self, session):
        session.choose('multi', 'x')
        session.choose('multi', 'x')
        missing = session.missing_required()
        assert [number for number, _ in missing] == [1, 3]
        with pytest.raises(ValidationError) as exc_info:
            session.build_submission()
        assert str(exc_info.value) == "Please answer the required questions: Q1, Q3"

    def test_build(self, session):
        session.choose('single', 'b')
        session.choose('multi', 'y')
        session.set_text('text', 'hi')
        submission = session.build_submission()
        assert submission.survey_id == 's1'
        assert submission.answer_for('single').value == 'b'
        assert submission.answer_for('multi').value == ('y',)
        assert submission.answer_for('text').value == 'hi'
