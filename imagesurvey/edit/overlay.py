"""
Edit Overlay - SVG layer drawn over the page background image.

The overlay is plain SVG markup assigned to the `content` of a nicegui
interactive_image, so redrawing after an edit only replaces a string.
Element positions are stored in percent and converted to pixels of the
image's natural size here, so markers stay attached to the same spot of
the picture at any display size.

Markers:
- short answer: outlined rectangle labelled with the question number
- single choice option: circle with the option number
- multiple choice option: rounded square with the option number
- audio button: speaker marker with the audio file name as tooltip
"""

from html import escape
from typing import List, Optional

from imagesurvey.edit.constants import AUDIO_MARKER_RADIUS, OPTION_MARKER_RADIUS
from imagesurvey.edit.controller import EditState, Mode
from imagesurvey.edit.coordinates import Rect, to_pixel, to_pixel_size
from imagesurvey.edit.registry import ElementRegistry
from imagesurvey.models import ChoiceQuestion, QuestionType, ShortAnswerQuestion

SHORT_ANSWER_COLOR = '#2563eb'
CHOICE_COLOR = '#16a34a'
OPEN_QUESTION_COLOR = '#f59e0b'
AUDIO_COLOR = '#9333ea'
DELETE_COLOR = '#dc2626'


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip('0').rstrip('.')


class EditOverlay:
    """
    Renders the current page's elements as SVG.

    The overlay holds no document state of its own: render() reads the
    registry on every call.
    """

    def __init__(self, registry: ElementRegistry):
        self.registry = registry
        self._rect = Rect(0, 0, 0, 0)
        self._state = EditState()
        self._image = None

    def attach(self, image):
        """Bind to the element whose `content` receives the SVG (an interactive_image)."""
        self._image = image

    def set_size(self, width: float, height: float):
        """Natural pixel size of the background image, reported when it loads."""
        self._rect = Rect(0, 0, width, height)
        self.refresh()

    @property
    def rect(self) -> Rect:
        return self._rect

    def update(self, state: EditState):
        """Called whenever the controller state changes."""
        self._state = state
        self.refresh()

    def refresh(self):
        if self._image is None:
            return
        self._image.content = self.render()

    # --- SVG building ---

    def render(self, rect: Optional[Rect] = None) -> str:
        rect = rect or self._rect
        page = self.registry.current_page
        if page is None or rect.is_empty:
            return ''

        base = rect.width
        parts: List[str] = []
        number = self._first_question_number()

        for question in page.questions:
            if isinstance(question, ShortAnswerQuestion):
                parts.append(self._short_answer_svg(question, number, rect))
            elif isinstance(question, ChoiceQuestion):
                parts.extend(self._choice_svg(question, number, rect, base))
            number += 1

        for button, audio_file in self.registry.resolve_audio_buttons(page):
            parts.append(self._audio_button_svg(button.x, button.y, button.label or audio_file.name,
                                                rect, base))
        return '\n'.join(parts)

    def _first_question_number(self) -> int:
        # Questions are numbered across the whole survey in page order
        survey = self.registry.survey
        index = self.registry.current_page_index
        return 1 + sum(len(page.questions) for page in survey.pages[:index])

    def _stroke(self, default: str) -> str:
        return DELETE_COLOR if self._state.mode is Mode.DELETING else default

    def _short_answer_svg(self, question: ShortAnswerQuestion, number: int, rect: Rect) -> str:
        left, top = to_pixel(question.x, question.y, rect)
        width, height = to_pixel_size(question.width, question.height, rect)
        color = self._stroke(SHORT_ANSWER_COLOR)
        return (
            f'<rect x="{_fmt(left)}" y="{_fmt(top)}" width="{_fmt(width)}" height="{_fmt(height)}" '
            f'fill="{color}" fill-opacity="0.12" stroke="{color}" stroke-width="2" />'
            f'<text x="{_fmt(left + 4)}" y="{_fmt(top + 14)}" fill="{color}" font-size="12">Q{number}</text>'
        )

    def _choice_svg(self, question: ChoiceQuestion, number: int, rect: Rect, base: float) -> List[str]:
        is_open = question.id == self._state.open_question_id
        color = self._stroke(OPEN_QUESTION_COLOR if is_open else CHOICE_COLOR)
        size = base * OPTION_MARKER_RADIUS / 100.0
        parts = []
        for option_number, option in enumerate(question.options, start=1):
            cx, cy = to_pixel(option.x, option.y, rect)
            if question.type is QuestionType.MULTIPLE_CHOICE:
                parts.append(
                    f'<rect x="{_fmt(cx - size)}" y="{_fmt(cy - size)}" width="{_fmt(2 * size)}" '
                    f'height="{_fmt(2 * size)}" rx="{_fmt(size / 3)}" fill="white" '
                    f'stroke="{color}" stroke-width="2" />'
                )
            else:
                parts.append(
                    f'<circle cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(size)}" fill="white" '
                    f'stroke="{color}" stroke-width="2" />'
                )
            parts.append(
                f'<text x="{_fmt(cx)}" y="{_fmt(cy)}" fill="{color}" font-size="{_fmt(size)}" '
                f'text-anchor="middle" dominant-baseline="central">{option_number}</text>'
            )
        if question.options:
            first = question.options[0]
            fx, fy = to_pixel(first.x, first.y, rect)
            parts.append(
                f'<text x="{_fmt(fx - size)}" y="{_fmt(fy - size - 4)}" fill="{color}" '
                f'font-size="12">Q{number}</text>'
            )
        return parts

    def _audio_button_svg(self, x: float, y: float, title: str, rect: Rect, base: float) -> str:
        cx, cy = to_pixel(x, y, rect)
        radius = base * AUDIO_MARKER_RADIUS / 100.0
        color = self._stroke(AUDIO_COLOR)
        return (
            f'<g><title>{escape(title)}</title>'
            f'<circle cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(radius)}" fill="{color}" fill-opacity="0.85" />'
            f'<polygon points="{_fmt(cx - radius / 3)},{_fmt(cy - radius / 2)} '
            f'{_fmt(cx + radius / 2)},{_fmt(cy)} {_fmt(cx - radius / 3)},{_fmt(cy + radius / 2)}" '
            f'fill="white" /></g>'
        )


def selection_svg(page, rect: Rect, is_selected) -> str:
    """Filled dots over the options a respondent has chosen. is_selected(question_id, option_id)."""
    if page is None or rect.is_empty:
        return ''
    radius = rect.width * OPTION_MARKER_RADIUS / 100.0 * 0.6
    parts = []
    for question in page.questions:
        if not isinstance(question, ChoiceQuestion):
            continue
        for option in question.options:
            if is_selected(question.id, option.id):
                cx, cy = to_pixel(option.x, option.y, rect)
                parts.append(
                    f'<circle cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(radius)}" '
                    f'fill="{CHOICE_COLOR}" fill-opacity="0.8" />'
                )
    return '\n'.join(parts)
