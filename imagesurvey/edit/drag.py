"""
Drag Session Manager - live repositioning of a grabbed element.

A session starts when the Move tool hits an element and remembers the grab
offset (pointer minus element anchor). Each pointer move writes the new,
clamped anchor into the registry. The session ends on pointer-up (final
position is already written) or pointer-leave (last written position kept).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from imagesurvey.edit.hit_test import (
    ELEMENT_AUDIO_BUTTON,
    ELEMENT_OPTION,
    ELEMENT_SHORT_ANSWER,
    ElementRef,
    hit_test,
)
from imagesurvey.edit.registry import ElementRegistry
from imagesurvey.models import Page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragSession:
    target: ElementRef
    grab_offset_x: float
    grab_offset_y: float


class DragSessionManager:
    """Holds at most one drag session."""

    def __init__(self, registry: ElementRegistry):
        self._registry = registry
        self._session: Optional[DragSession] = None

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    def begin(self, page: Optional[Page], point: Tuple[float, float]) -> bool:
        """Hit-test at point and start a session on the element found."""
        if self._session is not None:
            return False
        target = hit_test(page, point)
        if target is None:
            return False
        self._session = DragSession(
            target=target,
            grab_offset_x=point[0] - target.x,
            grab_offset_y=point[1] - target.y,
        )
        logger.debug(f"Drag started on {target.kind} {target.option_id or target.element_id}")
        return True

    def move(self, point: Tuple[float, float]) -> bool:
        """Write the element's new position for this pointer position."""
        session = self._session
        if session is None:
            return False

        x = point[0] - session.grab_offset_x
        y = point[1] - session.grab_offset_y
        target = session.target
        if target.kind == ELEMENT_OPTION:
            written = self._registry.move_option(target.element_id, target.option_id, x, y)
        elif target.kind == ELEMENT_SHORT_ANSWER:
            written = self._registry.move_short_answer(target.element_id, x, y)
        elif target.kind == ELEMENT_AUDIO_BUTTON:
            written = self._registry.move_audio_button(target.element_id, x, y)
        else:
            raise ValueError(f"Unknown drag target kind: {target.kind}")

        if not written:
            # Element vanished mid-drag
            self._session = None
            return False
        return True

    def end(self) -> bool:
        """
        Finish the session on pointer-up.

        Returns True when a session was active, meaning the down/up pair was a
        drag and must not also be handled as a click.
        """
        if self._session is None:
            return False
        logger.debug(f"Drag ended on {self._session.target.element_id}")
        self._session = None
        return True

    def abort(self) -> bool:
        """Stop updating on pointer-leave. The last written position stays."""
        return self.end()
