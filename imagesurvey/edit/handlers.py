"""
Edit Handlers - nicegui event handlers for the survey editor page.

Translates interactive_image mouse events into EditController calls so the
page module only deals with routing and layout. Pointer positions arrive
in pixels of the image's natural size; the matching rectangle is the one
reported by the image's 'loaded' event.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from nicegui import ui

from imagesurvey.edit.controller import EditController, Tool
from imagesurvey.edit.overlay import EditOverlay
from imagesurvey.errors import SurveyError

logger = logging.getLogger(__name__)

# Mouse event names requested from the interactive_image
MOUSE_EVENTS = ['mousedown', 'mousemove', 'mouseup', 'mouseleave']


def parse_mouse_event(event) -> Optional[Tuple[str, Tuple[float, float]]]:
    """
    Extract (event type, (x, y)) from a mouse event.

    Accepts nicegui MouseEventArguments as well as raw dict payloads.
    """
    raw = event.args if hasattr(event, 'args') else event
    if isinstance(raw, dict):
        event_type = raw.get('type')
        x = raw.get('image_x', raw.get('offsetX'))
        y = raw.get('image_y', raw.get('offsetY'))
    else:
        event_type = getattr(event, 'type', None)
        x = getattr(event, 'image_x', None)
        y = getattr(event, 'image_y', None)

    if event_type is None:
        return None
    if x is None or y is None:
        # mouseleave carries no usable position
        return event_type, (0.0, 0.0)
    return event_type, (float(x), float(y))


def parse_loaded_event(event) -> Optional[Tuple[float, float]]:
    raw = event.args if hasattr(event, 'args') else event
    if not isinstance(raw, dict):
        return None
    try:
        return float(raw['width']), float(raw['height'])
    except (KeyError, TypeError, ValueError):
        return None


def setup_edit_handlers(
    state: Dict[str, Any],
    edit_controller: EditController,
    edit_overlay: EditOverlay,
    refresh_ui: Callable,
):
    """
    Set up all edit mode event handlers.

    Args:
        state: Page state dictionary
        edit_controller: EditController instance
        edit_overlay: EditOverlay instance
        refresh_ui: Redraws side panels (question list, page list) after a document change

    Returns:
        Dict with handler functions for binding to UI events
    """

    def on_edit_state_change(edit_state):
        """Called whenever edit controller state changes - update overlay."""
        state['mode'] = edit_state.mode
        edit_overlay.update(edit_state)

    edit_controller.set_on_state_change(on_edit_state_change)

    def handle_image_loaded(event):
        size = parse_loaded_event(event)
        if size is None:
            logger.warning(f"Ignoring malformed image loaded event: {event}")
            return
        edit_overlay.set_size(*size)

    def handle_mouse(event):
        """Route a mouse event to the controller."""
        parsed = parse_mouse_event(event)
        if parsed is None:
            return
        event_type, pixel = parsed
        rect = edit_overlay.rect

        try:
            if event_type == 'mousedown':
                edit_controller.pointer_down(pixel, rect)

            elif event_type == 'mousemove':
                if edit_controller.pointer_move(pixel, rect):
                    edit_overlay.refresh()

            elif event_type == 'mouseup':
                command = edit_controller.pointer_up(pixel, rect)
                edit_overlay.refresh()
                if command is not None:
                    refresh_ui()

            elif event_type == 'mouseleave':
                if edit_controller.pointer_leave():
                    edit_overlay.refresh()

        except SurveyError as e:
            ui.notify(f'Edit failed: {e}', type='negative', position='bottom')
            logger.warning(f"Edit failed on {event_type}: {e}")

    def handle_tool(tool):
        edit_controller.select_tool(Tool(tool))
        if edit_controller.state.tool is Tool.AUDIO_BUTTON and not edit_controller.state.pending_audio_file_id:
            ui.notify('Choose an audio file first', position='bottom', timeout=1500, color='info')

    def handle_audio_file(audio_file_id):
        edit_controller.select_audio_file(audio_file_id or None)

    def handle_finish_question():
        edit_controller.finish_question()
        refresh_ui()

    def handle_page(index):
        if edit_controller.select_page(int(index)):
            edit_overlay.refresh()
            refresh_ui()

    return {
        'handle_image_loaded': handle_image_loaded,
        'handle_mouse': handle_mouse,
        'handle_tool': handle_tool,
        'handle_audio_file': handle_audio_file,
        'handle_finish_question': handle_finish_question,
        'handle_page': handle_page,
    }
