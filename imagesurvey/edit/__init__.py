"""
Survey editor core.

This package provides the click/drag editing of overlay elements:
- ElementRegistry: the survey snapshot and its mutation operations
- hit_test: topmost element under a percent point
- DragSessionManager: Move-tool drag sessions
- EditController: tool/mode state machine
- EditActions: command execution
- EditOverlay: SVG rendering of the current page
- setup_edit_handlers: nicegui event handlers

Usage:
    from imagesurvey.edit import ElementRegistry, EditController, EditOverlay
    from imagesurvey.edit.handlers import setup_edit_handlers
"""

from imagesurvey.edit.constants import (
    DEFAULT_SHORT_ANSWER_HEIGHT,
    DEFAULT_SHORT_ANSWER_WIDTH,
    OPTION_HIT_RADIUS,
    PERCENT_MAX,
)
from imagesurvey.edit.coordinates import Rect, to_percent, to_pixel
from imagesurvey.edit.registry import ElementRegistry
from imagesurvey.edit.hit_test import ElementRef, hit_test
from imagesurvey.edit.drag import DragSessionManager
from imagesurvey.edit.actions import EditActions
from imagesurvey.edit.controller import EditController, EditState, Mode, Tool
from imagesurvey.edit.overlay import EditOverlay

__all__ = [
    'ElementRegistry',
    'ElementRef',
    'hit_test',
    'DragSessionManager',
    'EditActions',
    'EditController',
    'EditState',
    'Mode',
    'Tool',
    'EditOverlay',
    'Rect',
    'to_percent',
    'to_pixel',
    'PERCENT_MAX',
    'DEFAULT_SHORT_ANSWER_WIDTH',
    'DEFAULT_SHORT_ANSWER_HEIGHT',
    'OPTION_HIT_RADIUS',
]
