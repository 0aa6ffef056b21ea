"""
Load-time migration of stored survey documents.

Older documents carry audio inline instead of through the survey audio pool:
- a page with a single `audioUrl` and no audio buttons
- audio buttons with an inline `audioUrl` and no `audioFileId`
- audio buttons whose `audioFileId` no longer resolves but still carry `audioUrl`

migrate_survey_dict() upgrades these shapes in place on a copy of the raw
document. Running it on an already migrated document changes nothing.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from imagesurvey.edit.constants import LEGACY_AUDIO_BUTTON_X, LEGACY_AUDIO_BUTTON_Y

logger = logging.getLogger(__name__)


@dataclass
class MigrationResult:
    """Result of a migration pass."""
    audio_files_created: int = 0
    buttons_created: int = 0
    buttons_backfilled: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.audio_files_created or self.buttons_created or self.buttons_backfilled)


def _ensure_collections(data: Dict[str, Any]) -> None:
    if not isinstance(data.get('audioFiles'), list):
        data['audioFiles'] = []
    if not isinstance(data.get('pages'), list):
        data['pages'] = []
    for page in data['pages']:
        if not isinstance(page.get('audioButtons'), list):
            page['audioButtons'] = []
        if not isinstance(page.get('questions'), list):
            page['questions'] = []


def _migrate_page_audio(page: Dict[str, Any], page_number: int,
                        pool: Dict[str, Dict[str, Any]], result: MigrationResult) -> None:
    """Turn a page-level audioUrl into a pooled AudioFile plus one AudioButton."""
    audio_url = page.get('audioUrl')
    if not audio_url or page['audioButtons']:
        return

    page_id = page['id']
    file_id = f"legacy-{page_id}"
    if file_id not in pool:
        pool[file_id] = {'id': file_id, 'name': f"Page {page_number} audio", 'audioUrl': audio_url}
        result.audio_files_created += 1

    page['audioButtons'].append({
        'id': f"legacy-audio-{page_id}",
        'x': LEGACY_AUDIO_BUTTON_X,
        'y': LEGACY_AUDIO_BUTTON_Y,
        'audioFileId': file_id,
    })
    page.pop('audioUrl', None)
    result.buttons_created += 1


def _migrate_button(button: Dict[str, Any], pool: Dict[str, Dict[str, Any]],
                    result: MigrationResult) -> None:
    audio_file_id = button.get('audioFileId')
    audio_url = button.get('audioUrl')
    name = button.get('label') or 'Audio'

    if not audio_file_id:
        if not audio_url:
            result.warnings.append(f"Audio button {button['id']} has no audio")
            return
        file_id = f"legacy-button-{button['id']}"
        if file_id not in pool:
            pool[file_id] = {'id': file_id, 'name': name, 'audioUrl': audio_url}
            result.audio_files_created += 1
        button['audioFileId'] = file_id
        result.buttons_backfilled += 1
        return

    if audio_file_id in pool:
        return

    if audio_url:
        # Rebuild the missing pool entry from the inline fallback
        pool[audio_file_id] = {'id': audio_file_id, 'name': name, 'audioUrl': audio_url}
        result.audio_files_created += 1
    else:
        result.warnings.append(
            f"Audio button {button['id']} references missing audio file {audio_file_id}"
        )


def migrate_survey_dict(data: Dict[str, Any]) -> Tuple[Dict[str, Any], MigrationResult]:
    """
    Upgrade a raw stored survey to the current shape.

    Returns (migrated copy, MigrationResult). The input is not modified.
    """
    migrated = copy.deepcopy(data)
    result = MigrationResult()
    _ensure_collections(migrated)

    # Insertion order keeps existing pool entries first, new ones appended
    pool: Dict[str, Dict[str, Any]] = {}
    for audio_file in migrated['audioFiles']:
        pool.setdefault(audio_file['id'], audio_file)

    for number, page in enumerate(migrated['pages'], start=1):
        _migrate_page_audio(page, number, pool, result)
        for button in page['audioButtons']:
            _migrate_button(button, pool, result)

    migrated['audioFiles'] = list(pool.values())

    if result.changed:
        logger.info(
            f"Migrated survey {migrated.get('id')}: {result.audio_files_created} audio file(s), "
            f"{result.buttons_created} button(s) created, {result.buttons_backfilled} backfilled"
        )
    for warning in result.warnings:
        logger.warning(f"Survey {migrated.get('id')}: {warning}")

    return migrated, result
