"""
Tests for load-time migration of legacy audio shapes.
"""

import copy

import pytest

from imagesurvey.migration import migrate_survey_dict
from imagesurvey.models import Survey


@pytest.fixture
def legacy_page_audio():
    """Survey whose first page still uses the single page-level audioUrl."""
    return {
        'id': 's1',
        'title': 'Listening',
        'pages': [
            {'id': 'p1', 'backgroundImage': 'a.png', 'questions': [], 'audioUrl': 'https://cdn/a.mp3'},
            {'id': 'p2', 'backgroundImage': 'b.png', 'questions': []},
        ],
    }


class TestPageAudio:

    def test_creates_file_and_button(self, legacy_page_audio):
        migrated, result = migrate_survey_dict(legacy_page_audio)

        assert migrated['audioFiles'] == [
            {'id': 'legacy-p1', 'name': 'Page 1 audio', 'audioUrl': 'https://cdn/a.mp3'}
        ]
        page = migrated['pages'][0]
        assert 'audioUrl' not in page
        assert page['audioButtons'] == [
            {'id': 'legacy-audio-p1', 'x': 50.0, 'y': 10.0, 'audioFileId': 'legacy-p1'}
        ]
        assert migrated['pages'][1]['audioButtons'] == []
        assert result.audio_files_created == 1
        assert result.buttons_created == 1
        assert result.changed

    def test_input_not_modified(self, legacy_page_audio):
        original = copy.deepcopy(legacy_page_audio)
        migrate_survey_dict(legacy_page_audio)
        assert legacy_page_audio == original

    def test_idempotent(self, legacy_page_audio):
        once, _ = migrate_survey_dict(legacy_page_audio)
        twice, result = migrate_survey_dict(once)
        assert twice == once
        assert not result.changed

    def test_loads_as_model(self, legacy_page_audio):
        migrated, _ = migrate_survey_dict(legacy_page_audio)
        survey = Survey.from_dict(migrated)
        button = survey.pages[0].audio_buttons[0]
        assert survey.find_audio_file(button.audio_file_id).audio_url == 'https://cdn/a.mp3'


class TestButtonAudio:

    def test_inline_url_backfilled(self):
        data = {'id': 's1', 'pages': [{
            'id': 'p1', 'backgroundImage': 'a.png', 'questions': [],
            'audioButtons': [{'id': 'b1', 'x': 5, 'y': 5, 'label': 'Story', 'audioUrl': 'story.mp3'}],
        }]}
        migrated, result = migrate_survey_dict(data)
        button = migrated['pages'][0]['audioButtons'][0]
        assert button['audioFileId'] == 'legacy-button-b1'
        assert migrated['audioFiles'] == [{'id': 'legacy-button-b1', 'name': 'Story', 'audioUrl': 'story.mp3'}]
        assert result.buttons_backfilled == 1

    def test_dangling_reference_rebuilt_from_inline_url(self):
        data = {'id': 's1', 'audioFiles': [], 'pages': [{
            'id': 'p1', 'backgroundImage': 'a.png', 'questions': [],
            'audioButtons': [{'id': 'b1', 'x': 5, 'y': 5, 'audioFileId': 'a9', 'audioUrl': 'x.mp3'}],
        }]}
        migrated, result = migrate_survey_dict(data)
        assert migrated['audioFiles'] == [{'id': 'a9', 'name': 'Audio', 'audioUrl': 'x.mp3'}]
        assert result.audio_files_created == 1

    def test_dangling_reference_without_url_warns(self):
        data = {'id': 's1', 'audioFiles': [], 'pages': [{
            'id': 'p1', 'backgroundImage': 'a.png', 'questions': [],
            'audioButtons': [{'id': 'b1', 'x': 5, 'y': 5, 'audioFileId': 'a9'}],
        }]}
        migrated, result = migrate_survey_dict(data)
        assert migrated['audioFiles'] == []
        assert not result.changed
        assert len(result.warnings) == 1

    def test_existing_pool_entries_kept_first(self):
        data = {'id': 's1', 'audioFiles': [{'id': 'a1', 'name': 'Kept', 'audioUrl': 'k.mp3'}], 'pages': [{
            'id': 'p1', 'backgroundImage': 'a.png', 'questions': [],
            'audioButtons': [
                {'id': 'b1', 'x': 5, 'y': 5, 'audioFileId': 'a1'},
                {'id': 'b2', 'x': 9, 'y': 9, 'audioUrl': 'new.mp3'},
            ],
        }]}
        migrated, _ = migrate_survey_dict(data)
        assert [a['id'] for a in migrated['audioFiles']] == ['a1', 'legacy-button-b2']


class TestMissingCollections:

    def test_fills_defaults(self):
        migrated, result = migrate_survey_dict({'id': 's1', 'title': 'Bare'})
        assert migrated['pages'] == []
        assert migrated['audioFiles'] == []
        assert not result.changed
