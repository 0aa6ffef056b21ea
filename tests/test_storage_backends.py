"""
Tests for storage backends.

Tests FileBackend on disk, SupabaseBackend against a mocked client, and
the backend factory.
"""

import json
import pytest
from unittest.mock import MagicMock, patch

from imagesurvey.storage.protocol import SurveyBackend
from imagesurvey.storage.file_backend import FileBackend
from imagesurvey.storage.factory import create_backend


SURVEY = {
    "title": "Quiz",
    "code": "123-456",
    "submissionCount": 0,
    "audioFiles": [],
    "pages": [{"id": "p1", "backgroundImage": "a.png", "questions": [], "audioButtons": []}],
}


class TestFileBackend:
    """Tests for FileBackend JSON-file storage."""

    @pytest.fixture
    def backend(self, tmp_path):
        return FileBackend(tmp_path / "db")

    def test_creates_directories(self, tmp_path):
        FileBackend(tmp_path / "db")
        assert (tmp_path / "db" / "surveys").is_dir()
        assert (tmp_path / "db" / "submissions").is_dir()

    def test_save_and_load(self, backend):
        backend.save_survey("s1", SURVEY)
        loaded = backend.load_survey("s1")
        assert loaded["id"] == "s1"
        assert loaded["title"] == "Quiz"

    def test_load_missing(self, backend):
        assert backend.load_survey("nope") is None

    def test_no_temp_file_left(self, backend):
        backend.save_survey("s1", SURVEY)
        assert [p.name for p in backend.surveys_dir.iterdir()] == ["s1.json"]

    def test_list_skips_corrupt_files(self, backend):
        backend.save_survey("s1", SURVEY)
        (backend.surveys_dir / "broken.json").write_text("{not json", encoding="utf-8")
        surveys = backend.list_surveys()
        assert [s["id"] for s in surveys] == ["s1"]

    def test_find_by_code(self, backend):
        backend.save_survey("s1", SURVEY)
        assert backend.find_survey_by_code("123-456")["id"] == "s1"
        assert backend.find_survey_by_code("999-999") is None
        assert backend.code_exists("123-456")
        assert not backend.code_exists("000-000")

    def test_submissions_in_order(self, backend):
        backend.save_survey("s1", SURVEY)
        backend.save_submission("s1", {"id": "b", "answers": [], "submittedAt": "2024-01-02T00:00:00"})
        backend.save_submission("s1", {"id": "a", "answers": [], "submittedAt": "2024-01-01T00:00:00"})
        submissions = backend.load_submissions("s1")
        assert [s["id"] for s in submissions] == ["a", "b"]
        assert all(s["surveyId"] == "s1" for s in submissions)

    def test_submission_requires_id(self, backend):
        with pytest.raises(ValueError):
            backend.save_submission("s1", {"answers": []})

    def test_submission_gets_timestamp(self, backend):
        backend.save_submission("s1", {"id": "x", "answers": []})
        path = backend.submissions_dir / "s1" / "x.json"
        assert "submittedAt" in json.loads(path.read_text(encoding="utf-8"))

    def test_delete_survey_removes_submissions(self, backend):
        backend.save_survey("s1", SURVEY)
        backend.save_submission("s1", {"id": "x", "answers": []})
        assert backend.delete_survey("s1")
        assert backend.load_survey("s1") is None
        assert backend.load_submissions("s1") == []
        assert not backend.delete_survey("s1")

    def test_implements_protocol(self, backend):
        assert isinstance(backend, SurveyBackend)
        assert backend.backend_type == "file"


class TestSupabaseBackendMocked:
    """Tests for SupabaseBackend using mocks."""

    @pytest.fixture
    def mock_supabase(self):
        """Create a mock Supabase client."""
        mock = MagicMock()

        mock_table = MagicMock()
        mock_table.select.return_value = mock_table
        mock_table.insert.return_value = mock_table
        mock_table.upsert.return_value = mock_table
        mock_table.delete.return_value = mock_table
        mock_table.eq.return_value = mock_table
        mock_table.order.return_value = mock_table
        mock_table.execute.return_value = MagicMock(data=[])

        mock.table.return_value = mock_table
        return mock

    @pytest.fixture
    def backend(self, mock_supabase):
        from imagesurvey.storage.supabase_backend import SupabaseBackend
        return SupabaseBackend(client=mock_supabase)

    def test_load_survey_merges_row_columns(self, backend, mock_supabase):
        mock_supabase.table.return_value.execute.return_value = MagicMock(data=[{
            "id": "s1",
            "title": "Quiz",
            "code": "123-456",
            "submission_count": 3,
            "document": {"title": "Quiz", "pages": [], "audioFiles": []},
        }])
        survey = backend.load_survey("s1")
        assert survey["id"] == "s1"
        assert survey["code"] == "123-456"
        assert survey["submissionCount"] == 3
        mock_supabase.table.return_value.eq.assert_called_with("id", "s1")

    def test_load_missing(self, backend):
        assert backend.load_survey("nope") is None

    def test_save_survey_upserts_row(self, backend, mock_supabase):
        backend.save_survey("s1", dict(SURVEY, id="s1"))
        row = mock_supabase.table.return_value.upsert.call_args[0][0]
        assert row["id"] == "s1"
        assert row["code"] == "123-456"
        assert "code" not in row["document"]
        assert row["document"]["pages"] == SURVEY["pages"]

    def test_code_exists(self, backend, mock_supabase):
        mock_supabase.table.return_value.execute.return_value = MagicMock(data=[{"id": "s1"}])
        assert backend.code_exists("123-456")

    def test_list_surveys_error_returns_empty(self, backend, mock_supabase):
        mock_supabase.table.return_value.execute.side_effect = Exception("network down")
        assert backend.list_surveys() == []

    def test_save_submission(self, backend, mock_supabase):
        backend.save_submission("s1", {"id": "sub1", "answers": [{"questionId": "q1", "value": "hi"}]})
        mock_supabase.table.return_value.insert.assert_called_once_with({
            "id": "sub1",
            "survey_id": "s1",
            "answers": [{"questionId": "q1", "value": "hi"}],
        })

    def test_load_submissions(self, backend, mock_supabase):
        mock_supabase.table.return_value.execute.return_value = MagicMock(data=[
            {"id": "sub1", "survey_id": "s1", "answers": [], "created_at": "2024-01-01"},
        ])
        assert backend.load_submissions("s1") == [{"id": "sub1", "surveyId": "s1", "answers": []}]
        mock_supabase.table.return_value.order.assert_called_with("created_at")

    @patch('imagesurvey.storage.supabase_backend.create_client')
    def test_client_created_from_credentials(self, mock_create_client, mock_supabase):
        mock_create_client.return_value = mock_supabase
        from imagesurvey.storage.supabase_backend import SupabaseBackend

        backend = SupabaseBackend(supabase_url="https://test.supabase.co", supabase_key="test-key")
        mock_create_client.assert_called_once_with("https://test.supabase.co", "test-key")
        assert backend.backend_type == "supabase"

    def test_missing_credentials(self, monkeypatch):
        from imagesurvey.storage.supabase_backend import SupabaseBackend
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_KEY", raising=False)
        with pytest.raises(ValueError):
            SupabaseBackend()


class TestBackendFactory:
    """Tests for the backend factory."""

    def test_file_backend_default(self, tmp_path):
        backend = create_backend({"storage_backend": "file", "data_dir": str(tmp_path)})
        assert isinstance(backend, FileBackend)

    def test_unknown_type_falls_back_to_file(self, tmp_path):
        backend = create_backend({"storage_backend": "redis", "data_dir": str(tmp_path)})
        assert backend.backend_type == "file"

    def test_supabase_with_client(self, tmp_path):
        client = MagicMock()
        backend = create_backend({"storage_backend": "supabase", "data_dir": str(tmp_path)},
                                 supabase_client=client)
        assert backend.backend_type == "supabase"

    def test_force_backend(self, tmp_path):
        backend = create_backend({"storage_backend": "supabase", "data_dir": str(tmp_path)},
                                 force_backend="file")
        assert isinstance(backend, FileBackend)
