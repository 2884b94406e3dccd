"""
Tests for backend selection and the Supabase services' wiring.
"""

from unittest.mock import MagicMock, patch

import pytest

from models.schema import ParticipantResult
from models.defaults import initial_event_state
from database.factory import BackendMode, create_data_service, resolve_backend_mode
from database.live import SupabaseEventService, SupabaseStorageService
from database.mock import LocalStore, MockEventService


class TestResolveBackendMode:

    def test_default_is_mock(self, monkeypatch):
        monkeypatch.delenv("QUESTER_BACKEND", raising=False)
        assert resolve_backend_mode() == BackendMode.MOCK

    def test_env_value(self, monkeypatch):
        monkeypatch.setenv("QUESTER_BACKEND", " LIVE ")
        assert resolve_backend_mode() == BackendMode.LIVE

    def test_explicit_value_wins(self, monkeypatch):
        monkeypatch.setenv("QUESTER_BACKEND", "live")
        assert resolve_backend_mode("mock") == BackendMode.MOCK

    def test_unknown_value(self):
        with pytest.raises(ValueError):
            resolve_backend_mode("firebase")


def test_mock_data_service():
    data = create_data_service(BackendMode.MOCK, store=LocalStore())
    assert isinstance(data.events, MockEventService)
    assert data.is_offline


def test_live_data_service_uses_given_client():
    client = MagicMock()
    data = create_data_service(BackendMode.LIVE, client=client)
    assert isinstance(data.events, SupabaseEventService)
    assert data.events.supabase is client
    assert not data.is_offline


def test_live_without_client_raises_connection_error():
    with patch("database.factory.get_supabase_client", return_value=None):
        data = create_data_service(BackendMode.LIVE)
    with pytest.raises(ConnectionError):
        data.events.get_all_events()
    with pytest.raises(ConnectionError):
        data.events.save_event(initial_event_state("race-1"))


class TestSupabaseEvents:

    def test_save_event_upserts_document(self):
        client = MagicMock()
        SupabaseEventService(client).save_event(initial_event_state("race-1", owner_id="u1"))
        client.table.assert_called_with("events")
        row = client.table.return_value.upsert.call_args[0][0]
        assert row["id"] == "race-1"
        assert row["owner_id"] == "u1"
        assert row["data"]["startLocation"]["radiusMeters"] == 50

    def test_public_query(self):
        client = MagicMock()
        query = client.table.return_value.select.return_value
        query.eq.return_value.execute.return_value.data = [
            {"data": initial_event_state("race-1", is_public=True).to_dict()}
        ]
        events = SupabaseEventService(client).get_all_events()
        query.eq.assert_called_once_with("is_public", True)
        assert [e.id for e in events] == ["race-1"]

    def test_save_result_uses_rpc(self):
        client = MagicMock()
        SupabaseEventService(client).save_result("race-1", ParticipantResult(id="p1", name="Ada"))
        name, params = client.rpc.call_args[0]
        assert name == "append_event_result"
        assert params["p_event_id"] == "race-1"
        assert params["p_result"]["id"] == "p1"

    def test_backend_errors_propagate(self):
        client = MagicMock()
        client.table.side_effect = RuntimeError("503")
        with pytest.raises(RuntimeError):
            SupabaseEventService(client).delete_event("race-1")


class TestSupabaseStorage:

    def test_upload_success_is_durable(self):
        client = MagicMock()
        bucket = client.storage.from_.return_value
        bucket.get_public_url.return_value = "https://cdn/covers/x.png"
        blob = SupabaseStorageService(client, bucket="media").upload_blob("covers/x.png", b"data")
        assert blob.durable
        assert blob.url == "https://cdn/covers/x.png"
        client.storage.from_.assert_called_with("media")

    def test_upload_failure_degrades(self):
        client = MagicMock()
        client.storage.from_.return_value.upload.side_effect = RuntimeError("403")
        blob = SupabaseStorageService(client).upload_blob("covers/x.png", b"data")
        assert not blob.durable
        assert blob.url.startswith("file://")

    def test_no_client_degrades(self):
        blob = SupabaseStorageService(None).upload_blob("covers/x.png", b"data")
        assert not blob.durable
