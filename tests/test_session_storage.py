"""Tests for SessionStorage."""
import json

import pytest

from rotation.session_storage import URLS_KEY, SessionStorage

pytestmark = pytest.mark.qt


def test_set_and_get_item(session_storage):
    session_storage.set_item("greeting", "hello")
    assert session_storage.get_item("greeting") == "hello"


def test_missing_item(session_storage):
    assert session_storage.get_item("nope") is None
    assert session_storage.get_item("nope", "fallback") == "fallback"


def test_snapshot_list_stores_json_array(session_storage):
    assert session_storage.snapshot_list(URLS_KEY, ["a", "", "b"]) is True
    assert json.loads(session_storage.get_item(URLS_KEY)) == ["a", "", "b"]


def test_snapshot_survives_reopen(qt_app, tmp_path):
    path = tmp_path / "reopen.ini"
    SessionStorage(path).snapshot_list(URLS_KEY, ["x"])

    reopened = SessionStorage(path)
    assert json.loads(reopened.get_item(URLS_KEY)) == ["x"]
    reopened.clear()


def test_snapshot_failure_is_reported(session_storage):
    assert session_storage.snapshot_list(URLS_KEY, [object()]) is False
    assert session_storage.get_item(URLS_KEY) is None


def test_clear_removes_file(qt_app, tmp_path):
    storage = SessionStorage(tmp_path / "gone.ini")
    storage.set_item("k", "v")
    assert storage.path.exists()

    storage.clear()

    assert not storage.path.exists()
    assert storage.get_item("k") is None
    # Clearing twice is harmless
    storage.clear()


def test_default_path_is_per_process(qt_app):
    storage = SessionStorage()
    try:
        assert str(storage.path).endswith(".ini")
        assert "kiosk-rotator-session-" in storage.path.name
    finally:
        storage.clear()
