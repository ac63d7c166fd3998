"""
Tests for persistence — local storage, remote state file, webhook log.
"""

import json
from pathlib import Path

import pytest

from kaizen.core.persistence.local_store import (
    LocalStorage,
    StorageError,
    default_storage_path,
)
from kaizen.core.persistence.remote_state import RemoteStateFile
from kaizen.core.persistence.webhook_log import WebhookEntry, WebhookLog


class TestLocalStorage:
    def test_set_and_get(self, tmp_path: Path):
        storage = LocalStorage(tmp_path / "s.json")
        storage.set_item("a", "1")
        assert storage.get_item("a") == "1"
        assert LocalStorage(tmp_path / "s.json").get_item("a") == "1"

    def test_missing_key(self, tmp_path: Path):
        assert LocalStorage(tmp_path / "s.json").get_item("nope") is None

    def test_remove_and_clear(self, tmp_path: Path):
        storage = LocalStorage(tmp_path / "s.json")
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")
        assert storage.keys() == ["b"]
        storage.clear()
        assert storage.keys() == []

    def test_creates_directories(self, tmp_path: Path):
        path = tmp_path / "deep" / "nested" / "s.json"
        LocalStorage(path).set_item("k", "v")
        assert path.is_file()

    def test_corrupt_file_reads_empty(self, tmp_path: Path):
        path = tmp_path / "s.json"
        path.write_text("not json at all {{{")
        assert LocalStorage(path).get_item("k") is None

    def test_no_temp_files_left(self, tmp_path: Path):
        LocalStorage(tmp_path / "s.json").set_item("k", "v")
        assert list(tmp_path.glob(".storage_*.tmp")) == []

    def test_unwritable_raises_storage_error(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        storage = LocalStorage(blocker / "s.json")
        with pytest.raises(StorageError):
            storage.set_item("k", "v")

    def test_default_path_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("KAIZEN_STORAGE", str(tmp_path / "env.json"))
        assert default_storage_path() == tmp_path / "env.json"


class TestRemoteStateFile:
    def test_read_missing(self, tmp_path: Path):
        assert RemoteStateFile(tmp_path / "state.json").read_raw() is None

    def test_write_and_read(self, tmp_path: Path):
        remote = RemoteStateFile(tmp_path / "data" / "state.json")
        saved_at = remote.write({"a": 1})
        assert saved_at
        assert json.loads(remote.read_raw()) == {"a": 1}

    def test_write_overwrites_wholesale(self, tmp_path: Path):
        remote = RemoteStateFile(tmp_path / "state.json")
        remote.write({"a": 1, "b": 2})
        remote.write({"c": 3})
        assert json.loads(remote.read_raw()) == {"c": 3}

    def test_pretty_printed(self, tmp_path: Path):
        remote = RemoteStateFile(tmp_path / "state.json")
        remote.write({"a": 1})
        assert remote.read_raw() == '{\n  "a": 1\n}'


class TestWebhookLog:
    def test_append_and_read(self, tmp_path: Path):
        log = WebhookLog(tmp_path / "webhooks.log")
        log.append(WebhookEntry(source_name="sample", headers={"h": "v"}, body={"event": "sample"}))

        entries = log.read_all()
        assert len(entries) == 1
        assert entries[0].source_name == "sample"
        assert entries[0].body == {"event": "sample"}

    def test_line_shape(self, tmp_path: Path):
        log = WebhookLog(tmp_path / "webhooks.log")
        log.append(WebhookEntry(source_name="vapi", body="raw text"))
        line = json.loads(log.path.read_text().strip())
        assert set(line) == {"timestamp", "sourceName", "headers", "body"}
        assert line["body"] == "raw text"

    def test_append_only(self, tmp_path: Path):
        log = WebhookLog(tmp_path / "webhooks.log")
        for i in range(5):
            log.append(WebhookEntry(source_name=f"s{i}"))
        assert log.entry_count() == 5
        assert [e.source_name for e in log.read_recent(2)] == ["s3", "s4"]

    def test_corrupt_line_skipped(self, tmp_path: Path):
        path = tmp_path / "webhooks.log"
        log = WebhookLog(path)
        log.append(WebhookEntry(source_name="ok"))
        with path.open("a") as f:
            f.write("garbage\n")
        assert [e.source_name for e in log.read_all()] == ["ok"]

    def test_empty_log(self, tmp_path: Path):
        log = WebhookLog(tmp_path / "none.log")
        assert log.read_all() == []
        assert log.entry_count() == 0

    def test_write_failure_returns_false(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        log = WebhookLog(blocker / "webhooks.log")
        assert log.append(WebhookEntry(source_name="x")) is False
