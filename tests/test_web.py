"""
Tests for the remote state service — app factory, state API, webhooks.
"""

from __future__ import annotations

import json

import pytest
from flask.testing import FlaskClient

from kaizen.core.config.loader import ServerConfig
from kaizen.core.persistence.webhook_log import WebhookLog
from kaizen.ui.web.server import create_app

TEST_SECRET = "test-secret"
AUTH = {"x-api-key": TEST_SECRET}


@pytest.fixture()
def client(server_config: ServerConfig) -> FlaskClient:
    app = create_app(server_config)
    app.config["TESTING"] = True
    return app.test_client()


# ── App Factory Tests ────────────────────────────────────────────────


class TestAppFactory:
    def test_create_app(self, server_config: ServerConfig):
        app = create_app(server_config)
        assert app.config["API_SECRET"] == TEST_SECRET
        assert app.config["STATE_FILE"] == str(server_config.state_file)
        assert server_config.data_dir.is_dir()

    def test_unknown_path(self, client: FlaskClient):
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert resp.data == b"Not found"


# ── Auth Tests ───────────────────────────────────────────────────────


class TestAuth:
    def test_missing_key(self, client: FlaskClient):
        resp = client.get("/api/state")
        assert resp.status_code == 401
        assert "Unauthorized" in resp.get_json()["error"]

    def test_wrong_key_same_response(self, client: FlaskClient):
        missing = client.get("/api/state")
        wrong = client.get("/api/state", headers={"x-api-key": "wrong"})
        assert wrong.status_code == 401
        assert wrong.get_json() == missing.get_json()

    def test_wrong_key_post_leaves_file_untouched(self, client: FlaskClient, server_config: ServerConfig):
        resp = client.post("/api/state", json={"a": 1}, headers={"x-api-key": "wrong"})
        assert resp.status_code == 401
        assert not server_config.state_file.exists()

    def test_wrong_key_does_not_overwrite(self, client: FlaskClient, server_config: ServerConfig):
        client.post("/api/state", json={"keep": True}, headers=AUTH)
        before = server_config.state_file.read_text()
        client.post("/api/state", json={"a": 1}, headers={"x-api-key": "wrong"})
        assert server_config.state_file.read_text() == before


# ── State API Tests ──────────────────────────────────────────────────


class TestStateApi:
    def test_get_before_any_save(self, client: FlaskClient):
        resp = client.get("/api/state", headers=AUTH)
        assert resp.status_code == 200
        assert resp.get_json() == {}

    def test_post_then_get(self, client: FlaskClient):
        resp = client.post("/api/state", json={"a": 1}, headers=AUTH)
        assert resp.status_code == 200
        ack = resp.get_json()
        assert ack["ok"] is True
        assert ack["savedAt"]

        resp = client.get("/api/state", headers=AUTH)
        assert resp.status_code == 200
        assert resp.get_json() == {"a": 1}

    def test_post_overwrites_whole_document(self, client: FlaskClient):
        client.post("/api/state", json={"a": 1, "b": 2}, headers=AUTH)
        client.post("/api/state", json={"c": 3}, headers=AUTH)
        assert client.get("/api/state", headers=AUTH).get_json() == {"c": 3}

    def test_post_missing_body(self, client: FlaskClient):
        resp = client.post("/api/state", headers=AUTH)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Missing JSON body"}

    def test_post_invalid_json(self, client: FlaskClient):
        resp = client.post(
            "/api/state", data="{broken", headers={**AUTH, "Content-Type": "application/json"}
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize("body", ["just a string", 42, True])
    def test_post_non_container_rejected(self, client: FlaskClient, server_config: ServerConfig, body):
        resp = client.post("/api/state", json=body, headers=AUTH)
        assert resp.status_code == 400
        assert not server_config.state_file.exists()

    def test_post_array_accepted(self, client: FlaskClient):
        resp = client.post("/api/state", json=[1, 2], headers=AUTH)
        assert resp.status_code == 200
        assert client.get("/api/state", headers=AUTH).get_json() == [1, 2]

    def test_stored_file_is_pretty_printed(self, client: FlaskClient, server_config: ServerConfig):
        client.post("/api/state", json={"a": 1}, headers=AUTH)
        assert server_config.state_file.read_text() == '{\n  "a": 1\n}'

    def test_write_error_is_500(self, client: FlaskClient, server_config: ServerConfig):
        server_config.state_file.mkdir()  # a directory where the file should be
        resp = client.post("/api/state", json={"a": 1}, headers=AUTH)
        assert resp.status_code == 500
        assert resp.get_json()["error"] == "Write error"


# ── Webhook Tests ────────────────────────────────────────────────────


class TestWebhooks:
    def _log(self, server_config: ServerConfig) -> WebhookLog:
        return WebhookLog(server_config.webhook_log)

    def test_sample_webhook(self, client: FlaskClient, server_config: ServerConfig):
        resp = client.post("/webhook/sample", json={"event": "sample"}, headers=AUTH)
        assert resp.status_code == 200
        assert resp.get_json() == {"received": True}

        lines = server_config.webhook_log.read_text().splitlines()
        assert len(lines) == 1
        assert '"sample"' in lines[0]
        entry = json.loads(lines[0])
        assert entry["sourceName"] == "sample"
        assert entry["body"] == {"event": "sample"}

    def test_each_call_appends_one_line(self, client: FlaskClient, server_config: ServerConfig):
        for _ in range(3):
            client.post("/webhook/vapi", json={"callId": "c"}, headers=AUTH)
        assert self._log(server_config).entry_count() == 3

    @pytest.mark.parametrize("source", ["whatsapp", "twilio-sms", "vapi", "sample", "ghl"])
    def test_all_sources_accepted(self, client: FlaskClient, server_config: ServerConfig, source: str):
        resp = client.post(f"/webhook/{source}", json={}, headers=AUTH)
        assert resp.status_code == 200
        assert self._log(server_config).read_all()[0].source_name == source

    def test_form_encoded_body(self, client: FlaskClient, server_config: ServerConfig):
        resp = client.post(
            "/webhook/twilio-sms",
            data={"From": "+447700900000", "Body": "YES"},
            headers=AUTH,
        )
        assert resp.status_code == 200
        entry = self._log(server_config).read_all()[0]
        assert entry.body == {"From": "+447700900000", "Body": "YES"}

    def test_malformed_body_logged_as_is(self, client: FlaskClient, server_config: ServerConfig):
        resp = client.post(
            "/webhook/ghl",
            data="{not json",
            headers={**AUTH, "Content-Type": "application/json"},
        )
        assert resp.status_code == 200
        assert self._log(server_config).read_all()[0].body == "{not json"

    def test_api_key_redacted_in_log(self, client: FlaskClient, server_config: ServerConfig):
        client.post("/webhook/sample", json={}, headers=AUTH)
        entry = self._log(server_config).read_all()[0]
        assert entry.headers["x-api-key"] == "***"
        assert TEST_SECRET not in server_config.webhook_log.read_text()

    def test_unauthorized_not_logged(self, client: FlaskClient, server_config: ServerConfig):
        resp = client.post("/webhook/sample", json={"event": "sample"})
        assert resp.status_code == 401
        assert self._log(server_config).entry_count() == 0

    def test_unknown_source(self, client: FlaskClient):
        resp = client.post("/webhook/fax", json={}, headers=AUTH)
        assert resp.status_code == 404

    def test_get_on_webhook_is_not_found(self, client: FlaskClient):
        resp = client.get("/webhook/sample", headers=AUTH)
        assert resp.status_code == 404
        assert resp.data == b"Not found"
