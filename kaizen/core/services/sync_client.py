"""
Sync client — push/pull the whole state document to the remote service.

Both directions replace the entire document (last writer wins). There is
no retry, backoff or merge: a failure raises ``SyncError`` with a
human-readable message and the caller decides what to show.

Also sends the sample webhook payloads used to test an integration.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
STATE_PATH = "/api/state"
DEFAULT_TIMEOUT = 15.0


class SyncError(Exception):
    """A remote call failed (network error or non-2xx response)."""


# kind → (path, content type, body)
WEBHOOK_SAMPLES: dict[str, tuple[str, str, Any]] = {
    "twilio": (
        "/webhook/twilio-sms",
        "application/x-www-form-urlencoded",
        {"From": "+447700900000", "Body": "YES", "MessageSid": "SM123"},
    ),
    "wa": (
        "/webhook/whatsapp",
        "application/json",
        {
            "object": "whatsapp_business_account",
            "entry": [{"changes": [{"value": {
                "messages": [{"from": "+447700900000", "id": "wamid.1", "text": {"body": "YES"}}],
                "contacts": [{"profile": {"name": "Ali"}}],
            }}]}],
        },
    ),
    "vapi": (
        "/webhook/vapi",
        "application/json",
        {
            "callId": "call-123",
            "from": "+44...",
            "transcript": "I will attend",
            "intent": "confirm",
            "confidence": 0.92,
            "tags": ["WA-Valid", "OPT-In"],
        },
    ),
    "webhook": (
        "/webhook/sample",
        "application/json",
        {"event": "sample", "detail": "test webhook"},
    ),
    "ghl": (
        "/webhook/ghl",
        "application/json",
        {"event": "ghl_test", "status": "ok"},
    ),
}


class SyncClient:
    """HTTP client for the remote state service."""

    def __init__(self, base_url: str, api_key: str, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key or ""
        self.timeout = timeout

    def _check_configured(self) -> None:
        if not self.base_url or not self.api_key:
            raise SyncError("Provide server URL and API key")

    def _request(
        self,
        method: str,
        path: str,
        body: bytes | None = None,
        content_type: str | None = None,
        action: str = "Request",
    ) -> bytes:
        self._check_configured()
        headers = {API_KEY_HEADER: self.api_key}
        if content_type:
            headers["Content-Type"] = content_type

        url = self.base_url + path
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return resp.read()
        except urllib.error.HTTPError as e:
            detail = e.read().decode("utf-8", errors="replace").strip()
            msg = f"{action} failed: {e.code} {e.reason}"
            if detail:
                msg += f" — {detail}"
            logger.warning(msg)
            raise SyncError(msg) from e
        except (urllib.error.URLError, OSError) as e:
            reason = getattr(e, "reason", e)
            msg = f"{action} failed: {reason}"
            logger.warning(msg)
            raise SyncError(msg) from e

    @staticmethod
    def _decode(raw: bytes, action: str) -> Any:
        try:
            return json.loads(raw.decode("utf-8") or "null")
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SyncError(f"{action} failed: invalid JSON response") from e

    def push(self, document: dict[str, Any]) -> dict[str, Any]:
        """POST the full document. Returns the server acknowledgement."""
        body = json.dumps(document, ensure_ascii=False).encode("utf-8")
        raw = self._request("POST", STATE_PATH, body, "application/json", action="Save")
        ack = self._decode(raw, "Save")
        logger.info("Pushed state to %s (savedAt=%s)", self.base_url,
                    ack.get("savedAt") if isinstance(ack, dict) else None)
        return ack if isinstance(ack, dict) else {}

    def pull(self) -> dict[str, Any]:
        """GET the stored document (``{}`` if the remote was never saved to)."""
        raw = self._request("GET", STATE_PATH, action="Load")
        data = self._decode(raw, "Load")
        if not isinstance(data, dict):
            raise SyncError("Load failed: expected a JSON object")
        logger.info("Pulled state from %s", self.base_url)
        return data

    def send_webhook_test(self, kind: str) -> dict[str, Any]:
        """POST one of the sample payloads in ``WEBHOOK_SAMPLES``."""
        if kind not in WEBHOOK_SAMPLES:
            raise SyncError(
                f"Unknown webhook test '{kind}' (choose from {', '.join(WEBHOOK_SAMPLES)})"
            )
        path, content_type, payload = WEBHOOK_SAMPLES[kind]
        if content_type == "application/json":
            body = json.dumps(payload).encode("utf-8")
        else:
            body = urllib.parse.urlencode(payload).encode("utf-8")
        raw = self._request("POST", path, body, content_type, action="Webhook test")
        ack = self._decode(raw, "Webhook test")
        return ack if isinstance(ack, dict) else {}
