"""
State API routes — the remote copy of the state document.

GET  /api/state   → stored document verbatim, or {} if never saved
POST /api/state   → overwrite the stored document with the JSON body

Whole-document overwrite, last writer wins. Concurrent saves are not
serialized.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request

from kaizen.core.persistence.remote_state import RemoteStateFile
from kaizen.ui.web.helpers import require_api_key

logger = logging.getLogger(__name__)

state_bp = Blueprint("state", __name__)


def _state_file() -> RemoteStateFile:
    return RemoteStateFile(Path(current_app.config["STATE_FILE"]))


@state_bp.route("/state", methods=["GET"])
@require_api_key
def api_state_read():  # type: ignore[no-untyped-def]
    """Return the stored document."""
    try:
        raw = _state_file().read_raw()
    except OSError as e:
        logger.error("Failed to read state: %s", e)
        return jsonify({"error": "Read error", "message": str(e)}), 500

    if raw is None:
        return jsonify({})
    return current_app.response_class(raw, mimetype="application/json")


@state_bp.route("/state", methods=["POST"])
@require_api_key
def api_state_write():  # type: ignore[no-untyped-def]
    """Overwrite the stored document with the request body."""
    state = request.get_json(force=True, silent=True)
    if state is None:
        return jsonify({"error": "Missing JSON body"}), 400
    if not isinstance(state, (dict, list)):
        return jsonify({"error": "Body must be a JSON object or array"}), 400

    try:
        saved_at = _state_file().write(state)
    except OSError as e:
        logger.error("Failed to write state: %s", e)
        return jsonify({"error": "Write error", "message": str(e)}), 500

    return jsonify({"ok": True, "savedAt": saved_at})
