"""
Web server shared helpers — API key check and request body capture.
"""

from __future__ import annotations

import functools
import hmac
import logging
from collections.abc import Callable
from typing import Any

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
_REDACTED = "***"


def require_api_key(view: Callable[..., Any]) -> Callable[..., Any]:
    """Reject requests whose x-api-key header doesn't match API_SECRET.

    Missing and wrong keys get the same 401.
    """

    @functools.wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        key = request.headers.get(API_KEY_HEADER, "")
        secret = current_app.config["API_SECRET"]
        if key and hmac.compare_digest(key.encode("utf-8"), secret.encode("utf-8")):
            return view(*args, **kwargs)
        logger.info("Rejected %s %s: bad or missing api key", request.method, request.path)
        return jsonify({"error": "Unauthorized: missing or invalid x-api-key"}), 401

    return wrapper


def request_headers() -> dict[str, str]:
    """Request headers with lower-cased names and the api key redacted."""
    headers = {name.lower(): value for name, value in request.headers.items()}
    if API_KEY_HEADER in headers:
        headers[API_KEY_HEADER] = _REDACTED
    return headers


def request_body() -> Any:
    """The request body as received.

    JSON when it parses, form fields for form-encoded posts, otherwise
    the raw text (None for an empty body).
    """
    if request.form:
        return request.form.to_dict()
    data = request.get_json(force=True, silent=True)
    if data is not None:
        return data
    raw = request.get_data(as_text=True)
    return raw or None
