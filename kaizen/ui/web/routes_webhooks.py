"""
Webhook routes — log inbound payloads and acknowledge.

POST /webhook/whatsapp
POST /webhook/twilio-sms   (form-encoded)
POST /webhook/vapi
POST /webhook/sample
POST /webhook/ghl

Each call appends one line to the webhook log and answers
``{"received": true}`` whatever the payload looks like.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Blueprint, current_app, jsonify

from kaizen.core.persistence.webhook_log import WebhookEntry, WebhookLog
from kaizen.ui.web.helpers import request_body, request_headers, require_api_key

logger = logging.getLogger(__name__)

webhooks_bp = Blueprint("webhooks", __name__)

WEBHOOK_SOURCES = ("whatsapp", "twilio-sms", "vapi", "sample", "ghl")


@require_api_key
def webhook_receive(source: str):  # type: ignore[no-untyped-def]
    """Log the call verbatim."""
    log = WebhookLog(Path(current_app.config["WEBHOOK_LOG"]))
    log.append(WebhookEntry(
        source_name=source,
        headers=request_headers(),
        body=request_body(),
    ))
    logger.info("Webhook received: %s", source)
    return jsonify({"received": True})


for _source in WEBHOOK_SOURCES:
    webhooks_bp.add_url_rule(
        f"/{_source}",
        endpoint=_source,
        view_func=webhook_receive,
        methods=["POST"],
        defaults={"source": _source},
    )
