"""
Remote state service — Flask app factory.

Serves the shared-secret state API (``/api/state``) and the webhook
sink (``/webhook/*``). Everything is file-backed under ``data_dir``:

    state.json     the single stored document
    webhooks.log   append-only NDJSON of webhook calls
"""

from __future__ import annotations

import logging

from flask import Flask

from kaizen.core.config.loader import ServerConfig

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 5 * 1024 * 1024


def create_app(config: ServerConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Server settings (defaults if omitted).

    Returns:
        Configured Flask application.
    """
    config = config or ServerConfig()
    app = Flask(__name__, static_folder=None)

    config.data_dir.mkdir(parents=True, exist_ok=True)

    app.config["API_SECRET"] = config.api_secret
    app.config["DATA_DIR"] = str(config.data_dir)
    app.config["STATE_FILE"] = str(config.state_file)
    app.config["WEBHOOK_LOG"] = str(config.webhook_log)
    app.config["MAX_CONTENT_LENGTH"] = MAX_BODY_BYTES

    from kaizen.ui.web.routes_state import state_bp
    from kaizen.ui.web.routes_webhooks import webhooks_bp

    app.register_blueprint(state_bp, url_prefix="/api")
    app.register_blueprint(webhooks_bp, url_prefix="/webhook")

    # Wrong method on a known path answers like an unknown path
    @app.errorhandler(404)
    @app.errorhandler(405)
    def _not_found(_e):  # type: ignore[no-untyped-def]
        return "Not found", 404

    logger.info("Kaizen server app created (data=%s)", config.data_dir)
    return app


def run_server(app: Flask, host: str = "127.0.0.1", port: int = 3000, debug: bool = False) -> None:
    """Run the Flask development server."""
    logger.info("Kaizen Automation server listening on %s:%d", host, port)
    logger.info("API_SECRET is %s", "SET" if app.config.get("API_SECRET") else "NOT SET")
    app.run(host=host, port=port, debug=debug, use_reloader=False)
