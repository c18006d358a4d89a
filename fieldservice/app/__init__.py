"""Application factory and app-wide configuration."""

from typing import Optional

from flask import Flask, request
from flask_cors import CORS

from fieldservice.app.api.routes import api_bp
from fieldservice.app.config import Settings, settings as default_settings
from fieldservice.app.logging_config import setup_logging
from fieldservice.core.telemetry import track_business_event


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the Flask app instance."""
    settings = settings or default_settings
    setup_logging(settings.log_level)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    app.register_blueprint(api_bp, url_prefix="/api")

    if settings.telemetry_enabled:

        @app.after_request
        def _track_business_event(response):
            """Log the business event behind each tracked API call."""
            track_business_event(request.method, request.path, response.status_code)
            return response

    return app
