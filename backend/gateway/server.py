"""
API gateway: combines the auth and events blueprints.
This is the local entrypoint for development.
"""

import logging
from typing import Tuple

from flask import Flask, Response, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, NotFound

from backend import config
from backend.auth_service.routes import auth_bp
from backend.errors import ApiError
from backend.events_service.routes import events_bp

# Basic console logging during API requests
logging.basicConfig(level=config.LOG_LEVEL, format="[%(levelname)s] %(asctime)s - %(message)s")


def register_error_handlers(app: Flask) -> None:
    """
    Translate exceptions into JSON responses.

    - ApiError subclasses: their own status and message.
    - Werkzeug HTTP errors (404, 405, ...): their status and description.
    - Anything else: logged with traceback, reported as a generic 500.
    """

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> Tuple[Response, int]:
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(NotFound)
    def handle_not_found(error: NotFound) -> Tuple[Response, int]:
        return jsonify({"error": "Route not found", "code": "NotFound"}), 404

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException) -> Tuple[Response, int]:
        return jsonify({"error": error.description, "code": error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> Tuple[Response, int]:
        logging.exception(f"Unhandled error: {error}")
        return jsonify({"error": "Internal Server Error", "code": "ServerError"}), 500


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__)
    CORS(app, resources={
        r"/api/*": {
            "origins": [config.FRONTEND_URL],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True
        }
    })

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(events_bp, url_prefix="/api/events")
    logging.info("All blueprints registered successfully.")

    register_error_handlers(app)

    # --- BASIC HEALTH CHECKPOINT ---
    @app.route("/api/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"message": "Server is running!"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=config.GATEWAY_PORT, debug=True)
