"""
API gateway: combines auth, centers, comments, and page blueprints.
This is the entrypoint for local development and deployment.
"""

from flask import Flask, jsonify
from flask_cors import CORS
import os
import logging
from typing import Any, Dict, Optional
from dotenv import load_dotenv

from petwiki.database.init_db import ensure_indexes

load_dotenv()

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")


def cors_origins():
    """
    Origins allowed by CORS, from the comma separated CORS_ORIGINS variable.
    Defaults to every origin.
    """
    raw = os.getenv("CORS_ORIGINS", "*").strip()
    if raw == "*":
        return "*"
    return [o.strip() for o in raw.split(",") if o.strip()]


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Creates the database indexes (including the unique email index) unless
    ENSURE_INDEXES is false, so WSGI servers that call create_app() directly
    get the same guarantees as main().

    Args:
        config (dict, optional): Values merged into app.config.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__, static_folder=None)
    app.config["ENSURE_INDEXES"] = os.getenv("ENSURE_INDEXES", "true").lower() not in ("0", "false", "no")
    app.config.update(config or {})

    if app.config["ENSURE_INDEXES"]:
        ensure_indexes()

    CORS(app, resources={
        r"/*": {
            "origins": cors_origins(),
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    # --- REGISTER BLUEPRINTS ---
    from petwiki.auth_service.routes import auth_bp
    from petwiki.centers_service.routes import centers_bp
    from petwiki.comments_service.routes import comments_bp
    from petwiki.pages.routes import pages_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(centers_bp, url_prefix="/api/centers")
    app.register_blueprint(comments_bp, url_prefix="/api/comments")

    # --- BASIC HEALTH CHECKPOINT ---
    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    # Catch-all page routes go last
    app.register_blueprint(pages_bp)

    logging.info("All blueprints registered successfully.")

    @app.errorhandler(500)
    def internal_error(error):
        logging.error(f"Unhandled error: {getattr(error, 'original_exception', error)}")
        return jsonify({"error": "Something broke!"}), 500

    return app


def main() -> None:
    app = create_app()
    port = int(os.getenv("PORT", 5000))
    logging.info(f"Server running on port {port}")
    logging.info(f"Open in browser: http://localhost:{port}")
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
