# ------------------------------------------------------------------------------
# web_interface.py
# ------------------------------------------------------------------------------

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import get_config
from logging_config import get_logger
from web.blueprints.api import api_bp
from web.services.components_service import get_components, init_components

logger = get_logger(__name__)


def create_web_interface(components=None, config=None):
    """
    Creates and returns the Flask application.

    Args:
        components: Optional core.components.Components; the process-wide
                    defaults are built from configuration when omitted.
        config: Optional configuration dict (defaults to get_config()).

    Returns:
        dict with:
        - server: the Flask app (WSGI callable)
        - components: the entry subsystem the app serves
        - run: function(host, port, debug) to start the development server
    """
    config = config or get_config()
    components = init_components(components) if components else get_components()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config["MAX_UPLOAD_MB"] * 1024 * 1024
    app.json.sort_keys = False

    # A separately hosted UI calls the API cross-origin
    CORS(app, resources={r"/api/*": {"origins": config.get("CORS_ORIGINS", "*")}})

    app.register_blueprint(api_bp)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        """JSON bodies for routing errors and oversized uploads."""
        return jsonify({"error": error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.error(f"Unhandled {type(error).__name__}: {error}", exc_info=error)
        return jsonify({"error": "Internal error"}), 500

    def run(host=None, port=None, debug=False):
        app.run(
            host=host or config["HOST"],
            port=port or config["PORT"],
            debug=debug,
            use_reloader=False,
        )

    logger.info(
        f"Web interface created (upload limit {config['MAX_UPLOAD_MB']} MB, "
        f"model {components.classifier.get_model_id()})"
    )
    return {"server": app, "components": components, "run": run}
