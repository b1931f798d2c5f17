"""
API Blueprint.

Handles all entry-related routes under /api:
- GET  /api/health - Liveness and active model
- GET  /api/settings - Read collection visibility
- PUT  /api/settings - Update collection visibility
- GET  /api/entries - List active entries, newest first
- POST /api/entries - Classify an uploaded image and store it as an entry
- GET  /api/entries/<id> - Entry detail (also while in trash)
- POST /api/entries/<id>/delete - Move to trash (idempotent)
- POST /api/entries/<id>/restore - Restore from trash within one hour
- POST /api/entries/<id>/share - Enable/disable the share link
- GET  /api/entries/<id>/image - Stream the stored image
- GET  /api/share/<token> - Shared entry detail
- GET  /api/public/entries - Public listing (only when the collection is public)
"""

from flask import Blueprint, jsonify, request, send_file

from errors import FieldJournalError, ValidationError
from logging_config import get_logger
from web.services import entries_service, health_service, settings_service

logger = get_logger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")

DEFAULT_IMAGE_MIME = "image/jpeg"


@api_bp.errorhandler(FieldJournalError)
def handle_app_error(error: FieldJournalError):
    """Maps the error taxonomy onto JSON responses."""
    if error.client_facing:
        return jsonify({"error": error.message}), error.status_code

    # Upstream and storage details stay in the log.
    logger.error(
        f"{type(error).__name__} on {request.method} {request.path}: {error.message}",
        exc_info=error,
    )
    return jsonify({"error": error.public_message}), error.status_code


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


def _bool_field(data: dict, key: str) -> bool:
    value = data.get(key)
    if not isinstance(value, bool):
        raise ValidationError(f"'{key}' must be a boolean")
    return value


# =============================================================================
# Health & Settings
# =============================================================================


@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify(health_service.get_system_health())


@api_bp.route("/settings", methods=["GET"])
def get_settings():
    return jsonify(settings_service.get_settings())


@api_bp.route("/settings", methods=["PUT"])
def update_settings():
    is_public = _bool_field(_json_body(), "is_public")
    return jsonify(settings_service.update_settings(is_public))


# =============================================================================
# Entries
# =============================================================================


@api_bp.route("/entries", methods=["GET"])
def list_entries():
    return jsonify(entries_service.list_entries())


@api_bp.route("/entries", methods=["POST"])
def create_entry():
    """Accepts multipart/form-data with an 'image' file field."""
    upload = request.files.get("image")
    if upload is None:
        raise ValidationError("Missing image field")

    data = upload.read()
    mime = upload.mimetype or DEFAULT_IMAGE_MIME
    if mime == "application/octet-stream":
        mime = DEFAULT_IMAGE_MIME

    entry = entries_service.create_entry(data, mime)
    return jsonify({"entry": entry}), 201


@api_bp.route("/entries/<uuid:entry_id>", methods=["GET"])
def get_entry(entry_id):
    return jsonify(entries_service.get_entry(str(entry_id)))


@api_bp.route("/entries/<uuid:entry_id>/delete", methods=["POST"])
def soft_delete_entry(entry_id):
    entry = entries_service.soft_delete_entry(str(entry_id))
    return jsonify({"status": "deleted", "entry": entry})


@api_bp.route("/entries/<uuid:entry_id>/restore", methods=["POST"])
def restore_entry(entry_id):
    entry = entries_service.restore_entry(str(entry_id))
    return jsonify({"status": "restored", "entry": entry})


@api_bp.route("/entries/<uuid:entry_id>/share", methods=["POST"])
def toggle_share(entry_id):
    enable = _bool_field(_json_body(), "enable")
    return jsonify(entries_service.set_share(str(entry_id), enable))


@api_bp.route("/entries/<uuid:entry_id>/image", methods=["GET"])
def entry_image(entry_id):
    stream, mime = entries_service.open_entry_image(str(entry_id))
    return send_file(stream, mimetype=mime, max_age=3600)


# =============================================================================
# Sharing & Public Access
# =============================================================================


@api_bp.route("/share/<token>", methods=["GET"])
def get_shared_entry(token):
    return jsonify(entries_service.get_shared_entry(token))


@api_bp.route("/public/entries", methods=["GET"])
def list_public_entries():
    return jsonify(entries_service.list_public_entries())
