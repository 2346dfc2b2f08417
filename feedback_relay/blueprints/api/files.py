from flask import current_app, jsonify, request

from feedback_relay.services.uploads import file_info
from . import bp


@bp.get("/file-info/<filename>")
def get_file_info(filename):
    """Metadata + public URL for a stored attachment (the webhook side links to these)."""
    try:
        info = file_info(filename, base_url=request.host_url)
    except OSError:
        current_app.logger.exception("GET /api/file-info failed")
        return jsonify({"error": "Error reading file information"}), 500
    if info is None:
        return jsonify({"error": "File not found"}), 404
    return jsonify(info), 200
