import logging

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from feedback_relay.extensions import db, limiter
from feedback_relay.forms import FeedbackForm, error_list, upload_errors
from feedback_relay.observability import log_event
from feedback_relay.services import storage
from feedback_relay.services.uploads import incoming_files, save_uploads
from feedback_relay.services.webhook import relay_feedback
from . import bp


def _feedback_rate_limit():
    return current_app.config.get("FEEDBACK_RATE_LIMIT") or "20 per minute"


@bp.post("/feedback")
@limiter.limit(_feedback_rate_limit)
def submit_feedback():
    """
    Multipart form: companyName, description, impactLevel, feedbackType + any file parts.
    Answers 200 once the record is stored, whatever the webhook does.
    """
    try:
        files = incoming_files(request.files)
        # Debug (non-PII): which keys arrived, not their values
        log_event(
            current_app.logger,
            "feedback_received",
            keys=list(request.form.keys()),
            file_count=len(files),
            content_type=request.mimetype,
        )

        form = FeedbackForm(formdata=request.form)
        errors = [] if form.validate() else error_list(form.errors)
        errors += upload_errors(
            files,
            max_size=current_app.config["MAX_FILE_SIZE"],
            allowed_exts=current_app.config.get("ALLOWED_UPLOAD_EXTENSIONS"),
        )
        if errors:
            log_event(current_app.logger, "feedback_invalid", logging.WARNING, errors=errors)
            return jsonify({"message": "Dados inválidos", "errors": errors}), 400

        stored = save_uploads(files)
        record = form.to_record()
        if stored:
            record["file_name"] = stored[0].original_name
            record["file_url"] = stored[0].stored_name

        fb = storage.create_feedback(record)
        # No description body in logs
        log_event(
            current_app.logger,
            "feedback_submitted",
            feedback_id=fb.id,
            feedback_type=fb.feedback_type,
            impact_level=fb.impact_level,
            file_count=len(stored),
        )

        relay_feedback(fb, stored)

        return jsonify({"message": "Feedback enviado com sucesso!", "data": fb.to_dict()}), 200
    except HTTPException:
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("POST /api/feedback failed")
        return jsonify({"message": str(e) or "Erro interno do servidor"}), 500
