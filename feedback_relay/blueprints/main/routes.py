from flask import current_app, render_template, send_from_directory

from feedback_relay.extensions import limiter
from feedback_relay.forms import FeedbackForm
from feedback_relay.services.uploads import upload_dir
from . import bp


@bp.get("/")
def index():
    """Category picker + feedback form; submission happens via fetch to /api/feedback."""
    form = FeedbackForm()
    max_mb = current_app.config["MAX_FILE_SIZE"] // (1024 * 1024)
    return render_template(
        "index.html",
        form=form,
        max_file_mb=max_mb,
        max_file_size=current_app.config["MAX_FILE_SIZE"],
    )


@limiter.exempt
@bp.get("/uploads/<path:filename>")
def uploaded_file(filename):
    # send_from_directory rejects traversal outside the upload folder (404)
    return send_from_directory(upload_dir(), filename)
