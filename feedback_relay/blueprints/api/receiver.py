from flask import current_app, jsonify, request

from feedback_relay.observability import log_event
from feedback_relay.services.uploads import file_size, incoming_files
from . import bp


@bp.post("/test-webhook")
def test_webhook():
    """
    Local stand-in for the external webhook: point WEBHOOK_URL here in dev
    and watch what the relay sends.
    """
    files = incoming_files(request.files)
    data = request.get_json(silent=True) if request.is_json else request.form.to_dict()
    log_event(
        current_app.logger,
        "test_webhook_received",
        method=request.method,
        content_type=request.mimetype,
        data=data,
        files=[
            {
                "fieldname": f.name,
                "originalname": f.filename,
                "mimetype": f.mimetype,
                "size": file_size(f),
            }
            for f in files
        ],
    )
    return jsonify({
        "success": True,
        "message": "Dados recebidos com sucesso!",
        "data": data or {},
        "files": len(files),
    }), 200
