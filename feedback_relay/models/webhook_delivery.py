from feedback_relay.extensions import db
from ._helpers import utcnow, isoformat_utc

class WebhookDelivery(db.Model):
    """One outbound webhook attempt. Audit trail only; nothing is retried from here."""
    __tablename__ = "webhook_deliveries"

    id = db.Column(db.Integer, primary_key=True)
    feedback_id = db.Column(db.String(36), db.ForeignKey("feedbacks.id"), nullable=False, index=True)
    strategy = db.Column(db.String(20), nullable=False)  # multipart|json|get
    url = db.Column(db.Text, nullable=False)
    status_code = db.Column(db.Integer, nullable=False, default=0)  # 0 = request raised
    ok = db.Column(db.Boolean, nullable=False, default=False)
    error = db.Column(db.Text, nullable=True)
    latency_ms = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "feedbackId": self.feedback_id,
            "strategy": self.strategy,
            "url": self.url,
            "statusCode": self.status_code,
            "ok": self.ok,
            "error": self.error,
            "latencyMs": self.latency_ms,
            "createdAt": isoformat_utc(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<WebhookDelivery id={self.id} strategy={self.strategy} status={self.status_code}>"
