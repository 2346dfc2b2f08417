from feedback_relay.extensions import db
from ._helpers import new_id, utcnow, isoformat_utc

FEEDBACK_TYPES = ("bug", "sugestao")
IMPACT_LEVELS = ("baixo", "medio", "alto", "critico")

class Feedback(db.Model):
    __tablename__ = "feedbacks"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    company_name = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=True)
    impact_level = db.Column(db.String(20), nullable=True)   # baixo|medio|alto|critico
    feedback_type = db.Column(db.String(20), nullable=False) # bug|sugestao
    # First attachment only; the webhook receives all of them
    file_name = db.Column(db.Text, nullable=True)
    file_url = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "companyName": self.company_name,
            "description": self.description,
            "impactLevel": self.impact_level,
            "feedbackType": self.feedback_type,
            "fileName": self.file_name,
            "fileUrl": self.file_url,
            "createdAt": isoformat_utc(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Feedback id={self.id} type={self.feedback_type} company={self.company_name!r}>"
