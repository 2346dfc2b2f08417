from .feedback import Feedback, FEEDBACK_TYPES, IMPACT_LEVELS
from .user import User
from .webhook_delivery import WebhookDelivery

__all__ = ["Feedback", "FEEDBACK_TYPES", "IMPACT_LEVELS", "User", "WebhookDelivery"]
