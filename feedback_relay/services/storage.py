from __future__ import annotations

import threading
from typing import Any, Mapping, Optional

from feedback_relay.extensions import db
from feedback_relay.models import Feedback, User, WebhookDelivery

# Held for a whole request while the store is in-memory SQLite (see create_app)
store_lock = threading.Lock()


class DuplicateUsernameError(ValueError):
    pass


def _blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def create_feedback(data: Mapping[str, Any]) -> Feedback:
    """
    Persist a validated submission and return it.
    data keys: company_name, feedback_type (required); description,
    impact_level, file_name, file_url (optional, "" treated as missing).
    """
    fb = Feedback(
        company_name=data["company_name"],
        description=_blank_to_none(data.get("description")),
        impact_level=_blank_to_none(data.get("impact_level")),
        feedback_type=data["feedback_type"],
        file_name=_blank_to_none(data.get("file_name")),
        file_url=_blank_to_none(data.get("file_url")),
    )
    db.session.add(fb)
    db.session.commit()
    return fb


def get_feedback(feedback_id: str) -> Optional[Feedback]:
    return db.session.get(Feedback, feedback_id)


def list_feedbacks() -> list[Feedback]:
    return (
        db.session.query(Feedback)
        .order_by(Feedback.created_at.asc())
        .all()
    )


def get_user(user_id: str) -> Optional[User]:
    return db.session.get(User, user_id)


def get_user_by_username(username: str) -> Optional[User]:
    return db.session.query(User).filter_by(username=username).one_or_none()


def create_user(username: str, password: str) -> User:
    if get_user_by_username(username) is not None:
        raise DuplicateUsernameError(f"Username already taken: {username}")
    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def record_delivery_attempt(feedback_id: str, attempt) -> WebhookDelivery:
    """attempt: a webhook.DeliveryAttempt."""
    row = WebhookDelivery(
        feedback_id=feedback_id,
        strategy=attempt.strategy,
        url=attempt.url,
        status_code=attempt.status_code,
        ok=attempt.ok,
        error=attempt.error,
        latency_ms=attempt.latency_ms,
    )
    db.session.add(row)
    db.session.commit()
    return row


def list_delivery_attempts(feedback_id: str) -> list[WebhookDelivery]:
    return (
        db.session.query(WebhookDelivery)
        .filter_by(feedback_id=feedback_id)
        .order_by(WebhookDelivery.id.asc())
        .all()
    )
