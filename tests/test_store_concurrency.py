import threading

from feedback_relay.extensions import db
from feedback_relay.models import Feedback
from feedback_relay.services import storage


def test_requests_take_turns_on_the_in_memory_store(app, monkeypatch):
    flushed = threading.Event()
    resume = threading.Event()

    def create_paused_after_flush(data):
        fb = Feedback(company_name=data["company_name"], feedback_type=data["feedback_type"])
        db.session.add(fb)
        db.session.flush()
        flushed.set()
        resume.wait(timeout=5)
        db.session.commit()
        return fb

    monkeypatch.setattr(storage, "create_feedback", create_paused_after_flush)

    responses = {}

    def submit():
        responses["submit"] = app.test_client().post(
            "/api/feedback",
            data={"companyName": "ACME", "feedbackType": "bug"},
            content_type="multipart/form-data",
        )

    def health():
        responses["health"] = app.test_client().get("/api/health")

    writer = threading.Thread(target=submit)
    reader = threading.Thread(target=health)
    writer.start()
    try:
        assert flushed.wait(timeout=5)
        reader.start()
        reader.join(timeout=0.3)
        # Second request waits while the first holds an uncommitted row
        assert reader.is_alive()
    finally:
        resume.set()
        writer.join(timeout=5)
        if reader.ident is not None:
            reader.join(timeout=5)

    assert responses["submit"].status_code == 200
    assert responses["health"].status_code == 200
    feedback_id = responses["submit"].get_json()["data"]["id"]
    with app.app_context():
        assert storage.get_feedback(feedback_id) is not None
        assert storage.list_delivery_attempts(feedback_id)


def test_store_lock_is_free_after_each_request(client):
    client.get("/api/health")
    client.post("/api/feedback", data={}, content_type="multipart/form-data")
    assert storage.store_lock.acquire(blocking=False)
    storage.store_lock.release()
