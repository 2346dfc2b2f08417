import io
from datetime import datetime


def test_health_reports_status_timestamp_uptime(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert isinstance(body["uptime"], float) and body["uptime"] >= 0
    # ISO-8601, UTC
    assert body["timestamp"].endswith("Z")
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


def test_index_renders_category_picker_and_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "Como podemos ajudar você?" in html
    assert 'data-category="bug"' in html and 'data-category="sugestao"' in html
    assert 'name="companyName"' in html
    assert 'name="feedbackType"' in html
    assert "Crítico - Bloqueia o uso da plataforma" in html
    assert "js/feedback.js" in html
    assert "/api/feedback" in html


def test_unknown_api_path_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Not Found"}


def test_missing_upload_is_404(client):
    assert client.get("/uploads/doesnotexist").status_code == 404


def test_upload_path_traversal_is_rejected(client):
    assert client.get("/uploads/../pyproject.toml").status_code == 404
    assert client.get("/uploads/%2e%2e/pyproject.toml").status_code == 404


def test_file_info_for_stored_upload(client):
    resp = client.post(
        "/api/feedback",
        data={
            "companyName": "ACME",
            "feedbackType": "bug",
            "files": (io.BytesIO(b"12345"), "erro.gif", "image/gif"),
        },
        content_type="multipart/form-data",
    )
    stored = resp.get_json()["data"]["fileUrl"]

    info = client.get(f"/api/file-info/{stored}")
    assert info.status_code == 200
    body = info.get_json()
    assert body["filename"] == stored
    assert body["size"] == 5
    assert body["url"] == f"http://localhost/uploads/{stored}"
    assert body["created"] and body["modified"]


def test_file_info_missing_file(client):
    resp = client.get("/api/file-info/nothere")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "File not found"}
