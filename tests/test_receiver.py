import io


def test_test_webhook_echoes_multipart(client):
    resp = client.post(
        "/api/test-webhook",
        data={
            "companyName": "ACME",
            "feedbackType": "bug",
            "files": (io.BytesIO(b"abc"), "print.png", "image/png"),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["message"] == "Dados recebidos com sucesso!"
    assert body["data"] == {"companyName": "ACME", "feedbackType": "bug"}
    assert body["files"] == 1


def test_test_webhook_echoes_json(client):
    resp = client.post("/api/test-webhook", json={"companyName": "ACME", "fileCount": "2"})
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"companyName": "ACME", "fileCount": "2"}
    assert resp.get_json()["files"] == 0
