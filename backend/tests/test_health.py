def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert "missing_tables" in payload["database"]
    if ready.status_code == 200:
        scheduler = payload["scheduler"]
        assert set(scheduler["inputs"]) == {"sections", "subjects", "teachers", "rooms"}
        assert scheduler["can_generate"] == (not scheduler["missing_inputs"])


def test_security_headers_are_applied(client):
    response = client.get("/api/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_oversized_request_is_rejected(client):
    response = client.post(
        "/api/auth/login",
        content=b"x" * 10,
        headers={"Content-Type": "application/json", "Content-Length": str(10_000_000)},
    )
    assert response.status_code == 413
    assert response.json()["details"]["bytes"] == 10_000_000
