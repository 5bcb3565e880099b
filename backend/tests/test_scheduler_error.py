from app.core.exceptions import AppError, ConfigurationError, ResourceNotFoundError, SchedulerError


def test_scheduler_error_structure():
    err = SchedulerError(message="Test error", details={"foo": "bar"})
    assert err.status_code == 400
    assert err.message == "Test error"
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_resource_not_found_carries_type_and_id():
    err = ResourceNotFoundError("Timetable", "abc")
    assert err.status_code == 404
    assert err.message == "Timetable with id abc not found"
    assert err.details == {"resource_type": "Timetable", "resource_id": "abc"}


def test_configuration_error_is_server_side():
    assert ConfigurationError("missing secret").status_code == 500


def test_generation_without_inputs_returns_structured_400(client, scheduler_headers):
    response = client.post("/api/timetables/generate", json={}, headers=scheduler_headers)
    assert response.status_code == 400
    body = response.json()
    assert "before generating" in body["message"]
    assert body["details"]["missing"] == ["sections", "subjects", "teachers", "rooms"]


def test_unknown_timetable_returns_structured_404(client, student_headers):
    response = client.get("/api/timetables/does-not-exist", headers=student_headers)
    assert response.status_code == 404
    assert response.json()["details"] == {"resource_type": "Timetable", "resource_id": "does-not-exist"}
