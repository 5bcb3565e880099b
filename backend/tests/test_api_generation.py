import csv
import io

import pytest


@pytest.fixture()
def seeded(client, admin_headers):
    def post(path, payload):
        response = client.post(path, json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    department = post("/api/departments/", {"name": "Computer Science", "code": "CSE"})
    dept_id = department["id"]
    smith = post("/api/teachers/", {"name": "Dr. Smith", "department_id": dept_id, "max_hours_per_week": 20})
    jones = post(
        "/api/teachers/",
        {
            "name": "Dr. Jones",
            "department_id": dept_id,
            "availability": [{"day": "Tuesday", "start_time": "09:00", "end_time": "17:00"}],
        },
    )
    ds = post(
        "/api/subjects/",
        {"code": "CS201", "name": "Data Structures", "department_id": dept_id, "hours_per_week": 3, "assigned_teacher_id": smith["id"]},
    )
    lab = post(
        "/api/subjects/",
        {
            "code": "CS201L",
            "name": "Data Structures Lab",
            "department_id": dept_id,
            "hours_per_week": 2,
            "requires_lab": True,
            "assigned_teacher_id": jones["id"],
        },
    )
    orphan = post("/api/subjects/", {"code": "CS299", "name": "Seminar", "department_id": dept_id, "hours_per_week": 1})
    room = post("/api/rooms/", {"name": "Room 101", "type": "classroom", "capacity": 60})
    lab_room = post("/api/rooms/", {"name": "Lab 1", "type": "lab", "capacity": 40})
    section = post(
        "/api/sections/",
        {
            "name": "CSE-A",
            "department_id": dept_id,
            "student_count": 35,
            "subject_ids": [ds["id"], lab["id"], orphan["id"]],
        },
    )
    return {
        "department": department,
        "teachers": [smith, jones],
        "subjects": [ds, lab, orphan],
        "rooms": [room, lab_room],
        "section": section,
    }


def _generate(client, headers, **payload):
    response = client.post("/api/timetables/generate", json=payload, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_generate_persists_and_reports(client, seeded, scheduler_headers):
    body = _generate(client, scheduler_headers, name="Spring draft")
    timetable = body["timetable"]

    assert body["persisted"] is True
    assert timetable["name"] == "Spring draft"
    assert timetable["departmentId"] == seeded["department"]["id"]
    # the seminar has no teacher, which is the only hard violation
    assert timetable["conflicts"] == 1
    assert "1 hard conflicts" in body["warning"]

    per_subject = {}
    for entry in timetable["entries"]:
        per_subject.setdefault(entry["subjectId"], []).append(entry)
    ds, lab, _ = seeded["subjects"]
    assert len(per_subject[ds["id"]]) == 3
    assert len(per_subject[lab["id"]]) == 2
    assert {entry["roomId"] for entry in per_subject[lab["id"]]} == {seeded["rooms"][1]["id"]}
    assert {entry["timeSlot"]["day"] for entry in per_subject[lab["id"]]} == {"Tuesday"}

    descriptions = [item["description"] for item in timetable["constraints"] if item["violated"]]
    assert descriptions == ["No teacher assigned to Seminar for CSE-A"]

    listing = client.get("/api/timetables/", headers=scheduler_headers).json()
    assert [item["id"] for item in listing] == [timetable["id"]]
    assert listing[0]["entryCount"] == 5
    assert listing[0]["conflicts"] == 1

    stored = client.get(f"/api/timetables/{timetable['id']}", headers=scheduler_headers).json()
    assert stored["entries"] == timetable["entries"]


def test_generate_without_persist_leaves_history_empty(client, seeded, scheduler_headers):
    body = _generate(client, scheduler_headers, persist=False)
    assert body["persisted"] is False
    assert body["timetable"]["name"].startswith("Timetable ")
    assert client.get("/api/timetables/", headers=scheduler_headers).json() == []


def test_preferences_override_changes_the_scan(client, seeded, scheduler_headers):
    override = {"preferredStartTime": "14:00", "preferredEndTime": "17:00"}
    body = _generate(client, scheduler_headers, persist=False, preferences_override=override)
    starts = {entry["timeSlot"]["startTime"] for entry in body["timetable"]["entries"]}
    assert starts <= {"14:00", "15:00", "16:00"}


def test_students_cannot_generate(client, seeded, student_headers):
    response = client.post("/api/timetables/generate", json={}, headers=student_headers)
    assert response.status_code == 403


def test_department_filter_without_sections_is_rejected(client, seeded, scheduler_headers):
    response = client.post("/api/timetables/generate", json={"department_id": "other"}, headers=scheduler_headers)
    assert response.status_code == 400
    assert response.json()["details"]["missing"] == ["sections"]


def test_export_grid_statistics_and_conflicts(client, seeded, scheduler_headers):
    timetable = _generate(client, scheduler_headers)["timetable"]
    base = f"/api/timetables/{timetable['id']}"

    export = client.get(f"{base}/export.csv", headers=scheduler_headers)
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert "attachment" in export.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(export.text)))
    assert rows[0] == ["Section", "Subject", "Teacher", "Room", "Day", "Start Time", "End Time"]
    assert len(rows) == 1 + len(timetable["entries"])

    section_id = seeded["section"]["id"]
    grid = client.get(f"{base}/grid", params={"layout": "section", "target_id": section_id}, headers=scheduler_headers)
    assert grid.status_code == 200
    grid_body = grid.json()
    assert grid_body["targetName"] == "CSE-A"
    filled = [cell for row in grid_body["rows"] for cell in row[1:] if cell]
    assert len(filled) == len(timetable["entries"])

    missing = client.get(f"{base}/grid", params={"layout": "room", "target_id": "nope"}, headers=scheduler_headers)
    assert missing.status_code == 404

    bad_layout = client.get(f"{base}/grid", params={"layout": "floor", "target_id": section_id}, headers=scheduler_headers)
    assert bad_layout.status_code == 422

    stats = client.get(f"{base}/statistics", headers=scheduler_headers)
    assert stats.status_code == 200
    overall = stats.json()["overall"]
    assert overall["totalClasses"] == len(timetable["entries"])
    assert overall["avgClassSize"] == 35
    assert overall["hardConflicts"] == 1

    conflicts = client.get(f"{base}/conflicts", headers=scheduler_headers)
    assert conflicts.status_code == 200
    assert conflicts.json()["conflicts"] == []


def test_delete_timetable(client, seeded, scheduler_headers, student_headers):
    timetable = _generate(client, scheduler_headers)["timetable"]
    path = f"/api/timetables/{timetable['id']}"

    assert client.delete(path, headers=student_headers).status_code == 403
    assert client.delete(path, headers=scheduler_headers).status_code == 204
    assert client.get(path, headers=scheduler_headers).status_code == 404

    actions = [item["action"] for item in client.get("/api/activity", headers=scheduler_headers).json()]
    assert "timetable.generate" in actions
    assert "timetable.delete" in actions


def test_student_grid_defaults_to_bound_section(client, seeded, scheduler_headers, login_as):
    timetable = _generate(client, scheduler_headers)["timetable"]
    section = seeded["section"]
    headers = login_as("student", email="cse.a@example.com", section_id=section["id"])

    grid = client.get(f"/api/timetables/{timetable['id']}/grid", headers=headers)
    assert grid.status_code == 200, grid.text
    assert grid.json()["targetName"] == "CSE-A"

    unbound = client.get(f"/api/timetables/{timetable['id']}/grid", headers=scheduler_headers)
    assert unbound.status_code == 400


def test_deleting_section_unbinds_students(client, seeded, admin_headers, login_as):
    section = seeded["section"]
    headers = login_as("student", email="cse.b@example.com", section_id=section["id"])
    assert client.get("/api/auth/me", headers=headers).json()["section_id"] == section["id"]

    assert client.delete(f"/api/sections/{section['id']}", headers=admin_headers).status_code == 200
    assert client.get("/api/auth/me", headers=headers).json()["section_id"] is None

    activity = client.get("/api/activity", params={"entity_type": "section"}, headers=admin_headers).json()
    deletion = next(item for item in activity if item["action"] == "section.delete")
    assert len(deletion["details"]["unbound_users"]) == 1
