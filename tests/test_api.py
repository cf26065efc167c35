"""Tests API / API tests."""

import json

import pytest

from install_tracker.api.ws_changes import ChangeFeedManager, manager
from install_tracker.database import async_session
from install_tracker.models.vehicle import Vehicle

MORNING = "8:30–11:30 AM"
AFTERNOON = "1:30–5:30 PM"


def _vehicle(vehicle_id="V001", **overrides):
    data = {
        "id": vehicle_id, "type": "FORD/D/P/UP RANGER", "location": "Bahir Dar", "day": 1,
        "time_slot": MORNING, "gps_required": 1, "fuel_sensors": 1, "fuel_tanks": 1,
    }
    data.update(overrides)
    return data


async def _start_project(client, start="2025-09-10"):
    resp = await client.put("/api/project-settings/", json={"project_start_date": start, "total_days": 15})
    assert resp.status_code == 200
    return resp.json()


@pytest.mark.asyncio
async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
    resp = await client.get("/api/")
    assert resp.json()["app"] == "Install Tracker"
    assert "X-Request-ID" in resp.headers


# ── Vehicules / Vehicles ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_vehicle(client):
    resp = await client.post("/api/vehicles/", json=_vehicle())
    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] == "V001"
    assert data["status"] == "Pending"
    assert data["created_at"] is not None

    resp = await client.post("/api/vehicles/", json=_vehicle())
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_get_vehicle_not_found(client):
    resp = await client.get("/api/vehicles/V999")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Vehicle not found"


@pytest.mark.asyncio
async def test_list_vehicles_filters(client):
    await client.post("/api/vehicles/", json=_vehicle())
    await client.post("/api/vehicles/", json=_vehicle("V002", location="Kombolcha", day=10, type="UD truck"))

    resp = await client.get("/api/vehicles/")
    assert [v["id"] for v in resp.json()] == ["V001", "V002"]

    resp = await client.get("/api/vehicles/", params={"location": "Kombolcha"})
    assert [v["id"] for v in resp.json()] == ["V002"]

    resp = await client.get("/api/vehicles/", params={"location": "All", "search": "truck"})
    assert [v["id"] for v in resp.json()] == ["V002"]

    resp = await client.get("/api/vehicles/", params={"status": "Bogus"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_and_delete_vehicle(client):
    await client.post("/api/vehicles/", json=_vehicle())

    resp = await client.put("/api/vehicles/V001", json={"day": 3, "time_slot": AFTERNOON})
    assert resp.status_code == 200
    assert resp.json()["day"] == 3
    assert resp.json()["type"] == "FORD/D/P/UP RANGER"

    resp = await client.patch("/api/vehicles/V001/status", json={"status": "In Progress"})
    assert resp.json()["status"] == "In Progress"

    resp = await client.delete("/api/vehicles/V001")
    assert resp.status_code == 204
    resp = await client.get("/api/vehicles/V001")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_vehicle_bulk_status_and_stats(client):
    await client.post("/api/vehicles/", json=_vehicle())
    await client.post("/api/vehicles/", json=_vehicle("V002", fuel_sensors=2, fuel_tanks=2))
    await client.post("/api/vehicles/", json=_vehicle("V003", location="Kombolcha"))

    resp = await client.post("/api/vehicles/bulk-status", json={"vehicle_ids": ["V001", "V002"], "status": "Completed"})
    assert resp.status_code == 200
    assert {v["status"] for v in resp.json()} == {"Completed"}

    stats = (await client.get("/api/vehicles/stats")).json()
    assert stats["total"] == 3
    assert stats["completed"] == 2
    assert stats["pending"] == 1
    assert stats["total_fuel_sensors"] == 4
    assert stats["location_breakdown"]["Bahir Dar"]["completed"] == 2


@pytest.mark.asyncio
async def test_vehicle_generated_tasks(client):
    await _start_project(client)
    await client.post("/api/vehicles/", json=_vehicle())
    resp = await client.get("/api/vehicles/V001/generated-tasks")
    assert resp.status_code == 200
    tasks = resp.json()
    assert len(tasks) == 7
    assert tasks[1]["name"] == "V001 Vehicle Inspection"
    assert tasks[1]["start"].startswith("2025-09-10T08:30")


@pytest.mark.asyncio
async def test_vehicle_standard_tasks(client):
    await client.post("/api/vehicles/", json=_vehicle())
    resp = await client.post(
        "/api/vehicles/V001/standard-tasks", json={"assigned_to": "Abebaw", "start_date": "2025-09-10"}
    )
    assert resp.status_code == 201
    tasks = resp.json()
    assert len(tasks) == 7
    assert [t["start_time"] for t in tasks[:2]] == ["09:00", "09:45"]
    assert all(t["vehicle_id"] == "V001" and t["status"] == "Pending" for t in tasks)

    resp = await client.get("/api/tasks/", params={"vehicle_id": "V001"})
    assert len(resp.json()) == 7


# ── Taches / Tasks ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_task_crud(client):
    resp = await client.post("/api/tasks/", json={
        "name": "GPS Device Installation", "vehicle_id": ["V001", "V002"], "assigned_to": "Tewachew",
        "priority": "High", "start_time": "09:00", "end_time": "10:00",
    })
    assert resp.status_code == 201
    task = resp.json()
    assert task["status"] == "Pending"
    assert task["vehicle_id"] == ["V001", "V002"]
    task_id = task["id"]

    resp = await client.post("/api/tasks/", json={"id": task_id, "name": "Duplicate"})
    assert resp.status_code == 409

    resp = await client.get("/api/tasks/", params={"vehicle_id": "V002"})
    assert [t["id"] for t in resp.json()] == [task_id]

    resp = await client.put(f"/api/tasks/{task_id}", json={"completion_percentage": 40, "notes": "Half done"})
    assert resp.json()["completion_percentage"] == 40

    resp = await client.patch(f"/api/tasks/{task_id}/status", json={"status": "Blocked"})
    assert resp.json()["status"] == "Blocked"

    resp = await client.delete(f"/api/tasks/{task_id}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/tasks/{task_id}")).status_code == 404


@pytest.mark.asyncio
async def test_task_time_and_date_formats(client):
    resp = await client.post("/api/tasks/", json={"id": "t1", "name": "GPS", "start_time": "08:30:00"})
    assert resp.status_code == 422
    resp = await client.post("/api/tasks/", json={"id": "t1", "name": "GPS", "start_date": "10/09/2025"})
    assert resp.status_code == 422

    resp = await client.post("/api/tasks/", json={
        "id": "t1", "name": "GPS", "start_time": "8:30", "end_time": "23:59", "start_date": "2025-09-10",
    })
    assert resp.status_code == 201
    resp = await client.put("/api/tasks/t1", json={"end_time": "24:00"})
    assert resp.status_code == 422
    resp = await client.put("/api/tasks/t1", json={"end_date": "2025-09-10 17:00"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_task_filters_and_stats(client):
    await client.post("/api/tasks/", json={"id": "t1", "name": "Inspection", "assigned_to": ["Abebaw", "Mamaru"],
                                           "priority": "High"})
    await client.post("/api/tasks/", json={"id": "t2", "name": "Calibration", "assigned_to": "Mamaru",
                                           "status": "Completed"})
    await client.post("/api/tasks/", json={"id": "t3", "name": "Lunch Break", "priority": "Low"})

    resp = await client.get("/api/tasks/", params={"assigned_to": "Mamaru"})
    assert {t["id"] for t in resp.json()} == {"t1", "t2"}
    resp = await client.get("/api/tasks/", params={"status": "Completed"})
    assert [t["id"] for t in resp.json()] == ["t2"]
    resp = await client.get("/api/tasks/", params={"search": "lunch"})
    assert [t["id"] for t in resp.json()] == ["t3"]

    resp = await client.post("/api/tasks/bulk-status", json={"task_ids": ["t1", "t3"], "status": "In Progress"})
    assert len(resp.json()) == 2

    stats = (await client.get("/api/tasks/stats")).json()
    assert stats["total"] == 3
    assert stats["in_progress"] == 2
    assert stats["high_priority"] == 1
    assert stats["assignee_breakdown"]["Mamaru"] == {"total": 2, "completed": 1, "in_progress": 1, "pending": 0}


@pytest.mark.asyncio
async def test_task_comments(client):
    await client.post("/api/tasks/", json={"id": "t1", "name": "Inspection"})
    resp = await client.post("/api/tasks/t1/comments", json={"text": "Vehicle arrived late", "author": "Abebaw"})
    assert resp.status_code == 201
    comment_id = resp.json()["id"]

    resp = await client.get("/api/tasks/t1/comments")
    assert [c["text"] for c in resp.json()] == ["Vehicle arrived late"]

    resp = await client.delete(f"/api/tasks/comments/{comment_id}")
    assert resp.status_code == 204
    assert (await client.get("/api/tasks/t1/comments")).json() == []
    assert (await client.post("/api/tasks/nope/comments", json={"text": "x"})).status_code == 404


@pytest.mark.asyncio
async def test_validate_task(client):
    await client.post("/api/vehicles/", json=_vehicle())
    resp = await client.post("/api/tasks/validate", json={"name": "Inspection", "vehicle_id": "V404",
                                                           "assigned_to": "Abebaw"})
    assert resp.status_code == 200
    result = resp.json()
    assert result["is_valid"] is False
    fields = {e["field"] for e in result["errors"]}
    assert fields == {"vehicle_id", "assigned_to"}


@pytest.mark.asyncio
async def test_conflicts(client):
    payload = [
        {"id": "t1", "name": "GPS", "vehicle_id": "V001", "start_time": "09:00", "end_time": "10:00"},
        {"id": "t2", "name": "Fuel", "vehicle_id": "V001", "start_time": "09:30", "end_time": "10:30"},
    ]
    resp = await client.post("/api/tasks/conflicts", json=payload)
    assert resp.status_code == 200
    report = resp.json()
    assert len(report["conflicts"]) == 1
    assert report["conflicts"][0]["type"] == "time"

    resp = await client.get("/api/tasks/conflicts")
    assert resp.json()["conflicts"] == []


# ── Sites et equipe / Locations and team ─────────────────────────────


@pytest.mark.asyncio
async def test_location_crud_and_sync(client):
    resp = await client.post("/api/locations/", json={"name": "Bahir Dar", "vehicles": 15})
    assert resp.status_code == 201
    assert (await client.post("/api/locations/", json={"name": "Bahir Dar"})).status_code == 409

    await client.post("/api/vehicles/", json=_vehicle())
    await client.post("/api/vehicles/", json=_vehicle("V002", fuel_sensors=2))
    await client.patch("/api/vehicles/V001/status", json={"status": "Completed"})

    resp = await client.post("/api/locations/sync-counts")
    assert resp.json()[0]["vehicles"] == 2
    assert resp.json()[0]["fuel_sensors"] == 3

    stats = (await client.get("/api/locations/stats")).json()
    assert stats[0]["actual_vehicles"] == 2
    assert stats[0]["progress"] == 50

    resp = await client.put("/api/locations/Bahir Dar", json={"contact_person": "Team Lead"})
    assert resp.json()["contact_person"] == "Team Lead"
    assert (await client.delete("/api/locations/Bahir Dar")).status_code == 204
    assert (await client.get("/api/locations/Bahir Dar")).status_code == 404


@pytest.mark.asyncio
async def test_team_member_metrics(client):
    resp = await client.post("/api/team-members/", json={"id": "TM001", "name": "Abebaw", "role": "Software Engineer"})
    assert resp.status_code == 201
    await client.post("/api/tasks/", json={"id": "t1", "name": "A", "assigned_to": "Abebaw",
                                           "status": "Completed", "estimated_duration": 30})
    await client.post("/api/tasks/", json={"id": "t2", "name": "B", "assigned_to": "Abebaw",
                                           "estimated_duration": 60})

    resp = await client.post("/api/team-members/TM001/recompute-metrics")
    member = resp.json()
    assert member["completion_rate"] == 50
    assert member["average_task_time"] == 45
    assert member["quality_score"] == 60

    workload = (await client.get("/api/team-members/TM001/workload")).json()
    assert workload["total"] == 2
    assert workload["scheduled_minutes"] == 60

    stats = (await client.get("/api/team-members/stats")).json()
    assert stats[0]["completed_tasks"] == 1
    assert (await client.get("/api/team-members/TM404")).status_code == 404


# ── Parametres projet / Project settings ─────────────────────────────


@pytest.mark.asyncio
async def test_project_settings(client):
    resp = await client.get("/api/project-settings/")
    assert resp.status_code == 200
    assert resp.json()["id"] == "default"

    data = await _start_project(client)
    assert data["project_start_date"] == "2025-09-10"
    assert data["project_end_date"] == "2025-09-24"
    assert data["total_days"] == 15

    resp = await client.put("/api/project-settings/", json={"project_end_date": "2025-09-01"})
    assert resp.status_code == 400

    stats = (await client.get("/api/project-settings/stats")).json()
    assert stats["start_date"] == "2025-09-10"
    assert stats["project_status"] == "completed"


@pytest.mark.asyncio
async def test_project_settings_start_only_keeps_duration(client):
    resp = await client.put("/api/project-settings/", json={"project_start_date": "2025-09-01", "total_days": 14})
    assert resp.json()["project_end_date"] == "2025-09-14"

    resp = await client.put("/api/project-settings/", json={"project_start_date": "2025-10-01"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["project_start_date"] == "2025-10-01"
    assert data["project_end_date"] == "2025-10-14"
    assert data["total_days"] == 14

    resp = await client.put("/api/project-settings/", json={"project_end_date": "2025-10-20"})
    data = resp.json()
    assert data["project_start_date"] == "2025-10-01"
    assert data["total_days"] == 20


@pytest.mark.asyncio
async def test_project_reset(client):
    await client.post("/api/vehicles/", json=_vehicle())
    await client.patch("/api/vehicles/V001/status", json={"status": "Completed"})
    await client.post("/api/tasks/", json={"id": "t1", "name": "A", "status": "Completed",
                                           "completion_percentage": 100})
    await client.post("/api/tasks/t1/comments", json={"text": "done"})

    resp = await client.post("/api/project-settings/reset")
    assert resp.json() == {"vehicles_reset": 1, "tasks_reset": 1, "comments_deleted": 1}

    task = (await client.get("/api/tasks/t1")).json()
    assert task["status"] == "Pending"
    assert task["completion_percentage"] == 0
    assert (await client.get("/api/vehicles/V001")).json()["status"] == "Pending"


# ── Planning ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_gantt_generated(client):
    await _start_project(client)
    await client.post("/api/vehicles/", json=_vehicle())
    await client.post("/api/vehicles/", json=_vehicle("V002", day=2, time_slot=AFTERNOON, location="Kombolcha"))

    resp = await client.get("/api/gantt", params={"day": 1})
    assert resp.status_code == 200
    data = resp.json()
    assert data["project_start_date"] == "2025-09-10"
    assert data["total"] == 7
    assert data["groups"] is None

    resp = await client.get("/api/gantt", params={"group_by": "vehicle"})
    groups = resp.json()["groups"]
    assert set(groups) == {"V001", "V002", "general"}
    assert groups["general"]["name"] == "General Tasks"

    resp = await client.get("/api/gantt", params={"location": "Kombolcha", "category": "inspection"})
    assert [t["id"] for t in resp.json()["tasks"]] == ["V002-inspection-0"]

    assert (await client.get("/api/gantt", params={"group_by": "colour"})).status_code == 422


@pytest.mark.asyncio
async def test_gantt_stored(client):
    await _start_project(client)
    await client.post("/api/vehicles/", json=_vehicle())
    await client.post("/api/vehicles/V001/standard-tasks", json={"assigned_to": "Abebaw"})

    resp = await client.get("/api/gantt", params={"source": "stored"})
    data = resp.json()
    assert data["total"] == 7
    assert data["tasks"][0]["name"] == "Vehicle Inspection"
    assert data["tasks"][0]["start"].startswith("2025-09-10T09:00")


@pytest.mark.asyncio
async def test_schedule(client):
    await _start_project(client)
    await client.post("/api/vehicles/", json=_vehicle())
    await client.post("/api/vehicles/", json=_vehicle("V002", day=2))
    await client.patch("/api/vehicles/V002/status", json={"status": "In Progress"})

    resp = await client.get("/api/schedule", params={"sort_by": "status", "sort_order": "desc"})
    data = resp.json()
    assert [v["id"] for v in data["vehicles"]] == ["V002", "V001"]
    assert data["vehicles"][0]["installation_date"] == "2025-09-11"
    assert data["unique_days"] == [1, 2]
    assert data["stats"]["in_progress"] == 1


@pytest.mark.asyncio
async def test_estimations_and_dashboard(client):
    await _start_project(client)
    for i in range(1, 4):
        await client.post("/api/vehicles/", json=_vehicle(f"V00{i}"))

    resp = await client.get("/api/estimations")
    data = resp.json()
    assert [e["method"] for e in data["estimations"]] == [
        "Vehicle Count", "Task Complexity", "Team Performance", "Conservative", "Optimistic",
    ]
    # 2 + ceil(3 / 3) * 0.8 + 3 = 5.8 jours / days
    assert data["estimations"][0]["total_days"] == 6
    assert data["recommended"]["method"] == "Recommended (Median)"

    dashboard = (await client.get("/api/dashboard")).json()
    assert dashboard["project"]["start_date"] == "2025-09-10"
    assert dashboard["vehicles"]["total"] == 3
    assert dashboard["recommended_estimation"]["total_days"] == data["recommended"]["total_days"]


# ── Import / export ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_export_vehicles(client):
    await client.post("/api/vehicles/", json=_vehicle())

    resp = await client.get("/api/exports/vehicles", params={"format": "csv"})
    assert resp.status_code == 200
    text = resp.content.decode("utf-8-sig")
    lines = text.splitlines()
    assert lines[0] == "id;type;location;day;time_slot;status;gps_required;fuel_sensors;fuel_tanks"
    assert lines[1].startswith("V001;FORD/D/P/UP RANGER;Bahir Dar;1;")
    assert lines[1].endswith(";Pending;1;1;1")

    resp = await client.get("/api/exports/vehicles")
    assert resp.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert (await client.get("/api/exports/unknown")).status_code == 400


@pytest.mark.asyncio
async def test_import_vehicles_upsert(client):
    content = (
        "id;type;location;day;time_slot;status;gps_required;fuel_sensors;fuel_tanks\n"
        f"V001;Ranger;Bahir Dar;1;{MORNING};Pending;1;1;1\n"
        f"V002;Bus;Bahir Dar;1;{AFTERNOON};In Progress;1;2;2\n"
        f";Truck;Kombolcha;2;{MORNING};Pending;1;1;1\n"
    ).encode("utf-8")
    files = {"file": ("vehicles.csv", content, "text/csv")}

    resp = await client.post("/api/imports/vehicles", files=files)
    assert resp.status_code == 200
    result = resp.json()
    assert (result["created"], result["updated"], result["skipped"]) == (2, 0, 1)
    assert "missing required fields: id" in result["errors"][0]

    resp = await client.post("/api/imports/vehicles", files=files)
    assert resp.json()["updated"] == 2

    vehicle = (await client.get("/api/vehicles/V002")).json()
    assert vehicle["status"] == "In Progress"
    assert vehicle["fuel_sensors"] == 2


@pytest.mark.asyncio
async def test_import_tasks_generates_ids(client):
    content = (
        "name,vehicle_id,assigned_to,priority,tags\n"
        "Inspection,V001,Abebaw,High,\"inspection, pre-installation\"\n"
        "Shared briefing,\"V001, V002\",Mamaru,Low,\n"
    ).encode("utf-8")
    resp = await client.post("/api/imports/tasks", files={"file": ("tasks.csv", content, "text/csv")})
    assert resp.json()["created"] == 2

    tasks = (await client.get("/api/tasks/", params={"vehicle_id": "V002"})).json()
    assert len(tasks) == 1
    assert tasks[0]["vehicle_id"] == ["V001", "V002"]
    assert len(tasks[0]["id"]) == 32


@pytest.mark.asyncio
async def test_import_tasks_normalizes_times(client):
    content = (
        "id;name;start_time;end_time;start_date\n"
        "t1;Inspection;08:30:00;9:15;2025-09-10 00:00:00\n"
        "t2;Installation;8h30;10:00;2025-09-10\n"
    ).encode("utf-8")
    resp = await client.post("/api/imports/tasks", files={"file": ("tasks.csv", content, "text/csv")})
    result = resp.json()
    assert (result["created"], result["skipped"]) == (1, 1)
    assert "Row 3" in result["errors"][0]

    task = (await client.get("/api/tasks/t1")).json()
    assert (task["start_time"], task["end_time"], task["start_date"]) == ("08:30", "09:15", "2025-09-10")


@pytest.mark.asyncio
async def test_import_rejects_unknown_file(client):
    resp = await client.post("/api/imports/vehicles", files={"file": ("vehicles.txt", b"x", "text/plain")})
    assert resp.status_code == 400


# ── Flux de modifications / Change feed ──────────────────────────────


class _FakeSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def accept(self):
        pass

    async def send_text(self, data):
        if self.fail:
            raise RuntimeError("closed")
        self.sent.append(data)


@pytest.mark.asyncio
async def test_change_feed_broadcast():
    manager = ChangeFeedManager()
    alive, dead = _FakeSocket(), _FakeSocket(fail=True)
    await manager.connect(alive)
    await manager.connect(dead)

    await manager.broadcast({"table": "vehicles", "event": "UPDATE", "id": "V001"})
    assert alive.sent == ['{"table": "vehicles", "event": "UPDATE", "id": "V001"}']
    assert manager.active_connections == [alive]


class _ReadBackSocket:
    """Relit la ligne a la reception / Reads the row back when the event arrives."""

    def __init__(self):
        self.seen = []

    async def send_text(self, data):
        message = json.loads(data)
        async with async_session() as session:
            row = await session.get(Vehicle, message["id"])
        self.seen.append((message["event"], row is not None))


@pytest.mark.asyncio
async def test_change_feed_sent_after_commit(client):
    listener = _ReadBackSocket()
    manager.active_connections.append(listener)
    try:
        resp = await client.post("/api/vehicles/", json=_vehicle())
        assert resp.status_code == 201
        # Doublon annule : aucun evenement / Rolled back duplicate: no event
        resp = await client.post("/api/vehicles/", json=_vehicle())
        assert resp.status_code == 409
    finally:
        manager.disconnect(listener)

    assert listener.seen == [("INSERT", True)]
