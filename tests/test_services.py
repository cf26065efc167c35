"""Tests des services / Service tests."""

from datetime import date, datetime

import pytest

from install_tracker.models.task import Task, TaskStatus
from install_tracker.models.team_member import TeamMember
from install_tracker.models.vehicle import Vehicle, VehicleStatus
from install_tracker.services.admin_service import split_sql
from install_tracker.services.conflict_detector import ConflictDetectorService
from install_tracker.services.estimation import EstimationService
from install_tracker.services.export_service import ExportService
from install_tracker.services.import_service import ImportService
from install_tracker.services.schedule_service import ScheduleService
from install_tracker.services.stats_service import StatsService
from install_tracker.services.task_generator import TaskGeneratorService
from install_tracker.services.task_names import TaskNameService
from install_tracker.services.task_validation import TaskValidationService
from install_tracker.services.time_calculator import TimeCalculatorService
from install_tracker.utils.seed import TEAM_MEMBERS, VEHICLES, generated_task_rows

START = "2025-09-10"
BEFORE_PROJECT = datetime(2025, 1, 1)


def _vehicle(**overrides):
    vehicle = {
        "id": "V001", "type": "FORD/D/P/UP RANGER", "location": "Bahir Dar", "day": 1,
        "time_slot": "8:30–11:30 AM", "status": "Pending",
        "gps_required": 1, "fuel_sensors": 1, "fuel_tanks": 1,
    }
    vehicle.update(overrides)
    return vehicle


def _task(task_id, start, end, vehicle_id=None, assigned_to=None, **extra):
    return {"id": task_id, "name": task_id, "start_time": start, "end_time": end,
            "vehicle_id": vehicle_id, "assigned_to": assigned_to, **extra}


# ── Temps / Time ─────────────────────────────────────────────────────


def test_parse_hhmm():
    assert TimeCalculatorService.parse_hhmm("13:45") == 13 * 60 + 45
    assert TimeCalculatorService.parse_hhmm("25:00") is None
    assert TimeCalculatorService.parse_hhmm("noon") is None


def test_date_for_day():
    assert TimeCalculatorService.date_for_day(START, 1) == date(2025, 9, 10)
    assert TimeCalculatorService.date_for_day(START, 13) == date(2025, 9, 22)


def test_parse_time_slot_formats():
    day = date(2025, 9, 10)
    start, end = TimeCalculatorService.parse_time_slot("8:30–11:30 AM", day)
    assert (start.hour, start.minute, end.hour, end.minute) == (8, 30, 11, 30)
    start, end = TimeCalculatorService.parse_time_slot("1:30–5:30 PM", day)
    assert (start.hour, end.hour) == (13, 17)
    start, end = TimeCalculatorService.parse_time_slot("13:30-17:30", day)
    assert (start.hour, start.minute, end.hour) == (13, 30, 17)
    # Creneau qui finit a midi / Slot ending at noon
    start, end = TimeCalculatorService.parse_time_slot("9:00–12:00 PM", day)
    assert (start.hour, end.hour) == (9, 12)


def test_parse_time_slot_invalid():
    day = date(2025, 9, 10)
    assert TimeCalculatorService.parse_time_slot("all day", day) is None
    assert TimeCalculatorService.parse_time_slot("8:30", day) is None
    assert TimeCalculatorService.parse_time_slot(None, day) is None


def test_slot_detection():
    assert TimeCalculatorService.is_morning_slot("8:30–11:30 AM")
    assert TimeCalculatorService.is_morning_slot("08:30-11:30")
    assert TimeCalculatorService.is_afternoon_slot("1:30–5:30 PM")
    assert TimeCalculatorService.is_afternoon_slot("13:30-17:30")
    # Fin a 11:30 : ce n'est pas un creneau d'apres-midi / Ends at 11:30, not an afternoon slot
    assert not TimeCalculatorService.is_afternoon_slot("8:30–11:30 AM")


def test_project_phase():
    assert TimeCalculatorService.project_phase(START, today=date(2025, 9, 1))["phase"] == "planning"
    active = TimeCalculatorService.project_phase(START, today=date(2025, 9, 12))
    assert active["phase"] == "active"
    assert active["days_since_start"] == 2
    assert active["progress_percentage"] == 14
    done = TimeCalculatorService.project_phase(START, today=date(2025, 10, 1))
    assert done["progress_percentage"] == 100


def test_project_status():
    assert TimeCalculatorService.project_status(None)["status"] == "not_configured"
    assert TimeCalculatorService.project_status(START, today=date(2025, 9, 1))["status"] == "pending"
    assert TimeCalculatorService.project_status(START, "2025-09-24", today=date(2025, 9, 15))["status"] == "live"
    assert TimeCalculatorService.project_status(START, "2025-09-24", today=date(2025, 9, 30))["status"] == "completed"
    assert TimeCalculatorService.current_project_day(START, today=date(2025, 9, 12)) == 3


# ── Generation / Task generation ─────────────────────────────────────


def test_generate_morning_vehicle():
    tasks = TaskGeneratorService.generate_vehicle_tasks(_vehicle(), START, now=BEFORE_PROJECT)
    assert [t.id for t in tasks] == [
        "lunch-V001",
        "V001-inspection-0",
        "V001-installation-1",
        "V001-installation-2",
        "V001-configuration-3",
        "V001-testing-4",
        "V001-documentation-5",
    ]
    lunch = tasks[0]
    assert lunch.start == datetime(2025, 9, 10, 12, 30)
    assert lunch.status == "Completed"
    assert lunch.progress == 100
    assert lunch.assigned_to == "All Team"

    work = tasks[1:]
    assert work[0].start == datetime(2025, 9, 10, 8, 30)
    assert work[0].name == "V001 Vehicle Inspection"
    for previous, current in zip(work, work[1:]):
        assert current.start == previous.end
        assert current.dependencies == [previous.id]
    assert work[-1].end == datetime(2025, 9, 10, 12, 30)
    assert all(t.status == "Pending" and t.progress == 0 for t in work)


def test_generate_afternoon_vehicle_without_devices():
    vehicle = _vehicle(id="V002", day=2, time_slot="1:30–5:30 PM", gps_required=0, fuel_sensors=0)
    tasks = TaskGeneratorService.generate_vehicle_tasks(vehicle, START, now=BEFORE_PROJECT)
    assert len(tasks) == 1
    assert tasks[0].name == "V002 Vehicle Inspection"
    assert tasks[0].start == datetime(2025, 9, 11, 13, 30)


def test_fuel_sensor_duration_and_resources():
    vehicle = _vehicle(gps_required=0, fuel_sensors=3, fuel_tanks=2)
    tasks = TaskGeneratorService.generate_vehicle_tasks(vehicle, START, now=BEFORE_PROJECT)
    fuel = next(t for t in tasks if t.name.endswith("Fuel Sensor Installation"))
    assert fuel.duration == 1.5
    assert fuel.resources == {"gps": 0, "fuel": 3, "tanks": 2}


def test_generated_status_follows_vehicle():
    tasks = TaskGeneratorService.generate_vehicle_tasks(
        _vehicle(status="Completed"), START, now=BEFORE_PROJECT
    )
    assert all(t.status == "Completed" for t in tasks)
    assert all(t.color == "#10B981" and t.progress == 100 for t in tasks[1:])
    assert TaskGeneratorService.task_status(
        "In Progress", datetime(2025, 9, 10, 9), datetime(2025, 9, 10, 10), datetime(2025, 9, 10, 9, 30)
    ) == "In Progress"
    assert TaskGeneratorService.task_status(
        "Blocked", datetime(2025, 9, 10, 9), datetime(2025, 9, 10, 10), BEFORE_PROJECT
    ) == "Blocked"


def test_filter_and_group_tasks():
    vehicles = [_vehicle(), _vehicle(id="V002", day=2, location="Kombolcha", time_slot="1:30–5:30 PM")]
    tasks = TaskGeneratorService.generate_all(vehicles, START, now=BEFORE_PROJECT)
    assert len(tasks) == 7 + 6

    day_two = TaskGeneratorService.filter_tasks(tasks, day=date(2025, 9, 11))
    assert {t.vehicle_id for t in day_two} == {"V002"}
    assert TaskGeneratorService.filter_tasks(tasks, location="All") == tasks
    assert len(TaskGeneratorService.filter_tasks(tasks, search="lunch")) == 1

    groups = TaskGeneratorService.group_tasks(tasks, "vehicle")
    assert set(groups) == {"V001", "V002", "general"}
    assert groups["V001"]["name"] == "V001 (Bahir Dar)"
    starts = [t.start for t in groups["V001"]["tasks"]]
    assert starts == sorted(starts)


def test_standard_tasks_schedule():
    rows = TaskGeneratorService.standard_tasks("V001", "Abebaw", START)
    assert len(rows) == 7
    assert [r["start_time"] for r in rows[:3]] == ["09:00", "09:45", "11:00"]
    assert rows[0]["end_time"] == "09:30"
    assert rows[1]["category"] == "installation"
    assert all(r["vehicle_id"] == "V001" and r["start_date"] == START for r in rows)


def test_assignee_for_category():
    team = [{"name": "Abebaw", "role": "Software Engineer"}, {"name": "Mamaru", "role": "Mechanic"}]
    assert TaskGeneratorService.assignee_for_category("configuration", team) == "Abebaw"
    assert TaskGeneratorService.assignee_for_category("break", team) == "All Team"
    assert TaskGeneratorService.assignee_for_category("testing", []) == "Unassigned"


def test_stored_tasks_to_gantt():
    vehicles = [_vehicle()]
    stored = [
        {"id": "a", "name": "V001 GPS Installation", "vehicle_id": "V001", "status": "Scheduled"},
        {"id": "b", "name": "Vehicle Inspection", "vehicle_id": ["V001"], "status": "Completed",
         "estimated_duration": 30},
    ]
    gantt = TaskGeneratorService.stored_tasks_to_gantt(stored, vehicles, START)
    assert [t.id for t in gantt] == ["b", "a"]
    assert gantt[0].start == datetime(2025, 9, 10, 8, 30)
    assert gantt[1].start == gantt[0].end
    assert gantt[1].name == "GPS Installation"
    assert gantt[1].status == "Pending"


# ── Conflits / Conflicts ─────────────────────────────────────────────


def test_same_vehicle_same_range_is_one_conflict():
    report = ConflictDetectorService.detect([
        _task("t1", "09:00", "10:00", vehicle_id="V001", assigned_to="Abebaw"),
        _task("t2", "09:00", "10:00", vehicle_id="V001", assigned_to="Abebaw"),
    ])
    assert len(report.conflicts) == 1
    conflict = report.conflicts[0]
    assert conflict.type == "time"
    assert conflict.severity == "high"
    assert conflict.conflicting_tasks == ["t1", "t2"]
    assert conflict.suggested_resolution["details"]["new_start_time"] == "10:00"


def test_touching_ranges_do_not_conflict():
    report = ConflictDetectorService.detect([
        _task("t1", "09:00", "10:00", vehicle_id="V001"),
        _task("t2", "10:00", "11:00", vehicle_id="V001"),
    ])
    assert report.conflicts == []
    assert report.suggestions == ["No conflicts detected. Your schedule is optimized!"]


def test_shared_assignee_is_resource_conflict():
    report = ConflictDetectorService.detect([
        _task("t1", "09:00", "10:30", vehicle_id="V001", assigned_to=["Abebaw", "Mamaru"]),
        _task("t2", "10:00", "11:00", vehicle_id="V002", assigned_to="Mamaru"),
    ])
    assert [c.type for c in report.conflicts] == ["resource"]
    assert "Mamaru" in report.conflicts[0].description


def test_different_days_do_not_conflict():
    report = ConflictDetectorService.detect([
        _task("t1", "09:00", "10:00", vehicle_id="V001", start_date="2025-09-10"),
        _task("t2", "09:00", "10:00", vehicle_id="V001", start_date="2025-09-11"),
    ])
    assert report.conflicts == []


def test_dependency_conflicts():
    report = ConflictDetectorService.detect([
        _task("t1", "09:00", "10:00", start_date=START, end_date=START),
        _task("t2", "09:30", "11:00", start_date=START, dependencies=["t1"]),
        _task("t3", "11:00", "12:00", start_date=START, dependencies=["t2", "gone"]),
    ])
    ids = {c.id for c in report.conflicts}
    assert ids == {"dependency-timing-t2-t1", "missing-dependency-t3-gone"}
    assert "1 critical conflict(s) require manual attention" in report.suggestions


# ── Estimations ──────────────────────────────────────────────────────


def test_vehicle_count_estimate():
    result = EstimationService.by_vehicle_count(START, [{}] * 24)
    # 2 + ceil(24 / 3) * 0.8 + 3 = 11.4 jours / days
    assert result.total_days == 12
    assert result.estimated_end_date == "2025-09-21"
    assert len(result.breakdown) == 3


def test_task_complexity():
    assert EstimationService.task_complexity({"priority": "High", "estimated_duration": 60}) == 2.5
    assert EstimationService.task_complexity({"priority": "Low"}) == pytest.approx(0.8)
    assert EstimationService.task_complexity({"priority": "Medium", "status": "Blocked"}) == pytest.approx(1.3)
    assert EstimationService.task_complexity({"estimated_duration": 600}) == 3.0


def test_team_performance_multiplier():
    vehicles = [{}] * 24
    perfect = [{"completion_rate": 100, "quality_score": 100}]
    assert EstimationService.by_team_performance(START, vehicles, perfect).total_days == 12
    weak = [{"completion_rate": 20, "quality_score": 50}]
    assert EstimationService.by_team_performance(START, vehicles, weak).total_days == 48
    # Valeurs par defaut 70 / 80 / Defaults 70 / 80
    assert EstimationService.by_team_performance(START, vehicles, []).total_days == 22


def test_conservative_and_optimistic_bounds():
    vehicles = [{}] * 10
    tasks = [{"priority": "High", "estimated_duration": 90}] * 20
    team = [{"completion_rate": 85, "quality_score": 90}] * 3
    base = [e.total_days for e in EstimationService.all(START, vehicles, tasks, team)[:3]]
    assert EstimationService.conservative(START, vehicles, tasks, team).total_days >= max(base)
    assert EstimationService.optimistic(START, vehicles, tasks, team).total_days <= min(base)


def test_recommended_is_median():
    vehicles = [{}] * 24
    estimations = EstimationService.all(START, vehicles, [], [])
    assert [e.total_days for e in estimations] == [12, 0, 22, 27, 0]
    recommended = EstimationService.recommended(START, vehicles, [], [])
    assert recommended.total_days == 12
    assert recommended.method == "Recommended (Median)"
    assert recommended.to_dict()["estimated_end_date"] == "2025-09-21"


# ── Noms de taches / Task names ──────────────────────────────────────


def test_clean_task_names():
    assert TaskNameService.clean("V001 GPS Installation") == "GPS Installation"
    assert TaskNameService.clean("GPS Installation - V0012") == "GPS Installation"
    assert TaskNameService.clean("V001 V002 Lunch") == "Lunch"
    assert TaskNameService.clean("Lunch Break") == "Lunch Break"
    assert TaskNameService.clean("V001 ") == "V001 "
    assert TaskNameService.clean(None) is None


def test_clean_is_idempotent():
    names = ["V001 GPS Installation", "Inspection - V010", "V003 Docs - V003", "Plain", "V9999 X"]
    for name in names:
        once = TaskNameService.clean(name)
        assert TaskNameService.clean(once) == once


def test_name_vehicle_extraction():
    assert TaskNameService.extract_vehicle_id("V012 Documentation") == "V012"
    assert TaskNameService.extract_vehicle_id("Documentation - V0123") == "V0123"
    assert TaskNameService.extract_vehicle_id("Documentation") is None
    assert TaskNameService.has_vehicle_id("V001 Inspection")
    assert TaskNameService.display_name("V001 Inspection", None) == "V001 Inspection"
    assert TaskNameService.display_name("V001 Inspection", "V001") == "Inspection"


def test_cleanup_report():
    tasks = [
        {"id": "t1", "name": "V001 Driver's check", "vehicle_id": "V002"},
        {"id": "t2", "name": "Inspection", "vehicle_id": "V002"},
    ]
    report = TaskNameService.needing_cleanup(tasks)
    assert report[0]["needs_cleanup"] and report[0]["has_conflict"]
    assert report[0]["cleaned_name"] == "Driver's check"
    assert report[0]["vehicle_id_from_name"] == "V001"
    assert not report[1]["needs_cleanup"]


# ── Validation ───────────────────────────────────────────────────────


def test_validate_required_fields():
    result = TaskValidationService.validate({})
    codes = {(i.field, i.code) for i in result.errors}
    assert codes == {("name", "REQUIRED"), ("vehicle_id", "REQUIRED"), ("assigned_to", "REQUIRED")}
    assert not result.is_valid


def test_validate_full_task():
    vehicles = [{"id": "V001"}]
    team = [{"name": "Abebaw"}]
    task = {
        "id": "t1", "name": "Inspection", "vehicle_id": "V001", "assigned_to": "Abebaw",
        "status": "Pending", "priority": "High", "start_time": "09:00", "end_time": "10:00",
        "start_date": START, "end_date": START, "estimated_duration": 60, "completion_percentage": 0,
    }
    result = TaskValidationService.validate(task, vehicles, team, existing_tasks=[])
    assert result.is_valid
    assert result.to_dict()["is_valid"] is True


def test_validate_rules():
    task = {
        "id": "t1", "name": "Inspection", "vehicle_id": "V404", "assigned_to": "Nobody",
        "status": "Completed", "priority": "Urgent", "start_time": "10:00", "end_time": "09:00",
        "estimated_duration": 2000, "completion_percentage": 50, "dependencies": ["t1"],
    }
    result = TaskValidationService.validate(task, [{"id": "V001"}], [{"name": "Abebaw"}])
    errors = {(i.field, i.code) for i in result.errors}
    assert ("vehicle_id", "INVALID_REFERENCE") in errors
    assert ("assigned_to", "INVALID_REFERENCE") in errors
    assert ("priority", "INVALID_VALUE") in errors
    assert ("time_range", "INVALID_RANGE") in errors
    assert ("dependencies", "CIRCULAR_DEPENDENCY") in errors
    warnings = {i.code for i in result.warnings}
    assert warnings == {"UNUSUAL_VALUE", "INCONSISTENT_STATE"}


def test_integrity_checks():
    empty = TaskValidationService.integrity_checks([], [], [])
    assert (empty.passed, empty.failed) == (1, 0)

    tasks = [
        {"id": "t1", "vehicle_id": "V001", "assigned_to": "Abebaw", "start_time": "09:00", "end_time": "10:00"},
        {"id": "t1", "vehicle_id": "V404", "assigned_to": "Abebaw", "start_time": "11:00", "end_time": "10:00"},
        {"id": "lunch-V001", "vehicle_id": None, "assigned_to": "All Team"},
    ]
    report = TaskValidationService.integrity_checks(tasks, [{"id": "V001"}], [{"name": "Abebaw"}])
    assert report.passed == 1
    assert report.failed == 3
    assert "1 tasks have invalid vehicle references" in report.issues


# ── Stats et planning / Stats and schedule ───────────────────────────


def _vehicles():
    return [
        Vehicle(id="V001", type="Ranger", location="Bahir Dar", day=1, time_slot="8:30–11:30 AM",
                status=VehicleStatus.COMPLETED, gps_required=1, fuel_sensors=2, fuel_tanks=2),
        Vehicle(id="V002", type="Bus", location="Bahir Dar", day=1, time_slot="1:30–5:30 PM",
                status=VehicleStatus.IN_PROGRESS, gps_required=1, fuel_sensors=1, fuel_tanks=1),
        Vehicle(id="V003", type="Truck", location="Kombolcha", day=2, time_slot="8:30–11:30 AM",
                status=VehicleStatus.PENDING, gps_required=0, fuel_sensors=1, fuel_tanks=1),
    ]


def test_vehicle_stats():
    stats = StatsService.vehicle_stats(_vehicles())
    assert stats["total"] == 3
    assert (stats["completed"], stats["in_progress"], stats["pending"]) == (1, 1, 1)
    assert stats["total_gps_devices"] == 2
    assert stats["total_fuel_sensors"] == 4
    assert stats["location_breakdown"]["Bahir Dar"]["total"] == 2
    assert StatsService.percentage(1, 3) == 33
    assert StatsService.percentage(5, 0) == 0


def test_member_metrics():
    member = TeamMember(id="TM001", name="Abebaw", role="Software Engineer")
    tasks = [
        type("T", (), {"id": "a", "assigned_to": "Abebaw", "status": "Completed", "estimated_duration": 30})(),
        type("T", (), {"id": "b", "assigned_to": ["TM001"], "status": "Pending", "estimated_duration": 60})(),
        type("T", (), {"id": "c", "assigned_to": "Mamaru", "status": "Pending", "estimated_duration": 90})(),
    ]
    metrics = StatsService.member_metrics(member, tasks)
    assert metrics == {"completion_rate": 50, "average_task_time": 45, "quality_score": 60}
    workload = StatsService.member_workload(member, tasks)
    assert workload["task_ids"] == ["a", "b"]
    assert workload["scheduled_minutes"] == 60


def test_schedule_filter_and_sort():
    vehicles = _vehicles()
    assert [v.id for v in ScheduleService.filter_vehicles(vehicles, location="Bahir Dar")] == ["V001", "V002"]
    assert [v.id for v in ScheduleService.filter_vehicles(vehicles, search="bus")] == ["V002"]
    by_status = ScheduleService.sort_vehicles(vehicles, "status", "desc")
    assert [v.id for v in by_status] == ["V002", "V003", "V001"]

    view = ScheduleService.schedule_view(vehicles, START)
    assert view["unique_days"] == [1, 2]
    assert view["vehicles"][2]["installation_date"] == "2025-09-11"
    assert view["stats"]["total_sensors"] == 4


# ── Import / export ──────────────────────────────────────────────────


def test_coerce_values():
    assert ImportService.coerce_value("3", "day") == 3
    assert ImportService.coerce_value("2.0", "fuel_sensors") == 2
    assert ImportService.coerce_value("85,5", "completion_rate") == 85.5
    assert ImportService.coerce_value("yes", "is_milestone") is True
    assert ImportService.coerce_value("n/a", "type") is None
    assert ImportService.coerce_value("V001", "vehicle_id") == "V001"
    assert ImportService.coerce_value("V001, V002", "vehicle_id") == ["V001", "V002"]
    assert ImportService.coerce_value('["gps", "install"]', "tags") == ["gps", "install"]
    assert ImportService.coerce_value("gps, install", "tags") == ["gps", "install"]
    assert ImportService.coerce_value(date(2025, 9, 10), "start_date") == "2025-09-10"


def test_parse_csv_and_normalize():
    content = "\ufeffID;Type;Location;Day;Time Slot;Junk\nV001;Ranger;Bahir Dar;1;8:30–11:30 AM;x\n".encode("utf-8")
    rows = ImportService.parse_csv(content)
    assert len(rows) == 1
    clean = ImportService.normalize_row(rows[0], "vehicles")
    assert clean == {"id": "V001", "type": "Ranger", "location": "Bahir Dar", "day": 1,
                     "time_slot": "8:30–11:30 AM"}


def test_coerce_times_and_dates():
    assert ImportService.coerce_value("08:30:00", "start_time") == "08:30"
    assert ImportService.coerce_value("9:05", "end_time") == "09:05"
    assert ImportService.coerce_value(datetime(2025, 9, 10, 14, 0), "start_time") == "14:00"
    assert ImportService.coerce_value("2025-09-10T00:00:00", "start_date") == "2025-09-10"
    with pytest.raises(ValueError):
        ImportService.coerce_value("25:00", "start_time")
    with pytest.raises(ValueError):
        ImportService.coerce_value("10/09/2025", "end_date")


def test_export_csv():
    task = Task(id="t1", name="Inspection", vehicle_id=["V001", "V002"], tags=["gps"], is_milestone=False,
                status=TaskStatus.IN_PROGRESS, start_time="09:00")
    rows = ExportService.table([task], "tasks")
    assert rows[0] == ExportService.get_fields("tasks")
    cells = dict(zip(rows[0], rows[1]))
    assert cells["tags"] == '["gps"]'
    assert cells["is_milestone"] == "false"
    assert cells["status"] == "In Progress"
    assert cells["vehicle_id"] == "V001, V002"

    content = ExportService.to_csv(rows)
    assert content.startswith(b"\xef\xbb\xbf")
    assert content.decode("utf-8-sig").splitlines()[0].startswith("id;name;description")

    # L'import relit les memes valeurs / The import reads the same values back
    reread = ImportService.normalize_row(ImportService.parse_csv(content)[0], "tasks")
    assert reread["vehicle_id"] == ["V001", "V002"]
    assert reread["tags"] == ["gps"]
    assert reread["is_milestone"] is False
    assert reread["status"] == "In Progress"
    assert reread["start_time"] == "09:00"
    assert "end_time" in reread and reread["end_time"] is None


def test_render_unknown_format():
    with pytest.raises(ValueError):
        ExportService.render([], "vehicles", "pdf")


def test_split_sql():
    sql = "-- reset\nDELETE FROM tasks;\n\n  INSERT INTO locations (name) VALUES ('A');;\n"
    assert split_sql(sql) == ["DELETE FROM tasks", "INSERT INTO locations (name) VALUES ('A')"]


# ── Donnees de reference / Seed data ─────────────────────────────────


def test_seed_tasks_are_consistent():
    rows = generated_task_rows(VEHICLES, "2025-09-10", TEAM_MEMBERS)
    morning = sum(1 for v in VEHICLES if TimeCalculatorService.is_morning_slot(v["time_slot"]))
    assert len(rows) == len(VEHICLES) * 6 + morning

    names = {m["name"] for m in TEAM_MEMBERS}
    assert all(r["assigned_to"] in names for r in rows if r["category"] != "break")

    assert ConflictDetectorService.detect(rows).conflicts == []
    report = TaskValidationService.integrity_checks(rows, VEHICLES, TEAM_MEMBERS)
    assert report.failed == 0
