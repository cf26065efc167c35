"""
Donnees de reference du projet / Project seed data.
Parametres, sites, equipe, 24 vehicules et leurs taches generees (upsert).
Settings, locations, team, 24 vehicles and their generated tasks (upsert).
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.models.location import Location
from install_tracker.models.project_settings import DEFAULT_SETTINGS_ID, ProjectSettings
from install_tracker.models.task import Task, TaskPriority, TaskStatus
from install_tracker.models.team_member import TeamMember
from install_tracker.models.vehicle import Vehicle, VehicleStatus
from install_tracker.services.data_service import utc_now
from install_tracker.services.task_generator import TaskGeneratorService

logger = logging.getLogger(__name__)

PROJECT_SETTINGS = {
    "id": DEFAULT_SETTINGS_ID,
    "project_start_date": "2025-09-10",
    "project_end_date": "2025-09-24",
    "total_days": 15,
}

LOCATIONS = [
    {"name": "Bahir Dar", "vehicles": 15, "gps_devices": 15, "fuel_sensors": 16,
     "address": "Bahir Dar, Ethiopia", "contact_person": "Installation Team Lead",
     "contact_phone": "+251-91-234-5678", "installation_days": "Days 1-8"},
    {"name": "Kombolcha", "vehicles": 6, "gps_devices": 6, "fuel_sensors": 7,
     "address": "Kombolcha, Ethiopia", "contact_person": "Field Operations Manager",
     "contact_phone": "+251-91-345-6789", "installation_days": "Days 10-12"},
    {"name": "Addis Ababa", "vehicles": 3, "gps_devices": 3, "fuel_sensors": 3,
     "address": "Addis Ababa, Ethiopia", "contact_person": "Regional Coordinator",
     "contact_phone": "+251-91-456-7890", "installation_days": "Days 13-14"},
]

TEAM_MEMBERS = [
    {"id": "TM001", "name": "Abebaw", "role": "Software Engineer",
     "specializations": ["System Configuration", "Quality Assurance", "Documentation"],
     "completion_rate": 85, "average_task_time": 45, "quality_score": 92,
     "email": "abebaw@company.com", "phone": "+251-91-111-1111"},
    {"id": "TM002", "name": "Tewachew", "role": "Electrical Engineer",
     "specializations": ["Vehicle Inspection", "GPS Device Installation"],
     "completion_rate": 90, "average_task_time": 50, "quality_score": 94,
     "email": "tewachew@company.com", "phone": "+251-91-222-2222"},
    {"id": "TM003", "name": "Mandefro", "role": "Mechanical Engineer",
     "specializations": ["Fuel Sensor Installation", "Fuel Sensor Calibration"],
     "completion_rate": 88, "average_task_time": 55, "quality_score": 89,
     "email": "mandefro@company.com", "phone": "+251-91-333-3333"},
    {"id": "TM004", "name": "Mamaru", "role": "Mechanic",
     "specializations": ["Fuel Sensor Installation", "Fuel Sensor Calibration"],
     "completion_rate": 82, "average_task_time": 60, "quality_score": 87,
     "email": "mamaru@company.com", "phone": "+251-91-444-4444"},
]

MORNING = "8:30–11:30 AM"
AFTERNOON = "1:30–5:30 PM"


def _vehicle(vid: str, vtype: str, location: str, day: int, slot: str, sensors: int = 1) -> dict:
    return {"id": vid, "type": vtype, "location": location, "day": day, "time_slot": slot,
            "gps_required": 1, "fuel_sensors": sensors, "fuel_tanks": sensors}


VEHICLES = [
    # Bahir Dar, jours 1-8 / days 1-8
    _vehicle("V001", "FORD/D/P/UP RANGER", "Bahir Dar", 1, MORNING),
    _vehicle("V002", "FORD/D/P/UP RANGER", "Bahir Dar", 1, AFTERNOON),
    _vehicle("V003", "FORD/D/P/UP RANGER", "Bahir Dar", 2, MORNING),
    _vehicle("V004", "FORD/D/P/UP RANGER", "Bahir Dar", 2, AFTERNOON),
    _vehicle("V005", "MAZDA/PICKUP W9AT", "Bahir Dar", 3, MORNING),
    _vehicle("V006", "Mercedes bus MCV260", "Bahir Dar", 3, AFTERNOON),
    _vehicle("V007", "Toyota land cruiser", "Bahir Dar", 4, MORNING),
    _vehicle("V008", "MAZDA/PICKUP W9AT", "Bahir Dar", 4, AFTERNOON),
    _vehicle("V009", "Mercedes bus MCV260", "Bahir Dar", 5, MORNING),
    _vehicle("V010", "UD truck CV86BLLDL", "Bahir Dar", 5, AFTERNOON, sensors=2),
    _vehicle("V011", "Mitsubishi K777JENSU", "Bahir Dar", 6, MORNING),
    _vehicle("V012", "Terios j120cg", "Bahir Dar", 6, AFTERNOON),
    _vehicle("V013", "MAZDA/PICKUP BT-50", "Bahir Dar", 7, MORNING),
    _vehicle("V014", "Mitsubishi (k777jensl)", "Bahir Dar", 7, AFTERNOON),
    _vehicle("V015", "Cherry c7180elkkhb0018", "Bahir Dar", 8, MORNING),
    # Kombolcha, jours 10-12 / days 10-12
    _vehicle("V016", "FORD/D/P/UP RANGER", "Kombolcha", 10, MORNING),
    _vehicle("V017", "MAZDA/R/D/UP BT-50", "Kombolcha", 10, AFTERNOON),
    _vehicle("V018", "Mercedes bus MCV5115", "Kombolcha", 11, MORNING),
    _vehicle("V019", "Toyota Pickup LN166L-PRMDS", "Kombolcha", 11, AFTERNOON),
    _vehicle("V020", "Mitsubishi K34)JUNJJC", "Kombolcha", 12, MORNING),
    _vehicle("V021", "UD truck CV86BLLDL", "Kombolcha", 12, AFTERNOON, sensors=2),
    # Addis Ababa, jours 13-14 / days 13-14
    _vehicle("V022", "FORD/D/P/UP RANGER", "Addis Ababa", 13, MORNING),
    _vehicle("V023", "MAZDA/PICKUP-626", "Addis Ababa", 13, AFTERNOON),
    _vehicle("V024", "Cherry c7180elkkhb0018", "Addis Ababa", 14, MORNING),
]


def generated_task_rows(vehicles: list[dict], project_start_date: str, team_members: list[dict]) -> list[dict]:
    """
    Taches generees pretes a enregistrer / Generated tasks ready to store.
    Les equipes generiques sont remplacees par un membre selon la categorie.
    Generic team names are replaced by a member picked from the category.
    """
    rows = []
    # Horloge avant le projet : toutes les taches restent a faire / Clock before the project: all pending
    before_project = datetime(2000, 1, 1)
    for vehicle in vehicles:
        for task in TaskGeneratorService.generate_vehicle_tasks(vehicle, project_start_date, now=before_project):
            if task.category == "break":
                assignee = task.assigned_to
            else:
                assignee = TaskGeneratorService.assignee_for_category(task.category, team_members)
            rows.append({
                "id": task.id,
                "name": task.name,
                "vehicle_id": task.vehicle_id,
                "assigned_to": assignee,
                "status": TaskStatus.PENDING,
                "priority": TaskPriority(task.priority),
                "estimated_duration": round(task.duration * 60),
                "start_time": task.start.strftime("%H:%M"),
                "end_time": task.end.strftime("%H:%M"),
                "start_date": task.start.date().isoformat(),
                "end_date": task.end.date().isoformat(),
                "duration_days": 1,
                "category": task.category,
                "dependencies": task.dependencies,
                "completion_percentage": 0,
            })
    return rows


async def _upsert(session: AsyncSession, model, key: str, rows: list[dict], now: str) -> int:
    for row in rows:
        existing = await session.get(model, row[key])
        if existing is None:
            obj = model(**row, created_at=now)
            if hasattr(obj, "updated_at"):
                obj.updated_at = now
            session.add(obj)
        else:
            for k, v in row.items():
                setattr(existing, k, v)
            if hasattr(existing, "updated_at"):
                existing.updated_at = now
    await session.flush()
    return len(rows)


async def apply_seed_data(session: AsyncSession) -> list[dict]:
    """
    Appliquer les donnees de reference, table par table / Apply seed data table by table.
    Chaque table est validee a part ; un echec n'arrete pas les suivantes.
    Each table is committed on its own; a failure does not stop the following ones.
    """
    now = utc_now()
    vehicles = [{**v, "status": VehicleStatus.PENDING} for v in VEHICLES]
    steps = [
        ("project_settings", ProjectSettings, "id", [PROJECT_SETTINGS]),
        ("locations", Location, "name", LOCATIONS),
        ("team_members", TeamMember, "id", TEAM_MEMBERS),
        ("vehicles", Vehicle, "id", vehicles),
        ("tasks", Task, "id",
         generated_task_rows(VEHICLES, PROJECT_SETTINGS["project_start_date"], TEAM_MEMBERS)),
    ]

    results = []
    for table, model, key, rows in steps:
        try:
            count = await _upsert(session, model, key, rows, now)
            await session.commit()
            results.append({"table": table, "success": True, "count": count, "error": None})
            logger.info("Seeded %s: %d rows", table, count)
        except Exception as e:
            await session.rollback()
            logger.exception("Seeding %s failed", table)
            results.append({"table": table, "success": False, "count": 0, "error": str(e)})
    return results
