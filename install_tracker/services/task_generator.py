"""
Generation des taches d'installation / Installation task generation.
Module isole : prend des vehicules (ou objets equivalents), retourne des GanttTask.
Standalone module: takes vehicles (or equivalent objects), returns GanttTask records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable

from install_tracker.models.task import as_list
from install_tracker.services.time_calculator import TimeCalculatorService

log = logging.getLogger(__name__)

MORNING_START = time(8, 30)
AFTERNOON_START = time(13, 30)
LUNCH_START = time(12, 30)
DEFAULT_TIME_SLOT = "8:30-11:30 AM"

STATUS_COLORS = {
    "Completed": ("#10B981", "#FFFFFF"),
    "In Progress": ("#3B82F6", "#FFFFFF"),
    "Blocked": ("#EF4444", "#FFFFFF"),
}

GROUP_COLORS = {
    "vehicle": "#3B82F6",
    "location": "#8B5CF6",
    "category": "#F97316",
    "assignee": "#10B981",
}


# ── Dataclasses d'entrée/sortie ──────────────────────────────────────


@dataclass(frozen=True)
class TaskTemplate:
    """Modele de tache / Task template."""
    name: str
    duration: int                   # minutes
    type: str                       # vehicle | task | installation
    category: str
    priority: str
    assigned_to: str
    color: str = "#9CA3AF"
    text_color: str = "#1F2937"
    resource: str | None = None     # gps | fuel


@dataclass
class GanttTask:
    """Tache affichable sur le Gantt / Gantt-ready task."""
    id: str
    name: str
    start: datetime
    end: datetime
    duration: float                 # heures / hours
    progress: int
    status: str
    priority: str
    assigned_to: str
    type: str
    category: str | None
    color: str
    text_color: str
    vehicle_id: str | None = None
    vehicle_type: str | None = None
    location: str | None = None
    dependencies: list[str] = field(default_factory=list)
    resources: dict[str, int] | None = None


LUNCH_BREAK = TaskTemplate(
    name="Lunch Break",
    duration=60,
    type="task",
    category="break",
    priority="Low",
    assigned_to="All Team",
    color="#6B7280",
    text_color="#FFFFFF",
)

# Taches standard persistees (minutes) / Persisted standard tasks (minutes)
STANDARD_TASKS: list[dict[str, Any]] = [
    {"name": "Vehicle Inspection", "description": "Pre-installation vehicle assessment and documentation",
     "priority": "High", "estimated_duration": 30, "tags": ["inspection", "pre-installation"]},
    {"name": "GPS Device Installation", "description": "Install and mount GPS tracking devices",
     "priority": "High", "estimated_duration": 60, "tags": ["gps", "installation"]},
    {"name": "Fuel Sensor Installation", "description": "Install fuel level sensors in tanks",
     "priority": "High", "estimated_duration": 90, "tags": ["fuel-sensor", "installation"]},
    {"name": "System Configuration", "description": "Configure GPS and sensor settings",
     "priority": "High", "estimated_duration": 45, "tags": ["configuration", "system"]},
    {"name": "Fuel Sensor Calibration", "description": "Calibrate fuel sensors for accurate fuel level readings",
     "priority": "High", "estimated_duration": 60, "tags": ["calibration", "fuel-sensor"]},
    {"name": "Quality Assurance", "description": "Final system testing and validation",
     "priority": "Medium", "estimated_duration": 30, "tags": ["qa", "testing"]},
    {"name": "Documentation", "description": "Complete installation documentation",
     "priority": "Medium", "estimated_duration": 20, "tags": ["documentation", "completion"]},
]

STANDARD_DAY_START = 9 * 60
STANDARD_DAY_END = 17 * 60
STANDARD_BUFFER = 15

# Ordre logique des taches stockees / Logical order of stored tasks
_STORED_TASK_ORDER = {
    "Vehicle Inspection": 1,
    "GPS Installation": 2,
    "GPS Device Installation": 2,
    "Fuel Sensor Installation": 3,
    "System Configuration": 4,
    "Fuel Sensor Calibration": 5,
    "Quality Assurance": 6,
    "Documentation": 7,
}

# Roles preferes par categorie / Preferred role keywords per category
_ROLE_KEYWORDS = {
    "inspection": ["senior", "lead", "supervisor", "technician"],
    "installation": ["installation", "technician", "specialist"],
    "configuration": ["engineer", "system", "software", "technical"],
    "testing": ["qa", "quality", "inspector", "testing"],
    "documentation": ["coordinator", "manager", "admin"],
    "calibration": ["calibration", "specialist", "expert", "technician"],
}


def _attr(obj: Any, name: str, default: Any = None) -> Any:
    """Lire un champ sur un modele ou un dict / Read a field from a model or a dict."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _status_value(value: Any) -> str:
    return getattr(value, "value", value) or ""


class TaskGeneratorService:
    """Generation et transformation des taches Gantt / Gantt task generation and transforms."""

    @staticmethod
    def templates_for_vehicle(vehicle: Any) -> list[TaskTemplate]:
        """
        Modeles selon les equipements du vehicule / Templates from the vehicle's equipment.
        Inspection toujours ; GPS / capteurs si demandes ; configuration, test et
        documentation seulement si au moins un equipement est installe.
        """
        gps_required = _attr(vehicle, "gps_required") or 0
        fuel_sensors = _attr(vehicle, "fuel_sensors") or 0

        templates = [
            TaskTemplate("Vehicle Inspection", 30, "vehicle", "inspection", "High",
                         "Installation Team", "#F59E0B", "#1F2937"),
        ]
        if gps_required > 0:
            templates.append(TaskTemplate("GPS Device Installation", 60, "installation", "installation",
                                          "Medium", "Technical Team", "#8B5CF6", "#FFFFFF", resource="gps"))
        if fuel_sensors > 0:
            templates.append(TaskTemplate("Fuel Sensor Installation", max(60, fuel_sensors * 30),
                                          "installation", "installation", "Medium", "Technical Team",
                                          "#06B6D4", "#FFFFFF", resource="fuel"))
        if gps_required > 0 or fuel_sensors > 0:
            templates.extend([
                TaskTemplate("System Configuration", 45, "task", "configuration", "Medium",
                             "Technical Team", "#84CC16", "#1F2937"),
                TaskTemplate("System Testing", 30, "task", "testing", "High",
                             "Quality Team", "#F97316", "#FFFFFF"),
                TaskTemplate("Documentation", 15, "task", "documentation", "Low",
                             "Installation Team", "#6B7280", "#FFFFFF"),
            ])
        return templates

    @staticmethod
    def task_status(vehicle_status: Any, start: datetime, end: datetime, now: datetime) -> str:
        """Statut d'une tache generee / Generated task status from vehicle status and clock."""
        vehicle_status = _status_value(vehicle_status)
        if vehicle_status == "Completed":
            return "Completed"
        if vehicle_status == "Blocked":
            return "Blocked" if now < start else "Completed"
        if now < start:
            return "Pending"
        if now <= end:
            return "In Progress" if vehicle_status == "In Progress" else "Completed"
        return "Completed"

    @staticmethod
    def task_progress(status: str) -> int:
        if status == "Completed":
            return 100
        if status == "In Progress":
            return 60
        return 0

    @staticmethod
    def task_colors(template: TaskTemplate, status: str) -> tuple[str, str]:
        """Couleurs : le statut prime sur le modele / Colors: status overrides the template."""
        return STATUS_COLORS.get(status, (template.color, template.text_color))

    @staticmethod
    def generate_vehicle_tasks(
        vehicle: Any,
        project_start_date: str | date,
        time_slot: str | None = None,
        now: datetime | None = None,
    ) -> list[GanttTask]:
        """
        Taches chainees d'un vehicule / Chained tasks for one vehicle.
        Debut 08:30 (13:30 pour un creneau d'apres-midi), chaque tache commence a la
        fin de la precedente ; pause dejeuner 12:30-13:30 ajoutee pour le matin.
        Starts at 08:30 (13:30 for afternoon slots), each task starts when the previous
        one ends; a 12:30-13:30 lunch break is added for morning slots.
        """
        now = now or datetime.now()
        time_slot = time_slot or _attr(vehicle, "time_slot") or DEFAULT_TIME_SLOT
        vehicle_id = _attr(vehicle, "id")
        location = _attr(vehicle, "location")
        vehicle_day = TimeCalculatorService.date_for_day(project_start_date, _attr(vehicle, "day") or 1)

        tasks: list[GanttTask] = []
        if TimeCalculatorService.is_morning_slot(time_slot):
            lunch_start = datetime.combine(vehicle_day, LUNCH_START)
            tasks.append(GanttTask(
                id=f"lunch-{vehicle_id}",
                name=LUNCH_BREAK.name,
                start=lunch_start,
                end=lunch_start + timedelta(minutes=LUNCH_BREAK.duration),
                duration=LUNCH_BREAK.duration / 60,
                progress=100,
                status="Completed",
                priority=LUNCH_BREAK.priority,
                assigned_to=LUNCH_BREAK.assigned_to,
                type=LUNCH_BREAK.type,
                category=LUNCH_BREAK.category,
                color=LUNCH_BREAK.color,
                text_color=LUNCH_BREAK.text_color,
                location=location,
            ))

        start_of_day = AFTERNOON_START if TimeCalculatorService.is_afternoon_slot(time_slot) else MORNING_START
        current = datetime.combine(vehicle_day, start_of_day)
        gps_required = _attr(vehicle, "gps_required") or 0
        fuel_sensors = _attr(vehicle, "fuel_sensors") or 0
        vehicle_status = _attr(vehicle, "status")
        previous_id: str | None = None

        for index, template in enumerate(TaskGeneratorService.templates_for_vehicle(vehicle)):
            start = current
            end = start + timedelta(minutes=template.duration)
            status = TaskGeneratorService.task_status(vehicle_status, start, end, now)
            color, text_color = TaskGeneratorService.task_colors(template, status)
            needs_fuel = template.resource == "fuel"
            task_id = f"{vehicle_id}-{template.category}-{index}"
            tasks.append(GanttTask(
                id=task_id,
                name=f"{vehicle_id} {template.name}",
                start=start,
                end=end,
                duration=template.duration / 60,
                progress=TaskGeneratorService.task_progress(status),
                status=status,
                priority=template.priority,
                assigned_to=template.assigned_to,
                type=template.type,
                category=template.category,
                color=color,
                text_color=text_color,
                vehicle_id=vehicle_id,
                vehicle_type=_attr(vehicle, "type"),
                location=location,
                dependencies=[previous_id] if previous_id else [],
                resources={
                    "gps": gps_required if template.resource == "gps" else 0,
                    "fuel": fuel_sensors if needs_fuel else 0,
                    "tanks": (_attr(vehicle, "fuel_tanks") or 0) if needs_fuel else 0,
                },
            ))
            previous_id = task_id
            current = end
        return tasks

    @staticmethod
    def generate_all(
        vehicles: Iterable[Any],
        project_start_date: str | date,
        now: datetime | None = None,
    ) -> list[GanttTask]:
        """Taches de tous les vehicules / Tasks for every vehicle."""
        now = now or datetime.now()
        all_tasks: list[GanttTask] = []
        for vehicle in vehicles:
            time_slot = _attr(vehicle, "time_slot") or DEFAULT_TIME_SLOT
            all_tasks.extend(
                TaskGeneratorService.generate_vehicle_tasks(vehicle, project_start_date, time_slot, now)
            )
        log.debug("Generated %d gantt tasks", len(all_tasks))
        return all_tasks

    @staticmethod
    def filter_tasks(
        tasks: Iterable[GanttTask],
        day: date | None = None,
        location: str | None = None,
        status: str | None = None,
        vehicle_id: str | None = None,
        type: str | None = None,
        category: str | None = None,
        search: str | None = None,
    ) -> list[GanttTask]:
        """
        Filtrer les taches ('All' = pas de filtre) / Filter tasks ('All' means no filter).
        Le filtre jour garde les taches qui commencent, finissent ou couvrent ce jour.
        The day filter keeps tasks that start, end or span that day.
        """
        term = search.strip().lower() if search and search.strip() else None
        result = []
        for task in tasks:
            if day is not None and not (task.start.date() <= day <= task.end.date()):
                continue
            if location and location != "All" and task.location != location:
                continue
            if status and status != "All" and task.status != status:
                continue
            if vehicle_id and task.vehicle_id != vehicle_id:
                continue
            if type and type != "All" and task.type != type:
                continue
            if category and category != "All" and task.category != category:
                continue
            if term is not None:
                haystack = [task.name, task.vehicle_id or "", task.assigned_to, task.location or ""]
                if not any(term in value.lower() for value in haystack):
                    continue
            result.append(task)
        return result

    @staticmethod
    def group_tasks(tasks: Iterable[GanttTask], group_by: str) -> dict[str, dict[str, Any]]:
        """Regrouper les taches, triees par debut / Group tasks, sorted by start in each group."""
        groups: dict[str, dict[str, Any]] = {}
        for task in tasks:
            if group_by == "vehicle":
                key = task.vehicle_id or "general"
                name = f"{task.vehicle_id} ({task.location})" if task.vehicle_id else "General Tasks"
                color = GROUP_COLORS["vehicle"]
            elif group_by == "location":
                key = task.location or "Unknown"
                name = f"{key} Location"
                color = GROUP_COLORS["location"]
            elif group_by == "type":
                key = task.type
                name = f"{task.type.capitalize()} Tasks"
                color = {"vehicle": "#F59E0B", "installation": "#06B6D4"}.get(task.type, "#84CC16")
            elif group_by == "category":
                key = task.category or "general"
                name = f"{key.capitalize()} Tasks"
                color = GROUP_COLORS["category"]
            elif group_by == "assignee":
                key = task.assigned_to
                name = task.assigned_to
                color = GROUP_COLORS["assignee"]
            else:
                key, name, color = "all", "All Tasks", "#6B7280"

            group = groups.setdefault(key, {"name": name, "color": color, "tasks": []})
            group["tasks"].append(task)

        for group in groups.values():
            group["tasks"].sort(key=lambda t: t.start)
        return groups

    @staticmethod
    def standard_tasks(
        vehicle_id: str,
        assigned_to: str | list[str] | None,
        start_date: str | date | None = None,
    ) -> list[dict[str, Any]]:
        """
        Les 7 taches standard a persister / The seven standard tasks to persist.
        Debut 09:00, 15 min entre taches, retour a 09:00 une fois 17:00 atteint.
        Starts at 09:00, 15 min between tasks, back to 09:00 once 17:00 is reached.
        """
        start_date = TimeCalculatorService.parse_date(start_date) or date.today()
        current = STANDARD_DAY_START
        rows = []
        for template in STANDARD_TASKS:
            start_minutes = current
            end_minutes = current + template["estimated_duration"]
            end_hour, end_min = divmod(end_minutes, 60)
            if end_hour > 23:
                end_hour, end_min = 23, 59
            rows.append({
                **template,
                "vehicle_id": vehicle_id,
                "assigned_to": assigned_to,
                "start_time": f"{start_minutes // 60:02d}:{start_minutes % 60:02d}",
                "end_time": f"{end_hour:02d}:{end_min:02d}",
                "start_date": start_date.isoformat(),
                "duration_days": 1,
                "category": TaskGeneratorService.category_from_name(template["name"]),
            })
            current = end_minutes + STANDARD_BUFFER
            if current >= STANDARD_DAY_END:
                current = STANDARD_DAY_START
        return rows

    @staticmethod
    def category_from_name(task_name: str) -> str:
        """Categorie deduite du nom / Category derived from the task name."""
        name = task_name.lower()
        if "inspect" in name:
            return "inspection"
        if "install" in name:
            return "installation"
        if "config" in name:
            return "configuration"
        if "test" in name or "quality" in name:
            return "testing"
        if "document" in name:
            return "documentation"
        if "calibrat" in name:
            return "calibration"
        if "break" in name or "lunch" in name:
            return "break"
        return "testing"

    @staticmethod
    def default_duration(task_name: str, estimated_duration: int | None = None) -> int:
        """Duree par defaut (minutes) selon le nom / Default duration (minutes) by name."""
        if estimated_duration and estimated_duration > 0:
            return estimated_duration
        name = task_name.lower()
        if "vehicle" in name or "inspection" in name:
            return 30
        if "gps" in name and "installation" in name:
            return 60
        if "fuel" in name and "sensor" in name:
            return 90
        if "system" in name and "configuration" in name:
            return 45
        if "quality" in name or "assurance" in name:
            return 30
        if "calibration" in name or "documentation" in name:
            return 20
        return 45

    @staticmethod
    def assignee_for_category(category: str, team_members: list[Any]) -> str:
        """Membre le plus adapte a la categorie / Best matching member for a category."""
        if category == "break":
            return "All Team"
        if not team_members:
            return "Unassigned"
        for keyword in _ROLE_KEYWORDS.get(category, ["technician"]):
            for member in team_members:
                if keyword in (_attr(member, "role") or "").lower():
                    return _attr(member, "name")
        return _attr(team_members[0], "name")

    @staticmethod
    def stored_tasks_to_gantt(
        tasks: Iterable[Any],
        vehicles: Iterable[Any],
        project_start_date: str | date,
    ) -> list[GanttTask]:
        """
        Convertir les taches stockees en GanttTask / Convert stored tasks into GanttTask.
        Les horaires stockes priment ; sinon les taches sont enchainees dans le creneau
        du vehicule, sans le depasser.
        Stored times win; otherwise tasks are chained inside the vehicle slot, capped at its end.
        """
        from install_tracker.services.task_names import TaskNameService

        vehicles_by_id = {_attr(v, "id"): v for v in vehicles}
        by_vehicle: dict[str | None, list[Any]] = {}
        for task in tasks:
            ids = as_list(_attr(task, "vehicle_id"))
            by_vehicle.setdefault(ids[0] if ids else None, []).append(task)

        gantt: list[GanttTask] = []
        for vehicle_id, group in by_vehicle.items():
            vehicle = vehicles_by_id.get(vehicle_id)
            if vehicle is not None:
                display_day = TimeCalculatorService.date_for_day(project_start_date, _attr(vehicle, "day") or 1)
                slot = TimeCalculatorService.parse_time_slot(_attr(vehicle, "time_slot"), display_day)
                group.sort(key=lambda t: _STORED_TASK_ORDER.get(_attr(t, "name"), 8))
            else:
                display_day = TimeCalculatorService.parse_date(project_start_date)
                slot = None
                group.sort(key=lambda t: _attr(t, "start_time") or "")
            cursor = slot[0] if slot else datetime.combine(display_day, MORNING_START)

            for task in group:
                task_day = TimeCalculatorService.parse_date(_attr(task, "start_date")) or display_day
                start_min = TimeCalculatorService.parse_hhmm(_attr(task, "start_time"))
                end_min = TimeCalculatorService.parse_hhmm(_attr(task, "end_time"))
                if start_min is not None and end_min is not None:
                    midnight = datetime.combine(task_day, time(0, 0))
                    start = midnight + timedelta(minutes=start_min)
                    end = midnight + timedelta(minutes=end_min)
                else:
                    duration = TaskGeneratorService.default_duration(
                        _attr(task, "name"), _attr(task, "estimated_duration")
                    )
                    start = cursor
                    end = start + timedelta(minutes=duration)
                    if slot and end > slot[1]:
                        end = slot[1]
                    cursor = end

                status = _status_value(_attr(task, "status"))
                status = "Pending" if status == "Scheduled" else status
                assignees = as_list(_attr(task, "assigned_to"))
                template = TaskTemplate(_attr(task, "name"), 0, "task", "task", "Medium", "")
                color, text_color = TaskGeneratorService.task_colors(template, status)
                gantt.append(GanttTask(
                    id=_attr(task, "id"),
                    name=TaskNameService.display_name(_attr(task, "name"), vehicle_id),
                    start=start,
                    end=end,
                    duration=(end - start).total_seconds() / 3600,
                    progress={"Completed": 100, "In Progress": 50}.get(status, 0),
                    status=status,
                    priority=_status_value(_attr(task, "priority")) or "Medium",
                    assigned_to=assignees[0] if assignees else "",
                    type="task",
                    category=_attr(task, "category") or TaskGeneratorService.category_from_name(_attr(task, "name")),
                    color=color,
                    text_color=text_color,
                    vehicle_id=vehicle_id,
                    vehicle_type=_attr(vehicle, "type") if vehicle is not None else "Shared",
                    location=_attr(vehicle, "location") if vehicle is not None else "All Locations",
                    dependencies=list(_attr(task, "dependencies") or []),
                ))
        gantt.sort(key=lambda t: t.start)
        return gantt
