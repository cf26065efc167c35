"""
Service de calcul des statistiques / Statistics calculation service.
Agregats sur les vehicules, taches, sites et membres d'equipe.
Aggregates over vehicles, tasks, locations and team members.
"""

from collections import Counter
from typing import Any

from install_tracker.models.task import as_list


def _status(obj: Any) -> str:
    value = obj.get("status") if isinstance(obj, dict) else getattr(obj, "status", None)
    return getattr(value, "value", value) or ""


def _status_counts(rows: list[Any]) -> Counter:
    return Counter(_status(r) for r in rows)


class StatsService:
    """Calcul des indicateurs / Metrics calculation."""

    @staticmethod
    def percentage(part: int, total: int) -> int:
        """Pourcentage arrondi (0 si total nul) / Rounded percentage (0 when total is 0)."""
        if total <= 0:
            return 0
        return round(part / total * 100)

    @staticmethod
    def vehicle_stats(vehicles: list[Any]) -> dict[str, Any]:
        """Totaux par statut, equipements et repartition par site / Totals per status, equipment, per-location split."""
        counts = _status_counts(vehicles)
        breakdown: dict[str, dict[str, int]] = {}
        for v in vehicles:
            loc = breakdown.setdefault(v.location, {
                "total": 0, "completed": 0, "in_progress": 0, "pending": 0, "blocked": 0,
            })
            loc["total"] += 1
            key = _status(v).lower().replace(" ", "_")
            if key in loc:
                loc[key] += 1
        return {
            "total": len(vehicles),
            "completed": counts["Completed"],
            "in_progress": counts["In Progress"],
            "pending": counts["Pending"],
            "blocked": counts["Blocked"],
            "total_gps_devices": sum(v.gps_required or 0 for v in vehicles),
            "total_fuel_sensors": sum(v.fuel_sensors or 0 for v in vehicles),
            "total_fuel_tanks": sum(v.fuel_tanks or 0 for v in vehicles),
            "location_breakdown": breakdown,
        }

    @staticmethod
    def task_stats(tasks: list[Any]) -> dict[str, Any]:
        """Totaux par statut et priorite, repartition par assigne / Totals per status and priority, per assignee."""
        counts = _status_counts(tasks)
        priorities = Counter(getattr(t.priority, "value", t.priority) for t in tasks)
        assignees: dict[str, dict[str, int]] = {}
        for t in tasks:
            for name in as_list(t.assigned_to):
                entry = assignees.setdefault(name, {"total": 0, "completed": 0, "in_progress": 0, "pending": 0})
                entry["total"] += 1
                key = _status(t).lower().replace(" ", "_")
                if key in entry:
                    entry[key] += 1
        return {
            "total": len(tasks),
            "completed": counts["Completed"],
            "in_progress": counts["In Progress"],
            "pending": counts["Pending"],
            "blocked": counts["Blocked"],
            "scheduled": counts["Scheduled"],
            "high_priority": priorities["High"],
            "medium_priority": priorities["Medium"],
            "low_priority": priorities["Low"],
            "assignee_breakdown": assignees,
        }

    @staticmethod
    def location_stats(locations: list[Any], vehicles: list[Any]) -> list[dict[str, Any]]:
        """Avancement par site / Progress per location."""
        stats = []
        for location in locations:
            rows = [v for v in vehicles if v.location == location.name]
            counts = _status_counts(rows)
            stats.append({
                "name": location.name,
                "planned_vehicles": location.vehicles or 0,
                "actual_vehicles": len(rows),
                "completed": counts["Completed"],
                "in_progress": counts["In Progress"],
                "pending": counts["Pending"],
                "progress": StatsService.percentage(counts["Completed"], len(rows)),
                "gps_devices": location.gps_devices or 0,
                "fuel_sensors": location.fuel_sensors or 0,
            })
        return stats

    @staticmethod
    def location_counts(location_name: str, vehicles: list[Any]) -> dict[str, int]:
        """Compteurs d'un site recalcules depuis les vehicules / Location counters recomputed from vehicles."""
        rows = [v for v in vehicles if v.location == location_name]
        return {
            "vehicles": len(rows),
            "gps_devices": sum(v.gps_required or 0 for v in rows),
            "fuel_sensors": sum(v.fuel_sensors or 0 for v in rows),
        }

    @staticmethod
    def member_tasks(member: Any, tasks: list[Any]) -> list[Any]:
        """Taches d'un membre (par nom ou id) / A member's tasks (matched by name or id)."""
        keys = {member.name, member.id}
        return [t for t in tasks if keys.intersection(as_list(t.assigned_to))]

    @staticmethod
    def member_stats(member: Any, tasks: list[Any]) -> dict[str, Any]:
        rows = StatsService.member_tasks(member, tasks)
        counts = _status_counts(rows)
        return {
            "id": member.id,
            "name": member.name,
            "role": member.role,
            "total_tasks": len(rows),
            "completed_tasks": counts["Completed"],
            "in_progress_tasks": counts["In Progress"],
            "pending_tasks": counts["Pending"],
            "blocked_tasks": counts["Blocked"],
            "completion_rate": StatsService.percentage(counts["Completed"], len(rows)),
        }

    @staticmethod
    def member_metrics(member: Any, tasks: list[Any]) -> dict[str, Any]:
        """
        Indicateurs recalcules / Recomputed metrics.
        qualite = min(100, taux de completion + 10 si duree moyenne > 0)
        quality = min(100, completion rate + 10 when the average duration is > 0)
        """
        rows = StatsService.member_tasks(member, tasks)
        completed = sum(1 for t in rows if _status(t) == "Completed")
        completion_rate = StatsService.percentage(completed, len(rows))
        average_task_time = round(sum(t.estimated_duration or 0 for t in rows) / len(rows)) if rows else 0
        return {
            "completion_rate": completion_rate,
            "average_task_time": average_task_time,
            "quality_score": min(100, completion_rate + (10 if average_task_time > 0 else 0)),
        }

    @staticmethod
    def member_workload(member: Any, tasks: list[Any]) -> dict[str, Any]:
        rows = StatsService.member_tasks(member, tasks)
        counts = _status_counts(rows)
        open_rows = [t for t in rows if _status(t) not in ("Completed",)]
        return {
            "id": member.id,
            "name": member.name,
            "total": len(rows),
            "completed": counts["Completed"],
            "in_progress": counts["In Progress"],
            "pending": counts["Pending"],
            "blocked": counts["Blocked"],
            "scheduled_minutes": sum(t.estimated_duration or 0 for t in open_rows),
            "task_ids": [t.id for t in rows],
        }
