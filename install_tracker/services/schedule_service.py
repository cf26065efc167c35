"""
Service de planning vehicules / Vehicle schedule service.
Filtre, tri et vue calendrier des vehicules / Filtering, sorting and calendar view of vehicles.
"""

from datetime import date
from typing import Any

from install_tracker.config import settings
from install_tracker.services.time_calculator import TimeCalculatorService

# Ordre de tri par statut / Status sort order
STATUS_ORDER = {"In Progress": 3, "Pending": 2, "Completed": 1}
SORT_FIELDS = ("day", "location", "status", "type")


def _status(vehicle: Any) -> str:
    return getattr(vehicle.status, "value", vehicle.status)


class ScheduleService:
    """Vue planning des vehicules / Vehicle schedule view."""

    @staticmethod
    def filter_vehicles(
        vehicles: list[Any],
        location: str | None = None,
        day: int | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> list[Any]:
        """Filtrer ('All' = pas de filtre) / Filter ('All' means no filter)."""
        term = search.strip().lower() if search else ""
        result = []
        for v in vehicles:
            if location and location != "All" and v.location != location:
                continue
            if day is not None and v.day != day:
                continue
            if status and status != "All" and _status(v) != status:
                continue
            if term and not any(term in (value or "").lower() for value in (v.id, v.type, v.location)):
                continue
            result.append(v)
        return result

    @staticmethod
    def sort_vehicles(vehicles: list[Any], sort_by: str = "day", sort_order: str = "asc") -> list[Any]:
        """Trier les vehicules / Sort vehicles (status: In Progress > Pending > Completed)."""
        if sort_by == "status":
            key = lambda v: STATUS_ORDER.get(_status(v), 0)  # noqa: E731
        elif sort_by in SORT_FIELDS:
            key = lambda v: getattr(v, sort_by)  # noqa: E731
        else:
            return list(vehicles)
        return sorted(vehicles, key=key, reverse=sort_order == "desc")

    @staticmethod
    def schedule_view(
        vehicles: list[Any],
        project_start_date: str | date | None,
        filtered: list[Any] | None = None,
    ) -> dict[str, Any]:
        """
        Vue planning : vehicules dates, stats, jours et creneaux / Schedule view:
        dated vehicles, stats, unique days and time slots.
        """
        start = TimeCalculatorService.parse_date(project_start_date) or date.today()
        rows = vehicles if filtered is None else filtered
        counts = {"Completed": 0, "In Progress": 0, "Pending": 0}
        for v in vehicles:
            if _status(v) in counts:
                counts[_status(v)] += 1
        return {
            "project_start_date": start.isoformat(),
            "total_days": settings.DEFAULT_PROJECT_DAYS,
            "stats": {
                "total": len(vehicles),
                "completed": counts["Completed"],
                "in_progress": counts["In Progress"],
                "pending": counts["Pending"],
                "total_gps": sum(v.gps_required or 0 for v in vehicles),
                "total_sensors": sum(v.fuel_sensors or 0 for v in vehicles),
            },
            "unique_days": sorted({v.day for v in vehicles}),
            "time_slots": sorted({v.time_slot for v in vehicles if v.time_slot}),
            "vehicles": [
                {
                    "id": v.id,
                    "type": v.type,
                    "location": v.location,
                    "day": v.day,
                    "time_slot": v.time_slot,
                    "status": _status(v),
                    "gps_required": v.gps_required,
                    "fuel_sensors": v.fuel_sensors,
                    "fuel_tanks": v.fuel_tanks,
                    "installation_date": TimeCalculatorService.date_for_day(start, v.day).isoformat(),
                }
                for v in rows
            ],
        }
