"""
Service de calcul des temps / Time calculation service.
Horaires HH:MM, creneaux vehicule, jours projet et phases du calendrier.
HH:MM times, vehicle time slots, project days and calendar phases.
"""

import re
from datetime import date, datetime, time, timedelta

# Formats stockes en base (String(5) et String(10)) / Stored formats (String(5) and String(10))
HHMM_PATTERN = r"^([01]?\d|2[0-3]):[0-5]\d$"
ISO_DATE_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$"

_HHMM_RE = re.compile(r"^\d{1,2}:\d{2}$")
_AM_PM_RE = re.compile(r"(AM|PM)$", re.IGNORECASE)


class TimeCalculatorService:
    """Calculs horaires et calendaires / Time and calendar calculations."""

    @staticmethod
    def parse_hhmm(value: str | None) -> int | None:
        """Horaire HH:MM en minutes depuis minuit / HH:MM to minutes since midnight.

        Retourne None si le format est invalide / Returns None on invalid format.
        """
        if not value or not _HHMM_RE.match(value.strip()):
            return None
        hours, mins = map(int, value.strip().split(":"))
        if hours > 23 or mins > 59:
            return None
        return hours * 60 + mins

    @staticmethod
    def parse_date(value: str | date | None) -> date | None:
        """Date ISO (YYYY-MM-DD ou datetime) / ISO date (YYYY-MM-DD or datetime)."""
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            return None

    @staticmethod
    def date_for_day(start_date: str | date, day: int) -> date:
        """Date calendaire du jour N du projet / Calendar date of project day N (day 1 = start)."""
        start = TimeCalculatorService.parse_date(start_date)
        if start is None:
            raise ValueError(f"Invalid project start date: {start_date!r}")
        return start + timedelta(days=day - 1)

    @staticmethod
    def slot_start(time_slot: str | None) -> str:
        """Partie debut d'un creneau / Start part of a time slot ("8:30–11:30 AM" -> "8:30")."""
        if not time_slot:
            return ""
        return re.split(r"[–-]", time_slot, maxsplit=1)[0].strip()

    @staticmethod
    def is_morning_slot(time_slot: str | None) -> bool:
        return TimeCalculatorService.slot_start(time_slot) in ("8:30", "08:30")

    @staticmethod
    def is_afternoon_slot(time_slot: str | None) -> bool:
        return TimeCalculatorService.slot_start(time_slot) in ("1:30", "01:30", "13:30")

    @staticmethod
    def parse_time_slot(time_slot: str | None, base_day: date) -> tuple[datetime, datetime] | None:
        """
        Convertir un creneau en debut/fin / Convert a time slot into start/end datetimes.
        Formats: "8:30–11:30 AM", "1:30–5:30 PM", "09:00–12:00 PM", "08:30-11:30", "13:30-17:30".
        Le marqueur AM/PM de fin s'applique au debut sauf pour un creneau qui finit a midi.
        The trailing AM/PM marker applies to the start too, except for slots ending at noon.
        """
        if not time_slot:
            return None
        parts = re.split(r"[–-]", " ".join(time_slot.split()))
        if len(parts) != 2:
            return None
        start_part, end_part = parts[0].strip(), parts[1].strip()

        marker = _AM_PM_RE.search(end_part)
        end_part = _AM_PM_RE.sub("", end_part).strip()
        try:
            start_hour, start_min = (int(p) for p in start_part.split(":"))
            end_hour, end_min = (int(p) for p in end_part.split(":"))
        except ValueError:
            return None

        if marker is not None:
            is_pm = marker.group(1).upper() == "PM"
            is_start_pm = is_pm and not (start_hour < end_hour == 12)
            if is_start_pm and start_hour < 12:
                start_hour += 12
            elif not is_start_pm and start_hour == 12:
                start_hour = 0
            if is_pm and end_hour < 12:
                end_hour += 12
            elif not is_pm and end_hour == 12:
                end_hour = 0

        if not (0 <= start_hour <= 23 and 0 <= end_hour <= 23 and 0 <= start_min <= 59 and 0 <= end_min <= 59):
            return None
        return (
            datetime.combine(base_day, time(start_hour, start_min)),
            datetime.combine(base_day, time(end_hour, end_min)),
        )

    @staticmethod
    def project_phase(start_date: str | date, today: date | None = None, total_days: int = 14) -> dict:
        """
        Phase du projet / Project phase.
        planning avant le debut, active jusqu'au dernier jour, completed ensuite.
        planning before start, active through the last day, completed afterwards.
        """
        start = TimeCalculatorService.parse_date(start_date)
        today = today or date.today()
        project_end = start + timedelta(days=total_days - 1)

        if today < start:
            return {
                "phase": "planning",
                "days_until_start": (start - today).days,
                "days_since_start": 0,
                "progress_percentage": 0,
            }
        if today <= project_end:
            days_since_start = (today - start).days
            return {
                "phase": "active",
                "days_until_start": 0,
                "days_since_start": days_since_start,
                "progress_percentage": max(0, min(100, round(days_since_start / total_days * 100))),
            }
        return {
            "phase": "completed",
            "days_until_start": 0,
            "days_since_start": total_days,
            "progress_percentage": 100,
        }

    @staticmethod
    def project_status(
        start_date: str | date | None,
        end_date: str | date | None = None,
        today: date | None = None,
    ) -> dict:
        """Statut du projet / Project status: not_configured, pending, live or completed."""
        start = TimeCalculatorService.parse_date(start_date)
        if start is None:
            return {"status": "not_configured", "message": "Project not configured"}
        today = today or date.today()
        end = TimeCalculatorService.parse_date(end_date)
        if today < start:
            return {"status": "pending", "message": "Project not started yet"}
        if end is not None and today > end:
            return {"status": "completed", "message": "Project completed"}
        return {"status": "live", "message": "Project is Live!"}

    @staticmethod
    def current_project_day(start_date: str | date | None, today: date | None = None) -> int | None:
        """Numero du jour courant (1 = debut) / Current project day number (1 = start)."""
        start = TimeCalculatorService.parse_date(start_date)
        if start is None:
            return None
        today = today or date.today()
        return max(0, (today - start).days) + 1
