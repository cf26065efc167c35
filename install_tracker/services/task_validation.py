"""
Validation des taches et controles d'integrite / Task validation and integrity checks.
Les references (vehicules, membres) ne sont pas imposees a l'ecriture : ces
controles sont lances a la demande.
References (vehicles, members) are not enforced on write: these checks run on demand.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from install_tracker.models.task import TaskPriority, TaskStatus, as_list
from install_tracker.services.time_calculator import TimeCalculatorService

VALID_STATUSES = [s.value for s in TaskStatus]
VALID_PRIORITIES = [p.value for p in TaskPriority]
MAX_NAME_LENGTH = 255
MAX_DURATION_MINUTES = 1440
LONG_HIGH_PRIORITY_MINUTES = 480


@dataclass
class ValidationIssue:
    field: str
    code: str
    message: str
    severity: str                   # error | warning | info


@dataclass
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    suggestions: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {"is_valid": self.is_valid, **asdict(self)}


@dataclass
class IntegrityReport:
    passed: int = 0
    failed: int = 0
    issues: list[str] = field(default_factory=list)

    def check(self, ok: bool, issue: str) -> None:
        if ok:
            self.passed += 1
        else:
            self.failed += 1
            self.issues.append(issue)


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _value(value: Any) -> Any:
    return getattr(value, "value", value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class TaskValidationService:
    """Regles de validation des taches / Task validation rules."""

    @staticmethod
    def validate(
        task: dict[str, Any],
        vehicles: list[Any] | None = None,
        team_members: list[Any] | None = None,
        existing_tasks: list[Any] | None = None,
    ) -> ValidationResult:
        """
        Valider une tache / Validate a task.
        Les erreurs bloquent, les avertissements et suggestions informent.
        Errors block, warnings and suggestions inform.
        """
        result = ValidationResult()

        def error(field_name: str, code: str, message: str) -> None:
            result.errors.append(ValidationIssue(field_name, code, message, "error"))

        def warning(field_name: str, code: str, message: str) -> None:
            result.warnings.append(ValidationIssue(field_name, code, message, "warning"))

        def suggest(field_name: str, code: str, message: str) -> None:
            result.suggestions.append(ValidationIssue(field_name, code, message, "info"))

        # --- Champs obligatoires / Required fields ---
        name = task.get("name")
        if not name or not name.strip():
            error("name", "REQUIRED", "Task name is required")
        elif len(name) > MAX_NAME_LENGTH:
            error("name", "TOO_LONG", "Task name must be less than 255 characters")

        vehicle_ids = as_list(task.get("vehicle_id"))
        if not vehicle_ids:
            error("vehicle_id", "REQUIRED", "Vehicle assignment is required")
        elif vehicles is not None:
            known = {_field(v, "id") for v in vehicles}
            invalid = [v for v in vehicle_ids if v not in known]
            if invalid:
                error("vehicle_id", "INVALID_REFERENCE", f"Invalid vehicle ID(s): {', '.join(invalid)}")

        assignees = as_list(task.get("assigned_to"))
        if not assignees:
            error("assigned_to", "REQUIRED", "Task assignment is required")
        elif team_members is not None:
            known = {_field(m, "name") for m in team_members}
            invalid = [a for a in assignees if a not in known]
            if invalid:
                error("assigned_to", "INVALID_REFERENCE", f"Invalid assignee(s): {', '.join(invalid)}")

        # --- Valeurs enumerees / Enumerated values ---
        status = _value(task.get("status"))
        if status and status not in VALID_STATUSES:
            error("status", "INVALID_VALUE", f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}")
        priority = _value(task.get("priority"))
        if priority and priority not in VALID_PRIORITIES:
            error("priority", "INVALID_VALUE",
                  f"Invalid priority. Must be one of: {', '.join(VALID_PRIORITIES)}")

        # --- Horaires / Times ---
        if task.get("start_time") and task.get("end_time"):
            start = TimeCalculatorService.parse_hhmm(task["start_time"])
            end = TimeCalculatorService.parse_hhmm(task["end_time"])
            if start is None:
                error("start_time", "INVALID_FORMAT", "Invalid start time format. Use HH:MM (24-hour)")
            if end is None:
                error("end_time", "INVALID_FORMAT", "Invalid end time format. Use HH:MM (24-hour)")
            if start is not None and end is not None and start >= end:
                error("time_range", "INVALID_RANGE", "End time must be after start time")

        # --- Dates ---
        if task.get("start_date") and task.get("end_date"):
            start_date = TimeCalculatorService.parse_date(task["start_date"])
            end_date = TimeCalculatorService.parse_date(task["end_date"])
            if start_date is None:
                error("start_date", "INVALID_FORMAT", "Invalid start date format")
            if end_date is None:
                error("end_date", "INVALID_FORMAT", "Invalid end date format")
            if start_date and end_date and start_date > end_date:
                error("date_range", "INVALID_RANGE", "End date must be after start date")

        # --- Durees / Durations ---
        estimated = task.get("estimated_duration")
        if estimated is not None:
            if not _is_number(estimated) or estimated <= 0:
                error("estimated_duration", "INVALID_VALUE", "Estimated duration must be a positive number")
            elif estimated > MAX_DURATION_MINUTES:
                warning("estimated_duration", "UNUSUAL_VALUE", "Task duration exceeds 24 hours. Is this correct?")

        actual = task.get("actual_duration")
        if actual is not None and (not _is_number(actual) or actual < 0):
            error("actual_duration", "INVALID_VALUE", "Actual duration must be a non-negative number")

        # --- Avancement / Completion ---
        completion = task.get("completion_percentage")
        if completion is not None:
            if not _is_number(completion) or not 0 <= completion <= 100:
                error("completion_percentage", "INVALID_RANGE", "Completion percentage must be between 0 and 100")
            elif status == "Completed" and completion < 100:
                warning("completion_percentage", "INCONSISTENT_STATE",
                        "Task is marked as completed but completion percentage is less than 100%")
            elif status == "Pending" and completion > 0:
                warning("completion_percentage", "INCONSISTENT_STATE",
                        "Task is pending but has completion progress")

        # --- Dependances / Dependencies ---
        dependencies = task.get("dependencies") or []
        if dependencies:
            if not isinstance(dependencies, list):
                error("dependencies", "INVALID_TYPE", "Dependencies must be an array of task IDs")
            else:
                if existing_tasks is not None:
                    known = {_field(t, "id") for t in existing_tasks}
                    invalid = [d for d in dependencies if d not in known]
                    if invalid:
                        error("dependencies", "INVALID_REFERENCE",
                              f"Invalid dependency task IDs: {', '.join(invalid)}")
                if task.get("id") and task["id"] in dependencies:
                    error("dependencies", "CIRCULAR_DEPENDENCY", "Task cannot depend on itself")

        # --- Suggestions ---
        if priority == "High" and _is_number(estimated) and estimated > LONG_HIGH_PRIORITY_MINUTES:
            suggest("task_structure", "CONSIDER_BREAKING_DOWN",
                    "High priority tasks over 8 hours might benefit from being broken into smaller tasks")
        description = (task.get("description") or "").lower()
        if status == "Blocked" and not task.get("blocked_by") and "blocked" not in description:
            suggest("blocked_reason", "MISSING_CONTEXT",
                    "Consider adding block reason in description or blocked_by field")

        return result

    @staticmethod
    def integrity_checks(tasks: list[Any], vehicles: list[Any], team_members: list[Any]) -> IntegrityReport:
        """
        Quatre controles : references vehicule, references assigne, ids dupliques, plages horaires.
        Four checks: vehicle refs, assignee refs, duplicate ids, time ranges.
        """
        report = IntegrityReport()
        if not tasks and not vehicles and not team_members:
            report.passed = 1
            return report

        vehicle_ids = {_field(v, "id") for v in vehicles}
        bad_vehicles = [t for t in tasks if as_list(_field(t, "vehicle_id"))
                        and as_list(_field(t, "vehicle_id"))[0] not in vehicle_ids]
        report.check(not bad_vehicles, f"{len(bad_vehicles)} tasks have invalid vehicle references")

        # Taches partagees (pause, trajet) : assigne collectif / Shared tasks carry a collective assignee
        member_names = {_field(m, "name") for m in team_members}
        bad_assignees = [t for t in tasks if as_list(_field(t, "vehicle_id"))
                         and as_list(_field(t, "assigned_to"))
                         and as_list(_field(t, "assigned_to"))[0] not in member_names]
        report.check(not bad_assignees, f"{len(bad_assignees)} tasks have invalid assignee references")

        task_ids = [_field(t, "id") for t in tasks]
        duplicates = len(task_ids) - len(set(task_ids))
        report.check(duplicates == 0, f"{duplicates} duplicate task IDs found")

        bad_ranges = []
        for task in tasks:
            start = TimeCalculatorService.parse_hhmm(_field(task, "start_time"))
            end = TimeCalculatorService.parse_hhmm(_field(task, "end_time"))
            if start is not None and end is not None and start >= end:
                bad_ranges.append(task)
        report.check(not bad_ranges, f"{len(bad_ranges)} tasks have invalid time ranges")
        return report
