"""
Detection des conflits de planning / Schedule conflict detection.
Comparaison par paires des taches : meme vehicule ou meme assigne sur des
plages horaires qui se chevauchent, et dependances manquantes ou trop tardives.
Pairwise task comparison: shared vehicle or assignee on overlapping time ranges,
plus missing or late dependencies.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from install_tracker.models.task import as_list
from install_tracker.services.time_calculator import TimeCalculatorService

logger = logging.getLogger(__name__)


@dataclass
class Conflict:
    """Conflit detecte / Detected conflict."""
    id: str
    type: str                       # time | resource | dependency
    severity: str                   # medium | high | critical
    description: str
    conflicting_tasks: list[str]
    auto_resolvable: bool
    suggested_resolution: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ConflictReport:
    conflicts: list[Conflict] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "conflicts": [c.to_dict() for c in self.conflicts],
            "suggestions": self.suggestions,
        }


def _field(task: Any, name: str) -> Any:
    if isinstance(task, dict):
        return task.get(name)
    return getattr(task, name, None)


def _minutes(value: str | None) -> int | None:
    """HH:MM ou HH:MM:SS en minutes / HH:MM or HH:MM:SS to minutes."""
    if value and len(value) == 8 and value[5] == ":":
        value = value[:5]
    return TimeCalculatorService.parse_hhmm(value)


def _date_span(task: Any) -> tuple[str, str] | None:
    start = _field(task, "start_date")
    if not start:
        return None
    return start, _field(task, "end_date") or start


def _starts_before_end(task: Any, dependency: Any) -> bool:
    """
    La tache demarre avant la fin de sa dependance / Task starts before its dependency ends.
    Sans horaires des deux cotes, la comparaison se fait au jour pres (meme jour = conflit).
    Without times on both sides the check is per day (same day counts as a conflict).
    """
    start_date, dep_end = _field(task, "start_date"), _field(dependency, "end_date")
    start, end = _minutes(_field(task, "start_time")), _minutes(_field(dependency, "end_time"))
    if start is None or end is None:
        return start_date <= dep_end
    return (start_date, start) < (dep_end, end)


class ConflictDetectorService:
    """Conflits entre taches / Conflicts between tasks."""

    @staticmethod
    def time_overlap(task1: Any, task2: Any) -> bool:
        """
        Chevauchement [debut, fin) / Half-open [start, end) overlap: start1 < end2 and start2 < end1.
        Si les deux taches sont datees, les plages de dates doivent aussi se croiser.
        When both tasks carry dates, their date spans must intersect too.
        """
        start1, end1 = _minutes(_field(task1, "start_time")), _minutes(_field(task1, "end_time"))
        start2, end2 = _minutes(_field(task2, "start_time")), _minutes(_field(task2, "end_time"))
        if None in (start1, end1, start2, end2):
            return False
        span1, span2 = _date_span(task1), _date_span(task2)
        if span1 and span2 and not (span1[0] <= span2[1] and span2[0] <= span1[1]):
            return False
        return start1 < end2 and start2 < end1

    @staticmethod
    def detect(tasks: list[Any]) -> ConflictReport:
        """
        Conflits d'une liste de taches / Conflicts in a task list.
        Une paire qui se chevauche donne un seul conflit : vehicule commun d'abord
        (type time), sinon assigne commun (type resource).
        An overlapping pair yields a single conflict: shared vehicle first (time type),
        otherwise shared assignee (resource type).
        """
        report = ConflictReport()

        for i in range(len(tasks)):
            for j in range(i + 1, len(tasks)):
                task1, task2 = tasks[i], tasks[j]
                shared_vehicles = [v for v in as_list(_field(task1, "vehicle_id"))
                                   if v in as_list(_field(task2, "vehicle_id"))]
                shared_assignees = [a for a in as_list(_field(task1, "assigned_to"))
                                    if a in as_list(_field(task2, "assigned_to"))]
                if not (shared_vehicles or shared_assignees):
                    continue
                if not ConflictDetectorService.time_overlap(task1, task2):
                    continue

                id1, id2 = _field(task1, "id"), _field(task2, "id")
                name1, name2 = _field(task1, "name"), _field(task2, "name")
                if shared_vehicles:
                    report.conflicts.append(Conflict(
                        id=f"time-conflict-{i}-{j}",
                        type="time",
                        severity="high",
                        description=(
                            f'Time conflict between "{name1}" and "{name2}" on vehicle {shared_vehicles[0]}'
                        ),
                        conflicting_tasks=[id1, id2],
                        auto_resolvable=True,
                        suggested_resolution={
                            "action": "reschedule",
                            "details": {"task_to_adjust": id2, "new_start_time": _field(task1, "end_time")},
                        },
                    ))
                else:
                    report.conflicts.append(Conflict(
                        id=f"resource-conflict-{i}-{j}",
                        type="resource",
                        severity="medium",
                        description=f'Resource conflict: "{shared_assignees[0]}" assigned to overlapping tasks',
                        conflicting_tasks=[id1, id2],
                        auto_resolvable=True,
                        suggested_resolution={
                            "action": "reassign",
                            "details": {"task_to_reassign": id2},
                        },
                    ))

        tasks_by_id = {_field(t, "id"): t for t in tasks}
        for task in tasks:
            task_id = _field(task, "id")
            for dep_id in _field(task, "dependencies") or []:
                dependency = tasks_by_id.get(dep_id)
                if dependency is None:
                    report.conflicts.append(Conflict(
                        id=f"missing-dependency-{task_id}-{dep_id}",
                        type="dependency",
                        severity="critical",
                        description=f'Task "{_field(task, "name")}" depends on missing task {dep_id}',
                        conflicting_tasks=[task_id],
                        auto_resolvable=False,
                    ))
                    continue
                start_date = _field(task, "start_date")
                dep_end = _field(dependency, "end_date")
                if start_date and dep_end and _starts_before_end(task, dependency):
                    report.conflicts.append(Conflict(
                        id=f"dependency-timing-{task_id}-{dep_id}",
                        type="dependency",
                        severity="high",
                        description=(
                            f'Task "{_field(task, "name")}" scheduled before dependency '
                            f'"{_field(dependency, "name")}" completes'
                        ),
                        conflicting_tasks=[task_id, dep_id],
                        auto_resolvable=True,
                        suggested_resolution={
                            "action": "reschedule",
                            "details": {"task_to_adjust": task_id, "new_start_date": dep_end},
                        },
                    ))

        if not report.conflicts:
            report.suggestions.append("No conflicts detected. Your schedule is optimized!")
        else:
            auto_resolvable = sum(1 for c in report.conflicts if c.auto_resolvable)
            if auto_resolvable:
                report.suggestions.append(f"{auto_resolvable} conflict(s) can be automatically resolved")
            critical = sum(1 for c in report.conflicts if c.severity == "critical")
            if critical:
                report.suggestions.append(f"{critical} critical conflict(s) require manual attention")
            logger.info("Detected %d conflicts over %d tasks", len(report.conflicts), len(tasks))
        return report
