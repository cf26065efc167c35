"""
Service d'estimation de fin de projet / Project completion estimation service.
Cinq heuristiques lineaires et une recommandation (mediane).
Five linear heuristics and a recommendation (their median).
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from install_tracker.services.time_calculator import TimeCalculatorService

# Hypotheses par defaut / Default assumptions
DAYS_PER_VEHICLE = 0.8
PARALLEL_INSTALLATIONS = 3
SETUP_DAYS = 2
BUFFER_DAYS = 3
TASKS_PER_DAY = 6
DEFAULT_COMPLETION_RATE = 70
DEFAULT_QUALITY_SCORE = 80
CONSERVATIVE_BUFFER = 1.2
OPTIMISTIC_REDUCTION = 0.85


@dataclass
class BreakdownPhase:
    phase: str
    duration: float
    description: str


@dataclass
class EstimationResult:
    """Resultat d'une estimation / Estimation result."""
    estimated_end_date: str         # YYYY-MM-DD
    total_days: int
    method: str
    confidence: str                 # low | medium | high
    details: str
    breakdown: list[BreakdownPhase] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _end_date(start_date: str | date, days: float) -> str:
    start = TimeCalculatorService.parse_date(start_date)
    if start is None:
        raise ValueError(f"Invalid start date: {start_date!r}")
    return (datetime.combine(start, datetime.min.time()) + timedelta(days=days)).date().isoformat()


class EstimationService:
    """Estimations de la date de fin / Completion date estimators."""

    @staticmethod
    def by_vehicle_count(start_date: str | date, vehicles: list[Any]) -> EstimationResult:
        """
        Par nombre de vehicules / By vehicle count.
        jours = preparation + ceil(vehicules / paralleles) * jours_par_vehicule + marge
        days = setup + ceil(vehicles / parallel) * days_per_vehicle + buffer
        """
        total_vehicles = len(vehicles)
        installation_days = math.ceil(total_vehicles / PARALLEL_INSTALLATIONS) * DAYS_PER_VEHICLE
        work_days = SETUP_DAYS + installation_days + BUFFER_DAYS
        return EstimationResult(
            estimated_end_date=_end_date(start_date, work_days),
            total_days=math.ceil(work_days),
            method="Vehicle Count",
            confidence="medium" if total_vehicles > 0 else "low",
            details=f"Based on {total_vehicles} vehicles with {PARALLEL_INSTALLATIONS} parallel installations",
            breakdown=[
                BreakdownPhase("Setup & Planning", SETUP_DAYS, "Initial project setup and preparation"),
                BreakdownPhase("Vehicle Installations", round(installation_days, 2),
                               f"{total_vehicles} vehicles, {PARALLEL_INSTALLATIONS} parallel installations"),
                BreakdownPhase("Testing & Buffer", BUFFER_DAYS, "Final testing and contingency time"),
            ],
        )

    @staticmethod
    def task_complexity(task: Any) -> float:
        """Score de complexite d'une tache (min 0.5) / Task complexity score (min 0.5)."""
        complexity = 1.0
        priority = getattr(_field(task, "priority"), "value", _field(task, "priority"))
        status = getattr(_field(task, "status"), "value", _field(task, "status"))
        if priority == "High":
            complexity += 0.5
        elif priority == "Low":
            complexity -= 0.2
        estimated = _field(task, "estimated_duration")
        if estimated:
            complexity += min(estimated / 60, 2)
        if status == "Blocked":
            complexity += 0.3
        return max(complexity, 0.5)

    @staticmethod
    def by_task_count(start_date: str | date, tasks: list[Any]) -> EstimationResult:
        """Par complexite des taches / By task complexity."""
        total_complexity = sum(EstimationService.task_complexity(t) for t in tasks)
        work_days = math.ceil(total_complexity / TASKS_PER_DAY)
        return EstimationResult(
            estimated_end_date=_end_date(start_date, work_days),
            total_days=work_days,
            method="Task Complexity",
            confidence="high" if len(tasks) > 5 else "medium",
            details=f"Based on {len(tasks)} tasks with complexity analysis",
            breakdown=[
                BreakdownPhase("Task Execution", work_days,
                               f"{len(tasks)} tasks with total complexity score of {total_complexity:.1f}"),
            ],
        )

    @staticmethod
    def by_team_performance(
        start_date: str | date,
        vehicles: list[Any],
        team_members: list[Any],
    ) -> EstimationResult:
        """
        Estimation vehicules ajustee par l'equipe / Vehicle estimate adjusted for the team.
        multiplicateur = (100 / max(taux, 50)) * (100 / max(qualite, 50))
        """
        if team_members:
            completion = sum((_field(m, "completion_rate") or DEFAULT_COMPLETION_RATE) for m in team_members)
            quality = sum((_field(m, "quality_score") or DEFAULT_QUALITY_SCORE) for m in team_members)
            avg_completion = completion / len(team_members)
            avg_quality = quality / len(team_members)
        else:
            avg_completion = DEFAULT_COMPLETION_RATE
            avg_quality = DEFAULT_QUALITY_SCORE

        base = EstimationService.by_vehicle_count(start_date, vehicles)
        multiplier = (100 / max(avg_completion, 50)) * (100 / max(avg_quality, 50))
        adjusted_days = math.ceil(base.total_days * multiplier)
        return EstimationResult(
            estimated_end_date=_end_date(start_date, adjusted_days),
            total_days=adjusted_days,
            method="Team Performance",
            confidence="high" if len(team_members) > 2 else "medium",
            details=(
                f"Adjusted for team of {len(team_members)} members "
                f"with {avg_completion:.1f}% avg completion rate"
            ),
            breakdown=[
                BreakdownPhase(
                    "Team-Adjusted Estimation", adjusted_days,
                    f"Base: {base.total_days} days, adjusted for team efficiency "
                    f"({avg_completion:.1f}% completion, {avg_quality:.1f}% quality)",
                ),
            ],
        )

    @staticmethod
    def _base_estimations(start_date, vehicles, tasks, team_members) -> list[EstimationResult]:
        return [
            EstimationService.by_vehicle_count(start_date, vehicles),
            EstimationService.by_task_count(start_date, tasks),
            EstimationService.by_team_performance(start_date, vehicles, team_members),
        ]

    @staticmethod
    def conservative(start_date, vehicles, tasks, team_members) -> EstimationResult:
        """Plus longue methode + 20% / Longest method plus 20%."""
        estimations = EstimationService._base_estimations(start_date, vehicles, tasks, team_members)
        longest = max(estimations, key=lambda e: e.total_days)
        days = math.ceil(longest.total_days * CONSERVATIVE_BUFFER)
        return EstimationResult(
            estimated_end_date=_end_date(start_date, days),
            total_days=days,
            method="Conservative",
            confidence="high",
            details=f"Conservative estimate with 20% buffer based on {longest.method}",
            breakdown=[
                BreakdownPhase("Conservative Estimate", days,
                               f"Based on longest method ({longest.method}: {longest.total_days} days) "
                               f"with 20% buffer"),
            ],
        )

    @staticmethod
    def optimistic(start_date, vehicles, tasks, team_members) -> EstimationResult:
        """Plus courte methode - 15% / Shortest method minus 15%."""
        estimations = EstimationService._base_estimations(start_date, vehicles, tasks, team_members)
        shortest = min(estimations, key=lambda e: e.total_days)
        days = math.ceil(shortest.total_days * OPTIMISTIC_REDUCTION)
        return EstimationResult(
            estimated_end_date=_end_date(start_date, days),
            total_days=days,
            method="Optimistic",
            confidence="medium",
            details=f"Optimistic estimate assuming perfect conditions based on {shortest.method}",
            breakdown=[
                BreakdownPhase("Optimistic Estimate", days,
                               f"Based on shortest method ({shortest.method}: {shortest.total_days} days) "
                               f"with 15% reduction for optimal conditions"),
            ],
        )

    @staticmethod
    def all(start_date, vehicles, tasks, team_members) -> list[EstimationResult]:
        """Les cinq methodes, dans l'ordre / All five methods, in order."""
        return [
            *EstimationService._base_estimations(start_date, vehicles, tasks, team_members),
            EstimationService.conservative(start_date, vehicles, tasks, team_members),
            EstimationService.optimistic(start_date, vehicles, tasks, team_members),
        ]

    @staticmethod
    def recommended(start_date, vehicles, tasks, team_members) -> EstimationResult:
        """Mediane des cinq methodes / Median of the five methods."""
        estimations = EstimationService.all(start_date, vehicles, tasks, team_members)
        median = sorted(estimations, key=lambda e: e.total_days)[len(estimations) // 2]
        return EstimationResult(
            estimated_end_date=median.estimated_end_date,
            total_days=median.total_days,
            method="Recommended (Median)",
            confidence="high",
            details=f"Median of {len(estimations)} estimation methods ({median.details})",
            breakdown=list(median.breakdown),
        )
