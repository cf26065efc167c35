"""
Nettoyage des noms de taches / Task name cleanup.
Retire les identifiants vehicule du nom ("V001 GPS Installation" -> "GPS Installation"),
le lien etant deja porte par vehicle_id.
Strips vehicle ids from task names, the link already lives in vehicle_id.
"""

import re
from typing import Any

from install_tracker.models.task import as_list

_PREFIX_RE = re.compile(r"^V\d{3,4}\s+")
_SUFFIX_RE = re.compile(r"\s*-\s*V\d{3,4}$")
_ID_PREFIX_RE = re.compile(r"^V(\d{3,4})")
_ID_SUFFIX_RE = re.compile(r"V(\d{3,4})$")


def _field(task: Any, name: str) -> Any:
    if isinstance(task, dict):
        return task.get(name)
    return getattr(task, name, None)


class TaskNameService:
    """Noms de taches sans identifiant vehicule / Task names without vehicle ids."""

    @staticmethod
    def clean(task_name: str | None) -> str | None:
        """
        Retirer prefixe et suffixe vehicule / Strip vehicle id prefix and suffix.
        Idempotent : le resultat ne contient plus de motif a retirer. Un resultat vide
        rend le nom d'origine.
        Idempotent: the result has no pattern left to strip. An empty result gives back
        the original name.
        """
        if not task_name:
            return task_name
        current = task_name
        while True:
            cleaned = _SUFFIX_RE.sub("", _PREFIX_RE.sub("", current)).strip()
            if not cleaned:
                return task_name
            if cleaned == current:
                return cleaned
            current = cleaned

    @staticmethod
    def extract_vehicle_id(task_name: str | None) -> str | None:
        """Identifiant vehicule present dans le nom / Vehicle id found in the name."""
        if not task_name:
            return None
        match = _ID_PREFIX_RE.match(task_name) or _ID_SUFFIX_RE.search(task_name)
        return f"V{match.group(1)}" if match else None

    @staticmethod
    def has_vehicle_id(task_name: str | None) -> bool:
        if not task_name:
            return False
        return bool(_PREFIX_RE.search(task_name) or _SUFFIX_RE.search(task_name))

    @staticmethod
    def display_name(task_name: str, vehicle_id: Any = None) -> str:
        """Nom affiche : nettoye seulement si la tache a un vehicule / Cleaned only when a vehicle is set."""
        if as_list(vehicle_id):
            return TaskNameService.clean(task_name)
        return task_name

    @staticmethod
    def needing_cleanup(tasks: list[Any]) -> list[dict[str, Any]]:
        """
        Rapport de nettoyage / Cleanup report.
        has_conflict : le vehicule du nom differe de celui du champ vehicle_id.
        has_conflict: the vehicle in the name differs from the vehicle_id field.
        """
        report = []
        for task in tasks:
            name = _field(task, "name")
            from_name = TaskNameService.extract_vehicle_id(name)
            from_field = as_list(_field(task, "vehicle_id"))
            report.append({
                "id": _field(task, "id"),
                "name": name,
                "cleaned_name": TaskNameService.clean(name),
                "vehicle_id_from_name": from_name,
                "vehicle_id_from_field": from_field[0] if len(from_field) == 1 else (from_field or None),
                "needs_cleanup": TaskNameService.has_vehicle_id(name),
                "has_conflict": bool(from_name and from_field and from_name not in from_field),
            })
        return report
