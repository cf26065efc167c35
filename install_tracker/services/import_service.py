"""
Service d'import CSV/Excel / CSV/Excel import service.
Parse les fichiers et retourne des listes de dictionnaires.
"""

import csv
import io
import json
import re
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from openpyxl import load_workbook

_NA_VALUES = {"#n/a", "#na", "n/a", "na", "-", "null", "none", "nan"}

# Champs entiers / Integer fields
INT_FIELDS = {
    "day", "gps_required", "fuel_sensors", "fuel_tanks", "vehicles", "gps_devices",
    "estimated_duration", "actual_duration", "duration_days", "completion_percentage",
    "average_task_time",
}
FLOAT_FIELDS = {"completion_rate", "quality_score"}
BOOL_FIELDS = {"is_milestone"}
# Listes ou objets JSON / JSON lists or objects
JSON_FIELDS = {"tags", "dependencies", "blocked_by", "specializations", "recurrence_pattern"}
# Valeur simple ou liste / Single value or list
MULTI_FIELDS = {"vehicle_id", "assigned_to"}
# Horaires HH:MM et dates ISO / HH:MM times and ISO dates
TIME_FIELDS = {"start_time", "end_time"}
DATE_FIELDS = {"start_date", "end_date"}

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(:\d{2}(\.\d+)?)?$")
_ISO_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


class ImportService:
    """Import de données depuis fichiers / Data import from files."""

    @staticmethod
    def parse_csv(content: bytes) -> list[dict[str, Any]]:
        """Parser un fichier CSV / Parse a CSV file."""
        text = content.decode("utf-8-sig")  # BOM-safe
        reader = csv.DictReader(io.StringIO(text), delimiter=";")
        # Essayer aussi avec la virgule / Try comma delimiter too
        rows = list(reader)
        if not rows or len(rows[0]) <= 1:
            reader = csv.DictReader(io.StringIO(text), delimiter=",")
            rows = list(reader)
        return rows

    @staticmethod
    def parse_excel(content: bytes) -> list[dict[str, Any]]:
        """Parser un fichier Excel / Parse an Excel file."""
        wb = load_workbook(filename=io.BytesIO(content), read_only=True)
        ws = wb.active
        if ws is None:
            wb.close()
            return []

        rows_iter = ws.iter_rows(values_only=True)
        headers = next(rows_iter, None)
        if not headers:
            wb.close()
            return []

        # Nettoyer les en-têtes / Clean headers
        clean_headers = [
            str(h).strip().lower().replace(" ", "_") if h else f"col_{i}"
            for i, h in enumerate(headers)
        ]

        result = []
        for row in rows_iter:
            record = dict(zip(clean_headers, row))
            if any(v is not None for v in record.values()):
                result.append(record)

        wb.close()
        return result

    @staticmethod
    def parse_file(content: bytes, filename: str) -> list[dict[str, Any]]:
        """Parser un fichier selon son extension / Parse file based on extension."""
        ext = filename.rsplit(".", 1)[-1].lower()
        if ext == "csv":
            return ImportService.parse_csv(content)
        elif ext in ("xlsx", "xls"):
            return ImportService.parse_excel(content)
        raise ValueError(f"Unsupported file type: {ext}")

    @staticmethod
    def coerce_value(val: Any, field_name: str) -> Any:
        """Convertir les valeurs selon le nom du champ / Coerce values based on field name."""
        if val is None:
            return None
        # Types natifs openpyxl / Native openpyxl types
        if isinstance(val, datetime):
            return val.strftime("%H:%M" if field_name in TIME_FIELDS else "%Y-%m-%d")
        if isinstance(val, date):
            return val.isoformat()
        if isinstance(val, time):
            return val.strftime("%H:%M")

        s = str(val).strip()
        if s == "" or s.lower() in _NA_VALUES:
            return None

        if field_name in TIME_FIELDS:
            # "08:30:00" -> "08:30"
            match = _CLOCK_RE.match(s)
            if not match or int(match.group(1)) > 23 or int(match.group(2)) > 59:
                raise ValueError(f"invalid {field_name} {s!r}, expected HH:MM")
            return f"{int(match.group(1)):02d}:{match.group(2)}"
        if field_name in DATE_FIELDS:
            match = _ISO_DATE_PREFIX_RE.match(s)
            if not match:
                raise ValueError(f"invalid {field_name} {s!r}, expected YYYY-MM-DD")
            return match.group(0)
        if field_name in BOOL_FIELDS:
            return s.lower() in ("true", "1", "yes", "oui", "vrai")
        if field_name in INT_FIELDS:
            try:
                return int(float(s))
            except ValueError:
                return None
        if field_name in FLOAT_FIELDS:
            try:
                return float(s.replace(",", "."))
            except ValueError:
                return None
        if field_name in JSON_FIELDS or field_name in MULTI_FIELDS:
            if s[0] in "[{":
                try:
                    return json.loads(s)
                except ValueError:
                    return None
            if field_name in MULTI_FIELDS:
                parts = [p.strip() for p in s.split(",") if p.strip()]
                return parts[0] if len(parts) == 1 else parts
            return [p.strip() for p in s.split(",") if p.strip()]
        return s

    @staticmethod
    def export_value(val: Any, field_name: str) -> Any:
        """
        Valeur de cellule relue telle quelle par coerce_value / Cell value that coerce_value reads back.
        Enums par valeur, booleens en texte, listes multiples separees par des virgules,
        champs JSON serialises.
        Enums by value, booleans as text, multi-value lists comma separated, JSON fields dumped.
        """
        if val is None:
            return None
        if isinstance(val, Enum):
            return val.value
        if isinstance(val, bool):
            return "true" if val else "false"
        if field_name in MULTI_FIELDS and isinstance(val, list):
            return ", ".join(str(v) for v in val)
        if isinstance(val, (list, dict)):
            return json.dumps(val, ensure_ascii=False)
        return val

    @staticmethod
    def normalize_row(row: dict[str, Any], entity_type: str) -> dict[str, Any]:
        """Garder les champs connus, convertis / Keep known fields, coerced."""
        fields = set(ImportService.ENTITY_FIELDS.get(entity_type, []))
        clean: dict[str, Any] = {}
        for key, val in row.items():
            if key is None:
                continue
            ck = str(key).strip().lower().replace(" ", "_")
            if ck in fields:
                clean[ck] = ImportService.coerce_value(val, ck)
        return clean

    # Mapping des champs attendus par entité / Expected field mapping per entity
    ENTITY_FIELDS: dict[str, list[str]] = {
        "vehicles": ["id", "type", "location", "day", "time_slot", "status",
                     "gps_required", "fuel_sensors", "fuel_tanks"],
        "tasks": ["id", "name", "description", "vehicle_id", "assigned_to", "status", "priority",
                  "estimated_duration", "actual_duration", "duration_days", "start_time", "end_time",
                  "start_date", "end_date", "category", "notes", "tags", "dependencies", "blocked_by",
                  "completion_percentage", "is_milestone", "parent_task_id"],
        "locations": ["name", "vehicles", "gps_devices", "fuel_sensors", "address",
                      "contact_person", "contact_phone", "installation_days"],
        "team-members": ["id", "name", "role", "specializations", "completion_rate",
                         "average_task_time", "quality_score", "email", "phone"],
    }

    # Cle primaire par entité / Primary key per entity
    PRIMARY_KEYS: dict[str, str] = {
        "vehicles": "id",
        "tasks": "id",
        "locations": "name",
        "team-members": "id",
    }

    # Champs obligatoires par entité / Required fields per entity
    REQUIRED_FIELDS: dict[str, set[str]] = {
        "vehicles": {"id", "type", "location", "day", "time_slot"},
        "tasks": {"name"},
        "locations": {"name"},
        "team-members": {"id", "name", "role"},
    }
