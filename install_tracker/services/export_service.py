"""
Service d'export CSV/Excel / CSV/Excel export service.
Les fichiers produits se reimportent tels quels : memes colonnes et memes
conversions que l'import.
Exported files import back unchanged: same columns and same conversions as the import.
"""

import csv
import io
from dataclasses import dataclass
from typing import Any, Iterable

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from install_tracker.services.import_service import ImportService

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
_MAX_COLUMN_WIDTH = 50


@dataclass
class ExportFile:
    content: bytes
    media_type: str
    filename: str


class ExportService:
    """Export d'entites vers CSV/XLSX / Entity export to CSV/XLSX."""

    @staticmethod
    def get_fields(entity_type: str) -> list[str]:
        """Colonnes exportees = colonnes importees / Exported columns are the imported ones."""
        return ImportService.ENTITY_FIELDS.get(entity_type, [])

    @staticmethod
    def table(objects: Iterable[Any], entity_type: str) -> list[list[Any]]:
        """Lignes de cellules, en-tete compris / Cell rows, header included."""
        fields = ExportService.get_fields(entity_type)
        rows: list[list[Any]] = [list(fields)]
        for obj in objects:
            rows.append([ImportService.export_value(getattr(obj, f, None), f) for f in fields])
        return rows

    @staticmethod
    def to_csv(rows: list[list[Any]]) -> bytes:
        """CSV UTF-8 avec BOM, separateur ';' / UTF-8 CSV with BOM and ';' separator."""
        output = io.StringIO()
        output.write("\ufeff")
        writer = csv.writer(output, delimiter=";", lineterminator="\n")
        for row in rows:
            writer.writerow(["" if cell is None else cell for cell in row])
        return output.getvalue().encode("utf-8")

    @staticmethod
    def to_xlsx(rows: list[list[Any]], sheet_name: str) -> bytes:
        """Classeur a une feuille, en-tete gele / Single-sheet workbook with a frozen header."""
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name
        for row in rows:
            ws.append(row)

        ws.freeze_panes = "A2"
        for cell in ws[1]:
            cell.font = Font(bold=True)
        # Largeur selon le contenu le plus long / Width from the longest content
        for col_idx, column in enumerate(ws.iter_cols(values_only=True), 1):
            longest = max((len(str(v)) for v in column if v is not None), default=0)
            ws.column_dimensions[get_column_letter(col_idx)].width = min(longest + 2, _MAX_COLUMN_WIDTH)

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    @staticmethod
    def render(objects: Iterable[Any], entity_type: str, fmt: str) -> ExportFile:
        """Fichier d'export pour une entite / Export file for an entity."""
        rows = ExportService.table(objects, entity_type)
        if fmt == "csv":
            return ExportFile(ExportService.to_csv(rows), "text/csv; charset=utf-8", f"{entity_type}.csv")
        if fmt == "xlsx":
            sheet = entity_type.replace("-", " ").title()
            return ExportFile(ExportService.to_xlsx(rows, sheet), XLSX_MEDIA_TYPE, f"{entity_type}.xlsx")
        raise ValueError(f"Unsupported export format: {fmt}")
