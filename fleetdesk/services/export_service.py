"""
Service d'export Excel / Excel export service.
Génère un fichier XLSX à partir de listes de dictionnaires.
"""

import io
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

STATISTICS_FIELDS = [
    "name",
    "total_km",
    "monthly_km",
    "average_km",
    "total_trips",
    "monthly_trips",
    "complaint_count",
    "rating",
    "rating_up",
    "rating_down",
    "vehicles",
]


class ExportService:
    """Export de données vers XLSX / Data export to XLSX."""

    @staticmethod
    def statistics_rows(drivers: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Aplatir les statistiques chauffeurs / Flatten driver statistics into rows."""
        rows = []
        for driver in drivers:
            stats = driver["stats"]
            row = {"name": driver["name"], **{k: v for k, v in stats.items() if k != "vehicles"}}
            row["vehicles"] = ", ".join(
                f"{v['license_plate']} ({v['trips']})" for v in stats["vehicles"]
            )
            rows.append(row)
        return rows

    @staticmethod
    def to_xlsx(rows: list[dict], fields: list[str], sheet_name: str = "Data") -> bytes:
        """Générer un fichier Excel / Generate an Excel file."""
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name

        # En-têtes / Headers
        for col_idx, field in enumerate(fields, 1):
            cell = ws.cell(row=1, column=col_idx, value=field)
            cell.font = Font(bold=True)

        # Données / Data rows
        for row_idx, row in enumerate(rows, 2):
            for col_idx, field in enumerate(fields, 1):
                ws.cell(row=row_idx, column=col_idx, value=row.get(field))

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()
