import io
from datetime import date
from typing import Any, Dict, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

EXPORT_COLUMNS = [
    ("Team ID", "team_id", 28),
    ("Team Name", "team_name", 30),
    ("Player 1 Name", "player1_name", 22),
    ("Player 2 Name", "player2_name", 22),
    ("Phone Number", "phone_no", 16),
    ("Password", "password", 12),
    ("Round 1 Score", "r1_score", 14),
    ("Round 2 Score", "r2_score", 14),
    ("Created At", "created_at", 26),
]

HEADER_FILL = PatternFill(start_color="FFFF6B00", end_color="FFFF6B00", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFFFF")
ZEBRA_FILL = PatternFill(start_color="FFF5F5F5", end_color="FFF5F5F5", fill_type="solid")


def export_filename(today: date = None) -> str:
    today = today or date.today()
    return f"teams_{today.isoformat()}.xlsx"


def build_teams_workbook(teams: List[Dict[str, Any]]) -> bytes:
    """Render teams as a single-sheet workbook: orange header, frozen first row, striped rows"""
    wb = Workbook()
    ws = wb.active
    ws.title = "Teams"
    ws.append([header for header, _, _ in EXPORT_COLUMNS])

    for index, (_, _, width) in enumerate(EXPORT_COLUMNS, start=1):
        cell = ws.cell(row=1, column=index)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal="center", vertical="center")
        ws.column_dimensions[cell.column_letter].width = width

    for team in teams:
        ws.append([
            team.get(key) if team.get(key) is not None else (0 if key in ("r1_score", "r2_score") else "")
            for _, key, _ in EXPORT_COLUMNS
        ])
        if ws.max_row % 2 == 0:
            for cell in ws[ws.max_row]:
                cell.fill = ZEBRA_FILL

    ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
