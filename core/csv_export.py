# core/csv_export.py

import csv
import io
from datetime import date
from typing import List, Optional

from fastapi.responses import Response


def to_csv(rows: List[dict], columns: Optional[List[str]] = None) -> str:
    """
    Render rows as CSV. Header comes from `columns` or the first row.
    Values containing commas, quotes or newlines are quoted; quotes doubled.
    """
    if not rows and not columns:
        return ""

    header = columns or list(rows[0].keys())

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if row.get(col) is None else row.get(col) for col in header])

    return buffer.getvalue()


def export_filename(name: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{name}-{today.isoformat()}.csv"


def csv_response(rows: List[dict], name: str, columns: Optional[List[str]] = None) -> Response:
    return Response(
        content=to_csv(rows, columns),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(name)}"'},
    )
