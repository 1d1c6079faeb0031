from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from . import config
from .models import ReportJob
from .schemas import JobStatus


def render_encounters_pdf(out_path: Path, encounter_ids: List[str], generated_at: datetime) -> None:
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(
        str(out_path),
        pagesize=letter,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        title="Encounters Report",
    )

    rows = [["#", "Encounter"]] + [[str(i), eid] for i, eid in enumerate(encounter_ids, start=1)]
    table = Table(rows, colWidths=[0.5 * inch, 6.0 * inch], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )

    story = [
        Paragraph("Encounters Report", styles["Title"]),
        Paragraph(f"Generated {generated_at:%Y-%m-%d %H:%M} UTC", styles["Normal"]),
        Spacer(1, 0.25 * inch),
        table,
    ]
    doc.build(story)


def generate_report(session: Session, job_id: str) -> None:
    job: ReportJob | None = session.get(ReportJob, job_id)
    if job is None:
        raise LookupError(f"report job {job_id} not found")

    generated_at = datetime.utcnow()
    out_dir = Path(config.REPORT_STORAGE_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"EncountersReport_{generated_at:%Y%m%d}_{job_id[:8]}.pdf"

    render_encounters_pdf(out_path, list(job.encounter_ids), generated_at)

    job.status = JobStatus.COMPLETED.value
    job.completed_at = datetime.utcnow()
    job.file_path = str(out_path)
    job.error_message = None
    session.commit()
