from fastapi import FastAPI, BackgroundTasks, Body, HTTPException
from fastapi.responses import Response
from pathlib import Path
import logging
import uuid
from datetime import datetime

from .db import Base, engine, get_session, ensure_database_exists
from . import models
from .report import generate_report
from .schemas import JobStatus, ReportJobCreated, ReportJobStatus


logger = logging.getLogger(__name__)

app = FastAPI(title="Encounter Report Jobs API")


# Create DB tables on startup
@app.on_event("startup")
def on_startup() -> None:
    ensure_database_exists()
    Base.metadata.create_all(bind=engine)


@app.post("/report-jobs", status_code=201, response_model=ReportJobCreated)
def submit_report_job(background_tasks: BackgroundTasks, encounter_ids: list[str] = Body(...)) -> ReportJobCreated:
    if not encounter_ids:
        raise HTTPException(status_code=422, detail="at least one encounter id is required")

    with get_session() as session:
        job_id = str(uuid.uuid4())
        job = models.ReportJob(
            id=job_id,
            status=JobStatus.PENDING.value,
            encounter_ids=list(dict.fromkeys(encounter_ids)),
            created_at=datetime.utcnow(),
        )
        session.add(job)
        session.commit()

        background_tasks.add_task(_run_generation_task, job_id)

    return ReportJobCreated(id=job_id)


def _run_generation_task(job_id: str) -> None:
    with get_session() as session:
        try:
            generate_report(session, job_id)
        except Exception as exc:  # noqa: BLE001 - top-level task guard
            logger.exception(f"Report job {job_id} failed")
            session.rollback()
            job: models.ReportJob | None = session.get(models.ReportJob, job_id)
            if job is not None:
                job.status = JobStatus.FAILED.value
                job.error_message = f"{type(exc).__name__}: {exc}"
                session.commit()


@app.get("/report-jobs/status/{job_id}", response_model=ReportJobStatus, response_model_exclude_none=True)
def get_report_job_status(job_id: str) -> ReportJobStatus:
    with get_session() as session:
        job: models.ReportJob | None = session.get(models.ReportJob, job_id)
        if job is None:
            raise HTTPException(status_code=404, detail="report job not found")
        return ReportJobStatus(status=JobStatus(job.status), error=job.error_message)


@app.get("/report-jobs/download/{job_id}")
def download_report(job_id: str) -> Response:
    with get_session() as session:
        job: models.ReportJob | None = session.get(models.ReportJob, job_id)
        if job is None:
            raise HTTPException(status_code=404, detail="report job not found")

        if job.status != JobStatus.COMPLETED.value:
            raise HTTPException(status_code=409, detail=f"report job is {job.status}")

        path = Path(job.file_path or "")
        if not job.file_path or not path.exists():
            raise HTTPException(status_code=500, detail="Report file missing")

        headers = {"Content-Disposition": f'attachment; filename="{path.name}"'}
        return Response(content=path.read_bytes(), media_type="application/pdf", headers=headers)
