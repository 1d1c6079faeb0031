from __future__ import annotations

import os
from pathlib import Path


REPORT_API_BASE = os.getenv("REPORT_API_BASE", "http://127.0.0.1:8000")
REPORT_JOBS_PATH = os.getenv("REPORT_JOBS_PATH", "/report-jobs")
REPORT_HTTP_TIMEOUT = float(os.getenv("REPORT_HTTP_TIMEOUT", "30"))

# Poll budget: worst-case wait is REPORT_POLL_INTERVAL * REPORT_MAX_ATTEMPTS seconds
REPORT_POLL_INTERVAL = float(os.getenv("REPORT_POLL_INTERVAL", "1.0"))
REPORT_MAX_ATTEMPTS = int(os.getenv("REPORT_MAX_ATTEMPTS", "60"))

REPORT_OUTPUT_DIR = Path(os.getenv("REPORT_OUTPUT_DIR", "downloads"))
DEFAULT_ARTIFACT_NAME = "EncountersReport.pdf"

# Development backend
REPORT_STORAGE_DIR = Path(os.getenv("REPORT_STORAGE_DIR", "reports"))

POSTGRES_USER = os.getenv("PGUSER", "postgres")
POSTGRES_PASSWORD = os.getenv("PGPASSWORD", "postgres")
POSTGRES_HOST = os.getenv("PGHOST", "localhost")
POSTGRES_PORT = int(os.getenv("PGPORT", "5432"))
POSTGRES_DB = os.getenv("PGDATABASE", "encounter_reports")

DATABASE_URL = os.getenv("REPORT_DATABASE_URL") or (
    f"postgresql+psycopg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}"
)
