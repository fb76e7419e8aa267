import logging
import os
import sys

import uvicorn
from fastapi import BackgroundTasks, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

import config as _config  # noqa: F401  loads .env and configures logging
from agent import run_scan
from errors import MaterializationError
from history import ScanHistoryDB, history_db_path, load_scan, load_scans, record_scan
from models import ScanReport, ScanRequest
from report import build_scan_record, compose_report
from validation import build_scan_request, validate_payload

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}

app = FastAPI(title="AuditLens")


def _json(body: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=CORS_HEADERS)


def save_history(request: ScanRequest, repo_name: str, report: ScanReport) -> None:
    """Background task: write the scan to history without touching the response."""
    record_scan(build_scan_record(report, request, repo_name))


@app.options("/audit-code")
def audit_code_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@app.post("/audit-code")
async def audit_code(request: Request, background_tasks: BackgroundTasks):
    """
    Audit a GitHub repository or a code snippet.

    Body: {"type": "repo" | "snippet", "content": "<url or code>"}
    """
    try:
        payload = await request.json()
    except ValueError:
        return _json({"error": "Invalid JSON body"}, 400)

    validation_error = validate_payload(payload)
    if validation_error:
        logger.warning("Rejected scan request: %s", validation_error)
        return _json({"error": validation_error}, 400)

    scan_request = build_scan_request(payload)

    try:
        outcome = await run_in_threadpool(run_scan, scan_request)
    except MaterializationError as e:
        return _json({"error": "Failed to fetch repository", "details": str(e)}, 422)
    except Exception as e:
        logger.exception("Function error")
        return _json({"error": "Internal server error", "message": str(e)}, 500)

    report = compose_report(outcome.findings)
    background_tasks.add_task(save_history, scan_request, outcome.repo_name, report)

    logger.info(
        "Scan %s complete: %d finding(s)", report.report_id, len(report.findings)
    )
    return _json(report.model_dump())


@app.get("/scans")
def list_scans(limit: int = Query(default=20, ge=1, le=100)):
    """Recent scans, newest first."""
    with ScanHistoryDB(history_db_path()) as db:
        records = load_scans(db.conn, limit)
    return {"scans": [r.model_dump() for r in records]}


@app.get("/scans/{report_id}")
def get_scan(report_id: str):
    with ScanHistoryDB(history_db_path()) as db:
        record = load_scan(db.conn, report_id)
    if record is None:
        return JSONResponse({"error": "Scan not found"}, status_code=404)
    return record.model_dump()


def main() -> int:
    """Main entry point."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    logger.info("Starting AuditLens on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
