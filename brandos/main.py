import logging
import threading
import time

from fastapi import FastAPI, HTTPException, Query

from .chat_api import router as chat_router
from .content_api import router as content_router
from .db import init_db
from .inspo_api import router as inspo_router
from .jobs import (
    acquire_run_lock,
    current_run,
    get_errors,
    get_job,
    list_jobs,
    new_job_id,
    release_run_lock,
    set_job,
)
from .media_api import router as media_router
from .pipeline import PipelineError, run_daily
from .redis_client import reset_redis
from .sources import list_source_names

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Brand Operating System content API", version="2.0.0")
app.include_router(chat_router)
app.include_router(content_router)
app.include_router(media_router)
app.include_router(inspo_router)


@app.on_event("startup")
def startup():
    init_db()


@app.on_event("shutdown")
def shutdown():
    reset_redis()


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/sources")
def sources():
    return {"ok": True, "sources": list_source_names()}


def _run_job(job_id: str, dry_run: bool) -> None:
    t0 = time.time()
    try:
        summary = run_daily(dry_run=dry_run, job_id=job_id)
    except PipelineError as e:
        logger.error("generation job %s failed: %s", job_id, e)
        set_job(job_id, status="failed", error=str(e), finished_at=int(time.time()))
    except Exception as e:
        logger.exception("generation job %s crashed: %s", job_id, e)
        set_job(job_id, status="failed", error=str(e)[:300], finished_at=int(time.time()))
    else:
        set_job(job_id, status="done", finished_at=int(time.time()), **{k: v for k, v in summary.items() if k != "dry_run"})
        logger.info("generation job %s done in %.1fs", job_id, time.time() - t0)
    finally:
        release_run_lock(job_id)


@app.post("/generate/run")
def generate_run(dry_run: bool = Query(False)):
    """Start the daily pipeline in a background thread; one run at a time."""
    job_id = new_job_id()
    if not acquire_run_lock(job_id):
        raise HTTPException(status_code=409, detail=f"generation already running: {current_run()}")
    now = int(time.time())
    set_job(job_id, status="running", stage="queued", dry_run=int(dry_run), created_at=now, errors_count=0)
    threading.Thread(target=_run_job, args=(job_id, dry_run), daemon=True).start()
    return {"ok": True, "job_id": job_id}


@app.get("/jobs")
def jobs(limit: int = Query(20, ge=1, le=100), offset: int = Query(0, ge=0, le=10000)):
    return list_jobs(limit=limit, offset=offset)


@app.get("/jobs/{job_id}")
def job(job_id: str):
    return get_job(job_id)


@app.get("/jobs/{job_id}/detail")
def job_detail(job_id: str, errors_limit: int = Query(50, ge=0, le=200)):
    return {"job": get_job(job_id), "errors": get_errors(job_id, limit=errors_limit)}
