"""Daily trigger for the content pipeline.

Runs as its own process and asks the API to start a generation run, so the
API stays the single writer of the JSON documents.
"""

import logging
import os
import sys

import httpx
from apscheduler.schedulers.blocking import BlockingScheduler

logger = logging.getLogger("brandos.scheduler")

API_BASE = os.getenv("API_BASE_URL", "http://api:8088").rstrip("/")
TZ = os.getenv("TZ", "America/Los_Angeles")


def parse_daily_at(value: str):
    hh, mm = value.split(":", 1)
    hour, minute = int(hh), int(mm)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(value)
    return hour, minute


def trigger_run(dry_run: bool = False) -> None:
    url = f"{API_BASE}/generate/run"
    try:
        with httpx.Client(timeout=20.0) as client:
            r = client.post(url, params={"dry_run": str(dry_run).lower()})
    except httpx.HTTPError as e:
        logger.error("daily run: %s", e)
        return
    if r.status_code == 409:
        logger.info("skip daily run: already running")
        return
    if r.status_code >= 400:
        logger.error("daily run: %s %s", r.status_code, r.text[:500])
        return
    logger.info("queued daily run: job_id=%s", r.json().get("job_id"))


def job_daily() -> None:
    trigger_run(dry_run=os.getenv("DRY_RUN", "0") == "1")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | scheduler | %(message)s")
    daily_time = os.getenv("DAILY_AT", "08:00")  # local time in TZ
    try:
        daily_h, daily_m = parse_daily_at(daily_time)
    except ValueError:
        logger.error("Invalid DAILY_AT=%s. Expected HH:MM", daily_time)
        sys.exit(2)

    sched = BlockingScheduler(timezone=TZ)
    sched.add_job(job_daily, "cron", hour=daily_h, minute=daily_m, id="daily")
    logger.info("started API_BASE_URL=%s TZ=%s DAILY_AT=%s", API_BASE, TZ, daily_time)

    if os.getenv("RUN_ON_START", "0") == "1":
        logger.info("RUN_ON_START=1 -> triggering daily run")
        job_daily()

    sched.start()


if __name__ == "__main__":
    main()
