import time, uuid, json
from typing import Any, Dict, List, Optional
from .redis_client import get_redis

JOB_PREFIX = "bos:job:"
JOB_ERRORS = "bos:joberr:"
RUN_LOCK = "bos:generate:running"

JOB_TTL = 60 * 60 * 12
INT_FIELDS = [
    "created_at", "updated_at", "feed_items", "clusters", "news_count",
    "ideas_count", "articles_count", "errors_count",
]

def new_job_id() -> str:
    return uuid.uuid4().hex

def set_job(job_id: str, **fields):
    r = get_redis()
    key = JOB_PREFIX + job_id
    fields.setdefault("updated_at", str(int(time.time())))
    r.hset(key, mapping={k: str(v) for k, v in fields.items()})
    r.expire(key, JOB_TTL)

def incr_job(job_id: str, **increments):
    r = get_redis()
    key = JOB_PREFIX + job_id
    for k, v in increments.items():
        r.hincrby(key, k, int(v))
    r.hset(key, mapping={"updated_at": str(int(time.time()))})

def get_job(job_id: str) -> Dict[str, Any]:
    r = get_redis()
    data = r.hgetall(JOB_PREFIX + job_id)
    if not data:
        return {"job_id": job_id, "status": "not_found"}
    data["job_id"] = job_id
    for k in INT_FIELDS:
        if k in data:
            try:
                data[k] = int(data[k])
            except ValueError:
                pass
    return data

def push_error(job_id: str, stage: str, target: str, error: str):
    r = get_redis()
    key = JOB_ERRORS + job_id
    r.rpush(key, json.dumps({"stage": stage, "target": target, "error": error}, ensure_ascii=False))
    r.ltrim(key, -200, -1)  # keep last 200
    r.expire(key, JOB_TTL)

def get_errors(job_id: str, limit: int = 200) -> List[Dict[str, Any]]:
    r = get_redis()
    items = r.lrange(JOB_ERRORS + job_id, -limit, -1)
    out = []
    for x in items:
        try:
            out.append(json.loads(x))
        except ValueError:
            continue
    return out

def list_jobs(limit: int = 20, offset: int = 0) -> Dict[str, Any]:
    """Recent generation runs, newest first."""
    r = get_redis()
    items = []
    for key in r.scan_iter(match=JOB_PREFIX + "*"):
        job_id = str(key).replace(JOB_PREFIX, "", 1)
        job = get_job(job_id)
        if job.get("status") == "not_found":
            continue
        items.append(job)
    items.sort(key=lambda x: x.get("created_at", 0) if isinstance(x.get("created_at"), int) else 0, reverse=True)
    off = max(0, int(offset))
    lim = max(1, int(limit))
    return {"ok": True, "total": len(items), "items": items[off:off + lim]}

def acquire_run_lock(job_id: str, ttl: int = 60 * 60 * 2) -> bool:
    """Only one pipeline run at a time; the lock expires if a run dies."""
    return bool(get_redis().set(RUN_LOCK, job_id, nx=True, ex=ttl))

def release_run_lock(job_id: str) -> None:
    r = get_redis()
    if r.get(RUN_LOCK) == job_id:
        r.delete(RUN_LOCK)

def current_run() -> Optional[str]:
    return get_redis().get(RUN_LOCK)
