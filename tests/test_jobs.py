from brandos import jobs


def test_job_lifecycle(fake_redis):
    job_id = jobs.new_job_id()
    jobs.set_job(job_id, status="running", created_at=100, stage="fetch")
    jobs.incr_job(job_id, feed_items=40)
    jobs.incr_job(job_id, feed_items=2, errors_count=1)

    job = jobs.get_job(job_id)
    assert job["job_id"] == job_id
    assert job["status"] == "running"
    assert job["stage"] == "fetch"
    assert job["created_at"] == 100
    assert job["feed_items"] == 42
    assert job["errors_count"] == 1
    assert fake_redis.ttls[jobs.JOB_PREFIX + job_id] == jobs.JOB_TTL


def test_unknown_job(fake_redis):
    assert jobs.get_job("nope") == {"job_id": "nope", "status": "not_found"}


def test_errors_keep_only_recent(fake_redis):
    for i in range(205):
        jobs.push_error("j1", "ideas", f"target {i}", "boom")
    errors = jobs.get_errors("j1")
    assert len(errors) == 200
    assert errors[0]["target"] == "target 5"
    assert errors[-1] == {"stage": "ideas", "target": "target 204", "error": "boom"}
    assert len(jobs.get_errors("j1", limit=3)) == 3


def test_list_jobs_newest_first(fake_redis):
    jobs.set_job("old", status="done", created_at=1)
    jobs.set_job("new", status="running", created_at=5)
    listing = jobs.list_jobs(limit=1)
    assert listing["total"] == 2
    assert [j["job_id"] for j in listing["items"]] == ["new"]
    assert [j["job_id"] for j in jobs.list_jobs(offset=1)["items"]] == ["old"]


def test_run_lock(fake_redis):
    assert jobs.acquire_run_lock("a")
    assert not jobs.acquire_run_lock("b")
    assert jobs.current_run() == "a"

    jobs.release_run_lock("b")
    assert jobs.current_run() == "a"
    jobs.release_run_lock("a")
    assert jobs.current_run() is None
    assert jobs.acquire_run_lock("b")
