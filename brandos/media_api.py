"""Link previews, stock imagery and on-demand article enrichment."""

import json
import logging

import httpx
import redis
from fastapi import APIRouter, HTTPException, Query

from .config import settings
from .enricher import enrich_article
from .feeds import fetch_og_data
from .images import search_image
from .llm import LLMError
from .models import EnrichIn
from .redis_client import get_redis
from .security import sanitize_error_message, validate_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["media"])

OG_CACHE_PREFIX = "bos:og:"


@router.get("/og-image")
def og_image(url: str = Query("")):
    if not url:
        raise HTTPException(status_code=400, detail="URL parameter is required")
    ok, error = validate_url(url)
    if not ok:
        raise HTTPException(status_code=400, detail=error)

    key = OG_CACHE_PREFIX + url
    try:
        cached = get_redis().get(key)
    except redis.RedisError as e:
        logger.warning("og cache read failed: %s", e)
        cached = None
    if cached:
        return json.loads(cached)

    data = fetch_og_data(url)
    try:
        get_redis().setex(key, settings.og_cache_ttl, json.dumps(data))
    except redis.RedisError as e:
        logger.warning("og cache write failed: %s", e)
    return data


@router.get("/pexels")
def pexels(query: str = Query(""), per_page: int = Query(5, ge=1, le=80)):
    if not query:
        raise HTTPException(status_code=400, detail="Query parameter is required")
    if not settings.pexels_api_key:
        raise HTTPException(status_code=500, detail="Pexels API key not configured")
    try:
        image = search_image(query, per_page=per_page)
    except httpx.HTTPError as e:
        logger.error("pexels search failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch from Pexels")
    if image is None:
        raise HTTPException(status_code=404, detail="No suitable images found")
    return image


@router.post("/article-enrich")
def article_enrich(body: EnrichIn):
    if not body.title:
        raise HTTPException(status_code=400, detail="Title is required")
    existing = [s.model_dump() for s in body.existing_sources]
    try:
        return enrich_article(body.title, existing)
    except (LLMError, httpx.HTTPError) as e:
        logger.error("article enrichment failed for %r: %s", body.title, e)
        raise HTTPException(status_code=502, detail=sanitize_error_message(e))
