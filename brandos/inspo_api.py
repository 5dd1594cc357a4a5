"""Inspiration design resources table."""

import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from .config import settings
from .db import insert_resource, list_resources
from .models import InspoResourceIn
from .security import timing_safe_equal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inspo", tags=["inspo"])


@router.get("")
def inspo_list():
    return {"data": list_resources()}


@router.post("", status_code=201)
def inspo_create(body: InspoResourceIn, x_admin_password: Optional[str] = Header(default=None)):
    if not timing_safe_equal(x_admin_password or "", settings.admin_password):
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not body.name or not body.url:
        raise HTTPException(status_code=400, detail="Name and URL are required")
    row = insert_resource(
        name=body.name,
        url=body.url,
        description=body.description or None,
        category=body.category or None,
        sub_category=body.sub_category or None,
        pricing=body.pricing or None,
        featured=body.featured,
        open_source=body.open_source,
    )
    return {"data": row}
