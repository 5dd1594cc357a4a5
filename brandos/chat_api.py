"""/api/chat: streamed chat replies with automatic model routing."""

import logging
from typing import AsyncIterator

import httpx
from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from .llm import LLMError, auto_select_model, resolve_model, stream_chat
from .models import ChatIn
from .security import sanitize_error_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

CHAT_SYSTEM_PROMPT = """You are the Brand Operating System (BOS), an AI assistant designed to help with brand strategy, creative direction, and business operations.

Personality:
- Friendly: Warm, approachable, never condescending
- Creative: Experimental, curious, innovative
- Visionary: Forward-thinking but realistic

Guidelines:
- Use first person plural (we, us, our)
- Active voice, present tense
- Balance expertise with accessibility
- Never gatekeep knowledge
- Be concise but thorough"""


async def _prepend(first: str, rest: AsyncIterator[str]) -> AsyncIterator[str]:
    yield first
    async for chunk in rest:
        yield chunk


@router.post("/chat")
async def chat(body: ChatIn):
    if not body.messages:
        raise HTTPException(status_code=400, detail="Messages array is required")

    messages = [m.model_dump() for m in body.messages]
    selected = auto_select_model(messages) if body.model == "auto" else resolve_model(body.model).id
    logger.info("chat: %d messages, model=%s", len(messages), selected)

    stream = stream_chat(messages, selected, system=CHAT_SYSTEM_PROMPT)
    # pull the first delta here so provider errors still map to a status code
    try:
        first = await stream.__anext__()
    except StopAsyncIteration:
        first = ""
    except (LLMError, httpx.HTTPError) as e:
        logger.error("chat failed: %s", e)
        raise HTTPException(status_code=502, detail=sanitize_error_message(e))

    return StreamingResponse(
        _prepend(first, stream),
        media_type="text/plain; charset=utf-8",
        headers={"X-Model-Used": selected},
    )
