"""Thin clients for the two LLM providers the content pipeline talks to.

Perplexity (OpenAI compatible chat completions, returns web citations) is
used for research and article writing; Anthropic's Messages API for briefs,
summaries and classification. Both are plain httpx calls.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import settings

logger = logging.getLogger(__name__)

HAIKU = "claude-3-5-haiku-20241022"
SONNET = "claude-sonnet-4-20250514"


class LLMError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class PerplexityResult:
    text: str
    citations: List[str] = field(default_factory=list)


@dataclass
class GenerationResult:
    text: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class ModelConfig:
    id: str
    name: str
    description: str
    provider: str  # "anthropic" | "perplexity" | "auto"
    tier: str
    api_model: str = ""


MODELS: Dict[str, ModelConfig] = {
    "auto": ModelConfig("auto", "Auto", "Automatically selects the best model based on your query", "auto", "smart"),
    "claude-sonnet": ModelConfig("claude-sonnet", "Claude Sonnet", "Balanced performance for most tasks", "anthropic", "balanced", SONNET),
    "claude-haiku": ModelConfig("claude-haiku", "Claude Haiku", "Fast responses for simple queries", "anthropic", "fast", HAIKU),
    "sonar": ModelConfig("sonar", "Perplexity Sonar", "Web search for current information", "perplexity", "search", "sonar"),
    "sonar-pro": ModelConfig("sonar-pro", "Perplexity Sonar Pro", "Advanced web search with more sources", "perplexity", "capable", "sonar-pro"),
}


def resolve_model(model_id: str) -> ModelConfig:
    """Unknown ids and 'auto' fall back to Sonnet."""
    cfg = MODELS.get(model_id)
    if cfg is None or cfg.provider == "auto":
        return MODELS["claude-sonnet"]
    return cfg


_SEARCH_HINTS = (
    "latest", "news", "today", "this week", "yesterday", "current", "recent",
    "right now", "trending", "search", "look up", "price of", "who won",
)
_RESEARCH_HINTS = ("research", "in-depth", "comprehensive", "with sources", "citations", "deep dive")
_SIMPLE_MAX_CHARS = 80


def auto_select_model(messages: List[Dict[str, Any]]) -> str:
    """Pick a model id for the 'auto' setting from the last user message.

    Questions about current events go to web search (Sonar Pro when the user
    asks for depth), short plain questions go to Haiku, everything else to
    Sonnet.
    """
    last = ""
    for m in reversed(messages or []):
        if m.get("role") == "user":
            last = str(m.get("content") or "")
            break
    text = last.lower()

    if any(h in text for h in _SEARCH_HINTS):
        if any(h in text for h in _RESEARCH_HINTS):
            return "sonar-pro"
        return "sonar"
    if len(text) <= _SIMPLE_MAX_CHARS and "\n" not in text and len(messages or []) <= 2:
        return "claude-haiku"
    return "claude-sonnet"


def extract_json(text: str) -> Dict[str, Any]:
    # robust extraction: find first {...} block
    text = (text or "").strip()
    if not text:
        return {}
    text = re.sub(r"^```(json)?\s*", "", text)
    text = re.sub(r"```\s*$", "", text)
    m = re.search(r"\{.*\}", text, flags=re.S)
    if not m:
        return {}
    blob = m.group(0)
    try:
        data = json.loads(blob)
    except ValueError:
        # trailing commas are the usual culprit
        blob2 = re.sub(r",\s*([}\]])", r"\1", blob)
        try:
            data = json.loads(blob2)
        except ValueError:
            return {}
    return data if isinstance(data, dict) else {}


@retry(
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=6.0),
    reraise=True,
)
def _post(url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> httpx.Response:
    with httpx.Client(timeout=settings.llm_timeout) as client:
        return client.post(url, headers=headers, json=payload)


def _json_body(r: httpx.Response, provider: str) -> Dict[str, Any]:
    try:
        data = r.json()
    except ValueError as e:
        raise LLMError(f"{provider} API returned a non-JSON body: {r.text[:200]}", status_code=r.status_code) from e
    if not isinstance(data, dict):
        raise LLMError(f"{provider} API returned an unexpected body: {type(data).__name__}", status_code=r.status_code)
    return data


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _perplexity_headers() -> Dict[str, str]:
    if not settings.perplexity_api_key:
        raise LLMError("PERPLEXITY_API_KEY not set")
    return {
        "Authorization": f"Bearer {settings.perplexity_api_key}",
        "Content-Type": "application/json",
    }


def _anthropic_headers() -> Dict[str, str]:
    if not settings.anthropic_api_key:
        raise LLMError("ANTHROPIC_API_KEY not set")
    return {
        "x-api-key": settings.anthropic_api_key,
        "anthropic-version": settings.anthropic_version,
        "Content-Type": "application/json",
    }


def call_perplexity(
    prompt: str,
    system: Optional[str] = None,
    model: str = "sonar-pro",
    max_tokens: int = 2500,
) -> PerplexityResult:
    headers = _perplexity_headers()
    messages: List[Dict[str, str]] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    payload = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "return_citations": True,
    }
    r = _post(settings.perplexity_url, headers, payload)
    if r.status_code >= 400:
        raise LLMError(f"Perplexity API error: {r.status_code} - {r.text[:200]}", status_code=r.status_code)

    data = _json_body(r, "Perplexity")
    choices = data.get("choices")
    first = _as_dict(choices[0]) if isinstance(choices, list) and choices else {}
    text = _as_dict(first.get("message")).get("content")
    if not isinstance(text, str):
        text = ""
    citations = data.get("citations")
    citations = [c for c in citations if isinstance(c, str)] if isinstance(citations, list) else []
    return PerplexityResult(text=text, citations=citations)


def generate_text(
    prompt: str,
    system: Optional[str] = None,
    model: str = HAIKU,
    max_tokens: int = 1000,
    temperature: Optional[float] = None,
) -> GenerationResult:
    headers = _anthropic_headers()
    payload: Dict[str, Any] = {
        "model": model,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }
    if system:
        payload["system"] = system
    if temperature is not None:
        payload["temperature"] = temperature

    r = _post(settings.anthropic_url, headers, payload)
    if r.status_code >= 400:
        raise LLMError(f"Anthropic API error: {r.status_code} - {r.text[:200]}", status_code=r.status_code)

    data = _json_body(r, "Anthropic")
    blocks = data.get("content")
    text = "".join(
        str(block.get("text") or "")
        for block in (blocks if isinstance(blocks, list) else [])
        if isinstance(block, dict) and block.get("type") == "text"
    )
    usage = _as_dict(data.get("usage"))
    return GenerationResult(
        text=text,
        model=data.get("model") or model,
        input_tokens=int(usage.get("input_tokens") or 0),
        output_tokens=int(usage.get("output_tokens") or 0),
    )


# ---------------------------------------------------------------------------
# Streaming chat
# ---------------------------------------------------------------------------

def _split_system(messages: List[Dict[str, Any]], system: Optional[str]):
    extra = [str(m.get("content") or "") for m in messages if m.get("role") == "system"]
    convo = [
        {"role": m["role"], "content": str(m.get("content") or "")}
        for m in messages
        if m.get("role") in ("user", "assistant")
    ]
    system_text = "\n\n".join([s for s in [system or "", *extra] if s])
    return convo, system_text


async def _sse_data(response: httpx.Response) -> AsyncIterator[Dict[str, Any]]:
    async for line in response.aiter_lines():
        if not line.startswith("data:"):
            continue
        raw = line[5:].strip()
        if not raw or raw == "[DONE]":
            continue
        try:
            event = json.loads(raw)
        except ValueError:
            logger.debug("skipping malformed stream chunk: %s", raw[:100])
            continue
        if isinstance(event, dict):
            yield event


async def stream_chat(
    messages: List[Dict[str, Any]],
    model_id: str,
    system: Optional[str] = None,
    max_tokens: int = 4096,
) -> AsyncIterator[str]:
    """Yield text deltas from the provider behind ``model_id``."""
    cfg = resolve_model(model_id)
    convo, system_text = _split_system(messages, system)

    if cfg.provider == "perplexity":
        url = settings.perplexity_url
        headers = _perplexity_headers()
        msgs = ([{"role": "system", "content": system_text}] if system_text else []) + convo
        payload: Dict[str, Any] = {"model": cfg.api_model, "messages": msgs, "max_tokens": max_tokens, "stream": True}
    else:
        url = settings.anthropic_url
        headers = _anthropic_headers()
        payload = {"model": cfg.api_model, "messages": convo, "max_tokens": max_tokens, "stream": True}
        if system_text:
            payload["system"] = system_text

    async with httpx.AsyncClient(timeout=settings.llm_timeout) as client:
        async with client.stream("POST", url, headers=headers, json=payload) as r:
            if r.status_code >= 400:
                body = (await r.aread()).decode("utf-8", "replace")
                raise LLMError(f"{cfg.provider} API error: {r.status_code} - {body[:200]}", status_code=r.status_code)
            async for event in _sse_data(r):
                if cfg.provider == "perplexity":
                    choices = event.get("choices")
                    first = _as_dict(choices[0]) if isinstance(choices, list) and choices else {}
                    delta = _as_dict(first.get("delta")).get("content")
                else:
                    delta = _as_dict(event.get("delta")).get("text") if event.get("type") == "content_block_delta" else None
                if delta:
                    yield delta
