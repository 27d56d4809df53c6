"""
Perplexity client for web-grounded research text.
Uses the OpenAI-compatible chat/completions endpoint.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from config import settings
from exceptions import AIServiceError

logger = logging.getLogger(__name__)


@dataclass
class ResearchText:
    """Text answer plus the URLs Perplexity cited."""
    text: str
    sources: List[str] = field(default_factory=list)


def _extract_sources(data: dict) -> List[str]:
    sources = list(data.get("citations") or [])
    for result in data.get("search_results") or []:
        url = result.get("url")
        if url and url not in sources:
            sources.append(url)
    return sources


def generate_text(prompt: str, model: Optional[str] = None) -> ResearchText:
    """
    Run a research prompt through Perplexity.

    Raises:
        AIServiceError: missing API key, HTTP error, or unexpected payload
    """
    if not settings.PERPLEXITY_API_KEY:
        raise AIServiceError("perplexity", "PERPLEXITY_API_KEY environment variable not set")

    model = model or settings.PERPLEXITY_MODEL
    headers = {
        "Authorization": f"Bearer {settings.PERPLEXITY_API_KEY}",
        "Content-Type": "application/json",
    }
    body = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
    }

    logger.info(f"[PERPLEXITY] model={model}, prompt_chars={len(prompt)}")
    try:
        with httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
            response = client.post(
                f"{settings.PERPLEXITY_API_BASE}/chat/completions",
                headers=headers,
                json=body,
            )
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise AIServiceError("perplexity", f"API error ({status}): {exc.response.text[:500]}") from exc
    except httpx.HTTPError as exc:
        raise AIServiceError("perplexity", f"request failed: {exc}") from exc

    try:
        text = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise AIServiceError("perplexity", "response has no message content") from exc

    return ResearchText(text=text, sources=_extract_sources(data))
