"""Clients for the headline rewrite service and the fallback policy around them."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Protocol, Sequence

import httpx
from .config import REWRITE_API_URL, REWRITE_TIMEOUT_S
from .models import Candidate, Rewrite, RewriteOutcome, RewriteRequest

logger = logging.getLogger(__name__)

MAX_TITLES = 20
MIN_TITLE_LENGTH = 4
MAX_CONTEXT_LENGTH = 2000
CONTEXT_SNIPPETS = 3
MIN_CONTEXT_LENGTH = 20


class RewriteError(RuntimeError):
    """Base class for rewrite failures; callers fall back to the original titles."""


class RewriteTransportError(RewriteError):
    """Raised when the rewrite service cannot be reached or answers with an error."""


class RewriteResponseError(RewriteError):
    """Raised when the rewrite payload is not a JSON array of strings."""


class TitleRewriter(Protocol):
    name: str

    async def rewrite(self, request: RewriteRequest) -> List[str]:
        ...


def build_rewrite_request(candidates: Sequence[Candidate]) -> RewriteRequest:
    titles = [item.original for item in candidates if len(item.original) >= MIN_TITLE_LENGTH][:MAX_TITLES]
    snippets = [item.context for item in candidates if item.context and len(item.context) > MIN_CONTEXT_LENGTH]
    context = "\n\n".join(snippets[:CONTEXT_SNIPPETS])[:MAX_CONTEXT_LENGTH]
    return RewriteRequest(titles=titles, context=context or None)


def parse_rewrite_payload(raw: str) -> List[Any]:
    """Decode a JSON array, digging it out of surrounding prose when needed."""
    content = (raw or "").strip()
    if not content:
        raise RewriteResponseError("Empty rewrite response")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError:
        payload = _first_json_array(content)
        if payload is None:
            raise RewriteResponseError(f"Unable to parse rewrite response: {content[:200]}") from None
    if not isinstance(payload, list):
        raise RewriteResponseError(f"Unexpected rewrite response shape: {type(payload).__name__}")
    return payload


def _first_json_array(content: str) -> Optional[list]:
    decoder = json.JSONDecoder()
    start = content.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(content, start)
        except json.JSONDecodeError:
            start = content.find("[", start + 1)
            continue
        if isinstance(value, list):
            return value
        start = content.find("[", start + 1)
    return None


class HttpRewriteClient:
    """POST titles to the rewrite API and read back ``{"rewritten": [...]}``."""

    name = "api"

    def __init__(self, url: str = REWRITE_API_URL, timeout: float = REWRITE_TIMEOUT_S, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.timeout = timeout
        self._client = client

    async def rewrite(self, request: RewriteRequest) -> List[str]:
        payload = request.model_dump(exclude_none=True)
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RewriteTransportError(f"Rewrite API unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise RewriteTransportError(f"API error {response.status_code}: {response.text[:200]}")

        try:
            body = response.json()
        except ValueError:
            body = parse_rewrite_payload(response.text)
        if isinstance(body, dict):
            if body.get("error"):
                raise RewriteTransportError(f"Rewrite API reported: {body['error']}")
            body = body.get("rewritten")
        if not isinstance(body, list):
            raise RewriteResponseError("Rewrite API response has no 'rewritten' array")
        return body


async def rewrite_titles(rewriter: Optional[TitleRewriter], candidates: Sequence[Candidate]) -> RewriteOutcome:
    """Rewrite candidate titles, substituting originals for anything missing.

    Never raises: an unreachable service or a malformed answer produces
    rewrites identical to the originals plus a warning for the user.
    """
    if not candidates:
        return RewriteOutcome(rewrites=[], source="none")

    request = build_rewrite_request(candidates)
    warning: Optional[str] = None
    source = "fallback"
    rewritten: List[Any] = []

    if rewriter is None:
        warning = "No rewriter configured; showing originals."
    elif not request.titles:
        warning = "No titles long enough to rewrite; showing originals."
    else:
        try:
            rewritten = await rewriter.rewrite(request)
            source = rewriter.name
        except RewriteError as exc:
            logger.warning("Rewrite failed: %s", exc)
            warning = "Rewrite failed; showing originals."

    by_title = {}
    for idx, title in enumerate(request.titles):
        value = rewritten[idx] if idx < len(rewritten) else None
        if isinstance(value, str) and value.strip():
            by_title.setdefault(title, value.strip())

    rewrites = [
        Rewrite(id=item.id, original=item.original, alternative=by_title.get(item.original, item.original))
        for item in candidates
    ]
    if rewritten and len(rewritten) < len(request.titles):
        logger.info("Rewrite returned %s of %s titles; padding with originals", len(rewritten), len(request.titles))
    return RewriteOutcome(rewrites=rewrites, warning=warning, source=source)
