"""Rewrite headlines directly with an OpenAI chat model."""

from __future__ import annotations

import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from .config import OPENAI_MODEL
from .models import RewriteRequest
from .rewriter import RewriteResponseError, RewriteTransportError, parse_rewrite_payload

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an editor who turns clickbait news headlines into neutral ones.\n"
    "Rewrite every headline following these rules:\n"
    "1. Style: short declarative sentences stating what happened, in the headline's own language.\n"
    "2. Neutrality: drop emotional, sensational or slanted wording.\n"
    "3. Facts first: keep only the key actor and the key action.\n"
    "4. Accuracy: keep every fact from the original headline.\n"
    "Remove shock words ('shocking', 'unbelievable', '충격', '경악', '대박'), teaser phrasing "
    "('you won't believe', 'the reason why', '알고 보니', '결국...'), superlatives used for effect "
    "('epic', 'ultimate', '역대급') and decorative question or exclamation marks.\n"
    "Example: \"충격! 유명 배우 A, 알고 보니 탈세 의혹?!\" -> \"배우 A, 탈세 의혹으로 조사받는다\"\n"
    "Example: \"You won't believe what this city did to its parking rules\" -> \"City changes parking rules\"\n"
    "When article text is supplied, make the headline reflect it accurately.\n"
    "Return ONLY a JSON array of strings in the same order as the input headlines, with no extra text."
)


class OpenAIRewriter:
    """Send all titles in one chat completion and parse the JSON array answer."""

    name = "openai"

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = OPENAI_MODEL, temperature: float = 0.4):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def rewrite(self, request: RewriteRequest) -> List[str]:
        if not self.client:
            raise RewriteTransportError("OpenAI client is not configured")

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(request)},
        ]
        logger.debug("Rewrite prompt: %s", messages[-1]["content"])
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
            )
        except OpenAIError as exc:
            raise RewriteTransportError(f"OpenAI request failed: {exc}") from exc

        raw = response.choices[0].message.content if response.choices else ""
        logger.debug("Rewrite raw response: %s", raw)
        payload = parse_rewrite_payload(raw or "")
        if not all(isinstance(item, str) for item in payload):
            raise RewriteResponseError("Model returned non-string headlines")
        return payload


def build_user_prompt(request: RewriteRequest) -> str:
    lines = ["Original headlines to rewrite:"]
    lines.extend(f"{idx}. {title}" for idx, title in enumerate(request.titles, start=1))
    if request.context:
        lines.append("")
        lines.append("Article context (for reference):")
        lines.append(request.context)
    return "\n".join(lines)
