"""
LLM client -- any OpenAI-compatible chat completion endpoint.

Used by the company analyst and the portfolio insight generator. Every call
is expected to answer with a JSON object; markdown fences are stripped before
parsing. When the key is missing or the call fails, `complete_json` returns
None and callers fall back to their heuristic answer.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from openai import OpenAI

from cyberintel import config

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a concise cybersecurity investment analyst. Provide data-driven, "
    "actionable insights. Be brief but comprehensive. Always respond in valid JSON format."
)


def clean_json_response(text: str) -> str:
    text = text.replace("```json", "").replace("```", "").strip()
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        text = text[start:end + 1]
    return text


def parse_json_object(text: str) -> Optional[dict]:
    """Parse an LLM answer into a dict; None when it is not a JSON object."""
    if not text:
        return None
    try:
        data = json.loads(clean_json_response(text))
    except json.JSONDecodeError as e:
        logger.warning("LLM answer is not valid JSON: %s", e)
        return None
    return data if isinstance(data, dict) else None


class LLMClient:
    """Thin wrapper over the OpenAI SDK with a JSON-only contract."""

    def __init__(
        self,
        api_key: str = config.LLM_API_KEY,
        base_url: str = config.LLM_BASE_URL,
        model: str = config.LLM_MODEL,
    ):
        self.model = model
        self.client: Optional[OpenAI] = None
        if api_key:
            self.client = OpenAI(api_key=api_key, base_url=base_url or None, timeout=60)
            logger.info("LLM client configured (model=%s)", model)
        else:
            logger.info("LLM_API_KEY not set, analysis will use heuristic fallback")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not response.choices:
            return ""
        if getattr(response, "usage", None):
            logger.debug("LLM tokens used: %s", response.usage.total_tokens)
        return response.choices[0].message.content or ""

    async def complete_json(
        self,
        prompt: str,
        max_tokens: int = config.LLM_MAX_TOKENS,
        temperature: float = config.LLM_TEMPERATURE,
    ) -> Optional[dict]:
        if not self.client:
            return None
        try:
            text = await asyncio.to_thread(self._complete, prompt, max_tokens, temperature)
        except Exception as e:
            logger.error("LLM call failed: %s", e)
            return None
        return parse_json_object(text)


_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
