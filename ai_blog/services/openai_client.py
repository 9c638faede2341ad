# -*- coding: utf-8 -*-
"""
AI Blog — OpenAI Chat Completions wrapper.

One JSON-mode chat call per stage; no retries here (the caller re-runs the
stage). Every failure mode surfaces as GenerationFailed so the views can map
it to a 502.

CHANGE LOG
----------
2025-11-05 • Return a Completion record (text + model + total_tokens) for provenance.
2025-11-02 • Initial wrapper: key from env/settings, model from AI_BLOG_CHAT_MODEL.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings
from openai import OpenAI

from ..errors import GenerationFailed

logger = logging.getLogger(__name__)


@dataclass
class Completion:
    text: str
    model: str
    total_tokens: int = 0


def _message_text(response: Any) -> str:
    """Pull the text of the first choice; tolerant of str or content-part lists."""
    message = response.choices[0].message
    content = getattr(message, "content", None)
    if not content:
        return ""
    if isinstance(content, str):
        return content
    first_part = content[0]
    if hasattr(first_part, "text") and hasattr(first_part.text, "value"):
        return first_part.text.value
    if isinstance(first_part, dict) and "text" in first_part:
        return str(first_part["text"])
    return str(content)


class ChatClient:
    """
    Thin wrapper around OpenAI Chat Completions with ``response_format=json_object``.
    Tests pass a fake with the same ``complete_json`` signature instead.
    """

    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None) -> None:
        if client is None:
            api_key = os.getenv("OPENAI_API_KEY") or getattr(settings, "OPENAI_API_KEY", None)
            if not api_key:
                raise GenerationFailed("OPENAI_API_KEY is not configured")
            client = OpenAI(api_key=api_key)
        self.client = client
        self.model = model or getattr(settings, "AI_BLOG_CHAT_MODEL", None) or "gpt-4o"

    def complete_json(self, system: str, user: str, temperature: float = 0.7) -> Completion:
        logger.info("[AIB] Chat start: model=%s, prompt_len=%d", self.model, len(user))
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            )
        except Exception as exc:
            logger.error("[AIB] Chat completion error: %s", exc, exc_info=True)
            raise GenerationFailed(f"chat completion failed: {exc}", {"model": self.model}) from exc

        try:
            text = _message_text(response)
        except (AttributeError, IndexError, TypeError) as exc:
            logger.error("[AIB] Could not extract content from chat response: %s", exc, exc_info=True)
            raise GenerationFailed("chat response had no readable content", {"model": self.model}) from exc

        if not text or not text.strip():
            raise GenerationFailed("model returned empty content", {"model": self.model})

        usage = getattr(response, "usage", None)
        total_tokens = int(getattr(usage, "total_tokens", 0) or 0)
        logger.info("[AIB] Chat done: model=%s, chars=%d, tokens=%d", self.model, len(text), total_tokens)
        return Completion(text=text, model=getattr(response, "model", None) or self.model, total_tokens=total_tokens)


def get_chat_client() -> ChatClient:
    return ChatClient()
