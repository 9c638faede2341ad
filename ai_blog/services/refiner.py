# -*- coding: utf-8 -*-
"""
AI Blog — editor-driven refinement of a generated article.

refine_content(content_id, instructions) rewrites the body of an article that
is still in "review" and refreshes its metrics. Status does not change; the
rewrite goes through the same sanitizer as generation.

CHANGE LOG
----------
2025-11-14 • Initial refine stage (one LLM call, compare-and-set on status "review").
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..errors import InvalidState, NotFound, ValidationFailed
from ..metrics import content_metrics
from ..models import BlogContent
from ..prompts import refine_prompt
from ..sanitizer import coerce_str, parse_json_object, sanitize_article
from ..status import ContentStatus
from .openai_client import get_chat_client

logger = logging.getLogger(__name__)

KEYWORD_DENSITY_WARN = 2.5


def refine_content(content_id: Any, instructions: Any, client=None) -> Dict[str, Any]:
    """
    Rewrite one review article following the editor's instructions.

    Returns {"content_id", "word_count", "keyword_density",
    "main_page_links_count", "tokens_used", "warnings"}.
    """
    instructions = coerce_str(instructions)
    if not instructions:
        raise ValidationFailed("instructions are required")
    try:
        content = BlogContent.objects.select_related("topic__country").get(pk=content_id)
    except (BlogContent.DoesNotExist, ValueError, TypeError):
        raise NotFound("content not found", {"content_id": content_id})
    if content.status != ContentStatus.REVIEW:
        raise InvalidState(
            "only content in review can be refined",
            {"content_id": content.pk, "current": str(content.status)},
        )

    country = content.topic.country
    keywords = content.target_keywords or []
    system, user = refine_prompt(content.body, instructions, country.name, country.slug, keywords)
    completion = (client or get_chat_client()).complete_json(system, user, temperature=0.7)
    draft = sanitize_article(
        parse_json_object(completion.text),
        fallback_title=content.meta_title,
        fallback_description=content.meta_description,
    )
    metrics = content_metrics(draft.body, keywords)

    updated = BlogContent.objects.filter(pk=content.pk, status=ContentStatus.REVIEW).update(
        body=draft.body,
        meta_title=draft.meta_title,
        meta_description=draft.meta_description,
        ai_model=completion.model,
        generation_tokens=(content.generation_tokens or 0) + completion.total_tokens,
        **metrics,
    )
    if not updated:
        raise InvalidState("content changed while refining", {"content_id": content.pk})

    warnings: List[str] = []
    if metrics["keyword_density"] > KEYWORD_DENSITY_WARN:
        warnings.append(
            f"keyword density {metrics['keyword_density']:.2f}% is above {KEYWORD_DENSITY_WARN}%"
        )
    logger.info(
        "[AIB] Refined content=%s words=%d density=%.2f",
        content.pk, metrics["word_count"], metrics["keyword_density"],
    )
    return {
        "content_id": content.pk,
        "word_count": metrics["word_count"],
        "keyword_density": metrics["keyword_density"],
        "main_page_links_count": metrics["main_page_links_count"],
        "tokens_used": completion.total_tokens,
        "warnings": warnings,
    }
