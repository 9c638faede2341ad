# -*- coding: utf-8 -*-
"""
AI Blog — Article Generator.

generate_content(topic_id):
  1. claim the topic: approved → generating (compare-and-set, one winner)
  2. one LLM call → sanitized ArticleDraft (fatal on failure; topic stays "generating")
  3. cover image: Pexels top result → storage (non-fatal; recorded in warnings)
  4. store BlogContent in "review", topic → "review"

CHANGE LOG
----------
2025-11-10 • keyword_density / main_page_links_count computed at generation time.
2025-11-04 • Image failures become warnings instead of failing the article.
2025-11-03 • Pexels cover + attribution; meta title trimmed to 57 + "...".
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from ..errors import EnrichmentFailed, InvalidState, NotFound, PersistenceFailed
from ..metrics import content_metrics
from ..models import BlogContent, BlogTopic
from ..prompts import article_prompt
from ..sanitizer import ArticleDraft, parse_json_object, sanitize_article
from ..status import ContentStatus, TopicStatus, check_transition
from .openai_client import get_chat_client
from .pexels import PexelsClient
from .storage import upload_cover

logger = logging.getLogger(__name__)


def _claim_topic(topic_id: Any) -> BlogTopic:
    """Move the topic approved → generating; only one caller can win."""
    try:
        topic = BlogTopic.objects.select_related("country", "plan").get(pk=topic_id)
    except (BlogTopic.DoesNotExist, ValueError, TypeError):
        raise NotFound("topic not found", {"topic_id": topic_id})

    check_transition("topic", topic.status, TopicStatus.GENERATING)
    claimed = BlogTopic.objects.filter(pk=topic.pk, status=TopicStatus.APPROVED).update(
        status=TopicStatus.GENERATING
    )
    if not claimed:
        current = BlogTopic.objects.filter(pk=topic.pk).values_list("status", flat=True).first()
        raise InvalidState(
            "topic is no longer approved",
            {"topic_id": topic.pk, "current": current, "target": str(TopicStatus.GENERATING)},
        )
    topic.status = TopicStatus.GENERATING
    return topic


def _attach_cover(draft: ArticleDraft, topic: BlogTopic, photos: PexelsClient, warnings: List[str]) -> Dict[str, Any]:
    if not draft.image_query:
        return {}
    try:
        photo = photos.top_photo(draft.image_query)
        data = photos.download(photo)
        url = upload_cover(data, topic.slug)
    except EnrichmentFailed as exc:
        logger.warning("[AIB] Cover skipped for topic %s: %s", topic.pk, exc.message)
        warnings.append(f"image: {exc.message}")
        return {}
    return {
        "cover_image_url": url,
        "cover_image_alt": (draft.image_alt or topic.title)[:255],
        "pexels_image_id": photo.id,
        "pexels_photographer": photo.photographer,
        "pexels_photographer_url": photo.photographer_url,
    }


def generate_content(topic_id: Any, client=None, photos: Optional[PexelsClient] = None) -> Dict[str, Any]:
    """
    Generate the article for one approved topic.

    Returns {"content_id", "word_count", "has_image", "status", "warnings"}.
    """
    topic = _claim_topic(topic_id)
    logger.info("[AIB] Generate start: topic=%s %r", topic.pk, topic.title)

    client = client or get_chat_client()
    system, user = article_prompt(
        title=topic.title,
        country_name=topic.country.name,
        country_slug=topic.country.slug,
        target_word_count=topic.target_word_count,
        outline=topic.outline or [],
        keywords=topic.target_keywords or [],
        link_opportunities=topic.internal_link_opportunities or [],
    )
    completion = client.complete_json(system, user, temperature=0.9)
    draft = sanitize_article(
        parse_json_object(completion.text),
        fallback_title=topic.title,
        fallback_description=topic.description,
    )

    warnings: List[str] = []
    cover = _attach_cover(draft, topic, photos or PexelsClient(), warnings)

    metrics = content_metrics(draft.body, topic.target_keywords or [])
    word_count = draft.word_count or metrics["word_count"]

    check_transition("topic", topic.status, TopicStatus.REVIEW)
    try:
        with transaction.atomic():
            content = BlogContent.objects.create(
                topic=topic,
                title=topic.title,
                title_en=topic.title_en,
                slug=topic.slug,
                body=draft.body,
                description=topic.description,
                meta_title=draft.meta_title,
                meta_description=draft.meta_description,
                target_keywords=topic.target_keywords or [],
                internal_links=draft.internal_links,
                word_count=word_count,
                readability_score=draft.readability_score,
                seo_score=draft.seo_score,
                keyword_density=metrics["keyword_density"],
                main_page_links_count=metrics["main_page_links_count"],
                ai_model=completion.model,
                generation_prompt=user,
                generation_tokens=completion.total_tokens,
                status=ContentStatus.REVIEW,
                **cover,
            )
            BlogTopic.objects.filter(pk=topic.pk).update(
                status=TopicStatus.REVIEW,
                content_generated=True,
                generated_at=timezone.now(),
            )
    except DatabaseError as exc:
        logger.error("[AIB] Content insert failed for topic %s: %s", topic.pk, exc, exc_info=True)
        raise PersistenceFailed("could not store content", {"topic_id": topic.pk}) from exc

    logger.info(
        "[AIB] Generate done: topic=%s content=%s words=%d image=%s",
        topic.pk, content.pk, word_count, bool(cover),
    )
    return {
        "content_id": content.pk,
        "word_count": word_count,
        "has_image": bool(cover),
        "status": str(content.status),
        "warnings": warnings,
    }
