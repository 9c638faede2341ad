# -*- coding: utf-8 -*-
"""
AI Blog — Publisher.

Publishing is "core write, then independent enrichments":

Core (one transaction, all-or-nothing):
  create the cms Blog → claim the content with a compare-and-set on
  ``blog IS NULL`` → topic "published". A caller that loses the claim rolls
  its Blog back and gets AlreadyPublished with the winner's reference.

Enrichments (each in its own savepoint, logged, never fatal):
  routing taxonomy row, country → blog link, plan roll-up, page-cache
  invalidation. Failures come back as ``warnings``.

CHANGE LOG
----------
2025-11-12 • Plan roll-up to "published" once every topic is settled.
2025-11-09 • Enrichments isolated in savepoints; taxonomy clash is a warning.
2025-11-04 • Compare-and-set claim + unique blog column (double publish fix).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from cms.models import Blog, CountryToBlog, Taxonomy

from ..errors import AlreadyPublished, InvalidState, NotFound, PersistenceFailed
from ..models import BlogContent, BlogPlan, BlogTopic
from ..status import TOPIC_SETTLED, ContentStatus, PlanStatus, TopicStatus, can_transition, check_transition
from .revalidate import blog_paths, invalidate_paths

logger = logging.getLogger(__name__)

CATEGORY_NAMES = {
    "visa_procedures": "Vize İşlemleri",
    "travel_planning": "Seyahat Planlama",
    "practical_info": "Pratik Bilgiler",
    "culture": "Kültür",
    "comparison": "Karşılaştırma",
}
DEFAULT_CATEGORY_NAME = "Genel"


class _ClaimLost(Exception):
    pass


def category_name(category: str) -> str:
    return CATEGORY_NAMES.get(category, DEFAULT_CATEGORY_NAME)


def blog_url(slug: str) -> str:
    return f"{settings.AI_BLOG_SITE_URL}/blog/{slug}"


def _load_content(content_id: Any) -> BlogContent:
    try:
        return BlogContent.objects.select_related("topic", "topic__plan", "blog").get(pk=content_id)
    except (BlogContent.DoesNotExist, ValueError, TypeError):
        raise NotFound("content not found", {"content_id": content_id})


def _already_published(content_id: int) -> Optional[AlreadyPublished]:
    blog = Blog.objects.filter(ai_content__pk=content_id).only("id", "slug").first()
    if blog is None:
        return None
    return AlreadyPublished(blog.pk, blog_url(blog.slug))


def _create_blog(content: BlogContent) -> Blog:
    topic = content.topic
    return Blog.objects.create(
        title=content.title,
        slug=content.slug,
        contents=content.body,
        description=content.description or content.meta_description,
        image_url=content.cover_image_url or "",
        meta_title=content.meta_title,
        meta_description=content.meta_description,
        category=category_name(topic.category),
        tags=list(content.target_keywords or []),
        status=Blog.STATUS_PUBLISHED,
        country_id=topic.country_id,
    )


# ----- enrichments ----
def _route(content: BlogContent, blog: Blog) -> None:
    Taxonomy.objects.create(slug=f"blog/{blog.slug}", type=Taxonomy.BLOG_DETAIL, model_id=blog.pk)


def _link_country(content: BlogContent, blog: Blog) -> None:
    CountryToBlog.objects.get_or_create(country_id=content.topic.country_id, blog=blog)


def _roll_up_plan(content: BlogContent, blog: Blog) -> None:
    plan = BlogPlan.objects.get(pk=content.topic.plan_id)
    if not can_transition("plan", plan.status, PlanStatus.PUBLISHED):
        return
    if plan.topics.exclude(status__in=list(TOPIC_SETTLED)).exists():
        return
    BlogPlan.objects.filter(pk=plan.pk, status=plan.status).update(
        status=PlanStatus.PUBLISHED, updated_at=timezone.now()
    )
    logger.info("[AIB] Plan %s rolled up to published", plan.pk)


def _revalidate(content: BlogContent, blog: Blog) -> None:
    invalidate_paths(blog_paths(blog.slug))


ENRICHMENTS: Tuple[Tuple[str, Callable[[BlogContent, Blog], None]], ...] = (
    ("taxonomy", _route),
    ("country_link", _link_country),
    ("plan_rollup", _roll_up_plan),
    ("revalidate", _revalidate),
)


def _enrich(content: BlogContent, blog: Blog) -> List[str]:
    warnings: List[str] = []
    for label, step in ENRICHMENTS:
        try:
            with transaction.atomic():
                step(content, blog)
        except Exception as exc:
            logger.warning(
                "[AIB] Publish enrichment %s failed for content=%s blog=%s: %s",
                label, content.pk, blog.pk, exc, exc_info=True,
            )
            warnings.append(f"{label}: {exc}")
    return warnings


# ----- operation ----
def publish_content(content_id: Any) -> Dict[str, Any]:
    """
    Publish one approved article into the cms.

    Returns {"published_entity_id", "url", "warnings"}. Raises AlreadyPublished
    (with the existing blog id + url), InvalidState, NotFound, PersistenceFailed.
    """
    content = _load_content(content_id)
    if content.blog_id:
        raise AlreadyPublished(content.blog_id, blog_url(content.blog.slug))
    check_transition("content", content.status, ContentStatus.PUBLISHED)

    try:
        with transaction.atomic():
            blog = _create_blog(content)
            claimed = BlogContent.objects.filter(
                pk=content.pk,
                blog__isnull=True,
                status=ContentStatus.APPROVED,
            ).update(blog=blog, status=ContentStatus.PUBLISHED, published_at=timezone.now())
            if not claimed:
                raise _ClaimLost()
            BlogTopic.objects.filter(pk=content.topic_id, status=TopicStatus.REVIEW).update(
                status=TopicStatus.PUBLISHED
            )
    except (_ClaimLost, IntegrityError) as exc:
        existing = _already_published(content.pk)
        if existing is not None:
            logger.info("[AIB] Publish race lost for content=%s; winner blog=%s", content.pk, existing.blog_id)
            raise existing
        if isinstance(exc, IntegrityError):
            logger.error("[AIB] Publish failed for content=%s: %s", content.pk, exc, exc_info=True)
            raise PersistenceFailed("could not publish content", {"content_id": content.pk}) from exc
        current = BlogContent.objects.filter(pk=content.pk).values_list("status", flat=True).first()
        raise InvalidState(
            "content is no longer approved",
            {"content_id": content.pk, "current": current, "target": str(ContentStatus.PUBLISHED)},
        )
    except DatabaseError as exc:
        logger.error("[AIB] Publish failed for content=%s: %s", content.pk, exc, exc_info=True)
        raise PersistenceFailed("could not publish content", {"content_id": content.pk}) from exc

    content.blog = blog
    content.status = ContentStatus.PUBLISHED
    url = blog_url(blog.slug)
    logger.info("[AIB] Published content=%s as blog=%s %s", content.pk, blog.pk, url)

    warnings = _enrich(content, blog)
    return {"published_entity_id": blog.pk, "url": url, "warnings": warnings}
