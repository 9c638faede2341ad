# -*- coding: utf-8 -*-
"""
AI Blog — Topic Planner.

create_plan(): one LLM call → sanitized topics → one all-or-nothing insert.
The plan row is written first (status "planning") so a failed generation
leaves a visible, retryable record; it only advances once its topics exist.

CHANGE LOG
----------
2025-11-08 • auto_approve / data_sources hooks for bulk fan-out.
2025-11-07 • add_topics(): extend an existing plan without duplicate titles/slugs.
2025-11-06 • Truncated responses keep their complete topics (sanitizer recovery).
2025-11-02 • Initial planner.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.db import DatabaseError, transaction

from cms.models import Country

from ..errors import InvalidState, MalformedResponse, NotFound, PersistenceFailed, ValidationFailed
from ..models import BlogPlan, BlogTopic
from ..prompts import planner_prompt
from ..sanitizer import TopicDraft, coerce_int, parse_json_object, sanitize_topics
from ..status import PlanStatus, TopicStatus, check_transition
from .openai_client import get_chat_client

logger = logging.getLogger(__name__)

_PERIOD = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")


# ----- helpers ----
def parse_period(value: str) -> Tuple[int, int]:
    """'2025-03' → (3, 2025)."""
    match = _PERIOD.match(value or "")
    if not match:
        raise ValidationFailed("period must look like YYYY-MM", {"period": value})
    year, month = int(match.group(1)), int(match.group(2))
    validate_period(month, year)
    return month, year


def validate_period(month: Any, year: Any) -> Tuple[int, int]:
    m = coerce_int(month, 0)
    y = coerce_int(year, 0)
    if not 1 <= m <= 12:
        raise ValidationFailed("month must be between 1 and 12", {"month": month})
    if not 2000 <= y <= 2100:
        raise ValidationFailed("year is out of range", {"year": year})
    return m, y


def bounded_topic_count(value: Any, default: Optional[int] = None) -> int:
    default = default or getattr(settings, "AI_BLOG_DEFAULT_TOPIC_COUNT", 10)
    maximum = getattr(settings, "AI_BLOG_MAX_TOPIC_COUNT", 30)
    return coerce_int(value, default, minimum=1, maximum=maximum)


def get_country(country_id: Any) -> Country:
    try:
        return Country.objects.get(pk=country_id)
    except (Country.DoesNotExist, ValueError, TypeError):
        raise NotFound("country not found", {"country_id": country_id})


def request_topics(
    country: Country,
    month: int,
    year: int,
    count: int,
    client=None,
    existing_titles: Optional[Iterable[str]] = None,
) -> List[TopicDraft]:
    """Ask the model for topics and return the sanitized drafts (never empty)."""
    client = client or get_chat_client()
    system, user = planner_prompt(country.name, country.slug, month, year, count, existing_titles)
    completion = client.complete_json(system, user, temperature=0.8)

    data = parse_json_object(completion.text, array_field="topics")
    drafts = sanitize_topics(data.get("topics"))
    if not drafts:
        raise MalformedResponse(
            "model returned no usable topics",
            {"preview": completion.text[:500]},
        )
    return drafts


def _topic_rows(plan: BlogPlan, drafts: Iterable[TopicDraft], status: str) -> List[BlogTopic]:
    return [
        BlogTopic(plan=plan, country_id=plan.country_id, status=status, **d.as_model_fields())
        for d in drafts
    ]


# ----- operations ----
def create_plan(
    country_id: Any,
    month: Any,
    year: Any,
    topic_count: Any = None,
    client=None,
    auto_approve: bool = False,
    data_sources: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Create a plan for one country/period and fill it with LLM topics.

    Returns {"plan_id", "topics_generated", "status"}. Raises GenerationFailed /
    MalformedResponse (plan stays "planning"), PersistenceFailed (no topics
    written), NotFound, ValidationFailed.
    """
    month, year = validate_period(month, year)
    count = bounded_topic_count(topic_count)
    country = get_country(country_id)

    plan = BlogPlan.objects.create(
        country=country,
        country_name=country.name,
        country_slug=country.slug,
        month=month,
        year=year,
        total_topics=count,
        status=PlanStatus.PLANNING,
        data_sources=data_sources or {"method": "single", "model": getattr(settings, "AI_BLOG_CHAT_MODEL", "")},
    )
    logger.info("[AIB] Plan %s created: country=%s period=%s count=%d", plan.pk, country.slug, plan.period, count)

    drafts = request_topics(country, month, year, count, client=client)

    topic_status = TopicStatus.APPROVED if auto_approve else TopicStatus.PENDING
    plan_status = PlanStatus.GENERATING if auto_approve else PlanStatus.REVIEW
    check_transition("plan", plan.status, plan_status)

    try:
        with transaction.atomic():
            BlogTopic.objects.bulk_create(_topic_rows(plan, drafts, topic_status))
            plan.status = plan_status
            plan.generated_topics = len(drafts)
            plan.approved_topics = len(drafts) if auto_approve else 0
            plan.save(update_fields=["status", "generated_topics", "approved_topics", "updated_at"])
    except DatabaseError as exc:
        logger.error("[AIB] Topic insert failed for plan %s: %s", plan.pk, exc, exc_info=True)
        raise PersistenceFailed("could not store topics", {"plan_id": plan.pk}) from exc

    logger.info("[AIB] Plan %s → %s with %d topics", plan.pk, plan.status, len(drafts))
    return {"plan_id": plan.pk, "topics_generated": len(drafts), "status": str(plan.status)}


def add_topics(plan_id: Any, topic_count: Any = 5, client=None) -> Dict[str, Any]:
    """Ask for more topics for an existing plan, skipping titles/slugs it already has."""
    try:
        plan = BlogPlan.objects.select_related("country").get(pk=plan_id)
    except (BlogPlan.DoesNotExist, ValueError, TypeError):
        raise NotFound("plan not found", {"plan_id": plan_id})
    if plan.status == PlanStatus.PUBLISHED:
        raise InvalidState("plan is already published", {"plan_id": plan.pk})

    count = bounded_topic_count(topic_count, default=5)
    existing = list(plan.topics.values_list("title", "slug"))
    seen_titles = {t.strip().lower() for t, _ in existing}
    seen_slugs = {s for _, s in existing}

    drafts = request_topics(
        plan.country, plan.month, plan.year, count,
        client=client, existing_titles=[t for t, _ in existing],
    )
    fresh: List[TopicDraft] = []
    for d in drafts:
        key = d.title.strip().lower()
        if key in seen_titles or d.slug in seen_slugs:
            logger.info("[AIB] Plan %s: skipping duplicate topic %r", plan.pk, d.title)
            continue
        seen_titles.add(key)
        seen_slugs.add(d.slug)
        fresh.append(d)
    if not fresh:
        raise MalformedResponse("no new topics (all duplicates)", {"plan_id": plan.pk})

    try:
        with transaction.atomic():
            BlogTopic.objects.bulk_create(_topic_rows(plan, fresh, TopicStatus.PENDING))
            plan.total_topics += len(fresh)
            plan.generated_topics += len(fresh)
            plan.save(update_fields=["total_topics", "generated_topics", "updated_at"])
    except DatabaseError as exc:
        logger.error("[AIB] Topic insert failed for plan %s: %s", plan.pk, exc, exc_info=True)
        raise PersistenceFailed("could not store topics", {"plan_id": plan.pk}) from exc

    logger.info("[AIB] Plan %s: added %d topics", plan.pk, len(fresh))
    return {"plan_id": plan.pk, "topics_added": len(fresh), "total_topics": plan.total_topics}
