# -*- coding: utf-8 -*-
"""
AI Blog — editorial review actions (approve / reject / edit).

Every status change goes through the transition table; edits go through the
sanitizer so a hand-edited topic obeys the same rules as a generated one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from django.db import transaction

from ..errors import InvalidState, NotFound, ValidationFailed
from ..models import BlogContent, BlogPlan, BlogTopic
from ..sanitizer import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    DEFAULT_WORD_COUNT,
    coerce_choice,
    coerce_int,
    coerce_str,
    coerce_str_list,
    compute_slug,
)
from ..status import ContentStatus, PlanStatus, TopicStatus, check_transition

logger = logging.getLogger(__name__)

EDITABLE_TOPIC_FIELDS = (
    "title",
    "title_en",
    "slug",
    "description",
    "category",
    "priority",
    "outline",
    "target_keywords",
    "target_word_count",
)
_EDITABLE_STATUSES = (TopicStatus.PENDING, TopicStatus.APPROVED)


def _get(model, pk: Any, label: str):
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label} not found", {f"{label}_id": pk})


def topic_to_dict(topic: BlogTopic) -> Dict[str, Any]:
    data = {name: getattr(topic, name) for name in EDITABLE_TOPIC_FIELDS}
    data.update({"id": topic.pk, "plan_id": topic.plan_id, "status": str(topic.status)})
    return data


def approve_plan(plan_id: Any) -> Dict[str, Any]:
    """Approve every pending topic of the plan and move the plan to "generating"."""
    plan = _get(BlogPlan, plan_id, "plan")
    check_transition("plan", plan.status, PlanStatus.GENERATING)
    with transaction.atomic():
        approved = plan.topics.filter(status=TopicStatus.PENDING).update(status=TopicStatus.APPROVED)
        plan.approved_topics = plan.topics.filter(
            status__in=[TopicStatus.APPROVED, TopicStatus.GENERATING, TopicStatus.REVIEW, TopicStatus.PUBLISHED]
        ).count()
        plan.status = PlanStatus.GENERATING
        plan.save(update_fields=["status", "approved_topics", "updated_at"])
    logger.info("[AIB] Plan %s approved: %d topics", plan.pk, approved)
    return {"plan_id": plan.pk, "approved_topics": approved, "status": str(plan.status)}


def set_topic_status(topic_id: Any, status: str) -> Dict[str, Any]:
    """Approve or reject a single topic."""
    if status not in (TopicStatus.APPROVED, TopicStatus.REJECTED):
        raise ValidationFailed("status must be approved or rejected", {"status": status})
    topic = _get(BlogTopic, topic_id, "topic")
    check_transition("topic", topic.status, status)
    updated = BlogTopic.objects.filter(pk=topic.pk, status=topic.status).update(status=status)
    if not updated:
        raise InvalidState("topic changed while updating", {"topic_id": topic.pk})
    if status == TopicStatus.APPROVED:
        BlogPlan.objects.filter(pk=topic.plan_id).update(approved_topics=_approved_count(topic.plan_id))
    topic.status = status
    logger.info("[AIB] Topic %s → %s", topic.pk, status)
    return topic_to_dict(topic)


def _approved_count(plan_id: int) -> int:
    return BlogTopic.objects.filter(
        plan_id=plan_id,
        status__in=[TopicStatus.APPROVED, TopicStatus.GENERATING, TopicStatus.REVIEW, TopicStatus.PUBLISHED],
    ).count()


def update_topic(topic_id: Any, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Edit whitelisted editorial fields while the topic is pending or approved."""
    topic = _get(BlogTopic, topic_id, "topic")
    if topic.status not in _EDITABLE_STATUSES:
        raise InvalidState(
            "topic can only be edited while pending or approved",
            {"topic_id": topic.pk, "current": str(topic.status)},
        )
    unknown = sorted(set(fields or {}) - set(EDITABLE_TOPIC_FIELDS))
    if unknown:
        raise ValidationFailed("fields are not editable", {"fields": unknown})

    clean: Dict[str, Any] = {}
    for name, value in (fields or {}).items():
        if name in ("title", "title_en", "description"):
            clean[name] = coerce_str(value)
        elif name == "slug":
            clean[name] = compute_slug(coerce_str(value))
        elif name == "category":
            clean[name] = coerce_choice(value, CATEGORIES, DEFAULT_CATEGORY, field="category")
        elif name == "priority":
            clean[name] = coerce_int(value, topic.priority, minimum=1, maximum=10)
        elif name == "target_word_count":
            clean[name] = coerce_int(value, DEFAULT_WORD_COUNT, minimum=300, maximum=6000)
        else:
            clean[name] = coerce_str_list(value)
    if "title" in clean and not clean["title"]:
        raise ValidationFailed("title cannot be empty")

    for name, value in clean.items():
        setattr(topic, name, value)
    topic.save(update_fields=list(clean) + ["updated_at"])
    logger.info("[AIB] Topic %s edited: %s", topic.pk, sorted(clean))
    return topic_to_dict(topic)


def approve_content(content_id: Any) -> Dict[str, Any]:
    content = _get(BlogContent, content_id, "content")
    check_transition("content", content.status, ContentStatus.APPROVED)
    updated = BlogContent.objects.filter(pk=content.pk, status=ContentStatus.REVIEW).update(
        status=ContentStatus.APPROVED
    )
    if not updated:
        raise InvalidState("content changed while approving", {"content_id": content.pk})
    logger.info("[AIB] Content %s approved", content.pk)
    return {"content_id": content.pk, "status": str(ContentStatus.APPROVED)}
