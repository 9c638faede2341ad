# -*- coding: utf-8 -*-
"""
AI Blog — pipeline state machine.

Statuses for plans, topics and content plus the table of legal forward
transitions. Stages call ``check_transition`` on entry; nothing moves
backwards, and a failed stage leaves its entity where it was for a manual retry.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from django.db import models

from .errors import InvalidState


class PlanStatus(models.TextChoices):
    PLANNING = "planning", "Planning"
    REVIEW = "review", "Review"
    GENERATING = "generating", "Generating"
    PUBLISHED = "published", "Published"


class TopicStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    GENERATING = "generating", "Generating"
    REVIEW = "review", "Review"
    PUBLISHED = "published", "Published"


class ContentStatus(models.TextChoices):
    REVIEW = "review", "Review"
    APPROVED = "approved", "Approved"
    PUBLISHED = "published", "Published"


class PublishFrequency(models.TextChoices):
    DAILY = "daily", "Daily"
    WEEKLY = "weekly", "Weekly"


PLAN_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PlanStatus.PLANNING: frozenset({PlanStatus.REVIEW, PlanStatus.GENERATING}),
    PlanStatus.REVIEW: frozenset({PlanStatus.GENERATING}),
    PlanStatus.GENERATING: frozenset({PlanStatus.PUBLISHED}),
    PlanStatus.PUBLISHED: frozenset(),
}

TOPIC_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    TopicStatus.PENDING: frozenset({TopicStatus.APPROVED, TopicStatus.REJECTED}),
    TopicStatus.APPROVED: frozenset({TopicStatus.GENERATING, TopicStatus.REJECTED}),
    TopicStatus.GENERATING: frozenset({TopicStatus.REVIEW}),
    TopicStatus.REVIEW: frozenset({TopicStatus.PUBLISHED, TopicStatus.REJECTED}),
    TopicStatus.REJECTED: frozenset(),
    TopicStatus.PUBLISHED: frozenset(),
}

CONTENT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    ContentStatus.REVIEW: frozenset({ContentStatus.APPROVED}),
    ContentStatus.APPROVED: frozenset({ContentStatus.PUBLISHED}),
    ContentStatus.PUBLISHED: frozenset(),
}

# Same tables keyed by plain string values.
_TABLES: Dict[str, Dict[str, FrozenSet[str]]] = {
    kind: {str(k): frozenset(str(s) for s in v) for k, v in table.items()}
    for kind, table in (
        ("plan", PLAN_TRANSITIONS),
        ("topic", TOPIC_TRANSITIONS),
        ("content", CONTENT_TRANSITIONS),
    )
}


def can_transition(kind: str, current: str, target: str) -> bool:
    return str(target) in _TABLES[kind].get(str(current), frozenset())


def check_transition(kind: str, current: str, target: str) -> None:
    """
    Raise InvalidState unless ``current -> target`` is a legal move for ``kind``
    ("plan" | "topic" | "content").
    """
    if not can_transition(kind, current, target):
        raise InvalidState(
            f"{kind} cannot move from '{current}' to '{target}'",
            {"kind": kind, "current": str(current), "target": str(target)},
        )


# Topics that no longer block a plan from rolling up to "published".
TOPIC_SETTLED = frozenset({TopicStatus.PUBLISHED, TopicStatus.REJECTED})
