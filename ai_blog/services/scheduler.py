# -*- coding: utf-8 -*-
"""
AI Blog — publishing schedule and the auto-publish sweep.

schedule_plan() spreads a plan's articles over consecutive days (or weeks);
publish_due() is what the cron endpoint and ``manage.py publish_scheduled``
run once a day.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from ..errors import NotFound, ValidationFailed
from ..models import BlogContent, BlogPlan
from ..status import ContentStatus, PublishFrequency
from .bulk import fan_out, parse_date
from .publisher import publish_content

logger = logging.getLogger(__name__)


def schedule_plan(plan_id: Any, start_date: Any, frequency: str = PublishFrequency.DAILY) -> Dict[str, Any]:
    """Assign publish dates to every review/approved article of the plan, in creation order."""
    try:
        plan = BlogPlan.objects.get(pk=plan_id)
    except (BlogPlan.DoesNotExist, ValueError, TypeError):
        raise NotFound("plan not found", {"plan_id": plan_id})
    start = parse_date(start_date)
    if start is None:
        raise ValidationFailed("start_date is required")
    if frequency not in PublishFrequency.values:
        raise ValidationFailed("frequency must be daily or weekly", {"frequency": frequency})
    step_days = 7 if frequency == PublishFrequency.WEEKLY else 1

    contents = list(
        BlogContent.objects.filter(
            topic__plan=plan,
            status__in=[ContentStatus.REVIEW, ContentStatus.APPROVED],
            blog__isnull=True,
        ).order_by("created_at", "id")
    )
    schedule = []
    with transaction.atomic():
        for i, content in enumerate(contents):
            when = start + timedelta(days=i * step_days)
            BlogContent.objects.filter(pk=content.pk).update(
                scheduled_publish_date=when,
                auto_publish=True,
                publish_order=i + 1,
                status=ContentStatus.APPROVED,
            )
            schedule.append({"content_id": content.pk, "title": content.title, "date": when.isoformat()})
        plan.auto_schedule = True
        plan.start_publish_date = start
        plan.publish_frequency = frequency
        plan.save(update_fields=["auto_schedule", "start_publish_date", "publish_frequency", "updated_at"])

    logger.info("[AIB] Plan %s scheduled: %d articles from %s (%s)", plan.pk, len(schedule), start, frequency)
    return {
        "plan_id": plan.pk,
        "scheduled_count": len(schedule),
        "start_date": start.isoformat(),
        "frequency": frequency,
        "end_date": schedule[-1]["date"] if schedule else None,
        "schedule": schedule,
    }


def publish_due(today: Optional[date] = None) -> Dict[str, Any]:
    """Publish every approved auto-publish article whose date has come."""
    today = today or timezone.localdate()
    due = list(
        BlogContent.objects.filter(
            auto_publish=True,
            status=ContentStatus.APPROVED,
            blog__isnull=True,
            scheduled_publish_date__lte=today,
        )
        .order_by("scheduled_publish_date", "publish_order", "id")
        .values_list("pk", flat=True)
    )
    logger.info("[AIB] Auto-publish sweep %s: %d due", today, len(due))

    def _one(content_id):
        out = publish_content(content_id)
        return {"content_id": content_id, "blog_id": out["published_entity_id"], "url": out["url"],
                "warnings": out["warnings"]}

    result = fan_out(due, _one)
    failed = [{"content_id": f["subject"], "error": f["error"], "code": f["code"]} for f in result.failed]
    return {
        "date": today.isoformat(),
        "published_count": len(result.ok),
        "failed_count": len(failed),
        "published": result.ok,
        "failed": failed,
    }
