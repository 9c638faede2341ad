# -*- coding: utf-8 -*-
"""
AI Blog — Bulk Plan Fan-Out.

``fan_out`` is a sequential fold over subjects: each step either adds to
``ok`` or lands in ``failed`` as {subject, error, code}. One bad country never
stops the batch. A fixed delay sits between subjects (not after the last) to
stay under the LLM's rate limits.

CHANGE LOG
----------
2025-11-08 • bulk_create_plans(): auto-approve + auto-schedule; per-country report.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from django.conf import settings

from cms.models import Country

from ..errors import PipelineError, ValidationFailed
from ..models import BlogPlan
from ..status import PublishFrequency
from .planner import bounded_topic_count, create_plan, validate_period

logger = logging.getLogger(__name__)


@dataclass
class FanOutResult:
    ok: List[Any] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)


def fan_out(
    items: Iterable[Any],
    step: Callable[[Any], Any],
    delay: float = 0,
    sleep: Callable[[float], None] = time.sleep,
) -> FanOutResult:
    """Run ``step`` for each item in order, isolating failures per item."""
    result = FanOutResult()
    items = list(items)
    for index, item in enumerate(items):
        try:
            result.ok.append(step(item))
        except Exception as exc:
            code = exc.code if isinstance(exc, PipelineError) else "unexpected_error"
            message = exc.message if isinstance(exc, PipelineError) else str(exc)
            logger.warning("[AIB] Fan-out item %r failed: %s (%s)", item, message, code)
            result.failed.append({"subject": item, "error": message, "code": code})
        if delay and index < len(items) - 1:
            sleep(delay)
    return result


def parse_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationFailed("date must be YYYY-MM-DD", {"date": value})


def bulk_create_plans(
    country_ids: Iterable[Any],
    month: Any,
    year: Any,
    topics_per_country: Any = 10,
    auto_approve: bool = False,
    auto_schedule: bool = False,
    schedule_start_date: Any = None,
    schedule_frequency: str = PublishFrequency.DAILY,
    client=None,
    sleep: Callable[[float], None] = time.sleep,
    delay: Optional[float] = None,
) -> Dict[str, Any]:
    """Create one plan per country; failures are reported, never raised."""
    country_ids = list(country_ids or [])
    if not country_ids:
        raise ValidationFailed("country_ids must be a non-empty list")
    month, year = validate_period(month, year)
    per_country = bounded_topic_count(topics_per_country)
    start = parse_date(schedule_start_date) if auto_schedule else None
    if auto_schedule and not start:
        raise ValidationFailed("schedule_start_date is required with auto_schedule")
    if schedule_frequency not in PublishFrequency.values:
        raise ValidationFailed("schedule_frequency must be daily or weekly", {"schedule_frequency": schedule_frequency})
    if delay is None:
        delay = getattr(settings, "AI_BLOG_BULK_DELAY_SECONDS", 1.0)

    names = dict(Country.objects.filter(pk__in=[c for c in country_ids if str(c).isdigit()]).values_list("pk", "name"))

    def _one(country_id):
        out = create_plan(
            country_id,
            month,
            year,
            topic_count=per_country,
            client=client,
            auto_approve=auto_approve,
            data_sources={"method": "bulk_creation", "auto_approve": bool(auto_approve)},
        )
        if auto_schedule:
            BlogPlan.objects.filter(pk=out["plan_id"]).update(
                auto_schedule=True,
                start_publish_date=start,
                publish_frequency=schedule_frequency,
            )
        return {
            "plan_id": out["plan_id"],
            "country_id": country_id,
            "country_name": names.get(_as_pk(country_id), ""),
            "topics_created": out["topics_generated"],
            "status": out["status"],
        }

    logger.info("[AIB] Bulk start: %d countries, %d topics each", len(country_ids), per_country)
    result = fan_out(country_ids, _one, delay=delay, sleep=sleep)

    failed = [
        {
            "country_id": f["subject"],
            "country_name": names.get(_as_pk(f["subject"]), ""),
            "error": f["error"],
            "code": f["code"],
        }
        for f in result.failed
    ]
    total_created = sum(p["topics_created"] for p in result.ok)
    logger.info("[AIB] Bulk done: %d ok, %d failed, %d topics", len(result.ok), len(failed), total_created)
    return {
        "success": True,
        "total_countries": len(country_ids),
        "total_topics_requested": len(country_ids) * per_country,
        "created_plans": result.ok,
        "failed_countries": failed,
        "total_topics_created": total_created,
        "auto_approved": bool(auto_approve),
        "auto_scheduled": bool(auto_schedule),
    }


def _as_pk(value: Any) -> Any:
    try:
        return int(value)
    except (TypeError, ValueError):
        return value
