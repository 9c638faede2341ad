"""
AI Blog — plan-level endpoints (create, bulk, add topics, approve, schedule).

Thin adapters: pull the fields out of the JSON body, call the stage, return
its result. Validation and state checks live in the services.
"""

from __future__ import annotations

from typing import Any, Dict

from django.views.decorators.csrf import csrf_exempt

from ..errors import ValidationFailed
from ..services import bulk, planner, review, scheduler
from . import _pipeline_call


def _period(payload: Dict[str, Any]):
    if payload.get("period"):
        return planner.parse_period(str(payload["period"]))
    return payload.get("month"), payload.get("year")


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@csrf_exempt
def create_plan(request, *args, **kwargs):
    """POST {country_id, month, year | period, topic_count?}."""
    def handler(payload):
        month, year = _period(payload)
        return planner.create_plan(
            payload.get("country_id"),
            month,
            year,
            topic_count=payload.get("topic_count"),
        )

    return _pipeline_call(request, view="create-plan", handler=handler, log_keys=("plan_id", "topics_generated"))


@csrf_exempt
def bulk_create_plans(request, *args, **kwargs):
    """POST {country_ids[], month, year | period, topics_per_country?, auto_approve?, auto_schedule?, ...}."""
    def handler(payload):
        country_ids = payload.get("country_ids")
        if not isinstance(country_ids, list):
            raise ValidationFailed("country_ids must be a list")
        month, year = _period(payload)
        return bulk.bulk_create_plans(
            country_ids,
            month,
            year,
            topics_per_country=payload.get("topics_per_country", 10),
            auto_approve=_truthy(payload.get("auto_approve")),
            auto_schedule=_truthy(payload.get("auto_schedule")),
            schedule_start_date=payload.get("schedule_start_date"),
            schedule_frequency=payload.get("schedule_frequency") or "daily",
        )

    return _pipeline_call(
        request, view="bulk-create-plans", handler=handler,
        log_keys=("total_countries", "total_topics_created"),
    )


@csrf_exempt
def add_topics(request, *args, **kwargs):
    """POST {plan_id, topic_count?}."""
    def handler(payload):
        return planner.add_topics(payload.get("plan_id"), topic_count=payload.get("topic_count", 5))

    return _pipeline_call(request, view="add-topics", handler=handler, log_keys=("plan_id", "topics_added"))


@csrf_exempt
def approve_plan(request, *args, **kwargs):
    """POST {plan_id}."""
    def handler(payload):
        return review.approve_plan(payload.get("plan_id"))

    return _pipeline_call(request, view="approve-plan", handler=handler, log_keys=("plan_id", "approved_topics"))


@csrf_exempt
def schedule_plan(request, *args, **kwargs):
    """POST {plan_id, start_date, frequency?}."""
    def handler(payload):
        return scheduler.schedule_plan(
            payload.get("plan_id"),
            payload.get("start_date"),
            frequency=payload.get("frequency") or "daily",
        )

    return _pipeline_call(request, view="schedule-plan", handler=handler, log_keys=("plan_id", "scheduled_count"))
