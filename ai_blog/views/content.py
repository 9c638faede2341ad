"""
AI Blog — article endpoints (generate, refine, approve, publish, metrics).
"""

from __future__ import annotations

from django.views.decorators.csrf import csrf_exempt

from .. import metrics
from ..services import generator, publisher, refiner, review
from . import _pipeline_call


@csrf_exempt
def generate_content(request, *args, **kwargs):
    """POST {topic_id} → {content_id, word_count, has_image, status, warnings}."""
    def handler(payload):
        return generator.generate_content(payload.get("topic_id"))

    return _pipeline_call(
        request, view="generate-content", handler=handler,
        log_keys=("content_id", "word_count", "has_image"),
    )


@csrf_exempt
def approve_content(request, *args, **kwargs):
    """POST {content_id}."""
    def handler(payload):
        return review.approve_content(payload.get("content_id"))

    return _pipeline_call(request, view="approve-content", handler=handler, log_keys=("content_id",))


@csrf_exempt
def publish_content(request, *args, **kwargs):
    """POST {content_id} → {published_entity_id, url}; 409 already_published carries existing_url."""
    def handler(payload):
        return publisher.publish_content(payload.get("content_id"))

    return _pipeline_call(request, view="publish-content", handler=handler, log_keys=("published_entity_id",))


@csrf_exempt
def recalculate_metrics(request, *args, **kwargs):
    def handler(payload):
        return metrics.recalculate_metrics()

    return _pipeline_call(
        request, view="recalculate-metrics", handler=handler,
        log_keys=("updated_count", "failed_count"),
    )


@csrf_exempt
def refine_content(request, *args, **kwargs):
    """POST {content_id, instructions} → rewritten body + fresh metrics; status stays "review"."""
    def handler(payload):
        return refiner.refine_content(payload.get("content_id"), payload.get("instructions"))

    return _pipeline_call(
        request, view="refine-content", handler=handler,
        log_keys=("content_id", "word_count", "keyword_density"),
    )
