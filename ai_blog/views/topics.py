"""
AI Blog — topic editing endpoint.

POST/PATCH {topic_id, status?, fields?}: ``status`` approves or rejects,
``fields`` edits the whitelisted editorial fields. Either or both.
"""

from __future__ import annotations

from django.views.decorators.csrf import csrf_exempt

from ..errors import ValidationFailed
from ..services import review
from . import _pipeline_call


@csrf_exempt
def update_topic(request, *args, **kwargs):
    def handler(payload):
        topic_id = payload.get("topic_id")
        status = payload.get("status")
        fields = payload.get("fields")
        if fields is not None and not isinstance(fields, dict):
            raise ValidationFailed("fields must be an object")
        if not status and not fields:
            raise ValidationFailed("nothing to update (status or fields required)")

        topic = None
        if fields:
            topic = review.update_topic(topic_id, fields)
        if status:
            topic = review.set_topic_status(topic_id, status)
        return {"topic": topic}

    return _pipeline_call(request, view="update-topic", handler=handler, methods=("POST", "PATCH"))
