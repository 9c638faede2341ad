"""
AI Blog — daily auto-publish trigger for an external scheduler.

GET /api/cron/auto-publish/ with ``Authorization: Bearer <AI_BLOG_CRON_SECRET>``.
Failures come back in the same {"ok": false, "error": {...}} shape as the admin views.
"""

from __future__ import annotations

import logging
import time

from django.http import HttpResponseNotAllowed
from django.views.decorators.csrf import csrf_exempt

from ..errors import PipelineError
from ..services import scheduler
from . import VER, _client_addr, _cron_auth, _error_payload, _json_response, _with_headers

logger = logging.getLogger("ai_blog.views")


@csrf_exempt
def auto_publish(request, *args, **kwargs):
    t0 = time.perf_counter()
    status_code = 200
    view_name = "auto-publish"
    counts = {}
    try:
        if request.method not in ("GET", "POST"):
            status_code = 405
            return _with_headers(HttpResponseNotAllowed(["GET", "POST"]), view=view_name)

        auth_resp = _cron_auth(request)
        if auth_resp is not None:
            resp = _with_headers(auth_resp, view=view_name)
            status_code = resp.status_code
            return resp

        try:
            result = scheduler.publish_due()
        except PipelineError as exc:
            status_code = exc.http_status
            counts = {"error": exc.code}
            logger.error("aib.auto-publish failed: %s %s", exc.code, exc.message)
            return _json_response(_error_payload(exc.code, exc.message, exc.details), view=view_name, status=status_code)
        except Exception as exc:
            status_code = 500
            counts = {"error": "server_error"}
            logger.exception("aib.auto-publish unexpected error: %s", exc)
            return _json_response(_error_payload("server_error", "unexpected server error"), view=view_name, status=500)

        counts = {"published": result["published_count"], "failed": result["failed_count"]}
        return _json_response({"ok": True, **result, "ver": VER}, view=view_name)

    finally:
        dur_ms = int((time.perf_counter() - t0) * 1000)
        logger.info("aib.auto-publish %s", {
            "method": request.method,
            "path": getattr(request, "path", "-"),
            "addr": _client_addr(request),
            "status": status_code,
            "dur_ms": dur_ms,
            **counts,
        })
