"""
AI Blog — views package

CHANGE LOG
----------
2025-11-12 • Cron auto-publish endpoint (Bearer AI_BLOG_CRON_SECRET), separate from the admin key.
2025-11-08 • _pipeline_call(): one skeleton for every POST stage (auth → JSON → stage → error map → log).
2025-11-05 • Structured error shape {"ok": false, "error": {type, message, details}} + safe request logging.
2025-11-02 • Public health/version; auth-first; CSRF-exempt admin endpoints.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Callable, Dict, Optional

from django.conf import settings
from django.http import HttpResponse, HttpResponseNotAllowed, JsonResponse

from ..errors import PipelineError

# Logger (safe, no secrets logged).
logger = logging.getLogger("ai_blog.views")

# -----------------------------------------------------------------------------
# Version + Helpers FIRST (stage modules import them from here)
# -----------------------------------------------------------------------------
VER = "aib.v1"


def _clean_secret(raw: Optional[str]) -> str:
    return (raw or "").strip().strip('"').strip("'")


def _get_admin_key() -> str:
    """AI_BLOG_ADMIN_KEY from settings (falls back to the environment), trimmed."""
    return _clean_secret(getattr(settings, "AI_BLOG_ADMIN_KEY", "") or os.environ.get("AI_BLOG_ADMIN_KEY", ""))


def _get_cron_secret() -> str:
    return _clean_secret(getattr(settings, "AI_BLOG_CRON_SECRET", "") or os.environ.get("AI_BLOG_CRON_SECRET", ""))


def _bearer(request) -> str:
    auth = request.headers.get("Authorization") or request.META.get("HTTP_AUTHORIZATION")
    if not auth:
        return ""
    parts = auth.split(None, 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return _clean_secret(parts[1])
    return ""


def _extract_auth(request) -> str:
    """
    Return the presented key (if any) from either X-Admin-Key
    or Authorization: Bearer <key>.
    """
    key = request.headers.get("X-Admin-Key") or request.META.get("HTTP_X_ADMIN_KEY")
    if key:
        return _clean_secret(key)
    return _bearer(request)


def _is_authed(request) -> bool:
    presented = _extract_auth(request)
    expected = _get_admin_key()
    return bool(presented) and bool(expected) and (presented == expected)


def _error_payload(err_type: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Uniform structured error payload (no secrets)."""
    return {
        "ok": False,
        "error": {
            "type": err_type,
            "message": message,
            "details": details or {},
        },
        "ver": VER,
    }


def _check_key(presented: str, expected: str) -> Optional[HttpResponse]:
    if not presented:
        return JsonResponse(_error_payload("missing_key", "missing authentication key"), status=401)
    if not expected or presented != expected:
        return JsonResponse(_error_payload("forbidden", "invalid authentication key"), status=403)
    return None


def _auth_first(request) -> Optional[HttpResponse]:
    """
    Enforce the admin key before any other processing.

    - No key presented  -> 401
    - Wrong key         -> 403
    """
    return _check_key(_extract_auth(request), _get_admin_key())


def _cron_auth(request) -> Optional[HttpResponse]:
    """Cron callers authenticate with Authorization: Bearer <AI_BLOG_CRON_SECRET>."""
    return _check_key(_bearer(request), _get_cron_secret())


def _with_headers(resp: HttpResponse, *, view: str) -> HttpResponse:
    """Apply breadcrumb + no-store headers to any response."""
    resp["X-AIB-View"] = view
    resp["Cache-Control"] = "no-store"
    return resp


def _json_response(data: Dict[str, Any], *, view: str, status: int = 200) -> JsonResponse:
    resp = JsonResponse(data, status=status, json_dumps_params={"ensure_ascii": False})
    return _with_headers(resp, view=view)


def _client_addr(request) -> str:
    """Best-effort client address for logs (no secrets)."""
    xff = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "") or "-"


def _parse_body(request) -> Dict[str, Any]:
    raw = request.body.decode("utf-8") if request.body else "{}"
    payload = json.loads(raw) if raw.strip() else {}
    if not isinstance(payload, dict):
        raise ValueError("JSON root must be an object")
    return payload


def _pipeline_call(
    request,
    *,
    view: str,
    handler: Callable[[Dict[str, Any]], Dict[str, Any]],
    methods=("POST",),
    log_keys=(),
) -> HttpResponse:
    """
    Shared skeleton for the admin stage endpoints:
    method check → auth-first → JSON object body → handler → PipelineError map.
    One structured log line per request, always.
    """
    t0 = time.perf_counter()
    status_code = 200
    extra: Dict[str, Any] = {}
    try:
        if request.method not in methods:
            status_code = 405
            return _with_headers(HttpResponseNotAllowed(list(methods)), view=view)

        auth_resp = _auth_first(request)
        if auth_resp is not None:
            resp = _with_headers(auth_resp, view=view)
            status_code = resp.status_code
            return resp

        try:
            payload = _parse_body(request) if request.method in ("POST", "PATCH", "PUT") else request.GET.dict()
        except (ValueError, UnicodeDecodeError) as exc:
            status_code = 400
            return _json_response(
                _error_payload("invalid_json", f"{exc}", {"hint": "Root must be an object"}),
                view=view,
                status=status_code,
            )

        try:
            result = handler(payload)
        except PipelineError as exc:
            status_code = exc.http_status
            extra["error"] = exc.code
            if status_code >= 500:
                logger.error("aib.%s failed: %s %s", view, exc.code, exc.message)
            return _json_response(_error_payload(exc.code, exc.message, exc.details), view=view, status=status_code)
        except Exception as exc:
            status_code = 500
            extra["error"] = "server_error"
            logger.exception("aib.%s unexpected error: %s", view, exc)
            return _json_response(_error_payload("server_error", "unexpected server error"), view=view, status=500)

        for key in log_keys:
            if key in result:
                extra[key] = result[key]
        data = {"ok": True, **result, "ver": VER}
        return _json_response(data, view=view, status=status_code)

    finally:
        dur_ms = int((time.perf_counter() - t0) * 1000)
        logger.info("aib.%s %s", view, {
            "method": request.method,
            "path": getattr(request, "path", "-"),
            "addr": _client_addr(request),
            "status": status_code,
            "dur_ms": dur_ms,
            **extra,
        })


# ---------- Public endpoints (no auth) ----------

def health(request, *args, **kwargs):
    """Lightweight readiness check."""
    return _json_response({"ok": True, "ver": VER, "p": "django"}, view="health")


def version(request, *args, **kwargs):
    """Simple version endpoint."""
    payload = {
        "ok": True,
        "ver": VER,
        "model": getattr(settings, "AI_BLOG_CHAT_MODEL", ""),
        "views": [
            "health", "version", "create-plan", "bulk-create-plans", "add-topics", "approve-plan",
            "update-topic", "generate-content", "refine-content", "approve-content", "publish-content",
            "schedule-plan", "recalculate-metrics", "plans", "auto-publish",
        ],
    }
    return _json_response(payload, view="version")


__all__ = [
    "VER",
    "health", "version",
    "_with_headers", "_json_response", "_error_payload", "_auth_first", "_cron_auth",
    "_client_addr", "_is_authed", "_extract_auth", "_pipeline_call",
]
