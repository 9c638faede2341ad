# -*- coding: utf-8 -*-
"""
AI Blog — pipeline error taxonomy.

Every stage raises a PipelineError subclass; views turn it into the uniform
``{"ok": false, "error": {"type", "message", "details"}}`` payload with the
error's ``http_status``. Bulk fan-out and scheduled publishing catch these at
the item boundary instead.

CHANGE LOG
----------
2025-11-04 • EnrichmentFailed (non-fatal, surfaces as a warning string).
2025-11-02 • Initial taxonomy: generation / malformed / state / publish / persistence.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base error for the plan → topics → article → publish pipeline."""

    code = "pipeline_error"
    http_status = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def as_dict(self) -> Dict[str, Any]:
        return {"type": self.code, "message": self.message, "details": self.details}


class GenerationFailed(PipelineError):
    """LLM call errored or returned nothing."""

    code = "generation_failed"
    http_status = 502


class MalformedResponse(PipelineError):
    """LLM output could not be parsed or had no usable records."""

    code = "malformed_response"
    http_status = 502


class InvalidState(PipelineError):
    code = "invalid_state"
    http_status = 409


class AlreadyPublished(PipelineError):
    """Content already has a published entity; carries the existing reference."""

    code = "already_published"
    http_status = 409

    def __init__(self, blog_id: int, url: str, message: str = "content already published"):
        super().__init__(message, {"blog_id": blog_id, "existing_url": url})
        self.blog_id = blog_id
        self.url = url


class PersistenceFailed(PipelineError):
    code = "persistence_failed"
    http_status = 500


class NotFound(PipelineError):
    code = "not_found"
    http_status = 404


class ValidationFailed(PipelineError):
    code = "validation_failed"
    http_status = 400


class EnrichmentFailed(PipelineError):
    """Secondary step failed after the core write; logged and reported, never fatal."""

    code = "enrichment_failed"
    http_status = 200
