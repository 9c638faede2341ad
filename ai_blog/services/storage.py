"""
AI Blog — durable cover-image storage through Django's storage API.

Works with whatever DEFAULT storage backend is configured; relative URLs from
the local FileSystemStorage are made absolute against AI_BLOG_SITE_URL.
"""

from __future__ import annotations

import logging
import time

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from ..errors import EnrichmentFailed

logger = logging.getLogger(__name__)


def cover_path(slug: str, ext: str = "jpg") -> str:
    prefix = getattr(settings, "AI_BLOG_COVER_PREFIX", "blog-covers")
    return f"{prefix}/{slug}-{int(time.time() * 1000)}.{ext}"


def upload_cover(data: bytes, slug: str, storage=None) -> str:
    """Save the image bytes and return their public URL."""
    storage = storage or default_storage
    try:
        name = storage.save(cover_path(slug), ContentFile(data))
        url = storage.url(name)
    except Exception as exc:
        raise EnrichmentFailed(f"cover upload failed: {exc}", {"slug": slug}) from exc
    if url.startswith("/"):
        url = settings.AI_BLOG_SITE_URL + url
    logger.info("[AIB] Cover stored: %s (%d bytes)", name, len(data))
    return url
