# -*- coding: utf-8 -*-
"""
AI Blog — content metrics (word count, keyword density, links to the main site).

CHANGE LOG
----------
2025-11-10 • recalculate_metrics(): refresh every stored article after prompt changes.
"""

from __future__ import annotations

import html
import logging
import re
from typing import Any, Dict, Iterable, List
from urllib.parse import urlparse

from django.conf import settings

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<[^>]+>")
_WORD = re.compile(r"\w+(?:['’-]\w+)*", re.UNICODE)


def strip_tags(body: str) -> str:
    return html.unescape(_TAG.sub(" ", body or ""))


def count_words(body: str) -> int:
    return len(_WORD.findall(strip_tags(body)))


def keyword_density(body: str, keywords: Iterable[str]) -> float:
    """Keyword occurrences / words × 100, rounded to 2 dp."""
    text = strip_tags(body).lower()
    words = len(_WORD.findall(text))
    if not words:
        return 0.0
    hits = 0
    for kw in keywords or []:
        kw = (kw or "").strip().lower()
        if kw:
            hits += len(re.findall(r"(?<!\w)" + re.escape(kw) + r"(?!\w)", text))
    return round(hits / words * 100, 2)


def site_host() -> str:
    return urlparse(settings.AI_BLOG_SITE_URL).netloc


def main_page_links(body: str, host: str = "") -> int:
    """Count links in the HTML that point at the main site."""
    host = (host or site_host()).lower()
    if not host:
        return 0
    bare = host[4:] if host.startswith("www.") else host
    count = 0
    for href in re.findall(r"""href\s*=\s*["']([^"']+)["']""", body or "", flags=re.IGNORECASE):
        netloc = urlparse(href).netloc.lower()
        if netloc in (host, bare, "www." + bare):
            count += 1
    return count


def content_metrics(body: str, keywords: Iterable[str]) -> Dict[str, Any]:
    return {
        "word_count": count_words(body),
        "keyword_density": keyword_density(body, keywords),
        "main_page_links_count": main_page_links(body),
    }


def recalculate_metrics() -> Dict[str, Any]:
    """Recompute metrics for every stored article."""
    from .models import BlogContent

    updated = 0
    errors: List[Dict[str, Any]] = []
    rows = list(BlogContent.objects.only("id", "body", "target_keywords"))
    for row in rows:
        try:
            fields = content_metrics(row.body, row.target_keywords or [])
            BlogContent.objects.filter(pk=row.pk).update(**fields)
            updated += 1
        except Exception as exc:
            logger.warning("[AIB] Metrics failed for content=%s: %s", row.pk, exc)
            errors.append({"content_id": row.pk, "error": str(exc)})

    logger.info("[AIB] Metrics recalculated: %d/%d", updated, len(rows))
    return {
        "total_content": len(rows),
        "updated_count": updated,
        "failed_count": len(errors),
        "errors": errors,
    }
