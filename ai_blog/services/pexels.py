# -*- coding: utf-8 -*-
"""
AI Blog — Pexels stock-photo client (search + download of the top result).

Any failure here is an EnrichmentFailed: a missing cover never blocks an article.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings

from ..errors import EnrichmentFailed

logger = logging.getLogger(__name__)

PEXELS_SEARCH_URL = "https://api.pexels.com/v1/search"


@dataclass
class Photo:
    id: int
    image_url: str
    photographer: str = ""
    photographer_url: str = ""


def _photo_from_json(p: Any) -> Optional[Photo]:
    """One search hit → Photo; None for entries we cannot use."""
    if not isinstance(p, dict):
        return None
    src = p.get("src")
    if not isinstance(src, dict):
        return None
    image_url = src.get("large2x") or src.get("large") or src.get("original")
    if not isinstance(image_url, str) or not image_url:
        return None
    try:
        photo_id = int(p.get("id") or 0)
    except (TypeError, ValueError):
        return None
    return Photo(
        id=photo_id,
        image_url=image_url,
        photographer=str(p.get("photographer") or ""),
        photographer_url=str(p.get("photographer_url") or ""),
    )


class PexelsClient:
    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None) -> None:
        self.api_key = api_key or getattr(settings, "PEXELS_API_KEY", "") or os.getenv("PEXELS_API_KEY", "")
        self.session = session or requests.Session()
        self.timeout = timeout or getattr(settings, "AI_BLOG_HTTP_TIMEOUT", 20)

    def search(self, query: str, per_page: int = 5) -> List[Photo]:
        if not self.api_key:
            raise EnrichmentFailed("PEXELS_API_KEY is not configured")
        try:
            r = self.session.get(
                PEXELS_SEARCH_URL,
                headers={"Authorization": self.api_key},
                params={"query": query, "per_page": per_page, "orientation": "landscape"},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise EnrichmentFailed(f"image search failed: {exc}", {"query": query}) from exc

        entries = data.get("photos") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise EnrichmentFailed("unexpected image search response", {"query": query})
        photos = [ph for ph in (_photo_from_json(p) for p in entries) if ph]
        logger.info("[AIB] Pexels search %r → %d photos", query, len(photos))
        return photos

    def download(self, photo: Photo) -> bytes:
        try:
            r = self.session.get(photo.image_url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as exc:
            raise EnrichmentFailed(f"image download failed: {exc}", {"photo_id": photo.id}) from exc
        if not r.content:
            raise EnrichmentFailed("image download returned no bytes", {"photo_id": photo.id})
        return r.content

    def top_photo(self, query: str) -> Photo:
        photos = self.search(query)
        if not photos:
            raise EnrichmentFailed("no photos found", {"query": query})
        return photos[0]
