"""
AI Blog — rendered-page cache invalidation after publish.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from django.core.cache import cache

logger = logging.getLogger(__name__)

PAGE_CACHE_PREFIX = "page:"


def page_cache_key(path: str) -> str:
    return PAGE_CACHE_PREFIX + path


def blog_paths(slug: str) -> List[str]:
    return ["/blog", f"/blog/{slug}", f"/en/blog/{slug}"]


def invalidate_paths(paths: Iterable[str]) -> List[str]:
    paths = list(paths)
    cache.delete_many([page_cache_key(p) for p in paths])
    logger.info("[AIB] Revalidated %s", paths)
    return paths
