# -*- coding: utf-8 -*-
"""
AI Blog — BlogContent model (generated article awaiting review / publish).

``blog`` is the publish reference. It is set exactly once by the publisher's
compare-and-set claim; the unique one-to-one column backs that up at the
storage level.

========= CHANGE LOG =========
2025-11-14:
- CHANGE: cover_image_url is NULL when the article has no cover.
2025-11-10:
- ADD: scheduling fields (auto_publish, scheduled_publish_date, publish_order).
- ADD: keyword_density / main_page_links_count (recalculate-metrics).
2025-11-03:
- ADD: Pexels attribution fields.
"""

from __future__ import annotations

from django.db import models

from cms.models import Blog

from ..status import ContentStatus
from .base import TimeStampedModel
from .topic import BlogTopic


class BlogContent(TimeStampedModel):
    topic = models.OneToOneField(BlogTopic, on_delete=models.CASCADE, related_name="content")

    title = models.CharField(max_length=255)
    title_en = models.CharField(max_length=255, blank=True, default="")
    slug = models.SlugField(max_length=255, allow_unicode=True)
    body = models.TextField(help_text="Article HTML.")
    description = models.TextField(blank=True, default="")
    meta_title = models.CharField(max_length=60, blank=True, default="")
    meta_description = models.CharField(max_length=160, blank=True, default="")
    target_keywords = models.JSONField(default=list, blank=True)

    # --- Cover image ---
    cover_image_url = models.URLField(max_length=500, null=True, blank=True)
    cover_image_alt = models.CharField(max_length=255, blank=True, default="")
    pexels_image_id = models.BigIntegerField(null=True, blank=True)
    pexels_photographer = models.CharField(max_length=255, blank=True, default="")
    pexels_photographer_url = models.URLField(max_length=500, blank=True, default="")

    # --- SEO / metrics ---
    internal_links = models.JSONField(default=list, blank=True)
    word_count = models.PositiveIntegerField(default=0)
    readability_score = models.PositiveSmallIntegerField(default=0)
    seo_score = models.PositiveSmallIntegerField(default=0)
    keyword_density = models.FloatField(default=0.0)
    main_page_links_count = models.PositiveIntegerField(default=0)

    # --- Provenance ---
    ai_model = models.CharField(max_length=64, blank=True, default="")
    generation_prompt = models.TextField(blank=True, default="")
    generation_tokens = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=ContentStatus.choices,
        default=ContentStatus.REVIEW,
        db_index=True,
    )
    blog = models.OneToOneField(
        Blog,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ai_content",
    )
    published_at = models.DateTimeField(null=True, blank=True)

    # --- Scheduling ---
    auto_publish = models.BooleanField(default=False, db_index=True)
    scheduled_publish_date = models.DateField(null=True, blank=True, db_index=True)
    publish_order = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = "ai_blog_contents"
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return self.title
