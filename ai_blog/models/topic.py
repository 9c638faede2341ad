# -*- coding: utf-8 -*-
"""
AI Blog — BlogTopic model.

Rows are only ever written from a sanitized TopicDraft, so category is always
one of the five known values and every numeric field is a finite integer.
"""

from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from cms.models import Country

from ..sanitizer import CATEGORIES, DEFAULT_CATEGORY, DEFAULT_DATA_SOURCE, DEFAULT_SEARCH_INTENT
from ..status import TopicStatus
from .base import TimeStampedModel
from .plan import BlogPlan


class BlogTopic(TimeStampedModel):
    CATEGORY_CHOICES = [(c, c.replace("_", " ").title()) for c in CATEGORIES]

    plan = models.ForeignKey(BlogPlan, on_delete=models.CASCADE, related_name="topics")
    country = models.ForeignKey(Country, on_delete=models.PROTECT, related_name="blog_topics")

    title = models.CharField(max_length=255)
    title_en = models.CharField(max_length=255, blank=True, default="")
    slug = models.SlugField(max_length=255, allow_unicode=True)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=32, choices=CATEGORY_CHOICES, default=DEFAULT_CATEGORY, db_index=True)
    search_intent = models.CharField(max_length=32, default=DEFAULT_SEARCH_INTENT)
    content_angle = models.TextField(blank=True, default="")

    target_keywords = models.JSONField(default=list, blank=True)
    estimated_search_volume = models.PositiveIntegerField(default=0)
    keyword_difficulty = models.PositiveSmallIntegerField(
        default=0, validators=[MaxValueValidator(100)]
    )
    target_word_count = models.PositiveIntegerField(default=1500)
    outline = models.JSONField(default=list, blank=True)
    internal_link_opportunities = models.JSONField(default=list, blank=True)
    priority = models.PositiveSmallIntegerField(
        default=5, validators=[MinValueValidator(1), MaxValueValidator(10)]
    )

    status = models.CharField(
        max_length=20,
        choices=TopicStatus.choices,
        default=TopicStatus.PENDING,
        db_index=True,
    )
    data_source = models.CharField(max_length=40, default=DEFAULT_DATA_SOURCE)
    reasoning = models.TextField(blank=True, default="")

    content_generated = models.BooleanField(default=False)
    generated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "ai_blog_topics"
        ordering = ("-priority", "id")

    def __str__(self) -> str:
        return self.title
