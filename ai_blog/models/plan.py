# -*- coding: utf-8 -*-
"""
AI Blog — BlogPlan model.

One plan per (country, month, year) attempt. Re-running the planner for the
same period creates another plan; plans are never deleted.

========= CHANGE LOG =========
2025-11-08:
- ADD: auto_schedule / start_publish_date / publish_frequency (bulk + schedule-plan).
- ADD: data_sources JSON provenance (e.g. {"method": "bulk_creation"}).
2025-11-02:
- ADD: BlogPlan with status + topic counters.
"""

from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from cms.models import Country

from ..status import PlanStatus, PublishFrequency
from .base import TimeStampedModel


class BlogPlan(TimeStampedModel):
    country = models.ForeignKey(
        Country,
        on_delete=models.PROTECT,
        related_name="blog_plans",
    )
    # Denormalized so listings survive country renames.
    country_name = models.CharField(max_length=120, blank=True, default="")
    country_slug = models.CharField(max_length=140, blank=True, default="")

    month = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)])
    year = models.PositiveSmallIntegerField(validators=[MinValueValidator(2000), MaxValueValidator(2100)])

    total_topics = models.PositiveIntegerField(default=0, help_text="Requested topic count.")
    generated_topics = models.PositiveIntegerField(default=0, help_text="Topics actually inserted.")
    approved_topics = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=PlanStatus.choices,
        default=PlanStatus.PLANNING,
        db_index=True,
    )

    auto_schedule = models.BooleanField(default=False)
    start_publish_date = models.DateField(null=True, blank=True)
    publish_frequency = models.CharField(
        max_length=10,
        choices=PublishFrequency.choices,
        default=PublishFrequency.DAILY,
    )

    data_sources = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "ai_blog_plans"
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=["country", "year", "month"], name="aib_plan_country_period"),
        ]

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __str__(self) -> str:
        return f"{self.country_name or self.country_id} {self.period} [{self.status}]"
