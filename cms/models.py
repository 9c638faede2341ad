# -*- coding: utf-8 -*-
"""
CMS — public content store models.

The AI blog pipeline publishes into these tables; page rendering reads them.

CHANGE LOG
----------
2025-10-20 • Taxonomy.slug unique (one routing row per public path).
2025-10-18 • Initial Country / Blog / Taxonomy / CountryToBlog.
"""

from __future__ import annotations

from django.db import models
from django.utils.text import slugify


class Country(models.Model):
    """A destination country; the subject of blog plans."""

    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "countries"
        ordering = ("name",)
        verbose_name_plural = "countries"

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:140]
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.name


class Blog(models.Model):
    """A public blog post. status=1 means visible on the site."""

    STATUS_HIDDEN = 0
    STATUS_PUBLISHED = 1
    STATUS_CHOICES = (
        (STATUS_HIDDEN, "Hidden"),
        (STATUS_PUBLISHED, "Published"),
    )

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, db_index=True)
    contents = models.TextField(blank=True, default="")
    description = models.TextField(blank=True, default="")
    image_url = models.URLField(max_length=500, blank=True, default="")
    meta_title = models.CharField(max_length=120, blank=True, default="")
    meta_description = models.CharField(max_length=255, blank=True, default="")
    category = models.CharField(max_length=120, blank=True, default="")
    tags = models.JSONField(default=list, blank=True)
    status = models.IntegerField(choices=STATUS_CHOICES, default=STATUS_HIDDEN, db_index=True)
    country = models.ForeignKey(
        Country,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="blogs",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "blogs"
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return self.title


class Taxonomy(models.Model):
    """Routing row: maps a public path (slug) to the controller and model that renders it."""

    BLOG_DETAIL = "Blog\\BlogController@detail"

    slug = models.CharField(max_length=255, unique=True)
    type = models.CharField(max_length=120)
    model_id = models.BigIntegerField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "taxonomies"
        verbose_name_plural = "taxonomies"

    def __str__(self) -> str:
        return self.slug


class CountryToBlog(models.Model):
    country = models.ForeignKey(Country, on_delete=models.CASCADE, related_name="blog_links")
    blog = models.ForeignKey(Blog, on_delete=models.CASCADE, related_name="country_links")

    class Meta:
        db_table = "country_to_blogs"
        constraints = [
            models.UniqueConstraint(fields=["country", "blog"], name="uniq_country_blog"),
        ]

    def __str__(self) -> str:
        return f"{self.country_id} -> {self.blog_id}"
