from django.contrib import admin

from .models import Blog, Country, CountryToBlog, Taxonomy


@admin.register(Country)
class CountryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug")
    search_fields = ("name", "slug")
    ordering = ("name",)


@admin.register(Blog)
class BlogAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "slug", "category", "status", "country", "created_at")
    list_filter = ("status", "category")
    search_fields = ("title", "slug")
    ordering = ("-created_at",)


@admin.register(Taxonomy)
class TaxonomyAdmin(admin.ModelAdmin):
    list_display = ("id", "slug", "type", "model_id")
    search_fields = ("slug",)


@admin.register(CountryToBlog)
class CountryToBlogAdmin(admin.ModelAdmin):
    list_display = ("id", "country", "blog")
