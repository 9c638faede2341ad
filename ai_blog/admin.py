from django.contrib import admin

from .models import BlogContent, BlogPlan, BlogTopic


@admin.register(BlogPlan)
class BlogPlanAdmin(admin.ModelAdmin):
    list_display = (
        "id", "country_name", "month", "year", "status",
        "total_topics", "generated_topics", "approved_topics", "created_at",
    )
    list_filter = ("status", "year", "month")
    search_fields = ("country_name", "country_slug")
    ordering = ("-created_at",)


@admin.register(BlogTopic)
class BlogTopicAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "plan", "category", "priority", "status", "content_generated")
    list_filter = ("status", "category")
    search_fields = ("title", "title_en", "slug")
    ordering = ("-created_at",)


@admin.register(BlogContent)
class BlogContentAdmin(admin.ModelAdmin):
    list_display = (
        "id", "title", "status", "word_count", "seo_score",
        "blog", "auto_publish", "scheduled_publish_date", "published_at",
    )
    list_filter = ("status", "auto_publish")
    search_fields = ("title", "slug")
    readonly_fields = ("blog", "published_at", "generation_prompt", "generation_tokens", "ai_model")
    ordering = ("-created_at",)
