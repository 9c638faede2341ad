"""
CHANGE LOG
----------
2025-11-12
- ADD: /api/cron/auto-publish/ at project level (cron secret, not the admin key).
2025-11-02
- ADD: /api/admin/ai-blog/ → include("ai_blog.urls", namespace="ai_blog").
- KEEP: Django admin at /admin/.
"""

from django.contrib import admin
from django.urls import include, path

from ai_blog.views.cron import auto_publish

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/admin/ai-blog/", include("ai_blog.urls", namespace="ai_blog")),
    path("api/cron/auto-publish/", auto_publish, name="ai-blog-auto-publish"),
]
