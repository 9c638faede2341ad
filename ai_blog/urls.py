"""
AI Blog — URL routes, mounted at /api/admin/ai-blog/.

CHANGE LOG
----------
2025-11-14 • refine-content route.
2025-11-12 • DRF router for read-only plans browsing.
2025-11-08 • Review / schedule / metrics routes.
2025-11-02 • Stage routes: create-plan, bulk-create-plans, generate-content, publish-content.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from ai_blog import views as aib_views
from ai_blog.views import content, plans, topics
from ai_blog.views.browse import PlanViewSet

app_name = "ai_blog"

router = SimpleRouter()
router.register(r"plans", PlanViewSet, basename="plan")

urlpatterns = [
    path("health/", aib_views.health, name="health"),
    path("version/", aib_views.version, name="version"),

    # Plans / topics
    path("create-plan/", plans.create_plan, name="create-plan"),
    path("bulk-create-plans/", plans.bulk_create_plans, name="bulk-create-plans"),
    path("add-topics/", plans.add_topics, name="add-topics"),
    path("approve-plan/", plans.approve_plan, name="approve-plan"),
    path("schedule-plan/", plans.schedule_plan, name="schedule-plan"),
    path("update-topic/", topics.update_topic, name="update-topic"),

    # Articles
    path("generate-content/", content.generate_content, name="generate-content"),
    path("refine-content/", content.refine_content, name="refine-content"),
    path("approve-content/", content.approve_content, name="approve-content"),
    path("publish-content/", content.publish_content, name="publish-content"),
    path("recalculate-metrics/", content.recalculate_metrics, name="recalculate-metrics"),

    path("", include(router.urls)),
]
