from rest_framework import mixins, viewsets

from ai_blog.models import BlogPlan
from ai_blog.serializers import PlanDetailSerializer, PlanListSerializer


class PlanViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    /api/admin/ai-blog/plans/          (list, newest first; ?status= / ?country= filters)
    /api/admin/ai-blog/plans/{id}/     (plan with its topics and article summaries)
    """

    def get_serializer_class(self):
        return PlanDetailSerializer if self.action == "retrieve" else PlanListSerializer

    def get_queryset(self):
        qs = BlogPlan.objects.all().order_by("-created_at")
        if self.action == "retrieve":
            qs = qs.prefetch_related("topics__content")
        status = self.request.query_params.get("status")
        if status:
            qs = qs.filter(status=status)
        country = self.request.query_params.get("country")
        if country:
            qs = qs.filter(country_slug=country) if not country.isdigit() else qs.filter(country_id=int(country))
        return qs
