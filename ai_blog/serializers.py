from rest_framework import serializers

from ai_blog.models import BlogContent, BlogPlan, BlogTopic


class ContentMiniSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlogContent
        fields = (
            "id", "status", "word_count", "seo_score", "cover_image_url",
            "blog", "published_at", "auto_publish", "scheduled_publish_date", "publish_order",
        )


class TopicSerializer(serializers.ModelSerializer):
    # Reverse one-to-one; absent until the article is generated.
    content = serializers.SerializerMethodField()

    class Meta:
        model = BlogTopic
        fields = (
            "id", "title", "title_en", "slug", "description", "category", "search_intent",
            "target_keywords", "estimated_search_volume", "keyword_difficulty",
            "target_word_count", "outline", "priority", "status", "data_source",
            "content_generated", "generated_at", "content",
        )

    def get_content(self, obj):
        content = getattr(obj, "content", None)
        return ContentMiniSerializer(content).data if content else None


class PlanListSerializer(serializers.ModelSerializer):
    period = serializers.CharField(read_only=True)

    class Meta:
        model = BlogPlan
        fields = (
            "id", "country", "country_name", "country_slug", "month", "year", "period",
            "status", "total_topics", "generated_topics", "approved_topics",
            "auto_schedule", "start_publish_date", "publish_frequency", "created_at",
        )


class PlanDetailSerializer(PlanListSerializer):
    topics = TopicSerializer(many=True, read_only=True)

    class Meta(PlanListSerializer.Meta):
        fields = PlanListSerializer.Meta.fields + ("data_sources", "topics")
