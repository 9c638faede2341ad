"""
CHANGE LOG
- 2025-11-10 — Metrics: density, main-site links, bulk recalculation.
- 2025-11-08 — Editorial review: approve plan/topic/content, whitelisted edits.
"""

from __future__ import annotations

from django.test import SimpleTestCase, TestCase

from ai_blog.errors import InvalidState, NotFound, ValidationFailed
from ai_blog.metrics import content_metrics, keyword_density, main_page_links
from ai_blog.models import BlogContent, BlogPlan, BlogTopic
from ai_blog.services.planner import create_plan
from ai_blog.services.review import approve_content, approve_plan, set_topic_status, update_topic
from ai_blog.status import ContentStatus, PlanStatus, TopicStatus

from .fakes import FakeChat, make_content, make_country, topics_json


class ReviewTests(TestCase):
    def setUp(self):
        self.country = make_country()
        out = create_plan(self.country.pk, 3, 2025, topic_count=3, client=FakeChat(topics_json(3)))
        self.plan = BlogPlan.objects.get(pk=out["plan_id"])
        self.topics = list(self.plan.topics.order_by("id"))

    def test_approve_plan(self):
        set_topic_status(self.topics[0].pk, TopicStatus.REJECTED)
        out = approve_plan(self.plan.pk)

        self.assertEqual(out, {"plan_id": self.plan.pk, "approved_topics": 2, "status": "generating"})
        self.plan.refresh_from_db()
        self.assertEqual(self.plan.status, PlanStatus.GENERATING)
        self.assertEqual(self.plan.approved_topics, 2)
        self.assertEqual(BlogTopic.objects.get(pk=self.topics[0].pk).status, TopicStatus.REJECTED)

        with self.assertRaises(InvalidState):
            approve_plan(self.plan.pk)

    def test_topic_status_changes(self):
        out = set_topic_status(self.topics[1].pk, "approved")
        self.assertEqual(out["status"], "approved")
        self.assertEqual(BlogPlan.objects.get(pk=self.plan.pk).approved_topics, 1)

        with self.assertRaises(ValidationFailed):
            set_topic_status(self.topics[1].pk, "published")
        set_topic_status(self.topics[2].pk, "rejected")
        with self.assertRaises(InvalidState):
            set_topic_status(self.topics[2].pk, "approved")
        with self.assertRaises(NotFound):
            set_topic_status(10 ** 6, "approved")

    def test_update_topic_sanitizes_edits(self):
        out = update_topic(self.topics[0].pk, {
            "title": "  Yeni Başlık ",
            "slug": "Yeni Başlık!",
            "category": "nonsense",
            "priority": "99",
            "outline": ["A", "", "B"],
        })
        self.assertEqual(out["title"], "Yeni Başlık")
        self.assertEqual(out["slug"], "yeni-baslik")
        self.assertEqual(out["category"], "practical_info")
        self.assertEqual(out["priority"], 10)
        self.assertEqual(out["outline"], ["A", "B"])

    def test_update_topic_rules(self):
        with self.assertRaises(ValidationFailed):
            update_topic(self.topics[0].pk, {"status": "published"})
        with self.assertRaises(ValidationFailed):
            update_topic(self.topics[0].pk, {"title": "   "})
        BlogTopic.objects.filter(pk=self.topics[0].pk).update(status=TopicStatus.REVIEW)
        with self.assertRaises(InvalidState):
            update_topic(self.topics[0].pk, {"title": "x"})

    def test_approve_content(self):
        content = make_content(self.country, i=9, status=ContentStatus.REVIEW)
        self.assertEqual(approve_content(content.pk), {"content_id": content.pk, "status": "approved"})
        self.assertEqual(BlogContent.objects.get(pk=content.pk).status, ContentStatus.APPROVED)
        with self.assertRaises(InvalidState):
            approve_content(content.pk)


class MetricsTests(SimpleTestCase):
    def test_keyword_density(self):
        body = "<p>Amerika vizesi için Amerika vizesi başvurusu yapılır.</p>"
        # 2 hits / 7 words
        self.assertEqual(keyword_density(body, ["amerika vizesi"]), 28.57)
        self.assertEqual(keyword_density("", ["x"]), 0.0)

    def test_main_page_links(self):
        body = (
            '<a href="https://www.kolayseyahat.net/amerika">a</a>'
            '<a href="https://kolayseyahat.net/">b</a>'
            '<a href="https://example.com/">c</a>'
            '<a href="/relative">d</a>'
        )
        self.assertEqual(main_page_links(body, host="www.kolayseyahat.net"), 2)

    def test_content_metrics_keys(self):
        self.assertEqual(
            set(content_metrics("<p>a b</p>", [])),
            {"word_count", "keyword_density", "main_page_links_count"},
        )
