"""
CHANGE LOG
- 2025-11-12 — Plan roll-up once every topic is published or rejected.
- 2025-11-09 — Enrichment failures are warnings (taxonomy slug clash).
- 2025-11-04 — Idempotent publish + lost-race path (one Blog, same reference).
"""

from __future__ import annotations

from unittest import mock

from django.core.cache import cache
from django.test import TestCase

from ai_blog.errors import AlreadyPublished, InvalidState, NotFound
from ai_blog.models import BlogContent, BlogTopic
from ai_blog.services import publisher
from ai_blog.services.publisher import category_name, publish_content
from ai_blog.services.revalidate import page_cache_key
from ai_blog.status import ContentStatus, PlanStatus, TopicStatus
from cms.models import Blog, CountryToBlog, Taxonomy

from .fakes import make_content, make_country, topic_dict


class PublishContentTests(TestCase):
    def setUp(self):
        self.country = make_country()
        self.content = make_content(self.country)

    def test_publish_creates_blog_routing_and_link(self):
        cache.set(page_cache_key(f"/blog/{self.content.slug}"), "<html>stale</html>")

        out = publish_content(self.content.pk)

        blog = Blog.objects.get(pk=out["published_entity_id"])
        self.assertEqual(out["url"], f"https://www.kolayseyahat.net/blog/{blog.slug}")
        self.assertEqual(out["warnings"], [])
        self.assertEqual(blog.status, Blog.STATUS_PUBLISHED)
        self.assertEqual(blog.category, "Vize İşlemleri")
        self.assertEqual(blog.tags, ["amerika vizesi", "vize"])
        self.assertEqual(blog.country_id, self.country.pk)
        self.assertEqual(blog.image_url, "")

        self.content.refresh_from_db()
        self.assertEqual(self.content.status, ContentStatus.PUBLISHED)
        self.assertEqual(self.content.blog_id, blog.pk)
        self.assertIsNotNone(self.content.published_at)
        self.assertEqual(BlogTopic.objects.get(pk=self.content.topic_id).status, TopicStatus.PUBLISHED)

        tax = Taxonomy.objects.get(slug=f"blog/{blog.slug}")
        self.assertEqual(tax.model_id, blog.pk)
        self.assertEqual(tax.type, Taxonomy.BLOG_DETAIL)
        self.assertTrue(CountryToBlog.objects.filter(country=self.country, blog=blog).exists())
        self.assertIsNone(cache.get(page_cache_key(f"/blog/{self.content.slug}")))

    def test_second_publish_is_already_published_with_same_reference(self):
        first = publish_content(self.content.pk)
        with self.assertRaises(AlreadyPublished) as ctx:
            publish_content(self.content.pk)
        self.assertEqual(ctx.exception.blog_id, first["published_entity_id"])
        self.assertEqual(ctx.exception.url, first["url"])
        self.assertEqual(ctx.exception.details["existing_url"], first["url"])
        self.assertEqual(Blog.objects.count(), 1)

    def test_losing_the_claim_rolls_back_its_blog(self):
        # Read before the winner commits, the way a concurrent request would.
        stale = BlogContent.objects.select_related("topic", "topic__plan", "blog").get(pk=self.content.pk)
        winner = publish_content(self.content.pk)

        with mock.patch.object(publisher, "_load_content", return_value=stale):
            with self.assertRaises(AlreadyPublished) as ctx:
                publish_content(self.content.pk)

        self.assertEqual(ctx.exception.blog_id, winner["published_entity_id"])
        self.assertEqual(Blog.objects.count(), 1)
        self.assertEqual(BlogContent.objects.get(pk=self.content.pk).blog_id, winner["published_entity_id"])

    def test_requires_approved_content(self):
        draft = make_content(self.country, i=2, status=ContentStatus.REVIEW)
        with self.assertRaises(InvalidState):
            publish_content(draft.pk)
        self.assertEqual(Blog.objects.count(), 0)

    def test_unknown_content(self):
        with self.assertRaises(NotFound):
            publish_content(123456)

    def test_taxonomy_clash_is_a_warning_not_a_failure(self):
        Taxonomy.objects.create(slug=f"blog/{self.content.slug}", type=Taxonomy.BLOG_DETAIL, model_id=999)

        with self.assertLogs("ai_blog.services.publisher", level="WARNING"):
            out = publish_content(self.content.pk)

        self.assertEqual(len(out["warnings"]), 1)
        self.assertTrue(out["warnings"][0].startswith("taxonomy:"))
        self.content.refresh_from_db()
        self.assertEqual(self.content.status, ContentStatus.PUBLISHED)
        # Later enrichments still ran.
        self.assertTrue(CountryToBlog.objects.filter(blog_id=out["published_entity_id"]).exists())

    def test_plan_rolls_up_when_every_topic_is_settled(self):
        plan = self.content.topic.plan
        other = make_content(self.country, plan=plan, i=2)
        rejected = BlogTopic.objects.create(plan=plan, country=self.country, status=TopicStatus.REJECTED, **topic_dict(3))

        publish_content(self.content.pk)
        plan.refresh_from_db()
        self.assertEqual(plan.status, PlanStatus.GENERATING)

        publish_content(other.pk)
        plan.refresh_from_db()
        self.assertEqual(plan.status, PlanStatus.PUBLISHED)
        self.assertEqual(rejected.plan_id, plan.pk)


class CategoryNameTests(TestCase):
    def test_known_and_unknown(self):
        self.assertEqual(category_name("travel_planning"), "Seyahat Planlama")
        self.assertEqual(category_name("culture"), "Kültür")
        self.assertEqual(category_name("something_else"), "Genel")
