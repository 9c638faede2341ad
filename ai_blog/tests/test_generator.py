"""
CHANGE LOG
- 2025-11-14 — Odd Pexels payloads (list root, bad src/id) → warning, article still stored.
- 2025-11-04 — Image-search timeout → article stored without cover, has_image False.
- 2025-11-03 — Initial generator tests (fake chat + fake Pexels session).
"""

from __future__ import annotations

import json
from unittest import mock

import requests
from django.test import TestCase

from ai_blog.errors import GenerationFailed, InvalidState, MalformedResponse, NotFound
from ai_blog.models import BlogContent, BlogPlan, BlogTopic
from ai_blog.services.generator import generate_content
from ai_blog.services.pexels import PexelsClient
from ai_blog.status import ContentStatus, PlanStatus, TopicStatus

from .fakes import FakeChat, FakeSession, article_json, make_country, pexels_photo, topic_dict

COVER_URL = "https://cdn.example.com/blog-covers/amerika-vize-rehberi-1-1.jpg"


def make_topic(country, status=TopicStatus.APPROVED, **overrides) -> BlogTopic:
    plan = BlogPlan.objects.create(
        country=country, country_name=country.name, country_slug=country.slug,
        month=3, year=2025, total_topics=1, generated_topics=1, status=PlanStatus.GENERATING,
    )
    fields = topic_dict(1)
    fields.update(overrides)
    return BlogTopic.objects.create(plan=plan, country=country, status=status, **fields)


class GenerateContentTests(TestCase):
    def setUp(self):
        self.country = make_country()
        self.topic = make_topic(self.country)

    def _photos(self, **kwargs) -> PexelsClient:
        return PexelsClient(api_key="test-key", session=FakeSession(**kwargs), timeout=1)

    @mock.patch("ai_blog.services.generator.upload_cover", return_value=COVER_URL)
    def test_happy_path_with_cover(self, upload):
        out = generate_content(self.topic.pk, client=FakeChat(article_json()), photos=self._photos())

        self.assertTrue(out["has_image"])
        self.assertEqual(out["status"], "review")
        self.assertEqual(out["warnings"], [])
        self.assertEqual(out["word_count"], 1500)

        content = BlogContent.objects.get(pk=out["content_id"])
        self.assertEqual(content.status, ContentStatus.REVIEW)
        self.assertEqual(content.cover_image_url, COVER_URL)
        self.assertEqual(content.cover_image_alt, "New York silueti")
        self.assertEqual(content.pexels_image_id, 42)
        self.assertEqual(content.pexels_photographer, "Ayşe Kaya")
        self.assertEqual(content.generation_tokens, 1234)
        self.assertEqual(content.ai_model, "gpt-4o")
        self.assertIn("Amerika Vize Rehberi 1", content.generation_prompt)
        self.assertEqual(content.main_page_links_count, 1)
        self.assertIsNone(content.blog_id)
        upload.assert_called_once()
        self.assertEqual(upload.call_args[0][1], self.topic.slug)

        self.topic.refresh_from_db()
        self.assertEqual(self.topic.status, TopicStatus.REVIEW)
        self.assertTrue(self.topic.content_generated)
        self.assertIsNotNone(self.topic.generated_at)

    def test_image_search_timeout_is_not_fatal(self):
        photos = self._photos(error=requests.Timeout("read timed out"))
        with self.assertLogs("ai_blog.services.generator", level="WARNING"):
            out = generate_content(self.topic.pk, client=FakeChat(article_json()), photos=photos)

        self.assertFalse(out["has_image"])
        self.assertEqual(len(out["warnings"]), 1)
        self.assertIn("image", out["warnings"][0])
        content = BlogContent.objects.get(pk=out["content_id"])
        self.assertIsNone(content.cover_image_url)
        self.assertIsNone(content.pexels_image_id)
        self.topic.refresh_from_db()
        self.assertEqual(self.topic.status, TopicStatus.REVIEW)

    def test_no_photos_found_is_a_warning(self):
        out = generate_content(self.topic.pk, client=FakeChat(article_json()), photos=self._photos(photos=[]))
        self.assertFalse(out["has_image"])
        self.assertIn("no photos found", out["warnings"][0])

    def test_odd_image_search_payloads_are_not_fatal(self):
        payloads = (
            [pexels_photo()],
            {"photos": "none"},
            {"photos": ["junk", {"id": 1, "src": "not-a-dict"}, {"id": "abc", "src": {"large2x": "https://x/y.jpg"}}]},
        )
        for i, payload in enumerate(payloads, start=1):
            topic = make_topic(self.country, slug=f"odd-payload-{i}")
            with self.subTest(payload=payload):
                out = generate_content(topic.pk, client=FakeChat(article_json()), photos=self._photos(payload=payload))
                self.assertFalse(out["has_image"])
                self.assertEqual(len(out["warnings"]), 1)
                self.assertTrue(out["warnings"][0].startswith("image:"))
                topic.refresh_from_db()
                self.assertEqual(topic.status, TopicStatus.REVIEW)
                self.assertTrue(BlogContent.objects.filter(pk=out["content_id"], topic=topic).exists())

    def test_no_image_query_skips_pexels(self):
        session = FakeSession()
        photos = PexelsClient(api_key="k", session=session)
        out = generate_content(self.topic.pk, client=FakeChat(article_json(pexels_search_query="")), photos=photos)
        self.assertFalse(out["has_image"])
        self.assertEqual(out["warnings"], [])
        self.assertEqual(session.calls, [])

    def test_word_count_falls_back_to_counted_body(self):
        raw = article_json(word_count=None, pexels_search_query="")
        out = generate_content(self.topic.pk, client=FakeChat(raw), photos=self._photos())
        content = BlogContent.objects.get(pk=out["content_id"])
        self.assertGreater(content.word_count, 0)
        self.assertLess(content.word_count, 50)

    def test_long_meta_title_is_trimmed(self):
        raw = article_json(meta_title="A" * 75, pexels_search_query="")
        out = generate_content(self.topic.pk, client=FakeChat(raw), photos=self._photos())
        content = BlogContent.objects.get(pk=out["content_id"])
        self.assertEqual(content.meta_title, "A" * 57 + "...")

    def test_topic_must_be_approved(self):
        pending = make_topic(self.country, status=TopicStatus.PENDING)
        with self.assertRaises(InvalidState):
            generate_content(pending.pk, client=FakeChat(article_json()), photos=self._photos())

    def test_topic_already_generating_is_invalid_state(self):
        BlogTopic.objects.filter(pk=self.topic.pk).update(status=TopicStatus.GENERATING)
        chat = FakeChat(article_json())
        with self.assertRaises(InvalidState):
            generate_content(self.topic.pk, client=chat, photos=self._photos())
        self.assertEqual(chat.calls, [])
        self.assertEqual(BlogContent.objects.count(), 0)

    def test_lost_claim_is_invalid_state(self):
        real_filter = BlogTopic.objects.filter

        def racing_filter(*args, **kwargs):
            # Another worker claims the topic between our read and our update.
            if kwargs.get("status") == TopicStatus.APPROVED:
                BlogTopic.objects.all().update(status=TopicStatus.GENERATING)
            return real_filter(*args, **kwargs)

        with mock.patch.object(BlogTopic.objects, "filter", side_effect=racing_filter):
            with self.assertRaises(InvalidState):
                generate_content(self.topic.pk, client=FakeChat(article_json()), photos=self._photos())

    def test_generation_failure_leaves_topic_generating(self):
        with self.assertRaises(GenerationFailed):
            generate_content(self.topic.pk, client=FakeChat(error=GenerationFailed("timeout")), photos=self._photos())
        self.topic.refresh_from_db()
        self.assertEqual(self.topic.status, TopicStatus.GENERATING)
        self.assertEqual(BlogContent.objects.count(), 0)

    def test_article_without_content_is_malformed(self):
        with self.assertRaises(MalformedResponse):
            generate_content(
                self.topic.pk,
                client=FakeChat(json.dumps({"meta_title": "only meta"})),
                photos=self._photos(),
            )
        self.topic.refresh_from_db()
        self.assertEqual(self.topic.status, TopicStatus.GENERATING)

    def test_unknown_topic(self):
        with self.assertRaises(NotFound):
            generate_content(555555, client=FakeChat(article_json()), photos=self._photos())
