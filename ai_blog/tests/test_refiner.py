"""
CHANGE LOG
- 2025-11-14 — Refine stage: body rewrite in review, metrics refreshed, density warning.
"""

from __future__ import annotations

import json

from django.test import TestCase

from ai_blog.errors import InvalidState, MalformedResponse, NotFound, ValidationFailed
from ai_blog.models import BlogContent
from ai_blog.services.refiner import refine_content
from ai_blog.status import ContentStatus

from .fakes import FakeChat, make_content, make_country

REFINED_BODY = (
    "<p>Başvuru öncesi belgeleri hazırlayın. "
    '<a href="https://www.kolayseyahat.net/amerika">Amerika vize rehberimize</a> göz atabilirsiniz.</p>'
)


def refined_json(**overrides) -> str:
    data = {"content": REFINED_BODY, "meta_title": "Daha iyi başlık", "meta_description": "Daha iyi özet."}
    data.update(overrides)
    return json.dumps(data, ensure_ascii=False)


class RefineContentTests(TestCase):
    def setUp(self):
        self.country = make_country()
        self.content = make_content(self.country, status=ContentStatus.REVIEW, generation_tokens=1000)

    def test_rewrites_body_and_refreshes_metrics(self):
        chat = FakeChat(refined_json())
        out = refine_content(self.content.pk, "Daha samimi yaz.", client=chat)

        self.assertEqual(out["content_id"], self.content.pk)
        self.assertEqual(out["tokens_used"], 1234)
        self.assertEqual(out["main_page_links_count"], 1)
        self.assertEqual(out["warnings"], [])
        self.assertIn("Daha samimi yaz.", chat.calls[0]["user"])
        self.assertIn("Amerika vizesi rehberi.", chat.calls[0]["user"])

        self.content.refresh_from_db()
        self.assertEqual(self.content.body, REFINED_BODY)
        self.assertEqual(self.content.meta_title, "Daha iyi başlık")
        self.assertEqual(self.content.word_count, out["word_count"])
        self.assertEqual(self.content.main_page_links_count, 1)
        self.assertEqual(self.content.generation_tokens, 2234)
        self.assertEqual(self.content.status, ContentStatus.REVIEW)

    def test_missing_meta_keeps_the_old_values(self):
        refine_content(self.content.pk, "Kısalt.", client=FakeChat(refined_json(meta_title="", meta_description=None)))
        self.content.refresh_from_db()
        self.assertEqual(self.content.meta_title, "Amerika Vize Rehberi")
        self.assertEqual(self.content.meta_description, "Bilmeniz gerekenler.")

    def test_keyword_stuffing_is_a_warning(self):
        stuffed = "<p>" + " ".join(["amerika vizesi"] * 10) + "</p>"
        out = refine_content(self.content.pk, "Anahtar kelime ekle.", client=FakeChat(refined_json(content=stuffed)))
        self.assertGreater(out["keyword_density"], 2.5)
        self.assertEqual(len(out["warnings"]), 1)
        self.assertIn("keyword density", out["warnings"][0])

    def test_only_review_content(self):
        approved = make_content(self.country, i=2)
        chat = FakeChat(refined_json())
        with self.assertRaises(InvalidState):
            refine_content(approved.pk, "x", client=chat)
        self.assertEqual(chat.calls, [])

    def test_input_errors(self):
        with self.assertRaises(ValidationFailed):
            refine_content(self.content.pk, "   ", client=FakeChat(refined_json()))
        with self.assertRaises(NotFound):
            refine_content(909090, "x", client=FakeChat(refined_json()))

    def test_empty_rewrite_leaves_body_untouched(self):
        with self.assertRaises(MalformedResponse):
            refine_content(self.content.pk, "x", client=FakeChat(json.dumps({"meta_title": "only"})))
        self.assertEqual(BlogContent.objects.get(pk=self.content.pk).body, "<p>Amerika vizesi rehberi.</p>")
