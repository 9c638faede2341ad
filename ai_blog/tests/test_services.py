"""
CHANGE LOG
- 2025-11-05 — Chat wrapper: errors/empty content → GenerationFailed; token usage kept.
- 2025-11-04 — Pexels client + cover storage (no network, no disk).
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest import mock

import requests
from django.core.files.storage import InMemoryStorage
from django.test import SimpleTestCase, override_settings

from ai_blog.errors import EnrichmentFailed, GenerationFailed
from ai_blog.services.openai_client import ChatClient
from ai_blog.services.pexels import PexelsClient
from ai_blog.services.storage import upload_cover

from .fakes import FakeSession, pexels_photo


def _response(content, total_tokens=321, model="gpt-4o-2024-08-06"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=total_tokens),
        model=model,
    )


class ChatClientTests(SimpleTestCase):
    def _client(self, **create_kwargs):
        sdk = mock.Mock()
        sdk.chat.completions.create = mock.Mock(**create_kwargs)
        return ChatClient(client=sdk, model="gpt-4o"), sdk

    def test_json_mode_call_and_usage(self):
        chat, sdk = self._client(return_value=_response('{"topics": []}'))
        out = chat.complete_json("sys", "user", temperature=0.8)

        self.assertEqual(out.text, '{"topics": []}')
        self.assertEqual(out.total_tokens, 321)
        self.assertEqual(out.model, "gpt-4o-2024-08-06")
        kwargs = sdk.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["response_format"], {"type": "json_object"})
        self.assertEqual(kwargs["temperature"], 0.8)
        self.assertEqual(kwargs["messages"][0], {"role": "system", "content": "sys"})

    def test_sdk_error_is_generation_failed(self):
        chat, _ = self._client(side_effect=RuntimeError("429 rate limited"))
        with self.assertLogs("ai_blog.services.openai_client", level="ERROR"):
            with self.assertRaises(GenerationFailed) as ctx:
                chat.complete_json("sys", "user")
        self.assertIn("429", ctx.exception.message)

    def test_empty_content_is_generation_failed(self):
        chat, _ = self._client(return_value=_response("   "))
        with self.assertRaises(GenerationFailed):
            chat.complete_json("sys", "user")

    @override_settings(OPENAI_API_KEY=None)
    def test_missing_api_key(self):
        with mock.patch.dict("os.environ", {"OPENAI_API_KEY": ""}):
            with self.assertRaises(GenerationFailed):
                ChatClient()


class PexelsClientTests(SimpleTestCase):
    def test_top_photo_sends_key_and_landscape(self):
        session = mock.Mock()
        session.get.return_value = mock.Mock(status_code=200, json=lambda: {"photos": [pexels_photo(7)]})
        photo = PexelsClient(api_key="px", session=session, timeout=3).top_photo("istanbul")

        self.assertEqual(photo.id, 7)
        self.assertEqual(photo.photographer, "Ayşe Kaya")
        _, kwargs = session.get.call_args
        self.assertEqual(kwargs["headers"], {"Authorization": "px"})
        self.assertEqual(kwargs["params"]["orientation"], "landscape")
        self.assertEqual(kwargs["timeout"], 3)

    def test_download_returns_bytes(self):
        client = PexelsClient(api_key="px", session=FakeSession())
        self.assertTrue(client.download(client.top_photo("x")).startswith(b"\xff\xd8"))

    def test_failures_are_enrichment_failed(self):
        with self.assertRaises(EnrichmentFailed):
            PexelsClient(api_key="px", session=FakeSession(error=requests.ConnectionError("dns"))).top_photo("x")
        with self.assertRaises(EnrichmentFailed):
            PexelsClient(api_key="px", session=FakeSession(photos=[])).top_photo("x")

    def test_unexpected_payload_shapes(self):
        with self.assertRaises(EnrichmentFailed):
            PexelsClient(api_key="px", session=FakeSession(payload=[pexels_photo()])).search("x")
        with self.assertRaises(EnrichmentFailed):
            PexelsClient(api_key="px", session=FakeSession(payload={"photos": {"id": 1}})).search("x")

        mixed = {"photos": [None, {"id": "abc", "src": {"large2x": "https://x/y.jpg"}}, {"src": []}, pexels_photo(9)]}
        photos = PexelsClient(api_key="px", session=FakeSession(payload=mixed)).search("x")
        self.assertEqual([p.id for p in photos], [9])

    @override_settings(PEXELS_API_KEY="")
    def test_missing_key(self):
        with mock.patch.dict("os.environ", {"PEXELS_API_KEY": ""}):
            with self.assertRaises(EnrichmentFailed):
                PexelsClient(session=FakeSession()).search("x")


class UploadCoverTests(SimpleTestCase):
    @override_settings(AI_BLOG_COVER_PREFIX="blog-covers", MEDIA_URL="/media/")
    def test_relative_url_is_made_absolute(self):
        url = upload_cover(b"jpeg", "amerika-vize", storage=InMemoryStorage(base_url="/media/"))
        self.assertTrue(url.startswith("https://www.kolayseyahat.net/media/blog-covers/amerika-vize-"))
        self.assertTrue(url.endswith(".jpg"))

    def test_storage_error_is_enrichment_failed(self):
        storage = mock.Mock()
        storage.save.side_effect = OSError("read-only file system")
        with self.assertRaises(EnrichmentFailed):
            upload_cover(b"jpeg", "x", storage=storage)
