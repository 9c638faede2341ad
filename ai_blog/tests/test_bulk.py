"""
CHANGE LOG
- 2025-11-08 — Bulk fan-out: N−1 successes / 1 failure, delay between items only.
"""

from __future__ import annotations

from datetime import date

from django.test import SimpleTestCase, TestCase

from ai_blog.errors import GenerationFailed, NotFound, ValidationFailed
from ai_blog.models import BlogPlan
from ai_blog.services.bulk import bulk_create_plans, fan_out
from ai_blog.status import PlanStatus, TopicStatus

from .fakes import FakeChat, make_country, topics_json


class FanOutTests(SimpleTestCase):
    def test_failures_are_isolated_and_delay_sits_between_items(self):
        sleeps = []

        def step(n):
            if n == 2:
                raise NotFound("no such thing")
            if n == 3:
                raise RuntimeError("boom")
            return n * 10

        result = fan_out([1, 2, 3, 4], step, delay=0.5, sleep=sleeps.append)

        self.assertEqual(result.ok, [10, 40])
        self.assertEqual(
            result.failed,
            [
                {"subject": 2, "error": "no such thing", "code": "not_found"},
                {"subject": 3, "error": "boom", "code": "unexpected_error"},
            ],
        )
        self.assertEqual(sleeps, [0.5, 0.5, 0.5])

    def test_no_delay_for_single_item(self):
        sleeps = []
        fan_out(["only"], lambda x: x, delay=1.0, sleep=sleeps.append)
        self.assertEqual(sleeps, [])


class _FlakyChat(FakeChat):
    """Fails for the country whose name appears in ``fail_for``."""

    def __init__(self, fail_for, *texts):
        super().__init__(*texts)
        self.fail_for = fail_for

    def complete_json(self, system, user, temperature=0.7):
        if f"for {self.fail_for}." in user:
            raise GenerationFailed("rate limited")
        return super().complete_json(system, user, temperature)


class BulkCreatePlansTests(TestCase):
    def setUp(self):
        self.usa = make_country("Amerika", "amerika")
        self.uk = make_country("İngiltere", "ingiltere")
        self.de = make_country("Almanya", "almanya")

    def test_one_failure_does_not_stop_the_batch(self):
        chat = _FlakyChat("İngiltere", topics_json(2))
        sleeps = []
        report = bulk_create_plans(
            [self.usa.pk, self.uk.pk, self.de.pk], 4, 2025,
            topics_per_country=2, client=chat, sleep=sleeps.append, delay=0.25,
        )

        self.assertEqual(report["total_countries"], 3)
        self.assertEqual(report["total_topics_requested"], 6)
        self.assertEqual(len(report["created_plans"]), 2)
        self.assertEqual(report["total_topics_created"], 4)
        self.assertEqual(len(report["failed_countries"]), 1)
        failed = report["failed_countries"][0]
        self.assertEqual(failed["country_id"], self.uk.pk)
        self.assertEqual(failed["country_name"], "İngiltere")
        self.assertEqual(failed["code"], "generation_failed")
        self.assertEqual(sleeps, [0.25, 0.25])
        self.assertEqual(
            {p["country_name"] for p in report["created_plans"]},
            {"Amerika", "Almanya"},
        )
        for entry in report["created_plans"]:
            plan = BlogPlan.objects.get(pk=entry["plan_id"])
            self.assertEqual(plan.data_sources["method"], "bulk_creation")

    def test_unknown_country_is_reported_not_raised(self):
        report = bulk_create_plans(
            [self.usa.pk, 987654], 4, 2025, topics_per_country=1,
            client=FakeChat(topics_json(1)), sleep=lambda s: None,
        )
        self.assertEqual(len(report["created_plans"]), 1)
        self.assertEqual(report["failed_countries"][0]["code"], "not_found")

    def test_auto_approve_and_auto_schedule(self):
        report = bulk_create_plans(
            [self.usa.pk], 4, 2025, topics_per_country=2,
            auto_approve=True, auto_schedule=True,
            schedule_start_date="2025-04-10", schedule_frequency="weekly",
            client=FakeChat(topics_json(2)), sleep=lambda s: None,
        )
        self.assertTrue(report["auto_approved"])
        self.assertTrue(report["auto_scheduled"])
        plan = BlogPlan.objects.get(pk=report["created_plans"][0]["plan_id"])
        self.assertEqual(plan.status, PlanStatus.GENERATING)
        self.assertEqual(plan.approved_topics, 2)
        self.assertTrue(plan.auto_schedule)
        self.assertEqual(plan.start_publish_date, date(2025, 4, 10))
        self.assertEqual(plan.publish_frequency, "weekly")
        self.assertEqual(set(plan.topics.values_list("status", flat=True)), {TopicStatus.APPROVED})

    def test_input_validation(self):
        with self.assertRaises(ValidationFailed):
            bulk_create_plans([], 4, 2025, client=FakeChat(topics_json(1)))
        with self.assertRaises(ValidationFailed):
            bulk_create_plans([self.usa.pk], 4, 2025, auto_schedule=True, client=FakeChat(topics_json(1)))
        with self.assertRaises(ValidationFailed):
            bulk_create_plans([self.usa.pk], 4, 2025, schedule_frequency="hourly", client=FakeChat(topics_json(1)))
