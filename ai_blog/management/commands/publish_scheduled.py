# -*- coding: utf-8 -*-
"""
CHANGE LOG
- 2025-11-12: Initial `publish_scheduled` command.
  Same sweep as /api/cron/auto-publish/, for hosts that run cron jobs
  against manage.py instead of calling the HTTP endpoint.
"""

from __future__ import annotations

from datetime import date

from django.core.management.base import BaseCommand, CommandError, CommandParser

from ai_blog.services.scheduler import publish_due


class Command(BaseCommand):
    help = "Publishes every approved auto-publish article whose scheduled date has come."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--date",
            default="",
            help="Treat this YYYY-MM-DD as today (default: today).",
        )

    def handle(self, *args, **opts) -> None:
        raw = str(opts.get("date") or "").strip()
        try:
            today = date.fromisoformat(raw) if raw else None
        except ValueError:
            raise CommandError(f"--date must be YYYY-MM-DD, got {raw!r}")

        result = publish_due(today=today)
        self.stdout.write(self.style.NOTICE(
            f"[publish_scheduled] date={result['date']} published={result['published_count']} "
            f"failed={result['failed_count']}"
        ))
        for item in result["published"]:
            self.stdout.write(self.style.SUCCESS(f"  ✓ content={item['content_id']} → {item['url']}"))
        for item in result["failed"]:
            self.stdout.write(self.style.ERROR(f"  ✗ content={item['content_id']}: {item['error']}"))
