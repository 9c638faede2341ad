# -*- coding: utf-8 -*-
"""
AI Blog — prompt builders for the planner and the article generator.

Each builder returns ``(system_prompt, user_prompt)``. The prompts ask for a
single JSON object; the sanitizer copes when the model does not comply.
"""

from __future__ import annotations

import json
import textwrap
from typing import Iterable, Optional, Sequence, Tuple

from django.conf import settings

# Soft targets; the model is told the mix, nothing enforces it afterwards.
CATEGORY_DISTRIBUTION: Tuple[Tuple[str, int, str], ...] = (
    ("visa_procedures", 30, "applications, interviews, documents, fees, refusal reasons"),
    ("travel_planning", 35, "city guides, itineraries, accommodation, transport"),
    ("practical_info", 20, "money, internet, safety, health, shopping"),
    ("culture", 10, "food, customs, etiquette"),
    ("comparison", 5, "top-10 lists, comparisons"),
)

_TOPIC_EXAMPLE = {
    "title": "New York'ta 3 Gün: Günlük 100 Dolara Gezi Planı",
    "title_en": "3 Days in New York: $100 Daily Budget Plan",
    "slug": "new-york-3-gun-100-dolar-gezi-plani",
    "description": "A budget-friendly three-day plan with free activities and saving tips.",
    "category": "travel_planning",
    "search_intent": "informational",
    "target_keywords": ["new york gezilecek yerler", "new york bütçe gezi"],
    "estimated_search_volume": 2400,
    "keyword_difficulty": 35,
    "content_angle": "practical_budget_guide",
    "target_word_count": 1800,
    "priority": 8,
    "outline": ["Introduction", "Day 1", "Day 2", "Day 3", "Budget summary"],
    "internal_link_opportunities": [{"anchor": "USA visa", "context": "Visa before the trip"}],
    "data_source": "ai_generated",
    "reasoning": "Popular city, practical and budget focused.",
}

PLANNER_SYSTEM = (
    "You are an SEO expert and travel content strategist for a visa consultancy. "
    "You respond with a single JSON object only, no commentary and no Markdown fences."
)

ARTICLE_SYSTEM = (
    "You are a professional travel writer for a visa consultancy blog. "
    "You write warm, practical, human-sounding articles in HTML. "
    "You respond with a single JSON object only, no commentary and no Markdown fences."
)


def _language() -> str:
    return getattr(settings, "AI_BLOG_CONTENT_LANGUAGE", "Turkish")


def country_url(country_slug: str) -> str:
    return f"{settings.AI_BLOG_SITE_URL}/{country_slug}"


def planner_prompt(
    country_name: str,
    country_slug: str,
    month: int,
    year: int,
    topic_count: int,
    existing_titles: Optional[Iterable[str]] = None,
) -> Tuple[str, str]:
    distribution = "\n".join(
        f"- {name} ({pct}%): {hint}" for name, pct, hint in CATEGORY_DISTRIBUTION
    )
    avoid = ""
    titles = [t for t in (existing_titles or []) if t]
    if titles:
        avoid = "\nALREADY PLANNED (do not repeat or paraphrase):\n" + "\n".join(f"- {t}" for t in titles) + "\n"

    user = textwrap.dedent(
        """\
        TASK: Create {count} blog topic ideas for {country}.

        CONTEXT:
        - Country page: {url}
        - Audience: travellers from Turkey who need a visa
        - Period: {month:02d}/{year}
        - Goal: organic traffic to the country page through internal links
        - Write title, description and outline in {language}; title_en in English.

        TITLE RULES: searchable, specific, practical; numbers or the year are welcome.
        Avoid vague titles like "Things to know about {country}".

        CATEGORY MIX ({count} topics, use only these category values):
        {distribution}
        {avoid}
        OUTPUT: {{"topics": [ ...{count} objects shaped like this example... ]}}
        {example}
        """
    ).format(
        count=topic_count,
        country=country_name,
        url=country_url(country_slug),
        month=month,
        year=year,
        language=_language(),
        distribution=distribution,
        avoid=avoid,
        example=json.dumps(_TOPIC_EXAMPLE, ensure_ascii=False, indent=2),
    )
    return PLANNER_SYSTEM, user


def article_prompt(
    title: str,
    country_name: str,
    country_slug: str,
    target_word_count: int,
    outline: Sequence[str],
    keywords: Sequence[str],
    link_opportunities: Sequence[dict] = (),
) -> Tuple[str, str]:
    outline_txt = "\n".join(f"{i}. {h}" for i, h in enumerate(outline, start=1)) or "(choose a sensible structure)"
    links_txt = "\n".join(
        f"- anchor: {o.get('anchor', '')} / context: {o.get('context', '')}" for o in link_opportunities
    ) or "- (pick 2-3 natural spots)"

    user = textwrap.dedent(
        """\
        TASK: Write the full blog article for the topic below in {language}.

        TOPIC: {title}
        COUNTRY: {country}
        TARGET LENGTH: about {words} words
        COUNTRY PAGE: {url}
        KEYWORDS (use naturally, density at most 2.5%): {keywords}

        OUTLINE:
        {outline}

        INTERNAL LINKS: 2-3 natural links to the country page, never a hard sell.
        {links}

        STYLE: friendly and first-hand; lists and tables where useful; do not mention AI.

        OUTPUT JSON keys:
        "content" (HTML body, no <html>/<body>), "meta_title" (<= 60 chars),
        "meta_description" (<= 160 chars), "internal_links" ([{{"url", "anchor", "position", "context"}}]),
        "pexels_search_query" (short English photo query), "image_alt_text",
        "word_count", "readability_score" (0-100), "seo_score" (0-100).
        """
    ).format(
        language=_language(),
        title=title,
        country=country_name,
        words=target_word_count,
        url=country_url(country_slug),
        keywords=", ".join(keywords) if keywords else "none",
        outline=outline_txt,
        links=links_txt,
    )
    return ARTICLE_SYSTEM, user


REFINE_SYSTEM = (
    "You are a professional content editor for a visa consultancy blog. "
    "You improve existing articles without keyword stuffing and keep them natural and SEO-friendly. "
    "You respond with a single JSON object only, no commentary and no Markdown fences."
)


def refine_prompt(
    body: str,
    instructions: str,
    country_name: str,
    country_slug: str,
    keywords: Sequence[str] = (),
) -> Tuple[str, str]:
    """Editor-driven rewrite of an existing article body."""
    user = textwrap.dedent(
        """\
        TASK: Improve the article below following the editor's instructions. Keep it in {language}.

        EDITOR INSTRUCTIONS:
        {instructions}

        COUNTRY: {country}
        COUNTRY PAGE: {url}
        KEYWORDS (use naturally, density at most 2.5%): {keywords}

        RULES:
        - No keyword stuffing.
        - 2-3 natural links to the country page, varied anchors, never spammy.
        - Friendly first-hand tone; do not mention AI.
        - Practical value: real examples, prices, steps.
        - Soft call to action for professional help, no sales pressure.

        CURRENT ARTICLE (HTML):
        {body}

        OUTPUT JSON keys:
        "content" (the full improved HTML body), "meta_title" (<= 60 chars), "meta_description" (<= 160 chars).
        """
    ).format(
        language=_language(),
        instructions=instructions,
        country=country_name,
        url=country_url(country_slug),
        keywords=", ".join(keywords) if keywords else "none",
        body=body,
    )
    return REFINE_SYSTEM, user
