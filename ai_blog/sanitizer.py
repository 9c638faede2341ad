# -*- coding: utf-8 -*-
"""
AI Blog — response sanitizer.

The single validation boundary between raw LLM text and the database.
Everything the models say passes through here before it is stored:

- strip Markdown code fences and parse the JSON object
- recover the complete records from a truncated array response
- coerce numerics (never NaN / inf / "1,500"), enums, lists and link objects
- enforce meta title / description limits and compute URL-safe slugs

CHANGE LOG
----------
2025-11-06 • Truncated-array recovery: keep every complete topic before the cut.
2025-11-05 • coerce_int accepts "1,500" and "12 searches"; bounds are clamped.
2025-11-02 • Initial version; fence stripping + slug logic carried over from the
             post generator helpers.
"""

from __future__ import annotations

import json
import logging
import math
import re
import unicodedata
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import MalformedResponse

logger = logging.getLogger(__name__)

CATEGORIES: Tuple[str, ...] = (
    "visa_procedures",
    "travel_planning",
    "practical_info",
    "culture",
    "comparison",
)
DEFAULT_CATEGORY = "practical_info"

SEARCH_INTENTS: Tuple[str, ...] = ("informational", "commercial", "transactional", "navigational")
DEFAULT_SEARCH_INTENT = "informational"

DEFAULT_WORD_COUNT = 1500
DEFAULT_PRIORITY = 5
DEFAULT_DATA_SOURCE = "ai_generated"

META_TITLE_MAX = 60
META_DESCRIPTION_MAX = 160
PREVIEW_CHARS = 500

_NUMBER = re.compile(r"[-+]?\d+(?:\.\d+)?")


# ---------------------------------------------------------------------------
# Raw text → JSON
# ---------------------------------------------------------------------------
def strip_code_fences(raw: str) -> str:
    """
    Remove surrounding ```json ... ``` fences if the model returns them.
    Some Chat Completions models still wrap JSON this way even in JSON mode.
    """
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines and lines[0].lstrip().startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def _recover_array(text: str, array_field: str) -> List[Any]:
    """
    Decode the complete elements of ``array_field`` in order, stopping at the
    first element that is cut off or broken.
    """
    match = re.search(r'"%s"\s*:\s*\[' % re.escape(array_field), text)
    if match:
        pos = match.end()
    elif text.lstrip().startswith("["):
        pos = text.index("[") + 1
    else:
        return []

    decoder = json.JSONDecoder()
    items: List[Any] = []
    while True:
        while pos < len(text) and text[pos] in " \t\r\n,":
            pos += 1
        if pos >= len(text) or text[pos] == "]":
            break
        try:
            obj, pos = decoder.raw_decode(text, pos)
        except ValueError:
            break
        items.append(obj)
    return items


def parse_json_object(raw: Optional[str], array_field: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse an LLM response into a JSON object.

    Strict parse first; then the outermost ``{...}`` slice; then, when
    ``array_field`` is given, truncated-array recovery. A bare array root is
    wrapped as ``{array_field: [...]}``. Raises MalformedResponse with a short
    preview of the text when nothing usable is found.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedResponse("empty response from model", {"preview": ""})

    text = strip_code_fences(raw)
    data: Any = None
    try:
        data = json.loads(text)
    except ValueError:
        start, end = text.find("{"), text.rfind("}")
        if 0 <= start < end:
            try:
                data = json.loads(text[start:end + 1])
            except ValueError:
                data = None
        # A slice of a truncated array is one of its items, not the envelope.
        if array_field and isinstance(data, dict) and array_field not in data:
            data = None

    if isinstance(data, dict):
        return data
    if isinstance(data, list) and array_field:
        return {array_field: data}

    if data is None and array_field:
        items = _recover_array(text, array_field)
        if items:
            logger.warning(
                "[AIB] Recovered %d complete %s from a truncated response (len=%d)",
                len(items), array_field, len(text),
            )
            envelope = json.dumps({array_field: items}, ensure_ascii=False)
            return json.loads(envelope)

    raise MalformedResponse(
        "could not parse JSON object from model response",
        {"preview": text[:PREVIEW_CHARS]},
    )


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------
def coerce_int(
    value: Any,
    default: int,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    """
    Best-effort integer: null, empty, non-numeric, NaN and ±inf fall back to
    ``default``; "1,500" → 1500, "12 searches" → 12. Clamped to the bounds.
    """
    number: Optional[float] = None
    if isinstance(value, bool):
        number = None
    elif isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMBER.search(value.replace(",", "").strip())
        if match:
            number = float(match.group())

    if number is None or not math.isfinite(number):
        result = default
    else:
        result = int(number)

    if minimum is not None and result < minimum:
        result = minimum
    if maximum is not None and result > maximum:
        result = maximum
    return result


def coerce_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def coerce_choice(value: Any, allowed: Sequence[str], default: str, field: str = "value") -> str:
    """Return ``value`` if it is one of ``allowed``; otherwise log and use ``default``."""
    candidate = value.strip().lower() if isinstance(value, str) else value
    if candidate in allowed:
        return candidate
    if candidate not in (None, ""):
        logger.warning("[AIB] Invalid %s %r from model; using %r", field, value, default)
    return default


def coerce_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def coerce_str_list(value: Any) -> List[str]:
    out = []
    for item in coerce_list(value):
        text = coerce_str(item)
        if text:
            out.append(text)
    return out


def coerce_link_list(value: Any, keys: Iterable[str]) -> List[Dict[str, str]]:
    """Keep only dict entries, reduced to ``keys`` with string values."""
    keys = tuple(keys)
    out = []
    for item in coerce_list(value):
        if not isinstance(item, dict):
            continue
        out.append({k: coerce_str(item.get(k)) for k in keys})
    return out


def compute_slug(title: str) -> str:
    """URL-safe, lowercase slug; Turkish dotless i is folded to ascii first."""
    t = (title or "").strip().replace("ı", "i").replace("İ", "i").lower()
    t = re.sub(r"<[^>]+>", "", t)
    t = unicodedata.normalize("NFKD", t)
    t = "".join(ch for ch in t if not unicodedata.combining(ch))
    t = re.sub(r"[^\w\s-]+", "", t)
    t = re.sub(r"[\s_]+", "-", t)
    t = re.sub(r"-+", "-", t)
    t = t.strip("-")
    return t or "post"


def enforce_meta_limits(meta_title: str, meta_description: str) -> Tuple[str, str]:
    """
    Meta title ≤ 60 chars (cut to 57 + "..."), meta description ≤ 160 chars.
    """
    t = (meta_title or "").strip()
    if len(t) > META_TITLE_MAX:
        t = t[:META_TITLE_MAX - 3].rstrip() + "..."
    d = (meta_description or "").strip()
    if len(d) > META_DESCRIPTION_MAX:
        d = d[:META_DESCRIPTION_MAX - 3].rstrip() + "..."
    return t, d


# ---------------------------------------------------------------------------
# Typed records
# ---------------------------------------------------------------------------
@dataclass
class TopicDraft:
    title: str
    title_en: str
    slug: str
    description: str = ""
    category: str = DEFAULT_CATEGORY
    search_intent: str = DEFAULT_SEARCH_INTENT
    content_angle: str = ""
    target_keywords: List[str] = field(default_factory=list)
    estimated_search_volume: int = 0
    keyword_difficulty: int = 0
    target_word_count: int = DEFAULT_WORD_COUNT
    outline: List[str] = field(default_factory=list)
    internal_link_opportunities: List[Dict[str, str]] = field(default_factory=list)
    priority: int = DEFAULT_PRIORITY
    reasoning: str = ""
    data_source: str = DEFAULT_DATA_SOURCE

    def as_model_fields(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ArticleDraft:
    body: str
    meta_title: str
    meta_description: str
    internal_links: List[Dict[str, str]] = field(default_factory=list)
    image_query: str = ""
    image_alt: str = ""
    word_count: int = 0
    readability_score: int = 0
    seo_score: int = 0


def sanitize_topic(raw: Dict[str, Any]) -> TopicDraft:
    """Turn one raw topic object into a TopicDraft; raises MalformedResponse without a title."""
    if not isinstance(raw, dict):
        raise MalformedResponse("topic entry is not an object", {"preview": str(raw)[:PREVIEW_CHARS]})
    title = coerce_str(raw.get("title"))
    if not title:
        raise MalformedResponse("topic entry has no title", {"keys": sorted(raw)[:20]})
    title_en = coerce_str(raw.get("title_en")) or title
    slug = compute_slug(coerce_str(raw.get("slug")) or title_en)

    return TopicDraft(
        title=title[:255],
        title_en=title_en[:255],
        slug=slug[:255],
        description=coerce_str(raw.get("description")),
        category=coerce_choice(raw.get("category"), CATEGORIES, DEFAULT_CATEGORY, field="category"),
        search_intent=coerce_choice(
            raw.get("search_intent"), SEARCH_INTENTS, DEFAULT_SEARCH_INTENT, field="search_intent"
        ),
        content_angle=coerce_str(raw.get("content_angle")),
        target_keywords=coerce_str_list(raw.get("target_keywords")),
        estimated_search_volume=coerce_int(raw.get("estimated_search_volume"), 0, minimum=0),
        keyword_difficulty=coerce_int(raw.get("keyword_difficulty"), 0, minimum=0, maximum=100),
        target_word_count=coerce_int(raw.get("target_word_count"), DEFAULT_WORD_COUNT, minimum=300, maximum=6000),
        outline=coerce_str_list(raw.get("outline")),
        internal_link_opportunities=coerce_link_list(raw.get("internal_link_opportunities"), ("anchor", "context")),
        priority=coerce_int(raw.get("priority"), DEFAULT_PRIORITY, minimum=1, maximum=10),
        reasoning=coerce_str(raw.get("reasoning")),
        data_source=coerce_str(raw.get("data_source")) or DEFAULT_DATA_SOURCE,
    )


def sanitize_topics(items: Any) -> List[TopicDraft]:
    """Sanitize a list of raw topics, dropping entries that cannot be used."""
    drafts = []
    for index, raw in enumerate(coerce_list(items)):
        try:
            drafts.append(sanitize_topic(raw))
        except MalformedResponse as exc:
            logger.warning("[AIB] Skipping topic #%d: %s", index, exc.message)
    return drafts


def sanitize_article(raw: Dict[str, Any], fallback_title: str = "", fallback_description: str = "") -> ArticleDraft:
    """Turn the raw article object into an ArticleDraft; the HTML body is required."""
    body = coerce_str(raw.get("content")) or coerce_str(raw.get("body"))
    if not body:
        raise MalformedResponse("article response has no content", {"keys": sorted(raw)[:20]})

    meta_title, meta_description = enforce_meta_limits(
        coerce_str(raw.get("meta_title")) or fallback_title,
        coerce_str(raw.get("meta_description")) or fallback_description,
    )
    return ArticleDraft(
        body=body,
        meta_title=meta_title,
        meta_description=meta_description,
        internal_links=coerce_link_list(raw.get("internal_links"), ("url", "anchor", "position", "context")),
        image_query=coerce_str(raw.get("pexels_search_query")) or coerce_str(raw.get("image_query")),
        image_alt=coerce_str(raw.get("image_alt_text")),
        word_count=coerce_int(raw.get("word_count"), 0, minimum=0),
        readability_score=coerce_int(raw.get("readability_score"), 0, minimum=0, maximum=100),
        seo_score=coerce_int(raw.get("seo_score"), 0, minimum=0, maximum=100),
    )
