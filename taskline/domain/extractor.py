"""Entity extraction — title, deadline, priority and mentions.

Pure functions over normalized message text, no I/O. Every function is
total: unmatched input yields None (or the documented default).
"""

import re
from datetime import date, timedelta
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Tuple

from taskline.config import KEYWORDS, KeywordConfig, local_today
from taskline.domain.models import ExtractedData
from taskline.domain.normalizer import normalize

MENTION_RE = re.compile(r"[@＠]\S+")

_SENTENCE_SPLIT_RE = re.compile(r"[。\n]")
_TITLE_SEPARATORS = " 、,，-"
_TRAILING_PUNCT = " 、,，。.！？!?"


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring test against a keyword table."""
    lowered = text.lower()
    return any(k.lower() in lowered for k in keywords)


def _earliest(text: str, keywords: Iterable[str]) -> Optional[Tuple[int, str]]:
    """Position and keyword of the leftmost hit; longest keyword on ties."""
    lowered = text.lower()
    best = None
    for keyword in keywords:
        idx = lowered.find(keyword.lower())
        if idx < 0:
            continue
        if best is None or idx < best[0] or (idx == best[0] and len(keyword) > len(best[1])):
            best = (idx, keyword)
    return best


# ── Title ───────────────────────────────────────────────────


def clean_title(title: Optional[str], keywords: KeywordConfig = KEYWORDS) -> Optional[str]:
    """Strip leading particles and trailing fillers until nothing changes."""
    if not title:
        return None
    fillers = set(keywords.leading_particles) | set(keywords.trailing_fillers)
    current = title
    while True:
        previous = current
        current = current.strip().rstrip(_TRAILING_PUNCT)
        for particle in keywords.leading_particles:
            if current.startswith(particle) and len(current) > len(particle):
                current = current[len(particle):].lstrip()
        for filler in keywords.trailing_fillers:
            if current.endswith(filler) and len(current) > len(filler):
                current = current[: -len(filler)].rstrip()
        if current == previous:
            break
    if not current or current in fillers:
        return None
    return current


def extract_title(text: str, keywords: KeywordConfig = KEYWORDS) -> Optional[str]:
    """Text after the first task marker, up to the end of its sentence."""
    hit = _earliest(text, keywords.task_markers)
    if hit is None:
        return None
    idx, marker = hit
    remainder = text[idx + len(marker):].lstrip(_TITLE_SEPARATORS)
    for i, ch in enumerate(remainder):
        if ch in keywords.sentence_terminators:
            remainder = remainder[:i]
            break
    return clean_title(remainder.strip(), keywords)


def extract_completed_title(text: str, keywords: KeywordConfig = KEYWORDS) -> Optional[str]:
    """Fragment preceding the first completion keyword, e.g. "音響チェック完了"."""
    hit = _earliest(text, keywords.completion)
    if hit is None:
        return None
    fragment = text[: hit[0]].strip().rstrip(_TRAILING_PUNCT)
    changed = True
    while fragment and changed:
        changed = False
        for particle in keywords.leading_particles:
            if fragment.endswith(particle) and len(fragment) > len(particle):
                fragment = fragment[: -len(particle)].rstrip()
                changed = True
    return fragment or None


def extract_description(raw_text: str) -> Optional[str]:
    """Sentences after the first one, joined by newlines."""
    parts = [p.strip() for p in _SENTENCE_SPLIT_RE.split(raw_text or "") if p.strip()]
    if len(parts) > 1:
        return "\n".join(parts[1:])
    return None


# ── Deadline ────────────────────────────────────────────────


@lru_cache(maxsize=8)
def _deadline_re(relative_days: Tuple[Tuple[str, int], ...]) -> Pattern:
    phrases = sorted((p for p, _ in relative_days), key=len, reverse=True)
    relative = "|".join(re.escape(p) for p in phrases)
    return re.compile(
        rf"(?P<relative>{relative})"
        r"|(?<!\d)(?P<month>\d{1,2})[/\-](?P<mday>\d{1,2})(?!\d)"
        r"|(?<!\d)(?P<day>\d{1,2})日"
    )


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def extract_deadline(
    text: str,
    today: Optional[date] = None,
    keywords: KeywordConfig = KEYWORDS,
) -> Optional[date]:
    """Leftmost date phrase in the text, resolved against today."""
    match = _deadline_re(keywords.relative_days).search(text or "")
    if match is None:
        return None
    today = today or local_today()

    if match.group("relative"):
        offsets = dict(keywords.relative_days)
        return today + timedelta(days=offsets[match.group("relative")])
    if match.group("month"):
        return _safe_date(today.year, int(match.group("month")), int(match.group("mday")))
    return _safe_date(today.year, today.month, int(match.group("day")))


# ── Priority / mentions ─────────────────────────────────────


def extract_priority(text: str, keywords: KeywordConfig = KEYWORDS) -> str:
    if contains_any(text, keywords.priority_high):
        return "high"
    if contains_any(text, keywords.priority_medium):
        return "medium"
    if contains_any(text, keywords.priority_low):
        return "low"
    return "medium"


def extract_mentions(text: str) -> List[str]:
    return MENTION_RE.findall(text or "")


def extract_entities(
    raw_text: str,
    today: Optional[date] = None,
    keywords: KeywordConfig = KEYWORDS,
) -> ExtractedData:
    """Run every extractor over one message."""
    text = normalize(raw_text)
    return ExtractedData(
        title=extract_title(text, keywords),
        description=extract_description(raw_text),
        deadline=extract_deadline(text, today, keywords),
        priority=extract_priority(text, keywords),
        mentions=extract_mentions(text),
        completed_title=extract_completed_title(text, keywords),
    )
