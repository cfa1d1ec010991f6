"""Rule-based intent classification.

Rules are evaluated top to bottom and the first matching predicate wins,
so creation outranks completion, completion outranks assignment, and so
on. New intents are added by inserting an IntentRule into RULES.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from taskline.config import KEYWORDS, KeywordConfig
from taskline.domain.extractor import contains_any
from taskline.domain.models import (
    GENERAL_MESSAGE,
    STATUS_INQUIRY,
    TASK_ASSIGNMENT,
    TASK_COMPLETION,
    TASK_CREATION,
    Classification,
    ExtractedData,
)

GENERAL_CONFIDENCE = 0.1

Predicate = Callable[[str, ExtractedData, KeywordConfig], bool]
Scorer = Callable[[str, ExtractedData, KeywordConfig], float]


@dataclass(frozen=True)
class IntentRule:
    intent: str
    predicate: Predicate
    score: Scorer


def _creation_score(text: str, data: ExtractedData, kw: KeywordConfig) -> float:
    score = 0.45
    if data.has_title:
        score += 0.3
    if data.has_deadline:
        score += 0.2
    if data.has_mentions:
        score += 0.05
    return score


def _is_assignment(text: str, data: ExtractedData, kw: KeywordConfig) -> bool:
    return data.has_mentions and contains_any(text, kw.assignment)


def _assignment_score(text: str, data: ExtractedData, kw: KeywordConfig) -> float:
    return 0.5 if contains_any(text, kw.explicit_assignment) else 0.3


RULES: Sequence[IntentRule] = (
    IntentRule(
        TASK_CREATION,
        lambda text, data, kw: contains_any(text, kw.task_markers),
        _creation_score,
    ),
    IntentRule(
        TASK_COMPLETION,
        lambda text, data, kw: contains_any(text, kw.completion),
        lambda text, data, kw: 0.7,
    ),
    IntentRule(TASK_ASSIGNMENT, _is_assignment, _assignment_score),
    IntentRule(
        STATUS_INQUIRY,
        lambda text, data, kw: contains_any(text, kw.status),
        lambda text, data, kw: 0.6,
    ),
)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, round(value, 4)))


def classify(
    text: str,
    extracted: ExtractedData,
    keywords: KeywordConfig = KEYWORDS,
    rules: Sequence[IntentRule] = RULES,
) -> Classification:
    """Pick one intent for normalized *text*; falls back to general_message."""
    for rule in rules:
        if rule.predicate(text, extracted, keywords):
            return Classification(rule.intent, _clamp(rule.score(text, extracted, keywords)))
    return Classification(GENERAL_MESSAGE, GENERAL_CONFIDENCE)
