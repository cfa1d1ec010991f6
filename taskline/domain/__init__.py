"""Domain layer — parsing pipeline, no framework dependencies."""

from taskline.domain.classifier import RULES, IntentRule, classify
from taskline.domain.dispatcher import ActionDispatcher
from taskline.domain.extractor import (
    clean_title,
    extract_deadline,
    extract_entities,
    extract_mentions,
    extract_priority,
    extract_title,
)
from taskline.domain.normalizer import normalize
from taskline.domain.processor import MessageProcessor, parse_message
from taskline.domain.resolver import TaskResolver

__all__ = [
    "RULES",
    "IntentRule",
    "classify",
    "ActionDispatcher",
    "clean_title",
    "extract_deadline",
    "extract_entities",
    "extract_mentions",
    "extract_priority",
    "extract_title",
    "normalize",
    "MessageProcessor",
    "parse_message",
    "TaskResolver",
]
