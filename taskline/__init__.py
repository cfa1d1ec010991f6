"""Taskline — chat-message intent parser for festival task management."""

from taskline.config import CONFIG, KEYWORDS, AppConfig, KeywordConfig, __version__
from taskline.domain.models import ProcessingResult
from taskline.domain.processor import MessageProcessor, parse_message

__all__ = [
    "__version__",
    "CONFIG",
    "KEYWORDS",
    "AppConfig",
    "KeywordConfig",
    "MessageProcessor",
    "ProcessingResult",
    "parse_message",
]
