"""Inbound port — platform-agnostic chat message representation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ProcessingErrorEntry:
    timestamp: str  # ISO datetime
    message: str


@dataclass
class IncomingMessage:
    """LINE/Slack/Discord-agnostic message as stored by the receiver."""

    id: int
    workspace_id: int
    text: str
    sender_external_id: str
    channel_external_id: str
    timestamp: datetime
    external_message_id: str = ""
    processed: bool = False
    intent_type: Optional[str] = None
    confidence_score: Optional[float] = None
    parsed_content: Dict[str, Any] = field(default_factory=dict)
    processing_errors: List[ProcessingErrorEntry] = field(default_factory=list)
    task_id: Optional[int] = None
    claimed_at: Optional[datetime] = None  # set while a worker holds the message
