"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

# Intent labels
TASK_CREATION = "task_creation"
TASK_COMPLETION = "task_completion"
TASK_ASSIGNMENT = "task_assignment"
STATUS_INQUIRY = "status_inquiry"
GENERAL_MESSAGE = "general_message"

INTENTS = (TASK_CREATION, TASK_COMPLETION, TASK_ASSIGNMENT, STATUS_INQUIRY, GENERAL_MESSAGE)

PRIORITIES = ("low", "medium", "high")
TASK_STATUSES = ("pending", "in_progress", "completed", "cancelled")


@dataclass
class User:
    id: int
    display_name: str
    email: str = ""


@dataclass
class Task:
    id: int
    workspace_id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: str = "medium"  # "low" | "medium" | "high"
    status: str = "pending"  # "pending" | "in_progress" | "completed" | "cancelled"
    assignee_id: Optional[int] = None
    created_via_channel: bool = False
    source_message_id: Optional[int] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def is_overdue(self, today: date) -> bool:
        return self.due_date is not None and self.due_date < today and self.status != "completed"


@dataclass
class TaskDraft:
    """Fields for a task that does not exist yet."""

    workspace_id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: str = "medium"
    assignee_id: Optional[int] = None
    created_via_channel: bool = True
    source_message_id: Optional[int] = None


@dataclass
class ExtractedData:
    """Structured candidates pulled out of one message."""

    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[date] = None
    priority: str = "medium"
    mentions: List[str] = field(default_factory=list)
    completed_title: Optional[str] = None

    @property
    def has_title(self) -> bool:
        return bool(self.title)

    @property
    def has_deadline(self) -> bool:
        return self.deadline is not None

    @property
    def has_mentions(self) -> bool:
        return bool(self.mentions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "priority": self.priority,
            "mentions": list(self.mentions),
            "completed_title": self.completed_title,
            "has_title": self.has_title,
            "has_deadline": self.has_deadline,
            "has_mentions": self.has_mentions,
        }


@dataclass
class Classification:
    intent: str
    confidence: float


@dataclass
class StatusSummary:
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "pending": self.pending,
            "in_progress": self.in_progress,
            "completed": self.completed,
            "overdue": self.overdue,
        }


@dataclass
class ProcessingResult:
    """Outcome of one pipeline run over a single message."""

    success: bool
    intent_type: Optional[str] = None
    confidence_score: Optional[float] = None
    extracted_data: Dict[str, Any] = field(default_factory=dict)
    task: Optional[Task] = None
    error: Optional[str] = None
    error_code: Optional[str] = None  # e.g. "MissingTitle", "TaskNotFound"
    resolved_user: Optional[User] = None
    status_summary: Optional[StatusSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "intent_type": self.intent_type,
            "confidence_score": self.confidence_score,
            "extracted_data": dict(self.extracted_data),
            "task_id": self.task.id if self.task else None,
            "task_title": self.task.title if self.task else None,
            "error": self.error,
            "error_code": self.error_code,
            "resolved_user_id": self.resolved_user.id if self.resolved_user else None,
            "status_summary": self.status_summary.to_dict() if self.status_summary else None,
        }
