"""Outbound ports — interfaces for stores and chat-side collaborators."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from taskline.domain.models import Task, TaskDraft, User
from taskline.ports.inbound import IncomingMessage


@runtime_checkable
class ChannelPort(Protocol):
    """A chat conversation replies can be posted into."""

    def send_message(self, text: str) -> bool: ...


@runtime_checkable
class ChannelResolver(Protocol):
    def channel_for(self, channel_external_id: str) -> ChannelPort: ...


@runtime_checkable
class NotificationPort(Protocol):
    """Fire-and-forget task notifications."""

    def on_task_status_changed(self, task: Task, previous_status: str) -> None: ...
    def on_task_assigned(self, task: Task, sender: Optional[User]) -> None: ...


@runtime_checkable
class UserDirectoryPort(Protocol):
    def find_member(self, workspace_id: int, external_id: str) -> Optional[User]: ...
    def workspace_owner(self, workspace_id: int) -> Optional[User]: ...
    def list_members(self, workspace_id: int) -> List[User]: ...
    def get(self, user_id: int) -> Optional[User]: ...


@runtime_checkable
class TaskRepositoryPort(Protocol):
    def list_tasks(self, workspace_id: int, assignee_id: Optional[int] = None) -> List[Task]: ...
    def get(self, task_id: int) -> Optional[Task]: ...
    def find_by_source_message(self, message_id: int) -> Optional[Task]: ...
    def create(self, draft: TaskDraft) -> Task: ...
    def mark_completed(self, task_id: int, completed_at: datetime) -> Task: ...


@runtime_checkable
class MessageRepositoryPort(Protocol):
    def get(self, message_id: int) -> IncomingMessage: ...
    def claim(self, message_id: int) -> bool: ...
    def mark_processed(
        self,
        message_id: int,
        intent_type: Optional[str],
        confidence_score: Optional[float],
        parsed_content: Dict[str, Any],
        task_id: Optional[int],
    ) -> None: ...
    def record_failure(
        self,
        message_id: int,
        error: str,
        intent_type: Optional[str] = None,
        confidence_score: Optional[float] = None,
        parsed_content: Optional[Dict[str, Any]] = None,
        task_id: Optional[int] = None,
        release: bool = True,
    ) -> None: ...
    def reset(self, message_id: int) -> None: ...
