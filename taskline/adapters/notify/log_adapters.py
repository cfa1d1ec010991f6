"""Stderr-logging channel and notification adapters.

Real chat-platform delivery lives outside this package; these adapters
implement the ports by writing what would have been sent to stderr.
"""

import sys
from typing import List, Optional

from taskline.domain.models import Task, User


def _log(msg: str):
    print(msg, file=sys.stderr)


class LogChannel:
    """ChannelPort that records and logs outgoing replies."""

    def __init__(self, channel_external_id: str):
        self.channel_external_id = channel_external_id
        self.sent: List[str] = []

    def send_message(self, text: str) -> bool:
        self.sent.append(text)
        _log(f"[LogChannel:{self.channel_external_id}] {text}")
        return True


class LogChannelResolver:
    def channel_for(self, channel_external_id: str) -> LogChannel:
        return LogChannel(channel_external_id)


class LogNotifier:
    """NotificationPort that logs task events."""

    def on_task_status_changed(self, task: Task, previous_status: str) -> None:
        _log(f"[LogNotifier] task {task.id} {task.title!r}: {previous_status} -> {task.status}")

    def on_task_assigned(self, task: Task, sender: Optional[User]) -> None:
        by = sender.display_name if sender else "unknown"
        _log(f"[LogNotifier] task {task.id} {task.title!r} assigned to user {task.assignee_id} by {by}")
