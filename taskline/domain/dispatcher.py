"""Intent → side effect.

One handler per intent performs the single authoritative mutation and
builds the result. Handlers raise ProcessingFailure subclasses; dispatch()
turns every exception into a failure result and never re-raises.
"""

import sys
from datetime import datetime
from typing import Callable, Dict, Optional

from taskline.config import local_now
from taskline.domain.errors import (
    MissingTitle,
    ProcessingFailure,
    TaskNotFound,
    UnexpectedError,
    UserNotFound,
)
from taskline.domain.models import (
    GENERAL_MESSAGE,
    STATUS_INQUIRY,
    TASK_ASSIGNMENT,
    TASK_COMPLETION,
    TASK_CREATION,
    Classification,
    ExtractedData,
    ProcessingResult,
    StatusSummary,
    TaskDraft,
)
from taskline.domain.replies import build_status_message
from taskline.domain.resolver import TaskResolver, first_match
from taskline.ports.inbound import IncomingMessage
from taskline.ports.outbound import ChannelPort, NotificationPort, TaskRepositoryPort


def _log(msg: str):
    print(msg, file=sys.stderr)


Handler = Callable[[IncomingMessage, Classification, ExtractedData], ProcessingResult]


class ActionDispatcher:
    """Executes the action for a classified message inside one workspace."""

    def __init__(
        self,
        resolver: TaskResolver,
        tasks: TaskRepositoryPort,
        channel: ChannelPort,
        notifier: NotificationPort,
        clock: Callable[[], datetime] = local_now,
    ):
        self._resolver = resolver
        self._tasks = tasks
        self._channel = channel
        self._notifier = notifier
        self._clock = clock
        self._handlers: Dict[str, Handler] = {
            TASK_CREATION: self._create,
            TASK_COMPLETION: self._complete,
            TASK_ASSIGNMENT: self._assign,
            STATUS_INQUIRY: self._inquire,
            GENERAL_MESSAGE: self._ignore,
        }

    def dispatch(
        self,
        message: IncomingMessage,
        classification: Classification,
        extracted: ExtractedData,
    ) -> ProcessingResult:
        handler = self._handlers.get(classification.intent, self._ignore)
        try:
            return handler(message, classification, extracted)
        except ProcessingFailure as e:
            return self._failure(classification, extracted, e)
        except Exception as e:
            _log(f"[ActionDispatcher] message {message.id} failed: {e!r}")
            return self._failure(classification, extracted, UnexpectedError.wrap(e))

    # ── handlers ────────────────────────────────────────────

    def _create(self, message, classification, data):
        if not data.title:
            raise MissingTitle()

        existing = self._tasks.find_by_source_message(message.id)
        if existing is not None:
            # an earlier attempt committed the task but not the message outcome
            _log(f"[ActionDispatcher] message {message.id} already created task {existing.id}")
            return self._success(classification, data, task=existing)

        sender = self._resolver.resolve_sender(message)
        assignee = self._resolver.find_mentioned_user(data.mentions) if data.mentions else None
        owner = assignee or sender

        task = self._tasks.create(
            TaskDraft(
                workspace_id=message.workspace_id,
                title=data.title,
                description=data.description or message.text,
                due_date=data.deadline,
                priority=data.priority,
                assignee_id=owner.id if owner else None,
                created_via_channel=True,
                source_message_id=message.id,
            )
        )
        _log(f"[ActionDispatcher] created task {task.id} {task.title!r} from message {message.id}")

        if assignee is not None and (sender is None or assignee.id != sender.id):
            self._fire("on_task_assigned", task, sender)

        return self._success(classification, data, task=task, resolved_user=owner)

    def _complete(self, message, classification, data):
        sender = self._resolver.resolve_sender(message)
        target = first_match(
            lambda: self._resolver.find_task_by_title(data.completed_title, open_only=True),
            lambda: self._resolver.find_recent_user_task(sender),
        )
        if target is None:
            raise TaskNotFound()

        previous_status = target.status
        task = self._tasks.mark_completed(target.id, self._clock())
        _log(f"[ActionDispatcher] completed task {task.id} ({previous_status} -> {task.status})")
        self._fire("on_task_status_changed", task, previous_status)

        return self._success(classification, data, task=task, resolved_user=sender)

    def _assign(self, message, classification, data):
        user = self._resolver.find_mentioned_user(data.mentions)
        if user is None:
            raise UserNotFound()
        return self._success(classification, data, resolved_user=user)

    def _inquire(self, message, classification, data):
        sender = self._resolver.resolve_sender(message)
        tasks = self._tasks.list_tasks(
            message.workspace_id,
            assignee_id=sender.id if sender else None,
        )
        today = self._clock().date()

        summary = StatusSummary()
        for task in tasks:
            if task.status == "pending":
                summary.pending += 1
            elif task.status == "in_progress":
                summary.in_progress += 1
            elif task.status == "completed":
                summary.completed += 1
            if task.is_overdue(today):
                summary.overdue += 1

        reply = build_status_message(summary)
        try:
            delivered = self._channel.send_message(reply)
            if not delivered:
                _log(f"[ActionDispatcher] status reply not delivered for message {message.id}")
        except Exception as e:
            _log(f"[ActionDispatcher] status reply failed for message {message.id}: {e}")

        result = self._success(classification, data, resolved_user=sender)
        result.status_summary = summary
        result.extracted_data["status_summary"] = summary.to_dict()
        return result

    def _ignore(self, message, classification, data):
        return ProcessingResult(
            success=True,
            intent_type=GENERAL_MESSAGE,
            confidence_score=classification.confidence,
        )

    # ── helpers ─────────────────────────────────────────────

    def _fire(self, event: str, *args) -> None:
        """Notification delivery never affects the result."""
        try:
            getattr(self._notifier, event)(*args)
        except Exception as e:
            _log(f"[ActionDispatcher] {event} notification failed: {e}")

    @staticmethod
    def _success(classification, data, task=None, resolved_user=None) -> ProcessingResult:
        return ProcessingResult(
            success=True,
            intent_type=classification.intent,
            confidence_score=classification.confidence,
            extracted_data=data.to_dict(),
            task=task,
            resolved_user=resolved_user,
        )

    @staticmethod
    def _failure(
        classification: Optional[Classification],
        data: Optional[ExtractedData],
        error: ProcessingFailure,
    ) -> ProcessingResult:
        return ProcessingResult(
            success=False,
            intent_type=classification.intent if classification else None,
            confidence_score=classification.confidence if classification else None,
            extracted_data=data.to_dict() if data else {},
            error=error.message,
            error_code=error.code,
        )
