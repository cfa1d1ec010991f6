"""Message parsing job — the caller of the processing pipeline.

Runs one stored message through MessageProcessor, logs the outcome and,
when enabled, posts a confirmation for created/completed tasks. Never
raises for processing failures; retry policy belongs to the queue.
"""

import sys
from typing import Optional

from sqlalchemy.orm import sessionmaker

from taskline.adapters.notify import LogChannelResolver, LogNotifier
from taskline.adapters.storage import SqlMessageRepository, SqlTaskRepository, SqlUserDirectory
from taskline.config import AppConfig
from taskline.domain.models import TASK_COMPLETION, TASK_CREATION, ProcessingResult
from taskline.domain.processor import MessageProcessor
from taskline.domain.replies import build_confirmation_message
from taskline.ports.outbound import (
    ChannelResolver,
    MessageRepositoryPort,
    NotificationPort,
    UserDirectoryPort,
)


def _log(msg: str):
    print(msg, file=sys.stderr)


class MessageParsingJob:
    def __init__(
        self,
        processor: MessageProcessor,
        messages: MessageRepositoryPort,
        users: UserDirectoryPort,
        channels: ChannelResolver,
        send_confirmations: bool = True,
    ):
        self.processor = processor
        self._messages = messages
        self._users = users
        self._channels = channels
        self._send_confirmations = send_confirmations

    def perform(self, message_id: int, retry: bool = False) -> ProcessingResult:
        """Process (or retry) one message. Raises MessageNotFound for unknown ids."""
        _log(f"[MessageParsingJob] processing message {message_id}")
        if retry:
            result = self.processor.retry(message_id)
        else:
            result = self.processor.process(message_id)

        if not result.success:
            _log(f"[MessageParsingJob] message {message_id} not processed: {result.error}")
            return result

        _log(f"[MessageParsingJob] message {message_id} processed: {result.intent_type}")
        if result.task is not None and result.intent_type in (TASK_CREATION, TASK_COMPLETION):
            self._confirm(message_id, result)
        return result

    def _confirm(self, message_id: int, result: ProcessingResult) -> None:
        if not self._send_confirmations:
            return
        try:
            message = self._messages.get(message_id)
            assignee = self._users.get(result.task.assignee_id) if result.task.assignee_id else None
            text = build_confirmation_message(
                result.intent_type,
                result.task,
                assignee_name=assignee.display_name if assignee else None,
            )
            self._channels.channel_for(message.channel_external_id).send_message(text)
        except Exception as e:
            _log(f"[MessageParsingJob] confirmation for message {message_id} failed: {e}")


def build_job(
    session_factory: sessionmaker,
    config: Optional[AppConfig] = None,
    channels: Optional[ChannelResolver] = None,
    notifier: Optional[NotificationPort] = None,
    send_confirmations: Optional[bool] = None,
) -> MessageParsingJob:
    """Wire the SQL repositories and log adapters into a job."""
    config = config or AppConfig.from_env()
    messages = SqlMessageRepository(session_factory, claim_timeout=config.claim_timeout)
    users = SqlUserDirectory(session_factory)
    tasks = SqlTaskRepository(session_factory)
    channels = channels or LogChannelResolver()
    processor = MessageProcessor(
        messages=messages,
        users=users,
        tasks=tasks,
        channels=channels,
        notifier=notifier or LogNotifier(),
    )
    if send_confirmations is None:
        send_confirmations = config.send_confirmations
    return MessageParsingJob(processor, messages, users, channels, send_confirmations)
