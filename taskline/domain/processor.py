"""Per-message orchestration: idempotency guard, pipeline run, outcome persistence."""

import sys
from datetime import date, datetime
from typing import Callable, Optional, Tuple

from taskline.config import KEYWORDS, KeywordConfig, local_now
from taskline.domain.classifier import classify
from taskline.domain.dispatcher import ActionDispatcher
from taskline.domain.errors import AlreadyProcessed, UnexpectedError
from taskline.domain.extractor import extract_entities
from taskline.domain.models import Classification, ExtractedData, ProcessingResult
from taskline.domain.normalizer import normalize
from taskline.domain.resolver import TaskResolver
from taskline.ports.inbound import IncomingMessage
from taskline.ports.outbound import (
    ChannelResolver,
    MessageRepositoryPort,
    NotificationPort,
    TaskRepositoryPort,
    UserDirectoryPort,
)


OUTCOME_SAVE_ATTEMPTS = 3


def _log(msg: str):
    print(msg, file=sys.stderr)


def parse_message(
    text: str,
    today: Optional[date] = None,
    keywords: KeywordConfig = KEYWORDS,
) -> Tuple[Classification, ExtractedData]:
    """Normalize, extract and classify. No I/O."""
    extracted = extract_entities(text, today=today, keywords=keywords)
    return classify(normalize(text), extracted, keywords), extracted


def already_processed_result() -> ProcessingResult:
    error = AlreadyProcessed()
    return ProcessingResult(success=False, error=error.message, error_code=error.code)


class MessageProcessor:
    """Runs the parsing pipeline at most once per stored message."""

    def __init__(
        self,
        messages: MessageRepositoryPort,
        users: UserDirectoryPort,
        tasks: TaskRepositoryPort,
        channels: ChannelResolver,
        notifier: NotificationPort,
        clock: Callable[[], datetime] = local_now,
        keywords: KeywordConfig = KEYWORDS,
    ):
        self._messages = messages
        self._users = users
        self._tasks = tasks
        self._channels = channels
        self._notifier = notifier
        self._clock = clock
        self._keywords = keywords

    def parse(self, text: str) -> Tuple[Classification, ExtractedData]:
        return parse_message(text, today=self._clock().date(), keywords=self._keywords)

    def process(self, message_id: int) -> ProcessingResult:
        """Process one message. Raises MessageNotFound for unknown ids."""
        message = self._messages.get(message_id)
        if message.processed or not self._messages.claim(message_id):
            _log(f"[MessageProcessor] message {message_id} already processed or claimed, skipping")
            return already_processed_result()

        # re-read under the claim; a previous holder may have linked a task
        message = self._messages.get(message_id)
        if message.task_id is not None:
            result = self._recover(message)
        else:
            result = self._run(message)
        return self._persist(message, result)

    def retry(self, message_id: int) -> ProcessingResult:
        """Clear a failed message's recorded outcome and process it again."""
        message = self._messages.get(message_id)
        if message.processed:
            return already_processed_result()
        if message.task_id is None:
            self._messages.reset(message_id)
        return self.process(message_id)

    def _recover(self, message: IncomingMessage) -> ProcessingResult:
        """Finish a message whose task was committed by an earlier attempt."""
        _log(f"[MessageProcessor] message {message.id} already produced task {message.task_id}, finishing")
        return ProcessingResult(
            success=True,
            intent_type=message.intent_type,
            confidence_score=message.confidence_score,
            extracted_data=dict(message.parsed_content),
            task=self._tasks.get(message.task_id),
        )

    def _run(self, message: IncomingMessage) -> ProcessingResult:
        classification = None
        try:
            classification, extracted = self.parse(message.text)
            _log(
                f"[MessageProcessor] message {message.id}: "
                f"{classification.intent} ({classification.confidence:.2f})"
            )
            dispatcher = ActionDispatcher(
                resolver=TaskResolver(self._users, self._tasks, message.workspace_id, self._keywords),
                tasks=self._tasks,
                channel=self._channels.channel_for(message.channel_external_id),
                notifier=self._notifier,
                clock=self._clock,
            )
            return dispatcher.dispatch(message, classification, extracted)
        except Exception as e:
            _log(f"[MessageProcessor] message {message.id} crashed: {e!r}")
            error = UnexpectedError.wrap(e)
            return ProcessingResult(
                success=False,
                intent_type=classification.intent if classification else None,
                confidence_score=classification.confidence if classification else None,
                error=error.message,
                error_code=error.code,
            )

    def _persist(self, message: IncomingMessage, result: ProcessingResult) -> ProcessingResult:
        if result.success:
            return self._save_success(message, result)
        _log(f"[MessageProcessor] message {message.id} failed: {result.error}")
        try:
            self._messages.record_failure(
                message.id,
                result.error or "",
                intent_type=result.intent_type,
                confidence_score=result.confidence_score,
            )
        except Exception as e:
            # the claim stays held until it goes stale
            _log(f"[MessageProcessor] recording failure of message {message.id} failed: {e!r}")
        return result

    def _save_success(self, message: IncomingMessage, result: ProcessingResult) -> ProcessingResult:
        task_id = result.task.id if result.task else message.task_id
        last_error = None
        for attempt in range(1, OUTCOME_SAVE_ATTEMPTS + 1):
            try:
                self._messages.mark_processed(
                    message.id,
                    intent_type=result.intent_type,
                    confidence_score=result.confidence_score,
                    parsed_content=result.extracted_data,
                    task_id=task_id,
                )
                return result
            except Exception as e:
                last_error = e
                _log(
                    f"[MessageProcessor] saving outcome of message {message.id} failed "
                    f"(attempt {attempt}/{OUTCOME_SAVE_ATTEMPTS}): {e!r}"
                )

        error = UnexpectedError.wrap(last_error)
        try:
            # a committed task keeps the claim; the next holder finishes it via _recover
            self._messages.record_failure(
                message.id,
                error.message,
                intent_type=result.intent_type,
                confidence_score=result.confidence_score,
                parsed_content=result.extracted_data,
                task_id=task_id,
                release=task_id is None,
            )
        except Exception as inner:
            _log(f"[MessageProcessor] recording failure of message {message.id} failed: {inner!r}")
        return ProcessingResult(
            success=False,
            intent_type=result.intent_type,
            confidence_score=result.confidence_score,
            extracted_data=result.extracted_data,
            task=result.task,
            error=error.message,
            error_code=error.code,
        )
