"""SQLAlchemy implementations of the storage ports."""

import sys
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskline.adapters.storage.orm import (
    STATE_PROCESSED,
    STATE_PROCESSING,
    STATE_UNPROCESSED,
    ChannelMemberRecord,
    MessageRecord,
    TaskRecord,
    UserRecord,
    WorkspaceRecord,
)
from taskline.config import CONFIG, local_now
from taskline.domain.errors import MessageNotFound, PersistenceFailure
from taskline.domain.models import PRIORITIES, Task, TaskDraft, User
from taskline.ports.inbound import IncomingMessage, ProcessingErrorEntry

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


def _log(msg: str):
    print(msg, file=sys.stderr)


def _to_user(row: UserRecord) -> User:
    return User(id=row.id, display_name=row.display_name or "", email=row.email or "")


def _to_task(row: TaskRecord) -> Task:
    return Task(
        id=row.id,
        workspace_id=row.workspace_id,
        title=row.title,
        description=row.description,
        due_date=row.due_date,
        priority=row.priority,
        status=row.status,
        assignee_id=row.assignee_id,
        created_via_channel=bool(row.created_via_channel),
        source_message_id=row.source_message_id,
        created_at=row.created_at,
        completed_at=row.completed_at,
    )


def _to_message(row: MessageRecord) -> IncomingMessage:
    return IncomingMessage(
        id=row.id,
        workspace_id=row.workspace_id,
        text=row.text,
        sender_external_id=row.sender_external_id,
        channel_external_id=row.channel_external_id,
        timestamp=row.timestamp,
        external_message_id=row.external_message_id or "",
        processed=row.state == STATE_PROCESSED,
        intent_type=row.intent_type,
        confidence_score=row.confidence_score,
        parsed_content=dict(row.parsed_content or {}),
        processing_errors=[
            ProcessingErrorEntry(timestamp=e.get("timestamp", ""), message=e.get("message", ""))
            for e in (row.processing_errors or [])
        ],
        task_id=row.task_id,
        claimed_at=row.claimed_at,
    )


def validate_draft(draft: TaskDraft) -> List[str]:
    """Validation messages for a task draft; empty when valid."""
    errors = []
    if not (draft.title or "").strip():
        errors.append("Title can't be blank")
    elif len(draft.title) > TITLE_MAX_LENGTH:
        errors.append(f"Title is too long (maximum is {TITLE_MAX_LENGTH} characters)")
    if draft.description and len(draft.description) > DESCRIPTION_MAX_LENGTH:
        errors.append(f"Description is too long (maximum is {DESCRIPTION_MAX_LENGTH} characters)")
    if draft.priority not in PRIORITIES:
        errors.append(f"Priority {draft.priority!r} is not valid")
    return errors


class SqlUserDirectory:
    """Read-only view over users, workspaces and channel members."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def find_member(self, workspace_id: int, external_id: str) -> Optional[User]:
        with self._session_factory() as db:
            row = (
                db.query(UserRecord)
                .join(ChannelMemberRecord, ChannelMemberRecord.user_id == UserRecord.id)
                .filter(
                    ChannelMemberRecord.workspace_id == workspace_id,
                    ChannelMemberRecord.external_id == external_id,
                )
                .first()
            )
            return _to_user(row) if row else None

    def workspace_owner(self, workspace_id: int) -> Optional[User]:
        with self._session_factory() as db:
            row = (
                db.query(UserRecord)
                .join(WorkspaceRecord, WorkspaceRecord.owner_user_id == UserRecord.id)
                .filter(WorkspaceRecord.id == workspace_id)
                .first()
            )
            return _to_user(row) if row else None

    def list_members(self, workspace_id: int) -> List[User]:
        with self._session_factory() as db:
            rows = (
                db.query(UserRecord)
                .join(ChannelMemberRecord, ChannelMemberRecord.user_id == UserRecord.id)
                .filter(ChannelMemberRecord.workspace_id == workspace_id)
                .order_by(UserRecord.id)
                .distinct()
                .all()
            )
            return [_to_user(r) for r in rows]

    def get(self, user_id: int) -> Optional[User]:
        with self._session_factory() as db:
            row = db.get(UserRecord, user_id)
            return _to_user(row) if row else None


class SqlTaskRepository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def list_tasks(self, workspace_id: int, assignee_id: Optional[int] = None) -> List[Task]:
        with self._session_factory() as db:
            query = db.query(TaskRecord).filter(TaskRecord.workspace_id == workspace_id)
            if assignee_id is not None:
                query = query.filter(TaskRecord.assignee_id == assignee_id)
            rows = query.order_by(TaskRecord.created_at.desc(), TaskRecord.id.desc()).all()
            return [_to_task(r) for r in rows]

    def get(self, task_id: int) -> Optional[Task]:
        with self._session_factory() as db:
            row = db.get(TaskRecord, task_id)
            return _to_task(row) if row else None

    def find_by_source_message(self, message_id: int) -> Optional[Task]:
        """Task created from the given incoming message, if any."""
        with self._session_factory() as db:
            row = (
                db.query(TaskRecord)
                .filter(TaskRecord.source_message_id == message_id)
                .order_by(TaskRecord.id)
                .first()
            )
            return _to_task(row) if row else None

    def create(self, draft: TaskDraft) -> Task:
        """Insert a task. Raises PersistenceFailure with validation messages."""
        errors = validate_draft(draft)
        if errors:
            raise PersistenceFailure(errors)

        with self._session_factory() as db:
            row = TaskRecord(
                workspace_id=draft.workspace_id,
                title=draft.title.strip(),
                description=draft.description,
                due_date=draft.due_date,
                priority=draft.priority,
                status="pending",
                assignee_id=draft.assignee_id,
                created_via_channel=draft.created_via_channel,
                source_message_id=draft.source_message_id,
            )
            try:
                db.add(row)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceFailure([str(getattr(e, "orig", None) or e)])
            db.refresh(row)
            return _to_task(row)

    def mark_completed(self, task_id: int, completed_at: datetime) -> Task:
        """Conditional status update; only tasks not yet completed transition."""
        with self._session_factory() as db:
            try:
                updated = (
                    db.query(TaskRecord)
                    .filter(TaskRecord.id == task_id, TaskRecord.status != "completed")
                    .update(
                        {"status": "completed", "completed_at": completed_at},
                        synchronize_session=False,
                    )
                )
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceFailure([str(getattr(e, "orig", None) or e)], prefix="Task update failed")
            if updated != 1:
                raise PersistenceFailure(
                    [f"task {task_id} is missing or already completed"],
                    prefix="Task update failed",
                )
            return _to_task(db.get(TaskRecord, task_id))


class SqlMessageRepository:
    """Incoming messages plus the atomic processing claim.

    A claim older than ``claim_timeout`` seconds is treated as abandoned by
    a dead worker and may be taken over by the next claim or reset.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Callable[[], datetime] = local_now,
        claim_timeout: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock
        if claim_timeout is None:
            claim_timeout = CONFIG["claim_timeout"]
        self._claim_timeout = timedelta(seconds=claim_timeout)

    def add(
        self,
        workspace_id: int,
        text: str,
        sender_external_id: str,
        channel_external_id: str,
        timestamp: Optional[datetime] = None,
        external_message_id: Optional[str] = None,
    ) -> IncomingMessage:
        """Store a message as delivered by the receiver."""
        with self._session_factory() as db:
            row = MessageRecord(
                workspace_id=workspace_id,
                text=text,
                sender_external_id=sender_external_id,
                channel_external_id=channel_external_id,
                timestamp=timestamp or self._clock(),
                external_message_id=external_message_id,
                state=STATE_UNPROCESSED,
                processing_errors=[],
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return _to_message(row)

    def get(self, message_id: int) -> IncomingMessage:
        with self._session_factory() as db:
            row = db.get(MessageRecord, message_id)
            if row is None:
                raise MessageNotFound(f"message {message_id} not found")
            return _to_message(row)

    def _claimable(self, now: datetime):
        return or_(
            MessageRecord.state == STATE_UNPROCESSED,
            and_(
                MessageRecord.state == STATE_PROCESSING,
                MessageRecord.claimed_at < now - self._claim_timeout,
            ),
        )

    def claim(self, message_id: int) -> bool:
        """UPDATE ... WHERE claimable. True only for the single winner."""
        now = self._clock()
        db: Session = self._session_factory()
        try:
            result = (
                db.query(MessageRecord)
                .filter(MessageRecord.id == message_id, self._claimable(now))
                .update({"state": STATE_PROCESSING, "claimed_at": now}, synchronize_session=False)
            )
            db.commit()
            if result == 1:
                return True
            _log(f"[SqlMessageRepository] claim lost for message {message_id}")
            return False
        except SQLAlchemyError as e:
            db.rollback()
            _log(f"[SqlMessageRepository] claim failed for message {message_id}: {e}")
            return False
        finally:
            db.close()

    def mark_processed(
        self,
        message_id: int,
        intent_type: Optional[str],
        confidence_score: Optional[float],
        parsed_content: Dict[str, Any],
        task_id: Optional[int],
    ) -> None:
        self._update(
            message_id,
            state=STATE_PROCESSED,
            claimed_at=None,
            intent_type=intent_type,
            confidence_score=confidence_score,
            parsed_content=parsed_content,
            task_id=task_id,
        )

    def record_failure(
        self,
        message_id: int,
        error: str,
        intent_type: Optional[str] = None,
        confidence_score: Optional[float] = None,
        parsed_content: Optional[Dict[str, Any]] = None,
        task_id: Optional[int] = None,
        release: bool = True,
    ) -> None:
        """Append to processing_errors.

        With ``release`` the message goes back to unprocessed for retry;
        without it the claim is kept and only expires after the timeout.
        """
        with self._session_factory() as db:
            row = db.get(MessageRecord, message_id)
            if row is None:
                raise MessageNotFound(f"message {message_id} not found")
            entry = {"timestamp": self._clock().isoformat(), "message": error}
            # new list so the JSON column registers the change
            row.processing_errors = list(row.processing_errors or []) + [entry]
            if intent_type is not None:
                row.intent_type = intent_type
            if confidence_score is not None:
                row.confidence_score = confidence_score
            if parsed_content is not None:
                row.parsed_content = dict(parsed_content)
            if task_id is not None:
                row.task_id = task_id
            if release and row.state == STATE_PROCESSING:
                row.state = STATE_UNPROCESSED
                row.claimed_at = None
            db.commit()

    def reset(self, message_id: int) -> None:
        """Forget a previous failed attempt and release an abandoned claim.

        Processed messages and live claims are untouched. The task link is
        kept so a committed side effect is never repeated.
        """
        with self._session_factory() as db:
            db.query(MessageRecord).filter(
                MessageRecord.id == message_id,
                self._claimable(self._clock()),
            ).update(
                {
                    "state": STATE_UNPROCESSED,
                    "claimed_at": None,
                    "processing_errors": [],
                    "intent_type": None,
                    "confidence_score": None,
                },
                synchronize_session=False,
            )
            db.commit()

    def _update(self, message_id: int, **values) -> None:
        with self._session_factory() as db:
            updated = (
                db.query(MessageRecord)
                .filter(MessageRecord.id == message_id)
                .update(values, synchronize_session=False)
            )
            db.commit()
            if updated != 1:
                raise MessageNotFound(f"message {message_id} not found")
