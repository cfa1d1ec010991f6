"""Shared fixtures: in-memory database, seeded workspace, recording collaborators."""

from datetime import date, datetime
from typing import List, Optional, Tuple

import pytest

from taskline.adapters.storage import (
    SqlMessageRepository,
    SqlTaskRepository,
    SqlUserDirectory,
    init_db,
    make_engine,
    make_session_factory,
)
from taskline.adapters.storage.orm import (
    ChannelMemberRecord,
    TaskRecord,
    UserRecord,
    WorkspaceRecord,
)
from taskline.domain.models import Task, User
from taskline.domain.processor import MessageProcessor

FIXED_NOW = datetime(2025, 6, 10, 9, 0)
TODAY = FIXED_NOW.date()


def fixed_clock() -> datetime:
    return FIXED_NOW


class RecordingChannel:
    def __init__(self, delivered: bool = True, raises: Optional[Exception] = None):
        self.sent: List[str] = []
        self._delivered = delivered
        self._raises = raises

    def send_message(self, text: str) -> bool:
        if self._raises is not None:
            raise self._raises
        self.sent.append(text)
        return self._delivered


class RecordingChannelResolver:
    def __init__(self, channel: Optional[RecordingChannel] = None):
        self.channel = channel or RecordingChannel()
        self.requested: List[str] = []

    def channel_for(self, channel_external_id: str) -> RecordingChannel:
        self.requested.append(channel_external_id)
        return self.channel


class RecordingNotifier:
    def __init__(self):
        self.status_changes: List[Tuple[Task, str]] = []
        self.assignments: List[Tuple[Task, Optional[User]]] = []

    def on_task_status_changed(self, task: Task, previous_status: str) -> None:
        self.status_changes.append((task, previous_status))

    def on_task_assigned(self, task: Task, sender: Optional[User]) -> None:
        self.assignments.append((task, sender))


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def seed(session_factory):
    """Workspace 1 owned by 'owner'; sender U-owner is a channel member."""

    class Seeder:
        def user(self, display_name: str, email: str = "", external_id: Optional[str] = None,
                 workspace_id: int = 1) -> int:
            with session_factory() as db:
                row = UserRecord(display_name=display_name, email=email)
                db.add(row)
                db.commit()
                if external_id is not None:
                    db.add(ChannelMemberRecord(workspace_id=workspace_id, external_id=external_id, user_id=row.id))
                    db.commit()
                return row.id

        def workspace(self, owner_id: Optional[int], name: str = "夏祭り") -> int:
            with session_factory() as db:
                row = WorkspaceRecord(name=name, owner_user_id=owner_id)
                db.add(row)
                db.commit()
                return row.id

        def task(self, title: str, status: str = "pending", assignee_id: Optional[int] = None,
                 due_date: Optional[date] = None, created_at: Optional[datetime] = None,
                 workspace_id: int = 1) -> int:
            with session_factory() as db:
                row = TaskRecord(
                    workspace_id=workspace_id,
                    title=title,
                    status=status,
                    assignee_id=assignee_id,
                    due_date=due_date,
                    created_at=created_at or FIXED_NOW,
                )
                db.add(row)
                db.commit()
                return row.id

    seeder = Seeder()
    seeder.owner_id = seeder.user("主催者", "owner@example.com", external_id="U-owner")
    seeder.workspace_id = seeder.workspace(seeder.owner_id)
    return seeder


@pytest.fixture
def users(session_factory):
    return SqlUserDirectory(session_factory)


@pytest.fixture
def tasks(session_factory):
    return SqlTaskRepository(session_factory)


@pytest.fixture
def messages(session_factory):
    return SqlMessageRepository(session_factory, clock=fixed_clock)


@pytest.fixture
def channels():
    return RecordingChannelResolver()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def processor(messages, users, tasks, channels, notifier):
    return MessageProcessor(
        messages=messages,
        users=users,
        tasks=tasks,
        channels=channels,
        notifier=notifier,
        clock=fixed_clock,
    )


@pytest.fixture
def post(seed, messages):
    """Store a message from the owner in workspace 1 and return its id."""

    def _post(text: str, sender: str = "U-owner") -> int:
        return messages.add(seed.workspace_id, text, sender, "G-1").id

    return _post
