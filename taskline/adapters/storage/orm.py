"""Table definitions."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from taskline.adapters.storage.database import Base
from taskline.config import local_now

# incoming_messages.state
STATE_UNPROCESSED = "unprocessed"
STATE_PROCESSING = "processing"
STATE_PROCESSED = "processed"


class UserRecord(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    display_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, default="", index=True)


class WorkspaceRecord(Base):
    """A festival; the chat group is bound to exactly one."""

    __tablename__ = "workspaces"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, default="")
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)


class ChannelMemberRecord(Base):
    __tablename__ = "channel_members"
    __table_args__ = (UniqueConstraint("workspace_id", "external_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    external_id = Column(String(100), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)


class TaskRecord(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(Date, nullable=True)
    priority = Column(String(10), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="pending", index=True)
    assignee_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_via_channel = Column(Boolean, nullable=False, default=False)
    source_message_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=local_now)
    completed_at = Column(DateTime, nullable=True)


class MessageRecord(Base):
    __tablename__ = "incoming_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_message_id = Column(String(100), unique=True, nullable=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    channel_external_id = Column(String(100), nullable=False)
    sender_external_id = Column(String(100), nullable=False)
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=local_now)

    state = Column(String(20), nullable=False, default=STATE_UNPROCESSED, index=True)
    claimed_at = Column(DateTime, nullable=True)
    intent_type = Column(String(30), nullable=True)
    confidence_score = Column(Float, nullable=True)
    parsed_content = Column(JSON, nullable=True)
    processing_errors = Column(JSON, nullable=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=True)
