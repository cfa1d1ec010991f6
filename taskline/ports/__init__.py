"""Port interfaces (Hexagonal Architecture)."""

from taskline.ports.inbound import IncomingMessage, ProcessingErrorEntry
from taskline.ports.outbound import (
    ChannelPort,
    ChannelResolver,
    MessageRepositoryPort,
    NotificationPort,
    TaskRepositoryPort,
    UserDirectoryPort,
)

__all__ = [
    "IncomingMessage",
    "ProcessingErrorEntry",
    "ChannelPort",
    "ChannelResolver",
    "MessageRepositoryPort",
    "NotificationPort",
    "TaskRepositoryPort",
    "UserDirectoryPort",
]
