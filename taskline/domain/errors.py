"""Failure taxonomy for message processing."""

from typing import Iterable


class ProcessingFailure(Exception):
    """Base for every failure that ends up in a ProcessingResult."""

    code = "ProcessingFailure"
    default_message = "Processing failed"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class AlreadyProcessed(ProcessingFailure):
    code = "AlreadyProcessed"
    default_message = "Message already processed"


class MissingTitle(ProcessingFailure):
    code = "MissingTitle"
    default_message = "Could not extract task title"


class TaskNotFound(ProcessingFailure):
    code = "TaskNotFound"
    default_message = "Could not find task to complete"


class UserNotFound(ProcessingFailure):
    code = "UserNotFound"
    default_message = "Could not find user to assign task"


class PersistenceFailure(ProcessingFailure):
    """Raised by repositories when the store rejects a create/update."""

    code = "PersistenceFailure"
    default_message = "Task creation failed"

    def __init__(self, messages: Iterable[str] = (), prefix: str = "Task creation failed"):
        self.messages = [m for m in messages if m]
        text = f"{prefix}: {', '.join(self.messages)}" if self.messages else prefix
        super().__init__(text)


class UnexpectedError(ProcessingFailure):
    code = "UnexpectedError"

    @classmethod
    def wrap(cls, exc: BaseException) -> "UnexpectedError":
        return cls(f"Processing failed: {exc}")


class MessageNotFound(LookupError):
    """No message with the given id exists in the store."""
