"""Read-only lookups mapping extracted text to users and tasks."""

import re
from datetime import datetime
from typing import Callable, Iterable, List, Optional, TypeVar

from taskline.config import KEYWORDS, KeywordConfig
from taskline.domain.models import Task, User
from taskline.ports.inbound import IncomingMessage
from taskline.ports.outbound import TaskRepositoryPort, UserDirectoryPort

T = TypeVar("T")

_SPACE_RE = re.compile(r"\s+")


def first_match(*lookups: Callable[[], Optional[T]]) -> Optional[T]:
    """Run lookups in order and return the first non-None result."""
    for lookup in lookups:
        found = lookup()
        if found is not None:
            return found
    return None


def _fold(text: str) -> str:
    return _SPACE_RE.sub("", text or "").lower()


def _newest(tasks: Iterable[Task]) -> Optional[Task]:
    ordered = sorted(
        tasks,
        key=lambda t: (t.created_at or datetime.min, t.id),
        reverse=True,
    )
    return ordered[0] if ordered else None


class TaskResolver:
    """Resolves mentions, title fragments and senders inside one workspace."""

    def __init__(
        self,
        users: UserDirectoryPort,
        tasks: TaskRepositoryPort,
        workspace_id: int,
        keywords: KeywordConfig = KEYWORDS,
    ):
        self._users = users
        self._tasks = tasks
        self._workspace_id = workspace_id
        self._keywords = keywords

    def mention_names(self, mention: str) -> List[str]:
        """Candidate names for a token: bare, then without honorific."""
        name = mention.lstrip("@＠").strip()
        names = [name] if name else []
        for suffix in self._keywords.honorifics:
            if name.endswith(suffix) and len(name) > len(suffix):
                names.append(name[: -len(suffix)])
        return names

    def find_mentioned_user(self, mentions: Iterable[str]) -> Optional[User]:
        members = self._users.list_members(self._workspace_id)
        if not members:
            return None

        def by_display_name(name: str) -> Optional[User]:
            needle = _fold(name)
            return next((u for u in members if needle in _fold(u.display_name)), None)

        def by_email(name: str) -> Optional[User]:
            needle = name.lower()
            return next(
                (u for u in members if u.email and needle in u.email.split("@", 1)[0].lower()),
                None,
            )

        for mention in mentions or []:
            for name in self.mention_names(mention):
                user = first_match(lambda: by_display_name(name), lambda: by_email(name))
                if user is not None:
                    return user
        return None

    def find_task_by_title(self, fragment: Optional[str], open_only: bool = False) -> Optional[Task]:
        needle = _fold(fragment or "")
        if not needle:
            return None
        matches = [
            t for t in self._tasks.list_tasks(self._workspace_id)
            if needle in _fold(t.title) and not (open_only and t.status == "completed")
        ]
        return _newest(matches)

    def find_recent_user_task(self, sender: Optional[User]) -> Optional[Task]:
        if sender is None:
            return None
        tasks = self._tasks.list_tasks(self._workspace_id, assignee_id=sender.id)
        return _newest(t for t in tasks if t.status != "completed")

    def resolve_sender(self, message: IncomingMessage) -> Optional[User]:
        """Channel member for the sender, else the workspace owner."""
        return first_match(
            lambda: self._users.find_member(self._workspace_id, message.sender_external_id),
            lambda: self._users.workspace_owner(self._workspace_id),
        )
