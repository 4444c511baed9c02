"""Archive messages and the thread they form.

An ArchiveMessage is created once and never changes. Its text is produced on
demand by four zero-argument callables; the factory wraps each of them in
functools.cache so a revision footer (which renders diff artifacts and sends a
notification) runs at most once per message. A producer that raises is not
cached, so the error reaches every reader until a call succeeds.

Parents are referenced by id rather than by object. Since a parent is always
chosen from messages that already exist, the parent graph cannot contain cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterator, Mapping

from prmail_core.events import HostUser


class ArchiveInvariantError(RuntimeError):
    """A message that must exist by construction order is missing, or ids collide.

    This signals a logic bug, never a recoverable condition.
    """


class MessageKind(str, Enum):
    """Message kinds, valued by their id prefix."""

    ROOT = "fc"
    REVISION = "ha"
    COMMENT = "pc"
    REVIEW = "rv"
    REVIEW_COMMENT = "rc"

    def message_id(self, key: str = "") -> str:
        return self.value + key


@dataclass(frozen=True)
class ArchiveMessage:
    id: str
    kind: MessageKind
    created_at: datetime
    updated_at: datetime
    author: HostUser
    parent_id: str | None
    extra_headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    subject_producer: Callable[[], str] = field(default=lambda: "", repr=False, compare=False)
    header_producer: Callable[[], str] = field(default=lambda: "", repr=False, compare=False)
    body_producer: Callable[[], str] = field(default=lambda: "", repr=False, compare=False)
    footer_producer: Callable[[], str] = field(default=lambda: "", repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "extra_headers", MappingProxyType(dict(self.extra_headers)))

    @property
    def subject(self) -> str:
        return self.subject_producer()

    @property
    def header(self) -> str:
        return self.header_producer()

    @property
    def body(self) -> str:
        return self.body_producer()

    @property
    def footer(self) -> str:
        """Footer text. For root and revision messages this renders diff artifacts."""
        return self.footer_producer()

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def is_top_level_reply(self) -> bool:
        """True for plain comments and reviews, the messages a plain comment may answer."""
        return self.kind in (MessageKind.COMMENT, MessageKind.REVIEW)


class ArchiveThread:
    """Append-only, build-ordered collection of the messages of one conversation."""

    def __init__(self, messages: list[ArchiveMessage] | None = None):
        self._messages: list[ArchiveMessage] = []
        self._by_id: dict[str, ArchiveMessage] = {}
        for message in messages or []:
            self.append(message)

    def append(self, message: ArchiveMessage) -> None:
        if message.id in self._by_id:
            raise ArchiveInvariantError(f"Duplicate archive message id: {message.id}")
        if message.parent_id is None:
            if self._messages:
                raise ArchiveInvariantError(f"Second root message: {message.id}")
        elif message.parent_id not in self._by_id:
            raise ArchiveInvariantError(f"Parent {message.parent_id} of {message.id} has not been built yet")
        self._messages.append(message)
        self._by_id[message.id] = message

    @property
    def messages(self) -> list[ArchiveMessage]:
        return list(self._messages)

    @property
    def root(self) -> ArchiveMessage:
        if not self._messages:
            raise LookupError("Empty archive thread has no root")
        return self._messages[0]

    def get(self, message_id: str) -> ArchiveMessage | None:
        return self._by_id.get(message_id)

    def parent_of(self, message: ArchiveMessage) -> ArchiveMessage | None:
        if message.parent_id is None:
            return None
        return self._by_id[message.parent_id]

    def children_of(self, message: ArchiveMessage) -> list[ArchiveMessage]:
        return [m for m in self._messages if m.parent_id == message.id]

    def __iter__(self) -> Iterator[ArchiveMessage]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __getitem__(self, index: int) -> ArchiveMessage:
        return self._messages[index]
