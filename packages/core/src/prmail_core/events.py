"""Activity events of a single pull request.

Events are plain read-only values. The GitHub adapter (prmail_core.gh) produces
them, tests construct them directly, and the builder folds over them in
chronological order. Nothing in the core mutates an event.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class HostUser:
    """A user on the code-hosting service."""

    username: str
    full_name: str = ""

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


@dataclass(frozen=True)
class PullRequestInfo:
    """Static pull request data used when composing message text."""

    number: int
    title: str
    author: HostUser
    web_url: str = ""
    body: str = ""
    source_ref: str = ""
    repo_url: str = ""


@dataclass(frozen=True)
class PushRecord:
    """One recorded state of the pull request branch."""

    base: str
    head: str
    pushed_at: datetime


@dataclass(frozen=True)
class RootSubmission:
    author: HostUser
    created_at: datetime
    base: str
    head: str


@dataclass(frozen=True)
class RevisionUpdate:
    """A push that moved the head (and maybe the base) of the pull request.

    ``index`` is 1-based. ``previous_base``/``previous_head`` describe the
    revision before this one; for index 1 that is the root submission.
    """

    index: int
    base: str
    head: str
    previous_base: str
    previous_head: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class PlainComment:
    id: str
    author: HostUser
    created_at: datetime
    updated_at: datetime
    body: str


@dataclass(frozen=True)
class Review:
    id: str
    author: HostUser
    created_at: datetime
    reviewed_hash: str
    state: str = "COMMENTED"  # "APPROVED" | "CHANGES_REQUESTED" | "COMMENTED"
    body: str = ""


@dataclass(frozen=True)
class ReviewComment:
    id: str
    author: HostUser
    created_at: datetime
    updated_at: datetime
    body: str
    thread_id: str
    reviewed_hash: str
    path: str = ""
    line: int | None = None


Event = Union[RootSubmission, RevisionUpdate, PlainComment, Review, ReviewComment]
