"""Thread parent selection.

Every function takes ``generated``, the build-ordered messages constructed so
far (``generated[0]`` is always the root), and the new event. Only that prefix
is consulted, never later events.
"""

from __future__ import annotations

import re
from typing import Sequence

from prmail_core.archive import ArchiveInvariantError, ArchiveMessage, MessageKind
from prmail_core.events import PlainComment, Review, ReviewComment

__all__ = [
    "ArchiveInvariantError",
    "find_comment_parent",
    "find_last_mention",
    "find_review_comment_message",
    "find_review_comment_parent",
    "find_review_parent",
    "find_revision_message",
]

_MENTION_RE = re.compile(r"@([\w-]+)")


def find_last_mention(text: str, eligible: Sequence[ArchiveMessage]) -> ArchiveMessage | None:
    """Return the latest eligible message by the user ``text`` starts by mentioning.

    The earliest eligible message is never considered. Archived threads already
    depend on that, so keep it.
    """
    match = _MENTION_RE.match(text)
    if match is None:
        return None
    username = match.group(1)
    for candidate in reversed(eligible[1:]):
        if candidate.author.username == username:
            return candidate
    return None


def find_comment_parent(generated: Sequence[ArchiveMessage], comment: PlainComment) -> ArchiveMessage:
    """Parent of a plain comment: the latest earlier comment or review, or a mentioned author's.

    The root heads the eligible list, so it is the entry a mention never selects.
    """
    last_reply = generated[0]
    eligible: list[ArchiveMessage] = [last_reply]
    for message in generated:
        if not message.is_top_level_reply:
            continue
        if last_reply.created_at < message.created_at < comment.created_at:
            last_reply = message
            eligible.append(message)

    mentioned = find_last_mention(comment.body, eligible)
    if mentioned is not None:
        return mentioned
    return last_reply


def find_revision_message(generated: Sequence[ArchiveMessage], hash_: str) -> ArchiveMessage:
    """The revision update for ``hash_``, else the latest revision so far, else the root."""
    wanted = MessageKind.REVISION.message_id(hash_)
    last_revision = generated[0]
    for message in generated:
        if message.kind is MessageKind.REVISION:
            last_revision = message
        if message.id == wanted:
            return message
    return last_revision


def find_review_parent(generated: Sequence[ArchiveMessage], review: Review) -> ArchiveMessage:
    return find_revision_message(generated, review.reviewed_hash)


def find_review_comment_message(generated: Sequence[ArchiveMessage], comment_id: str) -> ArchiveMessage:
    wanted = MessageKind.REVIEW_COMMENT.message_id(comment_id)
    for message in generated:
        if message.id == wanted:
            return message
    raise ArchiveInvariantError(f"No archive message for review comment {comment_id}")


def find_review_comment_parent(
    generated: Sequence[ArchiveMessage],
    review_comments: Sequence[ReviewComment],
    comment: ReviewComment,
) -> ArchiveMessage:
    """Parent of an inline comment: an earlier comment in its thread, or the reviewed revision.

    ``review_comments`` must be in chronological order and contain ``comment``.
    """
    eligible: list[ArchiveMessage] = []
    for thread_comment in review_comments:
        if thread_comment.thread_id != comment.thread_id:
            continue
        if thread_comment.id == comment.id:
            break
        eligible.append(find_review_comment_message(generated, thread_comment.id))

    if not eligible:
        return find_revision_message(generated, comment.reviewed_hash)

    mentioned = find_last_mention(comment.body, eligible)
    if mentioned is not None:
        return mentioned
    return eligible[-1]
