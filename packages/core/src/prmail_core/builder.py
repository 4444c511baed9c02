"""Chronological construction of an archive thread from an event log."""

from __future__ import annotations

import logging
from typing import Iterable

from prmail_core.archive import ArchiveMessage, ArchiveThread
from prmail_core.events import Event, PlainComment, RevisionUpdate, Review, ReviewComment, RootSubmission
from prmail_core.factory import MessageFactory
from prmail_core.resolver import find_comment_parent, find_review_comment_parent, find_review_parent

logger = logging.getLogger(__name__)


def chronological(events: Iterable[Event]) -> list[Event]:
    """Root submission first, everything else by creation time (stable for ties)."""
    return sorted(events, key=lambda e: (not isinstance(e, RootSubmission), e.created_at))


def build_archive(events: Iterable[Event], factory: MessageFactory) -> ArchiveThread:
    """Build the threaded archive for one pull request.

    A strict left-to-right fold: each message's parent is chosen among the
    messages built before it. Text producers are not evaluated here, so no
    diff is rendered and nobody is notified until a footer is read.
    """
    ordered = chronological(events)
    roots = [e for e in ordered if isinstance(e, RootSubmission)]
    if len(roots) != 1:
        raise ValueError(f"Expected exactly one root submission, got {len(roots)}")

    review_comments = [e for e in ordered if isinstance(e, ReviewComment)]
    thread = ArchiveThread()
    for event in ordered:
        generated = thread.messages
        message: ArchiveMessage
        if isinstance(event, RootSubmission):
            message = factory.root(event)
        elif isinstance(event, RevisionUpdate):
            message = factory.revision(event, generated[0])
        elif isinstance(event, PlainComment):
            message = factory.comment(event, find_comment_parent(generated, event))
        elif isinstance(event, Review):
            message = factory.review(event, find_review_parent(generated, event))
        elif isinstance(event, ReviewComment):
            message = factory.review_comment(event, find_review_comment_parent(generated, review_comments, event))
        else:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")

        thread.append(message)
        logger.debug("Archived %s (parent %s)", message.id, message.parent_id)

    logger.debug("Built archive of %d message(s) for PR #%d", len(thread), factory.pr.number)
    return thread
