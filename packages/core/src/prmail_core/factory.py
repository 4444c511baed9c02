"""Construction of archive messages, one method per event kind.

Construction never fails and never has side effects: every text producer is
deferred and memoized. Revision footers are the only producers that reach
out to the rebase/render/notify collaborators.
"""

from __future__ import annotations

from functools import cache

from prmail_core.archive import ArchiveMessage, MessageKind
from prmail_core.composer import MessageComposer
from prmail_core.events import PlainComment, PullRequestInfo, RevisionUpdate, Review, ReviewComment, RootSubmission
from prmail_core.revision import DiffStrategy, RevisionDiffStrategy, full_label
from prmail_core.webrev.base import CommitHistory, DiffRenderer, Notifier, Rebaser
from prmail_core.webrev.noop import NoOpNotifier

HEAD_HASH_HEADER = "PR-Head-Hash"
BASE_HASH_HEADER = "PR-Base-Hash"


def _commit_headers(base: str, head: str) -> dict[str, str]:
    return {HEAD_HASH_HEADER: head, BASE_HASH_HEADER: base}


class MessageFactory:
    def __init__(
        self,
        pr: PullRequestInfo,
        rebaser: Rebaser,
        renderer: DiffRenderer,
        notifier: Notifier | None = None,
        composer: MessageComposer | None = None,
        history: CommitHistory | None = None,
    ):
        self.pr = pr
        self.rebaser = rebaser
        self.renderer = renderer
        self.notifier = notifier or NoOpNotifier()
        self.composer = composer or MessageComposer()
        self.history = history

    def _commits(self, first: str, last: str) -> list[str] | None:
        return self.history.commit_messages(first, last) if self.history else None

    def _stats(self, base: str, head: str) -> str | None:
        return self.history.stats(base, head) if self.history else None

    def root(self, event: RootSubmission) -> ArchiveMessage:
        pr, composer = self.pr, self.composer

        def footer() -> str:
            full = self.renderer.render(event.base, event.head, full_label(0))
            self.notifier.notify(0, full, None)
            stats = self._stats(event.base, event.head)
            return composer.conversation_footer(pr, full, event.base, event.head, stats)

        return ArchiveMessage(
            id=MessageKind.ROOT.message_id(),
            kind=MessageKind.ROOT,
            created_at=event.created_at,
            updated_at=event.created_at,
            author=event.author,
            parent_id=None,
            extra_headers=_commit_headers(event.base, event.head),
            subject_producer=cache(lambda: composer.conversation_subject(pr)),
            header_producer=cache(lambda: ""),
            body_producer=cache(
                lambda: composer.conversation_body(pr, event.base, event.head, self._commits(event.base, event.head))
            ),
            footer_producer=cache(footer),
        )

    def revision(self, event: RevisionUpdate, parent: ArchiveMessage) -> ArchiveMessage:
        """Revision updates are authored by the pull request author."""
        pr, composer = self.pr, self.composer
        strategy = RevisionDiffStrategy(event, self.rebaser, self.renderer, self.notifier)

        def body() -> str:
            kind = strategy.strategy
            if kind is DiffStrategy.INCREMENTAL:
                first = event.previous_head
            elif kind is DiffStrategy.REBASED_INCREMENTAL:
                first = strategy.rebased_previous_head
            else:
                first = event.base
            return composer.revision_body(
                kind,
                pr.author,
                event.head,
                event.previous_head,
                strategy.rebased_previous_head,
                self._commits(first, event.head),
            )

        def footer() -> str:
            diff = strategy.result
            return composer.revision_footer(pr, diff, self._stats(event.base, event.head))

        return ArchiveMessage(
            id=MessageKind.REVISION.message_id(event.head),
            kind=MessageKind.REVISION,
            created_at=event.created_at,
            updated_at=event.updated_at,
            author=pr.author,
            parent_id=parent.id,
            extra_headers=_commit_headers(event.base, event.head),
            subject_producer=cache(lambda: composer.revision_subject(pr, event.index)),
            header_producer=cache(lambda: ""),
            body_producer=cache(body),
            footer_producer=cache(footer),
        )

    def _reply(self, kind: MessageKind, key: str, event, parent: ArchiveMessage, body, footer) -> ArchiveMessage:
        composer = self.composer
        return ArchiveMessage(
            id=kind.message_id(key),
            kind=kind,
            created_at=event.created_at,
            updated_at=getattr(event, "updated_at", event.created_at),
            author=event.author,
            parent_id=parent.id,
            subject_producer=cache(lambda: composer.reply_subject(parent.subject)),
            header_producer=cache(lambda: composer.reply_header(parent.created_at, parent.author)),
            body_producer=cache(body),
            footer_producer=cache(footer),
        )

    def comment(self, event: PlainComment, parent: ArchiveMessage) -> ArchiveMessage:
        return self._reply(
            MessageKind.COMMENT,
            event.id,
            event,
            parent,
            lambda: self.composer.comment_body(event.body),
            lambda: self.composer.reply_footer(self.pr),
        )

    def review(self, event: Review, parent: ArchiveMessage) -> ArchiveMessage:
        return self._reply(
            MessageKind.REVIEW,
            event.id,
            event,
            parent,
            lambda: self.composer.review_body(event),
            lambda: self.composer.review_footer(self.pr, event),
        )

    def review_comment(self, event: ReviewComment, parent: ArchiveMessage) -> ArchiveMessage:
        return self._reply(
            MessageKind.REVIEW_COMMENT,
            event.id,
            event,
            parent,
            lambda: self.composer.review_comment_body(event),
            lambda: self.composer.reply_footer(self.pr),
        )
