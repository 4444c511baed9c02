"""PyGithub adapter: turns a pull request's activity into archive events.

GitHub does not keep the history of force-pushes in a form we can diff
against, so revisions come from a recorded push log (see
prmail_core.config.load_pushes). When the pull request's current head is not
the last recorded one it is appended as a new revision.
"""

from __future__ import annotations

import logging

from github import Github

from prmail_core.events import (
    Event,
    HostUser,
    PlainComment,
    PullRequestInfo,
    PushRecord,
    RevisionUpdate,
    Review,
    ReviewComment,
    RootSubmission,
)

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def to_host_user(user) -> HostUser:
    return HostUser(username=user.login, full_name=user.name or "")


def pull_request_info(pr) -> PullRequestInfo:
    return PullRequestInfo(
        number=pr.number,
        title=pr.title or "",
        author=to_host_user(pr.user),
        web_url=pr.html_url,
        body=pr.body or "",
        source_ref=pr.head.ref,
        repo_url=pr.head.repo.clone_url if pr.head.repo else "",
    )


def get_merge_base(repo, pr) -> str:
    """Return the merge base of the pull request's target branch and head."""
    return repo.compare(pr.base.sha, pr.head.sha).merge_base_commit.sha


def _current_pushes(repo, pr, pushes: list[PushRecord] | None) -> list[PushRecord]:
    head = pr.head.sha
    recorded: list[PushRecord] = []
    for push in pushes or []:
        if recorded and recorded[-1].head == push.head:
            logger.debug("Ignoring repeated push of %s", push.head[:12])
            continue
        recorded.append(push)

    if not recorded:
        return [PushRecord(base=get_merge_base(repo, pr), head=head, pushed_at=pr.created_at)]
    if recorded[-1].head != head:
        recorded.append(PushRecord(base=get_merge_base(repo, pr), head=head, pushed_at=pr.updated_at))
    return recorded


def revision_events(pr, pushes: list[PushRecord]) -> list[Event]:
    """Root submission from the first push, one revision update per later push."""
    first = pushes[0]
    events: list[Event] = [
        RootSubmission(author=to_host_user(pr.user), created_at=pr.created_at, base=first.base, head=first.head)
    ]
    for index, (previous, push) in enumerate(zip(pushes, pushes[1:]), 1):
        events.append(
            RevisionUpdate(
                index=index,
                base=push.base,
                head=push.head,
                previous_base=previous.base,
                previous_head=previous.head,
                created_at=push.pushed_at,
                updated_at=push.pushed_at,
            )
        )
    return events


def comment_events(pr) -> list[Event]:
    return [
        PlainComment(
            id=str(c.id),
            author=to_host_user(c.user),
            created_at=c.created_at,
            updated_at=c.updated_at or c.created_at,
            body=c.body or "",
        )
        for c in pr.get_issue_comments()
    ]


def review_events(pr) -> list[Event]:
    events: list[Event] = []
    for r in pr.get_reviews():
        if r.submitted_at is None:
            logger.debug("Skipping pending review %s", r.id)
            continue
        events.append(
            Review(
                id=str(r.id),
                author=to_host_user(r.user),
                created_at=r.submitted_at,
                reviewed_hash=r.commit_id,
                state=r.state,
                body=r.body or "",
            )
        )
    return events


def review_comment_events(pr) -> list[Event]:
    """Inline comments; a thread is identified by the id of its first comment."""
    return [
        ReviewComment(
            id=str(c.id),
            author=to_host_user(c.user),
            created_at=c.created_at,
            updated_at=c.updated_at or c.created_at,
            body=c.body or "",
            thread_id=str(c.in_reply_to_id or c.id),
            reviewed_hash=c.original_commit_id,
            path=c.path or "",
            line=getattr(c, "original_line", None),
        )
        for c in pr.get_review_comments()
    ]


def collect_events(repo, pr, pushes: list[PushRecord] | None = None) -> list[Event]:
    """Return every archive event of ``pr``; the builder orders them."""
    events = revision_events(pr, _current_pushes(repo, pr, pushes))
    events.extend(comment_events(pr))
    events.extend(review_events(pr))
    events.extend(review_comment_events(pr))
    logger.debug("Collected %d event(s) for PR #%d", len(events), pr.number)
    return events
