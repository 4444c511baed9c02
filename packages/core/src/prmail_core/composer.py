"""Default plain-text composition of archive messages.

The threading engine decides which of these functions is called for a message
and with which arguments; the wording lives here only. Replace the composer to
change the text without touching threading.
"""

from __future__ import annotations

from datetime import datetime

from prmail_core.events import HostUser, PullRequestInfo, Review, ReviewComment
from prmail_core.revision import DiffStrategy, RevisionDiff

_REPLY_PREFIX = "Re: "
_SEPARATOR = "-------------"

_VERDICTS = {
    "APPROVED": "Marked as reviewed by {user}.",
    "CHANGES_REQUESTED": "Changes requested by {user}.",
}


def _short(hash_: str) -> str:
    return hash_[:12]


def _commit_lines(commits: list[str] | None) -> list[str]:
    if not commits:
        return []
    return ["", "Commit messages:", *(f" - {c}" for c in commits)]


def diff_url(pr: PullRequestInfo) -> str:
    return pr.web_url + ".diff"


class MessageComposer:
    def __init__(self, subject_prefix: str = ""):
        self.subject_prefix = subject_prefix

    # Subjects and headers

    def conversation_subject(self, pr: PullRequestInfo) -> str:
        return f"{self.subject_prefix}RFR: {pr.title}"

    def revision_subject(self, pr: PullRequestInfo, index: int) -> str:
        return f"{_REPLY_PREFIX}{self.subject_prefix}[Rev {index:02d}] RFR: {pr.title}"

    def reply_subject(self, parent_subject: str) -> str:
        while parent_subject.startswith(_REPLY_PREFIX):
            parent_subject = parent_subject[len(_REPLY_PREFIX) :]
        return _REPLY_PREFIX + parent_subject

    def reply_header(self, parent_created_at: datetime, parent_author: HostUser) -> str:
        when = parent_created_at.strftime("%a, %d %b %Y %H:%M:%S %z").strip()
        return f"On {when}, {parent_author.display_name} wrote:"

    # Bodies

    def conversation_body(
        self,
        pr: PullRequestInfo,
        base: str,
        head: str,
        commits: list[str] | None = None,
    ) -> str:
        description = pr.body.strip() or "(no description)"
        lines = [description, *_commit_lines(commits), "", f"Changes: {_short(base)}..{_short(head)}"]
        return "\n".join(lines)

    def revision_body(
        self,
        strategy: DiffStrategy,
        author: HostUser,
        head: str,
        previous_head: str,
        rebased_previous_head: str | None = None,
        commits: list[str] | None = None,
    ) -> str:
        """``commits`` are the commits the revision adds, as far as they can be told apart."""
        name = author.display_name
        if strategy is DiffStrategy.INCREMENTAL:
            lines = [
                f"{name} has updated the pull request incrementally.",
                "",
                f"Changes since the last revision: {_short(previous_head)}..{_short(head)}",
            ]
        elif strategy is DiffStrategy.REBASED_INCREMENTAL:
            lines = [
                f"{name} has updated the pull request with a new target base due to a merge or a rebase. "
                "The incremental webrev excludes the unrelated changes brought in by the merge/rebase.",
                "",
                f"Changes since the last revision: {_short(rebased_previous_head or previous_head)}..{_short(head)}",
            ]
        else:
            lines = [
                f"{name} has updated the pull request with a new target base due to a merge or a rebase.",
                "",
                f"The full change up to {_short(head)} is included below.",
            ]
        return "\n".join(lines + _commit_lines(commits))

    def comment_body(self, body: str) -> str:
        return body.strip()

    def review_body(self, review: Review) -> str:
        lines = []
        verdict = _VERDICTS.get(review.state)
        if verdict:
            lines.append(verdict.format(user=review.author.username))
        if review.body.strip():
            if lines:
                lines.append("")
            lines.append(review.body.strip())
        return "\n".join(lines)

    def review_comment_body(self, comment: ReviewComment) -> str:
        if comment.path:
            location = comment.path if comment.line is None else f"{comment.path} line {comment.line}"
            return f"{location}:\n\n{comment.body.strip()}"
        return comment.body.strip()

    # Footers

    def _fetch_lines(self, pr: PullRequestInfo, stats: str | None) -> list[str]:
        lines = []
        if stats:
            lines.append(f"Changes: {stats}")
        lines.append(f"Patch: {diff_url(pr)}")
        if pr.repo_url and pr.source_ref:
            lines.append(f"Fetch: git fetch {pr.repo_url} {pr.source_ref}:pull/{pr.number}")
        lines.append(f"PR: {pr.web_url}")
        return lines

    def conversation_footer(
        self, pr: PullRequestInfo, full: str, base: str, head: str, stats: str | None = None
    ) -> str:
        lines = [_SEPARATOR, "", f"Webrev: {full} ({_short(base)}..{_short(head)})"]
        return "\n".join(lines + self._fetch_lines(pr, stats))

    def revision_footer(self, pr: PullRequestInfo, diff: RevisionDiff, stats: str | None = None) -> str:
        lines = [_SEPARATOR, "", "Webrevs:", f" - full: {diff.full} ({_short(diff.base)}..{_short(diff.head)})"]
        if diff.strategy is DiffStrategy.INCREMENTAL:
            lines.append(f" - incr: {diff.incremental} ({_short(diff.previous_head)}..{_short(diff.head)})")
        elif diff.strategy is DiffStrategy.REBASED_INCREMENTAL:
            lines.append(
                f" - incr: {diff.incremental} ({_short(diff.rebased_previous_head)}..{_short(diff.head)}, "
                f"rebased from {_short(diff.previous_head)})"
            )
        else:
            lines.append(" - incr: not available, the previous revision could not be rebased")
        return "\n".join(lines + self._fetch_lines(pr, stats))

    def review_footer(self, pr: PullRequestInfo, review: Review) -> str:
        return f"PR Review: {pr.web_url}#pullrequestreview-{review.id}"

    def reply_footer(self, pr: PullRequestInfo) -> str:
        return f"PR: {pr.web_url}"
