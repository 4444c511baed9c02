"""Tests for archive message construction."""

import pytest
from helpers import ALICE, BOB, CAROL, FakeRebaser, at

from prmail_core.archive import MessageKind
from prmail_core.events import PlainComment, RevisionUpdate, Review, ReviewComment, RootSubmission
from prmail_core.factory import BASE_HASH_HEADER, HEAD_HASH_HEADER, MessageFactory

BASE, HEAD0, HEAD1, NEW_BASE = "b" * 40, "0" * 40, "1" * 40, "c" * 40


def _root():
    return RootSubmission(author=ALICE, created_at=at(0), base=BASE, head=HEAD0)


def _revision(base=BASE, index=1):
    return RevisionUpdate(
        index=index,
        base=base,
        head=HEAD1,
        previous_base=BASE,
        previous_head=HEAD0,
        created_at=at(30),
        updated_at=at(31),
    )


class TestRoot:
    def test_identity_and_headers(self, factory):
        root = factory.root(_root())
        assert root.id == "fc"
        assert root.kind is MessageKind.ROOT
        assert root.parent_id is None
        assert root.author == ALICE
        assert root.extra_headers == {HEAD_HASH_HEADER: HEAD0, BASE_HASH_HEADER: BASE}

    def test_subject_and_body(self, factory):
        root = factory.root(_root())
        assert root.subject == "RFR: 8300000: Fix the frobnicator"
        assert root.header == ""
        assert "Please review this change." in root.body

    def test_construction_has_no_side_effects(self, factory, renderer, notifier):
        factory.root(_root())
        assert renderer.calls == []
        assert notifier.calls == []

    def test_footer_renders_full_webrev_and_notifies(self, factory, renderer, notifier):
        root = factory.root(_root())
        footer = root.footer
        assert renderer.calls == [(BASE, HEAD0, "00")]
        assert notifier.calls == [(0, "webrev/00/bbbb-0000", None)]
        assert "webrev/00/bbbb-0000" in footer
        assert "https://github.com/owner/repo/pull/17" in footer

    def test_subject_prefix(self, pr_info, rebaser, renderer):
        from prmail_core.composer import MessageComposer

        factory = MessageFactory(pr_info, rebaser, renderer, composer=MessageComposer("[jdk] "))
        assert factory.root(_root()).subject == "[jdk] RFR: 8300000: Fix the frobnicator"


class TestRevision:
    def test_identity_keyed_by_head(self, factory):
        root = factory.root(_root())
        revision = factory.revision(_revision(), root)
        assert revision.id == "ha" + HEAD1
        assert revision.kind is MessageKind.REVISION
        assert revision.parent_id == "fc"
        assert revision.created_at == at(30)
        assert revision.updated_at == at(31)
        assert revision.extra_headers[HEAD_HASH_HEADER] == HEAD1

    def test_subject_carries_revision_index(self, factory):
        revision = factory.revision(_revision(index=3), factory.root(_root()))
        assert revision.subject == "Re: [Rev 03] RFR: 8300000: Fix the frobnicator"

    def test_footer_evaluated_once(self, factory, renderer, notifier):
        revision = factory.revision(_revision(), factory.root(_root()))
        first = revision.footer
        second = revision.footer
        assert first == second
        assert renderer.calls == [(BASE, HEAD1, "01"), (HEAD0, HEAD1, "00-01")]
        assert notifier.calls == [(1, "webrev/01/bbbb-1111", "webrev/00-01/0000-1111")]

    def test_body_does_not_render(self, factory, renderer, notifier):
        revision = factory.revision(_revision(), factory.root(_root()))
        assert "updated the pull request incrementally" in revision.body
        assert renderer.calls == []
        assert notifier.calls == []

    def test_failed_rebase_presents_full_revision(self, pr_info, renderer, notifier):
        rebaser = FakeRebaser(error=OSError("conflict"))
        factory = MessageFactory(pr_info, rebaser, renderer, notifier)
        revision = factory.revision(_revision(base=NEW_BASE), factory.root(_root()))

        assert "new target base" in revision.body
        assert "not available" in revision.footer
        assert notifier.calls == [(1, "webrev/01/cccc-1111", None)]
        assert len(rebaser.calls) == 1

    def test_rebased_footer_references_both_heads(self, factory):
        revision = factory.revision(_revision(base=NEW_BASE), factory.root(_root()))
        footer = revision.footer
        assert "r" * 12 in footer
        assert HEAD0[:12] in footer


class TestCommitHistory:
    def _factory(self, pr_info, rebaser, renderer, history):
        return MessageFactory(pr_info, rebaser, renderer, history=history)

    def test_root_lists_commits_and_stats(self, pr_info, rebaser, renderer, history):
        root = self._factory(pr_info, rebaser, renderer, history).root(_root())
        assert history.log_calls == []
        assert " - bbbb: first" in root.body
        assert "Changes: bbbb..0000 stats" in root.footer
        assert history.log_calls == [(BASE, HEAD0)]
        assert history.stats_calls == [(BASE, HEAD0)]

    def test_incremental_revision_lists_commits_since_previous_head(self, pr_info, rebaser, renderer, history):
        factory = self._factory(pr_info, rebaser, renderer, history)
        revision = factory.revision(_revision(), factory.root(_root()))
        assert " - 0000: first" in revision.body
        assert history.log_calls == [(HEAD0, HEAD1)]

    def test_rebased_revision_lists_commits_since_rebased_head(self, pr_info, rebaser, renderer, history):
        factory = self._factory(pr_info, rebaser, renderer, history)
        revision = factory.revision(_revision(base=NEW_BASE), factory.root(_root()))
        revision.body
        assert history.log_calls == [("r" * 40, HEAD1)]

    def test_full_revision_lists_every_commit(self, pr_info, renderer, history):
        rebaser = FakeRebaser(error=OSError("conflict"))
        factory = self._factory(pr_info, rebaser, renderer, history)
        revision = factory.revision(_revision(base=NEW_BASE), factory.root(_root()))
        revision.body
        assert history.log_calls == [(NEW_BASE, HEAD1)]

    def test_revision_footer_stats_cover_whole_change(self, pr_info, rebaser, renderer, history):
        factory = self._factory(pr_info, rebaser, renderer, history)
        revision = factory.revision(_revision(), factory.root(_root()))
        assert "Changes: bbbb..1111 stats" in revision.footer
        assert history.stats_calls == [(BASE, HEAD1)]

    def test_without_history_no_commit_section(self, factory):
        root = factory.root(_root())
        assert "Commit messages" not in root.body
        assert "Patch: https://github.com/owner/repo/pull/17.diff" in root.footer


class TestReplies:
    def test_comment(self, factory):
        root = factory.root(_root())
        comment = PlainComment(id="42", author=BOB, created_at=at(5), updated_at=at(6), body="  Nice work  ")
        message = factory.comment(comment, root)

        assert message.id == "pc42"
        assert message.kind is MessageKind.COMMENT
        assert message.parent_id == "fc"
        assert message.extra_headers == {}
        assert message.subject == "Re: RFR: 8300000: Fix the frobnicator"
        assert message.header.endswith("Alice Liddell wrote:")
        assert message.body == "Nice work"
        assert message.footer == "PR: https://github.com/owner/repo/pull/17"
        assert message.updated_at == at(6)

    def test_reply_to_reply_does_not_stack_prefixes(self, factory):
        root = factory.root(_root())
        first = factory.comment(PlainComment("1", BOB, at(5), at(5), "a"), root)
        second = factory.comment(PlainComment("2", CAROL, at(6), at(6), "b"), first)
        assert second.subject == "Re: RFR: 8300000: Fix the frobnicator"
        assert "Bob Builder wrote:" in second.header

    def test_review(self, factory):
        root = factory.root(_root())
        review = Review(id="7", author=BOB, created_at=at(9), reviewed_hash=HEAD0, state="APPROVED", body="LGTM")
        message = factory.review(review, root)

        assert message.id == "rv7"
        assert message.created_at == message.updated_at == at(9)
        assert message.body == "Marked as reviewed by bob.\n\nLGTM"
        assert message.footer.endswith("#pullrequestreview-7")

    def test_review_comment(self, factory):
        root = factory.root(_root())
        comment = ReviewComment(
            id="9",
            author=CAROL,
            created_at=at(8),
            updated_at=at(8),
            body="Typo here",
            thread_id="9",
            reviewed_hash=HEAD0,
            path="src/frob.c",
            line=12,
        )
        message = factory.review_comment(comment, root)
        assert message.id == "rc9"
        assert message.body == "src/frob.c line 12:\n\nTypo here"
        assert message.footer == "PR: https://github.com/owner/repo/pull/17"


class TestMessageValue:
    def test_messages_are_hashable(self, factory):
        root = factory.root(_root())
        assert {root: "root"}[root] == "root"

    def test_extra_headers_are_read_only(self, factory):
        root = factory.root(_root())
        with pytest.raises(TypeError):
            root.extra_headers["X-Extra"] = "1"
        assert dict(root.extra_headers) == {HEAD_HASH_HEADER: HEAD0, BASE_HASH_HEADER: BASE}
