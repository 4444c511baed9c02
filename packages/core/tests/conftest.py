from __future__ import annotations

import pytest

from helpers import ALICE, FakeHistory, FakeNotifier, FakeRebaser, FakeRenderer
from prmail_core.events import PullRequestInfo
from prmail_core.factory import MessageFactory


@pytest.fixture
def rebaser():
    return FakeRebaser()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def history():
    return FakeHistory()


@pytest.fixture
def pr_info():
    return PullRequestInfo(
        number=17,
        title="8300000: Fix the frobnicator",
        author=ALICE,
        web_url="https://github.com/owner/repo/pull/17",
        body="Please review this change.",
        source_ref="fix-frob",
        repo_url="https://github.com/alice/repo.git",
    )


@pytest.fixture
def factory(pr_info, rebaser, renderer, notifier):
    return MessageFactory(pr_info, rebaser=rebaser, renderer=renderer, notifier=notifier)
