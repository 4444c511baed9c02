"""Users, timestamps and collaborator fakes shared by the core tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from prmail_core.events import HostUser
from prmail_core.webrev.base import CommitHistory, DiffRenderer, Notifier, Rebaser

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

ALICE = HostUser("alice", "Alice Liddell")
BOB = HostUser("bob", "Bob Builder")
CAROL = HostUser("carol")


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


class FakeRebaser(Rebaser):
    def __init__(self, result: str = "r" * 40, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls = []

    def rebase(self, previous_head, new_base):
        self.calls.append((previous_head, new_base))
        if self.error is not None:
            raise self.error
        return self.result


class FakeRenderer(DiffRenderer):
    def __init__(self):
        self.calls = []

    def render(self, from_hash, to_hash, label):
        self.calls.append((from_hash, to_hash, label))
        return f"webrev/{label}/{from_hash[:4]}-{to_hash[:4]}"


class FakeNotifier(Notifier):
    def __init__(self):
        self.calls = []

    def notify(self, revision_index, full, incremental):
        self.calls.append((revision_index, full, incremental))


class FakeHistory(CommitHistory):
    def __init__(self):
        self.stats_calls = []
        self.log_calls = []

    def stats(self, base, head):
        self.stats_calls.append((base, head))
        return f"{base[:4]}..{head[:4]} stats"

    def commit_messages(self, first, last):
        self.log_calls.append((first, last))
        return [f"{first[:4]}: first", f"{last[:4]}: last"]
