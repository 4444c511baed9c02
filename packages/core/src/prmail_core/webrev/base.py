"""Abstract collaborator interfaces used by revision messages.

The archive engine depends on these ABCs, never on a concrete backend, so a
hosted webrev service, a local git checkout or a test fake can be swapped in
without touching the threading code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Rebaser(ABC):
    """Re-derives a previous head on top of a new base."""

    @abstractmethod
    def rebase(self, previous_head: str, new_base: str) -> str:
        """Return the hash of ``previous_head`` rebased onto ``new_base``.

        Best effort: raise an OSError (conflict, missing object, git failure)
        when the rebase is not possible. Callers treat that as a downgrade to a
        full diff, not as an error.
        """


class DiffRenderer(ABC):
    """Renders a linkable diff artifact ("webrev") between two commits."""

    @abstractmethod
    def render(self, from_hash: str, to_hash: str, label: str) -> str:
        """Render the diff and return a reference (URL or path) to the artifact.

        Must be idempotent for identical arguments so repeated builds over a
        growing event log do not duplicate work. Errors propagate.
        """


class Notifier(ABC):
    """Side channel told about every rendered revision."""

    @abstractmethod
    def notify(self, revision_index: int, full: str, incremental: str | None) -> None:
        """Announce the artifacts of revision ``revision_index`` (0 for the root)."""


class CommitHistory(ABC):
    """Describes the commits between two hashes for message bodies."""

    @abstractmethod
    def stats(self, base: str, head: str) -> str:
        """Return a one-line change summary, e.g. ``"3 lines in 1 file changed: 1 ins; 1 del; 1 mod"``."""

    @abstractmethod
    def commit_messages(self, first: str, last: str) -> list[str]:
        """Return one line per commit in ``first..last``, oldest first."""
