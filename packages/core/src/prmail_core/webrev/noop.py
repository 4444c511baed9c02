"""No-op notifier, the default when nobody listens for new webrevs."""

from __future__ import annotations

from prmail_core.webrev.base import Notifier


class NoOpNotifier(Notifier):
    """Silently discards every notification."""

    def notify(self, revision_index: int, full: str, incremental: str | None) -> None:
        pass  # intentional no-op
