"""Diff presentation for revision updates.

Every revision gets a full webrev of (base, head). Whether it also gets an
incremental webrev depends on what happened to the base:

- base unchanged: incremental diff previous head -> head
- base moved, previous head rebases cleanly onto it: incremental diff rebased
  previous head -> head
- base moved, rebase fails: no incremental diff, the revision is presented as
  if it were the first one

The rebase attempt and the render/notify step are memoized separately. The
revision body needs to know the strategy, but reading it must not render
artifacts or notify anybody; only the footer does that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from functools import cached_property

from prmail_core.events import RevisionUpdate
from prmail_core.webrev.base import DiffRenderer, Notifier, Rebaser

logger = logging.getLogger(__name__)


class DiffStrategy(str, Enum):
    INCREMENTAL = "incremental"
    REBASED_INCREMENTAL = "rebased-incremental"
    FULL = "full"


def full_label(index: int) -> str:
    return f"{index:02d}"


def incremental_label(index: int) -> str:
    return f"{index - 1:02d}-{index:02d}"


@dataclass(frozen=True)
class RevisionDiff:
    """Outcome of rendering one revision update."""

    strategy: DiffStrategy
    index: int
    base: str
    head: str
    previous_head: str
    full: str
    incremental: str | None = None
    rebased_previous_head: str | None = None


class RevisionDiffStrategy:
    """Decides and drives the diff presentation of one revision update.

    Not safe to evaluate concurrently for the same revision; the archive
    builder hands each instance to exactly one message.
    """

    def __init__(self, update: RevisionUpdate, rebaser: Rebaser, renderer: DiffRenderer, notifier: Notifier):
        self.update = update
        self._rebaser = rebaser
        self._renderer = renderer
        self._notifier = notifier

    @property
    def base_moved(self) -> bool:
        return self.update.base != self.update.previous_base

    @cached_property
    def rebased_previous_head(self) -> str | None:
        """The previous head rebased onto the new base, or None if that failed.

        Only attempted when the base moved.
        """
        if not self.base_moved:
            return None
        update = self.update
        try:
            return self._rebaser.rebase(update.previous_head, update.base)
        except OSError as e:
            logger.info(
                "Revision %d: could not rebase %s onto %s, presenting a full diff (%s)",
                update.index,
                update.previous_head[:12],
                update.base[:12],
                e,
            )
            return None

    @property
    def strategy(self) -> DiffStrategy:
        if not self.base_moved:
            return DiffStrategy.INCREMENTAL
        if self.rebased_previous_head is not None:
            return DiffStrategy.REBASED_INCREMENTAL
        return DiffStrategy.FULL

    @cached_property
    def result(self) -> RevisionDiff:
        """Render the artifacts and notify. Runs once; errors are not cached."""
        update = self.update
        full = self._renderer.render(update.base, update.head, full_label(update.index))

        strategy = self.strategy
        incremental = None
        if strategy is DiffStrategy.INCREMENTAL:
            incremental = self._renderer.render(update.previous_head, update.head, incremental_label(update.index))
        elif strategy is DiffStrategy.REBASED_INCREMENTAL:
            incremental = self._renderer.render(
                self.rebased_previous_head, update.head, incremental_label(update.index)
            )

        self._notifier.notify(update.index, full, incremental)
        logger.debug("Revision %d rendered with %s strategy", update.index, strategy.value)
        return RevisionDiff(
            strategy=strategy,
            index=update.index,
            base=update.base,
            head=update.head,
            previous_head=update.previous_head,
            full=full,
            incremental=incremental,
            rebased_previous_head=self.rebased_previous_head,
        )
