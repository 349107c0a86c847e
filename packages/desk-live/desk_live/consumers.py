"""Consumer-side reducers merging feed deltas into dashboard state."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Mapping

from desk_live.types import Channel, HeatmapDelta, KpiDelta, SlaBreachTicket

if TYPE_CHECKING:
    from desk_live.connection import LiveFeed

logger = logging.getLogger(__name__)


class KpiBoard:
    """Current KPI values; deltas overwrite the fields they carry.

    Deltas arriving before a snapshot is loaded are ignored.
    """

    def __init__(self, initial: Mapping[str, float] | None = None) -> None:
        self._values: dict[str, float] | None = dict(initial) if initial is not None else None

    @property
    def values(self) -> dict[str, float] | None:
        return dict(self._values) if self._values is not None else None

    def load(self, snapshot: Mapping[str, float]) -> None:
        self._values = dict(snapshot)

    def apply(self, delta: KpiDelta) -> None:
        if self._values is None:
            return
        self._values.update(delta.to_dict())

    def attach(self, feed: LiveFeed) -> None:
        feed.subscribe(Channel.KPI_UPDATE, self.apply)


class HeatmapGrid:
    """Ticket counts per (category, priority) cell.

    Only cells present in the initial data accumulate increments.
    """

    def __init__(self, cells: Iterable[tuple[str, str, int]] = ()) -> None:
        self._cells: dict[tuple[str, str], int] = {}
        for category, priority, value in cells:
            self._cells[(category, priority)] = value

    def value(self, category: str, priority: str) -> int | None:
        return self._cells.get((category, priority))

    def cells(self) -> list[tuple[str, str, int]]:
        return [(c, p, v) for (c, p), v in self._cells.items()]

    def apply(self, delta: HeatmapDelta) -> None:
        key = (delta.category, delta.priority)
        if key not in self._cells:
            logger.debug("Ignoring heatmap update for unknown cell %s/%s", *key)
            return
        self._cells[key] += delta.value

    def attach(self, feed: LiveFeed) -> None:
        feed.subscribe(Channel.HEATMAP_UPDATE, self.apply)


@dataclass
class SlaFeedEntry:
    ticket: SlaBreachTicket
    is_new: bool = True
    flagged_at: float = 0.0


class SlaTicketFeed:
    """Newest-first list of at-risk tickets, one entry per ticket number.

    New entries are flagged ``is_new``. The flag is cleared by
    ``acknowledge()``, or by ``expire()`` once ``highlight_for`` seconds have
    passed (the dashboard highlights for 2.5s). The feed never runs a timer
    of its own; the caller decides when to call ``expire()``.

    Args:
        highlight_for: Seconds an entry stays new. None disables expiry.
        clock: Time source for flagging and expiry.
    """

    def __init__(
        self,
        highlight_for: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if highlight_for is not None and highlight_for < 0:
            raise ValueError(f"highlight_for must be >= 0, got {highlight_for}")
        self._entries: list[SlaFeedEntry] = []
        self._highlight_for = highlight_for
        self._clock = clock

    def entries(self) -> list[SlaFeedEntry]:
        return list(self._entries)

    def apply(self, ticket: SlaBreachTicket) -> None:
        self._entries = [e for e in self._entries if e.ticket.ticket_no != ticket.ticket_no]
        self._entries.insert(0, SlaFeedEntry(ticket, flagged_at=self._clock()))

    def acknowledge(self, ticket_no: str) -> None:
        """Clear the new flag of ``ticket_no``; unknown numbers are ignored."""
        for entry in self._entries:
            if entry.ticket.ticket_no == ticket_no:
                entry.is_new = False

    def expire(self) -> int:
        """Clear the new flag of entries older than ``highlight_for``.

        Returns how many flags were cleared.
        """
        if self._highlight_for is None:
            return 0
        now = self._clock()
        cleared = 0
        for entry in self._entries:
            if entry.is_new and now - entry.flagged_at >= self._highlight_for:
                entry.is_new = False
                cleared += 1
        return cleared

    def attach(self, feed: LiveFeed) -> None:
        feed.subscribe(Channel.NEW_SLA_TICKET, self.apply)
