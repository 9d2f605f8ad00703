"""Per-turn accumulator.

TurnLedger owns the working GameState copy and the TurnSummary for a single
advance_turn() call. Every money, reputation and artist-stat change goes
through it so the change log, the totals and the clamping rules stay in step.
Artists touched during the turn are cached here and written back once by
flush_artists().
"""

from __future__ import annotations

import logging
from typing import Any

from label_tycoon.models import (
    Artist,
    ArtistDelta,
    Change,
    ChangeType,
    GameState,
    TurnSummary,
    clamp_stat,
)
from label_tycoon.storage import GameStore

logger = logging.getLogger(__name__)

ARTIST_STATS = ("mood", "loyalty", "energy", "popularity")


class TurnLedger:
    def __init__(self, state: GameState, store: GameStore) -> None:
        self.state = state
        self.store = store
        self.summary = TurnSummary(turn=state.current_turn)
        self._artists: dict[str, Artist] = {}
        self._dirty: set[str] = set()

    # -- Change log -----------------------------------------------------

    def log(self, type: ChangeType, description: str, **fields: Any) -> Change:
        change = Change(type=type, description=description, **fields)
        self.summary.changes.append(change)
        return change

    def reject(self, description: str, **fields: Any) -> Change:
        logger.info("action rejected turn=%d: %s", self.state.current_turn, description)
        return self.log("rejected", description, **fields)

    # -- Money ----------------------------------------------------------

    def earn(self, amount: int, type: ChangeType, description: str, **fields: Any) -> None:
        self.state.money += amount
        self.summary.revenue += amount
        self.log(type, description, amount=amount, **fields)

    def spend(self, amount: int, category: str, type: ChangeType, description: str, **fields: Any) -> None:
        """Deduct an expense and file it under an ExpenseBreakdown field."""
        self.state.money -= amount
        self.summary.expenses += amount
        breakdown = self.summary.expense_breakdown
        setattr(breakdown, category, getattr(breakdown, category) + amount)
        self.log(type, description, amount=-amount, **fields)

    def can_afford(self, amount: int) -> bool:
        return self.state.money >= amount

    # -- Reputation -----------------------------------------------------

    def adjust_reputation(self, delta: int, source: str) -> int:
        """Apply a clamped reputation change; returns the change actually applied."""
        before = self.state.reputation
        self.state.reputation = clamp_stat(before + delta)
        applied = self.state.reputation - before
        if applied:
            changes = self.summary.reputation_changes
            changes[source] = changes.get(source, 0) + applied
        return applied

    # -- Artists --------------------------------------------------------

    def artist(self, artist_id: str) -> Artist | None:
        """Turn-local view of an artist, including changes not yet flushed."""
        if artist_id not in self._artists:
            artist = self.store.get_artist_by_id(artist_id)
            if artist is None or artist.game_id != self.state.id:
                return None
            self._artists[artist_id] = artist
        return self._artists[artist_id]

    def signed_artists(self) -> list[Artist]:
        roster = sorted(self.store.get_artists_for_game(self.state.id), key=lambda a: a.id)
        return [a for a in (self.artist(r.id) for r in roster) if a is not None and a.signed]

    def adjust_artist(self, artist: Artist, stat: str, delta: int) -> int:
        if stat not in ARTIST_STATS:
            raise ValueError(f"Unknown artist stat: {stat}")
        cached = self.artist(artist.id) or artist
        before = getattr(cached, stat)
        after = clamp_stat(before + delta)
        setattr(cached, stat, after)
        applied = after - before
        if applied:
            record = self.summary.artist_changes.setdefault(cached.id, ArtistDelta())
            setattr(record, stat, getattr(record, stat) + applied)
            self._dirty.add(cached.id)
        return applied

    def flush_artists(self) -> None:
        for artist_id in sorted(self._dirty):
            a = self._artists[artist_id]
            self.store.update_artist(artist_id, {stat: getattr(a, stat) for stat in ARTIST_STATS})
        self._dirty.clear()

    # -- Wrap-up --------------------------------------------------------

    def finalize(self) -> TurnSummary:
        s = self.summary
        b = s.expense_breakdown
        parts = [
            f"{label} ${amount:,}"
            for label, amount in (
                ("operations", b.operations),
                ("artists", b.artist_costs),
                ("projects", b.project_costs),
                ("marketing", b.marketing_costs),
                ("meetings", b.meeting_costs),
                ("events", b.event_costs),
                ("tours", b.tour_costs),
            )
            if amount
        ]
        detail = f" ({', '.join(parts)})" if parts else ""
        s.financial_breakdown = (
            f"Revenue ${s.revenue:,} - Expenses ${s.expenses:,}{detail} = Net ${s.revenue - s.expenses:,}"
        )
        return s
