"""Catalog (ongoing) revenue from previously released songs.

    streams = initial × decay_rate^elapsed × reputation_bonus × access_bonus × ongoing_factor

Songs released this turn, or longer ago than max_decay_turns, earn nothing.
"""

from __future__ import annotations

import logging

from label_tycoon.balance import Balance
from label_tycoon.engine.ledger import TurnLedger
from label_tycoon.models import Song

logger = logging.getLogger(__name__)


class DecayEngine:
    def __init__(self, balance: Balance) -> None:
        self.balance = balance

    def calculate_ongoing_revenue(
        self,
        song: Song,
        current_turn: int,
        reputation: int,
        playlist_access: str,
    ) -> tuple[int, int]:
        """Return (revenue, streams) for one song this turn."""
        cfg = self.balance.ongoing_streams
        if song.release_turn is None:
            return 0, 0
        elapsed = current_turn - song.release_turn
        if elapsed <= 0 or elapsed > cfg.max_decay_turns:
            return 0, 0

        decay = cfg.decay_rate ** elapsed
        reputation_bonus = 1 + (reputation - 50) * cfg.reputation_bonus_factor
        access_bonus = 1 + (self.balance.playlist_multiplier(playlist_access) - 1) * cfg.access_tier_bonus_factor
        streams = song.initial_streams * decay * reputation_bonus * access_bonus * cfg.ongoing_factor
        revenue = round(streams * cfg.revenue_per_stream)
        if revenue < cfg.minimum_revenue_threshold:
            return 0, 0
        return revenue, max(0, round(streams))

    def process_catalog(self, ledger: TurnLedger) -> int:
        """Credit ongoing revenue for every released song; one batched song write."""
        state = ledger.state
        songs = sorted(ledger.store.get_released_songs_for_game(state.id), key=lambda s: s.id)
        updated: list[Song] = []
        total = 0

        for song in songs:
            revenue, streams = self.calculate_ongoing_revenue(
                song, state.current_turn, state.reputation, state.playlist_access,
            )
            if revenue <= 0:
                released_now = song.release_turn == state.current_turn
                if not released_now and (song.last_turn_revenue or song.last_turn_streams):
                    updated.append(song.model_copy(update={"last_turn_revenue": 0, "last_turn_streams": 0}))
                continue
            updated.append(song.model_copy(update={
                "total_streams": song.total_streams + streams,
                "total_revenue": song.total_revenue + revenue,
                "last_turn_streams": streams,
                "last_turn_revenue": revenue,
            }))
            ledger.summary.streams += streams
            ledger.earn(
                revenue, "ongoing_revenue",
                f'"{song.title}" earned ${revenue:,} from {streams:,} catalog streams',
                song_id=song.id, artist_id=song.artist_id,
            )
            total += revenue

        ledger.store.update_songs(updated)
        logger.debug("catalog turn=%d songs=%d revenue=%d", state.current_turn, len(songs), total)
        return total
