"""Reputation-gated progression.

Access ladders (playlist, press, venue) always reflect the current
reputation, so they can fall as well as rise. Producer tiers and the binary
unlocks only ever move forward, and each fires its notification once.
"""

from __future__ import annotations

import logging

from label_tycoon.balance import Balance
from label_tycoon.engine.ledger import TurnLedger
from label_tycoon.models import GameState, UnlockKind

logger = logging.getLogger(__name__)

LADDERS = ("playlist", "press", "venue")


class ProgressionGate:
    def __init__(self, balance: Balance) -> None:
        self.balance = balance

    def resolve_tier(self, ladder: str, reputation: int) -> str:
        """Highest tier whose threshold is met; later config entries win ties."""
        tiers = getattr(self.balance.access_tiers, ladder)
        current = tiers[0].name
        for tier in tiers:
            if reputation >= tier.threshold:
                current = tier.name
        return current

    def apply(self, ledger: TurnLedger) -> None:
        state = ledger.state
        self._update_access(ledger, state)
        self._update_producers(ledger, state)
        self._update_unlocks(ledger, state)

    def _update_access(self, ledger: TurnLedger, state: GameState) -> None:
        for ladder in LADDERS:
            field = f"{ladder}_access"
            before = getattr(state, field)
            after = self.resolve_tier(ladder, state.reputation)
            if after == before:
                continue
            setattr(state, field, after)
            key = f"{ladder}:{after}"
            if key not in state.tier_unlock_history and after != "none":
                state.tier_unlock_history[key] = state.current_turn
            ledger.log("unlock", f"{ladder.capitalize()} access {before} -> {after}")
            logger.info("access change game=%s %s %s -> %s", state.id, ladder, before, after)

    def _update_producers(self, ledger: TurnLedger, state: GameState) -> None:
        previously = set(state.unlocked_producer_tiers)
        unlocked = [
            name for name, tier in self.balance.producer_tiers.items()
            if name in previously or state.reputation >= tier.threshold
        ]
        for name in unlocked:
            if name not in previously:
                ledger.log("unlock", f"{name.capitalize()} producers are now available")
        state.unlocked_producer_tiers = unlocked

    def _update_unlocks(self, ledger: TurnLedger, state: GameState) -> None:
        cfg = self.balance.progression
        if state.reputation >= cfg.second_artist_slot_reputation:
            if self._fire_once(state, "second_artist_slot"):
                state.artist_slots += 1
                ledger.log("unlock", "A second artist slot is open")
        if state.reputation >= cfg.fourth_focus_slot_reputation:
            if self._fire_once(state, "fourth_focus_slot"):
                state.focus_slots += 1
                ledger.log("unlock", "A fourth focus slot is open")

    @staticmethod
    def _fire_once(state: GameState, unlock: UnlockKind) -> bool:
        if unlock in state.unlocks:
            return False
        state.unlocks.append(unlock)
        return True
