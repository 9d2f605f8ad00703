"""End-of-campaign scoring and victory classification."""

from __future__ import annotations

import logging
import math

from label_tycoon.balance import Balance
from label_tycoon.models import CampaignResults, GameState, ScoreBreakdown, VictoryType

logger = logging.getLogger(__name__)

ACCESS_POINTS_PER_TIER = 10  # per rung climbed on each access ladder

_SUMMARIES: dict[str, str] = {
    "Commercial Success": "The label became a commercial powerhouse with ${money}k in the bank and {reputation} reputation.",
    "Critical Acclaim": "The label earned critical acclaim with {reputation} reputation, even if the bank shows ${money}k.",
    "Balanced Growth": "The label balanced business and credibility: ${money}k and {reputation} reputation.",
    "Survival": "The label survived a tough industry with ${money}k and {reputation} reputation.",
    "Failure": "The industry proved too much this time: ${money}k and {reputation} reputation.",
}


class CampaignScorer:
    def __init__(self, balance: Balance) -> None:
        self.balance = balance

    def is_final_turn(self, state: GameState) -> bool:
        return state.current_turn >= self.balance.campaign.campaign_length_turns

    def check(self, state: GameState) -> CampaignResults | None:
        """Score the campaign if its last turn has been reached. Latches the state."""
        if not self.is_final_turn(state):
            return None
        breakdown = self.score_breakdown(state)
        total = breakdown.money + breakdown.reputation + breakdown.access_tier_bonus
        victory = self.classify(state, breakdown, total)
        state.campaign_completed = True
        logger.info("campaign complete game=%s score=%d victory=%s", state.id, total, victory)
        return CampaignResults(
            final_score=total,
            score_breakdown=breakdown,
            victory_type=victory,
            summary=self.summary(state, victory, total),
            achievements=self.achievements(state),
        )

    def score_breakdown(self, state: GameState) -> ScoreBreakdown:
        cfg = self.balance.campaign
        return ScoreBreakdown(
            money=max(0, math.floor(state.money / cfg.money_divisor)),
            reputation=max(0, math.floor(state.reputation / cfg.reputation_divisor)),
            access_tier_bonus=self.access_tier_bonus(state),
        )

    def access_tier_bonus(self, state: GameState) -> int:
        tiers = self.balance.access_tiers
        bonus = 0
        for ladder, current in (
            (tiers.playlist, state.playlist_access),
            (tiers.press, state.press_access),
            (tiers.venue, state.venue_access),
        ):
            names = [t.name for t in ladder]
            if current in names:
                bonus += names.index(current) * ACCESS_POINTS_PER_TIER
        return bonus

    def classify(self, state: GameState, breakdown: ScoreBreakdown, total: int) -> VictoryType:
        cfg = self.balance.campaign
        if state.money < 0 or total < cfg.failure_score_floor:
            return "Failure"
        if total < cfg.survival_score_floor:
            return "Survival"

        money, reputation = breakdown.money, breakdown.reputation
        if money > reputation * cfg.dominance_ratio:
            return "Commercial Success"
        if reputation > money * cfg.dominance_ratio:
            return "Critical Acclaim"
        high = max(money, reputation)
        if high > 0 and min(money, reputation) / high >= cfg.balanced_ratio:
            return "Balanced Growth"
        return "Commercial Success"

    @staticmethod
    def summary(state: GameState, victory: VictoryType, total: int) -> str:
        text = _SUMMARIES[victory].format(money=round(state.money / 1000), reputation=state.reputation)
        return f"{text} Final score: {total}."

    @staticmethod
    def achievements(state: GameState) -> list[str]:
        earned = []
        if state.money >= 1_000_000:
            earned.append("Millionaire")
        if state.money >= 0:
            earned.append("Stayed Solvent")
        if state.reputation >= 80:
            earned.append("Industry Icon")
        if state.playlist_access == "flagship":
            earned.append("Flagship Playlists")
        if state.press_access == "national":
            earned.append("National Press")
        if state.venue_access == "arenas":
            earned.append("Arena Headliners")
        if "legendary" in state.unlocked_producer_tiers:
            earned.append("Legendary Sessions")
        return earned
