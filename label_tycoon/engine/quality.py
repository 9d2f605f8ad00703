"""Song quality composition and project costing.

    quality = clamp(20, 100, (base + mood + producer + time + budget) * song_count_impact)

``base`` is the only random component and costs exactly one RNG draw per
song. Everything else is a pure function of the artist, the project and the
balance tables.
"""

from __future__ import annotations

import logging
import math

from label_tycoon.balance import Balance
from label_tycoon.engine.errors import ActionRejected
from label_tycoon.models import Artist, Project, clamp_quality
from label_tycoon.rng import RNG

logger = logging.getLogger(__name__)

BASE_QUALITY_LOW = 40
BASE_QUALITY_SPAN = 20
MOOD_FACTOR = 0.2


class QualityModel:
    def __init__(self, balance: Balance) -> None:
        self.balance = balance

    # ------------------------------------------------------------------
    # Quality
    # ------------------------------------------------------------------

    def calculate_song_quality(self, artist: Artist, project: Project, rng: RNG) -> int:
        """Quality for one song of ``project``. Caller has already validated tiers."""
        base = BASE_QUALITY_LOW + rng() * BASE_QUALITY_SPAN
        mood_bonus = self.mood_bonus(artist.mood)
        producer_bonus = self.balance.producer_tiers[project.producer_tier].quality_bonus
        time_bonus = self.balance.time_investment[project.time_investment].quality_bonus
        budget_bonus = self.budget_bonus(project.budget_per_song, project.type, project.song_count)
        impact = self.song_count_impact(project.song_count)

        raw = (base + mood_bonus + producer_bonus + time_bonus + budget_bonus) * impact
        quality = clamp_quality(raw)
        logger.debug(
            "quality project=%s base=%.1f mood=%d producer=%d time=%d budget=%.2f impact=%.3f -> %d",
            project.id, base, mood_bonus, producer_bonus, time_bonus, budget_bonus, impact, quality,
        )
        return quality

    @staticmethod
    def mood_bonus(mood: int) -> int:
        return math.floor((mood - 50) * MOOD_FACTOR)

    def song_count_impact(self, song_count: int) -> float:
        """Per-song multiplier; more songs in one project split the artist's attention."""
        cfg = self.balance.song_count
        if song_count <= 1:
            return 1.0
        return max(cfg.min_multiplier, cfg.base_per_song_factor ** (song_count - 1))

    # ------------------------------------------------------------------
    # Budget
    # ------------------------------------------------------------------

    def economies_of_scale(self, song_count: int) -> float:
        multiplier = 1.0
        for bracket in self.balance.song_count.economies_of_scale:
            if song_count >= bracket.min_songs:
                multiplier = bracket.multiplier
        return multiplier

    def minimum_viable_cost(self, project_type: str, song_count: int) -> float:
        """Per-song spend considered the floor for a decent recording."""
        type_cfg = self.balance.project_types[project_type]
        return (
            type_cfg.base_per_song_cost
            * self.economies_of_scale(song_count)
            * self.balance.budget_quality.baseline_quality_multiplier
        )

    def budget_ratio(self, budget_per_song: float, project_type: str, song_count: int) -> float:
        minimum = self.minimum_viable_cost(project_type, song_count)
        if minimum <= 0:
            return 0.0
        return budget_per_song / minimum

    def budget_bonus(self, budget_per_song: float, project_type: str, song_count: int) -> float:
        return self.budget_bonus_for_ratio(self.budget_ratio(budget_per_song, project_type, song_count))

    def budget_bonus_for_ratio(self, ratio: float) -> float:
        cfg = self.balance.budget_quality
        max_bonus = cfg.max_bonus

        if ratio < cfg.minimum_viable:
            return cfg.penalty
        if ratio < cfg.optimal_efficiency:
            progress = (ratio - cfg.minimum_viable) / (cfg.optimal_efficiency - cfg.minimum_viable)
            return progress * 0.4 * max_bonus
        if ratio < cfg.luxury:
            progress = (ratio - cfg.optimal_efficiency) / (cfg.luxury - cfg.optimal_efficiency)
            return (0.4 + progress * 0.4) * max_bonus
        if ratio < cfg.diminishing:
            progress = (ratio - cfg.luxury) / (cfg.diminishing - cfg.luxury)
            return (0.8 + progress * 0.2) * max_bonus
        excess = ratio - cfg.diminishing
        return max_bonus + math.log(1 + excess) * cfg.diminishing_factor * max_bonus * 0.1

    def budget_efficiency_rating(self, budget_per_song: float, project_type: str, song_count: int) -> str:
        ratio = self.budget_ratio(budget_per_song, project_type, song_count)
        label = self.balance.budget_quality.efficiency_ratings[0].label
        for rating in self.balance.budget_quality.efficiency_ratings:
            if ratio >= rating.min_ratio:
                label = rating.label
        return label

    # ------------------------------------------------------------------
    # Cost and validation
    # ------------------------------------------------------------------

    def calculate_project_cost(
        self,
        budget_per_song: int,
        song_count: int,
        producer_tier: str,
        time_investment: str,
    ) -> int:
        producer = self.balance.producer_tiers[producer_tier]
        time = self.balance.time_investment[time_investment]
        return round(budget_per_song * song_count * producer.cost_multiplier * time.cost_multiplier)

    def validate_producer_time(self, producer_tier: str, time_investment: str) -> None:
        if producer_tier not in self.balance.producer_tiers:
            raise ActionRejected(f"Unknown producer tier '{producer_tier}'")
        if time_investment not in self.balance.time_investment:
            raise ActionRejected(f"Unknown time investment '{time_investment}'")
        for combo in self.balance.disallowed_combinations:
            if combo.producer_tier == producer_tier and combo.time_investment == time_investment:
                raise ActionRejected(
                    f"{producer_tier.title()} producers will not work on a {time_investment} timeline"
                )
