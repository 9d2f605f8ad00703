"""Balance configuration (formula constants, tier tables, campaign length).

Defaults live in ``data/balance.json`` next to this module. An optional
override file is deep-merged over the defaults, so a tuning file only needs
the keys it changes. The merged result is validated into the ``Balance``
model once and then treated as read-only by the engine.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from label_tycoon.models import Effect, ProducerTier, TimeInvestment

logger = logging.getLogger(__name__)

DEFAULT_BALANCE_PATH = Path(__file__).parent / "data" / "balance.json"


class EconomyConfig(BaseModel):
    starting_money: int
    starting_reputation: int
    starting_creative_capital: int
    base_focus_slots: int
    base_artist_slots: int
    operating_burn_range: tuple[int, int]
    default_artist_weekly_cost: int


class CampaignConfig(BaseModel):
    campaign_length_turns: int
    money_divisor: int
    reputation_divisor: int
    dominance_ratio: float
    balanced_ratio: float
    failure_score_floor: int
    survival_score_floor: int


class StarPowerConfig(BaseModel):
    enabled: bool = True
    popularity_threshold: int
    max_bonus: float


class StreamingConfig(BaseModel):
    quality_weight: float
    playlist_weight: float
    reputation_weight: float
    marketing_weight: float
    popularity_weight: float
    playlist_scale: float
    marketing_scale: float
    first_week_multiplier: float
    base_streams_per_point: float
    variance_low: float
    variance_high: float
    revenue_per_stream: float
    star_power: StarPowerConfig
    popularity_gain_per_10k_streams: float
    max_popularity_gain: int
    lead_single_boost: float


class OngoingStreamsConfig(BaseModel):
    decay_rate: float
    max_decay_turns: int
    reputation_bonus_factor: float
    access_tier_bonus_factor: float
    ongoing_factor: float
    revenue_per_stream: float
    minimum_revenue_threshold: int


class PressConfig(BaseModel):
    base_chance: float
    pr_spend_modifier: float
    reputation_modifier: float
    story_flag_bonus: float
    max_pickups_per_release: int
    reputation_per_pickup: int


class MoodBand(BaseModel):
    above: int
    change: int


class PopularityBand(BaseModel):
    below: int
    change: int


class TourPerformanceConfig(BaseModel):
    """Artist reaction to a played city. Attendance is a whole percentage."""

    mood_bands: list[MoodBand]
    poor_show_mood: int
    popularity_min_attendance: int
    popularity_bands: list[PopularityBand]
    max_popularity_gain: int


class TourConfig(BaseModel):
    sell_through_base: float
    reputation_modifier: float
    popularity_weight: float
    sell_through_variance: float
    ticket_price_base: float
    ticket_price_per_capacity: float
    merch_percentage: float
    venue_fee_per_capacity: float
    production_fee_per_capacity: float
    min_cities: int
    max_cities: int
    performance: TourPerformanceConfig


class PlaylistTierConfig(BaseModel):
    name: str
    threshold: int
    multiplier: float


class PressTierConfig(BaseModel):
    name: str
    threshold: int
    pickup_chance: float


class VenueTierConfig(BaseModel):
    name: str
    threshold: int
    capacity_range: tuple[int, int]


class AccessTiersConfig(BaseModel):
    """Reputation ladders. Each list is ordered from lowest to highest tier."""

    playlist: list[PlaylistTierConfig]
    press: list[PressTierConfig]
    venue: list[VenueTierConfig]


class ProducerTierConfig(BaseModel):
    threshold: int
    quality_bonus: int
    cost_multiplier: float


class TimeInvestmentConfig(BaseModel):
    quality_bonus: int
    cost_multiplier: float


class DisallowedCombination(BaseModel):
    producer_tier: ProducerTier
    time_investment: TimeInvestment


class EfficiencyRating(BaseModel):
    min_ratio: float
    label: str


class BudgetQualityConfig(BaseModel):
    minimum_viable: float
    optimal_efficiency: float
    luxury: float
    diminishing: float
    penalty: float
    max_bonus: float
    diminishing_factor: float
    baseline_quality_multiplier: float
    efficiency_ratings: list[EfficiencyRating]


class ScaleBracket(BaseModel):
    min_songs: int
    multiplier: float


class SongCountConfig(BaseModel):
    base_per_song_factor: float
    min_multiplier: float
    economies_of_scale: list[ScaleBracket]


class ProjectTypeConfig(BaseModel):
    min_songs: int
    max_songs: int
    songs_per_turn: int
    base_per_song_cost: int


class MarketingTypeConfig(BaseModel):
    min_cost: int
    max_cost: int
    reputation_per_1000: float


class DialogueConfig(BaseModel):
    mood_range: tuple[int, int]
    loyalty_range: tuple[int, int]
    creative_capital_range: tuple[int, int]


class ArtistStatsConfig(BaseModel):
    mood_drift: int
    mood_drift_band: tuple[int, int]


class ProgressionConfig(BaseModel):
    second_artist_slot_reputation: int
    fourth_focus_slot_reputation: int


class ChoiceConfig(BaseModel):
    immediate: list[Effect] = Field(default_factory=list)
    delayed: list[Effect] = Field(default_factory=list)
    delay_turns: int = 1


class MeetingConfig(BaseModel):
    role: str
    target_scope: str  # "user_selected" | "predetermined" | "global" | "none"
    choices: dict[str, ChoiceConfig]


class SideEventConfig(BaseModel):
    id: str
    title: str
    weight: int = 1
    effects: list[Effect]


class SideEventsConfig(BaseModel):
    chance_per_turn: float
    events: list[SideEventConfig]


class Balance(BaseModel):
    economy: EconomyConfig
    campaign: CampaignConfig
    streaming: StreamingConfig
    ongoing_streams: OngoingStreamsConfig
    press: PressConfig
    tour: TourConfig
    access_tiers: AccessTiersConfig
    producer_tiers: dict[str, ProducerTierConfig]
    time_investment: dict[str, TimeInvestmentConfig]
    disallowed_combinations: list[DisallowedCombination] = Field(default_factory=list)
    budget_quality: BudgetQualityConfig
    song_count: SongCountConfig
    project_types: dict[str, ProjectTypeConfig]
    marketing: dict[str, MarketingTypeConfig]
    dialogue: DialogueConfig
    artist_stats: ArtistStatsConfig
    progression: ProgressionConfig
    meetings: dict[str, MeetingConfig] = Field(default_factory=dict)
    side_events: SideEventsConfig

    # -- Lookups --------------------------------------------------------

    def playlist_multiplier(self, tier: str) -> float:
        for t in self.access_tiers.playlist:
            if t.name == tier:
                return t.multiplier
        raise KeyError(f"Unknown playlist tier: {tier}")

    def press_chance(self, tier: str) -> float:
        for t in self.access_tiers.press:
            if t.name == tier:
                return t.pickup_chance
        raise KeyError(f"Unknown press tier: {tier}")

    def venue_tier(self, tier: str) -> VenueTierConfig | None:
        for t in self.access_tiers.venue:
            if t.name == tier:
                return t
        return None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_balance(override_path: Path | None = None) -> Balance:
    """Read default balance data, merging an optional override file on top."""
    data = json.loads(DEFAULT_BALANCE_PATH.read_text())
    if override_path is not None:
        if override_path.is_file():
            logger.info("balance override loaded from %s", override_path)
            data = _deep_merge(data, json.loads(override_path.read_text()))
        else:
            logger.warning("balance override %s not found, using defaults", override_path)
    return Balance.model_validate(data)


@lru_cache(maxsize=1)
def default_balance() -> Balance:
    """Shared instance of the packaged defaults."""
    return load_balance()
