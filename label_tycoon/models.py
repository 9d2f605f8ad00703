"""Core domain models.

Every engine stage and storage method operates on these types.
Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

STAT_MIN = 0
STAT_MAX = 100
QUALITY_MIN = 20
QUALITY_MAX = 100

PlaylistTier = Literal["none", "niche", "mid", "flagship"]
PressTier = Literal["none", "blogs", "mid_tier", "national"]
VenueTier = Literal["none", "clubs", "theaters", "arenas"]
ProducerTier = Literal["local", "regional", "national", "legendary"]
TimeInvestment = Literal["rushed", "standard", "extended", "perfectionist"]
Archetype = Literal["Visionary", "Workhorse", "Trendsetter"]
ProjectType = Literal["single", "ep", "mini_tour"]
ProjectStage = Literal["planning", "production", "marketing", "released"]
UnlockKind = Literal["second_artist_slot", "fourth_focus_slot"]
VictoryType = Literal[
    "Commercial Success",
    "Critical Acclaim",
    "Balanced Growth",
    "Survival",
    "Failure",
]

PROJECT_STAGES: tuple[ProjectStage, ...] = ("planning", "production", "marketing", "released")


def clamp_stat(value: float) -> int:
    """Round and clamp a 0–100 stat (reputation, mood, loyalty, energy, popularity)."""
    return int(max(STAT_MIN, min(STAT_MAX, round(value))))


def clamp_quality(value: float) -> int:
    return int(max(QUALITY_MIN, min(QUALITY_MAX, round(value))))


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

class EffectKind(str, Enum):
    MONEY = "money"
    REPUTATION = "reputation"
    CREATIVE_CAPITAL = "creative_capital"
    ARTIST_MOOD = "artist_mood"
    ARTIST_LOYALTY = "artist_loyalty"
    ARTIST_ENERGY = "artist_energy"
    ARTIST_POPULARITY = "artist_popularity"


class Effect(BaseModel):
    """A single numeric change to label or artist state."""

    kind: EffectKind
    amount: int


class DelayedEffect(BaseModel):
    """Effects queued by an earlier turn, applied when trigger_turn arrives."""

    trigger_turn: int
    effects: list[Effect]
    artist_ids: list[str] = Field(default_factory=list)  # targets for artist_* effects
    source: str = ""


# ---------------------------------------------------------------------------
# Persistent entities
# ---------------------------------------------------------------------------

class GameState(BaseModel):
    """Label-level state threaded through advance_turn()."""

    id: str
    current_turn: int = 0
    money: int = 0
    reputation: int = Field(default=0, ge=STAT_MIN, le=STAT_MAX)
    creative_capital: int = 0
    focus_slots: int = 3
    used_focus_slots: int = 0
    artist_slots: int = 1
    playlist_access: PlaylistTier = "none"
    press_access: PressTier = "none"
    venue_access: VenueTier = "none"
    campaign_completed: bool = False
    delayed_effects: list[DelayedEffect] = Field(default_factory=list)
    unlocked_producer_tiers: list[ProducerTier] = Field(default_factory=lambda: ["local"])
    unlocks: list[UnlockKind] = Field(default_factory=list)
    tier_unlock_history: dict[str, int] = Field(default_factory=dict)  # "playlist:niche" -> turn


class Artist(BaseModel):
    """A signed (or released) artist on the label roster."""

    id: str
    game_id: str
    name: str
    archetype: Archetype
    talent: int = Field(default=50, ge=STAT_MIN, le=STAT_MAX)
    work_ethic: int = Field(default=50, ge=STAT_MIN, le=STAT_MAX)
    mood: int = Field(default=50, ge=STAT_MIN, le=STAT_MAX)
    loyalty: int = Field(default=50, ge=STAT_MIN, le=STAT_MAX)
    energy: int = Field(default=50, ge=STAT_MIN, le=STAT_MAX)
    popularity: int = Field(default=0, ge=STAT_MIN, le=STAT_MAX)
    weekly_cost: int = 1200
    signed: bool = True


class Project(BaseModel):
    """A recording or touring project moving through the production pipeline."""

    id: str
    game_id: str
    artist_id: str
    title: str
    type: ProjectType
    stage: ProjectStage = "planning"
    song_count: int = 0
    songs_created: int = 0
    budget_per_song: int = 0
    producer_tier: ProducerTier = "local"
    time_investment: TimeInvestment = "standard"
    total_cost: int = 0
    marketing_budget: int = 0
    start_turn: int = 0
    lead_single: bool = False
    lead_single_released: bool = False
    cities: int = 0
    cities_played: int = 0
    venue_tier: VenueTier = "none"
    venue_capacity: int = 0
    tour_revenue: int = 0
    released_turn: int | None = None


class Song(BaseModel):
    """A recorded song. Quality is fixed once generated."""

    id: str
    game_id: str
    project_id: str
    artist_id: str
    title: str
    quality: int = Field(ge=QUALITY_MIN, le=QUALITY_MAX)
    created_turn: int
    is_recorded: bool = True
    is_released: bool = False
    release_turn: int | None = None
    initial_streams: int = 0
    total_streams: int = 0
    total_revenue: int = 0
    last_turn_streams: int = 0
    last_turn_revenue: int = 0


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class _ActionBase(BaseModel):
    target_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class RoleMeetingAction(_ActionBase):
    action_type: Literal["role_meeting"] = "role_meeting"


class StartProjectAction(_ActionBase):
    action_type: Literal["start_project"] = "start_project"


class MarketingAction(_ActionBase):
    action_type: Literal["marketing"] = "marketing"


class ArtistDialogueAction(_ActionBase):
    action_type: Literal["artist_dialogue"] = "artist_dialogue"


Action = Annotated[
    Union[RoleMeetingAction, StartProjectAction, MarketingAction, ArtistDialogueAction],
    Field(discriminator="action_type"),
]


# Typed views over Action.metadata, parsed when the action is resolved.

class MeetingChoice(BaseModel):
    meeting_id: str
    choice_id: str


class ProjectSpec(BaseModel):
    title: str
    project_type: ProjectType
    song_count: int = 0
    budget_per_song: int = Field(default=0, ge=0)
    producer_tier: ProducerTier = "local"
    time_investment: TimeInvestment = "standard"
    marketing_budget: int = Field(default=0, ge=0)
    lead_single: bool = False
    cities: int = 0
    venue_capacity: int = 0


class MarketingSpec(BaseModel):
    marketing_type: Literal["pr_push", "digital_ads", "radio"]
    spend: int | None = Field(default=None, ge=0)  # None -> default campaign cost


# ---------------------------------------------------------------------------
# Turn output
# ---------------------------------------------------------------------------

ChangeType = Literal[
    "meeting",
    "project",
    "marketing",
    "dialogue",
    "rejected",
    "recording",
    "release",
    "tour",
    "ongoing_revenue",
    "delayed_effect",
    "event",
    "expense",
    "mood_drift",
    "unlock",
    "campaign",
]


class Change(BaseModel):
    """One human-readable entry in the turn's change log."""

    type: ChangeType
    description: str
    amount: int = 0
    artist_id: str | None = None
    project_id: str | None = None
    song_id: str | None = None


class ArtistDelta(BaseModel):
    mood: int = 0
    loyalty: int = 0
    energy: int = 0
    popularity: int = 0


class ExpenseBreakdown(BaseModel):
    operations: int = 0
    artist_costs: int = 0
    project_costs: int = 0
    marketing_costs: int = 0
    meeting_costs: int = 0
    event_costs: int = 0
    tour_costs: int = 0


class EventOccurrence(BaseModel):
    id: str
    title: str


class TurnSummary(BaseModel):
    """Everything that happened during one advance_turn() call."""

    turn: int
    changes: list[Change] = Field(default_factory=list)
    revenue: int = 0
    expenses: int = 0
    expense_breakdown: ExpenseBreakdown = Field(default_factory=ExpenseBreakdown)
    reputation_changes: dict[str, int] = Field(default_factory=dict)
    events: list[EventOccurrence] = Field(default_factory=list)
    artist_changes: dict[str, ArtistDelta] = Field(default_factory=dict)
    streams: int = 0
    press_pickups: int = 0
    financial_breakdown: str = ""


class ScoreBreakdown(BaseModel):
    money: int
    reputation: int
    access_tier_bonus: int


class CampaignResults(BaseModel):
    campaign_completed: bool = True
    final_score: int
    score_breakdown: ScoreBreakdown
    victory_type: VictoryType
    summary: str
    achievements: list[str] = Field(default_factory=list)


class TurnResult(BaseModel):
    game_state: GameState
    summary: TurnSummary
    campaign_results: CampaignResults | None = None
