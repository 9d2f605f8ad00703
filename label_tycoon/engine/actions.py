"""Action resolution for one turn.

Each submitted action consumes one focus slot, in submission order, whether
or not it succeeds. Validation failures raise ActionRejected inside the
handler; process() turns them into "rejected" change-log entries so the rest
of the turn carries on.

    role_meeting     → immediate effects now, delayed effects queued
    start_project    → validate, pay, create a project in "planning"
    marketing        → pay, then press pickups or flat reputation
    artist_dialogue  → small random mood / loyalty / creative-capital deltas

The operating burn also lives here; the orchestrator calls it once the
turn's events have resolved.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from pydantic import ValidationError

from label_tycoon.balance import Balance
from label_tycoon.engine.effects import EffectContext, apply_effects
from label_tycoon.engine.errors import ActionRejected, InvalidTourParameters
from label_tycoon.engine.financial import FinancialCalculator
from label_tycoon.engine.ledger import TurnLedger
from label_tycoon.engine.quality import QualityModel
from label_tycoon.models import (
    Action,
    Artist,
    ArtistDialogueAction,
    DelayedEffect,
    MarketingAction,
    MarketingSpec,
    MeetingChoice,
    Project,
    ProjectSpec,
    RoleMeetingAction,
    StartProjectAction,
)
from label_tycoon.rng import RNG, rng_int

logger = logging.getLogger(__name__)

DEFAULT_CAMPAIGN_SPEND_POINT = 0.6  # default spend sits 60% of the way from min to max cost


class ActionProcessor:
    def __init__(self, balance: Balance, rng: RNG) -> None:
        self.balance = balance
        self.rng = rng
        self.quality = QualityModel(balance)
        self.financial = FinancialCalculator(balance)
        self._handlers: dict[str, Callable[[TurnLedger, Action, int], None]] = {
            "role_meeting": self._role_meeting,
            "start_project": self._start_project,
            "marketing": self._marketing,
            "artist_dialogue": self._artist_dialogue,
        }

    def process(self, ledger: TurnLedger, actions: list[Action]) -> None:
        state = ledger.state
        for index, action in enumerate(actions):
            if state.used_focus_slots >= state.focus_slots:
                ledger.reject(f"No focus slots left for {action.action_type.replace('_', ' ')}")
                continue
            state.used_focus_slots += 1
            try:
                self._handlers[action.action_type](ledger, action, index)
            except ActionRejected as e:
                ledger.reject(str(e), artist_id=action.target_id)
            except InvalidTourParameters as e:
                ledger.reject(f"Tour rejected: {e}", artist_id=action.target_id)
            except ValidationError as e:
                ledger.reject(
                    f"Invalid {action.action_type.replace('_', ' ')} details ({e.error_count()} problem(s))",
                    artist_id=action.target_id,
                )

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _role_meeting(self, ledger: TurnLedger, action: RoleMeetingAction, index: int) -> None:
        choice_ref = MeetingChoice.model_validate(action.metadata)
        meeting = self.balance.meetings.get(choice_ref.meeting_id)
        if meeting is None:
            raise ActionRejected(f"Unknown meeting '{choice_ref.meeting_id}'")
        choice = meeting.choices.get(choice_ref.choice_id)
        if choice is None:
            raise ActionRejected(f"Unknown choice '{choice_ref.choice_id}' for meeting '{choice_ref.meeting_id}'")

        targets = self._meeting_targets(ledger, meeting.target_scope, action.target_id)
        source = f"{meeting.role.replace('_', ' ').title()} meeting"
        ctx = EffectContext(source=source, change_type="meeting", expense_category="meeting_costs", artists=targets)
        apply_effects(ledger, choice.immediate, ctx)

        if choice.delayed:
            trigger = ledger.state.current_turn + max(1, choice.delay_turns)
            ledger.state.delayed_effects.append(DelayedEffect(
                trigger_turn=trigger,
                effects=list(choice.delayed),
                artist_ids=[a.id for a in targets],
                source=source,
            ))
            ledger.log("meeting", f"{source}: follow-up effects scheduled for turn {trigger}")

    def _meeting_targets(self, ledger: TurnLedger, scope: str, target_id: str | None) -> list[Artist]:
        if scope == "user_selected":
            if not target_id:
                raise ActionRejected("This meeting needs an artist to be selected")
            return [self._require_artist(ledger, target_id)]
        if scope == "predetermined":
            roster = ledger.signed_artists()
            return roster[:1]
        if scope == "global":
            return ledger.signed_artists()
        return []

    def _start_project(self, ledger: TurnLedger, action: StartProjectAction, index: int) -> None:
        spec = ProjectSpec.model_validate(action.metadata)
        artist = self._require_artist(ledger, action.target_id)
        state = ledger.state
        project_id = f"{state.id}-t{state.current_turn}-a{index}"

        if spec.project_type == "mini_tour":
            self._start_tour(ledger, spec, artist, project_id)
            return

        type_cfg = self.balance.project_types[spec.project_type]
        if not type_cfg.min_songs <= spec.song_count <= type_cfg.max_songs:
            raise ActionRejected(
                f"A {spec.project_type} needs {type_cfg.min_songs}-{type_cfg.max_songs} songs, got {spec.song_count}"
            )
        if spec.producer_tier not in state.unlocked_producer_tiers:
            raise ActionRejected(f"{spec.producer_tier.title()} producers are not unlocked yet")
        self.quality.validate_producer_time(spec.producer_tier, spec.time_investment)
        if spec.budget_per_song <= 0:
            raise ActionRejected("Budget per song must be positive")
        if spec.lead_single and spec.project_type != "ep":
            raise ActionRejected("Only EPs can have a lead single")

        cost = self.quality.calculate_project_cost(
            spec.budget_per_song, spec.song_count, spec.producer_tier, spec.time_investment,
        )
        if not ledger.can_afford(cost):
            raise ActionRejected(f'Cannot afford "{spec.title}" (${cost:,} needed, ${state.money:,} available)')

        rating = self.quality.budget_efficiency_rating(spec.budget_per_song, spec.project_type, spec.song_count)
        ledger.spend(
            cost, "project_costs", "project",
            f'Started {spec.project_type} "{spec.title}" with {artist.name} ({rating} budget)',
            artist_id=artist.id, project_id=project_id,
        )
        ledger.store.create_project(Project(
            id=project_id,
            game_id=state.id,
            artist_id=artist.id,
            title=spec.title,
            type=spec.project_type,
            song_count=spec.song_count,
            budget_per_song=spec.budget_per_song,
            producer_tier=spec.producer_tier,
            time_investment=spec.time_investment,
            total_cost=cost,
            marketing_budget=spec.marketing_budget,
            start_turn=state.current_turn,
            lead_single=spec.lead_single,
        ))

    def _start_tour(self, ledger: TurnLedger, spec: ProjectSpec, artist: Artist, project_id: str) -> None:
        state = ledger.state
        venue = self.balance.venue_tier(state.venue_access)
        if venue is None or state.venue_access == "none":
            raise ActionRejected("The label has no venue access for touring yet")
        low, high = venue.capacity_range
        if not low <= spec.venue_capacity <= high:
            raise ActionRejected(f"{state.venue_access.title()} hold {low}-{high} people, not {spec.venue_capacity}")
        self.financial.validate_tour(
            state.venue_access, spec.venue_capacity, spec.cities,
            artist.popularity, state.reputation, spec.marketing_budget,
        )
        ledger.store.create_project(Project(
            id=project_id,
            game_id=state.id,
            artist_id=artist.id,
            title=spec.title,
            type="mini_tour",
            marketing_budget=spec.marketing_budget,
            start_turn=state.current_turn,
            cities=spec.cities,
            venue_tier=state.venue_access,
            venue_capacity=spec.venue_capacity,
        ))
        ledger.log(
            "project", f'Booked "{spec.title}" for {artist.name}: {spec.cities} cities at {state.venue_access}',
            artist_id=artist.id, project_id=project_id,
        )

    def _marketing(self, ledger: TurnLedger, action: MarketingAction, index: int) -> None:
        spec = MarketingSpec.model_validate(action.metadata)
        cfg = self.balance.marketing[spec.marketing_type]
        spend = spec.spend
        if spend is None:
            spend = round(cfg.min_cost + (cfg.max_cost - cfg.min_cost) * DEFAULT_CAMPAIGN_SPEND_POINT)
        if not cfg.min_cost <= spend <= cfg.max_cost:
            raise ActionRejected(
                f"{spec.marketing_type.replace('_', ' ')} spend must be ${cfg.min_cost:,}-${cfg.max_cost:,}"
            )
        if not ledger.can_afford(spend):
            raise ActionRejected(f"Cannot afford {spec.marketing_type.replace('_', ' ')} campaign (${spend:,})")

        label = spec.marketing_type.replace("_", " ")
        ledger.spend(spend, "marketing_costs", "marketing", f"{label.capitalize()} campaign")
        state = ledger.state

        if spec.marketing_type == "pr_push":
            pickups = self.financial.calculate_press_pickups(state.press_access, spend, state.reputation, self.rng)
            ledger.summary.press_pickups += pickups
            gained = ledger.adjust_reputation(pickups * self.balance.press.reputation_per_pickup, "press")
            ledger.log("marketing", f"PR push landed {pickups} press pickup(s), reputation {gained:+d}", amount=gained)
        else:
            gain = math.floor(spend / 1000 * cfg.reputation_per_1000)
            gained = ledger.adjust_reputation(gain, label)
            ledger.log("marketing", f"{label.capitalize()} campaign: reputation {gained:+d}", amount=gained)

    def _artist_dialogue(self, ledger: TurnLedger, action: ArtistDialogueAction, index: int) -> None:
        artist = self._require_artist(ledger, action.target_id)
        cfg = self.balance.dialogue
        mood = rng_int(self.rng, *cfg.mood_range)
        loyalty = rng_int(self.rng, *cfg.loyalty_range)
        creativity = rng_int(self.rng, *cfg.creative_capital_range)

        mood = ledger.adjust_artist(artist, "mood", mood)
        loyalty = ledger.adjust_artist(artist, "loyalty", loyalty)
        ledger.state.creative_capital += creativity
        ledger.log(
            "dialogue",
            f"Talked with {artist.name}: mood {mood:+d}, loyalty {loyalty:+d}, creative capital {creativity:+d}",
            artist_id=artist.id,
        )

    # ------------------------------------------------------------------
    # Operating burn
    # ------------------------------------------------------------------

    def apply_operating_burn(self, ledger: TurnLedger) -> int:
        """Fixed running costs; always deducted, even into negative money."""
        low, high = self.balance.economy.operating_burn_range
        operations = rng_int(self.rng, low, high)
        ledger.spend(operations, "operations", "expense", f"Operating costs ${operations:,}")

        artist_costs = sum(a.weekly_cost for a in ledger.signed_artists())
        if artist_costs:
            ledger.spend(artist_costs, "artist_costs", "expense", f"Artist salaries ${artist_costs:,}")
        return operations + artist_costs

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_artist(ledger: TurnLedger, artist_id: str | None) -> Artist:
        if not artist_id:
            raise ActionRejected("No artist selected")
        artist = ledger.artist(artist_id)
        if artist is None:
            raise ActionRejected(f"Artist not found: {artist_id}")
        if not artist.signed:
            raise ActionRejected(f"{artist.name} is no longer signed")
        return artist
