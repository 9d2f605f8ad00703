"""Turn orchestrator — advances one game by one turn.

Turn flow:
  1. Refuse to run if the campaign has already been scored.
  2. Copy the incoming state; the caller's object is never modified.
  3. Inside one storage transaction:
       a. increment the turn, reset used focus slots
       b. resolve actions in submission order
       c. advance project pipelines (recording, releases, tour dates)
       d. credit catalog revenue from earlier releases
       e. apply delayed effects that fall due this turn
       f. drift artist moods toward neutral
       g. roll for a random side event
       h. deduct the operating burn
       i. update access tiers, producer tiers and unlocks
       j. score the campaign on its final turn
       k. write artists and game state
  4. Return the new state, the turn summary and any campaign results.

Any exception inside the transaction discards every write of the turn and
propagates to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import TypeAdapter

from label_tycoon.balance import Balance, default_balance
from label_tycoon.engine.actions import ActionProcessor
from label_tycoon.engine.decay import DecayEngine
from label_tycoon.engine.effects import EffectContext, apply_effects
from label_tycoon.engine.errors import CampaignCompletedError
from label_tycoon.engine.ledger import TurnLedger
from label_tycoon.engine.pipeline import ProjectPipeline
from label_tycoon.engine.progression import ProgressionGate
from label_tycoon.engine.scoring import CampaignScorer
from label_tycoon.models import Action, EventOccurrence, GameState, TurnResult
from label_tycoon.rng import RNG, SeededRNG, turn_seed
from label_tycoon.storage import GameStore

logger = logging.getLogger(__name__)

_actions_adapter = TypeAdapter(list[Action])


def advance_turn(
    state: GameState,
    actions: Sequence[Action | dict[str, Any]],
    *,
    store: GameStore,
    balance: Balance | None = None,
    rng: RNG | None = None,
    seed: str | None = None,
) -> TurnResult:
    """Advance ``state`` by one turn and return the resulting TurnResult."""

    # 1. Terminal latch
    if state.campaign_completed:
        raise CampaignCompletedError(f"Campaign for game {state.id} is already complete")

    # 2. Working copy and per-turn RNG
    balance = balance or default_balance()
    if rng is None:
        rng = SeededRNG(seed if seed is not None else turn_seed(state.id, state.current_turn))
    parsed = _actions_adapter.validate_python(list(actions))
    working = state.model_copy(deep=True)

    processor = ActionProcessor(balance, rng)
    pipeline = ProjectPipeline(balance, rng)
    decay = DecayEngine(balance)
    gate = ProgressionGate(balance)
    scorer = CampaignScorer(balance)

    # 3. One transaction for everything the turn writes
    with store.transaction():
        working.current_turn += 1
        working.used_focus_slots = 0
        ledger = TurnLedger(working, store)
        logger.info("turn start game=%s turn=%d actions=%d", working.id, working.current_turn, len(parsed))

        processor.process(ledger, parsed)
        pipeline.advance(ledger)
        decay.process_catalog(ledger)
        _apply_delayed_effects(ledger)
        _apply_mood_drift(ledger, balance)
        _roll_side_event(ledger, balance, rng)
        processor.apply_operating_burn(ledger)
        gate.apply(ledger)

        results = scorer.check(working)
        if results is not None:
            ledger.log("campaign", results.summary, amount=results.final_score)

        ledger.flush_artists()
        store.save_game_state(working)
        summary = ledger.finalize()

    # 4. Result
    logger.info(
        "turn end game=%s turn=%d revenue=%d expenses=%d money=%d reputation=%d",
        working.id, working.current_turn, summary.revenue, summary.expenses, working.money, working.reputation,
    )
    return TurnResult(game_state=working, summary=summary, campaign_results=results)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _apply_delayed_effects(ledger: TurnLedger) -> None:
    state = ledger.state
    due = [d for d in state.delayed_effects if d.trigger_turn <= state.current_turn]
    state.delayed_effects = [d for d in state.delayed_effects if d.trigger_turn > state.current_turn]
    for delayed in due:
        artists = [a for a in (ledger.artist(i) for i in delayed.artist_ids) if a is not None and a.signed]
        ctx = EffectContext(
            source=f"{delayed.source} follow-up" if delayed.source else "Follow-up",
            change_type="delayed_effect",
            expense_category="meeting_costs",
            artists=artists,
        )
        apply_effects(ledger, delayed.effects, ctx)


def _apply_mood_drift(ledger: TurnLedger, balance: Balance) -> None:
    cfg = balance.artist_stats
    low, high = cfg.mood_drift_band
    for artist in ledger.signed_artists():
        if artist.mood > high:
            delta = -min(cfg.mood_drift, artist.mood - 50)
        elif artist.mood < low:
            delta = min(cfg.mood_drift, 50 - artist.mood)
        else:
            continue
        applied = ledger.adjust_artist(artist, "mood", delta)
        ledger.log("mood_drift", f"{artist.name}'s mood settled {applied:+d}", amount=applied, artist_id=artist.id)


def _roll_side_event(ledger: TurnLedger, balance: Balance, rng: RNG) -> None:
    cfg = balance.side_events
    if not cfg.events or rng() >= cfg.chance_per_turn:
        return
    total_weight = sum(e.weight for e in cfg.events)
    pick = rng() * total_weight
    event = cfg.events[-1]
    for candidate in cfg.events:
        if pick < candidate.weight:
            event = candidate
            break
        pick -= candidate.weight

    ledger.summary.events.append(EventOccurrence(id=event.id, title=event.title))
    logger.info("side event game=%s turn=%d event=%s", ledger.state.id, ledger.state.current_turn, event.id)
    ctx = EffectContext(
        source=event.title, change_type="event", expense_category="event_costs",
        artists=ledger.signed_artists(),
    )
    apply_effects(ledger, event.effects, ctx)
