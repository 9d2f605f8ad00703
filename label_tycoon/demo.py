"""Create a demo label for development/testing."""

from __future__ import annotations

from typing import Any

from label_tycoon.balance import Balance
from label_tycoon.models import Artist, GameState
from label_tycoon.storage import JsonStorage

DEMO_ARTISTS = [
    {"id": "nova-reyes", "name": "Nova Reyes", "archetype": "Visionary",
     "talent": 72, "work_ethic": 55, "mood": 60, "loyalty": 50, "energy": 70, "popularity": 12},
    {"id": "the-lowlands", "name": "The Lowlands", "archetype": "Workhorse",
     "talent": 58, "work_ethic": 80, "mood": 50, "loyalty": 60, "energy": 80, "popularity": 5},
]


def new_game_state(game_id: str, balance: Balance) -> GameState:
    economy = balance.economy
    return GameState(
        id=game_id,
        money=economy.starting_money,
        reputation=economy.starting_reputation,
        creative_capital=economy.starting_creative_capital,
        focus_slots=economy.base_focus_slots,
        artist_slots=economy.base_artist_slots,
    )


def create_demo_game(store: JsonStorage, balance: Balance, game_id: str = "demo") -> GameState:
    """Wipe any existing game with this id and write a fresh demo label.

    Two artists are created; only the first starts signed.
    """
    store.delete_game(game_id)
    state = new_game_state(game_id, balance)
    for i, data in enumerate(DEMO_ARTISTS):
        store.save_artist(Artist(
            game_id=game_id,
            weekly_cost=balance.economy.default_artist_weekly_cost,
            signed=i == 0,
            **data,
        ))
    store.save_game_state(state)
    return state


def demo_actions(state: GameState) -> list[dict[str, Any]]:
    """A simple repeating plan: record a single, promote it, keep the artist happy."""
    turn = state.current_turn + 1
    artist_id = DEMO_ARTISTS[0]["id"]
    actions: list[dict[str, Any]] = [{"action_type": "artist_dialogue", "target_id": artist_id}]
    if turn % 4 == 1:
        actions.append({
            "action_type": "start_project",
            "target_id": artist_id,
            "metadata": {
                "title": f"Demo Single {turn // 4 + 1}",
                "project_type": "single",
                "song_count": 1,
                "budget_per_song": 3500,
                "marketing_budget": 2000,
            },
        })
    elif turn % 4 == 3:
        actions.append({"action_type": "marketing", "metadata": {"marketing_type": "pr_push"}})
    else:
        actions.append({
            "action_type": "role_meeting",
            "target_id": artist_id,
            "metadata": {"meeting_id": "ar_single_choice", "choice_id": "trust_the_artist"},
        })
    return actions
