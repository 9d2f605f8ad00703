import pytest

from label_tycoon.balance import Balance, load_balance
from label_tycoon.models import Artist, GameState
from label_tycoon.storage import JsonStorage


@pytest.fixture
def balance() -> Balance:
    return load_balance()


@pytest.fixture
def store(tmp_path) -> JsonStorage:
    """Fresh JSON storage per test."""
    return JsonStorage(tmp_path / "data")


@pytest.fixture
def game_state() -> GameState:
    return GameState(id="g1", current_turn=0, money=50_000, reputation=20)


@pytest.fixture
def artist(store: JsonStorage, game_state: GameState) -> Artist:
    a = Artist(
        id="a1", game_id=game_state.id, name="Nova", archetype="Visionary",
        talent=70, work_ethic=60, mood=50, loyalty=50, energy=60, popularity=20,
    )
    store.save_artist(a)
    return a
