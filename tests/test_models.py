"""Tests for label_tycoon.models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from label_tycoon.models import (
    Action,
    Artist,
    DelayedEffect,
    Effect,
    EffectKind,
    GameState,
    MarketingAction,
    Song,
    StartProjectAction,
    clamp_quality,
    clamp_stat,
)


class TestClamping:
    def test_stat_upper_bound(self) -> None:
        assert clamp_stat(70 + 40) == 100

    def test_stat_lower_bound(self) -> None:
        assert clamp_stat(5 - 20) == 0

    def test_stat_rounds(self) -> None:
        assert clamp_stat(41.6) == 42

    def test_quality_bounds(self) -> None:
        assert clamp_quality(3) == 20
        assert clamp_quality(140) == 100
        assert clamp_quality(64.4) == 64


class TestGameState:
    def test_defaults(self) -> None:
        s = GameState(id="g")
        assert s.current_turn == 0
        assert s.playlist_access == "none"
        assert s.unlocked_producer_tiers == ["local"]
        assert s.delayed_effects == []
        assert s.campaign_completed is False

    def test_reputation_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GameState(id="g", reputation=101)

    def test_unknown_access_tier_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GameState(id="g", playlist_access="platinum")

    def test_delayed_effects_serialise_roundtrip(self) -> None:
        s = GameState(id="g", delayed_effects=[
            DelayedEffect(trigger_turn=4, effects=[Effect(kind=EffectKind.REPUTATION, amount=2)],
                          artist_ids=["a1"], source="CEO meeting"),
        ])
        restored = GameState.model_validate_json(s.model_dump_json())
        assert restored == s
        assert restored.delayed_effects[0].effects[0].kind is EffectKind.REPUTATION


class TestArtist:
    def test_archetype_restricted(self) -> None:
        with pytest.raises(ValidationError):
            Artist(id="a", game_id="g", name="A", archetype="Rockstar")

    def test_mood_range_validated(self) -> None:
        with pytest.raises(ValidationError):
            Artist(id="a", game_id="g", name="A", archetype="Workhorse", mood=-1)


class TestSong:
    def test_quality_range_validated(self) -> None:
        with pytest.raises(ValidationError):
            Song(id="s", game_id="g", project_id="p", artist_id="a", title="T", quality=10, created_turn=1)


class TestAction:
    def test_discriminated_by_action_type(self) -> None:
        adapter = TypeAdapter(list[Action])
        parsed = adapter.validate_python([
            {"action_type": "marketing", "metadata": {"marketing_type": "radio"}},
            {"action_type": "start_project", "target_id": "a1"},
        ])
        assert isinstance(parsed[0], MarketingAction)
        assert isinstance(parsed[1], StartProjectAction)
        assert parsed[1].target_id == "a1"

    def test_unknown_action_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TypeAdapter(list[Action]).validate_python([{"action_type": "sign_artist"}])
