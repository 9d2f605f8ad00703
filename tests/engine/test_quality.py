"""Tests for QualityModel."""

import pytest

from label_tycoon.engine.errors import ActionRejected
from label_tycoon.engine.quality import QualityModel
from label_tycoon.models import Artist, Project
from label_tycoon.rng import FixedRNG


def _artist(mood: int = 50) -> Artist:
    return Artist(id="a", game_id="g", name="A", archetype="Visionary", mood=mood)


def _project(**kw) -> Project:
    fields = dict(
        id="p", game_id="g", artist_id="a", title="T", type="single",
        song_count=1, budget_per_song=3000, producer_tier="local", time_investment="standard",
    )
    fields.update(kw)
    return Project(**fields)


@pytest.fixture
def model(balance) -> QualityModel:
    return QualityModel(balance)


class TestMoodBonus:
    def test_values(self) -> None:
        assert QualityModel.mood_bonus(70) == 4
        assert QualityModel.mood_bonus(0) == -10
        assert QualityModel.mood_bonus(100) == 10


class TestSongCountImpact:
    def test_single_song_no_penalty(self, model: QualityModel) -> None:
        assert model.song_count_impact(1) == 1.0

    def test_two_songs(self, model: QualityModel) -> None:
        assert model.song_count_impact(2) == pytest.approx(0.97)

    def test_never_increases_and_respects_floor(self, model: QualityModel, balance) -> None:
        floor = balance.song_count.min_multiplier
        previous = model.song_count_impact(1)
        for n in range(2, 30):
            current = model.song_count_impact(n)
            assert current <= previous
            assert current >= floor
            previous = current
        assert model.song_count_impact(29) == floor


class TestBudgetBonus:
    def test_breakpoints(self, model: QualityModel) -> None:
        assert model.budget_bonus_for_ratio(0.5) == -5
        assert model.budget_bonus_for_ratio(0.7) == pytest.approx(0.0)
        assert model.budget_bonus_for_ratio(1.0) == pytest.approx(6.0)
        assert model.budget_bonus_for_ratio(1.5) == pytest.approx(12.0)
        assert model.budget_bonus_for_ratio(2.5) == pytest.approx(15.0)

    def test_monotonic(self, model: QualityModel) -> None:
        ratios = [i / 20 for i in range(0, 200)]
        bonuses = [model.budget_bonus_for_ratio(r) for r in ratios]
        assert all(b2 >= b1 for b1, b2 in zip(bonuses, bonuses[1:]))

    def test_sub_linear_beyond_diminishing(self, model: QualityModel) -> None:
        at_threshold = model.budget_bonus_for_ratio(2.5)
        gain_1 = model.budget_bonus_for_ratio(3.5) - at_threshold
        gain_10 = model.budget_bonus_for_ratio(12.5) - at_threshold
        assert 0 < gain_1 < gain_10 < gain_1 * 10

    def test_minimum_viable_cost(self, model: QualityModel) -> None:
        assert model.minimum_viable_cost("single", 1) == pytest.approx(3000)
        assert model.minimum_viable_cost("ep", 3) == pytest.approx(2430)

    def test_efficiency_rating(self, model: QualityModel) -> None:
        assert model.budget_efficiency_rating(3000, "single", 1) == "Efficient"
        assert model.budget_efficiency_rating(1000, "single", 1) == "Underfunded"


class TestSongQuality:
    def test_composition(self, model: QualityModel) -> None:
        rng = FixedRNG(0.5)
        # base 50, mood 0, local 0, standard 0, budget ratio 1.0 -> +6
        assert model.calculate_song_quality(_artist(), _project(), rng) == 56
        assert rng.calls == 1

    def test_clamped_high(self, model: QualityModel) -> None:
        project = _project(producer_tier="legendary", time_investment="perfectionist", budget_per_song=50_000)
        assert model.calculate_song_quality(_artist(100), project, FixedRNG(0.99)) == 100

    def test_clamped_low(self, model: QualityModel) -> None:
        project = _project(time_investment="rushed", budget_per_song=100)
        assert model.calculate_song_quality(_artist(0), project, FixedRNG(0.0)) == 20

    def test_more_songs_lower_quality(self, model: QualityModel) -> None:
        # both budgets sit under the minimum-viable floor, so only the song count differs
        three = model.calculate_song_quality(_artist(), _project(type="ep", song_count=3, budget_per_song=100), FixedRNG(0.5))
        five = model.calculate_song_quality(_artist(), _project(type="ep", song_count=5, budget_per_song=100), FixedRNG(0.5))
        assert five < three


class TestCostAndValidation:
    def test_project_cost(self, model: QualityModel) -> None:
        assert model.calculate_project_cost(3000, 1, "local", "standard") == 3000
        assert model.calculate_project_cost(1000, 2, "regional", "extended") == 5040

    def test_legendary_rejects_rushed(self, model: QualityModel) -> None:
        with pytest.raises(ActionRejected):
            model.validate_producer_time("legendary", "rushed")

    def test_legendary_standard_allowed(self, model: QualityModel) -> None:
        model.validate_producer_time("legendary", "standard")

    def test_unknown_tier(self, model: QualityModel) -> None:
        with pytest.raises(ActionRejected):
            model.validate_producer_time("bedroom", "standard")
