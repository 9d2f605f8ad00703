"""Tests for FinancialCalculator."""

import pytest

from label_tycoon.engine.errors import InvalidTourParameters
from label_tycoon.engine.financial import FinancialCalculator
from label_tycoon.rng import FixedRNG


@pytest.fixture
def calc(balance) -> FinancialCalculator:
    return FinancialCalculator(balance)


def _streams(calc: FinancialCalculator, playlist: str = "niche", **kw) -> int:
    args = dict(quality=70, playlist_access=playlist, reputation=50, marketing_spend=5000, popularity=60)
    args.update(kw)
    return calc.calculate_streaming_outcome(rng=FixedRNG(1.0), **args)


class TestStreaming:
    def test_reference_scenario_positive_int(self, calc: FinancialCalculator) -> None:
        streams = _streams(calc)
        assert isinstance(streams, int)
        assert streams > 0

    def test_deterministic(self, calc: FinancialCalculator) -> None:
        assert _streams(calc) == _streams(calc)

    def test_flagship_beats_none(self, calc: FinancialCalculator) -> None:
        assert _streams(calc, "flagship") > _streams(calc, "none")

    def test_marketing_helps(self, calc: FinancialCalculator) -> None:
        assert _streams(calc, marketing_spend=20_000) > _streams(calc, marketing_spend=0)

    def test_single_draw(self, calc: FinancialCalculator) -> None:
        rng = FixedRNG(0.3)
        calc.calculate_streaming_outcome(70, "niche", 50, 5000, 60, rng)
        assert rng.calls == 1

    def test_star_power_capped(self, calc: FinancialCalculator) -> None:
        assert calc.star_power_bonus(40) == 0.0
        assert calc.star_power_bonus(60) == pytest.approx(0.1)
        assert calc.star_power_bonus(100) == pytest.approx(0.5)

    def test_popularity_gain_capped(self, calc: FinancialCalculator) -> None:
        assert calc.popularity_gain(5_000) == 0
        assert calc.popularity_gain(25_000) == 2
        assert calc.popularity_gain(10_000_000) == 5


class TestPress:
    def test_chance_components(self, calc: FinancialCalculator) -> None:
        assert calc.press_chance("none", 0, 0) == pytest.approx(0.2)
        assert calc.press_chance("none", 0, 0, has_story_flag=True) == pytest.approx(0.5)

    def test_chance_capped_at_one(self, calc: FinancialCalculator) -> None:
        assert calc.press_chance("national", 100_000, 100, has_story_flag=True) == 1.0

    def test_all_trials_succeed(self, calc: FinancialCalculator) -> None:
        assert calc.calculate_press_pickups("none", 0, 0, FixedRNG(0.1)) == 5

    def test_all_trials_fail(self, calc: FinancialCalculator) -> None:
        assert calc.calculate_press_pickups("none", 0, 0, FixedRNG(0.99)) == 0

    def test_draws_once_per_trial(self, calc: FinancialCalculator) -> None:
        rng = FixedRNG(0.99)
        calc.calculate_press_pickups("blogs", 1000, 10, rng)
        assert rng.calls == 5


class TestTour:
    def test_reference_scenario(self, calc: FinancialCalculator) -> None:
        b = calc.calculate_tour_revenue(
            venue_tier="clubs", venue_capacity=200, cities=5,
            popularity=50, reputation=50, marketing_budget=10_000, rng=FixedRNG(0.5),
        )
        assert len(b.cities) == 5
        assert all(c.marketing_cost == 2000 for c in b.cities)
        assert b.net_profit == b.total_revenue - b.total_costs
        assert b.total_revenue == sum(c.revenue for c in b.cities)
        assert b.ticket_price == pytest.approx(31.0)
        assert b.sell_through_rate == pytest.approx(0.9)

    def test_marketing_split_sums_to_budget(self, calc: FinancialCalculator) -> None:
        b = calc.calculate_tour_revenue("clubs", 200, 3, 50, 50, 1000, FixedRNG(0.5))
        assert [c.marketing_cost for c in b.cities] == [334, 333, 333]
        fees = sum(c.venue_fee + c.production_fee for c in b.cities)
        assert b.total_costs == fees + 1000

    def test_sell_through_capped(self, calc: FinancialCalculator) -> None:
        b = calc.calculate_tour_revenue("arenas", 5000, 3, 100, 100, 0, FixedRNG(0.99))
        assert b.sell_through_rate == 1.0

    def test_merch_on_top_of_tickets(self, calc: FinancialCalculator) -> None:
        b = calc.calculate_tour_revenue("clubs", 200, 1, 50, 50, 0, FixedRNG(0.5))
        city = b.cities[0]
        assert city.merch_revenue == round(city.ticket_revenue * 0.15)
        assert city.revenue == city.ticket_revenue + city.merch_revenue

    @pytest.mark.parametrize("overrides", [
        {"venue_tier": "stadiums"},
        {"cities": 0},
        {"cities": 11},
        {"popularity": 101},
        {"reputation": -1},
        {"marketing_budget": -1},
    ])
    def test_validation_before_any_draw(self, calc: FinancialCalculator, overrides) -> None:
        args = dict(venue_tier="clubs", venue_capacity=200, cities=5, popularity=50, reputation=50,
                    marketing_budget=1000)
        args.update(overrides)
        rng = FixedRNG(0.5)
        with pytest.raises(InvalidTourParameters):
            calc.calculate_tour_revenue(rng=rng, **args)
        assert rng.calls == 0


class TestTourPerformance:
    @pytest.mark.parametrize("sell_through, mood", [
        (0.2, -3),
        (0.3, 0),
        (0.5, 0),
        (0.51, 5),
        (0.85, 5),
        (0.9, 8),
    ])
    def test_mood_by_attendance(self, calc: FinancialCalculator, sell_through, mood) -> None:
        assert calc.tour_performance_impact(sell_through, 200)[0] == mood

    @pytest.mark.parametrize("capacity, popularity", [
        (200, 1),
        (1000, 2),
        (3000, 3),
        (8000, 5),
        (20000, 7),
    ])
    def test_popularity_scales_with_crowd(self, calc: FinancialCalculator, capacity, popularity) -> None:
        assert calc.tour_performance_impact(0.8, capacity)[1] == popularity

    def test_no_popularity_for_half_empty_rooms(self, calc: FinancialCalculator) -> None:
        assert calc.tour_performance_impact(0.7, 20000)[1] == 0
