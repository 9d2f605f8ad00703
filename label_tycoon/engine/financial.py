"""Financial formulas: streaming outcome, press pickups, tour revenue.

Draw budget per call:
  streaming: one draw (variance)
  press: one draw per trial, always max_pickups_per_release trials
  tour: one draw (sell-through variance)
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel

from label_tycoon.balance import Balance
from label_tycoon.engine.errors import InvalidTourParameters
from label_tycoon.rng import RNG, rng_range

logger = logging.getLogger(__name__)


class TourCity(BaseModel):
    city_number: int
    ticket_revenue: int
    merch_revenue: int
    revenue: int
    venue_fee: int
    production_fee: int
    marketing_cost: int
    costs: int
    profit: int


class TourBreakdown(BaseModel):
    venue_tier: str
    venue_capacity: int
    sell_through_rate: float
    ticket_price: float
    cities: list[TourCity]
    total_revenue: int
    total_costs: int
    net_profit: int


class FinancialCalculator:
    def __init__(self, balance: Balance) -> None:
        self.balance = balance

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def calculate_streaming_outcome(
        self,
        quality: int,
        playlist_access: str,
        reputation: int,
        marketing_spend: int,
        popularity: int,
        rng: RNG,
    ) -> int:
        cfg = self.balance.streaming
        playlist_multiplier = self.balance.playlist_multiplier(playlist_access)

        score = (
            quality * cfg.quality_weight
            + playlist_multiplier * cfg.playlist_scale * cfg.playlist_weight
            + reputation * cfg.reputation_weight
            + math.sqrt(max(0, marketing_spend) / 1000) * cfg.marketing_scale * cfg.marketing_weight
            + popularity * cfg.popularity_weight
        )
        score *= 1 + self.star_power_bonus(popularity)

        variance = rng_range(rng, cfg.variance_low, cfg.variance_high)
        streams = max(0, round(score * variance * cfg.first_week_multiplier * cfg.base_streams_per_point))
        logger.debug(
            "streaming quality=%d playlist=%s rep=%d spend=%d pop=%d score=%.2f variance=%.3f -> %d",
            quality, playlist_access, reputation, marketing_spend, popularity, score, variance, streams,
        )
        return streams

    def star_power_bonus(self, popularity: int) -> float:
        star = self.balance.streaming.star_power
        if not star.enabled or popularity <= star.popularity_threshold:
            return 0.0
        return min(star.max_bonus, (popularity - star.popularity_threshold) / 100)

    def streaming_revenue(self, streams: int) -> int:
        return round(streams * self.balance.streaming.revenue_per_stream)

    def popularity_gain(self, streams: int) -> int:
        cfg = self.balance.streaming
        gain = math.floor(streams / 10_000 * cfg.popularity_gain_per_10k_streams)
        return min(cfg.max_popularity_gain, max(0, gain))

    # ------------------------------------------------------------------
    # Press
    # ------------------------------------------------------------------

    def press_chance(
        self,
        press_access: str,
        pr_spend: int,
        reputation: int,
        has_story_flag: bool = False,
    ) -> float:
        cfg = self.balance.press
        chance = (
            cfg.base_chance
            + self.balance.press_chance(press_access)
            + max(0, pr_spend) * cfg.pr_spend_modifier
            + reputation * cfg.reputation_modifier
        )
        if has_story_flag:
            chance += cfg.story_flag_bonus
        return max(0.0, min(1.0, chance))

    def calculate_press_pickups(
        self,
        press_access: str,
        pr_spend: int,
        reputation: int,
        rng: RNG,
        has_story_flag: bool = False,
    ) -> int:
        chance = self.press_chance(press_access, pr_spend, reputation, has_story_flag)
        pickups = 0
        for _ in range(self.balance.press.max_pickups_per_release):
            if rng() < chance:
                pickups += 1
        logger.debug("press access=%s spend=%d chance=%.3f -> %d pickups", press_access, pr_spend, chance, pickups)
        return pickups

    # ------------------------------------------------------------------
    # Tours
    # ------------------------------------------------------------------

    def validate_tour(
        self,
        venue_tier: str,
        venue_capacity: int,
        cities: int,
        popularity: int,
        reputation: int,
        marketing_budget: int,
    ) -> None:
        cfg = self.balance.tour
        if self.balance.venue_tier(venue_tier) is None:
            raise InvalidTourParameters(f"Unknown venue tier '{venue_tier}'")
        if not 0 <= popularity <= 100:
            raise InvalidTourParameters(f"Popularity must be between 0 and 100, got {popularity}")
        if not 0 <= reputation <= 100:
            raise InvalidTourParameters(f"Reputation must be between 0 and 100, got {reputation}")
        if not cfg.min_cities <= cities <= cfg.max_cities:
            raise InvalidTourParameters(
                f"Cities must be between {cfg.min_cities} and {cfg.max_cities}, got {cities}"
            )
        if marketing_budget < 0:
            raise InvalidTourParameters("Marketing budget cannot be negative")
        if venue_capacity <= 0:
            raise InvalidTourParameters("Venue capacity must be positive")

    def sell_through_rate(self, reputation: int, popularity: int, rng: RNG) -> float:
        cfg = self.balance.tour
        rate = cfg.sell_through_base + reputation * cfg.reputation_modifier
        rate *= 1 + (popularity / 100) * cfg.popularity_weight
        rate *= 1 + (rng() * 2 - 1) * cfg.sell_through_variance
        return max(0.0, min(1.0, rate))

    def ticket_price(self, venue_capacity: int) -> float:
        cfg = self.balance.tour
        return cfg.ticket_price_base + venue_capacity * cfg.ticket_price_per_capacity

    def calculate_tour_revenue(
        self,
        venue_tier: str,
        venue_capacity: int,
        cities: int,
        popularity: int,
        reputation: int,
        marketing_budget: int,
        rng: RNG,
    ) -> TourBreakdown:
        """Full per-city breakdown. Inputs are validated before any draw."""
        self.validate_tour(venue_tier, venue_capacity, cities, popularity, reputation, marketing_budget)
        cfg = self.balance.tour

        sell_through = self.sell_through_rate(reputation, popularity, rng)
        price = self.ticket_price(venue_capacity)

        ticket_revenue = round(venue_capacity * sell_through * price)
        merch_revenue = round(ticket_revenue * cfg.merch_percentage)
        venue_fee = round(venue_capacity * cfg.venue_fee_per_capacity)
        production_fee = round(venue_capacity * cfg.production_fee_per_capacity)
        marketing_share, marketing_remainder = divmod(marketing_budget, cities)

        city_rows: list[TourCity] = []
        for n in range(1, cities + 1):
            # remainder dollars go to the earliest cities
            marketing_cost = marketing_share + (1 if n <= marketing_remainder else 0)
            revenue = ticket_revenue + merch_revenue
            costs = venue_fee + production_fee + marketing_cost
            city_rows.append(TourCity(
                city_number=n,
                ticket_revenue=ticket_revenue,
                merch_revenue=merch_revenue,
                revenue=revenue,
                venue_fee=venue_fee,
                production_fee=production_fee,
                marketing_cost=marketing_cost,
                costs=costs,
                profit=revenue - costs,
            ))

        total_revenue = sum(c.revenue for c in city_rows)
        total_costs = sum(c.costs for c in city_rows)
        logger.debug(
            "tour tier=%s capacity=%d cities=%d sell_through=%.3f price=%.2f revenue=%d costs=%d",
            venue_tier, venue_capacity, cities, sell_through, price, total_revenue, total_costs,
        )
        return TourBreakdown(
            venue_tier=venue_tier,
            venue_capacity=venue_capacity,
            sell_through_rate=sell_through,
            ticket_price=price,
            cities=city_rows,
            total_revenue=total_revenue,
            total_costs=total_costs,
            net_profit=total_revenue - total_costs,
        )

    def tour_performance_impact(self, sell_through: float, venue_capacity: int) -> tuple[int, int]:
        """(mood, popularity) change for the artist after one city.

        Mood follows the attendance band. Popularity only moves for well-attended
        shows and scales with the number of people in the room.
        """
        cfg = self.balance.tour.performance
        attendance = round(sell_through * 100)
        attendees = round(venue_capacity * attendance / 100)

        mood = cfg.poor_show_mood
        for band in cfg.mood_bands:
            if attendance > band.above:
                mood = band.change
                break

        popularity = 0
        if attendance > cfg.popularity_min_attendance:
            popularity = cfg.max_popularity_gain
            for band in cfg.popularity_bands:
                if attendees < band.below:
                    popularity = band.change
                    break
        return mood, popularity
