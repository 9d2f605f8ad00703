"""Tests for CampaignScorer."""

import pytest

from label_tycoon.engine.scoring import CampaignScorer
from label_tycoon.models import GameState


@pytest.fixture
def scorer(balance) -> CampaignScorer:
    return CampaignScorer(balance)


def _final(**kw) -> GameState:
    fields = dict(id="g", current_turn=52)
    fields.update(kw)
    return GameState(**fields)


TOP_TIERS = dict(playlist_access="flagship", press_access="national", venue_access="arenas")


class TestCheck:
    def test_not_final_turn(self, scorer: CampaignScorer) -> None:
        state = _final(current_turn=51, money=1_000_000)
        assert scorer.check(state) is None
        assert state.campaign_completed is False

    def test_sets_latch(self, scorer: CampaignScorer) -> None:
        state = _final(money=200_000, reputation=40)
        results = scorer.check(state)
        assert results is not None
        assert results.campaign_completed is True
        assert state.campaign_completed is True

    def test_breakdown(self, scorer: CampaignScorer) -> None:
        results = scorer.check(_final(money=123_456, reputation=47, playlist_access="mid", press_access="blogs"))
        assert results.score_breakdown.money == 123
        assert results.score_breakdown.reputation == 9
        assert results.score_breakdown.access_tier_bonus == 30
        assert results.final_score == 162
        assert "Final score: 162" in results.summary

    def test_sub_scores_never_negative(self, scorer: CampaignScorer) -> None:
        results = scorer.check(_final(money=-200_000, reputation=50))
        assert results.score_breakdown.money == 0
        assert results.final_score == 10
        assert results.victory_type == "Failure"


class TestVictoryType:
    def test_failure_on_debt(self, scorer: CampaignScorer) -> None:
        assert scorer.check(_final(money=-1, reputation=100, **TOP_TIERS)).victory_type == "Failure"

    def test_failure_on_low_score(self, scorer: CampaignScorer) -> None:
        assert scorer.check(_final(money=10_000)).victory_type == "Failure"

    def test_survival(self, scorer: CampaignScorer) -> None:
        assert scorer.check(_final(money=60_000)).victory_type == "Survival"

    def test_commercial(self, scorer: CampaignScorer) -> None:
        assert scorer.check(_final(money=500_000, reputation=20)).victory_type == "Commercial Success"

    def test_critical(self, scorer: CampaignScorer) -> None:
        assert scorer.check(_final(money=5_000, reputation=100, **TOP_TIERS)).victory_type == "Critical Acclaim"

    def test_balanced(self, scorer: CampaignScorer) -> None:
        assert scorer.check(_final(money=20_000, reputation=100, **TOP_TIERS)).victory_type == "Balanced Growth"


class TestAchievements:
    def test_top_tiers(self, scorer: CampaignScorer) -> None:
        earned = scorer.check(_final(money=20_000, reputation=100, **TOP_TIERS)).achievements
        assert {"Industry Icon", "Flagship Playlists", "National Press", "Arena Headliners"} <= set(earned)

    def test_solvent(self, scorer: CampaignScorer) -> None:
        assert "Stayed Solvent" in scorer.check(_final(money=0)).achievements
        assert "Stayed Solvent" not in scorer.check(_final(money=-5)).achievements
