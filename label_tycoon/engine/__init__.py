"""Simulation engine: formulas, action resolution and turn advancement."""

from label_tycoon.engine.actions import ActionProcessor
from label_tycoon.engine.decay import DecayEngine
from label_tycoon.engine.errors import ActionRejected, CampaignCompletedError, InvalidTourParameters
from label_tycoon.engine.financial import FinancialCalculator, TourBreakdown
from label_tycoon.engine.orchestrator import advance_turn
from label_tycoon.engine.progression import ProgressionGate
from label_tycoon.engine.quality import QualityModel
from label_tycoon.engine.scoring import CampaignScorer

__all__ = [
    "ActionProcessor",
    "ActionRejected",
    "CampaignCompletedError",
    "CampaignScorer",
    "DecayEngine",
    "FinancialCalculator",
    "InvalidTourParameters",
    "ProgressionGate",
    "QualityModel",
    "TourBreakdown",
    "advance_turn",
]
