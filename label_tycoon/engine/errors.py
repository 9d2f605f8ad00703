"""Engine error taxonomy."""

from __future__ import annotations


class CampaignCompletedError(RuntimeError):
    """advance_turn() was called on a campaign that has already been scored."""


class ActionRejected(ValueError):
    """A single action failed validation. The turn carries on without it."""


class InvalidTourParameters(ValueError):
    """Tour inputs are outside the accepted ranges."""
