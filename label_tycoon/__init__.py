"""Label Tycoon — turn-based music-label simulation engine."""

__version__ = "0.1.0"
