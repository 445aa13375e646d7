"""SAT prep backend: daily challenges, progress tracking and streaks."""

__version__ = "0.1.0"
