"""
Rackt rating and tournament engine.

Turns reported match results into RacktRank ratings and win/loss/streak
records, and drives single-elimination tournaments to a champion.
"""

__version__ = "0.1.0"
