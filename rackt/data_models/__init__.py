"""
Data models for the rating and tournament engine.

Records are plain dataclasses that serialise to the JSON documents kept by the
document store (see rackt.database.store).
"""

from .rating import RatingRecord, RatingPoint, PlayerProfile
from .match import MatchType, TeamResult, RatingChange, MatchRecord
from .tournament import TournamentStatus, TournamentMatch, Round, Tournament
from .achievement import Achievement
from .leaderboard import LeaderboardEntry, HeadToHeadSummary

__all__ = [
    'RatingRecord', 'RatingPoint', 'PlayerProfile',
    'MatchType', 'TeamResult', 'RatingChange', 'MatchRecord',
    'TournamentStatus', 'TournamentMatch', 'Round', 'Tournament',
    'Achievement',
    'LeaderboardEntry', 'HeadToHeadSummary',
]
