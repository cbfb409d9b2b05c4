"""
Leaderboard and head-to-head read models.

Immutable data transfer objects assembled from player profiles and match
records; nothing here is stored.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    rank: int
    player_id: str
    display_name: str
    rating: int
    wins: int
    losses: int
    streak: int
    win_rate: float


@dataclass(frozen=True)
class HeadToHeadSummary:
    """Two players' record against each other in one sport."""
    user_id: str
    opponent_id: str
    sport: str
    total_matches: int
    user_wins: int
    opponent_wins: int
    user_longest_streak: int
    opponent_longest_streak: int

    @property
    def user_win_rate(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return (self.user_wins / self.total_matches) * 100
