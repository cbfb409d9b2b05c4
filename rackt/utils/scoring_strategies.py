"""
Team scoring for reported matches.

Each team is rated as the arithmetic mean of its members' current ratings.
The rating model runs once on the two team ratings and every member of a team
receives that team's (rounded) delta, so doubles partners share credit
regardless of their individual ratings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Sequence

from rackt.utils.elo import EloCalculator, round_half_up


@dataclass
class ParticipantResult:
    """A participant's rating going into a match"""
    player_id: str
    current_rating: int


@dataclass
class ScoringResult:
    """Result of scoring calculation for a participant"""
    player_id: str
    rating_before: int
    rating_after: int
    won: bool

    @property
    def rating_change(self) -> int:
        return self.rating_after - self.rating_before


class ScoringStrategy(ABC):
    """Calculates rating changes for the two sides of a match."""

    @abstractmethod
    def calculate_results(self, team1: Sequence[ParticipantResult], team2: Sequence[ParticipantResult],
                          team1_won: bool) -> Dict[str, ScoringResult]:
        """
        Args:
            team1: First side's members
            team2: Second side's members
            team1_won: Whether the first side won

        Returns:
            Dictionary mapping player_id to their ScoringResult
        """


class TeamEloStrategy(ScoringStrategy):
    """Shared-credit team Elo: one delta per team, applied to every member."""

    def __init__(self, k_factor: float = None):
        self.k_factor = k_factor

    @staticmethod
    def team_rating(team: Sequence[ParticipantResult]) -> float:
        return sum(p.current_rating for p in team) / len(team)

    def calculate_team_deltas(self, team1: Sequence[ParticipantResult], team2: Sequence[ParticipantResult],
                              team1_won: bool) -> List[int]:
        delta1, delta2 = EloCalculator.calculate_rating_changes(
            self.team_rating(team1),
            self.team_rating(team2),
            1 if team1_won else 0,
            self.k_factor,
        )
        return [round_half_up(delta1), round_half_up(delta2)]

    def calculate_results(self, team1: Sequence[ParticipantResult], team2: Sequence[ParticipantResult],
                          team1_won: bool) -> Dict[str, ScoringResult]:
        team1_delta, team2_delta = self.calculate_team_deltas(team1, team2, team1_won)

        results = {}
        for team, delta, won in ((team1, team1_delta, team1_won), (team2, team2_delta, not team1_won)):
            for participant in team:
                results[participant.player_id] = ScoringResult(
                    player_id=participant.player_id,
                    rating_before=participant.current_rating,
                    rating_after=participant.current_rating + delta,
                    won=won,
                )
        return results
