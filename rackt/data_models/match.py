"""
Match data models: the transient TeamResult input and the immutable
MatchRecord written once per reported match.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Tuple, Union

from rackt.data_models.timestamps import utc_now, to_iso, from_iso


class MatchType(Enum):
    SINGLES = "singles"
    DOUBLES = "doubles"

    @property
    def team_size(self) -> int:
        return 1 if self is MatchType.SINGLES else 2


@dataclass(frozen=True)
class TeamResult:
    """One side of a reported match: its members and raw game score."""
    player_ids: Tuple[str, ...]
    score: Union[int, float]

    def __post_init__(self):
        if not isinstance(self.player_ids, str):
            object.__setattr__(self, 'player_ids', tuple(self.player_ids))


@dataclass(frozen=True)
class RatingChange:
    """Rating before and after a match for a single participant."""
    user_id: str
    before: int
    after: int

    @property
    def delta(self) -> int:
        return self.after - self.before

    def to_dict(self) -> dict:
        return {'user_id': self.user_id, 'before': self.before, 'after': self.after, 'delta': self.delta}

    @classmethod
    def from_dict(cls, data: dict) -> 'RatingChange':
        return cls(user_id=data['user_id'], before=data['before'], after=data['after'])


@dataclass(frozen=True)
class MatchRecord:
    """A confirmed, immutable match result."""
    match_id: str
    sport: str
    match_type: MatchType
    team1_ids: Tuple[str, ...]
    team2_ids: Tuple[str, ...]
    winner_ids: Tuple[str, ...]
    score: str
    rating_changes: Tuple[RatingChange, ...]
    played_at: datetime
    created_at: datetime = field(default_factory=utc_now)

    @property
    def participants(self) -> Tuple[str, ...]:
        return self.team1_ids + self.team2_ids

    def is_winner(self, user_id: str) -> bool:
        return user_id in self.winner_ids

    def rating_change_for(self, user_id: str) -> RatingChange:
        for change in self.rating_changes:
            if change.user_id == user_id:
                return change
        raise KeyError(user_id)

    def to_dict(self) -> dict:
        return {
            'match_id': self.match_id,
            'sport': self.sport,
            'match_type': self.match_type.value,
            'participants': list(self.participants),
            'teams': {
                'team1': list(self.team1_ids),
                'team2': list(self.team2_ids),
            },
            'winner_ids': list(self.winner_ids),
            'score': self.score,
            'rating_changes': [change.to_dict() for change in self.rating_changes],
            'played_at': to_iso(self.played_at),
            'created_at': to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'MatchRecord':
        return cls(
            match_id=data['match_id'],
            sport=data['sport'],
            match_type=MatchType(data['match_type']),
            team1_ids=tuple(data['teams']['team1']),
            team2_ids=tuple(data['teams']['team2']),
            winner_ids=tuple(data['winner_ids']),
            score=data['score'],
            rating_changes=tuple(RatingChange.from_dict(c) for c in data['rating_changes']),
            played_at=from_iso(data['played_at']),
            created_at=from_iso(data['created_at']),
        )
