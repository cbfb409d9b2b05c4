"""
Rating data models: per-sport RatingRecord and the PlayerProfile document
that owns them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from rackt.config import Config
from rackt.data_models.timestamps import utc_now, to_iso, from_iso


@dataclass(frozen=True)
class RatingPoint:
    """One point of a player's rating chart."""
    date: datetime
    rating: int

    def to_dict(self) -> dict:
        return {'date': to_iso(self.date), 'rating': self.rating}

    @classmethod
    def from_dict(cls, data: dict) -> 'RatingPoint':
        return cls(date=from_iso(data['date']), rating=data['rating'])


@dataclass
class RatingRecord:
    """Rating, record and history of one player in one sport."""
    value: int = Config.STARTING_RATING
    wins: int = 0
    losses: int = 0
    streak: int = 0  # Positive for consecutive wins, negative for consecutive losses
    match_history: List[str] = field(default_factory=list)
    rating_history: List[RatingPoint] = field(default_factory=list)

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        if self.matches_played == 0:
            return 0.0
        return (self.wins / self.matches_played) * 100

    def record_result(self, match_id: str, won: bool, new_value: int, played_at: datetime) -> None:
        """Apply one match result. Only called inside a store transaction."""
        if won:
            self.wins += 1
            self.streak = max(1, self.streak + 1)
        else:
            self.losses += 1
            self.streak = min(-1, self.streak - 1)
        self.value = int(new_value)
        self.match_history.append(match_id)
        self.rating_history.append(RatingPoint(date=played_at, rating=self.value))
        self.rating_history = self.rating_history[-Config.RATING_HISTORY_LIMIT:]

    def to_dict(self) -> dict:
        return {
            'value': self.value,
            'wins': self.wins,
            'losses': self.losses,
            'streak': self.streak,
            'match_history': list(self.match_history),
            'rating_history': [point.to_dict() for point in self.rating_history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RatingRecord':
        return cls(
            value=data.get('value', Config.STARTING_RATING),
            wins=data.get('wins', 0),
            losses=data.get('losses', 0),
            streak=data.get('streak', 0),
            match_history=list(data.get('match_history', [])),
            rating_history=[RatingPoint.from_dict(p) for p in data.get('rating_history', [])],
        )


@dataclass
class PlayerProfile:
    """A registered player and their per-sport ratings."""
    player_id: str
    display_name: str
    sports: Dict[str, RatingRecord] = field(default_factory=dict)
    registered_at: datetime = field(default_factory=utc_now)

    def rating_for(self, sport: str) -> RatingRecord:
        """Get the sport's rating record, creating a default one on first use"""
        if sport not in self.sports:
            self.sports[sport] = RatingRecord()
        return self.sports[sport]

    def peek_rating(self, sport: str) -> Optional[RatingRecord]:
        return self.sports.get(sport)

    def to_dict(self) -> dict:
        return {
            'player_id': self.player_id,
            'display_name': self.display_name,
            'sports': {sport: record.to_dict() for sport, record in self.sports.items()},
            'registered_at': to_iso(self.registered_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PlayerProfile':
        return cls(
            player_id=data['player_id'],
            display_name=data['display_name'],
            sports={sport: RatingRecord.from_dict(r) for sport, r in data.get('sports', {}).items()},
            registered_at=from_iso(data['registered_at']),
        )
