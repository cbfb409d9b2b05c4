"""
Tournament data models.

A bracket is an arena of TournamentMatch nodes addressed by
(round_number, position). The winner of (r, i) feeds (r + 1, i // 2) in
slot i % 2; list order inside a Round is never relied upon.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from rackt.data_models.timestamps import utc_now, to_iso, from_iso


class TournamentStatus(Enum):
    PENDING = "pending"
    ONGOING = "ongoing"
    COMPLETE = "complete"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [TournamentStatus.PENDING, TournamentStatus.ONGOING, TournamentStatus.COMPLETE]


@dataclass
class TournamentMatch:
    """A single bracket node."""
    id: str
    round_number: int
    position: int
    player1_id: Optional[str] = None
    player2_id: Optional[str] = None
    winner_id: Optional[str] = None
    is_bye: bool = False

    @property
    def slots(self) -> Tuple[Optional[str], Optional[str]]:
        return self.player1_id, self.player2_id

    @property
    def is_decided(self) -> bool:
        return self.winner_id is not None

    @property
    def is_ready(self) -> bool:
        """Both players are known and no winner has been reported yet"""
        return self.player1_id is not None and self.player2_id is not None and self.winner_id is None

    def get_slot(self, slot: int) -> Optional[str]:
        return self.player1_id if slot == 0 else self.player2_id

    def set_slot(self, slot: int, player_id: str) -> None:
        if slot == 0:
            self.player1_id = player_id
        else:
            self.player2_id = player_id

    @property
    def next_address(self) -> Tuple[int, int, int]:
        """(round, position, slot) this match's winner advances into"""
        return self.round_number + 1, self.position // 2, self.position % 2

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'round_number': self.round_number,
            'position': self.position,
            'player1_id': self.player1_id,
            'player2_id': self.player2_id,
            'winner_id': self.winner_id,
            'is_bye': self.is_bye,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TournamentMatch':
        return cls(
            id=data['id'],
            round_number=data['round_number'],
            position=data['position'],
            player1_id=data.get('player1_id'),
            player2_id=data.get('player2_id'),
            winner_id=data.get('winner_id'),
            is_bye=data.get('is_bye', False),
        )


@dataclass
class Round:
    round_number: int
    matches: List[TournamentMatch] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'round_number': self.round_number,
            'matches': [m.to_dict() for m in sorted(self.matches, key=lambda m: m.position)],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Round':
        return cls(
            round_number=data['round_number'],
            matches=[TournamentMatch.from_dict(m) for m in data['matches']],
        )


@dataclass
class Tournament:
    tournament_id: str
    name: str
    sport: str
    participant_ids: List[str]
    rounds: List[Round] = field(default_factory=list)
    status: TournamentStatus = TournamentStatus.PENDING
    champion_id: Optional[str] = None
    organizer_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    @property
    def total_rounds(self) -> int:
        return len(self.rounds)

    @property
    def is_complete(self) -> bool:
        return self.status == TournamentStatus.COMPLETE

    def arena(self) -> Dict[Tuple[int, int], TournamentMatch]:
        """All bracket nodes keyed by (round_number, position)"""
        return {
            (match.round_number, match.position): match
            for round_ in self.rounds
            for match in round_.matches
        }

    def match_at(self, round_number: int, position: int) -> Optional[TournamentMatch]:
        return self.arena().get((round_number, position))

    def find_match(self, match_id: str) -> Optional[TournamentMatch]:
        for round_ in self.rounds:
            for match in round_.matches:
                if match.id == match_id:
                    return match
        return None

    def involves(self, player_id: str) -> bool:
        return player_id in self.participant_ids

    def is_final(self, match: TournamentMatch) -> bool:
        return match.round_number == self.total_rounds

    def ready_matches(self) -> List[TournamentMatch]:
        """Matches that can be reported right now, in bracket order"""
        return [
            match for _, match in sorted(self.arena().items())
            if match.is_ready
        ]

    def advance_status(self, status: TournamentStatus) -> None:
        """Move the status forward. Backwards transitions are refused."""
        if status.rank < self.status.rank:
            raise ValueError(f"Cannot move tournament from {self.status.value} back to {status.value}")
        self.status = status

    def to_dict(self) -> dict:
        return {
            'tournament_id': self.tournament_id,
            'name': self.name,
            'sport': self.sport,
            'participant_ids': list(self.participant_ids),
            'rounds': [r.to_dict() for r in sorted(self.rounds, key=lambda r: r.round_number)],
            'status': self.status.value,
            'champion_id': self.champion_id,
            'organizer_id': self.organizer_id,
            'created_at': to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Tournament':
        return cls(
            tournament_id=data['tournament_id'],
            name=data['name'],
            sport=data['sport'],
            participant_ids=list(data['participant_ids']),
            rounds=[Round.from_dict(r) for r in data['rounds']],
            status=TournamentStatus(data['status']),
            champion_id=data.get('champion_id'),
            organizer_id=data.get('organizer_id'),
            created_at=from_iso(data['created_at']),
        )
