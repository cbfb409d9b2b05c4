"""
Application-facing entry point.

RacktEngine wires an injected DocumentStore into the operations layer and
exposes the in-process API used by the surrounding application.

Usage:
    engine = await RacktEngine.connect('sqlite:///rackt.db')
    await engine.register_player('u1', 'Ana')
    await engine.register_player('u2', 'Ben')
    match_id = await engine.report_match(
        'Tennis', MatchType.SINGLES, TeamResult(['u1'], 2), TeamResult(['u2'], 0)
    )
    await engine.close()
"""

import random
from datetime import datetime
from typing import List, Optional, Sequence, Union

from rackt.config import Config
from rackt.data_models import (
    Achievement, HeadToHeadSummary, LeaderboardEntry, MatchRecord, MatchType, PlayerProfile,
    RatingRecord, Round, TeamResult, Tournament
)
from rackt.database.database import Database
from rackt.database.store import DocumentStore, SqlDocumentStore
from rackt.operations.match_operations import MatchOperations
from rackt.operations.player_operations import PlayerOperations
from rackt.operations.tournament_operations import TournamentOperations
from rackt.utils.achievements import compute_achievements
from rackt.utils.bracket import generate_bracket


class RacktEngine:
    def __init__(self, store: DocumentStore, max_retries: int = None, database: Optional[Database] = None):
        self.store = store
        self.database = database
        self.players = PlayerOperations(store, max_retries)
        self.matches = MatchOperations(store, max_retries)
        self.tournaments = TournamentOperations(store, max_retries)

    @classmethod
    async def connect(cls, database_url: Optional[str] = None, max_retries: int = None) -> 'RacktEngine':
        """Open a SQL-backed engine; database_url defaults to Config.DATABASE_URL"""
        Config.validate()
        database = Database(database_url)
        await database.initialize()
        return cls(SqlDocumentStore(database), max_retries=max_retries, database=database)

    async def close(self):
        if self.database:
            await self.database.close()

    # Core operations

    async def report_match(self, sport: str, match_type: Union[MatchType, str],
                           team1: TeamResult, team2: TeamResult,
                           played_at: Optional[datetime] = None) -> str:
        return await self.matches.report_match(sport, match_type, team1, team2, played_at)

    def generate_bracket(self, participant_ids: Sequence[str], rng: Optional[random.Random] = None) -> List[Round]:
        return generate_bracket(participant_ids, rng)

    async def report_tournament_winner(self, tournament_id: str, match_id: str, winner_id: str) -> None:
        await self.tournaments.report_winner(tournament_id, match_id, winner_id)

    def compute_achievements(self, matches: Sequence[MatchRecord], current_user_id: str,
                             opponent_name: str) -> List[Achievement]:
        return compute_achievements(matches, current_user_id, opponent_name)

    # Supporting operations

    async def register_player(self, player_id: str, display_name: str) -> PlayerProfile:
        return await self.players.get_or_create_player(player_id, display_name)

    async def get_player(self, player_id: str) -> PlayerProfile:
        return await self.players.get_player(player_id)

    async def get_rating(self, player_id: str, sport: str) -> RatingRecord:
        return await self.players.get_rating(player_id, sport)

    async def get_leaderboard(self, sport: str, limit: int = 100) -> List[LeaderboardEntry]:
        return await self.players.get_leaderboard(sport, limit)

    async def get_match(self, match_id: str) -> MatchRecord:
        return await self.matches.get_match(match_id)

    async def head_to_head(self, user_id: str, opponent_id: str, sport: str) -> List[MatchRecord]:
        return await self.matches.head_to_head(user_id, opponent_id, sport)

    async def head_to_head_summary(self, user_id: str, opponent_id: str, sport: str) -> HeadToHeadSummary:
        return await self.matches.head_to_head_summary(user_id, opponent_id, sport)

    async def create_tournament(self, name: str, sport: str, participant_ids: Sequence[str],
                                rng: Optional[random.Random] = None, organizer_id: Optional[str] = None) -> str:
        return await self.tournaments.create_tournament(name, sport, participant_ids, rng, organizer_id)

    async def get_tournament(self, tournament_id: str) -> Tournament:
        return await self.tournaments.get_tournament(tournament_id)

    async def get_tournaments_for_user(self, player_id: str) -> List[Tournament]:
        return await self.tournaments.get_tournaments_for_user(player_id)

    async def rivalry_achievements(self, user_id: str, opponent_id: str, sport: str) -> List[Achievement]:
        """Achievements the user has earned against one opponent in a sport"""
        opponent = await self.players.get_player(opponent_id)
        matches = await self.matches.head_to_head(user_id, opponent_id, sport)
        return compute_achievements(matches, user_id, opponent.display_name)
