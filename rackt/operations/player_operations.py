"""
Player Operations Module

Registration and lookup of PlayerProfile documents. Rating records inside a
profile are only ever mutated by MatchOperations.report_match.
"""

from typing import List

from rackt.config import Config
from rackt.data_models.leaderboard import LeaderboardEntry
from rackt.data_models.rating import PlayerProfile, RatingRecord
from rackt.database.models import DocumentKind
from rackt.database.store import DocumentKey, DocumentWrite
from rackt.services.base import BaseService
from rackt.utils.exceptions import InvalidInputError
from rackt.utils.logger import setup_logger

logger = setup_logger(__name__)


class PlayerOperations(BaseService):
    """Player lifecycle operations backed by the document store."""

    async def get_or_create_player(self, player_id: str, display_name: str) -> PlayerProfile:
        """
        Get an existing player or register a new one (atomic, idempotent).

        An existing profile is returned untouched, display name included.

        Raises:
            InvalidInputError: If the id or display name is blank
        """
        if not isinstance(player_id, str) or not player_id.strip():
            raise InvalidInputError("Player id is required")
        if not isinstance(display_name, str) or not display_name.strip():
            raise InvalidInputError("Display name is required")

        key = DocumentKey(DocumentKind.PLAYER, player_id)
        outcome = {}

        def apply(reads):
            existing = reads[key]
            if existing is not None:
                outcome['profile'] = PlayerProfile.from_dict(existing)
                return []
            profile = PlayerProfile(player_id=player_id, display_name=display_name.strip())
            outcome['profile'] = profile
            return [DocumentWrite(key, profile.to_dict())]

        await self.execute_with_retry(
            lambda: self.store.run_atomic_transaction([key], apply),
            f"register player {player_id}",
        )
        logger.debug(f"Player {player_id} ready")
        return outcome['profile']

    async def get_player(self, player_id: str) -> PlayerProfile:
        """Raises NotFoundError if the player is not registered"""
        data = await self.store.get(DocumentKind.PLAYER, player_id)
        return PlayerProfile.from_dict(data)

    async def get_rating(self, player_id: str, sport: str) -> RatingRecord:
        """The player's record for a sport; a fresh default record if they have never played it"""
        profile = await self.get_player(player_id)
        return profile.peek_rating(sport) or RatingRecord()

    async def get_leaderboard(self, sport: str, limit: int = 100) -> List[LeaderboardEntry]:
        """
        Players who have a record in the sport, highest rating first.

        Equal ratings share a rank (1, 1, 3); ties are listed by player id.

        Raises:
            InvalidInputError: If the sport is unknown or limit is not a positive integer
        """
        if sport not in Config.SPORTS:
            raise InvalidInputError(f"Unknown sport: {sport!r}")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidInputError("limit must be a positive integer")

        ranked = []
        for data in await self.store.list_documents(DocumentKind.PLAYER):
            profile = PlayerProfile.from_dict(data)
            record = profile.peek_rating(sport)
            if record is not None:
                ranked.append((profile, record))
        ranked.sort(key=lambda item: (-item[1].value, item[0].player_id))

        entries = []
        rank = 0
        previous = None
        for position, (profile, record) in enumerate(ranked[:limit], start=1):
            if record.value != previous:
                rank = position
                previous = record.value
            entries.append(LeaderboardEntry(
                rank=rank,
                player_id=profile.player_id,
                display_name=profile.display_name,
                rating=record.value,
                wins=record.wins,
                losses=record.losses,
                streak=record.streak,
                win_rate=record.win_rate,
            ))
        logger.debug(f"{sport} leaderboard: {len(entries)} of {len(ranked)} rated players")
        return entries
