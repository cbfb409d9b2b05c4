"""
Tournament Operations Module

Tournament creation and single-elimination bracket progression. The whole
bracket lives in one tournament document, so every winner report is an
atomic read-modify-write of that document. Two sibling matches finishing at
the same time conflict on the document version; the loser of the race is
retried and then writes only its own fixed slot in the shared next-round
match.
"""

import random
import uuid
from typing import List, Optional, Sequence

from rackt.config import Config
from rackt.data_models.tournament import Tournament, TournamentStatus
from rackt.database.models import DocumentKind
from rackt.database.store import DocumentKey, DocumentWrite
from rackt.services.base import BaseService
from rackt.utils.bracket import generate_bracket, validate_participants
from rackt.utils.exceptions import (
    NotFoundError, InvalidInputError, InvalidWinnerError,
    AlreadyDecidedError, InvariantViolationError
)
from rackt.utils.logger import setup_logger

logger = setup_logger(__name__)


def record_winner(tournament: Tournament, match_id: str, winner_id: str) -> None:
    """
    Set a match winner and advance them into the next round, in place.

    Raises:
        AlreadyDecidedError: If the tournament is complete or the match already has a winner
        NotFoundError: If the match is not part of this bracket
        InvalidWinnerError: If winner_id is not one of the match's players
        InvalidInputError: If the match is still waiting for an opponent
        InvariantViolationError: If the next-round slot is already taken
    """
    if tournament.is_complete:
        raise AlreadyDecidedError(f"Tournament {tournament.tournament_id} is already complete")

    match = tournament.find_match(match_id)
    if match is None:
        raise NotFoundError("tournament match", match_id)

    if winner_id is None or winner_id not in match.slots:
        raise InvalidWinnerError(match_id, winner_id)
    if match.is_decided:
        raise AlreadyDecidedError(f"Match {match_id} already has a winner")
    if not match.is_ready:
        raise InvalidInputError(f"Match {match_id} is still waiting for an opponent")

    match.winner_id = winner_id

    if tournament.is_final(match):
        tournament.champion_id = winner_id
        tournament.advance_status(TournamentStatus.COMPLETE)
        return

    next_round, next_position, slot = match.next_address
    next_match = tournament.match_at(next_round, next_position)
    if next_match is None:
        raise InvariantViolationError(
            f"Match {match_id} feeds missing node ({next_round}, {next_position})"
        )
    occupant = next_match.get_slot(slot)
    if occupant is not None:
        raise InvariantViolationError(
            f"Slot {slot} of match {next_match.id} already holds {occupant}; "
            f"cannot advance {winner_id} from match {match_id}"
        )
    next_match.set_slot(slot, winner_id)


class TournamentOperations(BaseService):
    """Tournament lifecycle operations backed by the document store."""

    async def create_tournament(self, name: str, sport: str, participant_ids: Sequence[str],
                                rng: Optional[random.Random] = None,
                                organizer_id: Optional[str] = None) -> str:
        """
        Create a tournament with a freshly seeded bracket.

        A single participant is crowned immediately; otherwise the tournament
        starts as ongoing. An organizer who is not already listed joins the
        participants.

        Returns:
            The new tournament id

        Raises:
            InvalidInputError: If the name, sport, organizer or participants are invalid
            NotFoundError: If a participant or the organizer is not registered
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Tournament name is required")
        if sport not in Config.SPORTS:
            raise InvalidInputError(f"Unknown sport: {sport!r}")
        if organizer_id is not None and (not isinstance(organizer_id, str) or not organizer_id):
            raise InvalidInputError(f"Invalid organizer id: {organizer_id!r}")
        participants = validate_participants(participant_ids)
        if organizer_id is not None and organizer_id not in participants:
            participants = [organizer_id] + participants

        tournament_id = uuid.uuid4().hex
        tournament_key = DocumentKey(DocumentKind.TOURNAMENT, tournament_id)
        player_keys = [DocumentKey(DocumentKind.PLAYER, player_id) for player_id in participants]
        rounds = generate_bracket(participants, rng)

        tournament = Tournament(
            tournament_id=tournament_id,
            name=name.strip(),
            sport=sport,
            participant_ids=participants,
            rounds=rounds,
            organizer_id=organizer_id,
        )
        if rounds:
            tournament.advance_status(TournamentStatus.ONGOING)
        else:
            tournament.champion_id = participants[0]
            tournament.advance_status(TournamentStatus.COMPLETE)

        def apply(reads) -> List[DocumentWrite]:
            for key in player_keys:
                if reads[key] is None:
                    raise NotFoundError(DocumentKind.PLAYER, key.doc_id)
            return [DocumentWrite(tournament_key, tournament.to_dict())]

        await self.execute_with_retry(
            lambda: self.store.run_atomic_transaction(player_keys, apply),
            f"create tournament {tournament_id}",
        )
        logger.info(
            f"Created {sport} tournament {tournament_id} '{tournament.name}' "
            f"with {len(participants)} participants over {tournament.total_rounds} rounds"
        )
        return tournament_id

    async def get_tournament(self, tournament_id: str) -> Tournament:
        """Raises NotFoundError if the tournament does not exist"""
        data = await self.store.get(DocumentKind.TOURNAMENT, tournament_id)
        return Tournament.from_dict(data)

    async def get_tournaments_for_user(self, player_id: str) -> List[Tournament]:
        """Tournaments the player takes part in, newest first"""
        tournaments = [
            Tournament.from_dict(data)
            for data in await self.store.list_documents(DocumentKind.TOURNAMENT)
        ]
        return sorted(
            (t for t in tournaments if t.involves(player_id)),
            key=lambda t: t.created_at,
            reverse=True,
        )

    async def report_winner(self, tournament_id: str, match_id: str, winner_id: str) -> None:
        """
        Record a bracket match winner and advance them, atomically.

        Completing the final sets the champion and marks the tournament complete
        in the same write.
        """
        key = DocumentKey(DocumentKind.TOURNAMENT, tournament_id)
        outcome = {}

        def apply(reads) -> List[DocumentWrite]:
            if reads[key] is None:
                raise NotFoundError(DocumentKind.TOURNAMENT, tournament_id)
            tournament = Tournament.from_dict(reads[key])
            record_winner(tournament, match_id, winner_id)
            outcome['tournament'] = tournament
            return [DocumentWrite(key, tournament.to_dict())]

        await self.execute_with_retry(
            lambda: self.store.run_atomic_transaction([key], apply),
            f"report winner of {match_id}",
        )

        tournament = outcome['tournament']
        if tournament.is_complete:
            logger.info(f"Tournament {tournament_id} complete, champion {tournament.champion_id}")
        else:
            logger.info(f"Match {match_id} of tournament {tournament_id} won by {winner_id}")
