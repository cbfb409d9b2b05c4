"""
Match Operations Module

Reporting a ranked match is a single atomic read-modify-write over every
participant's PlayerProfile plus the insert of an immutable MatchRecord:

1. Read all participant profiles (missing profile -> NotFoundError)
2. Resolve each participant's rating record for the sport (default 1200)
3. Score the match with the team Elo strategy
4. Update wins/losses, streak, rating and history for every participant
5. Write the profiles and the new match record together

Write conflicts are retried by BaseService.execute_with_retry, so two reports
that share a participant are linearised.
"""

import math
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from rackt.config import Config
from rackt.data_models.leaderboard import HeadToHeadSummary
from rackt.data_models.match import MatchType, TeamResult, RatingChange, MatchRecord
from rackt.data_models.rating import PlayerProfile
from rackt.data_models.timestamps import utc_now
from rackt.database.models import DocumentKind
from rackt.database.store import DocumentKey, DocumentWrite
from rackt.services.base import BaseService
from rackt.utils.elo import EloCalculator
from rackt.utils.exceptions import NotFoundError, InvalidInputError
from rackt.utils.logger import setup_logger
from rackt.utils.scoring_strategies import ParticipantResult, TeamEloStrategy

logger = setup_logger(__name__)


def _format_score(score: Union[int, float]) -> str:
    return f"{score:g}"


def longest_win_streak(matches: Sequence[MatchRecord], player_id: str) -> int:
    """Longest run of consecutive wins for player_id; matches must be in chronological order"""
    longest = current = 0
    for match in matches:
        if match.is_winner(player_id):
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


class MatchOperations(BaseService):
    """
    Ranked match reporting and match history queries.

    The strategy is injectable; it defaults to shared-credit team Elo with
    Config.K_FACTOR.
    """

    def __init__(self, store, max_retries: int = None, strategy=None):
        super().__init__(store, max_retries)
        self.strategy = strategy or TeamEloStrategy()
        self.logger = logger

    async def report_match(self, sport: str, match_type: Union[MatchType, str],
                           team1: TeamResult, team2: TeamResult,
                           played_at: Optional[datetime] = None) -> str:
        """
        Record a ranked match and update every participant's rating.

        Team 1 wins only if its score is strictly greater; equal scores are
        recorded as a team 1 loss.

        Args:
            sport: One of Config.SPORTS
            match_type: Singles (1v1) or doubles (2v2)
            team1: First team roster and score
            team2: Second team roster and score
            played_at: When the match was played, defaults to now

        Returns:
            The new match id

        Raises:
            InvalidInputError: If the sport, match type or rosters are malformed
            NotFoundError: If a participant is not registered
            RetryExhaustedError: If the write kept conflicting
        """
        match_type = self._validate_match(sport, match_type, team1, team2)
        match_id = uuid.uuid4().hex
        played_at = played_at or utc_now()
        if played_at.tzinfo is None:
            played_at = played_at.replace(tzinfo=timezone.utc)
        team1_won = team1.score > team2.score
        committed = {}

        player_ids = list(team1.player_ids) + list(team2.player_ids)
        player_keys = [DocumentKey(DocumentKind.PLAYER, player_id) for player_id in player_ids]
        match_key = DocumentKey(DocumentKind.MATCH, match_id)

        def apply(reads) -> List[DocumentWrite]:
            profiles = {}
            for key in player_keys:
                if reads[key] is None:
                    raise NotFoundError(DocumentKind.PLAYER, key.doc_id)
                profiles[key.doc_id] = PlayerProfile.from_dict(reads[key])

            def roster(team: TeamResult) -> List[ParticipantResult]:
                return [
                    ParticipantResult(player_id, profiles[player_id].rating_for(sport).value)
                    for player_id in team.player_ids
                ]

            results = self.strategy.calculate_results(roster(team1), roster(team2), team1_won)

            writes = []
            for key in player_keys:
                result = results[key.doc_id]
                profile = profiles[key.doc_id]
                profile.rating_for(sport).record_result(match_id, result.won, result.rating_after, played_at)
                writes.append(DocumentWrite(key, profile.to_dict()))

            record = MatchRecord(
                match_id=match_id,
                sport=sport,
                match_type=match_type,
                team1_ids=team1.player_ids,
                team2_ids=team2.player_ids,
                winner_ids=team1.player_ids if team1_won else team2.player_ids,
                score=f"{_format_score(team1.score)}-{_format_score(team2.score)}",
                rating_changes=tuple(
                    RatingChange(player_id, results[player_id].rating_before, results[player_id].rating_after)
                    for player_id in player_ids
                ),
                played_at=played_at,
            )
            writes.append(DocumentWrite(match_key, record.to_dict()))
            committed['record'] = record
            return writes

        await self.execute_with_retry(
            lambda: self.store.run_atomic_transaction(player_keys, apply),
            f"report match {match_id}",
        )

        record = committed['record']
        changes = ", ".join(
            f"{c.user_id} {EloCalculator.format_elo_change(c.delta)}" for c in record.rating_changes
        )
        self.logger.info(f"Recorded {match_type.value} {sport} match {match_id} ({record.score}): {changes}")
        return match_id

    async def get_match(self, match_id: str) -> MatchRecord:
        """Raises NotFoundError if no such match was recorded"""
        data = await self.store.get(DocumentKind.MATCH, match_id)
        return MatchRecord.from_dict(data)

    async def head_to_head(self, user_id: str, opponent_id: str, sport: str) -> List[MatchRecord]:
        """
        Two-player matches between two users in a sport, oldest first.

        Built from the first user's match history, fetched in one batch read;
        doubles matches are excluded.
        """
        data = await self.store.get(DocumentKind.PLAYER, user_id)
        record = PlayerProfile.from_dict(data).peek_rating(sport)
        if record is None:
            return []

        documents = await self.store.get_many(DocumentKind.MATCH, record.match_history)
        matches = []
        for match_id in record.match_history:
            if match_id not in documents:
                raise NotFoundError(DocumentKind.MATCH, match_id)
            match = MatchRecord.from_dict(documents[match_id])
            if len(match.participants) == 2 and opponent_id in match.participants:
                matches.append(match)
        return sorted(matches, key=lambda m: m.played_at)

    async def head_to_head_summary(self, user_id: str, opponent_id: str, sport: str) -> HeadToHeadSummary:
        """Win counts and longest win streaks of both sides over their head-to-head matches"""
        matches = await self.head_to_head(user_id, opponent_id, sport)
        return HeadToHeadSummary(
            user_id=user_id,
            opponent_id=opponent_id,
            sport=sport,
            total_matches=len(matches),
            user_wins=sum(1 for m in matches if m.is_winner(user_id)),
            opponent_wins=sum(1 for m in matches if m.is_winner(opponent_id)),
            user_longest_streak=longest_win_streak(matches, user_id),
            opponent_longest_streak=longest_win_streak(matches, opponent_id),
        )

    def _validate_match(self, sport: str, match_type: Union[MatchType, str],
                        team1: TeamResult, team2: TeamResult) -> MatchType:
        """Validate match input, returning the parsed match type"""
        if sport not in Config.SPORTS:
            raise InvalidInputError(f"Unknown sport: {sport!r}")

        if isinstance(match_type, str):
            match_type = match_type.lower()
        try:
            match_type = MatchType(match_type)
        except ValueError:
            raise InvalidInputError(f"Unknown match type: {match_type!r}")

        seen = set()
        for label, team in (("Team 1", team1), ("Team 2", team2)):
            if not isinstance(team, TeamResult):
                raise InvalidInputError(f"{label} must be a TeamResult")
            if isinstance(team.player_ids, str) or len(team.player_ids) != match_type.team_size:
                raise InvalidInputError(
                    f"{label} must have exactly {match_type.team_size} player(s) for {match_type.value}"
                )
            for player_id in team.player_ids:
                if not isinstance(player_id, str) or not player_id:
                    raise InvalidInputError(f"{label} has an invalid player id: {player_id!r}")
                if player_id in seen:
                    raise InvalidInputError(f"Player {player_id} appears more than once")
                seen.add(player_id)

            score = team.score
            if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
                raise InvalidInputError(f"{label} score must be a number")
            if score < 0:
                raise InvalidInputError(f"{label} score cannot be negative")

        return match_type
