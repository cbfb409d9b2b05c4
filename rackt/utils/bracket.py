"""
Single-elimination bracket generation.

Fields that are not a power of two are padded with byes. Bye recipients
advance straight into round 2; byes and real first-round matches are
interleaved so that position i of every round feeds position i // 2 of the
next one.
"""

import random
import uuid
from typing import List, Optional, Sequence

from rackt.data_models.tournament import Round, TournamentMatch
from rackt.utils.exceptions import InvalidInputError


def _new_match_id() -> str:
    return uuid.uuid4().hex


def next_power_of_two(n: int) -> int:
    size = 1
    while size < n:
        size *= 2
    return size


def validate_participants(participant_ids: Sequence[str]) -> List[str]:
    participants = list(participant_ids)
    if not participants:
        raise InvalidInputError("A bracket needs at least one participant")
    for participant_id in participants:
        if not isinstance(participant_id, str) or not participant_id:
            raise InvalidInputError(f"Invalid participant id: {participant_id!r}")
    if len(set(participants)) != len(participants):
        raise InvalidInputError("Duplicate participants are not allowed")
    return participants


def generate_bracket(participant_ids: Sequence[str], rng: Optional[random.Random] = None) -> List[Round]:
    """
    Build the full round structure for a single-elimination bracket.

    Args:
        participant_ids: Unique player ids, at least one
        rng: Random source for seeding; the module-level generator is used if omitted

    Returns:
        Rounds ordered from first round to final. Round-1 byes are already
        decided and their players written into round 2. A single participant
        yields no rounds at all.

    Raises:
        InvalidInputError: If the list is empty or contains duplicate/blank ids
    """
    participants = validate_participants(participant_ids)
    (rng or random).shuffle(participants)

    player_count = len(participants)
    bracket_size = next_power_of_two(player_count)
    if bracket_size == 1:
        return []

    bye_count = bracket_size - player_count
    first_round_match_count = (player_count - bye_count) // 2

    bye_players = participants[:bye_count]
    paired_players = participants[bye_count:]

    matchups = [
        (paired_players[i * 2], paired_players[i * 2 + 1])
        for i in range(first_round_match_count)
    ]

    # Interleave: match, bye, match, bye... until both run out
    first_round = Round(round_number=1)
    position = 0
    while matchups or bye_players:
        if matchups:
            player1, player2 = matchups.pop(0)
            first_round.matches.append(TournamentMatch(
                id=_new_match_id(), round_number=1, position=position,
                player1_id=player1, player2_id=player2,
            ))
            position += 1
        if bye_players:
            bye_player = bye_players.pop(0)
            first_round.matches.append(TournamentMatch(
                id=_new_match_id(), round_number=1, position=position,
                player1_id=bye_player, winner_id=bye_player, is_bye=True,
            ))
            position += 1

    rounds = [first_round]
    match_count = bracket_size // 2
    round_number = 2
    while match_count > 1:
        match_count //= 2
        rounds.append(Round(
            round_number=round_number,
            matches=[
                TournamentMatch(id=_new_match_id(), round_number=round_number, position=i)
                for i in range(match_count)
            ],
        ))
        round_number += 1

    # Write bye winners forward into their round-2 slots
    if len(rounds) > 1:
        second_round = {match.position: match for match in rounds[1].matches}
        for match in first_round.matches:
            if match.is_decided:
                _, next_position, slot = match.next_address
                second_round[next_position].set_slot(slot, match.winner_id)

    return rounds
