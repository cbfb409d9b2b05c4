"""
Rivalry achievements.

Achievements are recomputed from the head-to-head match list on every call;
nothing here is stored. Each definition is an independent checker over the
chronologically sorted matches that returns the date it was first earned.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from rackt.data_models.achievement import Achievement
from rackt.data_models.match import MatchRecord
from rackt.utils.exceptions import InvalidInputError

Checker = Callable[[List[MatchRecord], str], Optional[datetime]]


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    name: str
    description: str  # Formatted with opponent_name
    icon: str
    checker: Checker


def _first_blood(matches: List[MatchRecord], user_id: str) -> Optional[datetime]:
    for match in matches:
        if match.is_winner(user_id):
            return match.played_at
    return None


def _win_streak_3(matches: List[MatchRecord], user_id: str) -> Optional[datetime]:
    streak = 0
    for match in matches:
        if match.is_winner(user_id):
            streak += 1
            if streak == 3:
                return match.played_at
        else:
            streak = 0
    return None


def _dominator(matches: List[MatchRecord], user_id: str) -> Optional[datetime]:
    wins = [match for match in matches if match.is_winner(user_id)]
    if len(wins) >= 5:
        return wins[4].played_at
    return None


def _rivalry(matches: List[MatchRecord], user_id: str) -> Optional[datetime]:
    if len(matches) >= 10:
        return matches[9].played_at
    return None


def _comeback_kid(matches: List[MatchRecord], user_id: str) -> Optional[datetime]:
    loss_streak = 0
    for match in matches:
        if match.is_winner(user_id):
            if loss_streak >= 2:
                return match.played_at
            loss_streak = 0
        else:
            loss_streak += 1
    return None


ACHIEVEMENT_DEFINITIONS = [
    AchievementDefinition(
        id='first_blood', name='First Blood',
        description='Earn your first victory against {opponent_name}.',
        icon='Swords', checker=_first_blood,
    ),
    AchievementDefinition(
        id='win_streak_3', name='On a Roll',
        description='Win 3 consecutive matches against {opponent_name}.',
        icon='Flame', checker=_win_streak_3,
    ),
    AchievementDefinition(
        id='dominator', name='Dominator',
        description='Win a total of 5 matches against {opponent_name}.',
        icon='Trophy', checker=_dominator,
    ),
    AchievementDefinition(
        id='rivalry', name='Established Rivalry',
        description='Play 10 matches against {opponent_name}.',
        icon='Users', checker=_rivalry,
    ),
    AchievementDefinition(
        id='comeback_kid', name='Comeback Kid',
        description='Win a match against {opponent_name} after losing at least 2 in a row.',
        icon='Undo2', checker=_comeback_kid,
    ),
]


def _validate_head_to_head(matches: Sequence[MatchRecord], current_user_id: str) -> None:
    opponents = set()
    for match in matches:
        participants = set(match.participants)
        if len(match.participants) != 2 or len(participants) != 2:
            raise InvalidInputError(f"Match {match.match_id} is not a two-player match")
        if current_user_id not in participants:
            raise InvalidInputError(f"User {current_user_id} did not play in match {match.match_id}")
        opponents |= participants - {current_user_id}
    if len(opponents) > 1:
        raise InvalidInputError("Matches must all be between the same two players")


def compute_achievements(matches: Sequence[MatchRecord], current_user_id: str,
                         opponent_name: str) -> List[Achievement]:
    """
    Compute the rivalry achievements the current user has earned.

    Args:
        matches: Head-to-head matches between the current user and one opponent
        current_user_id: The viewing user
        opponent_name: Opponent display name used in descriptions

    Returns:
        Earned achievements in catalog order, each stamped with the date it was first earned

    Raises:
        InvalidInputError: If a match is not a two-player match between the same pair
    """
    if not matches:
        return []

    _validate_head_to_head(matches, current_user_id)
    ordered = sorted(matches, key=lambda m: m.played_at)

    earned = []
    for definition in ACHIEVEMENT_DEFINITIONS:
        earned_at = definition.checker(ordered, current_user_id)
        if earned_at is not None:
            earned.append(Achievement(
                id=definition.id,
                name=definition.name,
                description=definition.description.format(opponent_name=opponent_name),
                icon=definition.icon,
                earned_at=earned_at,
            ))
    return earned
