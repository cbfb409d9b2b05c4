import math
from typing import Tuple
from rackt.config import Config


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity"""
    return math.floor(value + 0.5)


class EloCalculator:
    """Handles RacktRank rating calculations"""

    @staticmethod
    def calculate_expected_score(rating_a: float, rating_b: float) -> float:
        """
        Calculate the expected score for player A against player B

        Args:
            rating_a: Player A's current rating
            rating_b: Player B's current rating

        Returns:
            Expected score (0.0 to 1.0) for player A
        """
        return 1 / (1 + math.pow(10, (rating_b - rating_a) / 400))

    @staticmethod
    def apply_loss_mitigation(delta: float) -> float:
        """
        Scale a negative rating delta by the loss mitigation factor.

        Positive deltas are returned unchanged, so a loser always gives back
        slightly less than the winner gains.
        """
        if delta < 0:
            return delta * Config.LOSS_MITIGATION_FACTOR
        return delta

    @staticmethod
    def calculate_rating_changes(rating_a: float, rating_b: float, score_a: float,
                                 k_factor: float = None) -> Tuple[float, float]:
        """
        Calculate the (unrounded) rating deltas for both sides of a match

        Args:
            rating_a: Side A's current rating
            rating_b: Side B's current rating
            score_a: Side A's result (1 for a win, 0 for a loss, 0.5 for a draw)
            k_factor: K-factor to use, defaults to Config.K_FACTOR

        Returns:
            Tuple of (delta_a, delta_b) after loss mitigation
        """
        if k_factor is None:
            k_factor = Config.K_FACTOR

        score_b = 1 - score_a
        expected_a = EloCalculator.calculate_expected_score(rating_a, rating_b)
        expected_b = EloCalculator.calculate_expected_score(rating_b, rating_a)

        delta_a = EloCalculator.apply_loss_mitigation(k_factor * (score_a - expected_a))
        delta_b = EloCalculator.apply_loss_mitigation(k_factor * (score_b - expected_b))
        return delta_a, delta_b

    @staticmethod
    def calculate_new_ratings(rating_a: float, rating_b: float, score_a: float,
                              k_factor: float = None) -> Tuple[int, int]:
        """
        Calculate the new ratings for both sides of a match

        Args:
            rating_a: Side A's current rating
            rating_b: Side B's current rating
            score_a: Side A's result (1 for a win, 0 for a loss, 0.5 for a draw)
            k_factor: K-factor to use, defaults to Config.K_FACTOR

        Returns:
            Tuple of (new_rating_a, new_rating_b), no floor or ceiling applied
        """
        delta_a, delta_b = EloCalculator.calculate_rating_changes(
            rating_a, rating_b, score_a, k_factor
        )
        return round_half_up(rating_a + delta_a), round_half_up(rating_b + delta_b)

    @staticmethod
    def calculate_win_probability(rating_a: float, rating_b: float) -> float:
        """
        Calculate win probability for player A against player B

        Returns:
            Win probability as percentage (0.0 to 100.0)
        """
        expected_score = EloCalculator.calculate_expected_score(rating_a, rating_b)
        return expected_score * 100

    @staticmethod
    def format_elo_change(elo_change: int) -> str:
        """Format a rating change with an explicit sign for display"""
        if elo_change > 0:
            return f"+{elo_change}"
        elif elo_change < 0:
            return str(elo_change)
        else:
            return "±0"
