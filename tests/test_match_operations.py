"""
tests/test_match_operations.py - Ranked match reporting against a SQLite store.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from rackt.data_models.match import MatchType, TeamResult
from rackt.utils.exceptions import InvalidInputError, NotFoundError


async def register(engine, *player_ids):
    for player_id in player_ids:
        await engine.register_player(player_id, player_id.title())


class TestRegisterPlayer:
    async def test_register_creates_profile(self, engine):
        profile = await engine.register_player("u1", "Ana")
        assert profile.display_name == "Ana"
        assert profile.sports == {}

    async def test_register_is_idempotent(self, engine):
        await engine.register_player("u1", "Ana")
        again = await engine.register_player("u1", "Someone Else")
        assert again.display_name == "Ana"

    async def test_blank_display_name_rejected(self, engine):
        with pytest.raises(InvalidInputError):
            await engine.register_player("u1", "  ")

    async def test_unknown_player(self, engine):
        with pytest.raises(NotFoundError):
            await engine.get_player("ghost")

    async def test_default_rating_before_first_match(self, engine):
        await register(engine, "ana")
        record = await engine.get_rating("ana", "Tennis")
        assert record.value == 1200
        assert record.matches_played == 0


class TestReportSingles:
    async def test_new_players_singles(self, engine):
        await register(engine, "ana", "ben")
        match_id = await engine.report_match(
            "Tennis", MatchType.SINGLES, TeamResult(["ana"], 2), TeamResult(["ben"], 1)
        )

        ana = await engine.get_rating("ana", "Tennis")
        ben = await engine.get_rating("ben", "Tennis")
        assert (ana.value, ben.value) == (1216, 1185)
        assert ana.match_history == [match_id]
        assert ben.match_history == [match_id]
        assert (ana.wins, ana.losses, ana.streak) == (1, 0, 1)
        assert (ben.wins, ben.losses, ben.streak) == (0, 1, -1)

    async def test_match_record(self, engine):
        await register(engine, "ana", "ben")
        played_at = datetime(2026, 3, 1, 18, 30, tzinfo=timezone.utc)
        match_id = await engine.report_match(
            "Tennis", "singles", TeamResult(["ana"], 1), TeamResult(["ben"], 3), played_at=played_at
        )

        match = await engine.get_match(match_id)
        assert match.winner_ids == ("ben",)
        assert match.participants == ("ana", "ben")
        assert match.score == "1-3"
        assert match.played_at == played_at
        assert match.rating_change_for("ben").delta == 16
        assert match.rating_change_for("ana").delta == -15

    async def test_equal_scores_count_as_team1_loss(self, engine):
        await register(engine, "ana", "ben")
        match_id = await engine.report_match(
            "Tennis", MatchType.SINGLES, TeamResult(["ana"], 2), TeamResult(["ben"], 2)
        )
        match = await engine.get_match(match_id)
        assert match.winner_ids == ("ben",)
        assert (await engine.get_rating("ana", "Tennis")).losses == 1

    async def test_streak_flips_sign(self, engine):
        await register(engine, "ana", "ben")
        for _ in range(3):
            await engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["ana"], 1), TeamResult(["ben"], 0))
        assert (await engine.get_rating("ana", "Tennis")).streak == 3
        await engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["ana"], 0), TeamResult(["ben"], 1))
        ana = await engine.get_rating("ana", "Tennis")
        ben = await engine.get_rating("ben", "Tennis")
        assert ana.streak == -1
        assert ben.streak == 1
        assert (ana.wins, ana.losses) == (3, 1)

    async def test_sports_are_rated_separately(self, engine):
        await register(engine, "ana", "ben")
        await engine.report_match("Padel", MatchType.SINGLES, TeamResult(["ana"], 1), TeamResult(["ben"], 0))
        assert (await engine.get_rating("ana", "Padel")).value == 1216
        assert (await engine.get_rating("ana", "Tennis")).value == 1200

    async def test_rating_history_is_recorded(self, engine):
        await register(engine, "ana", "ben")
        await engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["ana"], 1), TeamResult(["ben"], 0))
        ana = await engine.get_rating("ana", "Tennis")
        assert [point.rating for point in ana.rating_history] == [1216]


class TestReportDoubles:
    async def test_partners_share_team_delta(self, engine):
        await register(engine, "ana", "ben", "cal", "dee")
        await engine.report_match(
            "Padel", MatchType.DOUBLES, TeamResult(["ana", "ben"], 6), TeamResult(["cal", "dee"], 4)
        )
        ratings = {p: (await engine.get_rating(p, "Padel")).value for p in ("ana", "ben", "cal", "dee")}
        assert ratings == {"ana": 1216, "ben": 1216, "cal": 1185, "dee": 1185}

    async def test_team_rating_is_mean(self, engine):
        await register(engine, "ana", "ben", "cal", "dee")
        # Lift ana so the first team is rated above the second
        await engine.report_match("Padel", MatchType.SINGLES, TeamResult(["ana"], 1), TeamResult(["cal"], 0))
        match_id = await engine.report_match(
            "Padel", MatchType.DOUBLES, TeamResult(["ana", "ben"], 6), TeamResult(["cal", "dee"], 2)
        )
        match = await engine.get_match(match_id)
        deltas = {c.user_id: c.delta for c in match.rating_changes}
        assert deltas["ana"] == deltas["ben"]
        assert deltas["cal"] == deltas["dee"]
        assert 0 < deltas["ana"] < 16


class TestReportValidation:
    @pytest.mark.parametrize("team1,team2,match_type", [
        (TeamResult(["ana", "ben"], 1), TeamResult(["cal"], 0), MatchType.SINGLES),
        (TeamResult(["ana"], 1), TeamResult(["cal"], 0), MatchType.DOUBLES),
        (TeamResult(["ana"], 1), TeamResult(["ana"], 0), MatchType.SINGLES),
        (TeamResult([""], 1), TeamResult(["cal"], 0), MatchType.SINGLES),
        (TeamResult(["ana"], "6-4"), TeamResult(["cal"], 0), MatchType.SINGLES),
        (TeamResult(["ana"], True), TeamResult(["cal"], 0), MatchType.SINGLES),
        (TeamResult(["ana"], -1), TeamResult(["cal"], 0), MatchType.SINGLES),
        (TeamResult("ana", 1), TeamResult(["cal"], 0), MatchType.SINGLES),
        (TeamResult(["ana"], 1), TeamResult(["cal"], 0), "triples"),
    ])
    async def test_malformed_rosters(self, engine, team1, team2, match_type):
        await register(engine, "ana", "ben", "cal")
        with pytest.raises(InvalidInputError):
            await engine.report_match("Tennis", match_type, team1, team2)

    async def test_unknown_sport(self, engine):
        await register(engine, "ana", "ben")
        with pytest.raises(InvalidInputError):
            await engine.report_match("Curling", MatchType.SINGLES, TeamResult(["ana"], 1), TeamResult(["ben"], 0))

    async def test_unregistered_player_writes_nothing(self, engine):
        await register(engine, "ana")
        with pytest.raises(NotFoundError):
            await engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["ana"], 1), TeamResult(["ghost"], 0))
        ana = await engine.get_rating("ana", "Tennis")
        assert ana.matches_played == 0
        assert ana.match_history == []


class TestConcurrentReports:
    async def test_shared_participant_loses_no_updates(self, engine):
        await register(engine, "hub", "a", "b", "c")
        await asyncio.gather(*[
            engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["hub"], 1), TeamResult([opponent], 0))
            for opponent in ("a", "b", "c")
        ])
        hub = await engine.get_rating("hub", "Tennis")
        assert hub.wins == 3
        assert hub.streak == 3
        assert len(hub.match_history) == 3
        assert len(set(hub.match_history)) == 3

    async def test_serial_rating_chain(self, engine):
        await register(engine, "hub", "a", "b")
        await asyncio.gather(
            engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["hub"], 1), TeamResult(["a"], 0)),
            engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["hub"], 1), TeamResult(["b"], 0)),
        )
        hub = await engine.get_rating("hub", "Tennis")
        # Second match must have been scored from the first match's result
        changes = [(await engine.get_match(m)).rating_change_for("hub") for m in hub.match_history]
        assert changes[0].before == 1200
        assert changes[1].before == changes[0].after
        assert hub.value == changes[1].after


class TestHeadToHead:
    async def test_head_to_head_and_achievements(self, engine):
        await register(engine, "ana", "ben", "cal", "dee")
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        ids = []
        for day in range(3):
            ids.append(await engine.report_match(
                "Tennis", MatchType.SINGLES, TeamResult(["ana"], 2), TeamResult(["ben"], 0),
                played_at=start + timedelta(days=day),
            ))
        await engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["ana"], 2), TeamResult(["cal"], 0))
        await engine.report_match(
            "Tennis", MatchType.DOUBLES, TeamResult(["ana", "cal"], 2), TeamResult(["ben", "dee"], 0)
        )

        matches = await engine.head_to_head("ana", "ben", "Tennis")
        assert [m.match_id for m in matches] == ids

        achievements = {a.id: a for a in await engine.rivalry_achievements("ana", "ben", "Tennis")}
        assert set(achievements) == {"first_blood", "win_streak_3"}
        assert achievements["win_streak_3"].earned_at == start + timedelta(days=2)
        assert "Ben" in achievements["first_blood"].description

    async def test_no_history_in_sport(self, engine):
        await register(engine, "ana", "ben")
        assert await engine.head_to_head("ana", "ben", "Badminton") == []

    async def test_head_to_head_summary(self, engine):
        await register(engine, "ana", "ben", "cal")
        start = datetime(2026, 3, 1, tzinfo=timezone.utc)
        for day, ana_won in enumerate([True, True, False, True, True, True]):
            ana_score, ben_score = (2, 0) if ana_won else (0, 2)
            await engine.report_match(
                "Tennis", MatchType.SINGLES, TeamResult(["ana"], ana_score), TeamResult(["ben"], ben_score),
                played_at=start + timedelta(days=day),
            )
        await engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["cal"], 2), TeamResult(["ana"], 0))

        summary = await engine.head_to_head_summary("ana", "ben", "Tennis")
        assert summary.total_matches == 6
        assert (summary.user_wins, summary.opponent_wins) == (5, 1)
        assert (summary.user_longest_streak, summary.opponent_longest_streak) == (3, 1)
        assert summary.user_win_rate == pytest.approx(500 / 6)

        flipped = await engine.head_to_head_summary("ben", "ana", "Tennis")
        assert (flipped.user_wins, flipped.opponent_wins) == (1, 5)

    async def test_empty_head_to_head_summary(self, engine):
        await register(engine, "ana", "ben")
        summary = await engine.head_to_head_summary("ana", "ben", "Padel")
        assert summary.total_matches == 0
        assert (summary.user_longest_streak, summary.opponent_longest_streak) == (0, 0)
        assert summary.user_win_rate == 0.0


class TestLeaderboard:
    async def test_ranked_by_rating_with_shared_ranks(self, engine):
        await register(engine, "ana", "ben", "cal", "dee", "eve")
        await engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["ana"], 2), TeamResult(["ben"], 0))
        await engine.report_match("Tennis", MatchType.SINGLES, TeamResult(["cal"], 2), TeamResult(["dee"], 0))
        await engine.report_match("Padel", MatchType.SINGLES, TeamResult(["eve"], 2), TeamResult(["ana"], 0))

        board = await engine.get_leaderboard("Tennis")
        assert [(e.rank, e.player_id, e.rating) for e in board] == [
            (1, "ana", 1216), (1, "cal", 1216), (3, "ben", 1185), (3, "dee", 1185),
        ]
        assert board[0].display_name == "Ana"
        assert (board[0].wins, board[0].losses, board[0].streak) == (1, 0, 1)
        assert board[0].win_rate == 100.0
        assert board[2].win_rate == 0.0

    async def test_only_players_rated_in_sport(self, engine):
        await register(engine, "ana", "ben", "eve")
        await engine.report_match("Padel", MatchType.SINGLES, TeamResult(["eve"], 2), TeamResult(["ana"], 0))
        board = await engine.get_leaderboard("Padel")
        assert [e.player_id for e in board] == ["eve", "ana"]
        assert await engine.get_leaderboard("Badminton") == []

    async def test_limit(self, engine):
        await register(engine, "ana", "ben", "cal", "dee")
        await engine.report_match(
            "Tennis", MatchType.DOUBLES, TeamResult(["ana", "ben"], 2), TeamResult(["cal", "dee"], 0)
        )
        board = await engine.get_leaderboard("Tennis", limit=2)
        assert [e.player_id for e in board] == ["ana", "ben"]

    @pytest.mark.parametrize("sport,limit", [("Chess", 10), ("Tennis", 0), ("Tennis", True), ("Tennis", "10")])
    async def test_invalid_arguments(self, engine, sport, limit):
        with pytest.raises(InvalidInputError):
            await engine.get_leaderboard(sport, limit)
