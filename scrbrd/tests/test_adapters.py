"""
Unit tests for the per-league ESPN adapters.

Run: pytest scrbrd/tests/test_adapters.py -v
"""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from shared.errors import PayloadError
from shared.models.domain import Final, InProgress, Postponed, Scheduled
from shared.models.enums import League
from ingest.adapters import (
    BaseballAdapter,
    BasketballAdapter,
    FootballAdapter,
    HockeyAdapter,
    SoccerAdapter,
)
from ingest.adapters.base import ordinal, overtime_label, safe_int
from ingest.adapters.baseball import format_count, parse_half_inning
from ingest.adapters.soccer import half_for, parse_minute

from payloads import BOS, FETCHED_AT, NYY, make_event, scoreboard, status_block


# ── Helpers ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("n,expected", [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"), (13, "13th"), (21, "21st")])
def test_ordinal(n: int, expected: str) -> None:
    assert ordinal(n) == expected


def test_overtime_label() -> None:
    assert overtime_label(4, 4) is None
    assert overtime_label(5, 4) == "OT"
    assert overtime_label(7, 4) == "3OT"


def test_safe_int_handles_strings_dicts_and_garbage() -> None:
    assert safe_int("3") == 3
    assert safe_int({"value": 4.0, "displayValue": "4"}) == 4
    assert safe_int("") is None
    assert safe_int(None) is None
    assert safe_int(True) is None


# ── Baseball ────────────────────────────────────────────────────────────

class TestBaseball:
    adapter = BaseballAdapter(League.MLB)

    def test_top_of_inning_with_count(self) -> None:
        event = make_event(
            status=status_block(short_detail="Top 7th", period=7),
            situation={"balls": 2, "strikes": 1, "outs": 1},
        )
        status = self.adapter.parse_event(event, FETCHED_AT).status
        assert status == InProgress(period_label="Top 7th", clock_or_count="2-1, 1 out")

    def test_bottom_from_long_detail(self) -> None:
        event = make_event(status=status_block(detail="Bottom of the 10th", period=10))
        status = self.adapter.parse_event(event, FETCHED_AT).status
        assert status.period_label == "Bot 10th"

    def test_end_of_inning_is_not_top_or_bottom(self) -> None:
        event = make_event(
            status=status_block(short_detail="End 8th", period=8),
            situation={"balls": 0, "strikes": 0, "outs": 3},
        )
        status = self.adapter.parse_event(event, FETCHED_AT).status
        assert status.period_label == "End 8th"
        assert status.clock_or_count is None

    def test_middle_of_inning(self) -> None:
        event = make_event(status=status_block(short_detail="Middle 5th", period=5))
        assert self.adapter.parse_event(event, FETCHED_AT).status.period_label == "Mid 5th"

    def test_falls_back_to_period_number(self) -> None:
        event = make_event(status=status_block(short_detail="In Progress", period=3))
        assert self.adapter.parse_event(event, FETCHED_AT).status.period_label == "3rd"

    def test_parse_half_inning(self) -> None:
        assert parse_half_inning("Top 1st") == ("Top", 1)
        assert parse_half_inning("Bot 9th") == ("Bot", 9)
        assert parse_half_inning("End of the 6th") == ("End", 6)
        assert parse_half_inning("Final") is None

    def test_format_count(self) -> None:
        assert format_count({"balls": 3, "strikes": 2, "outs": 2}) == "3-2, 2 outs"
        assert format_count({"outs": 0}) == "0 outs"
        assert format_count({}) is None
        assert format_count(None) is None


# ── Basketball ──────────────────────────────────────────────────────────

class TestBasketball:
    adapter = BasketballAdapter(League.NBA)

    def parse(self, **kwargs) -> InProgress:
        event = make_event(home=NYY, away=BOS, status=status_block(**kwargs))
        return self.adapter.parse_event(event, FETCHED_AT).status

    def test_quarter_and_clock(self) -> None:
        assert self.parse(period=3, clock="4:32") == InProgress(period_label="Q3", clock_or_count="4:32")

    def test_overtimes(self) -> None:
        assert self.parse(period=5, clock="1:10").period_label == "OT"
        assert self.parse(period=6, clock="0:30").period_label == "2OT"

    def test_halftime(self) -> None:
        assert self.parse(name="STATUS_HALFTIME", period=2, clock="0.0").period_label == "Halftime"

    def test_end_of_quarter(self) -> None:
        status = self.parse(name="STATUS_END_PERIOD", period=2, clock="0.0")
        assert status.period_label == "End Q2"
        assert status.clock_or_count is None

    def test_wnba_uses_same_adapter(self) -> None:
        assert BasketballAdapter(League.WNBA).league == League.WNBA


# ── Football ────────────────────────────────────────────────────────────

class TestFootball:
    adapter = FootballAdapter(League.NFL)

    def test_clock_with_down_and_distance(self) -> None:
        event = make_event(
            status=status_block(period=4, clock="2:00"),
            situation={"shortDownDistanceText": "3rd & 5"},
        )
        status = self.adapter.parse_event(event, FETCHED_AT).status
        assert status == InProgress(period_label="Q4", clock_or_count="2:00 3rd & 5")

    def test_overtime(self) -> None:
        event = make_event(status=status_block(period=5, clock="8:12"))
        assert self.adapter.parse_event(event, FETCHED_AT).status.period_label == "OT"


# ── Hockey ──────────────────────────────────────────────────────────────

class TestHockey:
    adapter = HockeyAdapter(League.NHL)

    def parse(self, **kwargs) -> InProgress:
        return self.adapter.parse_event(make_event(status=status_block(**kwargs)), FETCHED_AT).status

    def test_regulation_period(self) -> None:
        assert self.parse(period=2, clock="12:10") == InProgress(period_label="2nd Period", clock_or_count="12:10")

    def test_overtime_and_shootout(self) -> None:
        assert self.parse(period=4, clock="3:00").period_label == "OT"
        assert self.parse(period=5, short_detail="Shootout").period_label == "SO"
        assert self.parse(name="STATUS_SHOOTOUT", period=5, short_detail="5th").period_label == "SO"

    def test_end_of_period(self) -> None:
        assert self.parse(name="STATUS_END_PERIOD", period=1, clock="0:00").period_label == "End 1st"


# ── Soccer ──────────────────────────────────────────────────────────────

class TestSoccer:
    adapter = SoccerAdapter(League.PREM)

    def parse(self, **kwargs) -> InProgress:
        return self.adapter.parse_event(make_event(status=status_block(**kwargs)), FETCHED_AT).status

    def test_stoppage_time(self) -> None:
        assert self.parse(period=1, clock="45'+2'") == InProgress(period_label="45'+2", clock_or_count="1H")

    def test_second_half_minute(self) -> None:
        assert self.parse(period=2, clock="67'") == InProgress(period_label="67'", clock_or_count="2H")

    def test_halftime(self) -> None:
        assert self.parse(name="STATUS_HALFTIME", period=1, clock="45'").period_label == "HT"

    def test_half_inferred_without_period(self) -> None:
        assert self.parse(period=None, clock="95'").clock_or_count == "ET"

    def test_penalties(self) -> None:
        status = self.parse(name="STATUS_SHOOTOUT", period=5, clock="120'")
        assert status == InProgress(period_label="Penalties", clock_or_count="PK")

    def test_parse_minute_and_half(self) -> None:
        assert parse_minute("90'+4'") == (90, 4)
        assert parse_minute("12'") == (12, None)
        assert parse_minute("HT") is None
        assert half_for(None, 30) == "1H"
        assert half_for(3, 100) == "ET"


# ── Shared behaviour ────────────────────────────────────────────────────

class TestSharedExtraction:
    adapter = BaseballAdapter(League.MLB)

    def test_full_game_fields(self) -> None:
        event = make_event(
            home_record="80-70",
            away_record="75-75",
            broadcasts=("BSGL", "MLB.TV", "BSGL"),
        )
        game = self.adapter.parse_event(event, FETCHED_AT)
        assert game.id == "401"
        assert game.home.abbreviation == "CLE"
        assert game.home.short_name == "Guardians"
        assert game.home.record == "80-70"
        assert game.away.score == 2
        assert game.broadcasts == ("BSGL", "MLB.TV")
        assert game.start_time == datetime(2024, 9, 20, 23, 10, tzinfo=timezone.utc)
        assert game.last_updated == FETCHED_AT

    def test_missing_non_essential_fields_are_absent(self) -> None:
        event = make_event(date="")
        game = self.adapter.parse_event(event, FETCHED_AT)
        assert game.home.record is None
        assert game.away.record is None
        assert game.broadcasts == ()
        assert game.start_time is None

    def test_malformed_record_is_absent(self) -> None:
        event = make_event()
        event["competitions"][0]["competitors"][0]["records"] = [{"summary": 17}]
        assert self.adapter.parse_event(event, FETCHED_AT).home.record is None

    def test_scheduled_game_has_no_score(self) -> None:
        event = make_event(
            status=status_block(state="pre", name="STATUS_SCHEDULED", short_detail="9/20 - 7:10 PM EDT", period=0),
        )
        game = self.adapter.parse_event(event, FETCHED_AT)
        assert isinstance(game.status, Scheduled)
        assert game.status.start_time == game.start_time
        assert game.home.score is None and game.away.score is None

    def test_final_detail(self) -> None:
        plain = make_event(status=status_block(state="post", name="STATUS_FINAL", short_detail="Final", completed=True))
        extra = make_event(status=status_block(state="post", name="STATUS_FINAL", short_detail="Final/10", completed=True))
        assert self.adapter.parse_event(plain, FETCHED_AT).status == Final()
        assert self.adapter.parse_event(extra, FETCHED_AT).status == Final(detail="Final/10")

    def test_postponed(self) -> None:
        event = make_event(
            home_score=None,
            away_score=None,
            status=status_block(state="post", name="STATUS_POSTPONED", short_detail="Postponed"),
        )
        game = self.adapter.parse_event(event, FETCHED_AT)
        assert game.status == Postponed(detail="Postponed")

    def test_one_bad_game_is_skipped(self) -> None:
        good_a = make_event("1")
        good_b = make_event("2", home=NYY, away=BOS)
        bad = make_event("3")
        del bad["competitions"][0]["competitors"][0]["team"]["abbreviation"]
        result = self.adapter.parse(scoreboard(good_a, bad, good_b), fetched_at=FETCHED_AT)
        assert [g.id for g in result.games] == ["1", "2"]
        assert len(result.skipped) == 1
        assert result.skipped[0].game_id == "3"
        assert result.skipped[0].field == "home.team.abbreviation"

    def test_live_game_without_score_is_skipped(self) -> None:
        bad = make_event("9", away_score=None)
        result = self.adapter.parse(scoreboard(make_event("1"), bad), fetched_at=FETCHED_AT)
        assert [g.id for g in result.games] == ["1"]
        assert result.skipped[0].field == "away.score"

    def test_same_team_on_both_sides_is_skipped(self) -> None:
        bad = make_event("5", home=NYY, away=NYY)
        result = self.adapter.parse(scoreboard(bad))
        assert result.games == []
        assert result.skipped[0].field == "game"

    def test_missing_status_state_is_skipped(self) -> None:
        bad = make_event("6", status=status_block(state="", name="STATUS_WEIRD"))
        result = self.adapter.parse(scoreboard(bad))
        assert result.skipped[0].field == "status.type.state"

    def test_empty_scoreboard(self) -> None:
        result = self.adapter.parse(scoreboard())
        assert result.games == [] and result.skipped == []

    @pytest.mark.parametrize("raw", [None, [], "text", {"leagues": []}, {"events": {}}])
    def test_unusable_payload_raises(self, raw) -> None:
        with pytest.raises(PayloadError):
            self.adapter.parse(raw)

    def test_adapter_rejects_foreign_league(self) -> None:
        with pytest.raises(ValueError):
            BaseballAdapter(League.NBA)
