import asyncio

import httpx
import pytest

from wolverine_tracker.models.enums import GameState
from wolverine_tracker.models.game import Competitor, Game, GameStatus
from wolverine_tracker.models.team import Team, TeamDirectory
from wolverine_tracker.scrapers.espn_scraper import EspnScraper
from wolverine_tracker.tracking.affiliation import CollegeMatcher
from wolverine_tracker.tracking.aggregator import build_matchups, resolve_team

from conftest import CORE, SITE, FakeEspn, athlete, roster_payload

MATCHER = CollegeMatcher(
    "michigan",
    ["michigan state", "michigan tech", "western michigan", "eastern michigan", "central michigan"],
)

LIONS = Team(team_id="8", display_name="Detroit Lions", abbreviation="DET")
BEARS = Team(team_id="3", display_name="Chicago Bears", abbreviation="CHI")
RAVENS = Team(team_id="33", display_name="Baltimore Ravens", abbreviation="BAL")
BROWNS = Team(team_id="5", display_name="Cleveland Browns", abbreviation="CLE")
DIRECTORY = TeamDirectory([LIONS, BEARS, RAVENS, BROWNS])


def live_game(game_id: str, *teams: Team) -> Game:
    return Game(
        game_id=game_id,
        name=" at ".join(t.display_name for t in teams),
        status=GameStatus(state=GameState.IN_PROGRESS, description="In Progress"),
        competitors=[
            Competitor(team_id=t.team_id, display_name=t.display_name, abbreviation=t.abbreviation)
            for t in teams
        ],
    )


def roster_url(team_id: str) -> str:
    return f"{SITE}/teams/{team_id}/roster"


async def test_collects_matches_per_team(espn: FakeEspn, scraper: EspnScraper) -> None:
    espn.add(
        roster_url("8"),
        json=roster_payload(
            [athlete(1, "Aidan Hutchinson", college="Michigan", jersey="97", position="DE")],
            [athlete(2, "Jahmyr Gibbs", college="Alabama")],
        ),
    )
    espn.add(
        roster_url("3"),
        json=roster_payload([athlete(3, "Some Spartan", college={"name": "Michigan State"})]),
    )

    [matchup] = await build_matchups(scraper, [live_game("1", LIONS, BEARS)], DIRECTORY, MATCHER)

    assert [side.team for side in matchup.teams] == [LIONS, BEARS]
    [hutch] = matchup.teams[0].players
    assert hutch.display_name == "Aidan Hutchinson"
    assert hutch.jersey == "97"
    assert hutch.position == "DE"
    assert hutch.team_id == "8"
    assert hutch.team_name == "Detroit Lions"
    assert hutch.photo_url == "https://a.espncdn.com/i/headshots/nfl/players/full/1.png"
    assert matchup.teams[1].players == []
    assert matchup.players == [hutch]
    assert matchup.total_matched == 1


async def test_games_without_matches_are_dropped(espn: FakeEspn, scraper: EspnScraper) -> None:
    espn.add(roster_url("8"), json=roster_payload([athlete(1, "A", college="Michigan")]))
    espn.add(roster_url("3"), json=roster_payload([athlete(2, "B", college="Iowa")]))
    espn.add(roster_url("33"), json=roster_payload([athlete(3, "C", college="Iowa")]))
    espn.add(roster_url("5"), json=roster_payload([athlete(4, "D", college="Ohio State")]))

    matchups = await build_matchups(
        scraper,
        [live_game("A", RAVENS, BROWNS), live_game("B", LIONS, BEARS)],
        DIRECTORY,
        MATCHER,
    )
    assert [m.game.game_id for m in matchups] == ["B"]
    assert all(m.total_matched >= 1 for m in matchups)


async def test_partial_failure_isolation(espn: FakeEspn, scraper: EspnScraper) -> None:
    espn.fail(roster_url("8"))
    espn.fail(f"{SITE}/teams/8?enable=roster")
    espn.add(roster_url("3"), json=roster_payload([athlete(7, "Bear Wolverine", college="Michigan")]))

    [matchup] = await build_matchups(scraper, [live_game("1", LIONS, BEARS)], DIRECTORY, MATCHER)

    assert matchup.teams[0].players == []
    assert [p.display_name for p in matchup.teams[1].players] == ["Bear Wolverine"]


async def test_biography_lookup_for_missing_roster_college(
    espn: FakeEspn, scraper: EspnScraper
) -> None:
    espn.add(roster_url("8"), json=roster_payload([athlete(1, "Needs Bio"), athlete(2, "Broken Bio")]))
    espn.add(f"{CORE}/athletes/1", json={"college": {"$ref": "http://core.test/colleges/130"}})
    espn.add("http://core.test/colleges/130", json={"name": "Michigan"})
    espn.fail(f"{CORE}/athletes/2")

    [matchup] = await build_matchups(scraper, [live_game("1", LIONS, BEARS)], DIRECTORY, MATCHER)
    assert [p.display_name for p in matchup.teams[0].players] == ["Needs Bio"]
    assert matchup.teams[0].players[0].college == "Michigan"


async def test_roster_order_kept_despite_completion_order(espn: FakeEspn) -> None:
    delays = {"1": 0.03, "2": 0.0, "3": 0.015}

    async def slow_bio(request: httpx.Request) -> httpx.Response:
        athlete_id = request.url.path.rsplit("/", 1)[-1]
        await asyncio.sleep(delays[athlete_id])
        return httpx.Response(200, json={"college": "Michigan"})

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/nfl/athletes/"):
            return await slow_bio(request)
        return espn.handler(request)

    espn.add(
        roster_url("8"),
        json=roster_payload([athlete(1, "First"), athlete(2, "Second"), athlete(3, "Third")]),
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    scraper = EspnScraper(client, site_api_base=SITE, core_api_base=CORE, max_attempts=1)

    [matchup] = await build_matchups(
        scraper, [live_game("1", LIONS, BEARS)], DIRECTORY, MATCHER, max_concurrency=4
    )
    assert [p.display_name for p in matchup.teams[0].players] == ["First", "Second", "Third"]
    await scraper.close()


async def test_unknown_team_falls_back_to_competitor(espn: FakeEspn, scraper: EspnScraper) -> None:
    espn.add(roster_url("99"), json=roster_payload([athlete(1, "Expansion Wolverine", college="Michigan")]))
    game = Game(
        game_id="1",
        name="Expansion at Lions",
        status=GameStatus(state=GameState.HALFTIME),
        competitors=[
            Competitor(team_id="99", display_name="Expansion Team", abbreviation="EXP"),
            Competitor(team_id="8", display_name="Detroit Lions", abbreviation="DET"),
        ],
    )

    [matchup] = await build_matchups(scraper, [game], DIRECTORY, MATCHER)
    assert matchup.teams[0].team.display_name == "Expansion Team"
    assert matchup.teams[0].team.abbreviation == "EXP"
    assert [p.team_name for p in matchup.players] == ["Expansion Team"]


def test_resolve_team_prefers_directory() -> None:
    comp = Competitor(team_id="8", display_name="Lions (scoreboard)", abbreviation="DET")
    assert resolve_team(comp, DIRECTORY) is LIONS


def test_resolve_team_without_id() -> None:
    team = resolve_team(Competitor(display_name="TBD"), DIRECTORY)
    assert team.team_id == ""
    assert team.display_name == "TBD"


async def test_no_games(scraper: EspnScraper) -> None:
    assert await build_matchups(scraper, [], DIRECTORY, MATCHER) == []


@pytest.mark.parametrize("max_concurrency", [1, 8])
async def test_idempotent(espn: FakeEspn, scraper: EspnScraper, max_concurrency: int) -> None:
    espn.add(roster_url("8"), json=roster_payload([athlete(1, "A", college="Michigan"), athlete(2, "B", college="Michigan")]))
    espn.add(roster_url("3"), json=roster_payload([athlete(3, "C", college="michigan")]))
    games = [live_game("1", LIONS, BEARS)]

    first = await build_matchups(scraper, games, DIRECTORY, MATCHER, max_concurrency=max_concurrency)
    second = await build_matchups(scraper, games, DIRECTORY, MATCHER, max_concurrency=max_concurrency)
    assert first == second
    assert [p.display_name for p in first[0].players] == ["A", "B", "C"]
