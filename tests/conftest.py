"""Shared fixtures: a fake ESPN API served through httpx.MockTransport."""

from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest

from wolverine_tracker.scrapers.espn_scraper import EspnScraper

SITE = "https://site.test/nfl"
CORE = "https://core.test/nfl"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeEspn:
    """Routes full request URLs to canned responses and records every call."""

    def __init__(self) -> None:
        self.routes: Dict[str, List[Responder]] = {}
        self.calls: List[str] = []

    def add(
        self,
        url: str,
        json: Any = None,
        status: int = 200,
        responder: Optional[Responder] = None,
    ) -> None:
        """Queues a response; the last queued response repeats once the queue drains."""
        if responder is None:

            def responder(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json)

        self.routes.setdefault(url, []).append(responder)

    def fail(self, url: str, exc: type = httpx.ConnectError) -> None:
        def raise_error(request: httpx.Request) -> httpx.Response:
            raise exc("boom", request=request)

        self.add(url, responder=raise_error)

    def count(self, url: str) -> int:
        return self.calls.count(url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        queue = self.routes.get(url)
        if not queue:
            return httpx.Response(404, json={"code": 404, "message": "not found"})
        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        return responder(request)


@pytest.fixture
def espn() -> FakeEspn:
    return FakeEspn()


@pytest.fixture
async def scraper(espn: FakeEspn):
    client = httpx.AsyncClient(transport=httpx.MockTransport(espn.handler))
    scraper = EspnScraper(
        client, site_api_base=SITE, core_api_base=CORE, max_attempts=1
    )
    yield scraper
    await scraper.close()


# --- Payload builders ---


def team(team_id: Union[str, int], name: str, abbreviation: str) -> Dict[str, Any]:
    return {
        "team": {
            "id": str(team_id),
            "displayName": name,
            "abbreviation": abbreviation,
            "location": name.rsplit(" ", 1)[0],
            "name": name.rsplit(" ", 1)[-1],
        }
    }


def teams_payload(*teams: Dict[str, Any]) -> Dict[str, Any]:
    return {"sports": [{"leagues": [{"teams": list(teams)}]}]}


def competitor(team_id: Union[str, int], name: str, abbreviation: str, home_away: str = "home"):
    return {
        "id": str(team_id),
        "homeAway": home_away,
        "score": "14",
        "team": {"id": str(team_id), "displayName": name, "abbreviation": abbreviation},
    }


def event(
    event_id: str,
    state: str,
    *competitors: Dict[str, Any],
    name: str = "Away at Home",
    short_name: str = "AWY @ HOM",
) -> Dict[str, Any]:
    return {
        "id": event_id,
        "name": name,
        "shortName": short_name,
        "date": "2024-09-08T17:00Z",
        "status": {
            "period": 2,
            "displayClock": "10:32",
            "type": {
                "name": state,
                "description": "In Progress" if state == "STATUS_IN_PROGRESS" else state,
                "shortDetail": "10:32 - 2nd",
            },
        },
        "competitions": [{"competitors": list(competitors)}],
    }


def scoreboard(*events: Dict[str, Any]) -> Dict[str, Any]:
    return {"events": list(events)}


def athlete(
    athlete_id: Union[str, int],
    name: str,
    college: Any = None,
    jersey: Optional[str] = "10",
    position: Optional[str] = "QB",
) -> Dict[str, Any]:
    raw: Dict[str, Any] = {"id": str(athlete_id), "displayName": name}
    if jersey is not None:
        raw["jersey"] = jersey
    if position is not None:
        raw["position"] = {"abbreviation": position}
    if college is not None:
        raw["college"] = college
    return raw


def roster_payload(*groups: List[Dict[str, Any]]) -> Dict[str, Any]:
    names = ["offense", "defense", "specialTeam"]
    return {
        "athletes": [
            {"position": names[i % len(names)], "items": items}
            for i, items in enumerate(groups)
        ]
    }


def team_with_roster_payload(*groups: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"team": {"id": "1", "roster": roster_payload(*groups)}}
