from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from wolverine_tracker.config.settings import settings
from wolverine_tracker.models.matchup import GameMatchup, ScanResult, TeamInGame


def _team_table(side: TeamInGame, college_name: str) -> Table:
    table = Table(title=side.team.display_name, expand=True, show_edge=False)
    table.add_column("#", justify="right", style="bold")
    table.add_column("Player")
    table.add_column("Pos")
    table.add_column("College", style="dim")
    if not side.players:
        table.add_row("", Text(f"No {college_name} players", style="italic dim"), "", "")
    for player in side.players:
        table.add_row(player.jersey, player.display_name, player.position, player.college)
    return table


def render_matchup(matchup: GameMatchup, college_name: str) -> Panel:
    status = matchup.game.status
    subtitle = status.short_detail or status.description or "In Progress"
    return Panel(
        Group(*(_team_table(side, college_name) for side in matchup.teams)),
        title=f"[bold]{matchup.game.name}[/bold]",
        subtitle=subtitle,
        border_style="yellow",
    )


def render_result(
    result: ScanResult,
    console: Optional[Console] = None,
    college_name: Optional[str] = None,
) -> None:
    """Prints a scan outcome: an error, no live games, no matches, or the matchups."""
    console = console or Console()
    college_name = college_name or settings.target_college_name

    if result.error:
        console.print(Panel(result.error, title="Error", border_style="red"))
        return
    if not result.has_live_games:
        console.print(Panel("No NFL games are being played right now.", border_style="blue"))
        return
    if not result.matchups:
        console.print(
            Panel(
                f"{len(result.live_games)} games are live, but no {college_name} "
                "players were found on either roster.",
                border_style="blue",
            )
        )
        return

    console.print(
        f"[bold yellow]{len(result.all_players)} {college_name} players in "
        f"{len(result.matchups)} live games[/bold yellow]"
    )
    for matchup in result.matchups:
        console.print(render_matchup(matchup, college_name))
