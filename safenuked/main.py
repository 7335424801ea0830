"""Main entry point for Safe / Nuked."""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .agents.player import Player, PlayerStatus
from .communication.channels import Source
from .engine.deck import Card
from .engine.game import Game
from .engine.modes import ConfigurationError, GameSettings
from .engine.phases import GameStatus
from .llm.content import ContentProvider
from .llm.openrouter import DEFAULT_MODEL, OpenRouterClient


# Load environment variables
load_dotenv()

console = Console()

ENGINE_TICK = 0.1  # Seconds between scheduler advances while waiting


def setup_logging() -> None:
    """Route library logging through rich. Level from SAFENUKED_LOG_LEVEL."""
    level = os.getenv("SAFENUKED_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def load_config(config_path: str = "config/game.yaml") -> dict:
    """Load game configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        console.print(f"[red]Config file not found: {config_path}[/red]")
        sys.exit(1)

    with open(path) as f:
        return yaml.safe_load(f) or {}


def build_provider(llm_config: dict) -> ContentProvider:
    """Create the content provider, offline if no API key is set."""
    api_key = os.getenv("OPENROUTER_API_KEY")
    if not api_key:
        console.print("[yellow]Warning: OPENROUTER_API_KEY not set![/yellow]")
        console.print("[dim]Cards and commentary will be placeholders. Hand-written decks still work.[/dim]")
        return ContentProvider()

    client = OpenRouterClient(
        api_key=api_key,
        model=llm_config.get("model", DEFAULT_MODEL),
        timeout=float(llm_config.get("timeout", 20.0)),
    )
    return ContentProvider(client)


def display_welcome():
    """Display welcome message."""
    console.print(Panel.fit(
        "[bold green]SAFE[/bold green] [dim]/[/dim] [bold red]NUKED[/bold red]\n"
        "[dim]Pick a card. Pray it isn't armed.[/dim]",
        border_style="red",
    ))
    console.print()


def display_players(game: Game):
    """Display the roster."""
    table = Table(title="Players", show_header=True, header_style="bold magenta")
    table.add_column("", style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Role", style="green")

    for player in game.players:
        role = "AI" if player.is_bot else ("Host" if player.is_host else "Player")
        table.add_row(player.avatar, escape(player.name), role)

    console.print(table)
    console.print(
        f"[dim]Mode: {game.settings.mode.value} | Deck: {game.settings.deck_size} cards | "
        f"Traps: {game.settings.trap_count}[/dim]"
    )
    console.print(f"[dim]{escape(game.settings.rules.description)}[/dim]")
    console.print()


def display_deck(game: Game, show_outcomes: bool = True):
    """Display the cards.

    Args:
        game: The running game.
        show_outcomes: Whether revealed cards show SAFE / NUKED. Placement
            views pass False so nobody learns what is armed.
    """
    table = Table(
        title=f"Round {game.round_number}: {escape(game.category)}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Card", style="cyan")
    table.add_column("Status")

    for number, card in enumerate(game.deck, start=1):
        table.add_row(str(number), escape(card.text), _card_status(card, show_outcomes))

    console.print(table)


def _card_status(card: Card, show_outcomes: bool) -> str:
    if not show_outcomes or not card.is_revealed:
        return "[dim]?[/dim]"
    if card.is_trap:
        return f"[bold red]NUKED[/bold red] [dim]({escape(card.placed_by or '')})[/dim]"
    return "[green]SAFE[/green]"


class LogView:
    """Prints Game Master log entries that have not been shown yet."""

    def __init__(self):
        self.cursor = 0

    def flush(self, game: Game) -> None:
        for entry in game.log.since(self.cursor):
            if entry.source == Source.GAME_MASTER:
                console.print(f"[bold red]GM>[/bold red] [italic]{escape(entry.content)}[/italic]")
            else:
                console.print(f"[dim]SYS> {escape(entry.content)}[/dim]")
        self.cursor = len(game.log.entries)


async def ask(prompt: str, choices: Optional[list[str]] = None) -> str:
    """Prompt without blocking the event loop, so commentary keeps landing."""
    return await asyncio.to_thread(
        Prompt.ask,
        prompt,
        choices=choices,
        show_choices=False,
        console=console,
    )


def setup_players(game: Game, player_configs: list[dict]):
    """Fill the lobby from config, or ask for names."""
    for entry in player_configs:
        game.add_player(str(entry.get("name", "")), entry.get("avatar"))

    while not game.players:
        console.print("[yellow]No players configured. Enter names, blank to finish.[/yellow]")
        while True:
            name = Prompt.ask("Player name", default="", console=console)
            if not name.strip():
                break
            player = game.add_player(name)
            console.print(f"[dim]{player} joined.[/dim]")
        if not game.players:
            console.print("[red]Error: No lifeforms detected.[/red]")


async def wait_for_engine(game: Game):
    """Let scheduled actions (AI moves, pauses, the countdown) play out."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("", total=None)
        status = game.status
        while game.status == status and game.scheduler.next_due is not None:
            progress.update(task, description=_waiting_description(game))
            await asyncio.sleep(ENGINE_TICK)
            if await game.tick(ENGINE_TICK):
                break


def _waiting_description(game: Game) -> str:
    if game.status == GameStatus.LOADING_ROUND:
        return "[cyan]Game Master is reshuffling...[/cyan]"
    if game.status == GameStatus.SETUP_TRAPS and game.placing_player:
        return f"[yellow]{escape(game.placing_player.name)} is arming a card...[/yellow]"
    if game.current_player:
        return f"[yellow]{escape(game.current_player.name)} is thinking...[/yellow]"
    return "[cyan]Waiting...[/cyan]"


async def enter_manual_cards(game: Game):
    """Collect the hand-written deck."""
    count = game.settings.deck_size
    console.print(f"[bold]Write {count} cards.[/bold]")
    while game.status == GameStatus.MANUAL_ENTRY:
        items = [await ask(f"Card {i}/{count}") for i in range(1, count + 1)]
        try:
            game.submit_manual_cards(items)
        except ConfigurationError as e:
            console.print(f"[red]{e}[/red]")


async def run_trap_setup(game: Game, log_view: LogView):
    """Players take turns arming cards, then confirm."""
    while game.status == GameStatus.SETUP_TRAPS:
        placer = game.placing_player
        if placer is None:
            console.print("[bold]All traps placed.[/bold]")
            game.confirm_traps()
        elif placer.is_bot:
            await wait_for_engine(game)
        else:
            console.clear()
            console.print(
                f"[bold]{placer}[/bold], pick a card to arm "
                f"[dim]({game.placement.remaining} placements left)[/dim]"
            )
            display_deck(game, show_outcomes=False)
            choices = [str(n) for n in range(1, len(game.deck) + 1)]
            choice = await ask("Arm card", choices)
            game.place_trap(game.deck[int(choice) - 1].id, placer.id)
        log_view.flush(game)


async def run_turn_clock(game: Game, player: Player, serial: int):
    """Count the acting player's time down in real time until their turn ends."""
    while game.status == GameStatus.PLAYING and game.turns.serial == serial:
        await asyncio.sleep(ENGINE_TICK)
        await game.tick_turn(ENGINE_TICK)

    if not player.alive:
        console.print("[bold red]Time's up![/bold red] [dim]Press Enter to continue.[/dim]")


async def take_human_turn(game: Game):
    """Ask the acting player for a card and reveal it."""
    player = game.current_player
    serial = game.turns.serial
    display_deck(game)

    choices = [str(n) for n, card in enumerate(game.deck, start=1) if not card.is_revealed]
    prompt = f"[bold]{escape(str(player))}[/bold], reveal a card"
    clock = None
    if game.settings.timed:
        prompt += f" [red]({game.time_left}s)[/red]"
        clock = asyncio.create_task(run_turn_clock(game, player, serial))

    try:
        while True:
            choice = (await ask(prompt)).strip()
            if game.turns.serial != serial or game.status != GameStatus.PLAYING:
                console.print("[dim]Too late.[/dim]")
                return
            if choice in choices:
                break
            console.print("[red]Pick the number of a hidden card.[/red]")
    finally:
        if clock is not None:
            clock.cancel()

    card = game.deck[int(choice) - 1]
    if not await game.reveal_card(card.id, player.id):
        console.print("[dim]Too late.[/dim]")


async def play(game: Game, log_view: LogView):
    """Drive the game until it is over."""
    while game.status != GameStatus.GAME_OVER:
        log_view.flush(game)
        status = game.status
        if status == GameStatus.MANUAL_ENTRY:
            await enter_manual_cards(game)
        elif status == GameStatus.SETUP_TRAPS:
            await run_trap_setup(game, log_view)
        elif status == GameStatus.PLAYING and not game.current_player.is_bot:
            await take_human_turn(game)
        else:
            await wait_for_engine(game)

    await game.settle()
    log_view.flush(game)


def display_results(game: Game):
    """Display game results."""
    console.print()
    display_deck(game)
    console.print()

    if game.winner:
        console.print(Panel(
            f"[bold green]{escape(str(game.winner))} SURVIVES![/bold green]\n"
            f"Last one standing after {game.round_number} rounds.",
            border_style="green",
        ))
    else:
        console.print(Panel(
            "[bold red]NO SURVIVORS[/bold red]\n"
            "Everyone died. How disappointing.",
            border_style="red",
        ))

    console.print()

    table = Table(title="Final Standings", show_header=True, header_style="bold")
    table.add_column("Player", style="cyan")
    table.add_column("Status", style="green")

    for player in game.players:
        if player.status == PlayerStatus.WINNER:
            status = "[bold green]Winner[/bold green]"
        elif player.alive:
            status = "[green]Survived[/green]"
        else:
            status = "[red]Nuked[/red]"
        table.add_row(escape(str(player)), status)

    console.print(table)
    console.print()


async def main():
    """Main entry point."""
    setup_logging()
    display_welcome()

    # Load configuration
    config_path = sys.argv[1] if len(sys.argv) > 1 else "config/game.yaml"
    console.print(f"[dim]Loading config from: {config_path}[/dim]")
    config_data = load_config(config_path)

    try:
        settings = GameSettings.from_dict(config_data.get("game") or {})
    except ConfigurationError as e:
        console.print(f"[red]Invalid game config: {e}[/red]")
        sys.exit(1)

    provider = build_provider(config_data.get("llm") or {})
    game = Game(provider, settings)
    log_view = LogView()

    try:
        while True:
            if not game.players:
                setup_players(game, config_data.get("players") or [])
            try:
                await game.start()
            except ConfigurationError as e:
                console.print(f"[red]{e}[/red]")
                sys.exit(1)

            display_players(game)
            await play(game, log_view)
            display_results(game)

            if not Confirm.ask("Play again?", default=False, console=console):
                break
            game.restart()
            log_view.flush(game)
    except KeyboardInterrupt:
        console.print("\n[yellow]Game interrupted by user.[/yellow]")
        sys.exit(0)


def run():
    """Entry point for the CLI."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
