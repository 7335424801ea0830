"""Main game engine for Safe / Nuked."""

import logging
import random
from enum import Enum, auto
from typing import Optional

from ..agents.player import AI_PLAYER_NAME, Player, PlayerStatus
from ..agents.roster import Roster
from ..communication.channels import GameMasterLog
from ..communication.narrator import Narrator
from ..llm.content import CommentaryEvent, ContentProvider
from . import traps
from .deck import (
    Card,
    DeckSource,
    FreshItems,
    ReuseDeck,
    find_card,
    rebuild_deck,
    reveal_all,
    safe_cards_remaining,
)
from .modes import ConfigurationError, GameMode, GameSettings
from .phases import GameStatus, PhaseManager
from .scheduler import Scheduler, StateSnapshot
from .turns import TurnSequencer, TurnTimer

logger = logging.getLogger(__name__)

USER_CONTENT_CATEGORY = "USER GENERATED CONTENT"


class EliminationOutcome(Enum):
    """What the win check decided after an elimination."""
    CONTINUE = auto()
    WINNER = auto()
    NO_SURVIVORS = auto()


class Game:
    """The Safe / Nuked game engine.

    One instance runs one table. All mutations happen on the caller's event
    loop; the only suspension points are content fetches, which are awaited,
    and commentary, which runs in the background. Automatic actions (AI
    moves, the turn countdown, reshuffle pacing) are scheduled on
    ``self.scheduler`` and run when the host calls ``tick()``.
    """

    def __init__(
        self,
        provider: ContentProvider,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the game.

        Args:
            provider: Source of round content and commentary.
            settings: Game configuration, validated at start.
            rng: Random source for trap dealing and AI choices.
        """
        self.provider = provider
        self.settings = settings or GameSettings()
        self.rng = rng or random.Random()

        self.roster = Roster()
        self.phase_manager = PhaseManager()
        self.turns = TurnSequencer(timer=self._new_timer())
        self.deck: list[Card] = []
        self.category = ""
        self.placement: Optional[traps.ManualTrapPlacement] = None
        self.winner: Optional[Player] = None
        self._epoch = 0  # Bumped on restart

        self.log = GameMasterLog()
        self.scheduler = Scheduler(self.snapshot)
        self.narrator = Narrator(
            provider,
            self.log,
            staleness_key=lambda: (self._epoch, self.round_number),
            round_number=lambda: self.round_number,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def status(self) -> GameStatus:
        return self.phase_manager.status

    @property
    def round_number(self) -> int:
        return self.phase_manager.round_number

    @property
    def players(self) -> list[Player]:
        return self.roster.players

    @property
    def current_player(self) -> Optional[Player]:
        """The player whose turn it is."""
        return self.turns.current(self.roster.players)

    @property
    def current_player_index(self) -> int:
        return self.turns.index

    @property
    def alive_players(self) -> list[Player]:
        return self.roster.alive

    @property
    def placing_player(self) -> Optional[Player]:
        """The player who arms the next card during manual placement."""
        if self.status != GameStatus.SETUP_TRAPS or not self.placement:
            return None
        if self.placement.complete or not len(self.roster):
            return None
        return self.roster[self.placement.placing_index(len(self.roster))]

    @property
    def time_left(self) -> int:
        return self.turns.timer.time_left

    @property
    def thinking(self) -> bool:
        """Whether the Game Master is busy (loading or commenting)."""
        return self.status == GameStatus.LOADING_ROUND or self.narrator.thinking

    def snapshot(self) -> StateSnapshot:
        """State that scheduled actions are checked against."""
        return StateSnapshot(
            epoch=self._epoch,
            round_number=self.round_number,
            status=self.status,
            turn_serial=self.turns.serial,
            placements=self.placement.placements if self.placement else 0,
        )

    def announce(self, text: str) -> None:
        """Post a system message to the Game Master log."""
        self.log.post(text, self.round_number)

    def _new_timer(self) -> TurnTimer:
        limit = self.settings.turn_time_limit
        return TurnTimer(limit=limit, time_left=limit)

    # ------------------------------------------------------------------
    # Lobby
    # ------------------------------------------------------------------

    def add_player(self, name: str, avatar: Optional[str] = None) -> Optional[Player]:
        """Add a human player while in the lobby.

        Returns:
            The new player, or None for a blank name or outside the lobby.
        """
        if self.status != GameStatus.LOBBY:
            return None
        return self.roster.add_player(name, avatar)

    def configure(self, settings: GameSettings) -> bool:
        """Replace the settings while in the lobby."""
        if self.status != GameStatus.LOBBY:
            return False
        self.settings = settings
        self.turns.timer = self._new_timer()
        return True

    async def start(self) -> None:
        """Leave the lobby and deal the first round.

        Raises:
            ConfigurationError: No players, or invalid settings. Nothing
                changes in that case.
        """
        if self.status != GameStatus.LOBBY:
            return
        if not len(self.roster):
            raise ConfigurationError("Error: No lifeforms detected.")
        self.settings.validate()

        if len(self.roster) == 1:
            self.roster.add_ai_opponent()
            self.announce(f"Single player detected. Adding AI Opponent: {AI_PLAYER_NAME}.")

        self.turns.timer = self._new_timer()
        self.turns.reset()
        self.winner = None
        logger.info(
            "Starting %s game with %d players",
            self.settings.mode.value,
            len(self.roster),
        )

        if self.settings.hand_written:
            self.phase_manager.transition(GameStatus.MANUAL_ENTRY)
            self.announce("Manual Override engaged. Input your deception cards.")
            return

        self.phase_manager.transition(GameStatus.LOADING_ROUND)
        if self.settings.mode == GameMode.CUSTOM:
            self.announce(f'Fabricating scenario based on: "{self.settings.topic}"...')
        else:
            self.announce("Initializing death traps...")
        self.narrator.narrate(CommentaryEvent.START)

        await self._load_round()

    def submit_manual_cards(self, items: list[str]) -> bool:
        """Use hand-written card texts for the deck.

        Raises:
            ConfigurationError: Unless exactly ``deck_size`` non-blank texts
                are given.

        Returns:
            False outside the manual entry phase.
        """
        if self.status != GameStatus.MANUAL_ENTRY:
            return False

        filled = [text.strip() for text in items if text and text.strip()]
        if len(filled) != self.settings.deck_size:
            raise ConfigurationError(f"Please fill in all {self.settings.deck_size} cards.")

        self.category = (self.settings.topic or "").strip() or USER_CONTENT_CATEGORY
        self._deal(FreshItems(tuple(filled)))
        return True

    def restart(self) -> bool:
        """Back to the lobby after a finished game.

        AI participants leave, everyone else is revived.
        """
        if self.status != GameStatus.GAME_OVER:
            return False

        self._epoch += 1
        self.scheduler.clear()
        self.roster.remove_bots()
        self.roster.reset_statuses()
        self.phase_manager.reset()
        self.turns.reset()
        self.deck = []
        self.category = ""
        self.placement = None
        self.winner = None
        self.announce("System reset. Ready for new victims.")
        return True

    # ------------------------------------------------------------------
    # Round lifecycle
    # ------------------------------------------------------------------

    async def _load_round(self) -> None:
        """Fetch fresh content and deal it."""
        epoch = self._epoch
        content = await self.provider.generate_round_content(
            self.settings.mode,
            self.round_number,
            self.settings.topic,
            self.settings.deck_size,
        )
        if epoch != self._epoch or self.status != GameStatus.LOADING_ROUND:
            logger.debug("Discarding round content that arrived after a state change")
            return

        self.category = content.category
        self._deal(FreshItems(tuple(content.items)))

    def _deal(self, source: DeckSource) -> None:
        """Build the deck and arm it, by hand or at random."""
        deck = rebuild_deck(source)

        if self.settings.manual_traps:
            self.deck = deck
            self.placement = traps.ManualTrapPlacement(quota=self.settings.trap_count)
            self.phase_manager.transition(GameStatus.SETUP_TRAPS)
            self._schedule_ai_placement()
            return

        self.deck = traps.assign_random_traps(deck, self.settings.trap_count, self.rng)
        self.placement = None
        self._enter_play()

    def _enter_play(self) -> None:
        self.phase_manager.transition(GameStatus.PLAYING)
        self.turns.restart_turn()
        self._start_turn()
        logger.info("Round %d in play: %s", self.round_number, self.category)

    def _reshuffle_after_elimination(self) -> None:
        """Pause on the elimination, then reshuffle.

        The turn has already moved on, so the new round starts with the
        player after the one who was eliminated.
        """
        self.phase_manager.transition(GameStatus.LOADING_ROUND)
        self.scheduler.schedule(
            self.settings.elimination_pause,
            "reshuffle_notice",
            self._announce_reshuffle,
        )

    def _announce_reshuffle(self) -> None:
        self.announce("Reshuffling trap matrix...")
        self.scheduler.schedule(
            self.settings.reshuffle_pause,
            "reshuffle",
            lambda: self._reset_round(advance_turn=False),
        )

    def _reshuffle_after_exhaustion(self) -> None:
        self.phase_manager.transition(GameStatus.LOADING_ROUND)
        self.announce("All safe options exhausted. Reshuffling trap matrix.")
        self.scheduler.schedule(
            self.settings.reshuffle_pause,
            "reshuffle",
            lambda: self._reset_round(advance_turn=True),
        )

    def _reset_round(self, advance_turn: bool) -> None:
        """Start the next round with the same card texts and new traps."""
        self.phase_manager.next_round()
        self._deal(ReuseDeck(tuple(self.deck)))
        if advance_turn:
            self._advance_turn()

    # ------------------------------------------------------------------
    # Manual trap placement
    # ------------------------------------------------------------------

    def place_trap(self, card_id: str, player_id: Optional[str] = None) -> bool:
        """Arm a card for the player whose placement it is.

        Args:
            card_id: Card to arm. Already armed cards are allowed.
            player_id: If given, must be the placing player.

        Returns:
            True if the placement counted.
        """
        placer = self.placing_player
        if placer is None:
            return False
        if player_id is not None and player_id != placer.id:
            logger.debug("Placement by %s refused: it is %s's placement", player_id, placer.name)
            return False
        if find_card(self.deck, card_id) is None:
            return False

        self.deck = traps.place_trap(self.deck, card_id, placer.name)
        self.placement.record()
        self.announce(f"Sector armed by {placer.name}. Securing...")
        self._schedule_ai_placement()
        return True

    def confirm_traps(self) -> bool:
        """Finish the placement phase and start play.

        Returns:
            False (and nothing happens) until every placement is made.
        """
        if self.status != GameStatus.SETUP_TRAPS:
            return False
        if not self.placement or not self.placement.complete:
            return False

        self.announce("Traps Armed. Proceed with caution.")
        self._enter_play()
        return True

    def _schedule_ai_placement(self) -> None:
        placer = self.placing_player
        if placer and placer.is_bot:
            self.scheduler.schedule(
                self.settings.ai_placement_delay,
                f"ai_place:{placer.name}",
                self._ai_place,
            )

    def _ai_place(self) -> None:
        placer = self.placing_player
        if not placer or not placer.is_bot:
            return
        card = placer.choose_card_to_trap(self.deck, self.rng)
        if card:
            self.place_trap(card.id, placer.id)

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------

    async def reveal_card(self, card_id: str, player_id: Optional[str] = None) -> bool:
        """Reveal a card for the acting player.

        Args:
            card_id: Card to reveal.
            player_id: If given, must be the acting player.

        Returns:
            True if the card was revealed. Revealed cards, unknown cards,
            out-of-turn reveals and reveals outside play are no-ops.
        """
        if self.status != GameStatus.PLAYING:
            logger.debug("Reveal of %s refused during %s", card_id, self.status.name)
            return False
        player = self.current_player
        if not player or not player.alive:
            return False
        if player_id is not None and player_id != player.id:
            logger.debug("Reveal by %s refused: it is %s's turn", player_id, player.name)
            return False
        card = find_card(self.deck, card_id)
        if card is None or card.is_revealed:
            logger.debug("Reveal of %s ignored: unknown or already revealed", card_id)
            return False

        card.is_revealed = True
        if card.is_trap:
            self._on_trap_revealed(player, card)
        else:
            self._on_safe_revealed(player, card)
        return True

    def _on_trap_revealed(self, player: Player, card: Card) -> None:
        self.announce(f'"{card.text}" was a nuke. {player.name} is eliminated.')
        self._eliminate(player)
        self.narrator.narrate(CommentaryEvent.DEATH, player.name, card.text)

        if self._evaluate_elimination(player.id) == EliminationOutcome.CONTINUE:
            self._reshuffle_after_elimination()

    def _on_safe_revealed(self, player: Player, card: Card) -> None:
        if not player.is_bot and self.rng.random() < self.settings.safe_commentary_chance:
            self.narrator.narrate(CommentaryEvent.SAFE, player.name, card.text)

        if safe_cards_remaining(self.deck) == 0:
            self._reshuffle_after_exhaustion()
        else:
            self._advance_turn()

    def _eliminate(self, player: Player) -> None:
        self.roster.set_status(player.id, PlayerStatus.ELIMINATED)
        logger.info("%s eliminated in round %d", player.name, self.round_number)

    def _evaluate_elimination(self, eliminated_id: str) -> EliminationOutcome:
        """Decide whether the game goes on after an elimination."""
        alive = self.roster.alive_except(eliminated_id)
        if len(alive) > 1:
            self._advance_turn()
            return EliminationOutcome.CONTINUE

        self.phase_manager.transition(GameStatus.GAME_OVER)
        reveal_all(self.deck)

        if alive:
            winner = alive[0]
            self.roster.set_status(winner.id, PlayerStatus.WINNER)
            self.winner = winner
            self.narrator.narrate(CommentaryEvent.WIN, winner.name)
            logger.info("%s wins after %d rounds", winner.name, self.round_number)
            return EliminationOutcome.WINNER

        self.announce("Everyone died. How disappointing.")
        logger.info("No survivors after %d rounds", self.round_number)
        return EliminationOutcome.NO_SURVIVORS

    # ------------------------------------------------------------------
    # Turns and automatic actions
    # ------------------------------------------------------------------

    def _advance_turn(self) -> None:
        self.turns.advance(self.roster.players)
        self._start_turn()

    def _start_turn(self) -> None:
        """Schedule the countdown and, for AI players, their move."""
        if self.status != GameStatus.PLAYING:
            return
        if self.settings.timed:
            self.scheduler.schedule(1.0, "turn_timer", self._on_timer_tick)
        player = self.current_player
        if player and player.is_bot and player.alive:
            self.scheduler.schedule(
                self.settings.ai_think_delay,
                f"ai_reveal:{player.name}",
                self._ai_reveal,
            )

    async def _ai_reveal(self) -> None:
        player = self.current_player
        if not player or not player.is_bot:
            return
        card = player.choose_card_to_reveal(self.deck, self.rng)
        if card:
            await self.reveal_card(card.id, player.id)

    def _on_timer_tick(self) -> None:
        if self.turns.timer.tick():
            self._on_timeout()
        else:
            self.scheduler.schedule(1.0, "turn_timer", self._on_timer_tick)

    def _on_timeout(self) -> None:
        """The acting player ran out of time: automatic detonation."""
        player = self.current_player
        if not player or not player.alive:
            return
        self.announce(f"Tick tock. Player {player.name} ran out of time. Automatic detonation.")
        self._eliminate(player)
        self._evaluate_elimination(player.id)

    async def tick(self, seconds: float) -> int:
        """Advance the game clock, running automatic actions that come due.

        Returns:
            Number of scheduled actions that ran.
        """
        return await self.scheduler.advance(seconds)

    async def tick_turn(self, seconds: float) -> int:
        """Advance the game clock, but never past the end of the current turn.

        Time left over once the turn ends (a reveal, a timeout) is dropped,
        so a late answer cannot run down the next player's countdown.

        Returns:
            Number of scheduled actions that ran.
        """
        serial, status = self.turns.serial, self.status
        return await self.scheduler.advance(
            seconds,
            until=lambda: self.turns.serial != serial or self.status != status,
        )

    async def settle(self) -> None:
        """Wait for in-flight commentary to land in the log."""
        await self.narrator.drain()
