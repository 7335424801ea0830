"""Tests for players and the roster."""

import random

from safenuked.agents.player import AI_PLAYER_ID, AI_PLAYER_NAME, AVATARS, PlayerStatus
from safenuked.agents.roster import Roster
from safenuked.engine.deck import Card


class TestRoster:
    """Roster membership and status bookkeeping."""

    def test_names_are_trimmed_and_truncated(self):
        roster = Roster()
        player = roster.add_player("   Bartholomew Jr   ")
        assert player.name == "Bartholome"
        assert len(player.name) == Roster.MAX_NAME_LENGTH

    def test_blank_names_are_rejected(self):
        roster = Roster()
        assert roster.add_player("") is None
        assert roster.add_player("    ") is None
        assert len(roster) == 0

    def test_first_player_is_host(self):
        roster = Roster()
        alice = roster.add_player("Alice")
        bob = roster.add_player("Bob")
        assert alice.is_host
        assert not bob.is_host
        assert alice.id != bob.id

    def test_avatars_cycle_when_not_given(self):
        roster = Roster()
        players = [roster.add_player(f"P{i}") for i in range(len(AVATARS) + 1)]
        assert [p.avatar for p in players[:3]] == AVATARS[:3]
        assert players[-1].avatar == AVATARS[0]

    def test_explicit_avatar_is_kept(self):
        roster = Roster()
        assert roster.add_player("Alice", avatar="🦊").avatar == "🦊"

    def test_ai_opponent_is_added_once(self):
        roster = Roster()
        roster.add_player("Alice")
        ai = roster.add_ai_opponent()
        again = roster.add_ai_opponent()

        assert ai is again
        assert ai.id == AI_PLAYER_ID
        assert ai.name == AI_PLAYER_NAME
        assert ai.is_bot
        assert len(roster) == 2
        assert roster.has_bots

    def test_remove_bots_and_reset_statuses(self):
        roster = Roster()
        alice = roster.add_player("Alice")
        roster.add_ai_opponent()
        roster.set_status(alice.id, PlayerStatus.ELIMINATED)

        roster.remove_bots()
        roster.reset_statuses()

        assert [p.name for p in roster] == ["Alice"]
        assert alice.status == PlayerStatus.ALIVE

    def test_alive_views(self):
        roster = Roster()
        alice = roster.add_player("Alice")
        bob = roster.add_player("Bob")
        charlie = roster.add_player("Charlie")
        roster.set_status(bob.id, PlayerStatus.ELIMINATED)

        assert roster.alive == [alice, charlie]
        assert roster.alive_except(alice.id) == [charlie]
        assert roster.get("missing") is None
        roster.set_status("missing", PlayerStatus.WINNER)


class TestPlayerChoices:
    """AI card choices."""

    def test_reveal_choice_skips_revealed_cards(self):
        roster = Roster()
        ai = roster.add_ai_opponent()
        deck = [Card(id=f"card-{i}", text=str(i), is_revealed=i != 2) for i in range(5)]

        assert ai.choose_card_to_reveal(deck, random.Random(7)).id == "card-2"

    def test_reveal_choice_none_when_all_revealed(self):
        roster = Roster()
        ai = roster.add_ai_opponent()
        deck = [Card(id="card-0", text="x", is_revealed=True)]

        assert ai.choose_card_to_reveal(deck) is None

    def test_trap_choice_can_pick_armed_cards(self):
        roster = Roster()
        ai = roster.add_ai_opponent()
        deck = [Card(id="card-0", text="x", is_trap=True)]

        assert ai.choose_card_to_trap(deck).id == "card-0"
        assert ai.choose_card_to_trap([]) is None
