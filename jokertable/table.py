"""Table state machine for a hidden-wildcard rummy game.

Every mutating operation runs inside one store transaction: all checks happen
first, then the rows are rewritten, and events are published only once the
transaction has committed.
"""

from __future__ import annotations

import logging
import random
from typing import Sequence

from .cards import DECK_SIZE, RANKS, Card, CardLocation, Rank, format_cards
from .deck import ShuffleSource, build_deck, recycle_discard
from .errors import (
    AlreadyDrawn,
    GameFinished,
    GameNotStarted,
    HandOverflow,
    InsufficientCards,
    InvalidInput,
    MustDrawFirst,
    NotFound,
    NotYourTurn,
    RuleViolation,
)
from .events import EventKind, NotificationSink, NullSink, TableEvent
from .extension import ExtensionPosition, can_extend_set, resolve_extension, splice_into_sequence
from .melds import (
    MIN_MELD_SIZE,
    MeldCheck,
    MeldKind,
    arrange_sequence,
    classify_meld,
    validate_sequence,
    validate_set,
)
from .state import (
    DEFAULT_CONFIG,
    GameRecord,
    GameSnapshot,
    GameStatus,
    PlayerHand,
    PlayerSummary,
    TableConfig,
    TableState,
)
from .store import TableSession, TableStore

__all__ = ["RummyTable"]

logger = logging.getLogger(__name__)


def _next_position(cards: Sequence[Card]) -> int:
    return max((card.position for card in cards), default=-1) + 1


def _check_card_id(card_id: object) -> int:
    if isinstance(card_id, bool) or not isinstance(card_id, int) or not 0 <= card_id < DECK_SIZE:
        raise InvalidInput(f"invalid card id {card_id!r}")
    return card_id


def _ordered_meld(cards: Sequence[Card], check: MeldCheck, wildcard_rank: Rank) -> list[Card]:
    if check.kind is MeldKind.SEQUENCE:
        return arrange_sequence(cards, wildcard_rank)
    return list(cards)


def _grow_meld(
    meld: Sequence[Card], card: Card, wildcard_rank: Rank
) -> tuple[list[Card], ExtensionPosition]:
    """Return ``meld`` grown by ``card`` and where the card went, or raise ``RuleViolation``."""

    as_set = validate_set(meld, wildcard_rank)
    as_sequence = validate_sequence(meld, wildcard_rank)
    preferred = classify_meld(meld, wildcard_rank).kind
    order = (MeldKind.SEQUENCE, MeldKind.SET) if preferred is MeldKind.SEQUENCE else (MeldKind.SET, MeldKind.SEQUENCE)

    reasons: list[str] = []
    for kind in order:
        if kind is MeldKind.SET and as_set.valid:
            grown = can_extend_set(meld, card, wildcard_rank)
            if grown.valid:
                return [*meld, card], ExtensionPosition.END
            reasons.append(grown.reason)
        elif kind is MeldKind.SEQUENCE and as_sequence.valid:
            result = resolve_extension(meld, card, wildcard_rank)
            if result.can_extend and result.position is not None:
                return splice_into_sequence(meld, card, result, wildcard_rank), result.position
            reasons.append(result.reason)
    raise RuleViolation("; ".join(reasons) or "target meld is no longer valid")


class RummyTable:
    """Owns the lifecycle, turn order, and card movement of every game table.

    The table holds no game data itself; everything lives in ``store`` and is
    addressed by game id, so one instance can serve many games concurrently.
    """

    def __init__(
        self,
        store: TableStore,
        sink: NotificationSink | None = None,
        rng: ShuffleSource | None = None,
        config: TableConfig = DEFAULT_CONFIG,
    ) -> None:
        self.store = store
        self.sink = sink if sink is not None else NullSink()
        self.rng = rng if rng is not None else random.Random()
        self.config = config

    # ------------------------------------------------------------------
    # Lifecycle

    def initialize_game(self, game_id: int, player_ids: Sequence[int]) -> GameSnapshot:
        """Deal a fresh table for ``player_ids``, discarding any previous deal."""

        players = self._check_seating(player_ids)
        with self.store.transaction(game_id) as session:
            game = self._require_game(session)
            snapshot = self._deal(session, game, players)
        self._publish(
            [
                TableEvent(
                    EventKind.GAME_STARTED,
                    game_id,
                    None,
                    {"players": players, "hand_size": self.config.hand_size},
                )
            ]
        )
        return snapshot

    def restart_game(self, game_id: int) -> GameSnapshot:
        """Re-deal the game with its current seating, even after a win."""

        with self.store.transaction(game_id) as session:
            game = self._require_game(session)
            seating = [hand.player_id for hand in session.hands()] or list(game.player_ids)
            players = self._check_seating(seating)
            snapshot = self._deal(session, game, players)
        logger.info("game %s: restarted", game_id)
        self._publish(
            [
                TableEvent(
                    EventKind.GAME_RESTARTED,
                    game_id,
                    None,
                    {"players": players, "hand_size": self.config.hand_size},
                )
            ]
        )
        return snapshot

    def _check_seating(self, player_ids: Sequence[int]) -> list[int]:
        players = list(player_ids)
        if not players:
            raise InvalidInput("at least one player id is required")
        if len(set(players)) != len(players):
            raise InvalidInput("player ids must be unique")
        self.config.check_player_count(len(players))
        return players

    def _deal(self, session: TableSession, game: GameRecord, players: list[int]) -> GameSnapshot:
        if len(players) > game.max_players:
            raise InvalidInput(f"game {game.id} seats at most {game.max_players} players, got {len(players)}")

        session.clear_table()
        deck = build_deck(self.rng)
        wildcard_rank: Rank = self.rng.choice(RANKS)
        needed = self.config.cards_needed(len(players))
        if needed > len(deck):
            raise InsufficientCards(f"dealing needs {needed} cards, the deck holds {len(deck)}")

        cursor = 0
        for turn_order, player_id in enumerate(players):
            session.put_hand(PlayerHand(game_id=game.id, player_id=player_id, turn_order=turn_order))
            for position in range(self.config.hand_size):
                deck[cursor].move(CardLocation.PLAYER_HAND, owner=player_id, position=position)
                cursor += 1
        deck[cursor].move(CardLocation.DISCARD, position=0)
        cursor += 1
        for position, card in enumerate(deck[cursor:]):
            card.position = position
        session.replace_cards(deck)

        state = TableState(game_id=game.id, current_turn_player=players[0], hidden_wildcard_rank=wildcard_rank)
        state.touch("initialize")
        session.put_state(state)

        game.status = GameStatus.IN_PROGRESS
        game.player_ids = list(players)
        session.put_game(game)
        logger.info(
            "game %s: dealt %d cards to %d players, %d left in deck",
            game.id,
            self.config.hand_size,
            len(players),
            len(deck) - cursor,
        )
        return self._project(session, game)

    # ------------------------------------------------------------------
    # Turn actions

    def draw_from_deck(self, game_id: int, player_id: int) -> Card | None:
        """Move the top deck card into the player's hand.

        An empty deck is rebuilt from the discard pile first. Returns ``None``
        when both piles are empty.
        """

        events: list[TableEvent] = []
        with self.store.transaction(game_id) as session:
            _, state = self._require_active(session)
            hand = self._require_turn(session, state, player_id)
            hand_cards = self._check_can_draw(session, hand)

            deck = session.cards(CardLocation.DECK)
            if not deck:
                deck = self._recycle(session)
            if not deck:
                logger.debug("game %s: player %s found both piles empty", game_id, player_id)
                return None

            card = deck[0]
            card.move(CardLocation.PLAYER_HAND, owner=player_id, position=_next_position(hand_cards))
            session.update_card(card)
            self._finish_draw(session, state, hand, "draw_deck")
            events.append(
                TableEvent(
                    EventKind.CARD_DRAWN,
                    game_id,
                    player_id,
                    {"source": "deck", "card_id": card.id, "card": card.code, "deck_count": len(deck) - 1},
                    private_to=player_id,
                )
            )
        logger.debug("game %s: player %s drew %s from the deck", game_id, player_id, card.code)
        self._publish(events)
        return card

    def draw_from_discard(self, game_id: int, player_id: int) -> Card | None:
        """Move the top discard into the player's hand, or return ``None`` if the pile is empty."""

        events: list[TableEvent] = []
        with self.store.transaction(game_id) as session:
            _, state = self._require_active(session)
            hand = self._require_turn(session, state, player_id)
            hand_cards = self._check_can_draw(session, hand)

            discard = session.cards(CardLocation.DISCARD)
            if not discard:
                return None
            card = discard[-1]
            card.move(CardLocation.PLAYER_HAND, owner=player_id, position=_next_position(hand_cards))
            session.update_card(card)
            self._finish_draw(session, state, hand, "draw_discard")
            events.append(
                TableEvent(
                    EventKind.CARD_DRAWN,
                    game_id,
                    player_id,
                    {"source": "discard", "card_id": card.id, "card": card.code},
                )
            )
        logger.debug("game %s: player %s took %s from the discard pile", game_id, player_id, card.code)
        self._publish(events)
        return card

    def _check_can_draw(self, session: TableSession, hand: PlayerHand) -> list[Card]:
        if hand.has_drawn:
            raise AlreadyDrawn(f"player {hand.player_id} already drew this turn")
        hand_cards = session.cards(CardLocation.PLAYER_HAND, owner=hand.player_id)
        if len(hand_cards) >= self.config.max_hand_size:
            raise HandOverflow(
                f"player {hand.player_id} holds {len(hand_cards)} cards, the limit is {self.config.max_hand_size}"
            )
        return hand_cards

    def _finish_draw(self, session: TableSession, state: TableState, hand: PlayerHand, action: str) -> None:
        hand.has_drawn = True
        session.put_hand(hand)
        state.touch(action)
        session.put_state(state)

    def _recycle(self, session: TableSession) -> list[Card]:
        discard = session.cards(CardLocation.DISCARD)
        if not discard:
            return []
        recycled = recycle_discard(discard, self.rng)
        for card in discard:
            session.update_card(card)
        logger.info("game %s: recycled %d discards into the deck", session.game_id, len(recycled))
        return sorted(recycled, key=lambda card: card.position)

    def discard_card(self, game_id: int, player_id: int, card_id: int) -> Card:
        """Put a card from the player's hand on the discard pile and pass the turn.

        Emptying the hand this way wins the game for the player.
        """

        card_id = _check_card_id(card_id)
        events: list[TableEvent] = []
        with self.store.transaction(game_id) as session:
            game, state = self._require_active(session)
            hand = self._require_turn(session, state, player_id)
            if not hand.has_drawn:
                raise MustDrawFirst(f"player {player_id} must draw before discarding")
            card = self._hand_card(session, player_id, card_id)
            remaining = len(session.cards(CardLocation.PLAYER_HAND, owner=player_id)) - 1

            card.move(CardLocation.DISCARD, position=_next_position(session.cards(CardLocation.DISCARD)))
            session.update_card(card)
            hand.has_drawn = False
            session.put_hand(hand)
            state.touch("discard")
            events.append(
                TableEvent(EventKind.CARD_DISCARDED, game_id, player_id, {"card_id": card.id, "card": card.code})
            )
            if remaining == 0:
                events.append(self._record_winner(session, game, state, player_id))
            else:
                self._advance(session, state)
                session.put_state(state)
        logger.debug("game %s: player %s discarded %s", game_id, player_id, card.code)
        self._publish(events)
        return card

    def next_turn(self, game_id: int) -> int:
        """Pass the turn to the next seated player and return their id."""

        with self.store.transaction(game_id) as session:
            _, state = self._require_active(session)
            self._advance(session, state)
            session.put_state(state)
        return state.current_turn_player

    def _advance(self, session: TableSession, state: TableState) -> None:
        seating = [hand.player_id for hand in session.hands()]
        index = seating.index(state.current_turn_player)
        state.current_turn_player = seating[(index + 1) % len(seating)]
        state.turn_number += 1
        state.touch("next_turn")
        logger.debug(
            "game %s: turn %d goes to player %s", state.game_id, state.turn_number, state.current_turn_player
        )

    # ------------------------------------------------------------------
    # Winning

    def declare_winner(self, game_id: int, player_id: int) -> None:
        """Record ``player_id`` as the winner without checking the hand."""

        with self.store.transaction(game_id) as session:
            game, state = self._require_active(session)
            self._require_hand(session, player_id)
            event = self._record_winner(session, game, state, player_id)
        self._publish([event])

    def claim_win(self, game_id: int, player_id: int) -> None:
        """Declare ``player_id`` the winner after checking the hand is empty and every meld holds."""

        with self.store.transaction(game_id) as session:
            game, state = self._require_active(session)
            hand = self._require_hand(session, player_id)
            held = session.cards(CardLocation.PLAYER_HAND, owner=player_id)
            if held:
                raise RuleViolation(f"player {player_id} still holds {len(held)} cards")
            for index, meld in enumerate(self._meld_cards(session, hand)):
                check = classify_meld(meld, state.hidden_wildcard_rank)
                if not check.valid:
                    raise RuleViolation(f"meld {index} is not valid: {check.reason}")
            event = self._record_winner(session, game, state, player_id)
        self._publish([event])

    def _record_winner(
        self, session: TableSession, game: GameRecord, state: TableState, player_id: int
    ) -> TableEvent:
        state.winner = player_id
        state.touch("declare_winner")
        session.put_state(state)
        game.status = GameStatus.FINISHED
        session.put_game(game)
        logger.info("game %s: player %s wins on turn %d", game.id, player_id, state.turn_number)
        return TableEvent(EventKind.WINNER_DECLARED, game.id, player_id, {"winner": player_id})

    # ------------------------------------------------------------------
    # Melds

    def lay_meld(self, game_id: int, player_id: int, card_ids: Sequence[int]) -> MeldCheck:
        """Lay ``card_ids`` from the player's hand as a new meld."""

        ids = [_check_card_id(card_id) for card_id in card_ids]
        if len(ids) < MIN_MELD_SIZE:
            raise InvalidInput(f"a meld needs at least {MIN_MELD_SIZE} cards, got {len(ids)}")
        if len(set(ids)) != len(ids):
            raise InvalidInput("a meld cannot use the same card twice")

        events: list[TableEvent] = []
        with self.store.transaction(game_id) as session:
            _, state = self._require_active(session)
            hand = self._require_turn(session, state, player_id)
            wildcard_rank = state.hidden_wildcard_rank
            cards = [self._hand_card(session, player_id, card_id) for card_id in ids]
            check = classify_meld(cards, wildcard_rank)
            if not check.valid:
                raise RuleViolation(f"{format_cards(cards)} is not a meld: {check.reason}")

            ordered = _ordered_meld(cards, check, wildcard_rank)
            self._place_meld(session, ordered, player_id)
            hand.melds.append([card.id for card in ordered])
            meld_index = len(hand.melds) - 1
            events.append(
                TableEvent(
                    EventKind.MELD_LAID,
                    game_id,
                    player_id,
                    {
                        "meld_index": meld_index,
                        "card_ids": [card.id for card in ordered],
                        "kind": check.kind.value if check.kind else None,
                    },
                )
            )
            events.extend(self._reveal_if_pure(hand, state, check))
            session.put_hand(hand)
            state.touch("lay_meld")
            session.put_state(state)
        logger.debug("game %s: player %s laid %s", game_id, player_id, format_cards(ordered))
        self._publish(events)
        return check

    def add_to_meld(self, game_id: int, player_id: int, meld_index: int, card_id: int) -> ExtensionPosition:
        """Add one card from the hand to one of the player's laid melds."""

        card_id = _check_card_id(card_id)
        events: list[TableEvent] = []
        with self.store.transaction(game_id) as session:
            _, state = self._require_active(session)
            hand = self._require_turn(session, state, player_id)
            wildcard_rank = state.hidden_wildcard_rank
            meld = self._meld_at(session, hand, meld_index)
            card = self._hand_card(session, player_id, card_id)

            grown, position = _grow_meld(meld, card, wildcard_rank)
            check = classify_meld(grown, wildcard_rank)
            if not check.valid:
                raise RuleViolation(check.reason)
            self._place_meld(session, grown, player_id)
            hand.melds[meld_index] = [member.id for member in grown]
            events.append(
                TableEvent(
                    EventKind.CARD_ADDED_TO_MELD,
                    game_id,
                    player_id,
                    {"meld_index": meld_index, "card_id": card.id, "position": position.value},
                )
            )
            events.extend(self._reveal_if_pure(hand, state, check))
            session.put_hand(hand)
            state.touch("add_to_meld")
            session.put_state(state)
        logger.debug("game %s: player %s added %s to meld %d", game_id, player_id, card.code, meld_index)
        self._publish(events)
        return position

    def move_card(self, game_id: int, player_id: int, card_id: int, target_meld: int | None) -> int | None:
        """Move one of the player's cards between the hand and their melds.

        ``target_meld=None`` takes the card back into the hand. A source meld
        left invalid or under three cards is dissolved into the hand. Returns
        the card's meld index after the move, or ``None`` when it is in hand.
        """

        card_id = _check_card_id(card_id)
        events: list[TableEvent] = []
        with self.store.transaction(game_id) as session:
            _, state = self._require_active(session)
            hand = self._require_turn(session, state, player_id)
            wildcard_rank = state.hidden_wildcard_rank

            card = session.get_card(card_id)
            if card is None or card.owner != player_id:
                raise NotFound(f"card {card_id} does not belong to player {player_id}")
            source_index = next((index for index, ids in enumerate(hand.melds) if card_id in ids), None)
            if source_index is None and card.location is not CardLocation.PLAYER_HAND:
                raise NotFound(f"card {card_id} is not in any of player {player_id}'s melds")
            if target_meld is None and source_index is None:
                raise InvalidInput(f"card {card_id} is already in hand")
            if target_meld is not None and target_meld == source_index:
                raise InvalidInput(f"card {card_id} is already in meld {target_meld}")

            grown: list[Card] | None = None
            target_check: MeldCheck | None = None
            if target_meld is not None:
                grown, _ = _grow_meld(self._meld_at(session, hand, target_meld), card, wildcard_rank)
                target_check = classify_meld(grown, wildcard_rank)
                if not target_check.valid:
                    raise RuleViolation(target_check.reason)

            new_melds: list[list[int] | None] = [list(ids) for ids in hand.melds]
            checks: list[MeldCheck] = []
            returned: list[Card] = []
            hand_cards = session.cards(CardLocation.PLAYER_HAND, owner=player_id)
            position = _next_position(hand_cards)

            if source_index is not None:
                remaining = [member for member in self._meld_cards(session, hand)[source_index] if member.id != card_id]
                source_check = classify_meld(remaining, wildcard_rank)
                if len(remaining) >= MIN_MELD_SIZE and source_check.valid:
                    remaining = _ordered_meld(remaining, source_check, wildcard_rank)
                    self._place_meld(session, remaining, player_id)
                    new_melds[source_index] = [member.id for member in remaining]
                    checks.append(source_check)
                else:
                    for member in remaining:
                        member.move(CardLocation.PLAYER_HAND, owner=player_id, position=position)
                        session.update_card(member)
                        position += 1
                    returned = remaining
                    new_melds[source_index] = None

            final_index: int | None = None
            if target_meld is not None and grown is not None and target_check is not None:
                self._place_meld(session, grown, player_id)
                new_melds[target_meld] = [member.id for member in grown]
                checks.append(target_check)
                final_index = sum(1 for ids in new_melds[:target_meld] if ids is not None)
            else:
                card.move(CardLocation.PLAYER_HAND, owner=player_id, position=position)
                session.update_card(card)

            hand.melds = [ids for ids in new_melds if ids is not None]
            events.append(
                TableEvent(
                    EventKind.CARD_MOVED,
                    game_id,
                    player_id,
                    {"card_id": card_id, "from_meld": source_index, "to_meld": final_index},
                )
            )
            if returned:
                events.append(
                    TableEvent(
                        EventKind.MELD_DISSOLVED,
                        game_id,
                        player_id,
                        {"meld_index": source_index, "card_ids": [member.id for member in returned]},
                    )
                )
                logger.debug("game %s: player %s dissolved meld %s", game_id, player_id, source_index)
            for check in checks:
                events.extend(self._reveal_if_pure(hand, state, check))
            session.put_hand(hand)
            state.touch("move_card")
            session.put_state(state)
        self._publish(events)
        return final_index

    def _place_meld(self, session: TableSession, cards: Sequence[Card], player_id: int) -> None:
        for position, card in enumerate(cards):
            card.move(CardLocation.LAID, owner=player_id, position=position)
            session.update_card(card)

    def _meld_cards(self, session: TableSession, hand: PlayerHand) -> list[list[Card]]:
        melds: list[list[Card]] = []
        for ids in hand.melds:
            cards = [session.get_card(card_id) for card_id in ids]
            melds.append([card for card in cards if card is not None])
        return melds

    def _meld_at(self, session: TableSession, hand: PlayerHand, meld_index: int) -> list[Card]:
        if isinstance(meld_index, bool) or not isinstance(meld_index, int):
            raise InvalidInput(f"invalid meld index {meld_index!r}")
        if not 0 <= meld_index < len(hand.melds):
            raise NotFound(f"player {hand.player_id} has no meld {meld_index}")
        return self._meld_cards(session, hand)[meld_index]

    def _reveal_if_pure(self, hand: PlayerHand, state: TableState, check: MeldCheck) -> list[TableEvent]:
        if hand.joker_revealed or check.kind is not MeldKind.SEQUENCE or not check.pure:
            return []
        hand.joker_revealed = True
        logger.info("game %s: wildcard revealed to player %s", state.game_id, hand.player_id)
        return [
            TableEvent(
                EventKind.WILDCARD_REVEALED,
                state.game_id,
                hand.player_id,
                {"wildcard_rank": state.hidden_wildcard_rank.value},
                private_to=hand.player_id,
            )
        ]

    # ------------------------------------------------------------------
    # Read projections

    def get_game_state(self, game_id: int) -> GameSnapshot:
        with self.store.snapshot(game_id) as session:
            game = self._require_game(session)
            return self._project(session, game)

    def get_player_hand(self, game_id: int, player_id: int) -> list[Card]:
        """Return the cards in the player's hand ordered by position."""

        with self.store.snapshot(game_id) as session:
            self._require_game(session)
            if session.hands():
                self._require_hand(session, player_id)
            return session.cards(CardLocation.PLAYER_HAND, owner=player_id)

    def visible_wildcard_rank(self, game_id: int, player_id: int) -> Rank | None:
        """Return the wildcard rank if ``player_id`` has revealed it, else ``None``."""

        with self.store.snapshot(game_id) as session:
            self._require_game(session)
            state = session.get_state()
            if state is None:
                return None
            hand = self._require_hand(session, player_id)
            return state.hidden_wildcard_rank if hand.joker_revealed else None

    def _project(self, session: TableSession, game: GameRecord) -> GameSnapshot:
        state = session.get_state()
        players = []
        for hand in session.hands():
            players.append(
                PlayerSummary(
                    player_id=hand.player_id,
                    turn_order=hand.turn_order,
                    card_count=len(session.cards(CardLocation.PLAYER_HAND, owner=hand.player_id)),
                    has_drawn=hand.has_drawn,
                    joker_revealed=hand.joker_revealed,
                    melds=tuple(tuple(meld) for meld in self._meld_cards(session, hand)),
                )
            )
        discard = session.cards(CardLocation.DISCARD)
        return GameSnapshot(
            game_id=game.id,
            status=game.status,
            current_turn_player=state.current_turn_player if state else None,
            hidden_wildcard_rank=state.hidden_wildcard_rank if state else None,
            winner=state.winner if state else None,
            turn_number=state.turn_number if state else 0,
            players=tuple(players),
            discard_top=discard[-1] if discard else None,
            discard_count=len(discard),
            deck_count=len(session.cards(CardLocation.DECK)),
        )

    # ------------------------------------------------------------------
    # Guards

    def _require_game(self, session: TableSession) -> GameRecord:
        game = session.get_game()
        if game is None:
            raise NotFound(f"game {session.game_id} does not exist")
        return game

    def _require_active(self, session: TableSession) -> tuple[GameRecord, TableState]:
        game = self._require_game(session)
        state = session.get_state()
        if state is None or game.status is GameStatus.WAITING:
            raise GameNotStarted(f"game {game.id} has not been dealt")
        if state.winner is not None or game.status is GameStatus.FINISHED:
            raise GameFinished(f"game {game.id} is finished")
        return game, state

    def _require_hand(self, session: TableSession, player_id: int) -> PlayerHand:
        hand = session.get_hand(player_id)
        if hand is None:
            raise NotFound(f"player {player_id} is not seated in game {session.game_id}")
        return hand

    def _require_turn(self, session: TableSession, state: TableState, player_id: int) -> PlayerHand:
        hand = self._require_hand(session, player_id)
        if state.current_turn_player != player_id:
            raise NotYourTurn(f"it is player {state.current_turn_player}'s turn, not player {player_id}'s")
        return hand

    def _hand_card(self, session: TableSession, player_id: int, card_id: int) -> Card:
        card = session.get_card(card_id)
        if card is None or card.location is not CardLocation.PLAYER_HAND or card.owner != player_id:
            raise NotFound(f"card {card_id} is not in player {player_id}'s hand")
        return card

    def _publish(self, events: Sequence[TableEvent]) -> None:
        for event in events:
            self.sink.publish(event)
