from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import random
import threading

from basic_strategy import Action, GameError, StrategyTable, pair_key, total_key

logger = logging.getLogger(__name__)


class Rank(Enum):
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"

    def __str__(self):
        return self.value

    def get_value(self) -> int:
        # Aces are always 11; hands are never re-valued to avoid a bust
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING):
            return 10
        elif self is Rank.ACE:
            return 11
        return int(self.value)

    @classmethod
    def from_symbol(cls, symbol: str) -> "Rank":
        symbol = symbol.strip().upper()
        if symbol == "T":
            symbol = "10"
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"Unknown card rank {symbol!r}") from None


class Agent(Enum):
    DEALER = "Dealer"
    PLAYER = "Player"

    def __str__(self):
        return self.value


def hand_sum(cards: Iterable[Rank]) -> int:
    """Get the sum of cards in hand."""
    return sum(card.get_value() for card in cards)


class Deck:
    """One or more 13-rank decks concatenated and shuffled once."""

    def __init__(self, number_of_decks: int = 6, rng: Optional[random.Random] = None):
        if number_of_decks < 1:
            raise ValueError(f"number_of_decks must be positive, got {number_of_decks}")
        self.number_of_decks = number_of_decks
        self.rng = rng or random.Random()
        self.cards: List[Rank] = list(Rank) * number_of_decks
        self.shuffle()

    def shuffle(self):
        self.rng.shuffle(self.cards)
        logger.info(f"Deck shuffled. {len(self.cards)} cards in play.")

    def __len__(self):
        return len(self.cards)


class CardSource:
    """Endless, thread-safe stream of cards over a fixed shuffled buffer.

    Each draw takes the lock, reads the card under the cursor and advances
    the cursor exactly once. The buffer wraps around when exhausted, so a
    draw never fails.
    """

    def __init__(self, cards: Sequence[Rank]):
        if not cards:
            raise ValueError("CardSource needs at least one card")
        self._cards: Tuple[Rank, ...] = tuple(cards)
        self._cursor = 0
        self._lock = threading.Lock()

    @classmethod
    def from_deck(cls, deck: Deck) -> "CardSource":
        return cls(deck.cards)

    def draw(self) -> Rank:
        with self._lock:
            return self._next()

    def draw_many(self, count: int) -> List[Rank]:
        """Draw ``count`` consecutive cards in one lock acquisition."""
        with self._lock:
            return [self._next() for _ in range(count)]

    def _next(self) -> Rank:
        card = self._cards[self._cursor % len(self._cards)]
        self._cursor += 1
        return card

    @property
    def draws(self) -> int:
        with self._lock:
            return self._cursor

    def __len__(self):
        return len(self._cards)


class Hand:
    def __init__(self, cards: Iterable[Rank] = ()):
        self.cards: List[Rank] = list(cards)
        self.total = hand_sum(self.cards)

    def add_card(self, card: Rank):
        self.cards.append(card)
        self.total += card.get_value()

    def is_pair(self) -> bool:
        return (len(self.cards) == 2 and
                self.cards[0].get_value() == self.cards[1].get_value())

    def __len__(self):
        return len(self.cards)

    def __str__(self):
        return " ".join(str(card) for card in self.cards)


class SplitPolicy:
    """Decides how a split reshapes the player's hands and tracked total.

    How two split hands should be scored against the dealer is unresolved, so
    the whole of split handling lives behind this interface and can be
    replaced without touching the rest of the game.
    """

    def apply(self, game: "Game", hand: Hand):
        raise NotImplementedError


class TrackedTotalSplitPolicy(SplitPolicy):
    """Splits into two hands but keeps scoring one tracked player total.

    The second paired card moves into a new hand, each hand receives one new
    card, and the card drawn to the original hand is added to the tracked
    total. The player's turn ends after the split.
    """

    def apply(self, game: "Game", hand: Hand):
        new_hand = Hand([hand.cards.pop()])
        hand.total -= new_hand.total

        card = game.next_card()
        hand.add_card(card)
        new_hand.add_card(game.next_card())

        game.player_hands.append(new_hand)
        game.player_total += card.get_value()
        game.player_done = True


class Game:
    """One round of blackjack between the dealer and a single player.

    Dealing happens on construction; ``play()`` then runs the turn loop until
    ``game_ended()`` reports a terminal state.
    """

    def __init__(self, card_source: CardSource, strategy: StrategyTable,
                 split_policy: Optional[SplitPolicy] = None):
        self.card_source = card_source
        self.strategy = strategy
        self.split_policy = split_policy or TrackedTotalSplitPolicy()

        self.dealer_hand = Hand(card_source.draw_many(2))
        self.player_hands: List[Hand] = [Hand(card_source.draw_many(2))]
        # The hole card stays out of the dealer total until it is revealed
        self.dealer_total = self.dealer_up_card.get_value()
        self.player_total = self.player_hands[0].total

        self.actions: List[Action] = []
        self.dealer_beats_player = False
        self.player_done = False
        self.dealer_revealed = False
        self.finished = False
        self.winner: Optional[Agent] = None

    @property
    def dealer_up_card(self) -> Rank:
        return self.dealer_hand.cards[0]

    @property
    def dealer_hole_card(self) -> Rank:
        return self.dealer_hand.cards[1]

    @property
    def active_hand(self) -> Hand:
        return self.player_hands[0]

    @property
    def is_split(self) -> bool:
        return len(self.player_hands) > 1

    def next_card(self) -> Rank:
        return self.card_source.draw()

    def act(self) -> Action:
        """Choose the player's next action from the strategy table."""
        hand = self.active_hand
        dealer_up = self.dealer_up_card.get_value()
        total = hand.total

        if total < 5:
            return Action.HIT

        if hand.is_pair() and not self.actions:
            return self.strategy.lookup(pair_key(hand.cards[0].get_value(), dealer_up))

        # Always stand if sum > 17.
        if total > 17:
            return Action.STAND

        return self.strategy.lookup(total_key(total, dealer_up))

    def game_ended(self) -> Tuple[bool, Optional[Agent]]:
        """Return (ended, winner); a None winner on an ended game is a push."""
        if self.player_total == self.dealer_total:
            return True, None
        if self.dealer_beats_player:
            return True, Agent.DEALER
        if self.player_total == 21:
            return True, Agent.PLAYER
        if self.dealer_total == 21:
            return True, Agent.DEALER
        if self.player_total > 21:
            return True, Agent.DEALER
        if self.dealer_total > 21:
            return True, Agent.PLAYER
        return False, None

    def play(self) -> Optional[Agent]:
        """Run the turn loop to a terminal state and return the winner."""
        while True:
            ended, winner = self.game_ended()
            if ended:
                self.winner = winner
                self.finished = True
                logger.debug(f"Game over: dealer {self.dealer_total}, "
                              f"player {self.player_total}, winner {winner or 'none (push)'}")
                return winner

            if not self.player_done:
                action = self.act()
                self.apply(action)
            elif not self.dealer_revealed:
                self.dealer_total += self.dealer_hole_card.get_value()
                self.dealer_revealed = True
            else:
                self.dealer_hit()

    def apply(self, action: Action):
        hand = self.active_hand
        if action == Action.HIT:
            self.hit(hand)
        elif action == Action.DOUBLE:
            self.hit(hand)
            self.player_done = True
        elif action == Action.STAND:
            self.player_done = True
        elif action == Action.SPLIT:
            if self.actions or not hand.is_pair():
                raise GameError(f"Cannot split {hand} after {len(self.actions)} actions")
            self.split_policy.apply(self, hand)
        self.actions.append(action)
        logger.debug(f"Player {action}: {hand} ({self.player_total})")

    def hit(self, hand: Hand):
        card = self.next_card()
        hand.add_card(card)
        self.player_total += card.get_value()

    def dealer_hit(self):
        card = self.next_card()
        self.dealer_hand.add_card(card)
        self.dealer_total += card.get_value()
        if self.dealer_total <= 21 and self.dealer_total > self.player_total:
            self.dealer_beats_player = True


@dataclass(frozen=True)
class RoundResult:
    """Summary of a finished game for reporting."""
    dealer_hand: Tuple[Rank, ...]
    dealer_total: int
    player_hands: Tuple[Tuple[Rank, ...], ...]
    player_total: int
    actions: Tuple[Action, ...]
    winner: Optional[Agent]

    @classmethod
    def from_game(cls, game: Game) -> "RoundResult":
        if not game.finished:
            raise GameError("Game has not finished")
        return cls(
            dealer_hand=tuple(game.dealer_hand.cards),
            dealer_total=game.dealer_total,
            player_hands=tuple(tuple(hand.cards) for hand in game.player_hands),
            player_total=game.player_total,
            actions=tuple(game.actions),
            winner=game.winner,
        )

    @property
    def is_push(self) -> bool:
        return self.winner is None

    def describe(self) -> str:
        lines = [f"Dealer: {' '.join(map(str, self.dealer_hand))} ({self.dealer_total})"]
        for i, hand in enumerate(self.player_hands, start=1):
            label = f"Player hand {i}" if len(self.player_hands) > 1 else "Player"
            lines.append(f"{label}: {' '.join(map(str, hand))}")
        lines.append(f"Player total: {self.player_total}")
        lines.append(f"Moves: {', '.join(map(str, self.actions)) or 'none'}")
        lines.append(f"Winner: {self.winner or 'none (push)'}")
        return "\n".join(lines)


def play_game(card_source: CardSource, strategy: StrategyTable,
              split_policy: Optional[SplitPolicy] = None) -> RoundResult:
    """Deal, play and summarise one game."""
    game = Game(card_source, strategy, split_policy)
    game.play()
    return RoundResult.from_game(game)


# Example usage and testing
if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    source = CardSource.from_deck(Deck(6))
    result = play_game(source, StrategyTable.basic())
    print(result.describe())
