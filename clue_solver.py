"""Clue deduction model.

Core classes for tracking what one observer (player 0) knows about the
location of every card in a game of Clue. A ``DeductionState`` owns the
dealt ground truth, plays the suggestion / accusation turn cycle against
it, and turns the observer's accumulated knowledge into a probability
estimate for every (card, location) pair.

Cards are integers: suspects first, then places, then weapons. Locations
are integers too: player hands ``0 .. num_players - 1`` followed by the
three case-file slots (suspect, place, weapon).

Logging
-------
Events are emitted through the standard ``logging`` module under the
logger name ``clue_solver``. Configure handlers at the entry point, e.g.::

    import logging
    logging.basicConfig(level=logging.INFO)
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import random
from collections.abc import Sequence

import tqdm

logger = logging.getLogger(__name__)

# Location index of the observing player.
OBSERVER = 0


# =============================================================================
# ANSI Color Constants
# =============================================================================

class _Colors:
    """ANSI escape codes for terminal coloring."""
    BLUE = "\033[94m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


# Display names for the classic 6 suspect / 9 place / 6 weapon game.
CLASSIC_CARD_NAMES: tuple[str, ...] = (
    "Miss Scarlet", "Professor Plum", "Mrs. Peacock", "Mr. Green",
    "Colonel Mustard", "Mrs. White",
    "Kitchen", "Ballroom", "Conservatory", "Billiard Room", "Library",
    "Study", "Hall", "Lounge", "Dining Room",
    "Candlestick", "Knife", "Lead Pipe", "Revolver", "Rope",
    "Monkey Wrench",
)


# =============================================================================
# Enums
# =============================================================================

class CardCategory(enum.Enum):
    """Category of a card.

    The value doubles as the offset of the category's case-file slot
    after the player locations.
    """
    SUSPECT = 0
    PLACE = 1
    WEAPON = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


class MoveStatus(enum.Enum):
    """Outcome status of a turn operation.

    Anything other than ``OK`` means the move was rejected and the
    deduction state was left untouched.
    """
    OK = enum.auto()
    GAME_OVER = enum.auto()
    NOT_YOUR_TURN = enum.auto()
    ALREADY_SUGGESTED = enum.auto()
    INVALID_CARDS = enum.auto()


_REJECTION_MESSAGES = {
    MoveStatus.GAME_OVER: "The game is already over",
    MoveStatus.NOT_YOUR_TURN: "Not this player's turn",
    MoveStatus.ALREADY_SUGGESTED: (
        "You already made a suggestion this turn; accuse or end your turn"
    ),
    MoveStatus.INVALID_CARDS: (
        "Please name a proper suspect, place, and weapon card"
    ),
}


# =============================================================================
# Configuration
# =============================================================================

@dataclasses.dataclass(frozen=True)
class GameConfig:
    """Player and card counts for one game, plus the index arithmetic.

    Attributes:
        num_players: Number of players, including the observer.
        num_suspects: Number of suspect cards.
        num_places: Number of place cards.
        num_weapons: Number of weapon cards.
    """
    num_players: int
    num_suspects: int = 6
    num_places: int = 9
    num_weapons: int = 6

    def __post_init__(self) -> None:
        if self.num_players < 2:
            raise ValueError(
                f"Must have at least 2 players, got {self.num_players}"
            )
        for category in CardCategory:
            count = self.category_size(category)
            if count <= 0:
                raise ValueError(
                    f"{category.label} count must be positive, got {count}"
                )
        if self.num_players > self.num_hand_cards:
            raise ValueError(
                f"Cannot deal {self.num_hand_cards} cards to "
                f"{self.num_players} players"
            )

    @property
    def num_cards(self) -> int:
        return self.num_suspects + self.num_places + self.num_weapons

    @property
    def num_locations(self) -> int:
        """Player hands plus the three case-file slots."""
        return self.num_players + len(CardCategory)

    @property
    def num_hand_cards(self) -> int:
        """Cards dealt to players (everything outside the case file)."""
        return self.num_cards - len(CardCategory)

    def category_size(self, category: CardCategory) -> int:
        return {
            CardCategory.SUSPECT: self.num_suspects,
            CardCategory.PLACE: self.num_places,
            CardCategory.WEAPON: self.num_weapons,
        }[category]

    def category_cards(self, category: CardCategory) -> range:
        """The contiguous range of card indices in a category."""
        start = 0
        for other in CardCategory:
            if other == category:
                break
            start += self.category_size(other)
        return range(start, start + self.category_size(category))

    def card_category(self, card: int) -> CardCategory:
        """Category of a card, derived from its index.

        Raises:
            IndexError: If the card index is out of range.
        """
        self.check_card(card)
        if card < self.num_suspects:
            return CardCategory.SUSPECT
        if card < self.num_suspects + self.num_places:
            return CardCategory.PLACE
        return CardCategory.WEAPON

    def case_file_location(self, category: CardCategory) -> int:
        return self.num_players + category.value

    def case_file_category(self, location: int) -> CardCategory | None:
        """Category of a case-file slot, or None for a player hand."""
        self.check_location(location)
        if location < self.num_players:
            return None
        return CardCategory(location - self.num_players)

    def is_player(self, location: int) -> bool:
        self.check_location(location)
        return location < self.num_players

    def hand_sizes(self) -> tuple[int, ...]:
        """Hand sizes of a round-robin deal starting at player 0."""
        base, extra = divmod(self.num_hand_cards, self.num_players)
        return tuple(
            base + (1 if p < extra else 0) for p in range(self.num_players)
        )

    def check_card(self, card: int) -> None:
        if not 0 <= card < self.num_cards:
            raise IndexError(
                f"Card index {card} out of range (0-{self.num_cards - 1})"
            )

    def check_location(self, location: int) -> None:
        if not 0 <= location < self.num_locations:
            raise IndexError(
                f"Location index {location} out of range "
                f"(0-{self.num_locations - 1})"
            )


# =============================================================================
# Ground Truth
# =============================================================================

@dataclasses.dataclass(frozen=True)
class Solution:
    """The true location of every card.

    Attributes:
        config: The game configuration the solution was dealt for.
        locations: For every location, the cards truly placed there.
            Player hands first, then the suspect, place and weapon
            case-file slots.
    """
    config: GameConfig
    locations: tuple[frozenset[int], ...]

    def __post_init__(self) -> None:
        config = self.config
        if len(self.locations) != config.num_locations:
            raise ValueError(
                f"Solution must have {config.num_locations} locations, "
                f"got {len(self.locations)}"
            )
        seen: set[int] = set()
        for cards in self.locations:
            for card in cards:
                config.check_card(card)
                if card in seen:
                    raise ValueError(f"Card {card} is placed more than once")
                seen.add(card)
        if len(seen) != config.num_cards:
            missing = sorted(set(range(config.num_cards)) - seen)
            raise ValueError(f"Cards {missing} are not placed anywhere")
        for category in CardCategory:
            slot = self.locations[config.case_file_location(category)]
            if len(slot) != 1:
                raise ValueError(
                    f"{category.label} case file must hold exactly one "
                    f"card, got {len(slot)}"
                )
            (card,) = slot
            if config.card_category(card) != category:
                raise ValueError(
                    f"Card {card} cannot sit in the "
                    f"{category.label.lower()} case file"
                )

    @classmethod
    def from_hands(
        cls,
        config: GameConfig,
        hands: Sequence[Sequence[int]],
        case_file: tuple[int, int, int],
    ) -> Solution:
        """Build a solution from explicit player hands and case file.

        Args:
            config: The game configuration.
            hands: Cards held by each player, observer first.
            case_file: The (suspect, place, weapon) case-file cards.

        Raises:
            ValueError: If the placement is not a valid deal.
        """
        if len(hands) != config.num_players:
            raise ValueError(
                f"Expected {config.num_players} hands, got {len(hands)}"
            )
        locations = [frozenset(hand) for hand in hands]
        locations.extend(frozenset({card}) for card in case_file)
        return cls(config=config, locations=tuple(locations))

    @classmethod
    def deal(cls, config: GameConfig, rng: random.Random) -> Solution:
        """Deal a random solution.

        One uniformly random card per category goes to its case-file
        slot. The rest are shuffled and dealt one at a time, round-robin
        from player 0, so hand sizes differ by at most one.
        """
        case_file = tuple(
            rng.choice(config.category_cards(category))
            for category in CardCategory
        )
        deck = [c for c in range(config.num_cards) if c not in case_file]
        rng.shuffle(deck)
        hands: list[list[int]] = [[] for _ in range(config.num_players)]
        for i, card in enumerate(deck):
            hands[i % config.num_players].append(card)
        return cls.from_hands(config, hands, case_file)  # type: ignore[arg-type]

    @property
    def case_file(self) -> tuple[int, int, int]:
        """The (suspect, place, weapon) triple in the case file."""
        n = self.config.num_players
        (suspect,) = self.locations[n]
        (place,) = self.locations[n + 1]
        (weapon,) = self.locations[n + 2]
        return suspect, place, weapon

    def hand(self, player: int) -> frozenset[int]:
        if not 0 <= player < self.config.num_players:
            raise IndexError(
                f"Player index {player} out of range "
                f"(0-{self.config.num_players - 1})"
            )
        return self.locations[player]

    def holder(self, card: int) -> int:
        """Location index that truly holds a card."""
        self.config.check_card(card)
        for location, cards in enumerate(self.locations):
            if card in cards:
                return location
        raise AssertionError(f"Card {card} missing from solution")

    def __str__(self) -> str:
        lines = []
        for p in range(self.config.num_players):
            lines.append(f"Player {p + 1}'s hand: {sorted(self.locations[p])}")
        for category in CardCategory:
            cards = self.locations[self.config.case_file_location(category)]
            lines.append(f"{category.label} case file slot: {sorted(cards)}")
        return "\n".join(lines)


# =============================================================================
# Turn Records
# =============================================================================

@dataclasses.dataclass(frozen=True)
class DisjunctiveClue:
    """A player is known to hold at least one of three named cards.

    Recorded when another player's suggestion is refuted by someone
    other than the observer, so the observer never sees which card.
    """
    player: int
    suspect: int
    place: int
    weapon: int

    @property
    def cards(self) -> tuple[int, int, int]:
        return self.suspect, self.place, self.weapon


@dataclasses.dataclass(frozen=True)
class SuggestionResult:
    """Record of a suggestion and how the table answered it.

    Attributes:
        status: ``OK`` if the suggestion was played, otherwise why it
            was rejected.
        suggester: Player who owned the turn.
        suspect: Suggested suspect card.
        place: Suggested place card.
        weapon: Suggested weapon card.
        passed: Players who held none of the three cards, in walk order.
        refuter: Player who held one of the cards, if anyone did.
        shown_card: The card revealed, only set when the observer was
            the suggester.
        message: Narration of the turn.
    """
    status: MoveStatus
    suggester: int
    suspect: int
    place: int
    weapon: int
    passed: tuple[int, ...] = ()
    refuter: int | None = None
    shown_card: int | None = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.status == MoveStatus.OK


@dataclasses.dataclass(frozen=True)
class AccusationResult:
    """Record of the observer's accusation.

    Attributes:
        status: ``OK`` if the accusation was resolved.
        suspect: Accused suspect card.
        place: Accused place card.
        weapon: Accused weapon card.
        correct: Whether the triple matched the case file. None when
            the accusation was rejected.
        case_file: The true case file, revealed once resolved.
        message: Narration of the outcome.
    """
    status: MoveStatus
    suspect: int
    place: int
    weapon: int
    correct: bool | None = None
    case_file: tuple[int, int, int] | None = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.status == MoveStatus.OK


# =============================================================================
# Deduction State
# =============================================================================

class DeductionState:
    """The observer's knowledge of a single game.

    Mutated only through its own operations. All accessors return
    immutable snapshots.
    """

    def __init__(
        self,
        solution: Solution,
        card_names: Sequence[str] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Create the knowledge state for a dealt game.

        Args:
            solution: The ground truth to play against.
            card_names: Optional display name for every card.
            rng: Random source for simulated turns.

        Raises:
            ValueError: If ``card_names`` does not name every card.
        """
        config = solution.config
        if card_names is not None and len(card_names) != config.num_cards:
            raise ValueError(
                f"Expected {config.num_cards} card names, "
                f"got {len(card_names)}"
            )
        self._config = config
        self._solution = solution
        self._card_names = tuple(card_names) if card_names is not None else None
        self._rng = rng if rng is not None else random.Random()

        self._hands: list[set[int]] = [set() for _ in range(config.num_players)]
        self._restrictions: list[set[int]] = [
            set() for _ in range(config.num_locations)
        ]
        self._unknowns: dict[CardCategory, set[int]] = {
            category: set(config.category_cards(category))
            for category in CardCategory
        }
        self._free_slots: list[int] = [
            len(solution.hand(p)) for p in range(config.num_players)
        ]
        self._hand_sizes = tuple(self._free_slots)
        self._disjunctive_clues: list[DisjunctiveClue] = []

        self._current_turn_owner = OBSERVER
        self._suggestion_made = False
        self._game_over = False
        self._winner: int | None = None
        self._messages: list[str] = []

    # -----------------------------------------------------------------
    # Factories
    # -----------------------------------------------------------------

    @classmethod
    def deal(
        cls,
        num_players: int,
        num_suspects: int = 6,
        num_places: int = 9,
        num_weapons: int = 6,
        seed: int | None = None,
        card_names: Sequence[str] | None = None,
    ) -> DeductionState:
        """Deal a new random game.

        Args:
            num_players: Number of players (at least 2).
            num_suspects: Number of suspect cards.
            num_places: Number of place cards.
            num_weapons: Number of weapon cards.
            seed: Optional random seed for the deal and simulated turns.
            card_names: Optional display name for every card.

        Returns:
            A fresh DeductionState. Call ``start_game()`` before playing.

        Raises:
            ValueError: If the configuration cannot be dealt.
        """
        config = GameConfig(num_players, num_suspects, num_places, num_weapons)
        rng = random.Random(seed)
        solution = Solution.deal(config, rng)
        logger.info(
            "Dealt %d players, %d/%d/%d cards, hand sizes %s",
            num_players, num_suspects, num_places, num_weapons,
            config.hand_sizes(),
        )
        return cls(solution, card_names=card_names, rng=rng)

    @classmethod
    def classic(cls, num_players: int, seed: int | None = None) -> DeductionState:
        """Deal the classic 6 suspect / 9 place / 6 weapon game with names."""
        return cls.deal(num_players, seed=seed, card_names=CLASSIC_CARD_NAMES)

    # -----------------------------------------------------------------
    # Snapshots
    # -----------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def num_players(self) -> int:
        return self._config.num_players

    @property
    def card_names(self) -> tuple[str, ...] | None:
        return self._card_names

    @property
    def hands(self) -> tuple[frozenset[int], ...]:
        """Cards known to be held by each player."""
        return tuple(frozenset(h) for h in self._hands)

    @property
    def restrictions(self) -> tuple[frozenset[int], ...]:
        """Cards known not to be at each location."""
        return tuple(frozenset(r) for r in self._restrictions)

    @property
    def unknowns(self) -> dict[CardCategory, frozenset[int]]:
        """Cards per category whose location is still unresolved."""
        return {c: frozenset(cards) for c, cards in self._unknowns.items()}

    @property
    def free_slots(self) -> tuple[int, ...]:
        """Unassigned hand slots per player."""
        return tuple(self._free_slots)

    @property
    def hand_sizes(self) -> tuple[int, ...]:
        return self._hand_sizes

    @property
    def disjunctive_clues(self) -> tuple[DisjunctiveClue, ...]:
        return tuple(self._disjunctive_clues)

    @property
    def current_turn_owner(self) -> int:
        return self._current_turn_owner

    @property
    def suggestion_made_this_turn(self) -> bool:
        return self._suggestion_made

    @property
    def game_over(self) -> bool:
        return self._game_over

    @property
    def winner(self) -> int | None:
        """Player who won, or None if the game is running or was lost."""
        return self._winner

    @property
    def messages(self) -> tuple[str, ...]:
        """Narration of every event so far."""
        return tuple(self._messages)

    def card_category(self, card: int) -> CardCategory:
        return self._config.card_category(card)

    def reveal_solution(self) -> Solution:
        """The ground truth, for verifying solver output."""
        return self._solution

    # -----------------------------------------------------------------
    # Labels
    # -----------------------------------------------------------------

    def card_label(self, card: int) -> str:
        self._config.check_card(card)
        if self._card_names is None:
            return str(card)
        return self._card_names[card]

    def player_label(self, player: int) -> str:
        return "You" if player == OBSERVER else f"Player {player + 1}"

    def location_label(self, location: int) -> str:
        category = self._config.case_file_category(location)
        if category is None:
            return self.player_label(location)
        return f"{category.label} case file"

    # -----------------------------------------------------------------
    # Game Setup
    # -----------------------------------------------------------------

    def start_game(self) -> None:
        """Reveal the observer's own hand and hand the turn to them."""
        for card in sorted(self._solution.hand(OBSERVER)):
            self._confirm(OBSERVER, card)
        self._free_slots[OBSERVER] = 0
        self._current_turn_owner = OBSERVER
        self._suggestion_made = False
        logger.info(
            "Game started; observer holds %s",
            [self.card_label(c) for c in sorted(self._hands[OBSERVER])],
        )

    # -----------------------------------------------------------------
    # Probability Estimate
    # -----------------------------------------------------------------

    def get_probability(self, card: int, location: int) -> float:
        """Estimated probability that ``card`` is at ``location``.

        Case-file slots are uniform over the still-unresolved cards of
        their category. Player hands split the remaining mass across
        every hand that may still hold the card, in proportion to its
        free slots. Disjunctive clues are not used here; they are left
        to the constraint solver.

        Raises:
            IndexError: If the card or location is out of range.
        """
        config = self._config
        category = config.card_category(card)
        config.check_location(location)

        if card in self._restrictions[location]:
            return 0.0

        if location < config.num_players and card in self._hands[location]:
            return 1.0

        unknown_count = len(self._unknowns[category])
        slot_category = config.case_file_category(location)
        if slot_category is not None:
            if slot_category != category:
                return 0.0
            return 1.0 / unknown_count

        reachable = sum(
            free for player, free in enumerate(self._free_slots)
            if card not in self._restrictions[player]
        )
        # Card already located somewhere else.
        if reachable == 0:
            return 0.0
        in_hand = 1.0 - 1.0 / unknown_count
        return self._free_slots[location] / reachable * in_hand

    def probability_table(self) -> tuple[tuple[float, ...], ...]:
        """Probability of every card (rows) at every location (columns)."""
        return tuple(
            tuple(
                self.get_probability(card, location)
                for location in range(self._config.num_locations)
            )
            for card in range(self._config.num_cards)
        )

    # -----------------------------------------------------------------
    # Turn Cycle
    # -----------------------------------------------------------------

    def record_suggestion(
        self,
        suspect: int,
        place: int,
        weapon: int,
        player: int | None = None,
    ) -> SuggestionResult:
        """Play a suggestion for the player who owns the turn.

        The suggestion is passed around the table, starting with the
        player after the suggester, until someone holds one of the three
        cards. Players who hold none of them are noted as not holding
        any. When the observer suggests, the refuting card is revealed;
        otherwise the observer only learns that the refuter holds one of
        the three.

        Args:
            suspect: Suggested suspect card.
            place: Suggested place card.
            weapon: Suggested weapon card.
            player: Optional identity of the caller. Rejected if it does
                not own the turn.

        Returns:
            A SuggestionResult. Rejected suggestions leave the state
            unchanged.

        Raises:
            IndexError: If a card or the player index is out of range.
        """
        for card in (suspect, place, weapon):
            self._config.check_card(card)
        if player is not None and not self._config.is_player(player):
            raise IndexError(f"Location {player} is not a player")

        suggester = self._current_turn_owner
        status = self._turn_rejection(player)
        if status is None and self._suggestion_made and suggester == OBSERVER:
            status = MoveStatus.ALREADY_SUGGESTED
        if status is None and not self._is_valid_triple(suspect, place, weapon):
            status = MoveStatus.INVALID_CARDS
        if status is not None:
            logger.debug("Suggestion rejected: %s", status.name)
            return SuggestionResult(
                status=status, suggester=suggester,
                suspect=suspect, place=place, weapon=weapon,
                message=_REJECTION_MESSAGES[status],
            )

        cards = (suspect, place, weapon)
        lines = [self._suggestion_line(suggester, cards)]
        passed: list[int] = []
        refuter: int | None = None
        shown_card: int | None = None

        num_players = self._config.num_players
        for offset in range(1, num_players):
            queried = (suggester + offset) % num_players
            response = self._response(queried, cards)
            if response is None:
                self._restrictions[queried].update(cards)
                passed.append(queried)
                lines.append(
                    f"{self.player_label(queried)} "
                    f"{'deny' if queried == OBSERVER else 'denies'} "
                    f"holding any of the three cards"
                )
                continue

            refuter = queried
            if suggester == OBSERVER:
                shown_card = response
                self._confirm(refuter, response)
                lines.append(
                    f"{self.player_label(refuter)} reveals to you they are "
                    f"holding card {self.card_label(response)}"
                )
                break

            clue = DisjunctiveClue(refuter, suspect, place, weapon)
            if clue not in self._disjunctive_clues:
                self._disjunctive_clues.append(clue)
            if refuter == OBSERVER:
                lines.append(
                    f"You reveal {self.card_label(response)} to "
                    f"{self.player_label(suggester)}"
                )
            else:
                lines.append(
                    f"{self.player_label(refuter)} reveals they are holding "
                    f"one of the three cards to {self.player_label(suggester)}"
                )
            break

        if refuter is None and suggester != OBSERVER:
            self._game_over = True
            self._winner = suggester
            lines.append(
                f"Nobody could refute {self.player_label(suggester)}: "
                f"they have solved the case and win"
            )
            logger.info("Player %d wins by an unrefuted suggestion", suggester)

        if suggester == OBSERVER:
            self._suggestion_made = True
        elif not self._game_over:
            self._advance_turn()

        message = "\n".join(lines)
        self._messages.append(message)
        logger.debug(
            "Suggestion %s by player %d: passed=%s refuter=%s",
            cards, suggester, passed, refuter,
        )
        return SuggestionResult(
            status=MoveStatus.OK,
            suggester=suggester,
            suspect=suspect,
            place=place,
            weapon=weapon,
            passed=tuple(passed),
            refuter=refuter,
            shown_card=shown_card,
            message=message,
        )

    def end_observer_turn(self) -> MoveStatus:
        """End the observer's turn and pass play to the next player."""
        status = self._turn_rejection(OBSERVER)
        if status is not None:
            return status
        self._suggestion_made = False
        self._advance_turn()
        return MoveStatus.OK

    def accuse(self, suspect: int, place: int, weapon: int) -> AccusationResult:
        """Make the observer's final accusation.

        Either outcome ends the game.

        Raises:
            IndexError: If a card index is out of range.
        """
        for card in (suspect, place, weapon):
            self._config.check_card(card)

        status = self._turn_rejection(OBSERVER)
        if status is None and not self._is_valid_triple(suspect, place, weapon):
            status = MoveStatus.INVALID_CARDS
        if status is not None:
            return AccusationResult(
                status=status, suspect=suspect, place=place, weapon=weapon,
                message=_REJECTION_MESSAGES[status],
            )

        case_file = self._solution.case_file
        correct = (suspect, place, weapon) == case_file
        self._game_over = True
        self._winner = OBSERVER if correct else None

        accused = ", ".join(self.card_label(c) for c in (suspect, place, weapon))
        if correct:
            message = f"You accuse {accused}. Correct, you win!"
        else:
            truth = ", ".join(self.card_label(c) for c in case_file)
            message = f"You accuse {accused}. Wrong, the case file held {truth}"
        self._messages.append(message)
        logger.info("Observer accusation %s", "won" if correct else "lost")
        return AccusationResult(
            status=MoveStatus.OK,
            suspect=suspect,
            place=place,
            weapon=weapon,
            correct=correct,
            case_file=case_file,
            message=message,
        )

    # -----------------------------------------------------------------
    # Simulation
    # -----------------------------------------------------------------

    def random_suggestion(self) -> tuple[int, int, int]:
        """A uniformly random (suspect, place, weapon) triple."""
        suspect, place, weapon = (
            self._rng.choice(self._config.category_cards(category))
            for category in CardCategory
        )
        return suspect, place, weapon

    def simulate_opponent_turns(self) -> list[SuggestionResult]:
        """Play random suggestions for every bot until the observer's turn."""
        results = []
        while not self._game_over and self._current_turn_owner != OBSERVER:
            results.append(self.record_suggestion(*self.random_suggestion()))
        return results

    def simulate_turns(
        self, count: int, show_progress: bool = False,
    ) -> list[SuggestionResult]:
        """Play ``count`` turns of random suggestions for whoever is up.

        The observer's simulated turn is a suggestion followed by ending
        the turn. Stops early if the game ends.

        Args:
            count: Number of turns to play.
            show_progress: If True, display a tqdm progress bar.

        Returns:
            The result of every suggestion played.
        """
        pbar = None
        if show_progress:
            pbar = tqdm.tqdm(
                total=count,
                desc="Simulating",
                unit=" turns",
                dynamic_ncols=True,
            )

        results = []
        for _ in range(count):
            if self._game_over:
                break
            # A suggestion already made this turn only needs the turn ended.
            if self._current_turn_owner == OBSERVER and self._suggestion_made:
                self.end_observer_turn()
            observer_turn = self._current_turn_owner == OBSERVER
            results.append(self.record_suggestion(*self.random_suggestion()))
            if observer_turn:
                self.end_observer_turn()
            if pbar is not None:
                pbar.update(1)

        if pbar is not None:
            pbar.close()
        return results

    # -----------------------------------------------------------------
    # Helper Methods
    # -----------------------------------------------------------------

    def _turn_rejection(self, player: int | None) -> MoveStatus | None:
        if self._game_over:
            return MoveStatus.GAME_OVER
        if player is not None and player != self._current_turn_owner:
            return MoveStatus.NOT_YOUR_TURN
        return None

    def _is_valid_triple(self, suspect: int, place: int, weapon: int) -> bool:
        categories = tuple(
            self._config.card_category(c) for c in (suspect, place, weapon)
        )
        return categories == (
            CardCategory.SUSPECT, CardCategory.PLACE, CardCategory.WEAPON,
        )

    def _response(self, player: int, cards: tuple[int, ...]) -> int | None:
        """First of ``cards`` truly held by ``player``, or None."""
        hand = self._solution.hand(player)
        for card in cards:
            if card in hand:
                return card
        return None

    def _confirm(self, player: int, card: int) -> None:
        """Record that ``player`` holds ``card``."""
        if card in self._hands[player]:
            return
        assert card not in self._restrictions[player], (
            f"Card {card} is restricted for player {player}"
        )
        self._hands[player].add(card)
        self._unknowns[self._config.card_category(card)].discard(card)
        for location, restricted in enumerate(self._restrictions):
            if location != player:
                restricted.add(card)
        if self._free_slots[player] > 0:
            self._free_slots[player] -= 1

    def _advance_turn(self) -> None:
        self._current_turn_owner = (
            (self._current_turn_owner + 1) % self._config.num_players
        )

    def _suggestion_line(self, suggester: int, cards: tuple[int, ...]) -> str:
        suspect, place, weapon = (self.card_label(c) for c in cards)
        who = "You suggest" if suggester == OBSERVER else (
            f"{self.player_label(suggester)} suggests"
        )
        return (
            f"{who} suspect {suspect} used weapon {weapon} "
            f"at place {place} to commit the crime"
        )

    # -----------------------------------------------------------------
    # Display
    # -----------------------------------------------------------------

    def __str__(self) -> str:
        lines = [f"{_Colors.BOLD}=== Clue ==={_Colors.RESET}"]
        for category in CardCategory:
            unknown = sorted(self._unknowns[category])
            labels = ", ".join(self.card_label(c) for c in unknown)
            lines.append(f"Unresolved {category.label.lower()}s: {labels}")
        if self._disjunctive_clues:
            lines.append(f"Disjunctive clues: {len(self._disjunctive_clues)}")
        lines.append("")

        indent = "    "
        for player in range(self._config.num_players):
            label = f"{self.player_label(player)} ({player})"
            if player == self._current_turn_owner and not self._game_over:
                lines.append(f"{_Colors.BOLD}>>> {label}{_Colors.RESET}")
            else:
                lines.append(f"{indent}{label}")
            held = ", ".join(
                self.card_label(c) for c in sorted(self._hands[player])
            )
            lines.append(
                f"{indent}  Hand: {_Colors.GREEN}{held or '(none)'}"
                f"{_Colors.RESET}  Free slots: {self._free_slots[player]}"
            )
            lines.append(
                f"{indent}  {_Colors.DIM}Restrictions: "
                f"{sorted(self._restrictions[player])}{_Colors.RESET}"
            )
        lines.append("")

        if self._game_over:
            if self._winner == OBSERVER:
                lines.append(f"{_Colors.GREEN}{_Colors.BOLD}CASE SOLVED!{_Colors.RESET}")
            elif self._winner is not None:
                lines.append(
                    f"{_Colors.RED}{_Colors.BOLD}"
                    f"{self.player_label(self._winner).upper()} SOLVED THE CASE"
                    f"{_Colors.RESET}"
                )
            else:
                lines.append(f"{_Colors.RED}{_Colors.BOLD}WRONG ACCUSATION!{_Colors.RESET}")
        return "\n".join(lines)


# =============================================================================
# Terminal Output
# =============================================================================

def _prob_colored(probability: float) -> str:
    """Return a probability string colored by confidence level."""
    if probability >= 1.0:
        return f"{_Colors.GREEN}{_Colors.BOLD}  100%{_Colors.RESET}"
    elif probability <= 0.0:
        return f"{_Colors.DIM}     -{_Colors.RESET}"
    elif probability >= 0.50:
        return f"{_Colors.BLUE}{probability:>6.1%}{_Colors.RESET}"
    elif probability >= 0.20:
        return f"{_Colors.YELLOW}{probability:>6.1%}{_Colors.RESET}"
    return f"{_Colors.RED}{probability:>6.1%}{_Colors.RESET}"


def print_probability_table(state: DeductionState) -> None:
    """Print the estimated location of every card, one row per card."""
    config = state.config
    width = max(len(state.card_label(c)) for c in range(config.num_cards))
    headers = [
        f"P{p + 1}" for p in range(config.num_players)
    ] + [f"CF-{category.label[0]}" for category in CardCategory]
    print(" " * width + "".join(f"{h:>6}" for h in headers))
    for card, row in enumerate(state.probability_table()):
        cells = "".join(_prob_colored(p) for p in row)
        print(f"{state.card_label(card):<{width}}{cells}")
