"""WCSP encoder for Clue deduction states.

Serializes the observer's probabilistic knowledge, plus the hard rules of
the game, into the plain-text weighted CSP format read by top-K WCSP
solvers. Each (card, location) pair is a boolean variable whose unary
cost table is derived from ``DeductionState.get_probability``; the rules
are cost tables that forbid impossible combinations.

Architecture:
    ConstraintEncoder.build() makes one pass over the state and produces
    cost tables whose entries are either ``Finite`` costs or the
    ``UNBOUNDED`` marker for a forbidden outcome, accumulating the
    instance's global maximum from the finite costs. WcspInstance.render()
    then writes the text, turning every ``UNBOUNDED`` entry into the
    integer ceiling of that maximum.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Union

import clue_solver

logger = logging.getLogger(__name__)

# Name tag written at the start of the header line.
DOCUMENT_TAG = "ClueGame"

# Every variable is "this card sits at this location": false=0, true=1.
DOMAIN_SIZE = 2

# Significant digits written for finite costs.
_COST_DIGITS = 5


# =============================================================================
# Costs
# =============================================================================

@dataclasses.dataclass(frozen=True)
class Finite:
    """A finite cost. Lower is more probable."""
    value: float


@dataclasses.dataclass(frozen=True)
class Unbounded:
    """A forbidden outcome.

    Rendered as the instance upper bound, which is at least the sum of
    every finite worst-case cost in the instance.
    """


UNBOUNDED = Unbounded()

Cost = Union[Finite, Unbounded]


def probability_to_cost(probability: float) -> Cost:
    """Convert a probability to a cost by taking ``-ln(p)``.

    Args:
        probability: A probability in [0, 1].

    Returns:
        ``Finite(0.0)`` for certainty, ``UNBOUNDED`` for impossibility,
        otherwise ``Finite(-ln(p))``.

    Raises:
        ValueError: If the probability is outside [0, 1].
    """
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"Probability must be in [0, 1], got {probability}")
    if probability == 0.0:
        return UNBOUNDED
    if probability == 1.0:
        return Finite(0.0)
    return Finite(-math.log(probability))


# =============================================================================
# Instance
# =============================================================================

@dataclasses.dataclass(frozen=True)
class CostTable:
    """One constraint of the instance.

    Attributes:
        scope: Variable indices the constraint ranges over.
        default: Cost of every assignment not listed in ``tuples``.
        tuples: (assignment, cost) pairs that deviate from the default.
    """
    scope: tuple[int, ...]
    default: Cost
    tuples: tuple[tuple[tuple[int, ...], Cost], ...]

    @property
    def arity(self) -> int:
        return len(self.scope)

    @property
    def worst_case(self) -> float:
        """Highest finite cost in the table, or 0 if it has none."""
        costs = [self.default] + [cost for _, cost in self.tuples]
        return max(
            (c.value for c in costs if isinstance(c, Finite)), default=0.0,
        )

    def lines(self, upper_bound: int) -> list[str]:
        header = [str(self.arity)]
        header.extend(str(v) for v in self.scope)
        header.append(_render_cost(self.default, upper_bound))
        header.append(str(len(self.tuples)))
        lines = [" ".join(header)]
        for values, cost in self.tuples:
            row = [str(v) for v in values]
            row.append(_render_cost(cost, upper_bound))
            lines.append(" ".join(row))
        return lines


@dataclasses.dataclass(frozen=True)
class WcspInstance:
    """A complete WCSP instance, ready to render.

    Attributes:
        variable_count: Number of boolean variables.
        constraints: Cost tables in emission order.
        global_max: Sum of every table's finite worst-case cost.
    """
    variable_count: int
    constraints: tuple[CostTable, ...]
    global_max: float

    @property
    def upper_bound(self) -> int:
        """Integer cost that stands for a forbidden outcome."""
        return math.ceil(self.global_max)

    def render(self) -> str:
        upper_bound = self.upper_bound
        lines = [
            f"{DOCUMENT_TAG} {self.variable_count} {DOMAIN_SIZE} "
            f"{len(self.constraints)} {upper_bound}",
            " ".join([str(DOMAIN_SIZE)] * self.variable_count),
        ]
        for table in self.constraints:
            lines.extend(table.lines(upper_bound))
        return "\n".join(lines) + "\n"


def _render_cost(cost: Cost, upper_bound: int) -> str:
    if isinstance(cost, Unbounded):
        return str(upper_bound)
    return f"{cost.value:.{_COST_DIGITS}g}"


def _exactly_one(scope: list[int]) -> CostTable:
    """Only one variable in ``scope`` may be true."""
    n = len(scope)
    rows = tuple(
        (tuple(1 if i == j else 0 for j in range(n)), Finite(0.0))
        for i in range(n)
    )
    return CostTable(scope=tuple(scope), default=UNBOUNDED, tuples=rows)


# =============================================================================
# Encoder
# =============================================================================

class ConstraintEncoder:
    """Builds a WCSP instance from a deduction state.

    The state is only read. It must not change while an encoding is in
    progress.
    """

    def __init__(self, state: clue_solver.DeductionState) -> None:
        self._state = state
        self._config = state.config

    def variable(self, card: int, location: int) -> int:
        """Index of the variable for ``card`` sitting at ``location``."""
        self._config.check_card(card)
        self._config.check_location(location)
        return card * self._config.num_locations + location

    def build(self) -> WcspInstance:
        """Build every constraint and the global maximum."""
        constraints: list[CostTable] = []
        constraints.extend(self._probability_tables())
        constraints.extend(self._one_location_per_card())
        constraints.extend(self._one_card_per_case_file())
        constraints.extend(self._clue_tables())

        global_max = 0.0
        for table in constraints:
            global_max += table.worst_case

        instance = WcspInstance(
            variable_count=self._config.num_cards * self._config.num_locations,
            constraints=tuple(constraints),
            global_max=global_max,
        )
        logger.info(
            "Encoded %d variables, %d constraints, upper bound %d",
            instance.variable_count, len(instance.constraints),
            instance.upper_bound,
        )
        return instance

    def encode(self) -> str:
        """The instance as WCSP text."""
        return self.build().render()

    def _probability_tables(self) -> list[CostTable]:
        """Unary cost of each (card, location) variable being false/true."""
        tables = []
        table = self._state.probability_table()
        for card, row in enumerate(table):
            for location, probability in enumerate(row):
                tables.append(CostTable(
                    scope=(self.variable(card, location),),
                    default=Finite(0.0),
                    tuples=(
                        ((0,), probability_to_cost(1.0 - probability)),
                        ((1,), probability_to_cost(probability)),
                    ),
                ))
        return tables

    def _one_location_per_card(self) -> list[CostTable]:
        """Every card sits at exactly one location."""
        locations = range(self._config.num_locations)
        return [
            _exactly_one([self.variable(card, loc) for loc in locations])
            for card in range(self._config.num_cards)
        ]

    def _one_card_per_case_file(self) -> list[CostTable]:
        """Each case-file slot holds exactly one card of its category."""
        tables = []
        for category in clue_solver.CardCategory:
            location = self._config.case_file_location(category)
            tables.append(_exactly_one([
                self.variable(card, location)
                for card in self._config.category_cards(category)
            ]))
        return tables

    def _clue_tables(self) -> list[CostTable]:
        """A player holds at least one of the cards of each clue."""
        tables = []
        for clue in self._state.disjunctive_clues:
            tables.append(CostTable(
                scope=tuple(
                    self.variable(card, clue.player) for card in clue.cards
                ),
                default=Finite(0.0),
                tuples=(((0, 0, 0), UNBOUNDED),),
            ))
        return tables
