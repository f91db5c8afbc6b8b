"""Unit tests for the WCSP encoder."""

import math
import random
import unittest

import clue_solver
import wcsp_writer


def _make_small_state() -> clue_solver.DeductionState:
    """Two players, two cards per category, observer hand revealed.

    Suspects 0-1, places 2-3, weapons 4-5. Case file (0, 2, 4). The
    observer holds 1 and 3, player 2 holds 5. Only weapons 4 and 5 are
    uncertain: each is 50% in player 2's hand, 50% in the case file.
    """
    config = clue_solver.GameConfig(2, 2, 2, 2)
    solution = clue_solver.Solution.from_hands(config, [[1, 3], [5]], (0, 2, 4))
    state = clue_solver.DeductionState(solution)
    state.start_game()
    return state


def _make_clue_state() -> clue_solver.DeductionState:
    """Three-player classic-sized game with one disjunctive clue."""
    config = clue_solver.GameConfig(3)
    solution = clue_solver.Solution.from_hands(
        config,
        [
            [1, 2, 7, 8, 16, 17],
            [3, 4, 9, 10, 18, 19],
            [5, 11, 12, 13, 14, 20],
        ],
        (0, 6, 15),
    )
    state = clue_solver.DeductionState(solution, rng=random.Random(0))
    state.start_game()
    state.end_observer_turn()
    state.record_suggestion(5, 11, 15)
    return state


class TestProbabilityToCost(unittest.TestCase):
    """Tests for wcsp_writer.probability_to_cost."""

    def test_certain(self) -> None:
        self.assertEqual(wcsp_writer.probability_to_cost(1.0), wcsp_writer.Finite(0.0))

    def test_impossible(self) -> None:
        self.assertIs(wcsp_writer.probability_to_cost(0.0), wcsp_writer.UNBOUNDED)

    def test_negative_log(self) -> None:
        cost = wcsp_writer.probability_to_cost(0.25)
        self.assertIsInstance(cost, wcsp_writer.Finite)
        self.assertAlmostEqual(cost.value, math.log(4))

    def test_more_probable_is_cheaper(self) -> None:
        low = wcsp_writer.probability_to_cost(0.2)
        high = wcsp_writer.probability_to_cost(0.8)
        self.assertLess(high.value, low.value)

    def test_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            wcsp_writer.probability_to_cost(-0.1)
        with self.assertRaises(ValueError):
            wcsp_writer.probability_to_cost(1.5)


class TestCostTable(unittest.TestCase):
    """Tests for wcsp_writer.CostTable."""

    def test_worst_case_ignores_unbounded(self) -> None:
        table = wcsp_writer.CostTable(
            scope=(3,),
            default=wcsp_writer.Finite(0.0),
            tuples=(
                ((0,), wcsp_writer.UNBOUNDED),
                ((1,), wcsp_writer.Finite(1.5)),
            ),
        )
        self.assertEqual(table.worst_case, 1.5)

    def test_worst_case_without_finite_costs(self) -> None:
        table = wcsp_writer.CostTable(
            scope=(1, 2),
            default=wcsp_writer.UNBOUNDED,
            tuples=(((1, 0), wcsp_writer.UNBOUNDED),),
        )
        self.assertEqual(table.worst_case, 0.0)

    def test_lines(self) -> None:
        table = wcsp_writer.CostTable(
            scope=(4, 9, 14),
            default=wcsp_writer.Finite(0.0),
            tuples=(((0, 0, 0), wcsp_writer.UNBOUNDED),),
        )
        self.assertEqual(table.lines(7), ["3 4 9 14 0 1", "0 0 0 7"])


class TestConstraintEncoder(unittest.TestCase):
    """Tests for wcsp_writer.ConstraintEncoder on a hand-checked game."""

    def setUp(self) -> None:
        self.state = _make_small_state()
        self.encoder = wcsp_writer.ConstraintEncoder(self.state)
        self.instance = self.encoder.build()
        self.lines = self.encoder.encode().splitlines()

    def test_variable_index(self) -> None:
        # 5 locations per card
        self.assertEqual(self.encoder.variable(0, 0), 0)
        self.assertEqual(self.encoder.variable(4, 1), 21)
        self.assertEqual(self.encoder.variable(5, 4), 29)
        with self.assertRaises(IndexError):
            self.encoder.variable(6, 0)
        with self.assertRaises(IndexError):
            self.encoder.variable(0, 5)

    def test_counts(self) -> None:
        self.assertEqual(self.instance.variable_count, 30)
        # 30 unary + 6 cards + 3 case-file slots
        self.assertEqual(len(self.instance.constraints), 39)

    def test_global_max(self) -> None:
        # Four 50% variables, each contributing ln 2
        self.assertAlmostEqual(self.instance.global_max, 4 * math.log(2))
        self.assertEqual(self.instance.upper_bound, 3)

    def test_header(self) -> None:
        self.assertEqual(self.lines[0], "ClueGame 30 2 39 3")
        self.assertEqual(self.lines[1], " ".join(["2"] * 30))

    def test_unary_tables(self) -> None:
        # Card 0 at the observer: impossible
        self.assertEqual(self.lines[2:5], ["1 0 0 2", "0 0", "1 3"])
        # Card 0 in the suspect case file: certain
        self.assertEqual(self.lines[8:11], ["1 2 0 2", "0 3", "1 0"])

    def test_uncertain_unary_table(self) -> None:
        start = self.lines.index("1 21 0 2")
        self.assertEqual(
            self.lines[start:start + 3], ["1 21 0 2", "0 0.69315", "1 0.69315"],
        )

    def test_one_location_per_card(self) -> None:
        start = 2 + 30 * 3
        self.assertEqual(self.lines[start], "5 0 1 2 3 4 3 5")
        self.assertEqual(
            self.lines[start + 1:start + 6],
            [
                "1 0 0 0 0 0",
                "0 1 0 0 0 0",
                "0 0 1 0 0 0",
                "0 0 0 1 0 0",
                "0 0 0 0 1 0",
            ],
        )

    def test_one_card_per_case_file(self) -> None:
        start = 2 + 30 * 3 + 6 * 6
        self.assertEqual(
            self.lines[start:],
            [
                "2 2 7 3 2", "1 0 0", "0 1 0",
                "2 13 18 3 2", "1 0 0", "0 1 0",
                "2 24 29 3 2", "1 0 0", "0 1 0",
            ],
        )

    def test_no_placeholder_left(self) -> None:
        for line in self.lines[2:]:
            for token in line.split():
                float(token)

    def test_document_ends_with_newline(self) -> None:
        self.assertTrue(self.encoder.encode().endswith("\n"))


class TestClueConstraints(unittest.TestCase):
    """Tests for disjunctive clue constraints."""

    def test_clue_table_emitted_last(self) -> None:
        state = _make_clue_state()
        instance = wcsp_writer.ConstraintEncoder(state).build()
        lines = instance.render().splitlines()
        # Player index 2, 6 locations per card
        self.assertEqual(lines[-2], "3 32 68 92 0 1")
        self.assertEqual(lines[-1], f"0 0 0 {instance.upper_bound}")
        self.assertEqual(instance.constraints[-1].arity, 3)

    def test_clue_refuted_by_observer(self) -> None:
        state = _make_clue_state()
        state.record_suggestion(3, 12, 16)  # Player 3: refuted by you
        state.end_observer_turn()
        state.record_suggestion(1, 6, 15)  # Player 2: refuted by you
        instance = wcsp_writer.ConstraintEncoder(state).build()
        lines = instance.render().splitlines()
        self.assertEqual(lines[-2], "3 6 36 90 0 1")
        self.assertEqual(lines[-1], f"0 0 0 {instance.upper_bound}")
        ternary = [t for t in instance.constraints if t.arity == 3]
        self.assertEqual(len(ternary), 3)
        self.assertEqual(lines[0].split()[3], str(126 + 21 + 3 + 3))

    def test_constraint_count(self) -> None:
        state = _make_clue_state()
        instance = wcsp_writer.ConstraintEncoder(state).build()
        # 21 cards x 6 locations, 21 cards, 3 case-file slots, 1 clue
        self.assertEqual(len(instance.constraints), 126 + 21 + 3 + 1)
        self.assertEqual(instance.variable_count, 126)


class TestEncoderProperties(unittest.TestCase):
    """Invariants that hold for any state."""

    def _played_state(self) -> clue_solver.DeductionState:
        state = clue_solver.DeductionState.deal(4, seed=21)
        state.start_game()
        state.simulate_turns(25)
        return state

    def test_deterministic(self) -> None:
        state = self._played_state()
        first = wcsp_writer.ConstraintEncoder(state).encode()
        second = wcsp_writer.ConstraintEncoder(state).encode()
        self.assertEqual(first, second)

    def test_does_not_mutate_state(self) -> None:
        state = self._played_state()
        before = (
            state.hands, state.restrictions, state.unknowns,
            state.free_slots, state.disjunctive_clues,
            state.current_turn_owner, state.game_over,
        )
        wcsp_writer.ConstraintEncoder(state).encode()
        after = (
            state.hands, state.restrictions, state.unknowns,
            state.free_slots, state.disjunctive_clues,
            state.current_turn_owner, state.game_over,
        )
        self.assertEqual(before, after)

    def test_upper_bound_is_ceiling_of_contributions(self) -> None:
        state = self._played_state()
        instance = wcsp_writer.ConstraintEncoder(state).build()
        total = sum(table.worst_case for table in instance.constraints)
        self.assertAlmostEqual(instance.global_max, total)
        self.assertEqual(instance.upper_bound, math.ceil(instance.global_max))
        header = instance.render().splitlines()[0].split()
        self.assertEqual(int(header[-1]), instance.upper_bound)

    def test_unbounded_costs_render_as_upper_bound(self) -> None:
        state = self._played_state()
        instance = wcsp_writer.ConstraintEncoder(state).build()
        upper_bound = str(instance.upper_bound)
        for table in instance.constraints:
            lines = table.lines(instance.upper_bound)
            if isinstance(table.default, wcsp_writer.Unbounded):
                self.assertEqual(lines[0].split()[-2], upper_bound)
            for line, (_, cost) in zip(lines[1:], table.tuples):
                if isinstance(cost, wcsp_writer.Unbounded):
                    self.assertEqual(line.split()[-1], upper_bound)

    def test_clues_match_state(self) -> None:
        state = self._played_state()
        instance = wcsp_writer.ConstraintEncoder(state).build()
        ternary = [t for t in instance.constraints if t.arity == 3]
        self.assertEqual(len(ternary), len(state.disjunctive_clues))


if __name__ == "__main__":
    unittest.main()
