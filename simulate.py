"""Simulation script for the Clue deduction model.

Deals a classic game, plays a batch of random suggestions from every
seat, prints what the observer (player 1, "You") has deduced and the
estimated location of every card, then writes the WCSP instance that a
top-K solver can rank solutions from.
"""

import logging
import pathlib

import clue_solver
import wcsp_writer

NUM_PLAYERS = 4
NUM_TURNS = 12
SEED = 7

# Where the solver input is written.
OUTPUT_PATH = pathlib.Path("ClueSolverInput")

# Toggle to print the ground truth after the analysis.
SHOW_SOLUTION = True


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    print("=" * 60)
    print(f"Clue: {NUM_PLAYERS} players, {NUM_TURNS} simulated turns")
    print("=" * 60)
    print()

    state = clue_solver.DeductionState.classic(NUM_PLAYERS, seed=SEED)
    state.start_game()

    results = state.simulate_turns(NUM_TURNS, show_progress=True)
    for result in results:
        print(result.message)
    print()

    print(state)
    print()
    clue_solver.print_probability_table(state)
    print()

    instance = wcsp_writer.ConstraintEncoder(state).build()
    OUTPUT_PATH.write_text(instance.render())
    print(
        f"Wrote {instance.variable_count} variables and "
        f"{len(instance.constraints)} constraints to {OUTPUT_PATH} "
        f"(upper bound {instance.upper_bound})"
    )

    if SHOW_SOLUTION:
        print()
        print(state.reveal_solution())


if __name__ == "__main__":
    main()
