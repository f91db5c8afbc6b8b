"""Benchmark how well the location estimate is calibrated.

Deals many random classic games, simulates a few rounds of suggestions
in each, and compares ``get_probability`` against the ground truth.
Probabilities are grouped into deciles; a well calibrated estimate puts
the true card in a bucket about as often as the bucket's mean
probability says. Also reports the mean probability assigned to each
card's true location.
"""

import pathlib
import statistics
import sys

import tqdm

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent))

import clue_solver

NUM_GAMES = 300
NUM_PLAYERS = 4
NUM_TURNS = 8


def main() -> None:
    # bucket index -> (predicted probabilities, outcomes)
    buckets: dict[int, tuple[list[float], list[int]]] = {
        i: ([], []) for i in range(10)
    }
    true_location_probs: list[float] = []

    for game_idx in tqdm.tqdm(range(NUM_GAMES), desc="Games", unit=" games"):
        seed = game_idx * 7 + 1
        state = clue_solver.DeductionState.deal(NUM_PLAYERS, seed=seed)
        state.start_game()
        state.simulate_turns(NUM_TURNS)

        solution = state.reveal_solution()
        config = state.config
        for card in range(config.num_cards):
            holder = solution.holder(card)
            for location in range(config.num_locations):
                p = state.get_probability(card, location)
                if 0.0 < p < 1.0:
                    predicted, outcomes = buckets[min(int(p * 10), 9)]
                    predicted.append(p)
                    outcomes.append(1 if location == holder else 0)
                if location == holder:
                    true_location_probs.append(p)

    print()
    print("=" * 60)
    print(f"CALIBRATION ({NUM_GAMES} games, {NUM_PLAYERS} players, "
          f"{NUM_TURNS} turns each)")
    print("=" * 60)
    print()
    print(f"{'Bucket':<10}{'n':>8}{'Predicted':>12}{'Observed':>12}")
    for i in range(10):
        predicted, outcomes = buckets[i]
        if not predicted:
            continue
        print(
            f"{i / 10:.1f}-{(i + 1) / 10:.1f}  {len(predicted):>8}"
            f"{statistics.mean(predicted):>12.1%}"
            f"{statistics.mean(outcomes):>12.1%}"
        )
    print()
    print(
        f"Mean probability at true location: "
        f"{statistics.mean(true_location_probs):.1%}"
    )


if __name__ == "__main__":
    main()
