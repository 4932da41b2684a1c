"""Simulated-annealing runs over the fixed two-gender group mixing problem."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Optional, TextIO

from tqdm import tqdm

from groupmixer.legacy.state import LegacyState

FINAL_ITERATIONS = 1_000_000
FINAL_GROUPS = 5
FINAL_MALES = 15
FINAL_FEMALES = 15
FINAL_DAYS = 10
STARTING_CANDIDATES = 1000


def run_simulated_annealing(
    state: LegacyState,
    num_iterations: int,
    temp_start: float,
    temp_end: float,
    w_contacts: float,
    w_repetition: float,
    w_gender: float,
    out: Optional[TextIO] = None,
) -> LegacyState:
    """Anneal ``state`` geometrically from ``temp_start`` to ``temp_end``, reporting to ``out``."""
    out = out if out is not None else sys.stdout

    print("\nInitial state:", file=out)
    print(state.format_contacts(), file=out)
    print(state.format_penalties(), file=out)

    temp = temp_start
    if num_iterations > 0:
        cooling = (temp_start / temp_end) ** (1.0 / num_iterations)
        for _ in tqdm(range(num_iterations), disable=None):
            state.annealing_step(temp, w_contacts, w_repetition, w_gender)
            temp /= cooling

    print("\nFinal state:", file=out)
    print(state.format_contacts(), file=out)
    print(state.format_penalties(), file=out)
    print(state.format_schedule(), file=out)
    return state


def run_algorithms() -> LegacyState:
    """A small demonstration run: two groups of four over two days."""
    state = LegacyState(2, 4, 4, 2)
    return run_simulated_annealing(state, 1000, 100.0, 1.0, 1.0, 1.0, 1.0)


def run_final_algorithm() -> LegacyState:
    """Pick the best of many random starts, then anneal it for a long run."""
    print(
        f"Finding a good starting state by running {STARTING_CANDIDATES} "
        "random initializations..."
    )
    best = LegacyState(FINAL_GROUPS, FINAL_MALES, FINAL_FEMALES, FINAL_DAYS)
    for _ in tqdm(range(STARTING_CANDIDATES), disable=None):
        candidate = LegacyState(FINAL_GROUPS, FINAL_MALES, FINAL_FEMALES, FINAL_DAYS)
        if candidate.num_contacts > best.num_contacts:
            best = candidate
    print(f"Best initial contacts: {best.num_contacts}")

    started = time.perf_counter()
    result = run_simulated_annealing(
        best,
        FINAL_ITERATIONS,
        1000.0,
        0.001,
        1.0,
        0.2,
        0.5,
    )
    elapsed = time.perf_counter() - started
    print(f"\nSimulated annealing algorithm took {elapsed} seconds.")
    return result


def main(argv: Optional[list[str]] = None) -> int:
    """Run the long two-gender annealing and print its outcome."""
    parser = argparse.ArgumentParser(
        description="Distribute men and women over groups for several days, "
        "maximising distinct contacts."
    )
    parser.parse_args(argv)
    print("Starting PeopleDistributor...")
    run_final_algorithm()
    print("...PeopleDistributor finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())