"""Solver algorithms that improve a :class:`~groupmixer.state.State`."""

from __future__ import annotations

import logging
import math
import random
from abc import ABC, abstractmethod
from typing import Optional

from groupmixer.models import ApiInput, SimulatedAnnealingParams, SolverResult
from groupmixer.moves import apply_swap, calculate_score_delta
from groupmixer.state import State

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100_000


def _default_params() -> SimulatedAnnealingParams:
    return SimulatedAnnealingParams(
        initial_temperature=1.0,
        final_temperature=0.001,
        cooling_schedule="geometric",
    )


def _weighted_score(state: State) -> float:
    return (
        state.unique_contacts * state.w_contacts
        - state.repetition_penalty * state.w_repetition
        - state.gender_balance_penalty * state.w_gender
    )


class Solver(ABC):
    """An algorithm that turns an initial state into a final schedule."""

    @abstractmethod
    def solve(self, state: State) -> SolverResult:
        """Improve ``state`` in place and return the resulting schedule."""


class SimulatedAnnealing(Solver):
    """Random pairwise swaps accepted by the Metropolis rule under a cooling temperature."""

    def __init__(self, api_input: ApiInput, rng: Optional[random.Random] = None):
        params = api_input.solver.solver_params
        self.params = params if params is not None else _default_params()
        if self.params.initial_temperature <= 0 or self.params.final_temperature <= 0:
            raise ValueError("temperatures must be positive")
        max_iterations = api_input.solver.stop_conditions.max_iterations
        self.max_iterations = (
            max_iterations if max_iterations is not None else DEFAULT_MAX_ITERATIONS
        )
        self._rng = rng if rng is not None else random.Random()

    def solve(self, state: State) -> SolverResult:
        rng = self._rng
        iterations = self.max_iterations
        initial = self.params.initial_temperature
        final = self.params.final_temperature
        if iterations and (state.num_people == 0 or state.num_sessions == 0):
            raise ValueError("annealing needs at least one person and one session")

        temp = initial
        cooling_rate = (final / initial) ** (1.0 / iterations) if iterations else 1.0
        linear_step = (initial - final) / iterations if iterations else 0.0
        linear = self.params.cooling_schedule == "linear"

        logger.info("Simulated Annealing starting...")
        logger.info(" -> Initial Temperature: %s", temp)
        logger.info(" -> Max Iterations: %s", iterations)
        logger.info(
            " -> Initial Scores: Contacts=%s, Repetition Penalty=%s, Gender Balance Penalty=%s",
            state.unique_contacts,
            state.repetition_penalty,
            state.gender_balance_penalty,
        )

        num_people = state.num_people
        for _ in range(iterations):
            p1 = rng.randrange(num_people)
            p2 = rng.randrange(num_people)
            day = rng.randrange(state.num_sessions)

            if state.locations[day][p1][0] != state.locations[day][p2][0]:
                deltas = calculate_score_delta(state, day, p1, p2)
                contact_delta, repetition_delta, balance_delta = deltas
                score_delta = (
                    contact_delta * state.w_contacts
                    - repetition_delta * state.w_repetition
                    - balance_delta * state.w_gender
                )
                if score_delta >= 0.0 or rng.random() < math.exp(score_delta / temp):
                    apply_swap(state, day, p1, p2, deltas)

            if linear:
                temp -= linear_step
            else:
                temp *= cooling_rate
            if temp < final:
                temp = final

        final_score = _weighted_score(state)
        logger.info("Solver finished.")
        logger.info(
            " -> Final Scores: Contacts=%s, Repetition Penalty=%s, Gender Balance Penalty=%s",
            state.unique_contacts,
            state.repetition_penalty,
            state.gender_balance_penalty,
        )
        logger.info(" -> Final Weighted Score: %s", final_score)
        return state.to_solver_result(final_score)