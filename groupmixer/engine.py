"""Entry point that builds a state from a request and runs the requested solver."""

from __future__ import annotations

from groupmixer.annealing import SimulatedAnnealing, Solver
from groupmixer.models import ApiInput, SolverResult
from groupmixer.state import State

_SOLVERS: dict[str, type[Solver]] = {
    "SimulatedAnnealing": SimulatedAnnealing,
}


class UnknownSolverError(ValueError):
    """Raised when a request names a solver type that does not exist."""

    def __init__(self, solver_type: str):
        super().__init__(f"Unknown solver type: {solver_type}")
        self.solver_type = solver_type


def run_solver(api_input: ApiInput) -> SolverResult:
    """Build the initial state, pick the solver named in the request and run it."""
    state = State(api_input)
    solver_type = api_input.solver.solver_type
    try:
        solver_class = _SOLVERS[solver_type]
    except KeyError:
        raise UnknownSolverError(solver_type) from None
    return solver_class(api_input).solve(state)