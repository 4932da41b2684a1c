"""Problem, configuration and result models and their JSON-shaped dict forms."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Union

_U32_MAX = (1 << 32) - 1
_U64_MAX = (1 << 64) - 1


class InputError(ValueError):
    """Raised when an input document does not describe a valid problem."""


def _as_object(value: Any, where: str) -> dict:
    if not isinstance(value, dict):
        raise InputError(f"{where} must be an object")
    return value


def _take(data: dict, key: str, where: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise InputError(f"{where}: missing field {key!r}") from None


def _as_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise InputError(f"{where} must be a string")
    return value


def _as_uint(value: Any, where: str, limit: int = _U32_MAX) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= limit:
        raise InputError(f"{where} must be an integer between 0 and {limit}")
    return value


def _as_float(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InputError(f"{where} must be a number")
    return float(value)


def _as_list(value: Any, where: str) -> list:
    if not isinstance(value, list):
        raise InputError(f"{where} must be a list")
    return value


def _str_field(data: dict, key: str, where: str) -> str:
    return _as_str(_take(data, key, where), f"{where}.{key}")


def _uint_field(data: dict, key: str, where: str) -> int:
    return _as_uint(_take(data, key, where), f"{where}.{key}")


def _float_field(data: dict, key: str, where: str) -> float:
    return _as_float(_take(data, key, where), f"{where}.{key}")


@dataclass
class Person:
    """A participant with free-form string attributes."""

    id: str
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass
class Group:
    """A group with a fixed number of places per session."""

    id: str
    size: int


@dataclass
class Objective:
    """A weighted optimisation goal, such as ``maximize_unique_contacts``."""

    type: str
    weight: float


@dataclass
class RepeatEncounterParams:
    """Penalises pairs of people who meet more than once."""

    max_allowed_encounters: int
    penalty_function: str
    penalty_weight: float


@dataclass
class AttributeBalanceParams:
    """Asks for given counts of attribute values inside a group (or ``ALL``)."""

    group_id: str
    attribute_key: str
    desired_values: dict[str, int]
    penalty_weight: float


@dataclass
class ImmovablePersonParams:
    """Pins a person to a group in one session."""

    person_id: str
    group_id: str
    session: int


Constraint = Union[RepeatEncounterParams, AttributeBalanceParams, ImmovablePersonParams]


@dataclass
class StopConditions:
    """Limits that end a solver run."""

    max_iterations: Optional[int] = None
    time_limit_seconds: Optional[int] = None
    no_improvement_iterations: Optional[int] = None


@dataclass
class SimulatedAnnealingParams:
    """Temperature settings for simulated annealing."""

    initial_temperature: float
    final_temperature: float
    cooling_schedule: str


@dataclass
class SolverConfiguration:
    """Which solver to run and how."""

    solver_type: str
    stop_conditions: StopConditions
    solver_params: Optional[SimulatedAnnealingParams] = None


@dataclass
class ProblemDefinition:
    """People, groups and the number of sessions to schedule."""

    people: list[Person]
    groups: list[Group]
    num_sessions: int


def _person_from_dict(data: Any, where: str) -> Person:
    data = _as_object(data, where)
    attributes = _as_object(_take(data, "attributes", where), f"{where}.attributes")
    return Person(
        id=_str_field(data, "id", where),
        attributes={
            _as_str(key, f"{where}.attributes key"): _as_str(value, f"{where}.attributes[{key!r}]")
            for key, value in attributes.items()
        },
    )


def _group_from_dict(data: Any, where: str) -> Group:
    data = _as_object(data, where)
    return Group(id=_str_field(data, "id", where), size=_uint_field(data, "size", where))


def _objective_from_dict(data: Any, where: str) -> Objective:
    data = _as_object(data, where)
    return Objective(type=_str_field(data, "type", where), weight=_float_field(data, "weight", where))


def _repeat_encounter_from_dict(data: dict, where: str) -> RepeatEncounterParams:
    return RepeatEncounterParams(
        max_allowed_encounters=_uint_field(data, "max_allowed_encounters", where),
        penalty_function=_str_field(data, "penalty_function", where),
        penalty_weight=_float_field(data, "penalty_weight", where),
    )


def _attribute_balance_from_dict(data: dict, where: str) -> AttributeBalanceParams:
    desired = _as_object(_take(data, "desired_values", where), f"{where}.desired_values")
    return AttributeBalanceParams(
        group_id=_str_field(data, "group_id", where),
        attribute_key=_str_field(data, "attribute_key", where),
        desired_values={
            _as_str(key, f"{where}.desired_values key"): _as_uint(
                value, f"{where}.desired_values[{key!r}]"
            )
            for key, value in desired.items()
        },
        penalty_weight=_float_field(data, "penalty_weight", where),
    )


def _immovable_person_from_dict(data: dict, where: str) -> ImmovablePersonParams:
    return ImmovablePersonParams(
        person_id=_str_field(data, "person_id", where),
        group_id=_str_field(data, "group_id", where),
        session=_uint_field(data, "session", where),
    )


_CONSTRAINT_PARSERS = {
    "RepeatEncounter": _repeat_encounter_from_dict,
    "AttributeBalance": _attribute_balance_from_dict,
    "ImmovablePerson": _immovable_person_from_dict,
}

_CONSTRAINT_TAGS = {
    RepeatEncounterParams: "RepeatEncounter",
    AttributeBalanceParams: "AttributeBalance",
    ImmovablePersonParams: "ImmovablePerson",
}


def _constraint_from_dict(data: Any, where: str) -> Constraint:
    data = _as_object(data, where)
    tag = _str_field(data, "type", where)
    try:
        parser = _CONSTRAINT_PARSERS[tag]
    except KeyError:
        raise InputError(f"{where}: unknown constraint type {tag!r}") from None
    return parser(data, where)


def constraint_from_dict(data: Any) -> Constraint:
    """Build a constraint from its ``type``-tagged dict form."""
    return _constraint_from_dict(data, "constraint")


def constraint_to_dict(constraint: Constraint) -> dict:
    """Return the ``type``-tagged dict form of a constraint."""
    try:
        tag = _CONSTRAINT_TAGS[type(constraint)]
    except KeyError:
        raise TypeError(f"not a constraint: {constraint!r}") from None
    return {"type": tag, **asdict(constraint)}


def _stop_conditions_from_dict(data: Any, where: str) -> StopConditions:
    data = _as_object(data, where)

    def optional(key: str) -> Optional[int]:
        value = data.get(key)
        return None if value is None else _as_uint(value, f"{where}.{key}", _U64_MAX)

    return StopConditions(
        max_iterations=optional("max_iterations"),
        time_limit_seconds=optional("time_limit_seconds"),
        no_improvement_iterations=optional("no_improvement_iterations"),
    )


_SA_KEYS = ("initial_temperature", "final_temperature", "cooling_schedule")


def _solver_params_from_dict(data: dict, solver_type: str) -> Optional[SimulatedAnnealingParams]:
    if solver_type != "SimulatedAnnealing" or not all(key in data for key in _SA_KEYS):
        return None
    return SimulatedAnnealingParams(
        initial_temperature=_float_field(data, "initial_temperature", "input"),
        final_temperature=_float_field(data, "final_temperature", "input"),
        cooling_schedule=_str_field(data, "cooling_schedule", "input"),
    )


@dataclass
class ApiInput:
    """A complete solver request: problem, objectives, constraints and solver setup."""

    problem: ProblemDefinition
    objectives: list[Objective]
    constraints: list[Constraint]
    solver: SolverConfiguration

    @classmethod
    def from_dict(cls, data: Any) -> "ApiInput":
        """Build a request from its flat JSON-shaped dict form."""
        data = _as_object(data, "input")
        people = _as_list(_take(data, "people", "input"), "people")
        groups = _as_list(_take(data, "groups", "input"), "groups")
        objectives = _as_list(_take(data, "objectives", "input"), "objectives")
        constraints = _as_list(_take(data, "constraints", "input"), "constraints")
        solver_type = _str_field(data, "solver_type", "input")
        return cls(
            problem=ProblemDefinition(
                people=[_person_from_dict(p, f"people[{i}]") for i, p in enumerate(people)],
                groups=[_group_from_dict(g, f"groups[{i}]") for i, g in enumerate(groups)],
                num_sessions=_uint_field(data, "num_sessions", "input"),
            ),
            objectives=[
                _objective_from_dict(o, f"objectives[{i}]") for i, o in enumerate(objectives)
            ],
            constraints=[
                _constraint_from_dict(c, f"constraints[{i}]") for i, c in enumerate(constraints)
            ],
            solver=SolverConfiguration(
                solver_type=solver_type,
                stop_conditions=_stop_conditions_from_dict(
                    _take(data, "stop_conditions", "input"), "stop_conditions"
                ),
                solver_params=_solver_params_from_dict(data, solver_type),
            ),
        )

    def to_dict(self) -> dict:
        """Return the flat JSON-shaped dict form of this request."""
        out = {
            "people": [asdict(person) for person in self.problem.people],
            "groups": [asdict(group) for group in self.problem.groups],
            "num_sessions": self.problem.num_sessions,
            "objectives": [asdict(objective) for objective in self.objectives],
            "constraints": [constraint_to_dict(c) for c in self.constraints],
            "solver_type": self.solver.solver_type,
            "stop_conditions": asdict(self.solver.stop_conditions),
        }
        if self.solver.solver_params is not None:
            out.update(asdict(self.solver.solver_params))
        return out


@dataclass
class SolverResult:
    """Final weighted score and the schedule: session key -> group id -> person ids."""

    final_score: float
    schedule: dict[str, dict[str, list[str]]]

    def to_dict(self) -> dict:
        """Return the JSON-shaped dict form of this result."""
        return {
            "final_score": self.final_score,
            "schedule": {
                session: {group: list(people) for group, people in groups.items()}
                for session, groups in self.schedule.items()
            },
        }