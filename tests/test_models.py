import pytest

from groupmixer.models import (
    ApiInput,
    AttributeBalanceParams,
    ImmovablePersonParams,
    InputError,
    RepeatEncounterParams,
    SimulatedAnnealingParams,
    SolverResult,
    StopConditions,
    constraint_from_dict,
    constraint_to_dict,
)


def sample_dict():
    return {
        "people": [
            {"id": f"p{i}", "attributes": {"gender": "M" if i % 2 == 0 else "F"}}
            for i in range(4)
        ],
        "groups": [{"id": "g0", "size": 2}, {"id": "g1", "size": 2}],
        "num_sessions": 3,
        "objectives": [{"type": "maximize_unique_contacts", "weight": 1.0}],
        "constraints": [
            {
                "type": "AttributeBalance",
                "group_id": "ALL",
                "attribute_key": "gender",
                "desired_values": {"M": 1, "F": 1},
                "penalty_weight": 10.0,
            },
            {
                "type": "RepeatEncounter",
                "max_allowed_encounters": 1,
                "penalty_function": "squared",
                "penalty_weight": 2.0,
            },
        ],
        "solver_type": "SimulatedAnnealing",
        "stop_conditions": {
            "max_iterations": 1000,
            "time_limit_seconds": None,
            "no_improvement_iterations": None,
        },
        "initial_temperature": 1.0,
        "final_temperature": 0.0001,
        "cooling_schedule": "geometric",
    }


def test_round_trip_preserves_document():
    data = sample_dict()
    assert ApiInput.from_dict(data).to_dict() == data


def test_parsed_fields():
    api = ApiInput.from_dict(sample_dict())
    assert [p.id for p in api.problem.people] == ["p0", "p1", "p2", "p3"]
    assert api.problem.people[1].attributes == {"gender": "F"}
    assert api.problem.num_sessions == 3
    assert isinstance(api.constraints[0], AttributeBalanceParams)
    assert api.constraints[0].desired_values == {"M": 1, "F": 1}
    assert isinstance(api.constraints[1], RepeatEncounterParams)
    assert api.solver.stop_conditions.max_iterations == 1000
    assert api.solver.solver_params == SimulatedAnnealingParams(1.0, 0.0001, "geometric")


def test_missing_solver_params_gives_none():
    data = sample_dict()
    for key in ("initial_temperature", "final_temperature", "cooling_schedule"):
        del data[key]
    api = ApiInput.from_dict(data)
    assert api.solver.solver_params is None
    assert "initial_temperature" not in api.to_dict()


def test_params_ignored_for_other_solver_type():
    data = sample_dict()
    data["solver_type"] = "HillClimbing"
    assert ApiInput.from_dict(data).solver.solver_params is None


def test_empty_stop_conditions():
    data = sample_dict()
    data["stop_conditions"] = {}
    assert ApiInput.from_dict(data).solver.stop_conditions == StopConditions()


def test_integer_weight_becomes_float():
    data = sample_dict()
    data["objectives"][0]["weight"] = 1
    weight = ApiInput.from_dict(data).objectives[0].weight
    assert weight == 1.0 and isinstance(weight, float)


@pytest.mark.parametrize("key", ["people", "groups", "num_sessions", "objectives",
                                 "constraints", "solver_type", "stop_conditions"])
def test_missing_required_field(key):
    data = sample_dict()
    del data[key]
    with pytest.raises(InputError):
        ApiInput.from_dict(data)


@pytest.mark.parametrize("value", [-1, 1.5, True, "3"])
def test_bad_num_sessions(value):
    data = sample_dict()
    data["num_sessions"] = value
    with pytest.raises(InputError):
        ApiInput.from_dict(data)


def test_bad_group_size_is_value_error():
    data = sample_dict()
    data["groups"][0]["size"] = -2
    with pytest.raises(ValueError):
        ApiInput.from_dict(data)


def test_unknown_constraint_type():
    with pytest.raises(InputError):
        constraint_from_dict({"type": "Nonexistent"})


def test_constraint_missing_field():
    with pytest.raises(InputError):
        constraint_from_dict({"type": "ImmovablePerson", "person_id": "p0", "group_id": "g0"})


def test_non_object_input():
    with pytest.raises(InputError):
        ApiInput.from_dict([1, 2, 3])


@pytest.mark.parametrize(
    "constraint",
    [
        RepeatEncounterParams(1, "linear", 0.5),
        AttributeBalanceParams("g0", "gender", {"M": 2}, 3.0),
        ImmovablePersonParams("p0", "g1", 2),
    ],
)
def test_constraint_round_trip(constraint):
    assert constraint_from_dict(constraint_to_dict(constraint)) == constraint


def test_constraint_tag():
    data = constraint_to_dict(ImmovablePersonParams("p0", "g1", 2))
    assert data["type"] == "ImmovablePerson"


def test_constraint_to_dict_rejects_other_objects():
    with pytest.raises(TypeError):
        constraint_to_dict(StopConditions())


def test_solver_result_to_dict():
    result = SolverResult(
        final_score=4.5,
        schedule={"session_0": {"g0": ["p0", "p1"], "g1": ["p2"]}},
    )
    assert result.to_dict() == {
        "final_score": 4.5,
        "schedule": {"session_0": {"g0": ["p0", "p1"], "g1": ["p2"]}},
    }