# groupmixer

groupmixer splits a set of people into groups over several sessions so that,
across all sessions, people meet as many different others as possible. It
improves a random starting schedule with simulated annealing, trading off:

- the number of distinct pairs of people who meet (to be maximised),
- a repetition penalty: for every pair that meets `n > 1` times, `(n - 1)²`,
- an attribute-balance penalty: for each group and each desired attribute
  value, the square of the difference between the actual and the desired
  count.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Using the solver from Python

A problem is described as a plain dictionary and turned into an `ApiInput`
with `ApiInput.from_dict` (which raises `InputError` for malformed input).
`run_solver` from `groupmixer.engine` returns a `SolverResult` with the final
weighted score and the schedule, keyed by `session_<n>` and then by group id.

```python
from groupmixer.models import ApiInput
from groupmixer.engine import run_solver

data = {
    "people": [
        {"id": f"p{i}", "attributes": {"gender": "M" if i % 2 == 0 else "F"}}
        for i in range(12)
    ],
    "groups": [{"id": f"g{i}", "size": 4} for i in range(3)],
    "num_sessions": 3,
    "objectives": [{"type": "maximize_unique_contacts", "weight": 1.0}],
    "constraints": [
        {
            "type": "RepeatEncounter",
            "max_allowed_encounters": 1,
            "penalty_function": "squared",
            "penalty_weight": 1.0,
        },
        {
            "type": "AttributeBalance",
            "group_id": "ALL",
            "attribute_key": "gender",
            "desired_values": {"M": 2, "F": 2},
            "penalty_weight": 10.0,
        },
    ],
    "solver_type": "SimulatedAnnealing",
    "stop_conditions": {"max_iterations": 50000},
    "initial_temperature": 1.0,
    "final_temperature": 0.001,
    "cooling_schedule": "geometric",
}

result = run_solver(ApiInput.from_dict(data))
print(result.final_score)
print(result.schedule["session_0"])
print(result.to_dict())
```

The final score is `contacts × w_contacts − repetition × w_repetition −
balance × w_balance`. The contacts weight comes from the
`maximize_unique_contacts` objective; the repetition weight from the last
`RepeatEncounter` constraint; the balance weight from the last
`AttributeBalance` constraint. An `AttributeBalance` constraint applies to the
group named by `group_id`, or to every group when it is `ALL`.

The cooling schedule is `linear`; any other value cools geometrically. The
annealing parameters are used only when all three of `initial_temperature`,
`final_temperature` and `cooling_schedule` are given; otherwise the solver
starts at temperature 1.0 and cools geometrically to 0.001. The run lasts
`max_iterations` steps, 100,000 if not given. Temperatures must be positive
(`ValueError` otherwise). An unknown `solver_type` raises
`UnknownSolverError`. Progress is reported through the `logging` module.

The pieces can also be used on their own: `groupmixer.state.State` holds a
schedule and its scores, `groupmixer.moves.calculate_score_delta` and
`apply_swap` evaluate and perform a swap, and
`groupmixer.annealing.SimulatedAnnealing` runs the optimisation; `State` and
`SimulatedAnnealing` take an optional `random.Random` for reproducible runs.

## HTTP server

```
groupmixer-server [--host HOST] [--port PORT]
```

starts a Flask job server, by default on `127.0.0.1:3000`:

- `POST /api/v1/jobs` with the problem above as JSON body creates a job and
  answers `201` with `{"job_id": "..."}`. A body that is not JSON answers
  `415` or `400`; one that does not describe a valid problem answers `422`.
- `GET /api/v1/jobs/<job_id>/status` and `GET /api/v1/jobs/<job_id>/result`
  both return `{"id": ..., "status": ..., "result": ...}`. The status is
  `Pending`, `Running`, `Completed` or `Failed` (the solver raised); once
  completed, `result` holds the `SolverResult` encoded as a JSON string.
  Unknown jobs answer `404`, ids that are not UUIDs `400`.

Jobs run on background threads; poll the status endpoint until the job is
completed. `create_app` in `groupmixer.server.app` builds the application
around a given `JobManager` for embedding or testing.

## Fixed-size experiment

```
groupmixer-legacy
```

runs a stand-alone experiment with a fixed layout: 30 people (15 male,
15 female) in 5 groups over 10 days. It picks the start with the most contacts
out of 1,000 random schedules, anneals it for one million steps with
temperature falling from 1000 to 0.001, and prints the scores and the final
schedule. `groupmixer.legacy.runner.run_simulated_annealing` and
`groupmixer.legacy.state.LegacyState` run the same kind of experiment with
other sizes.

## What it does not do

- Jobs are kept in memory only; they are lost when the server stops, and
  there is no way to list or cancel them.
- `ImmovablePerson` constraints are accepted but not enforced by the solver.
- `max_allowed_encounters` and `penalty_function` of `RepeatEncounter` are
  accepted but ignored: the repetition penalty is always squared and counts
  every meeting beyond the first.
- Of the stop conditions, only `max_iterations` is used;
  `time_limit_seconds` and `no_improvement_iterations` are accepted but
  ignored.
- `SimulatedAnnealing` is the only solver type.