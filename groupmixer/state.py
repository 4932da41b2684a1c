"""Integer-indexed solver state built from an :class:`~groupmixer.models.ApiInput`."""

from __future__ import annotations

import itertools
import random
from typing import Optional

from groupmixer.models import (
    ApiInput,
    AttributeBalanceParams,
    AttributeBalanceParams as _AttributeBalance,
    RepeatEncounterParams,
    SolverResult,
)

ALL_GROUPS = "ALL"
CONTACTS_OBJECTIVE = "maximize_unique_contacts"


class State:
    """A schedule of people in groups over sessions, with its contact matrix and scores.

    String ids from the request are mapped to integer indices. A person's value for a
    balanced attribute is stored as a value index, or ``None`` when the person lacks it.
    """

    def __init__(self, api_input: ApiInput, rng: Optional[random.Random] = None):
        rng = rng if rng is not None else random.Random()
        problem = api_input.problem
        people = problem.people
        groups = problem.groups
        people_count = len(people)

        self.person_id_to_idx: dict[str, int] = {p.id: idx for idx, p in enumerate(people)}
        self.person_idx_to_id: list[str] = [p.id for p in people]
        self.group_id_to_idx: dict[str, int] = {g.id: idx for idx, g in enumerate(groups)}
        self.group_idx_to_id: list[str] = [g.id for g in groups]

        self.attribute_balance_constraints: list[AttributeBalanceParams] = [
            c for c in api_input.constraints if isinstance(c, _AttributeBalance)
        ]

        self.attr_key_to_idx: dict[str, int] = {}
        self.attr_val_to_idx: list[dict[str, int]] = []
        self.attr_idx_to_val: list[list[str]] = []
        for constraint in self.attribute_balance_constraints:
            if constraint.attribute_key not in self.attr_key_to_idx:
                self.attr_key_to_idx[constraint.attribute_key] = len(self.attr_key_to_idx)
                self.attr_val_to_idx.append({})
                self.attr_idx_to_val.append([])

        for person in people:
            for key, value in person.attributes.items():
                attr_idx = self.attr_key_to_idx.get(key)
                if attr_idx is None:
                    continue
                value_map = self.attr_val_to_idx[attr_idx]
                if value not in value_map:
                    value_map[value] = len(value_map)
                    self.attr_idx_to_val[attr_idx].append(value)

        self.person_attributes: list[list[Optional[int]]] = []
        for person in people:
            row: list[Optional[int]] = [None] * len(self.attr_key_to_idx)
            for key, value in person.attributes.items():
                attr_idx = self.attr_key_to_idx.get(key)
                if attr_idx is not None:
                    row[attr_idx] = self.attr_val_to_idx[attr_idx].get(value)
            self.person_attributes.append(row)

        self.w_contacts = next(
            (o.weight for o in api_input.objectives if o.type == CONTACTS_OBJECTIVE), 0.0
        )
        self.w_repetition = 0.0
        self.w_gender = 0.0
        for constraint in api_input.constraints:
            if isinstance(constraint, RepeatEncounterParams):
                self.w_repetition = constraint.penalty_weight
            elif isinstance(constraint, _AttributeBalance):
                self.w_gender = constraint.penalty_weight

        self.num_sessions = problem.num_sessions
        self.schedule: list[list[list[int]]] = [
            [[] for _ in groups] for _ in range(self.num_sessions)
        ]
        self.locations: list[list[tuple[int, int]]] = [
            [(0, 0)] * people_count for _ in range(self.num_sessions)
        ]

        order = list(range(people_count))
        for day_groups, day_locations in zip(self.schedule, self.locations):
            rng.shuffle(order)
            remaining = iter(order)
            for group_idx, (group, spec) in enumerate(zip(day_groups, groups)):
                for pos, person in enumerate(itertools.islice(remaining, spec.size)):
                    group.append(person)
                    day_locations[person] = (group_idx, pos)

        self.contact_matrix: list[list[int]] = [[0] * people_count for _ in range(people_count)]
        self.unique_contacts = 0
        self.repetition_penalty = 0
        self.gender_balance_penalty = 0
        self.recalculate_scores()

    @property
    def num_people(self) -> int:
        return len(self.person_idx_to_id)

    def recalculate_locations_from_schedule(self) -> None:
        """Rebuild the person -> (group, position) lookup from the schedule."""
        for day_groups, day_locations in zip(self.schedule, self.locations):
            for group_idx, group in enumerate(day_groups):
                for pos, person in enumerate(group):
                    day_locations[person] = (group_idx, pos)

    def _value_counts(self, group_people, attr_idx: int) -> list[int]:
        counts = [0] * len(self.attr_idx_to_val[attr_idx])
        for person in group_people:
            value_idx = self.person_attributes[person][attr_idx]
            if value_idx is not None:
                counts[value_idx] += 1
        return counts

    def _constraint_penalty(self, group_people, constraint: AttributeBalanceParams) -> int:
        attr_idx = self.attr_key_to_idx.get(constraint.attribute_key)
        if attr_idx is None:
            return 0
        counts = self._value_counts(group_people, attr_idx)
        value_map = self.attr_val_to_idx[attr_idx]
        return sum(
            (counts[value_map[value]] - desired) ** 2
            for value, desired in constraint.desired_values.items()
            if value in value_map
        )

    def recalculate_scores(self) -> None:
        """Rebuild the contact matrix, unique contacts and both penalties from the schedule."""
        n = self.num_people
        self.contact_matrix = [[0] * n for _ in range(n)]
        for day_groups in self.schedule:
            for group in day_groups:
                for p1, p2 in itertools.combinations(group, 2):
                    self.contact_matrix[p1][p2] += 1
                    self.contact_matrix[p2][p1] += 1

        unique = 0
        repetition = 0
        for i, row in enumerate(self.contact_matrix):
            for count in row[i + 1:]:
                if count > 0:
                    unique += 1
                if count > 1:
                    repetition += (count - 1) ** 2
        self.unique_contacts = unique
        self.repetition_penalty = repetition

        balance = 0
        for day_groups in self.schedule:
            for group_idx, group in enumerate(day_groups):
                group_id = self.group_idx_to_id[group_idx]
                for constraint in self.attribute_balance_constraints:
                    if constraint.group_id not in (group_id, ALL_GROUPS):
                        continue
                    balance += self._constraint_penalty(group, constraint)
        self.gender_balance_penalty = balance

    def group_attribute_penalty(self, group_people) -> int:
        """Penalty of one group of people under the first attribute-balance constraint."""
        if not self.attribute_balance_constraints:
            return 0
        return self._constraint_penalty(group_people, self.attribute_balance_constraints[0])

    def to_solver_result(self, final_score: float) -> SolverResult:
        """Express the schedule with string ids, keyed ``session_<n>`` then by group id."""
        schedule = {
            f"session_{day}": {
                self.group_idx_to_id[group_idx]: [self.person_idx_to_id[p] for p in group]
                for group_idx, group in enumerate(day_groups)
            }
            for day, day_groups in enumerate(self.schedule)
        }
        return SolverResult(final_score=final_score, schedule=schedule)