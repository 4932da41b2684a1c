"""Swap moves on a :class:`~groupmixer.state.State`: score deltas and applying swaps."""

from __future__ import annotations

from typing import NamedTuple, Optional

from groupmixer.models import AttributeBalanceParams
from groupmixer.state import State


class ScoreDelta(NamedTuple):
    """Changes in unique contacts, repetition penalty and attribute-balance penalty."""

    contacts: int
    repetition: int
    attribute_balance: int


def _leave_delta(count: int) -> tuple[int, int]:
    """Contact and repetition change when a pair that met ``count`` times meets once less."""
    contact = -1 if count == 1 else 0
    repetition = (count - 2) ** 2 - (count - 1) ** 2 if count > 1 else 0
    return contact, repetition


def _join_delta(count: int) -> tuple[int, int]:
    """Contact and repetition change when a pair that met ``count`` times meets once more."""
    contact = 1 if count == 0 else 0
    repetition = count ** 2 - (count - 1) ** 2 if count > 0 else 0
    return contact, repetition


def _value_counts(state: State, group_people, attr_idx: int) -> list[int]:
    counts = [0] * len(state.attr_idx_to_val[attr_idx])
    for person in group_people:
        value_idx = state.person_attributes[person][attr_idx]
        if value_idx is not None:
            counts[value_idx] += 1
    return counts


def _incremental_penalty(
    state: State,
    counts: list[int],
    constraint: AttributeBalanceParams,
    attr_idx: int,
    value_in: Optional[int],
    value_out: Optional[int],
) -> int:
    """Penalty change of one group when a person with ``value_out`` is replaced by ``value_in``."""
    if value_in == value_out:
        return 0
    delta = 0
    if value_out is not None:
        desired = constraint.desired_values.get(state.attr_idx_to_val[attr_idx][value_out])
        if desired is not None:
            current = counts[value_out]
            delta += (current - 1 - desired) ** 2 - (current - desired) ** 2
            counts[value_out] -= 1
    if value_in is not None:
        desired = constraint.desired_values.get(state.attr_idx_to_val[attr_idx][value_in])
        if desired is not None:
            current = counts[value_in]
            delta += (current + 1 - desired) ** 2 - (current - desired) ** 2
            counts[value_in] += 1
    return delta


def calculate_score_delta(state: State, day: int, p1: int, p2: int) -> ScoreDelta:
    """Score changes that swapping ``p1`` and ``p2`` on ``day`` would cause.

    The two people are expected to sit in different groups on that day.
    """
    g1, _ = state.locations[day][p1]
    g2, _ = state.locations[day][p2]

    contact_delta = 0
    repetition_delta = 0
    for leaving, joining, group_idx in ((p1, p2, g1), (p2, p1, g2)):
        for member in state.schedule[day][group_idx]:
            if member == leaving:
                continue
            for contact, repetition in (
                _leave_delta(state.contact_matrix[leaving][member]),
                _join_delta(state.contact_matrix[joining][member]),
            ):
                contact_delta += contact
                repetition_delta += repetition

    balance_delta = 0
    for constraint in state.attribute_balance_constraints:
        attr_idx = state.attr_key_to_idx.get(constraint.attribute_key)
        if attr_idx is None:
            continue
        value1 = state.person_attributes[p1][attr_idx]
        value2 = state.person_attributes[p2][attr_idx]
        if value1 == value2:
            continue
        balance_delta += _incremental_penalty(
            state,
            _value_counts(state, state.schedule[day][g1], attr_idx),
            constraint,
            attr_idx,
            value2,
            value1,
        )
        balance_delta += _incremental_penalty(
            state,
            _value_counts(state, state.schedule[day][g2], attr_idx),
            constraint,
            attr_idx,
            value1,
            value2,
        )

    return ScoreDelta(contact_delta, repetition_delta, balance_delta)


def apply_swap(state: State, day: int, p1: int, p2: int, deltas) -> None:
    """Swap ``p1`` and ``p2`` on ``day`` and add precomputed ``deltas`` to the scores."""
    contact_delta, repetition_delta, balance_delta = deltas
    g1, pos1 = state.locations[day][p1]
    g2, pos2 = state.locations[day][p2]

    g1_members = [p for p in state.schedule[day][g1] if p != p1]
    g2_members = [p for p in state.schedule[day][g2] if p != p2]
    matrix = state.contact_matrix
    for member in g1_members:
        matrix[p1][member] -= 1
        matrix[member][p1] -= 1
        matrix[p2][member] += 1
        matrix[member][p2] += 1
    for member in g2_members:
        matrix[p2][member] -= 1
        matrix[member][p2] -= 1
        matrix[p1][member] += 1
        matrix[member][p1] += 1

    state.schedule[day][g1][pos1] = p2
    state.schedule[day][g2][pos2] = p1
    state.locations[day][p1] = (g2, pos2)
    state.locations[day][p2] = (g1, pos1)

    state.unique_contacts += contact_delta
    state.repetition_penalty += repetition_delta
    state.gender_balance_penalty += balance_delta