import copy
import random

import pytest

from groupmixer.legacy.state import Gender, LegacyState, Xorshift128Plus


def make_state(groups=3, males=5, females=4, days=4, seed=7):
    return LegacyState(groups, males, females, days, rng=random.Random(seed))


def scores(state):
    return (state.num_contacts, state.repetition_penalty, state.gender_balance_penalty)


def test_xorshift_known_first_output():
    assert Xorshift128Plus(1, 0).next() == 8388673


def test_xorshift_same_seed_same_sequence():
    a = Xorshift128Plus(12345, 67890)
    b = Xorshift128Plus(12345, 67890)
    assert [a.next() for _ in range(20)] == [next(b) for _ in range(20)]


def test_xorshift_outputs_fit_64_bits():
    gen = Xorshift128Plus((1 << 64) - 1, (1 << 64) - 1)
    assert all(0 <= gen.next() < (1 << 64) for _ in range(100))


def test_every_person_once_per_day():
    state = make_state()
    for day_groups in state.schedule:
        people = sorted(p for group in day_groups for p in group)
        assert people == list(range(state.total_people))


def test_group_sizes_split_evenly():
    state = LegacyState(3, 4, 3, 2, rng=random.Random(1))
    for day_groups in state.schedule:
        assert [len(g) for g in day_groups] == [3, 2, 2]


def test_locations_match_schedule():
    state = make_state()
    for day, day_groups in enumerate(state.schedule):
        for group_idx, group in enumerate(day_groups):
            for pos, person in enumerate(group):
                assert state.locations[day][person] == (group_idx, pos)


def test_genders_males_first():
    state = LegacyState(2, 3, 2, 1, rng=random.Random(0))
    assert state.genders == [Gender.MALE] * 3 + [Gender.FEMALE] * 2


def test_same_seed_same_state():
    a = make_state(seed=11)
    b = make_state(seed=11)
    assert a.schedule == b.schedule
    assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]


def test_initial_scores_match_recalculation():
    state = make_state()
    before = scores(state)
    contacts = copy.deepcopy(state.contacts)
    state.recalculate_all_scores()
    assert scores(state) == before
    assert state.contacts == contacts


def test_contacts_symmetric():
    state = make_state()
    n = state.total_people
    assert all(state.contacts[i][j] == state.contacts[j][i] for i in range(n) for j in range(n))


def test_score_delta_matches_full_recalculation():
    state = make_state()
    picker = random.Random(99)
    checked = 0
    for _ in range(200):
        day = picker.randrange(state.num_days)
        p1, p2 = picker.sample(range(state.total_people), 2)
        if state.locations[day][p1][0] == state.locations[day][p2][0]:
            continue
        before = scores(state)
        delta = state.score_delta_of_swap(day, p1, p2)
        state.swap_people(day, p1, p2)
        state.recalculate_all_scores()
        assert tuple(a - b for a, b in zip(scores(state), before)) == delta
        checked += 1
    assert checked > 0


def test_swap_moves_people():
    state = make_state()
    day = 0
    p1 = state.schedule[day][0][0]
    p2 = state.schedule[day][1][0]
    state.swap_people(day, p1, p2)
    assert state.schedule[day][0][0] == p2
    assert state.schedule[day][1][0] == p1
    assert state.locations[day][p1] == (1, 0)
    assert state.locations[day][p2] == (0, 0)


def test_same_group_swap_is_noop():
    state = make_state()
    p1, p2 = state.schedule[0][0][:2]
    before = copy.deepcopy(state.schedule)
    assert state.score_delta_of_swap(0, p1, p2) == (0, 0, 0)
    state.swap_people(0, p1, p2)
    assert state.schedule == before


def test_annealing_keeps_scores_consistent():
    state = make_state()
    accepted = sum(state.annealing_step(10.0, 1.0, 0.2, 0.5) for _ in range(500))
    incremental = scores(state)
    contacts = copy.deepcopy(state.contacts)
    state.recalculate_all_scores()
    assert scores(state) == incremental
    assert state.contacts == contacts
    assert accepted > 0


def test_immovable_people_never_move():
    state = make_state()
    state.set_immovable_people([0, 1])
    before = [(day[0], day[1]) for day in state.locations]
    for _ in range(500):
        state.annealing_step(100.0, 1.0, 1.0, 1.0)
    assert [(day[0], day[1]) for day in state.locations] == before
    assert state.immovable[:2] == [True, True]


def test_set_immovable_out_of_range():
    state = make_state()
    with pytest.raises(IndexError):
        state.set_immovable_people([state.total_people])


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        LegacyState(2, -1, 3, 2)


def test_annealing_without_days_rejected():
    state = LegacyState(2, 2, 2, 0, rng=random.Random(3))
    with pytest.raises(ValueError):
        state.annealing_step(1.0, 1.0, 1.0, 1.0)


def test_zero_groups_has_no_contacts():
    state = LegacyState(0, 2, 2, 2, rng=random.Random(3))
    assert state.schedule == [[], []]
    assert scores(state) == (0, 0, 0)


def test_format_contacts_and_penalties():
    state = make_state()
    assert state.format_contacts() == f"Total number of contacts: {state.num_contacts}"
    assert state.format_penalties().splitlines() == [
        f"Total repetition penalty: {state.repetition_penalty}",
        f"Total gender balance penalty: {state.gender_balance_penalty}",
    ]


def test_format_schedule_lists_every_group():
    state = LegacyState(2, 2, 2, 2, rng=random.Random(5))
    lines = state.format_schedule().splitlines()
    assert lines[0] == "Day 0"
    assert lines[3] == "Day 1"
    for line, group in zip(lines[1:3], state.schedule[0]):
        expected = "".join(f"{p}{state.genders[p].value} " for p in group)
        assert line == f"Group {state.schedule[0].index(group)}: {expected}"
    assert "Male" in lines[1] + lines[2] and "Female" in lines[1] + lines[2]