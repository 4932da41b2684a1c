"""Schedule state for the fixed two-gender group mixing problem."""

from __future__ import annotations

import itertools
import math
import random
from enum import Enum
from typing import Optional

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1
_U64_MAX_AS_FLOAT = float(_MASK64)


class Gender(Enum):
    MALE = "Male"
    FEMALE = "Female"


class Xorshift128Plus:
    """The xorshift128+ generator over 64-bit words."""

    def __init__(self, a: int, b: int):
        self.a = a & _MASK64
        self.b = b & _MASK64

    def next(self) -> int:
        t = self.a
        s = self.b
        self.a = s
        t ^= (t << 23) & _MASK64
        t ^= t >> 17
        t ^= s ^ (s >> 26)
        self.b = t
        return (t + s) & _MASK64

    def __iter__(self):
        return self

    def __next__(self) -> int:
        return self.next()


def _leave_delta(count: int) -> tuple[int, int]:
    """Contact and repetition change when a pair that met ``count`` times meets once less."""
    contact = -1 if count == 1 else 0
    repetition = (count - 2) ** 2 - (count - 1) ** 2 if count >= 2 else 0
    return contact, repetition


def _join_delta(count: int) -> tuple[int, int]:
    """Contact and repetition change when a pair that met ``count`` times meets once more."""
    contact = 1 if count == 0 else 0
    repetition = count ** 2 - (count - 1) ** 2 if count >= 1 else 0
    return contact, repetition


def _acceptance_threshold(score_delta: float, temp: float) -> float:
    if temp == 0.0:
        if score_delta == 0.0:
            return math.nan
        return 0.0 if score_delta < 0.0 else math.inf
    try:
        return math.exp(score_delta / temp)
    except OverflowError:
        return math.inf


class LegacyState:
    """A multi-day assignment of men and women to equally sized groups."""

    def __init__(
        self,
        num_groups: int,
        num_males: int,
        num_females: int,
        num_days: int,
        rng: Optional[random.Random] = None,
    ):
        for name, value in (
            ("num_groups", num_groups),
            ("num_males", num_males),
            ("num_females", num_females),
            ("num_days", num_days),
        ):
            if value < 0:
                raise ValueError(f"{name} must not be negative")
        rng = rng if rng is not None else random.Random()

        self.num_groups = num_groups
        self.num_days = num_days
        self.total_people = num_males + num_females
        self.genders = [Gender.MALE] * num_males + [Gender.FEMALE] * num_females
        self.immovable = [False] * self.total_people
        self.schedule: list[list[list[int]]] = [
            [[] for _ in range(num_groups)] for _ in range(num_days)
        ]
        self.locations: list[list[tuple[int, int]]] = [
            [(0, 0)] * self.total_people for _ in range(num_days)
        ]
        self.contacts = [[0] * self.total_people for _ in range(self.total_people)]
        self.num_contacts = 0
        self.repetition_penalty = 0
        self.gender_balance_penalty = 0
        self._rnd = Xorshift128Plus(rng.getrandbits(64), rng.getrandbits(64))

        self._assign_randomly(rng)
        self.recalculate_all_scores()

    def _assign_randomly(self, rng: random.Random) -> None:
        if self.num_groups == 0:
            return
        base, extra = divmod(self.total_people, self.num_groups)
        people = list(range(self.total_people))
        for day_groups, day_locations in zip(self.schedule, self.locations):
            rng.shuffle(people)
            remaining = iter(people)
            for group_idx, group in enumerate(day_groups):
                size = base + (1 if group_idx < extra else 0)
                for pos, person in enumerate(itertools.islice(remaining, size)):
                    group.append(person)
                    day_locations[person] = (group_idx, pos)

    def _male_count(self, group: list[int]) -> int:
        return sum(1 for person in group if self.genders[person] is Gender.MALE)

    def _group_gender_penalty(self, group: list[int]) -> int:
        males = self._male_count(group)
        females = len(group) - males
        return (males - females) ** 2

    def _check_person(self, person: int) -> None:
        if not 0 <= person < self.total_people:
            raise IndexError(f"person {person} out of range")

    def recalculate_all_scores(self) -> None:
        """Rebuild the contact matrix and all scores from the schedule."""
        n = self.total_people
        self.contacts = [[0] * n for _ in range(n)]
        unique = 0
        for day_groups in self.schedule:
            for group in day_groups:
                for p1, p2 in itertools.combinations(group, 2):
                    if self.contacts[p1][p2] == 0:
                        unique += 1
                    self.contacts[p1][p2] += 1
                    self.contacts[p2][p1] += 1
        self.num_contacts = unique
        self.repetition_penalty = sum(
            (count - 1) ** 2
            for i, row in enumerate(self.contacts)
            for count in row[i + 1:]
            if count > 1
        )
        self.gender_balance_penalty = sum(
            self._group_gender_penalty(group)
            for day_groups in self.schedule
            for group in day_groups
        )

    def set_immovable_people(self, person_ids) -> None:
        """Mark people who must never be swapped."""
        for person in person_ids:
            self._check_person(person)
            self.immovable[person] = True

    def swap_people(self, day: int, p1: int, p2: int) -> None:
        """Exchange two people's places on one day, updating contacts but not scores."""
        self._check_person(p1)
        self._check_person(p2)
        g1, pos1 = self.locations[day][p1]
        g2, pos2 = self.locations[day][p2]
        if g1 == g2:
            return

        for member in self.schedule[day][g1]:
            if member != p1:
                self.contacts[p1][member] -= 1
                self.contacts[member][p1] -= 1
                self.contacts[p2][member] += 1
                self.contacts[member][p2] += 1
        for member in self.schedule[day][g2]:
            if member != p2:
                self.contacts[p2][member] -= 1
                self.contacts[member][p2] -= 1
                self.contacts[p1][member] += 1
                self.contacts[member][p1] += 1

        self.schedule[day][g1][pos1] = p2
        self.schedule[day][g2][pos2] = p1
        self.locations[day][p1] = (g2, pos2)
        self.locations[day][p2] = (g1, pos1)

    def score_delta_of_swap(self, day: int, p1: int, p2: int) -> tuple[int, int, int]:
        """Return (contact, repetition, gender) deltas that swapping p1 and p2 would cause."""
        self._check_person(p1)
        self._check_person(p2)
        g1, _ = self.locations[day][p1]
        g2, _ = self.locations[day][p2]
        if g1 == g2:
            return 0, 0, 0

        contact_delta = 0
        repetition_delta = 0
        for leaving, joining, group in ((p1, p2, g1), (p2, p1, g2)):
            for member in self.schedule[day][group]:
                if member == leaving:
                    continue
                for contact, repetition in (
                    _leave_delta(self.contacts[leaving][member]),
                    _join_delta(self.contacts[joining][member]),
                ):
                    contact_delta += contact
                    repetition_delta += repetition

        gender_delta = 0
        if self.genders[p1] is not self.genders[p2]:
            group1 = self.schedule[day][g1]
            group2 = self.schedule[day][g2]
            old_penalty = self._group_gender_penalty(group1) + self._group_gender_penalty(group2)
            g1_males = self._male_count(group1)
            g1_females = len(group1) - g1_males
            g2_males = self._male_count(group2)
            g2_females = len(group2) - g2_males
            shift = 1 if self.genders[p1] is Gender.MALE else -1
            new_penalty = ((g1_males - shift) - (g1_females + shift)) ** 2 + (
                (g2_males + shift) - (g2_females - shift)
            ) ** 2
            gender_delta = new_penalty - old_penalty

        return contact_delta, repetition_delta, gender_delta

    def annealing_step(
        self, temp: float, w_contacts: float, w_repetition: float, w_gender: float
    ) -> bool:
        """Try one random swap and keep it by the annealing rule; return whether it was kept."""
        if self.num_days == 0 or self.total_people == 0:
            raise ValueError("annealing needs at least one day and one person")
        day = self.random() % self.num_days
        p1 = (self.random() & _MASK32) % self.total_people
        p2 = (self.random() & _MASK32) % self.total_people
        if p1 == p2 or self.immovable[p1] or self.immovable[p2]:
            return False

        contact_delta, repetition_delta, gender_delta = self.score_delta_of_swap(day, p1, p2)
        score_delta = (
            w_contacts * contact_delta
            - w_repetition * repetition_delta
            - w_gender * gender_delta
        )
        accepted = score_delta > 0.0 or (
            self.random() / _U64_MAX_AS_FLOAT < _acceptance_threshold(score_delta, temp)
        )
        if not accepted:
            return False

        self.swap_people(day, p1, p2)
        self.num_contacts += contact_delta
        self.repetition_penalty += repetition_delta
        self.gender_balance_penalty += gender_delta
        return True

    def random(self) -> int:
        """Next 64-bit value from the state's own generator."""
        return self._rnd.next()

    def format_contacts(self) -> str:
        return f"Total number of contacts: {self.num_contacts}"

    def format_penalties(self) -> str:
        return (
            f"Total repetition penalty: {self.repetition_penalty}\n"
            f"Total gender balance penalty: {self.gender_balance_penalty}"
        )

    def format_schedule(self) -> str:
        lines = []
        for day, day_groups in enumerate(self.schedule):
            lines.append(f"Day {day}")
            for group_idx, group in enumerate(day_groups):
                members = "".join(f"{person}{self.genders[person].value} " for person in group)
                lines.append(f"Group {group_idx}: {members}")
        return "\n".join(lines)