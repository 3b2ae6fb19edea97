"""
Linear and semilinear sets of Parikh vectors.

A linear set is given by a base vector and a finite set of periods and stands for all the vectors
`base + k_1*p_1 + ... + k_n*p_n` with natural k_i. A semilinear set is a finite union of linear sets.

Equality of both classes is syntactic: two sets are equal iff they are built from the same
vectors. Two representations of the same (infinite) set of vectors can therefore compare unequal.
Semantic questions are answered by the separately named `contains`, `is_subset_of` and
`is_equivalent_to` methods.
"""
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
import functools
from typing import (
    ClassVar,
    Deque,
    FrozenSet,
    Iterator,
    List,
    Optional,
    Set,
    Tuple,
)

from overapprox.alphabet import EPSILON
from overapprox.config import synthesis_config
from overapprox.errors import SizeLimitExceeded
from overapprox.parikh import ParikhVector
from overapprox.utils import power_set_indices


@functools.lru_cache(maxsize=4096)
def _is_nonnegative_combination(target: ParikhVector, periods: Tuple[ParikhVector, ...]) -> bool:
    """Check whether target = k_1*p_1 + ... + k_n*p_n for some natural k_i (periods are non-negative)."""
    if target.is_zero():
        return True
    if not periods or any(count < 0 for _, count in target):
        return False

    coverable_labels = set()
    for period in periods:
        coverable_labels.update(period.labels)
    if not coverable_labels.issuperset(target.labels):
        return False

    period, remaining_periods = periods[0], periods[1:]
    max_repetitions = min(target.get(event) // count for event, count in period)

    for repetitions in range(max_repetitions, -1, -1):
        if _is_nonnegative_combination(target - period.scale(repetitions), remaining_periods):
            return True
    return False


@dataclass(frozen=True)
class LinearSet:
    base: ParikhVector = ParikhVector()
    periods: FrozenSet[ParikhVector] = frozenset()

    NULL: ClassVar[LinearSet]
    """The linear set containing just the zero vector."""

    def __post_init__(self):
        # The zero period does not change the represented set
        object.__setattr__(self, 'periods', frozenset(period for period in self.periods if not period.is_zero()))

    @staticmethod
    def containing_event(event: str, count: int = 1) -> LinearSet:
        """Create the linear set containing only the vector with `count` occurrences of `event`."""
        if event == EPSILON:
            raise ValueError('The empty word is not an event.')
        if count < 0:
            raise ValueError(f'Cannot contain an event a negative number of times: {event}^{count}')
        return LinearSet(base=ParikhVector.of(event, count))

    def concatenate(self, other: LinearSet) -> LinearSet:
        return LinearSet(base=self.base + other.base, periods=self.periods.union(other.periods))

    def kleene_plus(self) -> LinearSet:
        """Linear set of one or more repetitions of the base - the base becomes a period."""
        return LinearSet(base=self.base, periods=self.periods.union((self.base,)))

    def sorted_periods(self) -> List[ParikhVector]:
        return sorted(self.periods, key=lambda period: period.counts)

    def contains(self, vector: ParikhVector) -> bool:
        """Check whether the vector belongs to the (infinite) set represented by this linear set."""
        if vector == self.base:
            return True
        if self.base.try_compare(vector) != -1:
            return False
        if not self.periods:
            return False
        if any(count < 0 for period in self.periods for _, count in period):
            raise ValueError(f'Membership is decided only for linear sets with non-negative periods: {self}')

        return _is_nonnegative_combination(vector - self.base, tuple(self.sorted_periods()))

    def __str__(self) -> str:
        return '({0}+[{1}]*)'.format(self.base, ', '.join(map(str, self.sorted_periods())))


LinearSet.NULL = LinearSet()


def _linear_set_order(linear_set: LinearSet):
    return (sum(abs(count) for _, count in linear_set.base), len(linear_set.periods), str(linear_set))


@dataclass(frozen=True)
class SemilinearSet:
    linear_sets: FrozenSet[LinearSet] = frozenset()

    EMPTY: ClassVar[SemilinearSet]
    """The empty semilinear set."""

    NULL: ClassVar[SemilinearSet]
    """The semilinear set containing just the zero vector."""

    @staticmethod
    def containing(linear_set: LinearSet) -> SemilinearSet:
        return SemilinearSet(frozenset((linear_set,)))

    @staticmethod
    def containing_event(event: str, count: int = 1) -> SemilinearSet:
        return SemilinearSet.containing(LinearSet.containing_event(event, count))

    def __iter__(self) -> Iterator[LinearSet]:
        return iter(sorted(self.linear_sets, key=_linear_set_order))

    def __len__(self) -> int:
        return len(self.linear_sets)

    def union(self, other: SemilinearSet) -> SemilinearSet:
        return SemilinearSet(self.linear_sets.union(other.linear_sets))

    def concatenate(self, other: SemilinearSet) -> SemilinearSet:
        result: Set[LinearSet] = set()
        for first in self.linear_sets:
            for second in other.linear_sets:
                result.add(first.concatenate(second))
        return SemilinearSet(frozenset(result))

    def kleene_star(self) -> SemilinearSet:
        """
        Kleene star closure.

        Every subset T of the member linear sets contributes the concatenation of the Kleene plus
        closures of the members of T (the empty subset contributes the zero vector). The result has
        up to 2**len(self) members, see `SynthesisConfig.max_kleene_star_members`.
        """
        members = list(self)
        limit = synthesis_config.max_kleene_star_members
        if limit is not None and len(members) > limit:
            raise SizeLimitExceeded('Kleene star of a semilinear set', len(members), limit)

        repeated_members = [member.kleene_plus() for member in members]

        result: Set[LinearSet] = set()
        for subset in power_set_indices(len(repeated_members)):
            linear_set = LinearSet.NULL
            for index in subset:
                linear_set = linear_set.concatenate(repeated_members[index])
            result.add(linear_set)
        return SemilinearSet(frozenset(result))

    def contains(self, vector: ParikhVector) -> bool:
        return any(linear_set.contains(vector) for linear_set in self.linear_sets)

    def _surely_contains(self, linear_set: LinearSet) -> bool:
        """
        Cheap sufficient check of linear_set being a subset of this set.

        Holds if some member has all the periods of linear_set and contains its base.
        """
        for member in self.linear_sets:
            if member.periods.issuperset(linear_set.periods) and member.contains(linear_set.base):
                return True
        return False

    def find_counterexample(self, other: SemilinearSet, bound: Optional[int] = None) -> Optional[ParikhVector]:
        """
        Search for a vector of this set that is missing in the other set.

        Linear sets are infinite, so they are unrolled only until some event occurs more than
        `bound` times in the generated vectors.

        :returns: A vector contained in this set but not in other, or None if no such vector was
                  found within the bound.
        """
        if bound is None:
            bound = synthesis_config.equivalence_unrolling_bound

        for linear_set in self:
            if other._surely_contains(linear_set):
                continue

            periods = linear_set.sorted_periods()
            explored: Set[ParikhVector] = {linear_set.base}
            work_queue: Deque[ParikhVector] = deque(explored)
            while work_queue:
                vector = work_queue.popleft()
                if not other.contains(vector):
                    return vector

                for period in periods:
                    next_vector = vector + period
                    if all(count <= bound for _, count in next_vector) and next_vector not in explored:
                        explored.add(next_vector)
                        work_queue.append(next_vector)
        return None

    def is_subset_of(self, other: SemilinearSet, bound: Optional[int] = None) -> bool:
        return self.find_counterexample(other, bound) is None

    def is_equivalent_to(self, other: SemilinearSet, bound: Optional[int] = None) -> bool:
        """Semantic (bounded) equivalence, as opposed to the syntactic `==`."""
        return self.is_subset_of(other, bound) and other.is_subset_of(self, bound)

    def __str__(self) -> str:
        return '[' + ', '.join(map(str, self)) + ']'


SemilinearSet.EMPTY = SemilinearSet()
SemilinearSet.NULL = SemilinearSet.containing(LinearSet.NULL)

EMPTY = SemilinearSet.EMPTY
NULL = SemilinearSet.NULL
