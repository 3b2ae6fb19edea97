from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from typing import (
    Dict,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Tuple,
)


@dataclass(frozen=True)
class ParikhVector:
    """
    Mapping from event names to the number of their occurrences.

    Events that are not present count 0, zero entries are never stored, so two vectors are equal
    iff they agree on every event. Counts of vectors describing words are non-negative, the
    vectors are however used also as cone coordinates and cycle effects, where negative counts
    are allowed.
    """
    counts: Tuple[Tuple[str, int], ...] = ()

    def __post_init__(self):
        normalized = tuple(sorted((event, count) for event, count in self.counts if count != 0))
        object.__setattr__(self, 'counts', normalized)

    @staticmethod
    def from_word(word: Iterable[str]) -> ParikhVector:
        return ParikhVector.from_mapping(Counter(word))

    @staticmethod
    def from_mapping(mapping: Mapping[str, int]) -> ParikhVector:
        return ParikhVector(tuple(mapping.items()))

    @staticmethod
    def of(event: str, count: int = 1) -> ParikhVector:
        return ParikhVector(((event, count),))

    def as_dict(self) -> Dict[str, int]:
        return dict(self.counts)

    def get(self, event: str) -> int:
        for label, count in self.counts:
            if label == event:
                return count
        return 0

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(label for label, _ in self.counts)

    def is_zero(self) -> bool:
        return not self.counts

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self.counts)

    def __add__(self, other: ParikhVector) -> ParikhVector:
        result = Counter(self.as_dict())
        for event, count in other.counts:
            result[event] += count
        return ParikhVector.from_mapping(result)

    def __sub__(self, other: ParikhVector) -> ParikhVector:
        return self + other.scale(-1)

    def scale(self, factor: int) -> ParikhVector:
        return ParikhVector(tuple((event, factor * count) for event, count in self.counts))

    def restrict(self, labels: Iterable[str]) -> ParikhVector:
        """Forget the counts of all events outside of the given labels."""
        kept = set(labels)
        return ParikhVector(tuple((event, count) for event, count in self.counts if event in kept))

    def try_compare(self, other: ParikhVector) -> Optional[int]:
        """
        Compare the vectors componentwise.

        :returns: -1 if self < other, 0 if they are equal, 1 if self > other and None if the vectors
                  are incomparable.
        """
        some_smaller = False
        some_greater = False
        for event in set(self.labels).union(other.labels):
            difference = self.get(event) - other.get(event)
            if difference < 0:
                some_smaller = True
            elif difference > 0:
                some_greater = True

        if some_smaller and some_greater:
            return None
        if some_smaller:
            return -1
        if some_greater:
            return 1
        return 0

    def __le__(self, other: ParikhVector) -> bool:
        return self.try_compare(other) in (-1, 0)

    def __lt__(self, other: ParikhVector) -> bool:
        return self.try_compare(other) == -1

    def __str__(self) -> str:
        return '{' + ', '.join(f'{event}={count}' for event, count in self.counts) + '}'
