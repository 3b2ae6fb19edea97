"""
Regions and the pure/impure mode of the synthesis.

A region assigns a place its initial marking and the arc weights of all events. The cone of the
regions is described by variables in the layout:

    pure:   [m, w_1, ..., w_E]                       (signed effect of every event)
    impure: [m, f_1, ..., f_E, b_1, ..., b_E]        (tokens produced / consumed by every event)

Everything that depends on this layout lives in the `RegionMode` bundles, so that the dimension
of the cone, the constraint rows and the interpretation of the rays always agree.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import (
    Callable,
    ClassVar,
    Dict,
    List,
    Sequence,
    Tuple,
)

from overapprox.alphabet import EventAlphabet
from overapprox.parikh import ParikhVector

Row = List[int]


@dataclass(frozen=True)
class Region:
    events: Tuple[str, ...]
    initial_marking: int
    forward: Tuple[int, ...]
    """Tokens produced into the place by every event."""
    backward: Tuple[int, ...]
    """Tokens consumed from the place by every event."""

    @staticmethod
    def from_signed_weights(events: Sequence[str], initial_marking: int,
                            weights: Sequence[Tuple[int, int]]) -> Region:
        """Create a pure region from (event index, signed weight) pairs."""
        forward = [0] * len(events)
        backward = [0] * len(events)
        for index, weight in weights:
            if weight > 0:
                forward[index] += weight
            else:
                backward[index] -= weight
        return Region(tuple(events), initial_marking, tuple(forward), tuple(backward))

    @staticmethod
    def from_weight_vectors(events: Sequence[str], initial_marking: int,
                            forward: Sequence[int], backward: Sequence[int]) -> Region:
        if not len(events) == len(forward) == len(backward):
            raise ValueError('Every event needs exactly one forward and one backward weight.')
        return Region(tuple(events), initial_marking, tuple(forward), tuple(backward))

    def _index(self, event: str) -> int:
        try:
            return self.events.index(event)
        except ValueError:
            raise ValueError(f'Event {event!r} is not one of the region events {self.events}.')

    def forward_weight(self, event: str) -> int:
        return self.forward[self._index(event)]

    def backward_weight(self, event: str) -> int:
        return self.backward[self._index(event)]

    def weight(self, event: str) -> int:
        index = self._index(event)
        return self.forward[index] - self.backward[index]

    @property
    def is_pure(self) -> bool:
        """No event both consumes and produces tokens of the place (no self-loop arcs)."""
        return all(f == 0 or b == 0 for f, b in zip(self.forward, self.backward))

    def marking_after(self, parikh_vector: ParikhVector) -> int:
        return self.initial_marking + sum(count * self.weight(event) for event, count in parikh_vector)

    def enables(self, parikh_vector: ParikhVector, event: str) -> bool:
        """Whether the place permits firing the event after the events of the vector were fired."""
        return self.marking_after(parikh_vector) >= self.backward_weight(event)

    def __str__(self) -> str:
        arcs = ', '.join(f'{event}: +{f}/-{b}' for event, f, b in zip(self.events, self.forward, self.backward))
        return f'Region(m0={self.initial_marking}, {arcs})'


def _vector_coefficients(alphabet: EventAlphabet, parikh_vector: ParikhVector) -> Row:
    return [parikh_vector.get(event) for event in alphabet]


def _unit_row(dimension: int, index: int) -> Row:
    row = [0] * dimension
    row[index] = 1
    return row


def _pure_dimension(alphabet: EventAlphabet) -> int:
    return 1 + len(alphabet)


def _pure_nonnegativity_rows(alphabet: EventAlphabet) -> List[Row]:
    # The weights are signed, only the initial marking is bounded
    return [_unit_row(_pure_dimension(alphabet), 0)]


def _pure_effect_row(alphabet: EventAlphabet, parikh_vector: ParikhVector) -> Row:
    return [0] + _vector_coefficients(alphabet, parikh_vector)


def _pure_enabling_row(alphabet: EventAlphabet, prefix: ParikhVector, event: str) -> Row:
    # m + prefix*w + w_event >= 0: the marking after firing the event is non-negative
    row = [1] + _vector_coefficients(alphabet, prefix)
    row[1 + alphabet.index_of(event)] += 1
    return row


def _pure_region_from_ray(alphabet: EventAlphabet, ray: Sequence[int]) -> Region:
    weights = [(index, weight) for index, weight in enumerate(ray[1:]) if weight != 0]
    return Region.from_signed_weights(alphabet.events, ray[0], weights)


def _impure_dimension(alphabet: EventAlphabet) -> int:
    return 1 + 2 * len(alphabet)


def _impure_nonnegativity_rows(alphabet: EventAlphabet) -> List[Row]:
    dimension = _impure_dimension(alphabet)
    return [_unit_row(dimension, index) for index in range(dimension)]


def _impure_effect_row(alphabet: EventAlphabet, parikh_vector: ParikhVector) -> Row:
    coefficients = _vector_coefficients(alphabet, parikh_vector)
    return [0] + coefficients + [-coefficient for coefficient in coefficients]


def _impure_enabling_row(alphabet: EventAlphabet, prefix: ParikhVector, event: str) -> Row:
    # m + prefix*(f - b) - b_event >= 0: the place holds enough tokens to fire the event
    row = [1] + _impure_effect_row(alphabet, prefix)[1:]
    row[1 + len(alphabet) + alphabet.index_of(event)] -= 1
    return row


def _impure_region_from_ray(alphabet: EventAlphabet, ray: Sequence[int]) -> Region:
    event_count = len(alphabet)
    return Region.from_weight_vectors(alphabet.events, ray[0],
                                      forward=ray[1:1 + event_count],
                                      backward=ray[1 + event_count:])


@dataclass(frozen=True)
class RegionMode:
    """The layout of the region variables together with everything depending on it."""
    name: str
    dimension: Callable[[EventAlphabet], int]
    nonnegativity_rows: Callable[[EventAlphabet], List[Row]]
    effect_row: Callable[[EventAlphabet, ParikhVector], Row]
    """Coefficients of the marking change caused by firing the events of the vector."""
    enabling_row: Callable[[EventAlphabet, ParikhVector, str], Row]
    """Inequality stating the event can fire after the events of the vector were fired."""
    region_from_ray: Callable[[EventAlphabet, Sequence[int]], Region]

    PURE: ClassVar[RegionMode]
    IMPURE: ClassVar[RegionMode]

    @staticmethod
    def from_name(name: str) -> RegionMode:
        modes: Dict[str, RegionMode] = {mode.name: mode for mode in (RegionMode.PURE, RegionMode.IMPURE)}
        try:
            return modes[name.lower()]
        except KeyError:
            raise ValueError(f'Unknown region mode {name!r}, expected one of {sorted(modes)}.')

    def __str__(self) -> str:
        return self.name


RegionMode.PURE = RegionMode(name='pure',
                             dimension=_pure_dimension,
                             nonnegativity_rows=_pure_nonnegativity_rows,
                             effect_row=_pure_effect_row,
                             enabling_row=_pure_enabling_row,
                             region_from_ray=_pure_region_from_ray)

RegionMode.IMPURE = RegionMode(name='impure',
                               dimension=_impure_dimension,
                               nonnegativity_rows=_impure_nonnegativity_rows,
                               effect_row=_impure_effect_row,
                               enabling_row=_impure_enabling_row,
                               region_from_ray=_impure_region_from_ray)

PURE = RegionMode.PURE
IMPURE = RegionMode.IMPURE
