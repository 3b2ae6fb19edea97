from __future__ import annotations
from dataclasses import dataclass
from typing import (
    Iterable,
    Iterator,
    Tuple,
)


Symbol = str

EPSILON: Symbol = ''
"""The empty word; usable as a transition symbol, never an event of an alphabet."""


@dataclass(frozen=True)
class EventAlphabet:
    events: Tuple[str, ...] = ()

    @staticmethod
    def from_events(events: Iterable[str]) -> EventAlphabet:
        """
        Creates a new alphabet from the given events.

        The events are kept sorted so that alphabets with the same events are equal.
        """
        unique_events = set(events)
        if EPSILON in unique_events:
            raise ValueError('The empty word cannot be an event of an alphabet.')
        return EventAlphabet(events=tuple(sorted(unique_events)))

    def union(self, other: EventAlphabet) -> EventAlphabet:
        if self == other:
            return self
        return EventAlphabet.from_events(self.events + other.events)

    def index_of(self, event: str) -> int:
        try:
            return self.events.index(event)
        except ValueError:
            raise ValueError(f'Event {event!r} is not in the alphabet {self.events}.')

    def __iter__(self) -> Iterator[str]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def __contains__(self, event: object) -> bool:
        return event in self.events
