"""
Place/transition nets produced by the over-approximation.

Transitions are identified by the event they are labeled with, places by consecutive integers.
The textual form of a net follows the `.net` format of the Tina toolbox:
    http://projects.laas.fr/tina//manuals/formats.html
"""
from __future__ import annotations
from collections import defaultdict
from typing import (
    Dict,
    Iterable,
    List,
    Union,
)

Place = int
Transition = str
Marking = Dict[Place, int]


class PetriNet(object):
    def __init__(self, name: str = 'overapproximation'):
        self.name = name
        self.places: List[Place] = []
        self.transitions: List[Transition] = []
        self.initial_marking: Marking = {}

        # Tokens consumed from/produced into places by firing a transition
        self.pre: Dict[Transition, Dict[Place, int]] = defaultdict(dict)
        self.post: Dict[Transition, Dict[Place, int]] = defaultdict(dict)

    def create_transition(self, event: Transition) -> Transition:
        """Create the transition labeled with the given event, returns the existing one if present."""
        if event not in self.transitions:
            self.transitions.append(event)
        return event

    def create_place(self, initial_marking: int = 0) -> Place:
        if initial_marking < 0:
            raise ValueError(f'A place cannot be initially marked with a negative number of tokens: {initial_marking}')
        place = len(self.places)
        self.places.append(place)
        self.initial_marking[place] = initial_marking
        return place

    def _require_transition(self, transition: Transition):
        if transition not in self.transitions:
            raise ValueError(f'The net has no transition {transition!r}.')

    def _require_place(self, place: Place):
        if place not in self.initial_marking:
            raise ValueError(f'The net has no place {place!r}.')

    def create_flow(self, source: Union[Place, Transition], target: Union[Place, Transition], weight: int):
        """
        Add an arc between a place and a transition (in either direction).

        Arcs with zero weight are not created, repeated arcs accumulate their weights.
        """
        if weight < 0:
            raise ValueError(f'Arc weights must be non-negative, got {weight}.')
        if weight == 0:
            return

        if isinstance(source, int) and isinstance(target, str):
            self._require_place(source)
            self._require_transition(target)
            self.pre[target][source] = self.pre[target].get(source, 0) + weight
        elif isinstance(source, str) and isinstance(target, int):
            self._require_transition(source)
            self._require_place(target)
            self.post[source][target] = self.post[source].get(target, 0) + weight
        else:
            raise ValueError(f'An arc must connect a place with a transition, got {source!r} -> {target!r}.')

    def preset(self, transition: Transition) -> Dict[Place, int]:
        self._require_transition(transition)
        return dict(self.pre.get(transition, {}))

    def postset(self, transition: Transition) -> Dict[Place, int]:
        self._require_transition(transition)
        return dict(self.post.get(transition, {}))

    def preset_of_place(self, place: Place) -> Dict[Transition, int]:
        """Transitions producing tokens into the place together with the arc weights."""
        return {transition: self.post[transition][place]
                for transition in self.transitions if place in self.post.get(transition, {})}

    def postset_of_place(self, place: Place) -> Dict[Transition, int]:
        """Transitions consuming tokens from the place together with the arc weights."""
        return {transition: self.pre[transition][place]
                for transition in self.transitions if place in self.pre.get(transition, {})}

    def is_enabled(self, marking: Marking, transition: Transition) -> bool:
        return all(marking.get(place, 0) >= weight for place, weight in self.preset(transition).items())

    def fire(self, marking: Marking, transition: Transition) -> Marking:
        if not self.is_enabled(marking, transition):
            raise ValueError(f'Transition {transition!r} is not enabled in the marking {marking}.')

        next_marking = dict(marking)
        for place, weight in self.pre.get(transition, {}).items():
            next_marking[place] -= weight
        for place, weight in self.post.get(transition, {}).items():
            next_marking[place] = next_marking.get(place, 0) + weight
        return next_marking

    def accepts(self, word: Iterable[Transition]) -> bool:
        """Check whether the word is a firing sequence from the initial marking."""
        marking = dict(self.initial_marking)
        for event in word:
            if event not in self.transitions or not self.is_enabled(marking, event):
                return False
            marking = self.fire(marking, event)
        return True

    def __str__(self) -> str:
        def format_arc(place: Place, weight: int) -> str:
            return f'p{place}*{weight}' if weight > 1 else f'p{place}'

        text = 'net {0}\n'.format(self.name)
        for place in self.places:
            tokens = self.initial_marking[place]
            text += 'pl p{0}{1}\n'.format(place, f' ({tokens})' if tokens else '')

        for transition in self.transitions:
            inputs = [format_arc(place, weight) for place, weight in sorted(self.pre.get(transition, {}).items())]
            outputs = [format_arc(place, weight) for place, weight in sorted(self.post.get(transition, {}).items())]
            text += ' '.join(['tr', transition] + inputs + ['->'] + outputs) + '\n'
        return text
