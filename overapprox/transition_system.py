from __future__ import annotations
from collections import deque
from typing import (
    Any,
    Dict,
    Hashable,
    List,
    Set,
    Tuple,
)

import networkx as nx

from overapprox.alphabet import (
    EPSILON,
    EventAlphabet,
)
from overapprox.errors import UnreachableStateError
from overapprox.parikh import ParikhVector

State = Hashable
Arc = Tuple[Any, str, Any]
"""Arcs are (source, event, target) triples."""


def _arc_order(arc: Arc):
    source, event, target = arc
    return (str(source), event, str(target))


class TransitionSystem(object):
    """
    Labeled transition system stored as a networkx multigraph.

    The event labeling an arc is used as the edge key, so two states can be connected by
    arcs with different events, but never by two arcs with the same event.
    """

    def __init__(self, initial_state: State = 0):
        self.graph = nx.MultiDiGraph()
        self.initial_state = initial_state
        self.graph.add_node(initial_state)

    def add_state(self, state: State):
        self.graph.add_node(state)

    def add_arc(self, source: State, event: str, target: State):
        if event == EPSILON:
            raise ValueError('Arcs of a transition system must be labeled by events, not by the empty word.')
        if not self.graph.has_edge(source, target, key=event):
            self.graph.add_edge(source, target, key=event, event=event)

    @property
    def states(self) -> List[State]:
        return sorted(self.graph.nodes, key=str)

    @property
    def arcs(self) -> List[Arc]:
        return sorted(((source, event, target) for source, target, event in self.graph.edges(keys=True)),
                      key=_arc_order)

    @property
    def events(self) -> Tuple[str, ...]:
        return tuple(sorted({event for _, _, event in self.graph.edges(keys=True)}))

    @property
    def alphabet(self) -> EventAlphabet:
        return EventAlphabet.from_events(self.events)

    def out_arcs(self, state: State) -> List[Arc]:
        if state not in self.graph:
            raise ValueError(f'State {state} does not belong to the transition system.')
        return sorted(((source, event, target) for source, target, event in self.graph.out_edges(state, keys=True)),
                      key=_arc_order)

    def enabled_events(self, state: State) -> Tuple[str, ...]:
        return tuple(sorted({event for _, event, _ in self.out_arcs(state)}))

    def is_event_enabled(self, state: State, event: str) -> bool:
        return event in self.enabled_events(state)

    def spanning_tree(self) -> SpanningTree:
        return SpanningTree(self)


class SpanningTree(object):
    """
    Breadth-first spanning tree of the reachable part of a transition system.

    Every reachable state is reached along the tree by a unique path, the Parikh vector of the
    path is the reaching Parikh vector of the state. The arcs outside of the tree are chords, every
    chord closes an (undirected) cycle together with the tree paths.
    """

    def __init__(self, ts: TransitionSystem):
        self.ts = ts
        self.tree_arcs: Set[Arc] = set()
        self._reaching_vectors: Dict[State, ParikhVector] = {ts.initial_state: ParikhVector()}

        queue = deque([ts.initial_state])
        while queue:
            state = queue.popleft()
            for arc in ts.out_arcs(state):
                _, event, target = arc
                if target not in self._reaching_vectors:
                    self._reaching_vectors[target] = self._reaching_vectors[state] + ParikhVector.of(event)
                    self.tree_arcs.add(arc)
                    queue.append(target)

    @property
    def reachable_states(self) -> List[State]:
        return sorted(self._reaching_vectors, key=str)

    def is_reachable(self, state: State) -> bool:
        return state in self._reaching_vectors

    def reaching_parikh_vector(self, state: State) -> ParikhVector:
        """
        Parikh vector of the tree path from the initial state to the given state.

        :raises UnreachableStateError: The state is not reachable from the initial state.
        """
        if state not in self._reaching_vectors:
            raise UnreachableStateError(state)
        return self._reaching_vectors[state]

    @property
    def chords(self) -> List[Arc]:
        return [arc for arc in self.ts.arcs if arc not in self.tree_arcs and arc[0] in self._reaching_vectors]

    def parikh_vector_for_arc(self, arc: Arc) -> ParikhVector:
        """Effect of the cycle closed by the arc - zero for the tree arcs."""
        source, event, target = arc
        assert self.is_reachable(source), f'Arc {arc} leaves an unreachable state.'
        return (self.reaching_parikh_vector(source) + ParikhVector.of(event)
                - self.reaching_parikh_vector(target))
