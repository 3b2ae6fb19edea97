from __future__ import annotations
import collections
from typing import (
    Any,
    Dict,
    Generator,
    Generic,
    Iterable,
    List,
    Set,
    Tuple,
    TypeVar,
)

from overapprox.alphabet import (
    EPSILON,
    EventAlphabet,
    Symbol,
)

StateType = TypeVar('StateType')


class SparseSimpleTransitionFunction(Generic[StateType]):
    """Transition relation stored as origin -> destination -> set of symbols."""

    def __init__(self):
        self.data: Dict[Any, Dict[Any, Set[Symbol]]] = dict()

    def get_state_post(self, state) -> List:
        return list(self.data.get(state, {}).keys())

    def get_transition_target(self, source: StateType, symbol: Symbol) -> List[StateType]:
        if source not in self.data:
            return list()

        return [dest for dest, symbols in self.data[source].items() if symbol in symbols]

    def get_state_pre_with_symbol(self, state: StateType, symbol: Symbol) -> Set[StateType]:
        pre: Set[StateType] = set()
        for origin, destinations in self.data.items():
            if symbol in destinations.get(state, ()):
                pre.add(origin)
        return pre

    def get_out_transitions_for_state(self, state: StateType) -> Generator[Tuple[Symbol, StateType], None, None]:
        for dest, symbols in self.data.get(state, {}).items():
            for symbol in symbols:
                yield (symbol, dest)

    def has_epsilon_transitions(self) -> bool:
        return any(symbol == EPSILON for _, symbol, _ in self.iter())

    def insert_transition(self, source: StateType, symbol: Symbol, dest: StateType):
        if source not in self.data:
            self.data[source] = {}

        if dest not in self.data[source]:
            self.data[source][dest] = set()

        self.data[source][dest].add(symbol)

    def rename_states(self, mapping: Dict):
        renamed_data: Dict = {}

        for origin in self.data:
            r_origin = mapping[origin]
            renamed_data[r_origin] = {}

            for dest in self.data[origin]:
                r_dest = mapping[dest]
                renamed_data[r_origin][r_dest] = set(self.data[origin][dest])

        self.data = renamed_data

    def copy(self) -> SparseSimpleTransitionFunction:
        copy: SparseSimpleTransitionFunction = SparseSimpleTransitionFunction()
        for source in self.data:
            copy.data[source] = {}
            for dest in self.data[source]:
                copy.data[source][dest] = set(self.data[source][dest])
        return copy

    @staticmethod
    def union_of(t0: SparseSimpleTransitionFunction, t1: SparseSimpleTransitionFunction) -> SparseSimpleTransitionFunction:
        union = t0.copy()
        for source, symbol, dest in t1.iter():
            union.insert_transition(source, symbol, dest)
        return union

    def complete_with_trap_state(self, alphabet: EventAlphabet, states: Iterable, trap_state: Any) -> bool:
        """
        Add transitions into the trap state for every symbol that has no transition out of a state.

        :returns: True if the trap state was needed.
        """
        trap_state_present: bool = False

        for origin in list(states):
            out_symbols = set()
            for dest in self.data.get(origin, {}):
                out_symbols.update(self.data[origin][dest])

            missing_symbols = set(alphabet.events) - out_symbols

            if missing_symbols and not trap_state_present:
                for symbol in alphabet.events:
                    self.insert_transition(trap_state, symbol, trap_state)
                trap_state_present = True

            for missing_symbol in missing_symbols:
                self.insert_transition(origin, missing_symbol, trap_state)
        return trap_state_present

    def iter(self) -> Generator[Tuple[StateType, Symbol, StateType], None, None]:
        for origin in self.data:
            for dest in self.data[origin]:
                for sym in self.data[origin][dest]:
                    yield (origin, sym, dest)

    def reachable_states(self, start_states: Iterable[StateType]) -> Set[StateType]:
        """Forward BFS over the transitions."""
        queue = collections.deque(start_states)
        reachable = set(queue)
        while queue:
            current_state = queue.popleft()
            for successor in self.data.get(current_state, {}):
                if successor not in reachable:
                    reachable.add(successor)
                    queue.append(successor)
        return reachable

    def finishing_states(self, final_states: Iterable[StateType]) -> Set[StateType]:
        """BFS on rotated transitions - the states from which some final state is reachable."""
        rotated_transitions: Dict[Any, Set[Any]] = collections.defaultdict(set)
        for origin in self.data:
            for dest in self.data[origin]:
                rotated_transitions[dest].add(origin)

        queue = collections.deque(final_states)
        finishing = set(queue)
        while queue:
            current_state = queue.popleft()
            for predecessor in rotated_transitions.get(current_state, ()):
                if predecessor not in finishing:
                    finishing.add(predecessor)
                    queue.append(predecessor)
        return finishing

    def restrict_to_states(self, states: Set[StateType]):
        """Drop all transitions that touch a state outside of the given ones."""
        self.data = {
            origin: {dest: set(symbols) for dest, symbols in destinations.items() if dest in states}
            for origin, destinations in self.data.items() if origin in states
        }
