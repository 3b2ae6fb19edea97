from __future__ import annotations
from collections import defaultdict, deque
from dataclasses import (
    dataclass,
    field
)
from enum import IntFlag
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Set,
    Tuple,
)

from overapprox import logger
from overapprox.alphabet import (
    EPSILON,
    EventAlphabet,
    Symbol,
)
from overapprox.config import (
    MinimizationAlgorithms,
    synthesis_config,
)
from overapprox.transitions import SparseSimpleTransitionFunction
from overapprox.utils import (
    carthesian_product,
    create_enumeration_state_translation_map,
)
from overapprox.visualization import AutomatonVisRepresentation


class AutomatonType(IntFlag):
    DFA = 0x01
    NFA = 0x02


@dataclass
class NFA(object):
    alphabet:       EventAlphabet
    automaton_type: AutomatonType = AutomatonType.NFA
    transition_fn:  SparseSimpleTransitionFunction = field(default_factory=SparseSimpleTransitionFunction)
    initial_states: Set[int] = field(default_factory=set)
    final_states:   Set[int] = field(default_factory=set)
    states:         Set[int] = field(default_factory=set)
    state_labels:   Dict[int, Any] = field(default_factory=dict)

    def _require_state(self, state: int):
        if state not in self.states:
            raise ValueError(f'State {state} does not belong to the automaton with states {sorted(self.states)}.')

    def update_transition_fn(self, from_state: int, via_symbol: Symbol, to_state: int):
        self._require_state(from_state)
        self._require_state(to_state)
        if via_symbol != EPSILON and via_symbol not in self.alphabet:
            raise ValueError(f'Symbol {via_symbol!r} is not in the automaton alphabet {self.alphabet.events}.')
        self.transition_fn.insert_transition(from_state, via_symbol, to_state)

    def add_state(self, state: int):
        self.states.add(state)

    def add_final_state(self, state: int):
        self._require_state(state)
        self.final_states.add(state)

    def add_initial_state(self, state: int):
        self._require_state(state)
        self.initial_states.add(state)

    def get_transition_target(self, origin: int, via_symbol: Symbol) -> Tuple[int, ...]:
        self._require_state(origin)
        return tuple(self.transition_fn.get_transition_target(origin, via_symbol))

    def get_state_post(self, state: int) -> List[int]:
        self._require_state(state)
        return self.transition_fn.get_state_post(state)

    def copy(self) -> NFA:
        return NFA(alphabet=self.alphabet,
                   automaton_type=self.automaton_type,
                   transition_fn=self.transition_fn.copy(),
                   initial_states=set(self.initial_states),
                   final_states=set(self.final_states),
                   states=set(self.states),
                   state_labels=dict(self.state_labels))

    def epsilon_closure(self, states: Iterable[int]) -> FrozenSet[int]:
        closure = set(states)
        work_list = list(closure)
        while work_list:
            state = work_list.pop(-1)
            for successor in self.transition_fn.get_transition_target(state, EPSILON):
                if successor not in closure:
                    closure.add(successor)
                    work_list.append(successor)
        return frozenset(closure)

    def accepts(self, word: Iterable[Symbol]) -> bool:
        current_states = self.epsilon_closure(self.initial_states)
        for symbol in word:
            next_states: Set[int] = set()
            for state in current_states:
                next_states.update(self.transition_fn.get_transition_target(state, symbol))
            if not next_states:
                return False
            current_states = self.epsilon_closure(next_states)
        return not self.final_states.isdisjoint(current_states)

    def rename_states(self, start_from: int = 0) -> Tuple[int, NFA]:
        nfa = NFA(alphabet=self.alphabet, automaton_type=self.automaton_type)

        next_free_state, state_name_translation = create_enumeration_state_translation_map(sorted(self.states),
                                                                                           start_from=start_from)

        def translate(state: int) -> int:
            return state_name_translation[state]

        nfa.states.update(map(translate, self.states))
        nfa.initial_states.update(map(translate, self.initial_states))
        nfa.final_states.update(map(translate, self.final_states))
        nfa.transition_fn = self.transition_fn.copy()
        nfa.transition_fn.rename_states(state_name_translation)

        return (next_free_state, nfa)

    def union(self, other: NFA) -> NFA:
        latest_state_value, self_renamed = self.rename_states()
        _, other_renamed = other.rename_states(start_from=latest_state_value)

        return NFA(
            alphabet=self.alphabet.union(other.alphabet),
            automaton_type=AutomatonType.NFA,
            initial_states=self_renamed.initial_states.union(other_renamed.initial_states),
            final_states=self_renamed.final_states.union(other_renamed.final_states),
            states=self_renamed.states.union(other_renamed.states),
            transition_fn=SparseSimpleTransitionFunction.union_of(self_renamed.transition_fn,
                                                                 other_renamed.transition_fn)
        )

    def concatenate(self, other: NFA) -> NFA:
        """Automaton accepting the words uv where u is accepted by this and v by the other automaton."""
        latest_state_value, self_renamed = self.rename_states()
        _, other_renamed = other.rename_states(start_from=latest_state_value)

        result = NFA(
            alphabet=self.alphabet.union(other.alphabet),
            automaton_type=AutomatonType.NFA,
            initial_states=set(self_renamed.initial_states),
            final_states=set(other_renamed.final_states),
            states=self_renamed.states.union(other_renamed.states),
            transition_fn=SparseSimpleTransitionFunction.union_of(self_renamed.transition_fn,
                                                                 other_renamed.transition_fn)
        )
        for final_state, initial_state in carthesian_product(sorted(self_renamed.final_states),
                                                             sorted(other_renamed.initial_states)):
            result.update_transition_fn(final_state, EPSILON, initial_state)
        return result

    def kleene_star(self) -> NFA:
        next_free_state, result = self.rename_states()
        result.automaton_type = AutomatonType.NFA

        hub_state = next_free_state
        result.add_state(hub_state)
        for initial_state in result.initial_states:
            result.update_transition_fn(hub_state, EPSILON, initial_state)
        for final_state in result.final_states:
            result.update_transition_fn(final_state, EPSILON, hub_state)

        result.initial_states = {hub_state}
        result.final_states = {hub_state}
        return result

    def kleene_plus(self) -> NFA:
        return self.concatenate(self.kleene_star())

    def optional(self) -> NFA:
        return self.union(NFA.atomic_language(EPSILON))

    def intersection(self, other: NFA, remove_nonfinishing_states: bool = True) -> NFA:
        """
        Construct automaton accepting the intersection of the languages of this and the other automaton.
        """
        left = self.determinize() if self.transition_fn.has_epsilon_transitions() else self
        right = other.determinize() if other.transition_fn.has_epsilon_transitions() else other

        logger.info('Performing automaton intesection. Input automaton sizes: {0} states other {1} states'.format(
            len(left.states), len(right.states)))

        resulting_nfa: NFA = NFA(alphabet=left.alphabet.union(right.alphabet), automaton_type=AutomatonType.NFA)
        common_symbols = [symbol for symbol in resulting_nfa.alphabet if symbol in left.alphabet and symbol in right.alphabet]

        # Add all the initial states to the to-be-processed queue
        work_queue: List[Tuple[int, int]] = carthesian_product(sorted(left.initial_states),
                                                               sorted(right.initial_states))
        labels_to_state_number: Dict[Tuple[int, int], int] = dict(
            (state, i) for i, state in enumerate(work_queue)
        )

        for initial_state in work_queue:
            state_number = labels_to_state_number[initial_state]
            resulting_nfa.add_state(state_number)
            resulting_nfa.add_initial_state(state_number)

        while work_queue:
            current_state_label: Tuple[int, int] = work_queue.pop(-1)
            # Product states have their numbers assigned as their are discovered during the intersection procedure
            current_state: int = labels_to_state_number[current_state_label]

            left_state, right_state = current_state_label

            if left_state in left.final_states and right_state in right.final_states:
                resulting_nfa.add_final_state(current_state)

            for symbol in common_symbols:
                left_destination_set = left.transition_fn.get_transition_target(left_state, symbol)
                right_destination_set = right.transition_fn.get_transition_target(right_state, symbol)

                for next_state_label in carthesian_product(left_destination_set, right_destination_set):
                    if next_state_label not in labels_to_state_number:
                        next_state = len(labels_to_state_number)
                        labels_to_state_number[next_state_label] = next_state
                        resulting_nfa.add_state(next_state)
                        work_queue.append(next_state_label)

                    resulting_nfa.update_transition_fn(current_state, symbol, labels_to_state_number[next_state_label])

        for label, state in labels_to_state_number.items():
            left_state, right_state = label
            resulting_nfa.state_labels[state] = (left.state_labels.get(left_state, left_state),
                                                 right.state_labels.get(right_state, right_state))

        if left.automaton_type == AutomatonType.DFA and right.automaton_type == AutomatonType.DFA:
            resulting_nfa.automaton_type = AutomatonType.DFA

        if remove_nonfinishing_states:
            resulting_nfa = resulting_nfa.trim()

        logger.info('Intersection done. Result has %d states.', len(resulting_nfa.states))
        return resulting_nfa

    def determinize(self) -> NFA:
        """
        Constructs a complete DFA having the same language as this automaton (subset construction).
        """
        initial_metastate: Tuple[int, ...] = tuple(sorted(self.epsilon_closure(self.initial_states)))
        work_list: List[Tuple[int, ...]] = [initial_metastate]

        determinized_automaton: NFA = NFA(alphabet=self.alphabet, automaton_type=AutomatonType.DFA)
        label_to_state_number: Dict[Tuple[int, ...], int] = {initial_metastate: 0}
        determinized_automaton.add_state(0)
        determinized_automaton.add_initial_state(0)

        while work_list:
            current_metastate_label: Tuple[int, ...] = work_list.pop(-1)
            current_metastate = label_to_state_number[current_metastate_label]

            if not self.final_states.isdisjoint(current_metastate_label):
                determinized_automaton.add_final_state(current_metastate)

            for symbol in self.alphabet:
                reachable_states: Set[int] = set()
                for state in current_metastate_label:
                    reachable_states.update(self.transition_fn.get_transition_target(state, symbol))

                if not reachable_states:
                    continue

                next_metastate_label = tuple(sorted(self.epsilon_closure(reachable_states)))

                if next_metastate_label not in label_to_state_number:
                    next_metastate_num = len(label_to_state_number)
                    label_to_state_number[next_metastate_label] = next_metastate_num
                    determinized_automaton.add_state(next_metastate_num)
                    work_list.append(next_metastate_label)

                determinized_automaton.update_transition_fn(current_metastate, symbol,
                                                            label_to_state_number[next_metastate_label])

        for label, state in label_to_state_number.items():
            determinized_automaton.state_labels[state] = tuple(self.state_labels.get(component, component)
                                                               for component in label)

        determinized_automaton.add_trap_state()
        logger.debug('Determinization done. Input size: %d, result size: %d.',
                     len(self.states), len(determinized_automaton.states))
        return determinized_automaton

    def add_trap_state(self):
        """Adds trap (sink) state with transitions to it as needed, making a DFA complete."""
        trap_state = max(self.states) + 1 if self.states else 0
        added_trap_state = self.transition_fn.complete_with_trap_state(self.alphabet, sorted(self.states),
                                                                       trap_state=trap_state)
        if added_trap_state:
            self.states.add(trap_state)
            self.state_labels[trap_state] = 'TRAP'

    def trim(self) -> NFA:
        """
        Remove states that are not reachable or that cannot reach a final state.

        Initial states are always kept, so trimming an automaton with an empty language yields
        automaton with only initial states.
        """
        reachable_states = self.transition_fn.reachable_states(self.initial_states)
        finishing_states = self.transition_fn.finishing_states(self.final_states)
        useful_states = reachable_states.intersection(finishing_states).union(self.initial_states)

        result = self.copy()
        result.states = useful_states
        result.final_states = self.final_states.intersection(useful_states)
        result.transition_fn.restrict_to_states(useful_states)
        result.state_labels = {state: label for state, label in self.state_labels.items() if state in useful_states}
        return result

    def prefix_closure(self) -> NFA:
        """Automaton accepting all prefixes of the words accepted by this automaton."""
        result = self.trim()
        result.final_states = result.transition_fn.finishing_states(result.final_states).intersection(result.states)
        return result

    def minimize(self) -> NFA:
        """Minimize using the configured minimization algorithm."""
        if synthesis_config.minimization_method == MinimizationAlgorithms.BRZOZOWSKI:
            return self.minimize_brzozowski()

        dfa = self if self.automaton_type == AutomatonType.DFA else self.determinize()
        return dfa.minimize_hopcroft()

    def minimize_brzozowski(self) -> NFA:
        """Minimize using the Brzozowski NFA minimization procedure."""

        def reverse_automaton(nfa: NFA) -> NFA:
            """Reverse the automaton. Resulting NFA accepts the reverse language."""
            reverse_nfa: NFA = NFA(nfa.alphabet, AutomatonType.NFA)
            reverse_nfa.states = set(nfa.states)
            reverse_nfa.initial_states = set(nfa.final_states)
            reverse_nfa.final_states = set(nfa.initial_states)

            for source, symbol, destination in nfa.transition_fn.iter():
                reverse_nfa.update_transition_fn(destination, symbol, source)
            return reverse_nfa

        logger.info('Performing Brzozowski minimalization, input size: {0}.'.format(len(self.states)))

        determinized_reverse_nfa = reverse_automaton(self).determinize()
        logger.debug(f'Determinized reversed automaton size: {len(determinized_reverse_nfa.states)}.')

        minimal_dfa = reverse_automaton(determinized_reverse_nfa).determinize()
        logger.info(f'Minimization done. Automaton size: {len(minimal_dfa.states)}')

        return minimal_dfa

    def minimize_hopcroft(self) -> NFA:
        """
        Minimizes the automaton using the Hopcroft minimization.

        Requires the automaton to be deterministic.
        """
        assert self.automaton_type == AutomatonType.DFA

        dfa = self.copy()
        dfa.add_trap_state()

        reachable_states = dfa.transition_fn.reachable_states(dfa.initial_states)
        dfa.states.intersection_update(reachable_states)
        dfa.final_states.intersection_update(reachable_states)
        dfa.transition_fn.restrict_to_states(reachable_states)

        logger.info('Performing Hopcroft minimalization, input size: {0}.'.format(len(dfa.states)))

        partitions = {
            partition for partition in (tuple(sorted(dfa.final_states)), tuple(sorted(dfa.states - dfa.final_states)))
            if partition
        }
        work_list = list(partitions)

        while work_list:
            current_partition = work_list.pop(-1)
            for symbol in dfa.alphabet:
                X = set()  # Set of all states that can reach current partition via symbol
                for state in current_partition:
                    X.update(dfa.transition_fn.get_state_pre_with_symbol(state, symbol))

                for partition in tuple(partitions):
                    Y = set(partition)
                    intersect = X.intersection(Y)
                    difference = Y - X
                    if not intersect or not difference:
                        # The partition split results in one empty set - no refinement can be gained
                        continue

                    intersect_partition = tuple(sorted(intersect))
                    difference_partition = tuple(sorted(difference))

                    partitions.remove(partition)
                    partitions.add(intersect_partition)
                    partitions.add(difference_partition)

                    if partition in work_list:
                        # partition has just became obsole - replace it by the two new distinguishers
                        work_list.remove(partition)
                        work_list.append(intersect_partition)
                        work_list.append(difference_partition)
                    else:
                        # It is sufficient to use only the smaller of the new distinguishers
                        work_list.append(
                            intersect_partition if len(intersect) < len(difference) else difference_partition
                        )

        minimized_dfa = NFA(automaton_type=AutomatonType.DFA, alphabet=dfa.alphabet)
        partition_enumeration: Dict[Tuple[int, ...], int] = dict(
            (part, i) for i, part in enumerate(sorted(partitions))
        )
        minimized_dfa.states = set(partition_enumeration.values())

        original_state_to_partition: Dict[int, Tuple[int, ...]] = {}
        for partition in partitions:
            for state in partition:
                original_state_to_partition[state] = partition

        for partition, min_state in partition_enumeration.items():
            partition_state = partition[0]

            for symbol, dest_state in dfa.transition_fn.get_out_transitions_for_state(partition_state):
                dest_min_state = partition_enumeration[original_state_to_partition[dest_state]]
                minimized_dfa.update_transition_fn(min_state, symbol, dest_min_state)

            if partition_state in dfa.final_states:
                minimized_dfa.add_final_state(min_state)

            if not dfa.initial_states.isdisjoint(partition):
                minimized_dfa.add_initial_state(min_state)

        logger.info(f'Minimization done. Automaton size: {len(minimized_dfa.states)}')
        return minimized_dfa

    def get_visualization_representation(self) -> AutomatonVisRepresentation:
        """Retrieves the information necessary to visualize this automaton."""
        _transitions = defaultdict(list)
        for origin_state, symbol, destination_state in self.transition_fn.iter():
            _transitions[(origin_state, destination_state)].append(symbol)

        transitions = []
        for state_pair, symbols in _transitions.items():
            transitions.append((state_pair[0], sorted(symbols), state_pair[1]))

        return AutomatonVisRepresentation(
            states=set(self.states),
            final_states=set(self.final_states),
            initial_states=set(self.initial_states),
            transitions=transitions,
            state_labels=dict(self.state_labels)
        )

    @staticmethod
    def empty_language(alphabet: EventAlphabet = EventAlphabet()) -> NFA:
        nfa = NFA(alphabet=alphabet)
        nfa.add_state(0)
        nfa.add_initial_state(0)
        return nfa

    @staticmethod
    def atomic_language(symbol: Symbol) -> NFA:
        """Automaton accepting exactly the one-symbol word (or the empty word for EPSILON)."""
        alphabet = EventAlphabet() if symbol == EPSILON else EventAlphabet.from_events((symbol,))
        nfa = NFA(alphabet=alphabet, states={0, 1})
        nfa.add_initial_state(0)
        nfa.add_final_state(1)
        nfa.update_transition_fn(0, symbol, 1)
        return nfa

    @staticmethod
    def from_word(word: Iterable[Symbol]) -> NFA:
        symbols = list(word)
        nfa = NFA(alphabet=EventAlphabet.from_events(symbols), states=set(range(len(symbols) + 1)))
        nfa.add_initial_state(0)
        nfa.add_final_state(len(symbols))
        for i, symbol in enumerate(symbols):
            nfa.update_transition_fn(i, symbol, i + 1)
        return nfa

    @staticmethod
    def sigma_star(alphabet: EventAlphabet) -> NFA:
        """Automaton accepting every word over the alphabet."""
        nfa = NFA(alphabet=alphabet, automaton_type=AutomatonType.DFA, states={0})
        nfa.add_initial_state(0)
        nfa.add_final_state(0)
        for event in alphabet:
            nfa.update_transition_fn(0, event, 0)
        return nfa


DFA = NFA
