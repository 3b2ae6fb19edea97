"""
Conversion of finite automata into semilinear sets of the Parikh vectors of their languages.

The conversion is the state elimination (McNaughton-Yamada) construction where the regular
expressions labeling the state pairs are replaced by semilinear sets. Starting with the direct
transitions, the states are eliminated one by one; eliminating a state n extends the label of
every pair (s1, s2) by the paths s1 -> n -> n ... n -> s2:

    R'(s1, s2) = R(s1, s2) ∪ R(s1, n) · R(n, n)* · R(n, s2)
"""
from typing import (
    Dict,
    Optional,
    Tuple,
)

from overapprox import logger
from overapprox.alphabet import EPSILON
from overapprox.automatons import NFA
from overapprox.semilinear import SemilinearSet
from overapprox.stats import (
    RunStats,
    SynthesisOperation,
)

StatePairMapping = Dict[Tuple[int, int], SemilinearSet]


def _extend_mapping(mapping: StatePairMapping, state_pair: Tuple[int, int], semilinear_set: SemilinearSet):
    mapping[state_pair] = mapping.get(state_pair, SemilinearSet.EMPTY).union(semilinear_set)


def create_initial_mapping(automaton: NFA) -> StatePairMapping:
    """Label every state pair by the Parikh vectors of the direct transitions between them."""
    mapping: StatePairMapping = {}
    for state in automaton.states:
        _extend_mapping(mapping, (state, state), SemilinearSet.NULL)

    for origin, symbol, destination in automaton.transition_fn.iter():
        if symbol == EPSILON:
            _extend_mapping(mapping, (origin, destination), SemilinearSet.NULL)
        else:
            _extend_mapping(mapping, (origin, destination), SemilinearSet.containing_event(symbol))
    return mapping


def eliminate_state(mapping: StatePairMapping, eliminated_state: int, states) -> StatePairMapping:
    assert (eliminated_state, eliminated_state) in mapping, \
        f'State {eliminated_state} is missing its self-loop entry - the mapping was not initialized properly.'

    loop = mapping[(eliminated_state, eliminated_state)].kleene_star()

    next_mapping = dict(mapping)
    for source in states:
        into_eliminated = mapping.get((source, eliminated_state))
        if into_eliminated is None:
            continue

        for target in states:
            out_of_eliminated = mapping.get((eliminated_state, target))
            if out_of_eliminated is None:
                continue

            paths_via_eliminated = into_eliminated.concatenate(loop.concatenate(out_of_eliminated))
            _extend_mapping(next_mapping, (source, target), paths_via_eliminated)

    return next_mapping


def automaton_to_semilinear_set(automaton: NFA,
                                minimize: bool = True,
                                stats: Optional[RunStats] = None) -> SemilinearSet:
    """
    Compute the semilinear set of the Parikh vectors of all the words accepted by the automaton.

    :param minimize: Minimize the automaton (with the configured algorithm) before the
                     elimination starts. The elimination cost grows quickly with automaton size.
    """
    if minimize:
        if stats is not None:
            started = stats.operation_starts(SynthesisOperation.MINIMIZE, len(automaton.states))
        automaton = automaton.minimize()
        if stats is not None:
            stats.operation_ends(started, len(automaton.states))

    # Trap states (and the rest of useless states) never contribute to the result
    automaton = automaton.trim()

    logger.info('Converting automaton with %d states into a semilinear set.', len(automaton.states))
    if stats is not None:
        started = stats.operation_starts(SynthesisOperation.STATE_ELIMINATION, len(automaton.states))

    states = sorted(automaton.states)
    mapping = create_initial_mapping(automaton)
    for eliminated_state in states:
        logger.debug('Eliminating state %d.', eliminated_state)
        mapping = eliminate_state(mapping, eliminated_state, states)

    result = SemilinearSet.EMPTY
    for initial_state in sorted(automaton.initial_states):
        for final_state in sorted(automaton.final_states):
            result = result.union(mapping.get((initial_state, final_state), SemilinearSet.EMPTY))

    if stats is not None:
        stats.operation_ends(started, len(result))
    logger.info('State elimination done. The semilinear set has %d linear sets.', len(result))
    return result
