"""
Petri net over-approximations of transition systems and regular languages.

Both constructions describe the regions of their input by a polyhedral cone and turn every
generator of the cone into one place of the resulting net. The generators are the extremal rays
of the cone together with both directions of every line the cone contains. Every region is a
nonnegative combination of the generators, so the net restricts the behavior as much as any set
of regions can, while still permitting all the behavior of the input.
"""
from typing import (
    Iterable,
    Optional,
    Set,
    Tuple,
)

from overapprox import logger
from overapprox.alphabet import EventAlphabet
from overapprox.automatons import NFA
from overapprox.config import synthesis_config
from overapprox.cone import PolyhedralCone
from overapprox.errors import UnreachableStateError
from overapprox.parikh import ParikhVector
from overapprox.petri_net import PetriNet
from overapprox.regions import (
    IMPURE,
    Region,
    RegionMode,
)
from overapprox.state_elimination import automaton_to_semilinear_set
from overapprox.stats import (
    RunStats,
    SynthesisOperation,
)
from overapprox.transition_system import TransitionSystem


def _create_cone(alphabet: EventAlphabet, mode: RegionMode) -> PolyhedralCone:
    cone = PolyhedralCone(mode.dimension(alphabet))
    for row in mode.nonnegativity_rows(alphabet):
        cone.add_inequality(row)
    return cone


def _enumerate_regions(cone: PolyhedralCone,
                       alphabet: EventAlphabet,
                       mode: RegionMode,
                       stats: Optional[RunStats]) -> Set[Region]:
    if stats is not None:
        started = stats.operation_starts(SynthesisOperation.RAY_ENUMERATION,
                                         len(cone.equations) + len(cone.inequalities))
    rays = cone.find_extremal_rays()
    if stats is not None:
        stats.operation_ends(started, len(rays))

    return {mode.region_from_ray(alphabet, ray) for ray in rays}


def _region_order(region: Region):
    return (region.initial_marking, region.forward, region.backward)


def regions_to_petri_net(events: Iterable[str], regions: Iterable[Region]) -> PetriNet:
    """Create a net with a transition for every event and a place for every region."""
    net = PetriNet()
    for event in events:
        net.create_transition(event)

    for region in sorted(regions, key=_region_order):
        place = net.create_place(region.initial_marking)
        for event, forward_weight, backward_weight in zip(region.events, region.forward, region.backward):
            net.create_flow(event, place, forward_weight)
            net.create_flow(place, event, backward_weight)
    return net


def build_lts_cone(ts: TransitionSystem, mode: RegionMode = IMPURE) -> Tuple[PolyhedralCone, EventAlphabet]:
    """
    Build the cone of the regions of the transition system.

    Every chord of the spanning tree contributes an equation stating that the cycle it closes
    does not change the marking. Every event enabled in a reachable state contributes an
    inequality stating that the place does not prevent the event from firing in that state.
    """
    alphabet = ts.alphabet
    cone = _create_cone(alphabet, mode)
    spanning_tree = ts.spanning_tree()

    for chord in spanning_tree.chords:
        cone.add_equation(mode.effect_row(alphabet, spanning_tree.parikh_vector_for_arc(chord)))

    for state in ts.states:
        try:
            reaching_vector = spanning_tree.reaching_parikh_vector(state)
        except UnreachableStateError:
            logger.debug('Skipping unreachable state %s.', state)
            continue

        for event in ts.enabled_events(state):
            cone.add_inequality(mode.enabling_row(alphabet, reaching_vector, event))

    logger.debug('Cone of the transition system regions: %s', cone)
    return (cone, alphabet)


def overapproximate_lts(ts: TransitionSystem,
                        mode: RegionMode = IMPURE,
                        stats: Optional[RunStats] = None) -> Set[Region]:
    """Compute all the extremal regions of the transition system."""
    logger.info('Over-approximating transition system with %d states using %s regions.',
                len(ts.states), mode)
    cone, alphabet = build_lts_cone(ts, mode)
    return _enumerate_regions(cone, alphabet, mode, stats)


def overapproximate_lts_net(ts: TransitionSystem,
                            mode: RegionMode = IMPURE,
                            stats: Optional[RunStats] = None) -> PetriNet:
    regions = overapproximate_lts(ts, mode=mode, stats=stats)
    return regions_to_petri_net(ts.events, regions)


def build_language_cone(automaton: NFA,
                        mode: RegionMode = IMPURE,
                        bounded: Optional[bool] = None,
                        stats: Optional[RunStats] = None) -> Tuple[PolyhedralCone, EventAlphabet]:
    """
    Build the cone of the regions of the prefix closure of the automaton language.

    For every event e the Parikh vectors of the prefixes ending with e are computed as a
    semilinear set. The base of every linear set contributes an inequality stating that e can
    fire after the rest of the prefix. Periods are the effects of loops that can be pumped, their
    effect on the marking must not be negative (must be zero if bounded).
    """
    if bounded is None:
        bounded = synthesis_config.bounded_language_places

    alphabet = automaton.alphabet
    cone = _create_cone(alphabet, mode)

    if stats is not None:
        started = stats.operation_starts(SynthesisOperation.PREFIX_CLOSURE, len(automaton.states))
    prefix_closure = automaton.prefix_closure()
    if stats is not None:
        stats.operation_ends(started, len(prefix_closure.states))

    sigma_star = NFA.sigma_star(alphabet)

    for event in alphabet:
        words_ending_with_event = sigma_star.concatenate(NFA.atomic_language(event))

        if stats is not None:
            started = stats.operation_starts(SynthesisOperation.INTERSECT, len(prefix_closure.states))
        prefixes_ending_with_event = prefix_closure.intersection(words_ending_with_event)
        if stats is not None:
            stats.operation_ends(started, len(prefixes_ending_with_event.states))

        prefix_vectors = automaton_to_semilinear_set(prefixes_ending_with_event, stats=stats)
        logger.debug('Parikh vectors of the prefixes ending with %s: %s', event, prefix_vectors)

        for linear_set in prefix_vectors:
            vector_before_event = linear_set.base - ParikhVector.of(event)
            cone.add_inequality(mode.enabling_row(alphabet, vector_before_event, event))

            for period in linear_set.sorted_periods():
                effect_row = mode.effect_row(alphabet, period)
                cone.add_inequality(effect_row)
                if bounded:
                    cone.add_inequality([-coefficient for coefficient in effect_row])

    logger.debug('Cone of the language regions: %s', cone)
    return (cone, alphabet)


def overapproximate_language_regions(automaton: NFA,
                                     mode: RegionMode = IMPURE,
                                     bounded: Optional[bool] = None,
                                     stats: Optional[RunStats] = None) -> Set[Region]:
    logger.info('Over-approximating language of automaton with %d states using %s regions.',
                len(automaton.states), mode)
    cone, alphabet = build_language_cone(automaton, mode=mode, bounded=bounded, stats=stats)
    return _enumerate_regions(cone, alphabet, mode, stats)


def overapproximate_language(automaton: NFA,
                             mode: RegionMode = IMPURE,
                             bounded: Optional[bool] = None,
                             stats: Optional[RunStats] = None) -> PetriNet:
    """
    Compute the net over-approximating the prefix closure of the automaton language.

    :param bounded: Force the pumpable loops of the language to keep the marking of every place
                    unchanged. Defaults to `SynthesisConfig.bounded_language_places`.
    """
    regions = overapproximate_language_regions(automaton, mode=mode, bounded=bounded, stats=stats)
    return regions_to_petri_net(automaton.alphabet.events, regions)
