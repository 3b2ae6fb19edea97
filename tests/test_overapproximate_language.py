from overapprox.alphabet import EventAlphabet
from overapprox.automatons import NFA
from overapprox.config import synthesis_config
from overapprox.overapproximation import (
    build_language_cone,
    overapproximate_language,
    overapproximate_language_regions,
    overapproximate_lts,
)
from overapprox.regions import (
    IMPURE,
    PURE,
)
from overapprox.stats import (
    RunStats,
    SynthesisOperation,
)
from overapprox.test_utils import (
    region_as_tuple,
    signed_region_as_tuple,
)
from overapprox.transition_system import TransitionSystem

import pytest


def test_single_word_matches_its_transition_system(path_ts: TransitionSystem):
    regions = overapproximate_language_regions(NFA.from_word('ab'))
    assert regions == overapproximate_lts(path_ts)
    assert {region_as_tuple(region) for region in regions} == {
        (0, 1, 0, 0, 0),
        (1, 0, 0, 0, 0),
        (1, 0, 0, 1, 0),
        (1, 0, 0, 0, 1),
        (0, 1, 0, 0, 1),
        (0, 0, 1, 0, 0),
    }


def test_single_word_pure():
    regions = overapproximate_language_regions(NFA.from_word('ab'), mode=PURE)
    assert {signed_region_as_tuple(region) for region in regions} == {(0, 0, 1), (0, 1, -1), (1, -1, 0)}


@pytest.mark.parametrize('mode', (PURE, IMPURE))
def test_net_accepts_prefixes_of_single_word(mode):
    net = overapproximate_language(NFA.from_word('ab'), mode=mode)
    for word in ('', 'a', 'ab'):
        assert net.accepts(word), word
    for word in ('b', 'ba', 'aa', 'abb'):
        assert not net.accepts(word), word


def test_kleene_star():
    a_star = NFA.atomic_language('a').kleene_star()
    regions = overapproximate_language_regions(a_star)
    assert {region_as_tuple(region) for region in regions} == {(1, 0, 0), (0, 1, 0), (1, 1, 1)}


def test_kleene_star_bounded():
    a_star = NFA.atomic_language('a').kleene_star()
    regions = overapproximate_language_regions(a_star, bounded=True)
    assert {region_as_tuple(region) for region in regions} == {(1, 0, 0), (1, 1, 1)}


def test_bounded_places_from_config(monkeypatch):
    monkeypatch.setattr(synthesis_config, 'bounded_language_places', True)
    a_star = NFA.atomic_language('a').kleene_star()

    regions = overapproximate_language_regions(a_star)
    assert {region_as_tuple(region) for region in regions} == {(1, 0, 0), (1, 1, 1)}

    # Explicit argument wins over the configuration
    regions = overapproximate_language_regions(a_star, bounded=False)
    assert {region_as_tuple(region) for region in regions} == {(1, 0, 0), (0, 1, 0), (1, 1, 1)}


def test_net_of_kleene_star_accepts_everything():
    net = overapproximate_language(NFA.atomic_language('a').kleene_star())
    for length in range(6):
        assert net.accepts('a' * length)


def test_empty_language():
    automaton = NFA.empty_language(EventAlphabet.from_events('a'))
    regions = overapproximate_language_regions(automaton)
    assert {region_as_tuple(region) for region in regions} == {(1, 0, 0), (0, 1, 0), (0, 0, 1)}

    net = overapproximate_language(automaton)
    assert net.accepts('')
    assert not net.accepts('a')


def test_empty_language_pure():
    # Without any constraint on the weight of a, both of its directions are places
    automaton = NFA.empty_language(EventAlphabet.from_events('a'))
    regions = overapproximate_language_regions(automaton, mode=PURE)
    assert {signed_region_as_tuple(region) for region in regions} == {(1, 0), (0, 1), (0, -1)}

    net = overapproximate_language(automaton, mode=PURE)
    assert net.accepts('')
    assert not net.accepts('a')


def test_language_with_alternatives():
    # Same prefixes as the diamond transition system
    automaton = NFA.from_word('ab').union(NFA.from_word('ba'))
    net = overapproximate_language(automaton)

    for word in ('', 'a', 'b', 'ab', 'ba'):
        assert net.accepts(word), word
    for word in ('aa', 'bb', 'aba', 'bab'):
        assert not net.accepts(word), word


def test_language_cone_rows():
    cone, alphabet = build_language_cone(NFA.from_word('ab'))

    assert alphabet == EventAlphabet.from_events('ab')
    assert cone.dimension == 5
    assert not cone.equations
    # a fires from the empty prefix, b after a
    assert (1, 0, 0, -1, 0) in cone.inequalities
    assert (1, 1, 0, -1, -1) in cone.inequalities


def test_language_stats():
    stats = RunStats()
    overapproximate_language(NFA.from_word('ab'), stats=stats)

    assert len(stats.operations(SynthesisOperation.PREFIX_CLOSURE)) == 1
    assert len(stats.operations(SynthesisOperation.INTERSECT)) == 2
    assert len(stats.operations(SynthesisOperation.STATE_ELIMINATION)) == 2
    assert len(stats.operations(SynthesisOperation.RAY_ENUMERATION)) == 1

    automaton_operations = (SynthesisOperation.PREFIX_CLOSURE,
                            SynthesisOperation.INTERSECT,
                            SynthesisOperation.MINIMIZE)
    automaton_sizes = [stat.output_size for stat in stats.operations() if stat.operation in automaton_operations]
    # The prefix closure of ab has a state for each of its three prefixes
    assert stats.max_automaton_size >= 3
    assert stats.max_automaton_size == max(automaton_sizes)
    assert stats.max_semilinear_set_size >= 1
