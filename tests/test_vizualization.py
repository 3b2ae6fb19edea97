import re

from overapprox.alphabet import EventAlphabet
from overapprox.automatons import (
    AutomatonType,
    NFA,
)
from overapprox.petri_net import PetriNet
from overapprox.visualization import (
    COLOR_PALETTE,
    compute_label_for_symbols,
    get_color_palette_with_min_size,
    petri_net_into_graphviz,
)

import pytest


alphabet = EventAlphabet.from_events('ab')


def test_colorize_dot():
    nfa = NFA(automaton_type=AutomatonType.NFA, alphabet=alphabet,
              states={0, 1, 2}, initial_states={0}, final_states={1})

    # SCCs: {0, 1}, {2}
    nfa.update_transition_fn(0, 'a', 1)
    nfa.update_transition_fn(1, 'a', 0)
    nfa.update_transition_fn(1, 'b', 2)

    dot = str(nfa.get_visualization_representation().into_graphviz(highlight_sccs=True))
    assert dot
    colorized_lines = [line.strip()[:1] for line in dot.split('\n') if 'fillcolor' in line]
    assert colorized_lines == ['0', '1']

    # SCCs: {0, 1}, {2, 3}
    nfa = NFA(automaton_type=AutomatonType.NFA, alphabet=alphabet,
              states={0, 1, 2, 3}, initial_states={0}, final_states={1})

    nfa.update_transition_fn(0, 'a', 1)
    nfa.update_transition_fn(1, 'a', 0)
    nfa.update_transition_fn(1, 'b', 2)
    nfa.update_transition_fn(2, 'a', 3)
    nfa.update_transition_fn(3, 'b', 2)

    dot = str(nfa.get_visualization_representation().into_graphviz(highlight_sccs=True))

    node_to_fill_color = {}
    for line in dot.split('\n'):
        match = re.match(r'\s*(\d+) \[.*fillcolor="?([#\w]+)"?', line)
        if match:
            node_to_fill_color[match.group(1)] = match.group(2)

    assert len(node_to_fill_color) == 4
    assert node_to_fill_color['0'] == node_to_fill_color['1']
    assert node_to_fill_color['2'] == node_to_fill_color['3']
    assert node_to_fill_color['0'] != node_to_fill_color['2']


def test_final_states_are_double_circles():
    dot = str(NFA.from_word('ab').get_visualization_representation().into_graphviz())
    node_lines = [line.strip() for line in dot.split('\n') if 'shape=' in line and '@Start' not in line]
    assert len(node_lines) == 3
    assert [line[:1] for line in node_lines if 'doublecircle' in line] == ['2']


@pytest.mark.parametrize(
    ('symbols', 'expected_label'),
    (
        (['a'], 'a'),
        (['a', 'b'], 'a, b'),
        ([''], 'ε'),
    )
)
def test_label_for_symbols(symbols, expected_label):
    assert compute_label_for_symbols(symbols) == expected_label


def test_palette_is_extended_when_needed():
    assert get_color_palette_with_min_size(3) == COLOR_PALETTE

    palette = get_color_palette_with_min_size(len(COLOR_PALETTE) + 5)
    assert len(palette) == len(COLOR_PALETTE) + 5
    assert palette[:len(COLOR_PALETTE)] == COLOR_PALETTE


def test_petri_net_into_graphviz():
    net = PetriNet()
    net.create_transition('a')
    place = net.create_place(initial_marking=2)
    net.create_flow(place, 'a', 3)

    dot = str(petri_net_into_graphviz(net))
    assert 'shape=box' in dot
    assert 'shape=circle' in dot
    edge_lines = [line.strip() for line in dot.split('\n') if '->' in line]
    assert edge_lines == ['p_0 -> t_a [label=3]']
