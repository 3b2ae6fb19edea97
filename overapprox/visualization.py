from __future__ import annotations
from dataclasses import (
    dataclass,
    field
)
from random import randint
from typing import (
    Any,
    Dict,
    List,
    Set,
    Tuple,
    TYPE_CHECKING,
    Union,
)

from graphviz import Digraph
import networkx as nx

if TYPE_CHECKING:
    from overapprox.petri_net import PetriNet


COLOR_PALETTE = [  # Node (bg, fg)
    ('#005e73', 'white'),
    ('#0B9396', 'black'),
    ('#94D2BC', 'black'),
    ('#E8D8A6', 'black'),
    ('#EE9B01', 'black'),
    ('#CA6701', 'white'),
    ('#BC3E03', 'black'),
    ('#AF2012', 'white'),
    ('#001219', 'white'),
    ('#9B2326', 'white'),
    ('#b5179e', 'black'),
    ('#606c38', 'white'),
]

ColorPalette = List[Tuple[str, str]]

IntOrStr = Union[str, int]
Transition = Tuple[IntOrStr, List[str], IntOrStr]


def get_color_palette_with_min_size(min_palette_size: int) -> ColorPalette:
    """
    Constructs a color palette with size at least as big as the requirested size.

    The first colors are defined by hand, the missing colors are generated randomly.
    """
    if min_palette_size <= len(COLOR_PALETTE):
        return COLOR_PALETTE

    missing_color_cnt = min_palette_size - len(COLOR_PALETTE)
    random_colors = [('#{0:02x}{1:02x}{2:02x}'.format(randint(0, 255), randint(0, 255), randint(0, 255)), 'black')
                     for i in range(missing_color_cnt)]
    return list(COLOR_PALETTE) + random_colors


def compute_label_for_symbols(symbols: List[str]) -> str:
    return ', '.join(symbol if symbol else 'ε' for symbol in symbols)


@dataclass
class AutomatonVisRepresentation:
    """A class describing the visual representation of the automaton."""
    initial_states: Set[IntOrStr]
    final_states:   Set[IntOrStr]
    states:         Set[IntOrStr]
    transitions:    List[Transition]
    state_labels:   Dict[IntOrStr, Any] = field(default_factory=dict)

    def _compute_state_colors_by_sccs(self) -> Dict[IntOrStr, Tuple[str, str]]:
        """
        Computes a dictionary mapping state to the color of the SCC they are in.

        SCCs of size 1 are ignored.
        """
        graph = nx.DiGraph()
        graph.add_nodes_from(self.states)
        graph.add_edges_from((source, destination) for source, _, destination in self.transitions)

        # Ignore SCCs with only 1 node, they are not interesting
        sccs = sorted((sorted(scc) for scc in nx.strongly_connected_components(graph) if len(scc) > 1),
                      key=lambda scc: str(scc[0]))
        colors = get_color_palette_with_min_size(len(sccs))

        state_colors: Dict[IntOrStr, Tuple[str, str]] = {}
        for i, scc in enumerate(sccs):
            for state in scc:
                state_colors[state] = colors[i]
        return state_colors

    def into_graphviz(self, highlight_sccs: bool = False) -> Digraph:
        """Transforms the stored automaton represenation into graphviz (dot)."""
        graph = Digraph('automaton',
                        strict=True,
                        graph_attr={
                            'rankdir': 'LR',
                            'ranksep': '1'})
        state_colors = self._compute_state_colors_by_sccs() if highlight_sccs else {}

        def gen_color_kwargs(state: IntOrStr) -> Dict:
            if state in state_colors:
                state_color = state_colors[state]
                return {
                        'fillcolor': state_color[0],
                        'fontcolor': state_color[1],
                        'style': 'filled'
                }
            return {}

        for state in sorted(self.states, key=str):
            state_label = str(self.state_labels.get(state, state))
            shape = 'doublecircle' if state in self.final_states else 'circle'
            graph.node(str(state), state_label, shape=shape, **gen_color_kwargs(state))

        for initial_state in sorted(self.initial_states, key=str):
            initial_point_name = f'{initial_state}@Start'
            graph.node(initial_point_name, shape='point')
            graph.edge(initial_point_name, str(initial_state))

        for origin_state, transition_symbols, dest_state in self.transitions:
            graph.edge(str(origin_state), str(dest_state), label=compute_label_for_symbols(transition_symbols))
        return graph


def petri_net_into_graphviz(net: PetriNet) -> Digraph:
    """Render the net as a bipartite graph: circles for places, boxes for transitions."""
    graph = Digraph('petri_net', graph_attr={'rankdir': 'LR'})

    for transition in net.transitions:
        graph.node(f't_{transition}', transition, shape='box')

    for place in net.places:
        tokens = net.initial_marking[place]
        graph.node(f'p_{place}', str(tokens) if tokens else '', shape='circle', xlabel=f'p{place}')

    for place in net.places:
        for transition, weight in net.postset_of_place(place).items():
            label = str(weight) if weight != 1 else ''
            graph.edge(f'p_{place}', f't_{transition}', label=label)
        for transition, weight in net.preset_of_place(place).items():
            label = str(weight) if weight != 1 else ''
            graph.edge(f't_{transition}', f'p_{place}', label=label)
    return graph
