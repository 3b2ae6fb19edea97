from itertools import combinations
from typing import (
    Dict,
    Generator,
    Iterable,
    List,
    Tuple,
    TypeVar,
)

T = TypeVar('T')
S = TypeVar('S')

def carthesian_product(op0: Iterable[T], op1: Iterable[S]) -> List[Tuple[T, S]]:
    product: List[Tuple[T, S]] = list()

    for a in op0:
        for b in op1:
            product.append((a, b))

    return product


def create_enumeration_state_translation_map(states: Iterable[S], start_from: int = 0) -> Tuple[int, Dict[S, int]]:
    """
    Assign consecutive integers to the given states.

    :returns: The first unused number and the translation map.
    """
    state_cnt = start_from
    translation: Dict[S, int] = {}
    for state in states:
        translation[state] = state_cnt
        state_cnt += 1
    return (state_cnt, translation)


def power_set_indices(size: int) -> Generator[Tuple[int, ...], None, None]:
    """
    Enumerate all subsets of {0, ..., size-1} as sorted index tuples, starting with the empty one.

    There are 2**size of them; callers are expected to bound `size`.
    """
    for subset_size in range(size + 1):
        yield from combinations(range(size), subset_size)
