"""Exact linear algebra over the rationals used by the ray enumeration, on top of sympy matrices."""
from typing import (
    List,
    Sequence,
    Tuple,
)

import sympy as sp

Vector = Tuple[sp.Rational, ...]


def to_matrix(rows: Sequence[Sequence], dimension: int) -> sp.Matrix:
    """Build a sympy matrix with the given number of columns. There might be no rows at all."""
    if not rows:
        return sp.zeros(0, dimension)
    return sp.Matrix([list(row) for row in rows])


def rref(rows: Sequence[Sequence], dimension: int) -> Tuple[List[Vector], List[int]]:
    """
    Compute the reduced row echelon form of the given matrix.

    :returns: The nonzero rows of the reduced matrix and the pivot column of every such row.
    """
    if not rows:
        return ([], [])
    reduced, pivot_columns = to_matrix(rows, dimension).rref()
    return ([tuple(reduced.row(i)) for i in range(len(pivot_columns))], list(pivot_columns))


def matrix_rank(rows: Sequence[Sequence], dimension: int) -> int:
    if not rows:
        return 0
    return to_matrix(rows, dimension).rank()


def nullspace(rows: Sequence[Sequence], dimension: int) -> List[Vector]:
    """Basis of {x : rows * x = 0}, one basis vector per free column of the reduced matrix."""
    if not rows:
        return [tuple(sp.Integer(int(i == j)) for i in range(dimension)) for j in range(dimension)]
    return [tuple(vector) for vector in to_matrix(rows, dimension).nullspace()]


def invert_matrix(rows: Sequence[Sequence]) -> List[Vector]:
    matrix = sp.Matrix([list(row) for row in rows])
    if not matrix.is_square or matrix.rank() < matrix.rows:
        raise ValueError('Cannot invert a singular matrix.')
    inverse = matrix.inv()
    return [tuple(inverse.row(i)) for i in range(inverse.rows)]


def dot(vec1: Sequence, vec2: Sequence) -> sp.Rational:
    assert len(vec1) == len(vec2), 'Cannot take dot product of vectors with different length.'
    return sum((a * b for a, b in zip(vec1, vec2)), sp.Integer(0))


def normalize_integer_vector(vector: Sequence) -> Tuple[int, ...]:
    """Scale the vector by a positive factor to the integer vector with coprime components."""
    rationals = [sp.Rational(value) for value in vector]

    denominator_lcm = sp.ilcm(1, 1, *(value.q for value in rationals))
    integers = [int(value * denominator_lcm) for value in rationals]

    common_divisor = sp.igcd(0, 0, *integers)
    if common_divisor == 0:
        return tuple(integers)
    return tuple(value // common_divisor for value in integers)
