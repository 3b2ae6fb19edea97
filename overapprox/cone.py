"""
Polyhedral cones {x : Bx = 0, Ax >= 0} and the enumeration of their extremal rays.

The rays are enumerated with the double description method using exact rational arithmetic:
the equations are eliminated by moving to the coordinates of their null space, and the
inequalities are then added one at a time, each time cutting the current cone by a halfspace
and combining the adjacent pairs of rays lying on the opposite sides of the cutting hyperplane.
The lines of a cone that is not pointed are reported as pairs of opposite rays.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import (
    Dict,
    FrozenSet,
    Iterable,
    List,
    Sequence,
    Set,
    Tuple,
)

import sympy as sp

from overapprox import logger
from overapprox.config import synthesis_config
from overapprox.errors import (
    RayEnumerationError,
    SizeLimitExceeded,
)
from overapprox.linalg import (
    dot,
    invert_matrix,
    matrix_rank,
    normalize_integer_vector,
    nullspace,
)

Row = Tuple[int, ...]
Ray = Tuple[int, ...]


@dataclass
class _DDRay:
    vector: Tuple[sp.Rational, ...]
    zero_set: FrozenSet[int]
    """Indices of the processed inequalities the ray lies on."""


def _format_row(row: Row) -> str:
    terms = [f'{coef}*x[{i}]' for i, coef in enumerate(row) if coef != 0]
    return ' + '.join(terms) if terms else '0'


class PolyhedralCone(object):
    def __init__(self, dimension: int):
        if dimension < 0:
            raise ValueError(f'Cone dimension cannot be negative, got {dimension}.')
        self._dimension = dimension
        # Dictionaries are used as insertion-ordered sets
        self._equations: Dict[Row, None] = {}
        self._inequalities: Dict[Row, None] = {}

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def equations(self) -> Tuple[Row, ...]:
        return tuple(self._equations)

    @property
    def inequalities(self) -> Tuple[Row, ...]:
        return tuple(self._inequalities)

    def _validate_row(self, row: Iterable[int]) -> Row:
        row = tuple(row)
        if len(row) != self._dimension:
            raise ValueError(f'Constraint {row} has {len(row)} coefficients, but the cone dimension is {self._dimension}.')
        return row

    def add_equation(self, row: Iterable[int]):
        """Add the constraint row * x = 0."""
        self._equations[self._validate_row(row)] = None

    def add_inequality(self, row: Iterable[int]):
        """Add the constraint row * x >= 0."""
        self._inequalities[self._validate_row(row)] = None

    def contains(self, vector: Sequence[int]) -> bool:
        vector = self._validate_row(vector)
        return (all(dot(row, vector) == 0 for row in self._equations)
                and all(dot(row, vector) >= 0 for row in self._inequalities))

    def find_extremal_rays(self) -> Set[Ray]:
        """
        Enumerate the extremal rays of the cone.

        If the cone is not pointed, i.e. it contains a nontrivial linear subspace L, the result
        consists of both directions u and -u of every vector u of a basis of L, together with the
        extremal rays of the pointed cone C ∩ L^⊥. Every vector of the cone is then a nonnegative
        combination of the returned vectors.

        A cone given by equations only (e.g. by the single equation 0 = 0) is a linear subspace
        and is taken to have no extremal rays, the result is empty.

        :returns: The rays as integer vectors with coprime components.
        """
        logger.info('Enumerating extremal rays of a cone of dimension %d with %d equations and %d inequalities.',
                    self._dimension, len(self._equations), len(self._inequalities))

        if not self._inequalities:
            logger.info('The cone has no inequalities, it has no extremal rays.')
            return set()

        equations = list(self._equations)
        inequalities = list(self._inequalities)

        result: Set[Ray] = set()

        lineality_space = nullspace(equations + inequalities, self._dimension)
        if lineality_space:
            logger.info('The cone is not pointed (lineality space of dimension %d), '
                        'every line is returned as a pair of opposite rays.', len(lineality_space))
            for line in lineality_space:
                direction = normalize_integer_vector(line)
                result.add(direction)
                result.add(tuple(-value for value in direction))
            equations = equations + lineality_space

        # Coordinates y of the solution space of the equations, x = sum(y_j * basis_j)
        basis = nullspace(equations, self._dimension)
        if not basis:
            logger.info('Ray enumeration done. The cone is a linear subspace, found %d rays.', len(result))
            return result

        projected_inequalities = []
        for row in inequalities:
            projected_row = tuple(dot(row, basis_vector) for basis_vector in basis)
            if any(projected_row):
                projected_inequalities.append(projected_row)

        rays = self._double_description(projected_inequalities, len(basis))

        for ray in rays:
            vector = [sum((y * basis_vector[i] for y, basis_vector in zip(ray.vector, basis)), sp.Integer(0))
                      for i in range(self._dimension)]
            result.add(normalize_integer_vector(vector))

        logger.info('Ray enumeration done. Found %d extremal rays.', len(result))
        for ray_vector in sorted(result):
            logger.debug('Extremal ray: %s', ray_vector)
        return result

    def _select_initial_rows(self, rows: List[Tuple[sp.Rational, ...]], dimension: int) -> List[int]:
        selected: List[int] = []
        for i, row in enumerate(rows):
            candidate_rows = [rows[j] for j in selected] + [row]
            if matrix_rank(candidate_rows, dimension) == len(candidate_rows):
                selected.append(i)
                if len(selected) == dimension:
                    break
        return selected

    def _double_description(self, rows: List[Tuple[sp.Rational, ...]], dimension: int) -> List[_DDRay]:
        """Extremal rays of the pointed cone {y : rows * y >= 0} of the given dimension."""
        selected_rows = self._select_initial_rows(rows, dimension)
        if len(selected_rows) < dimension:
            raise RayEnumerationError(
                f'Constraint system has rank {len(selected_rows)} < {dimension}, the cone is not pointed.')

        # The columns of the inverse of the selected rows generate the cone given by the selected rows
        inverse = invert_matrix([rows[i] for i in selected_rows])
        rays: List[_DDRay] = []
        for j in range(dimension):
            vector = tuple(inverse[i][j] for i in range(dimension))
            zero_set = frozenset(row_index for k, row_index in enumerate(selected_rows) if k != j)
            rays.append(_DDRay(vector=vector, zero_set=zero_set))

        selected = set(selected_rows)
        for row_index, row in enumerate(rows):
            if row_index in selected:
                continue
            rays = self._add_halfspace(rays, row_index, row, dimension)
            logger.debug('Processed inequality %d/%d, intermediate ray count: %d.', row_index + 1, len(rows), len(rays))

            limit = synthesis_config.max_intermediate_rays
            if limit is not None and len(rays) > limit:
                raise SizeLimitExceeded('Intermediate ray set of the double description method', len(rays), limit)
        return rays

    def _add_halfspace(self, rays: List[_DDRay], row_index: int, row: Tuple[sp.Rational, ...],
                       dimension: int) -> List[_DDRay]:
        positive: List[Tuple[_DDRay, sp.Rational]] = []
        negative: List[Tuple[_DDRay, sp.Rational]] = []
        next_rays: List[_DDRay] = []

        for ray in rays:
            value = dot(row, ray.vector)
            if value > 0:
                positive.append((ray, value))
                next_rays.append(ray)
            elif value < 0:
                negative.append((ray, value))
            else:
                next_rays.append(_DDRay(vector=ray.vector, zero_set=ray.zero_set.union((row_index,))))

        for positive_ray, positive_value in positive:
            for negative_ray, negative_value in negative:
                common_zeros = positive_ray.zero_set.intersection(negative_ray.zero_set)
                if len(common_zeros) < dimension - 2:
                    continue
                if not self._are_adjacent(positive_ray, negative_ray, common_zeros, rays):
                    continue

                # Both coefficients are positive, the combination lies on the hyperplane
                combined = [positive_value * n - negative_value * p
                            for p, n in zip(positive_ray.vector, negative_ray.vector)]
                vector = tuple(map(sp.Integer, normalize_integer_vector(combined)))
                next_rays.append(_DDRay(vector=vector, zero_set=common_zeros.union((row_index,))))

        return next_rays

    @staticmethod
    def _are_adjacent(ray: _DDRay, other: _DDRay, common_zeros: FrozenSet[int], rays: List[_DDRay]) -> bool:
        """Combinatorial adjacency test - no third ray may lie on all the common constraints."""
        for candidate in rays:
            if candidate is ray or candidate is other:
                continue
            if candidate.zero_set.issuperset(common_zeros):
                return False
        return True

    def __str__(self) -> str:
        lines = [f'{_format_row(row)} = 0' for row in self._equations]
        lines += [f'{_format_row(row)} >= 0' for row in self._inequalities]
        return '[\n' + '\n'.join(lines) + '\n]'
