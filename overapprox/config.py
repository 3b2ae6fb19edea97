from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class MinimizationAlgorithms(IntEnum):
    HOPCROFT = 1
    BRZOZOWSKI = 2


@dataclass
class SynthesisConfig(object):
    """Synthesis configuration options."""
    minimization_method: MinimizationAlgorithms = MinimizationAlgorithms.HOPCROFT
    """Minimization used before an automaton is converted into a semilinear set."""

    bounded_language_places: bool = False
    """
    Turn the period inequalities of the language over-approximation into equations.

    Every period p of a linear set then contributes both p >= 0 and -p >= 0, so pumping a loop
    of the language cannot change the marking of any place.
    """

    max_kleene_star_members: Optional[int] = None
    """Refuse to compute the Kleene star of semilinear sets with more linear sets than this."""

    max_intermediate_rays: Optional[int] = None
    """Abort the double description method when an intermediate ray set grows above this size."""

    equivalence_unrolling_bound: int = 12
    """Per-event cutoff of the unrolling used when checking semilinear sets for equivalence."""

    # Performance tracking options
    track_operation_runtime: bool = False


synthesis_config = SynthesisConfig()
