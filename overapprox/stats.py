from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import time
from typing import List, Optional

from overapprox.config import synthesis_config


class SynthesisOperation(Enum):
    MINIMIZE = 'minimization'
    INTERSECT = 'intersection'
    PREFIX_CLOSURE = 'prefix_closure'
    STATE_ELIMINATION = 'state_elimination'
    RAY_ENUMERATION = 'ray_enumeration'


@dataclass
class OperationStartEntry:
    operation: SynthesisOperation
    input_size: int
    start_ns: int


@dataclass
class StatPoint:
    operation: SynthesisOperation
    input_size: int
    """Automaton states, or constraint rows for the ray enumeration."""
    output_size: int
    """Automaton states, linear sets, or rays - depending on the operation."""
    runtime_ns: int


@dataclass
class RunStats:
    max_automaton_size: int = 0
    max_semilinear_set_size: int = 0
    trace: List[StatPoint] = field(default_factory=list)

    def operation_starts(self, operation: SynthesisOperation, input_size: int) -> OperationStartEntry:
        start = time.time_ns() if synthesis_config.track_operation_runtime else 0
        return OperationStartEntry(operation=operation, input_size=input_size, start_ns=start)

    def operation_ends(self, started: OperationStartEntry, output_size: int) -> StatPoint:
        runtime = (time.time_ns() - started.start_ns) if synthesis_config.track_operation_runtime else 0

        if started.operation == SynthesisOperation.STATE_ELIMINATION:
            self.max_semilinear_set_size = max(self.max_semilinear_set_size, output_size)
        elif started.operation != SynthesisOperation.RAY_ENUMERATION:
            self.max_automaton_size = max(self.max_automaton_size, output_size)

        stat = StatPoint(operation=started.operation,
                         input_size=started.input_size,
                         output_size=output_size,
                         runtime_ns=runtime)
        self.trace.append(stat)
        return stat

    def operations(self, operation: Optional[SynthesisOperation] = None) -> List[StatPoint]:
        if operation is None:
            return list(self.trace)
        return [stat for stat in self.trace if stat.operation == operation]
