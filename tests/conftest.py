from overapprox.transition_system import TransitionSystem

import pytest


@pytest.fixture
def self_loop_ts() -> TransitionSystem:
    """Single state with a self-loop labeled by a."""
    ts = TransitionSystem(initial_state=0)
    ts.add_arc(0, 'a', 0)
    return ts


@pytest.fixture
def two_branch_ts() -> TransitionSystem:
    """0 -a-> 1, 0 -b-> 2"""
    ts = TransitionSystem(initial_state=0)
    ts.add_arc(0, 'a', 1)
    ts.add_arc(0, 'b', 2)
    return ts


@pytest.fixture
def path_ts() -> TransitionSystem:
    """0 -a-> 1 -b-> 2"""
    ts = TransitionSystem(initial_state=0)
    ts.add_arc(0, 'a', 1)
    ts.add_arc(1, 'b', 2)
    return ts


@pytest.fixture
def path_ts_with_unreachable_state(path_ts: TransitionSystem) -> TransitionSystem:
    """The path system extended by the state 3 that is not reachable, 3 -a-> 0"""
    path_ts.add_arc(3, 'a', 0)
    return path_ts


@pytest.fixture
def cycle_ts() -> TransitionSystem:
    """0 -a-> 1 -b-> 0"""
    ts = TransitionSystem(initial_state=0)
    ts.add_arc(0, 'a', 1)
    ts.add_arc(1, 'b', 0)
    return ts


@pytest.fixture
def diamond_ts() -> TransitionSystem:
    """Concurrent a and b: 0 -a-> 1 -b-> 3, 0 -b-> 2 -a-> 3"""
    ts = TransitionSystem(initial_state=0)
    ts.add_arc(0, 'a', 1)
    ts.add_arc(0, 'b', 2)
    ts.add_arc(1, 'b', 3)
    ts.add_arc(2, 'a', 3)
    return ts


@pytest.fixture
def two_state_cycle_same_label_ts() -> TransitionSystem:
    """0 -a-> 1 -a-> 0"""
    ts = TransitionSystem(initial_state=0)
    ts.add_arc(0, 'a', 1)
    ts.add_arc(1, 'a', 0)
    return ts


@pytest.fixture
def path_with_loops_ts() -> TransitionSystem:
    """0 -a-> 1 -c-> 2 -a-> 3, with b self-loops in the states 1 and 3"""
    ts = TransitionSystem(initial_state=0)
    ts.add_arc(0, 'a', 1)
    ts.add_arc(1, 'b', 1)
    ts.add_arc(1, 'c', 2)
    ts.add_arc(2, 'a', 3)
    ts.add_arc(3, 'b', 3)
    return ts


@pytest.fixture
def event_only_in_unreachable_part_ts() -> TransitionSystem:
    """0 -a-> 1, the event c occurs only on the arc 3 -c-> 0 leaving an unreachable state"""
    ts = TransitionSystem(initial_state=0)
    ts.add_arc(0, 'a', 1)
    ts.add_arc(3, 'c', 0)
    return ts
