class UnreachableStateError(LookupError):
    """The state cannot be reached from the initial state of the transition system."""

    def __init__(self, state):
        super().__init__(f'State {state} is not reachable from the initial state.')
        self.state = state


class RayEnumerationError(RuntimeError):
    """The extremal ray enumeration could not produce a complete result."""


class SizeLimitExceeded(RuntimeError):
    """A configured budget for one of the exponential construction steps was exceeded."""

    def __init__(self, what: str, size: int, limit: int):
        super().__init__(f'{what}: size {size} exceeds the configured limit {limit}.')
        self.what = what
        self.size = size
        self.limit = limit
