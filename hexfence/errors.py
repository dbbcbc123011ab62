# hexfence/errors.py
# None of these leave extract_outer_boundary / build_fence_chain; they mark
# the recoverable failure paths inside the walk and the layering loop.


class HexFenceError(Exception):
    pass


class BoundaryUnavailable(HexFenceError):
    """The grid could not resolve a cell's boundary."""

    def __init__(self, cell, reason=""):
        self.cell = cell
        self.reason = reason
        msg = f"boundary unavailable for cell {cell!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class Unattributable(HexFenceError):
    """An extracted boundary maps back to no contributing cell."""


class DeadEndChain(HexFenceError):
    """A directed-edge walk ran out of unused outgoing edges."""


class UnclosedLoop(HexFenceError):
    """A walk closed on itself but is too short to be a ring."""


class IterationLimitExceeded(HexFenceError):
    """The chain walk hit its step ceiling."""
