"""
Discovery State Machines
========================

Bounded retries and pipeline progress through explicit states.

Attempt machine (one per endpoint):

    ┌─────────┐
    │  IDLE   │ ─── begin() ───► ATTEMPTING ◄──── resume() ────┐
    └─────────┘                      │                          │
                          ┌──────────┴──────────┐               │
                      succeed()               fail()            │
                          │                     │               │
                          ▼          attempts < max ──► ┌─────────┐
                    ┌───────────┐               │       │ WAITING │
                    │ SUCCEEDED │      attempts == max  └─────────┘
                    └───────────┘               │
                                                ▼
                                          ┌───────────┐
                                          │ EXHAUSTED │
                                          └───────────┘

TERMINATION GUARANTEE:
- SUCCEEDED and EXHAUSTED have NO outgoing transitions
- Every fail() consumes one attempt
- Attempts are bounded by max_attempts
- Therefore: at most max_attempts calls hit one endpoint

Pipeline machine (one per network):

    RESOLVING_IDENTITY -> LISTING_SERVICES -> FETCHING_DESCRIPTOR <-> RENDERING
                                                    |
                                    WRITING_MANIFEST -> DONE

    FAILED is reachable from every non-terminal state.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Attempt Machine
# =============================================================================

class AttemptState(Enum):
    """The finite set of per-endpoint attempt states."""
    IDLE = auto()        # Not yet started
    ATTEMPTING = auto()  # A call is in flight
    WAITING = auto()     # Backing off before the next call
    SUCCEEDED = auto()   # Terminal: a call returned
    EXHAUSTED = auto()   # Terminal: out of attempts


@dataclass
class AttemptContext:
    """Context tracked by the attempt machine."""
    attempts: int = 0
    max_attempts: int = 3
    wait_seconds: float = 2.0
    last_error: Optional[str] = None


class AttemptFSM:
    """
    Finite state machine for retrying one operation on one endpoint.

    The WAITING state carries a fixed duration (`wait_seconds`); whoever
    drives the machine sleeps for it before calling resume().
    """

    TRANSITIONS = {
        AttemptState.IDLE: {AttemptState.ATTEMPTING},
        AttemptState.ATTEMPTING: {
            AttemptState.SUCCEEDED,
            AttemptState.WAITING,
            AttemptState.EXHAUSTED,
        },
        AttemptState.WAITING: {AttemptState.ATTEMPTING},
        AttemptState.SUCCEEDED: set(),   # Terminal - NO outgoing
        AttemptState.EXHAUSTED: set(),   # Terminal - NO outgoing
    }

    def __init__(self, max_attempts: int = 3, wait_seconds: float = 2.0):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.state = AttemptState.IDLE
        self.context = AttemptContext(max_attempts=max_attempts, wait_seconds=wait_seconds)

    @property
    def attempts(self) -> int:
        return self.context.attempts

    @property
    def wait_seconds(self) -> float:
        return self.context.wait_seconds

    @property
    def is_waiting(self) -> bool:
        return self.state == AttemptState.WAITING

    def is_terminal(self) -> bool:
        return self.state in {AttemptState.SUCCEEDED, AttemptState.EXHAUSTED}

    def can_transition(self, to_state: AttemptState) -> bool:
        return to_state in self.TRANSITIONS[self.state]

    def begin(self) -> bool:
        """Start the first attempt."""
        if self.state != AttemptState.IDLE:
            return False
        self.state = AttemptState.ATTEMPTING
        self.context.attempts = 1
        return True

    def succeed(self) -> bool:
        if self.state != AttemptState.ATTEMPTING:
            return False
        self.state = AttemptState.SUCCEEDED
        return True

    def fail(self, error: str = "") -> bool:
        """
        Record a failed attempt.

        Moves to WAITING while attempts remain, EXHAUSTED otherwise.
        """
        if self.state != AttemptState.ATTEMPTING:
            return False
        self.context.last_error = error
        if self.context.attempts >= self.context.max_attempts:
            self.state = AttemptState.EXHAUSTED
        else:
            self.state = AttemptState.WAITING
        return True

    def resume(self) -> bool:
        """Leave WAITING and start the next attempt."""
        if self.state != AttemptState.WAITING:
            return False
        self.state = AttemptState.ATTEMPTING
        self.context.attempts += 1
        return True

    def check_invariants(self) -> bool:
        """These should NEVER be violated."""
        assert 0 <= self.context.attempts <= self.context.max_attempts

        if self.state == AttemptState.IDLE:
            assert self.context.attempts == 0

        if self.state == AttemptState.EXHAUSTED:
            assert self.context.attempts == self.context.max_attempts

        return True


# =============================================================================
# Pipeline Machine
# =============================================================================

class PipelineState(Enum):
    """Where one network's pipeline currently is."""
    RESOLVING_IDENTITY = auto()
    LISTING_SERVICES = auto()
    FETCHING_DESCRIPTOR = auto()
    RENDERING = auto()
    WRITING_MANIFEST = auto()
    DONE = auto()      # Terminal
    FAILED = auto()    # Terminal


class PipelineFSM:
    """Tracks a network pipeline and rejects out-of-order steps."""

    TRANSITIONS = {
        PipelineState.RESOLVING_IDENTITY: {PipelineState.LISTING_SERVICES, PipelineState.FAILED},
        PipelineState.LISTING_SERVICES: {
            PipelineState.FETCHING_DESCRIPTOR,
            PipelineState.WRITING_MANIFEST,   # no services to process
            PipelineState.FAILED,
        },
        PipelineState.FETCHING_DESCRIPTOR: {
            PipelineState.RENDERING,
            PipelineState.FETCHING_DESCRIPTOR,   # service skipped
            PipelineState.WRITING_MANIFEST,
            PipelineState.FAILED,
        },
        PipelineState.RENDERING: {
            PipelineState.FETCHING_DESCRIPTOR,
            PipelineState.WRITING_MANIFEST,
            PipelineState.FAILED,
        },
        PipelineState.WRITING_MANIFEST: {PipelineState.DONE, PipelineState.FAILED},
        PipelineState.DONE: set(),
        PipelineState.FAILED: set(),
    }

    def __init__(self):
        self.state = PipelineState.RESOLVING_IDENTITY
        self.failure_reason: Optional[str] = None

    def is_terminal(self) -> bool:
        return self.state in {PipelineState.DONE, PipelineState.FAILED}

    def can_transition(self, to_state: PipelineState) -> bool:
        return to_state in self.TRANSITIONS[self.state]

    def advance(self, to_state: PipelineState) -> bool:
        if to_state == PipelineState.FAILED:
            return self.fail("unspecified failure")
        if not self.can_transition(to_state):
            return False
        self.state = to_state
        return True

    def fail(self, reason: str) -> bool:
        if self.is_terminal():
            return False
        self.state = PipelineState.FAILED
        self.failure_reason = reason
        return True
