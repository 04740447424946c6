"""State machine for one checkout attempt.

    Idle → Reconciling → Checking → Submitting → Committed
    Reconciling → Failed
    Checking → Rejected | Failed
    Submitting → Rejected | Failed
    Rejected | Failed → Reconciling   (re-verify before any retry)

Committed is terminal. The session holds no catalogue or stock state of its
own; it records which step the attempt is in and why it stopped.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError


class CheckoutState(Enum):
    IDLE = "Idle"
    RECONCILING = "Reconciling"
    CHECKING = "Checking"
    SUBMITTING = "Submitting"
    COMMITTED = "Committed"
    REJECTED = "Rejected"
    FAILED = "Failed"


_VALID_TRANSITIONS = {
    CheckoutState.IDLE: {CheckoutState.RECONCILING},
    CheckoutState.RECONCILING: {CheckoutState.CHECKING, CheckoutState.FAILED},
    CheckoutState.CHECKING: {CheckoutState.SUBMITTING, CheckoutState.REJECTED, CheckoutState.FAILED},
    CheckoutState.SUBMITTING: {CheckoutState.COMMITTED, CheckoutState.REJECTED, CheckoutState.FAILED},
    CheckoutState.REJECTED: {CheckoutState.RECONCILING},
    CheckoutState.FAILED: {CheckoutState.RECONCILING},
    CheckoutState.COMMITTED: set(),  # Terminal
}


class CheckoutSession:
    def __init__(self, checkout_id=None):
        self.checkout_id = str(checkout_id or uuid4())
        self.state = CheckoutState.IDLE
        self.order_id = None
        self.reason = None
        self.history = [(CheckoutState.IDLE, datetime.now(UTC))]

    def _assert_can_transition(self, target: CheckoutState):
        if target not in _VALID_TRANSITIONS[self.state]:
            raise ValidationError({"state": [f"Cannot move checkout from {self.state.value} to {target.value}"]})

    def _move(self, target: CheckoutState, reason=None):
        self._assert_can_transition(target)
        self.state = target
        self.reason = reason
        self.history.append((target, datetime.now(UTC)))

    def start_reconciling(self):
        self._move(CheckoutState.RECONCILING)

    def start_checking(self):
        self._move(CheckoutState.CHECKING)

    def start_submitting(self):
        self._move(CheckoutState.SUBMITTING)

    def commit(self, order_id):
        self._move(CheckoutState.COMMITTED)
        self.order_id = str(order_id)

    def reject(self, reason):
        self._move(CheckoutState.REJECTED, reason=reason)

    def fail(self, reason):
        self._move(CheckoutState.FAILED, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self.state]

    def can_transition_to(self, target: CheckoutState) -> bool:
        return target in _VALID_TRANSITIONS[self.state]
