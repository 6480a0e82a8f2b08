"""
Booking status machine.

Tour and experience bookings share one lifecycle shape and differ only in
the name of the "accepted" state:

- tour:        pending -> approved  -> cancelled
- experience:  pending -> confirmed -> cancelled

Every allowed move is listed in ``TRANSITIONS`` together with the side
effects the repository must apply while the booking row is locked.
``cancelled`` is terminal: nothing leaves it, re-cancelling included.
Staying in a non-terminal status is allowed so admins can update notes
(or, for experiences, the payment status) without moving the booking.
"""

from __future__ import annotations

from enum import Enum

TOUR = "tour"
EXPERIENCE = "experience"
PRODUCT_TYPES = (TOUR, EXPERIENCE)

PENDING = "pending"
APPROVED = "approved"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

STATUSES: dict[str, tuple[str, ...]] = {
    TOUR: (PENDING, APPROVED, CANCELLED),
    EXPERIENCE: (PENDING, CONFIRMED, CANCELLED),
}

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_PAID = "paid"
PAYMENT_REFUNDED = "refunded"
PAYMENT_FAILED = "failed"

PAYMENT_STATUSES = (
    PAYMENT_PENDING,
    PAYMENT_COMPLETED,
    PAYMENT_PAID,
    PAYMENT_REFUNDED,
    PAYMENT_FAILED,
)

# Money has been received for these
SETTLED_PAYMENT_STATUSES = frozenset({PAYMENT_COMPLETED, PAYMENT_PAID})


class SideEffect(Enum):
    REFUND_IF_SETTLED = "refund_if_settled"


NO_EFFECTS: frozenset[SideEffect] = frozenset()
REFUND: frozenset[SideEffect] = frozenset({SideEffect.REFUND_IF_SETTLED})


def _table(accepted: str) -> dict[tuple[str, str], frozenset[SideEffect]]:
    return {
        (PENDING, PENDING): NO_EFFECTS,
        (PENDING, accepted): NO_EFFECTS,
        (PENDING, CANCELLED): REFUND,
        (accepted, accepted): NO_EFFECTS,
        (accepted, PENDING): NO_EFFECTS,
        (accepted, CANCELLED): REFUND,
    }


TRANSITIONS: dict[str, dict[tuple[str, str], frozenset[SideEffect]]] = {
    TOUR: _table(APPROVED),
    EXPERIENCE: _table(CONFIRMED),
}


class InvalidTransition(Exception):
    """Raised when a booking cannot move from its current status to the target."""

    def __init__(self, product_type: str, current: str, target: str):
        self.product_type = product_type
        self.current = current
        self.target = target
        if current == CANCELLED and target == CANCELLED:
            message = "Booking is already cancelled"
        elif target not in STATUSES.get(product_type, ()):
            message = f"'{target}' is not a valid status for a {product_type} booking"
        else:
            message = f"Cannot change booking status from {current} to {target}"
        super().__init__(message)


def allowed_statuses(product_type: str) -> tuple[str, ...]:
    return STATUSES[product_type]


def is_valid_status(product_type: str, status: str) -> bool:
    return status in STATUSES.get(product_type, ())


def is_settled(payment_status: str) -> bool:
    return payment_status in SETTLED_PAYMENT_STATUSES


def resolve_transition(product_type: str, current: str, target: str) -> frozenset[SideEffect]:
    """Return the side effects of ``current -> target`` or raise ``InvalidTransition``."""

    try:
        return TRANSITIONS[product_type][(current, target)]
    except KeyError:
        raise InvalidTransition(product_type, current, target) from None


def initial_payment_status(product_type: str, payment_method: str | None) -> str:
    """Tour bookings paid offline are recorded as already settled."""

    if product_type == TOUR and payment_method and payment_method != "online":
        return PAYMENT_COMPLETED
    return PAYMENT_PENDING
