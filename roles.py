"""Profile roles and the allowed transitions between them."""

USER = "user"
PENDING_ADMIN = "pending_admin"
ADMIN = "admin"

ROLES = (USER, PENDING_ADMIN, ADMIN)

REQUEST_ADMIN = "request_admin"
APPROVE = "approve"
REJECT = "reject"

TRANSITIONS = {
    (USER, REQUEST_ADMIN): PENDING_ADMIN,
    (PENDING_ADMIN, APPROVE): ADMIN,
    (PENDING_ADMIN, REJECT): USER,
}


class RoleTransitionError(ValueError):
    def __init__(self, role: str, event: str):
        super().__init__(f"Cannot {event.replace('_', ' ')} from role '{role}'")
        self.role = role
        self.event = event


def transition(role: str, event: str) -> str:
    """Return the role reached from `role` on `event`.

    Raises RoleTransitionError for any pair not in TRANSITIONS.
    """
    try:
        return TRANSITIONS[(role, event)]
    except KeyError:
        raise RoleTransitionError(role, event) from None
