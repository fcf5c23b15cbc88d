"""Delivery status lifecycle.

One state machine parameterized by route class. Both paths share the same
head and tail; cross-district deliveries insert the warehouse relay leg
between them:

    within-city:     UNPAID → PAID → READY_TO_PICKUP → IN_TRANSIT
                     → READY_FOR_DELIVERY → DELIVERED
    cross-district:  UNPAID → PAID → READY_TO_PICKUP → IN_TRANSIT
                     → REACHED_WAREHOUSE → SHIPPED
                     → READY_FOR_DELIVERY → DELIVERED

CANCELLED is reachable from every non-terminal status. DELIVERED and
CANCELLED are terminal.
"""

from enum import Enum

from logistics.errors import InvalidTransition
from logistics.routing.classifier import RouteClass


class DeliveryStatus(Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    READY_TO_PICKUP = "READY_TO_PICKUP"
    IN_TRANSIT = "IN_TRANSIT"
    REACHED_WAREHOUSE = "REACHED_WAREHOUSE"
    SHIPPED = "SHIPPED"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


_HEAD = (
    DeliveryStatus.UNPAID,
    DeliveryStatus.PAID,
    DeliveryStatus.READY_TO_PICKUP,
    DeliveryStatus.IN_TRANSIT,
)
_WAREHOUSE_LEG = (
    DeliveryStatus.REACHED_WAREHOUSE,
    DeliveryStatus.SHIPPED,
)
_TAIL = (
    DeliveryStatus.READY_FOR_DELIVERY,
    DeliveryStatus.DELIVERED,
)

STATUS_PATHS = {
    RouteClass.WITHIN_CITY: _HEAD + _TAIL,
    RouteClass.CROSS_DISTRICT: _HEAD + _WAREHOUSE_LEG + _TAIL,
}

TERMINAL_STATUSES = frozenset({DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED})

# (label, customer-facing message)
STATUS_DISPLAY = {
    DeliveryStatus.UNPAID: ("Payment Pending", "Awaiting payment"),
    DeliveryStatus.PAID: ("Payment Received", "Payment confirmed"),
    DeliveryStatus.READY_TO_PICKUP: ("Ready for Pickup", "Waiting for rider"),
    DeliveryStatus.IN_TRANSIT: ("Pickup in Progress", "Rider collecting item"),
    DeliveryStatus.REACHED_WAREHOUSE: ("Reached Warehouse", "At distribution hub"),
    DeliveryStatus.SHIPPED: ("Shipped", "Forwarded to destination"),
    DeliveryStatus.READY_FOR_DELIVERY: ("Out for Delivery", "On the way to customer"),
    DeliveryStatus.DELIVERED: ("Delivered", "Successfully delivered"),
    DeliveryStatus.CANCELLED: ("Cancelled", "Delivery cancelled"),
}


def route_class_for(within_city: bool) -> RouteClass:
    return RouteClass.WITHIN_CITY if within_city else RouteClass.CROSS_DISTRICT


def status_path(route_class: RouteClass) -> tuple[DeliveryStatus, ...]:
    return STATUS_PATHS[route_class]


def parse_status(value) -> DeliveryStatus:
    """Coerce a status name to ``DeliveryStatus``; unknown names are invalid transitions."""
    if isinstance(value, DeliveryStatus):
        return value
    try:
        return DeliveryStatus(str(value).strip().upper())
    except ValueError:
        raise InvalidTransition({"status": [f"Unknown delivery status: {value!r}"]}) from None


def is_terminal(status: DeliveryStatus) -> bool:
    return status in TERMINAL_STATUSES


def next_status(route_class: RouteClass, current: DeliveryStatus) -> DeliveryStatus | None:
    """The single forward successor of ``current`` on the path, if any."""
    path = status_path(route_class)
    if current not in path:
        return None
    index = path.index(current)
    return path[index + 1] if index + 1 < len(path) else None


def check_transition(route_class: RouteClass, current: DeliveryStatus, target: DeliveryStatus) -> bool:
    """Validate ``current → target``.

    Returns False for a re-entrant transition (nothing to do), True for a
    legal one, and raises ``InvalidTransition`` otherwise.
    """
    if target == current:
        return False
    if is_terminal(current):
        raise InvalidTransition(
            {"status": [f"Cannot transition from {current.value} to {target.value}: delivery is final"]}
        )
    if target == DeliveryStatus.CANCELLED or target == next_status(route_class, current):
        return True
    raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target.value}"]})


def step_of(route_class: RouteClass, status: DeliveryStatus) -> int:
    """1-based position of ``status`` on the path; 0 when it is off the path (cancelled)."""
    path = status_path(route_class)
    return path.index(status) + 1 if status in path else 0


def display(status: DeliveryStatus) -> tuple[str, str]:
    return STATUS_DISPLAY[status]
