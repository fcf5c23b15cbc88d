"""Shared BDD fixtures and step definitions for the logistics engine."""

import pytest
from logistics.delivery.delivery import Delivery
from logistics.delivery.lifecycle import status_path
from logistics.delivery.events import (
    DeliveryCancelled,
    DeliveryCompleted,
    DeliveryCreated,
    DeliveryStatusAdvanced,
    RiderMatched,
    RiderUnassigned,
)
from logistics.rider.events import (
    CancellationRecorded,
    DeliveryOutcomeRecorded,
    EarningRecorded,
    RatingRecorded,
    RiderAssigned,
    RiderRegistered,
    RiderReleased,
    RiderVerified,
)
from logistics.rider.rider import Rider
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup
_DELIVERY_EVENT_CLASSES = {
    "DeliveryCreated": DeliveryCreated,
    "DeliveryStatusAdvanced": DeliveryStatusAdvanced,
    "DeliveryCompleted": DeliveryCompleted,
    "DeliveryCancelled": DeliveryCancelled,
    "RiderMatched": RiderMatched,
    "RiderUnassigned": RiderUnassigned,
}

_RIDER_EVENT_CLASSES = {
    "RiderRegistered": RiderRegistered,
    "RiderVerified": RiderVerified,
    "RiderAssigned": RiderAssigned,
    "RiderReleased": RiderReleased,
    "EarningRecorded": EarningRecorded,
    "RatingRecorded": RatingRecorded,
    "DeliveryOutcomeRecorded": DeliveryOutcomeRecorded,
    "CancellationRecorded": CancellationRecorded,
}

_DISTRICTS = {
    "within-city": ("Dhaka", "Dhaka"),
    "cross-district": ("Dhaka", "Gazipur"),
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    """Container for step return values (e.g. whether a transition changed anything)."""
    return {"changed": None}


def _delivery(route, product_type, weight):
    pickup_district, delivery_district = _DISTRICTS[route]
    delivery = Delivery.create(
        pickup={"division": "Dhaka", "district": pickup_district},
        delivery_address={"division": "Dhaka", "district": delivery_district},
        product={"product_type": product_type, "weight_kg": weight},
        order_id="ord-bdd-001",
        customer_id="cust-bdd-001",
    )
    delivery._events.clear()
    return delivery


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a {route} {product_type} delivery weighing {weight:g} kg"), target_fixture="delivery")
def priced_delivery(route, product_type, weight):
    return _delivery(route, product_type, weight)


@given(parsers.cfparse("a {route} document delivery"), target_fixture="delivery")
def document_delivery(route):
    return _delivery(route, "document", 0)


@given("a verified rider", target_fixture="rider")
def verified_rider():
    rider = Rider.register(
        user_id="user-bdd-001",
        display_name="Nasir",
        address={"division": "Dhaka", "district": "Dhaka"},
    )
    rider.verify()
    rider._events.clear()
    return rider


@given("the rider is carrying the delivery")
def rider_carries_delivery(rider, delivery):
    rider.assign(str(delivery.id))
    delivery.assign_rider(str(rider.id))
    rider._events.clear()
    delivery._events.clear()


@given(parsers.cfparse('the delivery has reached "{status}"'))
def delivery_reached(delivery, status):
    for step in status_path(delivery.route_class)[1:]:
        delivery.advance_to(step)
        if step.value == status:
            break
    delivery._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the delivery status is "{status}"'))
def delivery_status_is(delivery, status):
    assert delivery.status == status


@then("nothing changed")
def nothing_changed(outcome):
    assert outcome["changed"] is False


@then(parsers.cfparse("the rider has {count:d} completed deliveries"))
def rider_completed_count(rider, count):
    assert rider.completed_deliveries == count


@then(parsers.cfparse("the rider's total earnings are {amount:g}"))
def rider_total_earnings(rider, amount):
    assert rider.total_earnings == amount


@then("the rider is available")
def rider_is_available(rider):
    assert rider.is_available is True
    assert rider.current_delivery_id is None


@then(parsers.cfparse("a delivery {event_type} event is raised"))
def delivery_event_raised(delivery, event_type):
    event_cls = _DELIVERY_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in delivery._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in delivery._events]}"


@then(parsers.cfparse("a rider {event_type} event is raised"))
def rider_event_raised(rider, event_type):
    event_cls = _RIDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in rider._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in rider._events]}"
