"""BDD tests for delivery pricing and status transitions."""

from logistics.delivery.lifecycle import parse_status
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/delivery_lifecycle.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the delivery was cancelled")
def delivery_was_cancelled(delivery):
    delivery.cancel("Duplicate order")
    delivery._events.clear()


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the delivery moves to "{status}"'))
def move_delivery(delivery, status, error, outcome):
    try:
        outcome["changed"] = delivery.advance_to(parse_status(status))
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the delivery is cancelled with reason "{reason}"'))
def cancel_delivery(delivery, reason, outcome):
    outcome["changed"] = delivery.cancel(reason)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the delivery charge is {charge:g}"))
def delivery_charge_is(delivery, charge):
    assert delivery.delivery_charge == charge


@then(parsers.cfparse("the rider commission is {commission:g}"))
def rider_commission_is(delivery, commission):
    assert delivery.rider_commission == commission


@then("the delivery has a tracking id")
def has_tracking_id(delivery):
    assert delivery.tracking_id.startswith("TRK-")
