"""BDD tests for rider availability, earnings and ratings."""

from logistics.rider.rider import Rider
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/rider_ledger.feature")


def _complete(rider, delivery, on_time=True):
    delivery_id = str(delivery.id)
    rider.record_earning(delivery_id, delivery.rider_commission)
    rider.record_delivery_outcome(delivery_id, on_time=on_time)
    rider.release()


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a newly registered rider", target_fixture="rider")
def new_rider():
    rider = Rider.register(
        user_id="user-bdd-002",
        display_name="Sumi",
        address={"division": "Dhaka", "district": "Dhaka"},
        vehicle_type="bicycle",
    )
    rider._events.clear()
    return rider


@given("the rider completed the delivery")
def rider_completed(rider, delivery):
    _complete(rider, delivery)
    rider._events.clear()


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the rider is assigned the delivery")
def assign_delivery(rider, delivery, error):
    try:
        rider.assign(str(delivery.id))
    except ValidationError as exc:
        error["exc"] = exc


@when("the rider is assigned another delivery")
def assign_another(rider, error):
    try:
        rider.assign("dlv-other-001")
    except ValidationError as exc:
        error["exc"] = exc


@when("the rider completes the delivery on time")
def complete_on_time(rider, delivery):
    _complete(rider, delivery)


@when("the same earning is recorded again")
def record_again(rider, delivery, error):
    try:
        rider.record_earning(str(delivery.id), delivery.rider_commission)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse("the rider is rated {score:d}"))
def rate_rider(rider, score, error):
    try:
        rider.record_rating(f"dlv-rated-{rider.rating_count}", "cust-bdd-001", score)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the rider is not verified")
def rider_not_verified(rider):
    assert rider.is_verified is False


@then(parsers.cfparse("the rider's rating is {rating:g}"))
def rider_rating_is(rider, rating):
    assert rider.rating == rating


@then(parsers.cfparse("the rider has {count:d} ratings"))
def rider_rating_count(rider, count):
    assert rider.rating_count == count
    assert len(rider.rating_history) == count


@then("the rider is still carrying the delivery")
def still_carrying(rider, delivery):
    assert rider.current_delivery_id == str(delivery.id)
    assert rider.is_available is False
