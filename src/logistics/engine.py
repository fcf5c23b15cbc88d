"""Logistics engine — the interface offered to order and notification subsystems.

Each call runs in the active domain context. Mutations go through domain
commands, and the record locks are held around the whole unit of work so
that concurrent calls on the same rider or delivery are serialized. Nothing
here retries: a lost race surfaces to the caller as ``RiderUnavailable`` or
``InvalidTransition``.
"""

import json
from contextlib import contextmanager

from protean.utils.globals import current_domain

from logistics.delivery.assignment import AssignRider, UnassignRider
from logistics.delivery.cancellation import CancelDelivery
from logistics.delivery.creation import CreateDelivery
from logistics.delivery.delivery import Delivery
from logistics.delivery.lifecycle import parse_status
from logistics.delivery.rating import SubmitRating
from logistics.delivery.status import AdvanceDeliveryStatus
from logistics.errors import InvalidTransition, NoCandidateAvailable, RiderUnavailable
from logistics.locking import RecordLocks
from logistics.pricing.rules import Quote, price
from logistics.projections.delivery_tracking import DeliveryTrackingView, find_by_tracking_id
from logistics.rider import matching
from logistics.rider.ledger import EarningsSummary, earnings_summary as _earnings_summary
from logistics.rider.registration import RegisterRider, VerifyRider
from logistics.rider.rider import Rider
from logistics.routing.classifier import classify
from logistics.utils.logging import get_logger

logger = get_logger(__name__)

record_locks = RecordLocks()


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _deliveries():
    return current_domain.repository_for(Delivery)


def _riders():
    return current_domain.repository_for(Rider)


@contextmanager
def _delivery_scope(delivery_id: str):
    """Hold the delivery lock and, if it has one, its rider's lock."""
    with record_locks.hold("delivery", delivery_id):
        rider_id = _deliveries().get(delivery_id).rider_id
        if rider_id:
            with record_locks.hold("rider", rider_id):
                yield
        else:
            yield


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------
def quote(product_type, weight_kg, pickup_district, delivery_district) -> Quote:
    """Charge, commission and route class for a prospective delivery. No side effects."""
    within_city = classify(pickup_district, delivery_district).within_city
    return price(product_type, weight_kg, within_city)


# ---------------------------------------------------------------------------
# Delivery lifecycle
# ---------------------------------------------------------------------------
def create_delivery(
    pickup: dict,
    delivery_address: dict,
    product: dict,
    order_id: str | None = None,
    customer_id: str | None = None,
) -> Delivery:
    delivery_id = _process(
        CreateDelivery(
            order_id=order_id,
            customer_id=customer_id,
            pickup=json.dumps(pickup),
            delivery_address=json.dumps(delivery_address),
            product=json.dumps(product or {}),
        )
    )
    logger.info("Delivery created", delivery_id=delivery_id, order_id=order_id)
    return _deliveries().get(delivery_id)


def advance_status(delivery_id: str, target_status, on_time: bool = True) -> Delivery:
    """Apply one status change; on DELIVERED the rider is credited and freed atomically."""
    target = parse_status(target_status)
    with _delivery_scope(delivery_id):
        try:
            _process(AdvanceDeliveryStatus(delivery_id=delivery_id, status=target.value, on_time=on_time))
        except InvalidTransition as exc:
            logger.info("Status transition rejected", delivery_id=delivery_id, target=target.value, errors=exc.messages)
            raise
        delivery = _deliveries().get(delivery_id)
    logger.info("Delivery status applied", delivery_id=delivery_id, status=delivery.status)
    return delivery


def cancel_delivery(delivery_id: str, reason: str | None = None) -> Delivery:
    with _delivery_scope(delivery_id):
        try:
            _process(CancelDelivery(delivery_id=delivery_id, reason=reason))
        except InvalidTransition as exc:
            logger.info("Cancellation rejected", delivery_id=delivery_id, errors=exc.messages)
            raise
        delivery = _deliveries().get(delivery_id)
    logger.info("Delivery cancelled", delivery_id=delivery_id, reason=reason)
    return delivery


def track(tracking_id: str) -> DeliveryTrackingView:
    return find_by_tracking_id(tracking_id)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
def find_candidates(division: str, district: str) -> list[Rider]:
    return matching.find_candidates(division, district)


def assign(rider_id: str, delivery_id: str) -> Rider:
    """Bind ``rider_id`` to ``delivery_id``; exactly one of two racing calls wins."""
    with record_locks.hold("delivery", delivery_id), record_locks.hold("rider", rider_id):
        try:
            _process(AssignRider(delivery_id=delivery_id, rider_id=rider_id))
        except RiderUnavailable as exc:
            logger.info("Rider assignment lost", rider_id=rider_id, delivery_id=delivery_id, errors=exc.messages)
            raise
    logger.info("Rider assigned", rider_id=rider_id, delivery_id=delivery_id)
    return _riders().get(rider_id)


def match_rider(delivery_id: str) -> Rider:
    """Assign the best-ranked candidate from the delivery's pickup district.

    Raises ``NoCandidateAvailable`` when the pool is empty and
    ``RiderUnavailable`` when the chosen rider was taken in the meantime.
    """
    delivery = _deliveries().get(delivery_id)
    candidates = matching.find_candidates(delivery.pickup.division, delivery.pickup.district)
    if not candidates:
        logger.info(
            "No rider available",
            delivery_id=delivery_id,
            division=delivery.pickup.division,
            district=delivery.pickup.district,
        )
        raise NoCandidateAvailable(
            {"rider_id": [f"No verified, available rider in {delivery.pickup.district}, {delivery.pickup.division}"]}
        )
    return assign(str(candidates[0].id), delivery_id)


def unassign_rider(delivery_id: str, reason: str | None = None) -> Delivery:
    with _delivery_scope(delivery_id):
        rider_id = _process(UnassignRider(delivery_id=delivery_id, reason=reason))
        delivery = _deliveries().get(delivery_id)
    logger.info("Rider unassigned", rider_id=rider_id, delivery_id=delivery_id, reason=reason)
    return delivery


def release(rider_id: str) -> Rider:
    """Free a rider, taking it off its current delivery. Idle riders are left as they are."""
    rider = _riders().get(rider_id)
    if rider.current_delivery_id:
        unassign_rider(rider.current_delivery_id, reason="Rider released")
    return _riders().get(rider_id)


# ---------------------------------------------------------------------------
# Riders and feedback
# ---------------------------------------------------------------------------
def register_rider(**details) -> Rider:
    rider_id = _process(RegisterRider(**details))
    logger.info("Rider registered", rider_id=rider_id, district=details.get("district"))
    return _riders().get(rider_id)


def verify_rider(rider_id: str) -> Rider:
    with record_locks.hold("rider", rider_id):
        _process(VerifyRider(rider_id=rider_id))
    return _riders().get(rider_id)


def submit_rating(delivery_id: str, customer_id: str, rating, comment: str | None = None) -> Rider:
    with _delivery_scope(delivery_id):
        rider_id = _process(
            SubmitRating(delivery_id=delivery_id, customer_id=customer_id, rating=rating, comment=comment)
        )
    logger.info("Rating submitted", delivery_id=delivery_id, rider_id=rider_id, rating=rating)
    return _riders().get(rider_id)


def top_riders(limit: int = 10) -> list[Rider]:
    return matching.top_riders(limit)


def earnings_summary(rider_id: str) -> EarningsSummary:
    return _earnings_summary(_riders().get(rider_id))


def rider_deliveries(rider_id: str) -> list[Delivery]:
    deliveries = _deliveries()._dao.query.filter(rider_id=rider_id).all().items
    return sorted(deliveries, key=lambda d: d.created_at, reverse=True)


def get_delivery(delivery_id: str) -> Delivery:
    return _deliveries().get(delivery_id)


def get_rider(rider_id: str) -> Rider:
    return _riders().get(rider_id)
