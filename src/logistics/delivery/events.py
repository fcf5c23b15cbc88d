"""Delivery domain events — immutable facts about a delivery's lifecycle.

Status events carry enough context (route class, rider, tracking id) for the
tracking read model and for notification subscribers outside the engine.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from logistics.domain import logistics


@logistics.event(part_of="Delivery")
class DeliveryCreated:
    """A delivery was priced, classified and created in UNPAID."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    tracking_id = String(required=True)
    order_id = String()
    customer_id = String()
    product_type = String(required=True)
    weight_kg = Float()
    within_city = Boolean(required=True)
    delivery_charge = Float(required=True)
    rider_commission = Float(required=True)
    pickup_district = String(required=True)
    delivery_district = String(required=True)
    status = String(required=True)
    created_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class DeliveryStatusAdvanced:
    """A delivery moved one step along its path (or into CANCELLED)."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    tracking_id = String()
    from_status = String(required=True)
    to_status = String(required=True)
    within_city = Boolean(required=True)
    rider_id = String()
    advanced_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class DeliveryCompleted:
    """A delivery reached DELIVERED; the rider's ledger was credited."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    rider_commission = Float(required=True)
    on_time = Boolean(required=True)
    delivered_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class DeliveryCancelled:
    """A delivery was cancelled before completion."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    rider_id = String()
    previous_status = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class RiderMatched:
    """A rider was bound to a delivery."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    tracking_id = String()
    matched_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class RiderUnassigned:
    """The assigned rider was taken off a delivery that is still in flight."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    reason = String()
    unassigned_at = DateTime(required=True)
