"""Rider domain events — availability changes and ledger entries."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from logistics.domain import logistics


@logistics.event(part_of="Rider")
class RiderRegistered:
    """A rider was onboarded. New riders start available and unverified."""

    __version__ = 1

    rider_id = Identifier(required=True)
    user_id = Identifier(required=True)
    display_name = String(required=True)
    division = String()
    district = String()
    vehicle_type = String()
    registered_at = DateTime(required=True)


@logistics.event(part_of="Rider")
class RiderVerified:
    __version__ = 1

    rider_id = Identifier(required=True)
    verified_at = DateTime(required=True)


@logistics.event(part_of="Rider")
class RiderAssigned:
    """The rider took on a delivery and is no longer available."""

    __version__ = 1

    rider_id = Identifier(required=True)
    delivery_id = Identifier(required=True)
    assigned_at = DateTime(required=True)


@logistics.event(part_of="Rider")
class RiderReleased:
    """The rider is free again, after completion, cancellation or rejection."""

    __version__ = 1

    rider_id = Identifier(required=True)
    delivery_id = Identifier(required=True)
    released_at = DateTime(required=True)


@logistics.event(part_of="Rider")
class EarningRecorded:
    __version__ = 1

    rider_id = Identifier(required=True)
    delivery_id = Identifier(required=True)
    amount = Float(required=True)
    status = String(required=True)
    total_earnings = Float(required=True)
    recorded_at = DateTime(required=True)


@logistics.event(part_of="Rider")
class RatingRecorded:
    __version__ = 1

    rider_id = Identifier(required=True)
    delivery_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    score = Integer(required=True)
    average_rating = Float(required=True)
    rating_count = Integer(required=True)
    rated_at = DateTime(required=True)


@logistics.event(part_of="Rider")
class DeliveryOutcomeRecorded:
    __version__ = 1

    rider_id = Identifier(required=True)
    delivery_id = Identifier(required=True)
    on_time = Boolean(required=True)
    completed_deliveries = Integer(required=True)
    recorded_at = DateTime(required=True)


@logistics.event(part_of="Rider")
class CancellationRecorded:
    __version__ = 1

    rider_id = Identifier(required=True)
    delivery_id = Identifier(required=True)
    cancelled_deliveries = Integer(required=True)
    recorded_at = DateTime(required=True)
