"""Delivery aggregate (CQRS) — one priced shipment moving along its status path.

Route classification and pricing happen once, at creation: ``within_city``,
``delivery_charge`` and ``rider_commission`` are never recomputed. Changing
the pickup or delivery address means creating a new delivery.

State Machine (see ``logistics.delivery.lifecycle``):
    within-city:    UNPAID → PAID → READY_TO_PICKUP → IN_TRANSIT → READY_FOR_DELIVERY → DELIVERED
    cross-district: UNPAID → PAID → READY_TO_PICKUP → IN_TRANSIT → REACHED_WAREHOUSE → SHIPPED
                    → READY_FOR_DELIVERY → DELIVERED
    any non-terminal → CANCELLED
"""

import secrets
import string
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, String, ValueObject

from logistics.delivery.events import (
    DeliveryCancelled,
    DeliveryCompleted,
    DeliveryCreated,
    DeliveryStatusAdvanced,
    RiderMatched,
    RiderUnassigned,
)
from logistics.delivery.lifecycle import (
    DeliveryStatus,
    check_transition,
    is_terminal,
    route_class_for,
)
from logistics.domain import logistics
from logistics.errors import InvalidTransition
from logistics.pricing.rules import ProductType, parse_product_type, price
from logistics.routing.classifier import RouteClass, classify
from logistics.shared.address import PostalAddress

_ADDRESS_FIELDS = ("division", "district", "area", "street")
_TRACKING_ALPHABET = string.digits + string.ascii_uppercase


def generate_tracking_id(now: datetime) -> str:
    """``TRK-<epoch millis>-<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_TRACKING_ALPHABET) for _ in range(9))
    return f"TRK-{int(now.timestamp() * 1000)}-{suffix}"


def _address(data) -> PostalAddress:
    if isinstance(data, PostalAddress):
        return data
    data = data or {}
    return PostalAddress(**{key: data.get(key) for key in _ADDRESS_FIELDS if data.get(key) is not None})


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@logistics.value_object(part_of="Delivery")
class ProductDescriptor:
    """What is being carried. Weight only affects the price of non-documents."""

    product_type = String(required=True, max_length=20, choices=ProductType)
    weight_kg = Float(min_value=0.0, default=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@logistics.entity(part_of="Delivery")
class StatusChange:
    """One visited status, in order of arrival."""

    from_status = String(max_length=30)
    to_status = String(required=True, max_length=30)
    changed_at = DateTime(required=True)
    note = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@logistics.aggregate
class Delivery:
    order_id = Identifier()
    customer_id = Identifier()
    tracking_id = String(max_length=40)
    pickup = ValueObject(PostalAddress, required=True)
    delivery_address = ValueObject(PostalAddress, required=True)
    product = ValueObject(ProductDescriptor, required=True)
    delivery_charge = Float(required=True, min_value=0.0)
    rider_commission = Float(required=True, min_value=0.0)
    within_city = Boolean(default=False)
    status = String(
        choices=DeliveryStatus,
        default=DeliveryStatus.UNPAID.value,
    )
    rider_id = Identifier()
    status_history = HasMany(StatusChange)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()

    @invariant.post
    def commission_cannot_exceed_charge(self):
        if self.rider_commission is not None and self.delivery_charge is not None:
            if self.rider_commission > self.delivery_charge:
                raise ValidationError({"rider_commission": ["Rider commission cannot exceed the delivery charge"]})

    @invariant.post
    def route_matches_addresses(self):
        if self.pickup is None or self.delivery_address is None:
            return
        if classify(self.pickup.district, self.delivery_address.district).within_city != self.within_city:
            raise ValidationError({"within_city": ["Route classification does not match the delivery addresses"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        pickup,
        delivery_address,
        product: dict,
        order_id: str | None = None,
        customer_id: str | None = None,
    ):
        """Classify the route, price the product and open a delivery in UNPAID."""
        pickup_vo = _address(pickup)
        delivery_vo = _address(delivery_address)
        within_city = classify(pickup_vo.district, delivery_vo.district).within_city

        product_type = parse_product_type((product or {}).get("product_type"))
        weight_kg = (product or {}).get("weight_kg")
        quote = price(product_type, weight_kg, within_city)

        now = datetime.now(UTC)
        delivery = cls(
            order_id=order_id,
            customer_id=customer_id,
            tracking_id=generate_tracking_id(now),
            pickup=pickup_vo,
            delivery_address=delivery_vo,
            product=ProductDescriptor(product_type=product_type.value, weight_kg=float(weight_kg or 0)),
            delivery_charge=quote.charge,
            rider_commission=quote.commission,
            within_city=within_city,
            status=DeliveryStatus.UNPAID.value,
            created_at=now,
            updated_at=now,
        )
        delivery.add_status_history(StatusChange(to_status=DeliveryStatus.UNPAID.value, changed_at=now))
        delivery.raise_(
            DeliveryCreated(
                delivery_id=str(delivery.id),
                tracking_id=delivery.tracking_id,
                order_id=order_id,
                customer_id=customer_id,
                product_type=product_type.value,
                weight_kg=float(weight_kg or 0),
                within_city=within_city,
                delivery_charge=quote.charge,
                rider_commission=quote.commission,
                pickup_district=pickup_vo.district,
                delivery_district=delivery_vo.district,
                status=DeliveryStatus.UNPAID.value,
                created_at=now,
            )
        )
        return delivery

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def route_class(self) -> RouteClass:
        return route_class_for(self.within_city)

    @property
    def current_status(self) -> DeliveryStatus:
        return DeliveryStatus(self.status)

    @property
    def is_final(self) -> bool:
        return is_terminal(self.current_status)

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def _move_to(self, target: DeliveryStatus, now: datetime, note: str | None = None) -> DeliveryStatus:
        previous = self.current_status
        with atomic_change(self):
            self.status = target.value
            self.updated_at = now
            self.add_status_history(
                StatusChange(from_status=previous.value, to_status=target.value, changed_at=now, note=note)
            )
        self.raise_(
            DeliveryStatusAdvanced(
                delivery_id=str(self.id),
                tracking_id=self.tracking_id,
                from_status=previous.value,
                to_status=target.value,
                within_city=self.within_city,
                rider_id=self.rider_id,
                advanced_at=now,
            )
        )
        return previous

    def advance_to(self, target: DeliveryStatus, on_time: bool = True) -> bool:
        """Move to ``target`` if it is the next status on this delivery's path.

        Returns False when the delivery is already in ``target``. Completing a
        delivery requires an assigned rider; the caller credits that rider's
        ledger in the same unit of work.
        """
        if target == DeliveryStatus.CANCELLED:
            return self.cancel()

        if not check_transition(self.route_class, self.current_status, target):
            return False

        if target == DeliveryStatus.DELIVERED and not self.rider_id:
            raise InvalidTransition({"rider_id": ["A delivery cannot be completed without an assigned rider"]})

        now = datetime.now(UTC)
        if target == DeliveryStatus.DELIVERED:
            self.delivered_at = now
        self._move_to(target, now)

        if target == DeliveryStatus.DELIVERED:
            self.raise_(
                DeliveryCompleted(
                    delivery_id=str(self.id),
                    rider_id=self.rider_id,
                    rider_commission=self.rider_commission,
                    on_time=on_time,
                    delivered_at=now,
                )
            )
        return True

    def cancel(self, reason: str | None = None) -> bool:
        """Cancel from any non-terminal status. Cancelling twice is a no-op."""
        if not check_transition(self.route_class, self.current_status, DeliveryStatus.CANCELLED):
            return False

        now = datetime.now(UTC)
        self.cancellation_reason = reason
        self.cancelled_at = now
        previous = self._move_to(DeliveryStatus.CANCELLED, now, note=reason)
        self.raise_(
            DeliveryCancelled(
                delivery_id=str(self.id),
                rider_id=self.rider_id,
                previous_status=previous.value,
                reason=reason,
                cancelled_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Rider binding
    # -------------------------------------------------------------------
    def assign_rider(self, rider_id: str) -> None:
        """Bind a rider to this in-flight delivery."""
        if self.is_final:
            raise InvalidTransition({"rider_id": [f"Cannot assign a rider to a {self.status} delivery"]})
        if self.rider_id:
            raise ValidationError({"rider_id": [f"Delivery already has rider {self.rider_id} assigned"]})

        now = datetime.now(UTC)
        self.rider_id = rider_id
        self.updated_at = now
        self.raise_(
            RiderMatched(
                delivery_id=str(self.id),
                rider_id=rider_id,
                tracking_id=self.tracking_id,
                matched_at=now,
            )
        )

    def unassign_rider(self, reason: str | None = None) -> str:
        """Take the rider off an in-flight delivery and return the rider's id."""
        if self.is_final:
            raise InvalidTransition({"rider_id": [f"Cannot unassign the rider of a {self.status} delivery"]})
        if not self.rider_id:
            raise ValidationError({"rider_id": ["Delivery has no assigned rider"]})

        now = datetime.now(UTC)
        rider_id = self.rider_id
        self.rider_id = None
        self.updated_at = now
        self.raise_(
            RiderUnassigned(
                delivery_id=str(self.id),
                rider_id=rider_id,
                reason=reason,
                unassigned_at=now,
            )
        )
        return rider_id
