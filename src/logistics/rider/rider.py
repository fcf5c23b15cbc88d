"""Rider aggregate (CQRS) — availability plus the append-only performance ledger.

A rider serves one delivery at a time: ``current_delivery_id`` and
``is_available`` always change together, and exactly one of them is set.
The aggregate rating is the mean of all rating records; it is recomputed
whenever a record is appended and never set directly. Earning and rating
records are never edited or removed.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from logistics.domain import logistics
from logistics.errors import InvalidRating, RiderUnavailable
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
from logistics.shared.address import PostalAddress
from logistics.shared.email import EmailAddress
from logistics.shared.phone import PhoneNumber

DEFAULT_RATING = 5.0


class VehicleType(Enum):
    BIKE = "bike"
    BICYCLE = "bicycle"
    CAR = "car"
    VAN = "van"


class EarningStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@logistics.entity(part_of="Rider")
class EarningRecord:
    delivery_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.0)
    status = String(
        max_length=20,
        choices=EarningStatus,
        default=EarningStatus.COMPLETED.value,
    )
    recorded_at = DateTime(required=True)


@logistics.entity(part_of="Rider")
class RatingRecord:
    delivery_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    score = Integer(required=True, min_value=1, max_value=5)
    comment = String(max_length=1000)
    rated_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@logistics.aggregate
class Rider:
    user_id: Identifier(required=True)
    email: ValueObject(EmailAddress)
    display_name: String(required=True, max_length=150)
    phone: ValueObject(PhoneNumber)
    national_id: String(max_length=50)
    license_number: String(max_length=50)
    vehicle_type: String(max_length=20, choices=VehicleType, default=VehicleType.BIKE.value)
    vehicle_number: String(max_length=50)
    address: ValueObject(PostalAddress, required=True)
    is_verified: Boolean(default=False)
    is_available: Boolean(default=True)
    current_delivery_id: Identifier()
    rating: Float(min_value=0.0, max_value=5.0, default=DEFAULT_RATING)
    rating_count: Integer(min_value=0, default=0)
    completed_deliveries: Integer(min_value=0, default=0)
    on_time_deliveries: Integer(min_value=0, default=0)
    late_deliveries: Integer(min_value=0, default=0)
    cancelled_deliveries: Integer(min_value=0, default=0)
    earnings_history: HasMany(EarningRecord)
    rating_history: HasMany(RatingRecord)
    registered_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def available_exactly_when_unassigned(self):
        if bool(self.is_available) == bool(self.current_delivery_id):
            raise ValidationError(
                {"is_available": ["A rider is available exactly when no delivery is assigned"]}
            )

    @invariant.post
    def rating_is_mean_of_records(self):
        records = self.rating_history or []
        if not records:
            return
        mean = sum(r.score for r in records) / len(records)
        if abs((self.rating or 0.0) - mean) > 1e-9 or self.rating_count != len(records):
            raise ValidationError({"rating": ["Rating must be the mean of all rating records"]})

    @classmethod
    def register(
        cls,
        user_id: str,
        display_name: str,
        address: dict,
        email: str | None = None,
        phone: str | None = None,
        national_id: str | None = None,
        license_number: str | None = None,
        vehicle_type: str = VehicleType.BIKE.value,
        vehicle_number: str | None = None,
    ):
        """Onboard a rider. Riders start available and unverified with a 5.0 rating."""
        now = datetime.now(UTC)
        address_vo = address if isinstance(address, PostalAddress) else PostalAddress(**address)
        rider = cls(
            user_id=user_id,
            display_name=display_name,
            email=EmailAddress(address=email) if email else None,
            phone=PhoneNumber(number=phone) if phone else None,
            national_id=national_id,
            license_number=license_number,
            vehicle_type=vehicle_type,
            vehicle_number=vehicle_number,
            address=address_vo,
            registered_at=now,
            updated_at=now,
        )
        rider.raise_(
            RiderRegistered(
                rider_id=str(rider.id),
                user_id=user_id,
                display_name=display_name,
                division=address_vo.division,
                district=address_vo.district,
                vehicle_type=vehicle_type,
                registered_at=now,
            )
        )
        return rider

    def verify(self) -> None:
        if self.is_verified:
            return
        now = datetime.now(UTC)
        self.is_verified = True
        self.updated_at = now
        self.raise_(RiderVerified(rider_id=str(self.id), verified_at=now))

    # -------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------
    def assign(self, delivery_id: str) -> None:
        """Take on a delivery. Fails with ``RiderUnavailable`` if already busy."""
        if not self.is_available or self.current_delivery_id:
            raise RiderUnavailable(
                {"rider_id": [f"Rider {self.id} is already assigned to delivery {self.current_delivery_id}"]}
            )
        if not self.is_verified:
            raise ValidationError({"is_verified": [f"Rider {self.id} is not verified"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.current_delivery_id = delivery_id
            self.is_available = False
            self.updated_at = now
        self.raise_(RiderAssigned(rider_id=str(self.id), delivery_id=delivery_id, assigned_at=now))

    def release(self) -> bool:
        """Become available again. Releasing an idle rider is a no-op."""
        if self.is_available and not self.current_delivery_id:
            return False

        now = datetime.now(UTC)
        delivery_id = self.current_delivery_id
        with atomic_change(self):
            self.current_delivery_id = None
            self.is_available = True
            self.updated_at = now
        self.raise_(RiderReleased(rider_id=str(self.id), delivery_id=delivery_id, released_at=now))
        return True

    # -------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------
    @property
    def total_earnings(self) -> float:
        return round(
            sum(e.amount for e in (self.earnings_history or []) if e.status == EarningStatus.COMPLETED.value),
            2,
        )

    def record_earning(self, delivery_id: str, amount: float) -> None:
        """Append a ``completed`` earning. A delivery is credited at most once."""
        if any(
            e.delivery_id == delivery_id and e.status == EarningStatus.COMPLETED.value
            for e in (self.earnings_history or [])
        ):
            raise ValidationError({"earnings_history": [f"Earning for delivery {delivery_id} is already recorded"]})

        now = datetime.now(UTC)
        self.add_earnings_history(
            EarningRecord(
                delivery_id=delivery_id,
                amount=amount,
                status=EarningStatus.COMPLETED.value,
                recorded_at=now,
            )
        )
        self.updated_at = now
        self.raise_(
            EarningRecorded(
                rider_id=str(self.id),
                delivery_id=delivery_id,
                amount=amount,
                status=EarningStatus.COMPLETED.value,
                total_earnings=self.total_earnings,
                recorded_at=now,
            )
        )

    def record_rating(self, delivery_id: str, customer_id: str, score, comment: str | None = None) -> None:
        """Append a rating record and recompute the mean. Revisions are new records."""
        if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
            raise InvalidRating({"rating": [f"Rating must be an integer between 1 and 5, got {score!r}"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.add_rating_history(
                RatingRecord(
                    delivery_id=delivery_id,
                    customer_id=customer_id,
                    score=score,
                    comment=comment,
                    rated_at=now,
                )
            )
            scores = [r.score for r in self.rating_history]
            self.rating = sum(scores) / len(scores)
            self.rating_count = len(scores)
            self.updated_at = now

        self.raise_(
            RatingRecorded(
                rider_id=str(self.id),
                delivery_id=delivery_id,
                customer_id=customer_id,
                score=score,
                average_rating=self.rating,
                rating_count=self.rating_count,
                rated_at=now,
            )
        )

    def record_delivery_outcome(self, delivery_id: str, on_time: bool) -> None:
        """Count one completed delivery as either on time or late."""
        now = datetime.now(UTC)
        with atomic_change(self):
            self.completed_deliveries += 1
            if on_time:
                self.on_time_deliveries += 1
            else:
                self.late_deliveries += 1
            self.updated_at = now
        self.raise_(
            DeliveryOutcomeRecorded(
                rider_id=str(self.id),
                delivery_id=delivery_id,
                on_time=bool(on_time),
                completed_deliveries=self.completed_deliveries,
                recorded_at=now,
            )
        )

    def record_cancellation(self, delivery_id: str) -> None:
        now = datetime.now(UTC)
        self.cancelled_deliveries += 1
        self.updated_at = now
        self.raise_(
            CancellationRecorded(
                rider_id=str(self.id),
                delivery_id=delivery_id,
                cancelled_deliveries=self.cancelled_deliveries,
                recorded_at=now,
            )
        )
