"""FastAPI routes for the logistics engine."""

import json

from fastapi import APIRouter

from logistics import engine
from logistics.api.schemas import (
    AdvanceStatusRequest,
    CreateDeliveryRequest,
    DeliveryIdResponse,
    DeliveryResponse,
    EarningRecordResponse,
    EarningsResponse,
    MatchResponse,
    QuoteRequest,
    QuoteResponse,
    ReasonRequest,
    RegisterRiderRequest,
    RiderIdResponse,
    RiderResponse,
    SubmitRatingRequest,
    TrackingResponse,
)
from logistics.rider.ledger import earnings


def _delivery_response(delivery) -> DeliveryResponse:
    return DeliveryResponse(
        delivery_id=str(delivery.id),
        tracking_id=delivery.tracking_id,
        status=delivery.status,
        within_city=delivery.within_city,
        delivery_charge=delivery.delivery_charge,
        rider_commission=delivery.rider_commission,
        rider_id=delivery.rider_id,
        order_id=delivery.order_id,
        customer_id=delivery.customer_id,
    )


def _rider_response(rider) -> RiderResponse:
    return RiderResponse(
        rider_id=str(rider.id),
        display_name=rider.display_name,
        division=rider.address.division if rider.address else None,
        district=rider.address.district if rider.address else None,
        is_verified=rider.is_verified,
        is_available=rider.is_available,
        current_delivery_id=rider.current_delivery_id,
        rating=rider.rating,
        rating_count=rider.rating_count,
        completed_deliveries=rider.completed_deliveries,
        on_time_deliveries=rider.on_time_deliveries,
        late_deliveries=rider.late_deliveries,
        cancelled_deliveries=rider.cancelled_deliveries,
    )


# ---------------------------------------------------------------------------
# Delivery Router
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@delivery_router.post("/quote", response_model=QuoteResponse)
def quote_delivery(body: QuoteRequest) -> QuoteResponse:
    """Estimate charge and rider commission before a delivery exists."""
    quote = engine.quote(body.product_type, body.weight_kg, body.pickup_district, body.delivery_district)
    return QuoteResponse(charge=quote.charge, commission=quote.commission, within_city=quote.within_city)


@delivery_router.post("", status_code=201, response_model=DeliveryIdResponse)
def create_delivery(body: CreateDeliveryRequest) -> DeliveryIdResponse:
    """Create a priced delivery in UNPAID."""
    delivery = engine.create_delivery(
        pickup=body.pickup.model_dump(exclude_none=True),
        delivery_address=body.delivery_address.model_dump(exclude_none=True),
        product=body.product.model_dump(),
        order_id=body.order_id,
        customer_id=body.customer_id,
    )
    return DeliveryIdResponse(delivery_id=str(delivery.id), tracking_id=delivery.tracking_id)


@delivery_router.get("/track/{tracking_id}", response_model=TrackingResponse)
def track_delivery(tracking_id: str) -> TrackingResponse:
    """Customer-facing progress for a tracking id."""
    view = engine.track(tracking_id)
    return TrackingResponse(
        delivery_id=str(view.delivery_id),
        tracking_id=view.tracking_id,
        status=view.status,
        label=view.label,
        message=view.message,
        step=view.step,
        total_steps=view.total_steps,
        rider_id=view.rider_id,
        history=json.loads(view.history_json) if view.history_json else [],
    )


@delivery_router.get("/{delivery_id}", response_model=DeliveryResponse)
def get_delivery(delivery_id: str) -> DeliveryResponse:
    return _delivery_response(engine.get_delivery(delivery_id))


@delivery_router.put("/{delivery_id}/status", response_model=DeliveryResponse)
def advance_status(delivery_id: str, body: AdvanceStatusRequest) -> DeliveryResponse:
    """Apply a status update; repeating the current status is accepted."""
    delivery = engine.advance_status(delivery_id, body.status, on_time=body.on_time)
    return _delivery_response(delivery)


@delivery_router.put("/{delivery_id}/cancel", response_model=DeliveryResponse)
def cancel_delivery(delivery_id: str, body: ReasonRequest) -> DeliveryResponse:
    delivery = engine.cancel_delivery(delivery_id, reason=body.reason)
    return _delivery_response(delivery)


@delivery_router.put("/{delivery_id}/match", response_model=MatchResponse)
def match_rider(delivery_id: str) -> MatchResponse:
    """Assign the best available rider in the pickup district."""
    rider = engine.match_rider(delivery_id)
    return MatchResponse(delivery_id=delivery_id, rider_id=str(rider.id))


@delivery_router.put("/{delivery_id}/unassign", response_model=DeliveryResponse)
def unassign_rider(delivery_id: str, body: ReasonRequest) -> DeliveryResponse:
    """The assigned rider declines the delivery."""
    delivery = engine.unassign_rider(delivery_id, reason=body.reason)
    return _delivery_response(delivery)


@delivery_router.post("/{delivery_id}/ratings", status_code=201, response_model=RiderResponse)
def submit_rating(delivery_id: str, body: SubmitRatingRequest) -> RiderResponse:
    rider = engine.submit_rating(delivery_id, body.customer_id, body.rating, comment=body.comment)
    return _rider_response(rider)


# ---------------------------------------------------------------------------
# Rider Router
# ---------------------------------------------------------------------------
rider_router = APIRouter(prefix="/riders", tags=["riders"])


@rider_router.post("", status_code=201, response_model=RiderIdResponse)
def register_rider(body: RegisterRiderRequest) -> RiderIdResponse:
    rider = engine.register_rider(**body.model_dump())
    return RiderIdResponse(rider_id=str(rider.id))


@rider_router.get("/top", response_model=list[RiderResponse])
def top_riders(limit: int = 10) -> list[RiderResponse]:
    return [_rider_response(r) for r in engine.top_riders(limit)]


@rider_router.get("/candidates", response_model=list[RiderResponse])
def find_candidates(division: str, district: str) -> list[RiderResponse]:
    return [_rider_response(r) for r in engine.find_candidates(division, district)]


@rider_router.get("/{rider_id}", response_model=RiderResponse)
def get_rider(rider_id: str) -> RiderResponse:
    return _rider_response(engine.get_rider(rider_id))


@rider_router.put("/{rider_id}/verify", response_model=RiderResponse)
def verify_rider(rider_id: str) -> RiderResponse:
    return _rider_response(engine.verify_rider(rider_id))


@rider_router.put("/{rider_id}/release", response_model=RiderResponse)
def release_rider(rider_id: str) -> RiderResponse:
    return _rider_response(engine.release(rider_id))


@rider_router.get("/{rider_id}/earnings", response_model=EarningsResponse)
def rider_earnings(rider_id: str) -> EarningsResponse:
    """Earnings total, completed deliveries, average per delivery and rating."""
    rider = engine.get_rider(rider_id)
    summary = engine.earnings_summary(rider_id)
    return EarningsResponse(
        total=summary.total,
        deliveries=summary.deliveries,
        average=summary.average,
        rating=summary.rating,
        records=[
            EarningRecordResponse(delivery_id=e.delivery_id, amount=e.amount, status=e.status)
            for e in earnings(rider)
        ],
    )


@rider_router.get("/{rider_id}/deliveries", response_model=list[DeliveryResponse])
def rider_deliveries(rider_id: str) -> list[DeliveryResponse]:
    return [_delivery_response(d) for d in engine.rider_deliveries(rider_id)]
