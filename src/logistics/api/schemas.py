"""Pydantic API schemas for the logistics engine.

These are the external API contracts, separate from domain commands.
The API layer translates between these schemas and engine calls.
"""

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class AddressRequest(BaseModel):
    division: str | None = None
    district: str | None = None
    area: str | None = None
    street: str | None = None


class ProductRequest(BaseModel):
    product_type: str | None = None
    weight_kg: float | None = None


class QuoteRequest(BaseModel):
    product_type: str | None = None
    weight_kg: float | None = None
    pickup_district: str | None = None
    delivery_district: str | None = None


class CreateDeliveryRequest(BaseModel):
    order_id: str | None = None
    customer_id: str | None = None
    pickup: AddressRequest
    delivery_address: AddressRequest
    product: ProductRequest


class AdvanceStatusRequest(BaseModel):
    status: str
    on_time: bool = True


class ReasonRequest(BaseModel):
    reason: str | None = None


class SubmitRatingRequest(BaseModel):
    customer_id: str
    rating: float | None = None
    comment: str | None = None


class RegisterRiderRequest(BaseModel):
    user_id: str
    display_name: str
    email: str | None = None
    phone: str | None = None
    national_id: str | None = None
    license_number: str | None = None
    vehicle_type: str = "bike"
    vehicle_number: str | None = None
    division: str
    district: str
    area: str | None = None
    street: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class QuoteResponse(BaseModel):
    charge: float
    commission: float
    within_city: bool


class DeliveryIdResponse(BaseModel):
    delivery_id: str
    tracking_id: str


class DeliveryResponse(BaseModel):
    delivery_id: str
    tracking_id: str
    status: str
    within_city: bool
    delivery_charge: float
    rider_commission: float
    rider_id: str | None = None
    order_id: str | None = None
    customer_id: str | None = None


class MatchResponse(BaseModel):
    delivery_id: str
    rider_id: str


class TrackingResponse(BaseModel):
    delivery_id: str
    tracking_id: str
    status: str
    label: str | None = None
    message: str | None = None
    step: int
    total_steps: int
    rider_id: str | None = None
    history: list[dict]


class RiderIdResponse(BaseModel):
    rider_id: str


class RiderResponse(BaseModel):
    rider_id: str
    display_name: str
    division: str | None = None
    district: str | None = None
    is_verified: bool
    is_available: bool
    current_delivery_id: str | None = None
    rating: float
    rating_count: int
    completed_deliveries: int
    on_time_deliveries: int
    late_deliveries: int
    cancelled_deliveries: int


class EarningRecordResponse(BaseModel):
    delivery_id: str
    amount: float
    status: str


class EarningsResponse(BaseModel):
    total: float
    deliveries: int
    average: float
    rating: float
    records: list[EarningRecordResponse]
