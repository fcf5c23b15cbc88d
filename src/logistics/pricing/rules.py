"""Delivery pricing rules.

Pure functions: the charge depends only on product type, weight and route
classification, and the rider commission only on the charge and route.
All amounts are BDT rounded half-up to two decimal places.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from logistics.errors import InvalidPricingInput


class ProductType(Enum):
    DOCUMENT = "document"
    NON_DOCUMENT = "non-document"


DOCUMENT_RATE = Decimal("60")
NON_DOCUMENT_BASE_RATE = Decimal("110")
WEIGHT_THRESHOLD_KG = Decimal("3")
PER_KG_SURCHARGE = Decimal("40")
WAREHOUSE_SURCHARGE = Decimal("40")

WITHIN_CITY_COMMISSION = Decimal("0.80")
CROSS_DISTRICT_COMMISSION = Decimal("0.60")

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class Quote:
    charge: float
    commission: float
    within_city: bool


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def parse_product_type(product_type) -> ProductType:
    if isinstance(product_type, ProductType):
        return product_type
    try:
        return ProductType(str(product_type).strip().lower())
    except ValueError:
        raise InvalidPricingInput({"product_type": [f"Unrecognized product type: {product_type!r}"]}) from None


def _weight(weight_kg) -> Decimal:
    if weight_kg is None:
        return Decimal("0")
    if isinstance(weight_kg, bool):
        raise InvalidPricingInput({"weight_kg": ["Weight must be a number"]})
    try:
        weight = Decimal(str(weight_kg))
    except ArithmeticError:
        raise InvalidPricingInput({"weight_kg": [f"Weight must be a number, got {weight_kg!r}"]}) from None
    if not weight.is_finite():
        raise InvalidPricingInput({"weight_kg": ["Weight must be finite"]})
    if weight < 0:
        raise InvalidPricingInput({"weight_kg": ["Weight cannot be negative"]})
    return weight


def _charge(product_type, weight_kg, within_city: bool) -> Decimal:
    kind = parse_product_type(product_type)
    weight = _weight(weight_kg)

    if kind is ProductType.DOCUMENT:
        return _round(DOCUMENT_RATE)

    charge = NON_DOCUMENT_BASE_RATE
    if weight > WEIGHT_THRESHOLD_KG:
        charge += (weight - WEIGHT_THRESHOLD_KG) * PER_KG_SURCHARGE
    if not within_city:
        charge += WAREHOUSE_SURCHARGE
    return _round(charge)


def _commission(charge: Decimal, within_city: bool) -> Decimal:
    ratio = WITHIN_CITY_COMMISSION if within_city else CROSS_DISTRICT_COMMISSION
    return _round(charge * ratio)


def compute_charge(product_type, weight_kg, within_city: bool) -> float:
    """Delivery charge for a product on a classified route.

    Documents pay a flat rate regardless of weight. Non-documents pay the
    base rate up to the weight threshold plus a per-kg surcharge on the
    excess; cross-district non-documents add the warehouse surcharge.
    """
    return float(_charge(product_type, weight_kg, within_city))


def compute_commission(charge, within_city: bool) -> float:
    """Rider's share of the charge: 80% within-city, 60% cross-district."""
    try:
        amount = Decimal(str(charge))
    except ArithmeticError:
        raise InvalidPricingInput({"charge": [f"Charge must be a number, got {charge!r}"]}) from None
    if not amount.is_finite() or amount < 0:
        raise InvalidPricingInput({"charge": ["Charge must be a non-negative number"]})
    return float(_commission(amount, within_city))


def price(product_type, weight_kg, within_city: bool) -> Quote:
    """Charge and commission together, without a float round trip in between."""
    charge = _charge(product_type, weight_kg, within_city)
    return Quote(
        charge=float(charge),
        commission=float(_commission(charge, within_city)),
        within_city=within_city,
    )
