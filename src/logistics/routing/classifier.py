"""Route classification by administrative district."""

from dataclasses import dataclass
from enum import Enum

from logistics.errors import IncompleteAddress


class RouteClass(Enum):
    WITHIN_CITY = "within_city"
    CROSS_DISTRICT = "cross_district"


@dataclass(frozen=True)
class Classification:
    within_city: bool

    @property
    def route_class(self) -> RouteClass:
        return RouteClass.WITHIN_CITY if self.within_city else RouteClass.CROSS_DISTRICT


def _normalize(district, side: str) -> str:
    value = district.strip().casefold() if isinstance(district, str) else ""
    if not value:
        raise IncompleteAddress({f"{side}_district": [f"{side.capitalize()} district is required"]})
    return value


def classify(pickup_district, delivery_district) -> Classification:
    """Label a pickup/delivery pair as within-city or cross-district.

    Only the district decides: two districts of the same division are still
    cross-district. Comparison ignores case and surrounding whitespace.
    """
    pickup = _normalize(pickup_district, "pickup")
    delivery = _normalize(delivery_district, "delivery")
    return Classification(within_city=pickup == delivery)
