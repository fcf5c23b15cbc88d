"""Rider matching — ranking verified, available riders for a district.

Matching reads a snapshot and takes no locks; a candidate that becomes busy
before it is assigned is rejected by ``Rider.assign`` with ``RiderUnavailable``.
"""

from protean.utils.globals import current_domain

from logistics.errors import IncompleteAddress
from logistics.rider.rider import Rider


def _present(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _rank(rider: Rider) -> tuple[float, int]:
    return (-(rider.rating or 0.0), -(rider.completed_deliveries or 0))


def is_eligible(rider: Rider, division: str, district: str) -> bool:
    if not (rider.is_available and rider.is_verified) or rider.current_delivery_id:
        return False
    if rider.address is None:
        return False
    return rider.address.division == division and rider.address.district == district


def rank_candidates(riders, division: str, district: str) -> list[Rider]:
    """Eligible riders by rating, then completed deliveries, both descending."""
    if not _present(division) or not _present(district):
        raise IncompleteAddress({"district": ["Division and district are required for matching"]})
    return sorted((r for r in riders if is_eligible(r, division, district)), key=_rank)


def find_candidates(division: str, district: str) -> list[Rider]:
    repo = current_domain.repository_for(Rider)
    riders = repo._dao.query.filter(is_available=True, is_verified=True).all().items
    return rank_candidates(riders, division, district)


def top_riders(limit: int = 10) -> list[Rider]:
    """Verified riders with the best rating and experience, regardless of location."""
    repo = current_domain.repository_for(Rider)
    riders = repo._dao.query.filter(is_verified=True).all().items
    return sorted(riders, key=_rank)[:limit]
