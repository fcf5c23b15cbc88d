"""Read-side summaries over a rider's ledger."""

from dataclasses import dataclass

from logistics.rider.rider import EarningStatus, Rider


@dataclass(frozen=True)
class EarningsSummary:
    total: float
    deliveries: int
    average: float
    rating: float


def earnings_summary(rider: Rider) -> EarningsSummary:
    """Total completed earnings, delivery count, average per delivery and rating."""
    total = rider.total_earnings
    deliveries = rider.completed_deliveries or 0
    return EarningsSummary(
        total=total,
        deliveries=deliveries,
        average=round(total / deliveries, 2) if deliveries else 0.0,
        rating=round(rider.rating or 0.0, 2),
    )


def earnings(rider: Rider, status: EarningStatus | None = None) -> list:
    """Earning records in the order they were recorded."""
    records = sorted(rider.earnings_history or [], key=lambda e: e.recorded_at)
    if status is not None:
        records = [e for e in records if e.status == status.value]
    return records
