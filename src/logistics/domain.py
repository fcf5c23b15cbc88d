"""Logistics bounded context — Delivery Pricing, Rider Dispatch and Ledgers.

Prices deliveries from product attributes and route, matches verified riders
in the pickup district, drives each delivery through its within-city or
cross-district status path, and keeps every rider's earnings and rating
history. Uses CQRS aggregates; riders and deliveries are the units of
mutual exclusion.
"""

from protean.domain import Domain

from logistics.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

logistics = Domain(name="logistics")
