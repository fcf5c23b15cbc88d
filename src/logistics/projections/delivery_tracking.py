"""Delivery tracking — customer-facing progress view, keyed by delivery."""

import json

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from logistics.delivery.delivery import Delivery
from logistics.delivery.events import (
    DeliveryCreated,
    DeliveryStatusAdvanced,
    RiderMatched,
    RiderUnassigned,
)
from logistics.delivery.lifecycle import DeliveryStatus, display, route_class_for, status_path, step_of
from logistics.domain import logistics


@logistics.projection
class DeliveryTrackingView:
    delivery_id = Identifier(identifier=True, required=True)
    tracking_id = String(required=True)
    status = String(required=True)
    label = String()
    message = String()
    step = Integer(default=0)
    total_steps = Integer(required=True)
    within_city = Boolean(default=False)
    rider_id = Identifier()
    history_json = Text()  # JSON list of {status, at}
    updated_at = DateTime()


def find_by_tracking_id(tracking_id: str) -> DeliveryTrackingView:
    repo = current_domain.repository_for(DeliveryTrackingView)
    views = repo._dao.query.filter(tracking_id=tracking_id).all().items
    if not views:
        raise ObjectNotFoundError(f"No delivery with tracking id {tracking_id}")
    return views[0]


def _apply_status(view: DeliveryTrackingView, status: DeliveryStatus, at) -> None:
    view.status = status.value
    view.label, view.message = display(status)
    view.step = step_of(route_class_for(view.within_city), status)
    view.updated_at = at

    history = json.loads(view.history_json) if view.history_json else []
    history.append({"status": status.value, "at": at.isoformat() if at else None})
    view.history_json = json.dumps(history)


@logistics.projector(projector_for=DeliveryTrackingView, aggregates=[Delivery])
class DeliveryTrackingProjector:
    @on(DeliveryCreated)
    def on_delivery_created(self, event):
        view = DeliveryTrackingView(
            delivery_id=event.delivery_id,
            tracking_id=event.tracking_id,
            status=event.status,
            total_steps=len(status_path(route_class_for(event.within_city))),
            within_city=event.within_city,
        )
        _apply_status(view, DeliveryStatus(event.status), event.created_at)
        current_domain.repository_for(DeliveryTrackingView).add(view)

    @on(DeliveryStatusAdvanced)
    def on_status_advanced(self, event):
        repo = current_domain.repository_for(DeliveryTrackingView)
        view = repo.get(event.delivery_id)
        _apply_status(view, DeliveryStatus(event.to_status), event.advanced_at)
        repo.add(view)

    @on(RiderMatched)
    def on_rider_matched(self, event):
        repo = current_domain.repository_for(DeliveryTrackingView)
        view = repo.get(event.delivery_id)
        view.rider_id = event.rider_id
        view.updated_at = event.matched_at
        repo.add(view)

    @on(RiderUnassigned)
    def on_rider_unassigned(self, event):
        repo = current_domain.repository_for(DeliveryTrackingView)
        view = repo.get(event.delivery_id)
        view.rider_id = None
        view.updated_at = event.unassigned_at
        repo.add(view)
