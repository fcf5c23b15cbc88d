"""Delivery status updates — command and handler.

Reaching DELIVERED credits the rider's commission, counts the outcome and
frees the rider in the same unit of work as the status change. Every
mutation is applied in memory before anything is staged, so a failure
leaves both records untouched.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from logistics.delivery.cancellation import cancel_and_release
from logistics.delivery.delivery import Delivery
from logistics.delivery.lifecycle import DeliveryStatus, parse_status
from logistics.domain import logistics
from logistics.rider.rider import Rider


@logistics.command(part_of="Delivery")
class AdvanceDeliveryStatus:
    """Move a delivery to ``status``; repeating the current status is a no-op."""

    delivery_id = Identifier(required=True)
    status = String(required=True, max_length=30)
    on_time = Boolean(default=True)


def complete_delivery(delivery: Delivery, on_time: bool) -> Rider:
    """Credit and free the rider of a delivery that just reached DELIVERED."""
    rider = current_domain.repository_for(Rider).get(delivery.rider_id)
    if rider.current_delivery_id != str(delivery.id):
        raise ValidationError(
            {"rider_id": [f"Rider {rider.id} is not carrying delivery {delivery.id}"]}
        )

    rider.record_earning(str(delivery.id), delivery.rider_commission)
    rider.record_delivery_outcome(str(delivery.id), on_time)
    rider.release()
    return rider


@logistics.command_handler(part_of=Delivery)
class DeliveryStatusHandler:
    @handle(AdvanceDeliveryStatus)
    def advance_status(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        target = parse_status(command.status)

        if target == DeliveryStatus.CANCELLED:
            changed, rider = cancel_and_release(delivery)
        else:
            changed = delivery.advance_to(target, on_time=command.on_time)
            rider = None
            if changed and target == DeliveryStatus.DELIVERED:
                rider = complete_delivery(delivery, bool(command.on_time))

        if not changed:
            return
        if rider is not None:
            current_domain.repository_for(Rider).add(rider)
        repo.add(delivery)
