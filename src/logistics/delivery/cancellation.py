"""Delivery cancellation — command and handler.

Cancelling releases the assigned rider and counts the cancellation on the
rider's record; it never touches earnings.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from logistics.delivery.delivery import Delivery
from logistics.domain import logistics
from logistics.rider.rider import Rider


@logistics.command(part_of="Delivery")
class CancelDelivery:
    delivery_id = Identifier(required=True)
    reason = String(max_length=500)


def cancel_and_release(delivery: Delivery, reason: str | None = None) -> tuple[bool, Rider | None]:
    """Cancel ``delivery`` and free its rider, without persisting anything.

    Returns whether the delivery changed and the rider that needs saving.
    """
    if not delivery.cancel(reason):
        return False, None
    if not delivery.rider_id:
        return True, None

    rider = current_domain.repository_for(Rider).get(delivery.rider_id)
    if rider.current_delivery_id == str(delivery.id):
        rider.release()
    rider.record_cancellation(str(delivery.id))
    return True, rider


@logistics.command_handler(part_of=Delivery)
class CancelDeliveryHandler:
    @handle(CancelDelivery)
    def cancel_delivery(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        changed, rider = cancel_and_release(delivery, command.reason)
        if not changed:
            return
        if rider is not None:
            current_domain.repository_for(Rider).add(rider)
        repo.add(delivery)
