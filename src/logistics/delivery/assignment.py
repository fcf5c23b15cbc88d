"""Rider assignment — commands and handler.

Binding and unbinding always update the delivery and the rider together.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from logistics.delivery.delivery import Delivery
from logistics.domain import logistics
from logistics.rider.rider import Rider


@logistics.command(part_of="Delivery")
class AssignRider:
    """Bind a rider to a delivery. Fails with RiderUnavailable if the rider is busy."""

    delivery_id = Identifier(required=True)
    rider_id = Identifier(required=True)


@logistics.command(part_of="Delivery")
class UnassignRider:
    """Take the rider off an in-flight delivery (the rider declined it or was released)."""

    delivery_id = Identifier(required=True)
    reason = String(max_length=500)


@logistics.command_handler(part_of=Delivery)
class AssignmentHandler:
    @handle(AssignRider)
    def assign_rider(self, command):
        delivery_repo = current_domain.repository_for(Delivery)
        rider_repo = current_domain.repository_for(Rider)

        delivery = delivery_repo.get(command.delivery_id)
        rider = rider_repo.get(command.rider_id)

        rider.assign(str(delivery.id))
        delivery.assign_rider(str(rider.id))

        rider_repo.add(rider)
        delivery_repo.add(delivery)
        return str(rider.id)

    @handle(UnassignRider)
    def unassign_rider(self, command):
        delivery_repo = current_domain.repository_for(Delivery)
        rider_repo = current_domain.repository_for(Rider)

        delivery = delivery_repo.get(command.delivery_id)
        rider_id = delivery.unassign_rider(command.reason)
        rider = rider_repo.get(rider_id)
        if rider.current_delivery_id == str(delivery.id):
            rider.release()

        rider_repo.add(rider)
        delivery_repo.add(delivery)
        return rider_id
