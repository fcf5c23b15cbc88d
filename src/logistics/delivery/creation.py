"""Delivery creation — command and handler."""

import json

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from logistics.delivery.delivery import Delivery
from logistics.domain import logistics


@logistics.command(part_of="Delivery")
class CreateDelivery:
    """Price, classify and open a delivery for an order."""

    order_id = Identifier()
    customer_id = Identifier()
    pickup = Text(required=True)  # JSON address dict
    delivery_address = Text(required=True)  # JSON address dict
    product = Text(required=True)  # JSON {product_type, weight_kg}


@logistics.command_handler(part_of=Delivery)
class CreateDeliveryHandler:
    @handle(CreateDelivery)
    def create_delivery(self, command):
        pickup = json.loads(command.pickup) if isinstance(command.pickup, str) else command.pickup
        delivery_address = (
            json.loads(command.delivery_address)
            if isinstance(command.delivery_address, str)
            else command.delivery_address
        )
        product = json.loads(command.product) if isinstance(command.product, str) else command.product
        delivery = Delivery.create(
            pickup=pickup,
            delivery_address=delivery_address,
            product=product,
            order_id=command.order_id,
            customer_id=command.customer_id,
        )
        current_domain.repository_for(Delivery).add(delivery)
        return str(delivery.id)
