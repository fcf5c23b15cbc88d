"""Customer feedback on a completed delivery — command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from logistics.delivery.delivery import Delivery
from logistics.delivery.lifecycle import DeliveryStatus
from logistics.domain import logistics
from logistics.rider.rider import Rider


@logistics.command(part_of="Delivery")
class SubmitRating:
    """Rate the rider who completed a delivery.

    The score is range-checked by the rider's ledger so that missing or
    out-of-range values surface as ``InvalidRating``.
    """

    delivery_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Float()
    comment = String(max_length=1000)


def _score(value):
    if value is None:
        return None
    return int(value) if float(value).is_integer() else value


@logistics.command_handler(part_of=Delivery)
class RatingHandler:
    @handle(SubmitRating)
    def submit_rating(self, command):
        delivery = current_domain.repository_for(Delivery).get(command.delivery_id)
        if delivery.current_status != DeliveryStatus.DELIVERED or not delivery.rider_id:
            raise ValidationError({"status": ["Only delivered deliveries can be rated"]})
        if delivery.customer_id and delivery.customer_id != command.customer_id:
            raise ValidationError({"customer_id": ["Only the delivery's customer can rate it"]})

        rider_repo = current_domain.repository_for(Rider)
        rider = rider_repo.get(delivery.rider_id)
        rider.record_rating(
            delivery_id=str(delivery.id),
            customer_id=command.customer_id,
            score=_score(command.rating),
            comment=command.comment,
        )
        rider_repo.add(rider)
        return str(rider.id)
