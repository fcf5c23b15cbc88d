"""PostalAddress value object shared by deliveries and riders."""

from protean.fields import String

from logistics.domain import logistics


@logistics.value_object
class PostalAddress:
    """An administrative postal location: division, district, area and street.

    Routing and rider matching work at district granularity; area and
    street are carried for the rider's benefit only. The district is left
    optional here so a missing one surfaces from route classification as
    an ``IncompleteAddress``.
    """

    division: String(max_length=100)
    district: String(max_length=100)
    area: String(max_length=150)
    street: String(max_length=255)
