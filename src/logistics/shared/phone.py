"""PhoneNumber value object for rider contact details."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from logistics.domain import logistics


@logistics.value_object
class PhoneNumber:
    """Digits, spaces, hyphens and parentheses with an optional leading +."""

    number: String(required=True, max_length=20)

    @invariant.post
    def validate_phone_format(self):
        number = self.number

        if not re.search(r"\d", number) or not re.match(r"^\+?[\d\s\-()]+$", number):
            raise ValidationError({"phone": [f"Invalid phone number: {number!r}"]})
