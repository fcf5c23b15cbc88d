"""Rider onboarding and verification — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from logistics.domain import logistics
from logistics.rider.rider import Rider, VehicleType


@logistics.command(part_of="Rider")
class RegisterRider:
    user_id = Identifier(required=True)
    display_name = String(required=True, max_length=150)
    email = String(max_length=254)
    phone = String(max_length=20)
    national_id = String(max_length=50)
    license_number = String(max_length=50)
    vehicle_type = String(max_length=20, default=VehicleType.BIKE.value)
    vehicle_number = String(max_length=50)
    division = String(required=True, max_length=100)
    district = String(required=True, max_length=100)
    area = String(max_length=150)
    street = String(max_length=255)


@logistics.command(part_of="Rider")
class VerifyRider:
    rider_id = Identifier(required=True)


@logistics.command_handler(part_of=Rider)
class RiderRegistrationHandler:
    @handle(RegisterRider)
    def register_rider(self, command):
        rider = Rider.register(
            user_id=command.user_id,
            display_name=command.display_name,
            address={
                "division": command.division,
                "district": command.district,
                "area": command.area,
                "street": command.street,
            },
            email=command.email,
            phone=command.phone,
            national_id=command.national_id,
            license_number=command.license_number,
            vehicle_type=command.vehicle_type or VehicleType.BIKE.value,
            vehicle_number=command.vehicle_number,
        )
        current_domain.repository_for(Rider).add(rider)
        return str(rider.id)

    @handle(VerifyRider)
    def verify_rider(self, command):
        repo = current_domain.repository_for(Rider)
        rider = repo.get(command.rider_id)
        rider.verify()
        repo.add(rider)
