"""Concurrent engine calls on the same rider or delivery are serialized."""

import threading

from logistics import engine
from logistics.delivery.lifecycle import DeliveryStatus
from logistics.domain import logistics
from logistics.errors import RiderUnavailable

DHAKA = {"division": "Dhaka", "district": "Dhaka"}


def _delivery():
    return str(
        engine.create_delivery(pickup=DHAKA, delivery_address=DHAKA, product={"product_type": "document"}).id
    )


def _verified_rider():
    rider = engine.register_rider(user_id="user-race", display_name="Tanvir", division="Dhaka", district="Dhaka")
    return str(engine.verify_rider(str(rider.id)).id)


def _race(calls):
    """Run each call on its own thread, released together. Returns (results, errors)."""
    barrier = threading.Barrier(len(calls))
    results, errors = [], []

    def run(call):
        with logistics.domain_context():
            barrier.wait()
            try:
                results.append(call())
            except Exception as exc:
                errors.append(exc)

    threads = [threading.Thread(target=run, args=(call,)) for call in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results, errors


class TestConcurrentAssign:
    def test_exactly_one_of_two_assigns_wins(self):
        rider_id = _verified_rider()
        first, second = _delivery(), _delivery()

        results, errors = _race(
            [
                lambda: engine.assign(rider_id, first),
                lambda: engine.assign(rider_id, second),
            ]
        )

        assert len(results) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], RiderUnavailable)

        rider = engine.get_rider(rider_id)
        winner = rider.current_delivery_id
        loser = second if winner == first else first
        assert winner in (first, second)
        assert rider.is_available is False
        assert engine.get_delivery(winner).rider_id == rider_id
        assert engine.get_delivery(loser).rider_id is None


class TestConcurrentStatusUpdates:
    def test_duplicate_status_webhooks_apply_once(self):
        delivery_id = _delivery()

        results, errors = _race([lambda: engine.advance_status(delivery_id, "PAID") for _ in range(4)])

        assert errors == []
        assert len(results) == 4
        delivery = engine.get_delivery(delivery_id)
        assert delivery.status == "PAID"
        assert [h.to_status for h in delivery.status_history].count("PAID") == 1

    def test_duplicate_delivered_webhooks_credit_once(self):
        delivery_id = _delivery()
        rider_id = _verified_rider()
        engine.assign(rider_id, delivery_id)
        for status in ("PAID", "READY_TO_PICKUP", "IN_TRANSIT", "READY_FOR_DELIVERY"):
            engine.advance_status(delivery_id, status)

        results, errors = _race([lambda: engine.advance_status(delivery_id, DeliveryStatus.DELIVERED) for _ in range(3)])

        assert errors == []
        rider = engine.get_rider(rider_id)
        assert rider.completed_deliveries == 1
        assert len(rider.earnings_history) == 1
        assert rider.is_available is True


class TestLockRegistry:
    def test_no_locks_retained_after_calls_finish(self):
        for _ in range(50):
            delivery_id = _delivery()
            engine.advance_status(delivery_id, DeliveryStatus.PAID.value)
            engine.cancel_delivery(delivery_id, reason="Customer request")

        rider_id = _verified_rider()
        delivery_id = _delivery()
        engine.assign(rider_id, delivery_id)
        engine.unassign_rider(delivery_id, reason="Rider declined")

        assert len(engine.record_locks) == 0
