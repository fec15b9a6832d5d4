# tests/test_booking_service.py
"""Booking / return workflow against a real (in-memory) database."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import patch
from app.exceptions import (
    BackendUnavailable, ConflictingUpdate, InvalidStatusTransition, LedgerWriteFailed, NotVehicleHolder,
    PermissionDenied, VehicleNotAvailable,
)
from app.models.alert import Alert
from app.models.booking_history import BookingHistory
from app.models.vehicle import Vehicle, VehicleStatus
from app.services import booking_service, ledger_service, vehicle_service


def assert_holder_coupling(vehicle):
    is_booked = vehicle.status == VehicleStatus.BOOKED
    assert is_booked == (vehicle.current_user_id is not None and vehicle.booked_at is not None)
    if not is_booked:
        assert vehicle.current_user_id is None and vehicle.booked_at is None


def open_records(db, vehicle_id):
    return ledger_service.find_open_records(db, vehicle_id)


class TestBookVehicle:
    def test_book_assigns_holder_and_opens_record(self, db, make_vehicle, alice):
        vehicle = make_vehicle(mileage=1200, operating_hours=None)

        booked = booking_service.book_vehicle(db, vehicle.id, alice)

        assert booked.status == VehicleStatus.BOOKED
        assert booked.current_user_id == alice.user_id
        assert_holder_coupling(booked)
        records = open_records(db, vehicle.id)
        assert len(records) == 1
        assert records[0].user_id == alice.user_id
        assert records[0].initial_mileage == 1200
        assert records[0].booked_at == booked.booked_at

    @pytest.mark.parametrize("status", [VehicleStatus.MAINTENANCE, VehicleStatus.DAMAGED])
    def test_book_refused_when_not_available(self, db, make_vehicle, alice, status):
        vehicle = make_vehicle(status=status)

        with pytest.raises(VehicleNotAvailable) as exc:
            booking_service.book_vehicle(db, vehicle.id, alice)

        assert exc.value.current_status == status.value
        unchanged = vehicle_service.get_vehicle(db, vehicle.id)
        assert unchanged.status == status
        assert_holder_coupling(unchanged)
        assert db.query(BookingHistory).count() == 0

    def test_second_booking_rejected_holder_kept(self, db, make_vehicle, alice, bob):
        vehicle = make_vehicle()
        booking_service.book_vehicle(db, vehicle.id, alice)

        with pytest.raises(VehicleNotAvailable) as exc:
            booking_service.book_vehicle(db, vehicle.id, bob)

        assert exc.value.current_status == "booked"
        current = vehicle_service.get_vehicle(db, vehicle.id)
        assert current.current_user_id == alice.user_id
        assert len(open_records(db, vehicle.id)) == 1

    def test_stale_read_loses_race(self, db, make_vehicle, alice, bob):
        vehicle = make_vehicle()
        booking_service.book_vehicle(db, vehicle.id, alice)

        # Bob's client read the vehicle before Alice's write landed
        real_get = vehicle_service.get_vehicle
        stale = Vehicle(id=vehicle.id, status=VehicleStatus.AVAILABLE, mileage=1000,
                        registration_number="TST-0001")
        reads = iter([stale])

        def stale_then_real(session, vehicle_id):
            return next(reads, None) or real_get(session, vehicle_id)

        with patch("app.services.vehicle_service.get_vehicle", side_effect=stale_then_real):
            with pytest.raises(ConflictingUpdate):
                booking_service.book_vehicle(db, vehicle.id, bob)

        current = vehicle_service.get_vehicle(db, vehicle.id)
        assert current.current_user_id == alice.user_id
        assert len(open_records(db, vehicle.id)) == 1

    def test_ledger_failure_does_not_fail_booking(self, db, make_vehicle, alice):
        vehicle = make_vehicle()

        with patch("app.services.ledger_service.open_record",
                   side_effect=LedgerWriteFailed("history table unavailable")):
            booked = booking_service.book_vehicle(db, vehicle.id, alice)

        assert booked.status == VehicleStatus.BOOKED
        assert vehicle_service.get_vehicle(db, vehicle.id).current_user_id == alice.user_id
        alert = db.query(Alert).one()
        assert alert.alert_type == "ledger_write_failed"
        assert alert.vehicle_id == vehicle.id

    def test_failed_reread_after_commit_still_reports_booking(self, db, make_vehicle, alice):
        vehicle = make_vehicle(mileage=640)
        real_get = vehicle_service.get_vehicle
        reads = []

        # First read succeeds, the read-back after the committed write fails
        def fail_second_read(session, vehicle_id):
            reads.append(vehicle_id)
            if len(reads) == 2:
                raise BackendUnavailable("Vehicle store unavailable")
            return real_get(session, vehicle_id)

        with patch("app.services.vehicle_service.get_vehicle", side_effect=fail_second_read):
            booked = booking_service.book_vehicle(db, vehicle.id, alice)

        assert len(reads) == 2
        assert booked.status == VehicleStatus.BOOKED
        assert booked.current_user_id == alice.user_id
        assert booked.mileage == 640
        assert_holder_coupling(booked)
        assert vehicle_service.get_vehicle(db, vehicle.id).current_user_id == alice.user_id
        records = open_records(db, vehicle.id)
        assert len(records) == 1
        assert records[0].initial_mileage == 640
        assert db.query(Alert).count() == 0


class TestReturnVehicle:
    def test_round_trip_closes_record(self, db, make_vehicle, alice):
        vehicle = make_vehicle(mileage=420)
        booking_service.book_vehicle(db, vehicle.id, alice)

        returned = booking_service.return_vehicle(db, vehicle.id, alice, mileage=500,
                                                  comments="Left mirror scratched")

        assert returned.status == VehicleStatus.AVAILABLE
        assert returned.current_user_id is None
        assert returned.mileage == 500
        assert_holder_coupling(returned)
        record = db.query(BookingHistory).filter(BookingHistory.vehicle_id == vehicle.id).one()
        assert record.returned_at is not None
        assert record.initial_mileage == 420
        assert record.return_mileage == 500
        assert record.comments == "Left mirror scratched"
        assert open_records(db, vehicle.id) == []

    def test_missing_mileage_leaves_reading_unchanged(self, db, make_vehicle, alice):
        vehicle = make_vehicle(mileage=7777)
        booking_service.book_vehicle(db, vehicle.id, alice)

        returned = booking_service.return_vehicle(db, vehicle.id, alice)

        assert returned.mileage == 7777

    def test_zero_is_a_real_reading(self, db, make_vehicle, alice):
        vehicle = make_vehicle(mileage=50, operating_hours=12.5)
        booking_service.book_vehicle(db, vehicle.id, alice)

        returned = booking_service.return_vehicle(db, vehicle.id, alice,
                                                  mileage=0, operating_hours=0)

        assert returned.mileage == 0
        assert returned.operating_hours == 0
        record = db.query(BookingHistory).one()
        assert record.return_mileage == 0
        assert record.return_operating_hours == 0

    def test_return_without_open_record_still_succeeds(self, db, make_vehicle, alice):
        vehicle = make_vehicle()
        with patch("app.services.ledger_service.open_record",
                   side_effect=LedgerWriteFailed("insert failed")):
            booking_service.book_vehicle(db, vehicle.id, alice)

        returned = booking_service.return_vehicle(db, vehicle.id, alice, mileage=1100)

        assert returned.status == VehicleStatus.AVAILABLE
        assert returned.mileage == 1100
        assert_holder_coupling(returned)
        alert_types = {a.alert_type for a in db.query(Alert).all()}
        assert alert_types == {"ledger_write_failed", "ledger_integrity"}

    def test_multiple_open_records_reported_not_closed(self, db, make_vehicle, alice):
        vehicle = make_vehicle()
        booked = booking_service.book_vehicle(db, vehicle.id, alice)
        ledger_service.open_record(db, vehicle.id, alice.user_id, booked.booked_at)

        returned = booking_service.return_vehicle(db, vehicle.id, alice)

        assert returned.status == VehicleStatus.AVAILABLE
        assert len(open_records(db, vehicle.id)) == 2
        alert = db.query(Alert).one()
        assert alert.alert_type == "ledger_integrity"
        assert "found 2" in alert.description

    def test_record_of_another_user_is_alerted_and_closed(self, db, make_vehicle, alice, bob):
        vehicle = make_vehicle()
        with patch("app.services.ledger_service.open_record",
                   side_effect=LedgerWriteFailed("insert failed")):
            booked = booking_service.book_vehicle(db, vehicle.id, alice)
        ledger_service.open_record(db, vehicle.id, bob.user_id, booked.booked_at)

        returned = booking_service.return_vehicle(db, vehicle.id, alice)

        assert returned.status == VehicleStatus.AVAILABLE
        mismatch = db.query(Alert).filter(Alert.alert_type == "ledger_integrity").one()
        assert bob.user_id in mismatch.description
        assert mismatch.user_id == alice.user_id
        assert mismatch.vehicle_id == vehicle.id
        assert open_records(db, vehicle.id) == []

    def test_non_holder_cannot_return(self, db, make_vehicle, alice, bob):
        vehicle = make_vehicle()
        booking_service.book_vehicle(db, vehicle.id, alice)

        with pytest.raises(NotVehicleHolder):
            booking_service.return_vehicle(db, vehicle.id, bob, mileage=2000)

        current = vehicle_service.get_vehicle(db, vehicle.id)
        assert current.current_user_id == alice.user_id
        assert current.mileage == 1000

    def test_fleet_admin_can_return_for_holder(self, db, make_vehicle, alice, fleet_admin):
        vehicle = make_vehicle()
        booking_service.book_vehicle(db, vehicle.id, alice)

        returned = booking_service.return_vehicle(db, vehicle.id, fleet_admin)

        assert returned.status == VehicleStatus.AVAILABLE
        assert open_records(db, vehicle.id) == []

    def test_return_on_available_vehicle_is_noop(self, db, make_vehicle, alice):
        vehicle = make_vehicle(mileage=300)
        booking_service.book_vehicle(db, vehicle.id, alice)
        booking_service.return_vehicle(db, vehicle.id, alice, mileage=350)

        again = booking_service.return_vehicle(db, vehicle.id, alice)
        assert again.status == VehicleStatus.AVAILABLE
        assert again.mileage == 350

        rewritten = booking_service.return_vehicle(db, vehicle.id, alice, mileage=360)
        assert rewritten.mileage == 360
        assert db.query(Alert).count() == 0
        assert db.query(BookingHistory).one().return_mileage == 350

    def test_return_refused_from_maintenance(self, db, make_vehicle, alice):
        vehicle = make_vehicle(status=VehicleStatus.MAINTENANCE)

        with pytest.raises(InvalidStatusTransition):
            booking_service.return_vehicle(db, vehicle.id, alice)


class TestAdminChange:
    def test_moving_booked_vehicle_to_maintenance_closes_record(self, db, make_vehicle,
                                                                 alice, fleet_admin):
        vehicle = make_vehicle()
        booking_service.book_vehicle(db, vehicle.id, alice)

        changed = booking_service.change_vehicle(
            db, vehicle.id, {"status": VehicleStatus.MAINTENANCE}, fleet_admin
        )

        assert changed.status == VehicleStatus.MAINTENANCE
        assert_holder_coupling(changed)
        record = db.query(BookingHistory).one()
        assert record.returned_at is not None
        assert "maintenance" in record.comments

    def test_admin_cannot_set_booked(self, db, make_vehicle, fleet_admin):
        vehicle = make_vehicle()

        with pytest.raises(InvalidStatusTransition):
            booking_service.change_vehicle(db, vehicle.id, {"status": "booked"}, fleet_admin)

        assert vehicle_service.get_vehicle(db, vehicle.id).status == VehicleStatus.AVAILABLE

    def test_plain_user_cannot_edit(self, db, make_vehicle, alice):
        vehicle = make_vehicle()

        with pytest.raises(PermissionDenied):
            booking_service.change_vehicle(db, vehicle.id, {"fuel_level": 10}, alice)

    def test_fuel_edit_keeps_booking(self, db, make_vehicle, alice, fleet_admin):
        vehicle = make_vehicle()
        booking_service.book_vehicle(db, vehicle.id, alice)

        changed = booking_service.change_vehicle(db, vehicle.id, {"fuel_level": 35}, fleet_admin)

        assert changed.fuel_level == 35
        assert changed.status == VehicleStatus.BOOKED
        assert changed.current_user_id == alice.user_id
        assert len(open_records(db, vehicle.id)) == 1
