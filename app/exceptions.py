# app/exceptions.py
"""
Domain errors for the fleet backend.

Vehicle-state errors carry an HTTP status and are surfaced to the caller by
the handler registered in app.main. Ledger errors (LedgerError subclasses)
are caught at the booking workflow boundary and only logged / alerted.
"""

from typing import Optional
from fastapi import status


class FleetError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotAuthenticated(FleetError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(FleetError):
    status_code = status.HTTP_403_FORBIDDEN


class VehicleNotFound(FleetError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, vehicle_id: str):
        super().__init__(f"Vehicle {vehicle_id} not found")
        self.vehicle_id = vehicle_id


class VehicleNotAvailable(FleetError):
    """Booking attempted on a vehicle whose status is not `available`."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, vehicle_id: str, current_status):
        current = getattr(current_status, "value", current_status)
        super().__init__(f"Vehicle {vehicle_id} is not available (status: {current})")
        self.vehicle_id = vehicle_id
        self.current_status = current


class ConflictingUpdate(FleetError):
    """The vehicle changed between our read and our conditional write."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, vehicle_id: str, expected_status):
        expected = getattr(expected_status, "value", expected_status)
        super().__init__(
            f"Vehicle {vehicle_id} was modified concurrently (expected status: {expected}); "
            "re-fetch and retry"
        )
        self.vehicle_id = vehicle_id
        self.expected_status = expected


class InvalidStatusTransition(FleetError):
    status_code = status.HTTP_409_CONFLICT


class DuplicateRegistration(FleetError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, registration_number: str):
        super().__init__(f"Registration {registration_number} already exists")
        self.registration_number = registration_number


class NotVehicleHolder(FleetError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, vehicle_id: str, user_id: str):
        super().__init__(f"User {user_id} does not hold vehicle {vehicle_id}")
        self.vehicle_id = vehicle_id
        self.user_id = user_id


class BackendUnavailable(FleetError):
    """Storage failure; nothing from the failed call is assumed persisted."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


# ── Ledger (non-fatal) ───────────────────────────────────────────────────────

class LedgerError(Exception):
    """Booking-history fault. Never fails a book/return action."""

    alert_type = "ledger_error"


class LedgerWriteFailed(LedgerError):
    alert_type = "ledger_write_failed"


class LedgerIntegrityAnomaly(LedgerError):
    alert_type = "ledger_integrity"

    def __init__(self, vehicle_id: str, open_count: int, detail: Optional[str] = None):
        super().__init__(
            detail or f"Expected exactly one open booking record for vehicle {vehicle_id}, found {open_count}"
        )
        self.vehicle_id = vehicle_id
        self.open_count = open_count
