from datetime import date, time
from sqlalchemy.orm import Session as DBSession
from typing import Any, Dict, List, Optional
import logging
import re

from ..core.exceptions import NotFoundError, ValidationError
from ..core.messages import get_message
from ..core.security import strip_markup
from ..models.appointment import Appointment, AppointmentStatus
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.client_repository import ClientRepository
from ..schemas.appointment import AppointmentRead
from .validation import ensure_max_length

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$", re.ASCII)

# Validated in this order; the first failing rule wins
TEXT_FIELDS = (
    ("client_name", "client_name_required", "field_client_name"),
    ("phone", "phone_required", "field_phone"),
    ("service", "service_required", "field_service"),
)
EDITABLE_FIELDS = (
    "client_name", "phone", "service",
    "appointment_date", "appointment_time", "status", "client_id",
)


def parse_calendar_date(value: Any) -> date:
    """Parse a ``YYYY-MM-DD`` string into a date without any time zone handling."""
    if isinstance(value, date):
        return value
    value = (value or "").strip() if isinstance(value, str) else ""
    if not DATE_PATTERN.match(value):
        raise ValidationError(get_message("invalid_date"))
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(get_message("invalid_date"))


def parse_time_of_day(value: Any) -> time:
    """Parse a 24-hour ``HH:MM`` string."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    value = (value or "").strip() if isinstance(value, str) else ""
    match = TIME_PATTERN.match(value)
    if not match:
        raise ValidationError(get_message("invalid_time"))
    return time(int(match.group(1)), int(match.group(2)))


def parse_status(value: Any) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise ValidationError(get_message("invalid_status"))


class AppointmentService:
    """Owner-scoped appointment operations."""

    def __init__(self, db: DBSession):
        self.appointments = AppointmentRepository(db)
        self.clients = ClientRepository(db)

    def _parse_client_id(self, value: Any) -> Optional[int]:
        if value in (None, ""):
            return None
        try:
            client_id = int(value)
        except (TypeError, ValueError):
            raise ValidationError(get_message("client_not_found"))
        if not self.clients.get(client_id):
            raise ValidationError(get_message("client_not_found"))
        return client_id

    def _validate(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and normalize the fields present in ``fields``."""
        cleaned = {}
        for name, message_key, label_key in TEXT_FIELDS:
            if name in fields:
                value = strip_markup(fields[name])
                if not value:
                    raise ValidationError(get_message(message_key))
                cleaned[name] = ensure_max_length(value, Appointment, name, label_key)
        if "appointment_date" in fields:
            cleaned["appointment_date"] = parse_calendar_date(fields["appointment_date"])
        if "appointment_time" in fields:
            cleaned["appointment_time"] = parse_time_of_day(fields["appointment_time"])
        if "status" in fields:
            cleaned["status"] = parse_status(fields["status"])
        if "client_id" in fields:
            cleaned["client_id"] = self._parse_client_id(fields["client_id"])
        return cleaned

    def list(self, owner_id: int) -> List[AppointmentRead]:
        return self.appointments.list_for_owner(owner_id)

    def get(self, owner_id: int, appointment_id: int) -> AppointmentRead:
        appointment = self.appointments.get(owner_id, appointment_id)
        if not appointment:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appointment

    def create(
        self,
        owner_id: int,
        client_name: Optional[str],
        phone: Optional[str],
        service: Optional[str],
        appointment_date: Any,
        appointment_time: Any,
        client_id: Any = None,
    ) -> AppointmentRead:
        cleaned = self._validate({
            "client_name": client_name,
            "phone": phone,
            "service": service,
            "appointment_date": appointment_date,
            "appointment_time": appointment_time,
            "client_id": client_id,
        })
        appointment = self.appointments.create(
            owner_id, status=AppointmentStatus.SCHEDULED, **cleaned
        )
        logger.info(f"User {owner_id} created appointment {appointment.id}")
        return appointment

    def update(self, owner_id: int, appointment_id: int, fields: Dict[str, Any]) -> AppointmentRead:
        # Ownership check comes before validation
        self.get(owner_id, appointment_id)
        cleaned = self._validate({k: v for k, v in fields.items() if k in EDITABLE_FIELDS})
        appointment = self.appointments.update(owner_id, appointment_id, **cleaned)
        if not appointment:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        logger.info(f"User {owner_id} updated appointment {appointment_id}")
        return appointment

    def change_status(self, owner_id: int, appointment_id: int, status: Any) -> AppointmentRead:
        return self.update(owner_id, appointment_id, {"status": status})

    def delete(self, owner_id: int, appointment_id: int):
        """Delete an owned appointment; unknown or foreign ids are ignored."""
        deleted = self.appointments.delete(owner_id, appointment_id)
        if deleted:
            logger.info(f"User {owner_id} deleted appointment {appointment_id}")
