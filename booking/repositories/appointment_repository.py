from typing import List, Optional
from sqlalchemy.orm import Session

from ..models.appointment import Appointment
from ..schemas.appointment import AppointmentRead
from .base import store_operation

class AppointmentRepository:
    """Appointment storage; every query is filtered by owner."""

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, owner_id: int, appointment_id: int) -> Optional[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.owner_id == owner_id)
            .first()
        )

    def list_for_owner(self, owner_id: int) -> List[AppointmentRead]:
        with store_operation(self.db, "appointment listing"):
            appointments = (
                self.db.query(Appointment)
                .filter(Appointment.owner_id == owner_id)
                .order_by(
                    Appointment.appointment_date.asc(),
                    Appointment.appointment_time.asc(),
                    Appointment.id.asc(),
                )
                .all()
            )
        return [AppointmentRead.model_validate(a) for a in appointments]

    def get(self, owner_id: int, appointment_id: int) -> Optional[AppointmentRead]:
        with store_operation(self.db, "appointment lookup"):
            appointment = self._owned(owner_id, appointment_id)
        return AppointmentRead.model_validate(appointment) if appointment else None

    def create(self, owner_id: int, **fields) -> AppointmentRead:
        appointment = Appointment(owner_id=owner_id, **fields)
        with store_operation(self.db, "appointment creation"):
            self.db.add(appointment)
            self.db.commit()
            self.db.refresh(appointment)
        return AppointmentRead.model_validate(appointment)

    def update(self, owner_id: int, appointment_id: int, **fields) -> Optional[AppointmentRead]:
        with store_operation(self.db, "appointment update"):
            appointment = self._owned(owner_id, appointment_id)
            if not appointment:
                return None
            for name, value in fields.items():
                setattr(appointment, name, value)
            self.db.commit()
            self.db.refresh(appointment)
        return AppointmentRead.model_validate(appointment)

    def delete(self, owner_id: int, appointment_id: int) -> int:
        """Delete an owned appointment; returns the number of rows removed."""
        with store_operation(self.db, "appointment deletion"):
            deleted = (
                self.db.query(Appointment)
                .filter(Appointment.id == appointment_id, Appointment.owner_id == owner_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        return deleted
