from datetime import date, time
from typing import Optional
from pydantic import BaseModel, ConfigDict

from ..models.appointment import AppointmentStatus

class AppointmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    client_id: Optional[int] = None
    client_name: str
    phone: str
    service: str
    appointment_date: date
    appointment_time: time
    status: AppointmentStatus
