from .user import User
from .client import Client
from .appointment import Appointment, AppointmentStatus
from .task import Task

__all__ = ["User", "Client", "Appointment", "AppointmentStatus", "Task"]


def column_max_length(model, column_name: str):
    """VARCHAR size declared on a model column, or None when unbounded."""
    return getattr(model.__table__.c[column_name].type, "length", None)
