from .user import UserRead
from .client import ClientCreate, ClientRead
from .appointment import AppointmentRead
from .task import TaskRead

__all__ = ["UserRead", "ClientCreate", "ClientRead", "AppointmentRead", "TaskRead"]
