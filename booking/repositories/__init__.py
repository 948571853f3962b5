from .user_repository import UserRepository
from .client_repository import ClientRepository
from .appointment_repository import AppointmentRepository
from .task_repository import TaskRepository

__all__ = ["UserRepository", "ClientRepository", "AppointmentRepository", "TaskRepository"]
