"""
Appointment Booking

A FastAPI-based web application for booking appointments, with
session-based authentication, a client directory and per-user
appointment and task lists.
"""

__version__ = "1.0.0"
