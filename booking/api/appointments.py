from fastapi import APIRouter, Depends, Form, Request, status
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.exceptions import ValidationError
from ..core.security import Identity
from ..models.appointment import AppointmentStatus
from ..services.appointment_service import AppointmentService
from .deps import get_current_identity, verify_csrf
from .templating import redirect, render

router = APIRouter(prefix="/appointments", tags=["Appointments"])

STATUSES = [s.value for s in AppointmentStatus]

@router.get("")
async def list_appointments(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """List the caller's appointments, soonest first."""
    appointments = AppointmentService(db).list(identity.user_id)
    return render(request, "appointments/index.html", {"appointments": appointments})

@router.get("/new")
async def new_appointment_form(
    request: Request,
    identity: Identity = Depends(get_current_identity)
):
    return render(request, "appointments/new.html", {"form": {}})

@router.post("", dependencies=[Depends(verify_csrf)])
async def create_appointment(
    request: Request,
    client_name: str = Form("", alias="clientName"),
    phone: str = Form(""),
    service: str = Form(""),
    appointment_date: str = Form("", alias="appointmentDate"),
    appointment_time: str = Form("", alias="appointmentTime"),
    client_id: str = Form("", alias="clientId"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    try:
        AppointmentService(db).create(
            identity.user_id,
            client_name=client_name,
            phone=phone,
            service=service,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            client_id=client_id,
        )
    except ValidationError as e:
        form = {
            "clientName": client_name,
            "phone": phone,
            "service": service,
            "appointmentDate": appointment_date,
            "appointmentTime": appointment_time,
            "clientId": client_id,
        }
        return render(
            request, "appointments/new.html",
            {"error": e.message, "form": form},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return redirect("/appointments")

@router.get("/edit/{appointment_id}")
async def edit_appointment_form(
    request: Request,
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    # NotFoundError is turned into a redirect to the list by the app handler
    appointment = AppointmentService(db).get(identity.user_id, appointment_id)
    return render(
        request, "appointments/edit.html",
        {"appointment": appointment, "statuses": STATUSES},
    )

@router.post("/edit/{appointment_id}", dependencies=[Depends(verify_csrf)])
async def update_appointment(
    request: Request,
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    form = await request.form()
    field_names = {
        "clientName": "client_name",
        "phone": "phone",
        "service": "service",
        "appointmentDate": "appointment_date",
        "appointmentTime": "appointment_time",
        "status": "status",
        "clientId": "client_id",
    }
    fields = {field: form[name] for name, field in field_names.items() if name in form}

    appointment_service = AppointmentService(db)
    try:
        appointment_service.update(identity.user_id, appointment_id, fields)
    except ValidationError as e:
        return render(
            request, "appointments/edit.html",
            {
                "appointment": appointment_service.get(identity.user_id, appointment_id),
                "statuses": STATUSES,
                "error": e.message,
            },
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return redirect("/appointments")

@router.post("/delete/{appointment_id}", dependencies=[Depends(verify_csrf)])
async def delete_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    AppointmentService(db).delete(identity.user_id, appointment_id)
    return redirect("/appointments")
