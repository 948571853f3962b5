import logging
import os
import re
import time
from datetime import date, time as dtime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query

from booking.main import app
from booking.core.exceptions import NotFoundError, ValidationError
from booking.core.messages import get_message, status_label
from booking.models.appointment import AppointmentStatus
from booking.repositories.client_repository import ClientRepository
from booking.services.appointment_service import AppointmentService
from booking.services.auth_service import AuthService

from tests.conftest import post_form, register_and_login

EDIT_LINK = re.compile(r'href="/appointments/edit/(\d+)"')

def appointment_fields(**overrides):
    fields = {
        "client_name": "Bob",
        "phone": "11999990000",
        "service": "Haircut",
        "appointment_date": "2024-05-01",
        "appointment_time": "09:00",
    }
    fields.update(overrides)
    return fields

@pytest.fixture
def owners(db):
    auth = AuthService(db)
    return auth.register("alice", "secret1").id, auth.register("carol", "secret1").id


class TestAppointmentService:

    def test_create_defaults_to_scheduled(self, db, owners):
        alice, _ = owners
        appointment = AppointmentService(db).create(alice, **appointment_fields())

        assert appointment.owner_id == alice
        assert appointment.status == AppointmentStatus.SCHEDULED
        assert appointment.appointment_date == date(2024, 5, 1)
        assert appointment.appointment_time == dtime(9, 0)

    def test_date_and_time_survive_time_zone_changes(self, db, owners):
        """The entered calendar date reads back unchanged under any server zone."""
        if not hasattr(time, "tzset"):
            pytest.skip("time.tzset is not available on this platform")
        alice, _ = owners
        service = AppointmentService(db)
        original_tz = os.environ.get("TZ")
        try:
            for zone in ("Pacific/Kiritimati", "Pacific/Pago_Pago", "UTC"):
                os.environ["TZ"] = zone
                time.tzset()
                created = service.create(alice, **appointment_fields(appointment_date="2024-03-15", appointment_time="14:30"))
                stored = service.get(alice, created.id)
                assert stored.appointment_date.isoformat() == "2024-03-15"
                assert stored.appointment_time.strftime("%H:%M") == "14:30"
        finally:
            if original_tz is None:
                os.environ.pop("TZ", None)
            else:
                os.environ["TZ"] = original_tz
            time.tzset()

    def test_list_is_owner_scoped_and_ordered(self, db, owners):
        alice, carol = owners
        service = AppointmentService(db)
        service.create(alice, **appointment_fields(appointment_date="2024-05-02", appointment_time="08:00"))
        service.create(carol, **appointment_fields(client_name="Dave"))
        service.create(alice, **appointment_fields(appointment_date="2024-05-01", appointment_time="15:00"))
        service.create(alice, **appointment_fields(appointment_date="2024-05-01", appointment_time="09:30"))

        listed = service.list(alice)

        assert all(a.owner_id == alice for a in listed)
        assert [(a.appointment_date.isoformat(), a.appointment_time.strftime("%H:%M")) for a in listed] == [
            ("2024-05-01", "09:30"),
            ("2024-05-01", "15:00"),
            ("2024-05-02", "08:00"),
        ]
        assert [a.client_name for a in service.list(carol)] == ["Dave"]

    @pytest.mark.parametrize("overrides,key", [
        ({"client_name": "   "}, "client_name_required"),
        ({"client_name": "<b></b>"}, "client_name_required"),
        ({"phone": ""}, "phone_required"),
        ({"service": None}, "service_required"),
        ({"appointment_date": "2024-02-30"}, "invalid_date"),
        ({"appointment_date": "01/05/2024"}, "invalid_date"),
        ({"appointment_time": "9:00"}, "invalid_time"),
        ({"appointment_time": "24:00"}, "invalid_time"),
        ({"appointment_time": "12:60"}, "invalid_time"),
        ({"appointment_time": "1\u0663:30"}, "invalid_time"),
        ({"appointment_date": "2024-0\u0665-01"}, "invalid_date"),
    ])
    def test_create_validation(self, db, owners, overrides, key):
        alice, _ = owners
        with pytest.raises(ValidationError) as exc:
            AppointmentService(db).create(alice, **appointment_fields(**overrides))
        assert exc.value.message == get_message(key)

    @pytest.mark.parametrize("name,label_key,limit", [
        ("client_name", "field_client_name", 100),
        ("phone", "field_phone", 20),
        ("service", "field_service", 100),
    ])
    def test_create_rejects_text_longer_than_column(self, db, owners, name, label_key, limit):
        alice, _ = owners
        with pytest.raises(ValidationError) as exc:
            AppointmentService(db).create(alice, **appointment_fields(**{name: "1" * (limit + 1)}))
        assert exc.value.message == get_message("too_long", field=get_message(label_key), max_length=limit)
        assert AppointmentService(db).list(alice) == []

    def test_text_at_column_limit_is_accepted(self, db, owners):
        alice, _ = owners
        appointment = AppointmentService(db).create(alice, **appointment_fields(phone="1" * 20))
        assert appointment.phone == "1" * 20

    def test_first_violated_rule_is_reported(self, db, owners):
        alice, _ = owners
        with pytest.raises(ValidationError) as exc:
            AppointmentService(db).create(alice, **appointment_fields(phone="", appointment_time="bad"))
        assert exc.value.message == get_message("phone_required")

    def test_markup_is_stripped(self, db, owners):
        alice, _ = owners
        appointment = AppointmentService(db).create(
            alice, **appointment_fields(client_name="  <script>x</script>Bob  ", service="<i>Haircut</i>")
        )
        assert appointment.client_name == "xBob"
        assert appointment.service == "Haircut"

    def test_create_with_unknown_client_reference(self, db, owners):
        alice, _ = owners
        with pytest.raises(ValidationError):
            AppointmentService(db).create(alice, **appointment_fields(client_id="999"))

    def test_create_with_client_reference(self, db, owners):
        alice, _ = owners
        client = ClientRepository(db).create(
            first_name="Bob", last_name="Silva", email="bob@example.com",
            phone="11999990000", address="Rua A, 1", neighborhood="Centro",
            city="São Paulo", birth_date=date(1990, 1, 1),
        )
        appointment = AppointmentService(db).create(alice, **appointment_fields(client_id=str(client.id)))
        assert appointment.client_id == client.id

    def test_update_fields_and_status(self, db, owners):
        alice, _ = owners
        service = AppointmentService(db)
        created = service.create(alice, **appointment_fields())

        updated = service.update(alice, created.id, {"service": "Beard trim", "status": "completed"})

        assert updated.service == "Beard trim"
        assert updated.status == AppointmentStatus.COMPLETED
        assert updated.client_name == "Bob"

    def test_update_rejects_unknown_status(self, db, owners):
        alice, _ = owners
        service = AppointmentService(db)
        created = service.create(alice, **appointment_fields())

        with pytest.raises(ValidationError) as exc:
            service.change_status(alice, created.id, "archived")
        assert exc.value.message == get_message("invalid_status")

    def test_update_not_owned(self, db, owners):
        alice, carol = owners
        service = AppointmentService(db)
        created = service.create(alice, **appointment_fields())

        with pytest.raises(NotFoundError):
            service.update(carol, created.id, {"status": "cancelled"})
        with pytest.raises(NotFoundError):
            service.get(carol, created.id)
        assert service.get(alice, created.id).status == AppointmentStatus.SCHEDULED

    def test_delete_missing_or_foreign_is_noop(self, db, owners):
        alice, carol = owners
        service = AppointmentService(db)
        created = service.create(alice, **appointment_fields())

        service.delete(carol, created.id)
        service.delete(alice, 12345)

        assert [a.id for a in service.list(alice)] == [created.id]

        service.delete(alice, created.id)
        assert service.list(alice) == []


class TestStatusLabels:

    def test_known_statuses(self):
        assert status_label("scheduled", locale="pt-BR") == "Agendado"
        assert status_label("completed", locale="pt-BR") == "Concluído"
        assert status_label("cancelled", locale="en") == "Cancelled"

    def test_unknown_status_passes_through(self):
        assert status_label("archived") == "archived"


class TestAppointmentRoutes:

    def test_list_requires_login(self, client):
        response = client.get("/appointments", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/users/login"
        assert "appointment" not in response.text

    def test_create_requires_csrf(self, client):
        register_and_login(client)
        response = client.post("/appointments", data={"clientName": "Bob"})
        assert response.status_code == 403

    def test_create_validation_error_rerenders_form(self, client):
        register_and_login(client)
        response = post_form(client, "/appointments", {
            "clientName": "Bob",
            "phone": "11999990000",
            "service": "Haircut",
            "appointmentDate": "2024-05-01",
            "appointmentTime": "9h",
        })
        assert response.status_code == 400
        assert get_message("invalid_time") in response.text
        assert 'value="Haircut"' in response.text

    def test_edit_foreign_appointment_redirects_to_list(self, client):
        register_and_login(client, "carol", "secret1")
        post_form(client, "/appointments", {
            "clientName": "Dave",
            "phone": "11988887777",
            "service": "Manicure",
            "appointmentDate": "2024-06-01",
            "appointmentTime": "10:00",
        })
        appointment_id = EDIT_LINK.search(client.get("/appointments").text).group(1)
        client.get("/users/logout")

        register_and_login(client)
        response = client.get(f"/appointments/edit/{appointment_id}", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/appointments"

        post_form(client, f"/appointments/delete/{appointment_id}", {})
        client.get("/users/logout")
        login_response = post_form(client, "/users/login", {"username": "carol", "password": "secret1"})
        assert "Dave" in login_response.text

    def test_end_to_end_booking_flow(self, client):
        """Register, book, complete and delete an appointment."""
        register_and_login(client, "alice", "secret1")

        response = post_form(client, "/appointments", {
            "clientName": "Bob",
            "phone": "11999990000",
            "service": "Haircut",
            "appointmentDate": "2024-05-01",
            "appointmentTime": "09:00",
        })
        assert response.url.path == "/appointments"
        assert response.text.count('class="appointment"') == 1
        assert "Agendado" in response.text
        assert "01/05/2024" in response.text
        assert "09:00" in response.text

        appointment_id = EDIT_LINK.search(response.text).group(1)
        edit_page = client.get(f"/appointments/edit/{appointment_id}")
        assert 'value="2024-05-01"' in edit_page.text

        response = post_form(client, f"/appointments/edit/{appointment_id}", {
            "clientName": "Bob",
            "phone": "11999990000",
            "service": "Haircut",
            "appointmentDate": "2024-05-01",
            "appointmentTime": "09:00",
            "status": "completed",
        })
        assert response.url.path == "/appointments"
        assert "Concluído" in response.text
        assert "Agendado" not in response.text

        response = post_form(client, f"/appointments/delete/{appointment_id}", {})
        assert response.text.count('class="appointment"') == 0

    def test_over_long_phone_rerenders_form(self, client):
        register_and_login(client)
        response = post_form(client, "/appointments", {
            "clientName": "Bob",
            "phone": "1" * 21,
            "service": "Haircut",
            "appointmentDate": "2024-05-01",
            "appointmentTime": "09:00",
        })
        assert response.status_code == 400
        assert get_message("too_long", field=get_message("field_phone"), max_length=20) in response.text
        assert client.get("/appointments").text.count('class="appointment"') == 0

    def test_pages_use_configured_locale(self, client):
        register_and_login(client)
        response = client.get("/appointments")

        assert '<html lang="pt-BR">' in response.text
        for text in ("Agendamentos", "Sair", "Novo agendamento", "Nenhum agendamento"):
            assert text in response.text
        for text in ("Logout", "New appointment", "No appointments"):
            assert text not in response.text


class TestErrorPages:

    def test_store_failure_renders_generic_message(self, client, monkeypatch, caplog):
        """A database failure shows a generic page and keeps the driver error in the log."""
        register_and_login(client)

        def failing_all(self):
            raise OperationalError("SELECT", {}, Exception("secret driver detail"))

        monkeypatch.setattr(Query, "all", failing_all)
        with caplog.at_level(logging.ERROR):
            response = client.get("/appointments")

        assert response.status_code == 500
        assert get_message("store_error") in response.text
        assert "secret driver detail" not in response.text
        assert "secret driver detail" in caplog.text
        assert "appointment listing" in caplog.text

    def test_unexpected_error_renders_generic_page(self, test_db, monkeypatch):
        def broken_list(self, owner_id):
            raise RuntimeError("boom")

        with TestClient(app, raise_server_exceptions=False) as test_client:
            register_and_login(test_client)
            monkeypatch.setattr(AppointmentService, "list", broken_list)
            response = test_client.get("/appointments")

        assert response.status_code == 500
        assert get_message("unexpected_error") in response.text
        assert "boom" not in response.text
