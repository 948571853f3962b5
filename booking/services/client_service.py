from sqlalchemy.orm import Session as DBSession
from typing import Any, Dict, List, Optional
import logging

from pydantic import ValidationError as SchemaValidationError

from ..core.exceptions import ConflictError, ValidationError
from ..core.messages import get_message
from ..core.security import strip_markup
from ..repositories.client_repository import ClientRepository, SEARCH_LIMIT
from ..schemas.client import ClientCreate, ClientRead

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("first_name", "last_name", "phone", "address", "neighborhood", "city")

FIELD_LABELS = {
    "firstName": "field_first_name",
    "first_name": "field_first_name",
    "lastName": "field_last_name",
    "last_name": "field_last_name",
    "email": "field_email",
    "phone": "field_phone",
    "address": "field_address",
    "neighborhood": "field_neighborhood",
    "city": "field_city",
}


def _first_error_message(error: SchemaValidationError) -> str:
    first = error.errors()[0]
    field = first["loc"][0] if first["loc"] else None
    if first["type"] == "missing":
        return get_message("client_fields_required")
    if first["type"] == "string_too_long" and field in FIELD_LABELS:
        return get_message(
            "too_long",
            field=get_message(FIELD_LABELS[field]),
            max_length=first["ctx"]["max_length"],
        )
    if field == "email":
        return get_message("invalid_email")
    if field in ("birthDate", "birth_date"):
        return get_message("invalid_birth_date")
    return get_message("client_fields_required")


class ClientService:
    def __init__(self, db: DBSession):
        self.clients = ClientRepository(db)

    def search(self, term: Optional[str]) -> List[ClientRead]:
        """Typeahead lookup; a blank term yields no results rather than everything."""
        term = (term or "").strip()
        if not term:
            return []
        return self.clients.search(term, limit=SEARCH_LIMIT)

    def create(self, fields: Dict[str, Any]) -> ClientRead:
        try:
            data = ClientCreate.model_validate(fields)
        except SchemaValidationError as e:
            raise ValidationError(_first_error_message(e), details=str(e))

        values = data.model_dump()
        for name in TEXT_FIELDS:
            values[name] = strip_markup(values[name])
            if not values[name]:
                raise ValidationError(get_message("client_fields_required"))
        values["email"] = values["email"].lower()

        if self.clients.get_by_email(values["email"]):
            raise ConflictError(get_message("email_taken"))

        client = self.clients.create(**values)
        logger.info(f"Created client {client.id}")
        return client
