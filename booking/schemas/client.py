from datetime import date
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models import column_max_length
from ..models.client import Client

def _limit(column_name: str):
    return column_max_length(Client, column_name)

class ClientCreate(BaseModel):
    """Payload of the inline client registration form (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName", max_length=_limit("first_name"))
    last_name: str = Field(alias="lastName", max_length=_limit("last_name"))
    email: EmailStr
    phone: str = Field(max_length=_limit("phone"))
    address: str = Field(max_length=_limit("address"))
    neighborhood: str = Field(max_length=_limit("neighborhood"))
    city: str = Field(max_length=_limit("city"))
    birth_date: date = Field(alias="birthDate")

class ClientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    first_name: str = Field(serialization_alias="firstName")
    last_name: str = Field(serialization_alias="lastName")
    email: str
    phone: str
    address: str
    neighborhood: str
    city: str
    birth_date: date = Field(serialization_alias="birthDate")
