from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..core.database import get_db
from ..core.exceptions import ConflictError, StoreError, ValidationError
from ..core.messages import get_message
from ..services.client_service import ClientService
from .deps import get_current_identity, verify_csrf

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/clients",
    tags=["Clients"],
    dependencies=[Depends(get_current_identity)],
)

def _client_json(client) -> dict:
    return client.model_dump(mode="json", by_alias=True)

def _error(message: str, details: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "details": details})

@router.get("/search")
async def search_clients(term: Optional[str] = None, db: Session = Depends(get_db)):
    """Typeahead search: up to 10 clients whose first or last name contains ``term``."""
    try:
        clients = ClientService(db).search(term)
    except StoreError:
        return _error(
            get_message("search_clients_failed"),
            get_message("store_error"),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return [_client_json(c) for c in clients]

@router.post("", dependencies=[Depends(verify_csrf)])
async def create_client(request: Request, db: Session = Depends(get_db)):
    """Create a client from a JSON body; the new id feeds the pending appointment form."""
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        return _error(
            get_message("create_client_failed"),
            get_message("client_fields_required"),
            status.HTTP_400_BAD_REQUEST,
        )

    try:
        client = ClientService(db).create(payload)
    except ValidationError as e:
        return _error(get_message("create_client_failed"), e.message, status.HTTP_422_UNPROCESSABLE_ENTITY)
    except ConflictError as e:
        return _error(get_message("create_client_failed"), e.message, status.HTTP_409_CONFLICT)
    except StoreError:
        return _error(
            get_message("create_client_failed"),
            get_message("store_error"),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return JSONResponse(status_code=status.HTTP_201_CREATED, content=_client_json(client))
