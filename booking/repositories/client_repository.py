from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.messages import get_message
from ..models.client import Client
from ..schemas.client import ClientRead
from .base import store_operation

SEARCH_LIMIT = 10
LIKE_ESCAPE = "\\"

def escape_like(term: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )

class ClientRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, client_id: int) -> Optional[ClientRead]:
        with store_operation(self.db, "client lookup"):
            client = self.db.get(Client, client_id)
        return ClientRead.model_validate(client) if client else None

    def get_by_email(self, email: str) -> Optional[ClientRead]:
        with store_operation(self.db, "client lookup"):
            client = self.db.query(Client).filter(Client.email == email).first()
        return ClientRead.model_validate(client) if client else None

    def search(self, term: str, limit: int = SEARCH_LIMIT) -> List[ClientRead]:
        """Case-insensitive substring match on first or last name."""
        pattern = f"%{escape_like(term)}%"
        with store_operation(self.db, "client search"):
            clients = (
                self.db.query(Client)
                .filter(or_(
                    Client.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Client.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                ))
                .limit(limit)
                .all()
            )
        return [ClientRead.model_validate(c) for c in clients]

    def create(self, **fields) -> ClientRead:
        client = Client(**fields)
        with store_operation(self.db, "client creation", get_message("email_taken")):
            self.db.add(client)
            self.db.commit()
            self.db.refresh(client)
        return ClientRead.model_validate(client)
