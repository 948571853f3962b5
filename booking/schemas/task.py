from typing import Optional
from pydantic import BaseModel, ConfigDict

class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    title: str
    description: Optional[str] = None
