"""Document domain schemas"""

from datetime import datetime
from typing import Optional

from ...schemas import CamelModel


class DocumentResponse(CamelModel):
    id: int
    name: str
    original_name: str
    size: int
    type: str
    client_id: Optional[int] = None
    user_id: Optional[int] = None
    uploaded_at: Optional[datetime] = None
