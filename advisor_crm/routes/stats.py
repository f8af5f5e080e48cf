from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..domain.clients.service import ClientService
from ..models import User
from ..schemas import StatsResponse

router = APIRouter(tags=["Stats"])


@router.get("/stats", response_model=StatsResponse)
def get_stats(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Dashboard totals; advisors only count their own clients"""
    return ClientService(db).get_stats(current_user)
