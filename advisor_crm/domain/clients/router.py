"""Client router - FastAPI endpoints for client operations"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...realtime.hub import PresenceHub
from ...realtime.router import get_presence_hub
from ...routes.notifications import get_notification_service
from ...services.notification_service import Notification, NotificationService
from ..scheduling.repository import AppointmentRepository
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Get clients visible to the current user"""
    return service.get_clients(current_user)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    return service.get_client(client_id, current_user)


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
    notifications: NotificationService = Depends(get_notification_service),
    hub: PresenceHub = Depends(get_presence_hub),
):
    """Create a new client and announce it to every staff member"""
    client = service.create_client(data, current_user)

    notification = Notification(
        id=f"client_created_{client.id}",
        title="New Client Added",
        body=f"{client.full_name} has been added to your client list",
        type="client",
        url="/clients",
        require_push=True,
        created_by=current_user.username,
    )
    notifications.publish(
        notification,
        AppointmentRepository.get_active_user_ids(service.db),
        key=f"new-client-{client.id}",
    )
    await hub.broadcast_notification(notification)
    return client


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    return service.update_client(client_id, data, current_user)


@router.delete("/{client_id}", status_code=204)
async def delete_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    service.delete_client(client_id, current_user)
    return Response(status_code=204)
