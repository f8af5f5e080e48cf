"""Client service - Business logic for client operations"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import ROLE_ADVISOR, Client, User
from ..documents.storage import remove_stored_file
from ..scheduling.repository import AppointmentRepository
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    @staticmethod
    def _owner_filter(user: User):
        """Advisors are limited to their own clients; other roles see all"""
        return user.id if user.role == ROLE_ADVISOR else None

    def get_clients(self, user: User) -> list[Client]:
        return self.repo.get_clients(self.db, self._owner_filter(user))

    def get_client(self, client_id: int, user: User) -> Client:
        """Get a specific client"""
        client = self.repo.get_client_by_id(self.db, client_id)
        owner_id = self._owner_filter(user)
        if not client or (owner_id is not None and client.user_id != owner_id):
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def _check_email_free(self, email, client_id=None) -> None:
        if not email:
            return
        existing = self.repo.get_client_by_email(self.db, email)
        if existing and existing.id != client_id:
            raise HTTPException(status_code=400, detail="A client with this email already exists")

    def create_client(self, data: ClientCreate, user: User) -> Client:
        """Create a new client owned by the current user"""
        logger.info(f"📥 Creating client for user_id: {user.id}")
        self._check_email_free(data.email)

        client_data = data.model_dump(exclude_none=True)
        try:
            return self.repo.create_client(self.db, user.id, **client_data)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Client insert rejected: {e.orig}")
            raise HTTPException(status_code=400, detail="Invalid client data") from e

    def update_client(self, client_id: int, data: ClientUpdate, user: User) -> Client:
        """Update a client; only fields present in the request change"""
        client = self.get_client(client_id, user)
        updates = data.model_dump(exclude_unset=True)
        if "email" in updates:
            self._check_email_free(updates["email"], client.id)
        for required in ("first_name", "surname", "status"):
            if required in updates and updates[required] is None:
                del updates[required]

        return self.repo.update_client(self.db, client, **updates)

    def delete_client(self, client_id: int, user: User) -> None:
        """Delete a client with its cards, appointments, documents and quotations"""
        client = self.get_client(client_id, user)
        stored_files = self.repo.get_document_paths(self.db, client.id)

        self.repo.delete_client(self.db, client)
        for stored_name in stored_files:
            remove_stored_file(stored_name)
        logger.info(f"🗑️ Client {client_id} deleted by user {user.id}")

    def get_stats(self, user: User) -> dict:
        """Dashboard figures, scoped like the client list"""
        owner_id = self._owner_filter(user)
        return {
            "total_clients": self.repo.count_clients(self.db, owner_id),
            "active_projects": self.repo.count_clients(self.db, owner_id, status="active"),
            "upcoming_meetings": AppointmentRepository.count_upcoming(self.db, owner_id),
            "revenue": self.repo.total_value(self.db, owner_id),
        }
