"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Appointment, CdnQuotation, Client, Document, KanbanCard


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session, user_id: Optional[int] = None) -> list[Client]:
        """Get clients, optionally only those owned by one user"""
        query = db.query(Client)
        if user_id is not None:
            query = query.filter(Client.user_id == user_id)
        return query.order_by(Client.created_at.desc(), Client.id.desc()).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def get_client_by_email(db: Session, email: str) -> Optional[Client]:
        return db.query(Client).filter(Client.email == email).first()

    @staticmethod
    def create_client(db: Session, user_id: int, **client_data) -> Client:
        """Create a new client"""
        client = Client(user_id=user_id, **client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def delete_client(db: Session, client: Client) -> None:
        """Delete a client after removing the rows that reference it"""
        for model in (KanbanCard, Appointment, Document, CdnQuotation):
            db.query(model).filter(model.client_id == client.id).delete(synchronize_session=False)
        db.delete(client)
        db.commit()

    @staticmethod
    def get_document_paths(db: Session, client_id: int) -> list[str]:
        """Stored file names of a client's documents"""
        return [name for (name,) in db.query(Document.name).filter(Document.client_id == client_id)]

    @staticmethod
    def count_clients(db: Session, user_id: Optional[int] = None, status: Optional[str] = None) -> int:
        query = db.query(func.count(Client.id))
        if user_id is not None:
            query = query.filter(Client.user_id == user_id)
        if status:
            query = query.filter(Client.status == status)
        return query.scalar() or 0

    @staticmethod
    def total_value(db: Session, user_id: Optional[int] = None) -> int:
        query = db.query(func.coalesce(func.sum(Client.value), 0))
        if user_id is not None:
            query = query.filter(Client.user_id == user_id)
        return int(query.scalar() or 0)
