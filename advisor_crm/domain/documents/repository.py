"""Document repository - Database operations for document metadata"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Client, Document


class DocumentRepository:
    """Repository for document database operations"""

    @staticmethod
    def get_documents(db: Session, user_id: Optional[int] = None) -> list[Document]:
        query = db.query(Document)
        if user_id is not None:
            query = query.filter(Document.user_id == user_id)
        return query.order_by(Document.uploaded_at.desc(), Document.id.desc()).all()

    @staticmethod
    def get_documents_by_client(db: Session, client_id: int) -> list[Document]:
        return (
            db.query(Document)
            .filter(Document.client_id == client_id)
            .order_by(Document.uploaded_at.desc(), Document.id.desc())
            .all()
        )

    @staticmethod
    def get_document_by_id(db: Session, document_id: int) -> Optional[Document]:
        return db.query(Document).filter(Document.id == document_id).first()

    @staticmethod
    def client_exists(db: Session, client_id: int) -> bool:
        return db.query(Client.id).filter(Client.id == client_id).first() is not None

    @staticmethod
    def create_document(db: Session, **document_data) -> Document:
        document = Document(**document_data)
        db.add(document)
        db.commit()
        db.refresh(document)
        return document

    @staticmethod
    def delete_document(db: Session, document: Document) -> None:
        db.delete(document)
        db.commit()
