"""Document service - Business logic for client documents"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Document, User
from .repository import DocumentRepository
from .storage import (
    remove_stored_file,
    resolve_stored_path,
    save_file,
    size_limit_error,
    validate_filename,
)

logger = logging.getLogger(__name__)


class DocumentService:
    """Service layer for document business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DocumentRepository()

    def get_documents(self, user: User) -> list[Document]:
        """Admins see every document, everyone else only their own uploads"""
        return self.repo.get_documents(self.db, None if user.is_admin else user.id)

    def get_documents_by_client(self, client_id: int) -> list[Document]:
        return self.repo.get_documents_by_client(self.db, client_id)

    def get_document(self, document_id: int) -> Document:
        document = self.repo.get_document_by_id(self.db, document_id)
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        return document

    def upload_document(
        self,
        contents: bytes,
        original_name: Optional[str],
        content_type: Optional[str],
        client_id: Optional[int],
        user: User,
    ) -> Document:
        error = validate_filename(original_name)
        if error:
            raise HTTPException(status_code=400, detail=error)
        error = size_limit_error(len(contents))
        if error:
            raise HTTPException(status_code=413, detail=error)
        if client_id is not None and not self.repo.client_exists(self.db, client_id):
            raise HTTPException(status_code=400, detail="Client not found")

        stored_name = save_file(contents, original_name)
        try:
            document = self.repo.create_document(
                self.db,
                name=stored_name,
                original_name=original_name,
                size=len(contents),
                type=content_type or "application/octet-stream",
                client_id=client_id,
                user_id=user.id,
            )
        except Exception:
            self.db.rollback()
            remove_stored_file(stored_name)
            raise

        logger.info(f"📄 Document {document.id} uploaded by user {user.id}")
        return document

    def get_download_path(self, document_id: int) -> tuple[Document, Path]:
        document = self.get_document(document_id)
        try:
            path = resolve_stored_path(document.name)
        except ValueError:
            raise HTTPException(status_code=404, detail="File not found") from None
        if not path.exists():
            raise HTTPException(status_code=404, detail="File not found")
        return document, path

    def delete_document(self, document_id: int) -> None:
        document = self.get_document(document_id)
        stored_name = document.name
        self.repo.delete_document(self.db, document)
        remove_stored_file(stored_name)
