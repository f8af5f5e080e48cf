"""Document router - upload, list, download and delete client documents"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import DocumentResponse
from .service import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


def get_document_service(db: Session = Depends(get_db)) -> DocumentService:
    """Dependency injection for DocumentService"""
    return DocumentService(db)


@router.get("", response_model=list[DocumentResponse])
async def get_documents(
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    return service.get_documents(current_user)


@router.get("/client/{client_id}", response_model=list[DocumentResponse])
async def get_client_documents(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    return service.get_documents_by_client(client_id)


@router.post("", response_model=DocumentResponse, status_code=201)
async def upload_document(
    file: Optional[UploadFile] = File(None),
    client_id: Optional[int] = Form(None, alias="clientId"),
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Upload a document (multipart field 'file', optional 'clientId')"""
    if file is None:
        contents, filename, content_type = b"", None, None
    else:
        logger.info(f"📤 Uploading document '{file.filename}' for user {current_user.id}")
        contents = await file.read()
        filename, content_type = file.filename, file.content_type
    return service.upload_document(contents, filename, content_type, client_id, current_user)


@router.get("/{document_id}/download")
async def download_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    document, path = service.get_download_path(document_id)
    return FileResponse(path, media_type=document.type, filename=document.original_name)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    service.delete_document(document_id)
    return Response(status_code=204)
