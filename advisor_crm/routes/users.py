import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_roles
from ..database import get_db
from ..domain.clients.repository import ClientRepository
from ..domain.documents.storage import (
    remove_stored_file,
    resolve_stored_path,
    save_file,
    size_limit_error,
    validate_filename,
)
from ..models import (
    ROLE_SUPER_ADMIN,
    Appointment,
    CdnQuotation,
    Document,
    KanbanBoard,
    KanbanCard,
    KanbanTask,
    User,
)
from ..schemas import MessageResponse, ProfilePictureResponse, UserResponse, UserUpdate
from ..security_utils import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])

require_super_admin = require_roles(ROLE_SUPER_ADMIN)


@router.get("/users", response_model=list[UserResponse])
def get_users(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return db.query(User).order_by(User.id).all()


@router.get("/team-members", response_model=list[UserResponse])
def get_team_members(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Active staff that appointments and cards can be assigned to"""
    return db.query(User).filter(User.is_active.is_(True)).order_by(User.first_name, User.username).all()


@router.get("/users/presence", response_model=list[UserResponse])
def get_users_presence(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Every user with their online flag and last-seen time, online first"""
    return db.query(User).order_by(User.is_online.desc(), User.last_seen.desc(), User.id).all()


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """Edit a staff user (super admin only)"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    updates = data.model_dump(exclude_unset=True)

    # Empty password leaves the current one in place
    password = updates.pop("password", None)
    if password:
        user.password = hash_password(password)

    username = updates.get("username")
    if username and username != user.username:
        if db.query(User).filter(User.username == username).first():
            raise HTTPException(status_code=400, detail="Username already exists")
    email = updates.get("email")
    if email and email.lower() != user.email.lower():
        if db.query(User).filter(func.lower(User.email) == email.lower()).first():
            raise HTTPException(status_code=400, detail="Email already registered")

    for key, value in updates.items():
        if value is not None:
            setattr(user, key, value)

    db.commit()
    db.refresh(user)
    logger.info(f"✏️ User {user_id} updated by {current_user.username}")
    return user


def delete_user_data(db: Session, user: User) -> list[str]:
    """
    Remove a user and everything that belongs to them.

    Assigned tasks and cards, boards, created appointments, documents and
    clients (with their own dependents) are deleted; appointments merely
    assigned to the user are unassigned. Returns stored file names to clean up,
    profile picture included.
    """
    stored_files = [name for (name,) in db.query(Document.name).filter(Document.user_id == user.id)]
    profile_image = _stored_image_name(user)
    if profile_image:
        stored_files.append(profile_image)

    db.query(KanbanTask).filter(KanbanTask.assigned_to_id == user.id).delete(synchronize_session=False)
    for card in db.query(KanbanCard).filter(KanbanCard.assigned_to_id == user.id).all():
        db.delete(card)
    for board in db.query(KanbanBoard).filter(KanbanBoard.user_id == user.id).all():
        db.delete(board)
    db.flush()

    db.query(Appointment).filter(Appointment.user_id == user.id).delete(synchronize_session=False)
    db.query(Appointment).filter(Appointment.assigned_to_id == user.id).update(
        {Appointment.assigned_to_id: None}, synchronize_session=False
    )
    db.query(Document).filter(Document.user_id == user.id).delete(synchronize_session=False)
    db.query(CdnQuotation).filter(CdnQuotation.user_id == user.id).update(
        {CdnQuotation.user_id: None}, synchronize_session=False
    )

    for client in ClientRepository.get_clients(db, user.id):
        stored_files.extend(ClientRepository.get_document_paths(db, client.id))
        for model in (KanbanCard, Appointment, Document, CdnQuotation):
            db.query(model).filter(model.client_id == client.id).delete(synchronize_session=False)
        db.delete(client)

    db.delete(user)
    db.commit()
    return stored_files


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """Delete a staff user and their data (super admin only, never yourself)"""
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    for stored_name in delete_user_data(db, user):
        remove_stored_file(stored_name)

    logger.info(f"🗑️ User {user_id} deleted by {current_user.username}")
    return Response(status_code=204)


# ============================================================================
# PROFILE PICTURES
# ============================================================================

PROFILE_IMAGE_PREFIX = "/uploads/"


def _stored_image_name(user: User) -> Optional[str]:
    if not user.profile_image_url or not user.profile_image_url.startswith(PROFILE_IMAGE_PREFIX):
        return None
    return os.path.basename(user.profile_image_url)


@router.post("/profile-picture", response_model=ProfilePictureResponse)
async def upload_profile_picture(
    file: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace the signed-in user's profile picture (multipart field 'file', images only)"""
    error = validate_filename(file.filename if file else None)
    if error:
        raise HTTPException(status_code=400, detail=error)
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    contents = await file.read()
    error = size_limit_error(len(contents))
    if error:
        raise HTTPException(status_code=413, detail=error)

    previous = _stored_image_name(current_user)
    image_url = f"{PROFILE_IMAGE_PREFIX}{save_file(contents, file.filename)}"
    current_user.profile_image_url = image_url
    db.commit()
    if previous:
        remove_stored_file(previous)

    logger.info(f"🖼️ Profile picture updated for user {current_user.id}")
    return {"image_url": image_url, "message": "Profile picture updated successfully"}


@router.get("/profile-picture/{user_id}")
def get_profile_picture(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == user_id).first()
    stored_name = _stored_image_name(user) if user else None
    if not stored_name:
        raise HTTPException(status_code=404, detail="Profile picture not found")
    try:
        path = resolve_stored_path(stored_name)
    except ValueError:
        raise HTTPException(status_code=404, detail="Profile picture not found") from None
    if not path.exists():
        raise HTTPException(status_code=404, detail="Profile picture not found")
    return FileResponse(path)


@router.delete("/profile-picture/{user_id}", response_model=MessageResponse)
def delete_profile_picture(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Clear a profile picture (your own, or anyone's as super admin)"""
    if current_user.id != user_id and current_user.role != ROLE_SUPER_ADMIN:
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    stored_name = _stored_image_name(user)
    user.profile_image_url = None
    db.commit()
    if stored_name:
        remove_stored_file(stored_name)

    logger.info(f"🧹 Profile picture cleared for user {user_id} by {current_user.username}")
    return {"message": "Profile picture deleted successfully"}
