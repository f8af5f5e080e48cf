"""Kanban router - FastAPI endpoints for boards, columns, cards and tasks"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    BoardCreate,
    BoardResponse,
    BoardUpdate,
    CardCreate,
    CardMove,
    CardResponse,
    CardUpdate,
    ColumnCreate,
    ColumnResponse,
    ColumnUpdate,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from .service import KanbanService

router = APIRouter(prefix="/kanban", tags=["Kanban"])


def get_kanban_service(db: Session = Depends(get_db)) -> KanbanService:
    """Dependency injection for KanbanService"""
    return KanbanService(db)


# ============================================================================
# BOARDS
# ============================================================================


@router.get("/boards", response_model=list[BoardResponse])
async def get_boards(
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.get_boards(current_user)


@router.post("/boards", response_model=BoardResponse, status_code=201)
async def create_board(
    data: BoardCreate,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.create_board(data, current_user)


@router.get("/boards/{board_id}", response_model=BoardResponse)
async def get_board(
    board_id: int,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.get_board(board_id, current_user)


@router.put("/boards/{board_id}", response_model=BoardResponse)
async def update_board(
    board_id: int,
    data: BoardUpdate,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.update_board(board_id, data, current_user)


@router.delete("/boards/{board_id}", status_code=204)
async def delete_board(
    board_id: int,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    """Delete a board together with its columns, cards and tasks"""
    service.delete_board(board_id, current_user)
    return Response(status_code=204)


@router.get("/boards/{board_id}/columns", response_model=list[ColumnResponse])
async def get_columns(
    board_id: int,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.get_columns(board_id, current_user)


# ============================================================================
# COLUMNS
# ============================================================================


@router.post("/columns", response_model=ColumnResponse, status_code=201)
async def create_column(
    data: ColumnCreate,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.create_column(data, current_user)


@router.put("/columns/{column_id}", response_model=ColumnResponse)
async def update_column(
    column_id: int,
    data: ColumnUpdate,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.update_column(column_id, data, current_user)


@router.delete("/columns/{column_id}", status_code=204)
async def delete_column(
    column_id: int,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    service.delete_column(column_id, current_user)
    return Response(status_code=204)


@router.get("/columns/{column_id}/cards", response_model=list[CardResponse])
async def get_cards(
    column_id: int,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.get_cards(column_id, current_user)


# ============================================================================
# CARDS
# ============================================================================


@router.post("/cards", response_model=CardResponse, status_code=201)
async def create_card(
    data: CardCreate,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.create_card(data, current_user)


@router.put("/cards/{card_id}/move", response_model=CardResponse)
async def move_card(
    card_id: int,
    data: CardMove,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    """Move a card to a column and index; both columns are renumbered"""
    return service.move_card(card_id, data, current_user)


@router.put("/cards/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: int,
    data: CardUpdate,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.update_card(card_id, data, current_user)


@router.delete("/cards/{card_id}", status_code=204)
async def delete_card(
    card_id: int,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    service.delete_card(card_id, current_user)
    return Response(status_code=204)


@router.get("/cards/{card_id}/tasks", response_model=list[TaskResponse])
async def get_tasks(
    card_id: int,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.get_tasks(card_id, current_user)


# ============================================================================
# TASKS
# ============================================================================


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    data: TaskCreate,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.create_task(data, current_user)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    return service.update_task(task_id, data, current_user)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: KanbanService = Depends(get_kanban_service),
):
    service.delete_task(task_id, current_user)
    return Response(status_code=204)
