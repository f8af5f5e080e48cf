"""Kanban service - Business logic for the task board"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, KanbanBoard, KanbanCard, KanbanColumn, KanbanTask, User
from .repository import KanbanRepository, insert_at, renumber
from .schemas import (
    BoardCreate,
    BoardUpdate,
    CardCreate,
    CardMove,
    CardUpdate,
    ColumnCreate,
    ColumnUpdate,
    TaskCreate,
    TaskUpdate,
)

logger = logging.getLogger(__name__)


class KanbanService:
    """Service layer for kanban business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = KanbanRepository()

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    def get_boards(self, user: User) -> list[KanbanBoard]:
        """Admins see every board, everyone else only their own"""
        return self.repo.get_boards(self.db, None if user.is_admin else user.id)

    def _can_see(self, board: Optional[KanbanBoard], user: User) -> bool:
        return board is not None and (user.is_admin or board.user_id == user.id)

    def get_board(self, board_id: int, user: User) -> KanbanBoard:
        board = self.repo.get_board(self.db, board_id)
        if not self._can_see(board, user):
            raise HTTPException(status_code=404, detail="Board not found")
        return board

    def create_board(self, data: BoardCreate, user: User) -> KanbanBoard:
        board = self.repo.add(self.db, KanbanBoard(user_id=user.id, **data.model_dump()))
        logger.info(f"📋 Board {board.id} created by user {user.id}")
        return board

    def update_board(self, board_id: int, data: BoardUpdate, user: User) -> KanbanBoard:
        board = self.get_board(board_id, user)
        return self.repo.update(self.db, board, **data.model_dump(exclude_unset=True, exclude_none=True))

    def delete_board(self, board_id: int, user: User) -> None:
        """Columns, cards and tasks go with the board"""
        board = self.get_board(board_id, user)
        self.repo.delete(self.db, board)
        logger.info(f"🗑️ Board {board_id} deleted by user {user.id}")

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def get_columns(self, board_id: int, user: User) -> list[KanbanColumn]:
        self.get_board(board_id, user)
        return self.repo.get_columns(self.db, board_id)

    def get_column(self, column_id: int, user: User) -> KanbanColumn:
        """Columns, cards and tasks are only reachable through a board the user can see"""
        column = self.repo.get_column(self.db, column_id)
        if not column or not self._can_see(column.board, user):
            raise HTTPException(status_code=404, detail="Column not found")
        return column

    def create_column(self, data: ColumnCreate, user: User) -> KanbanColumn:
        self.get_board(data.board_id, user)
        siblings = self.repo.get_columns(self.db, data.board_id)
        column = KanbanColumn(name=data.name, color=data.color, board_id=data.board_id)
        insert_at(siblings, column, data.position)
        renumber(siblings)
        return self.repo.add(self.db, column)

    def update_column(self, column_id: int, data: ColumnUpdate, user: User) -> KanbanColumn:
        column = self.get_column(column_id, user)
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        position = updates.pop("position", None)
        if position is not None:
            siblings = [c for c in self.repo.get_columns(self.db, column.board_id) if c.id != column.id]
            insert_at(siblings, column, position)
            renumber(siblings)
        return self.repo.update(self.db, column, **updates)

    def delete_column(self, column_id: int, user: User) -> None:
        column = self.get_column(column_id, user)
        board_id = column.board_id
        self.repo.delete(self.db, column)
        renumber(self.repo.get_columns(self.db, board_id))
        self.db.commit()

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def get_cards(self, column_id: int, user: User) -> list[KanbanCard]:
        self.get_column(column_id, user)
        return self.repo.get_cards(self.db, column_id)

    def get_card(self, card_id: int, user: User) -> KanbanCard:
        card = self.repo.get_card(self.db, card_id)
        if not card or not self._can_see(card.column.board, user):
            raise HTTPException(status_code=404, detail="Card not found")
        return card

    def _check_card_references(self, assigned_to_id: Optional[int], client_id: Optional[int]) -> None:
        if assigned_to_id is not None and not self.db.get(User, assigned_to_id):
            raise HTTPException(status_code=400, detail="Assigned user not found")
        if client_id is not None and not self.db.get(Client, client_id):
            raise HTTPException(status_code=400, detail="Client not found")

    def create_card(self, data: CardCreate, user: User) -> KanbanCard:
        self.get_column(data.column_id, user)
        self._check_card_references(data.assigned_to_id, data.client_id)

        siblings = self.repo.get_cards(self.db, data.column_id)
        card = KanbanCard(**data.model_dump(exclude={"position"}))
        insert_at(siblings, card, data.position)
        renumber(siblings)
        return self.repo.add(self.db, card)

    def update_card(self, card_id: int, data: CardUpdate, user: User) -> KanbanCard:
        card = self.get_card(card_id, user)
        updates = data.model_dump(exclude_unset=True)
        self._check_card_references(updates.get("assigned_to_id"), updates.get("client_id"))
        if "title" in updates and updates["title"] is None:
            del updates["title"]
        return self.repo.update(self.db, card, **updates)

    def move_card(self, card_id: int, data: CardMove, user: User) -> KanbanCard:
        """Last write wins between concurrent movers"""
        card = self.get_card(card_id, user)
        target = self.get_column(data.column_id, user)
        if target.board_id != card.column.board_id:
            raise HTTPException(status_code=400, detail="Cards can only move within their board")

        moved = self.repo.move_card(self.db, card, target, data.position)
        logger.info(f"🔀 Card {card_id} moved to column {target.id} at position {moved.position}")
        return moved

    def delete_card(self, card_id: int, user: User) -> None:
        card = self.get_card(card_id, user)
        column_id = card.column_id
        self.repo.delete(self.db, card)
        renumber(self.repo.get_cards(self.db, column_id))
        self.db.commit()

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def get_tasks(self, card_id: int, user: User) -> list[KanbanTask]:
        self.get_card(card_id, user)
        return self.repo.get_tasks(self.db, card_id)

    def get_task(self, task_id: int, user: User) -> KanbanTask:
        task = self.repo.get_task(self.db, task_id)
        if not task or not self._can_see(task.card.column.board, user):
            raise HTTPException(status_code=404, detail="Task not found")
        return task

    def create_task(self, data: TaskCreate, user: User) -> KanbanTask:
        self.get_card(data.card_id, user)
        self._check_card_references(data.assigned_to_id, None)

        siblings = self.repo.get_tasks(self.db, data.card_id)
        task = KanbanTask(**data.model_dump(exclude={"position"}))
        insert_at(siblings, task, data.position)
        renumber(siblings)
        return self.repo.add(self.db, task)

    def update_task(self, task_id: int, data: TaskUpdate, user: User) -> KanbanTask:
        task = self.get_task(task_id, user)
        updates = data.model_dump(exclude_unset=True)
        self._check_card_references(updates.get("assigned_to_id"), None)
        position = updates.pop("position", None)
        if position is not None:
            siblings = [t for t in self.repo.get_tasks(self.db, task.card_id) if t.id != task.id]
            insert_at(siblings, task, position)
            renumber(siblings)
        for required in ("title", "completed"):
            if required in updates and updates[required] is None:
                del updates[required]
        return self.repo.update(self.db, task, **updates)

    def delete_task(self, task_id: int, user: User) -> None:
        task = self.get_task(task_id, user)
        card_id = task.card_id
        self.repo.delete(self.db, task)
        renumber(self.repo.get_tasks(self.db, card_id))
        self.db.commit()
