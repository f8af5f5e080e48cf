"""Kanban repository - Database operations for boards, columns, cards and tasks"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import KanbanBoard, KanbanCard, KanbanColumn, KanbanTask


def renumber(items: list) -> None:
    """Give items positions 0..n-1 in list order"""
    for index, item in enumerate(items):
        if item.position != index:
            item.position = index


def insert_at(items: list, item, position: Optional[int]) -> int:
    """Insert into an ordered list at a clamped index (None appends); returns the index used"""
    index = len(items) if position is None else max(0, min(position, len(items)))
    items.insert(index, item)
    return index


class KanbanRepository:
    """Repository for kanban database operations"""

    # Boards

    @staticmethod
    def get_boards(db: Session, user_id: Optional[int] = None) -> list[KanbanBoard]:
        query = db.query(KanbanBoard)
        if user_id is not None:
            query = query.filter(KanbanBoard.user_id == user_id)
        return query.order_by(KanbanBoard.created_at, KanbanBoard.id).all()

    @staticmethod
    def get_board(db: Session, board_id: int) -> Optional[KanbanBoard]:
        return db.query(KanbanBoard).filter(KanbanBoard.id == board_id).first()

    # Columns

    @staticmethod
    def get_columns(db: Session, board_id: int) -> list[KanbanColumn]:
        return (
            db.query(KanbanColumn)
            .filter(KanbanColumn.board_id == board_id)
            .order_by(KanbanColumn.position, KanbanColumn.id)
            .all()
        )

    @staticmethod
    def get_column(db: Session, column_id: int) -> Optional[KanbanColumn]:
        return db.query(KanbanColumn).filter(KanbanColumn.id == column_id).first()

    # Cards

    @staticmethod
    def get_cards(db: Session, column_id: int) -> list[KanbanCard]:
        return (
            db.query(KanbanCard)
            .filter(KanbanCard.column_id == column_id)
            .order_by(KanbanCard.position, KanbanCard.id)
            .all()
        )

    @staticmethod
    def get_card(db: Session, card_id: int) -> Optional[KanbanCard]:
        return db.query(KanbanCard).filter(KanbanCard.id == card_id).first()

    # Tasks

    @staticmethod
    def get_tasks(db: Session, card_id: int) -> list[KanbanTask]:
        return (
            db.query(KanbanTask)
            .filter(KanbanTask.card_id == card_id)
            .order_by(KanbanTask.position, KanbanTask.id)
            .all()
        )

    @staticmethod
    def get_task(db: Session, task_id: int) -> Optional[KanbanTask]:
        return db.query(KanbanTask).filter(KanbanTask.id == task_id).first()

    # Shared

    @staticmethod
    def add(db: Session, instance):
        db.add(instance)
        db.commit()
        db.refresh(instance)
        return instance

    @staticmethod
    def update(db: Session, instance, **updates):
        for key, value in updates.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        db.commit()
        db.refresh(instance)
        return instance

    @staticmethod
    def delete(db: Session, instance) -> None:
        db.delete(instance)
        db.commit()

    @staticmethod
    def move_card(db: Session, card: KanbanCard, target: KanbanColumn, position: int) -> KanbanCard:
        """
        Move a card to `position` in `target`.

        The card leaves its source ordering, is inserted at the clamped index,
        and both columns are renumbered 0..n-1.
        """
        source_id = card.column_id
        source_cards = [c for c in KanbanRepository.get_cards(db, source_id) if c.id != card.id]
        if target.id == source_id:
            target_cards = source_cards
        else:
            target_cards = [c for c in KanbanRepository.get_cards(db, target.id) if c.id != card.id]

        insert_at(target_cards, card, position)
        card.column = target
        renumber(target_cards)
        if target.id != source_id:
            renumber(source_cards)

        db.commit()
        db.refresh(card)
        return card
