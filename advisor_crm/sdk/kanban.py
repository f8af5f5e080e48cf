"""
Optimistic kanban cache

The board's cards are cached per column. A drop is applied to the cache
first and then sent to the server; when the server rejects the move the
command is undone and the cache is marked stale so the next read refetches.
"""

import copy
import logging
from typing import Optional

import httpx

from .api import CrmApiClient

logger = logging.getLogger(__name__)


class MoveFailed(Exception):
    """The server rejected a card move; the cache has been rolled back"""

    def __init__(self, card_id: int, message: str):
        super().__init__(message)
        self.card_id = card_id


class BoardCache:
    """Cards of one board, ordered per column as the server last reported them"""

    def __init__(self, board_id: int):
        self.board_id = board_id
        self.columns: dict[int, list[dict]] = {}
        self.stale = True

    def load(self, api: CrmApiClient) -> None:
        columns = api.columns(self.board_id)
        self.columns = {column["id"]: api.cards(column["id"]) for column in columns}
        self.stale = False

    def refresh_if_stale(self, api: CrmApiClient) -> None:
        if self.stale:
            self.load(api)

    def invalidate(self) -> None:
        self.stale = True

    def cards(self, column_id: int) -> list[dict]:
        return self.columns.get(column_id, [])

    def locate(self, card_id: int) -> Optional[tuple[int, int]]:
        """(column id, index) of a card, or None when it is not cached"""
        for column_id, cards in self.columns.items():
            for index, card in enumerate(cards):
                if card["id"] == card_id:
                    return column_id, index
        return None


class MoveCardCommand:
    """One drag-and-drop, applied optimistically and undoable"""

    def __init__(self, cache: BoardCache, card_id: int, column_id: int, position: int):
        self.cache = cache
        self.card_id = card_id
        self.column_id = column_id
        self.position = position
        self._snapshot: Optional[dict[int, list[dict]]] = None

    def apply(self) -> None:
        location = self.cache.locate(self.card_id)
        if location is None:
            raise MoveFailed(self.card_id, f"Card {self.card_id} is not on this board")
        if self.column_id not in self.cache.columns:
            raise MoveFailed(self.card_id, f"Column {self.column_id} is not on this board")

        source_id, index = location
        self._snapshot = {
            column_id: copy.deepcopy(self.cache.columns[column_id])
            for column_id in {source_id, self.column_id}
        }

        card = self.cache.columns[source_id].pop(index)
        card["columnId"] = self.column_id
        target = self.cache.columns[self.column_id]
        target.insert(max(0, min(self.position, len(target))), card)
        for column_id in {source_id, self.column_id}:
            for position, item in enumerate(self.cache.columns[column_id]):
                item["position"] = position

    def undo(self) -> None:
        if self._snapshot is None:
            return
        self.cache.columns.update(self._snapshot)
        self._snapshot = None


def move_card(api: CrmApiClient, cache: BoardCache, card_id: int, column_id: int, position: int) -> dict:
    """Apply a move to the cache, then confirm it with the server"""
    command = MoveCardCommand(cache, card_id, column_id, position)
    command.apply()
    try:
        return api.move_card(card_id, column_id, position)
    except httpx.HTTPError as e:
        command.undo()
        cache.invalidate()
        logger.warning(f"❌ Move of card {card_id} rejected, cache rolled back: {e}")
        raise MoveFailed(card_id, "Failed to move card") from e
