import pytest
from conftest import auth_headers
from test_kanban_api import add_cards, make_board

from advisor_crm.sdk.api import CrmApiClient
from advisor_crm.sdk.kanban import BoardCache, MoveCardCommand, MoveFailed, move_card
from advisor_crm.security_utils import create_jwt_token


def sdk_for(api, user):
    return CrmApiClient(client=api, token=create_jwt_token({"sub": str(user.id)}))


def titles(cache, column_id):
    return [(card["title"], card["position"]) for card in cache.cards(column_id)]


@pytest.fixture
def board(api, users):
    headers = auth_headers(users["staff"])
    board, columns = make_board(api, headers)
    add_cards(api, headers, columns[0], "A", "B", "C")
    return board, columns


class TestMoveCardCommand:
    def make_cache(self):
        cache = BoardCache(board_id=1)
        cache.columns = {
            10: [{"id": 1, "title": "A", "position": 0, "columnId": 10}, {"id": 2, "title": "B", "position": 1, "columnId": 10}],
            20: [{"id": 3, "title": "X", "position": 0, "columnId": 20}],
        }
        return cache

    def test_apply_and_undo(self):
        cache = self.make_cache()
        command = MoveCardCommand(cache, card_id=1, column_id=20, position=0)
        command.apply()

        assert titles(cache, 10) == [("B", 0)]
        assert titles(cache, 20) == [("A", 0), ("X", 1)]
        assert cache.cards(20)[0]["columnId"] == 20

        command.undo()
        assert titles(cache, 10) == [("A", 0), ("B", 1)]
        assert titles(cache, 20) == [("X", 0)]

    def test_unknown_card_or_column(self):
        cache = self.make_cache()
        with pytest.raises(MoveFailed):
            MoveCardCommand(cache, card_id=99, column_id=20, position=0).apply()
        with pytest.raises(MoveFailed):
            MoveCardCommand(cache, card_id=1, column_id=99, position=0).apply()


class TestBoardCacheAgainstServer:
    def test_confirmed_move_matches_server(self, api, users, board):
        board_info, (todo, doing, _) = board
        sdk = sdk_for(api, users["staff"])
        cache = BoardCache(board_info["id"])
        cache.refresh_if_stale(sdk)
        card_b = cache.cards(todo)[1]["id"]

        moved = move_card(sdk, cache, card_b, doing, 0)

        assert moved["columnId"] == doing
        assert titles(cache, todo) == [("A", 0), ("C", 1)]
        assert titles(cache, doing) == [("B", 0)]
        assert not cache.stale

        server = BoardCache(board_info["id"])
        server.load(sdk)
        assert titles(server, todo) == titles(cache, todo)
        assert titles(server, doing) == titles(cache, doing)

    def test_rejected_move_rolls_back(self, api, users, board):
        board_info, (todo, doing, _) = board
        sdk = sdk_for(api, users["staff"])
        cache = BoardCache(board_info["id"])
        cache.load(sdk)
        card_a = cache.cards(todo)[0]["id"]

        # The column disappears on the server after the cache was loaded
        api.delete(f"/api/kanban/columns/{doing}", headers=auth_headers(users["staff"]))

        with pytest.raises(MoveFailed) as exc:
            move_card(sdk, cache, card_a, doing, 0)

        assert exc.value.card_id == card_a
        assert titles(cache, todo) == [("A", 0), ("B", 1), ("C", 2)]
        assert cache.cards(doing) == []
        assert cache.stale

        cache.refresh_if_stale(sdk)
        assert doing not in cache.columns
