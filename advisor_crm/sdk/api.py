"""
Typed wrapper over the CRM REST API

Every call returns decoded JSON (camelCase keys, as served) and raises
httpx.HTTPStatusError for non-2xx responses.
"""

import logging
from datetime import date
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


class CrmApiClient:
    """Synchronous CRM client; pass `client` to reuse an httpx.Client (or a FastAPI TestClient)"""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self._owns_client = client is None
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def request(self, method: str, path: str, **kwargs) -> Any:
        response = self.client.request(method, f"{API_PREFIX}{path}", headers=self._headers(), **kwargs)
        if response.is_error:
            logger.warning(f"❌ {method} {path} failed: {response.status_code} {response.text[:200]}")
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Auth

    def login(self, username: str, password: str) -> dict:
        """Sign in and keep the bearer token for later calls"""
        data = self.request("POST", "/login", json={"username": username, "password": password})
        self.token = data["accessToken"]
        return data["user"]

    def register(self, username: str, password: str, email: str, **profile) -> dict:
        payload = {"username": username, "password": password, "email": email, **profile}
        data = self.request("POST", "/register", json=payload)
        self.token = data["accessToken"]
        return data["user"]

    def current_user(self) -> dict:
        return self.request("GET", "/user")

    def team_members(self) -> list[dict]:
        return self.request("GET", "/team-members")

    # Clients

    def clients(self) -> list[dict]:
        return self.request("GET", "/clients")

    def create_client(self, **fields) -> dict:
        return self.request("POST", "/clients", json=fields)

    # Appointments

    def appointments(self) -> list[dict]:
        return self.request("GET", "/appointments")

    def create_appointment(self, **fields) -> dict:
        return self.request("POST", "/appointments", json=fields)

    def book_appointment(self, **fields) -> dict:
        return self.request("POST", "/appointments/book", json=fields)

    def booked_slots(self, person_id: Optional[int] = None, start: Optional[date] = None) -> list[dict]:
        """One person's appointments from `start` on (defaults: yourself, today)"""
        params = {}
        if person_id is not None:
            params["personId"] = person_id
        if start is not None:
            params["start"] = start.isoformat()
        return self.request("GET", "/appointments/booked", params=params)

    def availability(self, day: date, person_id: Optional[int] = None) -> dict:
        params = {"date": day.isoformat()}
        if person_id is not None:
            params["personId"] = person_id
        return self.request("GET", "/appointments/availability", params=params)

    # Kanban

    def boards(self) -> list[dict]:
        return self.request("GET", "/kanban/boards")

    def columns(self, board_id: int) -> list[dict]:
        return self.request("GET", f"/kanban/boards/{board_id}/columns")

    def cards(self, column_id: int) -> list[dict]:
        return self.request("GET", f"/kanban/columns/{column_id}/cards")

    def move_card(self, card_id: int, column_id: int, position: int) -> dict:
        return self.request(
            "PUT", f"/kanban/cards/{card_id}/move", json={"columnId": column_id, "position": position}
        )

    # Notifications

    def notifications(self) -> dict:
        return self.request("GET", "/notifications")

    def mark_all_notifications_read(self) -> dict:
        return self.request("POST", "/notifications/read-all")

    # Quotations

    def quotations(self, client_id: int) -> list[dict]:
        return self.request("GET", f"/cdn-quotations/{client_id}")

    def create_quotation(self, **fields) -> dict:
        return self.request("POST", "/cdn-quotations", json=fields)
