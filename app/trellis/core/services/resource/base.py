from typing import Any, Callable, Dict, Optional

import requests
from nicegui import app, run

from trellis.core.config import API_TIMEOUT, API_URL
from trellis.core.logger import get_logger


def session_token() -> Optional[str]:
    """Bearer-Token, das der Login im User-Storage unter 'token' ablegt."""
    return app.storage.user.get("token")


class ResourceService:
    """
    HTTP-Implementierung des Resource-Vertrags gegen das REST-Backend.

    Unterklassen setzen nur `resource` (z.B. 'projects') und überschreiben bei Bedarf
    die URI-Methoden. Die blockierenden requests-Calls laufen über run.io_bound,
    damit der Event-Loop von NiceGUI frei bleibt.
    Fehler (HTTP, Timeout) werden NICHT abgefangen, sie landen beim Aufrufer.
    """

    resource = ""

    def __init__(
        self,
        base_url: str = API_URL,
        session: Optional[requests.Session] = None,
        timeout: float = API_TIMEOUT,
        token_provider: Optional[Callable[[], Optional[str]]] = session_token,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        # Services sind modulweite Singletons, das Token kommt deshalb pro Aufruf aus der Session des Users
        self.token_provider = token_provider
        self.log = get_logger(f"Resource:{self.resource or type(self).__name__}")

    def auth_headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    # --- URIs ---

    def get_item_request_uri(self, item_id) -> str:
        return f"{self.resource}/show?id={item_id}"

    def get_list_request_uri(self) -> str:
        return f"{self.resource}/list"

    def get_create_request_uri(self) -> str:
        return f"{self.resource}/create"

    def get_edit_request_uri(self) -> str:
        return f"{self.resource}/edit"

    def get_remove_request_uri(self) -> str:
        return f"{self.resource}/remove"

    # --- Transport ---

    def _request(self, method: str, uri: str, **kwargs) -> Any:
        url = f"{self.base_url}/{uri.lstrip('/')}"
        self.log.debug(f"{method} {url}")
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    async def _call(self, method: str, uri: str, **kwargs) -> Any:
        # Header noch im Page-Kontext lesen, im io_bound-Thread gibt es keinen User-Storage
        headers = {**self.auth_headers(), **kwargs.pop("headers", {})}
        return await run.io_bound(self._request, method, uri, headers=headers, **kwargs)

    # --- Vertrag ---

    async def get_all(self, filters: Optional[Dict[str, Any]] = None):
        return await self._call("POST", self.get_list_request_uri(), json=filters or {})

    async def get_item(self, item_id, filters: Optional[Dict[str, Any]] = None):
        if filters:
            return await self._call("POST", self.get_item_request_uri(item_id), json=filters)
        return await self._call("GET", self.get_item_request_uri(item_id))

    async def save(self, data: Dict[str, Any]):
        # Ohne id -> anlegen, mit id -> bearbeiten
        uri = self.get_edit_request_uri() if data.get("id") else self.get_create_request_uri()
        return await self._call("POST", uri, json=data)

    async def delete_item(self, item_id):
        return await self._call("POST", self.get_remove_request_uri(), json={"id": item_id})
