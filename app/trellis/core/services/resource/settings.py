from typing import Any, Dict, Optional

from .base import ResourceService


class SettingsService(ResourceService):
    """
    Service für Settings-Sektionen: ein einzelner Datensatz statt einer Liste.
    get_all() liefert das Settings-Objekt, save() schreibt es zurück.
    """

    def get_item_request_uri(self, item_id=None) -> str:
        return self.resource

    def get_save_request_uri(self) -> str:
        return self.resource

    async def get_all(self, filters: Optional[Dict[str, Any]] = None):
        return await self._call("GET", self.get_item_request_uri())

    async def save(self, data: Dict[str, Any]):
        return await self._call("PATCH", self.get_save_request_uri(), json=data)
