from typing import Any, Dict, Optional

from trellis.core.config import DEFAULT_LOCALE

# Wildcard: Recht gilt in jedem Projekt
ANY_SCOPE = "*"


class UserState:
    """
    Read-only Snapshot des Auth-Stores, so wie ihn renderCondition-Prädikate sehen.

    permissions: { "tasks/edit": [1, 2] } oder { "projects/create": "*" }
    Admins dürfen alles.
    """

    def __init__(
        self,
        user: Optional[Dict[str, Any]] = None,
        permissions: Optional[Dict[str, Any]] = None,
        company_data: Optional[Dict[str, Any]] = None,
        locale: str = DEFAULT_LOCALE,
    ):
        self._user = dict(user or {})
        self._permissions = {key: self._normalize(scopes) for key, scopes in (permissions or {}).items()}
        self._company_data = dict(company_data or {})
        self.locale = locale

    @staticmethod
    def _normalize(scopes):
        if scopes == ANY_SCOPE or scopes is True:
            return ANY_SCOPE
        if isinstance(scopes, (str, int)):
            return frozenset([scopes])
        return frozenset(scopes or ())

    @property
    def user(self) -> Dict[str, Any]:
        return dict(self._user)

    @property
    def company_data(self) -> Dict[str, Any]:
        return dict(self._company_data)

    @property
    def is_admin(self) -> bool:
        return bool(self._user.get("is_admin"))

    def can(self, permission: str, scope_id=None) -> bool:
        if self.is_admin:
            return True
        scopes = self._permissions.get(permission)
        if scopes is None:
            return False
        if scopes == ANY_SCOPE or scope_id is None:
            return True
        return scope_id in scopes

    def can_in_any_project(self, permission: str) -> bool:
        if self.is_admin:
            return True
        scopes = self._permissions.get(permission)
        return scopes == ANY_SCOPE or bool(scopes)


# Anonymer Zustand, bevor sich jemand angemeldet hat
ANONYMOUS = UserState()
