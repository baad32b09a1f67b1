from trellis.core.services.resource import ResourceService, SettingsService


class UsersService(ResourceService):
    resource = "users"


class AccountService(SettingsService):
    """
    Daten für die Sektion 'Mein Konto'.
    Ist der User schon im Session-State, sparen wir uns den Request gegen /auth/me.
    """

    resource = "auth/me"
    ACCOUNT_FIELDS = ("id", "email", "full_name", "user_language")

    def __init__(self, state_provider=None, on_saved=None, **kwargs):
        super().__init__(**kwargs)
        self.state_provider = state_provider
        # z.B. Session und Sprache nachziehen, sobald der Server gespeichert hat
        self.on_saved = on_saved

    def _account(self, user: dict) -> dict:
        return {key: user.get(key) for key in self.ACCOUNT_FIELDS}

    async def get_all(self, filters=None):
        user = self.state_provider().user if self.state_provider else {}
        if user:
            return self._account(user)

        data = await self._call("GET", self.get_item_request_uri())
        return self._account(data["user"])

    def get_save_request_uri(self) -> str:
        return "users/edit"

    async def save(self, data):
        result = await self._call("POST", self.get_save_request_uri(), json=data)
        account = self._account(result["res"])
        if self.on_saved:
            self.on_saved(account)
        return account
