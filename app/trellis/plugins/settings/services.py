from trellis.core.services.resource import SettingsService


class CompanyService(SettingsService):
    resource = "company-settings"
