from .contract import REQUIRED_METHODS, validate_resource_service
from .base import ResourceService
from .settings import SettingsService

__all__ = ["REQUIRED_METHODS", "validate_resource_service", "ResourceService", "SettingsService"]
