from trellis.core.errors import InvalidResourceServiceError

# Minimaler Vertrag, den Crud/Grid-Builder brauchen. Alles andere (bulk_edit, ...) wird ignoriert.
REQUIRED_METHODS = ("get_all", "get_item", "save", "delete_item")


def validate_resource_service(service, module_name: str, builder: str) -> None:
    missing = [name for name in REQUIRED_METHODS if not callable(getattr(service, name, None))]
    if missing:
        raise InvalidResourceServiceError(module_name, builder, missing)
