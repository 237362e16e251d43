from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str


class ErrorCatalog:
    ROLE_NAME_REQUIRED = ErrorDefinition("ROLE_NAME_REQUIRED", "Role name is required")
    ROLE_ALREADY_EXISTS = ErrorDefinition("ROLE_ALREADY_EXISTS", "Role already exists")
    ROLE_NOT_FOUND = ErrorDefinition("ROLE_NOT_FOUND", "Role not found")
    SYSTEM_ROLE_PROTECTED = ErrorDefinition(
        "SYSTEM_ROLE_PROTECTED",
        "System roles cannot be deleted",
    )
    UNKNOWN_PERMISSION_KEY = ErrorDefinition("UNKNOWN_PERMISSION_KEY", "Unknown permission key")
    MENU_ENTRY_NOT_FOUND = ErrorDefinition("MENU_ENTRY_NOT_FOUND", "Menu entry not found")
    INVALID_MENU_MOVE = ErrorDefinition("INVALID_MENU_MOVE", "Invalid menu move")
    STORAGE_BACKEND_INVALID = ErrorDefinition(
        "STORAGE_BACKEND_INVALID",
        "Unsupported menu storage backend",
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)
