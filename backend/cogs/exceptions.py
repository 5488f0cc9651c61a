"""
Custom exceptions for the COGS system.

Each exception carries a machine-readable `code` and the HTTP `status_code`
that API views answer with (see cogs.views.mixins.COGSExceptionMixin).
"""


class COGSError(Exception):
    """Base exception for COGS-related errors."""
    code = "cogs_error"
    status_code = 400

    def __init__(self, message=None):
        self.message = message or "COGS operation failed"
        super().__init__(self.message)


class ValidationError(COGSError):
    """Raised when numeric or structural input is invalid. Nothing is written."""
    code = "validation_error"
    status_code = 400

    def __init__(self, message, field=None):
        self.field = field
        super().__init__(message)


class CyclicRecipeError(ValidationError):
    """Raised when a sub-recipe line would make a recipe contain itself."""
    code = "cyclic_recipe"

    def __init__(self, recipe_name, sub_recipe_name, message=None):
        self.recipe_name = recipe_name
        self.sub_recipe_name = sub_recipe_name
        if message is None:
            if recipe_name == sub_recipe_name:
                message = f"Recipe '{recipe_name}' cannot use itself as a sub-recipe"
            else:
                message = (
                    f"Recipe '{sub_recipe_name}' already contains '{recipe_name}', "
                    f"so it cannot be used as a sub-recipe of it"
                )
        super().__init__(message, field="sub_recipes")


class NotFoundError(COGSError):
    """Raised when a referenced entity does not exist for the tenant."""
    code = "not_found"
    status_code = 404

    def __init__(self, entity_type, entity_id, message=None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        if message is None:
            message = f"{entity_type.replace('_', ' ').capitalize()} not found: {entity_id}"
        super().__init__(message)


class ConflictError(COGSError):
    """Raised on a duplicate key or when a referenced row blocks a delete."""
    code = "conflict"
    status_code = 409


class PersistenceError(COGSError):
    """Raised when a storage operation fails or an immutable row is modified."""
    code = "persistence_error"
    status_code = 500
