"""Domain exceptions raised by the service layer.

Routers never build error responses themselves; the handlers registered in
``app.main`` translate these into HTTP responses.
"""


class DomainError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    status_code = 400

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])


class ConflictError(ValidationError):
    status_code = 409


class NotFoundError(DomainError):
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__("{} {} not found".format(entity, entity_id))
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(DomainError):
    status_code = 500


__all__ = [
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
