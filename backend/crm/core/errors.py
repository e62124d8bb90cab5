"""Domain errors raised by the relationship manager.

Stores never raise for a missing key; they return ``None`` and the manager
decides whether absence is an error.
"""


class CRMError(Exception):
    """Base class for recoverable, caller-reportable errors."""

    kind = "Error"


class NotFoundError(CRMError):
    kind = "NotFound"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id={entity_id} not found")


class InvalidPayloadError(CRMError):
    kind = "InvalidPayload"

    def __init__(self, detail: str = "Invalid payload"):
        self.detail = detail
        super().__init__(detail)


class PartialWriteError(CRMError):
    """A multi-store write stopped after some stores were already updated.

    Only raised on storage that cannot roll back; the completed writes stay
    in place.
    """

    kind = "PartialWrite"

    def __init__(self, operation: str, completed: list[str], failed: str):
        self.operation = operation
        self.completed = completed
        self.failed = failed
        super().__init__(
            f"{operation}: wrote {', '.join(completed)} but failed writing {failed}"
        )
