"""
db/errors.py — Error taxonomy
=============================
Raised by the data-access layer and translated to HTTP status codes at the
API boundary (see app/main.py). Each class carries its status code so the
boundary needs a single handler.
"""


class PortfolioError(Exception):
    """Base class for all expected, caller-visible failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortfolioError):
    """Missing or blank required field / query parameter."""

    status_code = 400

    @classmethod
    def missing(cls, fields: list[str]) -> "ValidationError":
        return cls(f"Missing required field(s): {', '.join(fields)}")


class NotFoundError(PortfolioError):
    """Update/delete/get target id matched zero rows."""

    status_code = 404

    @classmethod
    def for_entity(cls, entity: str, entity_id: int) -> "NotFoundError":
        return cls(f"{entity} {entity_id} not found")


class ConflictError(PortfolioError):
    """Store-level constraint rejected the change (skill in use, duplicate name)."""

    status_code = 409


class StoreError(PortfolioError):
    """Store unavailable, schema missing, or an untranslated constraint failure."""

    status_code = 500
