from enum import Enum


class MedbayError(Exception):
    """Base class for every error raised inside medbay."""


class ConfigError(MedbayError):
    """A required environment value is missing. The process must not start."""


class FailureReason(str, Enum):
    BACKEND = "backend"
    NOT_FOUND = "not_found"
    NO_ROW_RETURNED = "no_row_returned"


class DataAccessError(MedbayError):
    """
    A read or write against the relational backend failed.

    `reason` tags the failure so callers can tell a backend error from
    a missing row without parsing the message.
    """

    def __init__(self, message: str, reason: FailureReason = FailureReason.BACKEND):
        super().__init__(message)
        self.message = message
        self.reason = reason


class QueryError(DataAccessError):
    pass


class RowNotFoundError(DataAccessError):
    def __init__(self, table: str, row_id: int):
        super().__init__(f"No row {row_id} in {table}", FailureReason.NOT_FOUND)
        self.table = table
        self.row_id = row_id


class InsertError(DataAccessError):
    pass


class UpdateError(DataAccessError):
    pass


class DeleteError(DataAccessError):
    pass


class ClaimError(DataAccessError):
    pass


class UpstreamModelError(MedbayError):
    """The hosted LLM call failed or returned something unusable."""
