"""Exceptions raised by the archive readers."""


class ArchiveError(Exception):
    """Base error for failures reading the Messages or Contacts stores."""
    pass


class StoreUnavailableError(ArchiveError):
    """A store file is missing, unreadable, or could not be opened."""

    def __init__(self, path, reason: str = ""):
        self.path = path
        message = f"Database not accessible at {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class QueryError(ArchiveError):
    """A query against an open store failed."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Error {operation}: {cause}")


class ContactsUnavailableError(ArchiveError):
    """Every configured contact store failed during a scan."""
    pass
