"""Exception hierarchy shared by the desktop, the client and the store."""


class NovaShellError(Exception):
    """Base exception for NovaOS shell errors."""
    pass


class AuthFailure(NovaShellError):
    """Raised for bad credentials or a username that is already taken."""
    pass


class StoreUnavailable(NovaShellError):
    """Raised when the record store cannot be reached or answers garbage."""
    pass


class RecordNotFound(NovaShellError):
    """Raised when the store reports that a record id does not exist."""

    def __init__(self, record_id: int):
        super().__init__(f"record {record_id} not found")
        self.record_id = record_id
