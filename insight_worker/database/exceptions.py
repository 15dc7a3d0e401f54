class RecordStoreError(Exception):
    """Base exception for all record store errors."""


class RecordNotFoundError(RecordStoreError):
    """Raised when a record cannot be found in the store."""

    code = "RECORD_MISSING"


class StoreWriteError(RecordStoreError):
    """Raised when persisting a status transition fails."""

    code = "STORE_WRITE_FAILURE"
