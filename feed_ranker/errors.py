"""Errors raised by the store adapters and absorbed by the scorers."""


class StoreUnavailable(Exception):
    """An underlying read failed (network, config, permission or timeout)."""

    def __init__(self, store: str, operation: str, cause: BaseException | None = None):
        self.store = store
        self.operation = operation
        self.cause = cause
        message = f"{store}.{operation} failed"
        if cause is not None:
            message = f"{message}: {cause!r}"
        super().__init__(message)
