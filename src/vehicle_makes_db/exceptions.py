"""Exception taxonomy for the sync pipeline."""


class VehicleMakesError(Exception):
    """Base exception for all Vehicle Makes DB errors."""

    pass


class NetworkError(VehicleMakesError):
    """Raised when a request to the remote source fails.

    Covers transport failures, timeouts and non-success status codes.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ParseError(VehicleMakesError):
    """Raised when a markup document is malformed or has an unexpected shape."""

    pass


class PersistenceError(VehicleMakesError):
    """Raised when a store operation fails."""

    pass


class ReconciliationError(VehicleMakesError):
    """Raised when a diff computation violates one of its invariants.

    Never expected in normal operation; signals a programming error.
    """

    pass
