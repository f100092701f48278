from cvoptima.ingestion.models import IngestionErrorKind


class IngestionError(Exception):
    """Raised by a pipeline step; carries the failure kind and a user-facing message."""

    def __init__(self, kind: IngestionErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class RedirectSignal(Exception):
    """Raised by the hosting framework to redirect the caller.

    Never converted into an ingestion failure; it always propagates.
    """

    def __init__(self, location: str) -> None:
        super().__init__(f"Redirect to {location}")
        self.location = location
