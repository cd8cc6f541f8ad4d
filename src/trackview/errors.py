from enum import Enum


class TrackviewErrorType(str, Enum):
    FETCH_FAILED = "Error fetching from repository"
    UNRESOLVABLE = "Unable to resolve reference"


class TrackviewError(Exception):
    def __init__(self, error_type: TrackviewErrorType, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(f"{error_type.value}: {message}")


class FetchFailed(TrackviewError):
    """A git collaborator (log, rev-parse, diff) failed."""

    def __init__(self, message: str):
        super().__init__(TrackviewErrorType.FETCH_FAILED, message)


class Unresolvable(TrackviewError):
    """A requested parent or reference does not exist."""

    def __init__(self, message: str):
        super().__init__(TrackviewErrorType.UNRESOLVABLE, message)
