"""Error hierarchy for the timetable editor.

Two families live here:

- Transport errors classify HTTP failures inside the API client so that
  tenacity can retry transient ones (should retry) and stop on permanent
  ones (should not retry).
- Save errors are what ``TimetableEditor.save_changes()`` raises. The caller
  is expected to show the message and leave the draft as it is.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def fetch_time_slots():
        ...
"""


class TimetableError(Exception):
    """Base exception for all timetable editor errors."""

    pass


class TransportError(TimetableError):
    """Base exception for HTTP-level failures talking to the storage API."""

    pass


class TransientError(TransportError):
    """Temporary failure that may succeed on retry.

    Examples: connection reset, read timeout, 502/503/504 responses.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429).

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(TransportError):
    """Failure that won't succeed on retry.

    Examples: 400 validation error, 404 unknown item, 401 bad token.
    """

    pass


class StorageError(TimetableError):
    """A storage read (time slots, timetable items) reported failure."""

    pass


class SaveError(TimetableError):
    """Base exception for failures raised out of a save."""

    pass


class MissingContextError(SaveError):
    """A new block has no class/teacher context and cannot be created."""

    def __init__(self, block_id: str, message: str | None = None) -> None:
        self.block_id = block_id
        super().__init__(
            message or f"New block {block_id!r} is missing class/teacher information"
        )


class TimeSlotResolutionError(SaveError):
    """The storage service failed to create a missing time slot."""

    pass


class ItemOperationError(SaveError):
    """A create, update or delete of a timetable item reported failure.

    Operations issued before the failing one are not rolled back.
    """

    def __init__(self, operation: str, block_id: str, message: str) -> None:
        self.operation = operation
        self.block_id = block_id
        super().__init__(message)
