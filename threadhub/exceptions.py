"""
threadhub.exceptions - Pipeline-level errors

Every error the thread pipeline surfaces to callers derives from
ThreadhubError. Per-thread fetch failures are not part of this hierarchy:
they are absorbed by the message loader and the thread is dropped.

Example:
    >>> from threadhub.exceptions import UnauthenticatedError
    >>>
    >>> try:
    ...     page = await service.get_threads(query)
    ... except UnauthenticatedError as e:
    ...     logger.warning(f"Account needs to reconnect: {e}")
"""


class ThreadhubError(Exception):
    """Base exception for all errors surfaced by the thread pipeline."""

    status_code: int = 500


class InvalidQueryError(ThreadhubError):
    """
    Raised when a thread query cannot be translated.

    Rejected before any provider call is made, e.g. when the
    page size is not positive or exceeds the provider maximum.
    """

    status_code = 400


class UnauthenticatedError(ThreadhubError):
    """Raised when no usable access token is available for the account."""

    status_code = 401


class ProviderUnavailableError(ThreadhubError):
    """
    Raised on upstream transport, rate-limit or server errors.

    Not retried internally.
    """

    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class PipelineTimeoutError(ThreadhubError):
    """Raised when the overall request deadline is exceeded."""

    status_code = 504
