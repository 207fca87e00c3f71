"""Exception hierarchy for player and resource errors."""

from __future__ import annotations

from pathlib import Path

from resource_kit.domain.shared.messages import ErrorMessages


class DomainError(Exception):
    """Base exception for all resource_kit errors."""

    failure_reason: str = ""
    recovery_suggestion: str = ""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


# === Player errors ===


class PlayerError(DomainError):
    """Base exception for audio player failures."""


class NotLoadedError(PlayerError):
    """Raised when an operation requires a loaded source and none is present."""

    recovery_suggestion = ErrorMessages.NOT_LOADED_SUGGESTION

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.NOT_LOADED, code="NOT_LOADED")
        self.failure_reason = ErrorMessages.NOT_LOADED_REASON


class InvalidRangeError(PlayerError):
    """Raised when a requested segment collapses to an empty range after clamping."""

    recovery_suggestion = ErrorMessages.INVALID_RANGE_SUGGESTION

    def __init__(self, start: float, end: float, duration: float) -> None:
        super().__init__(ErrorMessages.INVALID_RANGE, code="INVALID_RANGE")
        self.start = start
        self.end = end
        self.duration = duration
        self.failure_reason = ErrorMessages.INVALID_RANGE_REASON.format(
            start=start, end=end, duration=duration
        )

    def __str__(self) -> str:
        return f"{self.message} {self.failure_reason}"


class PlayFailedError(PlayerError):
    """Raised when the audio output rejects a start request."""

    recovery_suggestion = ErrorMessages.PLAY_FAILED_SUGGESTION

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.PLAY_FAILED, code="PLAY_FAILED")
        self.failure_reason = ErrorMessages.PLAY_FAILED_REASON


class DecodeFailedError(PlayerError):
    """Raised when source bytes are not a supported audio encoding."""

    recovery_suggestion = ErrorMessages.DECODE_FAILED_SUGGESTION

    def __init__(self, underlying: BaseException | None = None) -> None:
        super().__init__(ErrorMessages.DECODE_FAILED, code="DECODE_FAILED")
        self.underlying = underlying
        if underlying is not None:
            self.failure_reason = ErrorMessages.DECODE_FAILED_REASON.format(error=underlying)
        else:
            self.failure_reason = ErrorMessages.DECODE_FAILED_NO_DETAILS


class ControlThreadError(PlayerError):
    """Raised when a player operation runs outside the control thread."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            ErrorMessages.CONTROL_THREAD_VIOLATION.format(operation=operation),
            code="CONTROL_THREAD",
        )
        self.operation = operation


# === Resource errors ===


class ResourceError(DomainError):
    """Base exception for resource lookup and decoding failures."""


class ResourceNotFoundError(ResourceError):
    """Raised when a named resource does not exist."""

    recovery_suggestion = ErrorMessages.RESOURCE_NOT_FOUND_SUGGESTION

    def __init__(self, name: str, ext: str | None = None) -> None:
        filename = f"{name}.{ext}" if ext else name
        super().__init__(
            ErrorMessages.RESOURCE_NOT_FOUND.format(filename=filename),
            code="RESOURCE_NOT_FOUND",
        )
        self.name = name
        self.ext = ext
        self.failure_reason = ErrorMessages.RESOURCE_NOT_FOUND_REASON.format(filename=filename)


class DataLoadingFailedError(ResourceError):
    """Raised when a located resource cannot be read."""

    recovery_suggestion = ErrorMessages.DATA_LOADING_FAILED_SUGGESTION

    def __init__(self, path: str | Path, underlying: BaseException) -> None:
        super().__init__(
            ErrorMessages.DATA_LOADING_FAILED.format(path=path),
            code="DATA_LOADING_FAILED",
        )
        self.path = Path(path)
        self.underlying = underlying
        self.failure_reason = ErrorMessages.DATA_LOADING_FAILED_REASON.format(
            path=path, error=underlying
        )


class JSONDecodingFailedError(ResourceError):
    """Raised when a JSON document cannot be parsed or does not match its model."""

    recovery_suggestion = ErrorMessages.JSON_DECODING_FAILED_SUGGESTION

    def __init__(
        self,
        underlying: BaseException | None = None,
        path: str | None = None,
        message: str | None = None,
    ) -> None:
        super().__init__(message or ErrorMessages.JSON_DECODING_FAILED, code="JSON_DECODING_FAILED")
        self.underlying = underlying
        self.path = path
        self.failure_reason = ErrorMessages.JSON_DECODING_FAILED_REASON.format(
            error=underlying if underlying is not None else message
        )


class SchemaMismatchError(ResourceError):
    """Raised when a JSON value does not match the requested target schema."""

    recovery_suggestion = ErrorMessages.SCHEMA_MISMATCH_SUGGESTION

    def __init__(self, target: str, underlying: BaseException | None = None) -> None:
        super().__init__(
            ErrorMessages.SCHEMA_MISMATCH.format(target=target),
            code="SCHEMA_MISMATCH",
        )
        self.target = target
        self.underlying = underlying
        self.failure_reason = str(underlying) if underlying is not None else ""
