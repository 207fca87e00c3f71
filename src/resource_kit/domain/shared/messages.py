"""Centralized message constants for error messages and log output."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Player Errors
    NOT_LOADED = "No audio file has been loaded."
    NOT_LOADED_REASON = "load() has not been called before attempting playback."
    NOT_LOADED_SUGGESTION = "Call load(...) with a valid audio resource before playing."

    INVALID_RANGE = "The requested playback range is invalid."
    INVALID_RANGE_REASON = "Requested range [{start}-{end}) is outside the file duration ({duration})."
    INVALID_RANGE_SUGGESTION = (
        "Adjust the start and end times to a valid range within the file duration."
    )

    PLAY_FAILED = "Audio playback could not be started."
    PLAY_FAILED_REASON = "The audio output rejected the start request."
    PLAY_FAILED_SUGGESTION = "Verify the output device is available and the file is playable."

    DECODE_FAILED = "The audio file could not be decoded."
    DECODE_FAILED_REASON = "The audio decoder reported an error: {error}"
    DECODE_FAILED_NO_DETAILS = "The audio decoder reported an error without details."
    DECODE_FAILED_SUGGESTION = "Ensure the audio file is not corrupted and is a supported format."

    CONTROL_THREAD_VIOLATION = "'{operation}' must be called from the player's control thread"

    # Resource Errors
    RESOURCE_NOT_FOUND = "The requested resource '{filename}' could not be found."
    RESOURCE_NOT_FOUND_REASON = "Resource '{filename}' does not exist in the resource root."
    RESOURCE_NOT_FOUND_SUGGESTION = "Verify the resource name, file extension, and scope."

    DATA_LOADING_FAILED = "Unable to load resource data from {path}."
    DATA_LOADING_FAILED_REASON = "Could not read data from {path}. Underlying error: {error}"
    DATA_LOADING_FAILED_SUGGESTION = "Ensure the file exists and is accessible."

    JSON_DECODING_FAILED = "Failed to decode JSON data."
    JSON_DECODING_FAILED_REASON = "The JSON data could not be parsed. Underlying error: {error}"
    JSON_DECODING_FAILED_SUGGESTION = "Check that the JSON matches the expected model and types."
    UNSUPPORTED_JSON_VALUE = "Unsupported JSON value of type {type_name} at {path}"
    NON_FINITE_JSON_NUMBER = "Number at {path} is out of range for a finite double"
    NON_FINITE_NUMBER = "JSON numbers must be finite, got {value}"

    SCHEMA_MISMATCH = "JSON value does not match the schema of {target}."
    SCHEMA_MISMATCH_SUGGESTION = "Check that the payload has the required fields and types."

    # Value Validation Errors
    NEGATIVE_SEGMENT_START = "Segment start cannot be negative"
    NON_POSITIVE_SEGMENT_LENGTH = "Segment length must be positive"
    INVALID_LOOP_SPEC = "Invalid loop specification: {value!r} (expected 'once', 'infinite' or a count)"
    INVALID_LOOP_COUNT = "Invalid loop count: {value} (expected -1 for infinite, or 0 and above)"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"


class LogTemplates:
    """Log message templates.

    Pass values as parameters to logger calls rather than formatting eagerly.
    """

    # Loading
    AUDIO_LOADED = "Loaded audio source (%.3fs)"
    AUDIO_DECODE_FAILED = "Failed to decode audio source: %r"
    RESOURCE_RESOLVED = "Resolved resource %s (%d bytes)"
    RESOURCE_MISSING = "Resource %s not found under %s"
    MANIFEST_LOADED = "Loaded %s manifest '%s'"

    # Whole-file playback
    PLAYBACK_STARTED = "Started whole-file playback (loops=%d)"
    PLAYBACK_PAUSED = "Paused playback at %.3fs"
    PLAYBACK_STOPPED = "Stopped playback"
    PLAYBACK_FINISHED = "Whole-file playback finished naturally"
    PLAYBACK_START_REJECTED = "Audio output rejected start request"

    # Segment playback
    SEGMENT_STARTED = "Started segment [%.3f, %.3f) remaining_loops=%d"
    SEGMENT_RANGE_CLAMPED = "Clamped segment [%.3f, %.3f) to [%.3f, %.3f)"
    SEGMENT_RESUMED = "Resumed segment with %.3fs remaining in cycle"
    SEGMENT_PAUSED = "Paused segment with %.3fs remaining in cycle"
    SEGMENT_RESTARTED = "Restarted segment at %.3fs, next fire in %.3fs (remaining_loops=%d)"
    SEGMENT_FINISHED = "Segment playback finished"
    SEGMENT_RESTART_REJECTED = "Audio output rejected segment restart"

    # Timers
    TIMER_ARMED = "Armed segment timer for %.3fs"
    TIMER_CANCELLED = "Cancelled segment timer"

    # Output device
    OUTPUT_STREAM_OPENED = "Opened output stream (%d Hz, %d channels)"
    OUTPUT_STREAM_CLOSED = "Closed output stream"
    OUTPUT_STREAM_STATUS = "Output stream status: %s"
    OUTPUT_STREAM_CLOSE_ERROR = "Error closing output stream: %r"
    OUTPUT_START_FAILED = "Failed to start output stream: %r"

    # CLI
    CLI_PLAYING = "Playing %s"
    CLI_COMMAND_FAILED = "%s: %s"
    CLI_INTERRUPTED = "Interrupted"
