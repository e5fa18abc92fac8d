"""Custom exception hierarchy for pyelogger."""

from __future__ import annotations


class ELoggerError(Exception):
    """Base exception for all pyelogger errors."""


class ELoggerConfigError(ELoggerError):
    """Invalid or missing configuration."""


class MalformedSentenceError(ELoggerError):
    """A sentence or one of its fields could not be parsed.

    Never fatal: the pipeline skips the sentence and the record keeps
    its prior values.
    """

    def __init__(self, message: str, *, line: str = "") -> None:
        self.line = line
        super().__init__(message)


class UnsupportedSentenceTypeError(ELoggerError):
    """Recognized NMEA sentence that has no registered handler."""


class InvalidAISFrameError(ELoggerError):
    """AIS sentence too short, multi-fragment, or carrying a bad payload."""

    def __init__(self, message: str, *, sentence: str = "") -> None:
        self.sentence = sentence
        super().__init__(message)


class UnsupportedMessageTypeError(InvalidAISFrameError):
    """AIS message type outside the class-A position reports (1, 2, 3)."""

    def __init__(self, message: str, *, message_type: int, sentence: str = "") -> None:
        self.message_type = message_type
        super().__init__(message, sentence=sentence)


class SchedulerBusyError(ELoggerError):
    """A sampling request arrived while the scheduler slot was occupied."""


class SinkError(ELoggerError):
    """Persistence sink failed to store a log entry."""

    def __init__(self, message: str, *, sink: str = "") -> None:
        self.sink = sink
        super().__init__(message)


class ELoggerTransportError(ELoggerError):
    """Connection-level failure; terminates only the affected connection."""

    def __init__(self, message: str, *, peer: str = "") -> None:
        self.peer = peer
        super().__init__(message)
